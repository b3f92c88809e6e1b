"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# HTTP Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method", "endpoint"],
)

# Business metrics
analytics_computed_total = Counter(
    "analytics_computed_total",
    "Total stock analytics computations",
    ["scope"],  # scope: item, dispensary
)

analytics_items_needing_reorder = Gauge(
    "analytics_items_needing_reorder",
    "Items at or below reorder point in the last dispensary computation",
    ["dispensary_id"],
)

stock_movements_total = Counter(
    "stock_movements_total",
    "Total stock movements recorded",
    ["transaction_type"],  # issued, received, lost, adjustment
)

notifications_sent_total = Counter(
    "notifications_sent_total",
    "Total notifications delivered",
    ["channel", "kind"],  # channel: email, sms; kind: low_stock, expiry, owner
)

exports_total = Counter(
    "exports_total",
    "Total report exports",
    ["report", "fmt"],
)

# System metrics
app_uptime_seconds = Gauge(
    "app_uptime_seconds",
    "Application uptime in seconds",
)

app_info = Gauge(
    "app_info",
    "Application info",
    ["version", "environment"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors by type",
    ["error_type", "component"],
)
