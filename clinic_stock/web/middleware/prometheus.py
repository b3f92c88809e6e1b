"""Prometheus metrics middleware for FastAPI."""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from clinic_stock.core.logging import set_request_id
from clinic_stock.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics."""
        method = request.method
        endpoint = self._normalize_path(request.url.path)

        request_id = set_request_id(request.headers.get("X-Request-Id"))

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()

        start_time = time.time()
        try:
            response = await call_next(request)
            status = response.status_code
        except Exception:
            http_requests_total.labels(method=method, endpoint=endpoint, status="500").inc()
            raise
        finally:
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()
            duration = time.time() - start_time
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                duration
            )

        http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        response.headers["X-Request-Id"] = request_id

        return response

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing numeric IDs with placeholders.

        Examples:
            /api/v1/stock/42/adjust -> /api/v1/stock/{id}/adjust
            /api/v1/analytics/dispensary/1 -> /api/v1/analytics/dispensary/{id}
        """
        return "/".join("{id}" if part.isdigit() else part for part in path.split("/"))
