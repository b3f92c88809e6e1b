"""FastAPI middleware."""

from __future__ import annotations

from clinic_stock.web.middleware.prometheus import PrometheusMiddleware

__all__ = ["PrometheusMiddleware"]
