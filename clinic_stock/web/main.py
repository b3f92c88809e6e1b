"""FastAPI application for the clinic stock backend."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from clinic_stock.core.config import get_settings
from clinic_stock.core.logging import get_logger, get_request_id, set_request_id, setup_logging
from clinic_stock.core.metrics import app_info, app_uptime_seconds, errors_total
from clinic_stock.db.session import init_db
from clinic_stock.web.middleware import PrometheusMiddleware
from clinic_stock.web.routers import analytics, export, reference, stock, users

log = get_logger("clinic_stock.web")

settings = get_settings()

# Application start time for uptime calculation
APP_START_TIME = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(level=settings.log_level, file_path=settings.log_file_path)
    init_db()
    log.info(
        "app_started",
        extra={"version": settings.app_version, "environment": settings.environment},
    )
    yield


app = FastAPI(
    title=f"{settings.app_name} API",
    version=settings.app_version,
    description="Clinic dispensary stock management with predictive reorder analytics",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app_info.labels(version=settings.app_version, environment=settings.environment).set(1)


# Global exception handler for unhandled errors (500)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with proper logging and response."""
    request_id = get_request_id() or set_request_id()
    errors_total.labels(error_type=type(exc).__name__, component="web").inc()

    log.error(
        "unhandled_exception",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_server_error",
            "request_id": request_id,
            "hint": "Contact support with this request_id",
        },
    )


# Include routers
app.include_router(reference.router, prefix="/api/v1", tags=["Reference"])
app.include_router(stock.router, prefix="/api/v1", tags=["Stock"])
app.include_router(users.router, prefix="/api/v1", tags=["Users"])
app.include_router(analytics.router, prefix="/api/v1", tags=["Analytics"])
app.include_router(export.router, prefix="/api/v1/export", tags=["Export"])


@app.get("/health")
def health():
    """Basic health check for monitoring."""
    return {"status": "healthy", "version": settings.app_version}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    app_uptime_seconds.set(time.time() - APP_START_TIME)
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
