"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from saberstore.api.middleware import RequestIDMiddleware, MetricsMiddleware
from saberstore.api.v1 import admin, credit, installments, kyc, orders
from saberstore.infrastructure.observability.logging import setup_logging
from saberstore.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="SaberStore API",
        description="Orders and installment financing for the SaberStore storefront",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(orders.router, prefix="/v1", tags=["orders"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(credit.router, prefix="/v1", tags=["credit"])
    app.include_router(kyc.router, prefix="/v1", tags=["kyc"])
    app.include_router(admin.router, prefix="/v1", tags=["admin"])

    return app


app = create_app()
