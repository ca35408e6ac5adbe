"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from billboard_billing.api.middleware import RequestIDMiddleware, MetricsMiddleware
from billboard_billing.api.v1 import installments, plan
from billboard_billing.infrastructure.database.session import init_db
from billboard_billing.infrastructure.observability.logging import setup_logging
from billboard_billing.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Billboard Billing",
        description="Contract installment distribution service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if settings.create_schema:
        init_db()

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
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(plan.router, prefix="/v1", tags=["plans"])

    return app


app = create_app()
