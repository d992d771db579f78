"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from cashflow_insights.api.middleware import MetricsMiddleware, RequestIDMiddleware
from cashflow_insights.api.v1 import report
from cashflow_insights.config import settings
from cashflow_insights.infrastructure.observability.logging import setup_logging

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cashflow Insights",
        description="Transaction analytics and financial report service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(report.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
