"""
FastAPI Application Factory

Creates the reporting API around a loaded sales snapshot.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import structlog

from sales_analytics.config import get_settings
from sales_analytics.config.logging import configure_logging
from sales_analytics.exceptions import SnapshotLoadError
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.ingestion.snapshot_loader import SnapshotLoader
from sales_analytics.serving.api.middleware import RequestLoggingMiddleware
from sales_analytics.serving.api.routes import (
    analysis_router,
    health_router,
    reports_router,
)

logger = structlog.get_logger(__name__)


def create_app(snapshot: Optional[SalesSnapshot] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        snapshot: Pre-loaded snapshot. When omitted, the snapshot is read
            from the configured gold zone at startup.

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        logger.info("Starting Sales Analytics API", environment=settings.app_env)

        if app.state.snapshot is None:
            loader = SnapshotLoader()
            try:
                app.state.snapshot = await loader.load()
            except SnapshotLoadError as e:
                # API stays up in a degraded state; readiness reports it
                logger.error("Snapshot unavailable", error=str(e))
            app.state.load_result = loader.last_result

        yield

        logger.info("Shutting down...")

    app = FastAPI(
        title="Sales Analytics API",
        description="Product and customer reports over a sales star schema",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.snapshot = snapshot
    app.state.load_result = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(analysis_router, prefix="/api/v1/analysis", tags=["Analysis"])

    return app
