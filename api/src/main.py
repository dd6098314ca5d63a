"""
OpsDesk Reports API - FastAPI Application

Main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.config import get_settings
from src.core.document_store import create_document_store
from src.routers import (
    connections_router,
    health_router,
    identity_router,
    reports_router,
)
from src.services.report_sessions import ReportSessionManager
from src.services.translation import TranslationClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Suppress noisy third-party loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("google").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting OpsDesk Reports API...")
    settings = get_settings()

    if settings.debug:
        logging.getLogger("src").setLevel(logging.DEBUG)

    logger.info(f"Connecting to {settings.document_store} document store...")
    store = create_document_store(settings)
    app.state.document_store = store
    app.state.session_manager = ReportSessionManager(
        store,
        autosave_delay=settings.autosave_delay_seconds,
    )
    app.state.translation_client = TranslationClient(settings)

    logger.info(f"OpsDesk Reports API started in {settings.environment} mode")

    yield

    # Shutdown
    logger.info("Shutting down OpsDesk Reports API...")

    # Pending autosave timers are cancelled; in-flight writes finish first
    await app.state.session_manager.close_all()
    logger.info("OpsDesk Reports API shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="OpsDesk Reports API",
        description="Agent report and viewer-agent connection API for the back-office dashboard",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Register routers
    app.include_router(health_router)
    app.include_router(identity_router)
    app.include_router(reports_router)
    app.include_router(connections_router)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "name": "OpsDesk Reports API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
