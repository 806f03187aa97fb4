"""
Application factory - creates and configures the FastAPI application.
This isolates all initialization logic from main.py.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from planner.api.routes.auth import router as auth_router
from planner.api.routes.health import router as health_router
from planner.api.routes.tasks import router as tasks_router
from planner.config import Settings
from planner.dependencies.services import ServiceContainer
from planner.exceptions.handlers import setup_exception_handlers
from planner.middleware.logging_setup import setup_logging
from planner.middleware.setup import setup_middleware
from planner.tracing import instrument_fastapi, setup_tracing, shutdown_tracing


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    logger = logging.getLogger(__name__)
    logger.info(f"Application starting up (database: {app.state.services.settings.db_path})")

    yield

    logger.info("Application shutting down...")
    if app.state.services.settings.tracing_enabled:
        shutdown_tracing()
    logger.info("Shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit settings; read from the environment when omitted

    Returns:
        Configured FastAPI app instance ready to run

    Raises:
        ConfigurationError: If JWT_SECRET is missing
    """
    settings = settings or Settings.from_env()

    # Setup logging first (must be done before creating logger)
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(
        title="Planner API",
        description="Personal task planner with Google sign-in",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = ServiceContainer(settings)

    setup_middleware(app, settings.cors_origins)
    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(tasks_router)

    if settings.tracing_enabled:
        setup_tracing()
        instrument_fastapi(app)
        logger.info("Distributed tracing enabled")

    return app
