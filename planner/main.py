"""
Planner API - REST service for personal task management.

Main entry point. All initialization logic is in app/factory.py.
"""
import logging

import uvicorn

from planner.app import create_app
from planner.config import Settings

# Logging is configured in app/factory.py
logger = logging.getLogger(__name__)


def run():
    """Start the service with uvicorn."""
    settings = Settings.from_env()
    app = create_app(settings)

    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
        # Graceful shutdown settings
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30,
    )
    server = uvicorn.Server(config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        logger.info("Service stopped")


if __name__ == "__main__":
    run()
