"""
Middleware setup and configuration.
"""
from typing import List

from fastapi.middleware.cors import CORSMiddleware

from planner.monitoring import MetricsMiddleware


def setup_middleware(app, cors_origins: List[str]):
    """Set up all middleware for the FastAPI application."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps everything and sees the final status code
    app.add_middleware(MetricsMiddleware)
