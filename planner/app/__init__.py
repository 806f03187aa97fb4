"""
Application package - FastAPI app factory.
"""
from planner.app.factory import create_app

__all__ = ["create_app"]
