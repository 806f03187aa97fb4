"""
Service container for dependency injection.
Centralizes service initialization and provides access to all services.
"""
import logging

from fastapi import Request

from planner.config import Settings
from planner.database import PlannerDatabase
from planner.services.auth_service import AuthService
from planner.services.google_verifier import GoogleIdentityVerifier
from planner.services.task_service import TaskService
from planner.services.token_service import TokenService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for all application services."""

    def __init__(self, settings: Settings):
        self.settings = settings

        # One store handle for the process; connections are per operation
        self.db = PlannerDatabase(settings.db_path)

        if not settings.google_client_id:
            logger.warning("GOOGLE_CLIENT_ID is not set; Google sign-in will be unavailable")

        self.token_service = TokenService(settings.jwt_secret, expires_days=settings.jwt_expires_days)
        self.google_verifier = GoogleIdentityVerifier(settings.google_client_id)
        self.auth_service = AuthService(self.db, self.token_service, self.google_verifier)
        self.task_service = TaskService(self.db)


def get_services(request: Request) -> ServiceContainer:
    """
    Get the service container stored on the application.

    Raises:
        RuntimeError: If called before create_app() initialized the services
    """
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services have not been initialized")
    return services


def get_task_service(request: Request) -> TaskService:
    return get_services(request).task_service


def get_auth_service(request: Request) -> AuthService:
    return get_services(request).auth_service
