"""
Service layer for business logic.
Services contain pure business logic without HTTP framework dependencies.
"""

from planner.services.task_service import TaskService
from planner.services.auth_service import AuthService
from planner.services.identity_service import IdentityResolver
from planner.services.token_service import TokenService, TokenPayload
from planner.services.google_verifier import GoogleIdentityVerifier

__all__ = ["TaskService", "AuthService", "IdentityResolver", "TokenService", "TokenPayload", "GoogleIdentityVerifier"]
