"""
Authentication API routes.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from planner.auth.dependencies import get_current_user, get_optional_user
from planner.dependencies.services import get_auth_service
from planner.models.pagination_models import envelope
from planner.models.user_models import GoogleAuthRequest, UserResponse
from planner.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return UserResponse(**user).model_dump()


@router.post("/google")
def google_sign_in(
    body: GoogleAuthRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange a Google ID token for a bearer token."""
    result = auth_service.authenticate_google(body.id_token)
    return envelope(
        {"user": public_user(result["user"]), "token": result["token"]},
        message="Authentication successful",
    )


@router.get("/me")
def current_user(user: Dict[str, Any] = Depends(get_current_user)):
    return envelope(public_user(user))


@router.post("/refresh")
def refresh_token(
    user: Dict[str, Any] = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Issue a fresh token for the current user."""
    return envelope({"token": auth_service.issue_token(user)}, message="Token refreshed")


@router.post("/logout")
def logout(user: Optional[Dict[str, Any]] = Depends(get_optional_user)):
    """Tokens are stateless; the client discards its copy."""
    if user:
        logger.info(f"User {user['id']} logged out")
    return envelope(message="Logged out successfully")


@router.get("/verify")
def verify(user: Dict[str, Any] = Depends(get_current_user)):
    return envelope({"valid": True, "user": public_user(user)})
