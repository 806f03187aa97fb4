"""
Authentication dependencies for FastAPI.
"""
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from planner.dependencies.services import get_auth_service
from planner.services.auth_service import AuthService


def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Resolve the user from the Authorization: Bearer header.

    Raises:
        UnauthorizedError: Rendered as 401 by the exception handlers
    """
    user = auth_service.authenticate(request.headers.get("Authorization"))
    request.state.user_id = user["id"]
    return user


def get_optional_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[Dict[str, Any]]:
    """Same as get_current_user, but anonymous requests get None."""
    user = auth_service.optional_authenticate(request.headers.get("Authorization"))
    if user:
        request.state.user_id = user["id"]
    return user
