"""
Auth service - Google sign-in and bearer token gates.
This layer contains no HTTP framework dependencies.
"""
import sqlite3
import logging
from typing import Any, Dict, Optional

from google.auth.exceptions import GoogleAuthError

from planner.database import PlannerDatabase
from planner.exceptions import (
    InvalidTokenError,
    ServiceError,
    UnauthorizedError,
)
from planner.services.google_verifier import GoogleIdentityVerifier
from planner.services.identity_service import IdentityResolver
from planner.services.token_service import TokenPayload, TokenService
from planner.storage.repositories import UserRepository

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        UnauthorizedError: If the header is missing or not 'Bearer <token>'
    """
    if not authorization:
        raise UnauthorizedError("Authentication required")
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Authorization header must use the Bearer scheme")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Authentication required")
    return token


class AuthService:
    """Service for authentication business logic."""

    def __init__(
        self,
        db: PlannerDatabase,
        tokens: TokenService,
        google: GoogleIdentityVerifier,
    ):
        self.db = db
        self.tokens = tokens
        self.google = google
        self.users = UserRepository(db)
        self.identities = IdentityResolver(db)

    def issue_token(self, user: Dict[str, Any]) -> str:
        return self.tokens.issue(user)

    def verify_token(self, token: str) -> TokenPayload:
        return self.tokens.verify(token)

    def authenticate(self, authorization: Optional[str]) -> Dict[str, Any]:
        """
        Resolve the user behind an Authorization header.

        Raises:
            UnauthorizedError: Missing or malformed header, invalid or expired
                token, or a token whose user no longer exists
        """
        token = extract_bearer_token(authorization)
        try:
            payload = self.tokens.verify(token)
        except InvalidTokenError as e:
            logger.info("Rejected request with invalid bearer token")
            raise UnauthorizedError("Invalid or expired token", original_error=e) from e

        user = self.users.get_by_id(payload.subject_id)
        if not user:
            logger.info(f"Token subject {payload.subject_id} no longer exists")
            raise UnauthorizedError("User not found")
        return user

    def optional_authenticate(self, authorization: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Like authenticate(), but any failure yields None.

        A store error while loading the token subject also degrades to an
        anonymous caller. It is logged with its traceback.
        """
        if not authorization:
            return None
        try:
            return self.authenticate(authorization)
        except ServiceError:
            return None
        except sqlite3.Error as e:
            logger.warning(f"User lookup failed during optional auth, treating caller as anonymous: {e}", exc_info=True)
            return None

    def authenticate_google(self, google_id_token: str) -> Dict[str, Any]:
        """
        Sign in with a Google ID token.

        Returns:
            {"user": user dict, "token": bearer token}

        Raises:
            ConfigurationError: If Google sign-in is not configured
            UnauthorizedError: If Google rejects the token
            ConflictError: If the email belongs to a different linked identity
        """
        try:
            profile = self.google.verify(google_id_token)
        except (ValueError, GoogleAuthError) as e:
            logger.warning(f"Google token verification failed: {e}")
            raise UnauthorizedError("Google authentication failed", original_error=e) from e

        user = self.identities.resolve_or_create(profile)
        token = self.tokens.issue(user)
        logger.info(f"User {user['id']} signed in with Google")
        return {"user": user, "token": token}
