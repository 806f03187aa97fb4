"""
Google ID token verification via google-auth.
"""
import logging
from typing import Optional

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from planner.exceptions import ConfigurationError
from planner.models.user_models import ExternalProfile

logger = logging.getLogger(__name__)


class GoogleIdentityVerifier:
    """Verifies Google ID tokens issued for this application's client id."""

    def __init__(self, client_id: Optional[str]):
        self.client_id = client_id

    def verify(self, token: str) -> ExternalProfile:
        """
        Verify token against Google's keys and return the asserted profile.

        Raises:
            ConfigurationError: If GOOGLE_CLIENT_ID is not configured
            ValueError: If Google rejects the token or it has no subject/email
        """
        if not self.client_id:
            raise ConfigurationError("GOOGLE_CLIENT_ID environment variable is not set")

        claims = id_token.verify_oauth2_token(token, google_requests.Request(), self.client_id)

        subject = claims.get("sub")
        email = claims.get("email")
        if not subject or not email:
            raise ValueError("Google token is missing subject or email")

        return ExternalProfile(
            external_id=subject,
            email=email,
            name=claims.get("name") or "",
            picture=claims.get("picture"),
            verified=bool(claims.get("email_verified", False)),
        )
