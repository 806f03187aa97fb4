"""
Bearer token issuance and verification (HS256 JWT).
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any, Dict

from jose import JWTError, jwt

from planner.exceptions import ConfigurationError, InvalidTokenError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_EXPIRES_DAYS = 7


@dataclass(frozen=True)
class TokenPayload:
    """Verified claims carried by a bearer token."""
    subject_id: str
    email: str


class TokenService:
    """Signs and verifies user bearer tokens."""

    def __init__(self, secret: str, expires_days: int = DEFAULT_EXPIRES_DAYS, algorithm: str = ALGORITHM):
        if not secret:
            raise ConfigurationError("JWT secret is not configured")
        self._secret = secret
        self.expires_days = expires_days
        self.algorithm = algorithm

    def issue(self, user: Dict[str, Any]) -> str:
        """Sign a token for user with sub, email, iat and exp claims."""
        now = datetime.now(UTC)
        claims = {
            "sub": user["id"],
            "email": user["email"],
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(days=self.expires_days)).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """
        Check signature, algorithm and expiry.

        Raises:
            InvalidTokenError: For any malformed, tampered, expired or
                subject-less token. The message does not say which.
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"Token rejected: {type(e).__name__}")
            raise InvalidTokenError("Invalid or expired token") from e

        subject = claims.get("sub")
        if not subject:
            raise InvalidTokenError("Invalid or expired token")
        return TokenPayload(subject_id=str(subject), email=claims.get("email") or "")
