"""
Pydantic models for users, identity-provider profiles and auth requests.
"""
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ExternalProfile(BaseModel):
    """Verified profile returned by the external identity provider."""
    external_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    name: str = ""
    picture: Optional[str] = None
    verified: bool = False


class GoogleAuthRequest(BaseModel):
    id_token: str = Field(..., description="Google ID token from the client sign-in flow")

    @field_validator('id_token')
    @classmethod
    def validate_id_token(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Google ID token is required")
        return v.strip()


class UserResponse(BaseModel):
    """Public view of a user; external_id is not exposed."""
    id: str
    email: str
    name: str
    picture: Optional[str] = None
    verified: bool
    created_at: str
