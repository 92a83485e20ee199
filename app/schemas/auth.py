"""Authentication request/response schemas."""
from datetime import datetime

from pydantic import Field

from .base import BaseSchema


class LoginRequest(BaseSchema):
    """User login credentials (JSON body)."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class Token(BaseSchema):
    """JWT token response."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type (always 'bearer')")
    username: str = Field(..., description="Authenticated username")


class UserStatusResponse(BaseSchema):
    """Account flags for the authenticated user."""

    is_active: bool
    is_admin: bool
    created_at: datetime
