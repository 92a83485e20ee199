"""
User administration schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema, IDSchema


class UserCreate(BaseSchema):
    """Schema for an admin creating a user."""
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    is_admin: bool = False


class UserUpdate(BaseSchema):
    """
    Schema for an admin updating a user.

    Omitted fields are left unchanged; an empty password keeps the old one.
    """
    password: Optional[str] = None
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None


class UserResponse(IDSchema):
    """User as shown to admins (no password hash)."""
    username: str
    is_admin: bool
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserCreatedResponse(IDSchema):
    """Response after creating a user."""
    username: str
    is_admin: bool
    message: str = "User created successfully"


class UserUpdatedResponse(IDSchema):
    """Response after updating a user."""
    username: str
    is_admin: bool
    is_active: bool
    message: str = "User updated successfully"
