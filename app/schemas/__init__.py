"""
Pydantic schemas for API request/response validation.
"""

from app.schemas.base import (
    BaseSchema,
    IDSchema,
    MessageResponse,
)

from app.schemas.auth import (
    LoginRequest,
    Token,
    UserStatusResponse,
)

from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserCreatedResponse,
    UserUpdatedResponse,
)

from app.schemas.automation import (
    TaskCreate,
    TaskResponse,
    TaskDetailResponse,
    SettingsUpdate,
    SettingsResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "IDSchema",
    "MessageResponse",
    # Auth
    "LoginRequest",
    "Token",
    "UserStatusResponse",
    # Users
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserCreatedResponse",
    "UserUpdatedResponse",
    # Automation
    "TaskCreate",
    "TaskResponse",
    "TaskDetailResponse",
    "SettingsUpdate",
    "SettingsResponse",
]
