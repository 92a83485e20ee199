"""
Automation task and panel settings schemas.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from app.models.enums import TaskName, TaskStatus
from app.schemas.base import BaseSchema, IDSchema

EMPTY_RESULT = {"success": False, "data": {}}
INVALID_RESULT = {"success": False, "error": "Invalid result data format"}


class TaskCreate(BaseSchema):
    """
    Request schema for submitting an automation task.

    The API returns the pending task immediately; the panel call runs
    detached and the client polls GET /automation/tasks/{id}.
    """
    name: TaskName = Field(
        ...,
        description="create_account, find_account or extend_package",
    )

    # Left optional here so a missing panel URL gets a readable 400
    target_website: str = Field(
        default="",
        description="Panel URL configured in the user's settings",
    )

    username: Optional[str] = Field(
        None,
        max_length=255,
        description="Line username (required for extend_package)",
    )

    password: Optional[str] = Field(
        None,
        max_length=255,
        description="Line password for create_account",
    )

    package: int = Field(
        default=0,
        ge=0,
        description="Panel package code, e.g. 101 for one month",
    )

    @model_validator(mode="after")
    def check_operation_fields(self) -> "TaskCreate":
        name = TaskName(self.name)
        if name.requires_package and self.package <= 0:
            raise ValueError(f"package is required for {name.value}")
        if name is TaskName.EXTEND_PACKAGE and not (self.username or "").strip():
            raise ValueError("username is required for extend_package")
        return self

    def execution_payload(self) -> dict[str, Any]:
        """Arguments the detached run needs beyond the stored row."""
        return {
            "username": self.username or "",
            "password": self.password or "",
            "package": self.package,
        }


class TaskResponse(IDSchema):
    """Automation task as stored."""
    user_id: int
    name: str
    target_website: str
    status: str = TaskStatus.PENDING.value
    result: Optional[Any] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class TaskDetailResponse(TaskResponse):
    """
    Single-task response used for polling.

    The result is always an object so clients can read result.success
    without null checks.
    """
    result: dict[str, Any] = Field(default_factory=lambda: dict(EMPTY_RESULT))

    @field_validator("result", mode="before")
    @classmethod
    def normalize_result(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return dict(EMPTY_RESULT)
        if not isinstance(value, dict):
            return dict(INVALID_RESULT)
        return value


class SettingsUpdate(BaseSchema):
    """Panel credentials submitted by the user."""
    website_url: str = Field(..., max_length=500)
    api_key: str = Field(..., max_length=255)
    auth_user: str = Field(..., max_length=255)

    @field_validator("website_url", "api_key", "auth_user")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("website_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class SettingsResponse(BaseSchema):
    """Panel credentials; empty strings when the user has none yet."""
    website_url: str = ""
    api_key: str = ""
    auth_user: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
