"""
Automation task model for Account Editor.

Each row tracks one panel operation from submission to its outcome.
"""
from datetime import datetime
from typing import Optional, Any

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel
from app.models.enums import TaskStatus


class AutomationTask(BaseModel):
    """
    A panel operation requested by a user.

    Lifecycle:
    1. PENDING: row created by the API, detached run dispatched
    2. COMPLETED: panel call succeeded, result holds {"success": true, "data": ...}
    3. FAILED: panel call or execution failed, result holds {"success": false, "error": ...}

    Attributes:
        name: Operation (create_account, find_account, extend_package)
        target_website: Panel URL the user saw when submitting
        status: Current task status
        result: JSON envelope, meaningful once status is terminal
        completed_at: Set when the task reaches a terminal status
    """
    __tablename__ = "automation_tasks"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    target_website: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TaskStatus.PENDING.value,
        index=True,
    )

    result: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # =========================================================================
    # Helper Properties
    # =========================================================================

    @property
    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<AutomationTask(id={self.id}, name={self.name}, "
            f"status={self.status})>"
        )
