"""
Base model classes and mixins for Account Editor.
"""
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )


class IntegerPrimaryKeyMixin:
    """Mixin for an auto-incrementing integer primary key."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


class BaseModel(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    """
    Abstract base model with integer primary key and timestamps.

    All domain models should inherit from this class.
    """
    __abstract__ = True
