"""
SQLAlchemy ORM Models for Account Editor.

This module exports all domain models and enums.
"""

# Enums
from app.models.enums import (
    TaskName,
    TaskStatus,
    PanelPackage,
)

# Base
from app.models.base import BaseModel, TimestampMixin, IntegerPrimaryKeyMixin

# Domain Models
from app.models.user import User
from app.models.settings import UserSettings
from app.models.automation import AutomationTask

__all__ = [
    # Enums
    "TaskName",
    "TaskStatus",
    "PanelPackage",
    # Base
    "BaseModel",
    "TimestampMixin",
    "IntegerPrimaryKeyMixin",
    # Domain Models
    "User",
    "UserSettings",
    "AutomationTask",
]
