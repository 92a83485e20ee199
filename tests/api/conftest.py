"""API test fixtures -- helpers for configuring mock session returns."""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest


def make_mock_result(scalar_value=None, scalars_list=None):
    """Create a mock SQLAlchemy Result object."""
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=scalar_value)

    scalars_mock = MagicMock()
    scalars_mock.all = MagicMock(return_value=scalars_list or [])
    scalars_mock.unique = MagicMock(return_value=scalars_mock)
    result.scalars = MagicMock(return_value=scalars_mock)
    result.first = MagicMock(return_value=None)
    result.rowcount = len(scalars_list) if scalars_list else (1 if scalar_value else 0)

    return result


def make_mock_user(user_id=2, username="bob", is_admin=False, is_active=True):
    """Create a mock User ORM object."""
    user = MagicMock()
    user.id = user_id
    user.username = username
    user.hashed_password = "$2b$12$notarealhashnotarealhashnotarealhashnotarealhashnot"
    user.is_admin = is_admin
    user.is_active = is_active
    user.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user.updated_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user.last_login_at = None
    return user


def make_mock_task(task_id=1, user_id=1, name="find_account", status="pending", result=None):
    """Create a mock AutomationTask ORM object."""
    task = MagicMock()
    task.id = task_id
    task.user_id = user_id
    task.name = name
    task.target_website = "https://panel.example.com"
    task.status = status
    task.result = result
    task.created_at = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    task.updated_at = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    task.completed_at = None if status == "pending" else datetime(2026, 1, 1, 12, 1, tzinfo=timezone.utc)
    return task


def make_mock_settings(user_id=1, website_url="https://panel.example.com", api_key="test", auth_user="test"):
    """Create a mock UserSettings ORM object."""
    user_settings = MagicMock()
    user_settings.id = 1
    user_settings.user_id = user_id
    user_settings.website_url = website_url
    user_settings.api_key = api_key
    user_settings.auth_user = auth_user
    user_settings.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user_settings.updated_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return user_settings


@pytest.fixture
def auth_headers(valid_token):
    return {"Authorization": f"Bearer {valid_token}"}
