"""Root conftest.py -- shared fixtures for all test modules."""
import os
from datetime import datetime, timedelta, timezone
from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set env vars BEFORE any app imports to prevent real DB/Redis connections
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt-signing-only")
os.environ.setdefault("TASK_EXECUTOR", "celery")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from app.core.config import get_settings, Settings
from app.core.security import create_access_token, get_password_hash


# =========================================================================
# Settings
# =========================================================================
@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Clear LRU cache before each test to prevent stale settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    return get_settings()


# =========================================================================
# Auth Fixtures
# =========================================================================
@pytest.fixture
def valid_token() -> str:
    return create_access_token(data={"sub": "testuser"})


@pytest.fixture
def expired_token() -> str:
    return create_access_token(
        data={"sub": "testuser"},
        expires_delta=timedelta(seconds=-1),
    )


@pytest.fixture(scope="session")
def user_password_hash() -> str:
    return get_password_hash("secret123")


# =========================================================================
# Mock DB Session
# =========================================================================
@pytest.fixture
def mock_session() -> AsyncMock:
    """Mock async database session (no real DB needed).

    refresh() fills in the columns the database would generate, so ORM
    objects created by endpoints can be serialized.
    """
    ids = count(1)

    async def _refresh(obj, *args, **kwargs):
        now = datetime.now(timezone.utc)
        if getattr(obj, "id", None) is None:
            obj.id = next(ids)
        if getattr(obj, "created_at", None) is None:
            obj.created_at = now
        if getattr(obj, "updated_at", None) is None:
            obj.updated_at = now

    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock(return_value=None)
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock(side_effect=_refresh)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    return session


# =========================================================================
# Mock Users
# =========================================================================
def _make_user(user_id: int, username: str, password_hash: str, is_admin: bool):
    user = MagicMock()
    user.id = user_id
    user.username = username
    user.hashed_password = password_hash
    user.is_active = True
    user.is_admin = is_admin
    user.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user.updated_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user.last_login_at = None
    return user


@pytest.fixture
def mock_user(user_password_hash):
    return _make_user(1, "testuser", user_password_hash, is_admin=False)


@pytest.fixture
def mock_admin(user_password_hash):
    return _make_user(99, "admin", user_password_hash, is_admin=True)


# =========================================================================
# FastAPI Test Client
# =========================================================================
@pytest.fixture
def app():
    from app.main import app as fastapi_app
    return fastapi_app


async def _client_for(app, mock_session, user=None):
    from httpx import AsyncClient, ASGITransport
    from app.db.database import get_async_session
    from app.core.dependencies import get_current_user

    async def override_session():
        yield mock_session

    async def override_user():
        return user

    app.dependency_overrides[get_async_session] = override_session
    if user is not None:
        app.dependency_overrides[get_current_user] = override_user

    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client(app, mock_session, mock_user):
    """Authenticated httpx.AsyncClient (regular user) with mocked DB session."""
    async with await _client_for(app, mock_session, mock_user) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client(app, mock_session, mock_admin):
    """Authenticated httpx.AsyncClient (admin user) with mocked DB session."""
    async with await _client_for(app, mock_session, mock_admin) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def unauthenticated_client(app, mock_session):
    """Client without auth override -- for testing auth-required endpoints."""
    async with await _client_for(app, mock_session) as c:
        yield c
    app.dependency_overrides.clear()


# =========================================================================
# Real Database (sync, in-memory)
# =========================================================================
@pytest.fixture
def db_session():
    """Sync session on a fresh in-memory SQLite database with all tables."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from app.db.database import Base
    import app.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    session = factory()
    session.info["factory"] = factory
    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def make_user_row(db_session, user_password_hash):
    """Insert a User (and optionally panel settings) into db_session."""
    from app.models import User, UserSettings

    def _make(
        username: str = "alice",
        is_admin: bool = False,
        website_url: str = "https://panel.example.com",
        api_key: str = "test",
        auth_user: str = "test",
        with_settings: bool = True,
    ):
        user = User(
            username=username,
            hashed_password=user_password_hash,
            is_active=True,
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.flush()
        if with_settings:
            db_session.add(
                UserSettings(
                    user_id=user.id,
                    website_url=website_url,
                    api_key=api_key,
                    auth_user=auth_user,
                )
            )
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_task_row(db_session):
    """Insert a pending AutomationTask into db_session."""
    from app.models import AutomationTask, TaskStatus

    def _make(user_id: int, name: str = "find_account", status: str = TaskStatus.PENDING.value):
        task = AutomationTask(
            user_id=user_id,
            name=name,
            target_website="https://panel.example.com",
            status=status,
        )
        db_session.add(task)
        db_session.commit()
        return task

    return _make
