"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env file.
"""
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "Account Editor API"
    app_version: str = "1.0.0"
    debug: bool = False
    api_prefix: str = ""
    log_level: str = "INFO"

    # =========================================================================
    # Security & Authentication
    # =========================================================================
    secret_key: str = Field(
        default="CHANGE_THIS_IN_PRODUCTION_PLEASE_USE_OPENSSL_RAND_HEX_32",
        description="Secret key for JWT signing (use openssl rand -hex 32)",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Created on startup when the users table is empty
    default_admin_username: str = "admin"
    default_admin_password: str = "admin"

    # =========================================================================
    # Database
    # =========================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./account_editor.db",
        description="Database connection URL (async driver)",
    )

    # Sync URL for Celery workers and Alembic
    database_url_sync: str = Field(
        default="sqlite:///./account_editor.db",
        description="Database connection URL (sync driver)",
    )

    db_pool_size: int = 10
    db_max_overflow: int = 20
    auto_create_tables: bool = True

    # =========================================================================
    # Task Execution
    # =========================================================================
    task_executor: Literal["celery", "background"] = Field(
        default="celery",
        description="Where detached task runs execute: a Celery worker or "
                    "the API process threadpool",
    )

    celery_broker_url: str = Field(
        default="redis://localhost:6379/0",
        description="Celery message broker URL",
    )

    celery_result_backend: str = Field(
        default="redis://localhost:6379/1",
        description="Celery result backend URL",
    )

    # =========================================================================
    # Panel API
    # =========================================================================
    panel_request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for a single panel HTTP call",
    )

    # A user whose api_key and auth_user both equal these is served mock data
    simulation_api_key: str = "test"
    simulation_auth_user: str = "test"

    # =========================================================================
    # Task Polling
    # =========================================================================
    task_poll_interval_seconds: float = 2.0
    task_poll_timeout_seconds: float = 300.0

    # =========================================================================
    # HTTP
    # =========================================================================
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    rate_limit_enabled: bool = True
    rate_limit_per_second: float = Field(
        default=10.0,
        description="Sustained requests per second allowed per client IP",
    )
    rate_limit_burst: int = Field(
        default=20,
        description="Maximum burst of requests per client IP",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
