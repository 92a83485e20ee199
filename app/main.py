"""
FastAPI application entry point for Account Editor.

Account administration API that proxies line operations to an external
panel as asynchronous, pollable tasks.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.middleware import install_middleware
from app.db.database import async_session_maker, init_db
from app.api.v1 import api_router
from app.services.bootstrap import ensure_default_admin

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Note: For PostgreSQL deployments, use Alembic migrations and disable this
    if settings.auto_create_tables:
        await init_db()

    async with async_session_maker() as session:
        await ensure_default_admin(
            session,
            settings.default_admin_username,
            settings.default_admin_password,
        )

    logger.info(f"{settings.app_name} {settings.app_version} started "
                f"(task executor: {settings.task_executor})")
    yield
    # Shutdown
    logger.info(f"{settings.app_name} shutting down")


def create_application() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Account Editor

        Manage reseller accounts on an external panel:

        - **Authentication**: JWT bearer tokens, bcrypt password storage
        - **User administration**: admins create, update and remove users
        - **Panel settings**: each user stores their own panel URL and credentials
        - **Automation tasks**: create_account, find_account and extend_package
          run asynchronously; poll the task until it is completed or failed

        ### Simulation Mode

        When a user's API key and auth user are both `test`, panel calls
        return mock data and no request leaves the server.
        """,
        version=settings.app_version,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        lifespan=lifespan,
    )

    install_middleware(
        app,
        rate_limit_enabled=settings.rate_limit_enabled,
        rate=settings.rate_limit_per_second,
        burst=settings.rate_limit_burst,
    )

    # CORS middleware (outermost, so 429 responses carry CORS headers)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


# Create application instance
app = create_application()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": f"{settings.api_prefix}/docs",
        "openapi": f"{settings.api_prefix}/openapi.json",
    }
