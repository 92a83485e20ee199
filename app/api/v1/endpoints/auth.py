"""Authentication endpoints."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.dependencies import CurrentUser
from app.core.security import create_access_token, verify_password
from app.db.database import get_async_session
from app.models.user import User
from app.schemas.auth import LoginRequest, Token, UserStatusResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


@router.post("/token", response_model=Token)
async def login(
    credentials: LoginRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> Token:
    """Login endpoint - validates credentials and returns JWT token.

    Request (JSON):
        - username: User's username
        - password: User's password

    Response:
        - access_token: JWT token
        - token_type: "bearer"
        - username: the authenticated username

    Raises:
        401 Unauthorized: If credentials are invalid or the account is inactive
    """
    result = await session.execute(select(User).where(User.username == credentials.username))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Login attempt failed for user '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        logger.warning(f"Login attempt failed: User '{credentials.username}' account is inactive")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is inactive. Please contact administrator.",
        )

    user.last_login_at = datetime.now(timezone.utc)

    settings = get_settings()
    access_token = create_access_token(
        data={"sub": user.username},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )

    logger.info(f"User '{user.username}' logged in successfully")
    return Token(access_token=access_token, token_type="bearer", username=user.username)


@router.get("/status", response_model=UserStatusResponse)
async def get_user_status(current_user: CurrentUser) -> UserStatusResponse:
    """Return the active/admin flags of the authenticated user."""
    return UserStatusResponse(
        is_active=current_user.is_active,
        is_admin=current_user.is_admin,
        created_at=current_user.created_at,
    )
