"""
User administration endpoints (admin only).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import CurrentAdmin
from app.core.security import get_password_hash
from app.db.database import get_async_session
from app.models import AutomationTask, User, UserSettings
from app.schemas.base import MessageResponse
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserCreatedResponse,
    UserUpdatedResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_user_or_404(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/users", response_model=UserCreatedResponse, status_code=201)
async def create_user(
    data: UserCreate,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_async_session),
):
    """Create a new user account."""
    existing = await session.execute(
        select(User).where(User.username == data.username)
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Username already registered")

    user = User(
        username=data.username,
        hashed_password=get_password_hash(data.password),
        is_active=True,
        is_admin=data.is_admin,
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)

    logger.info(f"Admin '{admin.username}' created user '{user.username}'")
    return UserCreatedResponse(id=user.id, username=user.username, is_admin=user.is_admin)


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_async_session),
):
    """List all users without password hashes."""
    result = await session.execute(select(User).order_by(User.id))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.put("/users/{user_id}", response_model=UserUpdatedResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_async_session),
):
    """
    Update a user's password and flags.

    Only fields present in the request change.
    """
    user = await _get_user_or_404(session, user_id)

    update_data = data.model_dump(exclude_unset=True)

    password = update_data.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)

    for field, value in update_data.items():
        if value is not None:
            setattr(user, field, value)

    await session.flush()

    logger.info(f"Admin '{admin.username}' updated user '{user.username}'")
    return UserUpdatedResponse(
        id=user.id,
        username=user.username,
        is_admin=user.is_admin,
        is_active=user.is_active,
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_async_session),
):
    """Delete a user together with their settings and task history."""
    user = await _get_user_or_404(session, user_id)

    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    await session.execute(delete(AutomationTask).where(AutomationTask.user_id == user.id))
    await session.execute(delete(UserSettings).where(UserSettings.user_id == user.id))
    await session.delete(user)
    await session.flush()

    logger.info(f"Admin '{admin.username}' deleted user '{user.username}'")
    return MessageResponse(message="User deleted successfully")
