"""Startup data: the default administrator account."""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash
from app.models.user import User

logger = logging.getLogger(__name__)


async def ensure_default_admin(
    session: AsyncSession,
    username: str,
    password: str,
) -> Optional[User]:
    """
    Create an active admin when the users table is empty.

    Returns:
        The created user, or None when users already exist
    """
    user_count = await session.scalar(select(func.count()).select_from(User))
    if user_count:
        return None

    admin = User(
        username=username,
        hashed_password=get_password_hash(password),
        is_active=True,
        is_admin=True,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)

    logger.warning(
        f"Created default admin '{username}'. Change its password before production use."
    )
    return admin
