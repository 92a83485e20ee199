"""Seed script to create the default admin user.

The API does this on startup as well; run it when startup table
creation is disabled (e.g. after `alembic upgrade head`):
    python seed_admin_user.py
"""
import asyncio

from app.core.config import get_settings
from app.db.database import async_session_maker
from app.services.bootstrap import ensure_default_admin


async def seed_admin_user():
    """Create default admin user if no users exist."""
    settings = get_settings()
    username = settings.default_admin_username
    password = settings.default_admin_password

    async with async_session_maker() as session:
        admin_user = await ensure_default_admin(session, username, password)

    if admin_user is None:
        print("[X] Users already exist. Skipping.")
        return

    print(f"[OK] Admin user created successfully!")
    print(f"     Username: {username}")
    print(f"     Password: {password}")
    print(f"     User ID: {admin_user.id}")
    print(f"\n[!] IMPORTANT: Change the default password in production!")


if __name__ == "__main__":
    asyncio.run(seed_admin_user())
