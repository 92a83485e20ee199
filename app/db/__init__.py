"""
Database module for Account Editor.
"""
from app.db.database import (
    Base,
    engine,
    engine_options,
    async_session_maker,
    get_async_session,
    init_db,
)

__all__ = [
    "Base",
    "engine",
    "engine_options",
    "async_session_maker",
    "get_async_session",
    "init_db",
]
