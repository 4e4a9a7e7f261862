"""
Database package - async SQLAlchemy engine and session management
"""

from app.database.async_db import (
    AsyncSessionLocal,
    async_engine,
    check_async_db_connection,
    get_async_db,
    get_async_db_context,
)

__all__ = [
    "AsyncSessionLocal",
    "async_engine",
    "check_async_db_connection",
    "get_async_db",
    "get_async_db_context",
]
