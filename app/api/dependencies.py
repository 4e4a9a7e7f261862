"""
Shared FastAPI dependencies: container access, database session and admin auth.
"""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings, get_settings
from app.core.container import DependencyContainer, get_container
from app.database.async_db import get_async_db

logger = logging.getLogger(__name__)

ADMIN_ACTOR = "admin"

DbSession = Annotated[AsyncSession, Depends(get_async_db)]


def get_di_container() -> DependencyContainer:
    """Get Dependency Injection Container singleton."""
    return get_container()


async def require_admin(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> str:
    """
    Verify the admin bearer token.

    Every /admin route depends on this. With no ADMIN_API_TOKEN configured
    admin routes are closed.

    Returns:
        Actor name recorded on settings changes
    """
    expected = settings.ADMIN_API_TOKEN
    if not expected:
        logger.error("ADMIN_API_TOKEN not configured, rejecting admin request")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access is not configured")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not hmac.compare_digest(token.strip().encode(), expected.encode()):
        logger.warning("Admin token verification failed")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin token")

    return ADMIN_ACTOR


AdminActor = Annotated[str, Depends(require_admin)]


__all__ = ["ADMIN_ACTOR", "AdminActor", "DbSession", "get_di_container", "require_admin"]
