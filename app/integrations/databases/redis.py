"""
Redis Integration

Provides the async Redis client and connection management.
"""

import logging

import redis.asyncio as aioredis

from app.config.settings import get_settings

logger = logging.getLogger(__name__)

_redis_client: aioredis.Redis | None = None


def get_async_redis_client() -> aioredis.Redis:
    """
    Get async Redis client instance (singleton).

    The connection is opened lazily on the first command.

    Returns:
        Async Redis client instance
    """
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    _redis_client = aioredis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
        decode_responses=True,
    )
    logger.info(f"Async Redis client created: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    return _redis_client


async def check_redis_connection() -> bool:
    """Ping Redis, used by the health check."""
    try:
        return bool(await get_async_redis_client().ping())
    except Exception as e:
        logger.error(f"Redis connection check failed: {e}")
        return False


async def close_redis_client() -> None:
    """Close the shared client on shutdown."""
    global _redis_client

    if _redis_client is None:
        return
    await _redis_client.aclose()
    _redis_client = None
    logger.info("Async Redis client closed")
