"""
Database integrations module.

This module provides the Redis connection used for payment idempotency.
"""

from .redis import check_redis_connection, close_redis_client, get_async_redis_client

__all__ = ["get_async_redis_client", "check_redis_connection", "close_redis_client"]
