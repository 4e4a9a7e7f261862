"""
Application lifecycle management using the FastAPI lifespan pattern.

Handles only startup/shutdown: configuration checks, domain event
subscribers, connectivity checks, and closing shared clients.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config.settings import get_settings
from app.core.container import get_container
from app.core.domain import DomainEventPublisher
from app.database.async_db import check_async_db_connection
from app.domains.ecommerce.domain.events import OrderPlaced, OrderStatusChanged
from app.integrations.databases import check_redis_connection, close_redis_client

logger = logging.getLogger(__name__)
settings = get_settings()


async def log_order_placed(event: OrderPlaced) -> None:
    logger.info(
        f"Order placed: {event.order_number} ({event.status}) total {event.total_amount} {event.currency}"
    )


async def log_status_change(event: OrderStatusChanged) -> None:
    source = f" via payment attempt {event.payment_attempt_id}" if event.payment_attempt_id else ""
    logger.info(
        f"Order {event.order_number}: {event.from_status} -> {event.to_status} by {event.actor}{source}"
    )


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self) -> None:
        self._initialized = False

    async def startup(self) -> None:
        """
        Execute startup tasks.

        Called when the application starts.
        """
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")

        self._verify_configurations()
        self._register_event_handlers()
        await self._verify_external_services()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        """
        Execute shutdown tasks.

        Called when the application stops.
        """
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")

        await get_container().close()
        await close_redis_client()
        DomainEventPublisher.clear_handlers()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        """Verify critical application configurations."""
        if not settings.PAYMENT_GATEWAY_API_KEY:
            logger.warning("PAYMENT_GATEWAY_API_KEY not configured - online payments will fail")

        if not settings.ADMIN_API_TOKEN:
            logger.warning("ADMIN_API_TOKEN not configured - admin endpoints are closed")

    def _register_event_handlers(self) -> None:
        DomainEventPublisher.subscribe(OrderPlaced, log_order_placed)
        DomainEventPublisher.subscribe(OrderStatusChanged, log_status_change)

    async def _verify_external_services(self) -> None:
        """Check database and Redis; failures are logged, not fatal."""
        if await check_async_db_connection():
            logger.info("Database connectivity verified")
        else:
            logger.warning("Database not reachable at startup")

        if await check_redis_connection():
            logger.info("Redis connectivity verified")
        else:
            logger.warning("Redis not reachable - duplicate payment callbacks rely on database locks only")


# Global lifecycle manager instance
_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()

    await lifecycle.startup()

    yield

    await lifecycle.shutdown()
