# ============================================================================
# SCOPE: GLOBAL
# Description: Main dependency injection container (singleton).
#              Composes the domain sub-containers.
# ============================================================================
"""
Dependency Injection Container.

Centralized container for creating and managing all application dependencies.
Implements Dependency Inversion Principle by wiring concrete implementations to interfaces.

This module is the facade that composes all domain-specific containers.
"""

from __future__ import annotations

import logging

from app.clients.myfatoorah_client import MyFatoorahClient
from app.services.payments import PaymentIdempotencyService

from .base import BaseContainer
from .ecommerce import EcommerceContainer

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container (Facade).

    Single Responsibility: Compose and delegate to domain-specific containers.
    Singleton Pattern: Ensures a single gateway client and Redis lock service.
    """

    def __init__(self, config: dict | None = None):
        """
        Initialize container with all domain sub-containers.

        Args:
            config: Optional configuration dict (overrides settings)
        """
        self._base = BaseContainer(config)
        self._ecommerce = EcommerceContainer(self._base)

        logger.info("DependencyContainer initialized with all domain containers")

    @property
    def settings(self):
        return self._base.settings

    @property
    def config(self):
        return self._base.config

    @property
    def ecommerce(self) -> EcommerceContainer:
        """E-commerce factories (repositories, services and use cases)."""
        return self._ecommerce

    # ============================================================
    # SINGLETONS (delegated to BaseContainer)
    # ============================================================

    def get_payment_gateway(self) -> MyFatoorahClient:
        """Get payment gateway client (singleton)."""
        return self._base.get_payment_gateway()

    def get_payment_idempotency(self) -> PaymentIdempotencyService:
        """Get payment verification lock service (singleton)."""
        return self._base.get_payment_idempotency()

    def get_config(self) -> dict:
        """Get current configuration."""
        return self._base.get_config()

    async def close(self) -> None:
        """Release shared clients on shutdown."""
        await self._base.close()


# ============================================================
# GLOBAL CONTAINER INSTANCE
# ============================================================

_container: DependencyContainer | None = None


def get_container(config: dict | None = None) -> DependencyContainer:
    """
    Get global container instance (singleton).

    Args:
        config: Optional configuration (only used on first call)

    Returns:
        DependencyContainer instance
    """
    global _container

    if _container is None:
        logger.info("Initializing global DependencyContainer")
        _container = DependencyContainer(config)
    elif config is not None:
        logger.warning(
            "Container already initialized, ignoring new config. "
            "Call reset_container() first to change config."
        )

    return _container


def reset_container() -> None:
    """
    Reset global container instance.

    Useful for testing or reconfiguration.
    """
    global _container
    logger.info("Resetting global DependencyContainer")
    _container = None


__all__ = [
    "DependencyContainer",
    "get_container",
    "reset_container",
    "BaseContainer",
    "EcommerceContainer",
]
