# ============================================================================
# SCOPE: GLOBAL
# Description: Base container with the process-wide singletons (settings,
#              payment gateway client, Redis-backed idempotency service).
# ============================================================================
"""
Base Container - Shared Singletons.

Single Responsibility: Manage shared resources that outlive a request.
"""

import logging

from app.clients.myfatoorah_client import MyFatoorahClient
from app.config.settings import get_settings
from app.integrations.databases import get_async_redis_client
from app.services.payments import PaymentIdempotencyService

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    Single Responsibility: Create and cache resources reused across requests.
    """

    def __init__(self, config: dict | None = None):
        """
        Initialize base container.

        Args:
            config: Optional configuration dict (overrides settings)
        """
        self.settings = get_settings()
        self.config = config or {}

        self._payment_gateway: MyFatoorahClient | None = None
        self._payment_idempotency: PaymentIdempotencyService | None = None

        logger.info("BaseContainer initialized")

    def get_payment_gateway(self) -> MyFatoorahClient:
        """
        Get the payment gateway client (singleton).

        The client keeps one pooled httpx.AsyncClient for the process.
        """
        if self._payment_gateway is None:
            base_url = self.config.get("payment_gateway_base_url") or self.settings.PAYMENT_GATEWAY_BASE_URL
            logger.info(f"Creating payment gateway client for {base_url}")
            self._payment_gateway = MyFatoorahClient(
                base_url=base_url,
                api_key=self.settings.PAYMENT_GATEWAY_API_KEY,
                timeout=self.settings.PAYMENT_GATEWAY_TIMEOUT,
            )
        return self._payment_gateway

    def get_payment_idempotency(self) -> PaymentIdempotencyService:
        """Get the payment verification lock service (singleton)."""
        if self._payment_idempotency is None:
            self._payment_idempotency = PaymentIdempotencyService(
                redis_client=get_async_redis_client(),
                lock_ttl_ms=self.settings.PAYMENT_LOCK_TTL_MS,
                completed_ttl_ms=self.settings.PAYMENT_RECEIPT_TTL_MS,
            )
        return self._payment_idempotency

    async def close(self) -> None:
        """Release the gateway HTTP client."""
        if self._payment_gateway is not None:
            await self._payment_gateway.close()
            self._payment_gateway = None

    def get_config(self) -> dict:
        """Get current configuration."""
        return {
            "currency": self.settings.DEFAULT_CURRENCY,
            "payment_gateway_base_url": self.settings.PAYMENT_GATEWAY_BASE_URL,
            "cash_on_delivery_methods": list(self.settings.CASH_ON_DELIVERY_METHODS),
            "domains": ["ecommerce"],
        }
