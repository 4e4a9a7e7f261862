"""
Payment Idempotency Service

Redis-based idempotency service for payment verification deduplication.
Short-circuits gateway callbacks and return-URL hits that arrive again
after a verification already completed.

Key Design:
- Uses Redis SET with NX (only set if not exists) + PX (expire in milliseconds)
- Returns the order id if the invoice was already verified
- The database caused_transition flag stays authoritative; this only saves
  gateway round trips

Usage in verification:
    idempotency = PaymentIdempotencyService(redis)
    is_duplicate, order_id = await idempotency.check_and_lock(invoice_id)
    if order_id is not None:
        return replayed snapshot of order_id
    ...
    await idempotency.mark_complete(invoice_id, order.id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Idempotency key prefix
PAYMENT_KEY_PREFIX = "storefront:payment"

PROCESSING = "processing"
ORDER_PREFIX = "order:"

# Processing lock TTL (5 minutes) - to prevent concurrent processing
PROCESSING_LOCK_TTL_MS = 5 * 60 * 1000

# Completed verification TTL (24 hours)
COMPLETED_TTL_MS = 24 * 60 * 60 * 1000


class PaymentIdempotencyService:
    """
    Redis-based idempotency service for payment verification.

    States:
    - Not found: Invoice not seen before
    - "processing": Invoice is being verified by another worker
    - "order:N": Invoice was verified as paid for order N
    """

    def __init__(
        self,
        redis_client: Redis,
        lock_ttl_ms: int = PROCESSING_LOCK_TTL_MS,
        completed_ttl_ms: int = COMPLETED_TTL_MS,
    ):
        """
        Initialize idempotency service.

        Args:
            redis_client: Async Redis client instance
            lock_ttl_ms: Lifetime of the processing lock
            completed_ttl_ms: Lifetime of the completion receipt
        """
        self._redis = redis_client
        self._lock_ttl_ms = lock_ttl_ms
        self._completed_ttl_ms = completed_ttl_ms

    def _get_key(self, invoice_reference: str) -> str:
        """Build Redis key for an invoice."""
        return f"{PAYMENT_KEY_PREFIX}:{invoice_reference}"

    async def check_and_lock(self, invoice_reference: str) -> tuple[bool, int | None]:
        """
        Check if the invoice was already verified and acquire processing lock.

        - If key doesn't exist: sets "processing" and returns (False, None)
        - If key holds "processing": returns (True, None) - concurrent verification
        - If key holds "order:N": returns (True, N) - already verified

        Args:
            invoice_reference: Gateway invoice id

        Returns:
            Tuple of (is_duplicate, verified_order_id_or_none)
        """
        key = self._get_key(invoice_reference)

        existing = await self._redis.get(key)

        if existing:
            existing_str = existing.decode() if isinstance(existing, bytes) else str(existing)

            if existing_str == PROCESSING:
                logger.warning(f"[IDEMPOTENCY] Invoice {invoice_reference} is currently being verified")
                return (True, None)

            if existing_str.startswith(ORDER_PREFIX):
                order_id = existing_str.split(":", 1)[1]
                if order_id.isdigit():
                    logger.info(f"[IDEMPOTENCY] Invoice {invoice_reference} already verified for order {order_id}")
                    return (True, int(order_id))

            # Unknown value, treat as duplicate
            logger.warning(f"[IDEMPOTENCY] Invoice {invoice_reference} has unknown value: {existing_str}")
            return (True, None)

        acquired = await self._redis.set(key, PROCESSING, nx=True, px=self._lock_ttl_ms)

        if acquired:
            logger.debug(f"[IDEMPOTENCY] Acquired lock for invoice {invoice_reference}")
            return (False, None)

        # Race condition - another worker acquired lock
        logger.info(f"[IDEMPOTENCY] Lost race for invoice {invoice_reference}")
        return (True, None)

    async def mark_complete(self, invoice_reference: str, order_id: int) -> None:
        """
        Mark invoice as verified and paid.

        Args:
            invoice_reference: Gateway invoice id
            order_id: Order moved to paid by this invoice
        """
        key = self._get_key(invoice_reference)
        await self._redis.set(key, f"{ORDER_PREFIX}{order_id}", px=self._completed_ttl_ms)
        logger.info(f"[IDEMPOTENCY] Marked invoice {invoice_reference} complete for order {order_id}")

    async def mark_failed(self, invoice_reference: str, error: str) -> None:
        """
        Mark verification as failed.

        Removes the lock to allow retry. The error is logged but not stored.
        """
        key = self._get_key(invoice_reference)
        await self._redis.delete(key)
        logger.warning(f"[IDEMPOTENCY] Removed lock for failed invoice {invoice_reference}: {error}")

    async def release(self, invoice_reference: str) -> None:
        """Remove the lock without recording a result (invoice still pending)."""
        await self._redis.delete(self._get_key(invoice_reference))
        logger.debug(f"[IDEMPOTENCY] Released lock for invoice {invoice_reference}")


__all__ = ["PaymentIdempotencyService"]
