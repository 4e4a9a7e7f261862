"""
Order Acceptance Gate

Global switch deciding whether new orders are accepted. Order creation asks
the gate first, before any pricing or persistence happens.
"""

import logging

from app.core.domain import OrdersClosedException
from app.domains.ecommerce.application.dto import OrderAcceptanceState
from app.domains.ecommerce.application.ports import IOrderAcceptanceRepository, IUnitOfWork

logger = logging.getLogger(__name__)


class OrderAcceptanceGate:
    """
    Use Case: Order Acceptance Gate

    Responsibilities:
    - Read the current flag, falling back to the configured default
    - Replace the flag (set / toggle) in its own transaction
    - Reject order creation while closed
    """

    def __init__(
        self,
        uow: IUnitOfWork,
        repository: IOrderAcceptanceRepository,
        default_enabled: bool = True,
        default_closed_message: str | None = None,
    ):
        self.uow = uow
        self.repository = repository
        self.default_enabled = default_enabled
        self.default_closed_message = default_closed_message

    async def state(self) -> OrderAcceptanceState:
        """Current gate state; reads tolerate a slightly stale value."""
        current = await self.repository.get_current()
        if current is None:
            return OrderAcceptanceState(
                orders_enabled=self.default_enabled,
                message=None if self.default_enabled else self.default_closed_message,
            )
        return current

    async def is_open(self) -> bool:
        return (await self.state()).orders_enabled

    async def ensure_open(self) -> None:
        """
        Raises:
            OrdersClosedException: With the message shown to customers
        """
        state = await self.state()
        if not state.orders_enabled:
            logger.info("[GATE] Order rejected, store is not accepting orders")
            raise OrdersClosedException(
                state.message or self.default_closed_message or "We are not accepting orders at the moment"
            )

    async def set_open(
        self,
        enabled: bool,
        message: str | None = None,
        changed_by: str | None = None,
    ) -> OrderAcceptanceState:
        """
        Replace the current flag.

        Raises:
            ConcurrencyException: Another admin replaced the flag at the same time
        """
        message = message.strip() if message and message.strip() else None
        try:
            state = await self.repository.replace_current(
                OrderAcceptanceState(orders_enabled=enabled, message=message, changed_by=changed_by)
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"[GATE] Error updating order acceptance: {e}")
            raise

        logger.info(f"[GATE] Orders {'enabled' if enabled else 'disabled'} by {changed_by or 'admin'}")
        return state

    async def toggle(self, changed_by: str | None = None) -> OrderAcceptanceState:
        """Flip the flag, keeping the current message."""
        current = await self.state()
        return await self.set_open(not current.orders_enabled, current.message, changed_by)


__all__ = ["OrderAcceptanceGate"]
