"""
Shipping Cost Use Case

Flat shipping cost added to every order.
"""

import logging
from decimal import Decimal

from app.core.domain import Money, ValidationException
from app.domains.ecommerce.application.dto import ShippingCostState
from app.domains.ecommerce.application.ports import IShippingCostRepository, IUnitOfWork

logger = logging.getLogger(__name__)


class ShippingCostService:
    """Reads and replaces the current shipping cost."""

    def __init__(
        self,
        uow: IUnitOfWork,
        repository: IShippingCostRepository,
        currency: str = "KWD",
        default_amount: Decimal = Decimal("0"),
    ):
        self.uow = uow
        self.repository = repository
        self.currency = currency.upper()
        self.default_amount = default_amount

    async def current(self) -> ShippingCostState:
        state = await self.repository.get_current()
        if state is None:
            return ShippingCostState(amount=Money(self.default_amount, self.currency).amount, currency=self.currency)
        return state

    async def current_money(self) -> Money:
        state = await self.current()
        return Money(amount=state.amount, currency=state.currency)

    async def replace(self, amount: Decimal, changed_by: str | None = None) -> ShippingCostState:
        """
        Set a new shipping cost in the store currency.

        Raises:
            ValidationException: Negative amount
            ConcurrencyException: Concurrent replacement
        """
        if amount < 0:
            raise ValidationException(message="Shipping cost cannot be negative", field="amount")

        try:
            state = await self.repository.replace_current(
                ShippingCostState(
                    amount=Money(amount, self.currency).amount,
                    currency=self.currency,
                    changed_by=changed_by,
                )
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error updating shipping cost: {e}")
            raise

        logger.info(f"Shipping cost set to {state.amount} {state.currency} by {changed_by or 'admin'}")
        return state


__all__ = ["ShippingCostService"]
