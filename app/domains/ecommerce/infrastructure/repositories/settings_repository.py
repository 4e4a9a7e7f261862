"""
Store Settings Repository Implementations

Each setting is a table of rows where exactly one is current. Replacing the
current value retires the old row and inserts a new one in the caller's
transaction, so the history is kept.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException
from app.domains.ecommerce.application.dto import OrderAcceptanceState, ShippingCostState
from app.domains.ecommerce.application.ports import IOrderAcceptanceRepository, IShippingCostRepository
from app.models.db.base import utc_now
from app.models.db.site_settings import OrderAcceptanceSetting, ShippingCostSetting

logger = logging.getLogger(__name__)


class SQLAlchemyOrderAcceptanceRepository(IOrderAcceptanceRepository):
    """Order acceptance flag backed by order_acceptance_settings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_current(self) -> OrderAcceptanceState | None:
        try:
            result = await self.session.execute(
                select(OrderAcceptanceSetting).where(OrderAcceptanceSetting.is_current.is_(True))
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            return OrderAcceptanceState(
                orders_enabled=model.orders_enabled,
                message=model.message,
                changed_by=model.changed_by,
                changed_at=model.created_at,
            )
        except Exception as e:
            logger.error(f"Error reading order acceptance setting: {e}")
            raise

    async def replace_current(self, state: OrderAcceptanceState) -> OrderAcceptanceState:
        try:
            await self.session.execute(
                update(OrderAcceptanceSetting)
                .where(OrderAcceptanceSetting.is_current.is_(True))
                .values(is_current=False)
            )
            model = OrderAcceptanceSetting(
                orders_enabled=state.orders_enabled,
                message=state.message,
                changed_by=state.changed_by,
                is_current=True,
                created_at=state.changed_at or utc_now(),
            )
            self.session.add(model)
            await self.session.flush()
            state.changed_at = model.created_at
            return state
        except IntegrityError as e:
            logger.warning(f"[GATE] Concurrent order acceptance change: {e}")
            raise ConcurrencyException("OrderAcceptanceSetting") from e
        except Exception as e:
            logger.error(f"Error replacing order acceptance setting: {e}")
            raise


class SQLAlchemyShippingCostRepository(IShippingCostRepository):
    """Shipping cost backed by shipping_cost_settings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_current(self) -> ShippingCostState | None:
        try:
            result = await self.session.execute(
                select(ShippingCostSetting).where(ShippingCostSetting.is_current.is_(True))
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            return ShippingCostState(
                amount=model.amount,
                currency=model.currency,
                effective_at=model.effective_at,
                changed_by=model.changed_by,
            )
        except Exception as e:
            logger.error(f"Error reading shipping cost setting: {e}")
            raise

    async def replace_current(self, state: ShippingCostState) -> ShippingCostState:
        try:
            await self.session.execute(
                update(ShippingCostSetting)
                .where(ShippingCostSetting.is_current.is_(True))
                .values(is_current=False)
            )
            model = ShippingCostSetting(
                amount=state.amount,
                currency=state.currency,
                effective_at=state.effective_at or utc_now(),
                changed_by=state.changed_by,
                is_current=True,
            )
            self.session.add(model)
            await self.session.flush()
            state.effective_at = model.effective_at
            return state
        except IntegrityError as e:
            logger.warning(f"Concurrent shipping cost change: {e}")
            raise ConcurrencyException("ShippingCostSetting") from e
        except Exception as e:
            logger.error(f"Error replacing shipping cost setting: {e}")
            raise
