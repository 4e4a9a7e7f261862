"""
Order Repository Implementation

SQLAlchemy implementation of IOrderRepository.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.domain import Address
from app.domains.ecommerce.application.ports import IOrderRepository
from app.domains.ecommerce.domain.entities.order import Order, OrderItem
from app.domains.ecommerce.domain.value_objects.discount import clean_attributes
from app.domains.ecommerce.domain.value_objects.order_status import (
    OrderStatus,
    OrderStatusTransition,
    StatusActor,
)
from app.models.db.orders import Order as OrderModel
from app.models.db.orders import OrderItem as OrderItemModel
from app.models.db.orders import OrderStatusHistory as OrderStatusHistoryModel

logger = logging.getLogger(__name__)


class SQLAlchemyOrderRepository(IOrderRepository):
    """
    SQLAlchemy implementation of order repository.

    Never commits; the use case owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    def _select(self, for_update: bool = False):
        query = select(OrderModel).options(
            selectinload(OrderModel.items),
            selectinload(OrderModel.status_history),
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        return query

    async def add(self, order: Order) -> Order:
        """Insert order, items and initial history; sets order.id."""
        try:
            model = self._to_model(order)
            self.session.add(model)
            await self.session.flush()
            order.id = model.id
            return order
        except Exception as e:
            logger.error(f"Error adding order {order.order_number}: {e}")
            raise

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        """Get order by ID."""
        try:
            result = await self.session.execute(self._select(for_update).where(OrderModel.id == order_id))
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting order by ID {order_id}: {e}")
            raise

    async def get_by_ids(self, order_ids: list[int], for_update: bool = False) -> list[Order]:
        """Get orders by ID; locks are taken in ID order."""
        if not order_ids:
            return []
        try:
            result = await self.session.execute(
                self._select(for_update).where(OrderModel.id.in_(order_ids)).order_by(OrderModel.id)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting orders {order_ids}: {e}")
            raise

    async def get_by_order_number(self, order_number: str) -> Order | None:
        """Get order by its public number, ignoring case."""
        try:
            result = await self.session.execute(
                self._select().where(func.upper(OrderModel.order_number) == order_number.strip().upper())
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting order {order_number}: {e}")
            raise

    async def save(self, order: Order) -> Order:
        """Write status and fulfilment fields, insert new history entries."""
        try:
            model = await self.session.get(OrderModel, order.id)
            if model is None:
                raise ValueError(f"Order {order.id} does not exist")

            model.status = order.status.value
            model.tracking_number = order.tracking_number
            model.shipping_date = order.shipping_date
            model.delivery_date = order.delivery_date
            model.admin_notes = order.admin_notes

            for entry in order.pull_new_history():
                self.session.add(self._history_to_model(order.id, entry))

            await self.session.flush()
            return order
        except Exception as e:
            logger.error(f"Error saving order {order.order_number}: {e}")
            raise

    async def list(self, status: OrderStatus | None = None, limit: int = 50, offset: int = 0) -> list[Order]:
        """List orders, newest first."""
        try:
            query = self._select()
            if status is not None:
                query = query.where(OrderModel.status == status.value)
            query = query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(limit).offset(offset)
            result = await self.session.execute(query)
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error listing orders: {e}")
            raise

    async def count(self, status: OrderStatus | None = None) -> int:
        """Count orders."""
        try:
            query = select(func.count(OrderModel.id))
            if status is not None:
                query = query.where(OrderModel.status == status.value)
            result = await self.session.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(f"Error counting orders: {e}")
            raise

    # Mapping

    def _to_model(self, order: Order) -> OrderModel:
        """Convert entity to model, with items and pending history."""
        address = order.shipping_address
        model = OrderModel(
            order_number=order.order_number,
            status=order.status.value,
            currency=order.currency,
            subtotal_amount=order.subtotal_amount,
            discount_amount=order.discount_amount,
            shipping_amount=order.shipping_amount,
            total_amount=order.total_amount,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_email=order.customer_email,
            street=address.street if address else "",
            city=address.city if address else "",
            governorate=address.governorate if address else None,
            postal_code=address.postal_code if address else None,
            country=address.country if address else "Kuwait",
            payment_method=order.payment_method,
            discount_code=order.discount_code,
            tracking_number=order.tracking_number,
            shipping_date=order.shipping_date,
            delivery_date=order.delivery_date,
            admin_notes=order.admin_notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        model.items = [
            OrderItemModel(
                product_id=item.product_id,
                title=item.title,
                description=item.description,
                price=item.price,
                discounted_price=item.discounted_price,
                has_discount=item.has_discount,
                discount_percentage=item.discount_percentage,
                currency=item.currency,
                images=list(item.images),
                size=item.size,
                attributes=dict(item.attributes),
                applied_rule_id=item.applied_rule_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
            )
            for item in order.items
        ]
        model.status_history = [
            OrderStatusHistoryModel(
                from_status=entry.from_status.value if entry.from_status else None,
                to_status=entry.to_status.value,
                actor=entry.actor.value,
                notes=entry.notes,
                payment_attempt_id=entry.payment_attempt_id,
                created_at=entry.created_at,
            )
            for entry in order.pull_new_history()
        ]
        return model

    @staticmethod
    def _history_to_model(order_id: int | None, entry: OrderStatusTransition) -> OrderStatusHistoryModel:
        return OrderStatusHistoryModel(
            order_id=order_id,
            from_status=entry.from_status.value if entry.from_status else None,
            to_status=entry.to_status.value,
            actor=entry.actor.value,
            notes=entry.notes,
            payment_attempt_id=entry.payment_attempt_id,
            created_at=entry.created_at,
        )

    def _to_entity(self, model: OrderModel) -> Order:
        """Convert model to entity."""
        items = [
            OrderItem(
                id=item.id,
                product_id=item.product_id,
                title=item.title,
                quantity=item.quantity,
                unit_price=item.unit_price,
                price=item.price,
                currency=item.currency,
                discounted_price=item.discounted_price,
                has_discount=bool(item.has_discount),
                discount_percentage=item.discount_percentage,
                applied_rule_id=item.applied_rule_id,
                description=item.description,
                images=tuple(item.images or ()),
                size=item.size,
                attributes=clean_attributes(item.attributes),
            )
            for item in model.items
        ]
        history = [
            OrderStatusTransition(
                id=entry.id,
                from_status=OrderStatus(entry.from_status) if entry.from_status else None,
                to_status=OrderStatus(entry.to_status),
                actor=StatusActor(entry.actor),
                notes=entry.notes,
                payment_attempt_id=entry.payment_attempt_id,
                created_at=entry.created_at,
            )
            for entry in model.status_history
        ]

        return Order(
            id=model.id,
            order_number=model.order_number,
            status=OrderStatus(model.status),
            currency=model.currency,
            subtotal_amount=model.subtotal_amount,
            discount_amount=model.discount_amount,
            shipping_amount=model.shipping_amount,
            total_amount=model.total_amount,
            customer_name=model.customer_name,
            customer_phone=model.customer_phone,
            customer_email=model.customer_email,
            shipping_address=Address(
                street=model.street,
                city=model.city,
                governorate=model.governorate,
                postal_code=model.postal_code,
                country=model.country or "Kuwait",
            ),
            payment_method=model.payment_method,
            discount_code=model.discount_code,
            tracking_number=model.tracking_number,
            shipping_date=model.shipping_date,
            delivery_date=model.delivery_date,
            admin_notes=model.admin_notes,
            items=items,
            status_history=history,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
