"""
Admin Status Override Use Cases

Operator path for moving orders between statuses. It uses the same state
machine as the gateway, with the admin actor recorded in the history.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from app.core.domain import DomainEventPublisher, EntityNotFoundException, StateTransitionException, ValidationException
from app.domains.ecommerce.application.ports import IOrderRepository, IUnitOfWork
from app.domains.ecommerce.domain.entities.order import Order
from app.domains.ecommerce.domain.services.order_state_machine import OrderStateMachine
from app.domains.ecommerce.domain.value_objects.order_status import OrderStatus, StatusActor

logger = logging.getLogger(__name__)

MAX_BULK_ORDERS = 200


@dataclass
class ForceOrderStatusRequest:
    """Single order override."""

    order_id: int
    status: OrderStatus
    admin_notes: str | None = None
    tracking_number: str | None = None
    shipping_date: datetime | None = None


class ForceOrderStatusUseCase:
    """
    Use Case: Force Order Status

    Illegal targets raise StateTransitionException and change nothing.
    """

    def __init__(self, uow: IUnitOfWork, order_repository: IOrderRepository, state_machine: OrderStateMachine):
        self.uow = uow
        self.order_repository = order_repository
        self.state_machine = state_machine

    async def execute(self, request: ForceOrderStatusRequest) -> Order:
        try:
            order = await self.order_repository.get_by_id(request.order_id, for_update=True)
            if order is None:
                raise EntityNotFoundException("Order", request.order_id)

            self.state_machine.transition(
                order,
                request.status,
                StatusActor.ADMIN,
                notes=request.admin_notes,
                tracking_number=request.tracking_number,
                shipping_date=request.shipping_date,
            )
            await self.order_repository.save(order)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Status override of order {request.order_id} to {request.status.value} failed: {e}")
            raise

        events = order.get_domain_events()
        order.clear_domain_events()
        await DomainEventPublisher.publish_all(events)
        return order


@dataclass
class BulkForceOrderStatusRequest:
    """Override for several orders at once."""

    order_ids: list[int]
    status: OrderStatus
    admin_notes: str | None = None


class BulkForceOrderStatusUseCase:
    """
    Use Case: Bulk Force Order Status

    All or nothing: every order is checked before any is changed.
    """

    def __init__(self, uow: IUnitOfWork, order_repository: IOrderRepository, state_machine: OrderStateMachine):
        self.uow = uow
        self.order_repository = order_repository
        self.state_machine = state_machine

    async def execute(self, request: BulkForceOrderStatusRequest) -> list[Order]:
        """
        Raises:
            ValidationException: Empty or oversized id list
            EntityNotFoundException: Some ids do not exist
            StateTransitionException: Some orders cannot reach the target; lists them
        """
        order_ids = sorted(set(request.order_ids))
        if not order_ids:
            raise ValidationException(message="order_ids cannot be empty", field="order_ids")
        if len(order_ids) > MAX_BULK_ORDERS:
            raise ValidationException(
                message=f"At most {MAX_BULK_ORDERS} orders can be updated at once",
                field="order_ids",
            )

        try:
            orders = await self.order_repository.get_by_ids(order_ids, for_update=True)

            missing = sorted(set(order_ids) - {order.id for order in orders})
            if missing:
                raise EntityNotFoundException(
                    "Order",
                    ", ".join(str(order_id) for order_id in missing),
                    message=f"Orders not found: {missing}",
                )

            offending = [
                {"order_id": order.id, "order_number": order.order_number, "status": order.status.value}
                for order in orders
                if not self.state_machine.can_transition(order, request.status, StatusActor.ADMIN)
            ]
            if offending:
                raise StateTransitionException(
                    current_state="mixed",
                    target_state=request.status.value,
                    message=f"{len(offending)} order(s) cannot be moved to '{request.status.value}'",
                    details={"orders": offending},
                )

            for order in orders:
                self.state_machine.transition(order, request.status, StatusActor.ADMIN, notes=request.admin_notes)
                await self.order_repository.save(order)

            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Bulk status override to {request.status.value} failed: {e}")
            raise

        logger.info(f"Bulk status override: {len(orders)} orders moved to {request.status.value}")

        for order in orders:
            events = order.get_domain_events()
            order.clear_domain_events()
            await DomainEventPublisher.publish_all(events)
        return orders


__all__ = [
    "ForceOrderStatusUseCase",
    "ForceOrderStatusRequest",
    "BulkForceOrderStatusUseCase",
    "BulkForceOrderStatusRequest",
]
