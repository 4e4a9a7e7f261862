"""
Order Query Use Cases

Read-only access to orders for customers (by number) and admins (by id, list).
"""

import logging
from dataclasses import dataclass

from app.core.domain import EntityNotFoundException
from app.domains.ecommerce.application.ports import IOrderRepository, IPaymentAttemptRepository
from app.domains.ecommerce.domain.entities.order import Order
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt
from app.domains.ecommerce.domain.value_objects.order_status import OrderStatus

logger = logging.getLogger(__name__)


class GetOrderUseCase:
    """Use Case: Get Order by public number or by id."""

    def __init__(self, order_repository: IOrderRepository):
        self.order_repository = order_repository

    async def by_order_number(self, order_number: str) -> Order:
        code = (order_number or "").strip()
        order = await self.order_repository.get_by_order_number(code) if code else None
        if order is None:
            raise EntityNotFoundException("Order", code, message=f"Order {code} not found")
        return order

    async def by_id(self, order_id: int) -> Order:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundException("Order", order_id)
        return order


@dataclass
class AdminOrderDetail:
    """Order with its payment attempts."""

    order: Order
    payment_attempts: list[PaymentAttempt]


class GetAdminOrderUseCase:
    """Use Case: Admin order detail, including payment attempts."""

    def __init__(self, order_repository: IOrderRepository, payment_attempt_repository: IPaymentAttemptRepository):
        self.order_repository = order_repository
        self.payment_attempt_repository = payment_attempt_repository

    async def execute(self, order_id: int) -> AdminOrderDetail:
        order = await GetOrderUseCase(self.order_repository).by_id(order_id)
        attempts = await self.payment_attempt_repository.list_by_order(order_id)
        return AdminOrderDetail(order=order, payment_attempts=attempts)


@dataclass
class ListOrdersResponse:
    """Page of orders."""

    orders: list[Order]
    total: int
    limit: int
    offset: int


class ListOrdersUseCase:
    """Use Case: List orders for the admin, optionally by status."""

    MAX_LIMIT = 200

    def __init__(self, order_repository: IOrderRepository):
        self.order_repository = order_repository

    async def execute(self, status: OrderStatus | None = None, limit: int = 50, offset: int = 0) -> ListOrdersResponse:
        limit = max(1, min(limit, self.MAX_LIMIT))
        offset = max(0, offset)
        orders = await self.order_repository.list(status=status, limit=limit, offset=offset)
        total = await self.order_repository.count(status=status)
        return ListOrdersResponse(orders=orders, total=total, limit=limit, offset=offset)


__all__ = [
    "GetOrderUseCase",
    "GetAdminOrderUseCase",
    "AdminOrderDetail",
    "ListOrdersUseCase",
    "ListOrdersResponse",
]
