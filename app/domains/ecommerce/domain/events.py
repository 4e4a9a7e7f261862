"""
E-commerce Domain Events

Published by the use cases after the originating transaction committed.
"""

from dataclasses import dataclass
from decimal import Decimal

from app.core.domain import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderPlaced(DomainEvent):
    """A new order was accepted and persisted."""

    order_id: int
    order_number: str
    status: str
    total_amount: Decimal
    currency: str


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """A status transition was applied to an order."""

    order_id: int | None
    order_number: str | None
    from_status: str | None
    to_status: str
    actor: str
    payment_attempt_id: int | None = None


__all__ = ["OrderPlaced", "OrderStatusChanged"]
