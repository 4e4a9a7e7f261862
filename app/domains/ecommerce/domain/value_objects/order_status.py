"""
Order Status Value Objects for E-commerce Domain

Lifecycle states of an order, the actors that move it and the
transition graph they all share.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.core.domain import StatusEnum


class OrderStatus(StatusEnum):
    """
    Order lifecycle states.

    Valid transitions:
    - PENDING, AWAITING_PAYMENT -> PAID, CANCELLED
    - PAID -> SHIPPED, CANCELLED
    - SHIPPED -> DELIVERED, CANCELLED
    - DELIVERED, CANCELLED -> (terminal states)
    """

    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in ORDER_STATUS_TRANSITIONS[self]

    def get_valid_transitions(self) -> list["OrderStatus"]:
        """Get list of valid next statuses, in lifecycle order."""
        return [status for status in OrderStatus if status in ORDER_STATUS_TRANSITIONS[self]]

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return not ORDER_STATUS_TRANSITIONS[self]

    def accepts_payment(self) -> bool:
        """Check if a payment may be initiated or verified in this state."""
        return self in (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT)


# Transition graph: status -> statuses reachable in one step
ORDER_STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.AWAITING_PAYMENT: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class StatusActor(StatusEnum):
    """Who requested a status change (kept for audit)."""

    CUSTOMER = "customer"
    GATEWAY = "gateway"
    ADMIN = "admin"


class PaymentAttemptStatus(StatusEnum):
    """Status of a single payment attempt as last reported by the gateway."""

    INITIATED = "initiated"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    CASH_ON_DELIVERY = "cash_on_delivery"

    def is_unsuccessful(self) -> bool:
        return self in (PaymentAttemptStatus.FAILED, PaymentAttemptStatus.CANCELLED)


@dataclass(frozen=True)
class OrderStatusTransition:
    """
    One applied status change, as stored in the order's history.

    from_status is None for the initial status assigned at creation.
    """

    from_status: OrderStatus | None
    to_status: OrderStatus
    actor: StatusActor
    notes: str | None = None
    payment_attempt_id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    id: int | None = None

    def __str__(self) -> str:
        from_str = self.from_status.value if self.from_status else "NEW"
        return f"{from_str} -> {self.to_status.value}"
