"""
Order Tracking Service

Projects an order and its status history into the read model shown on
the public tracking page.
"""

from dataclasses import dataclass
from datetime import datetime

from ..entities.order import Order
from ..value_objects.order_status import OrderStatus


@dataclass(frozen=True)
class StatusInfo:
    """Presentation hints for the current status."""

    title: str
    description: str
    color: str
    icon: str


@dataclass(frozen=True)
class TimelineStep:
    """One step of the tracking timeline."""

    status: str
    title: str
    description: str
    date: datetime | None
    completed: bool


STATUS_INFO: dict[OrderStatus, StatusInfo] = {
    OrderStatus.PENDING: StatusInfo(
        title="Order Received",
        description="Your order has been received and will be paid on delivery.",
        color="yellow",
        icon="clock",
    ),
    OrderStatus.AWAITING_PAYMENT: StatusInfo(
        title="Awaiting Payment",
        description="We are waiting for your payment to be confirmed.",
        color="red",
        icon="credit-card",
    ),
    OrderStatus.PAID: StatusInfo(
        title="Payment Confirmed",
        description="Your payment was confirmed and your order is being prepared.",
        color="green",
        icon="check-circle",
    ),
    OrderStatus.SHIPPED: StatusInfo(
        title="Shipped",
        description="Your order is on its way.",
        color="blue",
        icon="truck",
    ),
    OrderStatus.DELIVERED: StatusInfo(
        title="Delivered",
        description="Your order has been delivered.",
        color="green",
        icon="package",
    ),
    OrderStatus.CANCELLED: StatusInfo(
        title="Cancelled",
        description="This order has been cancelled.",
        color="red",
        icon="x-circle",
    ),
}

# (step key, status that completes it, title, description)
TIMELINE_STEPS: tuple[tuple[str, OrderStatus | None, str, str], ...] = (
    ("created", None, "Order Placed", "We received your order."),
    ("paid", OrderStatus.PAID, "Payment Confirmed", "Payment for the order was confirmed."),
    ("shipped", OrderStatus.SHIPPED, "Shipped", "The order left our warehouse."),
    ("delivered", OrderStatus.DELIVERED, "Delivered", "The order reached its destination."),
)

# Position of each status along the happy path
_PROGRESS: dict[OrderStatus, int] = {
    OrderStatus.PENDING: 0,
    OrderStatus.AWAITING_PAYMENT: 0,
    OrderStatus.PAID: 1,
    OrderStatus.SHIPPED: 2,
    OrderStatus.DELIVERED: 3,
}


class OrderTrackingService:
    """
    Builds status info and timelines for tracking reads.

    Example:
        ```python
        service = OrderTrackingService(reference_prefixes=["TRK-", "INV-", "PAY-"])
        service.looks_like_reference("TRK-12345")  # True
        steps = service.timeline(order)
        ```
    """

    def __init__(self, reference_prefixes: list[str] | None = None):
        self._reference_prefixes = tuple(prefix.upper() for prefix in (reference_prefixes or []))

    def status_info(self, status: OrderStatus) -> StatusInfo:
        return STATUS_INFO[status]

    def looks_like_reference(self, code: str) -> bool:
        """
        Heuristic for codes that are payment or shipment references rather
        than order numbers: a known prefix, or digits only.
        """
        normalized = code.strip().upper()
        if not normalized:
            return False
        return normalized.startswith(self._reference_prefixes) or normalized.isdigit()

    def timeline(self, order: Order) -> list[TimelineStep]:
        """
        Steps created, paid, shipped, delivered with their dates.

        A cancelled order lists the steps it reached, then a completed
        cancelled step.
        """
        if order.status == OrderStatus.CANCELLED:
            reached = self._progress_before_cancel(order)
        else:
            reached = _PROGRESS[order.status]

        steps: list[TimelineStep] = []
        for position, (key, status, title, description) in enumerate(TIMELINE_STEPS):
            completed = position <= reached
            if order.status == OrderStatus.CANCELLED and not completed:
                continue
            steps.append(
                TimelineStep(
                    status=key,
                    title=title,
                    description=description,
                    date=self._step_date(order, status) if completed else None,
                    completed=completed,
                )
            )

        if order.status == OrderStatus.CANCELLED:
            info = STATUS_INFO[OrderStatus.CANCELLED]
            steps.append(
                TimelineStep(
                    status=OrderStatus.CANCELLED.value,
                    title=info.title,
                    description=info.description,
                    date=order.reached_at(OrderStatus.CANCELLED) or order.updated_at,
                    completed=True,
                )
            )
        return steps

    def _progress_before_cancel(self, order: Order) -> int:
        reached = 0
        for entry in order.status_history:
            if entry.to_status in _PROGRESS:
                reached = max(reached, _PROGRESS[entry.to_status])
        return reached

    def _step_date(self, order: Order, status: OrderStatus | None) -> datetime | None:
        if status is None:
            return order.created_at
        reached = order.reached_at(status)
        if reached is not None:
            return reached
        if status == OrderStatus.SHIPPED:
            return order.shipping_date
        if status == OrderStatus.DELIVERED:
            return order.delivery_date
        return None
