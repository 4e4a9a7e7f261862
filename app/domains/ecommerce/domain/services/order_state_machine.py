"""
Order Status State Machine

Single authority over order status changes. The gateway callback and the
admin override both go through transition(), so the same graph applies to
every caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from app.core.domain import StateTransitionException

from ..entities.order import Order
from ..value_objects.order_status import OrderStatus, OrderStatusTransition, StatusActor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a transition request."""

    order: Order
    applied: bool
    entry: OrderStatusTransition | None = None

    @property
    def replayed(self) -> bool:
        return not self.applied


class OrderStateMachine:
    """
    Applies status transitions to orders.

    Example:
        ```python
        machine = OrderStateMachine()
        machine.transition(order, OrderStatus.SHIPPED, StatusActor.ADMIN, tracking_number="TRK-1")
        ```
    """

    def __init__(self, cash_on_delivery_methods: list[str] | None = None):
        self._cash_on_delivery_methods = {code.lower() for code in (cash_on_delivery_methods or ["cod"])}

    def initial_status_for(self, payment_method: str) -> OrderStatus:
        """Cash-on-delivery orders start pending, gateway-routed ones await payment."""
        if self.is_cash_on_delivery(payment_method):
            return OrderStatus.PENDING
        return OrderStatus.AWAITING_PAYMENT

    def is_cash_on_delivery(self, payment_method: str) -> bool:
        return payment_method.lower() in self._cash_on_delivery_methods

    def is_replay(self, order: Order, target: OrderStatus, actor: StatusActor) -> bool:
        """A repeated gateway confirmation of an already paid order."""
        return actor == StatusActor.GATEWAY and target == OrderStatus.PAID and order.status == OrderStatus.PAID

    def can_transition(self, order: Order, target: OrderStatus, actor: StatusActor) -> bool:
        """Check a transition without applying it."""
        return self.is_replay(order, target, actor) or order.status.can_transition_to(target)

    def ensure_can_transition(self, order: Order, target: OrderStatus, actor: StatusActor) -> None:
        """
        Raises:
            StateTransitionException: If target is not reachable from the current status
        """
        if not self.can_transition(order, target, actor):
            raise StateTransitionException(
                current_state=order.status.value,
                target_state=target.value,
                details={
                    "order_id": order.id,
                    "order_number": order.order_number,
                    "allowed": [status.value for status in order.status.get_valid_transitions()],
                },
            )

    def transition(
        self,
        order: Order,
        target: OrderStatus,
        actor: StatusActor,
        notes: str | None = None,
        *,
        payment_attempt_id: int | None = None,
        tracking_number: str | None = None,
        shipping_date: datetime | None = None,
        at: datetime | None = None,
    ) -> TransitionResult:
        """
        Move an order to target status.

        A gateway asking for paid on an already paid order is a no-op
        success. Illegal targets raise and leave the order untouched.

        Returns:
            TransitionResult with applied=False for the idempotent replay

        Raises:
            StateTransitionException: Illegal target for the current status
        """
        if self.is_replay(order, target, actor):
            logger.info(f"Order {order.order_number} already paid, gateway confirmation ignored")
            return TransitionResult(order=order, applied=False)

        self.ensure_can_transition(order, target, actor)

        entry = order.apply_transition(
            target,
            actor,
            notes,
            payment_attempt_id=payment_attempt_id,
            tracking_number=tracking_number,
            shipping_date=shipping_date,
            at=at,
        )
        logger.info(f"Order {order.order_number}: {entry} by {actor.value}")
        return TransitionResult(order=order, applied=True, entry=entry)
