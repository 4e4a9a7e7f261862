"""
Order Entity for E-commerce Domain

The order aggregate: customer, shipping address, priced line items frozen at
creation time, totals and the status history.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from app.core.domain import Address, AggregateRoot, BusinessRuleViolationException, Money

from ..events import OrderStatusChanged
from ..value_objects.discount import AttributeMap
from ..value_objects.order_status import OrderStatus, OrderStatusTransition, StatusActor

ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_SUFFIX_LENGTH = 6


def generate_order_number(prefix: str = "ORD", at: datetime | None = None) -> str:
    """Human readable, shareable order number: ORD-YYYYMMDD-XXXXXX."""
    at = at or datetime.now(UTC)
    suffix = "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(ORDER_NUMBER_SUFFIX_LENGTH))
    return f"{prefix}-{at:%Y%m%d}-{suffix}"


@dataclass(frozen=True)
class OrderItem:
    """
    Order line with a frozen snapshot of the product.

    Nothing here changes after the order is created, whatever happens to the
    product or to the discount rules later on.
    """

    product_id: int
    title: str
    quantity: int
    unit_price: Decimal
    price: Decimal
    currency: str = "KWD"
    discounted_price: Decimal | None = None
    has_discount: bool = False
    discount_percentage: Decimal | None = None
    applied_rule_id: int | None = None
    description: str | None = None
    images: tuple[str, ...] = ()
    size: str | None = None
    attributes: AttributeMap = field(default_factory=dict, hash=False)
    id: int | None = None

    @property
    def line_total(self) -> Decimal:
        return Money(amount=self.unit_price * self.quantity, currency=self.currency).amount


@dataclass
class Order(AggregateRoot[int]):
    """
    Order aggregate root.

    Status only changes through OrderStateMachine, which calls
    apply_transition once a target has been accepted.

    Invariant: total_amount == subtotal_amount - discount_amount + shipping_amount >= 0
    """

    order_number: str = ""
    status: OrderStatus = OrderStatus.PENDING
    currency: str = "KWD"

    # Totals
    subtotal_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    shipping_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")

    # Customer
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str | None = None
    shipping_address: Address | None = None

    # Checkout
    payment_method: str = ""
    discount_code: str | None = None

    # Fulfilment
    tracking_number: str | None = None
    shipping_date: datetime | None = None
    delivery_date: datetime | None = None
    admin_notes: str | None = None

    items: list[OrderItem] = field(default_factory=list)
    status_history: list[OrderStatusTransition] = field(default_factory=list)

    # History entries not persisted yet
    _new_history: list[OrderStatusTransition] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def place(
        cls,
        *,
        order_number: str,
        initial_status: OrderStatus,
        items: list[OrderItem],
        subtotal: Money,
        discount: Money,
        shipping: Money,
        total: Money,
        customer_name: str,
        customer_phone: str,
        shipping_address: Address,
        payment_method: str,
        customer_email: str | None = None,
        discount_code: str | None = None,
    ) -> "Order":
        """
        Create a new order in its initial status.

        Raises:
            BusinessRuleViolationException: No items or inconsistent totals
        """
        if not items:
            raise BusinessRuleViolationException(rule="ORDER_HAS_ITEMS", message="An order needs at least one item")
        if initial_status not in (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT):
            raise BusinessRuleViolationException(
                rule="ORDER_INITIAL_STATUS",
                message=f"Orders cannot start as {initial_status.value}",
            )

        order = cls(
            order_number=order_number,
            status=initial_status,
            currency=total.currency,
            subtotal_amount=subtotal.amount,
            discount_amount=discount.amount,
            shipping_amount=shipping.amount,
            total_amount=total.amount,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email,
            shipping_address=shipping_address,
            payment_method=payment_method,
            discount_code=discount_code,
            items=list(items),
        )
        order.ensure_totals_consistent()
        order._append_history(
            OrderStatusTransition(
                from_status=None,
                to_status=initial_status,
                actor=StatusActor.CUSTOMER,
                notes="Order placed",
                created_at=order.created_at,
            )
        )
        return order

    # Invariants

    def ensure_totals_consistent(self) -> None:
        """Raise if the stored totals do not add up."""
        expected = self.subtotal_amount - self.discount_amount + self.shipping_amount
        if self.total_amount != expected or self.total_amount < 0:
            raise BusinessRuleViolationException(
                rule="ORDER_TOTALS_CONSISTENT",
                message="Order total must equal subtotal - discount + shipping and cannot be negative",
                details={
                    "subtotal_amount": str(self.subtotal_amount),
                    "discount_amount": str(self.discount_amount),
                    "shipping_amount": str(self.shipping_amount),
                    "total_amount": str(self.total_amount),
                },
            )

    # Status

    def apply_transition(
        self,
        target: OrderStatus,
        actor: StatusActor,
        notes: str | None = None,
        *,
        payment_attempt_id: int | None = None,
        tracking_number: str | None = None,
        shipping_date: datetime | None = None,
        at: datetime | None = None,
    ) -> OrderStatusTransition:
        """
        Move to an already validated target status.

        Appends the history entry, sets fulfilment dates and records an
        OrderStatusChanged event.
        """
        now = at or datetime.now(UTC)
        previous = self.status
        self.status = target

        if target == OrderStatus.SHIPPED:
            self.shipping_date = shipping_date or now
            if tracking_number:
                self.tracking_number = tracking_number
        elif target == OrderStatus.DELIVERED:
            self.delivery_date = now

        if notes and actor == StatusActor.ADMIN:
            self.admin_notes = notes

        entry = OrderStatusTransition(
            from_status=previous,
            to_status=target,
            actor=actor,
            notes=notes,
            payment_attempt_id=payment_attempt_id,
            created_at=now,
        )
        self._append_history(entry)
        self._record_event(
            OrderStatusChanged(
                order_id=self.id,
                order_number=self.order_number,
                from_status=previous.value,
                to_status=target.value,
                actor=actor.value,
                payment_attempt_id=payment_attempt_id,
            )
        )
        self.increment_version()
        self.touch()
        return entry

    def _append_history(self, entry: OrderStatusTransition) -> None:
        self.status_history.append(entry)
        self._new_history.append(entry)

    def pull_new_history(self) -> list[OrderStatusTransition]:
        """Hand unsaved history entries to the repository (once)."""
        entries = list(self._new_history)
        self._new_history.clear()
        return entries

    def reached_at(self, status: OrderStatus) -> datetime | None:
        """When the order first entered a status, from its history."""
        for entry in self.status_history:
            if entry.to_status == status:
                return entry.created_at
        return None

    # Helpers

    @property
    def item_count(self) -> int:
        """Total number of units (sum of quantities)."""
        return sum(item.quantity for item in self.items)

    def total(self) -> Money:
        return Money(amount=self.total_amount, currency=self.currency)

    def is_paid(self) -> bool:
        return self.status in (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED)
