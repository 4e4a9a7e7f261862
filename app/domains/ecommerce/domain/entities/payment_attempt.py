"""
Payment Attempt Entity for E-commerce Domain

One initiation of a payment for an order. An order may have many attempts
(retries); at most one of them ever moves the order to paid.
"""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from app.core.domain import Entity

from ..value_objects.order_status import PaymentAttemptStatus

PAYMENT_ID_PREFIX = "PAY"
CASH_ON_DELIVERY_REFERENCE_PREFIX = "COD"


def generate_payment_id() -> str:
    """Public, unguessable payment identifier (PAY-XXXXXXXXXXXX)."""
    return f"{PAYMENT_ID_PREFIX}-{secrets.token_hex(6).upper()}"


@dataclass
class PaymentAttempt(Entity[int]):
    """
    Payment attempt for an order.

    invoice_reference is the gateway invoice id and the idempotency key
    of payment verification.
    """

    payment_id: str = ""
    invoice_reference: str = ""
    order_id: int = 0
    payment_method_code: str = ""
    amount: Decimal = Decimal("0")
    currency: str = "KWD"
    gateway_status: PaymentAttemptStatus = PaymentAttemptStatus.INITIATED
    redirect_url: str | None = None
    customer_ip: str | None = None
    user_agent: str | None = None
    gateway_payment_id: str | None = None
    verified_at: datetime | None = None
    caused_transition: bool = False

    @classmethod
    def cash_on_delivery(
        cls,
        order_id: int,
        order_number: str,
        payment_method_code: str,
        amount: Decimal,
        currency: str,
    ) -> "PaymentAttempt":
        """Attempt recorded at checkout for orders settled on delivery."""
        return cls(
            payment_id=generate_payment_id(),
            invoice_reference=f"{CASH_ON_DELIVERY_REFERENCE_PREFIX}-{order_number}",
            order_id=order_id,
            payment_method_code=payment_method_code,
            amount=amount,
            currency=currency,
            gateway_status=PaymentAttemptStatus.CASH_ON_DELIVERY,
        )

    def is_cash_on_delivery(self) -> bool:
        return self.gateway_status == PaymentAttemptStatus.CASH_ON_DELIVERY

    def mark_paid(self, caused_transition: bool, gateway_payment_id: str | None = None) -> None:
        """Record a confirmed payment; caused_transition only for the attempt that moved the order."""
        self.gateway_status = PaymentAttemptStatus.PAID
        self.caused_transition = caused_transition
        self.verified_at = datetime.now(UTC)
        if gateway_payment_id:
            self.gateway_payment_id = gateway_payment_id
        self.touch()

    def mark_unsuccessful(self, status: PaymentAttemptStatus) -> None:
        """Record a failed or cancelled payment; the order is left untouched."""
        if not status.is_unsuccessful():
            raise ValueError(f"{status.value} is not a failure status")
        self.gateway_status = status
        self.verified_at = datetime.now(UTC)
        self.touch()

    def mark_pending(self) -> None:
        self.gateway_status = PaymentAttemptStatus.PENDING
        self.touch()
