"""
Create Order Use Case

Business logic for creating new orders.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.core.domain import Address, DomainEventPublisher, Email, PhoneNumber, ValidationException
from app.domains.ecommerce.application.ports import (
    IDiscountCodeRepository,
    IOrderRepository,
    IPaymentAttemptRepository,
    IUnitOfWork,
)
from app.domains.ecommerce.application.use_cases.checkout import CheckoutPricer
from app.domains.ecommerce.application.use_cases.order_acceptance import OrderAcceptanceGate
from app.domains.ecommerce.domain.entities.order import Order, generate_order_number
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt
from app.domains.ecommerce.domain.events import OrderPlaced
from app.domains.ecommerce.domain.services.order_pricing import CartLine
from app.domains.ecommerce.domain.services.order_state_machine import OrderStateMachine
from app.domains.ecommerce.domain.value_objects import OrderStatus

logger = logging.getLogger(__name__)


@dataclass
class CreateOrderRequest:
    """Request for creating an order."""

    customer_name: str
    customer_phone: str
    street: str
    city: str
    items: list[CartLine]
    payment_method: str
    customer_email: str | None = None
    governorate: str | None = None
    postal_code: str | None = None
    country: str = "Kuwait"
    discount_code: str | None = None


@dataclass
class CreateOrderResponse:
    """Response from order creation."""

    order: Order
    payment_attempt: PaymentAttempt | None = None
    warnings: list[str] = field(default_factory=list)


class CreateOrderUseCase:
    """
    Use Case: Create Order

    Responsibilities:
    - Ask the acceptance gate first
    - Price every line and the order-level code
    - Create the order in its initial status with its history entry
    - Count the code usage and record the cash-on-delivery attempt
    - Commit everything in one transaction, then publish OrderPlaced
    """

    def __init__(
        self,
        uow: IUnitOfWork,
        order_repository: IOrderRepository,
        payment_attempt_repository: IPaymentAttemptRepository,
        discount_code_repository: IDiscountCodeRepository,
        gate: OrderAcceptanceGate,
        pricer: CheckoutPricer,
        state_machine: OrderStateMachine,
        order_number_prefix: str = "ORD",
    ):
        """
        Initialize use case with dependencies.

        Args:
            uow: Transaction boundary (the request's AsyncSession)
            order_repository: Repository for order persistence
            payment_attempt_repository: Repository for the cash-on-delivery attempt
            discount_code_repository: Repository for counting code usage
            gate: Order acceptance gate
            pricer: Checkout pricing shared with the preview endpoint
            state_machine: Decides the initial status
            order_number_prefix: Prefix of generated order numbers
        """
        self.uow = uow
        self.order_repository = order_repository
        self.payment_attempt_repository = payment_attempt_repository
        self.discount_code_repository = discount_code_repository
        self.gate = gate
        self.pricer = pricer
        self.state_machine = state_machine
        self.order_number_prefix = order_number_prefix

    async def execute(self, request: CreateOrderRequest) -> CreateOrderResponse:
        """
        Create a new order.

        Raises:
            OrdersClosedException: The gate is closed (nothing is persisted)
            ValidationException: Invalid customer data, cart or discount code, or a zero
                total on an online payment method
        """
        await self.gate.ensure_open()

        self._validate_request(request)
        now = datetime.now(UTC)

        pricing = await self.pricer.price(request.items, request.discount_code, at=now)
        payment_method = request.payment_method.strip().lower()
        initial_status = self.state_machine.initial_status_for(payment_method)

        # the gateway cannot invoice a zero amount
        if initial_status == OrderStatus.AWAITING_PAYMENT and pricing.total.is_zero():
            raise ValidationException(
                message="Orders with nothing to pay cannot use an online payment method",
                field="payment_method",
                details={"payment_method": payment_method, "total": str(pricing.total.amount)},
            )

        order = Order.place(
            order_number=generate_order_number(self.order_number_prefix, now),
            initial_status=initial_status,
            items=pricing.order_items(),
            subtotal=pricing.subtotal,
            discount=pricing.discount,
            shipping=pricing.shipping,
            total=pricing.total,
            customer_name=request.customer_name.strip(),
            customer_phone=str(PhoneNumber(request.customer_phone)),
            customer_email=str(Email(request.customer_email)) if request.customer_email else None,
            shipping_address=Address(
                street=request.street.strip(),
                city=request.city.strip(),
                governorate=request.governorate,
                postal_code=request.postal_code,
                country=request.country or "Kuwait",
            ),
            payment_method=payment_method,
            discount_code=pricing.discount_code.code if pricing.discount_code else None,
        )

        attempt: PaymentAttempt | None = None
        try:
            await self.order_repository.add(order)

            if pricing.discount_code is not None:
                counted = await self.discount_code_repository.increment_usage(pricing.discount_code.id)
                if not counted:
                    raise ValidationException(
                        message="This discount code has reached its usage limit",
                        field="discount_code",
                        details={"code": pricing.discount_code.code},
                    )

            if self.state_machine.is_cash_on_delivery(payment_method):
                attempt = PaymentAttempt.cash_on_delivery(
                    order_id=order.id,
                    order_number=order.order_number,
                    payment_method_code=payment_method,
                    amount=order.total_amount,
                    currency=order.currency,
                )
                await self.payment_attempt_repository.add(attempt)

            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error creating order {order.order_number}: {e}")
            raise

        logger.info(
            f"Order created: {order.order_number} ({order.status.value}) "
            f"total {order.total_amount} {order.currency}, {order.item_count} units"
        )

        await DomainEventPublisher.publish(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                status=order.status.value,
                total_amount=order.total_amount,
                currency=order.currency,
            )
        )

        return CreateOrderResponse(order=order, payment_attempt=attempt)

    def _validate_request(self, request: CreateOrderRequest) -> None:
        """Collect every customer data problem and raise them together."""
        errors: list[str] = []

        if not request.customer_name or not request.customer_name.strip():
            errors.append("customer_name is required")
        if not request.payment_method or not request.payment_method.strip():
            errors.append("payment_method is required")
        if not request.street or not request.street.strip():
            errors.append("street is required")
        if not request.city or not request.city.strip():
            errors.append("city is required")

        try:
            PhoneNumber(request.customer_phone or "")
        except ValueError:
            errors.append("customer_phone is not a valid phone number")

        if request.customer_email:
            try:
                Email(request.customer_email)
            except ValueError:
                errors.append("customer_email is not a valid email address")

        if errors:
            raise ValidationException(
                message=f"Invalid order: {'; '.join(errors)}",
                field="order",
                details={"errors": errors},
            )


__all__ = ["CreateOrderUseCase", "CreateOrderRequest", "CreateOrderResponse"]
