"""
Payment Use Cases

Outbound payment initiation and inbound, idempotent payment verification.
Verification is the only path that moves an order to paid on behalf of
the gateway.

Verification is serialized three ways:
- a Redis lock/receipt per invoice short-circuits repeated callbacks
- the attempt and order rows are locked with SELECT ... FOR UPDATE
- the attempt's caused_transition flag is the authoritative answer
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from redis.exceptions import RedisError

from app.core.domain import (
    BusinessRuleViolationException,
    DomainEventPublisher,
    EntityNotFoundException,
    Money,
    ValidationException,
)
from app.domains.ecommerce.application.dto import GatewayPaymentMethod, GatewayPaymentStatus
from app.domains.ecommerce.application.ports import (
    IOrderRepository,
    IPaymentAttemptRepository,
    IPaymentGateway,
    IPaymentIdempotency,
    IUnitOfWork,
)
from app.domains.ecommerce.domain.entities.order import Order
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt, generate_payment_id
from app.domains.ecommerce.domain.services.order_state_machine import OrderStateMachine
from app.domains.ecommerce.domain.value_objects.order_status import (
    OrderStatus,
    PaymentAttemptStatus,
    StatusActor,
)

logger = logging.getLogger(__name__)

CASH_ON_DELIVERY_NAME = "Cash on Delivery"


def _ensure_payable(order: Order) -> None:
    """
    Raises:
        BusinessRuleViolationException: Order not awaiting payment or nothing to pay
    """
    if not order.status.accepts_payment():
        raise BusinessRuleViolationException(
            rule="ORDER_ACCEPTS_PAYMENT",
            message=f"Order {order.order_number} is {order.status.value} and cannot be paid",
            details={"order_id": order.id, "status": order.status.value},
        )
    if order.total_amount <= 0:
        raise BusinessRuleViolationException(
            rule="ORDER_HAS_AMOUNT_DUE",
            message=f"Order {order.order_number} has nothing to pay",
            details={"order_id": order.id},
        )


class ListPaymentMethodsUseCase:
    """
    Use Case: List Payment Methods

    Gateway methods for the amount plus the configured cash-on-delivery codes.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        gateway: IPaymentGateway,
        state_machine: OrderStateMachine,
        cash_on_delivery_methods: list[str],
    ):
        self.order_repository = order_repository
        self.gateway = gateway
        self.state_machine = state_machine
        self.cash_on_delivery_methods = [code.lower() for code in cash_on_delivery_methods]

    async def execute(self, amount: Decimal, currency: str) -> list[GatewayPaymentMethod]:
        methods: list[GatewayPaymentMethod] = []
        if amount > 0:
            methods.extend(await self.gateway.list_payment_methods(amount, currency))

        for code in self.cash_on_delivery_methods:
            methods.append(
                GatewayPaymentMethod(
                    method_id=None,
                    code=code,
                    name=CASH_ON_DELIVERY_NAME,
                    total_amount=Money(amount, currency).amount,
                    currency=currency,
                )
            )
        return methods

    async def for_order(self, order_id: int) -> list[GatewayPaymentMethod]:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundException("Order", order_id)
        return await self.execute(order.total_amount, order.currency)


@dataclass
class InitiatePaymentRequest:
    """Request to start paying an order."""

    order_id: int
    payment_method: str
    customer_ip: str | None = None
    user_agent: str | None = None


@dataclass
class InitiatePaymentResponse:
    """Created attempt and where to send the customer."""

    attempt: PaymentAttempt
    order: Order
    immediate_success: bool = False

    @property
    def payment_id(self) -> str:
        return self.attempt.payment_id

    @property
    def invoice_reference(self) -> str:
        return self.attempt.invoice_reference

    @property
    def redirect_url(self) -> str | None:
        return self.attempt.redirect_url


class InitiatePaymentUseCase:
    """
    Use Case: Initiate Payment

    Responsibilities:
    - Check the order can be paid
    - Resolve the method code to a gateway method
    - Create the gateway invoice and persist the attempt
    - Never change the order status

    Each call (including retries after a gateway error) is a new attempt.
    """

    def __init__(
        self,
        uow: IUnitOfWork,
        order_repository: IOrderRepository,
        payment_attempt_repository: IPaymentAttemptRepository,
        gateway: IPaymentGateway,
        state_machine: OrderStateMachine,
    ):
        self.uow = uow
        self.order_repository = order_repository
        self.payment_attempt_repository = payment_attempt_repository
        self.gateway = gateway
        self.state_machine = state_machine

    async def execute(self, request: InitiatePaymentRequest) -> InitiatePaymentResponse:
        """
        Raises:
            EntityNotFoundException: Unknown order
            BusinessRuleViolationException: Order cannot be paid
            ValidationException: Unknown payment method
            GatewayException: Gateway unreachable or rejected the call
        """
        order = await self.order_repository.get_by_id(request.order_id)
        if order is None:
            raise EntityNotFoundException("Order", request.order_id)

        _ensure_payable(order)
        method_code = (request.payment_method or "").strip().lower()
        if not method_code:
            raise ValidationException(message="payment_method is required", field="payment_method")

        if self.state_machine.is_cash_on_delivery(method_code):
            return await self._cash_on_delivery(order, method_code, request)

        method = await self._resolve_gateway_method(order, method_code)

        logger.info(f"[PAYMENT] Initiating {method.code} payment for order {order.order_number}")

        invoice = await self.gateway.execute_payment(
            method_id=method.method_id,
            amount=order.total_amount,
            currency=order.currency,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_mobile=order.customer_phone,
            customer_reference=order.order_number,
            user_defined_field=str(order.id),
        )

        attempt = PaymentAttempt(
            payment_id=generate_payment_id(),
            invoice_reference=invoice.invoice_id,
            order_id=order.id,
            payment_method_code=method.code,
            amount=order.total_amount,
            currency=order.currency,
            gateway_status=PaymentAttemptStatus.INITIATED,
            redirect_url=invoice.payment_url,
            customer_ip=request.customer_ip,
            user_agent=request.user_agent,
        )

        try:
            await self.payment_attempt_repository.add(attempt)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"[PAYMENT] Error saving attempt for invoice {invoice.invoice_id}: {e}")
            raise

        logger.info(f"[PAYMENT] Attempt {attempt.payment_id} created, invoice {attempt.invoice_reference}")
        return InitiatePaymentResponse(attempt=attempt, order=order)

    async def _resolve_gateway_method(self, order: Order, method_code: str) -> GatewayPaymentMethod:
        methods = await self.gateway.list_payment_methods(order.total_amount, order.currency)
        for method in methods:
            if method.code == method_code or (method.method_id is not None and str(method.method_id) == method_code):
                return method
        raise ValidationException(
            message=f"Payment method '{method_code}' is not available",
            field="payment_method",
            details={"available": [method.code for method in methods]},
        )

    async def _cash_on_delivery(
        self,
        order: Order,
        method_code: str,
        request: InitiatePaymentRequest,
    ) -> InitiatePaymentResponse:
        attempt = await self.payment_attempt_repository.get_cash_on_delivery_attempt(order.id)
        if attempt is None:
            attempt = PaymentAttempt.cash_on_delivery(
                order_id=order.id,
                order_number=order.order_number,
                payment_method_code=method_code,
                amount=order.total_amount,
                currency=order.currency,
            )
            attempt.customer_ip = request.customer_ip
            attempt.user_agent = request.user_agent
            try:
                await self.payment_attempt_repository.add(attempt)
                await self.uow.commit()
            except Exception as e:
                await self.uow.rollback()
                logger.error(f"[PAYMENT] Error saving cash-on-delivery attempt for {order.order_number}: {e}")
                raise

        logger.info(f"[PAYMENT] Cash on delivery selected for order {order.order_number}")
        return InitiatePaymentResponse(attempt=attempt, order=order, immediate_success=True)


@dataclass
class VerifyPaymentResponse:
    """Order snapshot after verification."""

    order: Order
    attempt: PaymentAttempt | None
    replayed: bool = False

    @property
    def payment_status(self) -> str | None:
        return self.attempt.gateway_status.value if self.attempt else None


class VerifyPaymentUseCase:
    """
    Use Case: Verify Payment

    Calling it N times for the same invoice yields one paid transition and
    the same order data every time.
    """

    def __init__(
        self,
        uow: IUnitOfWork,
        order_repository: IOrderRepository,
        payment_attempt_repository: IPaymentAttemptRepository,
        gateway: IPaymentGateway,
        idempotency: IPaymentIdempotency,
        state_machine: OrderStateMachine,
    ):
        self.uow = uow
        self.order_repository = order_repository
        self.payment_attempt_repository = payment_attempt_repository
        self.gateway = gateway
        self.idempotency = idempotency
        self.state_machine = state_machine

    async def execute(
        self,
        invoice_reference: str | None = None,
        gateway_payment_id: str | None = None,
    ) -> VerifyPaymentResponse:
        """
        Verify an invoice and apply its outcome.

        Args:
            invoice_reference: Gateway invoice id (preferred)
            gateway_payment_id: Gateway payment id, resolved to the invoice first

        Raises:
            ValidationException: No reference given, or amount/currency mismatch
            EntityNotFoundException: No attempt for the invoice
            GatewayException: Gateway unreachable (nothing is changed)
        """
        prefetched: GatewayPaymentStatus | None = None
        reference = (invoice_reference or "").strip()
        if not reference:
            payment_id = (gateway_payment_id or "").strip()
            if not payment_id:
                raise ValidationException(message="invoice or paymentId is required", field="invoice")
            prefetched = await self.gateway.get_payment_status(payment_id, key_type="PaymentId")
            reference = prefetched.invoice_id

        try:
            is_duplicate, verified_order_id = await self.idempotency.check_and_lock(reference)
        except RedisError as e:
            logger.warning(f"[IDEMPOTENCY] Receipt store unavailable for invoice {reference}, using database checks: {e}")
            is_duplicate, verified_order_id = True, None

        if verified_order_id is not None:
            order = await self.order_repository.get_by_id(verified_order_id)
            if order is not None:
                attempt = await self.payment_attempt_repository.get_by_invoice_reference(reference)
                logger.info(f"[PAYMENT] Invoice {reference} already verified, returning order {order.order_number}")
                return VerifyPaymentResponse(order=order, attempt=attempt, replayed=True)

        holds_lock = not is_duplicate
        try:
            response = await self._verify(reference, prefetched)
        except Exception as e:
            await self.uow.rollback()
            if holds_lock:
                await self._drop_lock(reference, str(e))
            logger.error(f"[PAYMENT] Verification of invoice {reference} failed: {e}")
            raise

        await self._store_receipt(reference, response, holds_lock)

        events = response.order.get_domain_events()
        response.order.clear_domain_events()
        await DomainEventPublisher.publish_all(events)
        return response

    async def _store_receipt(self, reference: str, response: VerifyPaymentResponse, holds_lock: bool) -> None:
        # the outcome is already committed here
        try:
            if response.attempt is not None and response.attempt.gateway_status == PaymentAttemptStatus.PAID:
                await self.idempotency.mark_complete(reference, response.order.id)
            elif holds_lock:
                await self.idempotency.release(reference)
        except RedisError as e:
            logger.warning(f"[IDEMPOTENCY] Could not record receipt for invoice {reference}: {e}")

    async def _drop_lock(self, reference: str, error: str) -> None:
        try:
            await self.idempotency.mark_failed(reference, error)
        except RedisError as e:
            logger.warning(f"[IDEMPOTENCY] Could not release lock for invoice {reference}: {e}")

    async def _verify(self, reference: str, prefetched: GatewayPaymentStatus | None) -> VerifyPaymentResponse:
        attempt = await self.payment_attempt_repository.get_by_invoice_reference(reference, for_update=True)
        if attempt is None:
            raise EntityNotFoundException("PaymentAttempt", reference, message=f"No payment found for invoice {reference}")

        if attempt.caused_transition:
            order = await self._load_order(attempt.order_id, for_update=False)
            await self.uow.rollback()
            logger.info(f"[PAYMENT] Invoice {reference} already moved order {order.order_number} to paid")
            return VerifyPaymentResponse(order=order, attempt=attempt, replayed=True)

        if attempt.is_cash_on_delivery():
            # Settled on delivery, the gateway knows nothing about it
            order = await self._load_order(attempt.order_id, for_update=False)
            await self.uow.rollback()
            return VerifyPaymentResponse(order=order, attempt=attempt, replayed=False)

        order = await self._load_order(attempt.order_id, for_update=True)
        status = prefetched or await self.gateway.get_payment_status(reference, key_type="InvoiceId")

        if status.is_paid:
            self._ensure_amount_matches(attempt, status)
            replayed = self._apply_paid(order, attempt, status)
        elif status.is_failed or status.is_cancelled:
            outcome = PaymentAttemptStatus.CANCELLED if status.is_cancelled else PaymentAttemptStatus.FAILED
            attempt.mark_unsuccessful(outcome)
            replayed = False
            logger.info(f"[PAYMENT] Invoice {reference} {outcome.value}, order {order.order_number} stays {order.status.value}")
        else:
            attempt.mark_pending()
            replayed = False
            logger.info(f"[PAYMENT] Invoice {reference} still pending")

        await self.payment_attempt_repository.save(attempt)
        await self.order_repository.save(order)
        await self.uow.commit()

        return VerifyPaymentResponse(order=order, attempt=attempt, replayed=replayed)

    def _apply_paid(self, order: Order, attempt: PaymentAttempt, status: GatewayPaymentStatus) -> bool:
        """Returns True when no transition was applied."""
        if order.is_paid():
            attempt.mark_paid(caused_transition=False, gateway_payment_id=status.gateway_payment_id)
            logger.info(f"[PAYMENT] Order {order.order_number} already paid, attempt {attempt.payment_id} recorded only")
            return True

        if not self.state_machine.can_transition(order, OrderStatus.PAID, StatusActor.GATEWAY):
            attempt.mark_paid(caused_transition=False, gateway_payment_id=status.gateway_payment_id)
            logger.warning(
                f"[PAYMENT] Invoice {attempt.invoice_reference} paid but order {order.order_number} "
                f"is {order.status.value}; payment needs manual review"
            )
            return True

        self.state_machine.transition(
            order,
            OrderStatus.PAID,
            StatusActor.GATEWAY,
            notes=f"Payment confirmed by gateway (invoice {attempt.invoice_reference})",
            payment_attempt_id=attempt.id,
        )
        attempt.mark_paid(caused_transition=True, gateway_payment_id=status.gateway_payment_id)
        logger.info(f"[PAYMENT] Order {order.order_number} paid via invoice {attempt.invoice_reference}")
        return False

    def _ensure_amount_matches(self, attempt: PaymentAttempt, status: GatewayPaymentStatus) -> None:
        """
        Raises:
            ValidationException: Reported amount or currency differs from the attempt
        """
        expected = Money(attempt.amount, attempt.currency)
        currency_matches = not status.currency or status.currency.upper() == attempt.currency.upper()
        amount_matches = Money(status.amount, attempt.currency).amount == expected.amount
        if not (currency_matches and amount_matches):
            logger.error(
                f"[PAYMENT] Amount mismatch for invoice {attempt.invoice_reference}: "
                f"expected {expected}, gateway reported {status.amount} {status.currency}"
            )
            raise ValidationException(
                message="Paid amount does not match the order total",
                field="amount",
                details={
                    "invoice_reference": attempt.invoice_reference,
                    "expected_amount": str(expected.amount),
                    "expected_currency": attempt.currency,
                    "reported_amount": str(status.amount),
                    "reported_currency": status.currency,
                },
            )

    async def _load_order(self, order_id: int, for_update: bool) -> Order:
        order = await self.order_repository.get_by_id(order_id, for_update=for_update)
        if order is None:
            raise EntityNotFoundException("Order", order_id)
        return order


__all__ = [
    "ListPaymentMethodsUseCase",
    "InitiatePaymentUseCase",
    "InitiatePaymentRequest",
    "InitiatePaymentResponse",
    "VerifyPaymentUseCase",
    "VerifyPaymentResponse",
]
