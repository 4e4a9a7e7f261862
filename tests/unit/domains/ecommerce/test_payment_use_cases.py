"""
Unit Tests for payment initiation and idempotent verification
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.domain import BusinessRuleViolationException, EntityNotFoundException, ValidationException
from app.domains.ecommerce.application.use_cases import InitiatePaymentRequest
from app.domains.ecommerce.domain.events import OrderStatusChanged
from app.domains.ecommerce.domain.value_objects import OrderStatus, PaymentAttemptStatus, StatusActor
from storefront_fakes import Storefront, make_order


@pytest.fixture
def store():
    store = Storefront()
    store.order_repo.seed(make_order(OrderStatus.AWAITING_PAYMENT, total="20.000", order_id=1))
    return store


async def initiate(store, method="kn", order_id=1):
    return await store.initiate_payment().execute(
        InitiatePaymentRequest(order_id=order_id, payment_method=method, customer_ip="10.0.0.5", user_agent="pytest")
    )


class TestListPaymentMethods:
    async def test_gateway_methods_plus_cash_on_delivery(self, store):
        methods = await store.payment_methods().for_order(1)

        assert [method.code for method in methods] == ["kn", "vm", "cod"]
        assert methods[-1].name == "Cash on Delivery"
        assert methods[-1].total_amount == Decimal("20.000")

    async def test_zero_amount_skips_gateway(self, store):
        methods = await store.payment_methods().execute(Decimal("0"), "KWD")

        assert [method.code for method in methods] == ["cod"]

    async def test_unknown_order(self, store):
        with pytest.raises(EntityNotFoundException):
            await store.payment_methods().for_order(99)


class TestInitiatePayment:
    async def test_creates_attempt_with_redirect(self, store):
        response = await initiate(store)

        assert response.redirect_url.startswith("https://pay.example/")
        assert response.payment_id.startswith("PAY-")
        assert response.immediate_success is False
        attempt = store.attempt_repo.attempts[response.attempt.id]
        assert attempt.gateway_status == PaymentAttemptStatus.INITIATED
        assert attempt.amount == Decimal("20.000")
        assert attempt.customer_ip == "10.0.0.5"
        assert store.order_repo.orders[1].status == OrderStatus.AWAITING_PAYMENT
        assert store.gateway.executed[0]["customer_reference"] == "ORD-20260315-ABC123"

    async def test_method_can_be_given_by_gateway_id(self, store):
        response = await initiate(store, method="2")

        assert response.attempt.payment_method_code == "vm"

    async def test_each_call_is_a_new_attempt(self, store):
        first = await initiate(store)
        second = await initiate(store)

        assert first.invoice_reference != second.invoice_reference
        assert len(store.attempt_repo.attempts) == 2

    async def test_unknown_method(self, store):
        with pytest.raises(ValidationException) as exc_info:
            await initiate(store, method="applepay")

        assert exc_info.value.details["available"] == ["kn", "vm"]

    async def test_paid_order_cannot_be_paid_again(self, store):
        store.order_repo.orders[1].status = OrderStatus.PAID

        with pytest.raises(BusinessRuleViolationException):
            await initiate(store)

    async def test_cash_on_delivery_succeeds_immediately(self, store):
        response = await initiate(store, method="cod")

        assert response.immediate_success is True
        assert response.redirect_url is None
        assert response.attempt.gateway_status == PaymentAttemptStatus.CASH_ON_DELIVERY
        assert store.gateway.executed == []

        again = await initiate(store, method="cod")
        assert again.attempt is response.attempt


class TestVerifyPayment:
    """Test cases for VerifyPaymentUseCase"""

    async def test_paid_invoice_moves_order_to_paid_once(self, store, captured_events):
        initiated = await initiate(store)
        invoice = initiated.invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000")

        first = await store.verify_payment().execute(invoice_reference=invoice)

        assert first.order.status == OrderStatus.PAID
        assert first.replayed is False
        assert first.payment_status == "paid"
        assert first.attempt.caused_transition is True
        assert first.attempt.gateway_payment_id == "PID-1"
        paid_entries = [row for row in store.order_repo.history_rows if row.to_status == OrderStatus.PAID]
        assert len(paid_entries) == 1
        assert paid_entries[0].actor == StatusActor.GATEWAY
        assert paid_entries[0].payment_attempt_id == first.attempt.id
        assert len(captured_events) == 1
        assert isinstance(captured_events[0], OrderStatusChanged)

        second = await store.verify_payment().execute(invoice_reference=invoice)

        assert second.replayed is True
        assert second.order is first.order
        assert second.order.status == OrderStatus.PAID
        assert len([row for row in store.order_repo.history_rows if row.to_status == OrderStatus.PAID]) == 1
        assert len(captured_events) == 1
        assert len(store.gateway.status_calls) == 1

    async def test_replay_without_receipt_uses_attempt_flag(self, store, captured_events):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000")
        await store.verify_payment().execute(invoice_reference=invoice)
        store.idempotency.keys.clear()

        again = await store.verify_payment().execute(invoice_reference=invoice)

        assert again.replayed is True
        assert again.order.status == OrderStatus.PAID
        assert len(captured_events) == 1
        assert len(store.gateway.status_calls) == 1

    async def test_verify_by_gateway_payment_id(self, store):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000", payment_id="07072026")

        response = await store.verify_payment().execute(gateway_payment_id="07072026")

        assert response.order.status == OrderStatus.PAID
        assert store.gateway.status_calls[0] == ("07072026", "PaymentId")

    async def test_amount_mismatch_changes_nothing(self, store, captured_events):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "2.000")

        with pytest.raises(ValidationException) as exc_info:
            await store.verify_payment().execute(invoice_reference=invoice)

        assert exc_info.value.details["expected_amount"] == "20.000"
        assert store.order_repo.orders[1].status == OrderStatus.AWAITING_PAYMENT
        assert invoice not in store.idempotency.keys
        assert store.uow.rollbacks == 1
        assert captured_events == []

    async def test_currency_mismatch(self, store):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000", currency="USD")

        with pytest.raises(ValidationException):
            await store.verify_payment().execute(invoice_reference=invoice)

        assert store.order_repo.orders[1].status == OrderStatus.AWAITING_PAYMENT

    @pytest.mark.parametrize(
        "gateway_status,expected",
        [
            ("Failed", PaymentAttemptStatus.FAILED),
            ("Expired", PaymentAttemptStatus.FAILED),
            ("Canceled", PaymentAttemptStatus.CANCELLED),
        ],
    )
    async def test_unsuccessful_invoice_keeps_order(self, store, gateway_status, expected):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, gateway_status, "20.000")

        response = await store.verify_payment().execute(invoice_reference=invoice)

        assert response.attempt.gateway_status == expected
        assert response.order.status == OrderStatus.AWAITING_PAYMENT
        assert invoice not in store.idempotency.keys

    async def test_retry_after_failed_attempt_can_still_pay(self, store):
        failed = (await initiate(store)).invoice_reference
        store.gateway.set_status(failed, "Failed", "20.000")
        await store.verify_payment().execute(invoice_reference=failed)

        retry = (await initiate(store)).invoice_reference
        store.gateway.set_status(retry, "Paid", "20.000", payment_id="PID-2")
        response = await store.verify_payment().execute(invoice_reference=retry)

        assert response.order.status == OrderStatus.PAID

    async def test_pending_invoice_releases_lock(self, store):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Pending", "20.000")

        response = await store.verify_payment().execute(invoice_reference=invoice)

        assert response.attempt.gateway_status == PaymentAttemptStatus.PENDING
        assert invoice not in store.idempotency.keys

    async def test_paid_invoice_for_cancelled_order_is_recorded_only(self, store, captured_events):
        invoice = (await initiate(store)).invoice_reference
        store.order_repo.orders[1].status = OrderStatus.CANCELLED
        store.gateway.set_status(invoice, "Paid", "20.000")

        response = await store.verify_payment().execute(invoice_reference=invoice)

        assert response.order.status == OrderStatus.CANCELLED
        assert response.attempt.gateway_status == PaymentAttemptStatus.PAID
        assert response.attempt.caused_transition is False
        assert captured_events == []

    async def test_second_paid_invoice_does_not_transition_again(self, store, captured_events):
        first = (await initiate(store)).invoice_reference
        second = (await initiate(store)).invoice_reference
        store.gateway.set_status(first, "Paid", "20.000", payment_id="PID-1")
        store.gateway.set_status(second, "Paid", "20.000", payment_id="PID-2")

        await store.verify_payment().execute(invoice_reference=first)
        response = await store.verify_payment().execute(invoice_reference=second)

        assert response.replayed is True
        assert response.attempt.caused_transition is False
        assert len(captured_events) == 1

    async def test_cash_on_delivery_never_asks_gateway(self, store):
        cod = await initiate(store, method="cod")

        response = await store.verify_payment().execute(invoice_reference=cod.invoice_reference)

        assert response.order.status == OrderStatus.AWAITING_PAYMENT
        assert store.gateway.status_calls == []

    async def test_unknown_invoice(self, store):
        with pytest.raises(EntityNotFoundException):
            await store.verify_payment().execute(invoice_reference="424242")

    async def test_reference_required(self, store):
        with pytest.raises(ValidationException):
            await store.verify_payment().execute()


def unavailable_receipt_store() -> Mock:
    idempotency = Mock()
    for name in ("check_and_lock", "mark_complete", "mark_failed", "release"):
        setattr(idempotency, name, AsyncMock(side_effect=RedisConnectionError("redis unavailable")))
    return idempotency


class TestVerifyPaymentWithoutRedis:
    async def test_paid_invoice_is_applied_from_database(self, store, captured_events):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000")
        store.idempotency = unavailable_receipt_store()

        first = await store.verify_payment().execute(invoice_reference=invoice)
        second = await store.verify_payment().execute(invoice_reference=invoice)

        assert first.order.status == OrderStatus.PAID
        assert first.replayed is False
        assert second.replayed is True
        assert len([row for row in store.order_repo.history_rows if row.to_status == OrderStatus.PAID]) == 1
        assert len(captured_events) == 1
        assert len(store.gateway.status_calls) == 1

    async def test_lost_receipt_after_commit_is_not_an_error(self, store):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000")
        store.idempotency.mark_complete = AsyncMock(side_effect=RedisConnectionError("redis unavailable"))

        response = await store.verify_payment().execute(invoice_reference=invoice)

        assert response.order.status == OrderStatus.PAID
        assert store.uow.commits == 1

    async def test_domain_error_survives_lock_cleanup_failure(self, store):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "2.000")
        store.idempotency.mark_failed = AsyncMock(side_effect=RedisConnectionError("redis unavailable"))

        with pytest.raises(ValidationException):
            await store.verify_payment().execute(invoice_reference=invoice)

        assert store.order_repo.orders[1].status == OrderStatus.AWAITING_PAYMENT


class TestConcurrentVerification:
    @pytest.mark.parametrize("with_receipts", [True, False])
    async def test_one_of_many_callbacks_moves_order_to_paid(self, store, captured_events, with_receipts):
        invoice = (await initiate(store)).invoice_reference
        store.gateway.set_status(invoice, "Paid", "20.000")
        if not with_receipts:
            store.idempotency = unavailable_receipt_store()

        responses = await asyncio.gather(*(store.verify_payment().execute(invoice_reference=invoice) for _ in range(5)))

        assert [response.replayed for response in responses].count(False) == 1
        assert all(response.order.status == OrderStatus.PAID for response in responses)
        assert len([row for row in store.order_repo.history_rows if row.to_status == OrderStatus.PAID]) == 1
        assert len(captured_events) == 1
        assert len(store.gateway.status_calls) == 1
