"""
Unit Tests for admin use cases: status override, store flags and order reads
"""

from decimal import Decimal

import pytest

from app.core.domain import (
    EntityNotFoundException,
    OrdersClosedException,
    StateTransitionException,
    ValidationException,
)
from app.domains.ecommerce.application.use_cases import BulkForceOrderStatusRequest, ForceOrderStatusRequest
from app.domains.ecommerce.domain.value_objects import OrderStatus, StatusActor
from storefront_fakes import Storefront, make_order


def seeded_store(*statuses: OrderStatus) -> Storefront:
    store = Storefront()
    for index, status in enumerate(statuses, start=1):
        store.order_repo.seed(make_order(status, order_id=index, order_number=f"ORD-20260315-A0000{index}"))
    return store


class TestForceOrderStatus:
    async def test_admin_ships_paid_order(self, captured_events):
        store = seeded_store(OrderStatus.PAID)

        order = await store.force_status().execute(
            ForceOrderStatusRequest(order_id=1, status=OrderStatus.SHIPPED, admin_notes="DHL", tracking_number="TRK-1")
        )

        assert order.status == OrderStatus.SHIPPED
        assert order.tracking_number == "TRK-1"
        assert order.admin_notes == "DHL"
        assert store.order_repo.history_rows[-1].actor == StatusActor.ADMIN
        assert store.uow.commits == 1
        assert len(captured_events) == 1
        assert captured_events[0].actor == "admin"

    async def test_illegal_target_rolls_back(self, captured_events):
        store = seeded_store(OrderStatus.DELIVERED)

        with pytest.raises(StateTransitionException):
            await store.force_status().execute(ForceOrderStatusRequest(order_id=1, status=OrderStatus.PAID))

        assert store.order_repo.orders[1].status == OrderStatus.DELIVERED
        assert store.uow.rollbacks == 1
        assert captured_events == []

    async def test_unknown_order(self):
        store = seeded_store()

        with pytest.raises(EntityNotFoundException):
            await store.force_status().execute(ForceOrderStatusRequest(order_id=5, status=OrderStatus.CANCELLED))


class TestBulkForceOrderStatus:
    async def test_all_orders_move(self, captured_events):
        store = seeded_store(OrderStatus.PAID, OrderStatus.PAID, OrderStatus.SHIPPED)

        orders = await store.bulk_status().execute(
            BulkForceOrderStatusRequest(order_ids=[3, 1, 2, 1], status=OrderStatus.CANCELLED, admin_notes="Recall")
        )

        assert [order.id for order in orders] == [1, 2, 3]
        assert all(order.status == OrderStatus.CANCELLED for order in orders)
        assert store.uow.commits == 1
        assert len(captured_events) == 3

    async def test_one_offender_blocks_everyone(self, captured_events):
        store = seeded_store(OrderStatus.PAID, OrderStatus.DELIVERED, OrderStatus.PAID)

        with pytest.raises(StateTransitionException) as exc_info:
            await store.bulk_status().execute(BulkForceOrderStatusRequest(order_ids=[1, 2, 3], status=OrderStatus.SHIPPED))

        offenders = exc_info.value.details["orders"]
        assert [item["order_id"] for item in offenders] == [2]
        assert offenders[0]["status"] == "delivered"
        assert [order.status for order in store.order_repo.orders.values()] == [
            OrderStatus.PAID,
            OrderStatus.DELIVERED,
            OrderStatus.PAID,
        ]
        assert store.order_repo.history_rows == []
        assert store.uow.commits == 0
        assert captured_events == []

    async def test_missing_ids(self):
        store = seeded_store(OrderStatus.PAID)

        with pytest.raises(EntityNotFoundException):
            await store.bulk_status().execute(BulkForceOrderStatusRequest(order_ids=[1, 42], status=OrderStatus.SHIPPED))

        assert store.order_repo.orders[1].status == OrderStatus.PAID

    async def test_empty_list(self):
        with pytest.raises(ValidationException):
            await seeded_store().bulk_status().execute(BulkForceOrderStatusRequest(order_ids=[], status=OrderStatus.PAID))


class TestOrderReads:
    async def test_list_orders_filters_and_clamps(self):
        store = seeded_store(OrderStatus.PAID, OrderStatus.PENDING, OrderStatus.PAID)

        response = await store.list_orders().execute(status=OrderStatus.PAID, limit=1000)

        assert response.total == 2
        assert response.limit == 200
        assert [order.id for order in response.orders] == [3, 1]

    async def test_admin_detail_includes_attempts(self):
        store = seeded_store(OrderStatus.AWAITING_PAYMENT)

        detail = await store.admin_order().execute(1)

        assert detail.order.id == 1
        assert detail.payment_attempts == []

    async def test_get_by_order_number_is_case_insensitive(self):
        store = seeded_store(OrderStatus.PAID)

        order = await store.get_order().by_order_number("ord-20260315-a00001")

        assert order.id == 1

    async def test_get_unknown_order(self):
        with pytest.raises(EntityNotFoundException):
            await seeded_store().get_order().by_id(3)


class TestOrderAcceptanceGate:
    async def test_defaults_to_open(self):
        store = Storefront()

        assert await store.gate.is_open() is True
        await store.gate.ensure_open()

    async def test_closing_and_reopening(self):
        store = Storefront()

        state = await store.gate.set_open(False, "  Eid holiday  ", changed_by="admin")
        assert state.status == "closed"
        assert state.message == "Eid holiday"

        with pytest.raises(OrdersClosedException, match="Eid holiday"):
            await store.gate.ensure_open()

        reopened = await store.gate.toggle(changed_by="admin")
        assert reopened.orders_enabled is True
        assert store.uow.commits == 2
        assert len(store.acceptance_repo.history) == 1

    async def test_closed_without_message_uses_default(self):
        store = Storefront(orders_enabled=False)

        with pytest.raises(OrdersClosedException, match="Closed for today"):
            await store.gate.ensure_open()


class TestShippingCost:
    async def test_default_is_free(self):
        store = Storefront()

        assert (await store.shipping_service.current_money()).is_zero()

    async def test_replace(self):
        store = Storefront()

        state = await store.shipping_service.replace(Decimal("1.25"), changed_by="admin")

        assert state.amount == Decimal("1.250")
        assert state.currency == "KWD"
        assert (await store.shipping_service.current()).changed_by == "admin"

    async def test_negative_amount(self):
        with pytest.raises(ValidationException):
            await Storefront().shipping_service.replace(Decimal("-1"))
