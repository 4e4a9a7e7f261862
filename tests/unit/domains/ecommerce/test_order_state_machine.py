"""
Unit Tests for the Order Status State Machine

Covers the transition graph, actor handling and the idempotent gateway replay.
"""

from datetime import UTC, datetime

import pytest

from app.core.domain import StateTransitionException
from app.domains.ecommerce.domain.events import OrderStatusChanged
from app.domains.ecommerce.domain.services import OrderStateMachine
from app.domains.ecommerce.domain.value_objects import OrderStatus, StatusActor
from storefront_fakes import make_order


@pytest.fixture
def machine():
    return OrderStateMachine(["cod", "cash"])


class TestOrderStatusGraph:
    """Tests for the transition table itself"""

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.PAID),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.AWAITING_PAYMENT, OrderStatus.PAID),
            (OrderStatus.AWAITING_PAYMENT, OrderStatus.CANCELLED),
            (OrderStatus.PAID, OrderStatus.SHIPPED),
            (OrderStatus.PAID, OrderStatus.CANCELLED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert current.can_transition_to(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.AWAITING_PAYMENT, OrderStatus.DELIVERED),
            (OrderStatus.PAID, OrderStatus.PENDING),
            (OrderStatus.SHIPPED, OrderStatus.PAID),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PAID),
        ],
    )
    def test_forbidden_transitions(self, current, target):
        assert not current.can_transition_to(target)

    def test_terminal_states(self):
        assert OrderStatus.DELIVERED.is_terminal()
        assert OrderStatus.CANCELLED.is_terminal()
        assert not OrderStatus.SHIPPED.is_terminal()

    def test_valid_transitions_follow_lifecycle_order(self):
        assert OrderStatus.PAID.get_valid_transitions() == [OrderStatus.SHIPPED, OrderStatus.CANCELLED]


class TestInitialStatus:
    def test_cash_on_delivery_starts_pending(self, machine):
        assert machine.initial_status_for("COD") == OrderStatus.PENDING
        assert machine.initial_status_for("cash") == OrderStatus.PENDING

    def test_gateway_method_awaits_payment(self, machine):
        assert machine.initial_status_for("kn") == OrderStatus.AWAITING_PAYMENT


class TestTransition:
    """Tests for OrderStateMachine.transition"""

    def test_gateway_payment_moves_to_paid(self, machine):
        order = make_order(OrderStatus.AWAITING_PAYMENT, order_id=7)
        version_before = order.version

        result = machine.transition(order, OrderStatus.PAID, StatusActor.GATEWAY, payment_attempt_id=3)

        assert result.applied is True
        assert order.status == OrderStatus.PAID
        assert result.entry.from_status == OrderStatus.AWAITING_PAYMENT
        assert result.entry.payment_attempt_id == 3
        assert order.version == version_before + 1
        events = order.get_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], OrderStatusChanged)
        assert events[0].to_status == "paid"
        assert events[0].actor == "gateway"

    def test_repeated_gateway_confirmation_is_a_noop(self, machine):
        order = make_order(OrderStatus.PAID, order_id=7)
        history_before = len(order.status_history)
        version_before = order.version

        result = machine.transition(order, OrderStatus.PAID, StatusActor.GATEWAY)

        assert result.replayed is True
        assert result.entry is None
        assert len(order.status_history) == history_before
        assert order.version == version_before
        assert order.get_domain_events() == []

    def test_admin_cannot_mark_paid_order_paid_again(self, machine):
        order = make_order(OrderStatus.PAID)

        with pytest.raises(StateTransitionException):
            machine.transition(order, OrderStatus.PAID, StatusActor.ADMIN)

    def test_illegal_target_leaves_order_untouched(self, machine):
        order = make_order(OrderStatus.DELIVERED)

        with pytest.raises(StateTransitionException) as exc_info:
            machine.transition(order, OrderStatus.CANCELLED, StatusActor.ADMIN)

        assert order.status == OrderStatus.DELIVERED
        assert exc_info.value.details["allowed"] == []
        assert order.get_domain_events() == []

    def test_error_lists_allowed_targets(self, machine):
        order = make_order(OrderStatus.PENDING, payment_method="cod")

        with pytest.raises(StateTransitionException) as exc_info:
            machine.transition(order, OrderStatus.DELIVERED, StatusActor.ADMIN)

        assert exc_info.value.details["allowed"] == ["paid", "cancelled"]

    def test_shipping_sets_tracking_and_date(self, machine):
        order = make_order(OrderStatus.PAID)
        shipped_on = datetime(2026, 3, 16, 9, 30, tzinfo=UTC)

        machine.transition(
            order,
            OrderStatus.SHIPPED,
            StatusActor.ADMIN,
            "Handed to courier",
            tracking_number="TRK-889",
            shipping_date=shipped_on,
        )

        assert order.tracking_number == "TRK-889"
        assert order.shipping_date == shipped_on
        assert order.admin_notes == "Handed to courier"

    def test_delivery_sets_delivery_date(self, machine, now):
        order = make_order(OrderStatus.SHIPPED)

        machine.transition(order, OrderStatus.DELIVERED, StatusActor.ADMIN, at=now)

        assert order.delivery_date == now
        assert order.reached_at(OrderStatus.DELIVERED) == now

    def test_history_is_handed_out_once(self, machine):
        order = make_order(OrderStatus.AWAITING_PAYMENT)
        machine.transition(order, OrderStatus.CANCELLED, StatusActor.CUSTOMER)

        assert len(order.pull_new_history()) == 1
        assert order.pull_new_history() == []
