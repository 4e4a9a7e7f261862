"""
Unit Tests for discount rule resolution
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from app.core.domain import Money, ValidationException
from app.domains.ecommerce.domain.services import resolve, select_winning_rule
from app.domains.ecommerce.domain.value_objects import DiscountRuleStatus, DiscountScope, DiscountType
from storefront_fakes import make_product, make_rule


class TestResolve:
    """Tests for resolve(product, rules, at)"""

    def test_percentage_rule_without_window(self, now):
        product = make_product(price="20.000")
        rule = make_rule(rule_id=3, value="25")

        resolution = resolve(product, [rule], now)

        assert resolution.unit_price == Money(Decimal("15.000"), "KWD")
        assert resolution.listed_price.amount == Decimal("20.000")
        assert resolution.discount_percentage == Decimal("25")
        assert resolution.applied_rule_id == 3
        assert resolution.has_discount is True

    def test_no_rules_keeps_listed_price(self, now):
        resolution = resolve(make_product(price="12.500"), [], now)

        assert resolution.unit_price.amount == Decimal("12.500")
        assert resolution.has_discount is False
        assert resolution.discount_percentage is None

    def test_fixed_rule_shows_effective_percentage(self, now):
        product = make_product(price="30.000")
        rule = make_rule(value="5", discount_type=DiscountType.FIXED)

        resolution = resolve(product, [rule], now)

        assert resolution.unit_price.amount == Decimal("25.000")
        assert resolution.discount_percentage == Decimal("16.67")

    def test_fixed_rule_never_goes_below_zero(self, now):
        rule = make_rule(value="50", discount_type=DiscountType.FIXED)

        resolution = resolve(make_product(price="20.000"), [rule], now)

        assert resolution.unit_price.amount == Decimal("0.000")

    def test_inactive_and_deleted_rules_are_ignored(self, now):
        inactive = make_rule(rule_id=1, is_active=False)
        deleted = make_rule(rule_id=2)
        deleted.soft_delete(now)

        resolution = resolve(make_product(), [inactive, deleted], now)

        assert resolution.has_discount is False

    def test_window_bounds_are_inclusive(self, now):
        starts_now = make_rule(rule_id=1, starts_at=now, expires_at=now + timedelta(days=1))
        ends_now = make_rule(rule_id=2, starts_at=now - timedelta(days=1), expires_at=now)

        assert resolve(make_product(), [starts_now], now).applied_rule_id == 1
        assert resolve(make_product(), [ends_now], now).applied_rule_id == 2

    def test_rules_outside_window_are_ignored(self, now):
        upcoming = make_rule(rule_id=1, starts_at=now + timedelta(hours=1))
        expired = make_rule(rule_id=2, expires_at=now - timedelta(seconds=1))

        assert resolve(make_product(), [upcoming, expired], now).has_discount is False

    def test_specific_products_scope(self, now):
        rule = make_rule(apply_to=DiscountScope.SPECIFIC_PRODUCTS, product_ids=[2])

        assert resolve(make_product(product_id=1), [rule], now).has_discount is False
        assert resolve(make_product(product_id=2), [rule], now).has_discount is True


class TestSelectWinningRule:
    def test_highest_priority_wins(self, now):
        low = make_rule(rule_id=1, value="50", priority=1)
        high = make_rule(rule_id=2, value="10", priority=5)

        assert select_winning_rule(1, [low, high], now) is high

    def test_tie_goes_to_smallest_id_whatever_the_order(self, now):
        first = make_rule(rule_id=4, value="10", priority=2)
        second = make_rule(rule_id=9, value="40", priority=2)

        assert select_winning_rule(1, [second, first], now) is first
        assert select_winning_rule(1, [first, second], now) is first

    def test_no_candidate(self, now):
        assert select_winning_rule(1, [make_rule(is_active=False)], now) is None


class TestDiscountRuleEntity:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"value": "0"},
            {"value": "101"},
            {"value": "0", "discount_type": DiscountType.FIXED},
            {"apply_to": DiscountScope.SPECIFIC_PRODUCTS, "product_ids": []},
            {"name": " "},
        ],
    )
    def test_invalid_rules_are_rejected(self, kwargs):
        with pytest.raises(ValidationException):
            make_rule(**kwargs).validate()

    def test_inverted_window_is_rejected(self, now):
        rule = make_rule(starts_at=now, expires_at=now - timedelta(days=1))

        with pytest.raises(ValidationException):
            rule.validate()

    def test_status_at(self, now):
        assert make_rule().status_at(now) == DiscountRuleStatus.ACTIVE
        assert make_rule(is_active=False).status_at(now) == DiscountRuleStatus.INACTIVE
        assert make_rule(expires_at=now - timedelta(days=1)).status_at(now) == DiscountRuleStatus.EXPIRED
        assert make_rule(starts_at=now + timedelta(days=1)).status_at(now) == DiscountRuleStatus.UPCOMING

    def test_duplicate_is_inactive_copy(self):
        rule = make_rule(name="Summer", priority=3, apply_to=DiscountScope.SPECIFIC_PRODUCTS, product_ids=[1, 2])

        copy = rule.duplicate()

        assert copy.id is None
        assert copy.name == "Summer (Copy)"
        assert copy.is_active is False
        assert copy.priority == 3
        assert copy.product_ids == [1, 2]
        assert copy.product_ids is not rule.product_ids
