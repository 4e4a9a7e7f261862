"""
Unit Tests for OrderPricingService and discount codes
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from app.core.domain import BusinessRuleViolationException, Money, ValidationException
from app.domains.ecommerce.domain.services import CartLine, OrderPricingService
from app.domains.ecommerce.domain.value_objects import DiscountType
from storefront_fakes import make_code, make_product, make_rule


def kwd(amount: str) -> Money:
    return Money(Decimal(amount), "KWD")


@pytest.fixture
def service():
    return OrderPricingService("KWD")


@pytest.fixture
def catalog():
    return {
        1: make_product(1, "10.000"),
        2: make_product(2, "4.250", sizes=["S", "M"]),
        3: make_product(3, "8.000", is_active=False),
        4: make_product(4, "9.000", currency="USD"),
    }


class TestPriceOrder:
    """Tests for price_order"""

    def test_free_shipping_and_no_discount(self, service, catalog, now):
        pricing = service.price_order([CartLine(1, 1)], catalog, [], now, shipping=Money.zero("KWD"))

        assert pricing.subtotal == kwd("10.000")
        assert pricing.discount.is_zero()
        assert pricing.total.amount == Decimal("10.000")

    def test_totals_add_up(self, service, catalog, now):
        rules = [make_rule(value="20")]

        pricing = service.price_order(
            [CartLine(1, 2), CartLine(2, 1, size="M")],
            catalog,
            rules,
            now,
            shipping=kwd("1.500"),
        )

        # 2 x 8.000 + 3.400
        assert pricing.subtotal == kwd("19.400")
        assert pricing.total == kwd("20.900")
        assert pricing.total.amount == pricing.subtotal.amount - pricing.discount.amount + pricing.shipping.amount

    def test_order_items_freeze_product_snapshot(self, service, catalog, now):
        pricing = service.price_order([CartLine(1, 3)], catalog, [make_rule(rule_id=8, value="25")], now, kwd("0"))

        item = pricing.order_items()[0]

        assert item.title == "Product 1"
        assert item.price == Decimal("10.000")
        assert item.unit_price == Decimal("7.500")
        assert item.discounted_price == Decimal("7.500")
        assert item.has_discount is True
        assert item.applied_rule_id == 8
        assert item.line_total == Decimal("22.500")

    def test_discount_code_percentage_capped(self, service, catalog, now):
        code = make_code(value="50", maximum_discount_amount=Decimal("3.000"))

        pricing = service.price_order([CartLine(1, 1)], catalog, [], now, kwd("1.000"), discount_code=code)

        assert pricing.discount == kwd("3.000")
        assert pricing.total == kwd("8.000")

    def test_fixed_code_never_exceeds_subtotal(self, service, catalog, now):
        code = make_code(value="25", discount_type=DiscountType.FIXED)

        pricing = service.price_order([CartLine(1, 1)], catalog, [], now, kwd("2.000"), discount_code=code)

        assert pricing.discount == kwd("10.000")
        assert pricing.total == kwd("2.000")

    @pytest.mark.parametrize(
        "line",
        [
            CartLine(1, 0),
            CartLine(1, 101),
            CartLine(99, 1),
            CartLine(3, 1),
            CartLine(4, 1),
            CartLine(2, 1),
            CartLine(2, 1, size="XL"),
        ],
    )
    def test_invalid_lines(self, service, catalog, now, line):
        with pytest.raises(ValidationException):
            service.price_order([line], catalog, [], now, Money.zero("KWD"))

    def test_empty_cart(self, service, catalog, now):
        with pytest.raises(ValidationException):
            service.price_order([], catalog, [], now, Money.zero("KWD"))

    def test_shipping_in_foreign_currency(self, service, catalog, now):
        with pytest.raises(BusinessRuleViolationException):
            service.price_order([CartLine(1, 1)], catalog, [], now, Money(Decimal("1"), "USD"))

    def test_size_ignored_for_products_without_sizes(self, service, catalog, now):
        pricing = service.price_order([CartLine(1, 1, size="M")], catalog, [], now, Money.zero("KWD"))

        assert pricing.lines[0].size is None


class TestDiscountCodeRedemption:
    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"is_active": False}, "not active"),
            ({"usage_limit": 2, "usage_count": 2}, "usage limit"),
            ({"minimum_order_amount": Decimal("50")}, "Minimum order amount"),
        ],
    )
    def test_unredeemable_codes(self, now, kwargs, message):
        with pytest.raises(ValidationException) as exc_info:
            make_code(**kwargs).ensure_redeemable(kwd("10.000"), now)

        assert message in exc_info.value.message

    def test_window(self, now):
        with pytest.raises(ValidationException, match="not valid yet"):
            make_code(starts_at=now + timedelta(days=1)).ensure_redeemable(kwd("10"), now)
        with pytest.raises(ValidationException, match="expired"):
            make_code(expires_at=now - timedelta(days=1)).ensure_redeemable(kwd("10"), now)

    def test_code_is_normalized(self):
        assert make_code(code="  summer10 ").code == "SUMMER10"
