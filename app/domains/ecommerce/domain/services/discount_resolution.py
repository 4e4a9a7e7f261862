"""
Discount Resolution Engine

Pure function (product, rule set, evaluation time) -> effective price.
Safe to call concurrently; it only reads its arguments.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from app.core.domain import Money

from ..entities.discount_rule import DiscountRule
from ..entities.product import Product


@dataclass(frozen=True)
class PriceResolution:
    """Result of resolving a product price against a rule set."""

    listed_price: Money
    unit_price: Money
    applied_rule_id: int | None = None
    discount_percentage: Decimal | None = None

    @property
    def has_discount(self) -> bool:
        return self.applied_rule_id is not None


def select_winning_rule(
    product_id: int | None,
    rules: Iterable[DiscountRule],
    at: datetime,
) -> DiscountRule | None:
    """
    Pick the single rule that prices a product at a given time.

    Candidates are active, not deleted, inside their window (inclusive) and
    in scope. Highest priority wins; equal priority goes to the smallest id,
    so the result never depends on iteration order.
    """
    candidates = [rule for rule in rules if rule.is_candidate_for(product_id, at)]
    if not candidates:
        return None
    return min(candidates, key=lambda rule: rule.precedence_key())


def resolve(product: Product, rules: Iterable[DiscountRule], at: datetime) -> PriceResolution:
    """
    Resolve the effective unit price of a product.

    Example:
        ```python
        product = Product(id=1, price=Decimal("20.000"))
        rule = DiscountRule(id=3, discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("25"))
        resolve(product, [rule], now).unit_price  # KWD 15.000, discount_percentage 25
        ```
    """
    listed = product.listed_price()
    winner = select_winning_rule(product.id, rules, at)
    if winner is None:
        return PriceResolution(listed_price=listed, unit_price=listed)

    discounted = winner.apply_to_price(listed)
    return PriceResolution(
        listed_price=listed,
        unit_price=discounted,
        applied_rule_id=winner.id,
        discount_percentage=winner.display_percentage(listed, discounted),
    )
