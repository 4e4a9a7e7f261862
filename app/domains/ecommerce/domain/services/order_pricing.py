"""
Order Pricing Service

Composes per-line discount resolution, the optional order-level discount
code and the active shipping cost into the order totals. Used by order
creation and by the checkout preview, so both always agree.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from app.core.domain import BusinessRuleViolationException, Money, ValidationException

from ..entities.discount_code import DiscountCode
from ..entities.discount_rule import DiscountRule
from ..entities.order import OrderItem
from ..entities.product import Product
from .discount_resolution import PriceResolution, resolve

MAX_QUANTITY_PER_LINE = 100


@dataclass(frozen=True)
class CartLine:
    """What the customer asked for."""

    product_id: int
    quantity: int
    size: str | None = None


@dataclass(frozen=True)
class PricedLine:
    """A cart line with its resolved price."""

    product: Product
    quantity: int
    resolution: PriceResolution
    size: str | None = None

    @property
    def line_total(self) -> Money:
        return self.resolution.unit_price.multiply(self.quantity)

    def to_order_item(self) -> OrderItem:
        """Freeze the product and its resolved price into an order item."""
        resolution = self.resolution
        return OrderItem(
            product_id=self.product.id,
            title=self.product.title,
            quantity=self.quantity,
            unit_price=resolution.unit_price.amount,
            price=resolution.listed_price.amount,
            currency=resolution.listed_price.currency,
            discounted_price=resolution.unit_price.amount if resolution.has_discount else None,
            has_discount=resolution.has_discount,
            discount_percentage=resolution.discount_percentage,
            applied_rule_id=resolution.applied_rule_id,
            description=self.product.description,
            images=tuple(self.product.images),
            size=self.size,
            attributes=dict(self.product.attributes),
        )


@dataclass(frozen=True)
class OrderPricing:
    """Priced cart: lines plus subtotal - discount + shipping = total."""

    lines: tuple[PricedLine, ...]
    subtotal: Money
    discount: Money
    shipping: Money
    total: Money
    discount_code: DiscountCode | None = field(default=None, compare=False)

    @property
    def currency(self) -> str:
        return self.total.currency

    def order_items(self) -> list[OrderItem]:
        return [line.to_order_item() for line in self.lines]


class OrderPricingService:
    """
    Domain service for order totals.

    Example:
        ```python
        service = OrderPricingService(currency="KWD")
        pricing = service.price_order(
            lines=[CartLine(product_id=1, quantity=2, size="M")],
            products={1: product},
            rules=active_rules,
            at=datetime.now(UTC),
            shipping=Money(Decimal("1.500"), "KWD"),
        )
        pricing.total  # KWD 31.500 for two 15.000 items
        ```
    """

    def __init__(self, currency: str = "KWD"):
        self._currency = currency.upper()

    def price_lines(
        self,
        lines: list[CartLine],
        products: dict[int, Product],
        rules: Iterable[DiscountRule],
        at: datetime,
    ) -> list[PricedLine]:
        """
        Resolve every line of a cart.

        Raises:
            ValidationException: Empty cart, bad quantity, unknown or inactive
                product, size not offered, or foreign currency
        """
        if not lines:
            raise ValidationException(message="The cart is empty", field="items")

        rules = list(rules)
        priced: list[PricedLine] = []
        for index, line in enumerate(lines, start=1):
            if line.quantity < 1 or line.quantity > MAX_QUANTITY_PER_LINE:
                raise ValidationException(
                    message=f"Item {index}: quantity must be between 1 and {MAX_QUANTITY_PER_LINE}",
                    field="items.quantity",
                )

            product = products.get(line.product_id)
            if product is None or not product.is_available_for_sale():
                raise ValidationException(
                    message=f"Item {index}: product {line.product_id} is not available",
                    field="items.product_id",
                    details={"product_id": line.product_id},
                )

            if not product.has_size(line.size):
                raise ValidationException(
                    message=f"Item {index}: size '{line.size}' is not offered for {product.title}",
                    field="items.size",
                    details={"product_id": product.id, "sizes": list(product.sizes)},
                )

            if product.currency.upper() != self._currency:
                raise ValidationException(
                    message=f"Item {index}: product is priced in {product.currency}, store currency is {self._currency}",
                    field="items.product_id",
                )

            priced.append(
                PricedLine(
                    product=product,
                    quantity=line.quantity,
                    resolution=resolve(product, rules, at),
                    size=line.size if product.sizes else None,
                )
            )
        return priced

    def price_order(
        self,
        lines: list[CartLine],
        products: dict[int, Product],
        rules: Iterable[DiscountRule],
        at: datetime,
        shipping: Money,
        discount_code: DiscountCode | None = None,
    ) -> OrderPricing:
        """
        Price a whole cart.

        Raises:
            ValidationException: Invalid lines or a code that cannot be redeemed
            BusinessRuleViolationException: Shipping cost in another currency
        """
        if shipping.currency != self._currency:
            raise BusinessRuleViolationException(
                rule="SHIPPING_CURRENCY",
                message=f"Shipping cost is set in {shipping.currency}, store currency is {self._currency}",
            )

        priced = self.price_lines(lines, products, rules, at)

        subtotal = Money.zero(self._currency)
        for line in priced:
            subtotal = subtotal.add(line.line_total)

        discount = Money.zero(self._currency)
        if discount_code is not None:
            discount_code.ensure_redeemable(subtotal, at)
            discount = discount_code.calculate_discount(subtotal)

        total = subtotal.subtract(discount).add(shipping)

        return OrderPricing(
            lines=tuple(priced),
            subtotal=subtotal,
            discount=discount,
            shipping=shipping,
            total=total,
            discount_code=discount_code,
        )
