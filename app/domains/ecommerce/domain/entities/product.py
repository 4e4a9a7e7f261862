"""
Product Entity for E-commerce Domain

Read model of a catalog product, as far as order pricing needs it.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from app.core.domain import Entity, Money

from ..value_objects.discount import AttributeMap


@dataclass
class Product(Entity[int]):
    """
    Catalog product.

    The catalog is managed elsewhere; this service never mutates products.

    Example:
        ```python
        product = Product(id=7, title="Linen Shirt", price=Decimal("20.000"), sizes=["S", "M"])
        product.listed_price()  # KWD 20.000
        ```
    """

    title: str = ""
    description: str | None = None
    price: Decimal = Decimal("0")
    currency: str = "KWD"
    images: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    attributes: AttributeMap = field(default_factory=dict)
    is_active: bool = True

    def listed_price(self) -> Money:
        """Price before any discount rule."""
        return Money(amount=self.price, currency=self.currency)

    def requires_size(self) -> bool:
        return bool(self.sizes)

    def has_size(self, size: str | None) -> bool:
        """Check a requested size against the sizes the product is sold in."""
        if not self.sizes:
            return True
        return size is not None and size in self.sizes

    def is_available_for_sale(self) -> bool:
        return self.is_active
