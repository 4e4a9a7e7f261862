"""
Discount Value Objects for E-commerce Domain
"""

from app.core.domain import StatusEnum

# Product and item attribute maps are flat and typed
AttributeValue = str | int | float | bool
AttributeMap = dict[str, AttributeValue]


class DiscountType(StatusEnum):
    """How a discount value is applied to a price."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountScope(StatusEnum):
    """Which products a discount rule covers."""

    ALL_PRODUCTS = "all_products"
    SPECIFIC_PRODUCTS = "specific_products"


class DiscountRuleStatus(StatusEnum):
    """Effective state of a rule at a given moment (admin filters and statistics)."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    UPCOMING = "upcoming"


def clean_attributes(raw: dict | None) -> AttributeMap:
    """
    Keep only scalar attribute values.

    Nested structures and nulls are dropped so pricing inputs stay typed.
    """
    if not raw:
        return {}
    return {str(key): value for key, value in raw.items() if isinstance(value, (str, int, float, bool))}
