"""
Discount Rule Entity for E-commerce Domain

Named pricing rule with a scope, a value, a validity window and a priority.
Rules are mutable at any time; order items keep the price they resolved to,
never a reference to the rule itself.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from app.core.domain import Entity, Money, ValidationException

from ..value_objects.discount import DiscountRuleStatus, DiscountScope, DiscountType
from ..value_objects.validity_window import ValidityWindow, as_utc

DISPLAY_PERCENTAGE_QUANTUM = Decimal("0.01")


@dataclass
class DiscountRule(Entity[int]):
    """
    Product-level discount rule.

    Example:
        ```python
        rule = DiscountRule(
            name="Summer sale",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("25"),
            priority=10,
        )
        rule.apply_to_price(Money(Decimal("20.000")))  # KWD 15.000
        ```
    """

    name: str = ""
    description: str | None = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = Decimal("0")
    apply_to: DiscountScope = DiscountScope.ALL_PRODUCTS
    product_ids: list[int] = field(default_factory=list)
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    priority: int = 0
    deleted_at: datetime | None = None

    def __post_init__(self):
        self.starts_at = as_utc(self.starts_at)
        self.expires_at = as_utc(self.expires_at)

    # Validation

    def validate(self) -> None:
        """
        Check the rule can be stored.

        Raises:
            ValidationException: With every problem found listed in details
        """
        errors: list[str] = []

        if not self.name or not self.name.strip():
            errors.append("name is required")

        if self.discount_type == DiscountType.PERCENTAGE:
            if not (Decimal("0") < self.discount_value <= Decimal("100")):
                errors.append("percentage discount_value must be greater than 0 and at most 100")
        elif self.discount_value <= 0:
            errors.append("fixed discount_value must be greater than 0")

        if self.apply_to == DiscountScope.SPECIFIC_PRODUCTS and not self.product_ids:
            errors.append("specific_products rules need at least one product id")

        if self.starts_at and self.expires_at and self.starts_at >= self.expires_at:
            errors.append("starts_at must be before expires_at")

        if errors:
            raise ValidationException(
                message=f"Invalid discount rule: {'; '.join(errors)}",
                field="discount_rule",
                details={"errors": errors},
            )

    # Eligibility

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(starts_at=self.starts_at, expires_at=self.expires_at)

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def covers_product(self, product_id: int | None) -> bool:
        """Check the rule's scope includes a product."""
        if self.apply_to == DiscountScope.ALL_PRODUCTS:
            return True
        return product_id is not None and product_id in self.product_ids

    def is_candidate_for(self, product_id: int | None, at: datetime) -> bool:
        """Active, not deleted, in window (inclusive) and in scope."""
        return (
            self.is_active
            and not self.is_deleted()
            and self.window.contains(at)
            and self.covers_product(product_id)
        )

    def status_at(self, at: datetime) -> DiscountRuleStatus:
        """Effective state used by the admin filters."""
        if not self.is_active:
            return DiscountRuleStatus.INACTIVE
        if self.window.has_expired(at):
            return DiscountRuleStatus.EXPIRED
        if self.window.is_upcoming(at):
            return DiscountRuleStatus.UPCOMING
        return DiscountRuleStatus.ACTIVE

    # Price math

    def apply_to_price(self, price: Money) -> Money:
        """Discounted price, never below zero."""
        if self.discount_type == DiscountType.PERCENTAGE:
            return price.apply_discount(self.discount_value)
        return price.apply_fixed_discount(self.discount_value)

    def display_percentage(self, listed: Money, discounted: Money) -> Decimal:
        """
        Percentage shown to customers.

        Percentage rules show their own value; fixed rules show the effective
        reduction relative to the listed price, rounded to two decimals.
        """
        if self.discount_type == DiscountType.PERCENTAGE:
            value = self.discount_value
            if value == value.to_integral_value():
                return value.quantize(Decimal("1"))
            return value.normalize()
        if listed.is_zero():
            return Decimal("0")
        reduction = (listed.amount - discounted.amount) / listed.amount * 100
        return reduction.quantize(DISPLAY_PERCENTAGE_QUANTUM, ROUND_HALF_UP)

    # Admin operations

    def toggle(self) -> None:
        self.is_active = not self.is_active
        self.touch()

    def soft_delete(self, at: datetime | None = None) -> None:
        self.deleted_at = at or datetime.now(UTC)
        self.is_active = False
        self.touch()

    def duplicate(self) -> "DiscountRule":
        """Copy of the rule, created inactive so it never competes by surprise."""
        return DiscountRule(
            name=f"{self.name} (Copy)",
            description=self.description,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            apply_to=self.apply_to,
            product_ids=list(self.product_ids),
            is_active=False,
            starts_at=self.starts_at,
            expires_at=self.expires_at,
            priority=self.priority,
        )

    def precedence_key(self) -> tuple[int, int]:
        """Sort key: highest priority first, then the oldest (smallest) id."""
        return (-self.priority, self.id if self.id is not None else 0)
