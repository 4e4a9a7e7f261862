"""
Discount Code Entity for E-commerce Domain

Order-level code entered at checkout, applied to the order subtotal.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from app.core.domain import Entity, Money, ValidationException

from ..value_objects.discount import DiscountType
from ..value_objects.validity_window import ValidityWindow, as_utc


def normalize_code(code: str) -> str:
    """Codes are case-insensitive and stored upper case."""
    return code.strip().upper()


@dataclass
class DiscountCode(Entity[int]):
    """
    Order-level discount code.

    Discount on a subtotal s:
    - percentage -> s * value / 100, capped by maximum_discount_amount
    - fixed -> value
    never more than s itself.
    """

    code: str = ""
    name: str | None = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = Decimal("0")
    minimum_order_amount: Decimal | None = None
    maximum_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    deleted_at: datetime | None = None

    def __post_init__(self):
        self.code = normalize_code(self.code)
        self.starts_at = as_utc(self.starts_at)
        self.expires_at = as_utc(self.expires_at)

    def validate(self) -> None:
        """Check the code definition can be stored."""
        errors: list[str] = []

        if not self.code:
            errors.append("code is required")
        if self.discount_type == DiscountType.PERCENTAGE:
            if not (Decimal("0") < self.discount_value <= Decimal("100")):
                errors.append("percentage discount_value must be greater than 0 and at most 100")
        elif self.discount_value <= 0:
            errors.append("fixed discount_value must be greater than 0")
        if self.minimum_order_amount is not None and self.minimum_order_amount < 0:
            errors.append("minimum_order_amount cannot be negative")
        if self.maximum_discount_amount is not None and self.maximum_discount_amount <= 0:
            errors.append("maximum_discount_amount must be greater than 0")
        if self.usage_limit is not None and self.usage_limit < 1:
            errors.append("usage_limit must be at least 1")
        if self.starts_at and self.expires_at and self.starts_at >= self.expires_at:
            errors.append("starts_at must be before expires_at")

        if errors:
            raise ValidationException(
                message=f"Invalid discount code: {'; '.join(errors)}",
                field="discount_code",
                details={"errors": errors},
            )

    @property
    def window(self) -> ValidityWindow:
        return ValidityWindow(starts_at=self.starts_at, expires_at=self.expires_at)

    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def ensure_redeemable(self, subtotal: Money, at: datetime) -> None:
        """
        Check the code may be applied to a subtotal now.

        Raises:
            ValidationException: Inactive, outside its window, below the
                minimum order amount, or exhausted
        """
        reason: str | None = None
        if not self.is_active or self.deleted_at is not None:
            reason = "This discount code is not active"
        elif self.window.is_upcoming(at):
            reason = "This discount code is not valid yet"
        elif self.window.has_expired(at):
            reason = "This discount code has expired"
        elif self.is_exhausted():
            reason = "This discount code has reached its usage limit"
        elif self.minimum_order_amount is not None and subtotal.amount < self.minimum_order_amount:
            reason = f"Minimum order amount for this code is {self.minimum_order_amount} {subtotal.currency}"

        if reason:
            raise ValidationException(message=reason, field="discount_code", details={"code": self.code})

    def calculate_discount(self, subtotal: Money) -> Money:
        """Discount amount for a subtotal, capped so the total stays >= 0."""
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = Money(amount=subtotal.amount * self.discount_value / 100, currency=subtotal.currency)
            if self.maximum_discount_amount is not None:
                discount = discount.min(Money(amount=self.maximum_discount_amount, currency=subtotal.currency))
        else:
            discount = Money(amount=self.discount_value, currency=subtotal.currency)
        return discount.min(subtotal)

    def toggle(self) -> None:
        self.is_active = not self.is_active
        self.touch()

    def soft_delete(self, at: datetime | None = None) -> None:
        self.deleted_at = at or datetime.now(UTC)
        self.is_active = False
        self.touch()
