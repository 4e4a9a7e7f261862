"""
Base Value Object Classes for Domain-Driven Design

Value Objects are immutable domain primitives that have no identity.
They are compared by their values, not by reference.
"""

from abc import ABC
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self

# ISO 4217 minor units for currencies that do not use two decimals
CURRENCY_EXPONENTS: dict[str, int] = {
    "KWD": 3,
    "BHD": 3,
    "OMR": 3,
    "JOD": 3,
    "IQD": 3,
    "TND": 3,
    "JPY": 0,
}


def currency_quantum(currency: str) -> Decimal:
    """Smallest representable amount for a currency (0.001 for KWD, 0.01 for USD)."""
    exponent = CURRENCY_EXPONENTS.get(currency.upper(), 2)
    return Decimal(1).scaleb(-exponent)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for all value objects.

    Value objects are:
    - Immutable (frozen=True)
    - Compared by value (dataclass equality)
    - Have no identity
    """

    def __post_init__(self):
        """Override to add validation logic."""
        self._validate()

    def _validate(self) -> None:
        """Validate the value object. Override in subclasses."""
        pass


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object for financial calculations.

    Amounts are always rounded half-up to the currency's minor unit,
    so KWD keeps three decimals (20.000) and USD keeps two.

    Example:
        ```python
        price = Money(amount=Decimal("20.000"), currency="KWD")
        discounted = price.apply_discount(Decimal("25"))  # KWD 15.000
        total = price.add(Money(Decimal("1.500"), "KWD"))
        ```
    """

    amount: Decimal
    currency: str = "KWD"

    def _validate(self) -> None:
        """Validate money constraints."""
        if not self.currency or len(self.currency) != 3:
            raise ValueError("Currency must be a 3-letter ISO code")
        object.__setattr__(self, "currency", self.currency.upper())
        amount = self.amount if isinstance(self.amount, Decimal) else Decimal(str(self.amount))
        object.__setattr__(self, "amount", amount.quantize(currency_quantum(self.currency), ROUND_HALF_UP))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot combine {self.currency} with {other.currency}")

    def add(self, other: "Money") -> "Money":
        """Add two Money values (must be same currency)."""
        self._check_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def subtract(self, other: "Money") -> "Money":
        """Subtract Money, clamping at zero."""
        self._check_currency(other)
        return Money(amount=max(Decimal("0"), self.amount - other.amount), currency=self.currency)

    def multiply(self, factor: int | Decimal) -> "Money":
        """Multiply by a factor."""
        return Money(amount=self.amount * Decimal(str(factor)), currency=self.currency)

    def apply_discount(self, percentage: Decimal) -> "Money":
        """Apply a percentage discount (0-100)."""
        percentage = Decimal(str(percentage))
        if percentage < 0 or percentage > 100:
            raise ValueError("Percentage must be between 0 and 100")
        return Money(amount=self.amount * (1 - percentage / 100), currency=self.currency)

    def apply_fixed_discount(self, discount: Decimal) -> "Money":
        """Subtract a fixed amount, never going below zero."""
        return Money(amount=max(Decimal("0"), self.amount - Decimal(str(discount))), currency=self.currency)

    def min(self, other: "Money") -> "Money":
        """Return the smaller of two amounts."""
        self._check_currency(other)
        return self if self.amount <= other.amount else other

    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == Decimal("0")

    def __str__(self) -> str:
        return f"{self.currency} {self.amount}"

    def __repr__(self) -> str:
        return f"Money(amount={self.amount}, currency='{self.currency}')"

    @classmethod
    def zero(cls, currency: str = "KWD") -> "Money":
        """Create a zero Money value."""
        return cls(amount=Decimal("0"), currency=currency)


@dataclass(frozen=True)
class Email(ValueObject):
    """
    Email address value object.

    Validates and normalizes email addresses.
    """

    address: str

    def _validate(self) -> None:
        if not self.address or "@" not in self.address:
            raise ValueError(f"Invalid email address: {self.address}")
        object.__setattr__(self, "address", self.address.lower().strip())

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class PhoneNumber(ValueObject):
    """
    Phone number value object.

    Strips formatting characters; Kuwait numbers have 8 digits.
    """

    number: str

    def _validate(self) -> None:
        cleaned = "".join(c for c in self.number if c.isdigit() or c == "+")
        if len(cleaned.lstrip("+")) < 8:
            raise ValueError(f"Invalid phone number: {self.number}")
        object.__setattr__(self, "number", cleaned)

    def __str__(self) -> str:
        return self.number


@dataclass(frozen=True)
class Address(ValueObject):
    """
    Shipping address value object.
    """

    street: str
    city: str
    governorate: str | None = None
    postal_code: str | None = None
    country: str = "Kuwait"

    def _validate(self) -> None:
        if not self.street or not self.city:
            raise ValueError("Street and city are required")

    def get_full_address(self) -> str:
        """Get full formatted address."""
        parts = [self.street, self.city, self.governorate, self.postal_code, self.country]
        return ", ".join(p for p in parts if p)

    def __str__(self) -> str:
        return self.get_full_address()


class StatusEnum(str, Enum):
    """
    Base class for status enums.

    Provides common functionality for all status value objects.
    """

    @classmethod
    def values(cls) -> list[str]:
        """Get all possible values."""
        return [e.value for e in cls]

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create from string value (case-insensitive)."""
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")
