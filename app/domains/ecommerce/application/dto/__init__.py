"""
Ecommerce Application DTOs

Data Transfer Objects for the Ecommerce domain.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

# ==================== Payment Gateway DTOs ====================


@dataclass
class GatewayPaymentMethod:
    """Payment method offered by the gateway for an amount"""

    method_id: int | None
    code: str
    name: str
    is_direct_payment: bool = False
    service_charge: Decimal = Decimal("0")
    total_amount: Decimal | None = None
    currency: str | None = None
    image_url: str | None = None


@dataclass
class GatewayInvoice:
    """Invoice created by ExecutePayment"""

    invoice_id: str
    payment_url: str | None


@dataclass
class GatewayPaymentStatus:
    """Authoritative invoice status as reported by the gateway"""

    invoice_id: str
    status: str
    amount: Decimal
    currency: str
    gateway_payment_id: str | None = None
    customer_reference: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.status.lower() == "paid"

    @property
    def is_failed(self) -> bool:
        return self.status.lower() in ("failed", "expired", "declined")

    @property
    def is_cancelled(self) -> bool:
        return self.status.lower() in ("canceled", "cancelled")


# ==================== Global Flag DTOs ====================


@dataclass
class OrderAcceptanceState:
    """Current value of the order acceptance gate"""

    orders_enabled: bool
    message: str | None = None
    changed_by: str | None = None
    changed_at: datetime | None = None

    @property
    def status(self) -> str:
        return "open" if self.orders_enabled else "closed"


@dataclass
class ShippingCostState:
    """Current flat shipping cost"""

    amount: Decimal
    currency: str
    effective_at: datetime | None = None
    changed_by: str | None = None


# ==================== Discount Admin DTOs ====================


@dataclass
class DiscountRuleFilters:
    """Filters for listing discount rules"""

    status: str | None = None
    discount_type: str | None = None
    apply_to: str | None = None
    search: str | None = None


@dataclass
class DiscountStatistics:
    """Counts over the non-deleted discount rules"""

    total: int = 0
    active: int = 0
    inactive: int = 0
    expired: int = 0
    upcoming: int = 0
    by_scope: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)
    products_with_discounts: int = 0


__all__ = [
    "GatewayPaymentMethod",
    "GatewayInvoice",
    "GatewayPaymentStatus",
    "OrderAcceptanceState",
    "ShippingCostState",
    "DiscountRuleFilters",
    "DiscountStatistics",
]
