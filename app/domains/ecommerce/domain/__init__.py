"""
E-commerce Domain Layer

Domain-Driven Design implementation for the order lifecycle.

This module contains:
- Entities: Order, OrderItem, Product, DiscountRule, DiscountCode, PaymentAttempt
- Value Objects: OrderStatus, StatusActor, DiscountType, ValidityWindow
- Domain Services: state machine, discount resolution, pricing, tracking
- Events: OrderPlaced, OrderStatusChanged
"""

from app.domains.ecommerce.domain.entities import (
    DiscountCode,
    DiscountRule,
    Order,
    OrderItem,
    PaymentAttempt,
    Product,
)
from app.domains.ecommerce.domain.events import OrderPlaced, OrderStatusChanged
from app.domains.ecommerce.domain.services import (
    CartLine,
    OrderPricing,
    OrderPricingService,
    OrderStateMachine,
    OrderTrackingService,
    PriceResolution,
    resolve,
)
from app.domains.ecommerce.domain.value_objects import (
    DiscountScope,
    DiscountType,
    OrderStatus,
    PaymentAttemptStatus,
    StatusActor,
)

__all__ = [
    # Entities
    "Product",
    "Order",
    "OrderItem",
    "DiscountRule",
    "DiscountCode",
    "PaymentAttempt",
    # Value Objects
    "OrderStatus",
    "StatusActor",
    "PaymentAttemptStatus",
    "DiscountType",
    "DiscountScope",
    # Services
    "resolve",
    "PriceResolution",
    "CartLine",
    "OrderPricing",
    "OrderPricingService",
    "OrderStateMachine",
    "OrderTrackingService",
    # Events
    "OrderPlaced",
    "OrderStatusChanged",
]
