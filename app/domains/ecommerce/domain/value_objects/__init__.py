"""
E-commerce Domain Value Objects

Immutable value objects for the e-commerce domain.
"""

from app.domains.ecommerce.domain.value_objects.discount import (
    AttributeMap,
    AttributeValue,
    DiscountRuleStatus,
    DiscountScope,
    DiscountType,
    clean_attributes,
)
from app.domains.ecommerce.domain.value_objects.order_status import (
    ORDER_STATUS_TRANSITIONS,
    OrderStatus,
    OrderStatusTransition,
    PaymentAttemptStatus,
    StatusActor,
)
from app.domains.ecommerce.domain.value_objects.validity_window import ValidityWindow, as_utc

__all__ = [
    "OrderStatus",
    "ORDER_STATUS_TRANSITIONS",
    "OrderStatusTransition",
    "StatusActor",
    "PaymentAttemptStatus",
    "DiscountType",
    "DiscountScope",
    "DiscountRuleStatus",
    "AttributeValue",
    "AttributeMap",
    "clean_attributes",
    "ValidityWindow",
    "as_utc",
]
