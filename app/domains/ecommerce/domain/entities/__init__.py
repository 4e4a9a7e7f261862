"""
E-commerce Domain Entities

Business entities with identity and lifecycle for the e-commerce domain.
"""

from app.domains.ecommerce.domain.entities.discount_code import DiscountCode, normalize_code
from app.domains.ecommerce.domain.entities.discount_rule import DiscountRule
from app.domains.ecommerce.domain.entities.order import (
    Order,
    OrderItem,
    generate_order_number,
)
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt, generate_payment_id
from app.domains.ecommerce.domain.entities.product import Product

__all__ = [
    "Product",
    "Order",
    "OrderItem",
    "generate_order_number",
    "DiscountRule",
    "DiscountCode",
    "normalize_code",
    "PaymentAttempt",
    "generate_payment_id",
]
