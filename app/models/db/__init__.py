"""
Database models package - Organized by responsibility
"""

from .base import Base, TimestampMixin
from .catalog import Product
from .discounts import DiscountCode, DiscountRule
from .orders import Order, OrderItem, OrderStatusHistory
from .payments import PaymentAttempt
from .site_settings import OrderAcceptanceSetting, ShippingCostSetting

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Catalog
    "Product",
    # Orders
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    # Payments
    "PaymentAttempt",
    # Discounts
    "DiscountRule",
    "DiscountCode",
    # Settings
    "OrderAcceptanceSetting",
    "ShippingCostSetting",
]
