"""
E-commerce Infrastructure Repositories

SQLAlchemy implementations of the ports in application.ports.
Repositories flush but never commit; use cases own the transaction.
"""

from .discount_repository import SQLAlchemyDiscountCodeRepository, SQLAlchemyDiscountRuleRepository
from .order_repository import SQLAlchemyOrderRepository
from .payment_attempt_repository import SQLAlchemyPaymentAttemptRepository
from .product_repository import SQLAlchemyProductRepository
from .settings_repository import SQLAlchemyOrderAcceptanceRepository, SQLAlchemyShippingCostRepository

__all__ = [
    "SQLAlchemyProductRepository",
    "SQLAlchemyOrderRepository",
    "SQLAlchemyPaymentAttemptRepository",
    "SQLAlchemyDiscountRuleRepository",
    "SQLAlchemyDiscountCodeRepository",
    "SQLAlchemyOrderAcceptanceRepository",
    "SQLAlchemyShippingCostRepository",
]
