"""
E-commerce Use Cases

Business use cases for the storefront order lifecycle.
Each use case represents a single business operation.
"""

from .checkout import (
    CalculateTotalRequest,
    CalculateTotalUseCase,
    CheckoutPricer,
    ValidateDiscountCodeResponse,
    ValidateDiscountCodeUseCase,
)
from .create_order import (
    CreateOrderRequest,
    CreateOrderResponse,
    CreateOrderUseCase,
)
from .discount_codes import DiscountCodeAdmin, DiscountCodeInput
from .discount_rules import (
    AffectedProduct,
    CreateDiscountRuleUseCase,
    DeleteDiscountRuleUseCase,
    DiscountRuleInput,
    DuplicateDiscountRuleUseCase,
    GetAffectedProductsUseCase,
    GetDiscountRuleUseCase,
    GetDiscountStatisticsUseCase,
    ListDiscountRulesUseCase,
    ToggleDiscountRuleUseCase,
    UpdateDiscountRuleUseCase,
)
from .force_order_status import (
    BulkForceOrderStatusRequest,
    BulkForceOrderStatusUseCase,
    ForceOrderStatusRequest,
    ForceOrderStatusUseCase,
)
from .get_orders import (
    AdminOrderDetail,
    GetAdminOrderUseCase,
    GetOrderUseCase,
    ListOrdersResponse,
    ListOrdersUseCase,
)
from .order_acceptance import OrderAcceptanceGate
from .payments import (
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    InitiatePaymentUseCase,
    ListPaymentMethodsUseCase,
    VerifyPaymentResponse,
    VerifyPaymentUseCase,
)
from .shipping_cost import ShippingCostService
from .track_order import TrackOrderResponse, TrackOrderUseCase

__all__ = [
    # Checkout
    "CheckoutPricer",
    "CalculateTotalUseCase",
    "CalculateTotalRequest",
    "ValidateDiscountCodeUseCase",
    "ValidateDiscountCodeResponse",
    # Orders
    "CreateOrderUseCase",
    "CreateOrderRequest",
    "CreateOrderResponse",
    "GetOrderUseCase",
    "GetAdminOrderUseCase",
    "AdminOrderDetail",
    "ListOrdersUseCase",
    "ListOrdersResponse",
    "TrackOrderUseCase",
    "TrackOrderResponse",
    # Status override
    "ForceOrderStatusUseCase",
    "ForceOrderStatusRequest",
    "BulkForceOrderStatusUseCase",
    "BulkForceOrderStatusRequest",
    # Payments
    "ListPaymentMethodsUseCase",
    "InitiatePaymentUseCase",
    "InitiatePaymentRequest",
    "InitiatePaymentResponse",
    "VerifyPaymentUseCase",
    "VerifyPaymentResponse",
    # Global flags
    "OrderAcceptanceGate",
    "ShippingCostService",
    # Discount rules
    "DiscountRuleInput",
    "ListDiscountRulesUseCase",
    "GetDiscountRuleUseCase",
    "CreateDiscountRuleUseCase",
    "UpdateDiscountRuleUseCase",
    "DeleteDiscountRuleUseCase",
    "ToggleDiscountRuleUseCase",
    "DuplicateDiscountRuleUseCase",
    "GetAffectedProductsUseCase",
    "AffectedProduct",
    "GetDiscountStatisticsUseCase",
    # Discount codes
    "DiscountCodeAdmin",
    "DiscountCodeInput",
]
