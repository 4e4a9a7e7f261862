"""
E-commerce API Dependencies

FastAPI dependencies for the e-commerce domain. Each use case is built per
request around the request's AsyncSession.
"""

from app.api.dependencies import DbSession
from app.core.container import get_container
from app.core.container.ecommerce import EcommerceContainer
from app.domains.ecommerce.application.use_cases import (
    BulkForceOrderStatusUseCase,
    CalculateTotalUseCase,
    CreateDiscountRuleUseCase,
    CreateOrderUseCase,
    DeleteDiscountRuleUseCase,
    DiscountCodeAdmin,
    DuplicateDiscountRuleUseCase,
    ForceOrderStatusUseCase,
    GetAdminOrderUseCase,
    GetAffectedProductsUseCase,
    GetDiscountRuleUseCase,
    GetDiscountStatisticsUseCase,
    GetOrderUseCase,
    InitiatePaymentUseCase,
    ListDiscountRulesUseCase,
    ListOrdersUseCase,
    ListPaymentMethodsUseCase,
    OrderAcceptanceGate,
    ShippingCostService,
    ToggleDiscountRuleUseCase,
    TrackOrderUseCase,
    UpdateDiscountRuleUseCase,
    ValidateDiscountCodeUseCase,
    VerifyPaymentUseCase,
)


def get_ecommerce() -> EcommerceContainer:
    """Get the e-commerce sub-container."""
    return get_container().ecommerce


# Orders


def get_create_order_use_case(db: DbSession) -> CreateOrderUseCase:
    return get_ecommerce().create_create_order_use_case(db)


def get_order_use_case(db: DbSession) -> GetOrderUseCase:
    return get_ecommerce().create_get_order_use_case(db)


def get_track_order_use_case(db: DbSession) -> TrackOrderUseCase:
    return get_ecommerce().create_track_order_use_case(db)


def get_admin_order_use_case(db: DbSession) -> GetAdminOrderUseCase:
    return get_ecommerce().create_get_admin_order_use_case(db)


def get_list_orders_use_case(db: DbSession) -> ListOrdersUseCase:
    return get_ecommerce().create_list_orders_use_case(db)


def get_force_order_status_use_case(db: DbSession) -> ForceOrderStatusUseCase:
    return get_ecommerce().create_force_order_status_use_case(db)


def get_bulk_force_order_status_use_case(db: DbSession) -> BulkForceOrderStatusUseCase:
    return get_ecommerce().create_bulk_force_order_status_use_case(db)


# Checkout and store settings


def get_calculate_total_use_case(db: DbSession) -> CalculateTotalUseCase:
    return get_ecommerce().create_calculate_total_use_case(db)


def get_validate_discount_code_use_case(db: DbSession) -> ValidateDiscountCodeUseCase:
    return get_ecommerce().create_validate_discount_code_use_case(db)


def get_order_acceptance_gate(db: DbSession) -> OrderAcceptanceGate:
    return get_ecommerce().create_order_acceptance_gate(db)


def get_shipping_cost_service(db: DbSession) -> ShippingCostService:
    return get_ecommerce().create_shipping_cost_service(db)


# Payments


def get_list_payment_methods_use_case(db: DbSession) -> ListPaymentMethodsUseCase:
    return get_ecommerce().create_list_payment_methods_use_case(db)


def get_initiate_payment_use_case(db: DbSession) -> InitiatePaymentUseCase:
    return get_ecommerce().create_initiate_payment_use_case(db)


def get_verify_payment_use_case(db: DbSession) -> VerifyPaymentUseCase:
    return get_ecommerce().create_verify_payment_use_case(db)


# Discount rules


def get_list_discount_rules_use_case(db: DbSession) -> ListDiscountRulesUseCase:
    return get_ecommerce().create_list_discount_rules_use_case(db)


def get_discount_rule_use_case(db: DbSession) -> GetDiscountRuleUseCase:
    return get_ecommerce().create_get_discount_rule_use_case(db)


def get_create_discount_rule_use_case(db: DbSession) -> CreateDiscountRuleUseCase:
    return get_ecommerce().create_create_discount_rule_use_case(db)


def get_update_discount_rule_use_case(db: DbSession) -> UpdateDiscountRuleUseCase:
    return get_ecommerce().create_update_discount_rule_use_case(db)


def get_delete_discount_rule_use_case(db: DbSession) -> DeleteDiscountRuleUseCase:
    return get_ecommerce().create_delete_discount_rule_use_case(db)


def get_toggle_discount_rule_use_case(db: DbSession) -> ToggleDiscountRuleUseCase:
    return get_ecommerce().create_toggle_discount_rule_use_case(db)


def get_duplicate_discount_rule_use_case(db: DbSession) -> DuplicateDiscountRuleUseCase:
    return get_ecommerce().create_duplicate_discount_rule_use_case(db)


def get_affected_products_use_case(db: DbSession) -> GetAffectedProductsUseCase:
    return get_ecommerce().create_get_affected_products_use_case(db)


def get_discount_statistics_use_case(db: DbSession) -> GetDiscountStatisticsUseCase:
    return get_ecommerce().create_get_discount_statistics_use_case(db)


# Discount codes


def get_discount_code_admin(db: DbSession) -> DiscountCodeAdmin:
    return get_ecommerce().create_discount_code_admin(db)
