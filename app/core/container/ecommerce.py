"""
E-commerce Domain Container.

Single Responsibility: Wire all e-commerce domain dependencies.
Every factory taking `db` builds objects bound to that request's session;
the session is also the unit of work the use cases commit.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.ecommerce.application.use_cases import (
    BulkForceOrderStatusUseCase,
    CalculateTotalUseCase,
    CheckoutPricer,
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
from app.domains.ecommerce.domain.services import OrderPricingService, OrderStateMachine, OrderTrackingService
from app.domains.ecommerce.infrastructure.repositories import (
    SQLAlchemyDiscountCodeRepository,
    SQLAlchemyDiscountRuleRepository,
    SQLAlchemyOrderAcceptanceRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyPaymentAttemptRepository,
    SQLAlchemyProductRepository,
    SQLAlchemyShippingCostRepository,
)

if TYPE_CHECKING:
    from app.core.container.base import BaseContainer

logger = logging.getLogger(__name__)


class EcommerceContainer:
    """
    E-commerce domain container.

    Single Responsibility: Create e-commerce repositories, services and use cases.
    """

    def __init__(self, base: "BaseContainer"):
        """
        Initialize e-commerce container.

        Args:
            base: BaseContainer with shared singletons
        """
        self._base = base
        self._state_machine: OrderStateMachine | None = None

    @property
    def settings(self):
        return self._base.settings

    # ==================== DOMAIN SERVICES ====================

    def get_state_machine(self) -> OrderStateMachine:
        """Stateless, shared by every request."""
        if self._state_machine is None:
            self._state_machine = OrderStateMachine(
                cash_on_delivery_methods=list(self.settings.CASH_ON_DELIVERY_METHODS)
            )
        return self._state_machine

    def create_pricing_service(self) -> OrderPricingService:
        return OrderPricingService(currency=self.settings.DEFAULT_CURRENCY)

    def create_tracking_service(self) -> OrderTrackingService:
        return OrderTrackingService(reference_prefixes=list(self.settings.TRACKING_REFERENCE_PREFIXES))

    # ==================== REPOSITORIES ====================

    def create_product_repository(self, db: AsyncSession) -> SQLAlchemyProductRepository:
        """Create Product Repository."""
        return SQLAlchemyProductRepository(session=db)

    def create_order_repository(self, db: AsyncSession) -> SQLAlchemyOrderRepository:
        """Create Order Repository."""
        return SQLAlchemyOrderRepository(session=db)

    def create_payment_attempt_repository(self, db: AsyncSession) -> SQLAlchemyPaymentAttemptRepository:
        """Create Payment Attempt Repository."""
        return SQLAlchemyPaymentAttemptRepository(session=db)

    def create_discount_rule_repository(self, db: AsyncSession) -> SQLAlchemyDiscountRuleRepository:
        """Create Discount Rule Repository."""
        return SQLAlchemyDiscountRuleRepository(session=db)

    def create_discount_code_repository(self, db: AsyncSession) -> SQLAlchemyDiscountCodeRepository:
        """Create Discount Code Repository."""
        return SQLAlchemyDiscountCodeRepository(session=db)

    # ==================== STORE SETTINGS ====================

    def create_order_acceptance_gate(self, db: AsyncSession) -> OrderAcceptanceGate:
        return OrderAcceptanceGate(
            uow=db,
            repository=SQLAlchemyOrderAcceptanceRepository(session=db),
            default_enabled=self.settings.ORDERS_ENABLED_DEFAULT,
            default_closed_message=self.settings.ORDERS_CLOSED_DEFAULT_MESSAGE,
        )

    def create_shipping_cost_service(self, db: AsyncSession) -> ShippingCostService:
        return ShippingCostService(
            uow=db,
            repository=SQLAlchemyShippingCostRepository(session=db),
            currency=self.settings.DEFAULT_CURRENCY,
            default_amount=self.settings.DEFAULT_SHIPPING_COST,
        )

    # ==================== CHECKOUT ====================

    def create_checkout_pricer(self, db: AsyncSession) -> CheckoutPricer:
        return CheckoutPricer(
            product_repository=self.create_product_repository(db),
            discount_rule_repository=self.create_discount_rule_repository(db),
            discount_code_repository=self.create_discount_code_repository(db),
            shipping_cost_service=self.create_shipping_cost_service(db),
            pricing_service=self.create_pricing_service(),
        )

    def create_calculate_total_use_case(self, db: AsyncSession) -> CalculateTotalUseCase:
        return CalculateTotalUseCase(pricer=self.create_checkout_pricer(db))

    def create_validate_discount_code_use_case(self, db: AsyncSession) -> ValidateDiscountCodeUseCase:
        return ValidateDiscountCodeUseCase(
            discount_code_repository=self.create_discount_code_repository(db),
            currency=self.settings.DEFAULT_CURRENCY,
        )

    # ==================== ORDERS ====================

    def create_create_order_use_case(self, db: AsyncSession) -> CreateOrderUseCase:
        """Create CreateOrderUseCase with dependencies."""
        return CreateOrderUseCase(
            uow=db,
            order_repository=self.create_order_repository(db),
            payment_attempt_repository=self.create_payment_attempt_repository(db),
            discount_code_repository=self.create_discount_code_repository(db),
            gate=self.create_order_acceptance_gate(db),
            pricer=self.create_checkout_pricer(db),
            state_machine=self.get_state_machine(),
            order_number_prefix=self.settings.ORDER_NUMBER_PREFIX,
        )

    def create_get_order_use_case(self, db: AsyncSession) -> GetOrderUseCase:
        return GetOrderUseCase(order_repository=self.create_order_repository(db))

    def create_get_admin_order_use_case(self, db: AsyncSession) -> GetAdminOrderUseCase:
        return GetAdminOrderUseCase(
            order_repository=self.create_order_repository(db),
            payment_attempt_repository=self.create_payment_attempt_repository(db),
        )

    def create_list_orders_use_case(self, db: AsyncSession) -> ListOrdersUseCase:
        return ListOrdersUseCase(order_repository=self.create_order_repository(db))

    def create_track_order_use_case(self, db: AsyncSession) -> TrackOrderUseCase:
        """Create TrackOrderUseCase with dependencies."""
        return TrackOrderUseCase(
            order_repository=self.create_order_repository(db),
            tracking_service=self.create_tracking_service(),
        )

    def create_force_order_status_use_case(self, db: AsyncSession) -> ForceOrderStatusUseCase:
        return ForceOrderStatusUseCase(
            uow=db,
            order_repository=self.create_order_repository(db),
            state_machine=self.get_state_machine(),
        )

    def create_bulk_force_order_status_use_case(self, db: AsyncSession) -> BulkForceOrderStatusUseCase:
        return BulkForceOrderStatusUseCase(
            uow=db,
            order_repository=self.create_order_repository(db),
            state_machine=self.get_state_machine(),
        )

    # ==================== PAYMENTS ====================

    def create_list_payment_methods_use_case(self, db: AsyncSession) -> ListPaymentMethodsUseCase:
        return ListPaymentMethodsUseCase(
            order_repository=self.create_order_repository(db),
            gateway=self._base.get_payment_gateway(),
            state_machine=self.get_state_machine(),
            cash_on_delivery_methods=list(self.settings.CASH_ON_DELIVERY_METHODS),
        )

    def create_initiate_payment_use_case(self, db: AsyncSession) -> InitiatePaymentUseCase:
        return InitiatePaymentUseCase(
            uow=db,
            order_repository=self.create_order_repository(db),
            payment_attempt_repository=self.create_payment_attempt_repository(db),
            gateway=self._base.get_payment_gateway(),
            state_machine=self.get_state_machine(),
        )

    def create_verify_payment_use_case(self, db: AsyncSession) -> VerifyPaymentUseCase:
        return VerifyPaymentUseCase(
            uow=db,
            order_repository=self.create_order_repository(db),
            payment_attempt_repository=self.create_payment_attempt_repository(db),
            gateway=self._base.get_payment_gateway(),
            idempotency=self._base.get_payment_idempotency(),
            state_machine=self.get_state_machine(),
        )

    # ==================== DISCOUNT RULES ====================

    def create_list_discount_rules_use_case(self, db: AsyncSession) -> ListDiscountRulesUseCase:
        return ListDiscountRulesUseCase(repository=self.create_discount_rule_repository(db))

    def create_get_discount_rule_use_case(self, db: AsyncSession) -> GetDiscountRuleUseCase:
        return GetDiscountRuleUseCase(uow=db, repository=self.create_discount_rule_repository(db))

    def create_create_discount_rule_use_case(self, db: AsyncSession) -> CreateDiscountRuleUseCase:
        return CreateDiscountRuleUseCase(uow=db, repository=self.create_discount_rule_repository(db))

    def create_update_discount_rule_use_case(self, db: AsyncSession) -> UpdateDiscountRuleUseCase:
        return UpdateDiscountRuleUseCase(uow=db, repository=self.create_discount_rule_repository(db))

    def create_delete_discount_rule_use_case(self, db: AsyncSession) -> DeleteDiscountRuleUseCase:
        return DeleteDiscountRuleUseCase(uow=db, repository=self.create_discount_rule_repository(db))

    def create_toggle_discount_rule_use_case(self, db: AsyncSession) -> ToggleDiscountRuleUseCase:
        return ToggleDiscountRuleUseCase(uow=db, repository=self.create_discount_rule_repository(db))

    def create_duplicate_discount_rule_use_case(self, db: AsyncSession) -> DuplicateDiscountRuleUseCase:
        return DuplicateDiscountRuleUseCase(uow=db, repository=self.create_discount_rule_repository(db))

    def create_get_affected_products_use_case(self, db: AsyncSession) -> GetAffectedProductsUseCase:
        return GetAffectedProductsUseCase(
            rule_repository=self.create_discount_rule_repository(db),
            product_repository=self.create_product_repository(db),
        )

    def create_get_discount_statistics_use_case(self, db: AsyncSession) -> GetDiscountStatisticsUseCase:
        return GetDiscountStatisticsUseCase(
            rule_repository=self.create_discount_rule_repository(db),
            product_repository=self.create_product_repository(db),
        )

    # ==================== DISCOUNT CODES ====================

    def create_discount_code_admin(self, db: AsyncSession) -> DiscountCodeAdmin:
        return DiscountCodeAdmin(uow=db, repository=self.create_discount_code_repository(db))
