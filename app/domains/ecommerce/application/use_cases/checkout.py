"""
Checkout Use Cases

Price previews and discount code checks. Nothing here is persisted; order
creation uses the same CheckoutPricer, so the preview and the order agree.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from app.core.domain import Money, ValidationException
from app.domains.ecommerce.application.ports import (
    IDiscountCodeRepository,
    IDiscountRuleRepository,
    IProductRepository,
)
from app.domains.ecommerce.application.use_cases.shipping_cost import ShippingCostService
from app.domains.ecommerce.domain.entities.discount_code import DiscountCode, normalize_code
from app.domains.ecommerce.domain.services.order_pricing import CartLine, OrderPricing, OrderPricingService

logger = logging.getLogger(__name__)


class CheckoutPricer:
    """
    Loads what pricing needs (products, active rules, shipping cost, code)
    and runs OrderPricingService over a cart.
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        discount_rule_repository: IDiscountRuleRepository,
        discount_code_repository: IDiscountCodeRepository,
        shipping_cost_service: ShippingCostService,
        pricing_service: OrderPricingService,
    ):
        self.product_repository = product_repository
        self.discount_rule_repository = discount_rule_repository
        self.discount_code_repository = discount_code_repository
        self.shipping_cost_service = shipping_cost_service
        self.pricing_service = pricing_service

    async def load_code(self, code: str | None) -> DiscountCode | None:
        """
        Raises:
            ValidationException: Unknown code
        """
        if code is None or not code.strip():
            return None
        discount_code = await self.discount_code_repository.get_by_code(normalize_code(code))
        if discount_code is None:
            raise ValidationException(
                message="Invalid discount code",
                field="discount_code",
                details={"code": normalize_code(code)},
            )
        return discount_code

    async def price(
        self,
        lines: list[CartLine],
        discount_code: str | None = None,
        at: datetime | None = None,
    ) -> OrderPricing:
        at = at or datetime.now(UTC)
        products = await self.product_repository.get_by_ids(sorted({line.product_id for line in lines}))
        rules = await self.discount_rule_repository.list_active()
        shipping = await self.shipping_cost_service.current_money()
        code = await self.load_code(discount_code)
        return self.pricing_service.price_order(
            lines=lines,
            products=products,
            rules=rules,
            at=at,
            shipping=shipping,
            discount_code=code,
        )


@dataclass
class CalculateTotalRequest:
    """Cart to price."""

    items: list[CartLine]
    discount_code: str | None = None


class CalculateTotalUseCase:
    """
    Use Case: Calculate Checkout Total

    Returns the same pricing order creation would produce, without persisting.
    """

    def __init__(self, pricer: CheckoutPricer):
        self.pricer = pricer

    async def execute(self, request: CalculateTotalRequest) -> OrderPricing:
        return await self.pricer.price(request.items, request.discount_code)


@dataclass
class ValidateDiscountCodeResponse:
    """Outcome of a discount code check."""

    code: str
    discount_amount: Money
    subtotal: Money
    discount_code: DiscountCode

    @property
    def total_after_discount(self) -> Money:
        return self.subtotal.subtract(self.discount_amount)


class ValidateDiscountCodeUseCase:
    """
    Use Case: Validate Discount Code

    Checks a code against a subtotal and returns the discount it would give.
    """

    def __init__(self, discount_code_repository: IDiscountCodeRepository, currency: str = "KWD"):
        self.discount_code_repository = discount_code_repository
        self.currency = currency.upper()

    async def execute(self, code: str, subtotal: Decimal) -> ValidateDiscountCodeResponse:
        """
        Raises:
            ValidationException: Unknown, inactive, expired, exhausted, or
                below the minimum order amount
        """
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationException(message="Discount code is required", field="code")
        if subtotal < 0:
            raise ValidationException(message="Subtotal cannot be negative", field="subtotal")

        discount_code = await self.discount_code_repository.get_by_code(normalized)
        if discount_code is None:
            raise ValidationException(message="Invalid discount code", field="code", details={"code": normalized})

        amount = Money(subtotal, self.currency)
        discount_code.ensure_redeemable(amount, datetime.now(UTC))
        discount = discount_code.calculate_discount(amount)

        logger.info(f"Discount code {normalized} validated: {discount} off {amount}")
        return ValidateDiscountCodeResponse(
            code=normalized,
            discount_amount=discount,
            subtotal=amount,
            discount_code=discount_code,
        )


__all__ = [
    "CheckoutPricer",
    "CalculateTotalRequest",
    "CalculateTotalUseCase",
    "ValidateDiscountCodeUseCase",
    "ValidateDiscountCodeResponse",
]
