"""
E-commerce API Schemas

Pydantic schemas for API request/response validation.
Response schemas are built from domain entities with `from_entity`.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domains.ecommerce.application.dto import (
    DiscountStatistics,
    GatewayPaymentMethod,
    OrderAcceptanceState,
    ShippingCostState,
)
from app.domains.ecommerce.application.use_cases import AffectedProduct
from app.domains.ecommerce.domain.entities.discount_code import DiscountCode
from app.domains.ecommerce.domain.entities.discount_rule import DiscountRule
from app.domains.ecommerce.domain.entities.order import Order, OrderItem
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt
from app.domains.ecommerce.domain.services import OrderPricing, StatusInfo, TimelineStep
from app.domains.ecommerce.domain.services.order_pricing import MAX_QUANTITY_PER_LINE
from app.domains.ecommerce.domain.value_objects.discount import DiscountScope, DiscountType
from app.domains.ecommerce.domain.value_objects.order_status import OrderStatus, OrderStatusTransition

# =============================================================================
# Orders
# =============================================================================


class CartItemRequest(BaseModel):
    """One cart line."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY_PER_LINE)
    size: str | None = Field(default=None, max_length=20)


class CreateOrderRequest(BaseModel):
    """Checkout submission."""

    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: str = Field(..., min_length=1, max_length=30)
    customer_email: str | None = Field(default=None, max_length=255)
    street: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    governorate: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    country: str = Field(default="Kuwait", max_length=100)
    items: list[CartItemRequest] = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1, max_length=50, description="Payment method code, e.g. 'cod' or 'kn'")
    discount_code: str | None = Field(default=None, max_length=50)


class OrderItemResponse(BaseModel):
    """Frozen product snapshot of an order line."""

    product_id: int
    title: str
    description: str | None = None
    price: Decimal
    discounted_price: Decimal | None = None
    has_discount: bool
    discount_percentage: Decimal | None = None
    currency: str
    images: list[str]
    size: str | None = None
    attributes: dict[str, Any]
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            product_id=item.product_id,
            title=item.title,
            description=item.description,
            price=item.price,
            discounted_price=item.discounted_price,
            has_discount=item.has_discount,
            discount_percentage=item.discount_percentage,
            currency=item.currency,
            images=list(item.images),
            size=item.size,
            attributes=dict(item.attributes),
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.line_total,
        )


class StatusHistoryResponse(BaseModel):
    from_status: str | None = None
    to_status: str
    actor: str
    notes: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: OrderStatusTransition) -> "StatusHistoryResponse":
        return cls(
            from_status=entry.from_status.value if entry.from_status else None,
            to_status=entry.to_status.value,
            actor=entry.actor.value,
            notes=entry.notes,
            created_at=entry.created_at,
        )


class OrderResponse(BaseModel):
    """Order as shown to the customer and the admin."""

    id: int
    order_number: str
    status: str
    currency: str
    subtotal_amount: Decimal
    discount_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal
    customer_name: str
    customer_phone: str
    customer_email: str | None = None
    street: str | None = None
    city: str | None = None
    governorate: str | None = None
    postal_code: str | None = None
    country: str | None = None
    payment_method: str
    discount_code: str | None = None
    tracking_number: str | None = None
    shipping_date: datetime | None = None
    delivery_date: datetime | None = None
    items: list[OrderItemResponse]
    status_history: list[StatusHistoryResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            id=order.id or 0,
            order_number=order.order_number,
            status=order.status.value,
            currency=order.currency,
            subtotal_amount=order.subtotal_amount,
            discount_amount=order.discount_amount,
            shipping_amount=order.shipping_amount,
            total_amount=order.total_amount,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_email=order.customer_email,
            street=address.street if address else None,
            city=address.city if address else None,
            governorate=address.governorate if address else None,
            postal_code=address.postal_code if address else None,
            country=address.country if address else None,
            payment_method=order.payment_method,
            discount_code=order.discount_code,
            tracking_number=order.tracking_number,
            shipping_date=order.shipping_date,
            delivery_date=order.delivery_date,
            items=[OrderItemResponse.from_entity(item) for item in order.items],
            status_history=[StatusHistoryResponse.from_entity(entry) for entry in order.status_history],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class AdminOrderResponse(OrderResponse):
    """Order with admin-only fields."""

    admin_notes: str | None = None
    payment_attempts: list["PaymentAttemptResponse"] = Field(default_factory=list)


class CreateOrderResponse(BaseModel):
    order_id: int
    order_number: str
    status: str
    total_amount: Decimal
    currency: str
    payment_id: str | None = None
    warnings: list[str] = Field(default_factory=list)
    order: OrderResponse


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    limit: int
    offset: int


class StatusInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    description: str
    color: str
    icon: str


class TimelineStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    title: str
    description: str
    date: datetime | None = None
    completed: bool


class TrackedOrderResponse(OrderResponse):
    """Order for the tracking page, which reads its lines from order_items."""

    order_items: list[OrderItemResponse]

    @classmethod
    def from_entity(cls, order: Order) -> "TrackedOrderResponse":
        base = OrderResponse.from_entity(order)
        return cls(**base.model_dump(), order_items=base.items)


class TrackOrderResponse(BaseModel):
    order: TrackedOrderResponse
    status_info: StatusInfoResponse
    timeline: list[TimelineStepResponse]

    @classmethod
    def build(cls, order: Order, status_info: StatusInfo, timeline: list[TimelineStep]) -> "TrackOrderResponse":
        return cls(
            order=TrackedOrderResponse.from_entity(order),
            status_info=StatusInfoResponse.model_validate(status_info),
            timeline=[TimelineStepResponse.model_validate(step) for step in timeline],
        )


# =============================================================================
# Checkout
# =============================================================================


class CalculateTotalRequest(BaseModel):
    items: list[CartItemRequest] = Field(..., min_length=1)
    discount_code: str | None = Field(default=None, max_length=50)


class PricedLineResponse(BaseModel):
    product_id: int
    title: str
    quantity: int
    size: str | None = None
    price: Decimal
    unit_price: Decimal
    has_discount: bool
    discount_percentage: Decimal | None = None
    line_total: Decimal


class CalculateTotalResponse(BaseModel):
    """Priced cart; nothing is persisted."""

    items: list[PricedLineResponse]
    subtotal: Decimal
    discount_amount: Decimal
    shipping_amount: Decimal
    total: Decimal
    currency: str
    discount_code: str | None = None

    @classmethod
    def from_pricing(cls, pricing: OrderPricing) -> "CalculateTotalResponse":
        return cls(
            items=[
                PricedLineResponse(
                    product_id=line.product.id or 0,
                    title=line.product.title,
                    quantity=line.quantity,
                    size=line.size,
                    price=line.resolution.listed_price.amount,
                    unit_price=line.resolution.unit_price.amount,
                    has_discount=line.resolution.has_discount,
                    discount_percentage=line.resolution.discount_percentage,
                    line_total=line.line_total.amount,
                )
                for line in pricing.lines
            ],
            subtotal=pricing.subtotal.amount,
            discount_amount=pricing.discount.amount,
            shipping_amount=pricing.shipping.amount,
            total=pricing.total.amount,
            currency=pricing.currency,
            discount_code=pricing.discount_code.code if pricing.discount_code else None,
        )


class ValidateDiscountRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    subtotal: Decimal = Field(..., ge=0)


class ValidateDiscountResponse(BaseModel):
    valid: bool = True
    code: str
    discount_type: str
    discount_value: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    total_after_discount: Decimal
    currency: str


# =============================================================================
# Store settings
# =============================================================================


class OrderAcceptanceResponse(BaseModel):
    orders_enabled: bool
    status: str
    message: str | None = None
    changed_by: str | None = None
    changed_at: datetime | None = None

    @classmethod
    def from_state(cls, state: OrderAcceptanceState) -> "OrderAcceptanceResponse":
        return cls(
            orders_enabled=state.orders_enabled,
            status=state.status,
            message=state.message,
            changed_by=state.changed_by,
            changed_at=state.changed_at,
        )


class OrderAcceptanceUpdate(BaseModel):
    enabled: bool
    message: str | None = Field(default=None, max_length=1000)


class ShippingCostResponse(BaseModel):
    amount: Decimal
    currency: str
    effective_at: datetime | None = None
    changed_by: str | None = None

    @classmethod
    def from_state(cls, state: ShippingCostState) -> "ShippingCostResponse":
        return cls(
            amount=state.amount,
            currency=state.currency,
            effective_at=state.effective_at,
            changed_by=state.changed_by,
        )


class ShippingCostUpdate(BaseModel):
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=3)


# =============================================================================
# Payments
# =============================================================================


class PaymentMethodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    method_id: int | None = None
    code: str
    name: str
    is_direct_payment: bool = False
    service_charge: Decimal = Decimal("0")
    total_amount: Decimal | None = None
    currency: str | None = None
    image_url: str | None = None

    @classmethod
    def from_method(cls, method: GatewayPaymentMethod) -> "PaymentMethodResponse":
        return cls.model_validate(method)


class InitiatePaymentRequest(BaseModel):
    order_id: int = Field(..., gt=0)
    payment_method: str = Field(..., min_length=1, max_length=50)
    customer_ip: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None, max_length=500)


class InitiatePaymentResponse(BaseModel):
    payment_id: str
    invoice_id: str
    redirect_url: str | None = None
    immediate_success: bool
    order_id: int
    order_number: str


class VerifyPaymentResponse(BaseModel):
    """Order snapshot after a verification; identical on every replay."""

    order: OrderResponse
    payment_status: str | None = None
    paid: bool
    replayed: bool = False


class PaymentAttemptResponse(BaseModel):
    payment_id: str
    invoice_reference: str
    payment_method_code: str
    amount: Decimal
    currency: str
    gateway_status: str
    caused_transition: bool
    verified_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, attempt: PaymentAttempt) -> "PaymentAttemptResponse":
        return cls(
            payment_id=attempt.payment_id,
            invoice_reference=attempt.invoice_reference,
            payment_method_code=attempt.payment_method_code,
            amount=attempt.amount,
            currency=attempt.currency,
            gateway_status=attempt.gateway_status.value,
            caused_transition=attempt.caused_transition,
            verified_at=attempt.verified_at,
            created_at=attempt.created_at,
        )


# =============================================================================
# Admin status override
# =============================================================================


class ForceStatusRequest(BaseModel):
    status: OrderStatus
    admin_notes: str | None = Field(default=None, max_length=2000)
    tracking_number: str | None = Field(default=None, max_length=100)
    shipping_date: datetime | None = None


class BulkStatusRequest(BaseModel):
    order_ids: list[int] = Field(..., min_length=1)
    status: OrderStatus
    admin_notes: str | None = Field(default=None, max_length=2000)


class BulkStatusResponse(BaseModel):
    updated: int
    status: str
    order_ids: list[int]


# =============================================================================
# Discount rules
# =============================================================================


class DiscountRuleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0)
    apply_to: DiscountScope = DiscountScope.ALL_PRODUCTS
    product_ids: list[int] = Field(default_factory=list)
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    priority: int = 0


class DiscountRuleUpdate(BaseModel):
    """Partial update; only fields sent are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = Field(default=None, gt=0)
    apply_to: DiscountScope | None = None
    product_ids: list[int] | None = None
    is_active: bool | None = None
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    priority: int | None = None


class DiscountRuleResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    discount_type: str
    discount_value: Decimal
    display_percentage: Decimal | None = None
    apply_to: str
    product_ids: list[int]
    is_active: bool
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    priority: int
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, rule: DiscountRule, at: datetime) -> "DiscountRuleResponse":
        return cls(
            id=rule.id or 0,
            name=rule.name,
            description=rule.description,
            discount_type=rule.discount_type.value,
            discount_value=rule.discount_value,
            display_percentage=(
                rule.discount_value if rule.discount_type == DiscountType.PERCENTAGE else None
            ),
            apply_to=rule.apply_to.value,
            product_ids=list(rule.product_ids),
            is_active=rule.is_active,
            starts_at=rule.starts_at,
            expires_at=rule.expires_at,
            priority=rule.priority,
            status=rule.status_at(at).value,
            created_at=rule.created_at,
            updated_at=rule.updated_at,
        )


class AffectedProductResponse(BaseModel):
    product_id: int
    title: str
    price: Decimal
    effective_price: Decimal
    applied_rule_id: int | None = None
    discount_percentage: Decimal | None = None
    rule_wins: bool

    @classmethod
    def from_affected(cls, affected: AffectedProduct) -> "AffectedProductResponse":
        resolution = affected.resolution
        return cls(
            product_id=affected.product.id or 0,
            title=affected.product.title,
            price=resolution.listed_price.amount,
            effective_price=resolution.unit_price.amount,
            applied_rule_id=resolution.applied_rule_id,
            discount_percentage=resolution.discount_percentage,
            rule_wins=affected.rule_wins,
        )


class DiscountStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    active: int
    inactive: int
    expired: int
    upcoming: int
    by_scope: dict[str, int]
    by_type: dict[str, int]
    products_with_discounts: int

    @classmethod
    def from_statistics(cls, stats: DiscountStatistics) -> "DiscountStatisticsResponse":
        return cls.model_validate(stats)


# =============================================================================
# Discount codes
# =============================================================================


class DiscountCodeCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str | None = Field(default=None, max_length=255)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0)
    minimum_order_amount: Decimal | None = Field(default=None, ge=0)
    maximum_discount_amount: Decimal | None = Field(default=None, gt=0)
    usage_limit: int | None = Field(default=None, ge=1)
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None


class DiscountCodeUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, max_length=255)
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = Field(default=None, gt=0)
    minimum_order_amount: Decimal | None = Field(default=None, ge=0)
    maximum_discount_amount: Decimal | None = Field(default=None, gt=0)
    usage_limit: int | None = Field(default=None, ge=1)
    is_active: bool | None = None
    starts_at: datetime | None = None
    expires_at: datetime | None = None


class DiscountCodeResponse(BaseModel):
    id: int
    code: str
    name: str | None = None
    discount_type: str
    discount_value: Decimal
    minimum_order_amount: Decimal | None = None
    maximum_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    usage_count: int
    is_active: bool
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, code: DiscountCode) -> "DiscountCodeResponse":
        return cls(
            id=code.id or 0,
            code=code.code,
            name=code.name,
            discount_type=code.discount_type.value,
            discount_value=code.discount_value,
            minimum_order_amount=code.minimum_order_amount,
            maximum_discount_amount=code.maximum_discount_amount,
            usage_limit=code.usage_limit,
            usage_count=code.usage_count,
            is_active=code.is_active,
            starts_at=code.starts_at,
            expires_at=code.expires_at,
            created_at=code.created_at,
        )


AdminOrderResponse.model_rebuild()
