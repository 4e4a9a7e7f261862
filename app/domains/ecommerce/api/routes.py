"""
E-commerce API Routes

Public storefront endpoints: checkout, orders, tracking and payments.
Domain exceptions are translated to HTTP by the app's exception handlers.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.middleware.logging_middleware import client_ip
from app.domains.ecommerce.api.dependencies import (
    get_calculate_total_use_case,
    get_create_order_use_case,
    get_initiate_payment_use_case,
    get_list_payment_methods_use_case,
    get_order_acceptance_gate,
    get_order_use_case,
    get_shipping_cost_service,
    get_track_order_use_case,
    get_validate_discount_code_use_case,
    get_verify_payment_use_case,
)
from app.domains.ecommerce.api.schemas import (
    CalculateTotalRequest,
    CalculateTotalResponse,
    CartItemRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    OrderAcceptanceResponse,
    OrderResponse,
    PaymentMethodResponse,
    ShippingCostResponse,
    TrackOrderResponse,
    ValidateDiscountRequest,
    ValidateDiscountResponse,
    VerifyPaymentResponse,
)
from app.domains.ecommerce.application import use_cases
from app.domains.ecommerce.domain.services import CartLine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Storefront"])


def _cart_lines(items: list[CartItemRequest]) -> list[CartLine]:
    return [CartLine(product_id=item.product_id, quantity=item.quantity, size=item.size) for item in items]


# ==================== ORDERS ====================


@router.post("/orders", response_model=CreateOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: CreateOrderRequest,
    use_case: use_cases.CreateOrderUseCase = Depends(get_create_order_use_case),  # noqa: B008
):
    """Place an order. Fails with 409 while the store is not accepting orders."""
    result = await use_case.execute(
        use_cases.CreateOrderRequest(
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            customer_email=payload.customer_email,
            street=payload.street,
            city=payload.city,
            governorate=payload.governorate,
            postal_code=payload.postal_code,
            country=payload.country,
            items=_cart_lines(payload.items),
            payment_method=payload.payment_method,
            discount_code=payload.discount_code,
        )
    )
    order = result.order
    return CreateOrderResponse(
        order_id=order.id or 0,
        order_number=order.order_number,
        status=order.status.value,
        total_amount=order.total_amount,
        currency=order.currency,
        payment_id=result.payment_attempt.payment_id if result.payment_attempt else None,
        warnings=result.warnings,
        order=OrderResponse.from_entity(order),
    )


@router.get("/orders/track/{order_number}", response_model=TrackOrderResponse)
async def track_order(
    order_number: str,
    use_case: use_cases.TrackOrderUseCase = Depends(get_track_order_use_case),  # noqa: B008
):
    """Status info and timeline of an order."""
    result = await use_case.execute(order_number)
    return TrackOrderResponse.build(result.order, result.status_info, result.timeline)


@router.get("/orders/{order_number}", response_model=OrderResponse)
async def get_order(
    order_number: str,
    use_case: use_cases.GetOrderUseCase = Depends(get_order_use_case),  # noqa: B008
):
    order = await use_case.by_order_number(order_number)
    return OrderResponse.from_entity(order)


# ==================== CHECKOUT ====================


@router.post("/checkout/calculate-total", response_model=CalculateTotalResponse)
async def calculate_total(
    payload: CalculateTotalRequest,
    use_case: use_cases.CalculateTotalUseCase = Depends(get_calculate_total_use_case),  # noqa: B008
):
    """Price a cart the way order creation would, without persisting anything."""
    pricing = await use_case.execute(
        use_cases.CalculateTotalRequest(items=_cart_lines(payload.items), discount_code=payload.discount_code)
    )
    return CalculateTotalResponse.from_pricing(pricing)


@router.post("/checkout/validate-discount", response_model=ValidateDiscountResponse)
async def validate_discount(
    payload: ValidateDiscountRequest,
    use_case: use_cases.ValidateDiscountCodeUseCase = Depends(get_validate_discount_code_use_case),  # noqa: B008
):
    result = await use_case.execute(payload.code, payload.subtotal)
    return ValidateDiscountResponse(
        code=result.code,
        discount_type=result.discount_code.discount_type.value,
        discount_value=result.discount_code.discount_value,
        discount_amount=result.discount_amount.amount,
        subtotal=result.subtotal.amount,
        total_after_discount=result.total_after_discount.amount,
        currency=result.subtotal.currency,
    )


@router.get("/orders-acceptance", response_model=OrderAcceptanceResponse)
async def get_orders_acceptance(
    gate: use_cases.OrderAcceptanceGate = Depends(get_order_acceptance_gate),  # noqa: B008
):
    """Whether the store currently accepts orders."""
    return OrderAcceptanceResponse.from_state(await gate.state())


@router.get("/shipping/cost", response_model=ShippingCostResponse)
async def get_shipping_cost(
    service: use_cases.ShippingCostService = Depends(get_shipping_cost_service),  # noqa: B008
):
    return ShippingCostResponse.from_state(await service.current())


# ==================== PAYMENTS ====================


@router.get("/payments/methods", response_model=list[PaymentMethodResponse])
async def list_payment_methods(
    order_id: int = Query(..., gt=0),
    use_case: use_cases.ListPaymentMethodsUseCase = Depends(get_list_payment_methods_use_case),  # noqa: B008
):
    """Methods available to pay an order, including cash on delivery."""
    methods = await use_case.for_order(order_id)
    return [PaymentMethodResponse.from_method(method) for method in methods]


@router.post("/payments/initiate", response_model=InitiatePaymentResponse)
async def initiate_payment(
    payload: InitiatePaymentRequest,
    request: Request,
    use_case: use_cases.InitiatePaymentUseCase = Depends(get_initiate_payment_use_case),  # noqa: B008
):
    """Create a payment attempt and return where to send the customer."""
    result = await use_case.execute(
        use_cases.InitiatePaymentRequest(
            order_id=payload.order_id,
            payment_method=payload.payment_method,
            customer_ip=payload.customer_ip or client_ip(request),
            user_agent=payload.user_agent or request.headers.get("User-Agent"),
        )
    )
    return InitiatePaymentResponse(
        payment_id=result.payment_id,
        invoice_id=result.invoice_reference,
        redirect_url=result.redirect_url,
        immediate_success=result.immediate_success,
        order_id=result.order.id or 0,
        order_number=result.order.order_number,
    )


@router.api_route("/payments/verify", methods=["GET", "POST"], response_model=VerifyPaymentResponse)
async def verify_payment(
    invoice: str | None = Query(None, description="Gateway invoice id"),
    payment_id: str | None = Query(None, alias="paymentId", description="Gateway payment id"),
    use_case: use_cases.VerifyPaymentUseCase = Depends(get_verify_payment_use_case),  # noqa: B008
):
    """
    Gateway callback and customer return URL.

    Safe to call any number of times: the order moves to paid once and every
    call returns the same snapshot.
    """
    result = await use_case.execute(invoice_reference=invoice, gateway_payment_id=payment_id)
    return VerifyPaymentResponse(
        order=OrderResponse.from_entity(result.order),
        payment_status=result.payment_status,
        paid=result.order.is_paid(),
        replayed=result.replayed,
    )
