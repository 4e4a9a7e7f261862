"""
E-commerce Admin API Routes

Operator endpoints: order overrides, store settings, discount rules and codes.
Every route requires the admin bearer token.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import AdminActor, require_admin
from app.domains.ecommerce.api.dependencies import (
    get_admin_order_use_case,
    get_affected_products_use_case,
    get_bulk_force_order_status_use_case,
    get_create_discount_rule_use_case,
    get_delete_discount_rule_use_case,
    get_discount_code_admin,
    get_discount_rule_use_case,
    get_discount_statistics_use_case,
    get_duplicate_discount_rule_use_case,
    get_force_order_status_use_case,
    get_list_discount_rules_use_case,
    get_list_orders_use_case,
    get_order_acceptance_gate,
    get_shipping_cost_service,
    get_toggle_discount_rule_use_case,
    get_update_discount_rule_use_case,
)
from app.domains.ecommerce.api.schemas import (
    AdminOrderResponse,
    AffectedProductResponse,
    BulkStatusRequest,
    BulkStatusResponse,
    DiscountCodeCreate,
    DiscountCodeResponse,
    DiscountCodeUpdate,
    DiscountRuleCreate,
    DiscountRuleResponse,
    DiscountRuleUpdate,
    DiscountStatisticsResponse,
    ForceStatusRequest,
    OrderAcceptanceResponse,
    OrderAcceptanceUpdate,
    OrderListResponse,
    OrderResponse,
    PaymentAttemptResponse,
    ShippingCostResponse,
    ShippingCostUpdate,
)
from app.domains.ecommerce.application import use_cases
from app.domains.ecommerce.application.dto import DiscountRuleFilters
from app.domains.ecommerce.domain.entities.order import Order
from app.domains.ecommerce.domain.value_objects.discount import DiscountRuleStatus, DiscountScope, DiscountType
from app.domains.ecommerce.domain.value_objects.order_status import OrderStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Storefront Admin"], dependencies=[Depends(require_admin)])


def _admin_order(order: Order, attempts) -> AdminOrderResponse:
    return AdminOrderResponse(
        **OrderResponse.from_entity(order).model_dump(),
        admin_notes=order.admin_notes,
        payment_attempts=[PaymentAttemptResponse.from_entity(attempt) for attempt in attempts],
    )


# ==================== ORDERS ====================


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    status_filter: OrderStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    use_case: use_cases.ListOrdersUseCase = Depends(get_list_orders_use_case),  # noqa: B008
):
    result = await use_case.execute(status=status_filter, limit=limit, offset=offset)
    return OrderListResponse(
        orders=[OrderResponse.from_entity(order) for order in result.orders],
        total=result.total,
        limit=result.limit,
        offset=result.offset,
    )


@router.patch("/orders/bulk-status", response_model=BulkStatusResponse)
async def bulk_update_order_status(
    payload: BulkStatusRequest,
    use_case: use_cases.BulkForceOrderStatusUseCase = Depends(get_bulk_force_order_status_use_case),  # noqa: B008
):
    """
    Move several orders to one status.

    All or nothing: if any order cannot make the transition, none is changed
    and the offending orders are listed in the error details.
    """
    orders = await use_case.execute(
        use_cases.BulkForceOrderStatusRequest(
            order_ids=payload.order_ids,
            status=payload.status,
            admin_notes=payload.admin_notes,
        )
    )
    return BulkStatusResponse(
        updated=len(orders),
        status=payload.status.value,
        order_ids=[order.id or 0 for order in orders],
    )


@router.get("/orders/{order_id}", response_model=AdminOrderResponse)
async def get_order(
    order_id: int,
    use_case: use_cases.GetAdminOrderUseCase = Depends(get_admin_order_use_case),  # noqa: B008
):
    detail = await use_case.execute(order_id)
    return _admin_order(detail.order, detail.payment_attempts)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    payload: ForceStatusRequest,
    use_case: use_cases.ForceOrderStatusUseCase = Depends(get_force_order_status_use_case),  # noqa: B008
):
    """Force a status through the order state machine (illegal targets are 422)."""
    order = await use_case.execute(
        use_cases.ForceOrderStatusRequest(
            order_id=order_id,
            status=payload.status,
            admin_notes=payload.admin_notes,
            tracking_number=payload.tracking_number,
            shipping_date=payload.shipping_date,
        )
    )
    return OrderResponse.from_entity(order)


# ==================== STORE SETTINGS ====================


@router.get("/orders-acceptance", response_model=OrderAcceptanceResponse)
async def get_orders_acceptance(
    gate: use_cases.OrderAcceptanceGate = Depends(get_order_acceptance_gate),  # noqa: B008
):
    return OrderAcceptanceResponse.from_state(await gate.state())


@router.post("/orders-acceptance", response_model=OrderAcceptanceResponse)
async def set_orders_acceptance(
    payload: OrderAcceptanceUpdate,
    actor: AdminActor,
    gate: use_cases.OrderAcceptanceGate = Depends(get_order_acceptance_gate),  # noqa: B008
):
    state = await gate.set_open(payload.enabled, payload.message, changed_by=actor)
    return OrderAcceptanceResponse.from_state(state)


@router.post("/orders-acceptance/toggle", response_model=OrderAcceptanceResponse)
async def toggle_orders_acceptance(
    actor: AdminActor,
    gate: use_cases.OrderAcceptanceGate = Depends(get_order_acceptance_gate),  # noqa: B008
):
    return OrderAcceptanceResponse.from_state(await gate.toggle(changed_by=actor))


@router.get("/shipping-cost", response_model=ShippingCostResponse)
async def get_shipping_cost(
    service: use_cases.ShippingCostService = Depends(get_shipping_cost_service),  # noqa: B008
):
    return ShippingCostResponse.from_state(await service.current())


@router.put("/shipping-cost", response_model=ShippingCostResponse)
async def update_shipping_cost(
    payload: ShippingCostUpdate,
    actor: AdminActor,
    service: use_cases.ShippingCostService = Depends(get_shipping_cost_service),  # noqa: B008
):
    """Applies to orders created from now on."""
    return ShippingCostResponse.from_state(await service.replace(payload.amount, changed_by=actor))


# ==================== DISCOUNT RULES ====================


@router.get("/discounts", response_model=list[DiscountRuleResponse])
async def list_discount_rules(
    status_filter: DiscountRuleStatus | None = Query(None, alias="status"),
    discount_type: DiscountType | None = Query(None),
    apply_to: DiscountScope | None = Query(None),
    search: str | None = Query(None, max_length=255),
    use_case: use_cases.ListDiscountRulesUseCase = Depends(get_list_discount_rules_use_case),  # noqa: B008
):
    now = datetime.now(UTC)
    rules = await use_case.execute(
        DiscountRuleFilters(
            status=status_filter.value if status_filter else None,
            discount_type=discount_type.value if discount_type else None,
            apply_to=apply_to.value if apply_to else None,
            search=search,
        ),
        at=now,
    )
    return [DiscountRuleResponse.from_entity(rule, now) for rule in rules]


@router.post("/discounts", response_model=DiscountRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_discount_rule(
    payload: DiscountRuleCreate,
    use_case: use_cases.CreateDiscountRuleUseCase = Depends(get_create_discount_rule_use_case),  # noqa: B008
):
    rule = await use_case.execute(use_cases.DiscountRuleInput(**payload.model_dump()))
    return DiscountRuleResponse.from_entity(rule, datetime.now(UTC))


@router.get("/discounts/statistics", response_model=DiscountStatisticsResponse)
async def discount_statistics(
    use_case: use_cases.GetDiscountStatisticsUseCase = Depends(get_discount_statistics_use_case),  # noqa: B008
):
    return DiscountStatisticsResponse.from_statistics(await use_case.execute())


@router.get("/discounts/{rule_id}", response_model=DiscountRuleResponse)
async def get_discount_rule(
    rule_id: int,
    use_case: use_cases.GetDiscountRuleUseCase = Depends(get_discount_rule_use_case),  # noqa: B008
):
    return DiscountRuleResponse.from_entity(await use_case.execute(rule_id), datetime.now(UTC))


@router.put("/discounts/{rule_id}", response_model=DiscountRuleResponse)
async def update_discount_rule(
    rule_id: int,
    payload: DiscountRuleUpdate,
    use_case: use_cases.UpdateDiscountRuleUseCase = Depends(get_update_discount_rule_use_case),  # noqa: B008
):
    """Partial update. Existing orders keep their frozen prices."""
    rule = await use_case.execute(rule_id, payload.model_dump(exclude_unset=True))
    return DiscountRuleResponse.from_entity(rule, datetime.now(UTC))


@router.delete("/discounts/{rule_id}")
async def delete_discount_rule(
    rule_id: int,
    use_case: use_cases.DeleteDiscountRuleUseCase = Depends(get_delete_discount_rule_use_case),  # noqa: B008
):
    await use_case.execute(rule_id)
    return {"success": True, "id": rule_id}


@router.post("/discounts/{rule_id}/toggle", response_model=DiscountRuleResponse)
async def toggle_discount_rule(
    rule_id: int,
    use_case: use_cases.ToggleDiscountRuleUseCase = Depends(get_toggle_discount_rule_use_case),  # noqa: B008
):
    return DiscountRuleResponse.from_entity(await use_case.execute(rule_id), datetime.now(UTC))


@router.post("/discounts/{rule_id}/duplicate", response_model=DiscountRuleResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_discount_rule(
    rule_id: int,
    use_case: use_cases.DuplicateDiscountRuleUseCase = Depends(get_duplicate_discount_rule_use_case),  # noqa: B008
):
    return DiscountRuleResponse.from_entity(await use_case.execute(rule_id), datetime.now(UTC))


@router.get("/discounts/{rule_id}/affected-products", response_model=list[AffectedProductResponse])
async def affected_products(
    rule_id: int,
    use_case: use_cases.GetAffectedProductsUseCase = Depends(get_affected_products_use_case),  # noqa: B008
):
    return [AffectedProductResponse.from_affected(item) for item in await use_case.execute(rule_id)]


# ==================== DISCOUNT CODES ====================


@router.get("/discount-codes", response_model=list[DiscountCodeResponse])
async def list_discount_codes(
    admin: use_cases.DiscountCodeAdmin = Depends(get_discount_code_admin),  # noqa: B008
):
    return [DiscountCodeResponse.from_entity(code) for code in await admin.list()]


@router.post("/discount-codes", response_model=DiscountCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_discount_code(
    payload: DiscountCodeCreate,
    admin: use_cases.DiscountCodeAdmin = Depends(get_discount_code_admin),  # noqa: B008
):
    code = await admin.create(use_cases.DiscountCodeInput(**payload.model_dump()))
    return DiscountCodeResponse.from_entity(code)


@router.put("/discount-codes/{code_id}", response_model=DiscountCodeResponse)
async def update_discount_code(
    code_id: int,
    payload: DiscountCodeUpdate,
    admin: use_cases.DiscountCodeAdmin = Depends(get_discount_code_admin),  # noqa: B008
):
    code = await admin.update(code_id, payload.model_dump(exclude_unset=True))
    return DiscountCodeResponse.from_entity(code)


@router.delete("/discount-codes/{code_id}")
async def delete_discount_code(
    code_id: int,
    admin: use_cases.DiscountCodeAdmin = Depends(get_discount_code_admin),  # noqa: B008
):
    await admin.delete(code_id)
    return {"success": True, "id": code_id}


@router.post("/discount-codes/{code_id}/toggle", response_model=DiscountCodeResponse)
async def toggle_discount_code(
    code_id: int,
    admin: use_cases.DiscountCodeAdmin = Depends(get_discount_code_admin),  # noqa: B008
):
    return DiscountCodeResponse.from_entity(await admin.toggle(code_id))
