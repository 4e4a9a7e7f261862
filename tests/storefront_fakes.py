"""
In-memory test doubles for the storefront ports.

They follow the repository contracts closely enough for use case tests:
ids are assigned on add, soft-deleted rows are hidden, usage counting is
conditional, and flags keep a single current value.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from app.core.domain import Address, DuplicateEntityException, Money
from app.domains.ecommerce.application.dto import (
    GatewayInvoice,
    GatewayPaymentMethod,
    GatewayPaymentStatus,
    OrderAcceptanceState,
    ShippingCostState,
)
from app.domains.ecommerce.application.use_cases import (
    BulkForceOrderStatusUseCase,
    CalculateTotalUseCase,
    CheckoutPricer,
    CreateOrderUseCase,
    DiscountCodeAdmin,
    ForceOrderStatusUseCase,
    GetAdminOrderUseCase,
    GetOrderUseCase,
    InitiatePaymentUseCase,
    ListOrdersUseCase,
    ListPaymentMethodsUseCase,
    OrderAcceptanceGate,
    ShippingCostService,
    TrackOrderUseCase,
    ValidateDiscountCodeUseCase,
    VerifyPaymentUseCase,
)
from app.domains.ecommerce.domain.entities import DiscountCode, DiscountRule, Order, OrderItem, PaymentAttempt, Product
from app.domains.ecommerce.domain.entities.discount_code import normalize_code
from app.domains.ecommerce.domain.services import OrderPricingService, OrderStateMachine, OrderTrackingService
from app.domains.ecommerce.domain.value_objects import DiscountType, OrderStatus

# ============================================================================
# BUILDERS
# ============================================================================


def make_product(product_id: int = 1, price: str = "20.000", **kwargs) -> Product:
    defaults = {"title": f"Product {product_id}", "currency": "KWD"}
    defaults.update(kwargs)
    return Product(id=product_id, price=Decimal(price), **defaults)


def make_rule(
    rule_id: int | None = 1,
    value: str = "25",
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    **kwargs,
) -> DiscountRule:
    defaults = {"name": f"Rule {rule_id}"}
    defaults.update(kwargs)
    return DiscountRule(id=rule_id, discount_type=discount_type, discount_value=Decimal(value), **defaults)


def make_code(code: str = "SAVE10", value: str = "10", **kwargs) -> DiscountCode:
    defaults = {"id": 1, "discount_type": DiscountType.PERCENTAGE}
    defaults.update(kwargs)
    return DiscountCode(code=code, discount_value=Decimal(value), **defaults)


def make_order(
    status: OrderStatus = OrderStatus.AWAITING_PAYMENT,
    total: str = "20.000",
    order_id: int | None = None,
    payment_method: str = "kn",
    order_number: str = "ORD-20260315-ABC123",
) -> Order:
    """An order already sitting in status, with no pending events or history."""
    amount = Money(Decimal(total), "KWD")
    item = OrderItem(product_id=1, title="Product 1", quantity=1, unit_price=amount.amount, price=amount.amount)
    initial = status if status.accepts_payment() else OrderStatus.AWAITING_PAYMENT
    order = Order.place(
        order_number=order_number,
        initial_status=initial,
        items=[item],
        subtotal=amount,
        discount=Money.zero("KWD"),
        shipping=Money.zero("KWD"),
        total=amount,
        customer_name="Sara",
        customer_phone="+96550001234",
        shipping_address=Address(street="Block 4, Street 12", city="Salmiya"),
        payment_method=payment_method,
    )
    order.id = order_id
    order.status = status
    order.pull_new_history()
    order.clear_domain_events()
    return order


# ============================================================================
# UNIT OF WORK AND REPOSITORIES
# ============================================================================


class FakeUnitOfWork:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0
        self._row_locks: dict[str, asyncio.Lock] = {}
        self._held: list[asyncio.Lock] = []

    async def lock_row(self, key: str) -> None:
        """Stand-in for SELECT ... FOR UPDATE, held until commit or rollback."""
        lock = self._row_locks.setdefault(key, asyncio.Lock())
        await lock.acquire()
        self._held.append(lock)

    def _release_rows(self) -> None:
        while self._held:
            self._held.pop().release()

    async def commit(self) -> None:
        self.commits += 1
        self._release_rows()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self._release_rows()


class FakeProductRepository:
    def __init__(self, products: list[Product] | None = None):
        self.products = {product.id: product for product in products or []}

    async def get_by_ids(self, product_ids: list[int]) -> dict[int, Product]:
        return {pid: self.products[pid] for pid in product_ids if pid in self.products}

    async def list_active(self, limit: int = 500) -> list[Product]:
        return [product for product in self.products.values() if product.is_active][:limit]


class FakeOrderRepository:
    def __init__(self):
        self.orders: dict[int, Order] = {}
        self.history_rows: list = []
        self._next_id = 1
        self.locked: list[int] = []

    async def add(self, order: Order) -> Order:
        order.id = self._next_id
        self._next_id += 1
        self.orders[order.id] = order
        self.history_rows.extend(order.pull_new_history())
        return order

    def seed(self, order: Order) -> Order:
        if order.id is None:
            order.id = self._next_id
        self._next_id = max(self._next_id, order.id + 1)
        self.orders[order.id] = order
        return order

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        if for_update:
            self.locked.append(order_id)
        return self.orders.get(order_id)

    async def get_by_ids(self, order_ids: list[int], for_update: bool = False) -> list[Order]:
        return [self.orders[oid] for oid in sorted(order_ids) if oid in self.orders]

    async def get_by_order_number(self, order_number: str) -> Order | None:
        for order in self.orders.values():
            if order.order_number.upper() == order_number.strip().upper():
                return order
        return None

    async def save(self, order: Order) -> Order:
        self.history_rows.extend(order.pull_new_history())
        return order

    async def list(self, status: OrderStatus | None = None, limit: int = 50, offset: int = 0) -> list[Order]:
        orders = [o for o in self.orders.values() if status is None or o.status == status]
        orders.sort(key=lambda o: o.id, reverse=True)
        return orders[offset : offset + limit]

    async def count(self, status: OrderStatus | None = None) -> int:
        return len([o for o in self.orders.values() if status is None or o.status == status])


class FakePaymentAttemptRepository:
    def __init__(self, uow: FakeUnitOfWork | None = None):
        self.attempts: dict[int, PaymentAttempt] = {}
        self._next_id = 1
        self._uow = uow

    async def add(self, attempt: PaymentAttempt) -> PaymentAttempt:
        attempt.id = self._next_id
        self._next_id += 1
        self.attempts[attempt.id] = attempt
        return attempt

    async def get_by_invoice_reference(self, invoice_reference: str, for_update: bool = False):
        for attempt in self.attempts.values():
            if attempt.invoice_reference == invoice_reference:
                if for_update and self._uow is not None:
                    await self._uow.lock_row(f"payment_attempt:{attempt.id}")
                return attempt
        return None

    async def get_cash_on_delivery_attempt(self, order_id: int):
        for attempt in self.attempts.values():
            if attempt.order_id == order_id and attempt.is_cash_on_delivery():
                return attempt
        return None

    async def list_by_order(self, order_id: int) -> list[PaymentAttempt]:
        return [a for a in self.attempts.values() if a.order_id == order_id]

    async def save(self, attempt: PaymentAttempt) -> PaymentAttempt:
        self.attempts[attempt.id] = attempt
        return attempt


class FakeDiscountRuleRepository:
    def __init__(self, rules: list[DiscountRule] | None = None):
        self.rules: dict[int, DiscountRule] = {}
        self._next_id = 1
        for rule in rules or []:
            if rule.id is None:
                rule.id = self._next_id
            self.rules[rule.id] = rule
            self._next_id = max(self._next_id, rule.id + 1)

    async def list_all(self) -> list[DiscountRule]:
        return [rule for rule in self.rules.values() if not rule.is_deleted()]

    async def list_active(self) -> list[DiscountRule]:
        return [rule for rule in self.rules.values() if rule.is_active and not rule.is_deleted()]

    async def get(self, rule_id: int) -> DiscountRule | None:
        rule = self.rules.get(rule_id)
        return None if rule is None or rule.is_deleted() else rule

    async def add(self, rule: DiscountRule) -> DiscountRule:
        rule.id = self._next_id
        self._next_id += 1
        self.rules[rule.id] = rule
        return rule

    async def save(self, rule: DiscountRule) -> DiscountRule:
        self.rules[rule.id] = rule
        return rule


class FakeDiscountCodeRepository:
    def __init__(self, codes: list[DiscountCode] | None = None):
        self.codes: dict[int, DiscountCode] = {}
        self._next_id = 1
        for code in codes or []:
            if code.id is None:
                code.id = self._next_id
            self.codes[code.id] = code
            self._next_id = max(self._next_id, code.id + 1)

    def _live(self) -> list[DiscountCode]:
        return [code for code in self.codes.values() if code.deleted_at is None]

    async def get_by_code(self, code: str) -> DiscountCode | None:
        wanted = normalize_code(code)
        for item in self._live():
            if item.code == wanted:
                return item
        return None

    async def get(self, code_id: int) -> DiscountCode | None:
        code = self.codes.get(code_id)
        return None if code is None or code.deleted_at is not None else code

    async def list_all(self) -> list[DiscountCode]:
        return self._live()

    async def add(self, code: DiscountCode) -> DiscountCode:
        if await self.get_by_code(code.code) is not None:
            raise DuplicateEntityException("DiscountCode", "code", code.code)
        code.id = self._next_id
        self._next_id += 1
        self.codes[code.id] = code
        return code

    async def save(self, code: DiscountCode) -> DiscountCode:
        self.codes[code.id] = code
        return code

    async def increment_usage(self, code_id: int) -> bool:
        code = await self.get(code_id)
        if code is None or code.is_exhausted():
            return False
        code.usage_count += 1
        return True


class FakeOrderAcceptanceRepository:
    def __init__(self, current: OrderAcceptanceState | None = None):
        self.current = current
        self.history: list[OrderAcceptanceState] = []

    async def get_current(self) -> OrderAcceptanceState | None:
        return self.current

    async def replace_current(self, state: OrderAcceptanceState) -> OrderAcceptanceState:
        state.changed_at = datetime.now(UTC)
        if self.current is not None:
            self.history.append(self.current)
        self.current = state
        return state


class FakeShippingCostRepository:
    def __init__(self, current: ShippingCostState | None = None):
        self.current = current

    async def get_current(self) -> ShippingCostState | None:
        return self.current

    async def replace_current(self, state: ShippingCostState) -> ShippingCostState:
        state.effective_at = datetime.now(UTC)
        self.current = state
        return state


# ============================================================================
# GATEWAY AND IDEMPOTENCY
# ============================================================================


class FakePaymentGateway:
    """Gateway double; status per invoice is set by the test."""

    def __init__(self):
        self.methods = [
            GatewayPaymentMethod(method_id=1, code="kn", name="KNET"),
            GatewayPaymentMethod(method_id=2, code="vm", name="VISA/MASTER"),
        ]
        self.statuses: dict[str, GatewayPaymentStatus] = {}
        self.executed: list[dict] = []
        self.status_calls: list[tuple[str, str]] = []
        self._next_invoice = 5000

    async def list_payment_methods(self, amount: Decimal, currency: str) -> list[GatewayPaymentMethod]:
        return list(self.methods)

    async def execute_payment(self, **kwargs) -> GatewayInvoice:
        self._next_invoice += 1
        self.executed.append(kwargs)
        invoice_id = str(self._next_invoice)
        return GatewayInvoice(invoice_id=invoice_id, payment_url=f"https://pay.example/{invoice_id}")

    def set_status(self, invoice_id: str, status: str, amount: str, currency: str = "KWD", payment_id: str = "PID-1"):
        self.statuses[invoice_id] = GatewayPaymentStatus(
            invoice_id=invoice_id,
            status=status,
            amount=Decimal(amount),
            currency=currency,
            gateway_payment_id=payment_id,
        )

    async def get_payment_status(self, key: str, key_type: str = "InvoiceId") -> GatewayPaymentStatus:
        self.status_calls.append((key, key_type))
        await asyncio.sleep(0)
        if key_type == "PaymentId":
            for status in self.statuses.values():
                if status.gateway_payment_id == key:
                    return status
        return self.statuses[key]


class FakeIdempotency:
    """Same contract as PaymentIdempotencyService, backed by a dict."""

    def __init__(self):
        self.keys: dict[str, str] = {}

    async def check_and_lock(self, invoice_reference: str) -> tuple[bool, int | None]:
        existing = self.keys.get(invoice_reference)
        if existing is None:
            self.keys[invoice_reference] = "processing"
            return (False, None)
        if existing.startswith("order:"):
            return (True, int(existing.split(":", 1)[1]))
        return (True, None)

    async def mark_complete(self, invoice_reference: str, order_id: int) -> None:
        self.keys[invoice_reference] = f"order:{order_id}"

    async def mark_failed(self, invoice_reference: str, error: str) -> None:
        self.keys.pop(invoice_reference, None)

    async def release(self, invoice_reference: str) -> None:
        self.keys.pop(invoice_reference, None)


# ============================================================================
# WIRING
# ============================================================================


@dataclass
class Storefront:
    """Every use case wired to in-memory doubles."""

    products: list[Product] = field(default_factory=list)
    rules: list[DiscountRule] = field(default_factory=list)
    codes: list[DiscountCode] = field(default_factory=list)
    shipping: str | None = None
    orders_enabled: bool | None = None
    closed_message: str | None = None

    def __post_init__(self):
        self.uow = FakeUnitOfWork()
        self.product_repo = FakeProductRepository(self.products)
        self.order_repo = FakeOrderRepository()
        self.attempt_repo = FakePaymentAttemptRepository(self.uow)
        self.rule_repo = FakeDiscountRuleRepository(self.rules)
        self.code_repo = FakeDiscountCodeRepository(self.codes)
        self.acceptance_repo = FakeOrderAcceptanceRepository(
            OrderAcceptanceState(orders_enabled=self.orders_enabled, message=self.closed_message)
            if self.orders_enabled is not None
            else None
        )
        self.shipping_repo = FakeShippingCostRepository(
            ShippingCostState(amount=Decimal(self.shipping), currency="KWD") if self.shipping is not None else None
        )
        self.gateway = FakePaymentGateway()
        self.idempotency = FakeIdempotency()
        self.state_machine = OrderStateMachine(["cod", "cash"])

        self.gate = OrderAcceptanceGate(self.uow, self.acceptance_repo, default_closed_message="Closed for today")
        self.shipping_service = ShippingCostService(self.uow, self.shipping_repo)
        self.pricer = CheckoutPricer(
            self.product_repo,
            self.rule_repo,
            self.code_repo,
            self.shipping_service,
            OrderPricingService("KWD"),
        )

    def create_order(self) -> CreateOrderUseCase:
        return CreateOrderUseCase(
            uow=self.uow,
            order_repository=self.order_repo,
            payment_attempt_repository=self.attempt_repo,
            discount_code_repository=self.code_repo,
            gate=self.gate,
            pricer=self.pricer,
            state_machine=self.state_machine,
        )

    def calculate_total(self) -> CalculateTotalUseCase:
        return CalculateTotalUseCase(self.pricer)

    def validate_code(self) -> ValidateDiscountCodeUseCase:
        return ValidateDiscountCodeUseCase(self.code_repo)

    def get_order(self) -> GetOrderUseCase:
        return GetOrderUseCase(self.order_repo)

    def admin_order(self) -> GetAdminOrderUseCase:
        return GetAdminOrderUseCase(self.order_repo, self.attempt_repo)

    def list_orders(self) -> ListOrdersUseCase:
        return ListOrdersUseCase(self.order_repo)

    def track_order(self) -> TrackOrderUseCase:
        return TrackOrderUseCase(self.order_repo, OrderTrackingService(["TRK-", "INV-", "PAY-"]))

    def force_status(self) -> ForceOrderStatusUseCase:
        return ForceOrderStatusUseCase(self.uow, self.order_repo, self.state_machine)

    def bulk_status(self) -> BulkForceOrderStatusUseCase:
        return BulkForceOrderStatusUseCase(self.uow, self.order_repo, self.state_machine)

    def payment_methods(self) -> ListPaymentMethodsUseCase:
        return ListPaymentMethodsUseCase(self.order_repo, self.gateway, self.state_machine, ["cod"])

    def initiate_payment(self) -> InitiatePaymentUseCase:
        return InitiatePaymentUseCase(self.uow, self.order_repo, self.attempt_repo, self.gateway, self.state_machine)

    def verify_payment(self) -> VerifyPaymentUseCase:
        return VerifyPaymentUseCase(
            self.uow,
            self.order_repo,
            self.attempt_repo,
            self.gateway,
            self.idempotency,
            self.state_machine,
        )

    def code_admin(self) -> DiscountCodeAdmin:
        return DiscountCodeAdmin(self.uow, self.code_repo)


__all__ = [
    "make_product",
    "make_rule",
    "make_code",
    "make_order",
    "Storefront",
    "FakeUnitOfWork",
    "FakeProductRepository",
    "FakeOrderRepository",
    "FakePaymentAttemptRepository",
    "FakeDiscountRuleRepository",
    "FakeDiscountCodeRepository",
    "FakeOrderAcceptanceRepository",
    "FakeShippingCostRepository",
    "FakePaymentGateway",
    "FakeIdempotency",
]
