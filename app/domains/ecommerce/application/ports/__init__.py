"""
Ecommerce Application Ports

Interface definitions (ports) for the Ecommerce domain.
Uses Protocol for structural typing.
"""

from decimal import Decimal
from typing import Protocol, runtime_checkable

from app.domains.ecommerce.application.dto import (
    GatewayInvoice,
    GatewayPaymentMethod,
    GatewayPaymentStatus,
    OrderAcceptanceState,
    ShippingCostState,
)
from app.domains.ecommerce.domain.entities.discount_code import DiscountCode
from app.domains.ecommerce.domain.entities.discount_rule import DiscountRule
from app.domains.ecommerce.domain.entities.order import Order
from app.domains.ecommerce.domain.entities.payment_attempt import PaymentAttempt
from app.domains.ecommerce.domain.entities.product import Product
from app.domains.ecommerce.domain.value_objects.order_status import OrderStatus


@runtime_checkable
class IUnitOfWork(Protocol):
    """
    Transaction boundary of a use case.

    AsyncSession satisfies this protocol directly.
    """

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@runtime_checkable
class IProductRepository(Protocol):
    """
    Interface for product repository.

    The catalog is read only for this service.
    """

    async def get_by_ids(self, product_ids: list[int]) -> dict[int, Product]:
        """Get products by ID, keyed by ID (missing IDs are absent)"""
        ...

    async def list_active(self, limit: int = 500) -> list[Product]:
        """List products available for sale"""
        ...


@runtime_checkable
class IOrderRepository(Protocol):
    """
    Interface for order repository.

    Defines the contract for order data access.
    """

    async def add(self, order: Order) -> Order:
        """Persist a new order with its items and initial history; sets order.id"""
        ...

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Order | None:
        """Get order by ID, optionally locking the row"""
        ...

    async def get_by_ids(self, order_ids: list[int], for_update: bool = False) -> list[Order]:
        """Get several orders, ordered by ID"""
        ...

    async def get_by_order_number(self, order_number: str) -> Order | None:
        """Get order by its public number, ignoring case"""
        ...

    async def save(self, order: Order) -> Order:
        """Persist status, fulfilment fields and new history entries"""
        ...

    async def list(self, status: OrderStatus | None = None, limit: int = 50, offset: int = 0) -> list[Order]:
        """List orders, newest first"""
        ...

    async def count(self, status: OrderStatus | None = None) -> int:
        """Count orders"""
        ...


@runtime_checkable
class IPaymentAttemptRepository(Protocol):
    """
    Interface for payment attempt repository.
    """

    async def add(self, attempt: PaymentAttempt) -> PaymentAttempt:
        """Persist a new attempt; sets attempt.id"""
        ...

    async def get_by_invoice_reference(self, invoice_reference: str, for_update: bool = False) -> PaymentAttempt | None:
        """Get attempt by gateway invoice reference, optionally locking the row"""
        ...

    async def get_cash_on_delivery_attempt(self, order_id: int) -> PaymentAttempt | None:
        """Get the attempt recorded at checkout for a cash-on-delivery order"""
        ...

    async def list_by_order(self, order_id: int) -> list[PaymentAttempt]:
        """List the attempts of an order, oldest first"""
        ...

    async def save(self, attempt: PaymentAttempt) -> PaymentAttempt:
        """Persist status changes of an attempt"""
        ...


@runtime_checkable
class IDiscountRuleRepository(Protocol):
    """
    Interface for discount rule repository.

    Soft-deleted rules are never returned.
    """

    async def list_all(self) -> list[DiscountRule]:
        """List every non-deleted rule"""
        ...

    async def list_active(self) -> list[DiscountRule]:
        """List enabled rules; windows and scope are checked by the resolver"""
        ...

    async def get(self, rule_id: int) -> DiscountRule | None:
        """Get a rule by ID"""
        ...

    async def add(self, rule: DiscountRule) -> DiscountRule:
        """Persist a new rule"""
        ...

    async def save(self, rule: DiscountRule) -> DiscountRule:
        """Persist changes to a rule"""
        ...


@runtime_checkable
class IDiscountCodeRepository(Protocol):
    """
    Interface for discount code repository.
    """

    async def get_by_code(self, code: str) -> DiscountCode | None:
        """Get a non-deleted code (case-insensitive)"""
        ...

    async def get(self, code_id: int) -> DiscountCode | None:
        """Get a non-deleted code by ID"""
        ...

    async def list_all(self) -> list[DiscountCode]:
        """List non-deleted codes"""
        ...

    async def add(self, code: DiscountCode) -> DiscountCode:
        """Persist a new code"""
        ...

    async def save(self, code: DiscountCode) -> DiscountCode:
        """Persist changes to a code"""
        ...

    async def increment_usage(self, code_id: int) -> bool:
        """Conditionally count one use; False when the limit was reached meanwhile"""
        ...


@runtime_checkable
class IOrderAcceptanceRepository(Protocol):
    """
    Interface for the order acceptance flag.
    """

    async def get_current(self) -> OrderAcceptanceState | None:
        """Current flag, or None if never set"""
        ...

    async def replace_current(self, state: OrderAcceptanceState) -> OrderAcceptanceState:
        """Insert a new current row and retire the previous one"""
        ...


@runtime_checkable
class IShippingCostRepository(Protocol):
    """
    Interface for the shipping cost flag.
    """

    async def get_current(self) -> ShippingCostState | None:
        """Current shipping cost, or None if never set"""
        ...

    async def replace_current(self, state: ShippingCostState) -> ShippingCostState:
        """Insert a new current row and retire the previous one"""
        ...


@runtime_checkable
class IPaymentGateway(Protocol):
    """
    Interface for the hosted payment gateway.

    Implementations raise GatewayException subclasses on failure.
    """

    async def list_payment_methods(self, amount: Decimal, currency: str) -> list[GatewayPaymentMethod]:
        """Methods available for an amount"""
        ...

    async def execute_payment(
        self,
        *,
        method_id: int,
        amount: Decimal,
        currency: str,
        customer_name: str,
        customer_email: str | None,
        customer_mobile: str | None,
        customer_reference: str,
        user_defined_field: str | None = None,
    ) -> GatewayInvoice:
        """Create an invoice and get the hosted payment URL"""
        ...

    async def get_payment_status(self, key: str, key_type: str = "InvoiceId") -> GatewayPaymentStatus:
        """Authoritative status of an invoice"""
        ...


@runtime_checkable
class IPaymentIdempotency(Protocol):
    """
    Interface for the payment verification lock and receipt store.
    """

    async def check_and_lock(self, invoice_reference: str) -> tuple[bool, int | None]:
        """(is_duplicate, order_id of a completed verification or None)"""
        ...

    async def mark_complete(self, invoice_reference: str, order_id: int) -> None: ...

    async def mark_failed(self, invoice_reference: str, error: str) -> None: ...

    async def release(self, invoice_reference: str) -> None: ...


__all__ = [
    "IUnitOfWork",
    "IProductRepository",
    "IOrderRepository",
    "IPaymentAttemptRepository",
    "IDiscountRuleRepository",
    "IDiscountCodeRepository",
    "IOrderAcceptanceRepository",
    "IShippingCostRepository",
    "IPaymentGateway",
    "IPaymentIdempotency",
]
