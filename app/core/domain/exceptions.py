"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
They are translated to HTTP responses in app.api.exception_handlers.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "ORDERS_CLOSED")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Covers malformed input and payment amount mismatches.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
        code: str = "ENTITY_NOT_FOUND",
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            code,
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class WrongCodeFormatException(EntityNotFoundException):
    """Raised when a tracking code looks like a payment reference instead of an order number."""

    def __init__(self, code_value: str):
        super().__init__(
            "Order",
            code_value,
            message=(
                f"'{code_value}' looks like a payment or shipment reference. "
                "Please use the order number from your confirmation (e.g. ORD-20250101-A1B2C3)."
            ),
            code="WRONG_CODE_FORMAT",
        )


class BusinessRuleViolationException(DomainException):
    """
    Raised when a business rule is violated.

    Use for invariant violations, precondition failures, etc.
    """

    def __init__(self, rule: str, message: str | None = None, details: dict[str, Any] | None = None):
        self.rule = rule
        msg = message or f"Business rule violated: {rule}"
        details = details or {}
        details["rule"] = rule
        super().__init__(msg, "BUSINESS_RULE_VIOLATION", details)


class OrdersClosedException(DomainException):
    """Raised when the store is not accepting new orders."""

    def __init__(self, message: str):
        super().__init__(message, "ORDERS_CLOSED")


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(
        self,
        operation: str,
        current_state: str,
        message: str | None = None,
        code: str = "INVALID_OPERATION",
        details: dict[str, Any] | None = None,
    ):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            code,
            {"operation": operation, "current_state": current_state, **(details or {})},
        )


class StateTransitionException(InvalidOperationException):
    """Raised when an order status transition is not allowed."""

    def __init__(
        self,
        current_state: str,
        target_state: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.target_state = target_state
        super().__init__(
            operation=f"transition_to_{target_state}",
            current_state=current_state,
            message=message or f"Cannot transition order from '{current_state}' to '{target_state}'",
            code="STATE_TRANSITION_ERROR",
            details={"target_state": target_state, **(details or {})},
        )


class ConcurrencyException(DomainException):
    """Raised when a concurrent writer won the race for the same record."""

    def __init__(self, entity_type: str, message: str | None = None):
        self.entity_type = entity_type
        super().__init__(
            message or f"Concurrent update detected for {entity_type}, please retry",
            "CONCURRENCY_CONFLICT",
            {"entity_type": entity_type},
        )


class DuplicateEntityException(DomainException):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: Any):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(
            f"{entity_type} with {field}='{value}' already exists",
            "DUPLICATE_ENTITY",
            {
                "entity_type": entity_type,
                "field": field,
                "value": str(value),
            },
        )


class GatewayException(DomainException):
    """Raised when the payment gateway cannot be reached or rejects a call."""

    def __init__(
        self,
        message: str,
        code: str = "GATEWAY_ERROR",
        service: str = "payment_gateway",
        original_error: Exception | None = None,
    ):
        self.service = service
        self.original_error = original_error
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, code, details)
