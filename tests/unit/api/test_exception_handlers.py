"""
Unit Tests for the domain exception to HTTP status mapping
"""

import pytest

from app.api.exception_handlers import status_code_for
from app.clients.myfatoorah_client import PaymentGatewayConnectionError
from app.core.domain import (
    BusinessRuleViolationException,
    ConcurrencyException,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    OrdersClosedException,
    StateTransitionException,
    ValidationException,
    WrongCodeFormatException,
)


@pytest.mark.parametrize(
    "exc,expected",
    [
        (EntityNotFoundException("Order", 1), 404),
        (WrongCodeFormatException("TRK-1"), 404),
        (OrdersClosedException("closed"), 409),
        (DuplicateEntityException("DiscountCode", "code", "SAVE10"), 409),
        (ConcurrencyException("OrderAcceptance"), 409),
        (PaymentGatewayConnectionError("down"), 502),
        (ValidationException("bad"), 422),
        (BusinessRuleViolationException("RULE"), 422),
        (StateTransitionException(current_state="delivered", target_state="paid"), 422),
        (DomainException("other"), 400),
    ],
)
def test_status_code_for(exc, expected):
    assert status_code_for(exc) == expected
