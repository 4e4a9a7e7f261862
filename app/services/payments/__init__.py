"""
Payment services.
"""

from .payment_idempotency import PaymentIdempotencyService

__all__ = ["PaymentIdempotencyService"]
