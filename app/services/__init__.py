"""
Application services shared across use cases.
"""

from .payments import PaymentIdempotencyService

__all__ = ["PaymentIdempotencyService"]
