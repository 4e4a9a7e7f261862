"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Events: Domain events for communication
- Exceptions: Domain-specific error handling
"""

from app.core.domain.entities import (
    AggregateRoot,
    Entity,
)
from app.core.domain.events import (
    DomainEvent,
    DomainEventPublisher,
)
from app.core.domain.exceptions import (
    BusinessRuleViolationException,
    ConcurrencyException,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    GatewayException,
    InvalidOperationException,
    OrdersClosedException,
    StateTransitionException,
    ValidationException,
    WrongCodeFormatException,
)
from app.core.domain.value_objects import (
    Address,
    Email,
    Money,
    PhoneNumber,
    StatusEnum,
    ValueObject,
    currency_quantum,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    # Value Objects
    "ValueObject",
    "Money",
    "Email",
    "PhoneNumber",
    "Address",
    "StatusEnum",
    "currency_quantum",
    # Events
    "DomainEvent",
    "DomainEventPublisher",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "WrongCodeFormatException",
    "BusinessRuleViolationException",
    "OrdersClosedException",
    "InvalidOperationException",
    "StateTransitionException",
    "ConcurrencyException",
    "DuplicateEntityException",
    "GatewayException",
]
