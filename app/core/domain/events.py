"""
Domain events and their in-process publisher.

Order placement and status changes are announced here once the database
transaction has committed. Subscribers are registered at startup
(see app.core.lifecycle) and by the test suite.
"""

import logging
from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Callable, Coroutine
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class DomainEvent(ABC):
    """Immutable record of something that happened to an order."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_type(self) -> str:
        return self.__class__.__name__


EventHandler = Callable[[DomainEvent], Coroutine[Any, Any, None]]


class DomainEventPublisher:
    """
    Dispatches events to handlers keyed by event class name.

    Handlers are awaited in subscription order. A handler error is logged
    and does not reach the caller, since the change it reports is already
    committed.
    """

    _handlers: dict[str, list[EventHandler]] = {}

    @classmethod
    def subscribe(cls, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register handler for event_type; subscribing twice is a no-op."""
        handlers = cls._handlers.setdefault(event_type.__name__, [])
        if handler not in handlers:
            handlers.append(handler)

    @classmethod
    async def publish(cls, event: DomainEvent) -> None:
        event_name = event.event_type
        for handler in cls._handlers.get(event_name, []):
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_name}: {e}")

    @classmethod
    async def publish_all(cls, events: list[DomainEvent]) -> None:
        for event in events:
            await cls.publish(event)

    @classmethod
    def clear_handlers(cls) -> None:
        cls._handlers.clear()
