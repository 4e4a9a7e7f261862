"""
Identity-bearing base classes for storefront records.

Products, discount rules, codes and payment attempts are plain entities.
Orders are aggregates: they record status events and carry a version that
the repository checks on save.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

TId = TypeVar("TId")


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Row-backed object compared by id.

    Two unsaved entities (id None) are never equal.
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else id(self)

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Entity that queues domain events until its use case has committed.

    Use cases read the queue with get_domain_events, publish it and then
    clear it; events never leave before the transaction does.
    """

    _domain_events: list[Any] = field(default_factory=list, repr=False, compare=False)
    version: int = field(default=0)

    def _record_event(self, event: Any) -> None:
        self._domain_events.append(event)

    def get_domain_events(self) -> list[Any]:
        return list(self._domain_events)

    def clear_domain_events(self) -> None:
        self._domain_events.clear()

    def increment_version(self) -> None:
        """Bump the optimistic lock counter compared by the order repository."""
        self.version += 1
