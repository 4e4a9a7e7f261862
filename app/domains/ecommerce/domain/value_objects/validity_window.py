"""
Validity window shared by discount rules and discount codes.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from app.core.domain import ValueObject


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@dataclass(frozen=True)
class ValidityWindow(ValueObject):
    """
    Optional [starts_at, expires_at] interval, inclusive on both ends.

    A missing bound leaves that side open.
    """

    starts_at: datetime | None = None
    expires_at: datetime | None = None

    def _validate(self) -> None:
        object.__setattr__(self, "starts_at", as_utc(self.starts_at))
        object.__setattr__(self, "expires_at", as_utc(self.expires_at))
        if self.starts_at and self.expires_at and self.starts_at >= self.expires_at:
            raise ValueError("starts_at must be before expires_at")

    def contains(self, at: datetime) -> bool:
        at = as_utc(at)
        if self.starts_at is not None and at < self.starts_at:
            return False
        if self.expires_at is not None and at > self.expires_at:
            return False
        return True

    def has_expired(self, at: datetime) -> bool:
        return self.expires_at is not None and as_utc(at) > self.expires_at

    def is_upcoming(self, at: datetime) -> bool:
        return self.starts_at is not None and as_utc(at) < self.starts_at
