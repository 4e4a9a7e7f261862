"""
Shared pytest fixtures for all tests.

Environment variables are set before any application import so the settings
singleton picks up test values.
"""

import os
from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest
from redis.asyncio import Redis

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"
os.environ["PAYMENT_GATEWAY_API_KEY"] = "test-gateway-key"
os.environ.pop("SENTRY_DSN", None)

from app.core.domain import DomainEventPublisher  # noqa: E402


# ============================================================================
# EVENT PUBLISHER
# ============================================================================


@pytest.fixture(autouse=True)
def clean_event_handlers():
    """Handlers are class-level; drop them between tests."""
    DomainEventPublisher.clear_handlers()
    yield
    DomainEventPublisher.clear_handlers()


@pytest.fixture
def captured_events():
    """Subscribe a recorder to the order events and return its list."""
    from app.domains.ecommerce.domain.events import OrderPlaced, OrderStatusChanged

    events = []

    async def record(event):
        events.append(event)

    DomainEventPublisher.subscribe(OrderPlaced, record)
    DomainEventPublisher.subscribe(OrderStatusChanged, record)
    return events


# ============================================================================
# REDIS FIXTURES
# ============================================================================


@pytest.fixture
def mock_redis() -> Mock:
    """Create a mock Redis client."""
    mock = Mock(spec=Redis)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.exists = AsyncMock(return_value=False)
    mock.expire = AsyncMock(return_value=True)
    return mock


# ============================================================================
# TIME
# ============================================================================


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 15, 12, 0, tzinfo=UTC)
