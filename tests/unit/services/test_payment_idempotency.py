"""
Unit Tests for PaymentIdempotencyService
"""

import pytest

from app.services.payments import PaymentIdempotencyService


@pytest.fixture
def service(mock_redis):
    return PaymentIdempotencyService(mock_redis, lock_ttl_ms=1000, completed_ttl_ms=5000)


class TestPaymentIdempotencyService:
    async def test_first_call_acquires_lock(self, service, mock_redis):
        result = await service.check_and_lock("5001")

        assert result == (False, None)
        mock_redis.get.assert_awaited_once_with("storefront:payment:5001")
        mock_redis.set.assert_awaited_once_with("storefront:payment:5001", "processing", nx=True, px=1000)

    async def test_concurrent_verification_is_duplicate(self, service, mock_redis):
        mock_redis.get.return_value = b"processing"

        assert await service.check_and_lock("5001") == (True, None)
        mock_redis.set.assert_not_awaited()

    async def test_completed_invoice_returns_order(self, service, mock_redis):
        mock_redis.get.return_value = b"order:42"

        assert await service.check_and_lock("5001") == (True, 42)

    async def test_lost_race(self, service, mock_redis):
        mock_redis.set.return_value = None

        assert await service.check_and_lock("5001") == (True, None)

    async def test_unknown_value_is_treated_as_duplicate(self, service, mock_redis):
        mock_redis.get.return_value = "garbage"

        assert await service.check_and_lock("5001") == (True, None)

    async def test_mark_complete_stores_order_receipt(self, service, mock_redis):
        await service.mark_complete("5001", 42)

        mock_redis.set.assert_awaited_once_with("storefront:payment:5001", "order:42", px=5000)

    async def test_mark_failed_and_release_drop_the_key(self, service, mock_redis):
        await service.mark_failed("5001", "amount mismatch")
        await service.release("5002")

        assert [call.args[0] for call in mock_redis.delete.await_args_list] == [
            "storefront:payment:5001",
            "storefront:payment:5002",
        ]
