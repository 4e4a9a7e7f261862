"""
Discount Code Administration Use Cases
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from app.core.domain import DuplicateEntityException, EntityNotFoundException
from app.domains.ecommerce.application.ports import IDiscountCodeRepository, IUnitOfWork
from app.domains.ecommerce.domain.entities.discount_code import DiscountCode, normalize_code
from app.domains.ecommerce.domain.value_objects.discount import DiscountType
from app.domains.ecommerce.domain.value_objects.validity_window import as_utc

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "code",
    "name",
    "discount_type",
    "discount_value",
    "minimum_order_amount",
    "maximum_discount_amount",
    "usage_limit",
    "is_active",
    "starts_at",
    "expires_at",
)


@dataclass
class DiscountCodeInput:
    """Fields of a new discount code."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    name: str | None = None
    minimum_order_amount: Decimal | None = None
    maximum_discount_amount: Decimal | None = None
    usage_limit: int | None = None
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None


class DiscountCodeAdmin:
    """
    Admin operations over order-level discount codes.

    Codes are unique among non-deleted codes, compared case-insensitively.
    """

    def __init__(self, uow: IUnitOfWork, repository: IDiscountCodeRepository):
        self.uow = uow
        self.repository = repository

    async def list(self) -> list[DiscountCode]:
        return sorted(await self.repository.list_all(), key=lambda code: code.code)

    async def get(self, code_id: int) -> DiscountCode:
        code = await self.repository.get(code_id)
        if code is None:
            raise EntityNotFoundException("DiscountCode", code_id)
        return code

    async def create(self, data: DiscountCodeInput) -> DiscountCode:
        """
        Raises:
            ValidationException: Invalid definition
            DuplicateEntityException: Code already in use
        """
        code = DiscountCode(
            code=data.code,
            name=data.name,
            discount_type=data.discount_type,
            discount_value=data.discount_value,
            minimum_order_amount=data.minimum_order_amount,
            maximum_discount_amount=data.maximum_discount_amount,
            usage_limit=data.usage_limit,
            is_active=data.is_active,
            starts_at=data.starts_at,
            expires_at=data.expires_at,
        )
        code.validate()
        await self._ensure_unique(code.code)

        try:
            created = await self.repository.add(code)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error creating discount code {code.code}: {e}")
            raise

        logger.info(f"Discount code created: {created.code}")
        return created

    async def update(self, code_id: int, update_data: dict[str, Any]) -> DiscountCode:
        code = await self.get(code_id)
        original = code.code

        for key in UPDATABLE_FIELDS:
            if key in update_data:
                setattr(code, key, update_data[key])

        code.code = normalize_code(code.code or "")
        code.starts_at = as_utc(code.starts_at)
        code.expires_at = as_utc(code.expires_at)
        code.validate()
        if code.code != original:
            await self._ensure_unique(code.code)
        code.touch()
        return await self._commit_save(code, "update")

    async def delete(self, code_id: int) -> None:
        code = await self.get(code_id)
        code.soft_delete()
        await self._commit_save(code, "delete")

    async def toggle(self, code_id: int) -> DiscountCode:
        code = await self.get(code_id)
        code.toggle()
        return await self._commit_save(code, "enable" if code.is_active else "disable")

    async def _ensure_unique(self, value: str) -> None:
        if await self.repository.get_by_code(value) is not None:
            raise DuplicateEntityException("DiscountCode", "code", value)

    async def _commit_save(self, code: DiscountCode, action: str) -> DiscountCode:
        try:
            saved = await self.repository.save(code)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error trying to {action} discount code {code.code}: {e}")
            raise
        logger.info(f"Discount code {code.code}: {action}")
        return saved


__all__ = ["DiscountCodeAdmin", "DiscountCodeInput"]
