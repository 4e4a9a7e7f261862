"""
Discount Repository Implementations

SQLAlchemy implementations of IDiscountRuleRepository and IDiscountCodeRepository.
Soft-deleted rows are filtered out of every read.
"""

import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import DuplicateEntityException
from app.domains.ecommerce.application.ports import IDiscountCodeRepository, IDiscountRuleRepository
from app.domains.ecommerce.domain.entities.discount_code import DiscountCode, normalize_code
from app.domains.ecommerce.domain.entities.discount_rule import DiscountRule
from app.domains.ecommerce.domain.value_objects.discount import DiscountScope, DiscountType
from app.models.db.discounts import DiscountCode as DiscountCodeModel
from app.models.db.discounts import DiscountRule as DiscountRuleModel

logger = logging.getLogger(__name__)


class SQLAlchemyDiscountRuleRepository(IDiscountRuleRepository):
    """
    SQLAlchemy implementation of discount rule repository.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[DiscountRule]:
        try:
            result = await self.session.execute(
                select(DiscountRuleModel)
                .where(DiscountRuleModel.deleted_at.is_(None))
                .order_by(DiscountRuleModel.id)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error listing discount rules: {e}")
            raise

    async def list_active(self) -> list[DiscountRule]:
        try:
            result = await self.session.execute(
                select(DiscountRuleModel)
                .where(
                    DiscountRuleModel.deleted_at.is_(None),
                    DiscountRuleModel.is_active.is_(True),
                )
                .order_by(DiscountRuleModel.id)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error listing active discount rules: {e}")
            raise

    async def get(self, rule_id: int) -> DiscountRule | None:
        try:
            result = await self.session.execute(
                select(DiscountRuleModel).where(
                    DiscountRuleModel.id == rule_id,
                    DiscountRuleModel.deleted_at.is_(None),
                )
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting discount rule {rule_id}: {e}")
            raise

    async def add(self, rule: DiscountRule) -> DiscountRule:
        try:
            model = DiscountRuleModel()
            self._apply(model, rule)
            model.created_at = rule.created_at
            self.session.add(model)
            await self.session.flush()
            rule.id = model.id
            return rule
        except Exception as e:
            logger.error(f"Error adding discount rule {rule.name}: {e}")
            raise

    async def save(self, rule: DiscountRule) -> DiscountRule:
        try:
            model = await self.session.get(DiscountRuleModel, rule.id)
            if model is None:
                raise ValueError(f"Discount rule {rule.id} does not exist")
            self._apply(model, rule)
            await self.session.flush()
            return rule
        except Exception as e:
            logger.error(f"Error saving discount rule {rule.id}: {e}")
            raise

    @staticmethod
    def _apply(model: DiscountRuleModel, rule: DiscountRule) -> None:
        model.name = rule.name
        model.description = rule.description
        model.discount_type = rule.discount_type.value
        model.discount_value = rule.discount_value
        model.apply_to = rule.apply_to.value
        model.product_ids = list(rule.product_ids)
        model.is_active = rule.is_active
        model.starts_at = rule.starts_at
        model.expires_at = rule.expires_at
        model.priority = rule.priority
        model.deleted_at = rule.deleted_at
        model.updated_at = rule.updated_at

    @staticmethod
    def _to_entity(model: DiscountRuleModel) -> DiscountRule:
        return DiscountRule(
            id=model.id,
            name=model.name,
            description=model.description,
            discount_type=DiscountType(model.discount_type),
            discount_value=model.discount_value,
            apply_to=DiscountScope(model.apply_to),
            product_ids=[int(product_id) for product_id in (model.product_ids or [])],
            is_active=bool(model.is_active),
            starts_at=model.starts_at,
            expires_at=model.expires_at,
            priority=model.priority or 0,
            deleted_at=model.deleted_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


class SQLAlchemyDiscountCodeRepository(IDiscountCodeRepository):
    """
    SQLAlchemy implementation of discount code repository.

    Usage is counted with a conditional UPDATE so concurrent checkouts can
    never push a code past its limit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, code: str) -> DiscountCode | None:
        try:
            result = await self.session.execute(
                select(DiscountCodeModel).where(
                    func.upper(DiscountCodeModel.code) == normalize_code(code),
                    DiscountCodeModel.deleted_at.is_(None),
                )
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting discount code {code}: {e}")
            raise

    async def get(self, code_id: int) -> DiscountCode | None:
        try:
            result = await self.session.execute(
                select(DiscountCodeModel).where(
                    DiscountCodeModel.id == code_id,
                    DiscountCodeModel.deleted_at.is_(None),
                )
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting discount code {code_id}: {e}")
            raise

    async def list_all(self) -> list[DiscountCode]:
        try:
            result = await self.session.execute(
                select(DiscountCodeModel)
                .where(DiscountCodeModel.deleted_at.is_(None))
                .order_by(DiscountCodeModel.code)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error listing discount codes: {e}")
            raise

    async def add(self, code: DiscountCode) -> DiscountCode:
        try:
            model = DiscountCodeModel(usage_count=code.usage_count)
            self._apply(model, code)
            model.created_at = code.created_at
            self.session.add(model)
            await self.session.flush()
            code.id = model.id
            return code
        except IntegrityError as e:
            logger.warning(f"Discount code {code.code} already exists: {e}")
            raise DuplicateEntityException("DiscountCode", "code", code.code) from e
        except Exception as e:
            logger.error(f"Error adding discount code {code.code}: {e}")
            raise

    async def save(self, code: DiscountCode) -> DiscountCode:
        try:
            model = await self.session.get(DiscountCodeModel, code.id)
            if model is None:
                raise ValueError(f"Discount code {code.id} does not exist")
            self._apply(model, code)
            await self.session.flush()
            return code
        except IntegrityError as e:
            logger.warning(f"Discount code {code.code} already exists: {e}")
            raise DuplicateEntityException("DiscountCode", "code", code.code) from e
        except Exception as e:
            logger.error(f"Error saving discount code {code.id}: {e}")
            raise

    async def increment_usage(self, code_id: int) -> bool:
        """Add one use unless the limit was reached; returns whether it was counted."""
        try:
            result = await self.session.execute(
                update(DiscountCodeModel)
                .where(
                    DiscountCodeModel.id == code_id,
                    DiscountCodeModel.deleted_at.is_(None),
                    or_(
                        DiscountCodeModel.usage_limit.is_(None),
                        DiscountCodeModel.usage_count < DiscountCodeModel.usage_limit,
                    ),
                )
                .values(usage_count=DiscountCodeModel.usage_count + 1)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1
        except Exception as e:
            logger.error(f"Error counting usage of discount code {code_id}: {e}")
            raise

    @staticmethod
    def _apply(model: DiscountCodeModel, code: DiscountCode) -> None:
        # usage_count is only ever changed through increment_usage
        model.code = code.code
        model.name = code.name
        model.discount_type = code.discount_type.value
        model.discount_value = code.discount_value
        model.minimum_order_amount = code.minimum_order_amount
        model.maximum_discount_amount = code.maximum_discount_amount
        model.usage_limit = code.usage_limit
        model.is_active = code.is_active
        model.starts_at = code.starts_at
        model.expires_at = code.expires_at
        model.deleted_at = code.deleted_at
        model.updated_at = code.updated_at

    @staticmethod
    def _to_entity(model: DiscountCodeModel) -> DiscountCode:
        return DiscountCode(
            id=model.id,
            code=model.code,
            name=model.name,
            discount_type=DiscountType(model.discount_type),
            discount_value=model.discount_value,
            minimum_order_amount=model.minimum_order_amount,
            maximum_discount_amount=model.maximum_discount_amount,
            usage_limit=model.usage_limit,
            usage_count=model.usage_count or 0,
            is_active=bool(model.is_active),
            starts_at=model.starts_at,
            expires_at=model.expires_at,
            deleted_at=model.deleted_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
