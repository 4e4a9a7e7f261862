"""
Discount Rule Administration Use Cases

CRUD, toggling, duplication and reporting over product-level discount rules.
Changes only affect orders created afterwards; existing order items keep
their frozen prices.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from app.core.domain import EntityNotFoundException
from app.domains.ecommerce.application.dto import DiscountRuleFilters, DiscountStatistics
from app.domains.ecommerce.application.ports import IDiscountRuleRepository, IProductRepository, IUnitOfWork
from app.domains.ecommerce.domain.entities.discount_rule import DiscountRule
from app.domains.ecommerce.domain.entities.product import Product
from app.domains.ecommerce.domain.services.discount_resolution import PriceResolution, resolve, select_winning_rule
from app.domains.ecommerce.domain.value_objects.discount import DiscountRuleStatus, DiscountScope, DiscountType
from app.domains.ecommerce.domain.value_objects.validity_window import as_utc

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "discount_type",
    "discount_value",
    "apply_to",
    "product_ids",
    "is_active",
    "starts_at",
    "expires_at",
    "priority",
)


@dataclass
class DiscountRuleInput:
    """Fields of a new discount rule."""

    name: str
    discount_type: DiscountType
    discount_value: Decimal
    apply_to: DiscountScope = DiscountScope.ALL_PRODUCTS
    product_ids: list[int] = field(default_factory=list)
    description: str | None = None
    is_active: bool = True
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    priority: int = 0


def _normalize_product_ids(rule: DiscountRule) -> None:
    """specific_products rules keep a sorted, unique id list; all_products rules none."""
    if rule.apply_to == DiscountScope.ALL_PRODUCTS:
        rule.product_ids = []
    else:
        rule.product_ids = sorted({int(product_id) for product_id in rule.product_ids})


class _DiscountRuleUseCase:
    def __init__(self, uow: IUnitOfWork, repository: IDiscountRuleRepository):
        self.uow = uow
        self.repository = repository

    async def _get_or_raise(self, rule_id: int) -> DiscountRule:
        rule = await self.repository.get(rule_id)
        if rule is None:
            raise EntityNotFoundException("DiscountRule", rule_id)
        return rule

    async def _commit_save(self, rule: DiscountRule, action: str) -> DiscountRule:
        try:
            saved = await self.repository.save(rule)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error trying to {action} discount rule {rule.id}: {e}")
            raise
        logger.info(f"Discount rule {rule.id} ({rule.name}): {action}")
        return saved


class ListDiscountRulesUseCase:
    """Use Case: List discount rules with admin filters."""

    def __init__(self, repository: IDiscountRuleRepository):
        self.repository = repository

    async def execute(
        self, filters: DiscountRuleFilters | None = None, at: datetime | None = None
    ) -> list[DiscountRule]:
        filters = filters or DiscountRuleFilters()
        at = at or datetime.now(UTC)
        rules = await self.repository.list_all()

        if filters.status:
            status = DiscountRuleStatus.from_string(filters.status)
            rules = [rule for rule in rules if rule.status_at(at) == status]
        if filters.discount_type:
            discount_type = DiscountType.from_string(filters.discount_type)
            rules = [rule for rule in rules if rule.discount_type == discount_type]
        if filters.apply_to:
            scope = DiscountScope.from_string(filters.apply_to)
            rules = [rule for rule in rules if rule.apply_to == scope]
        if filters.search and filters.search.strip():
            term = filters.search.strip().lower()
            rules = [rule for rule in rules if term in rule.name.lower()]

        return sorted(rules, key=lambda rule: rule.precedence_key())


class GetDiscountRuleUseCase(_DiscountRuleUseCase):
    """Use Case: Get a discount rule."""

    async def execute(self, rule_id: int) -> DiscountRule:
        return await self._get_or_raise(rule_id)


class CreateDiscountRuleUseCase(_DiscountRuleUseCase):
    """Use Case: Create a discount rule."""

    async def execute(self, data: DiscountRuleInput) -> DiscountRule:
        """
        Raises:
            ValidationException: Invalid value, scope or window
        """
        rule = DiscountRule(
            name=data.name.strip(),
            description=data.description,
            discount_type=data.discount_type,
            discount_value=data.discount_value,
            apply_to=data.apply_to,
            product_ids=list(data.product_ids),
            is_active=data.is_active,
            starts_at=data.starts_at,
            expires_at=data.expires_at,
            priority=data.priority,
        )
        rule.validate()
        _normalize_product_ids(rule)

        try:
            created = await self.repository.add(rule)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error creating discount rule {rule.name}: {e}")
            raise

        logger.info(f"Discount rule created: {created.id} ({created.name})")
        return created


class UpdateDiscountRuleUseCase(_DiscountRuleUseCase):
    """Use Case: Update a discount rule."""

    async def execute(self, rule_id: int, update_data: dict[str, Any]) -> DiscountRule:
        """
        Apply a partial update; unknown keys are ignored.

        Raises:
            EntityNotFoundException: Unknown or deleted rule
            ValidationException: Resulting rule is invalid
        """
        rule = await self._get_or_raise(rule_id)

        for key in UPDATABLE_FIELDS:
            if key in update_data:
                setattr(rule, key, update_data[key])

        rule.name = rule.name.strip() if rule.name else rule.name
        rule.starts_at = as_utc(rule.starts_at)
        rule.expires_at = as_utc(rule.expires_at)
        rule.validate()
        _normalize_product_ids(rule)
        rule.touch()

        return await self._commit_save(rule, "update")


class DeleteDiscountRuleUseCase(_DiscountRuleUseCase):
    """Use Case: Soft delete a discount rule."""

    async def execute(self, rule_id: int) -> None:
        rule = await self._get_or_raise(rule_id)
        rule.soft_delete()
        await self._commit_save(rule, "delete")


class ToggleDiscountRuleUseCase(_DiscountRuleUseCase):
    """Use Case: Enable or disable a discount rule."""

    async def execute(self, rule_id: int) -> DiscountRule:
        rule = await self._get_or_raise(rule_id)
        rule.toggle()
        return await self._commit_save(rule, "enable" if rule.is_active else "disable")


class DuplicateDiscountRuleUseCase(_DiscountRuleUseCase):
    """Use Case: Copy a discount rule (created inactive)."""

    async def execute(self, rule_id: int) -> DiscountRule:
        original = await self._get_or_raise(rule_id)
        copy = original.duplicate()

        try:
            created = await self.repository.add(copy)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error duplicating discount rule {rule_id}: {e}")
            raise

        logger.info(f"Discount rule {rule_id} duplicated as {created.id}")
        return created


@dataclass
class AffectedProduct:
    """Product covered by a rule and the price it currently resolves to."""

    product: Product
    resolution: PriceResolution
    rule_wins: bool


class GetAffectedProductsUseCase:
    """
    Use Case: Products affected by a rule

    Lists the products in the rule's scope and whether the rule currently wins
    their price.
    """

    def __init__(self, rule_repository: IDiscountRuleRepository, product_repository: IProductRepository):
        self.rule_repository = rule_repository
        self.product_repository = product_repository

    async def execute(self, rule_id: int, at: datetime | None = None) -> list[AffectedProduct]:
        at = at or datetime.now(UTC)
        rule = await self.rule_repository.get(rule_id)
        if rule is None:
            raise EntityNotFoundException("DiscountRule", rule_id)

        if rule.apply_to == DiscountScope.SPECIFIC_PRODUCTS:
            products = list((await self.product_repository.get_by_ids(rule.product_ids)).values())
        else:
            products = await self.product_repository.list_active()

        active_rules = await self.rule_repository.list_active()
        affected = []
        for product in sorted(products, key=lambda product: product.id or 0):
            resolution = resolve(product, active_rules, at)
            affected.append(
                AffectedProduct(
                    product=product,
                    resolution=resolution,
                    rule_wins=resolution.applied_rule_id == rule.id,
                )
            )
        return affected


class GetDiscountStatisticsUseCase:
    """Use Case: Discount rule statistics."""

    def __init__(self, rule_repository: IDiscountRuleRepository, product_repository: IProductRepository):
        self.rule_repository = rule_repository
        self.product_repository = product_repository

    async def execute(self, at: datetime | None = None) -> DiscountStatistics:
        at = at or datetime.now(UTC)
        rules = await self.rule_repository.list_all()
        stats = DiscountStatistics(total=len(rules))

        for rule in rules:
            status = rule.status_at(at)
            if status == DiscountRuleStatus.ACTIVE:
                stats.active += 1
            elif status == DiscountRuleStatus.INACTIVE:
                stats.inactive += 1
            elif status == DiscountRuleStatus.EXPIRED:
                stats.expired += 1
            else:
                stats.upcoming += 1
            stats.by_scope[rule.apply_to.value] = stats.by_scope.get(rule.apply_to.value, 0) + 1
            stats.by_type[rule.discount_type.value] = stats.by_type.get(rule.discount_type.value, 0) + 1

        products = await self.product_repository.list_active()
        stats.products_with_discounts = sum(
            1 for product in products if select_winning_rule(product.id, rules, at) is not None
        )
        return stats


__all__ = [
    "DiscountRuleInput",
    "ListDiscountRulesUseCase",
    "GetDiscountRuleUseCase",
    "CreateDiscountRuleUseCase",
    "UpdateDiscountRuleUseCase",
    "DeleteDiscountRuleUseCase",
    "ToggleDiscountRuleUseCase",
    "DuplicateDiscountRuleUseCase",
    "GetAffectedProductsUseCase",
    "AffectedProduct",
    "GetDiscountStatisticsUseCase",
]
