"""
Unit Tests for discount rule and discount code administration
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from app.core.domain import DuplicateEntityException, EntityNotFoundException, ValidationException
from app.domains.ecommerce.application.dto import DiscountRuleFilters
from app.domains.ecommerce.application.use_cases import (
    CreateDiscountRuleUseCase,
    DeleteDiscountRuleUseCase,
    DiscountCodeInput,
    DiscountRuleInput,
    DuplicateDiscountRuleUseCase,
    GetAffectedProductsUseCase,
    GetDiscountRuleUseCase,
    GetDiscountStatisticsUseCase,
    ListDiscountRulesUseCase,
    ToggleDiscountRuleUseCase,
    UpdateDiscountRuleUseCase,
)
from app.domains.ecommerce.domain.value_objects import DiscountScope, DiscountType
from storefront_fakes import Storefront, make_code, make_product, make_rule


class TestDiscountRuleAdmin:
    async def test_create_normalizes_product_ids(self):
        store = Storefront()

        rule = await CreateDiscountRuleUseCase(store.uow, store.rule_repo).execute(
            DiscountRuleInput(
                name="  Abayas  ",
                discount_type=DiscountType.PERCENTAGE,
                discount_value=Decimal("15"),
                apply_to=DiscountScope.SPECIFIC_PRODUCTS,
                product_ids=[5, 2, 5],
            )
        )

        assert rule.id is not None
        assert rule.name == "Abayas"
        assert rule.product_ids == [2, 5]
        assert store.uow.commits == 1

    async def test_create_invalid_rule(self):
        store = Storefront()

        with pytest.raises(ValidationException):
            await CreateDiscountRuleUseCase(store.uow, store.rule_repo).execute(
                DiscountRuleInput(name="Too much", discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("150"))
            )

        assert store.rule_repo.rules == {}

    async def test_update_switching_to_all_products_clears_ids(self):
        store = Storefront(rules=[make_rule(apply_to=DiscountScope.SPECIFIC_PRODUCTS, product_ids=[3])])

        rule = await UpdateDiscountRuleUseCase(store.uow, store.rule_repo).execute(
            1, {"apply_to": DiscountScope.ALL_PRODUCTS, "priority": 4, "unknown": "ignored"}
        )

        assert rule.product_ids == []
        assert rule.priority == 4

    async def test_update_to_invalid_state(self):
        store = Storefront(rules=[make_rule()])

        with pytest.raises(ValidationException):
            await UpdateDiscountRuleUseCase(store.uow, store.rule_repo).execute(1, {"discount_value": Decimal("0")})

    async def test_deleted_rule_is_gone_and_stops_pricing(self, now):
        store = Storefront(rules=[make_rule()])

        await DeleteDiscountRuleUseCase(store.uow, store.rule_repo).execute(1)

        with pytest.raises(EntityNotFoundException):
            await GetDiscountRuleUseCase(store.uow, store.rule_repo).execute(1)
        assert await store.rule_repo.list_active() == []

    async def test_toggle(self):
        store = Storefront(rules=[make_rule()])

        rule = await ToggleDiscountRuleUseCase(store.uow, store.rule_repo).execute(1)

        assert rule.is_active is False

    async def test_duplicate(self):
        store = Storefront(rules=[make_rule(name="Eid")])

        copy = await DuplicateDiscountRuleUseCase(store.uow, store.rule_repo).execute(1)

        assert copy.id == 2
        assert copy.name == "Eid (Copy)"
        assert copy.is_active is False

    async def test_list_filters(self, now):
        store = Storefront(
            rules=[
                make_rule(rule_id=1, name="Summer sale", priority=1),
                make_rule(rule_id=2, name="Winter", discount_type=DiscountType.FIXED, value="2"),
                make_rule(rule_id=3, name="Old summer", expires_at=now - timedelta(days=3)),
            ]
        )
        use_case = ListDiscountRulesUseCase(store.rule_repo)

        by_search = await use_case.execute(DiscountRuleFilters(search="SUMMER"), at=now)
        by_status = await use_case.execute(DiscountRuleFilters(status="expired"), at=now)
        by_type = await use_case.execute(DiscountRuleFilters(discount_type="fixed"), at=now)

        assert [rule.id for rule in by_search] == [1, 3]
        assert [rule.id for rule in by_status] == [3]
        assert [rule.id for rule in by_type] == [2]

    async def test_affected_products(self, now):
        store = Storefront(
            products=[make_product(1, "10.000"), make_product(2, "10.000")],
            rules=[
                make_rule(rule_id=1, value="10"),
                make_rule(rule_id=2, value="30", priority=5, apply_to=DiscountScope.SPECIFIC_PRODUCTS, product_ids=[2]),
            ],
        )

        affected = await GetAffectedProductsUseCase(store.rule_repo, store.product_repo).execute(1, at=now)

        assert [(item.product.id, item.rule_wins) for item in affected] == [(1, True), (2, False)]
        assert affected[1].resolution.unit_price.amount == Decimal("7.000")

    async def test_statistics(self, now):
        store = Storefront(
            products=[make_product(1), make_product(2), make_product(3)],
            rules=[
                make_rule(rule_id=1, apply_to=DiscountScope.SPECIFIC_PRODUCTS, product_ids=[1, 2]),
                make_rule(rule_id=2, is_active=False),
                make_rule(rule_id=3, starts_at=now + timedelta(days=1)),
                make_rule(rule_id=4, discount_type=DiscountType.FIXED, value="1", expires_at=now - timedelta(days=1)),
            ],
        )

        stats = await GetDiscountStatisticsUseCase(store.rule_repo, store.product_repo).execute(at=now)

        assert (stats.total, stats.active, stats.inactive, stats.upcoming, stats.expired) == (4, 1, 1, 1, 1)
        assert stats.by_scope == {"specific_products": 1, "all_products": 3}
        assert stats.by_type == {"percentage": 3, "fixed": 1}
        assert stats.products_with_discounts == 2


class TestDiscountCodeAdmin:
    async def test_create_and_list(self):
        store = Storefront(codes=[make_code("ZED")])
        admin = store.code_admin()

        created = await admin.create(
            DiscountCodeInput(code="eid2026", discount_type=DiscountType.FIXED, discount_value=Decimal("2"))
        )

        assert created.code == "EID2026"
        assert [code.code for code in await admin.list()] == ["EID2026", "ZED"]

    async def test_duplicate_code_is_rejected(self):
        store = Storefront(codes=[make_code("SAVE10")])

        with pytest.raises(DuplicateEntityException):
            await store.code_admin().create(
                DiscountCodeInput(code="save10", discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("5"))
            )

    async def test_deleted_code_frees_its_name(self):
        store = Storefront(codes=[make_code("SAVE10")])
        admin = store.code_admin()

        await admin.delete(1)
        recreated = await admin.create(
            DiscountCodeInput(code="SAVE10", discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("5"))
        )

        assert recreated.id == 2

    async def test_update_and_toggle(self):
        store = Storefront(codes=[make_code("SAVE10")])
        admin = store.code_admin()

        updated = await admin.update(1, {"usage_limit": 10, "code": "save15", "discount_value": Decimal("15")})
        toggled = await admin.toggle(1)

        assert updated.code == "SAVE15"
        assert updated.usage_limit == 10
        assert toggled.is_active is False

    async def test_get_unknown(self):
        with pytest.raises(EntityNotFoundException):
            await Storefront().code_admin().get(9)
