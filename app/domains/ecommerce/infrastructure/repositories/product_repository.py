"""
Product Repository Implementation

Read-only access to the catalog for pricing and order snapshots.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.ecommerce.application.ports import IProductRepository
from app.domains.ecommerce.domain.entities.product import Product
from app.domains.ecommerce.domain.value_objects.discount import clean_attributes
from app.models.db.catalog import Product as ProductModel

logger = logging.getLogger(__name__)


class SQLAlchemyProductRepository(IProductRepository):
    """
    SQLAlchemy implementation of product repository.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_ids(self, product_ids: list[int]) -> dict[int, Product]:
        """Get products keyed by ID; unknown IDs are simply absent."""
        if not product_ids:
            return {}
        try:
            result = await self.session.execute(
                select(ProductModel).where(ProductModel.id.in_(set(product_ids)))
            )
            return {model.id: self._to_entity(model) for model in result.scalars().all()}
        except Exception as e:
            logger.error(f"Error getting products {product_ids}: {e}")
            raise

    async def list_active(self, limit: int = 500) -> list[Product]:
        try:
            result = await self.session.execute(
                select(ProductModel)
                .where(ProductModel.is_active.is_(True))
                .order_by(ProductModel.id)
                .limit(limit)
            )
            return [self._to_entity(model) for model in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error listing active products: {e}")
            raise

    @staticmethod
    def _to_entity(model: ProductModel) -> Product:
        return Product(
            id=model.id,
            title=model.title,
            description=model.description,
            price=model.price,
            currency=model.currency or "KWD",
            images=[str(image) for image in (model.images or [])],
            sizes=[str(size) for size in (model.sizes or [])],
            attributes=clean_attributes(model.attributes),
            is_active=bool(model.is_active),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
