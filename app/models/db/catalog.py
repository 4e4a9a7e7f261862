"""
Product catalog read model.

The catalog is owned by another service; orders only read products to
price line items and to snapshot them into order items.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from .base import Base, TimestampMixin


class Product(Base, TimestampMixin):
    """Products available for sale"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(12, 3), nullable=False)
    currency = Column(String(3), nullable=False, default="KWD")

    images = Column(JSONB, default=list)  # ["https://.../1.jpg", ...]
    sizes = Column(JSONB, default=list)  # ["S", "M", "L"]
    attributes = Column(JSONB, default=dict)  # {"color": "red", "weight_kg": 1.2}

    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        Index("idx_products_active", is_active),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, title='{self.title}', price={self.price})>"
