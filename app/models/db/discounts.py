"""
Discount models: product pricing rules and order-level discount codes
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB

from .base import Base, TimestampMixin


class DiscountRule(Base, TimestampMixin):
    """Time-windowed, priority-ranked price rules applied per product"""

    __tablename__ = "discount_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)

    discount_type = Column(String(20), nullable=False)  # percentage, fixed
    discount_value = Column(Numeric(12, 3), nullable=False)

    apply_to = Column(String(30), nullable=False, default="all_products")  # all_products, specific_products
    product_ids = Column(JSONB, default=list)  # [1, 2, 3]

    is_active = Column(Boolean, nullable=False, default=True)
    starts_at = Column(DateTime(timezone=True))
    expires_at = Column(DateTime(timezone=True))
    priority = Column(Integer, nullable=False, default=0)

    deleted_at = Column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("discount_value > 0", name="ck_discount_rules_value_positive"),
        CheckConstraint(
            "discount_type <> 'percentage' OR discount_value <= 100",
            name="ck_discount_rules_percentage_range",
        ),
        CheckConstraint(
            "starts_at IS NULL OR expires_at IS NULL OR starts_at < expires_at",
            name="ck_discount_rules_window",
        ),
        Index("idx_discount_rules_active", is_active, postgresql_where=text("deleted_at IS NULL")),
    )

    def __repr__(self):
        return f"<DiscountRule(id={self.id}, name='{self.name}', priority={self.priority})>"


class DiscountCode(Base, TimestampMixin):
    """Order-level codes entered at checkout"""

    __tablename__ = "discount_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), nullable=False)  # stored upper case
    name = Column(String(255))

    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(12, 3), nullable=False)
    minimum_order_amount = Column(Numeric(12, 3))
    maximum_discount_amount = Column(Numeric(12, 3))

    usage_limit = Column(Integer)
    usage_count = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    starts_at = Column(DateTime(timezone=True))
    expires_at = Column(DateTime(timezone=True))
    deleted_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index("uq_discount_codes_code", code, unique=True, postgresql_where=text("deleted_at IS NULL")),
        CheckConstraint("discount_value > 0", name="ck_discount_codes_value_positive"),
        CheckConstraint("usage_limit IS NULL OR usage_count <= usage_limit", name="ck_discount_codes_usage"),
    )

    def __repr__(self):
        return f"<DiscountCode(code='{self.code}', used={self.usage_count}/{self.usage_limit})>"
