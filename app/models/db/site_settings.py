"""
Global store settings.

Each table keeps its history; exactly one row per table is current,
guaranteed by a partial unique index on is_current.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, Text, text

from .base import Base, utc_now


class OrderAcceptanceSetting(Base):
    """Whether the store accepts new orders"""

    __tablename__ = "order_acceptance_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    orders_enabled = Column(Boolean, nullable=False)
    message = Column(Text)
    changed_by = Column(String(100))
    is_current = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index("uq_order_acceptance_current", is_current, unique=True, postgresql_where=text("is_current")),
    )


class ShippingCostSetting(Base):
    """Flat shipping charge added to every order"""

    __tablename__ = "shipping_cost_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    amount = Column(Numeric(12, 3), nullable=False)
    currency = Column(String(3), nullable=False, default="KWD")
    effective_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    changed_by = Column(String(100))
    is_current = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index("uq_shipping_cost_current", is_current, unique=True, postgresql_where=text("is_current")),
    )
