"""
Order management models
"""

from typing import List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, relationship

from .base import Base, TimestampMixin, utc_now


class Order(Base, TimestampMixin):
    """Customer orders"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)

    # pending, awaiting_payment, paid, shipped, delivered, cancelled
    status = Column(String(20), nullable=False)

    # Amounts (3 decimals for KWD)
    currency = Column(String(3), nullable=False, default="KWD")
    subtotal_amount = Column(Numeric(12, 3), nullable=False, default=0)
    discount_amount = Column(Numeric(12, 3), nullable=False, default=0)
    shipping_amount = Column(Numeric(12, 3), nullable=False, default=0)
    total_amount = Column(Numeric(12, 3), nullable=False)

    # Customer
    customer_name = Column(String(200), nullable=False)
    customer_phone = Column(String(30), nullable=False)
    customer_email = Column(String(255))

    # Shipping address
    street = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    governorate = Column(String(100))
    postal_code = Column(String(20))
    country = Column(String(100), nullable=False, default="Kuwait")

    # Checkout
    payment_method = Column(String(50), nullable=False)
    discount_code = Column(String(50))

    # Fulfilment
    tracking_number = Column(String(100))
    shipping_date = Column(DateTime(timezone=True))
    delivery_date = Column(DateTime(timezone=True))
    admin_notes = Column(Text)

    # Relationships
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    status_history: Mapped[List["OrderStatusHistory"]] = relationship(
        "OrderStatusHistory",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.id",
    )

    __table_args__ = (
        CheckConstraint(
            "total_amount = subtotal_amount - discount_amount + shipping_amount",
            name="ck_orders_total_consistent",
        ),
        CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
        CheckConstraint("discount_amount >= 0 AND shipping_amount >= 0", name="ck_orders_adjustments_non_negative"),
        Index("idx_orders_status", status),
        Index("idx_orders_created", "created_at"),
        Index("idx_orders_order_number_upper", func.upper(order_number)),
    )

    def __repr__(self):
        return f"<Order(number='{self.order_number}', status='{self.status}', total={self.total_amount})>"


class OrderItem(Base):
    """Order lines with a frozen snapshot of the product at purchase time"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)

    # Not a foreign key: the snapshot must survive catalog changes
    product_id = Column(Integer, nullable=False)

    # Snapshot
    title = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(12, 3), nullable=False)  # listed price
    discounted_price = Column(Numeric(12, 3))
    has_discount = Column(Boolean, nullable=False, default=False)
    discount_percentage = Column(Numeric(5, 2))
    currency = Column(String(3), nullable=False)
    images = Column(JSONB, default=list)
    size = Column(String(30))
    attributes = Column(JSONB, default=dict)
    applied_rule_id = Column(Integer)  # audit only

    # Priced amounts
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 3), nullable=False)
    line_total = Column(Numeric(12, 3), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        Index("idx_order_items_order", order_id),
        Index("idx_order_items_product", product_id),
    )

    def __repr__(self):
        return f"<OrderItem(title='{self.title}', quantity={self.quantity}, unit_price={self.unit_price})>"


class OrderStatusHistory(Base):
    """One row per applied status transition"""

    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    from_status = Column(String(20))  # NULL for the initial status
    to_status = Column(String(20), nullable=False)
    actor = Column(String(20), nullable=False)  # customer, gateway, admin
    notes = Column(Text)
    payment_attempt_id = Column(Integer, ForeignKey("payment_attempts.id"))
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="status_history")

    __table_args__ = (Index("idx_order_status_history_order", order_id, created_at),)

    def __repr__(self):
        return f"<OrderStatusHistory(order_id={self.order_id}, {self.from_status} -> {self.to_status})>"
