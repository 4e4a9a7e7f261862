"""
Payment attempt models
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, text

from .base import Base, TimestampMixin


class PaymentAttempt(Base, TimestampMixin):
    """
    One row per payment initiation.

    invoice_reference is the idempotency key for verification callbacks.
    At most one attempt per order may carry caused_transition = true.
    """

    __tablename__ = "payment_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(String(64), nullable=False, unique=True)
    invoice_reference = Column(String(64), nullable=False)
    gateway_payment_id = Column(String(64))

    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    payment_method_code = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 3), nullable=False)
    currency = Column(String(3), nullable=False)

    # initiated, pending, paid, failed, cancelled, cash_on_delivery
    gateway_status = Column(String(20), nullable=False, default="initiated")
    redirect_url = Column(Text)

    customer_ip = Column(String(45))
    user_agent = Column(Text)

    verified_at = Column(DateTime(timezone=True))
    caused_transition = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("uq_payment_attempts_invoice_reference", invoice_reference, unique=True),
        Index(
            "uq_payment_attempts_order_transition",
            order_id,
            unique=True,
            postgresql_where=text("caused_transition"),
        ),
        Index("idx_payment_attempts_order", order_id),
        Index("idx_payment_attempts_gateway_payment", gateway_payment_id),
    )

    def __repr__(self):
        return (
            f"<PaymentAttempt(invoice='{self.invoice_reference}', order_id={self.order_id}, "
            f"status='{self.gateway_status}')>"
        )
