"""Initial schema - catalog read model, orders, payments, discounts, store settings.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19

Tables created:
- products: catalog read model used for pricing and item snapshots
- orders, order_items, order_status_history
- payment_attempts: one per initiation, invoice_reference is unique
- discount_rules, discount_codes
- order_acceptance_settings, shipping_cost_settings: one current row each
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(12, 3)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="KWD"),
        sa.Column("images", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb")),
        sa.Column("sizes", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb")),
        sa.Column("attributes", postgresql.JSONB(), server_default=sa.text("'{}'::jsonb")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )
    op.create_index("idx_products_active", "products", ["is_active"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(32), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="KWD"),
        sa.Column("subtotal_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("discount_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("shipping_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("customer_name", sa.String(200), nullable=False),
        sa.Column("customer_phone", sa.String(30), nullable=False),
        sa.Column("customer_email", sa.String(255)),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("governorate", sa.String(100)),
        sa.Column("postal_code", sa.String(20)),
        sa.Column("country", sa.String(100), nullable=False, server_default="Kuwait"),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("discount_code", sa.String(50)),
        sa.Column("tracking_number", sa.String(100)),
        sa.Column("shipping_date", sa.DateTime(timezone=True)),
        sa.Column("delivery_date", sa.DateTime(timezone=True)),
        sa.Column("admin_notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint(
            "total_amount = subtotal_amount - discount_amount + shipping_amount",
            name="ck_orders_total_consistent",
        ),
        sa.CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
        sa.CheckConstraint(
            "discount_amount >= 0 AND shipping_amount >= 0", name="ck_orders_adjustments_non_negative"
        ),
    )
    op.create_index("ix_orders_order_number", "orders", ["order_number"], unique=True)
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_created", "orders", ["created_at"])
    op.create_index("idx_orders_order_number_upper", "orders", [sa.text("upper(order_number)")])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("discounted_price", MONEY),
        sa.Column("has_discount", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discount_percentage", sa.Numeric(5, 2)),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("images", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb")),
        sa.Column("size", sa.String(30)),
        sa.Column("attributes", postgresql.JSONB(), server_default=sa.text("'{}'::jsonb")),
        sa.Column("applied_rule_id", sa.Integer()),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("line_total", MONEY, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )
    op.create_index("idx_order_items_order", "order_items", ["order_id"])
    op.create_index("idx_order_items_product", "order_items", ["product_id"])

    op.create_table(
        "payment_attempts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payment_id", sa.String(64), nullable=False, unique=True),
        sa.Column("invoice_reference", sa.String(64), nullable=False),
        sa.Column("gateway_payment_id", sa.String(64)),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("payment_method_code", sa.String(50), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("gateway_status", sa.String(20), nullable=False, server_default="initiated"),
        sa.Column("redirect_url", sa.Text()),
        sa.Column("customer_ip", sa.String(45)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("verified_at", sa.DateTime(timezone=True)),
        sa.Column("caused_transition", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        "uq_payment_attempts_invoice_reference", "payment_attempts", ["invoice_reference"], unique=True
    )
    op.create_index(
        "uq_payment_attempts_order_transition",
        "payment_attempts",
        ["order_id"],
        unique=True,
        postgresql_where=sa.text("caused_transition"),
    )
    op.create_index("idx_payment_attempts_order", "payment_attempts", ["order_id"])
    op.create_index("idx_payment_attempts_gateway_payment", "payment_attempts", ["gateway_payment_id"])

    op.create_table(
        "order_status_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("from_status", sa.String(20)),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("actor", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("payment_attempt_id", sa.Integer(), sa.ForeignKey("payment_attempts.id")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_order_status_history_order", "order_status_history", ["order_id", "created_at"])

    op.create_table(
        "discount_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("discount_type", sa.String(20), nullable=False),
        sa.Column("discount_value", MONEY, nullable=False),
        sa.Column("apply_to", sa.String(30), nullable=False, server_default="all_products"),
        sa.Column("product_ids", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("starts_at", sa.DateTime(timezone=True)),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint("discount_value > 0", name="ck_discount_rules_value_positive"),
        sa.CheckConstraint(
            "discount_type <> 'percentage' OR discount_value <= 100",
            name="ck_discount_rules_percentage_range",
        ),
        sa.CheckConstraint(
            "starts_at IS NULL OR expires_at IS NULL OR starts_at < expires_at",
            name="ck_discount_rules_window",
        ),
    )
    op.create_index(
        "idx_discount_rules_active",
        "discount_rules",
        ["is_active"],
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "discount_codes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255)),
        sa.Column("discount_type", sa.String(20), nullable=False),
        sa.Column("discount_value", MONEY, nullable=False),
        sa.Column("minimum_order_amount", MONEY),
        sa.Column("maximum_discount_amount", MONEY),
        sa.Column("usage_limit", sa.Integer()),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("starts_at", sa.DateTime(timezone=True)),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint("discount_value > 0", name="ck_discount_codes_value_positive"),
        sa.CheckConstraint("usage_limit IS NULL OR usage_count <= usage_limit", name="ck_discount_codes_usage"),
    )
    op.create_index(
        "uq_discount_codes_code",
        "discount_codes",
        ["code"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "order_acceptance_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("orders_enabled", sa.Boolean(), nullable=False),
        sa.Column("message", sa.Text()),
        sa.Column("changed_by", sa.String(100)),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_order_acceptance_current",
        "order_acceptance_settings",
        ["is_current"],
        unique=True,
        postgresql_where=sa.text("is_current"),
    )

    op.create_table(
        "shipping_cost_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="KWD"),
        sa.Column("effective_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("changed_by", sa.String(100)),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_shipping_cost_current",
        "shipping_cost_settings",
        ["is_current"],
        unique=True,
        postgresql_where=sa.text("is_current"),
    )


def downgrade() -> None:
    op.drop_table("shipping_cost_settings")
    op.drop_table("order_acceptance_settings")
    op.drop_table("discount_codes")
    op.drop_table("discount_rules")
    op.drop_table("order_status_history")
    op.drop_table("payment_attempts")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("products")
