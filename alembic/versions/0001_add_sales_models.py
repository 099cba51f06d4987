"""add customer, order and catalog models

Revision ID: 0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customer",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("salon_name", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("sales_rep", sa.String(length=255), nullable=True),
        sa.Column("shopify_customer_id", sa.String(length=64), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_customer_sales_rep", "customer", ["sales_rep"])

    op.create_table(
        "shop_order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("shopify_order_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.id"), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="GBP"),
        sa.Column("location_id", sa.String(length=64), nullable=True),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=True),
        sa.Column("discounts", sa.Numeric(12, 2), nullable=True),
        sa.Column("taxes", sa.Numeric(12, 2), nullable=True),
    )
    op.create_index("ix_shop_order_customer_id", "shop_order", ["customer_id"])
    op.create_index("ix_shop_order_processed_at", "shop_order", ["processed_at"])

    op.create_table(
        "order_line_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("shop_order.id"), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=True),
        sa.Column("product_title", sa.String(length=255), nullable=True),
        sa.Column("variant_title", sa.String(length=255), nullable=True),
        sa.Column("product_vendor", sa.String(length=255), nullable=True),
        sa.Column("variant_id", sa.String(length=64), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("refunded_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("price", sa.Numeric(12, 2), nullable=True),
        sa.Column("total", sa.Numeric(12, 2), nullable=True),
    )
    op.create_index("ix_order_line_item_order_id", "order_line_item", ["order_id"])
    op.create_index("ix_order_line_item_sku", "order_line_item", ["sku"])
    op.create_index("ix_order_line_item_product_vendor", "order_line_item", ["product_vendor"])

    op.create_table(
        "product_variant",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("variant_id", sa.String(length=64), nullable=True, unique=True),
        sa.Column("sku", sa.String(length=100), nullable=False, unique=True),
        sa.Column("product_title", sa.String(length=255), nullable=False),
        sa.Column("variant_title", sa.String(length=255), nullable=True),
        sa.Column("vendor", sa.String(length=255), nullable=True),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("pack_size", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("moq", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_product_variant_vendor", "product_variant", ["vendor"])


def downgrade() -> None:
    op.drop_index("ix_product_variant_vendor", table_name="product_variant")
    op.drop_table("product_variant")
    op.drop_index("ix_order_line_item_product_vendor", table_name="order_line_item")
    op.drop_index("ix_order_line_item_sku", table_name="order_line_item")
    op.drop_index("ix_order_line_item_order_id", table_name="order_line_item")
    op.drop_table("order_line_item")
    op.drop_index("ix_shop_order_processed_at", table_name="shop_order")
    op.drop_index("ix_shop_order_customer_id", table_name="shop_order")
    op.drop_table("shop_order")
    op.drop_index("ix_customer_sales_rep", table_name="customer")
    op.drop_table("customer")
