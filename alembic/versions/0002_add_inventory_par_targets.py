"""add inventory snapshots, customer PARs and sales targets

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 00:10:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "inventory_snapshot",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("location_id", sa.String(length=64), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("available", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("sku", "location_id", "snapshot_date", name="uq_inventory_snapshot_sku_location_date"),
    )
    op.create_index("ix_inventory_snapshot_sku", "inventory_snapshot", ["sku"])
    op.create_index("ix_inventory_snapshot_snapshot_date", "inventory_snapshot", ["snapshot_date"])

    op.create_table(
        "customer_product_par",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.id"), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("par_qty", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("customer_id", "sku", name="uq_customer_product_par_customer_sku"),
    )

    op.create_table(
        "sales_target",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sales_rep", sa.String(length=255), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("target_amount", sa.Numeric(12, 2), nullable=False),
        sa.UniqueConstraint("sales_rep", "month", name="uq_sales_target_rep_month"),
    )


def downgrade() -> None:
    op.drop_table("sales_target")
    op.drop_table("customer_product_par")
    op.drop_index("ix_inventory_snapshot_snapshot_date", table_name="inventory_snapshot")
    op.drop_index("ix_inventory_snapshot_sku", table_name="inventory_snapshot")
    op.drop_table("inventory_snapshot")
