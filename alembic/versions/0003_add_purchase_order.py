"""add purchase order models

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-19 00:20:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "purchase_order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("supplier", sa.String(length=255), nullable=True),
        sa.Column("location_id", sa.String(length=64), nullable=True),
        sa.Column("comment", sa.String(length=1000), nullable=True),
        sa.Column("external_ref", sa.String(length=255), nullable=True),
    )

    op.create_table(
        "purchase_order_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("purchase_order_id", sa.Integer(), sa.ForeignKey("purchase_order.id"), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("source", sa.String(length=50), nullable=False, server_default="auto"),
        sa.Column("notes", sa.String(length=1000), nullable=True),
        sa.UniqueConstraint("purchase_order_id", "sku", name="uq_po_item_po_sku"),
    )


def downgrade() -> None:
    op.drop_table("purchase_order_item")
    op.drop_table("purchase_order")
