from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from app.models.models import (
    Customer,
    InventorySnapshot,
    OrderLineItem,
    ProductVariant,
    ShopOrder,
)
from app.schemas.ingest import (
    CustomerItem,
    ImportSummary,
    InventorySnapshotItem,
    OrderItem,
    ProductVariantItem,
)


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def load_customers(db: Session, items: list[CustomerItem]) -> ImportSummary:
    """Upsert customers keyed by shopify_customer_id. Commits once."""
    if not items:
        return ImportSummary(inserted=0, updated=0)

    ids = {i.shopify_customer_id for i in items}
    existing_map: dict[str, Customer] = {
        row.shopify_customer_id: row
        for row in db.query(Customer).filter(Customer.shopify_customer_id.in_(ids)).all()
    }

    inserted = 0
    updated = 0

    for item in items:
        row = existing_map.get(item.shopify_customer_id)
        if row is None:
            row = Customer(
                shopify_customer_id=item.shopify_customer_id,
                salon_name=item.salon_name,
                customer_name=item.customer_name,
                sales_rep=item.sales_rep,
                created_at=item.created_at or _utcnow(),
            )
            db.add(row)
            existing_map[item.shopify_customer_id] = row
            inserted += 1
        else:
            row.salon_name = item.salon_name
            row.customer_name = item.customer_name
            row.sales_rep = item.sales_rep
            updated += 1

    db.commit()
    return ImportSummary(inserted=inserted, updated=updated)


def _line_items(item: OrderItem) -> list[OrderLineItem]:
    return [
        OrderLineItem(
            sku=(li.sku or "").strip() or None,
            product_title=li.product_title,
            variant_title=li.variant_title,
            product_vendor=li.product_vendor,
            variant_id=li.variant_id,
            quantity=li.quantity,
            refunded_quantity=min(li.refunded_quantity, li.quantity),
            price=li.price,
            total=li.total,
        )
        for li in item.line_items
    ]


def load_orders(db: Session, items: list[OrderItem]) -> ImportSummary:
    """Upsert orders keyed by shopify_order_id.

    - Existing order: header fields overwritten, line items replaced.
    - Orders are linked to customers by shopify_customer_id when known.
    All changes are committed in a single transaction.
    """
    if not items:
        return ImportSummary(inserted=0, updated=0)

    order_ids = {i.shopify_order_id for i in items}
    existing_map: dict[str, ShopOrder] = {
        row.shopify_order_id: row
        for row in db.query(ShopOrder).filter(ShopOrder.shopify_order_id.in_(order_ids)).all()
    }

    customer_keys = {i.shopify_customer_id for i in items if i.shopify_customer_id}
    customer_map: dict[str, int] = {}
    if customer_keys:
        customer_map = {
            shopify_id: customer_id
            for customer_id, shopify_id in db.query(Customer.id, Customer.shopify_customer_id)
            .filter(Customer.shopify_customer_id.in_(customer_keys))
            .all()
        }

    inserted = 0
    updated = 0

    for item in items:
        customer_id = customer_map.get(item.shopify_customer_id) if item.shopify_customer_id else None
        if item.shopify_customer_id and customer_id is None:
            logger.warning(
                "Order %s references unknown customer %s",
                item.shopify_order_id,
                item.shopify_customer_id,
            )

        row = existing_map.get(item.shopify_order_id)
        if row is None:
            row = ShopOrder(shopify_order_id=item.shopify_order_id)
            db.add(row)
            existing_map[item.shopify_order_id] = row
            inserted += 1
        else:
            updated += 1

        row.customer_id = customer_id
        row.processed_at = item.processed_at
        row.cancelled_at = item.cancelled_at
        row.currency = item.currency
        row.location_id = item.location_id
        row.subtotal = item.subtotal
        row.discounts = item.discounts
        row.taxes = item.taxes
        row.line_items = _line_items(item)

    db.commit()
    return ImportSummary(inserted=inserted, updated=updated)


def load_product_variants(db: Session, items: list[ProductVariantItem]) -> ImportSummary:
    """Upsert catalog variants keyed by SKU. Pack sizes below 1 are stored as 1."""
    if not items:
        return ImportSummary(inserted=0, updated=0)

    skus = {i.sku for i in items}
    existing_map: dict[str, ProductVariant] = {
        row.sku: row for row in db.query(ProductVariant).filter(ProductVariant.sku.in_(skus)).all()
    }

    inserted = 0
    updated = 0

    for item in items:
        row = existing_map.get(item.sku)
        if row is None:
            row = ProductVariant(sku=item.sku)
            db.add(row)
            existing_map[item.sku] = row
            inserted += 1
        else:
            updated += 1

        row.product_title = item.product_title
        row.variant_title = item.variant_title
        row.variant_id = item.variant_id
        row.vendor = item.vendor
        row.unit_cost = item.unit_cost
        row.pack_size = max(1, item.pack_size)
        row.moq = item.moq
        row.is_active = item.is_active

    db.commit()
    return ImportSummary(inserted=inserted, updated=updated)


def load_inventory_snapshots(db: Session, items: list[InventorySnapshotItem]) -> ImportSummary:
    """Upsert daily stock snapshots keyed by (sku, location_id, snapshot_date)."""
    if not items:
        return ImportSummary(inserted=0, updated=0)

    skus = {i.sku for i in items}
    dates = {i.snapshot_date for i in items}
    existing_rows = (
        db.query(InventorySnapshot)
        .filter(InventorySnapshot.sku.in_(skus), InventorySnapshot.snapshot_date.in_(dates))
        .all()
    )
    existing_map: dict[tuple[str, str, date], InventorySnapshot] = {
        (row.sku, row.location_id, row.snapshot_date): row for row in existing_rows
    }

    inserted = 0
    updated = 0

    for item in items:
        key = (item.sku, item.location_id, item.snapshot_date)
        row = existing_map.get(key)
        if row is None:
            row = InventorySnapshot(
                sku=item.sku,
                location_id=item.location_id,
                snapshot_date=item.snapshot_date,
                available=item.available,
            )
            db.add(row)
            existing_map[key] = row
            inserted += 1
        else:
            row.available = item.available
            updated += 1

    db.commit()
    return ImportSummary(inserted=inserted, updated=updated)
