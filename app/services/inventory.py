from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.models import InventorySnapshot, PurchaseOrder, PurchaseOrderItem
from app.schemas.ingest import ImportSummary, InventorySnapshotItem
from app.services.ingest import load_inventory_snapshots
from app.services.shopify_client import ShopifyClient


logger = logging.getLogger(__name__)

# Purchase orders in these statuses are placed with the supplier but not yet booked in.
OPEN_PURCHASE_ORDER_STATUSES = ("approved",)


def out_of_stock_days_by_sku(
    db: Session,
    skus: list[str],
    start_date: date,
    end_date: date,
    location_id: str | None = None,
) -> dict[str, int]:
    """Distinct snapshot days in [start_date, end_date] with no sellable stock.

    Stock is summed across locations (or taken from one location when given).
    Days without a snapshot were not observed and do not count.
    """
    result = {sku: 0 for sku in skus}
    if not skus:
        return result

    query = (
        db.query(
            InventorySnapshot.sku,
            InventorySnapshot.snapshot_date,
            func.sum(InventorySnapshot.available),
        )
        .filter(
            InventorySnapshot.sku.in_(skus),
            InventorySnapshot.snapshot_date >= start_date,
            InventorySnapshot.snapshot_date <= end_date,
        )
    )
    if location_id is not None:
        query = query.filter(InventorySnapshot.location_id == location_id)

    for sku, _day, available in query.group_by(InventorySnapshot.sku, InventorySnapshot.snapshot_date).all():
        if (available or 0) <= 0:
            result[sku] += 1

    return result


def in_order_book_by_sku(db: Session, skus: list[str]) -> dict[str, int]:
    """Units already on open purchase orders per SKU."""
    result = {sku: 0 for sku in skus}
    if not skus:
        return result

    rows = (
        db.query(PurchaseOrderItem.sku, func.coalesce(func.sum(PurchaseOrderItem.quantity), 0))
        .join(PurchaseOrder, PurchaseOrder.id == PurchaseOrderItem.purchase_order_id)
        .filter(
            PurchaseOrderItem.sku.in_(skus),
            PurchaseOrder.status.in_(OPEN_PURCHASE_ORDER_STATUSES),
        )
        .group_by(PurchaseOrderItem.sku)
        .all()
    )
    for sku, quantity in rows:
        result[sku] = int(quantity or 0)
    return result


def take_inventory_snapshot(db: Session, client: ShopifyClient, snapshot_date: date) -> ImportSummary:
    """Persist today's Shopify ``available`` level for every SKU and location.

    Re-running on the same day overwrites that day's rows.
    """
    items = [
        InventorySnapshotItem(sku=sku, location_id=location_id, snapshot_date=snapshot_date, available=available)
        for sku, location_id, available in client.fetch_inventory_levels()
    ]
    summary = load_inventory_snapshots(db, items)
    logger.info(
        "Inventory snapshot for %s: %s inserted, %s updated",
        snapshot_date.isoformat(),
        summary.inserted,
        summary.updated,
    )
    return summary
