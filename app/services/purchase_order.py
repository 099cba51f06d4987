from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.models import PurchaseOrder, PurchaseOrderItem
from app.schemas.purchase_order import PurchaseOrderFromPlanRequest
from app.services.purchase_planning import StockSource, build_purchase_plan


def create_purchase_order_from_plan(
    db: Session,
    stock_source: StockSource | None,
    request: PurchaseOrderFromPlanRequest,
    now: datetime | None = None,
) -> PurchaseOrder:
    """Create a draft PurchaseOrder from the current purchase plan.

    Plan rows with a positive suggestion become items with source="auto".
    A quantity override replaces the suggestion and marks the item "manual";
    an override of 0 drops the row.
    """
    now = now or datetime.now(timezone.utc)
    plan = build_purchase_plan(
        db=db,
        stock_source=stock_source,
        now=now,
        supplier=request.supplier,
        skus=request.skus,
        location_id=request.location_id,
        days_of_stock=request.days_of_stock,
        lookback_days=request.lookback_days,
        safety_pct=request.safety_pct,
    )

    po = PurchaseOrder(
        status="draft",
        supplier=plan.params.supplier,
        location_id=plan.params.location_id,
        comment=request.comment,
        external_ref=None,
        created_at=now,
        updated_at=now,
    )
    db.add(po)
    db.flush()

    for row in plan.rows:
        if row.sku in request.quantity_overrides:
            quantity = max(0, int(request.quantity_overrides[row.sku]))
            source = "manual"
        else:
            quantity = row.suggested_qty
            source = "auto"
        if quantity <= 0:
            continue

        db.add(
            PurchaseOrderItem(
                purchase_order_id=po.id,
                sku=row.sku,
                title=row.title,
                quantity=quantity,
                unit_cost=row.unit_cost,
                source=source,
                notes=None,
            )
        )

    db.commit()
    db.refresh(po)
    return po
