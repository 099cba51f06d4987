from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models.models import PurchaseOrder, PurchaseOrderItem
from app.schemas.purchase_order import (
    PurchaseOrderFromPlanRequest,
    PurchaseOrderItemUpdate,
    PurchaseOrderRead,
    PurchaseOrderUpdate,
)
from app.services.purchase_order import create_purchase_order_from_plan
from app.services.shopify_client import ShopifyClient, UpstreamUnavailableError, get_shopify_client


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/from-plan", response_model=PurchaseOrderRead, status_code=status.HTTP_201_CREATED)
def create_from_plan(
    payload: PurchaseOrderFromPlanRequest,
    db: Session = Depends(get_db),
    client: ShopifyClient | None = Depends(get_shopify_client),
) -> PurchaseOrder:
    try:
        return create_purchase_order_from_plan(db=db, stock_source=client, request=payload)
    except UpstreamUnavailableError as exc:
        logger.warning("Purchase order not created, plan unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"forecast unavailable: {exc}",
        ) from exc


@router.get("/", response_model=list[PurchaseOrderRead])
def list_purchase_orders(
    status_filter: str | None = Query(None, alias="status"),
    supplier: str | None = None,
    limit: int = 50,
    offset: int = 0,
    db: Session = Depends(get_db),
) -> list[PurchaseOrder]:
    query = db.query(PurchaseOrder)
    if status_filter is not None:
        query = query.filter(PurchaseOrder.status == status_filter)
    if supplier is not None:
        query = query.filter(PurchaseOrder.supplier == supplier)
    return query.order_by(PurchaseOrder.id.desc()).offset(offset).limit(limit).all()


@router.get("/{order_id}", response_model=PurchaseOrderRead)
def get_purchase_order(order_id: int, db: Session = Depends(get_db)) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == order_id).first()
    if po is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PurchaseOrder not found")
    return po


_ALLOWED_STATUSES = {"draft", "approved", "received", "cancelled"}

# "approved" orders count as stock on order until received or cancelled.
_ALLOWED_STATUS_TRANSITIONS: dict[str, set[str]] = {
    "draft": {"draft", "approved", "cancelled"},
    "approved": {"approved", "received", "cancelled"},
    "received": {"received"},
    "cancelled": {"cancelled"},
}


@router.patch("/{order_id}", response_model=PurchaseOrderRead)
def update_purchase_order(
    order_id: int,
    payload: PurchaseOrderUpdate,
    db: Session = Depends(get_db),
) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == order_id).first()
    if po is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PurchaseOrder not found")

    data = payload.model_dump(exclude_unset=True)

    changed = False

    if "status" in data:
        new_status = data["status"]
        if new_status not in _ALLOWED_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status '{new_status}', must be one of: {sorted(_ALLOWED_STATUSES)}",
            )
        old_status = po.status
        if new_status not in _ALLOWED_STATUS_TRANSITIONS.get(old_status, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition from '{old_status}' to '{new_status}'",
            )
        if new_status != old_status:
            po.status = new_status
            changed = True

    for field in ("comment", "external_ref"):
        if field in data and data[field] != getattr(po, field):
            setattr(po, field, data[field])
            changed = True

    if changed:
        po.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(po)
    return po


@router.patch("/{order_id}/items/{item_id}", response_model=PurchaseOrderRead)
def update_purchase_order_item(
    order_id: int,
    item_id: int,
    payload: PurchaseOrderItemUpdate,
    db: Session = Depends(get_db),
) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == order_id).first()
    if po is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PurchaseOrder not found")

    if po.status != "draft":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot modify items of a non-draft purchase order",
        )

    item = (
        db.query(PurchaseOrderItem)
        .filter(
            PurchaseOrderItem.id == item_id,
            PurchaseOrderItem.purchase_order_id == order_id,
        )
        .first()
    )
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PurchaseOrderItem not found")

    data = payload.model_dump(exclude_unset=True)
    if data.get("quantity") is not None and data["quantity"] != item.quantity:
        item.quantity = data["quantity"]
        item.source = "manual"
    if "notes" in data:
        item.notes = data["notes"]

    po.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(po)
    return po
