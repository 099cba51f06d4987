from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.ingest import ImportSummary, InventorySnapshotImportRequest
from app.services.ingest import load_inventory_snapshots
from app.services.inventory import take_inventory_snapshot
from app.services.shopify_client import ShopifyClient, UpstreamUnavailableError, get_shopify_client


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/snapshots/import", response_model=ImportSummary)
def import_inventory_snapshots(
    payload: InventorySnapshotImportRequest,
    db: Session = Depends(get_db),
) -> ImportSummary:
    return load_inventory_snapshots(db=db, items=payload.items)


@router.post("/snapshots/run", response_model=ImportSummary)
def run_inventory_snapshot(
    db: Session = Depends(get_db),
    client: ShopifyClient | None = Depends(get_shopify_client),
) -> ImportSummary:
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="inventory source unavailable: Shopify is not configured",
        )
    try:
        return take_inventory_snapshot(db, client, datetime.now(timezone.utc).date())
    except UpstreamUnavailableError as exc:
        logger.warning("Inventory snapshot failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"inventory source unavailable: {exc}",
        ) from exc
