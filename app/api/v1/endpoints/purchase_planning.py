from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.purchase_planning import PurchasePlanRequest, PurchasePlanResponse
from app.services.csv_export import content_disposition, forecast_rows_to_csv, from_purchase_plan_rows
from app.services.purchase_planning import build_purchase_plan
from app.services.shopify_client import ShopifyClient, UpstreamUnavailableError, get_shopify_client


logger = logging.getLogger(__name__)

router = APIRouter()


def _plan(db: Session, client: ShopifyClient | None, payload: PurchasePlanRequest) -> PurchasePlanResponse:
    try:
        return build_purchase_plan(
            db=db,
            stock_source=client,
            now=datetime.now(timezone.utc),
            supplier=payload.supplier,
            skus=payload.skus,
            location_id=payload.location_id,
            days_of_stock=payload.days_of_stock,
            lookback_days=payload.lookback_days,
            safety_pct=payload.safety_pct,
            sort_by=payload.sort_by,
            sort_dir=payload.sort_dir,
        )
    except UpstreamUnavailableError as exc:
        logger.warning("Purchase plan unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"forecast unavailable: {exc}",
        ) from exc


@router.post("/plan", response_model=PurchasePlanResponse)
def create_purchase_plan(
    payload: PurchasePlanRequest,
    db: Session = Depends(get_db),
    client: ShopifyClient | None = Depends(get_shopify_client),
) -> PurchasePlanResponse:
    return _plan(db, client, payload)


@router.post("/export")
def export_purchase_plan(
    payload: PurchasePlanRequest,
    db: Session = Depends(get_db),
    client: ShopifyClient | None = Depends(get_shopify_client),
) -> Response:
    plan = _plan(db, client, payload)
    label = plan.params.supplier or "skus"
    return Response(
        content=forecast_rows_to_csv(from_purchase_plan_rows(plan.rows)),
        media_type="text/csv",
        headers={"Content-Disposition": content_disposition(f"purchase-plan-{label}.csv")},
    )
