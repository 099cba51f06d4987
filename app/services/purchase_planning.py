from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.forecast.consumption import MIN_LOOKBACK_DAYS, bucket_window_days, nearest_bucket_point
from app.core.forecast.domain import StockPosition
from app.core.forecast.suggestion import clamp_pack_size, extended_cost, forecast_purchase_item
from app.models.models import ProductVariant
from app.schemas.purchase_planning import PurchasePlanParams, PurchasePlanResponse, PurchasePlanRow
from app.services.demand_par import display_name
from app.services.inventory import in_order_book_by_sku, out_of_stock_days_by_sku
from app.services.sales_history import sales_buckets_by_sku
from app.services.shopify_client import ShopifyUnavailableError
from app.services.sorting import sort_rows


logger = logging.getLogger(__name__)


class StockSource(Protocol):
    def fetch_stock_positions(
        self,
        skus: list[str],
        location_id: str | None = None,
    ) -> dict[str, StockPosition]:
        ...


def _select_variants(db: Session, supplier: str | None, skus: list[str] | None) -> list[ProductVariant]:
    query = db.query(ProductVariant).filter(ProductVariant.is_active.is_(True))
    if supplier:
        query = query.filter(func.lower(ProductVariant.vendor) == supplier.strip().lower())
    if skus:
        query = query.filter(ProductVariant.sku.in_(skus))
    return query.order_by(ProductVariant.product_title, ProductVariant.variant_title, ProductVariant.sku).all()


def build_purchase_plan(
    db: Session,
    stock_source: StockSource | None,
    now: datetime,
    supplier: str | None = None,
    skus: list[str] | None = None,
    location_id: str | None = None,
    days_of_stock: int = 14,
    lookback_days: int = 60,
    safety_pct: float = 0.0,
    sort_by: str | None = None,
    sort_dir: str = "asc",
) -> PurchasePlanResponse:
    """Suggested supplier order per SKU.

    ``forecast = daily rate x days_of_stock``; the suggestion is the shortfall
    against live on-hand, incoming and already-ordered stock, rounded up to
    pack size and MOQ. Raises ``UpstreamUnavailableError`` when live stock
    cannot be read; a missing stock record for a SKU counts as zero.
    """
    skus = [s.strip() for s in (skus or []) if s and s.strip()]
    supplier = (supplier or "").strip() or None
    if supplier is None and not skus:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="supplier or skus is required",
        )
    if days_of_stock < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="days_of_stock must be >= 1",
        )
    if lookback_days < MIN_LOOKBACK_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"lookback_days must be >= {MIN_LOOKBACK_DAYS}",
        )

    bucket_days = bucket_window_days(lookback_days)
    params = PurchasePlanParams(
        supplier=supplier,
        skus=skus or None,
        location_id=location_id,
        days_of_stock=days_of_stock,
        lookback_days=lookback_days,
        bucket_days=bucket_days,
        safety_pct=max(0.0, safety_pct),
        generated_at=now,
    )

    variants = _select_variants(db, supplier, skus)
    if not variants:
        return PurchasePlanResponse(params=params, rows=[], total_suggested_units=0, grand_total=0.0)

    if stock_source is None:
        raise ShopifyUnavailableError("Shopify is not configured")

    item_skus = [v.sku for v in variants]
    positions = stock_source.fetch_stock_positions(item_skus, location_id)
    buckets = sales_buckets_by_sku(db, item_skus, now, location_id=location_id)
    oos_days = out_of_stock_days_by_sku(
        db,
        item_skus,
        start_date=(now - timedelta(days=bucket_days - 1)).date(),
        end_date=now.date(),
        location_id=location_id,
    )
    in_order_book = in_order_book_by_sku(db, item_skus)

    rows: list[PurchasePlanRow] = []
    for variant in variants:
        sales = buckets[variant.sku]
        live = positions.get(variant.sku)
        stock = StockPosition(
            item_key=variant.sku,
            on_hand=live.on_hand if live is not None else 0.0,
            in_order_book=float(in_order_book[variant.sku]),
            due=(live.due or 0.0) if live is not None else 0.0,
        )
        point = nearest_bucket_point(variant.sku, sales.d30, sales.d60, lookback_days, oos_days[variant.sku])
        pack = clamp_pack_size(variant.pack_size)
        result = forecast_purchase_item(
            item_key=variant.sku,
            point=point,
            coverage_days=days_of_stock,
            stock=stock,
            pack_size=pack,
            moq=variant.moq,
            safety_margin_pct=params.safety_pct,
        )
        unit_cost = float(variant.unit_cost) if variant.unit_cost is not None else None

        rows.append(
            PurchasePlanRow(
                sku=variant.sku,
                title=display_name(variant.product_title, variant.variant_title, variant.sku),
                vendor=variant.vendor,
                variant_id=variant.variant_id,
                pack_size=pack,
                moq=variant.moq,
                unit_cost=unit_cost,
                sales_30=sales.d30,
                sales_60=sales.d60,
                units_in_window=point.period_units if point is not None else 0.0,
                out_of_stock_days=oos_days[variant.sku],
                on_hand=stock.on_hand,
                in_order_book=stock.in_order_book,
                due=stock.due,
                avg_daily_rate=round(result.avg_rate, 4),
                forecast_qty=round(result.projected_demand, 2),
                suggested_qty=result.suggested_qty,
                extended_cost=extended_cost(unit_cost, result.suggested_qty),
            )
        )

    logger.info(
        "Purchase plan for supplier=%s skus=%s: %s rows",
        supplier,
        len(skus),
        len(rows),
    )

    return PurchasePlanResponse(
        params=params,
        rows=sort_rows(rows, sort_by, sort_dir),
        total_suggested_units=sum(r.suggested_qty for r in rows),
        grand_total=round(sum(r.extended_cost or 0.0 for r in rows), 2),
    )
