from __future__ import annotations

from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.forecast.domain import Timeframe
from app.core.forecast.suggestion import clamp_pack_size, forecast_par_item
from app.core.forecast.window import resolve_window
from app.models.models import Customer, CustomerProductPar
from app.schemas.demand_par import DemandParParams, DemandParReport, DemandParRow
from app.services.sales_history import units_by_sku_for_customer_brand
from app.services.sorting import sort_rows


DEFAULT_VARIANT_TITLE = "default title"


def display_name(product_title: str | None, variant_title: str | None, fallback: str) -> str:
    """``"Product - Variant"`` unless the variant is Shopify's placeholder or already in the title."""
    product = (product_title or "").strip()
    variant = (variant_title or "").strip()
    if not product:
        return variant or fallback
    if not variant or variant.lower() == DEFAULT_VARIANT_TITLE or variant.lower() in product.lower():
        return product
    return f"{product} - {variant}"


def build_demand_par_report(
    db: Session,
    customer_id: int | None,
    brand: str | None,
    now: datetime,
    timeframe: Timeframe | str = Timeframe.MONTH_TO_DATE,
    safety_pct: float = 0.15,
    coverage_months: float = 1.0,
    pack_size: int = 1,
    lookback_days: int | None = None,
    sort_by: str | None = None,
    sort_dir: str = "asc",
) -> DemandParReport:
    """Suggested monthly PAR per SKU for one customer and brand.

    Units are net of refunds over the resolved window, normalised to a
    monthly rate by the window's months-equivalent.
    """
    if customer_id is None or not (brand or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="customer_id and brand are required",
        )

    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")

    try:
        window = resolve_window(timeframe, now, lookback_days=lookback_days)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    safety_pct = max(0.0, safety_pct)
    coverage_months = max(0.0, coverage_months)
    pack = clamp_pack_size(pack_size)
    brand = brand.strip()

    agreed = {
        par.sku: par.par_qty
        for par in db.query(CustomerProductPar).filter(CustomerProductPar.customer_id == customer_id).all()
    }

    rows: list[DemandParRow] = []
    for consumption in units_by_sku_for_customer_brand(db, customer_id, brand, window.start, window.end):
        result = forecast_par_item(
            item_key=consumption.sku,
            period_units=consumption.units,
            period_scale=window.period_scale,
            safety_margin_pct=safety_pct,
            coverage_months=coverage_months,
            pack_size=pack,
        )
        agreed_par = agreed.get(consumption.sku)
        rows.append(
            DemandParRow(
                sku=consumption.sku,
                product_name=display_name(consumption.product_title, consumption.variant_title, consumption.sku),
                units_in_window=consumption.units,
                avg_monthly=round(result.avg_rate, 4),
                suggested_monthly_par=result.suggested_qty,
                agreed_par=agreed_par,
                delta=agreed_par - result.suggested_qty if agreed_par is not None else None,
            )
        )

    return DemandParReport(
        params=DemandParParams(
            customer_id=customer.id,
            salon_name=customer.salon_name,
            brand=brand,
            timeframe=Timeframe(timeframe).value,
            start=window.start,
            end=window.end,
            months_equivalent=window.period_scale,
            safety_pct=safety_pct,
            coverage_months=coverage_months,
            pack_size=pack,
        ),
        rows=sort_rows(rows, sort_by, sort_dir),
    )
