from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.forecast.consumption import MIN_LOOKBACK_DAYS


class PurchasePlanRequest(BaseModel):
    supplier: str | None = None
    skus: list[str] | None = None
    location_id: str | None = None
    days_of_stock: int = Field(settings.DEFAULT_DAYS_OF_STOCK, ge=1)
    lookback_days: int = Field(settings.DEFAULT_LOOKBACK_DAYS, ge=MIN_LOOKBACK_DAYS)
    safety_pct: float = Field(0.0, ge=0)
    sort_by: str | None = None
    sort_dir: str = "asc"


class PurchasePlanParams(BaseModel):
    supplier: str | None = None
    skus: list[str] | None = None
    location_id: str | None = None
    days_of_stock: int
    lookback_days: int
    bucket_days: int
    safety_pct: float
    generated_at: datetime


class PurchasePlanRow(BaseModel):
    sku: str
    title: str
    vendor: str | None = None
    variant_id: str | None = None
    pack_size: int = 1
    moq: int | None = None
    unit_cost: float | None = None
    sales_30: float = 0
    sales_60: float = 0
    units_in_window: float = 0
    out_of_stock_days: int = 0
    on_hand: float = 0
    in_order_book: float = 0
    due: float = 0
    avg_daily_rate: float = 0
    forecast_qty: float = 0
    suggested_qty: int = 0
    extended_cost: float | None = None


class PurchasePlanResponse(BaseModel):
    params: PurchasePlanParams
    rows: list[PurchasePlanRow]
    total_suggested_units: int
    grand_total: float
