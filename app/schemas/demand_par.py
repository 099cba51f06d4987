from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class DemandParParams(BaseModel):
    customer_id: int
    salon_name: str
    brand: str
    timeframe: str
    start: datetime
    end: datetime
    months_equivalent: float
    safety_pct: float
    coverage_months: float
    pack_size: int


class DemandParRow(BaseModel):
    sku: str
    product_name: str
    units_in_window: float
    avg_monthly: float
    suggested_monthly_par: int
    agreed_par: int | None = None
    delta: int | None = None


class DemandParReport(BaseModel):
    params: DemandParParams
    rows: list[DemandParRow]
