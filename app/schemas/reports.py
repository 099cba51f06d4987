from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class SalesByCustomerRow(BaseModel):
    customer_id: int
    salon_name: str
    sales_rep: str | None = None
    orders: int
    gross_ex: float
    discounts: float
    net_ex: float
    cost: float
    margin: float
    margin_pct: float | None = None


class SalesByCustomerReport(BaseModel):
    date_from: date
    date_to: date
    sales_rep: str | None = None
    rows: list[SalesByCustomerRow]
    total_net_ex: float
    total_margin: float
    total_margin_pct: float | None = None


class RepScorecard(BaseModel):
    sales_rep: str
    date_from: date
    date_to: date
    sales_ex: float
    profit: float
    margin_pct: float | None = None
    target: float | None = None
    attainment_pct: float | None = None
    previous_sales_ex: float
    growth_pct: float | None = None
    total_customers: int
    new_customers: int
    active_customers: int


class CustomerDropoffRow(BaseModel):
    customer_id: int
    salon_name: str
    customer_name: str | None = None
    sales_rep: str | None = None
    last_order_at: datetime | None = None
    days_since_last_order: int | None = None


class CustomerDropoffReport(BaseModel):
    days: int
    reps: list[str] = []
    rows: list[CustomerDropoffRow]


class VendorScorecardRow(BaseModel):
    vendor: str
    revenue: float
    orders: int
    customers: int
    aov: float | None = None


class VendorMonthlyPoint(BaseModel):
    month: str
    vendor: str
    revenue: float


class VendorScorecardReport(BaseModel):
    date_from: date
    date_to: date
    rows: list[VendorScorecardRow]
    timeseries: list[VendorMonthlyPoint]


class GapAnalysisRequest(BaseModel):
    vendor: str = Field(..., min_length=1)
    date_from: date
    date_to: date
    customer_ids: list[int] | None = None


class GapProduct(BaseModel):
    product_title: str
    bought: bool
    units: float = 0


class GapCustomerRow(BaseModel):
    customer_id: int
    salon_name: str
    products: list[GapProduct]
    bought_count: int
    gap_count: int


class GapAnalysisReport(BaseModel):
    vendor: str
    products: list[str]
    rows: list[GapCustomerRow]


class SalesTargetUpsert(BaseModel):
    sales_rep: str = Field(..., min_length=1)
    month: date
    target_amount: float = Field(..., ge=0)


class SalesTargetRead(BaseModel):
    id: int
    sales_rep: str
    month: date
    target_amount: float

    class Config:
        from_attributes = True
