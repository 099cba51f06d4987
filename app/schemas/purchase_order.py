from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.purchase_planning import PurchasePlanRequest


class PurchaseOrderItemBase(BaseModel):
    sku: str
    title: str | None = None
    quantity: int
    unit_cost: float | None = None
    source: str = "auto"
    notes: str | None = None


class PurchaseOrderItemUpdate(BaseModel):
    quantity: int | None = Field(None, ge=0)
    notes: str | None = None


class PurchaseOrderItemRead(PurchaseOrderItemBase):
    id: int
    purchase_order_id: int

    class Config:
        from_attributes = True


class PurchaseOrderBase(BaseModel):
    status: str = "draft"
    supplier: str | None = None
    location_id: str | None = None
    comment: str | None = None
    external_ref: str | None = None


class PurchaseOrderUpdate(BaseModel):
    status: str | None = None
    comment: str | None = None
    external_ref: str | None = None


class PurchaseOrderRead(PurchaseOrderBase):
    id: int
    created_at: datetime
    updated_at: datetime
    items: list[PurchaseOrderItemRead] = []

    class Config:
        from_attributes = True


class PurchaseOrderFromPlanRequest(PurchasePlanRequest):
    comment: str | None = None
    quantity_overrides: dict[str, int] = {}
