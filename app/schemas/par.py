from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CustomerParUpsert(BaseModel):
    customer_id: int
    sku: str = Field(..., min_length=1)
    par_qty: float = Field(..., ge=0, allow_inf_nan=False)


class CustomerParBatchItem(BaseModel):
    # Validated per item so one bad row does not reject the batch.
    sku: str
    par_qty: float


class CustomerParBatchUpsert(BaseModel):
    customer_id: int
    items: list[CustomerParBatchItem]


class CustomerParRead(BaseModel):
    id: int
    customer_id: int
    sku: str
    par_qty: int
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerParBatchResult(BaseModel):
    sku: str
    ok: bool
    par_qty: int | None = None
    error: str | None = None


class CustomerParBatchResponse(BaseModel):
    saved: int
    failed: int
    results: list[CustomerParBatchResult]
