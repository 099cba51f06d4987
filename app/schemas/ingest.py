from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class CustomerItem(BaseModel):
    shopify_customer_id: str
    salon_name: str
    customer_name: str | None = None
    sales_rep: str | None = None
    created_at: datetime | None = None


class CustomerImportRequest(BaseModel):
    items: list[CustomerItem]


class OrderLineItemIn(BaseModel):
    sku: str | None = None
    product_title: str | None = None
    variant_title: str | None = None
    product_vendor: str | None = None
    variant_id: str | None = None
    quantity: int = Field(0, ge=0)
    refunded_quantity: int = Field(0, ge=0)
    price: float | None = None
    total: float | None = None


class OrderItem(BaseModel):
    shopify_order_id: str
    shopify_customer_id: str | None = None
    processed_at: datetime
    cancelled_at: datetime | None = None
    currency: str = "GBP"
    location_id: str | None = None
    subtotal: float | None = None
    discounts: float | None = None
    taxes: float | None = None
    line_items: list[OrderLineItemIn] = []


class OrderImportRequest(BaseModel):
    items: list[OrderItem]


class ProductVariantItem(BaseModel):
    sku: str
    product_title: str
    variant_title: str | None = None
    variant_id: str | None = None
    vendor: str | None = None
    unit_cost: float | None = None
    pack_size: int = 1
    moq: int | None = None
    is_active: bool = True


class ProductVariantImportRequest(BaseModel):
    items: list[ProductVariantItem]


class InventorySnapshotItem(BaseModel):
    sku: str
    location_id: str
    snapshot_date: date
    available: int


class InventorySnapshotImportRequest(BaseModel):
    items: list[InventorySnapshotItem]


class ImportSummary(BaseModel):
    inserted: int
    updated: int
