from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.ingest import (
    CustomerImportRequest,
    ImportSummary,
    OrderImportRequest,
    ProductVariantImportRequest,
)
from app.services.ingest import load_customers, load_orders, load_product_variants


router = APIRouter()


@router.post("/customers", response_model=ImportSummary)
def import_customers(payload: CustomerImportRequest, db: Session = Depends(get_db)) -> ImportSummary:
    return load_customers(db=db, items=payload.items)


@router.post("/orders", response_model=ImportSummary)
def import_orders(payload: OrderImportRequest, db: Session = Depends(get_db)) -> ImportSummary:
    return load_orders(db=db, items=payload.items)


@router.post("/variants", response_model=ImportSummary)
def import_product_variants(
    payload: ProductVariantImportRequest,
    db: Session = Depends(get_db),
) -> ImportSummary:
    return load_product_variants(db=db, items=payload.items)
