from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models.models import CustomerProductPar
from app.schemas.par import (
    CustomerParBatchResponse,
    CustomerParBatchUpsert,
    CustomerParRead,
    CustomerParUpsert,
)
from app.services.par import list_customer_pars, upsert_customer_par, upsert_customer_pars


router = APIRouter()


@router.get("/", response_model=list[CustomerParRead])
def list_pars(customer_id: int, db: Session = Depends(get_db)) -> list[CustomerProductPar]:
    return list_customer_pars(db, customer_id)


@router.post("/upsert", response_model=CustomerParRead)
def upsert_par(payload: CustomerParUpsert, db: Session = Depends(get_db)) -> CustomerProductPar:
    return upsert_customer_par(db, payload.customer_id, payload.sku, payload.par_qty)


@router.post("/upsert-batch", response_model=CustomerParBatchResponse)
def upsert_par_batch(payload: CustomerParBatchUpsert, db: Session = Depends(get_db)) -> CustomerParBatchResponse:
    return upsert_customer_pars(db, payload.customer_id, payload.items)
