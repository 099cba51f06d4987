from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models.models import SalesTarget
from app.schemas.reports import SalesTargetRead, SalesTargetUpsert
from app.services.sales_target import list_sales_targets, upsert_sales_target


router = APIRouter()


@router.get("/", response_model=list[SalesTargetRead])
def list_targets(sales_rep: str | None = None, db: Session = Depends(get_db)) -> list[SalesTarget]:
    return list_sales_targets(db, sales_rep=sales_rep)


@router.post("/", response_model=SalesTargetRead)
def upsert_target(payload: SalesTargetUpsert, db: Session = Depends(get_db)) -> SalesTarget:
    return upsert_sales_target(db, payload)
