from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.reports import (
    CustomerDropoffReport,
    GapAnalysisReport,
    GapAnalysisRequest,
    RepScorecard,
    SalesByCustomerReport,
    VendorScorecardReport,
)
from app.services.customer_dropoff import build_customer_dropoff
from app.services.gap_analysis import build_gap_analysis
from app.services.rep_scorecard import build_rep_scorecard
from app.services.sales_by_customer import build_sales_by_customer
from app.services.vendor_scorecard import build_vendor_scorecard


router = APIRouter()


@router.get("/sales-by-customer", response_model=SalesByCustomerReport)
def get_sales_by_customer(
    date_from: date,
    date_to: date,
    sales_rep: str | None = None,
    db: Session = Depends(get_db),
) -> SalesByCustomerReport:
    return build_sales_by_customer(db, date_from=date_from, date_to=date_to, sales_rep=sales_rep)


@router.get("/rep-scorecard", response_model=RepScorecard)
def get_rep_scorecard(
    sales_rep: str,
    date_from: date,
    date_to: date,
    db: Session = Depends(get_db),
) -> RepScorecard:
    return build_rep_scorecard(db, sales_rep=sales_rep, date_from=date_from, date_to=date_to)


@router.get("/customer-dropoff", response_model=CustomerDropoffReport)
def get_customer_dropoff(
    days: int = Query(30, ge=0),
    rep: list[str] | None = Query(None),
    db: Session = Depends(get_db),
) -> CustomerDropoffReport:
    return build_customer_dropoff(db, days=days, now=datetime.now(timezone.utc), reps=rep)


@router.get("/vendor-scorecard", response_model=VendorScorecardReport)
def get_vendor_scorecard(
    date_from: date,
    date_to: date,
    vendor: list[str] | None = Query(None),
    db: Session = Depends(get_db),
) -> VendorScorecardReport:
    return build_vendor_scorecard(db, date_from=date_from, date_to=date_to, vendors=vendor)


@router.post("/gap-analysis", response_model=GapAnalysisReport)
def post_gap_analysis(payload: GapAnalysisRequest, db: Session = Depends(get_db)) -> GapAnalysisReport:
    return build_gap_analysis(db, payload)
