from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.core.forecast.domain import Timeframe
from app.schemas.demand_par import DemandParReport
from app.services.csv_export import content_disposition, forecast_rows_to_csv, from_demand_par_rows
from app.services.demand_par import build_demand_par_report


router = APIRouter()


def _report(
    db: Session,
    customer_id: int | None,
    brand: str | None,
    timeframe: Timeframe,
    safety_pct: float,
    coverage_months: float,
    pack_size: int,
    lookback_days: int | None,
    sort_by: str | None,
    sort_dir: str,
) -> DemandParReport:
    return build_demand_par_report(
        db=db,
        customer_id=customer_id,
        brand=brand,
        now=datetime.now(timezone.utc),
        timeframe=timeframe,
        safety_pct=safety_pct,
        coverage_months=coverage_months,
        pack_size=pack_size,
        lookback_days=lookback_days,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )


@router.get("/demand-par", response_model=DemandParReport)
def get_demand_par_report(
    customer_id: int | None = None,
    brand: str | None = None,
    timeframe: Timeframe = Timeframe.MONTH_TO_DATE,
    safety_pct: float = Query(settings.DEFAULT_SAFETY_PCT, ge=0),
    coverage_months: float = Query(settings.DEFAULT_COVERAGE_MONTHS, ge=0),
    pack_size: int = 1,
    lookback_days: int | None = Query(None, ge=1),
    sort_by: str | None = None,
    sort_dir: str = "asc",
    db: Session = Depends(get_db),
) -> DemandParReport:
    return _report(
        db, customer_id, brand, timeframe, safety_pct, coverage_months, pack_size, lookback_days, sort_by, sort_dir
    )


@router.get("/demand-par/export")
def export_demand_par_report(
    customer_id: int | None = None,
    brand: str | None = None,
    timeframe: Timeframe = Timeframe.MONTH_TO_DATE,
    safety_pct: float = Query(settings.DEFAULT_SAFETY_PCT, ge=0),
    coverage_months: float = Query(settings.DEFAULT_COVERAGE_MONTHS, ge=0),
    pack_size: int = 1,
    lookback_days: int | None = Query(None, ge=1),
    sort_by: str | None = None,
    sort_dir: str = "asc",
    db: Session = Depends(get_db),
) -> Response:
    report = _report(
        db, customer_id, brand, timeframe, safety_pct, coverage_months, pack_size, lookback_days, sort_by, sort_dir
    )
    filename = f"demand-par-{report.params.customer_id}-{report.params.timeframe}.csv"
    return Response(
        content=forecast_rows_to_csv(from_demand_par_rows(report.rows)),
        media_type="text/csv",
        headers={"Content-Disposition": content_disposition(filename)},
    )
