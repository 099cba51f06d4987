from __future__ import annotations

from collections import defaultdict
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.reports import VendorMonthlyPoint, VendorScorecardReport, VendorScorecardRow
from app.services.report_metrics import day_end, day_start, load_line_figures


UNKNOWN_VENDOR = "(no vendor)"


def build_vendor_scorecard(
    db: Session,
    date_from: date,
    date_to: date,
    vendors: list[str] | None = None,
) -> VendorScorecardReport:
    """Revenue, order count, customer count and AOV per vendor, plus monthly revenue."""
    if date_from > date_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from must be <= date_to")

    wanted = {v.lower() for v in vendors or [] if v}

    revenue: dict[str, float] = defaultdict(float)
    orders: dict[str, set[int]] = defaultdict(set)
    customers: dict[str, set[int]] = defaultdict(set)
    monthly: dict[tuple[str, str], float] = defaultdict(float)

    for line in load_line_figures(db, day_start(date_from), day_end(date_to)):
        vendor = line.vendor or UNKNOWN_VENDOR
        if wanted and vendor.lower() not in wanted:
            continue
        revenue[vendor] += line.net
        orders[vendor].add(line.order_id)
        if line.customer_id is not None:
            customers[vendor].add(line.customer_id)
        monthly[(line.processed_at.strftime("%Y-%m"), vendor)] += line.net

    rows = [
        VendorScorecardRow(
            vendor=vendor,
            revenue=round(total, 2),
            orders=len(orders[vendor]),
            customers=len(customers[vendor]),
            aov=round(total / len(orders[vendor]), 2) if orders[vendor] else None,
        )
        for vendor, total in revenue.items()
    ]
    rows.sort(key=lambda r: (-r.revenue, r.vendor.lower()))

    timeseries = [
        VendorMonthlyPoint(month=month, vendor=vendor, revenue=round(total, 2))
        for (month, vendor), total in sorted(monthly.items())
    ]
    return VendorScorecardReport(date_from=date_from, date_to=date_to, rows=rows, timeseries=timeseries)
