from __future__ import annotations

from datetime import date, timedelta

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.forecast.window import as_utc
from app.models.models import Customer, SalesTarget
from app.schemas.reports import RepScorecard
from app.services.report_metrics import (
    attainment_pct,
    day_end,
    day_start,
    growth_pct,
    load_line_figures,
    margin_pct,
)


def _target_for_range(db: Session, sales_rep: str, date_from: date, date_to: date) -> float | None:
    """Sum of monthly targets for every month the range touches."""
    first_month = date_from.replace(day=1)
    value, count = (
        db.query(func.coalesce(func.sum(SalesTarget.target_amount), 0), func.count(SalesTarget.id))
        .filter(
            SalesTarget.sales_rep == sales_rep,
            SalesTarget.month >= first_month,
            SalesTarget.month <= date_to,
        )
        .one()
    )
    if not count:
        return None
    return float(value or 0)


def build_rep_scorecard(db: Session, sales_rep: str, date_from: date, date_to: date) -> RepScorecard:
    """Sales, profit, target attainment and growth for one rep.

    Growth compares against the equally long period ending the day before
    ``date_from``.
    """
    if not sales_rep:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="sales_rep is required")
    if date_from > date_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from must be <= date_to")

    customers = db.query(Customer).filter(Customer.sales_rep == sales_rep).all()
    customer_ids = [c.id for c in customers]

    current = load_line_figures(db, day_start(date_from), day_end(date_to), customer_ids=customer_ids)
    sales = sum(line.net for line in current)
    profit = sales - sum(line.cost for line in current)

    period = date_to - date_from
    prev_to = date_from - timedelta(days=1)
    prev_from = prev_to - period
    previous = load_line_figures(db, day_start(prev_from), day_end(prev_to), customer_ids=customer_ids)
    previous_sales = sum(line.net for line in previous)

    target = _target_for_range(db, sales_rep, date_from, date_to)

    range_start = day_start(date_from)
    range_end = day_end(date_to)
    new_customers = 0
    for customer in customers:
        created = as_utc(customer.created_at)
        if created is not None and range_start <= created <= range_end:
            new_customers += 1

    return RepScorecard(
        sales_rep=sales_rep,
        date_from=date_from,
        date_to=date_to,
        sales_ex=round(sales, 2),
        profit=round(profit, 2),
        margin_pct=margin_pct(profit, sales),
        target=target,
        attainment_pct=attainment_pct(sales, target),
        previous_sales_ex=round(previous_sales, 2),
        growth_pct=growth_pct(sales, previous_sales),
        total_customers=len(customers),
        new_customers=new_customers,
        active_customers=len({line.customer_id for line in current}),
    )
