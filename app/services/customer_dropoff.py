from __future__ import annotations

import math
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.forecast.window import as_utc
from app.models.models import Customer, ShopOrder
from app.schemas.reports import CustomerDropoffReport, CustomerDropoffRow


def build_customer_dropoff(
    db: Session,
    days: int,
    now: datetime,
    reps: list[str] | None = None,
) -> CustomerDropoffReport:
    """Customers who never ordered or whose last order is at least ``days`` old."""
    if days < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="days must be >= 0")

    reps = [r for r in (reps or []) if r]
    now = as_utc(now)

    customer_query = db.query(Customer)
    if reps:
        customer_query = customer_query.filter(Customer.sales_rep.in_(reps))
    customers = customer_query.all()

    last_orders = dict(
        db.query(ShopOrder.customer_id, func.max(ShopOrder.processed_at))
        .filter(ShopOrder.customer_id.isnot(None), ShopOrder.cancelled_at.is_(None))
        .group_by(ShopOrder.customer_id)
        .all()
    )

    rows: list[CustomerDropoffRow] = []
    for customer in customers:
        last = as_utc(last_orders.get(customer.id))
        since = (now - last).days if last is not None else None
        if since is not None and since < days:
            continue
        rows.append(
            CustomerDropoffRow(
                customer_id=customer.id,
                salon_name=customer.salon_name,
                customer_name=customer.customer_name,
                sales_rep=customer.sales_rep,
                last_order_at=last,
                days_since_last_order=since,
            )
        )

    rows.sort(
        key=lambda r: (
            -(r.days_since_last_order if r.days_since_last_order is not None else math.inf),
            r.salon_name.lower(),
        )
    )
    return CustomerDropoffReport(days=days, reps=reps, rows=rows)
