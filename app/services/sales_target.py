from __future__ import annotations

from sqlalchemy.orm import Session

from app.models.models import SalesTarget
from app.schemas.reports import SalesTargetUpsert


def upsert_sales_target(db: Session, payload: SalesTargetUpsert) -> SalesTarget:
    """Create or overwrite a rep's target for the month containing ``payload.month``."""
    month = payload.month.replace(day=1)
    row = (
        db.query(SalesTarget)
        .filter(SalesTarget.sales_rep == payload.sales_rep, SalesTarget.month == month)
        .first()
    )
    if row is None:
        row = SalesTarget(sales_rep=payload.sales_rep, month=month)
        db.add(row)
    row.target_amount = payload.target_amount

    db.commit()
    db.refresh(row)
    return row


def list_sales_targets(db: Session, sales_rep: str | None = None) -> list[SalesTarget]:
    query = db.query(SalesTarget)
    if sales_rep:
        query = query.filter(SalesTarget.sales_rep == sales_rep)
    return query.order_by(SalesTarget.sales_rep, SalesTarget.month).all()
