from __future__ import annotations

from collections import defaultdict
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.models import Customer
from app.schemas.reports import SalesByCustomerReport, SalesByCustomerRow
from app.services.report_metrics import day_end, day_start, load_line_figures, margin_pct


def build_sales_by_customer(
    db: Session,
    date_from: date,
    date_to: date,
    sales_rep: str | None = None,
) -> SalesByCustomerReport:
    """Net sales, cost and margin per customer, biggest net first."""
    if date_from > date_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from must be <= date_to")

    customer_query = db.query(Customer)
    if sales_rep:
        customer_query = customer_query.filter(Customer.sales_rep == sales_rep)
    customers = {c.id: c for c in customer_query.all()}

    totals: dict[int, dict[str, float]] = defaultdict(lambda: defaultdict(float))
    orders: dict[int, set[int]] = defaultdict(set)
    for line in load_line_figures(db, day_start(date_from), day_end(date_to), customer_ids=list(customers)):
        bucket = totals[line.customer_id]
        bucket["gross"] += line.gross
        bucket["discount"] += line.discount
        bucket["net"] += line.net
        bucket["cost"] += line.cost
        orders[line.customer_id].add(line.order_id)

    rows: list[SalesByCustomerRow] = []
    for customer_id, figures in totals.items():
        customer = customers[customer_id]
        margin = figures["net"] - figures["cost"]
        rows.append(
            SalesByCustomerRow(
                customer_id=customer_id,
                salon_name=customer.salon_name,
                sales_rep=customer.sales_rep,
                orders=len(orders[customer_id]),
                gross_ex=round(figures["gross"], 2),
                discounts=round(figures["discount"], 2),
                net_ex=round(figures["net"], 2),
                cost=round(figures["cost"], 2),
                margin=round(margin, 2),
                margin_pct=margin_pct(margin, figures["net"]),
            )
        )
    rows.sort(key=lambda r: (-r.net_ex, r.salon_name.lower()))

    total_net = sum(f["net"] for f in totals.values())
    total_margin = total_net - sum(f["cost"] for f in totals.values())
    return SalesByCustomerReport(
        date_from=date_from,
        date_to=date_to,
        sales_rep=sales_rep,
        rows=rows,
        total_net_ex=round(total_net, 2),
        total_margin=round(total_margin, 2),
        total_margin_pct=margin_pct(total_margin, total_net),
    )
