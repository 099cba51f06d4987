from __future__ import annotations

from collections import defaultdict

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.models import Customer, OrderLineItem, ProductVariant, ShopOrder
from app.schemas.reports import GapAnalysisReport, GapAnalysisRequest, GapCustomerRow, GapProduct
from app.services.report_metrics import day_end, day_start


def build_gap_analysis(db: Session, request: GapAnalysisRequest) -> GapAnalysisReport:
    """Which of a vendor's products each customer bought, and which they did not.

    The product list is the vendor's active catalog plus anything bought from
    the vendor in the range that is no longer listed.
    """
    if request.date_from > request.date_to:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_from must be <= date_to")

    vendor = request.vendor.strip().lower()

    catalog = {
        title
        for (title,) in db.query(ProductVariant.product_title).filter(
            func.lower(ProductVariant.vendor) == vendor,
            ProductVariant.is_active.is_(True),
        )
    }

    query = (
        db.query(
            ShopOrder.customer_id,
            OrderLineItem.product_title,
            func.coalesce(func.sum(OrderLineItem.quantity - OrderLineItem.refunded_quantity), 0),
        )
        .join(ShopOrder, ShopOrder.id == OrderLineItem.order_id)
        .filter(
            ShopOrder.customer_id.isnot(None),
            ShopOrder.cancelled_at.is_(None),
            ShopOrder.processed_at >= day_start(request.date_from),
            ShopOrder.processed_at <= day_end(request.date_to),
            func.lower(OrderLineItem.product_vendor) == vendor,
        )
    )
    if request.customer_ids:
        query = query.filter(ShopOrder.customer_id.in_(request.customer_ids))

    bought: dict[int, dict[str, float]] = defaultdict(dict)
    for customer_id, title, units in query.group_by(ShopOrder.customer_id, OrderLineItem.product_title).all():
        if not title or (units or 0) <= 0:
            continue
        bought[customer_id][title] = float(units)
        catalog.add(title)

    products = sorted(catalog, key=str.lower)

    customer_query = db.query(Customer)
    if request.customer_ids:
        customer_query = customer_query.filter(Customer.id.in_(request.customer_ids))
    else:
        customer_query = customer_query.filter(Customer.id.in_(list(bought)))

    rows: list[GapCustomerRow] = []
    for customer in customer_query.all():
        purchased = bought.get(customer.id, {})
        items = [
            GapProduct(product_title=title, bought=title in purchased, units=purchased.get(title, 0))
            for title in products
        ]
        bought_count = sum(1 for i in items if i.bought)
        rows.append(
            GapCustomerRow(
                customer_id=customer.id,
                salon_name=customer.salon_name,
                products=items,
                bought_count=bought_count,
                gap_count=len(items) - bought_count,
            )
        )
    rows.sort(key=lambda r: (-r.gap_count, r.salon_name.lower()))

    return GapAnalysisReport(vendor=request.vendor.strip(), products=products, rows=rows)
