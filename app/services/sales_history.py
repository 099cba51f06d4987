from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.core.forecast.consumption import LONG_BUCKET_DAYS, SHORT_BUCKET_DAYS
from app.models.models import OrderLineItem, ShopOrder


@dataclass
class SkuUnits:
    sku: str
    product_title: str | None
    variant_title: str | None
    units: float


@dataclass
class SalesBuckets:
    """Trailing net units from the local order table.

    Both buckets are always present: a SKU with no orders in a bucket sold 0
    units there. The derived-bucket path of ``nearest_bucket_point`` is for
    sources that only report one of the two totals.
    """

    d30: float = 0.0
    d60: float = 0.0


def _net_quantity():
    return OrderLineItem.quantity - func.coalesce(OrderLineItem.refunded_quantity, 0)


def units_by_sku_for_customer_brand(
    db: Session,
    customer_id: int,
    brand: str,
    start: datetime,
    end: datetime,
) -> list[SkuUnits]:
    """Net units (quantity minus refunds) per SKU bought by one customer from one brand.

    Cancelled orders are ignored. Rows come back ordered by product then variant title.
    """
    rows = (
        db.query(
            OrderLineItem.sku,
            func.max(OrderLineItem.product_title),
            func.max(OrderLineItem.variant_title),
            func.coalesce(func.sum(_net_quantity()), 0),
        )
        .join(ShopOrder, ShopOrder.id == OrderLineItem.order_id)
        .filter(
            ShopOrder.customer_id == customer_id,
            ShopOrder.cancelled_at.is_(None),
            ShopOrder.processed_at >= start,
            ShopOrder.processed_at <= end,
            func.lower(OrderLineItem.product_vendor) == brand.strip().lower(),
            OrderLineItem.sku.isnot(None),
        )
        .group_by(OrderLineItem.sku)
        .all()
    )

    result = [
        SkuUnits(
            sku=sku,
            product_title=product_title,
            variant_title=variant_title,
            units=max(0.0, float(units or 0)),
        )
        for sku, product_title, variant_title, units in rows
    ]
    result.sort(key=lambda r: ((r.product_title or "").lower(), (r.variant_title or "").lower(), r.sku))
    return result


def sales_buckets_by_sku(
    db: Session,
    skus: list[str],
    now: datetime,
    location_id: str | None = None,
) -> dict[str, SalesBuckets]:
    """Trailing 30 and 60 day net units per SKU.

    Every requested SKU gets both buckets; SKUs without sales report zeros, never ``None``.
    """
    buckets = {sku: SalesBuckets() for sku in skus}
    if not skus:
        return buckets

    start_long = now - timedelta(days=LONG_BUCKET_DAYS)
    start_short = now - timedelta(days=SHORT_BUCKET_DAYS)
    net = _net_quantity()

    query = (
        db.query(
            OrderLineItem.sku,
            func.coalesce(func.sum(case((ShopOrder.processed_at >= start_short, net), else_=0)), 0),
            func.coalesce(func.sum(net), 0),
        )
        .join(ShopOrder, ShopOrder.id == OrderLineItem.order_id)
        .filter(
            OrderLineItem.sku.in_(skus),
            ShopOrder.cancelled_at.is_(None),
            ShopOrder.processed_at >= start_long,
            ShopOrder.processed_at <= now,
        )
    )
    if location_id is not None:
        query = query.filter(ShopOrder.location_id == location_id)

    for sku, d30, d60 in query.group_by(OrderLineItem.sku).all():
        buckets[sku] = SalesBuckets(d30=max(0.0, float(d30 or 0)), d60=max(0.0, float(d60 or 0)))

    return buckets
