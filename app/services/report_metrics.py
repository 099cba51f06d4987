from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session, joinedload

from app.core.forecast.window import as_utc
from app.models.models import ProductVariant, ShopOrder


@dataclass
class LineFigures:
    """Economics of one order line for the quantity the customer kept, ex VAT."""

    order_id: int
    customer_id: int | None
    processed_at: datetime
    sku: str | None
    product_title: str | None
    vendor: str | None
    kept_qty: int
    gross: float
    discount: float
    net: float
    cost: float


def load_line_figures(
    db: Session,
    start: datetime,
    end: datetime,
    customer_ids: list[int] | None = None,
) -> list[LineFigures]:
    """Per-line figures for non-cancelled orders processed in [start, end].

    Order discounts are spread over lines by original line value; cost uses
    the catalog unit cost of the SKU (0 when unknown).
    """
    query = (
        db.query(ShopOrder)
        .options(joinedload(ShopOrder.line_items))
        .filter(
            ShopOrder.cancelled_at.is_(None),
            ShopOrder.processed_at >= start,
            ShopOrder.processed_at <= end,
        )
    )
    if customer_ids is not None:
        query = query.filter(ShopOrder.customer_id.in_(customer_ids))
    orders = query.all()

    skus = {li.sku for order in orders for li in order.line_items if li.sku}
    unit_costs: dict[str, float] = defaultdict(float)
    if skus:
        for sku, unit_cost in db.query(ProductVariant.sku, ProductVariant.unit_cost).filter(
            ProductVariant.sku.in_(skus)
        ):
            unit_costs[sku] = float(unit_cost or 0)

    figures: list[LineFigures] = []
    for order in orders:
        unit_prices = []
        for li in order.line_items:
            if li.total is not None and li.quantity:
                unit_prices.append(float(li.total) / li.quantity)
            else:
                unit_prices.append(float(li.price or 0))
        order_gross = sum(price * li.quantity for price, li in zip(unit_prices, order.line_items))
        order_discount = float(order.discounts or 0)

        for price, li in zip(unit_prices, order.line_items):
            kept = max(0, li.quantity - (li.refunded_quantity or 0))
            gross = price * kept
            discount = order_discount * gross / order_gross if order_gross else 0.0
            figures.append(
                LineFigures(
                    order_id=order.id,
                    customer_id=order.customer_id,
                    processed_at=as_utc(order.processed_at),
                    sku=li.sku,
                    product_title=li.product_title,
                    vendor=li.product_vendor,
                    kept_qty=kept,
                    gross=gross,
                    discount=discount,
                    net=gross - discount,
                    cost=unit_costs[li.sku] * kept if li.sku else 0.0,
                )
            )
    return figures


def margin_pct(margin: float, net: float) -> float | None:
    if not net:
        return None
    return margin / net * 100


def attainment_pct(actual: float, target: float | None) -> float | None:
    if not target:
        return None
    return actual / target * 100


def growth_pct(current: float, previous: float) -> float | None:
    if not previous:
        return None
    return (current - previous) / abs(previous) * 100


def day_start(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def day_end(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, 23, 59, 59, 999999, tzinfo=timezone.utc)
