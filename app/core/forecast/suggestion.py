from __future__ import annotations

import math
from typing import Any

from app.core.forecast.consumption import daily_rate, monthly_rate, non_negative
from app.core.forecast.domain import (
    PAR_POLICY,
    PURCHASE_ORDER_POLICY,
    ConsumptionPoint,
    ForecastResult,
    MinimumOrderBehavior,
    ReplenishmentPolicy,
    RoundingMode,
    StockPosition,
)


def _ceil(value: float) -> int:
    # 28.000000000000004 must round to 28, not 29.
    return math.ceil(round(value, 9))


def clamp_pack_size(value: Any) -> int:
    """Pack sizes below 1 or unparseable values mean "no packaging constraint"."""
    try:
        pack = int(value)
    except (TypeError, ValueError):
        return 1
    return pack if pack >= 1 else 1


def round_up_to_pack(quantity: float, pack_size: int) -> int:
    if quantity <= 0:
        return 0
    return _ceil(quantity / pack_size) * pack_size


def projected_demand(rate: float, coverage: float, safety_margin_pct: float = 0.0) -> float:
    """Demand over the coverage horizon, in the same time base as ``rate``."""
    return non_negative(rate) * (1 + non_negative(safety_margin_pct)) * non_negative(coverage)


def net_requirement(
    demand: float,
    stock: StockPosition | None,
    policy: ReplenishmentPolicy,
) -> float:
    if not policy.stock_aware or stock is None:
        return demand
    need = demand - float(stock.on_hand or 0)
    if stock.in_order_book is not None:
        need -= non_negative(stock.in_order_book)
    if stock.due is not None:
        need -= non_negative(stock.due)
    return need


def apply_policy(
    demand: float,
    pack_size: Any = 1,
    moq: Any = None,
    stock: StockPosition | None = None,
    policy: ReplenishmentPolicy = PURCHASE_ORDER_POLICY,
) -> int:
    """Turn a projected demand into an orderable quantity.

    The result is always a non-negative multiple of the (clamped) pack size.
    A minimum order quantity is itself rounded up to a whole number of packs.
    """
    if policy.rounding_mode is not RoundingMode.CEIL:
        raise ValueError(f"Unsupported rounding mode: {policy.rounding_mode}")

    pack = clamp_pack_size(pack_size)
    need = net_requirement(demand, stock, policy)
    units = max(0, _ceil(need))

    quantity = round_up_to_pack(units, pack)
    if quantity > 0 and moq is not None:
        quantity = max(quantity, round_up_to_pack(non_negative(moq), pack))

    if policy.minimum_order_behavior is MinimumOrderBehavior.ONE_PACK:
        if need > 0 or policy.floor_zero_demand:
            quantity = max(quantity, pack)

    return quantity


def suggest_par_quantity(
    avg_monthly_rate: float,
    safety_margin_pct: float,
    coverage_months: float,
    pack_size: Any = 1,
    policy: ReplenishmentPolicy = PAR_POLICY,
) -> int:
    """Standing monthly order for a customer: ceil(rate * (1 + safety) * months / pack) * pack."""
    demand = projected_demand(avg_monthly_rate, coverage_months, safety_margin_pct)
    return apply_policy(demand, pack_size=pack_size, policy=policy)


def suggest_purchase_quantity(
    avg_daily_rate: float,
    coverage_days: float,
    stock: StockPosition | None = None,
    pack_size: Any = 1,
    moq: Any = None,
    safety_margin_pct: float = 0.0,
    policy: ReplenishmentPolicy = PURCHASE_ORDER_POLICY,
) -> int:
    """Supplier order: max(0, ceil(rate * days - stock)) rounded to pack and MOQ."""
    demand = projected_demand(avg_daily_rate, coverage_days, safety_margin_pct)
    return apply_policy(demand, pack_size=pack_size, moq=moq, stock=stock, policy=policy)


def extended_cost(unit_cost: Any, quantity: int) -> float | None:
    if unit_cost is None:
        return None
    return round(float(unit_cost) * quantity, 2)


def forecast_par_item(
    item_key: str,
    period_units: float | None,
    period_scale: float,
    safety_margin_pct: float,
    coverage_months: float,
    pack_size: Any = 1,
    policy: ReplenishmentPolicy = PAR_POLICY,
) -> ForecastResult:
    rate = monthly_rate(period_units, period_scale)
    return ForecastResult(
        item_key=item_key,
        avg_rate=rate,
        projected_demand=projected_demand(rate, coverage_months, safety_margin_pct),
        suggested_qty=suggest_par_quantity(
            rate,
            safety_margin_pct,
            coverage_months,
            pack_size=pack_size,
            policy=policy,
        ),
    )


def forecast_purchase_item(
    item_key: str,
    point: ConsumptionPoint | None,
    coverage_days: float,
    stock: StockPosition | None = None,
    pack_size: Any = 1,
    moq: Any = None,
    safety_margin_pct: float = 0.0,
    policy: ReplenishmentPolicy = PURCHASE_ORDER_POLICY,
) -> ForecastResult:
    rate = daily_rate(point)
    return ForecastResult(
        item_key=item_key,
        avg_rate=rate,
        projected_demand=projected_demand(rate, coverage_days, safety_margin_pct),
        suggested_qty=suggest_purchase_quantity(
            rate,
            coverage_days,
            stock=stock,
            pack_size=pack_size,
            moq=moq,
            safety_margin_pct=safety_margin_pct,
            policy=policy,
        ),
    )
