from __future__ import annotations

from typing import Any

from app.core.forecast.domain import ConsumptionPoint


# Lookbacks at or above this many days are served from the 60-day bucket.
BUCKET_SWITCH_DAYS = 45
SHORT_BUCKET_DAYS = 30
LONG_BUCKET_DAYS = 60
# Purchase plans need at least a week of sales history.
MIN_LOOKBACK_DAYS = 7


def non_negative(value: Any) -> float:
    """``None`` and negative values read as 0."""
    if value is None:
        return 0.0
    value = float(value)
    return value if value > 0 else 0.0


def effective_days(window_days: float, out_of_stock_days: float | None = 0) -> float:
    """Window length with out-of-stock days removed, floored at one day.

    Days an item could not be bought are treated as unobserved demand, so they
    shrink the denominator instead of diluting the rate.
    """
    window_days = non_negative(window_days)
    oos = min(non_negative(out_of_stock_days), window_days)
    return max(1.0, window_days - oos)


def daily_rate(point: ConsumptionPoint | None) -> float:
    if point is None:
        return 0.0
    units = non_negative(point.period_units)
    return units / effective_days(point.window_days, point.out_of_stock_days)


def monthly_rate(period_units: float | None, period_scale: float) -> float:
    """Units per month for a window covering ``period_scale`` months."""
    if period_scale is None or period_scale <= 0:
        return 0.0
    return non_negative(period_units) / period_scale


def nearest_bucket_point(
    item_key: str,
    units_30: float | None,
    units_60: float | None,
    lookback_days: int,
    out_of_stock_days: float | None = 0,
) -> ConsumptionPoint | None:
    """Pick the sales bucket closest to the requested lookback.

    Only 30 and 60 day totals are available from the sales source. A lookback
    of 45 days or more is served from the 60-day bucket (derived as twice the
    30-day total when missing), anything shorter from the 30-day bucket
    (derived as half the 60-day total when missing). ``out_of_stock_days``
    must be measured over the chosen bucket. Returns ``None`` when neither
    bucket is known.
    """
    if units_30 is None and units_60 is None:
        return None

    if lookback_days >= BUCKET_SWITCH_DAYS:
        units = units_60 if units_60 is not None else units_30 * 2
        window = LONG_BUCKET_DAYS
    else:
        units = units_30 if units_30 is not None else units_60 / 2
        window = SHORT_BUCKET_DAYS

    return ConsumptionPoint(
        item_key=item_key,
        period_units=non_negative(units),
        window_days=window,
        out_of_stock_days=min(non_negative(out_of_stock_days), window),
    )


def bucket_window_days(lookback_days: int) -> int:
    return LONG_BUCKET_DAYS if lookback_days >= BUCKET_SWITCH_DAYS else SHORT_BUCKET_DAYS


def blended_daily_rate(
    units_30: float | None,
    units_60: float | None,
    lookback_days: int,
    out_of_stock_days: float | None = 0,
) -> float:
    point = nearest_bucket_point("", units_30, units_60, lookback_days, out_of_stock_days)
    return daily_rate(point)
