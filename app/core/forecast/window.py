from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone

from app.core.forecast.domain import ForecastWindow, Timeframe


DAYS_PER_MONTH = 30

_MONTHS_BACK: dict[Timeframe, int] = {
    Timeframe.LAST_MONTH: 1,
    Timeframe.LAST_2_MONTHS: 2,
    Timeframe.LAST_3_MONTHS: 3,
}


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (including those read back from the database) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _month_start(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _shift_months(month_start: datetime, months: int) -> datetime:
    """Move a first-of-month datetime back by ``months`` calendar months."""
    index = month_start.year * 12 + (month_start.month - 1) - months
    return month_start.replace(year=index // 12, month=index % 12 + 1)


def resolve_window(
    timeframe: Timeframe | str,
    now: datetime,
    lookback_days: int | None = None,
) -> ForecastWindow:
    """Resolve a timeframe token into a concrete UTC window.

    ``period_scale`` is expressed in months: a complete past month is 1.0,
    month-to-date is the elapsed fraction of the current month and a custom
    lookback of N days is ``N / 30``. It is never 0.
    """
    timeframe = Timeframe(timeframe)
    now = as_utc(now)
    current_month = _month_start(now)

    if timeframe is Timeframe.MONTH_TO_DATE:
        days_in_month = calendar.monthrange(now.year, now.month)[1]
        days_elapsed = max(1, now.day)
        return ForecastWindow(
            start=current_month,
            end=now,
            period_scale=days_elapsed / days_in_month,
            window_days=days_elapsed,
        )

    if timeframe is Timeframe.CUSTOM:
        if lookback_days is None or lookback_days < 1:
            raise ValueError("lookback_days must be >= 1 for a custom timeframe")
        return ForecastWindow(
            start=now - timedelta(days=lookback_days),
            end=now,
            period_scale=lookback_days / DAYS_PER_MONTH,
            window_days=lookback_days,
        )

    months = _MONTHS_BACK[timeframe]
    start = _shift_months(current_month, months)
    return ForecastWindow(
        start=start,
        end=current_month - timedelta(microseconds=1),
        period_scale=float(months),
        window_days=(current_month - start).days,
    )
