from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Timeframe(str, Enum):
    """Human-selectable history window for a forecast."""

    MONTH_TO_DATE = "mtd"
    LAST_MONTH = "lm"
    LAST_2_MONTHS = "l2m"
    LAST_3_MONTHS = "l3m"
    CUSTOM = "custom"


class RoundingMode(str, Enum):
    CEIL = "ceil"


class MinimumOrderBehavior(str, Enum):
    ONE_PACK = "one_pack"
    NONE = "none"


@dataclass(frozen=True)
class ForecastWindow:
    """Concrete history window resolved from a timeframe."""

    start: datetime
    end: datetime

    period_scale: float
    """Months-equivalent covered by the window (1.0 for a full past month)."""

    window_days: int
    """Calendar days covered by the window (at least 1)."""


@dataclass(frozen=True)
class ConsumptionPoint:
    """Net units consumed by one item over one history window."""

    item_key: str
    period_units: float
    window_days: float
    out_of_stock_days: float = 0.0


@dataclass(frozen=True)
class StockPosition:
    """Current stock for one item as reported by the inventory source.

    ``in_order_book`` and ``due`` are ``None`` when the source does not track them.
    """

    item_key: str
    on_hand: float = 0.0
    in_order_book: Optional[float] = None
    due: Optional[float] = None


@dataclass(frozen=True)
class ForecastResult:
    item_key: str
    avg_rate: float
    projected_demand: float
    suggested_qty: int


@dataclass(frozen=True)
class ReplenishmentPolicy:
    """How a projected demand is turned into an order quantity.

    The two call sites in the product (customer PAR and supplier purchase
    ordering) are expressed as the presets below; new variants should be new
    presets rather than new formulas.
    """

    name: str
    rounding_mode: RoundingMode = RoundingMode.CEIL
    minimum_order_behavior: MinimumOrderBehavior = MinimumOrderBehavior.NONE

    stock_aware: bool = False
    """Subtract on-hand and incoming stock from the projected demand."""

    floor_zero_demand: bool = False
    """Apply the minimum order even when projected demand is exactly zero."""


PAR_POLICY = ReplenishmentPolicy(
    name="par",
    minimum_order_behavior=MinimumOrderBehavior.ONE_PACK,
    stock_aware=False,
    floor_zero_demand=True,
)

PURCHASE_ORDER_POLICY = ReplenishmentPolicy(
    name="purchase_order",
    minimum_order_behavior=MinimumOrderBehavior.NONE,
    stock_aware=True,
    floor_zero_demand=False,
)
