from __future__ import annotations

import csv
import io
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import quote

from app.schemas.demand_par import DemandParRow
from app.schemas.purchase_planning import PurchasePlanRow


FORECAST_CSV_COLUMNS = ["SKU", "Name", "Units-in-window", "Avg rate", "Suggested quantity"]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ForecastCsvRow:
    sku: str
    name: str
    units_in_window: float
    avg_rate: float
    suggested_qty: int


def _format_number(value: float, places: int) -> str:
    text = f"{value:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def from_demand_par_rows(rows: Iterable[DemandParRow]) -> list[ForecastCsvRow]:
    return [
        ForecastCsvRow(
            sku=r.sku,
            name=r.product_name,
            units_in_window=r.units_in_window,
            avg_rate=r.avg_monthly,
            suggested_qty=r.suggested_monthly_par,
        )
        for r in rows
    ]


def from_purchase_plan_rows(rows: Iterable[PurchasePlanRow]) -> list[ForecastCsvRow]:
    return [
        ForecastCsvRow(
            sku=r.sku,
            name=r.title,
            units_in_window=r.units_in_window,
            avg_rate=r.avg_daily_rate,
            suggested_qty=r.suggested_qty,
        )
        for r in rows
    ]


def forecast_rows_to_csv(rows: Iterable[ForecastCsvRow]) -> str:
    """Render forecast rows; rates keep 4 decimals, unit counts 2."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(FORECAST_CSV_COLUMNS)
    for row in rows:
        writer.writerow(
            [
                row.sku,
                row.name,
                _format_number(row.units_in_window, 2),
                _format_number(row.avg_rate, 4),
                str(int(row.suggested_qty)),
            ]
        )
    return buffer.getvalue()


def parse_forecast_csv(text: str) -> list[ForecastCsvRow]:
    reader = csv.DictReader(io.StringIO(text))
    return [
        ForecastCsvRow(
            sku=record["SKU"],
            name=record["Name"],
            units_in_window=float(record["Units-in-window"]),
            avg_rate=float(record["Avg rate"]),
            suggested_qty=int(record["Suggested quantity"]),
        )
        for record in reader
    ]


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 original."""
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = _UNSAFE_FILENAME_CHARS.sub("-", ascii_name).strip("-") or "export.csv"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
