from __future__ import annotations

import pytest

from app.schemas.demand_par import DemandParRow
from app.services.csv_export import (
    FORECAST_CSV_COLUMNS,
    ForecastCsvRow,
    content_disposition,
    forecast_rows_to_csv,
    from_demand_par_rows,
    parse_forecast_csv,
)


class TestForecastCsv:
    def test_header_columns(self):
        text = forecast_rows_to_csv([])

        assert text.splitlines() == [",".join(FORECAST_CSV_COLUMNS)]

    def test_reparsed_values_match_within_display_tolerance(self):
        rows = [
            ForecastCsvRow(sku="OLA-3", name="No.3, Hair Perfector", units_in_window=45, avg_rate=45 / 31, suggested_qty=60),
            ForecastCsvRow(sku="OLA-4", name='Shampoo "Pro"', units_in_window=2.5, avg_rate=0.0, suggested_qty=0),
        ]

        parsed = parse_forecast_csv(forecast_rows_to_csv(rows))

        assert [p.sku for p in parsed] == ["OLA-3", "OLA-4"]
        assert parsed[0].name == "No.3, Hair Perfector"
        assert parsed[1].name == 'Shampoo "Pro"'
        for original, again in zip(rows, parsed):
            assert again.units_in_window == pytest.approx(original.units_in_window, abs=0.005)
            assert again.avg_rate == pytest.approx(original.avg_rate, abs=0.00005)
            assert again.suggested_qty == original.suggested_qty

    def test_demand_par_rows_map_to_csv_columns(self):
        row = DemandParRow(
            sku="OLA-3",
            product_name="No.3",
            units_in_window=45,
            avg_monthly=45,
            suggested_monthly_par=60,
        )

        text = forecast_rows_to_csv(from_demand_par_rows([row]))

        assert text.splitlines()[1] == "OLA-3,No.3,45,45,60"


def test_content_disposition_is_header_safe():
    header = content_disposition('purchase-plan-Łuna™ "Pro".csv')

    header.encode("latin-1")
    assert header.startswith('attachment; filename="purchase-plan-unaTM-Pro-.csv"')
    assert header.endswith("filename*=UTF-8''purchase-plan-%C5%81una%E2%84%A2%20%22Pro%22.csv")
    assert content_disposition("™").startswith('attachment; filename="TM"')
    assert content_disposition("Ł").startswith('attachment; filename="export.csv"')
