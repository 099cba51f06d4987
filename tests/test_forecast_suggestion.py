from __future__ import annotations

import pytest

from app.core.forecast.domain import (
    PAR_POLICY,
    PURCHASE_ORDER_POLICY,
    ConsumptionPoint,
    StockPosition,
)
from app.core.forecast.suggestion import (
    clamp_pack_size,
    extended_cost,
    forecast_par_item,
    forecast_purchase_item,
    projected_demand,
    suggest_par_quantity,
    suggest_purchase_quantity,
)


class TestParVariant:
    def test_par_rounds_up_to_whole_packs(self):
        # ceil(45 * 1.15 * 1 / 10) * 10 = ceil(5.175) * 10
        assert suggest_par_quantity(45, 0.15, 1, pack_size=10) == 60

    def test_par_small_positive_demand_floors_at_one_pack(self):
        assert suggest_par_quantity(0.2, 0.15, 1, pack_size=12) == 12

    def test_par_zero_demand_still_suggests_one_pack(self):
        assert suggest_par_quantity(0, 0.15, 1, pack_size=6) == 6

    def test_par_ignores_stock(self):
        result = forecast_par_item("SKU-1", period_units=45, period_scale=1.0, safety_margin_pct=0.15,
                                   coverage_months=1, pack_size=10)

        assert result.avg_rate == pytest.approx(45)
        assert result.projected_demand == pytest.approx(51.75)
        assert result.suggested_qty == 60

    def test_par_month_to_date_is_normalised_to_full_month(self):
        result = forecast_par_item("SKU-1", period_units=10, period_scale=10 / 31, safety_margin_pct=0.15,
                                   coverage_months=1, pack_size=1)

        assert result.avg_rate == pytest.approx(31)
        assert result.suggested_qty == 36


class TestPurchaseVariant:
    def test_shortfall_against_on_hand(self):
        stock = StockPosition(item_key="SKU-1", on_hand=20)

        assert suggest_purchase_quantity(2, 14, stock=stock) == 8

    def test_pack_size_and_moq_rounding(self):
        stock = StockPosition(item_key="SKU-1", on_hand=20)

        assert suggest_purchase_quantity(2, 14, stock=stock, pack_size=5, moq=10) == 10

    def test_moq_not_a_pack_multiple_is_rounded_up_to_pack(self):
        stock = StockPosition(item_key="SKU-1", on_hand=20)

        assert suggest_purchase_quantity(2, 14, stock=stock, pack_size=5, moq=12) == 15

    def test_incoming_and_ordered_stock_reduce_shortfall(self):
        stock = StockPosition(item_key="SKU-1", on_hand=20, in_order_book=4, due=2)

        assert suggest_purchase_quantity(2, 14, stock=stock) == 2

    def test_covered_demand_needs_no_order_even_with_moq(self):
        stock = StockPosition(item_key="SKU-1", on_hand=40)

        assert suggest_purchase_quantity(2, 14, stock=stock, pack_size=6, moq=24) == 0

    def test_backorder_increases_suggestion(self):
        stock = StockPosition(item_key="SKU-1", on_hand=-5)

        assert suggest_purchase_quantity(2, 14, stock=stock) == 33

    def test_zero_rate_suggests_nothing(self):
        assert suggest_purchase_quantity(0, 14, stock=StockPosition(item_key="SKU-1"), pack_size=6) == 0

    def test_float_noise_does_not_round_up_an_extra_unit(self):
        assert suggest_purchase_quantity(28.000000000000004, 1) == 28

    def test_stock_out_adjusted_item(self):
        point = ConsumptionPoint(item_key="SKU-1", period_units=10, window_days=30, out_of_stock_days=20)

        result = forecast_purchase_item("SKU-1", point, coverage_days=14, stock=StockPosition(item_key="SKU-1"))

        assert result.avg_rate == pytest.approx(1.0)
        assert result.projected_demand == pytest.approx(14)
        assert result.suggested_qty == 14

    def test_missing_consumption_gives_zero(self):
        result = forecast_purchase_item("SKU-1", None, coverage_days=14)

        assert result.avg_rate == 0
        assert result.suggested_qty == 0


class TestPackSize:
    @pytest.mark.parametrize("value", [0, -3, None, "abc", 0.5])
    def test_invalid_pack_size_means_no_constraint(self, value):
        assert clamp_pack_size(value) == 1

    def test_invalid_pack_size_does_not_raise_in_calculation(self):
        assert suggest_par_quantity(45, 0.15, 1, pack_size=0) == 52


class TestInvariants:
    @pytest.mark.parametrize("pack_size", [1, 3, 10, 24])
    def test_suggestions_are_non_negative_pack_multiples(self, pack_size):
        for rate in (0, 0.3, 1.5, 7, 45.5):
            for on_hand in (-10, 0, 5, 100):
                stock = StockPosition(item_key="SKU", on_hand=on_hand, due=1)
                po_qty = suggest_purchase_quantity(rate, 14, stock=stock, pack_size=pack_size, moq=7)
                par_qty = suggest_par_quantity(rate, 0.15, 1, pack_size=pack_size)

                for qty in (po_qty, par_qty):
                    assert isinstance(qty, int)
                    assert qty >= 0
                    assert qty % pack_size == 0

    def test_par_is_monotonic_in_safety_and_coverage(self):
        previous = 0
        for safety in (0, 0.05, 0.15, 0.5, 1.0):
            qty = suggest_par_quantity(13, safety, 1, pack_size=4)
            assert qty >= previous
            previous = qty

        previous = 0
        for months in (0, 0.5, 1, 2, 3):
            qty = suggest_par_quantity(13, 0.15, months, pack_size=4)
            assert qty >= previous
            previous = qty

    def test_purchase_forecast_is_monotonic_in_coverage(self):
        previous = 0.0
        for days in (0, 7, 14, 30, 60):
            demand = projected_demand(1.7, days)
            assert demand >= previous
            previous = demand

    def test_calculation_is_idempotent(self):
        point = ConsumptionPoint(item_key="SKU-1", period_units=33, window_days=60, out_of_stock_days=4)
        stock = StockPosition(item_key="SKU-1", on_hand=3, in_order_book=2, due=1)

        first = forecast_purchase_item("SKU-1", point, 21, stock=stock, pack_size=6, moq=12)
        second = forecast_purchase_item("SKU-1", point, 21, stock=stock, pack_size=6, moq=12)

        assert first == second


class TestPolicies:
    def test_presets_disagree_only_where_documented(self):
        assert PAR_POLICY.floor_zero_demand is True
        assert PAR_POLICY.stock_aware is False
        assert PURCHASE_ORDER_POLICY.floor_zero_demand is False
        assert PURCHASE_ORDER_POLICY.stock_aware is True

    def test_par_policy_can_be_applied_to_purchase_call(self):
        stock = StockPosition(item_key="SKU-1", on_hand=1000)

        assert suggest_purchase_quantity(0, 14, stock=stock, pack_size=6, policy=PAR_POLICY) == 6


class TestExtendedCost:
    def test_cost_uses_rounded_quantity(self):
        stock = StockPosition(item_key="SKU-1", on_hand=20)
        qty = suggest_purchase_quantity(2, 14, stock=stock, pack_size=5, moq=10)

        assert extended_cost(2.5, qty) == pytest.approx(25.0)

    def test_missing_cost_stays_missing(self):
        assert extended_cost(None, 10) is None
