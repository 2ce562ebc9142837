import pandas as pd
import pytest

from food_insights.optimization.reorder_point import ReorderPointCalculator
from food_insights.optimization.safety_stock import SafetyStockCalculator


# ===== SAFETY STOCK =====

def test_z_scores_match_table_values():
    calc = SafetyStockCalculator()

    assert calc.get_z_score(0.95) == pytest.approx(1.645)
    assert calc.get_z_score(0.99) == pytest.approx(2.326)
    assert calc.get_z_score(0.90) == pytest.approx(1.282)
    assert calc.get_z_score(0.5) == pytest.approx(0.0)


def test_z_score_is_finite_at_extremes():
    calc = SafetyStockCalculator()

    assert calc.get_z_score(1.0) == pytest.approx(3.719, abs=1e-3)
    assert calc.get_z_score(0.0) == pytest.approx(-3.719, abs=1e-3)


def test_constant_demand_without_lead_time_variability_needs_no_buffer():
    calc = SafetyStockCalculator()

    ss = calc.method_demand_and_lead_time(
        avg_daily_demand=100, demand_std=0, lead_time_days=5,
        lead_time_std=0, service_level=0.95
    )
    assert ss == 0


def test_compound_formula():
    calc = SafetyStockCalculator()

    # 1.645 × √(5 × 20² + 100² × 1²) = 1.645 × 109.54 = 180.2
    ss = calc.method_demand_and_lead_time(
        avg_daily_demand=100, demand_std=20, lead_time_days=5,
        lead_time_std=1, service_level=0.95
    )
    assert ss == 181


def test_lead_time_variability_raises_safety_stock():
    calc = SafetyStockCalculator()

    without = calc.method_demand_and_lead_time(50, 10, 3, 0, 0.95)
    with_lt = calc.method_demand_and_lead_time(50, 10, 3, 1, 0.95)
    assert with_lt > without


def test_safety_stock_never_negative_below_median_service():
    calc = SafetyStockCalculator()

    assert calc.method_demand_and_lead_time(100, 30, 5, 1, 0.2) == 0


def test_safety_stock_monotonic_in_service_level():
    calc = SafetyStockCalculator()
    levels = [0.5, 0.8, 0.85, 0.9, 0.95, 0.951, 0.97, 0.99, 0.999]

    stocks = [calc.method_demand_and_lead_time(37.3, 12.9, 4, 1.5, sl) for sl in levels]
    assert stocks == sorted(stocks)


def test_calculate_from_daily_series():
    calc = SafetyStockCalculator(default_lead_time_days=3, lead_time_std_days=0)
    series = pd.Series([10.0, 0.0, 10.0])

    result = calc.calculate_from_daily_series(series, service_level=0.95)

    assert result['avg_daily_demand'] == pytest.approx(20 / 3)
    assert result['std_dev_demand'] == pytest.approx(4.714, abs=1e-3)
    # 1.645 × √3 × 4.714 = 13.43
    assert result['safety_stock'] == 14


# ===== REORDER POINT / EOQ =====

def test_reorder_point():
    calc = ReorderPointCalculator(lead_time_days=5)

    assert calc.calculate_reorder_point(100, 0) == 500
    assert calc.calculate_reorder_point(10.2, 3, lead_time_days=3) == 34


def test_eoq():
    calc = ReorderPointCalculator(ordering_cost=50000, holding_cost_rate=0.2)

    # √(2 × 36500 × 50000 / 200) = 4272.002
    assert calc.calculate_eoq(36500, unit_price=1000) == 4273


def test_eoq_zero_without_holding_cost():
    assert ReorderPointCalculator(holding_cost_rate=0.2).calculate_eoq(36500, unit_price=0) == 0
    assert ReorderPointCalculator(holding_cost_rate=0.0).calculate_eoq(36500, unit_price=1000) == 0


def test_eoq_non_negative():
    calc = ReorderPointCalculator()
    for demand in (0, 0.5, 10, 1e6):
        for price in (0, 0.01, 1000):
            assert calc.calculate_eoq(demand, price) >= 0


def test_total_costs():
    calc = ReorderPointCalculator(ordering_cost=50000, holding_cost_rate=0.2)

    costs = calc.calculate_total_costs(36500, order_quantity=3650, unit_price=1000)

    assert costs['order_frequency'] == pytest.approx(10)
    assert costs['ordering_cost'] == pytest.approx(500000)
    assert costs['avg_inventory'] == pytest.approx(1825)
    assert costs['holding_cost'] == pytest.approx(365000)
    assert costs['total_cost'] == pytest.approx(865000)
