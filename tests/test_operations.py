import pytest

from food_insights.data.records import SalesDetailRecord, UtilityRecord
from food_insights.insights.operations import (
    compute_material_prices, compute_product_profit, compute_production_efficiency,
    compute_revenue_trend, compute_utility_costs, compute_waste_analysis,
)


@pytest.fixture
def waste_history(make_production):
    return [
        make_production('2024-01-02', 1000, waste_qty=50, waste_pct=5.0),
        make_production('2024-01-01', 1000, waste_qty=10, waste_pct=1.0),
        make_production('2024-01-03', 0),
        make_production('2024-01-04', 1000, waste_qty=40, waste_pct=4.0),
    ]


@pytest.fixture
def price_history(make_purchase):
    return [
        make_purchase('2024-01-15', 'M1', 10, 1200, name='양파'),
        make_purchase('2024-01-01', 'M1', 10, 1000, name='양파'),
        make_purchase('2024-01-01', 'M2', 10, 500, name='마늘'),
        make_purchase('2024-01-10', 'M2', 10, 450, name='마늘'),
        make_purchase('2024-01-05', 'M3', 10, 300, name='대파'),
    ]


# ===== WASTE =====

def test_waste_analysis(waste_history, config):
    result = compute_waste_analysis(waste_history, config)

    assert [d.date for d in result.daily] == ['2024-01-01', '2024-01-02', '2024-01-03', '2024-01-04']
    # average over producing days only
    assert result.avg_waste_rate == pytest.approx(3.3)
    assert [d.date for d in result.high_waste_days] == ['2024-01-02', '2024-01-04']
    assert result.high_waste_days[0].rate == pytest.approx(5.0)
    assert result.total_waste_qty == pytest.approx(100)
    assert result.total_estimated_cost == pytest.approx(100_000)


def test_waste_analysis_empty(config):
    result = compute_waste_analysis([], config)

    assert result.daily == []
    assert result.avg_waste_rate == 0


# ===== PRODUCTION =====

def test_production_efficiency(make_production):
    production = [
        make_production('2024-01-02', 300, qty_normal=100, qty_frozen=200),
        make_production('2024-01-01', 100, qty_normal=60, qty_sauce=40),
    ]

    result = compute_production_efficiency(production)

    assert result.total_production == pytest.approx(400)
    assert result.avg_daily == pytest.approx(200)
    assert result.max_day_date == '2024-01-02'
    assert result.max_day_qty == pytest.approx(300)
    assert result.daily[0].date == '2024-01-01'
    assert result.daily[0].sauce == pytest.approx(40)
    normal = next(c for c in result.category_stats if c.category == '일반')
    assert normal.total == pytest.approx(160)
    assert normal.avg == pytest.approx(80)
    assert normal.max_date == '2024-01-02'
    assert result.data_range.start == '2024-01-01'
    assert result.data_range.days == 2


def test_production_efficiency_empty():
    assert compute_production_efficiency([]).daily == []


# ===== MATERIAL PRICES =====

def test_material_prices(price_history):
    result = compute_material_prices(price_history)

    assert [i.product_code for i in result.items] == ['M1', 'M2', 'M3']
    onion = result.items[0]
    assert onion.first_price == pytest.approx(1000)
    assert onion.current_price == pytest.approx(1200)
    assert onion.change_rate == pytest.approx(20.0)
    assert onion.avg_price == pytest.approx(1100)
    assert [p.date for p in onion.price_history] == ['2024-01-01', '2024-01-15']
    assert result.items[1].change_rate == pytest.approx(-10.0)
    assert result.rising_count == 1
    assert result.falling_count == 1


# ===== UTILITIES =====

def test_utility_cost_per_unit(make_production):
    utilities = [
        UtilityRecord(date='2024-01-15', electricity_cost=100_000, water_cost=20_000, gas_cost=30_000),
        UtilityRecord(date='2024-02-15', electricity_cost=120_000),
    ]
    production = [make_production('2024-01-10', 1000)]

    result = compute_utility_costs(utilities, production)

    jan, feb = result.monthly
    assert jan.total == pytest.approx(150_000)
    assert jan.per_unit == pytest.approx(150)
    assert feb.production_qty == 0
    assert feb.per_unit == 0
    assert result.total_cost == pytest.approx(270_000)


# ===== REVENUE TREND =====

def test_revenue_trend(month_of_sales, make_sales, config):
    sales = month_of_sales + [make_sales('2024-02-01', jasa=12_600_000)]

    result = compute_revenue_trend(sales, config)

    jan, feb = result.monthly
    assert jan.revenue == pytest.approx(10_500_000)
    assert jan.profit == pytest.approx(1_575_000)
    assert jan.margin_rate == pytest.approx(15.0)
    assert jan.prev_month_change == 0
    assert jan.days == 30
    assert feb.prev_month_change == pytest.approx(20.0)
    assert result.avg_monthly_revenue == pytest.approx(11_550_000)


# ===== PRODUCT PROFIT =====

def test_product_profit(make_purchase):
    sales = [
        SalesDetailRecord(date='2024-01-05', product_code='P2', product_name='잡채', quantity=5, total=50_000),
        SalesDetailRecord(date='2024-01-05', product_code='P1', product_name='불고기', quantity=10, total=100_000),
    ]
    purchases = [make_purchase('2024-01-01', 'P1', 60, 1000)]

    result = compute_product_profit(sales, purchases)

    assert [i.product_code for i in result.items] == ['P1', 'P2']
    assert result.items[0].margin == pytest.approx(40_000)
    assert result.items[0].margin_rate == pytest.approx(40.0)
    assert result.items[1].margin_rate == pytest.approx(100.0)
    assert result.total_margin == pytest.approx(90_000)
