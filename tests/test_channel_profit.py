import pytest

from food_insights.data.records import ChannelCostSummary
from food_insights.insights.channel_profit import compute_channel_cascade, compute_channel_revenue


@pytest.fixture
def coupang_cost():
    return ChannelCostSummary(
        channel_name='쿠팡',
        discount_rate=0.1,
        commission_rate=0.1,
        total_variable_rate_pct=5,
        total_variable_per_order=1000,
        total_fixed_monthly=300000,
    )


def test_cascade_stages(coupang_cost, config):
    item = compute_channel_cascade('쿠팡', 6_000_000, coupang_cost, 30, config)

    assert item.recommended_revenue == pytest.approx(7_500_000)
    assert item.discount_amount == pytest.approx(750_000)
    assert item.commission_amount == pytest.approx(750_000)
    assert item.material_cost == pytest.approx(3_409_090.909, abs=1e-2)
    assert item.estimated_orders == pytest.approx(200)
    assert item.channel_variable_cost == pytest.approx(500_000)
    assert item.channel_fixed_cost == pytest.approx(300_000)
    assert item.profit3 == pytest.approx(1_790_909.09, abs=1e-2)
    assert item.margin_rate1 == pytest.approx(43.2)
    assert item.margin_rate3 == pytest.approx(29.8)


def test_profit3_identity_holds(coupang_cost, config):
    item = compute_channel_cascade('쿠팡', 1_234_567, coupang_cost, 17, config)

    expected = (
        item.settlement_revenue - item.material_cost
        - item.channel_variable_cost - item.channel_fixed_cost
    )
    assert item.profit3 == pytest.approx(expected, abs=1e-6)
    assert item.profit1 - item.profit2 == pytest.approx(item.channel_variable_cost)


def test_fixed_cost_prorated_by_period(coupang_cost, config):
    item = compute_channel_cascade('쿠팡', 1_000_000, coupang_cost, 15, config)

    assert item.channel_fixed_cost == pytest.approx(150_000)


def test_non_positive_net_ratio_uses_settlement(config):
    cost = ChannelCostSummary(channel_name='X', discount_rate=0.6, commission_rate=0.5)

    item = compute_channel_cascade('X', 1_000_000, cost, 30, config)

    assert item.recommended_revenue == pytest.approx(1_000_000)


def test_zero_revenue_has_zero_margins(coupang_cost, config):
    item = compute_channel_cascade('쿠팡', 0, coupang_cost, 30, config)

    assert item.margin_rate1 == 0
    assert item.margin_rate3 == 0
    assert item.profit3 == pytest.approx(-300_000)


def test_channel_revenue_over_a_month(month_of_sales, coupang_cost, make_purchase, config):
    purchases = [
        make_purchase('2024-01-15', 'M1', 10, 1000),
        make_purchase('2024-03-01', 'M1', 10, 1000),
    ]

    result = compute_channel_revenue(month_of_sales, purchases, [coupang_cost], config)

    by_name = {c.channel_name: c for c in result.channels}
    assert result.period_days == 30
    assert result.total_revenue == pytest.approx(10_500_000)
    assert by_name['자사몰'].share == pytest.approx(28.6)
    assert by_name['쿠팡'].share == pytest.approx(57.1)
    assert by_name['컬리'].share == pytest.approx(14.3)
    assert by_name['쿠팡'].profit3 == pytest.approx(1_790_909.09, abs=1e-2)
    # no cost structure: list price equals settlement
    assert by_name['자사몰'].recommended_revenue == pytest.approx(3_000_000)
    assert result.total_profit3 == pytest.approx(sum(c.profit3 for c in result.channels))
    assert result.total_purchase_cost == pytest.approx(10_000)
    assert len(result.daily_trend) == 30


def test_no_sales(config):
    result = compute_channel_revenue([], [], [], config)

    assert result.channels == []
    assert result.total_revenue == 0
