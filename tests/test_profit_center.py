import pytest

from food_insights.config.business_config import (
    BusinessConfig, ProfitCenterGoal, ProfitCenterTargets,
)
from food_insights.data.records import LaborRecord, UtilityRecord
from food_insights.insights.profit_center import (
    NO_COST_SCORE, compute_profit_center_score, compute_weekly_cost_scores,
    find_active_bracket, score_multiplier, score_status, score_waste_rate,
    weekly_multiplier_score,
)
from food_insights.insights.schemas import (
    ChannelRevenueInsight, CostBreakdownInsight, MaterialDetail,
)


def make_costs(raw, sub, labor, overhead):
    return CostBreakdownInsight(
        raw_material_cost=raw,
        sub_material_cost=sub,
        labor_cost=labor,
        overhead_cost=overhead,
        total_cost=raw + sub + labor + overhead,
        composition=[],
        raw_material_detail=MaterialDetail(),
        sub_material_detail=MaterialDetail(),
        labor_source='actual',
    )


@pytest.fixture
def month_revenue():
    return ChannelRevenueInsight(
        period_days=30,
        total_revenue=1_600_000_000,
        total_recommended_revenue=2_000_000_000,
    )


def test_find_active_bracket():
    goals = [
        ProfitCenterGoal(revenue_bracket=2_500_000_000, label='25억'),
        ProfitCenterGoal(revenue_bracket=1_000_000_000, label='10억'),
        ProfitCenterGoal(revenue_bracket=1_600_000_000, label='16억'),
    ]

    assert find_active_bracket(goals, 500_000_000).label == '10억'
    assert find_active_bracket(goals, 1_600_000_000).label == '16억'
    assert find_active_bracket(goals, 2_000_000_000).label == '16억'
    assert find_active_bracket(goals, 3_000_000_000).label == '25억'


def test_score_status_bands():
    assert score_status(110) == 'excellent'
    assert score_status(100) == 'good'
    assert score_status(90) == 'warning'
    assert score_status(89.9) == 'danger'


def test_multiplier_score():
    metric = score_multiplier('raw_material', '원재료', 1_600_000_000, 400_000_000, 4.2)

    assert metric.actual == pytest.approx(4.0)
    assert metric.score == 95
    assert metric.status == 'warning'
    assert metric.target_cost == pytest.approx(380_952_381)
    assert metric.surplus == pytest.approx(-19_047_619)


def test_zero_cost_scores_fixed_value():
    metric = score_multiplier('sub_material', '부재료', 1_000_000, 0, 40)

    assert metric.score == NO_COST_SCORE
    assert metric.status == 'excellent'


def test_waste_rate_is_inverted(make_production):
    production = [
        make_production('2024-01-01', 1000, waste_qty=10, waste_pct=1.0),
        make_production('2024-01-02', 1000, waste_qty=30, waste_pct=3.0),
        make_production('2024-01-03', 0),
    ]

    metric = score_waste_rate(production, target_rate=2, waste_unit_cost=1000)

    # non-producing days are left out of the average
    assert metric.actual == pytest.approx(2.0)
    assert metric.score == 100
    assert metric.actual_cost == pytest.approx(40_000)
    assert metric.target_cost == pytest.approx(40_000)


def test_full_scorecard(month_revenue, make_production, config):
    costs = make_costs(
        raw=400_000_000, sub=40_000_000, labor=166_666_667, overhead=160_000_000,
    )
    production = [make_production('2024-01-01', 1000, waste_qty=10, waste_pct=1.0)]

    result = compute_profit_center_score(month_revenue, costs, config, production)

    scores = {m.key: m.score for m in result.metrics}
    assert scores == {
        'raw_material': 95,
        'sub_material': 100,
        'labor': 111,
        'expense': 100,
        'waste_rate': 200,
    }
    assert result.active_bracket.label == '16억'
    assert result.monthly_revenue == pytest.approx(1_600_000_000)
    assert result.production_revenue == pytest.approx(1_000_000_000)
    assert result.overall_score == pytest.approx(121.2)
    assert result.overall_status == 'excellent'
    assert result.total_cost == pytest.approx(766_666_667)


def test_monthly_revenue_scaled_to_30_days(make_production, config):
    revenue = ChannelRevenueInsight(
        period_days=15, total_revenue=800_000_000, total_recommended_revenue=800_000_000,
    )

    result = compute_profit_center_score(revenue, make_costs(1, 1, 1, 1), config)

    assert result.monthly_revenue == pytest.approx(1_600_000_000)


def test_no_goals_or_revenue(month_revenue, config):
    costs = make_costs(1, 1, 1, 1)

    assert compute_profit_center_score(
        month_revenue, costs, BusinessConfig(profit_center_goals=[])
    ) is None
    assert compute_profit_center_score(ChannelRevenueInsight(), costs, config) is None


# ===== WEEKLY SCORES =====

@pytest.fixture
def first_week_sales(make_sales):
    """2024-01-01 (Mon) .. 2024-01-07 (Sun), 420,000 a day."""
    return [make_sales(f'2024-01-0{day}', jasa=420_000) for day in range(1, 8)]


@pytest.fixture
def first_week_purchases(make_purchase):
    return [
        make_purchase('2024-01-02', 'ZIP_M_BEEF', 700, 1000),
        make_purchase('2024-01-03', 'ZIP_S_BOX', 147, 500),
    ]


def test_weekly_multiplier_score():
    assert weekly_multiplier_score(0, 5, 4) == 0
    assert weekly_multiplier_score(5, 0, 4) == NO_COST_SCORE
    assert weekly_multiplier_score(100, 25, 4) == 100
    assert weekly_multiplier_score(100, 25, 0) == 0


def test_weekly_scores(first_week_sales, first_week_purchases, make_purchase, config):
    purchases = first_week_purchases + [make_purchase('2024-01-08', 'ZIP_M_BEEF', 10, 1000)]
    utilities = [UtilityRecord(date='2024-01-05', electricity_cost=294_000)]
    labor = [LaborRecord(date='2024-01-07', total_pay=588_000)]

    weeks = compute_weekly_cost_scores(
        first_week_sales, purchases, config, utilities=utilities, labor=labor
    )

    assert [w.week_start for w in weeks] == ['2024-01-01', '2024-01-08']
    first, second = weeks
    assert first.week_label == '01/01~01/07'
    assert first.revenue == pytest.approx(2_940_000)
    # 4.2×, 40×, 5.0× vs 5.4×, 10×
    assert (first.raw_score, first.sub_score, first.labor_score, first.overhead_score) == (
        100, 100, 93, 100,
    )
    assert first.overall_score == 98
    assert first.overall_status == 'warning'
    # purchases without sales in the week score 0
    assert second.revenue == 0
    assert second.overall_score == 0
    assert second.overall_status == 'danger'


def test_weekly_labor_estimated_without_records(first_week_sales, first_week_purchases, config):
    week = compute_weekly_cost_scores(first_week_sales, first_week_purchases, config)[0]

    # (700,000 + 73,500) × 0.25
    assert week.labor_cost == pytest.approx(193_375)
    assert week.overhead_score == NO_COST_SCORE


def test_weekly_bracket_from_sales_day_count(make_sales, make_purchase):
    goals = [
        ProfitCenterGoal(
            revenue_bracket=1_000_000_000, label='10억',
            targets=ProfitCenterTargets(revenue_to_raw_material=4.0),
        ),
        ProfitCenterGoal(revenue_bracket=1_600_000_000, label='16억'),
    ]
    config = BusinessConfig(profit_center_goals=goals)
    # one sales day of 40M scales to 1.2B a month
    sales = [make_sales('2024-01-03', jasa=40_000_000)]
    purchases = [make_purchase('2024-01-03', 'ZIP_M_BEEF', 10_000, 1000)]

    week = compute_weekly_cost_scores(sales, purchases, config)[0]

    assert week.raw_score == 100


def test_weekly_scores_need_goals(first_week_sales, first_week_purchases):
    config = BusinessConfig(profit_center_goals=[])

    assert compute_weekly_cost_scores(first_week_sales, first_week_purchases, config) == []
