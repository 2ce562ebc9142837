# food_insights/insights/profit_center.py

"""
Profit-Center Scoring

Monthly revenue is matched to a goal bracket; each bracket carries target
multipliers (revenue ÷ cost). A metric scores actual/target × 100, so 100
means "exactly on target" and scores above 100 are allowed. Waste rate is
inverted: lower is better, scored target/actual × 100.

Status bands: excellent ≥ 110, good ≥ 100, warning ≥ 90, danger < 90.

Weekly scores apply the period bracket to each Monday-to-Sunday week of
revenue, material, labor and utility cost.
"""

import logging
from typing import List, Optional, Sequence

from food_insights.config.business_config import BusinessConfig, ProfitCenterGoal
from food_insights.data.aggregation import (
    aggregate_by_period, round_half_up, safe_divide, week_label,
)
from food_insights.data.records import (
    DailySalesRecord, LaborRecord, ProductionRecord, PurchaseRecord, UtilityRecord,
)
from food_insights.insights.cost_breakdown import is_sub_material
from food_insights.insights.schemas import (
    ChannelRevenueInsight, CostBreakdownInsight, MetricScore, ProfitCenterScoreInsight,
    WeeklyCostScore,
)

logger = logging.getLogger(__name__)

# Score given when there is no cost to measure against
NO_COST_SCORE = 150


def score_status(score: float) -> str:
    if score >= 110:
        return 'excellent'
    if score >= 100:
        return 'good'
    if score >= 90:
        return 'warning'
    return 'danger'


def find_active_bracket(
    goals: Sequence[ProfitCenterGoal],
    monthly_revenue: float
) -> ProfitCenterGoal:
    """Largest bracket not above monthly revenue; the smallest if revenue is below all."""
    ordered = sorted(goals, key=lambda g: g.revenue_bracket)
    active = ordered[0]
    for goal in ordered:
        if monthly_revenue >= goal.revenue_bracket:
            active = goal
        else:
            break
    return active


def score_multiplier(
    key: str,
    label: str,
    revenue: float,
    cost: float,
    target: float
) -> MetricScore:
    """Score a revenue ÷ cost multiplier against its target."""
    actual = safe_divide(revenue, cost)
    if cost <= 0:
        score = NO_COST_SCORE
    elif target > 0:
        score = int(round_half_up(actual / target * 100))
    else:
        score = 0
    target_cost = round_half_up(safe_divide(revenue, target))

    return MetricScore(
        key=key,
        label=label,
        actual=round_half_up(actual, 2),
        target=target,
        score=score,
        status=score_status(score),
        actual_cost=cost,
        target_cost=target_cost,
        surplus=target_cost - cost,
    )


def score_waste_rate(
    production: Sequence[ProductionRecord],
    target_rate: float,
    waste_unit_cost: float
) -> MetricScore:
    """Inverted metric: target rate / actual rate × 100."""
    producing_days = [p for p in production if p.total_qty > 0]
    actual_rate = safe_divide(
        sum(p.waste_finished_pct for p in producing_days), len(producing_days)
    )

    if actual_rate <= 0:
        score = NO_COST_SCORE
    else:
        score = int(round_half_up(target_rate / actual_rate * 100))

    produced = sum(p.total_qty for p in production)
    actual_cost = sum(p.waste_finished_qty for p in production) * waste_unit_cost
    target_cost = round_half_up(produced * target_rate / 100 * waste_unit_cost)

    return MetricScore(
        key='waste_rate',
        label='폐기율',
        actual=round_half_up(actual_rate, 2),
        target=target_rate,
        score=score,
        status=score_status(score),
        actual_cost=actual_cost,
        target_cost=target_cost,
        surplus=target_cost - actual_cost,
    )


def compute_profit_center_score(
    channel_revenue: ChannelRevenueInsight,
    cost_breakdown: CostBreakdownInsight,
    config: BusinessConfig,
    production: Sequence[ProductionRecord] = ()
) -> Optional[ProfitCenterScoreInsight]:
    """
    Score the period against the matching revenue bracket.

    Args:
        channel_revenue: Settlement and recommended revenue, period length
        cost_breakdown: Raw, sub, labor and overhead cost
        config: profit_center_goals, production_revenue_ratio, waste_unit_cost
        production: Waste rate history

    Returns:
        ProfitCenterScoreInsight, or None without goals or revenue
    """
    goals = config.profit_center_goals
    settlement = channel_revenue.total_revenue
    if not goals or settlement <= 0:
        return None

    period_days = max(1, channel_revenue.period_days)
    monthly_revenue = round_half_up(settlement * 30 / period_days)
    bracket = find_active_bracket(goals, monthly_revenue)
    targets = bracket.targets

    production_revenue = channel_revenue.total_recommended_revenue * config.production_revenue_ratio

    metrics: List[MetricScore] = [
        score_multiplier('raw_material', '원재료', settlement,
                         cost_breakdown.raw_material_cost, targets.revenue_to_raw_material),
        score_multiplier('sub_material', '부재료', settlement,
                         cost_breakdown.sub_material_cost, targets.revenue_to_sub_material),
        score_multiplier('labor', '노무비', production_revenue,
                         cost_breakdown.labor_cost, targets.production_to_labor),
        score_multiplier('expense', '수도광열전력', settlement,
                         cost_breakdown.overhead_cost, targets.revenue_to_expense),
        score_waste_rate(production, targets.waste_rate_target, config.waste_unit_cost),
    ]

    overall = round_half_up(sum(m.score for m in metrics) / len(metrics), 1)

    logger.info(
        f"Profit center: bracket {bracket.label}, monthly revenue "
        f"{monthly_revenue:,.0f}, overall score {overall}"
    )

    return ProfitCenterScoreInsight(
        active_bracket=bracket,
        settlement_revenue=settlement,
        monthly_revenue=monthly_revenue,
        production_revenue=production_revenue,
        period_days=period_days,
        metrics=metrics,
        overall_score=overall,
        overall_status=score_status(overall),
        total_cost=sum(m.actual_cost for m in metrics[:4]),
        total_surplus=sum(m.surplus for m in metrics),
    )


# ===================================================================
# WEEKLY SCORES
# ===================================================================
def weekly_multiplier_score(revenue: float, cost: float, target: float) -> int:
    """Revenue ÷ cost against target, 0 for a week without revenue."""
    if revenue == 0:
        return 0
    if cost == 0:
        return NO_COST_SCORE
    if target <= 0:
        return 0
    return int(round_half_up(revenue / cost / target * 100))


def compute_weekly_cost_scores(
    daily_sales: Sequence[DailySalesRecord],
    purchases: Sequence[PurchaseRecord],
    config: BusinessConfig,
    utilities: Sequence[UtilityRecord] = (),
    labor: Sequence[LaborRecord] = ()
) -> List[WeeklyCostScore]:
    """
    Score each Monday-to-Sunday week against one revenue bracket.

    The bracket is chosen once from the whole period's monthly revenue
    (settlement × 30 / number of sales days) and applied to every week.
    Weeks are the union of weeks seen in any input.

    Args:
        daily_sales: Settlement revenue per day
        purchases: Split into raw and sub material by is_sub_material
        config: profit_center_goals, labor_cost_ratio
        utilities: Overhead (electricity + water + gas)
        labor: Actual pay; when empty, weekly labor is estimated as
            (raw + sub) × labor_cost_ratio

    Returns:
        WeeklyCostScore per week, oldest first; empty without goals
    """
    goals = config.profit_center_goals
    if not goals:
        return []

    total_revenue = sum(d.total_revenue for d in daily_sales)
    monthly_revenue = round_half_up(total_revenue * 30 / max(1, len(daily_sales)))
    targets = find_active_bracket(goals, monthly_revenue).targets

    raw_items = [p for p in purchases if not is_sub_material(p.product_name, p.product_code)]
    sub_items = [p for p in purchases if is_sub_material(p.product_name, p.product_code)]

    revenue = aggregate_by_period(daily_sales, 'total_revenue', 'week')
    raw = aggregate_by_period(raw_items, 'total', 'week')
    sub = aggregate_by_period(sub_items, 'total', 'week')
    overhead = aggregate_by_period(utilities, 'total_cost', 'week')
    pay = aggregate_by_period(labor, 'total_pay', 'week')

    weeks = sorted(set(revenue) | set(raw) | set(sub) | set(overhead) | set(pay))

    scores: List[WeeklyCostScore] = []
    for week in weeks:
        rev = revenue.get(week, 0.0)
        raw_cost = raw.get(week, 0.0)
        sub_cost = sub.get(week, 0.0)
        overhead_cost = overhead.get(week, 0.0)
        if labor:
            labor_cost = pay.get(week, 0.0)
        else:
            labor_cost = round_half_up((raw_cost + sub_cost) * config.labor_cost_ratio)

        raw_score = weekly_multiplier_score(rev, raw_cost, targets.revenue_to_raw_material)
        sub_score = weekly_multiplier_score(rev, sub_cost, targets.revenue_to_sub_material)
        labor_score = weekly_multiplier_score(rev, labor_cost, targets.production_to_labor)
        overhead_score = weekly_multiplier_score(rev, overhead_cost, targets.revenue_to_expense)
        overall = int(round_half_up((raw_score + sub_score + labor_score + overhead_score) / 4))

        scores.append(WeeklyCostScore(
            week_start=week,
            week_label=week_label(week),
            revenue=rev,
            raw_material_cost=raw_cost,
            sub_material_cost=sub_cost,
            labor_cost=labor_cost,
            overhead_cost=overhead_cost,
            raw_score=raw_score,
            sub_score=sub_score,
            labor_score=labor_score,
            overhead_score=overhead_score,
            overall_score=overall,
            overall_status=score_status(overall),
        ))

    logger.info(f"Weekly cost scores: {len(scores)} weeks, monthly revenue {monthly_revenue:,.0f}")
    return scores
