# food_insights/insights/service.py

"""
Insight orchestration.

compute_all_insights runs every analysis whose inputs are present and
assembles one DashboardInsights object. An analysis with missing inputs is
skipped and its field left as None; callers check each field independently.

Admin-maintained data (channel costs, labor records) is read through the
repository interfaces handed in by the caller.
"""

import logging
from typing import Optional

from food_insights.config.business_config import BusinessConfig
from food_insights.data.records import InsightInputs
from food_insights.data.repositories import ChannelCostRepository, LaborRecordRepository
from food_insights.insights.abc_xyz import compute_abc_xyz
from food_insights.insights.bom_variance import (
    BaselineStrategy, compute_bom_consumption_anomaly, compute_bom_variance,
    compute_consumption_variance, compute_sales_based_consumption,
)
from food_insights.insights.cash_flow import compute_cash_flow
from food_insights.insights.channel_profit import compute_channel_revenue
from food_insights.insights.cost_breakdown import compute_cost_breakdown
from food_insights.insights.freshness import compute_freshness
from food_insights.insights.operations import (
    compute_material_prices, compute_product_profit, compute_production_efficiency,
    compute_revenue_trend, compute_utility_costs, compute_waste_analysis,
)
from food_insights.insights.profit_center import (
    compute_profit_center_score, compute_weekly_cost_scores,
)
from food_insights.insights.recommendations import generate_recommendations
from food_insights.insights.schemas import DashboardInsights
from food_insights.optimization.inventory_cost import compute_inventory_cost
from food_insights.optimization.statistical_order import compute_statistical_order

logger = logging.getLogger(__name__)


def compute_all_insights(
    inputs: InsightInputs,
    config: BusinessConfig,
    channel_costs: Optional[ChannelCostRepository] = None,
    labor: Optional[LaborRecordRepository] = None,
    service_level: Optional[float] = None,
    baseline_strategy: Optional[BaselineStrategy] = None
) -> DashboardInsights:
    """
    Run every applicable analysis.

    Args:
        inputs: Record collections (any of them may be empty)
        config: Business configuration, required
        channel_costs: Channel cost structures for the profit cascade
        labor: Labor records for the cost breakdown and cash flow
        service_level: Override of config.default_service_level (%)
        baseline_strategy: Standard-period strategy for the BOM analyses

    Returns:
        DashboardInsights with None for every skipped analysis
    """
    sales = inputs.daily_sales
    purchases = inputs.purchases
    production = inputs.production
    utilities = inputs.utilities
    inventory = inputs.inventory

    cost_summaries = channel_costs.list_channel_costs() if channel_costs else []
    labor_records = labor.list_labor_records() if labor else []

    channel_revenue = (
        compute_channel_revenue(sales, purchases, cost_summaries, config) if sales else None
    )
    revenue_trend = compute_revenue_trend(sales, config) if sales else None
    product_profit = (
        compute_product_profit(inputs.sales_detail, purchases) if inputs.sales_detail else None
    )
    material_prices = compute_material_prices(purchases) if purchases else None
    utility_costs = compute_utility_costs(utilities, production) if utilities else None
    waste_analysis = compute_waste_analysis(production, config) if production else None
    production_efficiency = compute_production_efficiency(production) if production else None

    cost_breakdown = None
    if purchases:
        cost_breakdown = compute_cost_breakdown(
            purchases, utilities, config,
            labor=labor_records,
            inventory_adjustment=inputs.inventory_adjustment,
        )

    abc_xyz = compute_abc_xyz(purchases, config) if purchases else None
    freshness = compute_freshness(purchases, inventory, config) if purchases else None

    statistical_order = None
    if inventory and purchases:
        statistical_order = compute_statistical_order(inventory, purchases, config, service_level)

    bom_variance = None
    if purchases and production:
        bom_variance = compute_bom_variance(
            purchases, production, config,
            inventory_snapshots=inputs.inventory_snapshots,
            bom=inputs.bom,
            material_master=inputs.material_master,
            strategy=baseline_strategy,
        )

    bom_anomaly = None
    if purchases and production and inputs.bom:
        bom_anomaly = compute_bom_consumption_anomaly(
            purchases, production, inputs.bom, config,
            material_master=inputs.material_master,
            inventory_snapshots=inputs.inventory_snapshots,
            strategy=baseline_strategy,
        )

    inventory_cost = None
    if statistical_order is not None:
        inventory_cost = compute_inventory_cost(
            statistical_order, purchases, config, production, abc_xyz
        )

    cash_flow = None
    if sales and purchases:
        cash_flow = compute_cash_flow(
            sales, purchases, config,
            utilities=utilities,
            labor=labor_records,
            inventory_snapshots=inputs.inventory_snapshots,
        )

    profit_center = None
    if channel_revenue is not None and cost_breakdown is not None and config.profit_center_goals:
        profit_center = compute_profit_center_score(
            channel_revenue, cost_breakdown, config, production
        )

    weekly_cost_scores = None
    if sales and purchases and config.profit_center_goals:
        weekly_cost_scores = compute_weekly_cost_scores(
            sales, purchases, config, utilities=utilities, labor=labor_records
        )

    consumption_variance = None
    if inputs.sales_detail and inputs.bom and purchases:
        expected = compute_sales_based_consumption(
            inputs.sales_detail, inputs.bom, inputs.material_master
        )
        consumption_variance = compute_consumption_variance(
            expected, purchases, inputs.material_master
        )

    recommendations = generate_recommendations(
        config,
        material_prices=material_prices,
        waste_analysis=waste_analysis,
        utility_costs=utility_costs,
        product_profit=product_profit,
        inventory_cost=inventory_cost,
    )

    insights = DashboardInsights(
        channel_revenue=channel_revenue,
        product_profit=product_profit,
        revenue_trend=revenue_trend,
        material_prices=material_prices,
        utility_costs=utility_costs,
        waste_analysis=waste_analysis,
        production_efficiency=production_efficiency,
        cost_breakdown=cost_breakdown,
        statistical_order=statistical_order,
        abc_xyz=abc_xyz,
        freshness=freshness,
        bom_variance=bom_variance,
        bom_consumption_anomaly=bom_anomaly,
        inventory_cost=inventory_cost,
        cash_flow=cash_flow,
        profit_center_score=profit_center,
        weekly_cost_scores=weekly_cost_scores,
        consumption_variance=consumption_variance,
        recommendations=recommendations,
    )

    computed = [
        name for name, value in insights
        if name != 'recommendations' and value is not None
    ]
    logger.info(f"Computed {len(computed)} insights: {', '.join(computed)}")
    return insights
