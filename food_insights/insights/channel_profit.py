# food_insights/insights/channel_profit.py

"""
Channel Profit Cascade

Five-stage margin waterfall per sales channel:

    recommended revenue   list price back-solved from settlement
    settlement revenue    what the channel actually paid out
    profit1               settlement − material cost
    profit2               profit1 − channel variable cost
    profit3               profit2 − pro-rated channel fixed cost

Monetary stages are kept unrounded so that
profit3 = settlement − material − variable − fixed holds exactly.
Only margin rates are rounded (1 decimal).
"""

import logging
from typing import List, Optional, Sequence

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import calendar_days, date_range_of, round_half_up, safe_divide
from food_insights.data.records import ChannelCostSummary, DailySalesRecord, PurchaseRecord
from food_insights.insights.schemas import (
    ChannelDailyRevenue, ChannelProfitItem, ChannelRevenueInsight,
)

logger = logging.getLogger(__name__)

# (display name, revenue field)
CHANNELS = (
    ('자사몰', 'jasa_revenue'),
    ('쿠팡', 'coupang_revenue'),
    ('컬리', 'kurly_revenue'),
)


def _margin(profit: float, revenue: float) -> float:
    return round_half_up(safe_divide(profit, revenue) * 100, 1)


def compute_channel_cascade(
    channel_name: str,
    settlement_revenue: float,
    cost: Optional[ChannelCostSummary],
    period_days: int,
    config: BusinessConfig,
    share: float = 0.0
) -> ChannelProfitItem:
    """
    Run the five-stage waterfall for one channel.

    Args:
        channel_name: Display name
        settlement_revenue: Revenue settled by the channel in the period
        cost: Channel cost structure (None = no channel costs)
        period_days: Length of the sales period, for fixed-cost pro-rating
        config: vat_rate, material_cost_ratio, average_order_value
        share: Channel share of total revenue (%)

    Returns:
        ChannelProfitItem
    """
    discount_rate = cost.discount_rate if cost else 0.0
    commission_rate = cost.commission_rate if cost else 0.0
    variable_rate_pct = cost.total_variable_rate_pct if cost else 0.0
    variable_per_order = cost.total_variable_per_order if cost else 0.0
    fixed_monthly = cost.total_fixed_monthly if cost else 0.0

    # Stage 1-2: back-solve the list price from the net settlement
    net_ratio = 1 - discount_rate - commission_rate
    if net_ratio > 0:
        recommended = settlement_revenue / net_ratio
    else:
        recommended = settlement_revenue
    discount_amount = recommended * discount_rate
    commission_amount = recommended * commission_rate

    # Stage 3: material cost on a VAT-exclusive production basis
    material_cost = recommended / (1 + config.vat_rate) * config.material_cost_ratio
    profit1 = settlement_revenue - material_cost

    # Stage 4: channel variable cost
    estimated_orders = safe_divide(settlement_revenue, config.average_order_value)
    variable_cost = (
        settlement_revenue * variable_rate_pct / 100
        + estimated_orders * variable_per_order
    )
    profit2 = profit1 - variable_cost

    # Stage 5: fixed cost pro-rated to the period
    fixed_cost = fixed_monthly * period_days / 30
    profit3 = profit2 - fixed_cost

    return ChannelProfitItem(
        channel_name=channel_name,
        settlement_revenue=settlement_revenue,
        share=share,
        recommended_revenue=recommended,
        discount_amount=discount_amount,
        commission_amount=commission_amount,
        material_cost=material_cost,
        profit1=profit1,
        estimated_orders=estimated_orders,
        channel_variable_cost=variable_cost,
        profit2=profit2,
        channel_fixed_cost=fixed_cost,
        profit3=profit3,
        margin_rate1=_margin(profit1, settlement_revenue),
        margin_rate2=_margin(profit2, settlement_revenue),
        margin_rate3=_margin(profit3, settlement_revenue),
    )


def compute_channel_revenue(
    daily_sales: Sequence[DailySalesRecord],
    purchases: Sequence[PurchaseRecord],
    channel_costs: Sequence[ChannelCostSummary],
    config: BusinessConfig
) -> ChannelRevenueInsight:
    """
    Per-channel revenue, share and profit cascade over the sales period.

    Args:
        daily_sales: Daily channel revenue
        purchases: Purchases; the in-period total is reported for reference
        channel_costs: Cost structures, matched by channel name
        config: Business configuration

    Returns:
        ChannelRevenueInsight (empty when there are no sales)
    """
    if not daily_sales:
        return ChannelRevenueInsight()

    ordered = sorted(daily_sales, key=lambda d: d.date)
    start, end = date_range_of(ordered)
    period_days = calendar_days(start, end)
    costs = {c.channel_name: c for c in channel_costs}

    revenue_by_channel = {
        name: sum(getattr(d, attr) for d in ordered) for name, attr in CHANNELS
    }
    total_revenue = sum(revenue_by_channel.values())

    channels: List[ChannelProfitItem] = []
    for name, _ in CHANNELS:
        revenue = revenue_by_channel[name]
        channels.append(compute_channel_cascade(
            channel_name=name,
            settlement_revenue=revenue,
            cost=costs.get(name),
            period_days=period_days,
            config=config,
            share=round_half_up(safe_divide(revenue, total_revenue) * 100, 1),
        ))

    daily_trend = [
        ChannelDailyRevenue(
            date=d.date,
            jasa=d.jasa_revenue,
            coupang=d.coupang_revenue,
            kurly=d.kurly_revenue,
            total=d.total_revenue,
        )
        for d in ordered
    ]

    purchase_cost = sum(
        p.total for p in purchases if start <= p.date[:10] <= end
    )

    totals = {
        field: sum(getattr(c, field) for c in channels)
        for field in (
            'recommended_revenue', 'discount_amount', 'commission_amount',
            'material_cost', 'channel_variable_cost', 'channel_fixed_cost',
            'profit1', 'profit2', 'profit3',
        )
    }

    logger.info(
        f"Channel profit: revenue {total_revenue:,.0f} over {period_days} days, "
        f"profit3 {totals['profit3']:,.0f}"
    )

    return ChannelRevenueInsight(
        channels=channels,
        daily_trend=daily_trend,
        period_days=period_days,
        total_revenue=total_revenue,
        total_recommended_revenue=totals['recommended_revenue'],
        total_discount=totals['discount_amount'],
        total_commission=totals['commission_amount'],
        total_material_cost=totals['material_cost'],
        total_channel_variable_cost=totals['channel_variable_cost'],
        total_channel_fixed_cost=totals['channel_fixed_cost'],
        total_profit1=totals['profit1'],
        total_profit2=totals['profit2'],
        total_profit3=totals['profit3'],
        total_margin_rate1=_margin(totals['profit1'], total_revenue),
        total_margin_rate2=_margin(totals['profit2'], total_revenue),
        total_margin_rate3=_margin(totals['profit3'], total_revenue),
        total_purchase_cost=purchase_cost,
    )
