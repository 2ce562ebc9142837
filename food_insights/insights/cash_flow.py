# food_insights/insights/cash_flow.py

"""
Cash flow and cash conversion cycle.

CCC = inventory days + collection days − supplier payment days

Collection days differ per channel (own mall settles within days, the
marketplaces after one to two months), so the average collection period is
weighted by channel revenue.
"""

import logging
from typing import Dict, List, Sequence

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import (
    aggregate_by_period, calendar_days, round_half_up, safe_divide,
)
from food_insights.data.records import (
    DailySalesRecord, InventorySnapshot, LaborRecord, PurchaseRecord, UtilityRecord,
)
from food_insights.insights.channel_profit import CHANNELS
from food_insights.insights.schemas import CashFlowInsight, ChannelCycle, MonthlyCashFlow

logger = logging.getLogger(__name__)


def collection_days_by_channel(config: BusinessConfig) -> Dict[str, float]:
    return {
        '자사몰': config.channel_collection_days_jasa,
        '쿠팡': config.channel_collection_days_coupang,
        '컬리': config.channel_collection_days_kurly,
    }


def compute_cash_flow(
    daily_sales: Sequence[DailySalesRecord],
    purchases: Sequence[PurchaseRecord],
    config: BusinessConfig,
    utilities: Sequence[UtilityRecord] = (),
    labor: Sequence[LaborRecord] = (),
    inventory_snapshots: Sequence[InventorySnapshot] = ()
) -> CashFlowInsight:
    """
    Monthly cash in/out and the cash conversion cycle.

    Args:
        daily_sales: Settlement revenue (cash inflow)
        purchases: Material purchases (cash outflow)
        config: Channel collection days and supplier payment days
        utilities: Utility bills (cash outflow)
        labor: Labor pay (cash outflow)
        inventory_snapshots: On-hand balances valued at unit price

    Returns:
        CashFlowInsight
    """
    inflows = aggregate_by_period(daily_sales, 'total_revenue', 'month')
    outflows: Dict[str, float] = {}
    for records, field in ((purchases, 'total'), (utilities, 'total_cost'), (labor, 'total_pay')):
        for month, amount in aggregate_by_period(records, field, 'month').items():
            outflows[month] = outflows.get(month, 0.0) + amount

    monthly: List[MonthlyCashFlow] = []
    cumulative = 0.0
    for month in sorted(set(inflows) | set(outflows)):
        inflow = inflows.get(month, 0.0)
        outflow = outflows.get(month, 0.0)
        cumulative += inflow - outflow
        monthly.append(MonthlyCashFlow(
            month=month,
            cash_inflow=inflow,
            cash_outflow=outflow,
            net_cash_flow=inflow - outflow,
            cumulative_cash=cumulative,
        ))

    dates = [d.date[:10] for d in daily_sales] + [p.date[:10] for p in purchases]
    period_days = calendar_days(min(dates), max(dates)) if dates else 1

    # Revenue-weighted collection period
    collection_days = collection_days_by_channel(config)
    channel_cycles: List[ChannelCycle] = []
    total_revenue = 0.0
    weighted_days = 0.0
    for name, attr in CHANNELS:
        revenue = sum(getattr(d, attr) for d in daily_sales)
        days = collection_days[name]
        total_revenue += revenue
        weighted_days += revenue * days
        channel_cycles.append(ChannelCycle(
            channel_name=name,
            collection_days=days,
            revenue=revenue,
            monthly_collected=round_half_up(revenue * 30 / period_days),
        ))
    avg_collection_period = round_half_up(safe_divide(weighted_days, total_revenue), 1)

    inventory_value = sum(s.balance_qty * s.unit_price for s in inventory_snapshots)
    annual_material_cost = sum(p.total for p in purchases) * 365 / period_days
    inventory_turnover = safe_divide(annual_material_cost, inventory_value)
    inventory_turnover_days = safe_divide(365, inventory_turnover)

    ccc = inventory_turnover_days + avg_collection_period - config.supplier_payment_days

    logger.info(
        f"Cash flow: {len(monthly)} months, net {cumulative:,.0f}, CCC {ccc:.1f} days"
    )

    return CashFlowInsight(
        monthly=monthly,
        channel_cycles=channel_cycles,
        avg_collection_period=avg_collection_period,
        inventory_value=inventory_value,
        inventory_turnover=round_half_up(inventory_turnover, 2),
        inventory_turnover_days=round_half_up(inventory_turnover_days, 1),
        supplier_payment_days=config.supplier_payment_days,
        cash_conversion_cycle=round_half_up(ccc, 1),
        net_cash_position=cumulative,
    )
