# food_insights/insights/operations.py

"""
Operational analyses: waste, production volume, material prices,
utility costs, revenue trend and product profit.
"""

import logging
from typing import Dict, List, Sequence

import pandas as pd

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import records_to_frame, round_half_up, safe_divide
from food_insights.data.records import (
    DailySalesRecord, ProductionRecord, PurchaseRecord, SalesDetailRecord, UtilityRecord,
)
from food_insights.insights.schemas import (
    CategoryStats, DataRange, HighWasteDay, MaterialPriceInsight, MaterialPriceItem,
    PricePoint, ProductProfitInsight, ProductProfitItem, ProductionDay,
    ProductionEfficiencyInsight, RevenueMonth, RevenueTrendInsight, UtilityCostInsight,
    UtilityMonth, WasteAnalysisInsight, WasteDay,
)

logger = logging.getLogger(__name__)

# (output key, record field, label)
PRODUCTION_CATEGORIES = (
    ('normal', 'qty_normal', '일반'),
    ('preprocess', 'qty_preprocess', '전처리'),
    ('frozen', 'qty_frozen', '냉동'),
    ('sauce', 'qty_sauce', '소스'),
    ('bibimbap', 'qty_bibimbap', '비빔밥'),
)


# ===================================================================
# WASTE
# ===================================================================
def compute_waste_analysis(
    production: Sequence[ProductionRecord],
    config: BusinessConfig
) -> WasteAnalysisInsight:
    """
    Daily waste, average waste rate over producing days, and days above
    config.waste_threshold_pct (worst first).
    """
    daily = [
        WasteDay(
            date=p.date,
            waste_finished_pct=p.waste_finished_pct,
            waste_semi_pct=p.waste_semi_pct,
            waste_finished_qty=p.waste_finished_qty,
            production_qty=p.total_qty,
            estimated_cost=p.waste_finished_qty * config.waste_unit_cost,
        )
        for p in sorted(production, key=lambda r: r.date)
    ]

    producing = [d for d in daily if d.production_qty > 0]
    avg_waste_rate = round_half_up(
        safe_divide(sum(d.waste_finished_pct for d in producing), len(producing)), 1
    )

    high_days = sorted(
        (d for d in daily if d.waste_finished_pct > config.waste_threshold_pct),
        key=lambda d: d.waste_finished_pct,
        reverse=True,
    )

    insight = WasteAnalysisInsight(
        daily=daily,
        avg_waste_rate=avg_waste_rate,
        high_waste_days=[
            HighWasteDay(date=d.date, rate=d.waste_finished_pct, qty=d.waste_finished_qty)
            for d in high_days
        ],
        total_waste_qty=sum(d.waste_finished_qty for d in daily),
        total_estimated_cost=sum(d.estimated_cost for d in daily),
    )
    logger.info(
        f"Waste: avg rate {avg_waste_rate}%, "
        f"{len(insight.high_waste_days)} days above {config.waste_threshold_pct}%"
    )
    return insight


# ===================================================================
# PRODUCTION
# ===================================================================
def compute_production_efficiency(
    production: Sequence[ProductionRecord]
) -> ProductionEfficiencyInsight:
    if not production:
        return ProductionEfficiencyInsight()

    df = records_to_frame(production).sort_values('date', kind='mergesort').reset_index(drop=True)

    daily = [
        ProductionDay(
            date=row['date'],
            total=float(row['total_qty']),
            **{key: float(row[field]) for key, field, _ in PRODUCTION_CATEGORIES},
        )
        for _, row in df.iterrows()
    ]

    category_stats = []
    for _, field, label in PRODUCTION_CATEGORIES:
        values = df[field]
        max_value = float(values.max())
        category_stats.append(CategoryStats(
            category=label,
            total=float(values.sum()),
            avg=round_half_up(float(values.mean())),
            max=max(max_value, 0.0),
            max_date=str(df.loc[values.idxmax(), 'date']),
        ))

    max_idx = df['total_qty'].idxmax()
    total_production = float(df['total_qty'].sum())

    return ProductionEfficiencyInsight(
        daily=daily,
        category_stats=category_stats,
        total_production=total_production,
        avg_daily=round_half_up(total_production / len(df)),
        max_day_date=str(df.loc[max_idx, 'date']),
        max_day_qty=float(df.loc[max_idx, 'total_qty']),
        data_range=DataRange(
            start=str(df['date'].min()),
            end=str(df['date'].max()),
            days=int(df['date'].nunique()),
        ),
    )


# ===================================================================
# MATERIAL PRICES
# ===================================================================
def compute_material_prices(purchases: Sequence[PurchaseRecord]) -> MaterialPriceInsight:
    """Price history per material, sorted by absolute change rate."""
    histories: Dict[str, Dict] = {}
    for p in sorted(purchases, key=lambda r: r.date):
        if not p.product_code or p.quantity <= 0:
            continue
        entry = histories.setdefault(p.product_code, {'name': p.product_name, 'entries': []})
        entry['entries'].append(p)

    items: List[MaterialPriceItem] = []
    for code, data in histories.items():
        entries = data['entries']
        total_spent = sum(e.total for e in entries)
        total_qty = sum(e.quantity for e in entries)
        first_price = entries[0].unit_price
        current_price = entries[-1].unit_price
        change = current_price - first_price

        items.append(MaterialPriceItem(
            product_code=code,
            product_name=data['name'],
            first_price=first_price,
            current_price=current_price,
            avg_price=round_half_up(safe_divide(total_spent, total_qty)),
            price_change=change,
            change_rate=round_half_up(safe_divide(change, first_price) * 100, 1),
            total_spent=total_spent,
            total_quantity=total_qty,
            price_history=[PricePoint(date=e.date, price=e.unit_price) for e in entries],
        ))

    items.sort(key=lambda i: abs(i.change_rate), reverse=True)
    return MaterialPriceInsight(
        items=items,
        rising_count=sum(1 for i in items if i.change_rate > 0),
        falling_count=sum(1 for i in items if i.change_rate < 0),
    )


# ===================================================================
# UTILITIES
# ===================================================================
def compute_utility_costs(
    utilities: Sequence[UtilityRecord],
    production: Sequence[ProductionRecord] = ()
) -> UtilityCostInsight:
    """Monthly utility bills and cost per produced unit."""
    if not utilities:
        return UtilityCostInsight()

    util = records_to_frame(utilities)
    util['month'] = util['date'].str[:7]
    monthly_util = util.groupby('month')[['electricity_cost', 'water_cost', 'gas_cost']].sum()

    if production:
        prod = records_to_frame(production)
        prod['month'] = prod['date'].str[:7]
        produced = prod.groupby('month')['total_qty'].sum()
    else:
        produced = pd.Series(dtype=float)

    monthly: List[UtilityMonth] = []
    for month, row in monthly_util.sort_index().iterrows():
        total = float(row['electricity_cost'] + row['water_cost'] + row['gas_cost'])
        qty = float(produced.get(month, 0.0))
        monthly.append(UtilityMonth(
            month=str(month),
            electricity=float(row['electricity_cost']),
            water=float(row['water_cost']),
            gas=float(row['gas_cost']),
            total=total,
            production_qty=qty,
            per_unit=round_half_up(safe_divide(total, qty)),
        ))

    return UtilityCostInsight(monthly=monthly, total_cost=sum(m.total for m in monthly))


# ===================================================================
# REVENUE TREND
# ===================================================================
def compute_revenue_trend(
    daily_sales: Sequence[DailySalesRecord],
    config: BusinessConfig
) -> RevenueTrendInsight:
    """Monthly revenue, profit at default_margin_rate, month-over-month change."""
    if not daily_sales:
        return RevenueTrendInsight()

    df = records_to_frame(daily_sales)
    df['month'] = df['date'].str[:7]
    grouped = df.groupby('month').agg(
        revenue=('total_revenue', 'sum'),
        days=('date', 'count'),
    ).sort_index()

    monthly: List[RevenueMonth] = []
    previous = None
    for month, row in grouped.iterrows():
        revenue = float(row['revenue'])
        if previous:
            change = round_half_up((revenue - previous) / previous * 100, 1)
        else:
            change = 0.0
        monthly.append(RevenueMonth(
            month=str(month),
            revenue=revenue,
            profit=round_half_up(revenue * config.default_margin_rate),
            margin_rate=round_half_up(config.default_margin_rate * 100, 1),
            prev_month_change=change,
            days=int(row['days']),
        ))
        previous = revenue

    total = sum(m.revenue for m in monthly)
    return RevenueTrendInsight(
        monthly=monthly,
        total_revenue=total,
        avg_monthly_revenue=round_half_up(total / len(monthly)),
    )


# ===================================================================
# PRODUCT PROFIT
# ===================================================================
def compute_product_profit(
    sales_detail: Sequence[SalesDetailRecord],
    purchases: Sequence[PurchaseRecord]
) -> ProductProfitInsight:
    """Revenue against purchase cost per product code, highest revenue first."""
    revenue: Dict[str, Dict] = {}
    for s in sales_detail:
        entry = revenue.setdefault(s.product_code, {'name': s.product_name, 'revenue': 0.0, 'qty': 0.0})
        entry['revenue'] += s.total
        entry['qty'] += s.quantity

    cost: Dict[str, float] = {}
    for p in purchases:
        cost[p.product_code] = cost.get(p.product_code, 0.0) + p.total

    items = []
    for code, data in revenue.items():
        product_cost = cost.get(code, 0.0)
        margin = data['revenue'] - product_cost
        items.append(ProductProfitItem(
            product_code=code,
            product_name=data['name'],
            revenue=data['revenue'],
            cost=product_cost,
            margin=margin,
            margin_rate=round_half_up(safe_divide(margin, data['revenue']) * 100, 1),
            quantity=data['qty'],
        ))
    items.sort(key=lambda i: i.revenue, reverse=True)

    total_revenue = sum(i.revenue for i in items)
    total_cost = sum(i.cost for i in items)
    return ProductProfitInsight(
        items=items,
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_margin=total_revenue - total_cost,
    )
