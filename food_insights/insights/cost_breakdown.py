# food_insights/insights/cost_breakdown.py

"""
Four-factor cost breakdown: raw material, sub material (packaging),
labor and overhead (electricity + water + gas).
"""

import logging
from typing import Dict, List, Optional, Sequence

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import (
    aggregate_by_key, aggregate_by_period, round_half_up, safe_divide,
)
from food_insights.data.records import (
    InventoryAdjustment, LaborRecord, PurchaseRecord, UtilityRecord,
)
from food_insights.insights.schemas import (
    CostBreakdownInsight, CostComponent, MaterialDetail, MaterialDetailItem, MonthlyCost,
)

logger = logging.getLogger(__name__)

SUB_MATERIAL_PREFIX = 'ZIP_S_'
RAW_MATERIAL_PREFIXES = ('ZIP_M_', 'ZIP_H_')
SUB_MATERIAL_KEYWORDS = (
    '포장', '박스', '비닐', '라벨', '테이프', '봉투', '스티커', '밴드', '용기', '캡', '뚜껑',
)

COMPONENT_NAMES = {
    'raw_material': '원재료',
    'sub_material': '부재료',
    'labor': '노무비',
    'overhead': '수도광열전력',
}


def is_sub_material(product_name: str, product_code: str = '') -> bool:
    """Packaging and consumables: code prefix first, name keywords as fallback."""
    if product_code:
        if product_code.startswith(SUB_MATERIAL_PREFIX):
            return True
        if product_code.startswith(RAW_MATERIAL_PREFIXES):
            return False
    return any(keyword in (product_name or '') for keyword in SUB_MATERIAL_KEYWORDS)


def composition_rates(values: Dict[str, float]) -> Dict[str, float]:
    """
    Percent share of each value, 1 decimal, summing to exactly 100.0.

    The rounding residual goes to the largest component.
    """
    total = sum(values.values())
    if total <= 0:
        return {k: 0.0 for k in values}

    rates = {k: round_half_up(v / total * 100, 1) for k, v in values.items()}
    residual = round(100.0 - sum(rates.values()), 1)
    if residual:
        largest = max(values, key=values.get)
        rates[largest] = round(rates[largest] + residual, 1)
    return rates


def _material_detail(purchases: Sequence[PurchaseRecord]) -> MaterialDetail:
    detail = aggregate_by_key(
        purchases, 'product_code', drop_empty_keys=False,
        name=('product_name', 'first'),
        total=('total', 'sum'),
        qty=('quantity', 'sum'),
    )

    items = [
        MaterialDetailItem(
            product_code=code,
            product_name=data['name'],
            total_spent=data['total'],
            quantity=data['qty'],
            avg_unit_price=round_half_up(safe_divide(data['total'], data['qty'])),
        )
        for code, data in detail.items()
    ]
    items.sort(key=lambda i: i.total_spent, reverse=True)
    return MaterialDetail(items=items, total=sum(i.total_spent for i in items))


def _monthly_costs(
    raw_items: Sequence[PurchaseRecord],
    sub_items: Sequence[PurchaseRecord],
    utilities: Sequence[UtilityRecord],
    labor: Sequence[LaborRecord],
    config: BusinessConfig
) -> List[MonthlyCost]:
    raw = aggregate_by_period(raw_items, 'total', 'month')
    sub = aggregate_by_period(sub_items, 'total', 'month')
    overhead = aggregate_by_period(utilities, 'total_cost', 'month')
    pay = aggregate_by_period(labor, 'total_pay', 'month')

    monthly = []
    for month in sorted(set(raw) | set(sub) | set(overhead) | set(pay)):
        raw_cost = raw.get(month, 0.0)
        sub_cost = sub.get(month, 0.0)
        overhead_cost = overhead.get(month, 0.0)
        if labor:
            labor_cost = pay.get(month, 0.0)
        else:
            labor_cost = round_half_up((raw_cost + sub_cost) * config.labor_cost_ratio)
        monthly.append(MonthlyCost(
            month=month,
            raw_material=raw_cost,
            sub_material=sub_cost,
            labor=labor_cost,
            overhead=overhead_cost,
            total=raw_cost + sub_cost + labor_cost + overhead_cost,
        ))
    return monthly


def compute_cost_breakdown(
    purchases: Sequence[PurchaseRecord],
    utilities: Sequence[UtilityRecord],
    config: BusinessConfig,
    labor: Sequence[LaborRecord] = (),
    inventory_adjustment: Optional[InventoryAdjustment] = None
) -> CostBreakdownInsight:
    """
    Split period cost into raw material, sub material, labor and overhead.

    Args:
        purchases: Purchases, classified by is_sub_material
        utilities: Electricity / water / gas bills (overhead)
        config: labor_cost_ratio for the labor estimate
        labor: Actual labor records; when empty, labor is estimated as
            (raw + sub) × labor_cost_ratio
        inventory_adjustment: Beginning/ending inventory; turns purchases
            into consumption (beginning + purchases − ending)

    Returns:
        CostBreakdownInsight
    """
    raw_items = [p for p in purchases if not is_sub_material(p.product_name, p.product_code)]
    sub_items = [p for p in purchases if is_sub_material(p.product_name, p.product_code)]

    raw_cost = sum(p.total for p in raw_items)
    sub_cost = sum(p.total for p in sub_items)

    if inventory_adjustment is not None:
        raw_cost = max(
            0.0,
            inventory_adjustment.beginning_raw_material + raw_cost
            - inventory_adjustment.ending_raw_material
        )
        sub_cost = max(
            0.0,
            inventory_adjustment.beginning_sub_material + sub_cost
            - inventory_adjustment.ending_sub_material
        )

    if labor:
        labor_cost = sum(r.total_pay for r in labor)
        labor_source = 'actual'
    else:
        labor_cost = round_half_up((raw_cost + sub_cost) * config.labor_cost_ratio)
        labor_source = 'estimated'

    overhead_cost = sum(u.total_cost for u in utilities)

    values = {
        'raw_material': raw_cost,
        'sub_material': sub_cost,
        'labor': labor_cost,
        'overhead': overhead_cost,
    }
    rates = composition_rates(values)
    composition = [
        CostComponent(key=key, name=COMPONENT_NAMES[key], value=value, rate=rates[key])
        for key, value in values.items()
    ]
    total_cost = sum(values.values())

    logger.info(
        f"Cost breakdown: total {total_cost:,.0f} "
        f"(raw {rates['raw_material']}%, sub {rates['sub_material']}%, "
        f"labor {rates['labor']}% [{labor_source}], overhead {rates['overhead']}%)"
    )

    return CostBreakdownInsight(
        raw_material_cost=raw_cost,
        sub_material_cost=sub_cost,
        labor_cost=labor_cost,
        overhead_cost=overhead_cost,
        total_cost=total_cost,
        composition=composition,
        monthly=_monthly_costs(raw_items, sub_items, utilities, labor, config),
        raw_material_detail=_material_detail(raw_items),
        sub_material_detail=_material_detail(sub_items),
        labor_source=labor_source,
        inventory_adjusted=inventory_adjustment is not None,
    )
