# food_insights/insights/recommendations.py

"""
Cost-saving recommendations derived from the other insights.
"""

import logging
from typing import List, Optional

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import round_half_up, safe_divide
from food_insights.insights.schemas import (
    CostRecommendation, InventoryCostInsight, MaterialPriceInsight,
    ProductProfitInsight, UtilityCostInsight, WasteAnalysisInsight,
)

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {'high': 0, 'medium': 1, 'low': 2}

# Share of the observed increase assumed recoverable by renegotiation
PRICE_RECOVERY_RATE = 0.1
MAX_MARGIN_RECOMMENDATIONS = 3
MAX_INVENTORY_RECOMMENDATIONS = 3


def generate_recommendations(
    config: BusinessConfig,
    material_prices: Optional[MaterialPriceInsight] = None,
    waste_analysis: Optional[WasteAnalysisInsight] = None,
    utility_costs: Optional[UtilityCostInsight] = None,
    product_profit: Optional[ProductProfitInsight] = None,
    inventory_cost: Optional[InventoryCostInsight] = None
) -> List[CostRecommendation]:
    """
    Build recommendations from whichever insights are available.

    Rules:
    - material price up by config.price_increase_threshold % or more
    - days above the waste threshold
    - utility cost per unit rising month over month
    - products with positive but low margin (below config.profit_margin_good)
    - products whose EOQ would save ordering/holding cost

    Returns:
        Recommendations, high priority first, then by estimated saving
    """
    recs: List[CostRecommendation] = []

    def add(**fields) -> None:
        recs.append(CostRecommendation(id=f"rec-{len(recs) + 1}", **fields))

    if material_prices:
        threshold = config.price_increase_threshold
        for m in material_prices.items:
            if m.change_rate < threshold:
                continue
            bought_units = safe_divide(m.total_spent, m.avg_price or 1)
            add(
                type='material',
                priority='high' if m.change_rate >= threshold * 2 else 'medium',
                title=f"{m.product_name} 단가 {m.change_rate:.1f}% 상승",
                description=(
                    f"대체 공급처 탐색 또는 대량 선구매를 검토하세요. "
                    f"현재 단가 ₩{m.current_price:,.0f}, 최초 대비 ₩{abs(m.price_change):,.0f} 상승."
                ),
                estimated_saving=round_half_up(abs(m.price_change) * bought_units * PRICE_RECOVERY_RATE),
                evidence=f"기간 내 총 구매액 ₩{m.total_spent:,.0f}, 단가 변동률 {m.change_rate:.1f}%",
            )

    if waste_analysis and waste_analysis.high_waste_days:
        worst = waste_analysis.high_waste_days[0]
        days = len(waste_analysis.high_waste_days)
        cost = sum(d.qty for d in waste_analysis.high_waste_days) * config.waste_unit_cost
        add(
            type='waste',
            priority='high' if days >= 5 else 'medium',
            title=f"폐기율 {config.waste_threshold_pct:g}% 초과일 {days}일 발생",
            description=f"해당일 공정 점검이 필요합니다. 최고 폐기율 {worst.rate:.1f}% ({worst.date}).",
            estimated_saving=cost,
            evidence=f"추정 폐기 비용 총 ₩{cost:,.0f} (개당 ₩{config.waste_unit_cost:,.0f} 기준)",
        )

    if utility_costs and len(utility_costs.monthly) >= 2:
        last, prev = utility_costs.monthly[-1], utility_costs.monthly[-2]
        if prev.per_unit > 0 and last.per_unit > prev.per_unit:
            increase = round_half_up((last.per_unit - prev.per_unit) / prev.per_unit * 100)
            add(
                type='utility',
                priority='high' if increase >= 20 else 'low',
                title=f"단위당 에너지 비용 {increase:.0f}% 증가",
                description=(
                    f"에너지 효율 개선을 검토하세요. "
                    f"단위당 비용 ₩{prev.per_unit:,.0f} → ₩{last.per_unit:,.0f}."
                ),
                estimated_saving=round_half_up((last.per_unit - prev.per_unit) * last.production_qty),
                evidence=f"{prev.month} 대비 {last.month} 단위당 비용 상승",
            )

    if product_profit:
        low_margin = [
            p for p in product_profit.items
            if p.revenue > 0 and p.margin > 0 and p.margin_rate < config.profit_margin_good
        ]
        for p in low_margin[:MAX_MARGIN_RECOMMENDATIONS]:
            add(
                type='margin',
                priority='high' if p.margin_rate < config.profit_margin_good / 2 else 'medium',
                title=f"{p.product_name} 마진율 {p.margin_rate:.1f}%로 낮음",
                description="매출 대비 마진이 낮습니다. 가격 재협상 또는 원가 절감을 검토하세요.",
                estimated_saving=round_half_up(p.revenue * config.overhead_ratio),
                evidence=f"매출 ₩{p.revenue:,.0f}, 비용 ₩{p.cost:,.0f}, 마진 ₩{p.margin:,.0f}",
            )

    if inventory_cost:
        savers = sorted(
            (i for i in inventory_cost.items if i.eoq_saving > 0),
            key=lambda i: i.eoq_saving,
            reverse=True,
        )
        for item in savers[:MAX_INVENTORY_RECOMMENDATIONS]:
            add(
                type='inventory',
                priority='medium' if item.abc_class == 'A' else 'low',
                title=f"{item.product_name} 경제적 발주량 {item.eoq:,}개 적용",
                description=(
                    f"현재 평균 발주량 {item.current_order_qty:,.1f}개 대신 "
                    f"EOQ로 발주하면 보관·발주 비용을 줄일 수 있습니다."
                ),
                estimated_saving=item.eoq_saving,
                evidence=f"연간 총비용 ₩{item.total_cost:,.0f} → ₩{item.eoq_total_cost:,.0f}",
            )

    recs.sort(key=lambda r: (PRIORITY_ORDER[r.priority], -r.estimated_saving))
    logger.info(f"Generated {len(recs)} recommendations")
    return recs
