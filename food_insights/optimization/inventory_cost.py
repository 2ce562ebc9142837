# food_insights/optimization/inventory_cost.py

"""
Inventory Cost Optimizer

Annual cost of the current purchasing pattern per product:
- Holding cost:  (order qty / 2 + safety stock) × price × holding rate
- Ordering cost: order frequency × cost per order
- Stockout cost: status risk weight × daily demand × price × lead time × multiplier
- Waste cost:    total waste cost allocated by purchase spend share

and the signed saving of ordering the EOQ instead (negative when the
current pattern is already cheaper). The total saving only counts products
where switching helps.
"""

import logging
from typing import Dict, List, Optional, Sequence

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import calendar_days, round_half_up, safe_divide
from food_insights.data.records import ProductionRecord, PurchaseRecord
from food_insights.insights.schemas import (
    ABCXYZInsight, InventoryCostInsight, InventoryCostItem, StatisticalOrderInsight,
)
from food_insights.optimization.reorder_point import ReorderPointCalculator

logger = logging.getLogger(__name__)

# Probability-like weight of running out, by statistical order status
STOCKOUT_RISK_WEIGHTS = {
    'shortage': 1.0,
    'urgent': 0.5,
    'normal': 0.1,
    'overstock': 0.0,
}


class InventoryCostOptimizer:
    """Compares the current order pattern with EOQ ordering, per product."""

    def __init__(self, config: BusinessConfig):
        self.config = config
        self.rop_calc = ReorderPointCalculator(
            lead_time_days=config.default_lead_time,
            ordering_cost=config.order_cost,
            holding_cost_rate=config.holding_cost_rate
        )

    def _purchase_profile(self, purchases: Sequence[PurchaseRecord]) -> Dict[str, Dict]:
        profile: Dict[str, Dict] = {}
        for p in purchases:
            if not p.product_code or p.quantity <= 0:
                continue
            entry = profile.setdefault(p.product_code, {'qty': 0.0, 'total': 0.0, 'dates': set()})
            entry['qty'] += p.quantity
            entry['total'] += p.total
            entry['dates'].add(p.date[:10])
        return profile

    def optimize(
        self,
        statistical_order: StatisticalOrderInsight,
        purchases: Sequence[PurchaseRecord],
        production: Sequence[ProductionRecord] = (),
        abc_xyz: Optional[ABCXYZInsight] = None
    ) -> InventoryCostInsight:
        """
        Args:
            statistical_order: Per-product demand, safety stock, EOQ and status
            purchases: Purchase history (prices, order events, spend shares)
            production: Production history; finished-goods waste is costed
                at waste_unit_cost and spread over products
            abc_xyz: Optional classification to annotate items

        Returns:
            InventoryCostInsight sorted by total cost
        """
        profile = self._purchase_profile(purchases)
        total_spend = sum(p['total'] for p in profile.values())
        total_waste_cost = sum(p.waste_finished_qty for p in production) * self.config.waste_unit_cost
        abc_classes = {i.product_code: i.abc_class for i in abc_xyz.items} if abc_xyz else {}
        lead_time = self.config.default_lead_time

        items: List[InventoryCostItem] = []
        for order_item in statistical_order.items:
            data = profile.get(order_item.product_code)
            if data is None:
                continue

            unit_price = safe_divide(data['total'], data['qty'], order_item.unit_price)

            # same first-to-last span as the zero-filled demand series, unrounded
            dates = sorted(data['dates'])
            observed_days = calendar_days(dates[0], dates[-1])
            daily_demand = data['qty'] / observed_days
            annual_demand = daily_demand * 365
            order_frequency = len(dates) * 365 / observed_days
            current_order_qty = safe_divide(annual_demand, order_frequency)

            current = self.rop_calc.calculate_total_costs(
                annual_demand, current_order_qty, unit_price, order_item.safety_stock
            )

            stockout_cost = (
                STOCKOUT_RISK_WEIGHTS[order_item.status]
                * daily_demand * unit_price * lead_time
                * self.config.stockout_cost_multiplier
            )
            waste_cost = total_waste_cost * safe_divide(data['total'], total_spend)

            total_cost = current['holding_cost'] + current['ordering_cost'] + stockout_cost + waste_cost

            if order_item.eoq > 0:
                at_eoq = self.rop_calc.calculate_total_costs(
                    annual_demand, order_item.eoq, unit_price, order_item.safety_stock
                )
                eoq_total = at_eoq['total_cost'] + stockout_cost + waste_cost
                eoq_saving = total_cost - eoq_total
            else:
                eoq_total = total_cost
                eoq_saving = 0.0

            items.append(InventoryCostItem(
                product_code=order_item.product_code,
                product_name=order_item.product_name,
                abc_class=abc_classes.get(order_item.product_code),
                status=order_item.status,
                unit_price=round_half_up(unit_price, 2),
                annual_demand=round_half_up(annual_demand, 1),
                order_frequency=round_half_up(order_frequency, 1),
                current_order_qty=round_half_up(current_order_qty, 1),
                eoq=order_item.eoq,
                holding_cost=round_half_up(current['holding_cost']),
                ordering_cost=round_half_up(current['ordering_cost']),
                estimated_stockout_cost=round_half_up(stockout_cost),
                waste_cost=round_half_up(waste_cost),
                total_cost=round_half_up(total_cost),
                eoq_total_cost=round_half_up(eoq_total),
                eoq_saving=round_half_up(eoq_saving),
            ))

        items.sort(key=lambda i: i.total_cost, reverse=True)

        insight = InventoryCostInsight(
            items=items,
            total_holding_cost=sum(i.holding_cost for i in items),
            total_ordering_cost=sum(i.ordering_cost for i in items),
            total_stockout_cost=sum(i.estimated_stockout_cost for i in items),
            total_waste_cost=sum(i.waste_cost for i in items),
            grand_total=sum(i.total_cost for i in items),
            total_eoq_saving=sum(i.eoq_saving for i in items if i.eoq_saving > 0),
        )
        logger.info(
            f"Inventory cost: {len(items)} products, total {insight.grand_total:,.0f}, "
            f"EOQ saving {insight.total_eoq_saving:,.0f}"
        )
        return insight


def compute_inventory_cost(
    statistical_order: StatisticalOrderInsight,
    purchases: Sequence[PurchaseRecord],
    config: BusinessConfig,
    production: Sequence[ProductionRecord] = (),
    abc_xyz: Optional[ABCXYZInsight] = None
) -> InventoryCostInsight:
    return InventoryCostOptimizer(config).optimize(
        statistical_order, purchases, production, abc_xyz
    )
