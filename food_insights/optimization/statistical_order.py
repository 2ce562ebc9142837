# food_insights/optimization/statistical_order.py

"""
Statistical Order Engine

Per purchased product:
1. Zero-filled daily demand series over the purchase window
2. Average and standard deviation of daily demand
3. Safety stock under demand + lead-time uncertainty
4. Reorder point, EOQ, days of stock
5. Status (shortage / urgent / normal / overstock) and suggested order qty

Purchases are used as the demand signal: in a make-to-order kitchen,
materials are bought roughly at the rate they are consumed.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import round_half_up, zero_filled_daily_series
from food_insights.data.records import InventorySafetyItem, PurchaseRecord
from food_insights.insights.schemas import StatisticalOrderInsight, StatisticalOrderItem
from food_insights.optimization.reorder_point import ReorderPointCalculator
from food_insights.optimization.safety_stock import SafetyStockCalculator

logger = logging.getLogger(__name__)

STATUS_ORDER = {'shortage': 0, 'urgent': 1, 'normal': 2, 'overstock': 3}

# Days of stock reported when there is no demand
NO_DEMAND_DAYS = 999.0


def classify_order_status(
    current_stock: float,
    safety_stock: float,
    rop: float,
    days_of_stock: float,
    overstock_days: float = 60
) -> str:
    """First matching rule wins: shortage, urgent, overstock, normal."""
    if current_stock <= 0 or current_stock < safety_stock * 0.5:
        return 'shortage'
    if current_stock < rop:
        return 'urgent'
    if days_of_stock > overstock_days:
        return 'overstock'
    return 'normal'


def build_stock_lookup(
    inventory: Sequence[InventorySafetyItem]
) -> Tuple[Dict[str, float], Dict[str, float]]:
    """Current stock indexed by SKU code and by SKU name."""
    by_code: Dict[str, float] = {}
    by_name: Dict[str, float] = {}
    for item in inventory:
        if item.sku_code:
            by_code[item.sku_code] = item.current_stock
        if item.sku_name:
            by_name[item.sku_name] = item.current_stock
    return by_code, by_name


def lookup_current_stock(
    product_code: str,
    product_name: str,
    by_code: Dict[str, float],
    by_name: Dict[str, float]
) -> float:
    """
    Code join first, name join as a fallback.

    Two products sharing a display name would be merged by the name join,
    so every fallback hit is logged.
    """
    if product_code in by_code:
        return by_code[product_code]
    if product_name in by_name:
        logger.debug(
            f"Stock for {product_code} matched by name '{product_name}'"
        )
        return by_name[product_name]
    return 0.0


class StatisticalOrderEngine:
    """
    Computes reorder recommendations for every purchased product.

    Combines SafetyStockCalculator and ReorderPointCalculator with the
    lead time, service level and EOQ costs held in BusinessConfig.
    """

    def __init__(self, config: BusinessConfig):
        self.config = config
        self.safety_stock_calc = SafetyStockCalculator(
            default_service_level=config.default_service_level / 100,
            default_lead_time_days=config.default_lead_time,
            lead_time_std_days=config.lead_time_std_dev
        )
        self.rop_calc = ReorderPointCalculator(
            lead_time_days=config.default_lead_time,
            ordering_cost=config.order_cost,
            holding_cost_rate=config.holding_cost_rate
        )

    def _collect_demand(self, purchases: Sequence[PurchaseRecord]) -> Dict[str, Dict]:
        demand: Dict[str, Dict] = {}
        for p in sorted(purchases, key=lambda r: r.date):
            if not p.product_code or p.quantity <= 0:
                continue
            entry = demand.setdefault(p.product_code, {
                'name': p.product_name,
                'daily_qty': {},
                'unit_price': p.unit_price,
            })
            day = p.date[:10]
            entry['daily_qty'][day] = entry['daily_qty'].get(day, 0.0) + p.quantity
            if p.unit_price > 0:
                entry['unit_price'] = p.unit_price
        return demand

    def compute(
        self,
        inventory: Sequence[InventorySafetyItem],
        purchases: Sequence[PurchaseRecord],
        service_level: Optional[float] = None
    ) -> StatisticalOrderInsight:
        """
        Build the statistical order insight.

        Args:
            inventory: Current on-hand positions
            purchases: Purchase history used as demand
            service_level: Override of config.default_service_level (%)

        Returns:
            StatisticalOrderInsight sorted by status priority, then days of stock
        """
        sl = self.config.default_service_level if service_level is None else service_level
        z_score = self.safety_stock_calc.get_z_score(sl / 100)
        lead_time = self.config.default_lead_time

        by_code, by_name = build_stock_lookup(inventory)
        items: List[StatisticalOrderItem] = []

        for code, data in self._collect_demand(purchases).items():
            series = zero_filled_daily_series(data['daily_qty'])
            demand_stats = self.safety_stock_calc.calculate_from_daily_series(
                series, lead_time_days=lead_time, service_level=sl / 100
            )
            avg_daily = demand_stats['avg_daily_demand']
            safety_stock = demand_stats['safety_stock']

            rop = self.rop_calc.calculate_reorder_point(avg_daily, safety_stock, lead_time)
            eoq = self.rop_calc.calculate_eoq(avg_daily * 365, data['unit_price'])

            current_stock = lookup_current_stock(code, data['name'], by_code, by_name)

            if avg_daily > 0:
                days_of_stock = round_half_up(current_stock / avg_daily, 1)
            else:
                days_of_stock = NO_DEMAND_DAYS

            status = classify_order_status(
                current_stock, safety_stock, rop, days_of_stock,
                self.config.overstock_days
            )

            if current_stock < rop:
                suggested = max(eoq, rop - current_stock + safety_stock)
            else:
                suggested = 0

            items.append(StatisticalOrderItem(
                product_code=code,
                product_name=data['name'],
                current_stock=current_stock,
                avg_daily_demand=round_half_up(avg_daily, 1),
                std_dev_demand=round_half_up(demand_stats['std_dev_demand'], 1),
                lead_time=lead_time,
                safety_stock=safety_stock,
                rop=rop,
                eoq=eoq,
                status=status,
                days_of_stock=days_of_stock,
                suggested_order_qty=suggested,
                unit_price=data['unit_price'],
            ))

        items.sort(key=lambda i: (STATUS_ORDER[i.status], i.days_of_stock))

        counts = {s: sum(1 for i in items if i.status == s) for s in STATUS_ORDER}
        logger.info(
            f"Statistical order: {len(items)} items "
            f"(shortage={counts['shortage']}, urgent={counts['urgent']}) "
            f"at SL {sl}% (z={z_score})"
        )

        return StatisticalOrderInsight(
            items=items,
            service_level=sl,
            z_score=z_score,
            total_items=len(items),
            shortage_count=counts['shortage'],
            urgent_count=counts['urgent'],
            normal_count=counts['normal'],
            overstock_count=counts['overstock'],
        )


def compute_statistical_order(
    inventory: Sequence[InventorySafetyItem],
    purchases: Sequence[PurchaseRecord],
    config: BusinessConfig,
    service_level: Optional[float] = None
) -> StatisticalOrderInsight:
    return StatisticalOrderEngine(config).compute(inventory, purchases, service_level)
