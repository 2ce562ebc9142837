# food_insights/insights/bom_variance.py

"""
BOM Variance & Consumption Anomaly Detection

Both analyses compare a "standard" (base) period with an "actual" (recent)
period. The standard is produced by a BaselineStrategy. The default,
SelfBaselineVarianceStrategy, splits the chronologically sorted purchase and
production histories in half and treats the first half as the standard. A
strategy backed by a maintained standard BOM can be swapped in without
changing either analysis.

Variance (standard costing):
    price variance = (actual price − standard price) × actual qty
    qty variance   = (actual qty − standard qty) × standard price
Positive = unfavorable (cost increase), negative = favorable.

Consumption anomaly: materials used in BOM recipes whose recent usage
deviates from the base usage rate (overuse / underuse) or whose price drifts
from the master price.

Sales-based consumption: the usage a period's sales imply through the
recipes, compared with what was actually purchased using the same price /
quantity variance split.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import (
    aggregate_by_key, date_range_of, records_to_frame, round_half_up, safe_divide,
)
from food_insights.data.records import (
    BomItem, InventorySnapshot, MaterialMasterItem, ProductionRecord, PurchaseRecord,
    SalesDetailRecord,
)
from food_insights.insights.schemas import (
    BomAnomalyItem, BomConsumptionAnomalyInsight, BomVarianceInsight, BomVarianceItem,
    ConsumptionBreakdown, ConsumptionVarianceInsight, ConsumptionVarianceItem,
    ExpectedConsumption, PeriodRange,
)

logger = logging.getLogger(__name__)


@dataclass
class PeriodSplit:
    """Purchases and production divided into a base and a recent period."""

    base_purchases: List[PurchaseRecord] = field(default_factory=list)
    recent_purchases: List[PurchaseRecord] = field(default_factory=list)
    base_production: List[ProductionRecord] = field(default_factory=list)
    recent_production: List[ProductionRecord] = field(default_factory=list)

    @property
    def base_production_qty(self) -> float:
        return sum(p.total_qty for p in self.base_production)

    @property
    def recent_production_qty(self) -> float:
        return sum(p.total_qty for p in self.recent_production)


class BaselineStrategy(ABC):
    """Decides which records form the standard and which the actual period."""

    name = 'baseline'

    @abstractmethod
    def split(
        self,
        purchases: Sequence[PurchaseRecord],
        production: Sequence[ProductionRecord]
    ) -> PeriodSplit:
        ...


class SelfBaselineVarianceStrategy(BaselineStrategy):
    """
    First half of the history is the standard, second half the actual.

    Each list is sorted by date and split by record count at len // 2,
    so an odd record goes to the recent period.
    """

    name = 'self_baseline'

    def split(
        self,
        purchases: Sequence[PurchaseRecord],
        production: Sequence[ProductionRecord]
    ) -> PeriodSplit:
        sorted_purchases = sorted(purchases, key=lambda r: r.date)
        sorted_production = sorted(production, key=lambda r: r.date)
        p_mid = len(sorted_purchases) // 2
        m_mid = len(sorted_production) // 2
        return PeriodSplit(
            base_purchases=sorted_purchases[:p_mid],
            recent_purchases=sorted_purchases[p_mid:],
            base_production=sorted_production[:m_mid],
            recent_production=sorted_production[m_mid:],
        )


def _sum_by_material(purchases: Sequence[PurchaseRecord]) -> Dict[str, Dict]:
    return aggregate_by_key(
        purchases, 'product_code',
        name=('product_name', 'first'),
        qty=('quantity', 'sum'),
        total=('total', 'sum'),
    )


def _menus_by_material(bom: Sequence[BomItem]) -> Dict[str, List[str]]:
    menus: Dict[str, List[str]] = {}
    for item in bom:
        names = menus.setdefault(item.material_code, [])
        label = item.product_name or item.product_code
        if label not in names:
            names.append(label)
    return menus


def _period_range(records: Sequence) -> PeriodRange:
    start, end = date_range_of(records)
    return PeriodRange(start=start, end=end)


def compute_bom_variance(
    purchases: Sequence[PurchaseRecord],
    production: Sequence[ProductionRecord],
    config: BusinessConfig,
    inventory_snapshots: Sequence[InventorySnapshot] = (),
    bom: Sequence[BomItem] = (),
    material_master: Sequence[MaterialMasterItem] = (),
    strategy: Optional[BaselineStrategy] = None
) -> BomVarianceInsight:
    """
    Price and quantity variance of each material, standard vs actual.

    Args:
        purchases: Purchase history (product_code is the material code)
        production: Production history (volume basis)
        config: Business configuration
        inventory_snapshots: Unconsumed balances deducted from recent purchases
        bom: Recipes, used to list the menus a material goes into
        material_master: Unit names
        strategy: Baseline strategy (defaults to SelfBaselineVarianceStrategy)

    Returns:
        BomVarianceInsight sorted by absolute total variance
    """
    strategy = strategy or SelfBaselineVarianceStrategy()
    split = strategy.split(purchases, production)

    base = _sum_by_material(split.base_purchases)
    recent = _sum_by_material(split.recent_purchases)
    base_prod = split.base_production_qty
    recent_prod = split.recent_production_qty

    balances = {s.material_code: s.balance_qty for s in inventory_snapshots}
    units = {m.material_code: m.unit for m in material_master}
    menus = _menus_by_material(bom)

    items: List[BomVarianceItem] = []
    total_price = total_qty = 0.0

    for code, cur in recent.items():
        ref = base.get(code)
        if ref is None or ref['qty'] <= 0 or cur['qty'] <= 0:
            logger.debug(f"BOM variance: {code} skipped, missing base or recent quantity")
            continue

        standard_price = ref['total'] / ref['qty']
        actual_price = cur['total'] / cur['qty']
        actual_qty = max(0.0, cur['qty'] - balances.get(code, 0.0))

        if base_prod > 0:
            standard_qty = ref['qty'] * recent_prod / base_prod
        else:
            standard_qty = actual_qty

        price_variance = (actual_price - standard_price) * actual_qty
        qty_variance = (actual_qty - standard_qty) * standard_price
        total_variance = price_variance + qty_variance
        standard_cost = standard_price * standard_qty

        total_price += price_variance
        total_qty += qty_variance

        items.append(BomVarianceItem(
            material_code=code,
            material_name=cur['name'] or ref['name'],
            unit=units.get(code, ''),
            product_names=menus.get(code, []),
            standard_price=round_half_up(standard_price, 2),
            actual_price=round_half_up(actual_price, 2),
            standard_qty=round_half_up(standard_qty, 2),
            actual_qty=round_half_up(actual_qty, 2),
            price_variance=round_half_up(price_variance, 2),
            qty_variance=round_half_up(qty_variance, 2),
            total_variance=round_half_up(total_variance, 2),
            variance_pct=round_half_up(safe_divide(total_variance, standard_cost) * 100, 1),
            favorable=total_variance < 0,
        ))

    items.sort(key=lambda i: abs(i.total_variance), reverse=True)
    favorable = sum(1 for i in items if i.total_variance < 0)
    unfavorable = sum(1 for i in items if i.total_variance > 0)

    logger.info(
        f"BOM variance ({strategy.name}): {len(items)} materials, "
        f"total {total_price + total_qty:,.0f}"
    )

    return BomVarianceInsight(
        items=items,
        total_price_variance=round_half_up(total_price, 2),
        total_qty_variance=round_half_up(total_qty, 2),
        total_variance=round_half_up(total_price + total_qty, 2),
        favorable_count=favorable,
        unfavorable_count=unfavorable,
        base_period=_period_range(split.base_purchases),
        recent_period=_period_range(split.recent_purchases),
    )


def classify_severity(deviation_pct: float, config: BusinessConfig) -> str:
    magnitude = abs(deviation_pct)
    if magnitude >= config.bom_severity_high_pct:
        return 'high'
    if magnitude >= config.bom_severity_medium_pct:
        return 'medium'
    return 'low'


def compute_bom_consumption_anomaly(
    purchases: Sequence[PurchaseRecord],
    production: Sequence[ProductionRecord],
    bom: Sequence[BomItem],
    config: BusinessConfig,
    material_master: Sequence[MaterialMasterItem] = (),
    inventory_snapshots: Sequence[InventorySnapshot] = (),
    strategy: Optional[BaselineStrategy] = None
) -> BomConsumptionAnomalyInsight:
    """
    Flag BOM materials with abnormal usage or price drift.

    Args:
        purchases: Purchase history
        production: Production history
        bom: Recipes; only their materials are inspected
        config: Thresholds (bom_overuse_threshold, bom_underuse_threshold,
            bom_price_deviation_threshold, bom_minimum_spend, severity cutoffs)
        material_master: Reference prices
        inventory_snapshots: Unconsumed balances
        strategy: Baseline strategy (defaults to SelfBaselineVarianceStrategy)

    Returns:
        BomConsumptionAnomalyInsight sorted by absolute cost impact
    """
    strategy = strategy or SelfBaselineVarianceStrategy()
    menus = _menus_by_material(bom)
    if not menus:
        return BomConsumptionAnomalyInsight()

    split = strategy.split(purchases, production)
    base = _sum_by_material(split.base_purchases)
    recent = _sum_by_material(split.recent_purchases)
    base_prod = split.base_production_qty
    recent_prod = split.recent_production_qty

    master = {m.material_code: m for m in material_master}
    balances = {s.material_code: s.balance_qty for s in inventory_snapshots}

    items: List[BomAnomalyItem] = []
    for code, linked in menus.items():
        ref = base.get(code)
        cur = recent.get(code)
        if ref is None or cur is None or ref['qty'] <= 0 or cur['qty'] <= 0:
            continue
        if ref['total'] + cur['total'] < config.bom_minimum_spend:
            continue
        if base_prod <= 0:
            logger.debug(f"BOM anomaly: {code} skipped, no base production")
            continue

        base_price = ref['total'] / ref['qty']
        actual_price = cur['total'] / cur['qty']
        expected_qty = ref['qty'] * recent_prod / base_prod
        actual_qty = max(0.0, cur['qty'] - balances.get(code, 0.0))

        master_item = master.get(code)
        if master_item is not None and master_item.unit_price > 0:
            reference_price = master_item.unit_price
        else:
            reference_price = base_price

        deviation_pct = safe_divide(actual_qty - expected_qty, expected_qty) * 100
        price_deviation_pct = safe_divide(actual_price - reference_price, reference_price) * 100

        if deviation_pct > config.bom_overuse_threshold:
            anomaly_type = 'overuse'
        elif deviation_pct < config.bom_underuse_threshold:
            anomaly_type = 'underuse'
        elif abs(price_deviation_pct) > config.bom_price_deviation_threshold:
            anomaly_type = 'price_deviation'
        else:
            continue

        if anomaly_type == 'price_deviation':
            severity = classify_severity(price_deviation_pct, config)
            cost_impact = (actual_price - reference_price) * actual_qty
        else:
            severity = classify_severity(deviation_pct, config)
            cost_impact = (actual_qty - expected_qty) * reference_price

        items.append(BomAnomalyItem(
            material_code=code,
            material_name=cur['name'] or (master_item.material_name if master_item else ''),
            unit=master_item.unit if master_item else '',
            expected_qty=round_half_up(expected_qty, 2),
            actual_qty=round_half_up(actual_qty, 2),
            deviation_pct=round_half_up(deviation_pct, 1),
            reference_price=round_half_up(reference_price, 2),
            actual_price=round_half_up(actual_price, 2),
            price_deviation_pct=round_half_up(price_deviation_pct, 1),
            anomaly_type=anomaly_type,
            severity=severity,
            cost_impact=round_half_up(cost_impact),
            linked_menus=linked,
        ))

    items.sort(key=lambda i: abs(i.cost_impact), reverse=True)

    insight = BomConsumptionAnomalyInsight(
        items=items,
        total_anomalies=len(items),
        overuse_count=sum(1 for i in items if i.anomaly_type == 'overuse'),
        underuse_count=sum(1 for i in items if i.anomaly_type == 'underuse'),
        price_anomaly_count=sum(1 for i in items if i.anomaly_type == 'price_deviation'),
        high_severity_count=sum(1 for i in items if i.severity == 'high'),
        total_cost_impact=sum(i.cost_impact for i in items),
    )

    logger.info(
        f"BOM anomaly: {insight.total_anomalies} flagged "
        f"(overuse={insight.overuse_count}, underuse={insight.underuse_count}, "
        f"price={insight.price_anomaly_count})"
    )
    return insight


# ===================================================================
# SALES-BASED CONSUMPTION
# ===================================================================
def compute_sales_based_consumption(
    sales_detail: Sequence[SalesDetailRecord],
    bom: Sequence[BomItem],
    material_master: Sequence[MaterialMasterItem] = ()
) -> List[ExpectedConsumption]:
    """
    Material usage implied by what was sold.

    expected qty = sales qty × consumption_qty / production_qty, summed over
    every product whose recipe uses the material. Recipe rows repeating the
    same product and material add their consumption.

    Args:
        sales_detail: Per-product sales quantities
        bom: Recipes (rows without consumption or batch size are ignored)
        material_master: Names for materials the BOM leaves unnamed

    Returns:
        ExpectedConsumption per material, largest expected quantity first
    """
    if not bom or not sales_detail:
        return []

    master_names = {
        m.material_code: m.material_name for m in material_master
        if m.material_code and m.material_name
    }
    sold = aggregate_by_key(
        sales_detail, 'product_code',
        name=('product_name', 'first'),
        qty=('quantity', 'sum'),
    )

    recipes = records_to_frame(bom)
    recipes = recipes[
        recipes['product_code'].astype(bool)
        & recipes['material_code'].astype(bool)
        & (recipes['consumption_qty'] > 0)
        & (recipes['production_qty'] > 0)
    ]
    recipes = recipes.groupby(['product_code', 'material_code'], sort=False).agg(
        consumption=('consumption_qty', 'sum'),
        batch=('production_qty', 'first'),
        material_name=('material_name', 'first'),
        product_name=('product_name', 'first'),
    )

    consumption: Dict[str, ExpectedConsumption] = {}
    for (product_code, material_code), recipe in recipes.iterrows():
        sales = sold.get(product_code)
        if sales is None or sales['qty'] <= 0:
            continue

        per_unit = float(recipe['consumption']) / float(recipe['batch'])
        expected_qty = sales['qty'] * per_unit

        entry = consumption.get(material_code)
        if entry is None:
            entry = ExpectedConsumption(
                material_code=material_code,
                material_name=(
                    recipe['material_name'] or master_names.get(material_code) or material_code
                ),
                expected_qty=0.0,
            )
            consumption[material_code] = entry
        entry.expected_qty += expected_qty
        entry.breakdown.append(ConsumptionBreakdown(
            product_code=product_code,
            product_name=recipe['product_name'] or product_code,
            sales_qty=sales['qty'],
            consumption_per_unit=per_unit,
            expected_qty=expected_qty,
        ))

    result = sorted(consumption.values(), key=lambda e: e.expected_qty, reverse=True)
    logger.info(f"Sales-based consumption: {len(result)} materials from {len(sold)} products")
    return result


def compute_consumption_variance(
    expected: Sequence[ExpectedConsumption],
    purchases: Sequence[PurchaseRecord],
    material_master: Sequence[MaterialMasterItem] = ()
) -> ConsumptionVarianceInsight:
    """
    Purchased vs sales-implied usage, split into price and quantity variance.

    The standard price is the master unit price when set, otherwise the
    actual average purchase price. Materials never purchased are skipped.

    Args:
        expected: Output of compute_sales_based_consumption
        purchases: Purchase history (product_code is the material code)
        material_master: Standard prices

    Returns:
        ConsumptionVarianceInsight sorted by absolute total variance
    """
    if not expected or not purchases:
        return ConsumptionVarianceInsight()

    standard_prices = {
        m.material_code: m.unit_price for m in material_master
        if m.material_code and m.unit_price > 0
    }
    bought = _sum_by_material(purchases)

    items: List[ConsumptionVarianceItem] = []
    total_price = total_qty = 0.0
    for exp in expected:
        actual = bought.get(exp.material_code)
        if actual is None:
            continue

        actual_price = safe_divide(actual['total'], actual['qty'])
        standard_price = standard_prices.get(exp.material_code, actual_price)

        qty_diff = actual['qty'] - exp.expected_qty
        price_diff = actual_price - standard_price
        price_variance = price_diff * actual['qty']
        qty_variance = qty_diff * standard_price
        total_price += price_variance
        total_qty += qty_variance

        items.append(ConsumptionVarianceItem(
            material_code=exp.material_code,
            material_name=exp.material_name,
            expected_qty=round_half_up(exp.expected_qty, 2),
            actual_qty=round_half_up(actual['qty'], 2),
            qty_diff=round_half_up(qty_diff, 2),
            qty_diff_pct=round_half_up(safe_divide(qty_diff, exp.expected_qty) * 100, 1),
            standard_price=round_half_up(standard_price, 2),
            actual_avg_price=round_half_up(actual_price, 2),
            price_diff=round_half_up(price_diff, 2),
            price_diff_pct=round_half_up(safe_divide(price_diff, standard_price) * 100, 1),
            price_variance=round_half_up(price_variance),
            qty_variance=round_half_up(qty_variance),
            total_variance=round_half_up(price_variance + qty_variance),
            breakdown=exp.breakdown,
        ))

    items.sort(key=lambda i: abs(i.total_variance), reverse=True)

    insight = ConsumptionVarianceInsight(
        items=items,
        total_price_variance=round_half_up(total_price),
        total_qty_variance=round_half_up(total_qty),
        total_variance=round_half_up(total_price + total_qty),
        favorable_count=sum(1 for i in items if i.total_variance < 0),
        unfavorable_count=sum(1 for i in items if i.total_variance > 0),
        analyzed_materials=len(items),
    )
    logger.info(
        f"Consumption variance: {insight.analyzed_materials} materials, "
        f"total {insight.total_variance:,.0f}"
    )
    return insight
