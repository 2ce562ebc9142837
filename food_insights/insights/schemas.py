# food_insights/insights/schemas.py

"""
Insight result models.

Every analysis returns one of these. They are plain data, serialisable
with `model_dump()` / `model_dump_json()`, and recomputed on each call.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from food_insights.config.business_config import ProfitCenterGoal

OrderStatus = Literal['shortage', 'urgent', 'normal', 'overstock']
FreshnessGrade = Literal['safe', 'good', 'caution', 'warning', 'danger']
AnomalyType = Literal['overuse', 'underuse', 'price_deviation']
Severity = Literal['high', 'medium', 'low']
ScoreStatus = Literal['excellent', 'good', 'warning', 'danger']


# ===================================================================
# STATISTICAL ORDER
# ===================================================================
class StatisticalOrderItem(BaseModel):
    product_code: str
    product_name: str
    current_stock: float
    avg_daily_demand: float
    std_dev_demand: float
    lead_time: float
    safety_stock: int
    rop: int
    eoq: int
    status: OrderStatus
    days_of_stock: float
    suggested_order_qty: float
    unit_price: float


class StatisticalOrderInsight(BaseModel):
    items: List[StatisticalOrderItem] = Field(default_factory=list)
    service_level: float
    z_score: float
    total_items: int = 0
    shortage_count: int = 0
    urgent_count: int = 0
    normal_count: int = 0
    overstock_count: int = 0


# ===================================================================
# ABC-XYZ
# ===================================================================
class ABCXYZItem(BaseModel):
    product_code: str
    product_name: str
    total_spent: float
    spent_share: float
    cumulative_share: float
    abc_class: Literal['A', 'B', 'C']
    cv: float
    xyz_class: Literal['X', 'Y', 'Z']
    combined: str
    month_count: int


class ABCXYZInsight(BaseModel):
    items: List[ABCXYZItem] = Field(default_factory=list)
    matrix: Dict[str, int]
    abc_summary: Dict[str, int]
    xyz_summary: Dict[str, int]
    total_items: int = 0
    total_spent: float = 0.0


# ===================================================================
# FRESHNESS
# ===================================================================
class FreshnessItem(BaseModel):
    product_code: str
    product_name: str
    current_stock: float
    days_since_last_purchase: int
    avg_daily_demand: float
    estimated_days_left: float
    purchase_count: int
    recency_score: float
    coverage_score: float
    stability_score: float
    score: int
    grade: FreshnessGrade


class FreshnessInsight(BaseModel):
    items: List[FreshnessItem] = Field(default_factory=list)
    as_of: Optional[str] = None
    avg_score: float = 0.0
    grade_count: Dict[str, int]


# ===================================================================
# BOM VARIANCE / CONSUMPTION ANOMALY
# ===================================================================
class PeriodRange(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None


class BomVarianceItem(BaseModel):
    material_code: str
    material_name: str
    unit: str = ''
    product_names: List[str] = Field(default_factory=list)
    standard_price: float
    actual_price: float
    standard_qty: float
    actual_qty: float
    price_variance: float
    qty_variance: float
    total_variance: float
    variance_pct: float
    favorable: bool


class BomVarianceInsight(BaseModel):
    items: List[BomVarianceItem] = Field(default_factory=list)
    total_price_variance: float = 0.0
    total_qty_variance: float = 0.0
    total_variance: float = 0.0
    favorable_count: int = 0
    unfavorable_count: int = 0
    base_period: PeriodRange = Field(default_factory=PeriodRange)
    recent_period: PeriodRange = Field(default_factory=PeriodRange)


class BomAnomalyItem(BaseModel):
    material_code: str
    material_name: str
    unit: str = ''
    expected_qty: float
    actual_qty: float
    deviation_pct: float
    reference_price: float
    actual_price: float
    price_deviation_pct: float
    anomaly_type: AnomalyType
    severity: Severity
    cost_impact: float
    linked_menus: List[str] = Field(default_factory=list)


class BomConsumptionAnomalyInsight(BaseModel):
    items: List[BomAnomalyItem] = Field(default_factory=list)
    total_anomalies: int = 0
    overuse_count: int = 0
    underuse_count: int = 0
    price_anomaly_count: int = 0
    high_severity_count: int = 0
    total_cost_impact: float = 0.0


class ConsumptionBreakdown(BaseModel):
    """One finished product's contribution to a material's expected usage."""

    product_code: str
    product_name: str
    sales_qty: float
    consumption_per_unit: float
    expected_qty: float


class ExpectedConsumption(BaseModel):
    material_code: str
    material_name: str
    expected_qty: float
    breakdown: List[ConsumptionBreakdown] = Field(default_factory=list)


class ConsumptionVarianceItem(BaseModel):
    material_code: str
    material_name: str
    expected_qty: float
    actual_qty: float
    qty_diff: float
    qty_diff_pct: float
    standard_price: float
    actual_avg_price: float
    price_diff: float
    price_diff_pct: float
    price_variance: float
    qty_variance: float
    total_variance: float
    breakdown: List[ConsumptionBreakdown] = Field(default_factory=list)


class ConsumptionVarianceInsight(BaseModel):
    items: List[ConsumptionVarianceItem] = Field(default_factory=list)
    total_price_variance: float = 0.0
    total_qty_variance: float = 0.0
    total_variance: float = 0.0
    favorable_count: int = 0
    unfavorable_count: int = 0
    analyzed_materials: int = 0


# ===================================================================
# CHANNEL PROFIT
# ===================================================================
class ChannelProfitItem(BaseModel):
    channel_name: str
    settlement_revenue: float
    share: float
    recommended_revenue: float
    discount_amount: float
    commission_amount: float
    material_cost: float
    profit1: float
    estimated_orders: float
    channel_variable_cost: float
    profit2: float
    channel_fixed_cost: float
    profit3: float
    margin_rate1: float
    margin_rate2: float
    margin_rate3: float


class ChannelDailyRevenue(BaseModel):
    date: str
    jasa: float
    coupang: float
    kurly: float
    total: float


class ChannelRevenueInsight(BaseModel):
    channels: List[ChannelProfitItem] = Field(default_factory=list)
    daily_trend: List[ChannelDailyRevenue] = Field(default_factory=list)
    period_days: int = 0
    total_revenue: float = 0.0
    total_recommended_revenue: float = 0.0
    total_discount: float = 0.0
    total_commission: float = 0.0
    total_material_cost: float = 0.0
    total_channel_variable_cost: float = 0.0
    total_channel_fixed_cost: float = 0.0
    total_profit1: float = 0.0
    total_profit2: float = 0.0
    total_profit3: float = 0.0
    total_margin_rate1: float = 0.0
    total_margin_rate2: float = 0.0
    total_margin_rate3: float = 0.0
    total_purchase_cost: float = 0.0


# ===================================================================
# COST BREAKDOWN
# ===================================================================
class CostComponent(BaseModel):
    key: Literal['raw_material', 'sub_material', 'labor', 'overhead']
    name: str
    value: float
    rate: float


class MonthlyCost(BaseModel):
    month: str
    raw_material: float
    sub_material: float
    labor: float
    overhead: float
    total: float


class MaterialDetailItem(BaseModel):
    product_code: str
    product_name: str
    total_spent: float
    quantity: float
    avg_unit_price: float


class MaterialDetail(BaseModel):
    items: List[MaterialDetailItem] = Field(default_factory=list)
    total: float = 0.0


class CostBreakdownInsight(BaseModel):
    raw_material_cost: float
    sub_material_cost: float
    labor_cost: float
    overhead_cost: float
    total_cost: float
    composition: List[CostComponent]
    monthly: List[MonthlyCost] = Field(default_factory=list)
    raw_material_detail: MaterialDetail
    sub_material_detail: MaterialDetail
    labor_source: Literal['actual', 'estimated']
    inventory_adjusted: bool = False


# ===================================================================
# INVENTORY COST
# ===================================================================
class InventoryCostItem(BaseModel):
    product_code: str
    product_name: str
    abc_class: Optional[str] = None
    status: OrderStatus
    unit_price: float
    annual_demand: float
    order_frequency: float
    current_order_qty: float
    eoq: int
    holding_cost: float
    ordering_cost: float
    estimated_stockout_cost: float
    waste_cost: float
    total_cost: float
    eoq_total_cost: float
    eoq_saving: float


class InventoryCostInsight(BaseModel):
    items: List[InventoryCostItem] = Field(default_factory=list)
    total_holding_cost: float = 0.0
    total_ordering_cost: float = 0.0
    total_stockout_cost: float = 0.0
    total_waste_cost: float = 0.0
    grand_total: float = 0.0
    total_eoq_saving: float = 0.0


# ===================================================================
# CASH FLOW
# ===================================================================
class MonthlyCashFlow(BaseModel):
    month: str
    cash_inflow: float
    cash_outflow: float
    net_cash_flow: float
    cumulative_cash: float


class ChannelCycle(BaseModel):
    channel_name: str
    collection_days: float
    revenue: float
    monthly_collected: float


class CashFlowInsight(BaseModel):
    monthly: List[MonthlyCashFlow] = Field(default_factory=list)
    channel_cycles: List[ChannelCycle] = Field(default_factory=list)
    avg_collection_period: float = 0.0
    inventory_value: float = 0.0
    inventory_turnover: float = 0.0
    inventory_turnover_days: float = 0.0
    supplier_payment_days: float = 0.0
    cash_conversion_cycle: float = 0.0
    net_cash_position: float = 0.0


# ===================================================================
# PROFIT CENTER
# ===================================================================
class MetricScore(BaseModel):
    key: str
    label: str
    actual: float
    target: float
    score: int
    status: ScoreStatus
    actual_cost: float
    target_cost: float
    surplus: float


class ProfitCenterScoreInsight(BaseModel):
    active_bracket: ProfitCenterGoal
    settlement_revenue: float
    monthly_revenue: float
    production_revenue: float
    period_days: int
    metrics: List[MetricScore]
    overall_score: float
    overall_status: ScoreStatus
    total_cost: float
    total_surplus: float


class WeeklyCostScore(BaseModel):
    """Multiplier scores of one Monday-to-Sunday week."""

    week_start: str
    week_label: str
    revenue: float
    raw_material_cost: float
    sub_material_cost: float
    labor_cost: float
    overhead_cost: float
    raw_score: int
    sub_score: int
    labor_score: int
    overhead_score: int
    overall_score: int
    overall_status: ScoreStatus


# ===================================================================
# OPERATIONS
# ===================================================================
class WasteDay(BaseModel):
    date: str
    waste_finished_pct: float
    waste_semi_pct: float
    waste_finished_qty: float
    production_qty: float
    estimated_cost: float


class HighWasteDay(BaseModel):
    date: str
    rate: float
    qty: float


class WasteAnalysisInsight(BaseModel):
    daily: List[WasteDay] = Field(default_factory=list)
    avg_waste_rate: float = 0.0
    high_waste_days: List[HighWasteDay] = Field(default_factory=list)
    total_waste_qty: float = 0.0
    total_estimated_cost: float = 0.0


class ProductionDay(BaseModel):
    date: str
    normal: float
    preprocess: float
    frozen: float
    sauce: float
    bibimbap: float
    total: float


class CategoryStats(BaseModel):
    category: str
    total: float
    avg: float
    max: float
    max_date: str


class DataRange(BaseModel):
    start: str = ''
    end: str = ''
    days: int = 0


class ProductionEfficiencyInsight(BaseModel):
    daily: List[ProductionDay] = Field(default_factory=list)
    category_stats: List[CategoryStats] = Field(default_factory=list)
    total_production: float = 0.0
    avg_daily: float = 0.0
    max_day_date: str = ''
    max_day_qty: float = 0.0
    data_range: DataRange = Field(default_factory=DataRange)


class PricePoint(BaseModel):
    date: str
    price: float


class MaterialPriceItem(BaseModel):
    product_code: str
    product_name: str
    first_price: float
    current_price: float
    avg_price: float
    price_change: float
    change_rate: float
    total_spent: float
    total_quantity: float
    price_history: List[PricePoint] = Field(default_factory=list)


class MaterialPriceInsight(BaseModel):
    items: List[MaterialPriceItem] = Field(default_factory=list)
    rising_count: int = 0
    falling_count: int = 0


class UtilityMonth(BaseModel):
    month: str
    electricity: float
    water: float
    gas: float
    total: float
    production_qty: float
    per_unit: float


class UtilityCostInsight(BaseModel):
    monthly: List[UtilityMonth] = Field(default_factory=list)
    total_cost: float = 0.0


class RevenueMonth(BaseModel):
    month: str
    revenue: float
    profit: float
    margin_rate: float
    prev_month_change: float
    days: int


class RevenueTrendInsight(BaseModel):
    monthly: List[RevenueMonth] = Field(default_factory=list)
    total_revenue: float = 0.0
    avg_monthly_revenue: float = 0.0


class ProductProfitItem(BaseModel):
    product_code: str
    product_name: str
    revenue: float
    cost: float
    margin: float
    margin_rate: float
    quantity: float


class ProductProfitInsight(BaseModel):
    items: List[ProductProfitItem] = Field(default_factory=list)
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_margin: float = 0.0


class CostRecommendation(BaseModel):
    id: str
    type: Literal['material', 'waste', 'utility', 'margin', 'inventory']
    priority: Severity
    title: str
    description: str
    estimated_saving: float
    evidence: str


# ===================================================================
# AGGREGATE
# ===================================================================
class DashboardInsights(BaseModel):
    """Aggregate result. A None field means its inputs were missing."""

    channel_revenue: Optional[ChannelRevenueInsight] = None
    product_profit: Optional[ProductProfitInsight] = None
    revenue_trend: Optional[RevenueTrendInsight] = None
    material_prices: Optional[MaterialPriceInsight] = None
    utility_costs: Optional[UtilityCostInsight] = None
    waste_analysis: Optional[WasteAnalysisInsight] = None
    production_efficiency: Optional[ProductionEfficiencyInsight] = None
    cost_breakdown: Optional[CostBreakdownInsight] = None
    statistical_order: Optional[StatisticalOrderInsight] = None
    abc_xyz: Optional[ABCXYZInsight] = None
    freshness: Optional[FreshnessInsight] = None
    bom_variance: Optional[BomVarianceInsight] = None
    bom_consumption_anomaly: Optional[BomConsumptionAnomalyInsight] = None
    inventory_cost: Optional[InventoryCostInsight] = None
    cash_flow: Optional[CashFlowInsight] = None
    profit_center_score: Optional[ProfitCenterScoreInsight] = None
    weekly_cost_scores: Optional[List[WeeklyCostScore]] = None
    consumption_variance: Optional[ConsumptionVarianceInsight] = None
    recommendations: List[CostRecommendation] = Field(default_factory=list)
