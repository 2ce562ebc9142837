# food_insights/data/records.py

"""
Input records.

Immutable value objects handed over by the ingestion layer (spreadsheets,
ERP exports). The analyses read them and never mutate them. Dates are ISO
'YYYY-MM-DD' strings.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class _Record(BaseModel):
    model_config = {"frozen": True}


class PurchaseRecord(_Record):
    """One purchase line (material or packaging bought from a supplier)."""

    date: str = Field(..., description="YYYY-MM-DD", examples=["2024-01-15"])
    product_code: str = ""
    product_name: str = ""
    quantity: float = Field(0.0, ge=0)
    unit_price: float = Field(0.0, ge=0)
    total: float = Field(0.0, ge=0)


class ProductionRecord(_Record):
    """Daily production volume per category and waste figures."""

    date: str
    qty_normal: float = 0.0
    qty_preprocess: float = 0.0
    qty_frozen: float = 0.0
    qty_sauce: float = 0.0
    qty_bibimbap: float = 0.0
    total_qty: float = Field(0.0, ge=0)
    total_kg: float = Field(0.0, ge=0)
    waste_finished_qty: float = Field(0.0, ge=0)
    waste_finished_pct: float = Field(0.0, ge=0, le=100)
    waste_semi_pct: float = Field(0.0, ge=0)
    waste_semi_kg: float = Field(0.0, ge=0)


class DailySalesRecord(_Record):
    """Daily settlement revenue per sales channel."""

    date: str
    jasa_revenue: float = 0.0
    coupang_revenue: float = 0.0
    kurly_revenue: float = 0.0
    total_revenue: float = 0.0


class SalesDetailRecord(_Record):
    """Per-product sales line."""

    date: str
    product_code: str = ""
    product_name: str = ""
    quantity: float = 0.0
    total: float = 0.0


class UtilityRecord(_Record):
    date: str
    electricity_cost: float = 0.0
    water_cost: float = 0.0
    gas_cost: float = 0.0

    @property
    def total_cost(self) -> float:
        return self.electricity_cost + self.water_cost + self.gas_cost


class LaborRecord(_Record):
    date: str
    department: str = ""
    headcount: int = 0
    total_hours: float = 0.0
    total_pay: float = Field(0.0, ge=0)


class InventorySafetyItem(_Record):
    """Current on-hand position of a SKU."""

    sku_code: str = ""
    sku_name: str = ""
    current_stock: float = Field(0.0, ge=0)
    safety_stock: float = Field(0.0, ge=0)
    turnover_rate: float = Field(0.0, ge=0)
    status: Literal["Shortage", "Overstock", "Normal"] = "Normal"
    warehouse: str = ""
    category: str = ""


class ChannelCostSummary(_Record):
    """
    Cost structure of one sales channel.

    discount_rate and commission_rate are fractions of the recommended
    (list) price; total_variable_rate_pct is a percent of revenue.
    """

    channel_name: str
    total_variable_rate_pct: float = Field(0.0, ge=0)
    total_variable_per_order: float = Field(0.0, ge=0)
    total_fixed_monthly: float = Field(0.0, ge=0)
    discount_rate: float = Field(0.0, ge=0, le=1)
    commission_rate: float = Field(0.0, ge=0, le=1)


class BomItem(_Record):
    """One material line of a product recipe."""

    product_code: str
    product_name: str = ""
    material_code: str
    material_name: str = ""
    consumption_qty: float = Field(0.0, ge=0)
    production_qty: float = Field(1.0, ge=0)


class MaterialMasterItem(_Record):
    material_code: str
    material_name: str = ""
    unit_price: float = Field(0.0, ge=0)
    unit: str = ""
    category: str = ""


class InventorySnapshot(_Record):
    """Unconsumed balance of a material at the end of the period."""

    material_code: str
    material_name: str = ""
    balance_qty: float = Field(0.0, ge=0)
    unit_price: float = Field(0.0, ge=0)


class InventoryAdjustment(_Record):
    """Beginning/ending inventory value used to turn purchases into consumption."""

    beginning_raw_material: float = Field(0.0, ge=0)
    ending_raw_material: float = Field(0.0, ge=0)
    beginning_sub_material: float = Field(0.0, ge=0)
    ending_sub_material: float = Field(0.0, ge=0)


class InsightInputs(BaseModel):
    """Bundle of every input collection the orchestrator can consume."""

    daily_sales: List[DailySalesRecord] = Field(default_factory=list)
    sales_detail: List[SalesDetailRecord] = Field(default_factory=list)
    purchases: List[PurchaseRecord] = Field(default_factory=list)
    production: List[ProductionRecord] = Field(default_factory=list)
    utilities: List[UtilityRecord] = Field(default_factory=list)
    inventory: List[InventorySafetyItem] = Field(default_factory=list)
    bom: List[BomItem] = Field(default_factory=list)
    material_master: List[MaterialMasterItem] = Field(default_factory=list)
    inventory_snapshots: List[InventorySnapshot] = Field(default_factory=list)
    inventory_adjustment: Optional[InventoryAdjustment] = None
