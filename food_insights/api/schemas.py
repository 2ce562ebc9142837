# food_insights/api/schemas.py

"""
Pydantic schemas for request/response validation.

Requests carry already-fetched record arrays; the API does not talk to
spreadsheets or the ERP itself.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from food_insights.data.records import (
    BomItem, ChannelCostSummary, DailySalesRecord, InventoryAdjustment,
    InventorySafetyItem, InventorySnapshot, LaborRecord, MaterialMasterItem,
    ProductionRecord, PurchaseRecord, SalesDetailRecord, UtilityRecord,
)


class InsightRequest(BaseModel):
    """Everything needed for the full dashboard."""

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
    channel_costs: List[ChannelCostSummary] = Field(default_factory=list)
    labor: List[LaborRecord] = Field(default_factory=list)
    service_level: Optional[float] = Field(
        None,
        gt=0,
        lt=100,
        description="Target service level in percent (95 = 95%)"
    )
    config_overrides: Optional[Dict[str, Any]] = Field(
        None,
        description="BusinessConfig fields to override for this request",
        examples=[{"default_lead_time": 5, "order_cost": 30000}]
    )


class StatisticalOrderRequest(BaseModel):
    """Reorder recommendations only."""

    inventory: List[InventorySafetyItem]
    purchases: List[PurchaseRecord]
    service_level: Optional[float] = Field(None, gt=0, lt=100)
    config_overrides: Optional[Dict[str, Any]] = None

    model_config = {
        "json_schema_extra": {
            "examples": [{
                "inventory": [{"sku_code": "ZIP_M_001", "sku_name": "양파", "current_stock": 120}],
                "purchases": [{
                    "date": "2024-01-02", "product_code": "ZIP_M_001", "product_name": "양파",
                    "quantity": 40, "unit_price": 1500, "total": 60000
                }],
                "service_level": 95
            }]
        }
    }


class HealthResponse(BaseModel):
    status: str
    version: str
    config_source: str
    profit_center_brackets: int
    last_updated: str
