# food_insights/config/business_config.py

"""
Business Configuration

Every numeric knob the analyses depend on lives here:
- margin / waste / cost-ratio assumptions
- ordering and inventory parameters (lead time, service level, EOQ costs)
- ABC-XYZ and BOM anomaly thresholds
- channel and cash-cycle assumptions
- profit-center goal brackets

The analysis functions never fall back to a hidden default. Callers
construct a BusinessConfig (or use DEFAULT_BUSINESS_CONFIG at the calling
layer) and pass it explicitly.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class ProfitCenterTargets(BaseModel):
    """Target multipliers for one revenue bracket (revenue ÷ cost)."""

    model_config = {"frozen": True}

    revenue_to_raw_material: float = Field(4.2, ge=0)
    revenue_to_sub_material: float = Field(40.0, ge=0)
    production_to_labor: float = Field(5.4, ge=0)
    revenue_to_expense: float = Field(10.0, ge=0)
    waste_rate_target: float = Field(
        2.0,
        ge=0,
        description="Target finished-goods waste rate (%), lower is better"
    )


class ProfitCenterGoal(BaseModel):
    """A monthly revenue bracket and the targets that apply above it."""

    model_config = {"frozen": True}

    revenue_bracket: float = Field(..., ge=0, description="Monthly revenue floor (KRW)")
    label: str
    targets: ProfitCenterTargets = Field(default_factory=ProfitCenterTargets)


def _default_goals() -> List[ProfitCenterGoal]:
    return [
        ProfitCenterGoal(
            revenue_bracket=1_600_000_000,
            label="16억",
            targets=ProfitCenterTargets(),
        )
    ]


class BusinessConfig(BaseModel):
    """
    Flat record of business parameters.

    Percent-valued knobs are expressed in percent (3 = 3%), rate-valued
    knobs as fractions (0.25 = 25%), matching how the figures are entered
    by the finance team.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    # ---- Margin ----
    default_margin_rate: float = Field(0.15, ge=0, le=1)
    profit_margin_good: float = Field(20.0, description="Margin (%) considered healthy")

    # ---- Waste ----
    waste_unit_cost: float = Field(1000.0, ge=0, description="KRW per wasted unit")
    waste_threshold_pct: float = Field(3.0, ge=0, le=100)

    # ---- Cost ratios ----
    labor_cost_ratio: float = Field(0.25, ge=0, le=1)
    overhead_ratio: float = Field(0.05, ge=0, le=1)

    # ---- Ordering / inventory ----
    default_lead_time: float = Field(3.0, ge=0, description="Supplier lead time (days)")
    lead_time_std_dev: float = Field(1.0, ge=0)
    default_service_level: float = Field(95.0, gt=0, lt=100, description="Service level (%)")
    order_cost: float = Field(50000.0, ge=0, description="KRW per purchase order")
    holding_cost_rate: float = Field(0.20, ge=0, le=1, description="Annual holding cost / unit price")
    stockout_cost_multiplier: float = Field(1.5, ge=0)
    overstock_days: float = Field(60.0, gt=0)

    # ---- Freshness ----
    freshness_recency_days: float = Field(30.0, gt=0)
    freshness_coverage_days: float = Field(60.0, gt=0)

    # ---- ABC-XYZ ----
    abc_class_a_threshold: float = Field(70.0, ge=0, le=100)
    abc_class_b_threshold: float = Field(90.0, ge=0, le=100)
    xyz_class_x_threshold: float = Field(0.5, ge=0)
    xyz_class_y_threshold: float = Field(1.0, ge=0)

    # ---- BOM consumption anomaly ----
    bom_overuse_threshold: float = Field(10.0, ge=0)
    bom_underuse_threshold: float = Field(-10.0, le=0)
    bom_price_deviation_threshold: float = Field(10.0, ge=0)
    bom_minimum_spend: float = Field(100000.0, ge=0)
    bom_severity_high_pct: float = Field(30.0, ge=0)
    bom_severity_medium_pct: float = Field(15.0, ge=0)

    # ---- Channel profit ----
    vat_rate: float = Field(0.1, ge=0, lt=1)
    material_cost_ratio: float = Field(0.5, ge=0, le=1)
    average_order_value: float = Field(30000.0, gt=0)
    production_revenue_ratio: float = Field(0.5, ge=0, le=1)

    # ---- Cash cycle ----
    channel_collection_days_jasa: float = Field(3.0, ge=0)
    channel_collection_days_coupang: float = Field(60.0, ge=0)
    channel_collection_days_kurly: float = Field(30.0, ge=0)
    supplier_payment_days: float = Field(30.0, ge=0)

    # ---- Recommendations ----
    price_increase_threshold: float = Field(10.0, ge=0)

    # ---- Profit center ----
    profit_center_goals: List[ProfitCenterGoal] = Field(default_factory=_default_goals)

    @model_validator(mode="after")
    def check_threshold_order(self) -> "BusinessConfig":
        if self.abc_class_b_threshold < self.abc_class_a_threshold:
            raise ValueError(
                "abc_class_b_threshold must be >= abc_class_a_threshold"
            )
        if self.xyz_class_y_threshold < self.xyz_class_x_threshold:
            raise ValueError(
                "xyz_class_y_threshold must be >= xyz_class_x_threshold"
            )
        if self.bom_severity_high_pct < self.bom_severity_medium_pct:
            raise ValueError(
                "bom_severity_high_pct must be >= bom_severity_medium_pct"
            )
        return self

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "BusinessConfig":
        """Return a new config with the given fields replaced (re-validated)."""
        if not overrides:
            return self
        data = self.model_dump()
        data.update(overrides)
        return BusinessConfig.model_validate(data)


DEFAULT_BUSINESS_CONFIG = BusinessConfig()


def load_business_config(path: Optional[str] = None) -> BusinessConfig:
    """
    Build a BusinessConfig from a JSON overrides file.

    Keys missing from the file keep their default values. A missing path
    (None or empty) yields the defaults.

    Args:
        path: Path to a JSON object of field overrides

    Returns:
        Validated BusinessConfig
    """
    if not path:
        return DEFAULT_BUSINESS_CONFIG

    with open(path, encoding="utf-8") as f:
        overrides = json.load(f)

    if not isinstance(overrides, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    config = DEFAULT_BUSINESS_CONFIG.with_overrides(overrides)
    logger.info(f"Business config loaded from {path} ({len(overrides)} overrides)")
    return config
