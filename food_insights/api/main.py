# food_insights/api/main.py

"""
FastAPI Application: REST API for the food insight engine

Endpoints:
  GET  /                   → System info
  GET  /health             → Health check
  GET  /config/default     → Business configuration in effect
  POST /insights           → Full dashboard insights
  POST /statistical-order  → Reorder recommendations

Run locally:
  uvicorn food_insights.api.main:app --host 0.0.0.0 --port 8000 --reload
"""

import os
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from food_insights import __version__
from food_insights.api.schemas import HealthResponse, InsightRequest, StatisticalOrderRequest
from food_insights.config.business_config import BusinessConfig, load_business_config
from food_insights.data.records import InsightInputs
from food_insights.data.repositories import (
    InMemoryChannelCostRepository, InMemoryLaborRecordRepository,
)
from food_insights.insights.schemas import DashboardInsights, StatisticalOrderInsight
from food_insights.insights.service import compute_all_insights
from food_insights.optimization.statistical_order import compute_statistical_order

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ===================================================================
# CREATE APP
# ===================================================================
app = FastAPI(
    title="Food Manufacturing Insight API",
    description=(
        "REST API for inventory and procurement analytics.\n\n"
        "**Features:**\n"
        "- Statistical ordering (safety stock, ROP, EOQ)\n"
        "- ABC-XYZ classification and freshness scoring\n"
        "- BOM variance and consumption anomalies\n"
        "- Channel profit cascade, cost breakdown, cash flow\n"
        "- Profit-center goal scoring"
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================================================================
# APPLICATION STATE
# ===================================================================
class AppState:
    """Holds the base business configuration."""

    def __init__(self):
        self._config: Optional[BusinessConfig] = None
        self.config_source = 'default'

    def load(self) -> BusinessConfig:
        path = os.environ.get('BUSINESS_CONFIG_PATH')
        self._config = load_business_config(path)
        self.config_source = path or 'default'
        logger.info(f"Business config source: {self.config_source}")
        return self._config

    @property
    def config(self) -> BusinessConfig:
        if self._config is None:
            return self.load()
        return self._config


state = AppState()


def resolve_config(overrides: Optional[Dict[str, Any]]) -> BusinessConfig:
    """Base config with request-level overrides applied."""
    try:
        return state.config.with_overrides(overrides)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid config overrides: {e.errors(include_url=False)}"
        )


# ===================================================================
# ENDPOINTS
# ===================================================================

# ---------- Root ----------
@app.get("/", tags=["System"])
async def root():
    """API root with system information."""
    return {
        "name": "Food Manufacturing Insight API",
        "version": __version__,
        "status": "running",
        "documentation": "/docs",
        "endpoints": {
            "GET /health": "System health check",
            "GET /config/default": "Business configuration in effect",
            "POST /insights": "Full dashboard insights",
            "POST /statistical-order": "Reorder recommendations",
        }
    }


# ---------- Health ----------
@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check that the configuration loads."""
    config = state.config
    return HealthResponse(
        status="healthy",
        version=__version__,
        config_source=state.config_source,
        profit_center_brackets=len(config.profit_center_goals),
        last_updated=datetime.now().isoformat()
    )


# ---------- Config ----------
@app.get("/config/default", response_model=BusinessConfig, tags=["System"])
async def default_config():
    return state.config


# ---------- Insights ----------
@app.post("/insights", response_model=DashboardInsights, tags=["Insights"])
def insights(request: InsightRequest):
    """
    Compute every insight whose inputs are present.

    Insights with missing inputs are returned as null.
    """
    config = resolve_config(request.config_overrides)

    inputs = InsightInputs(
        daily_sales=request.daily_sales,
        sales_detail=request.sales_detail,
        purchases=request.purchases,
        production=request.production,
        utilities=request.utilities,
        inventory=request.inventory,
        bom=request.bom,
        material_master=request.material_master,
        inventory_snapshots=request.inventory_snapshots,
        inventory_adjustment=request.inventory_adjustment,
    )

    try:
        return compute_all_insights(
            inputs,
            config,
            channel_costs=InMemoryChannelCostRepository(request.channel_costs),
            labor=InMemoryLaborRecordRepository(request.labor),
            service_level=request.service_level,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Insight computation failed: {e}")
        raise HTTPException(status_code=500, detail=f"Insight error: {str(e)}")


# ---------- Statistical order ----------
@app.post(
    "/statistical-order",
    response_model=StatisticalOrderInsight,
    tags=["Inventory"]
)
def statistical_order(request: StatisticalOrderRequest):
    """Safety stock, ROP, EOQ and status for every purchased product."""
    if not request.purchases:
        raise HTTPException(
            status_code=400,
            detail="At least one purchase record is required."
        )

    config = resolve_config(request.config_overrides)
    try:
        return compute_statistical_order(
            request.inventory, request.purchases, config, request.service_level
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Statistical order failed: {e}")
        raise HTTPException(status_code=500, detail=f"Statistical order error: {str(e)}")
