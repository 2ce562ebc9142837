# food_insights/optimization/safety_stock.py

"""
Safety Stock Calculator

Calculates safety stock levels from:
- Daily demand variability (zero-filled purchase history)
- Supplier lead time and its variability
- Desired service level

Materials in a food plant have short shelf lives, so the buffer must be
large enough to cover late deliveries but no larger.
"""

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats

from food_insights.data.aggregation import population_std

logger = logging.getLogger(__name__)

# Keeps ppf finite at the extremes
MIN_SERVICE_LEVEL = 0.0001
MAX_SERVICE_LEVEL = 0.9999


class SafetyStockCalculator:
    """
    Calculates safety stock under demand AND lead-time uncertainty.

    Formula: SS = Z × √(LT × σ²_demand + d² × σ²_LT)

    Suppliers of fresh produce do not always deliver on time, so the
    demand-only formula (Z × σ × √LT) understates the buffer whenever
    lead time varies.
    """

    def __init__(
        self,
        default_service_level: float = 0.95,
        default_lead_time_days: float = 3,
        lead_time_std_days: float = 1.0
    ):
        """
        Initialize SafetyStockCalculator.

        Args:
            default_service_level: Default probability of not stocking out (0-1)
            default_lead_time_days: Average supplier lead time
            lead_time_std_days: Standard deviation of lead time
        """
        self.default_service_level = default_service_level
        self.default_lead_time_days = default_lead_time_days
        self.lead_time_std_days = lead_time_std_days

    def get_z_score(self, service_level: float) -> float:
        """
        Get z-score for a given service level.

        Uses the inverse normal CDF, rounded to 3 decimals so that common
        levels read as the familiar table values (0.95 → 1.645).

        Args:
            service_level: Desired probability (e.g., 0.95)

        Returns:
            Z-score value
        """
        p = min(MAX_SERVICE_LEVEL, max(MIN_SERVICE_LEVEL, service_level))
        return round(float(stats.norm.ppf(p)), 3)

    def method_demand_and_lead_time(
        self,
        avg_daily_demand: float,
        demand_std: float,
        lead_time_days: Optional[float] = None,
        lead_time_std: Optional[float] = None,
        service_level: Optional[float] = None
    ) -> int:
        """
        Safety Stock with both demand AND lead time variability.

        Formula: SS = Z × √(LT × σ²_demand + d² × σ²_LT)

        Args:
            avg_daily_demand: Mean daily demand
            demand_std: Standard deviation of daily demand
            lead_time_days: Average lead time
            lead_time_std: Standard deviation of lead time
            service_level: Desired service level (0-1)

        Returns:
            Safety stock quantity (units), never negative
        """
        lt = self.default_lead_time_days if lead_time_days is None else lead_time_days
        lt_std = self.lead_time_std_days if lead_time_std is None else lead_time_std
        sl = self.default_service_level if service_level is None else service_level
        z = self.get_z_score(sl)

        variance = lt * demand_std ** 2 + avg_daily_demand ** 2 * lt_std ** 2
        safety_stock = z * np.sqrt(variance)

        return int(max(0, np.ceil(safety_stock)))

    def calculate_from_daily_series(
        self,
        daily_demand: pd.Series,
        lead_time_days: Optional[float] = None,
        service_level: Optional[float] = None
    ) -> Dict:
        """
        Demand statistics and safety stock from a zero-filled daily series.

        Args:
            daily_demand: One value per calendar day (gaps already zero-filled)
            lead_time_days: Average lead time
            service_level: Desired service level (0-1)

        Returns:
            Dict with avg_daily_demand, std_dev_demand, safety_stock
        """
        if len(daily_demand) == 0:
            return {'avg_daily_demand': 0.0, 'std_dev_demand': 0.0, 'safety_stock': 0}

        avg = float(daily_demand.sum()) / len(daily_demand)
        std = population_std(daily_demand.to_numpy(dtype=float))

        return {
            'avg_daily_demand': avg,
            'std_dev_demand': std,
            'safety_stock': self.method_demand_and_lead_time(
                avg_daily_demand=avg,
                demand_std=std,
                lead_time_days=lead_time_days,
                service_level=service_level
            ),
        }
