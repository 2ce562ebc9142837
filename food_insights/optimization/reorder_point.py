# food_insights/optimization/reorder_point.py

"""
Reorder Point Calculator

Determines WHEN to place replenishment orders and HOW MUCH to order.

When inventory falls to the reorder point, a new order should be triggered
so that it arrives before the safety stock is consumed.
"""

import logging
from typing import Dict, Optional

import numpy as np

logger = logging.getLogger(__name__)


class ReorderPointCalculator:
    """
    Calculates reorder points, economic order quantities and the annual
    ordering/holding cost of a given order policy.
    """

    def __init__(
        self,
        lead_time_days: float = 3,
        ordering_cost: float = 50000.0,
        holding_cost_rate: float = 0.20
    ):
        """
        Initialize ReorderPointCalculator.

        Args:
            lead_time_days: Days from order placement to delivery
            ordering_cost: Fixed cost per purchase order (KRW)
            holding_cost_rate: Annual holding cost as a fraction of unit price
        """
        self.lead_time_days = lead_time_days
        self.ordering_cost = ordering_cost
        self.holding_cost_rate = holding_cost_rate

    def calculate_reorder_point(
        self,
        avg_daily_demand: float,
        safety_stock: float,
        lead_time_days: Optional[float] = None
    ) -> int:
        """
        Calculate the Reorder Point.

        Formula: ROP = (Avg_Daily_Demand × Lead_Time) + Safety_Stock

        Args:
            avg_daily_demand: Mean daily demand
            safety_stock: Calculated safety stock
            lead_time_days: Supplier lead time

        Returns:
            Reorder point (units)
        """
        lt = self.lead_time_days if lead_time_days is None else lead_time_days

        demand_during_lt = avg_daily_demand * lt
        rop = demand_during_lt + safety_stock

        return int(max(0, np.ceil(rop)))

    def calculate_eoq(
        self,
        annual_demand: float,
        unit_price: float,
        ordering_cost: Optional[float] = None
    ) -> int:
        """
        Calculate Economic Order Quantity (EOQ).

        Formula: EOQ = √(2 × D × S / H), H = unit_price × holding_cost_rate

        The EOQ balances two competing costs:
        - Ordering cost (fixed per order): favors fewer, larger orders
        - Holding cost (per unit per year): favors more, smaller orders

        Args:
            annual_demand: Expected annual demand (units)
            unit_price: Purchase price per unit
            ordering_cost: Cost per order (defaults to instance value)

        Returns:
            EOQ (units), 0 when the holding cost per unit is 0
        """
        s = self.ordering_cost if ordering_cost is None else ordering_cost
        h = unit_price * self.holding_cost_rate

        if h <= 0 or annual_demand <= 0:
            return 0

        eoq = np.sqrt((2 * annual_demand * s) / h)
        return int(np.ceil(eoq))

    def calculate_total_costs(
        self,
        annual_demand: float,
        order_quantity: float,
        unit_price: float,
        safety_stock: float = 0.0
    ) -> Dict:
        """
        Annual ordering and holding costs for an order policy.

        Args:
            annual_demand: Annual demand (units)
            order_quantity: Units per order
            unit_price: Purchase price per unit
            safety_stock: Buffer held on top of the cycle stock

        Returns:
            Dict with order_frequency, avg_inventory, ordering_cost,
            holding_cost and total_cost
        """
        h = unit_price * self.holding_cost_rate

        if order_quantity > 0:
            order_frequency = annual_demand / order_quantity
        else:
            order_frequency = 0.0

        avg_inventory = order_quantity / 2 + safety_stock
        ordering_cost = order_frequency * self.ordering_cost
        holding_cost = avg_inventory * h

        return {
            'order_frequency': float(order_frequency),
            'avg_inventory': float(avg_inventory),
            'ordering_cost': float(ordering_cost),
            'holding_cost': float(holding_cost),
            'total_cost': float(ordering_cost + holding_cost),
        }
