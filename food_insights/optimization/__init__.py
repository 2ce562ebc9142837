# food_insights/optimization/__init__.py

"""Safety stock, reorder point, statistical ordering and inventory cost."""

from food_insights.optimization.safety_stock import SafetyStockCalculator
from food_insights.optimization.reorder_point import ReorderPointCalculator

__all__ = ['SafetyStockCalculator', 'ReorderPointCalculator']
