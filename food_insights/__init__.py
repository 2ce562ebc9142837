# food_insights/__init__.py

"""Inventory and procurement analytics for a food manufacturer."""

__version__ = "1.0.0"
