# food_insights/insights/__init__.py

"""Insight analyses and their result models."""
