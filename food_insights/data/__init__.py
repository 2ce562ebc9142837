# food_insights/data/__init__.py

"""Input records, repositories and period aggregation helpers."""
