# food_insights/api/__init__.py

"""HTTP facade over the insight engine."""
