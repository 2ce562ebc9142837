# food_insights/config/__init__.py

"""Business configuration package."""

from food_insights.config.business_config import (
    BusinessConfig,
    ProfitCenterGoal,
    ProfitCenterTargets,
    DEFAULT_BUSINESS_CONFIG,
    load_business_config,
)

__all__ = [
    'BusinessConfig',
    'ProfitCenterGoal',
    'ProfitCenterTargets',
    'DEFAULT_BUSINESS_CONFIG',
    'load_business_config',
]
