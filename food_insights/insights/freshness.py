# food_insights/insights/freshness.py

"""
Freshness Scoring

Composite 0-100 score per purchased product:
    score = 0.4 × recency + 0.3 × coverage + 0.3 × demand stability

- recency:   linear decay to 0 at 30 days since the last purchase
- coverage:  stock that lasts longer scores lower (aging risk), 0 at 60 days
- stability: 10 points per purchase event, capped at 100

Low scores surface first: they are the items most likely to spoil.
"""

import logging
from typing import List, Optional, Sequence

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import (
    aggregate_by_key, calendar_days, clamp, parse_date, round_half_up, safe_divide,
)
from food_insights.data.records import InventorySafetyItem, PurchaseRecord
from food_insights.insights.schemas import FreshnessInsight, FreshnessItem
from food_insights.optimization.statistical_order import (
    NO_DEMAND_DAYS, build_stock_lookup, lookup_current_stock,
)

logger = logging.getLogger(__name__)

RECENCY_WEIGHT = 0.4
COVERAGE_WEIGHT = 0.3
STABILITY_WEIGHT = 0.3

GRADE_BANDS = (
    (80, 'safe'),
    (60, 'good'),
    (40, 'caution'),
    (20, 'warning'),
)


def grade_for_score(score: float) -> str:
    for lower_bound, grade in GRADE_BANDS:
        if score >= lower_bound:
            return grade
    return 'danger'


def recency_score(days_since_last_purchase: float, horizon_days: float = 30) -> float:
    return clamp(100 - days_since_last_purchase * 100 / horizon_days)


def coverage_score(estimated_days_left: float, horizon_days: float = 60) -> float:
    if estimated_days_left >= NO_DEMAND_DAYS:
        return 0.0
    return clamp(100 - estimated_days_left * 100 / horizon_days)


def stability_score(purchase_event_count: int) -> float:
    return clamp(purchase_event_count * 10)


def compute_freshness(
    purchases: Sequence[PurchaseRecord],
    inventory: Sequence[InventorySafetyItem],
    config: BusinessConfig,
    as_of: Optional[str] = None
) -> FreshnessInsight:
    """
    Score every purchased product for spoilage risk.

    Args:
        purchases: Purchase history
        inventory: Current on-hand positions (joined by code, then name)
        config: Supplies the recency/coverage horizons
        as_of: Reference date; defaults to the latest purchase date

    Returns:
        FreshnessInsight, worst score first
    """
    grade_count = {g: 0 for _, g in GRADE_BANDS}
    grade_count['danger'] = 0

    valid = [p for p in purchases if p.product_code]
    if not valid:
        return FreshnessInsight(as_of=as_of, grade_count=grade_count)

    first_date = min(p.date[:10] for p in valid)
    last_date = max(p.date[:10] for p in valid)
    reference = as_of[:10] if as_of else last_date
    window_days = calendar_days(first_date, max(reference, last_date))

    products = aggregate_by_key(
        valid, 'product_code',
        name=('product_name', 'first'),
        qty=('quantity', 'sum'),
        events=('quantity', 'count'),
        last=('date', 'max'),
    )

    by_code, by_name = build_stock_lookup(inventory)
    reference_date = parse_date(reference)

    items: List[FreshnessItem] = []
    for code, data in products.items():
        current_stock = lookup_current_stock(code, data['name'], by_code, by_name)
        days_since = max(0, (reference_date - parse_date(data['last'])).days)
        avg_daily = data['qty'] / window_days

        if avg_daily > 0:
            days_left = round_half_up(current_stock / avg_daily, 1)
        else:
            days_left = NO_DEMAND_DAYS

        r = recency_score(days_since, config.freshness_recency_days)
        c = coverage_score(days_left, config.freshness_coverage_days)
        s = stability_score(data['events'])

        score = int(round_half_up(
            RECENCY_WEIGHT * r + COVERAGE_WEIGHT * c + STABILITY_WEIGHT * s
        ))
        grade = grade_for_score(score)
        grade_count[grade] += 1

        items.append(FreshnessItem(
            product_code=code,
            product_name=data['name'],
            current_stock=current_stock,
            days_since_last_purchase=days_since,
            avg_daily_demand=round_half_up(avg_daily, 2),
            estimated_days_left=days_left,
            purchase_count=data['events'],
            recency_score=round_half_up(r, 1),
            coverage_score=round_half_up(c, 1),
            stability_score=round_half_up(s, 1),
            score=score,
            grade=grade,
        ))

    items.sort(key=lambda i: i.score)
    avg_score = round_half_up(safe_divide(sum(i.score for i in items), len(items)), 1)

    logger.info(
        f"Freshness: {len(items)} products, avg score {avg_score}, "
        f"danger={grade_count['danger']}"
    )

    return FreshnessInsight(
        items=items,
        as_of=reference,
        avg_score=avg_score,
        grade_count=grade_count,
    )
