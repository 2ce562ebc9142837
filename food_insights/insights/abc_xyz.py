# food_insights/insights/abc_xyz.py

"""
ABC-XYZ Classification

ABC: Pareto ranking by cumulative share of purchase spend.
XYZ: volatility ranking by coefficient of variation of monthly spend.

The 3×3 matrix tells purchasing where to spend attention:
AX items are high-value and predictable (automate), CZ items are
low-value and erratic (buy on demand).
"""

import logging
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from food_insights.config.business_config import BusinessConfig
from food_insights.data.aggregation import population_std, round_half_up, safe_divide
from food_insights.data.records import PurchaseRecord
from food_insights.insights.schemas import ABCXYZInsight, ABCXYZItem

logger = logging.getLogger(__name__)

ABC_CLASSES = ('A', 'B', 'C')
XYZ_CLASSES = ('X', 'Y', 'Z')


def empty_matrix() -> Dict[str, int]:
    return {a + x: 0 for a in ABC_CLASSES for x in XYZ_CLASSES}


def classify_abc(cumulative_share: float, a_threshold: float, b_threshold: float) -> str:
    if cumulative_share <= a_threshold:
        return 'A'
    if cumulative_share <= b_threshold:
        return 'B'
    return 'C'


def classify_xyz(cv: float, x_threshold: float, y_threshold: float) -> str:
    if cv <= x_threshold:
        return 'X'
    if cv <= y_threshold:
        return 'Y'
    return 'Z'


def coefficient_of_variation(monthly_amounts: Sequence[float]) -> float:
    """Population std / mean over the months with spend; 0 below 2 months."""
    values = np.asarray(monthly_amounts, dtype=float)
    if values.size < 2:
        return 0.0
    mean = float(values.mean())
    if mean <= 0:
        return 0.0
    return population_std(values) / mean


def compute_abc_xyz(
    purchases: Sequence[PurchaseRecord],
    config: BusinessConfig
) -> ABCXYZInsight:
    """
    Classify purchased products by spend share and spend volatility.

    Args:
        purchases: Purchase history
        config: Supplies the ABC share thresholds and XYZ CV ceilings

    Returns:
        ABCXYZInsight, with an all-zero matrix when there is no spend
    """
    rows = [
        {
            'product_code': p.product_code,
            'product_name': p.product_name,
            'month': p.date[:7],
            'total': p.total,
        }
        for p in purchases if p.product_code
    ]
    df = pd.DataFrame(rows, columns=['product_code', 'product_name', 'month', 'total'])

    matrix = empty_matrix()
    abc_summary = {c: 0 for c in ABC_CLASSES}
    xyz_summary = {c: 0 for c in XYZ_CLASSES}

    if df.empty:
        return ABCXYZInsight(matrix=matrix, abc_summary=abc_summary, xyz_summary=xyz_summary)

    names = df.groupby('product_code', sort=False)['product_name'].first()
    spend = df.groupby('product_code', sort=False)['total'].sum()
    spend = spend[spend > 0]
    grand_total = float(spend.sum())

    if grand_total <= 0:
        return ABCXYZInsight(matrix=matrix, abc_summary=abc_summary, xyz_summary=xyz_summary)

    monthly = df.groupby(['product_code', 'month'])['total'].sum()

    # Stable sort keeps input order for ties
    ranked = spend.sort_values(ascending=False, kind='mergesort')
    cumulative = ranked.cumsum()

    items: List[ABCXYZItem] = []
    for code, total in ranked.items():
        months = monthly.loc[code]
        months = months[months > 0]
        cv = coefficient_of_variation(months.to_numpy())

        cumulative_share = round(float(cumulative[code]) / grand_total * 100, 6)
        abc_class = classify_abc(
            cumulative_share, config.abc_class_a_threshold, config.abc_class_b_threshold
        )
        xyz_class = classify_xyz(
            cv, config.xyz_class_x_threshold, config.xyz_class_y_threshold
        )
        combined = abc_class + xyz_class

        matrix[combined] += 1
        abc_summary[abc_class] += 1
        xyz_summary[xyz_class] += 1

        items.append(ABCXYZItem(
            product_code=str(code),
            product_name=str(names[code]),
            total_spent=float(total),
            spent_share=round_half_up(safe_divide(float(total), grand_total) * 100, 2),
            cumulative_share=round_half_up(cumulative_share, 2),
            abc_class=abc_class,
            cv=round_half_up(cv, 3),
            xyz_class=xyz_class,
            combined=combined,
            month_count=int(len(months)),
        ))

    logger.info(
        f"ABC-XYZ: {len(items)} products, "
        f"A={abc_summary['A']} B={abc_summary['B']} C={abc_summary['C']}"
    )

    return ABCXYZInsight(
        items=items,
        matrix=matrix,
        abc_summary=abc_summary,
        xyz_summary=xyz_summary,
        total_items=len(items),
        total_spent=grand_total,
    )
