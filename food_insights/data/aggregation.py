# food_insights/data/aggregation.py

"""
Demand / Period Aggregation

Shared grouping helpers used by every analysis:
- period keys (day, ISO week starting Monday, YYYY-MM)
- per-period (and per-product) sums, kept at full precision
- per-key pandas aggregations (sums, first name, latest date)
- zero-filled daily series for variability statistics

Sums never get zero rows inserted. Only the daily series used for
standard deviations is reindexed over the full calendar span, so that days
without purchases count as zero demand.
"""

import math
import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel

logger = logging.getLogger(__name__)

GRANULARITIES = ('day', 'week', 'month')


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves up (toward +inf), the way the dashboards display figures."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or `default` when the denominator is 0."""
    if not denominator:
        return default
    return numerator / denominator


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def parse_date(value: str) -> date:
    return date.fromisoformat(str(value)[:10])


def period_key(value: str, granularity: str = 'day') -> str:
    """
    Map an ISO date to its period key.

    Args:
        value: 'YYYY-MM-DD' date string
        granularity: 'day', 'week' (Monday of the ISO week) or 'month'

    Returns:
        'YYYY-MM-DD' for day/week, 'YYYY-MM' for month
    """
    if granularity == 'day':
        return parse_date(value).isoformat()
    if granularity == 'week':
        d = parse_date(value)
        return (d - timedelta(days=d.weekday())).isoformat()
    if granularity == 'month':
        return str(value)[:7]
    raise ValueError(f"Unknown granularity: {granularity}")


def week_label(week_start: str) -> str:
    """'MM/DD~MM/DD' for the Monday-to-Sunday week starting at week_start."""
    monday = parse_date(week_start)
    sunday = monday + timedelta(days=6)
    return f"{monday:%m/%d}~{sunday:%m/%d}"


def calendar_days(first: str, last: str) -> int:
    """Inclusive number of days between two dates (minimum 1)."""
    span = (parse_date(last) - parse_date(first)).days + 1
    return max(1, span)


def records_to_frame(
    records: Sequence[BaseModel],
    columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """Turn a list of records into a DataFrame (empty frame keeps columns)."""
    if not records:
        if columns is None:
            return pd.DataFrame()
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([r.model_dump() for r in records])


def aggregate_by_period(
    records: Sequence[BaseModel],
    value_field: str,
    granularity: str = 'day',
    key_field: Optional[str] = None
) -> Dict[Union[str, Tuple[str, str]], float]:
    """
    Sum a numeric field per period (optionally per period and key).

    Args:
        records: Records carrying a `date` attribute
        value_field: Field to sum (e.g. 'quantity', 'total')
        granularity: 'day', 'week' or 'month'
        key_field: Optional grouping field (e.g. 'product_code')

    Returns:
        {period: sum} or {(key, period): sum}, unrounded
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity}")

    sums: Dict[Union[str, Tuple[str, str]], float] = {}
    for record in records:
        period = period_key(record.date, granularity)
        group = period if key_field is None else (getattr(record, key_field), period)
        sums[group] = sums.get(group, 0.0) + float(getattr(record, value_field))
    return sums


def aggregate_by_key(
    records: Sequence[BaseModel],
    key_field: str,
    drop_empty_keys: bool = True,
    **aggregations: Tuple[str, str]
) -> Dict[str, Dict[str, Any]]:
    """
    Group records by a key and aggregate columns with pandas.

    Args:
        records: Records to group
        key_field: Grouping field (e.g. 'product_code')
        drop_empty_keys: Skip records whose key is empty
        **aggregations: Named aggregations, e.g. qty=('quantity', 'sum'),
            name=('product_name', 'first')

    Returns:
        {key: {name: value}} in first-seen key order, native Python values
    """
    if not records:
        return {}

    frame = records_to_frame(records)
    if drop_empty_keys:
        frame = frame[frame[key_field].astype(bool)]
    if frame.empty:
        return {}

    grouped = frame.groupby(key_field, sort=False).agg(**aggregations)
    return grouped.to_dict('index')


def zero_filled_daily_series(qty_by_date: Dict[str, float]) -> pd.Series:
    """
    Daily series from the first to the last date, with 0 on missing days.

    Args:
        qty_by_date: {YYYY-MM-DD: quantity}

    Returns:
        pd.Series indexed by every calendar day of the span
    """
    if not qty_by_date:
        return pd.Series(dtype=float)

    series = pd.Series(qty_by_date, dtype=float)
    series.index = pd.to_datetime(series.index)
    series = series.groupby(level=0).sum().sort_index()

    full_range = pd.date_range(series.index.min(), series.index.max(), freq='D')
    return series.reindex(full_range, fill_value=0.0)


def population_std(values: Iterable[float]) -> float:
    """Population standard deviation (ddof=0), 0 for empty input."""
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.std(arr, ddof=0))


def date_range_of(records: Sequence[BaseModel]) -> Tuple[Optional[str], Optional[str]]:
    """(first, last) ISO date over the records, or (None, None) if empty."""
    if not records:
        return None, None
    dates = sorted(period_key(r.date, 'day') for r in records)
    return dates[0], dates[-1]
