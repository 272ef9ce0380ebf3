"""
Selection & aggregation
=======================

`select_year` turns the full record list into the dataset one chart pass
draws:

- a concrete year -> the rows of that year, unchanged, in file order;
- `ALL_YEARS`     -> one synthetic record per week, summed over all years,
  with the positive rate recomputed from the sums.

The renderer connects points in list order, so it always draws
`chart_view(...)`, which is the selection sorted ascending by week.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Union
import logging
import math
from .models import ALL_YEARS, WeeklyRecord
from .indices import Indices, build_indices, year_ids

logger = logging.getLogger(__name__)

Selection = Union[int, str]

# Shared key for rows whose week is NaN, so they collapse into one group
_NAN_WEEK = float("nan")

def _is_nan_week(week) -> bool:
    return isinstance(week, float) and math.isnan(week)

def _week_key(r: WeeklyRecord):
    """Sort key: numeric weeks ascending, NaN weeks last."""
    if _is_nan_week(r.week):
        return (1, 0)
    return (0, r.week)

def positive_rate(cases: float, tests: float) -> float:
    """Percentage of positive tests; 0 when there were no tests (never NaN)."""
    rate = cases / tests * 100 if tests else 0.0
    if isinstance(rate, float) and math.isnan(rate):
        return 0.0
    return float(rate)

def aggregate_by_week(records: Sequence[WeeklyRecord]) -> List[WeeklyRecord]:
    """Collapse all years into one record per week (sorted by week)."""
    sums: Dict[object, List[float]] = {}
    for r in records:
        week = _NAN_WEEK if _is_nan_week(r.week) else r.week
        entry = sums.setdefault(week, [0, 0, 0])
        entry[0] += r.positive_cases
        entry[1] += r.total_tests
        entry[2] += r.total_mosquitoes
    out = [
        WeeklyRecord(
            year=None,
            week=week,
            positive_cases=cases,
            total_tests=tests,
            total_mosquitoes=mosquitoes,
            positive_rate=positive_rate(cases, tests),
        )
        for week, (cases, tests, mosquitoes) in sums.items()
    ]
    return sort_by_week(out)

def sort_by_week(records: Sequence[WeeklyRecord]) -> List[WeeklyRecord]:
    """Stable ascending sort by week number (NaN weeks at the end)."""
    return sorted(records, key=_week_key)

def select_year(
    records: Sequence[WeeklyRecord],
    selection: Selection,
    idx: Optional[Indices] = None,
) -> List[WeeklyRecord]:
    """Filter to one year, or aggregate every year when `selection` is ALL_YEARS.

    Passing a prebuilt `idx` avoids rescanning the records for each click.
    """
    if isinstance(selection, str):
        if selection.lower() != ALL_YEARS:
            raise ValueError(f"selection must be a year or '{ALL_YEARS}', got {selection!r}")
        out = aggregate_by_week(records)
        logger.debug("aggregated %d records into %d weeks", len(records), len(out))
        return out
    if idx is None:
        idx = build_indices(records)
    out = [records[i] for i in year_ids(idx, selection)]
    logger.debug("selected %d records for year %s", len(out), selection)
    return out

def chart_view(
    records: Sequence[WeeklyRecord],
    selection: Selection,
    idx: Optional[Indices] = None,
) -> List[WeeklyRecord]:
    """The selection in the order the chart draws it (ascending week)."""
    return sort_by_week(select_year(records, selection, idx=idx))

def available_years(records: Sequence[WeeklyRecord]) -> List[int]:
    """Distinct years present in the data, ascending."""
    return build_indices(records).years_sorted

def parse_selection(text: str) -> Selection:
    """Parse a CLI/REPL selection ("all" or a year number)."""
    t = str(text).strip()
    if t.lower() == ALL_YEARS:
        return ALL_YEARS
    try:
        return int(t)
    except ValueError:
        raise ValueError(f"selection must be a year or '{ALL_YEARS}', got {text!r}") from None
