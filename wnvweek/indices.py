"""
Indices (precomputed lookup tables)
===================================

The chart re-selects a year on every button click, so we build the
year -> row IDs map once after loading.

Example:
- `year_to_ids[2021]` gives the (ascending) row positions of all 2021 weeks.
- `years_sorted` drives the year buttons.

Row IDs are positions in the loaded list, so reading them in ascending order
keeps the file order.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Sequence
import math
from .models import WeeklyRecord

@dataclass
class Indices:
    """Container of precomputed indices for fast year selection."""
    year_to_ids: Dict[int, List[int]]
    years_sorted: List[int]

def _valid_year(y) -> bool:
    return y is not None and not (isinstance(y, float) and math.isnan(y))

def build_indices(records: Sequence[WeeklyRecord]) -> Indices:
    """Build the year index from the loaded dataset.

    Rows whose year is missing/NaN are not indexed (no button can select them).
    """
    year_to_ids: Dict[int, List[int]] = {}
    for i, r in enumerate(records):
        if _valid_year(r.year):
            year_to_ids.setdefault(r.year, []).append(i)
    years_sorted = sorted(year_to_ids.keys())
    return Indices(year_to_ids=year_to_ids, years_sorted=years_sorted)

def year_ids(idx: Indices, year: int) -> List[int]:
    """Return row IDs for one year (empty list for an unknown year)."""
    return list(idx.year_to_ids.get(year, []))
