"""
Data model (WeeklyRecord)
=========================

Each row of the weekly surveillance CSV is converted into a `WeeklyRecord`.
Records are immutable (`frozen=True`): selecting a year or aggregating all
years builds new lists (and, for aggregation, new synthetic records) instead
of editing what was loaded.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Union

Number = Union[int, float]

# Selection sentinel for the "all years" aggregated view.
ALL_YEARS = "all"

@dataclass(frozen=True)
class WeeklyRecord:
    """One observation for a (year, week) pair.

    `year` is None for synthetic all-years records built by aggregation.
    Cells that were not numeric in the source are NaN.
    """
    year: Optional[Number]
    week: Number
    positive_cases: Number
    total_tests: Number
    total_mosquitoes: Number
    positive_rate: float

    def to_dict(self) -> dict:
        return asdict(self)
