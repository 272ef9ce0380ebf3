"""
Weekly engine
=============

The engine is the in-memory session behind the CLI/REPL:

1) Load dataset -> list of WeeklyRecord (immutable, file order)
2) Build the year index once
3) Keep a *current selection* (a year or ALL_YEARS) and the view it produces
4) Export / summarise / report on that view

Selections are kept on undo/redo stacks so the REPL can step back.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import csv
import json
import logging
import math
from .indices import Indices, build_indices
from .models import ALL_YEARS, WeeklyRecord
from .selection import Selection, chart_view, positive_rate

logger = logging.getLogger(__name__)

EXPORT_FIELDS = ["year", "week", "positive_cases", "total_tests", "total_mosquitoes", "positive_rate"]

@dataclass
class ViewState:
    """The active selection and the records it selects (sorted by week)."""
    selection: Selection
    view: List[WeeklyRecord]

@dataclass
class WeeklyEngine:
    """In-memory weekly surveillance session.

    Selecting never touches `records`; it only replaces `state`.
    """
    records: List[WeeklyRecord]
    dataset_path: Optional[str] = None
    # Stores REPL commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)
    idx: Indices = field(init=False)
    state: ViewState = field(init=False)

    _undo: List[Selection] = field(default_factory=list, init=False)
    _redo: List[Selection] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.idx = build_indices(self.records)
        self.state = self._make_state(ALL_YEARS)

    def _make_state(self, selection: Selection) -> ViewState:
        return ViewState(selection=selection, view=chart_view(self.records, selection, idx=self.idx))

    @property
    def years(self) -> List[int]:
        return self.idx.years_sorted

    @property
    def view(self) -> List[WeeklyRecord]:
        return self.state.view

    # ---------------- Selection + history ----------------
    def select(self, selection: Selection) -> List[WeeklyRecord]:
        """Switch to a year (or ALL_YEARS) and return the new view."""
        new_state = self._make_state(selection)
        self._undo.append(self.state.selection)
        self._redo.clear()
        self.state = new_state
        logger.info("selected %s (%d weeks)", selection, len(new_state.view))
        return new_state.view

    def reset(self) -> None:
        self.select(ALL_YEARS)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.state.selection)
        self.state = self._make_state(self._undo.pop())
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.state.selection)
        self.state = self._make_state(self._redo.pop())
        return True

    # ---------------- Output operations ----------------
    def summary(self) -> Dict[str, Any]:
        """Totals over the current view plus its peak weeks."""
        view = self.state.view
        cases = sum(r.positive_cases for r in view)
        tests = sum(r.total_tests for r in view)
        mosquitoes = sum(r.total_mosquitoes for r in view)
        peak_cases = _peak(view, lambda r: r.positive_cases)
        peak_mosq = _peak(view, lambda r: r.total_mosquitoes)
        return {
            "selection": self.state.selection,
            "weeks": len(view),
            "positive_cases": cases,
            "total_tests": tests,
            "total_mosquitoes": mosquitoes,
            "positive_rate": positive_rate(cases, tests),
            "peak_cases_week": peak_cases.week if peak_cases else None,
            "peak_mosquitoes_week": peak_mosq.week if peak_mosq else None,
        }

    def export_csv(self, path: str) -> None:
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(EXPORT_FIELDS)
            for r in self.state.view:
                w.writerow(["" if r.year is None else r.year, r.week, r.positive_cases,
                            r.total_tests, r.total_mosquitoes, r.positive_rate])

    def export_json(self, path: str) -> None:
        """Export the current view to a JSON list (NaN written as null)."""
        payload = [
            {k: (None if isinstance(v, float) and math.isnan(v) else v) for k, v in r.to_dict().items()}
            for r in self.state.view
        ]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

# ---------------- Helpers ----------------
def _peak(view: List[WeeklyRecord], key) -> Optional[WeeklyRecord]:
    candidates = [r for r in view if not math.isnan(float(key(r)))]
    if not candidates:
        return None
    return max(candidates, key=key)
