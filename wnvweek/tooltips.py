"""
Hover map & tooltip content
===========================

Instead of one hover callback per marker, the chart keeps a flat list of
`HoverPoint`s (panel, data index, pixel position, tooltip text). A single
motion listener hit-tests the pointer against this list, so the content a
point would show can be checked without any display.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import math
from .models import WeeklyRecord
from .scales import ChartScales

TOP = "top"
BOTTOM = "bottom"


def _is_nan(v) -> bool:
    return isinstance(v, float) and math.isnan(v)

def format_count(v) -> str:
    """Group thousands, keep up to 3 decimals ("12,345", "1,234.5")."""
    if _is_nan(v):
        return "NaN"
    fv = float(v)
    if math.isinf(fv):
        return "∞" if fv > 0 else "-∞"
    if fv.is_integer():
        return f"{int(fv):,}"
    return f"{fv:,.3f}".rstrip("0").rstrip(".")

def format_plain(v) -> str:
    """Plain number without grouping ("5", "2.5")."""
    if _is_nan(v):
        return "NaN"
    fv = float(v)
    if math.isfinite(fv) and fv.is_integer():
        return str(int(fv))
    return str(fv)

def format_rate(v) -> str:
    return f"{float(v):.2f}%"


@dataclass(frozen=True)
class HoverPoint:
    panel: str
    index: int
    x: float
    y: float
    title: str
    lines: Tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join((self.title,) + self.lines)


def top_lines(r: WeeklyRecord) -> Tuple[str, ...]:
    return (
        f"Positive Cases: {format_plain(r.positive_cases)}",
        f"Total Tests: {format_count(r.total_tests)}",
        f"Positive Rate: {format_rate(r.positive_rate)}",
    )

def bottom_lines(r: WeeklyRecord) -> Tuple[str, ...]:
    return (
        f"Total Mosquitoes: {format_count(r.total_mosquitoes)}",
        f"Tests Conducted: {format_count(r.total_tests)}",
        f"Positive Cases: {format_plain(r.positive_cases)}",
    )

def build_hover_map(records: Sequence[WeeklyRecord], scales: ChartScales) -> List[HoverPoint]:
    """One hover point per record per panel, in draw order (top panel first)."""
    points: List[HoverPoint] = []
    for i, r in enumerate(records):
        points.append(HoverPoint(
            panel=TOP, index=i,
            x=scales.x(r.week), y=scales.top(r.positive_cases),
            title=f"Week {format_plain(r.week)}", lines=top_lines(r),
        ))
    for i, r in enumerate(records):
        points.append(HoverPoint(
            panel=BOTTOM, index=i,
            x=scales.x(r.week), y=scales.bottom(r.total_mosquitoes),
            title=f"Week {format_plain(r.week)}", lines=bottom_lines(r),
        ))
    return points

def hit_test(points: Sequence[HoverPoint], x: float, y: float, radius: float) -> Optional[HoverPoint]:
    """Nearest point within `radius` of (x, y), or None."""
    best: Optional[HoverPoint] = None
    best_d = radius
    for p in points:
        d = math.hypot(p.x - x, p.y - y)
        # NaN distances compare False and are skipped
        if d <= best_d and (best is None or d < best_d):
            best, best_d = p, d
    return best
