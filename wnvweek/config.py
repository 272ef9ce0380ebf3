"""
Chart configuration
===================

All layout numbers are in nominal drawing units (1 unit = 1 pixel at the
default 100 dpi). The defaults give the nominal 1100 x 700 chart with
40/80/80/80 (top/right/bottom/left) margins; the year buttons sit in an extra
strip above it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Margin:
    top: int = 40
    right: int = 80
    bottom: int = 80
    left: int = 80


@dataclass
class ChartConfig:
    """High-level knobs for the two-panel weekly chart."""
    width: int = 1100
    height: int = 700
    margin: Margin = field(default_factory=Margin)
    # Height of the button strip above the chart
    controls_height: int = 50
    dpi: int = 100

    # Gap between each panel and the midline divider
    panel_gap: int = 50
    # Y headroom so peaks are not clipped
    headroom: float = 1.15
    x_domain: Tuple[float, float] = (1, 52)
    x_ticks: int = 12
    y_ticks: int = 6
    # Curve samples between two weekly points
    curve_samples: int = 16

    marker_radius: float = 5.0
    hit_radius: float = 8.0

    top_title: str = "WNV-Positive Mosquito Cases (Weekly)"
    bottom_title: str = "Total Mosquito Abundance (Weekly)"
    x_label: str = "Week of Year"
    top_y_label: str = "WNV-Positive Cases"
    bottom_y_label: str = "Total Mosquitoes"

    top_fill: str = "#ff6b6b"
    top_stroke: str = "#c92a2a"
    bottom_fill: str = "#4dabf7"
    bottom_stroke: str = "#1971c2"
    area_alpha: float = 0.3
    button_color: str = "#f1f3f5"
    button_active_color: str = "#4dabf7"

    @property
    def inner_width(self) -> float:
        return self.width - self.margin.left - self.margin.right

    @property
    def inner_height(self) -> float:
        return self.height - self.margin.top - self.margin.bottom

    @property
    def canvas_height(self) -> float:
        return self.height + self.controls_height
