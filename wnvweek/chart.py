"""
Two-panel weekly chart
======================

`ChartCanvas` is the render target: one matplotlib figure holding

- a strip of year buttons ("All Years" + one per year),
- the top panel (WNV-positive cases) and bottom panel (total mosquitoes),
  separated by a dashed divider at the midline,
- one shared tooltip.

`render(records, selection)` always clears both panels and rebuilds them from
the selected view; nothing is updated incrementally. Hover uses a single
motion listener that hit-tests against the hover map built by
`tooltips.build_hover_map`.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import to_rgba
from matplotlib.lines import Line2D
from matplotlib.ticker import FuncFormatter, MaxNLocator
from matplotlib.widgets import Button

from .config import ChartConfig
from .curves import monotone_curve
from .indices import Indices, build_indices
from .models import ALL_YEARS, WeeklyRecord
from .scales import ChartLayout, ChartScales, LinearScale, build_scales
from .selection import Selection, chart_view
from .tooltips import BOTTOM, TOP, HoverPoint, build_hover_map, format_count, hit_test

logger = logging.getLogger(__name__)


class ChartCanvas:
    """Render target for the weekly surveillance chart."""

    def __init__(self, config: Optional[ChartConfig] = None) -> None:
        self.config = config or ChartConfig()
        self.layout = ChartLayout.from_config(self.config)
        cfg = self.config
        self.figure = plt.figure(figsize=(cfg.width / cfg.dpi, cfg.canvas_height / cfg.dpi), dpi=cfg.dpi)
        self.ax_top = self.figure.add_axes(self._panel_rect(self.layout.top_range))
        self.ax_bottom = self.figure.add_axes(self._panel_rect(self.layout.bottom_range))
        self.tooltip = self.figure.text(
            0, 0, "", visible=False, fontsize=9, va="top", ha="left", zorder=10,
            bbox=dict(boxstyle="round,pad=0.5", facecolor="white", edgecolor="#adb5bd", alpha=0.95),
        )

        self.source: List[WeeklyRecord] = []
        self.idx: Optional[Indices] = None
        self.view: List[WeeklyRecord] = []
        self.selection: Selection = ALL_YEARS
        self.scales: Optional[ChartScales] = None
        self.hover_points: List[HoverPoint] = []
        self.hovered: Optional[HoverPoint] = None
        self.buttons: Dict[Selection, Button] = {}

        self._markers: Dict[str, object] = {}
        self._marker_colors: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}
        # Figure-level artists (divider, error text) removed on every redraw
        self._decor: List[object] = []

        self.figure.canvas.mpl_connect("motion_notify_event", self._on_motion)
        self.figure.canvas.mpl_connect("figure_leave_event", self._on_leave)

    # ---------------- Geometry ----------------
    def _panel_rect(self, pixel_range: Tuple[float, float]) -> List[float]:
        """Figure-fraction rect [left, bottom, width, height] for a panel."""
        cfg = self.config
        top_px = cfg.controls_height + cfg.margin.top + min(pixel_range)
        bottom_px = cfg.controls_height + cfg.margin.top + max(pixel_range)
        return [
            cfg.margin.left / cfg.width,
            1 - bottom_px / cfg.canvas_height,
            cfg.inner_width / cfg.width,
            (bottom_px - top_px) / cfg.canvas_height,
        ]

    def _to_figure_fraction(self, x: float, y: float) -> Tuple[float, float]:
        """Inner-plot pixel coordinates -> figure fraction."""
        cfg = self.config
        return (
            (cfg.margin.left + x) / cfg.width,
            1 - (cfg.controls_height + cfg.margin.top + y) / cfg.canvas_height,
        )

    def _to_inner(self, display_x: float, display_y: float) -> Tuple[float, float]:
        """Matplotlib display pixels (origin bottom-left) -> inner-plot pixels."""
        cfg = self.config
        scale = self.figure.bbox.width / cfg.width
        x = display_x / scale - cfg.margin.left
        y = cfg.canvas_height - display_y / scale - cfg.controls_height - cfg.margin.top
        return x, y

    # ---------------- Controls ----------------
    def attach_controls(self, years: Sequence[int]) -> None:
        """Create the "All Years" button plus one button per year."""
        cfg = self.config
        for btn in self.buttons.values():
            btn.ax.remove()
        self.buttons = {}
        w, h, gap = 80, 30, 10
        y = 1 - (cfg.controls_height + h) / 2 / cfg.canvas_height
        choices: List[Selection] = [ALL_YEARS] + list(years)
        for i, sel in enumerate(choices):
            x = (cfg.margin.left + i * (w + gap)) / cfg.width
            ax = self.figure.add_axes([x, y, w / cfg.width, h / cfg.canvas_height])
            label = "All Years" if sel == ALL_YEARS else str(sel)
            btn = Button(ax, label, color=cfg.button_color, hovercolor="#dee2e6")
            btn.on_clicked(lambda _event, sel=sel: self.select(sel))
            self.buttons[sel] = btn
        self._mark_active()

    def _mark_active(self) -> None:
        cfg = self.config
        for sel, btn in self.buttons.items():
            color = cfg.button_active_color if sel == self.selection else cfg.button_color
            btn.color = color
            btn.ax.set_facecolor(color)

    def select(self, selection: Selection) -> List[WeeklyRecord]:
        """Button handler: switch the active selection and redraw."""
        logger.info("selection changed to %s", selection)
        return self.render(self.source, selection)

    # ---------------- Rendering ----------------
    def _clear(self) -> None:
        self._unhover(redraw=False)
        for artist in self._decor:
            artist.remove()
        self._decor = []
        for ax in (self.ax_top, self.ax_bottom):
            ax.clear()
            ax.set_visible(True)
        for btn in self.buttons.values():
            btn.ax.set_visible(True)
        self._markers = {}
        self._marker_colors = {}
        self.hover_points = []

    def render(self, records: Sequence[WeeklyRecord], selection: Selection) -> List[WeeklyRecord]:
        """Clear and redraw both panels for `selection` over `records`.

        Returns the view that was drawn (sorted by week).
        """
        if records is not self.source:
            self.source = list(records)
            self.idx = build_indices(self.source)
        cfg = self.config
        self.selection = selection
        self.view = chart_view(self.source, selection, idx=self.idx)
        self._clear()
        self.scales = build_scales(self.view, self.layout, cfg.x_domain, cfg.headroom)

        divider = Line2D(
            [cfg.margin.left / cfg.width, (cfg.margin.left + cfg.inner_width) / cfg.width],
            [self._to_figure_fraction(0, self.layout.midline)[1]] * 2,
            transform=self.figure.transFigure, color="#868e96", linewidth=1, linestyle="--",
        )
        self.figure.add_artist(divider)
        self._decor.append(divider)

        self._draw_panel(
            self.ax_top, TOP, [r.positive_cases for r in self.view], self.scales.top,
            cfg.top_fill, cfg.top_stroke, cfg.top_title, cfg.top_y_label,
        )
        self._draw_panel(
            self.ax_bottom, BOTTOM, [r.total_mosquitoes for r in self.view], self.scales.bottom,
            cfg.bottom_fill, cfg.bottom_stroke, cfg.bottom_title, cfg.bottom_y_label,
        )
        self.hover_points = build_hover_map(self.view, self.scales)
        self._mark_active()
        logger.debug("rendered %d weekly points for %s", len(self.view), selection)
        self.figure.canvas.draw_idle()
        return self.view

    def _draw_panel(
        self, ax, panel: str, values: List[float], yscale: LinearScale,
        fill: str, stroke: str, title: str, ylabel: str,
    ) -> None:
        cfg = self.config
        weeks = [r.week for r in self.view]
        xs, ys = monotone_curve(weeks, values, cfg.curve_samples)
        if len(xs):
            ax.fill_between(xs, 0, ys, color=fill, alpha=cfg.area_alpha, linewidth=0)
            ax.plot(xs, ys, color=stroke, linewidth=2)

        ax.set_xlim(*self.scales.x.domain)
        ax.set_ylim(*yscale.domain)
        ax.xaxis.set_major_locator(MaxNLocator(nbins=cfg.x_ticks, steps=[1, 2, 5, 10], integer=True))
        ax.yaxis.set_major_locator(MaxNLocator(nbins=cfg.y_ticks))
        ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _pos: format_count(v)))
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.set_title(title, fontsize=16)
        ax.set_xlabel(cfg.x_label)
        ax.set_ylabel(ylabel)

        if weeks:
            size = (2 * cfg.marker_radius * 72 / cfg.dpi) ** 2
            # Per-point RGBA so single markers can be shown; all start transparent
            face = np.tile(to_rgba(stroke), (len(weeks), 1))
            edge = np.tile(to_rgba("white"), (len(weeks), 1))
            face[:, 3] = 0.0
            edge[:, 3] = 0.0
            self._markers[panel] = ax.scatter(
                weeks, values, s=size, facecolors=face, edgecolors=edge, linewidths=2, zorder=5,
            )
            self._marker_colors[panel] = (face, edge)

    # ---------------- Hover ----------------
    def hover_at(self, x: float, y: float) -> Optional[HoverPoint]:
        """Show the marker/tooltip nearest to inner-plot pixel (x, y), if any."""
        point = hit_test(self.hover_points, x, y, self.config.hit_radius)
        if point is None:
            self._unhover()
            return None
        if point == self.hovered:
            return point
        self._unhover(redraw=False)
        self._set_marker_alpha(point, 1.0)
        self.tooltip.set_text(point.text)
        self.tooltip.set_position(self._to_figure_fraction(x + 15, y - 15))
        self.tooltip.set_visible(True)
        self.hovered = point
        self.figure.canvas.draw_idle()
        return point

    def _set_marker_alpha(self, point: HoverPoint, value: float) -> None:
        colors = self._marker_colors.get(point.panel)
        if colors is None:
            return
        face, edge = colors
        face[point.index, 3] = value
        edge[point.index, 3] = value
        markers = self._markers[point.panel]
        markers.set_facecolor(face)
        markers.set_edgecolor(edge)

    def marker_opacity(self, panel: str, index: int) -> float:
        """Current opacity of one hover marker (0 hidden, 1 shown)."""
        return float(self._marker_colors[panel][0][index, 3])

    def _unhover(self, redraw: bool = True) -> None:
        if self.hovered is None:
            return
        self._set_marker_alpha(self.hovered, 0.0)
        self.tooltip.set_visible(False)
        self.hovered = None
        if redraw:
            self.figure.canvas.draw_idle()

    def _on_motion(self, event) -> None:
        if event.x is None or event.y is None:
            self._unhover()
            return
        self.hover_at(*self._to_inner(event.x, event.y))

    def _on_leave(self, _event) -> None:
        self._unhover()

    # ---------------- Error panel / output ----------------
    def render_error(self, filename: str, error: object) -> None:
        """Replace the chart with a plain-text load error panel."""
        self._clear()
        for ax in (self.ax_top, self.ax_bottom):
            ax.set_visible(False)
        for btn in self.buttons.values():
            btn.ax.set_visible(False)
        self.view = []
        self.scales = None
        lines = [
            ("Error Loading Data", dict(fontsize=16, fontweight="bold", color="red")),
            (f"Could not find '{filename}'", dict(fontsize=12, color="red")),
            ("Make sure the CSV file exists and is readable.", dict(fontsize=12, color="red")),
            (f"Error: {error}", dict(fontsize=9, color="#666666")),
        ]
        for i, (text, style) in enumerate(lines):
            artist = self.figure.text(0.5, 0.6 - i * 0.06, text, ha="center", va="center", **style)
            self._decor.append(artist)
        self.figure.canvas.draw_idle()

    def save(self, path: str) -> str:
        """Write the current figure (PNG/SVG/PDF by extension)."""
        self.figure.savefig(path, dpi=self.config.dpi)
        return path

    def show(self) -> None:
        plt.show()

    def close(self) -> None:
        plt.close(self.figure)


def render_chart(
    records: Sequence[WeeklyRecord],
    selection: Selection = ALL_YEARS,
    config: Optional[ChartConfig] = None,
    with_controls: bool = True,
) -> ChartCanvas:
    """Build a canvas, attach the year buttons and draw the first view."""
    canvas = ChartCanvas(config)
    canvas.source = list(records)
    canvas.idx = build_indices(canvas.source)
    canvas.selection = selection
    if with_controls:
        canvas.attach_controls(canvas.idx.years_sorted)
    canvas.render(canvas.source, selection)
    return canvas
