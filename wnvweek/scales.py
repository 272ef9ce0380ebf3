"""
Scale derivation
================

Two stacked panels share one horizontal scale and split the vertical space:

    y = 0 ............ top panel (positive cases), range [mid - gap, 0]
    y = mid .......... divider
    y = height ....... bottom panel (mosquitoes), range [height, mid + gap]

Pixel coordinates are relative to the inner plot area (margins removed), with
y growing downwards, so larger values map to smaller pixel y in both panels.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple
import math
from .config import ChartConfig
from .models import WeeklyRecord

Domain = Tuple[float, float]

# Domain used when there is no usable maximum (empty view, all NaN, all zero)
FALLBACK_DOMAIN: Domain = (0.0, 1.0)


@dataclass(frozen=True)
class LinearScale:
    """Continuous linear map from `domain` onto `range`."""
    domain: Domain
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return (d0 + d1) / 2
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)


def domain_max(values: Iterable[float], headroom: float = 1.15) -> Domain:
    """Return `(0, max * headroom)`, ignoring NaN.

    Falls back to FALLBACK_DOMAIN when nothing is left to take a max of, or
    the max is not positive.
    """
    finite = [float(v) for v in values if not math.isnan(float(v))]
    if not finite:
        return FALLBACK_DOMAIN
    top = max(finite) * headroom
    if not top > 0 or math.isinf(top):
        return FALLBACK_DOMAIN
    return (0.0, top)


@dataclass(frozen=True)
class ChartLayout:
    """Inner plot geometry derived from a ChartConfig."""
    width: float
    height: float
    panel_gap: float

    @classmethod
    def from_config(cls, config: ChartConfig) -> "ChartLayout":
        return cls(width=config.inner_width, height=config.inner_height, panel_gap=config.panel_gap)

    @property
    def midline(self) -> float:
        return self.height / 2

    @property
    def top_range(self) -> Tuple[float, float]:
        return (self.midline - self.panel_gap, 0.0)

    @property
    def bottom_range(self) -> Tuple[float, float]:
        return (self.height, self.midline + self.panel_gap)


@dataclass(frozen=True)
class ChartScales:
    x: LinearScale
    top: LinearScale
    bottom: LinearScale


def build_scales(
    records: Sequence[WeeklyRecord],
    layout: ChartLayout,
    x_domain: Domain = (1, 52),
    headroom: float = 1.15,
) -> ChartScales:
    """Derive the shared x scale and both panel y scales for one view."""
    x = LinearScale(domain=(float(x_domain[0]), float(x_domain[1])), range=(0.0, layout.width))
    top = LinearScale(
        domain=domain_max((r.positive_cases for r in records), headroom),
        range=layout.top_range,
    )
    bottom = LinearScale(
        domain=domain_max((r.total_mosquitoes for r in records), headroom),
        range=layout.bottom_range,
    )
    return ChartScales(x=x, top=top, bottom=bottom)
