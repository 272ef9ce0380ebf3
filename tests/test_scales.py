"""Unit tests for scale and layout derivation."""

from __future__ import annotations

import pytest

from wnvweek.config import ChartConfig
from wnvweek.scales import FALLBACK_DOMAIN, ChartLayout, LinearScale, build_scales, domain_max

pytestmark = pytest.mark.unit


def test_layout_matches_nominal_chart() -> None:
    layout = ChartLayout.from_config(ChartConfig())

    assert layout.width == 940
    assert layout.height == 580
    assert layout.midline == 290
    assert layout.top_range == (240, 0.0)
    assert layout.bottom_range == (580, 340)


def test_linear_scale_maps_and_inverts() -> None:
    scale = LinearScale(domain=(1, 52), range=(0, 940))

    assert scale(1) == 0
    assert scale(52) == pytest.approx(940)
    assert scale.invert(scale(26)) == pytest.approx(26)


def test_degenerate_domain_maps_to_range_midpoint() -> None:
    assert LinearScale(domain=(3, 3), range=(0, 100))(3) == 50


def test_domain_max_adds_headroom() -> None:
    assert domain_max([10, 40, 20]) == pytest.approx((0.0, 46.0))


def test_domain_max_empty_falls_back() -> None:
    assert domain_max([]) == FALLBACK_DOMAIN == (0.0, 1.0)


def test_domain_max_ignores_nan() -> None:
    assert domain_max([float("nan"), 10]) == pytest.approx((0.0, 11.5))
    assert domain_max([float("nan")]) == FALLBACK_DOMAIN


def test_domain_max_all_zero_falls_back() -> None:
    assert domain_max([0, 0]) == FALLBACK_DOMAIN


def test_build_scales_panels(records) -> None:
    layout = ChartLayout.from_config(ChartConfig())

    scales = build_scales(records, layout)

    assert scales.x.domain == (1.0, 52.0)
    assert scales.top.domain == pytest.approx((0.0, 4 * 1.15))
    assert scales.bottom.domain == pytest.approx((0.0, 1200 * 1.15))
    # zero sits on each panel's baseline, larger values are higher on screen
    assert scales.top(0) == 240
    assert scales.bottom(0) == 580
    assert scales.top(4) < scales.top(1)
    assert scales.bottom(1200) < scales.bottom(100)
    assert scales.bottom(1200) > layout.midline


def test_build_scales_empty_view_uses_fallback() -> None:
    scales = build_scales([], ChartLayout.from_config(ChartConfig()))

    assert scales.top.domain == FALLBACK_DOMAIN
    assert scales.bottom.domain == FALLBACK_DOMAIN
