"""
Monotone curves
===============

Area and line marks pass through every weekly point along a monotone cubic
(PCHIP). Unlike a plain cubic spline it never overshoots between samples, so
a week with zero cases is never drawn below zero.
"""

from __future__ import annotations
from typing import Sequence, Tuple
import numpy as np
from scipy.interpolate import PchipInterpolator


def monotone_curve(
    xs: Sequence[float],
    ys: Sequence[float],
    samples: int = 16,
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample a monotone curve through (xs, ys).

    `samples` points are generated per segment. With fewer than two points,
    non-finite values or x not strictly increasing, the raw points are
    returned unchanged (straight segments).
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if len(x) < 2 or not np.all(np.isfinite(x)) or not np.all(np.isfinite(y)):
        return x, y
    if np.any(np.diff(x) <= 0):
        return x, y
    dense = np.concatenate([
        np.linspace(x[i], x[i + 1], samples, endpoint=False) for i in range(len(x) - 1)
    ] + [x[-1:]])
    return dense, PchipInterpolator(x, y)(dense)
