"""
Order-statistic helpers shared by the aggregator and the report.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple, Union

import numpy as np

ArrayLike = Union[np.ndarray, Iterable[float]]


def quantile_from_sorted(sorted_values: ArrayLike, q: float) -> Union[float, np.ndarray]:
    """
    Linear-interpolated quantile of values already sorted ascending.

    position = (n - 1) * q, interpolated between the floor rank and the next
    rank. A 2-D input is treated row-wise (sorted along the last axis) and
    yields one quantile per row.

    q=0 returns the first element, q=1 the last, an empty input NaN.
    """
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"Quantile level must be in [0, 1], got {q!r}.")

    arr = np.asarray(sorted_values, dtype=float)
    n = arr.shape[-1] if arr.ndim > 0 else 0
    if n == 0:
        return float("nan") if arr.ndim <= 1 else np.full(arr.shape[:-1], np.nan)

    pos = (n - 1) * q
    base = int(math.floor(pos))
    rest = pos - base
    lower = arr[..., base]
    if base + 1 < n:
        out = lower + rest * (arr[..., base + 1] - lower)
    else:
        out = lower
    return float(out) if arr.ndim == 1 else out


def quantiles_from_sorted(sorted_values: ArrayLike, percentiles: Iterable[float]) -> list:
    """quantile_from_sorted for each percentile (given in 0-100)."""
    return [quantile_from_sorted(sorted_values, p / 100.0) for p in percentiles]


def histogram(values: ArrayLike, bins: int = 40) -> Tuple[np.ndarray, np.ndarray]:
    """
    Equal-width histogram over [min, max] → (bin_centers, counts).

    A zero-width range (all values equal) uses a unit divisor so every value
    lands in the first bin.
    """
    v = np.asarray(values, dtype=float)
    if v.size == 0:
        return np.array([]), np.array([], dtype=int)

    lo, hi = float(v.min()), float(v.max())
    edges = np.linspace(lo, hi, bins + 1)
    width = (hi - lo) or 1.0
    idx = np.floor((v - lo) / width * bins).astype(int)
    idx = np.clip(idx, 0, bins - 1)
    counts = np.bincount(idx, minlength=bins)
    centers = (edges[:-1] + edges[1:]) / 2.0
    return centers, counts
