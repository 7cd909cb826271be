from __future__ import annotations

from typing import Tuple

# Percentile levels reported for the per-period cash bands, in order.
BAND_PERCENTILES: Tuple[int, ...] = (5, 25, 50, 75, 95)
BAND_KEYS: Tuple[str, ...] = tuple(f"p{p}" for p in BAND_PERCENTILES)

# Scalar KPIs on the ending-cash distribution.
METRIC_KEYS: Tuple[str, ...] = (
    "pShortfallAny",
    "pEndCashNeg",
    "var5",
    "medianEnd",
    "meanEnd",
)