"""
Aggregate N simulated cash paths into per-period bands and ending-cash metrics.

Instead of: "you end the year with $12k" (one number, no context)
The owner gets: "median $12k, 5% of futures end below -$3k, 18% of futures
dip under the threshold at least once"

The engine fills the (periods × paths) cash matrix; this module only
summarizes it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import numpy as np
import pandas as pd

from core.schema import BAND_KEYS, BAND_PERCENTILES, METRIC_KEYS

from .metrics import quantile_from_sorted


@dataclass
class AggregateResult:
    """Distribution summary of one run's cash paths."""
    timeline: List[int]                # 1..periods
    bands: Dict[str, np.ndarray]       # p5/p25/p50/p75/p95, each shape (periods,)
    ending_cash: np.ndarray            # shape (path_count,), path order
    p_shortfall_any: float
    p_end_cash_negative: float
    var5: float
    median_end: float
    mean_end: float

    @property
    def n_paths(self) -> int:
        return len(self.ending_cash)

    @property
    def periods(self) -> int:
        return len(self.timeline)

    def metrics(self) -> Dict[str, float]:
        values = (
            self.p_shortfall_any,
            self.p_end_cash_negative,
            self.var5,
            self.median_end,
            self.mean_end,
        )
        return dict(zip(METRIC_KEYS, values))

    def bands_frame(self) -> pd.DataFrame:
        """One row per period: month, p5 ... p95."""
        df = pd.DataFrame({"month": self.timeline})
        for key in BAND_KEYS:
            df[key] = self.bands[key]
        return df

    def to_dict(self) -> Dict:
        return {
            "timeline": list(self.timeline),
            "bands": {k: [float(x) for x in self.bands[k]] for k in BAND_KEYS},
            "endingCash": [float(x) for x in self.ending_cash],
            "metrics": self.metrics(),
        }


def percentile_bands(cash_matrix: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Per-period quantile bands from a (periods, n_paths) matrix.

    Each period row is sorted once, then every band level is interpolated
    from the same sorted row.
    """
    sorted_rows = np.sort(cash_matrix, axis=1)
    return {
        key: np.asarray(quantile_from_sorted(sorted_rows, p / 100.0), dtype=float)
        for key, p in zip(BAND_KEYS, BAND_PERCENTILES)
    }


def aggregate_paths(
    cash_matrix: np.ndarray,
    ending_cash: np.ndarray,
    shortfall_flags: np.ndarray,
) -> AggregateResult:
    """
    Summarize simulated paths.

    Parameters
    ----------
    cash_matrix : np.ndarray
        Shape (periods, n_paths) — balance of every path at every period.
    ending_cash : np.ndarray
        Shape (n_paths,) — final balance per path.
    shortfall_flags : np.ndarray
        Shape (n_paths,) bool — path went below the threshold in some period.

    Returns
    -------
    AggregateResult with bands, P(any-period shortfall), P(ending cash < 0),
    VaR-5 (5th percentile of ending cash), median and mean ending cash.
    """
    periods, n_paths = cash_matrix.shape
    if n_paths == 0:
        raise ValueError("No paths to aggregate.")

    bands = percentile_bands(cash_matrix)

    end_sorted = np.sort(ending_cash)
    return AggregateResult(
        timeline=list(range(1, periods + 1)),
        bands=bands,
        ending_cash=ending_cash,
        p_shortfall_any=int(np.count_nonzero(shortfall_flags)) / n_paths,
        p_end_cash_negative=int(np.count_nonzero(ending_cash < 0)) / n_paths,
        var5=quantile_from_sorted(end_sorted, 0.05),
        median_end=quantile_from_sorted(end_sorted, 0.50),
        mean_end=float(ending_cash.sum() / n_paths),
    )
