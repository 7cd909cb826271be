"""
Risk report — KPIs, flags and a display table for one simulation result.

Translates the distribution summary into answers an owner can act on:
  Q1: "How likely am I to run short?"       → P(cash < threshold in any month)
  Q2: "How bad is a bad year?"              → VaR-5 of ending cash
  Q3: "How wide is the range of outcomes?"  → P95 - P05 of ending cash
  Q4: "What should I watch most closely?"   → largest tornado swing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import numpy as np
import pandas as pd

from .metrics import quantile_from_sorted

if TYPE_CHECKING:
    from engine.runner import SimulationResult

HIGH_SHORTFALL_PROBABILITY = 0.20


def fmt_pct(v: float) -> str:
    return f"{v * 100:.1f}%"


def fmt_money(v: float) -> str:
    sign = "" if v >= 0 else "-"
    return f"{sign}${abs(v):,.0f}"


@dataclass
class RiskReport:
    """Structured summary of one run."""
    n_paths: int
    periods: int
    seed: int

    p_shortfall_any: float
    p_end_cash_negative: float
    var5: float
    median_end: float
    mean_end: float
    p95_end: float
    end_spread_5_95: float

    # first month the median path is below the threshold, if any
    median_breach_month: Optional[int]

    top_driver: Optional[str]
    top_driver_swing: float

    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Paths", "Value": f"{self.n_paths:,}"},
            {"Metric": "Months", "Value": str(self.periods)},
            {"Metric": "Seed", "Value": str(self.seed)},
            {"Metric": "P(Shortfall, any month)", "Value": fmt_pct(self.p_shortfall_any)},
            {"Metric": "P(Ending Cash < 0)", "Value": fmt_pct(self.p_end_cash_negative)},
            {"Metric": "VaR-5 Ending Cash", "Value": fmt_money(self.var5)},
            {"Metric": "Median Ending Cash", "Value": fmt_money(self.median_end)},
            {"Metric": "Mean Ending Cash", "Value": fmt_money(self.mean_end)},
            {"Metric": "95th Pctl Ending Cash", "Value": fmt_money(self.p95_end)},
            {"Metric": "Ending Cash Spread (P05-P95)", "Value": fmt_money(self.end_spread_5_95)},
        ]
        if self.top_driver is not None:
            rows.append({
                "Metric": "Top Sensitivity Driver",
                "Value": f"{self.top_driver} (±{self.top_driver_swing * 100:.1f} pp)",
            })
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags)})
        return pd.DataFrame(rows)


def generate_risk_report(result: "SimulationResult") -> RiskReport:
    """Build a RiskReport from a finished SimulationResult."""
    agg = result.aggregate
    threshold = result.parameters.shortfall_threshold

    end_sorted = np.sort(agg.ending_cash)
    p95_end = quantile_from_sorted(end_sorted, 0.95)

    median_band = np.asarray(agg.bands["p50"])
    breaches = np.flatnonzero(median_band < threshold)
    median_breach_month = int(agg.timeline[breaches[0]]) if breaches.size else None

    ranked = result.tornado.sorted_items()
    top = ranked[0] if ranked else None

    flags = []
    if agg.p_shortfall_any > HIGH_SHORTFALL_PROBABILITY:
        flags.append(
            f"HIGH_SHORTFALL_RISK: {agg.p_shortfall_any:.0%} of paths dip below the threshold"
        )
    if agg.var5 < 0:
        flags.append("NEGATIVE_VAR: 5th pctl ending cash is below zero")
    if median_breach_month is not None:
        flags.append(f"CASH_RUNWAY: median path breaches the threshold in month {median_breach_month}")

    return RiskReport(
        n_paths=agg.n_paths,
        periods=agg.periods,
        seed=result.seed,
        p_shortfall_any=agg.p_shortfall_any,
        p_end_cash_negative=agg.p_end_cash_negative,
        var5=agg.var5,
        median_end=agg.median_end,
        mean_end=agg.mean_end,
        p95_end=p95_end,
        end_spread_5_95=p95_end - agg.var5,
        median_breach_month=median_breach_month,
        top_driver=top.label if top is not None else None,
        top_driver_swing=top.magnitude if top is not None else 0.0,
        flags=flags,
    )
