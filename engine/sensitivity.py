"""
One-at-a-time sensitivity ("tornado") analysis of shortfall risk.

For each tracked input: clone the parameters, move that one input -10% and
+10%, rerun a reduced simulation that only counts shortfall paths, and report
    delta_low  = P(shortfall | input × 0.9) - P(shortfall | base)
    delta_high = P(shortfall | input × 1.1) - P(shortfall | base)

The two deltas are not forced to opposite signs.

Every reduced run (base and all perturbations) uses the SAME sensitivity seed,
so the bars measure the effect of the input, not seed noise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from core.config import (
    DSO_BOUNDS,
    STD_DEV_FLOOR,
    SensitivityConfig,
    SimulationParameters,
)
from core.utils import clamp, clamp_fraction
from distributions.rng import Mulberry32

from .cashflow import path_has_shortfall

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackedParameter:
    """Accessor pair for one perturbable input."""
    key: str
    label: str
    getter: Callable[[SimulationParameters], float]
    setter: Callable[[SimulationParameters, float], SimulationParameters]
    bound: Callable[[float], float] = lambda v: v


def _floor_std_dev(v: float) -> float:
    return v if v > 0 else STD_DEV_FLOOR


TRACKED_PARAMETERS: Tuple[TrackedParameter, ...] = (
    TrackedParameter(
        "demand_mean", "Demand mean",
        lambda p: p.demand.mean,
        lambda p, v: replace(p, demand=replace(p.demand, mean=v)),
    ),
    TrackedParameter(
        "demand_std_dev", "Demand std",
        lambda p: p.demand.std_dev,
        lambda p, v: replace(p, demand=replace(p.demand, std_dev=v)),
        _floor_std_dev,
    ),
    TrackedParameter(
        "avg_order_value", "Average order value",
        lambda p: p.avg_order_value,
        lambda p, v: replace(p, avg_order_value=v),
    ),
    TrackedParameter(
        "cogs_fraction", "COGS %",
        lambda p: p.cogs_fraction,
        lambda p, v: replace(p, cogs_fraction=v),
        clamp_fraction,
    ),
    TrackedParameter(
        "variable_cost_fraction", "Var Opex %",
        lambda p: p.variable_cost_fraction,
        lambda p, v: replace(p, variable_cost_fraction=v),
        clamp_fraction,
    ),
    TrackedParameter(
        "fixed_cost_per_period", "Fixed cost",
        lambda p: p.fixed_cost_per_period,
        lambda p, v: replace(p, fixed_cost_per_period=v),
    ),
    TrackedParameter(
        "days_sales_outstanding", "DSO days",
        lambda p: p.days_sales_outstanding,
        lambda p, v: replace(p, days_sales_outstanding=v),
        lambda v: clamp(v, *DSO_BOUNDS),
    ),
)

_BY_KEY: Dict[str, TrackedParameter] = {tp.key: tp for tp in TRACKED_PARAMETERS}


@dataclass
class TornadoItem:
    key: str
    label: str
    delta_low: float
    delta_high: float

    @property
    def magnitude(self) -> float:
        return max(abs(self.delta_low), abs(self.delta_high))


@dataclass
class TornadoResult:
    """Base shortfall probability and per-input deltas, in tracked order."""
    base: float
    items: List[TornadoItem]

    def sorted_items(self) -> List[TornadoItem]:
        """Largest swing first (chart order)."""
        return sorted(self.items, key=lambda it: it.magnitude, reverse=True)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([
            {"Input": it.label, "key": it.key,
             "Delta -10%": it.delta_low, "Delta +10%": it.delta_high}
            for it in self.items
        ])

    def to_dict(self) -> Dict:
        return {
            "base": self.base,
            "items": [
                {"name": it.label, "key": it.key,
                 "deltaLow": it.delta_low, "deltaHigh": it.delta_high}
                for it in self.items
            ],
        }


def perturb(params: SimulationParameters, key: str, frac: float) -> SimulationParameters:
    """
    Clone `params` with one tracked input scaled by (1 + frac).

    Fractions are re-clamped to [0, 1], DSO to [0, 120], and a demand std
    dev that would become <= 0 is replaced by a tiny positive floor.
    """
    try:
        tp = _BY_KEY[key]
    except KeyError:
        raise KeyError(
            f"Unknown tracked parameter {key!r}. Available: {sorted(_BY_KEY)}"
        ) from None
    value = tp.getter(params) * (1.0 + frac)
    return tp.setter(params, tp.bound(value))


def shortfall_probability(params: SimulationParameters, path_count: int, seed: int) -> float:
    """Share of `path_count` reduced paths that breach the threshold."""
    if path_count < 1:
        raise ValueError(f"path_count must be at least 1, got {path_count}.")
    rng = Mulberry32(seed)
    hits = 0
    for _ in range(path_count):
        if path_has_shortfall(params, rng):
            hits += 1
    return hits / path_count


def analyze(
    params: SimulationParameters,
    *,
    seed: int,
    config: SensitivityConfig = SensitivityConfig(),
    progress: Optional[Callable[[str], None]] = None,
) -> TornadoResult:
    """
    Run the tornado sweep over TRACKED_PARAMETERS.

    Parameters
    ----------
    params : SimulationParameters
        Base case (not modified).
    seed : int
        Sensitivity seed shared by every reduced run.
    config : SensitivityConfig
        Reduced path count and perturbation size (defaults: 3000, 10%).
    """
    n = config.reduced_path_count
    step = config.perturbation

    base = shortfall_probability(params, n, seed)
    items = []
    for i, tp in enumerate(TRACKED_PARAMETERS):
        if progress is not None:
            progress(f"Running sensitivity… {tp.label} ({i + 1}/{len(TRACKED_PARAMETERS)})")
        low = shortfall_probability(perturb(params, tp.key, -step), n, seed)
        high = shortfall_probability(perturb(params, tp.key, +step), n, seed)
        items.append(TornadoItem(tp.key, tp.label, low - base, high - base))

    logger.debug("Tornado base P(shortfall)=%.4f over %d reduced paths", base, n)
    return TornadoResult(base=base, items=items)
