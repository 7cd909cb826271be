"""
Input normalization for raw run requests before they enter the engine.

Nothing here rejects a run. Every problem degrades to a defined value:
- out-of-range periods / path count / DSO / percentages → nearest bound
- values that are not numbers → 0, then clamped
- percentages (0-100 on the form) → fractions in [0, 1]
- unknown demand distribution → normal
Each adjustment is recorded as a warning so the caller can show it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

from core.config import (
    DEFAULT_PATH_COUNT,
    DEFAULT_PERIODS,
    DSO_BOUNDS,
    PATH_COUNT_BOUNDS,
    PERIODS_BOUNDS,
    DemandSpec,
    SimulationParameters,
)
from core.utils import clamp
from distributions.sampler import DISTRIBUTIONS
from engine.messages import RunRequest

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Collects the adjustments made to a run request.

    Nothing recorded here blocks a run; each warning names one value that
    was coerced, clamped or replaced by its default.
    """
    warnings: List[str] = field(default_factory=list)

    def summary(self) -> str:
        if not self.warnings:
            return "✓ All checks passed."
        lines = [f"WARNINGS ({len(self.warnings)}):"]
        for w in self.warnings:
            lines.append(f"  ⚠ {w}")
        return "\n".join(lines)


class _Reader:
    """Reads one raw field at a time, recording every adjustment."""

    def __init__(self, result: ValidationResult):
        self.result = result

    def number(self, name: str, value: Optional[float], default: float = 0.0) -> float:
        if value is None:
            return default
        if not math.isfinite(value):
            self.result.warnings.append(f"{name} is not a finite number; treated as 0.")
            return 0.0
        return value

    def bounded(self, name: str, value: Optional[float], lo: float, hi: float,
                default: float = 0.0) -> float:
        v = self.number(name, value, default)
        c = clamp(v, lo, hi)
        if c != v:
            self.result.warnings.append(f"{name}={v:g} is outside [{lo:g}, {hi:g}]; clamped to {c:g}.")
        return c

    def non_negative(self, name: str, value: Optional[float]) -> float:
        v = self.number(name, value)
        if v < 0:
            self.result.warnings.append(f"{name}={v:g} is negative; floored at 0.")
            return 0.0
        return v

    def percent(self, name: str, value: Optional[float]) -> float:
        return self.bounded(name, value, 0.0, 100.0) / 100.0


def normalize_parameters(
    raw: Union[Mapping[str, Any], RunRequest],
) -> Tuple[SimulationParameters, ValidationResult]:
    """
    Turn raw form fields into SimulationParameters.

    Accepts either a mapping of form fields (camelCase as the dashboard sends
    them, or snake_case) or an already-parsed RunRequest.

    Returns
    -------
    (params, validation) — validation carries one warning per adjustment.
    """
    req = raw if isinstance(raw, RunRequest) else RunRequest.model_validate(dict(raw))
    result = ValidationResult()
    rd = _Reader(result)

    for name in req.ignored_fields:
        result.warnings.append(f"{name} is not an object; defaults used.")

    # periods / sims: integer part first, like a form's integer parse
    periods = int(rd.bounded("periods", _trunc(req.periods), *PERIODS_BOUNDS, default=DEFAULT_PERIODS))
    path_count = int(rd.bounded("sims", _trunc(req.sims), *PATH_COUNT_BOUNDS, default=DEFAULT_PATH_COUNT))

    seed = None
    if req.seed is not None:
        if math.isfinite(req.seed):
            seed = int(req.seed)
        else:
            result.warnings.append("seed is not a number; a fresh random seed will be used.")

    dist = req.demand.dist
    if dist not in DISTRIBUTIONS:
        result.warnings.append(f"Unknown demand distribution {dist!r}; using normal.")
        dist = "normal"

    params = SimulationParameters(
        periods=periods,
        path_count=path_count,
        seed=seed,
        demand=DemandSpec(
            distribution=dist,
            mean=rd.number("demand.mu", req.demand.mu),
            std_dev=rd.number("demand.sigma", req.demand.sigma),
        ),
        avg_order_value=rd.non_negative("aov", req.aov),
        fixed_cost_per_period=rd.non_negative("fixedCost", req.fixed_cost),
        cogs_fraction=rd.percent("cogsPct", req.cogs_pct),
        variable_cost_fraction=rd.percent("varCostPct", req.var_cost_pct),
        tax_rate_fraction=rd.percent("taxRate", req.tax_rate),
        late_payment_fraction=rd.percent("latePayPct", req.late_pay_pct),
        starting_cash=rd.number("startingCash", req.starting_cash),
        days_sales_outstanding=rd.bounded("dsoDays", req.dso_days, *DSO_BOUNDS),
        shortfall_threshold=rd.number("shortfallThresh", req.shortfall_thresh),
    )

    for w in result.warnings:
        logger.warning("Input adjusted: %s", w)
    return params, result


def _trunc(v: Optional[float]) -> Optional[float]:
    if v is None or not math.isfinite(v):
        return v
    return float(math.trunc(v))
