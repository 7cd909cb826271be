from __future__ import annotations

import math
from dataclasses import replace

from .config import (
    DSO_BOUNDS,
    FRACTION_BOUNDS,
    PATH_COUNT_BOUNDS,
    PERIODS_BOUNDS,
    SimulationParameters,
)


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def finite_or_zero(x) -> float:
    """Coerce to float; anything non-numeric or non-finite becomes 0.0."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def clamp_fraction(x: float) -> float:
    return clamp(finite_or_zero(x), *FRACTION_BOUNDS)


def clamp_parameters(params: SimulationParameters) -> SimulationParameters:
    """
    Re-apply every natural bound to an already-typed parameter set.

    Input normalization already does this for raw requests; the orchestrator
    calls it again so hand-built dataclasses obey the same invariants.
    """
    demand = replace(
        params.demand,
        mean=finite_or_zero(params.demand.mean),
        std_dev=finite_or_zero(params.demand.std_dev),
    )
    return replace(
        params,
        periods=int(clamp(int(finite_or_zero(params.periods)), *PERIODS_BOUNDS)),
        path_count=int(clamp(int(finite_or_zero(params.path_count)), *PATH_COUNT_BOUNDS)),
        demand=demand,
        avg_order_value=max(0.0, finite_or_zero(params.avg_order_value)),
        fixed_cost_per_period=max(0.0, finite_or_zero(params.fixed_cost_per_period)),
        cogs_fraction=clamp_fraction(params.cogs_fraction),
        variable_cost_fraction=clamp_fraction(params.variable_cost_fraction),
        tax_rate_fraction=clamp_fraction(params.tax_rate_fraction),
        late_payment_fraction=clamp_fraction(params.late_payment_fraction),
        starting_cash=finite_or_zero(params.starting_cash),
        days_sales_outstanding=clamp(finite_or_zero(params.days_sales_outstanding), *DSO_BOUNDS),
        shortfall_threshold=finite_or_zero(params.shortfall_threshold),
    )
