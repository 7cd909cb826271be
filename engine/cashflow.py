"""
Per-path monthly cash-flow computation.

Two passes per path:
  1. Forward pass (period_flows): draw demand, book revenue, costs and tax for
     every period.
  2. Timing pass (collections + balance): revenue recognized in period t is
     collected dso_months later, except the late share which arrives one
     month after that. Collections at period t look BACK at earlier revenue,
     so the revenue array must be complete before this pass starts.

Cash balance recurrence:
    cash[t] = cash[t-1] + collected[t] - net_outflow[t],   cash[-1] = starting_cash
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Tuple

import numpy as np

from core.config import SimulationParameters
from distributions.sampler import sample_demand

Uniform = Callable[[], float]


@dataclass
class PathResult:
    """One simulated path."""
    cash: np.ndarray            # shape (periods,) — balance at the end of each period
    ever_below_threshold: bool
    final_cash: float


def period_flows(params: SimulationParameters, rng: Uniform) -> Tuple[np.ndarray, np.ndarray]:
    """
    Forward pass: (revenue, net_outflow) per period.

    net_outflow = cogs + variable cost + fixed cost - tax. Tax is only charged
    on positive pre-tax profit.
    """
    n = params.periods
    demand = params.demand
    demand_draws = np.empty(n, dtype=float)
    for t in range(n):
        demand_draws[t] = sample_demand(demand.distribution, demand.mean, demand.std_dev, rng)

    revenue = demand_draws * params.avg_order_value
    cogs_cost = revenue * params.cogs_fraction
    var_cost = revenue * params.variable_cost_fraction
    fixed = params.fixed_cost_per_period

    pretax = revenue - (cogs_cost + var_cost + fixed)
    tax_paid = np.where(pretax > 0, params.tax_rate_fraction * pretax, 0.0)

    net_outflow = cogs_cost + var_cost + fixed - tax_paid
    return revenue, net_outflow


def collections(revenue: np.ndarray, dso_months: int, late_fraction: float) -> np.ndarray:
    """
    Cash collected per period from earlier revenue.

    collected[t] = revenue[t - dso] * (1 - late) + revenue[t - dso - 1] * late,
    with indices before period 0 contributing nothing.
    """
    n = len(revenue)
    collected = np.zeros(n, dtype=float)
    on_time = max(int(dso_months), 0)
    if on_time < n:
        collected[on_time:] += revenue[: n - on_time] * (1.0 - late_fraction)
    late = on_time + 1
    if late < n:
        collected[late:] += revenue[: n - late] * late_fraction
    return collected


def cash_balances(starting_cash: float, collected: np.ndarray, net_outflow: np.ndarray) -> Iterator[float]:
    """
    Running balance, one period at a time, always summed in the same order:
    cash + collected[t] - net_outflow[t].

    Both the full path and the reduced path read their balances from here, so
    they agree bit for bit on every threshold comparison.
    """
    cash = float(starting_cash)
    for t in range(len(collected)):
        cash = cash + float(collected[t]) - float(net_outflow[t])
        yield cash


def simulate_one_path(params: SimulationParameters, rng: Uniform) -> PathResult:
    """Full path: every period's balance is recorded, even after a breach."""
    revenue, net_outflow = period_flows(params, rng)
    collected = collections(revenue, params.dso_months, params.late_payment_fraction)

    cash = np.fromiter(
        cash_balances(params.starting_cash, collected, net_outflow),
        dtype=float,
        count=params.periods,
    )
    return PathResult(
        cash=cash,
        ever_below_threshold=bool(np.any(cash < params.shortfall_threshold)),
        final_cash=float(cash[-1]),
    )


def path_has_shortfall(params: SimulationParameters, rng: Uniform) -> bool:
    """
    Reduced path for the sensitivity sweep: only answers "did cash ever drop
    below the threshold?" and stops scanning at the first breach.

    Consumes exactly the same draws as simulate_one_path.
    """
    revenue, net_outflow = period_flows(params, rng)
    collected = collections(revenue, params.dso_months, params.late_payment_fraction)

    threshold = params.shortfall_threshold
    for cash in cash_balances(params.starting_cash, collected, net_outflow):
        if cash < threshold:
            return True
    return False
