"""
Simulation runner — orchestrates Monte Carlo paths through the cash-flow engine.

One run:
  1. Re-clamp the parameters (every natural bound re-applied)
  2. Resolve the seed and build ONE random stream for the run
  3. Simulate path_count paths on that stream → (periods × paths) cash matrix
  4. Aggregate into bands and ending-cash metrics (risk/aggregator.py)
  5. Tornado sweep with a separate, fixed sensitivity seed (engine/sensitivity.py)

The run is a single sequential computation with no hidden shared state: it
takes a parameters value and returns a result value, so it can be called
in-line, from a worker thread, or across a process boundary alike.
A run either returns a complete SimulationResult or raises SimulationError.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

from core.config import SensitivityConfig, SimulationParameters
from core.errors import SimulationError
from core.utils import clamp_parameters
from distributions.rng import seeded
from risk.aggregator import AggregateResult, aggregate_paths

from .cashflow import simulate_one_path
from .sensitivity import TornadoResult, analyze

logger = logging.getLogger(__name__)

Uniform = Callable[[], float]
Progress = Callable[[str], None]

# emit a progress message roughly every this fraction of paths
_PROGRESS_STEP = 0.10


@dataclass
class SimulationResult:
    """Everything one run hands back to the caller."""
    aggregate: AggregateResult
    tornado: TornadoResult
    seed: int
    sensitivity_seed: int
    parameters: SimulationParameters

    def to_dict(self) -> Dict:
        out = self.aggregate.to_dict()
        out["tornado"] = self.tornado.to_dict()
        out["seed"] = self.seed
        out["sensitivitySeed"] = self.sensitivity_seed
        out["parameters"] = self.parameters.to_dict()
        return out


def aggregate(
    params: SimulationParameters,
    rng: Uniform,
    *,
    progress: Optional[Progress] = None,
) -> AggregateResult:
    """
    Simulate params.path_count paths on one shared stream and summarize them.

    Paths are drawn strictly in order from `rng`; the cash matrix is kept in
    full until the per-period bands are computed.
    """
    n_paths = params.path_count
    periods = params.periods

    cash_matrix = np.empty((periods, n_paths), dtype=float)
    ending_cash = np.empty(n_paths, dtype=float)
    shortfall_flags = np.zeros(n_paths, dtype=bool)

    step = max(1, int(n_paths * _PROGRESS_STEP))

    # ========= MAIN PATH LOOP =========
    for p in range(n_paths):
        path = simulate_one_path(params, rng)
        cash_matrix[:, p] = path.cash
        ending_cash[p] = path.final_cash
        shortfall_flags[p] = path.ever_below_threshold

        if progress is not None and (p + 1) % step == 0:
            progress(f"Simulating paths… {(p + 1) / n_paths:.0%}")

    return aggregate_paths(cash_matrix, ending_cash, shortfall_flags)


def run_simulation(
    params: SimulationParameters,
    *,
    sensitivity: SensitivityConfig = SensitivityConfig(),
    progress: Optional[Progress] = None,
) -> SimulationResult:
    """
    Run the full Monte Carlo + tornado analysis.

    Parameters
    ----------
    params : SimulationParameters
        Run inputs. Out-of-range values are clamped, never rejected.
    sensitivity : SensitivityConfig
        Reduced path count, perturbation size and optional fixed seed for the
        tornado sweep. Without a seed, one is drawn from the main stream
        after the main paths, so the whole run still follows from params.seed.
    progress : callable, optional
        Receives best-effort status text.

    Raises
    ------
    SimulationError
        On any unexpected failure; no partial result is returned.
    """
    try:
        params = clamp_parameters(params)
        rng = seeded(params.seed)
        logger.info(
            "Starting simulation: %d paths x %d periods, seed=%d",
            params.path_count, params.periods, rng.seed,
        )

        t0 = time.perf_counter()
        agg = aggregate(params, rng, progress=progress)
        logger.debug("Main paths done in %.2fs", time.perf_counter() - t0)

        sens_seed = sensitivity.seed if sensitivity.seed is not None else rng.next_seed()
        if progress is not None:
            progress("Running sensitivity…")
        t1 = time.perf_counter()
        tornado = analyze(params, seed=sens_seed, config=sensitivity, progress=progress)
        logger.debug("Sensitivity sweep done in %.2fs", time.perf_counter() - t1)
    except Exception as exc:
        logger.exception("Simulation failed")
        raise SimulationError(f"Simulation failed: {exc}") from exc

    if progress is not None:
        progress(f"Done. Sims: {params.path_count:,}")
    logger.info(
        "Simulation complete: P(shortfall)=%.4f, median end cash=%.2f",
        agg.p_shortfall_any, agg.median_end,
    )
    return SimulationResult(
        aggregate=agg,
        tornado=tornado,
        seed=rng.seed,
        sensitivity_seed=sens_seed,
        parameters=params,
    )
