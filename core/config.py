"""
Simulation configuration — immutable run parameters and sensitivity settings.

Fraction fields are stored normalized to [0, 1]; the raw 0-100 form only
exists at the input boundary (inputs/validators.py).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from typing import Dict, Literal, Optional, Tuple

DemandDistribution = Literal["normal", "poisson", "lognormal"]

PERIODS_BOUNDS: Tuple[int, int] = (3, 60)
PATH_COUNT_BOUNDS: Tuple[int, int] = (1000, 100000)
DSO_BOUNDS: Tuple[float, float] = (0.0, 120.0)
FRACTION_BOUNDS: Tuple[float, float] = (0.0, 1.0)

DEFAULT_PERIODS = 12
DEFAULT_PATH_COUNT = 10000

# floors for degenerate distribution inputs
STD_DEV_FLOOR = 1e-6
LOGNORMAL_FLOOR = 1e-9

DAYS_PER_MONTH = 30.0


@dataclass(frozen=True)
class DemandSpec:
    distribution: DemandDistribution = "normal"
    mean: float = 0.0
    std_dev: float = 0.0


@dataclass(frozen=True)
class SimulationParameters:
    """
    Validated inputs for one simulation run.

    Never mutated: perturbed variants for the sensitivity sweep are built with
    with_changes(), which returns an independent clone.
    """

    periods: int = DEFAULT_PERIODS
    path_count: int = DEFAULT_PATH_COUNT
    seed: Optional[int] = None

    demand: DemandSpec = field(default_factory=DemandSpec)
    avg_order_value: float = 0.0
    fixed_cost_per_period: float = 0.0

    # fractions in [0, 1]
    cogs_fraction: float = 0.0
    variable_cost_fraction: float = 0.0
    tax_rate_fraction: float = 0.0
    late_payment_fraction: float = 0.0

    starting_cash: float = 0.0
    days_sales_outstanding: float = 0.0
    shortfall_threshold: float = 0.0

    @property
    def dso_months(self) -> int:
        """Collection lag in whole months (DSO / 30, halves round up)."""
        return int(math.floor(self.days_sales_outstanding / DAYS_PER_MONTH + 0.5))

    def with_changes(self, **changes) -> "SimulationParameters":
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class SensitivityConfig:
    """
    Settings for the one-at-a-time tornado sweep.

    seed=None means the orchestrator draws one sensitivity seed from the main
    stream after the main run; every reduced run then reuses that seed.
    """

    reduced_path_count: int = 3000
    perturbation: float = 0.10
    seed: Optional[int] = None

    def __post_init__(self):
        if self.reduced_path_count < 1:
            raise ValueError(
                f"reduced_path_count must be at least 1, got {self.reduced_path_count}."
            )
