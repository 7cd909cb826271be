"""
Core package — parameter types, bounds, shared utilities.
No business logic lives here.
"""

from .config import DemandSpec, SensitivityConfig, SimulationParameters
from .errors import SimulationError
from .schema import BAND_KEYS, BAND_PERCENTILES, METRIC_KEYS
from .utils import clamp, clamp_parameters, finite_or_zero

__all__ = [
    "DemandSpec",
    "SensitivityConfig",
    "SimulationParameters",
    "SimulationError",
    "BAND_KEYS",
    "BAND_PERCENTILES",
    "METRIC_KEYS",
    "clamp",
    "clamp_parameters",
    "finite_or_zero",
]
