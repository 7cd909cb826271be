"""
Cash-flow simulation engine — per-path cash math, Monte Carlo runner,
tornado sweep and the request/response boundary.
"""

from .runner import SimulationResult, run_simulation

__all__ = ["SimulationResult", "run_simulation"]
