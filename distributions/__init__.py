"""
Distributions package — the seeded random stream and the demand samplers.

  1. rng.py      — Mulberry32 generator, seeded from an integer or OS entropy
  2. sampler.py  — normal / poisson / lognormal demand draws on that stream
"""

from .rng import Mulberry32, entropy_seed, seeded
from .sampler import DISTRIBUTIONS, DemandSampler, sample_demand

__all__ = [
    "Mulberry32",
    "entropy_seed",
    "seeded",
    "DISTRIBUTIONS",
    "DemandSampler",
    "sample_demand",
]
