"""
Demand Sampler — draws one period's demand from the configured distribution.

All three samplers read uniforms from the shared run stream (distributions/rng.py)
and always return a finite value >= 0:

  normal:    Box-Muller, truncated at 0 (negative draws become 0 — a point
             mass at zero, not a renormalized truncated normal)
  poisson:   Knuth's product-of-uniforms method; stdDev is unused
  lognormal: mean/stdDev are the moments of the OBSERVED variable, converted
             to the underlying normal via phi = sqrt(1 + s^2/m^2):
                 muL = ln(m / phi),  sigmaL = sqrt(ln(phi^2))
"""

from __future__ import annotations

import math
from typing import Callable, Tuple

from core.config import LOGNORMAL_FLOOR, DemandSpec
from core.utils import finite_or_zero

Uniform = Callable[[], float]

DISTRIBUTIONS: Tuple[str, ...] = ("normal", "poisson", "lognormal")

# largest exponent math.exp accepts without overflow
_MAX_EXPONENT = 709.0


def _nonzero_uniform(rng: Uniform) -> float:
    u = 0.0
    while u == 0.0:
        u = rng()
    return u


def standard_normal(rng: Uniform) -> float:
    """Box-Muller cosine branch; zero uniforms are redrawn."""
    u = _nonzero_uniform(rng)
    v = _nonzero_uniform(rng)
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def sample_normal(mean: float, std_dev: float, rng: Uniform) -> float:
    return max(0.0, mean + std_dev * standard_normal(rng))


def sample_poisson(mean: float, rng: Uniform) -> int:
    limit = math.exp(-max(0.0, mean))
    k = 0
    p = 1.0
    while True:
        k += 1
        p *= rng()
        if p <= limit:
            break
    return k - 1


def lognormal_params(mean: float, std_dev: float) -> Tuple[float, float]:
    """(muL, sigmaL) of the underlying normal for an observed mean/stdDev."""
    m = max(LOGNORMAL_FLOOR, mean)
    s = max(LOGNORMAL_FLOOR, std_dev)
    phi = math.sqrt(1.0 + (s * s) / (m * m))
    return math.log(m / phi), math.sqrt(math.log(phi * phi))


def sample_lognormal(mean: float, std_dev: float, rng: Uniform) -> float:
    mu_l, sigma_l = lognormal_params(mean, std_dev)
    return math.exp(min(_MAX_EXPONENT, mu_l + sigma_l * standard_normal(rng)))


def sample_demand(distribution: str, mean: float, std_dev: float, rng: Uniform) -> float:
    """
    Draw one non-negative demand value.

    Unknown distribution names are sampled as normal.
    """
    mean = finite_or_zero(mean)
    std_dev = finite_or_zero(std_dev)
    if distribution == "poisson":
        return float(sample_poisson(mean, rng))
    if distribution == "lognormal":
        return sample_lognormal(mean, std_dev, rng)
    return sample_normal(mean, std_dev, rng)


class DemandSampler:
    """Binds a DemandSpec to a stream: sampler() -> one period's demand."""

    def __init__(self, spec: DemandSpec, rng: Uniform):
        self.spec = spec
        self.rng = rng

    def __call__(self) -> float:
        return sample_demand(self.spec.distribution, self.spec.mean, self.spec.std_dev, self.rng)
