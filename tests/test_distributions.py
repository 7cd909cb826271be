"""
Unit Tests -- Random Stream & Demand Samplers
=============================================
Tests Mulberry32 determinism, the three demand distributions, and the
non-negativity guarantee for degenerate inputs.
"""

import itertools
import math

import numpy as np
import pytest

from core.config import DemandSpec
from distributions.rng import Mulberry32, seeded
from distributions.sampler import (
    DemandSampler,
    lognormal_params,
    sample_demand,
    sample_poisson,
    standard_normal,
)


def fixed_stream(values):
    """Uniform source that replays `values` forever."""
    it = itertools.cycle(values)
    return lambda: next(it)


# ---------------------------------------------------------------------------
# RNG
# ---------------------------------------------------------------------------
class TestMulberry32:

    def test_same_seed_same_sequence(self):
        a, b = Mulberry32(42), Mulberry32(42)
        assert [a() for _ in range(1000)] == [b() for _ in range(1000)]

    def test_different_seeds_differ(self):
        a, b = Mulberry32(1), Mulberry32(2)
        assert [a() for _ in range(20)] != [b() for _ in range(20)]

    def test_values_in_unit_interval(self):
        rng = Mulberry32(123)
        draws = np.array([rng() for _ in range(20000)])
        assert draws.min() >= 0.0
        assert draws.max() < 1.0

    def test_roughly_uniform(self):
        rng = Mulberry32(2024)
        draws = np.array([rng() for _ in range(20000)])
        assert abs(draws.mean() - 0.5) < 0.02
        counts, _ = np.histogram(draws, bins=10, range=(0.0, 1.0))
        assert counts.min() > 1500

    def test_negative_and_large_seeds_accepted(self):
        for seed in (-1, 2 ** 40 + 3):
            v = Mulberry32(seed)()
            assert 0.0 <= v < 1.0

    def test_seeded_without_seed_records_seed(self):
        rng = seeded(None)
        assert isinstance(rng.seed, int)
        replay = Mulberry32(rng.seed)
        assert [rng() for _ in range(5)] == [replay() for _ in range(5)]

    def test_next_seed_consumes_one_draw(self):
        a, b = Mulberry32(9), Mulberry32(9)
        child = a.next_seed()
        assert child == int(b() * 1e9)
        assert a() == b()


# ---------------------------------------------------------------------------
# Samplers
# ---------------------------------------------------------------------------
class TestNormal:

    def test_box_muller_known_draws(self):
        # u = e^-0.5 → radius 1, v = 0.5 → cos(pi) = -1
        z = standard_normal(fixed_stream([math.exp(-0.5), 0.5]))
        assert z == pytest.approx(-1.0)

    def test_zero_uniform_is_redrawn(self):
        z = standard_normal(fixed_stream([0.0, math.exp(-0.5), 0.0, 0.5]))
        assert z == pytest.approx(-1.0)

    def test_scale_and_shift(self):
        x = sample_demand("normal", 10.0, 2.0, fixed_stream([math.exp(-0.5), 0.5]))
        assert x == pytest.approx(8.0)

    def test_negative_draw_truncated_to_zero(self):
        x = sample_demand("normal", 1.0, 5.0, fixed_stream([math.exp(-0.5), 0.5]))
        assert x == 0.0

    def test_sample_moments(self):
        rng = Mulberry32(42)
        draws = np.array([sample_demand("normal", 100.0, 20.0, rng) for _ in range(20000)])
        assert abs(draws.mean() - 100.0) < 2.0
        assert abs(draws.std() - 20.0) < 2.0


class TestPoisson:

    def test_knuth_count(self):
        # L = e^-1 ≈ 0.368: 0.5 > L, 0.25 <= L → two draws → 1
        assert sample_poisson(1.0, fixed_stream([0.5])) == 1

    def test_zero_mean_returns_zero(self):
        assert sample_poisson(0.0, fixed_stream([0.3])) == 0

    def test_negative_mean_treated_as_zero(self):
        assert sample_demand("poisson", -5.0, 0.0, fixed_stream([0.9])) == 0.0

    def test_sample_mean(self):
        rng = Mulberry32(7)
        draws = np.array([sample_demand("poisson", 5.0, 123.0, rng) for _ in range(20000)])
        assert abs(draws.mean() - 5.0) < 0.25
        assert np.all(draws == np.floor(draws))


class TestLognormal:

    def test_parameters_from_observed_moments(self):
        # mean 1, sd sqrt(e - 1) → phi = sqrt(e) → muL = -0.5, sigmaL = 1
        mu_l, sigma_l = lognormal_params(1.0, math.sqrt(math.e - 1.0))
        assert mu_l == pytest.approx(-0.5)
        assert sigma_l == pytest.approx(1.0)

    def test_sample_mean_matches_observed_mean(self):
        rng = Mulberry32(11)
        draws = np.array([sample_demand("lognormal", 50.0, 10.0, rng) for _ in range(20000)])
        assert abs(draws.mean() - 50.0) < 1.5

    def test_degenerate_mean_floored(self):
        rng = Mulberry32(3)
        for mean in (0.0, -10.0):
            x = sample_demand("lognormal", mean, 0.0, rng)
            assert math.isfinite(x)
            assert x >= 0.0


class TestNonNegativity:

    @pytest.mark.parametrize("dist", ["normal", "poisson", "lognormal"])
    @pytest.mark.parametrize("mean,std", [(0.0, 0.0), (-50.0, 10.0), (5.0, 100.0), (1e-12, 1e-12)])
    def test_samples_never_negative(self, dist, mean, std):
        rng = Mulberry32(99)
        draws = [sample_demand(dist, mean, std, rng) for _ in range(500)]
        assert min(draws) >= 0.0
        assert all(math.isfinite(d) for d in draws)

    def test_non_finite_inputs_treated_as_zero(self):
        rng = Mulberry32(5)
        assert sample_demand("normal", float("nan"), float("inf"), rng) == 0.0

    def test_unknown_distribution_sampled_as_normal(self):
        a = sample_demand("weibull", 10.0, 2.0, fixed_stream([math.exp(-0.5), 0.5]))
        assert a == pytest.approx(8.0)

    def test_demand_sampler_binds_spec(self):
        sampler = DemandSampler(DemandSpec("normal", 10.0, 2.0), fixed_stream([math.exp(-0.5), 0.5]))
        assert sampler() == pytest.approx(8.0)
