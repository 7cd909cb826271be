"""
Unit Tests -- Tornado Sensitivity Sweep
=======================================
"""

import math

import pytest

from core.config import DemandSpec, SensitivityConfig
from engine.sensitivity import (
    TRACKED_PARAMETERS,
    TornadoItem,
    TornadoResult,
    analyze,
    perturb,
    shortfall_probability,
)


@pytest.fixture
def sweep_config():
    return SensitivityConfig(reduced_path_count=200, seed=3)


class TestPerturb:

    def test_scales_one_input(self, base_params):
        up = perturb(base_params, "fixed_cost_per_period", 0.10)
        assert up.fixed_cost_per_period == pytest.approx(2200.0)
        assert up.avg_order_value == base_params.avg_order_value
        assert up.demand == base_params.demand

    def test_original_untouched(self, base_params):
        perturb(base_params, "cogs_fraction", 0.10)
        perturb(base_params, "demand_mean", -0.10)
        assert base_params.cogs_fraction == 0.4
        assert base_params.demand.mean == 100.0

    def test_fraction_clamped(self, base_params):
        params = base_params.with_changes(cogs_fraction=0.95)
        assert perturb(params, "cogs_fraction", 0.10).cogs_fraction == 1.0

    def test_dso_clamped(self, base_params):
        params = base_params.with_changes(days_sales_outstanding=115.0)
        assert perturb(params, "days_sales_outstanding", 0.10).days_sales_outstanding == 120.0

    def test_zero_std_dev_floored(self, base_params):
        params = base_params.with_changes(demand=DemandSpec("normal", 100.0, 0.0))
        low = perturb(params, "demand_std_dev", -0.10)
        assert 0.0 < low.demand.std_dev <= 1e-6

    def test_unknown_key(self, base_params):
        with pytest.raises(KeyError):
            perturb(base_params, "interest_rate", 0.10)


class TestShortfallProbability:

    def test_in_unit_interval(self, base_params):
        p = shortfall_probability(base_params.with_changes(shortfall_threshold=4000.0), 300, 11)
        assert 0.0 <= p <= 1.0

    def test_certain_shortfall(self, base_params):
        params = base_params.with_changes(starting_cash=-1e9)
        assert shortfall_probability(params, 100, 1) == 1.0

    def test_zero_paths_rejected(self, base_params):
        with pytest.raises(ValueError):
            shortfall_probability(base_params, 0, 1)

    @pytest.mark.parametrize("count", [0, -5])
    def test_config_rejects_empty_sweep(self, count):
        with pytest.raises(ValueError):
            SensitivityConfig(reduced_path_count=count)

    def test_single_reduced_path(self, base_params):
        result = analyze(base_params, seed=3, config=SensitivityConfig(reduced_path_count=1))
        assert result.base in (0.0, 1.0)

    def test_deterministic_for_seed(self, base_params):
        params = base_params.with_changes(shortfall_threshold=4000.0)
        assert shortfall_probability(params, 300, 5) == shortfall_probability(params, 300, 5)


class TestAnalyze:

    def test_one_item_per_tracked_input(self, base_params, sweep_config):
        result = analyze(base_params, seed=sweep_config.seed, config=sweep_config)
        assert [it.key for it in result.items] == [tp.key for tp in TRACKED_PARAMETERS]
        assert [it.label for it in result.items] == [
            "Demand mean", "Demand std", "Average order value",
            "COGS %", "Var Opex %", "Fixed cost", "DSO days",
        ]

    def test_base_uses_sensitivity_seed(self, base_params, sweep_config):
        params = base_params.with_changes(shortfall_threshold=4000.0)
        result = analyze(params, seed=3, config=sweep_config)
        assert result.base == shortfall_probability(params, 200, 3)

    def test_deltas_bounded(self, base_params, sweep_config):
        params = base_params.with_changes(shortfall_threshold=4000.0)
        result = analyze(params, seed=3, config=sweep_config)
        for it in result.items:
            assert -1.0 <= it.delta_low <= 1.0
            assert -1.0 <= it.delta_high <= 1.0

    def test_higher_fixed_cost_never_lowers_risk(self, base_params, sweep_config):
        params = base_params.with_changes(shortfall_threshold=4000.0)
        result = analyze(params, seed=3, config=sweep_config)
        fixed = next(it for it in result.items if it.key == "fixed_cost_per_period")
        assert fixed.delta_high >= 0.0
        assert fixed.delta_low <= 0.0

    def test_dso_within_same_month_has_no_effect(self, base_params, sweep_config):
        # 27 and 33 days both round to a one-month lag, same draws → identical counts
        params = base_params.with_changes(shortfall_threshold=4000.0)
        result = analyze(params, seed=3, config=sweep_config)
        dso = next(it for it in result.items if it.key == "days_sales_outstanding")
        assert dso.delta_low == 0.0
        assert dso.delta_high == 0.0

    def test_tiny_std_dev_gives_finite_deltas(self, base_params, sweep_config):
        params = base_params.with_changes(demand=DemandSpec("lognormal", 100.0, 1e-12))
        result = analyze(params, seed=3, config=sweep_config)
        for it in result.items:
            assert math.isfinite(it.delta_low) and math.isfinite(it.delta_high)

    def test_progress_reports_each_input(self, base_params, sweep_config):
        seen = []
        analyze(base_params, seed=3, config=sweep_config, progress=seen.append)
        assert len(seen) == len(TRACKED_PARAMETERS)
        assert seen[0].startswith("Running sensitivity")


class TestTornadoResult:

    @pytest.fixture
    def tornado(self):
        return TornadoResult(base=0.2, items=[
            TornadoItem("a", "A", -0.01, 0.02),
            TornadoItem("b", "B", 0.10, -0.03),
            TornadoItem("c", "C", 0.0, 0.0),
        ])

    def test_sorted_by_largest_swing(self, tornado):
        assert [it.key for it in tornado.sorted_items()] == ["b", "a", "c"]

    def test_frame(self, tornado):
        frame = tornado.to_frame()
        assert list(frame.columns) == ["Input", "key", "Delta -10%", "Delta +10%"]
        assert len(frame) == 3

    def test_dict_keeps_tracked_order(self, tornado):
        d = tornado.to_dict()
        assert d["base"] == 0.2
        assert [it["name"] for it in d["items"]] == ["A", "B", "C"]
        assert d["items"][1]["deltaLow"] == 0.10
