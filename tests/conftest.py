"""Shared fixtures for the simulator test suite."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from core.config import DemandSpec, SensitivityConfig, SimulationParameters


@pytest.fixture
def base_params():
    """The reference 12-month scenario (fractions already normalized)."""
    return SimulationParameters(
        periods=12,
        path_count=1000,
        seed=42,
        demand=DemandSpec("normal", mean=100.0, std_dev=20.0),
        avg_order_value=50.0,
        fixed_cost_per_period=2000.0,
        cogs_fraction=0.4,
        variable_cost_fraction=0.1,
        tax_rate_fraction=0.25,
        late_payment_fraction=0.1,
        starting_cash=5000.0,
        days_sales_outstanding=30.0,
        shortfall_threshold=0.0,
    )


@pytest.fixture
def raw_form():
    """The same scenario as the dashboard form sends it."""
    return {
        "periods": 12,
        "sims": 1000,
        "seed": 42,
        "demand": {"dist": "normal", "mu": 100, "sigma": 20},
        "aov": 50,
        "cogsPct": 40,
        "varCostPct": 10,
        "startingCash": 5000,
        "fixedCost": 2000,
        "dsoDays": 30,
        "latePayPct": 10,
        "taxRate": 25,
        "shortfallThresh": 0,
    }


@pytest.fixture
def fast_sensitivity():
    """Small reduced path count to keep the sweep quick in tests."""
    return SensitivityConfig(reduced_path_count=300, seed=7)
