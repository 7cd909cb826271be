"""
Risk outputs — quantile aggregation, ending-cash metrics, and the risk report.
"""

from .aggregator import AggregateResult, aggregate_paths, percentile_bands
from .metrics import histogram, quantile_from_sorted, quantiles_from_sorted
from .report import RiskReport, generate_risk_report

__all__ = [
    "AggregateResult",
    "aggregate_paths",
    "percentile_bands",
    "histogram",
    "quantile_from_sorted",
    "quantiles_from_sorted",
    "RiskReport",
    "generate_risk_report",
]
