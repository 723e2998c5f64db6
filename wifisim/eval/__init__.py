"""
Evaluation module.

Modules:
    metrics: Per-cycle mean error and miss percentage series
    plots: Matplotlib renderer for simulation reports (import explicitly)
    propagation: Monte-Carlo characterization of the radio model
"""

from .metrics import (
    CycleStatistics,
    ErrorMissSeries,
    mean_errors,
    miss_percentages,
    partition_series,
    summarize_series,
)

__all__ = [
    "CycleStatistics",
    "ErrorMissSeries",
    "mean_errors",
    "miss_percentages",
    "partition_series",
    "summarize_series",
]
