"""
Per-cycle accuracy and miss statistics.

The engine records, for every algorithm and cycle, the localization errors
of successful reads and the number of misses. This module turns those raw
accumulators into the time series handed to renderers:

    mean_error[c] = mean of errors in cycle c       (NaN if no hits)
    miss_pct[c]   = misses / (misses + hits) * 100  (NaN if no reads)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np


@dataclass
class CycleStatistics:
    """
    Raw per-cycle accumulators for one algorithm in one partition.

    Attributes:
        errors: errors[c] lists the errors (m) of successful reads in cycle c.
        misses: misses[c] counts failed reads in cycle c.
    """

    errors: List[List[float]] = field(default_factory=list)
    misses: List[int] = field(default_factory=list)

    @classmethod
    def empty(cls, n_cycles: int) -> "CycleStatistics":
        return cls(errors=[[] for _ in range(n_cycles)], misses=[0] * n_cycles)

    @property
    def n_cycles(self) -> int:
        return len(self.misses)

    def record_hit(self, cycle: int, error: float) -> None:
        self.errors[cycle].append(float(error))

    def record_miss(self, cycle: int) -> None:
        self.misses[cycle] += 1

    def hits(self) -> np.ndarray:
        """Number of successful reads per cycle."""
        return np.array([len(e) for e in self.errors], dtype=float)

    def series(self) -> "ErrorMissSeries":
        """Reduce the accumulators to mean-error and miss-percentage series."""
        return ErrorMissSeries(
            mean_error=mean_errors(self.errors),
            miss_pct=miss_percentages(self.misses, self.hits()),
        )


@dataclass
class ErrorMissSeries:
    """
    Paired per-cycle time series for one algorithm.

    Attributes:
        mean_error: Mean error per cycle (m), shape (C,).
        miss_pct: Miss percentage per cycle, shape (C,).
    """

    mean_error: np.ndarray
    miss_pct: np.ndarray

    @property
    def cycles(self) -> np.ndarray:
        return np.arange(len(self.mean_error))


def mean_errors(errors_per_cycle: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Mean error of every cycle.

    Args:
        errors_per_cycle: errors_per_cycle[c] lists the errors of cycle c.

    Returns:
        Array of shape (C,); NaN for cycles without any successful read.

    Examples:
        >>> mean_errors([[1.0, 3.0], []]).tolist()
        [2.0, nan]
    """
    out = np.full(len(errors_per_cycle), np.nan)
    for c, errors in enumerate(errors_per_cycle):
        if len(errors) > 0:
            out[c] = float(np.mean(errors))
    return out


def miss_percentages(misses: Sequence[float], hits: Sequence[float]) -> np.ndarray:
    """
    Miss percentage misses / (misses + hits) * 100 of every cycle.

    Args:
        misses: Miss count per cycle.
        hits: Hit count per cycle.

    Returns:
        Array of shape (C,); NaN for cycles without any read.

    Raises:
        ValueError: If the inputs differ in length.

    Examples:
        >>> miss_percentages([1, 0], [3, 4]).tolist()
        [25.0, 0.0]
    """
    misses = np.asarray(misses, dtype=float)
    hits = np.asarray(hits, dtype=float)
    if misses.shape != hits.shape:
        raise ValueError(
            f"Shape mismatch: misses {misses.shape} vs hits {hits.shape}"
        )
    total = misses + hits
    out = np.full(misses.shape, np.nan)
    nonzero = total > 0
    out[nonzero] = misses[nonzero] / total[nonzero] * 100.0
    return out


def partition_series(
    statistics: Dict[str, CycleStatistics],
) -> Dict[str, ErrorMissSeries]:
    """Reduce every algorithm's accumulators in one partition."""
    return {name: stats.series() for name, stats in statistics.items()}


def summarize_series(series: ErrorMissSeries) -> Dict[str, float]:
    """
    Scalar summary of one algorithm's series.

    Returns:
        Dictionary with keys:
            - 'initial_error': Mean error of cycle 0
            - 'final_error': Mean error of the last cycle
            - 'mean_error': Mean over cycles (NaN cycles ignored)
            - 'initial_miss_pct': Miss percentage of cycle 0
            - 'final_miss_pct': Miss percentage of the last cycle
            - 'max_miss_pct': Largest miss percentage
    """
    def _nan_reduce(fn, values: np.ndarray) -> float:
        finite = values[~np.isnan(values)]
        return float(fn(finite)) if finite.size else float("nan")

    return {
        "initial_error": float(series.mean_error[0]),
        "final_error": float(series.mean_error[-1]),
        "mean_error": _nan_reduce(np.mean, series.mean_error),
        "initial_miss_pct": float(series.miss_pct[0]),
        "final_miss_pct": float(series.miss_pct[-1]),
        "max_miss_pct": _nan_reduce(np.max, series.miss_pct),
    }
