"""
Monte-Carlo characterization of the radio propagation model.

Samples the reception and signal-strength models at a set of distances and
summarizes:

    - response rate: percentage of trials in which the beacon was heard
    - reading histogram: distribution of truncated RSS values in
      [-100, -50) dBm, as a percentage of the readings in that window
    - median strength curve: RSS_median(d) over a distance range

The sampling is vectorized but draws from the same distributions as
wifisim.rf.propagation.received / strength.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from wifisim.rf.propagation import median_strength, noise_std, reception_probability

DEFAULT_DISTANCES = tuple(float(d) for d in range(5, 101, 5))

# Histogram window (dBm): one bin per integer value in [RSS_MIN, RSS_MAX).
RSS_MIN = -100
RSS_MAX = -50


@dataclass
class PropagationCharacterization:
    """
    Result of characterize_propagation.

    Attributes:
        distances: Sampled distances (m), shape (D,).
        response_rates: Percentage of trials with a reading, shape (D,).
        histograms: Percentage of in-window readings per integer dBm value,
                    shape (D, RSS_MAX - RSS_MIN).
        n_trials: Trials per distance.
    """

    distances: np.ndarray
    response_rates: np.ndarray
    histograms: np.ndarray
    n_trials: int

    @property
    def rss_bins(self) -> np.ndarray:
        """Integer dBm value of every histogram bin."""
        return np.arange(RSS_MIN, RSS_MAX, dtype=float)

    def histogram_at(self, distance: float) -> np.ndarray:
        """
        Histogram of the sampled distance closest to ``distance``.

        Raises:
            ValueError: If no distances were sampled.
        """
        if self.distances.size == 0:
            raise ValueError("No distances sampled")
        idx = int(np.argmin(np.abs(self.distances - distance)))
        return self.histograms[idx]


def sample_readings(
    distance: float,
    n_trials: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Draw ``n_trials`` reception attempts at one distance.

    Args:
        distance: Distance to the access point (m).
        n_trials: Number of attempts.
        rng: Random number generator.

    Returns:
        RSS values (dBm) of the received beacons only.
    """
    heard = rng.random(n_trials) < reception_probability(distance)
    n_heard = int(np.count_nonzero(heard))
    rss = median_strength(distance)
    theta = 2.0 * np.pi * rng.random(n_heard)
    rho = np.sqrt(-2.0 * np.log(1.0 - rng.random(n_heard)))
    return rss + noise_std(rss) * rho * np.sin(theta)


def characterize_propagation(
    distances: Sequence[float] = DEFAULT_DISTANCES,
    n_trials: int = 100_000,
    rng: Optional[np.random.Generator] = None,
) -> PropagationCharacterization:
    """
    Estimate response rates and RSS histograms by simulation.

    Readings are truncated toward zero to whole dBm before binning;
    readings outside [RSS_MIN, RSS_MAX) count towards the response rate
    but are left out of the histogram.

    Args:
        distances: Distances (m) to sample.
        n_trials: Trials per distance.
        rng: Random number generator (default: fresh unseeded generator).

    Returns:
        PropagationCharacterization

    Raises:
        ValueError: If n_trials is not positive.

    Examples:
        >>> result = characterize_propagation([5.0, 90.0], n_trials=1000,
        ...                                   rng=np.random.default_rng(0))
        >>> bool(result.response_rates[0] > result.response_rates[1])
        True
    """
    if n_trials < 1:
        raise ValueError(f"n_trials must be positive, got {n_trials}")
    if rng is None:
        rng = np.random.default_rng()

    distances = np.asarray(distances, dtype=float)
    n_bins = RSS_MAX - RSS_MIN
    response_rates = np.zeros(len(distances))
    histograms = np.zeros((len(distances), n_bins))

    for i, distance in enumerate(distances):
        readings = sample_readings(float(distance), n_trials, rng)
        response_rates[i] = len(readings) / n_trials * 100.0

        values = np.trunc(readings).astype(int)
        in_window = values[(values >= RSS_MIN) & (values < RSS_MAX)]
        counts = np.bincount(in_window - RSS_MIN, minlength=n_bins).astype(float)
        total = counts.sum()
        if total > 0:
            histograms[i] = counts / total * 100.0

    return PropagationCharacterization(
        distances=distances,
        response_rates=response_rates,
        histograms=histograms,
        n_trials=n_trials,
    )


def plot_response_rate(
    result: PropagationCharacterization,
    title: str = "Response Rate vs Distance",
) -> plt.Figure:
    """
    Plot the response rate against distance.

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(8, 5))

    ax.plot(
        result.distances,
        result.response_rates,
        "ks-",
        markersize=4,
        linewidth=1,
        label="Response Rate",
    )
    ax.set_xlim(0, 100)
    ax.set_ylim(0, 100)
    ax.set_xlabel("Distance from AP (m)", fontsize=12)
    ax.set_ylabel("Response Rate (%)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10, loc="upper right")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def plot_median_strength(
    max_distance: float = 125.0,
    title: str = "Median Signal Strength",
) -> plt.Figure:
    """
    Plot the median RSS model from 5 m up to ``max_distance``.

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(8, 5))

    d = np.arange(5.0, max_distance)
    ax.plot(d, median_strength(d), "k-", linewidth=2, label="Median signal strength")
    ax.set_xlim(0, 140)
    ax.set_ylim(-100, -50)
    ax.set_xlabel("Distance (m)", fontsize=12)
    ax.set_ylabel("Signal Strength (dBm)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10, loc="upper right")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def plot_reading_histograms(
    result: PropagationCharacterization,
    distances: Sequence[float] = (75.0, 45.0, 5.0),
    title: str = "Distribution of Readings",
) -> plt.Figure:
    """
    Plot RSS reading histograms at selected distances.

    Each curve is labelled with the response rate at that distance.

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(8, 5))

    markers = ["s", "D", "o", "^", "v"]
    for i, distance in enumerate(distances):
        idx = int(np.argmin(np.abs(result.distances - distance)))
        hist = np.where(result.histograms[idx] > 0, result.histograms[idx], np.nan)
        ax.plot(
            result.rss_bins,
            hist,
            color="black",
            marker=markers[i % len(markers)],
            markersize=3,
            linewidth=1,
            label=(
                f"{result.distances[idx]:.0f} m, "
                f"Response Rate={result.response_rates[idx]:.0f}%"
            ),
        )

    ax.set_xlim(RSS_MIN, RSS_MAX)
    ax.set_ylim(0, 30)
    ax.set_xlabel("Signal Strength (dBm)", fontsize=12)
    ax.set_ylabel("Percentage of readings", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=9, loc="upper right")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig
