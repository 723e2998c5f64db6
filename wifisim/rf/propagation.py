"""
Stochastic Wi-Fi propagation model.

This module maps the distance between a receiver and an access point to:
- the probability that a beacon from the access point is detected, and
- a noisy received signal strength (RSS) in dBm.

Model summary:
    P(received | d) = 0.6 - ln(d / 64 + 0.5)
    RSS_median(d)   = -58 - 14 * log10(d + 5)                [dBm]
    sigma(rss)      = 0.0497 * rss + 6.3438                  [dB]
    RSS(d)          = RSS_median + sigma * rho * sin(theta)

where theta ~ U[0, 2*pi) and rho = sqrt(-2 ln(1 - u)), u ~ U[0, 1)
(Box-Muller). The noise is heteroscedastic: weaker (more negative) median
RSS values give a smaller sigma, so strong nearby beacons are noisier in
absolute dB terms and distant ones cluster closer to the median.

The reception probability is intentionally left unclamped. For very small
distances it exceeds 1 (always received) and for large distances it goes
negative (never received); comparing a uniform draw against it saturates
naturally.
"""

from typing import Union

import numpy as np

# Reception model constants
RECEPTION_OFFSET = 0.6
RECEPTION_DISTANCE_SCALE = 64.0
RECEPTION_DISTANCE_BIAS = 0.5

# Median RSS model constants (dBm)
RSS_AT_ORIGIN_DBM = -58.0
RSS_SLOPE_DB_PER_DECADE = 14.0
RSS_DISTANCE_BIAS = 5.0

# Heteroscedastic noise model: sigma = NOISE_SLOPE * rss + NOISE_INTERCEPT
NOISE_SLOPE = 0.0497
NOISE_INTERCEPT = 6.3438


def reception_probability(
    distance: Union[float, np.ndarray],
) -> Union[float, np.ndarray]:
    """
    Probability that a beacon is detected at the given distance.

    Implements P = 0.6 - ln(d/64 + 0.5) without clamping to [0, 1].

    Args:
        distance: Distance(s) between receiver and access point in meters.

    Returns:
        Unclamped reception probability (same shape as input).

    Example:
        >>> reception_probability(0.0) > 1.0
        True
        >>> round(reception_probability(32.0), 4)
        0.6
    """
    if isinstance(distance, np.ndarray):
        return RECEPTION_OFFSET - np.log(
            distance / RECEPTION_DISTANCE_SCALE + RECEPTION_DISTANCE_BIAS
        )
    return RECEPTION_OFFSET - float(
        np.log(distance / RECEPTION_DISTANCE_SCALE + RECEPTION_DISTANCE_BIAS)
    )


def received(distance: float, rng: np.random.Generator) -> bool:
    """
    Decide whether a beacon is received at the given distance.

    Consumes exactly one uniform draw from ``rng``.

    Args:
        distance: Distance between receiver and access point in meters.
        rng: Random number generator shared by the simulation.

    Returns:
        True if the beacon is detected.
    """
    return rng.random() < reception_probability(distance)


def median_strength(
    distance: Union[float, np.ndarray],
) -> Union[float, np.ndarray]:
    """
    Median received signal strength in dBm.

    Implements RSS = -58 - 14 * log10(d + 5).

    Args:
        distance: Distance(s) in meters.

    Returns:
        Median RSS in dBm (same shape as input).

    Example:
        >>> round(median_strength(5.0), 2)
        -72.0
    """
    if isinstance(distance, np.ndarray):
        return RSS_AT_ORIGIN_DBM - RSS_SLOPE_DB_PER_DECADE * np.log10(
            distance + RSS_DISTANCE_BIAS
        )
    return RSS_AT_ORIGIN_DBM - RSS_SLOPE_DB_PER_DECADE * float(
        np.log10(distance + RSS_DISTANCE_BIAS)
    )


def noise_std(rss: float) -> float:
    """Standard deviation (dB) of the RSS noise around a median value."""
    return NOISE_SLOPE * rss + NOISE_INTERCEPT


def strength(distance: float, rng: np.random.Generator) -> float:
    """
    Draw a noisy received signal strength for the given distance.

    Two uniform draws are consumed from ``rng``, angle first, then radius.

    Args:
        distance: Distance between receiver and access point in meters.
        rng: Random number generator shared by the simulation.

    Returns:
        RSS sample in dBm.
    """
    rss = median_strength(distance)
    theta = 2.0 * np.pi * rng.random()
    rho = np.sqrt(-2.0 * np.log(1.0 - rng.random()))
    return float(rss + noise_std(rss) * rho * np.sin(theta))


def max_reception_range() -> float:
    """Distance (m) beyond which the reception probability is <= 0."""
    return RECEPTION_DISTANCE_SCALE * (
        float(np.exp(RECEPTION_OFFSET)) - RECEPTION_DISTANCE_BIAS
    )


def expected_signal_count(density_per_km2: float, n_steps: int = 2000) -> float:
    """
    Expected number of beacons received at a point far from the map edge.

    Integrates the (clamped) reception probability over a disc:
        E = density * integral_0^R min(1, max(0, P(r))) * 2*pi*r dr

    Args:
        density_per_km2: Access point density per km^2.
        n_steps: Number of integration steps.

    Returns:
        Expected number of signals in one read.
    """
    r_max = max_reception_range()
    dr = r_max / n_steps
    r = (np.arange(n_steps) + 0.5) * dr
    p = np.clip(reception_probability(r), 0.0, 1.0)
    density_per_m2 = density_per_km2 / 1e6
    return float(density_per_m2 * np.sum(p * 2.0 * np.pi * r) * dr)
