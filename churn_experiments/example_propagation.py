"""
Characterization of the Radio Propagation Model

Samples the reception and signal-strength models at 5..100 m and writes:
    - responseRates.pdf: response rate vs distance
    - signalStrengths.pdf: median RSS vs distance
    - readings.pdf: RSS histograms at 5, 45 and 75 m
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np

from wifisim.eval.plots import save_figure
from wifisim.eval.propagation import (
    characterize_propagation,
    plot_median_strength,
    plot_reading_histograms,
    plot_response_rate,
)
from wifisim.rf import expected_signal_count, max_reception_range


def main():
    """Run the propagation characterization."""
    print("=" * 70)
    print("Radio Propagation Model Characterization")
    print("=" * 70)

    print(f"\nMaximum reception range: {max_reception_range():.1f} m")
    for density in (500, 1000, 1500, 2000):
        print(f"  {density:>5} APs/km^2 -> {expected_signal_count(density):.1f} signals per read")

    print("\nSampling...", end=" ", flush=True)
    result = characterize_propagation(n_trials=200_000, rng=np.random.default_rng(0))
    print("Done")

    print(f"\n{'Distance (m)':<14} {'Response (%)':<14} {'Mode (dBm)':<10}")
    print("-" * 40)
    for distance, rate, hist in zip(result.distances, result.response_rates, result.histograms):
        mode = result.rss_bins[int(np.argmax(hist))] if hist.any() else float("nan")
        print(f"{distance:<14.0f} {rate:<14.1f} {mode:<10.0f}")

    out_dir = Path(__file__).parent / "figs" / "propagation"
    save_figure(plot_response_rate(result), out_dir, "responseRates")
    save_figure(plot_median_strength(), out_dir, "signalStrengths")
    save_figure(plot_reading_histograms(result), out_dir, "readings")
    print(f"\nFigures written to: {out_dir}")


if __name__ == "__main__":
    main()
