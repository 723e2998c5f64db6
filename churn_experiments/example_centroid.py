"""
Centroid Localization Under FIFO Churn

Runs the five centroid variants on the same map while 10% of the access
points are replaced oldest-first every cycle:
    - Centroid: learned AP centroids from seeding only
    - Enhanced: estimates nudged 10% towards the true location
    - Learning: every successful read is fed back as training
    - Enhanced Learning: both of the above
    - Smart Learning: learning with a 300-sample cap per AP

Learning variants should keep their error flat while plain centroid
degrades as the seeded access points disappear.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
from tqdm import tqdm

from wifisim.centroid import (
    Centroid,
    EnhancedCentroid,
    EnhancedLearningCentroid,
    LearningCentroid,
    SmartLearningCentroid,
)
from wifisim.eval import summarize_series
from wifisim.eval.plots import MatplotlibRenderer
from wifisim.sim import Engine, from_preset


def main():
    """Run the centroid churn experiment."""
    print("=" * 70)
    print("Centroid Localization Under FIFO Churn")
    print("=" * 70)

    output_dir = Path(__file__).parent / "figs" / "centroid"
    config = from_preset(
        "fifo_churn", test_cycles=20, random_seed=42, output_dir=str(output_dir)
    )
    print(f"\nConfiguration: {config}")
    print(f"Access points: {config.access_point_count}")

    engine = Engine(config, renderer=MatplotlibRenderer.for_config(config, draw_maps=False))
    for factory in (
        Centroid,
        EnhancedCentroid,
        LearningCentroid,
        EnhancedLearningCentroid,
        SmartLearningCentroid,
    ):
        algorithm = factory()
        engine.add_algorithm(algorithm.name, algorithm)

    print("\nSeeding...", end=" ", flush=True)
    n_seed = engine.seed()
    print(f"{n_seed} seed locations")

    for _ in tqdm(engine.iter_cycles(), total=config.test_cycles + 1, desc="Cycles"):
        pass

    report = engine.report()

    print("\n" + "=" * 70)
    print("RESULTS (full map)")
    print("=" * 70)
    print(
        f"{'Algorithm':<30} {'Err c0 (m)':<12} {'Err last (m)':<13} "
        f"{'Miss c0 (%)':<12} {'Miss last (%)':<12}"
    )
    print("-" * 80)
    for name, series in report.series["full"].items():
        s = summarize_series(series)
        print(
            f"{name:<30} {s['initial_error']:<12.2f} {s['final_error']:<13.2f} "
            f"{s['initial_miss_pct']:<12.2f} {s['final_miss_pct']:<12.2f}"
        )

    print("\n" + "=" * 70)
    print("RESULTS (center 500 x 500 m)")
    print("=" * 70)
    for name, series in report.series["center"].items():
        print(f"{name:<30} mean error {np.nanmean(series.mean_error):.2f} m")

    print(f"\nFigures written to: {output_dir}")


if __name__ == "__main__":
    main()
