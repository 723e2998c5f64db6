"""
Fingerprinting Under Random Churn

Stores every seed reading as a fingerprint keyed by the set of access
points heard, then localizes test reads by bucketed nearest-neighbour
retrieval while 10% of the access points are replaced at random every
cycle.

Compares:
    - Fingerprinting
    - Enhanced Fingerprinting (no empty fingerprints stored)
    - Learning Fingerprinting (estimates stored as new fingerprints)
    - Smart Learning Fingerprinting (estimates stored in batches of 1000)
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

from tqdm import tqdm

from wifisim.eval import summarize_series
from wifisim.eval.plots import MatplotlibRenderer
from wifisim.fingerprinting import (
    EnhancedFingerprinting,
    Fingerprinting,
    LearningFingerprinting,
    SmartLearningFingerprinting,
)
from wifisim.sim import Engine, from_preset


def main():
    """Run the fingerprinting churn experiment."""
    print("=" * 70)
    print("Fingerprinting Under Random Churn")
    print("=" * 70)

    output_dir = Path(__file__).parent / "figs" / "fingerprinting"
    # Coarser seed grid keeps the fingerprint database small.
    config = from_preset(
        "random_churn",
        seed_distance=10.0,
        test_distance=20.0,
        test_cycles=15,
        random_seed=7,
        output_dir=str(output_dir),
    )
    print(f"\nConfiguration: {config}")

    engine = Engine(config, renderer=MatplotlibRenderer.for_config(config))
    algorithms = [
        Fingerprinting(),
        EnhancedFingerprinting(),
        LearningFingerprinting(),
        SmartLearningFingerprinting(),
    ]
    for algorithm in algorithms:
        engine.add_algorithm(algorithm.name, algorithm)

    print("\nSeeding...", end=" ", flush=True)
    engine.seed()
    print("Done")
    for algorithm in algorithms:
        print(f"  {algorithm.name:<32} {algorithm.database}")

    progress = tqdm(engine.iter_cycles(), total=config.test_cycles + 1, desc="Cycles")
    for summary in progress:
        misses = sum(summary.misses.values())
        progress.set_postfix(replaced=summary.replaced, misses=misses)

    report = engine.report()

    print("\n" + "=" * 70)
    print("RESULTS SUMMARY")
    print("=" * 70)
    print(f"{'Algorithm':<32} {'Mean err (m)':<14} {'Final err (m)':<14} {'Max miss (%)':<12}")
    print("-" * 72)
    for name, series in report.series["full"].items():
        s = summarize_series(series)
        print(
            f"{name:<32} {s['mean_error']:<14.2f} {s['final_error']:<14.2f} "
            f"{s['max_miss_pct']:<12.2f}"
        )

    print("\nDatabase sizes after the run:")
    for algorithm in algorithms:
        print(f"  {algorithm.name:<32} {len(algorithm.database)} fingerprints")

    print(f"\nFigures written to: {output_dir}")


if __name__ == "__main__":
    main()
