"""
Run a Wi-Fi localization simulation under access point churn.

Builds a SimulationConfig from a preset, a JSON file or command-line
overrides, registers the selected algorithms, runs seeding and all test
cycles with a progress bar, and writes error/miss figures, final-frame
snapshots and map snapshots into the output directory.

Default run (matches the reference experiment):
    - 1000 x 1000 m map, 1500 APs/km^2
    - Seed grid 5 m, test grid 10 m
    - 50 cycles, 10% of APs replaced oldest-first per cycle
    - The five centroid variants
"""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
from tqdm import tqdm

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wifisim.centroid import (
    Centroid,
    EnhancedCentroid,
    EnhancedLearningCentroid,
    LearningCentroid,
    SmartLearningCentroid,
)
from wifisim.eval import summarize_series
from wifisim.eval.plots import MatplotlibRenderer
from wifisim.fingerprinting import (
    EnhancedFingerprinting,
    EnhancedLearningFingerprinting,
    Fingerprinting,
    LearningFingerprinting,
    SmartLearningFingerprinting,
)
from wifisim.sim import PRESETS, Engine, SimulationConfig, load_config, save_config

ALGORITHMS = {
    "centroid": Centroid,
    "learning-centroid": LearningCentroid,
    "smart-learning-centroid": SmartLearningCentroid,
    "enhanced-centroid": EnhancedCentroid,
    "enhanced-learning-centroid": EnhancedLearningCentroid,
    "fingerprinting": Fingerprinting,
    "learning-fingerprinting": LearningFingerprinting,
    "smart-learning-fingerprinting": SmartLearningFingerprinting,
    "enhanced-fingerprinting": EnhancedFingerprinting,
    "enhanced-learning-fingerprinting": EnhancedLearningFingerprinting,
}

ALGORITHM_GROUPS = {
    "centroids": [k for k in ALGORITHMS if k.endswith("centroid")],
    "fingerprints": [k for k in ALGORITHMS if k.endswith("fingerprinting")],
    "all": list(ALGORITHMS),
}


def resolve_algorithms(selection):
    """
    Expand group names and check algorithm names.

    Raises:
        ValueError: If a name is neither an algorithm nor a group.
    """
    names = []
    for item in selection:
        item = item.lower()
        if item in ALGORITHM_GROUPS:
            expanded = ALGORITHM_GROUPS[item]
        elif item in ALGORITHMS:
            expanded = [item]
        else:
            raise ValueError(
                f"Unknown algorithm '{item}'. Choose from: "
                f"{sorted(ALGORITHMS) + sorted(ALGORITHM_GROUPS)}"
            )
        for name in expanded:
            if name not in names:
                names.append(name)
    return names


def run_simulation(config, algorithm_keys, draw_maps=True, verbose=True):
    """
    Run one simulation and return its report.

    Args:
        config: SimulationConfig.
        algorithm_keys: Keys of ALGORITHMS to register, in order.
        draw_maps: Whether to write map snapshots every cycle.
        verbose: Show a progress bar.

    Returns:
        SimulationReport
    """
    renderer = MatplotlibRenderer.for_config(config, draw_maps=draw_maps)
    engine = Engine(config, renderer=renderer)
    for key in algorithm_keys:
        algorithm = ALGORITHMS[key]()
        engine.add_algorithm(algorithm.name, algorithm)

    engine.seed()
    cycles = engine.iter_cycles()
    if verbose:
        cycles = tqdm(cycles, total=config.test_cycles + 1, desc="Cycles")
    for _ in cycles:
        pass
    return engine.report()


def print_summary(report):
    """Print per-algorithm error and miss summaries for both partitions."""
    for partition in ("full", "center"):
        print(f"\n{'='*70}")
        print(f"Results ({partition})")
        print(f"{'='*70}")
        print(
            f"{'Algorithm':<34} {'Err c0':<9} {'Err last':<9} "
            f"{'Miss c0':<9} {'Miss last':<9}"
        )
        print("-" * 70)
        for name, series in report.series[partition].items():
            s = summarize_series(series)
            print(
                f"{name:<34} {s['initial_error']:<9.2f} {s['final_error']:<9.2f} "
                f"{s['initial_miss_pct']:<9.2f} {s['final_miss_pct']:<9.2f}"
            )


def main():
    """Main CLI entry point."""
    import argparse

    preset_lines = "\n".join(
        f"  {name:<13} {params['description']}" for name, params in PRESETS.items()
    )
    parser = argparse.ArgumentParser(
        description="Simulate Wi-Fi localization under access point churn",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Presets:
{preset_lines}

Algorithms:
  {", ".join(ALGORITHMS)}
  Groups: {", ".join(ALGORITHM_GROUPS)}

Examples:
  # Reference experiment: FIFO churn, centroid variants
  python scripts/run_churn_simulation.py --preset fifo_churn

  # Fingerprinting under random churn, fixed seed
  python scripts/run_churn_simulation.py --preset random_churn \\
      --algorithms fingerprints --seed 3

  # Custom configuration from JSON
  python scripts/run_churn_simulation.py --config my_run.json
        """,
    )

    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS),
        default="fifo_churn",
        help="Preset configuration (default: fifo_churn)",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="JSON configuration file (overrides --preset)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory (default: graphs/<preset>)",
    )
    parser.add_argument(
        "--algorithms",
        nargs="+",
        default=["centroids"],
        help="Algorithms or groups to run (default: centroids)",
    )

    sim_group = parser.add_argument_group("Simulation Overrides")
    sim_group.add_argument("--cycles", type=int, help="Number of churn cycles")
    sim_group.add_argument("--rate", type=float, help="Replacement rate in [0, 1]")
    sim_group.add_argument(
        "--strategy", type=str, choices=["fifo", "random"], help="Replacement strategy"
    )
    sim_group.add_argument("--density", type=float, help="Access points per km^2")
    sim_group.add_argument("--seed-distance", type=float, help="Seed grid spacing (m)")
    sim_group.add_argument("--test-distance", type=float, help="Test grid spacing (m)")

    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: random)")
    parser.add_argument(
        "--no-maps", action="store_true", help="Do not write map snapshots"
    )
    parser.add_argument(
        "--save-config", action="store_true", help="Write config.json into the output directory"
    )

    args = parser.parse_args()

    overrides = {}
    for field, value in (
        ("test_cycles", args.cycles),
        ("replacement_rate", args.rate),
        ("replacement_strategy", args.strategy),
        ("access_point_density", args.density),
        ("seed_distance", args.seed_distance),
        ("test_distance", args.test_distance),
        ("random_seed", args.seed),
    ):
        if value is not None:
            overrides[field] = value

    if args.config:
        params = load_config(args.config).to_dict()
        params.update(overrides)
        output_dir = args.output or params["output_dir"]
    else:
        params = {k: v for k, v in PRESETS[args.preset].items() if k != "description"}
        params.update(overrides)
        output_dir = args.output or f"graphs/{args.preset}"
    params["output_dir"] = output_dir

    try:
        config = SimulationConfig.from_dict(params)
        algorithm_keys = resolve_algorithms(args.algorithms)
    except ValueError as e:
        parser.error(str(e))

    print(f"\n{'='*70}")
    print("Churn Simulation")
    print(f"{'='*70}")
    print(f"  Map:            {config.map_width:.0f} x {config.map_height:.0f} m")
    print(f"  Access points:  {config.access_point_count} ({config.access_point_density}/km^2)")
    print(f"  Seed / test:    {config.seed_distance} m / {config.test_distance} m")
    print(f"  Cycles:         {config.test_cycles}")
    strategy = config.replacement_strategy.value if config.replacement_strategy else "none"
    print(f"  Replacement:    {config.replacement_rate:.0%} ({strategy})")
    print(f"  Random seed:    {config.random_seed}")
    print(f"  Algorithms:     {', '.join(algorithm_keys)}")
    print(f"  Output:         {output_dir}")

    if args.save_config:
        save_config(config, Path(output_dir) / "config.json")

    report = run_simulation(config, algorithm_keys, draw_maps=not args.no_maps)
    print_summary(report)

    n_nan = sum(
        int(np.isnan(s.mean_error).sum()) for s in report.series["full"].values()
    )
    if n_nan:
        print(f"\nNote: {n_nan} cycle(s) without a successful read (error shown as NaN)")
    print(f"\nOK Figures written to: {output_dir}")


if __name__ == "__main__":
    main()
