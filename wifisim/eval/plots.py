"""
Visualization of churn simulations.

This module provides the figure builders for simulation reports and the
MatplotlibRenderer that the engine calls while it runs:

    - Map snapshots with access points coloured by churn generation
    - Per-cycle mean error and miss percentage per algorithm
    - Final-frame arrows from true location to estimate

Figure builders return matplotlib Figure objects; only the renderer and
save_figure touch the filesystem.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from wifisim.eval.metrics import ErrorMissSeries
from wifisim.sim.config import SimulationConfig
from wifisim.sim.engine import LastFrame, SimulationRenderer
from wifisim.sim.map import generation_of
from wifisim.sim.types import AccessPoint

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]

MARKERS = ["o", "s", "^", "D", "v", "P", "X", "*"]


def generation_colors(n_generations: int) -> List[Tuple[float, float, float]]:
    """
    RGB colours for access point generations.

    The seeded population is green; churn generations fade from blue
    (oldest) to red (newest).

    Args:
        n_generations: Number of generations, including the seeded one.

    Returns:
        List of (r, g, b) tuples in [0, 1], one per generation.

    Examples:
        >>> generation_colors(3)
        [(0.0, 1.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0, 0.0)]
    """
    if n_generations < 1:
        return []
    colors = [(0.0, 1.0, 0.0)]
    n_churn = n_generations - 1
    for g in range(1, n_generations):
        # Newest generation is pure red.
        age = n_generations - 1 - g
        shade = age / (n_churn - 1) if n_churn > 1 else 0.0
        colors.append((1.0 - shade, 0.0, shade))
    return colors


def algorithm_letters(names: Sequence[str]) -> str:
    """
    Compact tag of an algorithm set for output filenames.

    Every name contributes E (Enhanced), L (Learning), C (Centroid) and F
    (Fingerprinting) for the words it contains, in that order.

    Examples:
        >>> algorithm_letters(["Centroid", "Enhanced Learning Fingerprinting"])
        'CELF'
    """
    letters = []
    for name in names:
        for word, letter in (
            ("Enhanced", "E"),
            ("Learning", "L"),
            ("Centroid", "C"),
            ("Fingerprinting", "F"),
        ):
            if word in name:
                letters.append(letter)
    return "".join(letters)


def series_basename(config: SimulationConfig, names: Sequence[str]) -> str:
    """
    Filename stem shared by the error and miss figures of a run.

    Format: dens{density/100}-dist{seed}-Cyc{cycles}-{rate%}-{strategy}-{tag}
    """
    strategy = (
        config.replacement_strategy.value
        if config.replacement_strategy is not None
        else "none"
    )
    return (
        f"dens{int(config.access_point_density // 100)}"
        f"-dist{config.seed_distance:.0f}"
        f"-Cyc{config.test_cycles}"
        f"-{int(config.replacement_rate * 100)}"
        f"-{strategy}"
        f"-{algorithm_letters(names)}"
    )


def plot_access_point_map(
    access_points: Sequence[AccessPoint],
    generations: Sequence[int],
    width: float,
    height: float,
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Plot access point positions coloured by churn generation.

    Args:
        access_points: Live access points.
        generations: Generation boundaries (largest id per generation).
        width: Map width (m).
        height: Map height (m).
        title: Plot title (defaults to the generation count).

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(8, 8 * height / width))

    colors = generation_colors(len(generations))
    for g, color in enumerate(colors):
        members = [
            ap for ap in access_points if generation_of(ap.id, generations) == g
        ]
        if not members:
            continue
        xy = np.array([ap.location.as_array() for ap in members])
        label = "Seeded" if g == 0 else f"Generation {g}"
        ax.scatter(xy[:, 0], xy[:, 1], s=8, marker="s", color=color, label=label)

    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_xticks(np.arange(0, width + 1, 100))
    ax.set_yticks(np.arange(0, height + 1, 100))
    ax.grid(True, color="0.82", linewidth=0.6)
    ax.set_aspect("equal")
    ax.set_xlabel("X (m)", fontsize=11)
    ax.set_ylabel("Y (m)", fontsize=11)
    if title is None:
        title = f"Access Points ({len(generations)} generations)"
    ax.set_title(title, fontsize=12, fontweight="bold")
    if len(generations) <= 6:
        ax.legend(fontsize=8, loc="upper right")

    plt.tight_layout()
    return fig


def plot_series(
    series: Dict[str, ErrorMissSeries],
    quantity: str = "error",
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Plot one per-cycle quantity for every algorithm.

    Args:
        series: Series per algorithm name.
        quantity: 'error' (mean error) or 'miss' (miss percentage).
        title: Plot title

    Returns:
        fig: Matplotlib figure

    Raises:
        ValueError: If quantity is unknown.
    """
    if quantity not in ("error", "miss"):
        raise ValueError(f"Unknown quantity '{quantity}'. Use 'error' or 'miss'.")

    fig, ax = plt.subplots(figsize=(10, 6))

    for i, (name, s) in enumerate(series.items()):
        values = s.mean_error if quantity == "error" else s.miss_pct
        ax.plot(
            s.cycles,
            values,
            label=name,
            color="black",
            marker=MARKERS[i % len(MARKERS)],
            markevery=2,
            linewidth=2,
        )

    n_cycles = max((len(s.mean_error) for s in series.values()), default=1)
    ax.set_xlim(0, max(n_cycles - 1, 1))
    ax.set_xlabel("Cycles", fontsize=12)
    if quantity == "error":
        ax.set_ylabel("Average Error (m)", fontsize=12)
    else:
        ax.set_ylabel("Miss Percentage", fontsize=12)
    if title:
        ax.set_title(title, fontsize=14, fontweight="bold")
    if series:
        ax.legend(fontsize=9)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def plot_last_frame(
    frame: LastFrame,
    bounds: Bounds,
    title: str = "Final Frame",
) -> plt.Figure:
    """
    Plot arrows from each true location to its estimate.

    Args:
        frame: Paired truth/estimate locations.
        bounds: ((xmin, xmax), (ymin, ymax)) of the plot.
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(8, 8))

    if len(frame) > 0:
        src = np.array([loc.as_array() for loc in frame.sources])
        est = np.array([loc.as_array() for loc in frame.estimates])
        delta = est - src
        ax.quiver(
            src[:, 0],
            src[:, 1],
            delta[:, 0],
            delta[:, 1],
            angles="xy",
            scale_units="xy",
            scale=1.0,
            width=0.004,
            color="black",
        )
        ax.plot(src[:, 0], src[:, 1], "k.", markersize=4)

    (xmin, xmax), (ymin, ymax) = bounds
    ax.set_xlim(xmin, xmax)
    ax.set_ylim(ymin, ymax)
    ax.set_aspect("equal")
    ax.set_xlabel("X (m)", fontsize=11)
    ax.set_ylabel("Y (m)", fontsize=11)
    ax.set_title(title, fontsize=12, fontweight="bold")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("pdf",),
) -> List[Path]:
    """
    Save figure in multiple formats and close it.

    Args:
        fig: Matplotlib figure to save
        out_dir: Output directory
        name: Base filename (without extension)
        formats: Tuple of format extensions

    Returns:
        paths: List of saved file paths
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        filepath = out_dir / f"{name}.{fmt}"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        paths.append(filepath)

    plt.close(fig)
    return paths


class MatplotlibRenderer(SimulationRenderer):
    """
    Renderer writing simulation figures to disk.

    Layout under ``output_dir``:
        maps/map{N}.png                       map after N generations
        {stem}-errors-{Full|Center}.pdf       mean error per cycle
        {stem}-misses-{Full|Center}.pdf       miss percentage per cycle
        {algorithm}-{full|center}.pdf         final-frame arrows

    Attributes:
        output_dir: Root directory for all figures.
        draw_maps: Whether map snapshots are written.
        saved: Paths written so far, in order.

    Examples:
        >>> import matplotlib
        >>> matplotlib.use("Agg")
        >>> renderer = MatplotlibRenderer("graphs", draw_maps=False)
    """

    def __init__(self, output_dir: Union[str, Path] = "graphs", draw_maps: bool = True):
        self.output_dir = Path(output_dir)
        self.draw_maps = draw_maps
        self.saved: List[Path] = []

    @classmethod
    def for_config(cls, config: SimulationConfig, **kwargs) -> "MatplotlibRenderer":
        """Renderer writing into ``config.output_dir``."""
        return cls(config.output_dir, **kwargs)

    def draw_map(
        self,
        access_points: Sequence[AccessPoint],
        generations: Sequence[int],
        width: float,
        height: float,
    ) -> None:
        if not self.draw_maps:
            return
        fig = plot_access_point_map(access_points, generations, width, height)
        self.saved += save_figure(
            fig, self.output_dir / "maps", f"map{len(generations)}", formats=("png",)
        )

    def plot_series(
        self,
        partition: str,
        series: Dict[str, ErrorMissSeries],
        config: SimulationConfig,
    ) -> None:
        stem = series_basename(config, list(series.keys()))
        suffix = partition.capitalize()
        for quantity, label in (("error", "errors"), ("miss", "misses")):
            fig = plot_series(series, quantity=quantity)
            self.saved += save_figure(fig, self.output_dir, f"{stem}-{label}-{suffix}")

    def plot_last_frame(
        self,
        partition: str,
        frames: Dict[str, LastFrame],
        bounds: Bounds,
    ) -> None:
        for name, frame in frames.items():
            fig = plot_last_frame(frame, bounds, title=f"{name} ({partition})")
            self.saved += save_figure(fig, self.output_dir, f"{name}-{partition}")
