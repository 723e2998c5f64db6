"""Simulation engine: seeding, churn cycles and statistics.

The engine drives one experiment:

    CONSTRUCTED  map populated with floor(w * h * density / 1e6) random APs
        |  seed()
    SEEDED       every algorithm fed from a regular grid over the whole map
        |  iter_cycles()
    CYCLING      cycle 0 .. test_cycles: churn (cycles > 0), shuffle the
        |        test grid, read each location once and broadcast to all
        |        algorithms, record errors / misses
        |  report()
    REPORTED     per-cycle series and final-frame snapshots computed
        |
    DONE         report handed to the renderer

All randomness comes from the Map's generator, consumed in a single global
order, so a fixed random_seed reproduces every series bit for bit. The
engine performs no I/O; rendering is delegated to a SimulationRenderer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence, Tuple

from wifisim.eval.metrics import CycleStatistics, ErrorMissSeries, partition_series
from wifisim.sim.config import SimulationConfig
from wifisim.sim.map import Map
from wifisim.sim.types import AccessPoint, Location

if TYPE_CHECKING:
    from wifisim.algorithms.base import LocalizationAlgorithm

# Test locations keep this distance (m) from the map border so access
# points can be heard from every direction.
TEST_MARGIN = 85.0

# Half-width (m) of the central region tracked by the "center" statistics.
CENTER_HALF_WIDTH = 250.0

# Half-width (m) of the center patch sampled for the final-frame snapshot.
CENTER_PATCH_HALF_WIDTH = 165.0

# Number of steps of the final-frame sampling grid along each axis.
LAST_FRAME_STEPS = 6

FULL = "full"
CENTER = "center"


class EngineState(Enum):
    """Lifecycle states of an Engine."""

    CONSTRUCTED = "constructed"
    SEEDED = "seeded"
    CYCLING = "cycling"
    REPORTED = "reported"
    DONE = "done"


@dataclass
class CycleSummary:
    """
    Outcome of one test cycle, yielded by Engine.iter_cycles.

    Attributes:
        cycle: Cycle index (0 is the cycle before any churn).
        n_locations: Number of test locations read.
        replaced: Number of access points replaced before the cycle.
        hits: Successful reads per algorithm.
        misses: Failed reads per algorithm.
    """

    cycle: int
    n_locations: int
    replaced: int
    hits: Dict[str, int] = field(default_factory=dict)
    misses: Dict[str, int] = field(default_factory=dict)


@dataclass
class LastFrame:
    """Paired truth/estimate locations of one algorithm for a snapshot."""

    sources: List[Location] = field(default_factory=list)
    estimates: List[Location] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sources)


@dataclass
class SimulationReport:
    """
    Everything the engine hands to a renderer.

    Attributes:
        config: Configuration of the run.
        series: series[partition][algorithm] -> ErrorMissSeries for the
                'full' and 'center' partitions.
        last_frames: last_frames[partition][algorithm] -> LastFrame.
        last_frame_bounds: Plot bounds ((xmin, xmax), (ymin, ymax)) per
                           partition.
        access_points: Live access points after the final cycle.
        generations: Generation boundaries (largest id per generation).
    """

    config: SimulationConfig
    series: Dict[str, Dict[str, ErrorMissSeries]]
    last_frames: Dict[str, Dict[str, LastFrame]]
    last_frame_bounds: Dict[str, Tuple[Tuple[float, float], Tuple[float, float]]]
    access_points: Tuple[AccessPoint, ...]
    generations: List[int]

    @property
    def algorithm_names(self) -> List[str]:
        return list(self.series[FULL].keys())


class SimulationRenderer:
    """
    Interface of the external rendering collaborator.

    The default implementation ignores everything; see
    wifisim.eval.plots.MatplotlibRenderer for one that writes figures.
    """

    def draw_map(
        self,
        access_points: Sequence[AccessPoint],
        generations: Sequence[int],
        width: float,
        height: float,
    ) -> None:
        """Snapshot of the access points, coloured by generation."""
        pass

    def plot_series(
        self,
        partition: str,
        series: Dict[str, ErrorMissSeries],
        config: SimulationConfig,
    ) -> None:
        """Per-cycle mean error and miss percentage per algorithm."""
        pass

    def plot_last_frame(
        self,
        partition: str,
        frames: Dict[str, LastFrame],
        bounds: Tuple[Tuple[float, float], Tuple[float, float]],
    ) -> None:
        """Truth-to-estimate arrows per algorithm."""
        pass


def grid_axis(start: float, stop: float, step: float) -> List[float]:
    """
    Points start, start + step, ... up to and including ``stop``.

    Raises:
        ValueError: If step is not positive.
    """
    if step <= 0:
        raise ValueError(f"Grid step must be positive, got {step}")
    values = []
    value = start
    while value <= stop:
        values.append(value)
        value += step
    return values


def grid_locations(
    x_axis: Sequence[float], y_axis: Sequence[float]
) -> List[Location]:
    """Cartesian grid in x-major order."""
    return [Location(x, y) for x in x_axis for y in y_axis]


class Engine:
    """
    Runs seeding, churn cycles and reporting for a set of algorithms.

    Attributes:
        config: Validated simulation configuration.
        map: Access point map (owns the random generator).
        algorithms: Registered algorithms by name, in registration order.
        generations: Largest access point id of every churn generation.
        statistics: statistics[partition][name] -> CycleStatistics.
        state: Current EngineState.

    Examples:
        >>> from wifisim.sim.config import from_preset
        >>> from wifisim.centroid import Centroid
        >>> engine = Engine(from_preset("quick", random_seed=1))
        >>> engine.add_algorithm("Centroid", Centroid())
        >>> report = engine.run()
        >>> report.algorithm_names
        ['Centroid']
    """

    def __init__(
        self,
        config: SimulationConfig,
        renderer: Optional[SimulationRenderer] = None,
    ):
        """
        Build the map and place the initial access points.

        Args:
            config: Simulation configuration (hard checks rerun here).
            renderer: External renderer. Defaults to a no-op renderer.

        Raises:
            ValueError: If the configuration is invalid.
        """
        config.validate()
        self.config = config
        self.renderer = renderer if renderer is not None else SimulationRenderer()
        self.map = Map(config.map_width, config.map_height, seed=config.random_seed)
        self.algorithms: Dict[str, "LocalizationAlgorithm"] = {}
        self.statistics: Dict[str, Dict[str, CycleStatistics]] = {FULL: {}, CENTER: {}}

        count = config.access_point_count
        for _ in range(count):
            self.map.add_random_access_point()
        self.generations: List[int] = [count]

        self.state = EngineState.CONSTRUCTED
        self._test_locations: Optional[List[Location]] = None
        self._completed_cycles = 0
        self._publish_map()

    def __repr__(self) -> str:
        return (
            f"Engine(state={self.state.value}, map={self.map!r}, "
            f"algorithms={list(self.algorithms)})"
        )

    def _require(self, *states: EngineState) -> None:
        if self.state not in states:
            expected = ", ".join(s.value for s in states)
            raise RuntimeError(
                f"Engine is '{self.state.value}', expected one of: {expected}"
            )

    def _publish_map(self) -> None:
        self.renderer.draw_map(
            self.map.access_points,
            list(self.generations),
            self.map.width,
            self.map.height,
        )

    def add_algorithm(self, name: str, algorithm: "LocalizationAlgorithm") -> None:
        """
        Register an algorithm under ``name``.

        Raises:
            ValueError: If the name is already registered.
            RuntimeError: If the engine has already been seeded.
        """
        self._require(EngineState.CONSTRUCTED)
        if name in self.algorithms:
            raise ValueError(f"Algorithm '{name}' is already registered")
        self.algorithms[name] = algorithm

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed(self) -> int:
        """
        Feed every algorithm from a grid over the whole map.

        The grid spans 0 .. width and 0 .. height inclusive at
        seed_distance spacing. Each point is read once and the same
        signals are fed to every algorithm.

        Returns:
            Number of seed locations.
        """
        self._require(EngineState.CONSTRUCTED)
        step = self.config.seed_distance
        locations = grid_locations(
            grid_axis(0.0, self.map.width, step),
            grid_axis(0.0, self.map.height, step),
        )
        for location in locations:
            signals = self.map.read(location)
            for algorithm in self.algorithms.values():
                algorithm.feed(signals, location)
        self.state = EngineState.SEEDED
        return len(locations)

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    @property
    def test_locations(self) -> List[Location]:
        """Test grid: TEST_MARGIN .. dim - TEST_MARGIN at test_distance."""
        if self._test_locations is None:
            step = self.config.test_distance
            self._test_locations = grid_locations(
                grid_axis(TEST_MARGIN, self.map.width - TEST_MARGIN, step),
                grid_axis(TEST_MARGIN, self.map.height - TEST_MARGIN, step),
            )
        return self._test_locations

    def in_center(self, location: Location) -> bool:
        """True if ``location`` lies in the central 500 x 500 m region."""
        cx, cy = self.config.center
        return (
            cx - CENTER_HALF_WIDTH <= location.x <= cx + CENTER_HALF_WIDTH
            and cy - CENTER_HALF_WIDTH <= location.y <= cy + CENTER_HALF_WIDTH
        )

    def replace_access_points(self) -> int:
        """
        Run one churn transaction and record the new generation boundary.

        Returns:
            Number of access points replaced.
        """
        added = self.map.replace_access_points(
            self.config.replacement_rate, self.config.replacement_strategy
        )
        self.generations.append(self.map.newest_id)
        self._publish_map()
        return len(added)

    def shuffle(self, locations: List[Location]) -> None:
        """In-place Fisher-Yates shuffle driven by the map's generator."""
        rng = self.map.rng
        for i in range(len(locations)):
            j = int(rng.integers(i + 1))
            locations[i], locations[j] = locations[j], locations[i]

    def iter_cycles(self) -> Iterator[CycleSummary]:
        """
        Run cycles 0 .. test_cycles, yielding a summary after each.

        Cycle 0 runs on the seeded population; every later cycle starts
        with a churn transaction. Test locations are reshuffled every
        cycle, and each location is read once and broadcast to all
        algorithms in registration order.

        Returns:
            Iterator yielding the CycleSummary of every completed cycle.

        Raises:
            RuntimeError: If the engine has not been seeded, or cycles
                          were already started.
        """
        self._require(EngineState.SEEDED)
        self.state = EngineState.CYCLING
        n_cycles = self.config.test_cycles + 1
        for partition in (FULL, CENTER):
            self.statistics[partition] = {
                name: CycleStatistics.empty(n_cycles) for name in self.algorithms
            }
        return self._cycles(n_cycles)

    def _cycles(self, n_cycles: int) -> Iterator[CycleSummary]:
        full = self.statistics[FULL]
        center = self.statistics[CENTER]
        locations = list(self.test_locations)

        for cycle in range(n_cycles):
            replaced = self.replace_access_points() if cycle != 0 else 0
            self.shuffle(locations)

            summary = CycleSummary(
                cycle=cycle,
                n_locations=len(locations),
                replaced=replaced,
                hits={name: 0 for name in self.algorithms},
                misses={name: 0 for name in self.algorithms},
            )
            for location in locations:
                signals = self.map.read(location)
                is_center = self.in_center(location)
                for name, algorithm in self.algorithms.items():
                    estimate, success = algorithm.read(signals, location)
                    if success:
                        error = location.distance_to(estimate)
                        full[name].record_hit(cycle, error)
                        if is_center:
                            center[name].record_hit(cycle, error)
                        summary.hits[name] += 1
                    else:
                        full[name].record_miss(cycle)
                        if is_center:
                            center[name].record_miss(cycle)
                        summary.misses[name] += 1

            self._completed_cycles = cycle + 1
            yield summary

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _last_frame(self, locations: List[Location]) -> Dict[str, LastFrame]:
        frames = {name: LastFrame() for name in self.algorithms}
        for location in locations:
            signals = self.map.read(location)
            for name, algorithm in self.algorithms.items():
                estimate, success = algorithm.read(signals, location)
                if success:
                    frames[name].sources.append(location)
                    frames[name].estimates.append(estimate)
        return frames

    def last_frame_full(self) -> Dict[str, LastFrame]:
        """Estimates over a coarse 6-step grid spanning the test area."""
        w, h = self.map.width, self.map.height
        step = (w - 2 * TEST_MARGIN) / LAST_FRAME_STEPS
        locations = grid_locations(
            grid_axis(TEST_MARGIN, w - TEST_MARGIN + 1.0, step),
            grid_axis(TEST_MARGIN, h - TEST_MARGIN + 1.0, step),
        )
        return self._last_frame(locations)

    def last_frame_center(self) -> Dict[str, LastFrame]:
        """Estimates over a 6-step grid on the 330 m center patch."""
        cx, cy = self.config.center
        step = 2 * CENTER_PATCH_HALF_WIDTH / LAST_FRAME_STEPS
        locations = grid_locations(
            grid_axis(cx - CENTER_PATCH_HALF_WIDTH, cx + CENTER_PATCH_HALF_WIDTH, step),
            grid_axis(cy - CENTER_PATCH_HALF_WIDTH, cy + CENTER_PATCH_HALF_WIDTH, step),
        )
        return self._last_frame(locations)

    def report(self) -> SimulationReport:
        """
        Build the report and hand it to the renderer.

        Final-frame snapshots read through the algorithms, so learning
        variants keep training during the snapshot.

        Returns:
            SimulationReport of the run.

        Raises:
            RuntimeError: If not all cycles have completed.
        """
        self._require(EngineState.CYCLING)
        if self._completed_cycles != self.config.test_cycles + 1:
            raise RuntimeError(
                f"Only {self._completed_cycles} of {self.config.test_cycles + 1} "
                f"cycles completed"
            )

        series = {
            FULL: partition_series(self.statistics[FULL]),
            CENTER: partition_series(self.statistics[CENTER]),
        }
        w, h = self.map.width, self.map.height
        cx, cy = self.config.center
        last_frames = {FULL: self.last_frame_full(), CENTER: self.last_frame_center()}
        bounds = {
            FULL: ((0.0, w), (0.0, h)),
            CENTER: (
                (cx - CENTER_HALF_WIDTH, cx + CENTER_HALF_WIDTH),
                (cy - CENTER_HALF_WIDTH, cy + CENTER_HALF_WIDTH),
            ),
        }
        report = SimulationReport(
            config=self.config,
            series=series,
            last_frames=last_frames,
            last_frame_bounds=bounds,
            access_points=self.map.access_points,
            generations=list(self.generations),
        )
        self.state = EngineState.REPORTED

        for partition in (CENTER, FULL):
            self.renderer.plot_series(partition, series[partition], self.config)
        for partition in (FULL, CENTER):
            self.renderer.plot_last_frame(
                partition, last_frames[partition], bounds[partition]
            )
        self.state = EngineState.DONE
        return report

    def run(self) -> SimulationReport:
        """Seed, run every cycle and report."""
        self.seed()
        for _ in self.iter_cycles():
            pass
        return self.report()
