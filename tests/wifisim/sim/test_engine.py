"""Unit and integration tests for wifisim.sim.engine.

Covers lifecycle ordering, grid construction, churn bookkeeping,
statistics, reproducibility and an end-to-end centroid sanity check.
"""

import numpy as np
import pytest

from wifisim.centroid import Centroid, LearningCentroid
from wifisim.fingerprinting import Fingerprinting
from wifisim.sim import Engine, EngineState, SimulationRenderer, from_preset
from wifisim.sim.engine import CENTER, FULL, TEST_MARGIN, grid_axis, grid_locations
from wifisim.sim.types import Location


class RecordingRenderer(SimulationRenderer):
    """Remembers every call made by the engine."""

    def __init__(self):
        self.maps = []
        self.series = []
        self.frames = []

    def draw_map(self, access_points, generations, width, height):
        self.maps.append((len(access_points), list(generations)))

    def plot_series(self, partition, series, config):
        self.series.append((partition, sorted(series)))

    def plot_last_frame(self, partition, frames, bounds):
        self.frames.append((partition, bounds))


def quick_engine(seed=1, renderer=None, **overrides):
    config = from_preset("quick", random_seed=seed, **overrides)
    engine = Engine(config, renderer=renderer)
    engine.add_algorithm("Centroid", Centroid())
    engine.add_algorithm("Learning Centroid", LearningCentroid())
    return engine


class TestGrid:
    """Test suite for grid helpers."""

    def test_inclusive_axis(self):
        assert grid_axis(0.0, 10.0, 5.0) == [0.0, 5.0, 10.0]

    def test_axis_stops_before_overshoot(self):
        assert grid_axis(85.0, 315.0, 40.0) == [85.0, 125.0, 165.0, 205.0, 245.0, 285.0]

    def test_invalid_step(self):
        with pytest.raises(ValueError, match="Grid step must be positive"):
            grid_axis(0.0, 10.0, 0.0)

    def test_x_major_order(self):
        locs = grid_locations([0.0, 1.0], [5.0, 6.0])
        assert locs == [
            Location(0.0, 5.0),
            Location(0.0, 6.0),
            Location(1.0, 5.0),
            Location(1.0, 6.0),
        ]


class TestLifecycle:
    """Test suite for engine state ordering."""

    def test_initial_population(self):
        engine = quick_engine()

        assert engine.state is EngineState.CONSTRUCTED
        assert len(engine.map) == engine.config.access_point_count == 160
        assert engine.generations == [160]

    def test_construction_warns_once(self):
        with pytest.warns(UserWarning) as record:
            quick_engine(test_cycles=0)

        messages = [str(w.message) for w in record]
        assert sum("no access points will be replaced" in m for m in messages) == 1

    def test_duplicate_algorithm(self):
        engine = quick_engine()
        with pytest.raises(ValueError, match="already registered"):
            engine.add_algorithm("Centroid", Centroid())

    def test_add_after_seed(self):
        engine = quick_engine()
        engine.seed()
        with pytest.raises(RuntimeError, match="expected one of: constructed"):
            engine.add_algorithm("Fingerprinting", Fingerprinting())

    def test_cycles_before_seed(self):
        engine = quick_engine()
        with pytest.raises(RuntimeError):
            engine.iter_cycles()

    def test_seed_twice(self):
        engine = quick_engine()
        engine.seed()
        with pytest.raises(RuntimeError):
            engine.seed()

    def test_report_before_cycles_complete(self):
        engine = quick_engine()
        engine.seed()
        cycles = engine.iter_cycles()
        next(cycles)

        with pytest.raises(RuntimeError, match="cycles completed"):
            engine.report()

    def test_report_before_cycles(self):
        engine = quick_engine()
        engine.seed()
        with pytest.raises(RuntimeError):
            engine.report()

    def test_full_run_states(self):
        engine = quick_engine()
        assert engine.seed() == 21 * 21
        assert engine.state is EngineState.SEEDED

        summaries = list(engine.iter_cycles())
        assert engine.state is EngineState.CYCLING
        assert [s.cycle for s in summaries] == [0, 1, 2, 3]

        engine.report()
        assert engine.state is EngineState.DONE


class TestCycles:
    """Test suite for churn and statistics during cycles."""

    def test_test_locations(self):
        engine = quick_engine()
        locs = engine.test_locations

        assert len(locs) == 36
        assert locs[0] == Location(TEST_MARGIN, TEST_MARGIN)
        assert all(TEST_MARGIN <= loc.x <= 400.0 - TEST_MARGIN for loc in locs)

    def test_shuffle_is_permutation(self):
        engine = quick_engine()
        locs = list(engine.test_locations)
        engine.shuffle(locs)

        assert sorted(locs, key=lambda l: (l.x, l.y)) == engine.test_locations

    def test_in_center(self):
        engine = quick_engine()
        assert engine.in_center(Location(200.0, 200.0))
        assert not engine.in_center(Location(-60.0, 200.0))

    def test_summaries_account_for_every_read(self):
        engine = quick_engine()
        engine.seed()

        for summary in engine.iter_cycles():
            for name in engine.algorithms:
                assert summary.hits[name] + summary.misses[name] == summary.n_locations
            assert summary.replaced == (0 if summary.cycle == 0 else 32)

    def test_churn_invariants(self):
        engine = quick_engine()
        engine.run()

        generations = engine.generations
        assert len(generations) == engine.config.test_cycles + 1
        assert np.all(np.diff(generations) == 32)
        assert len(engine.map) == 160
        assert engine.map.newest_id == generations[-1]
        # FIFO keeps exactly the 160 most recent ids.
        assert engine.map.ids == list(range(generations[-1] - 159, generations[-1] + 1))

    def test_random_churn_keeps_population(self):
        engine = quick_engine(replacement_strategy="random")
        engine.run()

        assert len(engine.map) == 160
        assert engine.map.newest_id == 160 + 3 * 32

    def test_no_churn_without_rate(self):
        engine = quick_engine(replacement_rate=0.0, replacement_strategy=None)
        engine.run()
        assert engine.map.ids == list(range(1, 161))

    def test_center_is_subset_of_full(self):
        engine = quick_engine()
        engine.seed()
        list(engine.iter_cycles())

        for name in engine.algorithms:
            full = engine.statistics[FULL][name]
            center = engine.statistics[CENTER][name]
            assert np.all(center.hits() <= full.hits())
            assert all(c <= f for c, f in zip(center.misses, full.misses))


class TestReport:
    """Test suite for Engine.report()."""

    def test_report_contents(self):
        engine = quick_engine()
        report = engine.run()

        assert report.algorithm_names == ["Centroid", "Learning Centroid"]
        for partition in (FULL, CENTER):
            for series in report.series[partition].values():
                assert len(series.mean_error) == 4
                assert np.all((series.miss_pct >= 0) | np.isnan(series.miss_pct))
        assert len(report.access_points) == 160
        assert report.generations == engine.generations
        assert report.last_frame_bounds[FULL] == ((0.0, 400.0), (0.0, 400.0))
        assert report.last_frame_bounds[CENTER] == ((-50.0, 450.0), (-50.0, 450.0))

    def test_last_frame_pairs(self):
        engine = quick_engine()
        report = engine.run()

        for partition in (FULL, CENTER):
            for frame in report.last_frames[partition].values():
                assert len(frame.sources) == len(frame.estimates)
                assert len(frame) <= 49

    def test_renderer_calls(self):
        renderer = RecordingRenderer()
        engine = quick_engine(renderer=renderer)
        engine.run()

        # Initial map plus one snapshot per churn cycle.
        assert len(renderer.maps) == 4
        assert renderer.maps[0] == (160, [160])
        assert [len(g) for _, g in renderer.maps] == [1, 2, 3, 4]
        assert [p for p, _ in renderer.series] == [CENTER, FULL]
        assert [p for p, _ in renderer.frames] == [FULL, CENTER]


class TestReproducibility:
    """Test suite for seeded reproducibility."""

    def test_same_seed_same_series(self):
        a = quick_engine(seed=5).run()
        b = quick_engine(seed=5).run()

        for partition in (FULL, CENTER):
            for name in a.series[partition]:
                np.testing.assert_array_equal(
                    a.series[partition][name].mean_error,
                    b.series[partition][name].mean_error,
                )
                np.testing.assert_array_equal(
                    a.series[partition][name].miss_pct,
                    b.series[partition][name].miss_pct,
                )

    def test_different_seed_differs(self):
        a = quick_engine(seed=5).run()
        b = quick_engine(seed=6).run()

        assert not np.array_equal(
            a.series[FULL]["Centroid"].mean_error,
            b.series[FULL]["Centroid"].mean_error,
            equal_nan=True,
        )


@pytest.mark.slow
class TestEndToEnd:
    """
    Seed-and-test sanity check on a dense map without churn.

    Runs the baseline density and seed spacing on a 400 x 400 map instead of
    the full 1000 x 1000 one. An interior access point is heard from the same
    neighbourhood of seed points either way, and seeding the full map takes
    ~40k reads over 1500 access points each.
    """

    def test_centroids_near_true_positions(self):
        config = from_preset(
            "baseline", map_width=400.0, map_height=400.0, random_seed=2024
        )
        engine = Engine(config)
        centroid = Centroid()
        engine.add_algorithm("Centroid", centroid)
        engine.seed()
        summaries = list(engine.iter_cycles())

        interior = [
            ap
            for ap in engine.map.access_points
            if TEST_MARGIN <= ap.location.x <= 400.0 - TEST_MARGIN
            and TEST_MARGIN <= ap.location.y <= 400.0 - TEST_MARGIN
        ]
        errors = []
        for ap in interior:
            estimate = centroid.centroid_of(ap.id)
            assert estimate is not None
            errors.append(estimate.distance_to(ap.location))

        assert len(interior) > 30
        assert np.median(errors) < 4.0
        assert np.max(errors) < 10.0
        assert summaries[0].misses["Centroid"] >= 0
        assert summaries[0].hits["Centroid"] > 0
