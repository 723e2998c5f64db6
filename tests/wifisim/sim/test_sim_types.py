"""Unit tests for wifisim.sim.types."""

import dataclasses

import numpy as np
import pytest

from wifisim.sim.types import (
    AccessPoint,
    Location,
    Signal,
    mean_location,
    signal_ids,
    sort_by_id,
    sort_by_strength,
)


class TestLocation:
    """Test suite for Location."""

    def test_distance(self):
        """3-4-5 triangle."""
        assert Location(0.0, 0.0).distance_to(Location(3.0, 4.0)) == pytest.approx(5.0)

    def test_distance_symmetric(self):
        a, b = Location(12.5, -3.0), Location(-7.0, 40.0)
        assert a.distance_to(b) == pytest.approx(b.distance_to(a))

    def test_enhanced_moves_ten_percent(self):
        """Default enhancement removes 10% of the offset to the truth."""
        est = Location(100.0, 200.0)
        truth = Location(0.0, 0.0)

        moved = est.enhanced(truth)

        assert moved.x == pytest.approx(90.0)
        assert moved.y == pytest.approx(180.0)
        assert moved.distance_to(truth) == pytest.approx(0.9 * est.distance_to(truth))

    def test_enhanced_returns_new_location(self):
        est = Location(1.0, 1.0)
        est.enhanced(Location(0.0, 0.0))
        assert est == Location(1.0, 1.0)

    def test_immutable(self):
        loc = Location(1.0, 2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            loc.x = 5.0

    def test_as_array(self):
        np.testing.assert_array_equal(Location(1.5, -2.0).as_array(), [1.5, -2.0])

    def test_str(self):
        assert str(Location(1.0, 2.346)) == "(1.00, 2.35)"


class TestAccessPoint:
    """Test suite for AccessPoint."""

    def test_reserved_id_rejected(self):
        """Id 0 is reserved."""
        with pytest.raises(ValueError, match="start at 1"):
            AccessPoint(0, Location(0.0, 0.0))

    def test_valid(self):
        ap = AccessPoint(3, Location(1.0, 1.0))
        assert ap.id == 3


class TestSignalHelpers:
    """Test suite for signal sorting helpers."""

    def setup_method(self):
        self.signals = [Signal(5, -70.0), Signal(2, -50.0), Signal(9, -60.0)]

    def test_sort_by_id(self):
        assert signal_ids(sort_by_id(self.signals)) == [2, 5, 9]

    def test_sort_by_strength(self):
        """Strongest (least negative) first."""
        assert signal_ids(sort_by_strength(self.signals)) == [2, 9, 5]

    def test_sorting_does_not_mutate(self):
        sort_by_id(self.signals)
        assert signal_ids(self.signals) == [5, 2, 9]


class TestMeanLocation:
    """Test suite for mean_location()."""

    def test_mean(self):
        locs = [Location(0.0, 0.0), Location(10.0, 0.0), Location(5.0, 30.0)]
        mean = mean_location(locs)

        assert mean.x == pytest.approx(5.0)
        assert mean.y == pytest.approx(10.0)

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            mean_location([])
