"""Unit tests for fingerprint matching helpers.

Covers signal_distance, FingerprintDatabase bucketing and the overflow
rule of select_candidates.
"""

import pytest

from wifisim.fingerprinting import (
    Fingerprint,
    FingerprintDatabase,
    Key,
    select_candidates,
    signal_distance,
)
from wifisim.sim.types import Location, Signal


def fp(ids, strengths, x, y=0.0):
    signals = [Signal(i, s) for i, s in zip(ids, strengths)]
    return Fingerprint(signals, Location(x, y))


class TestSignalDistance:
    """Test suite for signal_distance()."""

    def test_shared_ids_only(self):
        a = [Signal(1, -50.0), Signal(2, -60.0)]
        b = [Signal(2, -63.0), Signal(3, -70.0)]

        assert signal_distance(a, b) == pytest.approx(3.0)

    def test_symmetric(self):
        a = [Signal(1, -50.0), Signal(2, -60.0), Signal(5, -72.0)]
        b = [Signal(1, -54.0), Signal(5, -69.0)]

        assert signal_distance(a, b) == pytest.approx(signal_distance(b, a))
        assert signal_distance(a, b) == pytest.approx(5.0)

    def test_nothing_shared(self):
        assert signal_distance([Signal(1, -50.0)], [Signal(2, -50.0)]) == 0.0

    def test_empty(self):
        assert signal_distance([], []) == 0.0


class TestFingerprintDatabase:
    """Test suite for FingerprintDatabase."""

    def test_grouping(self):
        db = FingerprintDatabase()
        db.add(Key((1, 2)), fp([1, 2], [-50, -60], 0.0))
        db.add(Key((1, 2)), fp([1, 2], [-51, -61], 1.0))
        db.add(Key((3,)), fp([3], [-70], 2.0))

        assert len(db) == 3
        assert db.n_keys == 2
        assert [f.location.x for f in db.group(Key((1, 2)))] == [0.0, 1.0]
        assert db.group(Key((9,))) == []

    def test_buckets_by_difference(self):
        db = FingerprintDatabase()
        db.add(Key((1, 2, 3)), fp([1, 2, 3], [-50, -60, -70], 0.0))
        db.add(Key((1, 2)), fp([1, 2], [-50, -60], 1.0))
        db.add(Key((1, 2, 3, 4)), fp([1, 2, 3, 4], [-50, -60, -70, -80], 2.0))
        db.add(Key((8, 9)), fp([8, 9], [-50, -60], 3.0))

        buckets = db.buckets(Key((1, 2, 3)))

        assert len(buckets) == 4
        assert [f.location.x for f in buckets[0]] == [0.0, 2.0]
        assert [f.location.x for f in buckets[1]] == [1.0]
        assert buckets[2] == []
        assert [f.location.x for f in buckets[3]] == [3.0]


class TestSelectCandidates:
    """Test suite for select_candidates()."""

    def setup_method(self):
        self.query = [Signal(1, -50.0), Signal(2, -60.0)]

    def test_takes_whole_buckets_within_budget(self):
        buckets = [
            [fp([1, 2], [-50, -60], 0.0), fp([1, 2], [-50, -60], 1.0)],
            [fp([1], [-50], 2.0)],
            [fp([7], [-50], 3.0)],
        ]

        locations = select_candidates(buckets, self.query, best_matches=4)

        assert [loc.x for loc in locations] == [0.0, 1.0, 2.0]

    def test_never_uses_last_bucket(self):
        """Fingerprints sharing nothing with the query are never candidates."""
        buckets = [[], [], [fp([7], [-50], 3.0)]]
        assert select_candidates(buckets, self.query) == []

    def test_overflow_bucket_ranked(self):
        buckets = [
            [fp([1, 2], [-50, -60], 0.0)],
            [
                fp([1], [-70], 10.0),
                fp([2], [-61], 11.0),
                fp([1], [-50], 12.0),
                fp([2], [-80], 13.0),
                fp([1], [-52], 14.0),
            ],
        ]

        locations = select_candidates(buckets, self.query, best_matches=4)

        # Bucket 0 fully, then the three closest of bucket 1.
        assert [loc.x for loc in locations] == [0.0, 12.0, 11.0, 14.0]

    def test_ties_keep_insertion_order(self):
        buckets = [
            [
                fp([1, 2], [-50, -61], 0.0),
                fp([1, 2], [-50, -59], 1.0),
                fp([1, 2], [-50, -61], 2.0),
            ],
        ]

        locations = select_candidates(buckets, self.query, best_matches=2)

        assert [loc.x for loc in locations] == [0.0, 1.0]

    def test_stops_after_overflow(self):
        buckets = [
            [fp([1, 2], [-50, -60], float(i)) for i in range(6)],
            [fp([1], [-50], 99.0)],
        ]

        locations = select_candidates(buckets, self.query, best_matches=4)

        assert len(locations) == 4
        assert all(loc.x < 99.0 for loc in locations)
