"""Unit tests for wifisim.fingerprinting.FingerprintLocalizer and variants."""

import pytest

from wifisim.algorithms import BatchedFeedback, ImmediateFeedback
from wifisim.fingerprinting import (
    EnhancedFingerprinting,
    EnhancedLearningFingerprinting,
    Fingerprinting,
    FingerprintLocalizer,
    Key,
    LearningFingerprinting,
    SmartLearningFingerprinting,
)
from wifisim.sim.types import KEY_CAPACITY, Location, Signal


def survey(algorithm):
    """Train on four reference points with overlapping access points."""
    algorithm.feed([Signal(1, -50.0), Signal(2, -70.0)], Location(0.0, 0.0))
    algorithm.feed([Signal(2, -50.0), Signal(1, -70.0)], Location(20.0, 0.0))
    algorithm.feed([Signal(2, -55.0), Signal(3, -60.0)], Location(40.0, 0.0))
    algorithm.feed([Signal(3, -50.0)], Location(60.0, 0.0))


class TestFeed:
    """Test suite for FingerprintLocalizer.feed()."""

    def test_stores_sorted_by_id(self):
        f = Fingerprinting()
        f.feed([Signal(9, -50.0), Signal(3, -60.0)], Location(1.0, 1.0))

        (key, fingerprints), = list(f.database.items())
        assert key.ids == (3, 9)
        assert [s.ap_id for s in fingerprints[0].signals] == [3, 9]

    def test_plain_stores_empty_reads(self):
        f = Fingerprinting()
        f.feed([], Location(0.0, 0.0))
        assert len(f.database) == 1

    def test_enhanced_skips_empty_reads(self):
        f = EnhancedFingerprinting()
        f.feed([], Location(0.0, 0.0))
        assert len(f.database) == 0

    def test_capacity_error_propagates(self):
        f = Fingerprinting()
        signals = [Signal(i, -60.0) for i in range(1, KEY_CAPACITY + 2)]
        with pytest.raises(ValueError, match="exceeds maximum key size"):
            f.feed(signals, Location(0.0, 0.0))


class TestEstimate:
    """Test suite for FingerprintLocalizer.read()."""

    def test_empty_database_misses(self):
        f = Fingerprinting()
        assert f.read([Signal(1, -60.0)], Location(0.0, 0.0)) == (None, False)

    def test_empty_query_misses(self):
        f = Fingerprinting()
        survey(f)
        assert f.read([], Location(0.0, 0.0)) == (None, False)

    def test_no_shared_access_points_misses(self):
        f = Fingerprinting()
        survey(f)
        assert f.read([Signal(77, -60.0)], Location(0.0, 0.0)) == (None, False)

    def test_exact_key_match(self):
        f = FingerprintLocalizer(best_matches=1)
        survey(f)

        estimate, success = f.read([Signal(3, -61.0), Signal(2, -54.0)], Location(0.0, 0.0))

        assert success
        assert estimate == Location(40.0, 0.0)

    def test_mean_of_candidates(self):
        f = Fingerprinting()
        survey(f)

        # Bucket 0 holds both {1, 2} fingerprints and bucket 1 the {2, 3} one;
        # {3} shares nothing with the query.
        estimate, _ = f.read([Signal(1, -60.0), Signal(2, -60.0)], Location(0.0, 0.0))

        assert estimate.x == pytest.approx((0.0 + 20.0 + 40.0) / 3)

    def test_invalid_best_matches(self):
        with pytest.raises(ValueError, match="best_matches"):
            FingerprintLocalizer(best_matches=0)


class TestVariants:
    """Test suite for fingerprinting variants."""

    @pytest.mark.parametrize(
        "factory, name",
        [
            (Fingerprinting, "Fingerprinting"),
            (EnhancedFingerprinting, "Enhanced Fingerprinting"),
            (LearningFingerprinting, "Learning Fingerprinting"),
            (EnhancedLearningFingerprinting, "Enhanced Learning Fingerprinting"),
            (SmartLearningFingerprinting, "Smart Learning Fingerprinting"),
        ],
    )
    def test_names(self, factory, name):
        assert factory().name == name

    def test_enhancement_not_applied_to_estimates(self):
        plain, enhanced = Fingerprinting(), EnhancedFingerprinting()
        survey(plain)
        survey(enhanced)
        query = [Signal(1, -50.0), Signal(2, -70.0)]
        truth = Location(500.0, 500.0)

        assert enhanced.read(query, truth) == plain.read(query, truth)

    def test_learning_stores_estimate_immediately(self):
        f = LearningFingerprinting()
        survey(f)

        estimate, _ = f.read([Signal(1, -50.0), Signal(2, -70.0)], Location(0.0, 0.0))

        assert isinstance(f.feedback, ImmediateFeedback)
        assert len(f.database) == 5
        stored = f.database.group(Key((1, 2)))
        assert stored[-1].location == estimate

    def test_smart_learning_batches(self):
        f = FingerprintLocalizer(
            SmartLearningFingerprinting().options, batch_size=3
        )
        survey(f)
        query = [Signal(1, -50.0), Signal(2, -70.0)]

        for _ in range(2):
            f.read(query, Location(0.0, 0.0))
        assert isinstance(f.feedback, BatchedFeedback)
        assert len(f.database) == 4
        assert f.feedback.pending == 2

        f.read(query, Location(0.0, 0.0))
        assert len(f.database) == 7
        assert f.feedback.pending == 0

    def test_smart_default_batch_size(self):
        f = SmartLearningFingerprinting()
        assert f.feedback.capacity == 1000
