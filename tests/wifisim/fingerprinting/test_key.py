"""Unit tests for wifisim.fingerprinting.key."""

import numpy as np
import pytest

from wifisim.fingerprinting import Key, set_difference
from wifisim.sim.types import KEY_CAPACITY, Signal


class TestKey:
    """Test suite for Key construction and encoding."""

    def test_from_ids_sorts(self):
        key = Key.from_ids([9, 2, 5])
        assert key.ids == (2, 5, 9)
        assert len(key) == 3
        assert list(key) == [2, 5, 9]
        assert 5 in key
        assert 4 not in key

    def test_from_signals(self):
        key = Key.from_signals([Signal(4, -50.0), Signal(1, -70.0)])
        assert key == Key((1, 4))

    def test_empty_key(self):
        key = Key.from_ids([])
        assert len(key) == 0
        np.testing.assert_array_equal(key.padded(), np.zeros(KEY_CAPACITY, dtype=int))

    def test_duplicates_rejected(self):
        with pytest.raises(ValueError, match="strictly ascending"):
            Key.from_ids([3, 3])

    def test_unsorted_rejected(self):
        with pytest.raises(ValueError, match="strictly ascending"):
            Key((5, 2))

    def test_reserved_id_rejected(self):
        with pytest.raises(ValueError, match="0 is reserved"):
            Key.from_ids([0, 1])

    def test_capacity(self):
        Key.from_ids(range(1, KEY_CAPACITY + 1))
        with pytest.raises(ValueError, match="exceeds maximum key size 50"):
            Key.from_ids(range(1, KEY_CAPACITY + 2))

    def test_from_signals_capacity(self):
        signals = [Signal(i, -60.0) for i in range(1, KEY_CAPACITY + 2)]
        with pytest.raises(ValueError, match="Signal length 51 exceeds"):
            Key.from_signals(signals)

    def test_padded_round_trip(self):
        key = Key.from_ids([3, 17, 42, 1000])
        padded = key.padded()

        assert padded.shape == (KEY_CAPACITY,)
        np.testing.assert_array_equal(padded[:4], [3, 17, 42, 1000])
        assert np.all(padded[4:] == 0)
        assert Key.from_padded(padded) == key

    def test_hashable(self):
        groups = {Key((1, 2)): "a"}
        assert groups[Key.from_ids([2, 1])] == "a"


class TestSetDifference:
    """Test suite for set_difference()."""

    def test_self_is_zero(self):
        key = Key.from_ids([1, 4, 9, 16])
        assert set_difference(key, key) == 0

    def test_asymmetric(self):
        a = Key((1, 2, 3))
        b = Key((2, 3, 4, 5))

        assert set_difference(a, b) == 1
        assert set_difference(b, a) == 2

    def test_subset(self):
        assert set_difference(Key((2, 3)), Key((1, 2, 3, 4))) == 0
        assert set_difference(Key((1, 2, 3, 4)), Key((2, 3))) == 2

    def test_disjoint(self):
        assert set_difference(Key((1, 2, 3)), Key((7, 8))) == 3

    def test_empty(self):
        assert set_difference(Key(()), Key((1, 2))) == 0
        assert set_difference(Key((1, 2)), Key(())) == 2

    def test_matches_python_sets(self):
        rng = np.random.default_rng(0)
        for _ in range(50):
            a = rng.choice(np.arange(1, 40), size=rng.integers(0, 15), replace=False)
            b = rng.choice(np.arange(1, 40), size=rng.integers(0, 15), replace=False)
            expected = len(set(a.tolist()) - set(b.tolist()))

            assert set_difference(Key.from_ids(a), Key.from_ids(b)) == expected
