"""Access-point id keys and set comparison for fingerprint retrieval.

A Key is the canonical summary of which access points were heard in one
read: a capacity-bounded, strictly ascending sequence of access point ids
with an explicit length. Fingerprints are grouped by Key, and the number of
query ids missing from a stored Key (set_difference) decides which stored
group a query is closest to.

Id 0 is reserved and never assigned to an access point, which lets the
zero-padded array form (Key.padded) use 0 as its "empty slot" marker.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np

from wifisim.sim.types import KEY_CAPACITY, Signal


@dataclass(frozen=True)
class Key:
    """
    Sorted, capacity-bounded set of access point ids.

    Attributes:
        ids: Strictly ascending access point ids (all >= 1).

    Examples:
        >>> key = Key.from_ids([7, 3, 12])
        >>> key.ids
        (3, 7, 12)
        >>> len(key)
        3
        >>> Key.from_padded(key.padded()) == key
        True
    """

    ids: Tuple[int, ...]

    def __post_init__(self) -> None:
        """Validate ordering, reserved id and capacity."""
        if len(self.ids) > KEY_CAPACITY:
            raise ValueError(
                f"Signal length {len(self.ids)} exceeds maximum key size {KEY_CAPACITY}"
            )
        for previous, current in zip(self.ids, self.ids[1:]):
            if current <= previous:
                raise ValueError(f"Key ids must be strictly ascending, got {self.ids}")
        if self.ids and self.ids[0] < 1:
            raise ValueError(f"Key ids must be >= 1 (0 is reserved), got {self.ids}")

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self):
        return iter(self.ids)

    def __contains__(self, ap_id: object) -> bool:
        return ap_id in self.ids

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> "Key":
        """
        Build a Key from access point ids in any order.

        Raises:
            ValueError: If ids repeat, include 0, or exceed the capacity.
        """
        return cls(tuple(sorted(int(i) for i in ids)))

    @classmethod
    def from_signals(cls, signals: Sequence[Signal]) -> "Key":
        """
        Key of the ids in a signal set.

        Raises:
            ValueError: If the signal set holds more than KEY_CAPACITY
                        signals (density too high for the key size).
        """
        if len(signals) > KEY_CAPACITY:
            raise ValueError(
                f"Signal length {len(signals)} exceeds maximum key size {KEY_CAPACITY}"
            )
        return cls.from_ids(signal.ap_id for signal in signals)

    def padded(self) -> np.ndarray:
        """Zero-padded integer array of length KEY_CAPACITY."""
        out = np.zeros(KEY_CAPACITY, dtype=int)
        out[: len(self.ids)] = self.ids
        return out

    @classmethod
    def from_padded(cls, padded: Sequence[int]) -> "Key":
        """Decode the non-zero prefix of a zero-padded id array."""
        ids = []
        for ap_id in padded:
            if ap_id == 0:
                break
            ids.append(int(ap_id))
        return cls(tuple(ids))


def set_difference(query: Key, stored: Key) -> int:
    """
    Number of ids present in ``query`` but absent from ``stored``.

    Ascending merge over both keys. The measure is one-directional: ids
    only present in ``stored`` do not count.

    Args:
        query: Key of the signals being localized.
        stored: Key of a stored fingerprint group.

    Returns:
        Count of query ids missing from ``stored``.

    Examples:
        >>> set_difference(Key((1, 2, 3)), Key((2, 3, 4, 5)))
        1
        >>> set_difference(Key((2, 3, 4, 5)), Key((1, 2, 3)))
        2
        >>> set_difference(Key((1, 2)), Key((1, 2)))
        0
    """
    a, b = query.ids, stored.ids
    i = j = 0
    missing = 0
    while i < len(a) and j < len(b):
        if a[i] < b[j]:
            missing += 1
            i += 1
        elif a[i] > b[j]:
            j += 1
        else:
            i += 1
            j += 1
    return missing + (len(a) - i)
