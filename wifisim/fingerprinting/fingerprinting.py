"""Fingerprint-based localization with bucketed nearest-neighbour retrieval.

Training stores every (signal set, location) pair as a fingerprint, grouped
by the Key of access point ids heard. A query is matched as follows:

    1. Sort the query signals by id and compute its Key.
    2. For every stored Key, d = set_difference(query_key, stored_key) is
       the number of query ids that group has never seen together.
    3. Stored fingerprints are bucketed by d (0 .. len(signals) - 1;
       bucket len(signals) means "nothing in common" and is never used).
    4. Buckets are consumed in ascending d until the next bucket would
       take the candidate count past best_matches.
    5. Only that overflowing bucket is ranked by signal_distance over the
       shared access points, and its closest fingerprints fill the
       remaining budget.
    6. The estimate is the unweighted mean of the candidate locations.

Variants mirror the centroid family, with two differences: enhancement
does not alter read estimates (it only makes training skip empty signal
sets), and smart learning replays its own estimates in batches of 1000.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from wifisim.algorithms.base import (
    AlgorithmOptions,
    BatchedFeedback,
    FeedbackChannel,
    LocalizationAlgorithm,
)
from wifisim.fingerprinting.key import Key, set_difference
from wifisim.sim.types import Location, SignalSet, mean_location, sort_by_id

# Maximum number of fingerprints averaged into one estimate.
BEST_MATCHES = 4

# Number of buffered self-training samples that triggers a batch replay.
SMART_BATCH_SIZE = 1000


@dataclass(frozen=True)
class Fingerprint:
    """
    A stored training sample.

    Attributes:
        signals: Signals observed at the location, sorted by id.
        location: Where the signals were observed.
    """

    signals: SignalSet
    location: Location


def signal_distance(signals1: SignalSet, signals2: SignalSet) -> float:
    """
    Euclidean distance between two signal sets over their shared ids.

    Both inputs MUST be sorted by access point id. Ids present in only one
    of the sets are ignored.

    Args:
        signals1: First id-sorted signal set.
        signals2: Second id-sorted signal set.

    Returns:
        sqrt(sum (s1_k - s2_k)^2) over shared ids k; 0.0 if none are shared.

    Examples:
        >>> from wifisim.sim.types import Signal
        >>> a = [Signal(1, -50.0), Signal(2, -60.0)]
        >>> b = [Signal(2, -63.0), Signal(3, -70.0)]
        >>> signal_distance(a, b)
        3.0
    """
    total = 0.0
    i = j = 0
    while i < len(signals1) and j < len(signals2):
        id1 = signals1[i].ap_id
        id2 = signals2[j].ap_id
        if id1 == id2:
            diff = signals1[i].strength - signals2[j].strength
            total += diff * diff
            i += 1
            j += 1
        elif id1 < id2:
            i += 1
        else:
            j += 1
    return float(np.sqrt(total))


class FingerprintDatabase:
    """
    Fingerprints grouped by Key, in insertion order.

    Examples:
        >>> from wifisim.sim.types import Signal
        >>> db = FingerprintDatabase()
        >>> db.add(Key((1, 2)), Fingerprint([Signal(1, -50.0), Signal(2, -60.0)],
        ...                                 Location(0.0, 0.0)))
        >>> len(db), db.n_keys
        (1, 1)
    """

    def __init__(self):
        self._groups: Dict[Key, List[Fingerprint]] = {}
        self._count = 0

    def __len__(self) -> int:
        """Total number of stored fingerprints."""
        return self._count

    def __repr__(self) -> str:
        return f"FingerprintDatabase(n_fingerprints={self._count}, n_keys={self.n_keys})"

    @property
    def n_keys(self) -> int:
        """Number of distinct Keys."""
        return len(self._groups)

    def add(self, key: Key, fingerprint: Fingerprint) -> None:
        self._groups.setdefault(key, []).append(fingerprint)
        self._count += 1

    def group(self, key: Key) -> List[Fingerprint]:
        """Fingerprints stored under ``key`` (empty list if none)."""
        return list(self._groups.get(key, []))

    def items(self) -> Iterator[Tuple[Key, List[Fingerprint]]]:
        return iter(self._groups.items())

    def buckets(self, query: Key) -> List[List[Fingerprint]]:
        """
        Group stored fingerprints by set difference from ``query``.

        Returns:
            List of len(query) + 1 buckets; bucket d holds fingerprints whose
            Key misses exactly d of the query ids.
        """
        buckets: List[List[Fingerprint]] = [[] for _ in range(len(query) + 1)]
        for key, fingerprints in self._groups.items():
            buckets[set_difference(query, key)].extend(fingerprints)
        return buckets


def select_candidates(
    buckets: List[List[Fingerprint]],
    query_signals: SignalSet,
    best_matches: int = BEST_MATCHES,
) -> List[Location]:
    """
    Pick at most ``best_matches`` candidate locations from distance buckets.

    Buckets are consumed in ascending order; bucket len(query_signals) is
    never consulted. The first bucket that would overflow the budget is
    ranked by signal_distance (stable, so equal distances keep insertion
    order) and only its closest members fill the remaining slots.

    Args:
        buckets: Output of FingerprintDatabase.buckets.
        query_signals: Id-sorted query signals.
        best_matches: Candidate budget.

    Returns:
        Candidate locations (possibly empty).
    """
    locations: List[Location] = []
    for distance, fingerprints in enumerate(buckets):
        if distance == len(query_signals):
            break
        if len(locations) + len(fingerprints) > best_matches:
            ranked = sorted(
                fingerprints,
                key=lambda fp: signal_distance(query_signals, fp.signals),
            )
            remaining = best_matches - len(locations)
            locations.extend(fp.location for fp in ranked[:remaining])
            break
        locations.extend(fp.location for fp in fingerprints)
    return locations


class FingerprintLocalizer(LocalizationAlgorithm):
    """
    Fingerprinting localization algorithm.

    Attributes:
        options: Variant flags.
        best_matches: Number of fingerprints averaged into an estimate.
        database: Stored fingerprints.

    Examples:
        >>> from wifisim.sim.types import Signal
        >>> fp = FingerprintLocalizer()
        >>> fp.read([Signal(1, -60.0)], Location(0.0, 0.0))
        (None, False)
    """

    family = "Fingerprinting"

    # Enhancement only filters empty training reads in this family.
    applies_enhancement = False

    def __init__(
        self,
        options: Optional[AlgorithmOptions] = None,
        best_matches: int = BEST_MATCHES,
        batch_size: int = SMART_BATCH_SIZE,
    ):
        self.batch_size = batch_size
        super().__init__(options)
        if best_matches < 1:
            raise ValueError(f"best_matches must be >= 1, got {best_matches}")
        self.best_matches = best_matches
        self.database = FingerprintDatabase()

    def _make_feedback(self) -> FeedbackChannel:
        if self.options.smart:
            return BatchedFeedback(self, capacity=self.batch_size)
        return super()._make_feedback()

    def feed(self, signals: SignalSet, location: Location) -> None:
        if self.options.enhanced and len(signals) == 0:
            return
        ordered = sort_by_id(signals)
        key = Key.from_signals(ordered)
        self.database.add(key, Fingerprint(ordered, location))

    def estimate(self, signals: SignalSet) -> Optional[Location]:
        ordered = sort_by_id(signals)
        key = Key.from_signals(ordered)
        buckets = self.database.buckets(key)
        candidates = select_candidates(buckets, ordered, self.best_matches)
        if not candidates:
            return None
        return mean_location(candidates)


def Fingerprinting() -> FingerprintLocalizer:
    """Plain fingerprinting."""
    return FingerprintLocalizer(AlgorithmOptions())


def EnhancedFingerprinting() -> FingerprintLocalizer:
    """Fingerprinting that never stores empty training reads."""
    return FingerprintLocalizer(AlgorithmOptions(enhanced=True))


def LearningFingerprinting() -> FingerprintLocalizer:
    """Fingerprinting that stores its own estimates as fingerprints."""
    return FingerprintLocalizer(AlgorithmOptions(learning=True))


def EnhancedLearningFingerprinting() -> FingerprintLocalizer:
    """Learning fingerprinting that never stores empty training reads."""
    return FingerprintLocalizer(AlgorithmOptions(enhanced=True, learning=True))


def SmartLearningFingerprinting() -> FingerprintLocalizer:
    """Learning fingerprinting with batched replay of its own estimates."""
    return FingerprintLocalizer(AlgorithmOptions(learning=True, smart=True))
