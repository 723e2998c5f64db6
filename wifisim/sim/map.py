"""Access-point map: population lifecycle and signal reads.

The Map owns the live access points and the random number generator that
drives every stochastic decision of a simulation (placement, propagation
noise, churn, test ordering). Seeding the generator therefore fixes the
whole experiment.

Access point ids come from a Map-scoped counter starting at 1. Ids are
never reused, so id order is creation order and the oldest live access
point is always the one with the smallest id.
"""

import itertools
from typing import List, Optional, Sequence, Tuple

import numpy as np

from wifisim.rf.propagation import received, strength
from wifisim.sim.config import ReplacementStrategy
from wifisim.sim.types import AccessPoint, Location, Signal, SignalSet


class Map:
    """
    Rectangular field of access points.

    Attributes:
        width: Map width in meters.
        height: Map height in meters.
        rng: Generator shared by all stochastic operations on this map.

    Examples:
        >>> m = Map(1000.0, 1000.0, seed=7)
        >>> ap = m.add_random_access_point()
        >>> ap.id
        1
        >>> signals = m.read(Location(500.0, 500.0))
    """

    def __init__(
        self,
        width: float,
        height: float,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize an empty map.

        Args:
            width: Map width in meters.
            height: Map height in meters.
            rng: Generator to use. Takes precedence over ``seed``.
            seed: Seed for a new generator. If both ``rng`` and ``seed``
                  are None, a freshly seeded generator is created.
        """
        self.width = float(width)
        self.height = float(height)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._access_points: List[AccessPoint] = []
        self._next_id = itertools.count(1)

    def __len__(self) -> int:
        return len(self._access_points)

    def __repr__(self) -> str:
        return (
            f"Map({self.width:g} x {self.height:g}, "
            f"access_points={len(self._access_points)})"
        )

    @property
    def access_points(self) -> Tuple[AccessPoint, ...]:
        """Snapshot of the live access points in id order."""
        return tuple(self._access_points)

    @property
    def ids(self) -> List[int]:
        """Ids of the live access points in ascending order."""
        return [ap.id for ap in self._access_points]

    @property
    def newest_id(self) -> int:
        """Id of the most recently added live access point (0 if empty)."""
        if not self._access_points:
            return 0
        return self._access_points[-1].id

    def locations_array(self) -> np.ndarray:
        """Access point positions as an array of shape (N, 2)."""
        if not self._access_points:
            return np.zeros((0, 2))
        return np.array([ap.location.as_array() for ap in self._access_points])

    # ------------------------------------------------------------------
    # Population lifecycle
    # ------------------------------------------------------------------

    def add_access_point(self, location: Location) -> AccessPoint:
        """Place a new access point at ``location`` and return it."""
        access_point = AccessPoint(next(self._next_id), location)
        self._access_points.append(access_point)
        return access_point

    def random_location(self) -> Location:
        """Uniform location in [0, width) x [0, height); x is drawn first."""
        x = self.rng.random() * self.width
        y = self.rng.random() * self.height
        return Location(x, y)

    def add_random_access_point(self) -> AccessPoint:
        """Place a new access point uniformly at random and return it."""
        return self.add_access_point(self.random_location())

    def remove_access_point(self, ap_id: int) -> bool:
        """
        Remove the access point with the given id.

        Returns:
            True if an access point was removed, False if the id is unknown.
        """
        for i, access_point in enumerate(self._access_points):
            if access_point.id == ap_id:
                del self._access_points[i]
                return True
        return False

    def remove_oldest(self) -> int:
        """
        Remove the access point with the smallest id (FIFO).

        Returns:
            Id of the removed access point.

        Raises:
            IndexError: If the map has no access points.
        """
        if not self._access_points:
            raise IndexError("Cannot remove an access point from an empty map")
        return self._access_points.pop(0).id

    def remove_random(self) -> int:
        """
        Remove a uniformly chosen access point.

        Returns:
            Id of the removed access point.

        Raises:
            IndexError: If the map has no access points.
        """
        if not self._access_points:
            raise IndexError("Cannot remove an access point from an empty map")
        index = int(self.rng.integers(len(self._access_points)))
        return self._access_points.pop(index).id

    def replace_access_points(
        self, rate: float, strategy: Optional[ReplacementStrategy]
    ) -> List[AccessPoint]:
        """
        Run one churn transaction.

        Removes floor(live_count * rate) access points with the given
        strategy, then adds the same number of new random access points.
        All removals complete before any addition.

        Args:
            rate: Fraction of the population to replace, in [0, 1].
            strategy: Removal strategy. May be None only when nothing is
                      replaced.

        Returns:
            The newly added access points, in id order.

        Raises:
            ValueError: If access points must be removed but no strategy
                        is given.
        """
        count = int(len(self._access_points) * rate)
        if count == 0:
            return []
        if strategy is None:
            raise ValueError("Replacement rate set without a replacement strategy")

        strategy = ReplacementStrategy.parse(strategy)
        for _ in range(count):
            if strategy is ReplacementStrategy.FIFO:
                self.remove_oldest()
            else:
                self.remove_random()

        return [self.add_random_access_point() for _ in range(count)]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, location: Location) -> SignalSet:
        """
        Signals observed at ``location``.

        For every live access point (in id order) one reception draw is
        made; if the beacon is received, a noisy strength is drawn.

        Args:
            location: Receiver position.

        Returns:
            Signals in access point id order (not sorted by strength).
        """
        signals: SignalSet = []
        for access_point in self._access_points:
            d = access_point.location.distance_to(location)
            if received(d, self.rng):
                signals.append(Signal(access_point.id, strength(d, self.rng)))
        return signals


def generation_of(ap_id: int, boundaries: Sequence[int]) -> int:
    """
    Index of the churn generation an access point id belongs to.

    Generation i holds the ids in (boundaries[i-1], boundaries[i]].

    Args:
        ap_id: Access point id.
        boundaries: Ascending generation boundaries (largest id per
                    generation).

    Returns:
        Generation index, or len(boundaries) if the id is newer than every
        recorded boundary.
    """
    for i, boundary in enumerate(boundaries):
        if ap_id <= boundary:
            return i
    return len(boundaries)
