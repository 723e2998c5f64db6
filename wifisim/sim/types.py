"""Geometry and signal primitives shared by the map, algorithms and engine.

This module defines the value objects exchanged between the simulator
components:
    - Location: immutable 2D point in meters
    - AccessPoint: simulated transmitter with a unique, monotonically
      assigned id
    - Signal: one (access point id, strength) reading
    - SignalSet: ordered list of Signals observed in one read

Signal sets are produced by Map.read in access-point id order. Any code
that derives a Key or compares signal vectors must work on an id-sorted
copy (see sort_by_id).
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

# Fixed number of access point ids a fingerprint Key can hold.
KEY_CAPACITY = 50

# Fraction of the way an "enhanced" estimate moves toward ground truth.
ENHANCEMENT_FACTOR = 0.1


@dataclass(frozen=True)
class Location:
    """
    A 2D location in meters.

    Locations are immutable. Operations that move a point, such as
    enhanced(), return a new Location.

    Attributes:
        x: X coordinate (m).
        y: Y coordinate (m).

    Examples:
        >>> a = Location(0.0, 0.0)
        >>> b = Location(3.0, 4.0)
        >>> a.distance_to(b)
        5.0
        >>> Location(0.0, 0.0).enhanced(Location(10.0, 20.0))
        Location(x=1.0, y=2.0)
    """

    x: float
    y: float

    def distance_to(self, other: "Location") -> float:
        """Euclidean distance to another location."""
        dx = self.x - other.x
        dy = self.y - other.y
        return float(np.sqrt(dx * dx + dy * dy))

    def enhanced(
        self, truth: "Location", factor: float = ENHANCEMENT_FACTOR
    ) -> "Location":
        """
        Nudge this estimate toward the true location.

        Implements est + (truth - est) * factor.

        Args:
            truth: Ground-truth location.
            factor: Fraction of the remaining offset to remove.

        Returns:
            New, corrected Location.
        """
        return Location(
            self.x + (truth.x - self.x) * factor,
            self.y + (truth.y - self.y) * factor,
        )

    def as_array(self) -> np.ndarray:
        """Return the location as a NumPy array of shape (2,)."""
        return np.array([self.x, self.y])

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"


@dataclass(frozen=True)
class AccessPoint:
    """
    A simulated access point.

    Attributes:
        id: Unique id, strictly increasing in creation order. Id 0 is
            reserved and never assigned.
        location: Fixed position of the transmitter.
    """

    id: int
    location: Location

    def __post_init__(self) -> None:
        if self.id < 1:
            raise ValueError(f"Access point ids start at 1, got {self.id}")


@dataclass(frozen=True)
class Signal:
    """
    A single signal reading.

    Attributes:
        ap_id: Id of the access point that was heard.
        strength: Received signal strength in dBm.
    """

    ap_id: int
    strength: float


SignalSet = List[Signal]


def sort_by_id(signals: Iterable[Signal]) -> SignalSet:
    """Return a copy of ``signals`` sorted by ascending access point id."""
    return sorted(signals, key=lambda signal: signal.ap_id)


def sort_by_strength(signals: Iterable[Signal]) -> SignalSet:
    """Return a copy of ``signals`` sorted strongest first."""
    return sorted(signals, key=lambda signal: signal.strength, reverse=True)


def signal_ids(signals: Sequence[Signal]) -> List[int]:
    """Access point ids of ``signals`` in their current order."""
    return [signal.ap_id for signal in signals]


def mean_location(locations: Sequence[Location]) -> Location:
    """
    Unweighted mean of a non-empty sequence of locations.

    Raises:
        ValueError: If ``locations`` is empty.
    """
    if len(locations) == 0:
        raise ValueError("Cannot average an empty list of locations")
    xs = np.array([location.x for location in locations])
    ys = np.array([location.y for location in locations])
    return Location(float(np.mean(xs)), float(np.mean(ys)))
