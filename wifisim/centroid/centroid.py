"""Centroid-based localization.

Each access point's position is estimated as the centroid of every location
at which it was heard during training. A receiver is then located at the
mean of the centroids of the access points it hears (a mean of means).

Variants:
    - Centroid: plain training + estimation
    - EnhancedCentroid: estimates moved 10% toward the true location
    - LearningCentroid: estimates fed back as training samples
    - EnhancedLearningCentroid: both of the above
    - SmartLearningCentroid: learning with a per-AP history cap, so the
      centroid settles instead of drifting with its own feedback
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from wifisim.algorithms.base import AlgorithmOptions, LocalizationAlgorithm
from wifisim.sim.types import Location, SignalSet, mean_location

# Samples required before an access point's centroid is trusted.
MIN_MATCHES = 4

# Per access point history cap in smart mode.
SMART_HISTORY_LIMIT = 300


@dataclass
class CentroidRecord:
    """
    Training history of one access point.

    Attributes:
        xs: X coordinates of the locations where the AP was heard.
        ys: Y coordinates of the same locations.
        centroid: Cached mean location, None until enough samples exist.
    """

    xs: List[float] = field(default_factory=list)
    ys: List[float] = field(default_factory=list)
    centroid: Optional[Location] = None

    @property
    def n_samples(self) -> int:
        return len(self.xs)

    def add(self, location: Location) -> None:
        self.xs.append(location.x)
        self.ys.append(location.y)

    def recompute(self) -> None:
        self.centroid = Location(float(np.mean(self.xs)), float(np.mean(self.ys)))


class CentroidLocalizer(LocalizationAlgorithm):
    """
    Centroid localization algorithm.

    Attributes:
        options: Variant flags.
        min_matches: Samples needed before a centroid is established.
        history_limit: Per-AP sample cap (smart mode only, else None).

    Examples:
        >>> from wifisim.sim.types import Signal
        >>> c = CentroidLocalizer()
        >>> for x in (0.0, 10.0, 0.0, 10.0):
        ...     c.feed([Signal(1, -60.0)], Location(x, 0.0))
        >>> c.read([Signal(1, -61.0)], Location(5.0, 0.0))
        (Location(x=5.0, y=0.0), True)
    """

    family = "Centroid"

    def __init__(
        self,
        options: Optional[AlgorithmOptions] = None,
        min_matches: int = MIN_MATCHES,
        history_limit: int = SMART_HISTORY_LIMIT,
    ):
        super().__init__(options)
        if min_matches < 1:
            raise ValueError(f"min_matches must be >= 1, got {min_matches}")
        self.min_matches = min_matches
        self.history_limit = history_limit if self.options.smart else None
        self._records: Dict[int, CentroidRecord] = {}

    @property
    def known_access_points(self) -> List[int]:
        """Ids of access points with an established centroid."""
        return [
            ap_id
            for ap_id, record in self._records.items()
            if record.centroid is not None
        ]

    def centroid_of(self, ap_id: int) -> Optional[Location]:
        """Cached centroid of an access point, or None."""
        record = self._records.get(ap_id)
        return record.centroid if record is not None else None

    def sample_count(self, ap_id: int) -> int:
        """Number of training samples recorded for an access point."""
        record = self._records.get(ap_id)
        return record.n_samples if record is not None else 0

    def feed(self, signals: SignalSet, location: Location) -> None:
        for signal in signals:
            record = self._records.setdefault(signal.ap_id, CentroidRecord())
            if self.history_limit is not None and record.n_samples >= self.history_limit:
                continue
            record.add(location)
            if record.n_samples < self.min_matches:
                continue
            # The sample that reaches the cap is stored but not averaged in.
            if self.history_limit is None or record.n_samples < self.history_limit:
                record.recompute()

    def estimate(self, signals: SignalSet) -> Optional[Location]:
        centroids = []
        for signal in signals:
            record = self._records.get(signal.ap_id)
            if record is not None and record.centroid is not None:
                centroids.append(record.centroid)
        if not centroids:
            return None
        return mean_location(centroids)


def Centroid() -> CentroidLocalizer:
    """Plain centroid localization."""
    return CentroidLocalizer(AlgorithmOptions())


def EnhancedCentroid() -> CentroidLocalizer:
    """Centroid localization with ground-truth enhancement."""
    return CentroidLocalizer(AlgorithmOptions(enhanced=True))


def LearningCentroid() -> CentroidLocalizer:
    """Centroid localization that trains on its own estimates."""
    return CentroidLocalizer(AlgorithmOptions(learning=True))


def EnhancedLearningCentroid() -> CentroidLocalizer:
    """Enhanced estimates fed back as training samples."""
    return CentroidLocalizer(AlgorithmOptions(enhanced=True, learning=True))


def SmartLearningCentroid() -> CentroidLocalizer:
    """Learning centroid with a capped per access point history."""
    return CentroidLocalizer(AlgorithmOptions(learning=True, smart=True))
