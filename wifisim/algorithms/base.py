"""
Base classes for localization algorithms.

Every algorithm implements the same capability interface:
    feed(signals, location)   record training evidence
    read(signals, truth)      estimate a location -> (estimate, success)

Variants are described by an explicit AlgorithmOptions value instead of
constructor booleans:
    enhanced  the estimate is nudged 10% toward the true location
              (simulated calibration assistance)
    learning  every successful read is fed back as a training sample,
              using the estimate as if it were ground truth
    smart     the family's bounded form of learning (history cap for
              centroids, batched replay for fingerprinting)

Self-training is modelled as an explicit feedback channel. A successful
learning read emits a TrainingEvent; the algorithm's channel either
consumes it immediately or buffers it for batch replay.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from wifisim.sim.types import Location, SignalSet


@dataclass(frozen=True)
class AlgorithmOptions:
    """
    Variant flags of a localization algorithm.

    Attributes:
        enhanced: Apply ground-truth enhancement (family permitting).
        learning: Feed successful estimates back as training samples.
        smart: Bound or batch the self-training. Requires learning.

    Examples:
        >>> AlgorithmOptions(enhanced=True, learning=True).label
        'Enhanced Learning'
        >>> AlgorithmOptions().label
        ''
    """

    enhanced: bool = False
    learning: bool = False
    smart: bool = False

    def __post_init__(self) -> None:
        if self.smart and not self.learning:
            raise ValueError("Smart mode requires learning to be enabled")

    @property
    def label(self) -> str:
        """Human readable variant prefix, e.g. 'Smart Learning'."""
        parts = []
        if self.enhanced:
            parts.append("Enhanced")
        if self.smart:
            parts.append("Smart")
        if self.learning:
            parts.append("Learning")
        return " ".join(parts)


@dataclass(frozen=True)
class TrainingEvent:
    """A self-training sample emitted by a learning read."""

    signals: SignalSet
    location: Location


class FeedbackChannel(ABC):
    """Delivers training events back into the owning algorithm."""

    def __init__(self, algorithm: "LocalizationAlgorithm"):
        self.algorithm = algorithm

    @abstractmethod
    def emit(self, event: TrainingEvent) -> None:
        """Hand a training event to the channel."""
        pass

    def flush(self) -> None:
        """Deliver any buffered events. No-op for unbuffered channels."""
        pass

    @property
    def pending(self) -> int:
        """Number of buffered, not yet delivered events."""
        return 0


class ImmediateFeedback(FeedbackChannel):
    """Feeds every event back synchronously."""

    def emit(self, event: TrainingEvent) -> None:
        self.algorithm.feed(event.signals, event.location)


class BatchedFeedback(FeedbackChannel):
    """
    Buffers events and replays them in one batch.

    When the buffer reaches ``capacity`` events, every buffered event is fed
    to the algorithm in emission order and the buffer is cleared.

    Attributes:
        capacity: Number of buffered events that triggers a replay.
        flushes: Number of batch replays performed so far.
    """

    def __init__(self, algorithm: "LocalizationAlgorithm", capacity: int = 1000):
        super().__init__(algorithm)
        if capacity < 1:
            raise ValueError(f"Batch capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.flushes = 0
        self._buffer: List[TrainingEvent] = []

    def emit(self, event: TrainingEvent) -> None:
        self._buffer.append(event)
        if len(self._buffer) >= self.capacity:
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        # Swap the buffer out first; replayed feeds never emit new events.
        buffered, self._buffer = self._buffer, []
        for event in buffered:
            self.algorithm.feed(event.signals, event.location)
        self.flushes += 1

    @property
    def pending(self) -> int:
        return len(self._buffer)


class LocalizationAlgorithm(ABC):
    """
    Abstract base class for localization algorithms.

    Subclasses implement feed() and estimate(). read() applies the variant
    behaviour on top of the primary estimate:

        1. estimate(signals), computed without access to the truth
        2. no estimate -> (None, False)
        3. enhanced and family applies enhancement -> nudge toward truth
        4. learning -> emit TrainingEvent(signals, estimate)
        5. -> (estimate, True)
    """

    family = "Algorithm"

    # Whether the "enhanced" option moves read estimates toward the truth.
    applies_enhancement = True

    def __init__(self, options: Optional[AlgorithmOptions] = None):
        """
        Initialize the algorithm.

        Args:
            options: Variant flags. Defaults to the plain variant.
        """
        self.options = options if options is not None else AlgorithmOptions()
        self.feedback = self._make_feedback()

    @property
    def name(self) -> str:
        """Variant name, e.g. 'Enhanced Learning Centroid'."""
        label = self.options.label
        return f"{label} {self.family}" if label else self.family

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.options})"

    def _make_feedback(self) -> FeedbackChannel:
        """Feedback channel used for learning reads."""
        return ImmediateFeedback(self)

    @abstractmethod
    def feed(self, signals: SignalSet, location: Location) -> None:
        """
        Record that ``signals`` were observed at ``location``.

        Args:
            signals: Signals observed in one read.
            location: Where they were observed.
        """
        pass

    @abstractmethod
    def estimate(self, signals: SignalSet) -> Optional[Location]:
        """
        Primary location estimate from ``signals``.

        Returns:
            Estimated location, or None if no stored evidence supports one.
        """
        pass

    def read(
        self, signals: SignalSet, truth: Location
    ) -> Tuple[Optional[Location], bool]:
        """
        Estimate the receiver location.

        Args:
            signals: Signals observed at the (unknown) receiver location.
            truth: Ground truth. Used only for enhancement feedback.

        Returns:
            Tuple of (estimate, success). estimate is None when success
            is False.
        """
        location = self.estimate(signals)
        if location is None:
            return None, False

        if self.options.enhanced and self.applies_enhancement:
            location = location.enhanced(truth)

        if self.options.learning:
            self.feedback.emit(TrainingEvent(list(signals), location))

        return location, True
