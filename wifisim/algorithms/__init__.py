"""Localization algorithm interface shared by all algorithm families."""

from .base import (
    AlgorithmOptions,
    BatchedFeedback,
    FeedbackChannel,
    ImmediateFeedback,
    LocalizationAlgorithm,
    TrainingEvent,
)

__all__ = [
    "AlgorithmOptions",
    "LocalizationAlgorithm",
    "TrainingEvent",
    "FeedbackChannel",
    "ImmediateFeedback",
    "BatchedFeedback",
]
