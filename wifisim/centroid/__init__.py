"""Centroid-based localization family."""

from .centroid import (
    MIN_MATCHES,
    SMART_HISTORY_LIMIT,
    Centroid,
    CentroidLocalizer,
    CentroidRecord,
    EnhancedCentroid,
    EnhancedLearningCentroid,
    LearningCentroid,
    SmartLearningCentroid,
)

__all__ = [
    "CentroidLocalizer",
    "CentroidRecord",
    "Centroid",
    "EnhancedCentroid",
    "LearningCentroid",
    "EnhancedLearningCentroid",
    "SmartLearningCentroid",
    "MIN_MATCHES",
    "SMART_HISTORY_LIMIT",
]
