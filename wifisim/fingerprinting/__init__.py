"""Fingerprint-based localization family.

Main components:
    - Key, set_difference: Access point id sets and their comparison
    - Fingerprint, FingerprintDatabase: Stored training samples by Key
    - signal_distance, select_candidates: Bucketed nearest-neighbour search
    - FingerprintLocalizer and its variant factories

Example usage:
    >>> from wifisim.fingerprinting import LearningFingerprinting
    >>> algorithm = LearningFingerprinting()
    >>> algorithm.name
    'Learning Fingerprinting'
"""

from .fingerprinting import (
    BEST_MATCHES,
    SMART_BATCH_SIZE,
    EnhancedFingerprinting,
    EnhancedLearningFingerprinting,
    Fingerprint,
    FingerprintDatabase,
    Fingerprinting,
    FingerprintLocalizer,
    LearningFingerprinting,
    SmartLearningFingerprinting,
    select_candidates,
    signal_distance,
)
from .key import Key, set_difference

__all__ = [
    # Keys
    "Key",
    "set_difference",
    # Storage
    "Fingerprint",
    "FingerprintDatabase",
    # Matching
    "signal_distance",
    "select_candidates",
    # Algorithms
    "FingerprintLocalizer",
    "Fingerprinting",
    "EnhancedFingerprinting",
    "LearningFingerprinting",
    "EnhancedLearningFingerprinting",
    "SmartLearningFingerprinting",
    "BEST_MATCHES",
    "SMART_BATCH_SIZE",
]
