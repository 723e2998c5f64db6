"""
RF (Radio Frequency) propagation module.

Submodules:
    propagation: Reception probability and noisy RSS model
"""

from wifisim.rf.propagation import (
    expected_signal_count,
    max_reception_range,
    median_strength,
    noise_std,
    received,
    reception_probability,
    strength,
)

__all__ = [
    "reception_probability",
    "received",
    "median_strength",
    "noise_std",
    "strength",
    "max_reception_range",
    "expected_signal_count",
]
