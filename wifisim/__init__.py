"""Core modules for the access-point churn localization simulator.

This package contains the reusable components of the simulator:
- rf: Radio propagation model (reception probability, RSS with noise)
- sim: Geometry/signal primitives, the access-point Map, configuration
  and the simulation Engine
- algorithms: Localization algorithm interface and feedback channels
- centroid: Centroid-based localization family
- fingerprinting: Fingerprint-based localization family
- eval: Per-cycle statistics and (external) rendering helpers
"""

__version__ = "0.1.0"
