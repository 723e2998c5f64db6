"""
Simulation package: primitives, access-point map, configuration and engine.

Modules:
    types: Location, AccessPoint, Signal and signal-set helpers
    map: Access point population, churn and signal reads
    config: SimulationConfig, replacement strategies and presets
    engine: Seeding, churn cycles and per-cycle statistics
"""

from wifisim.sim.config import (
    PRESETS,
    ReplacementStrategy,
    SimulationConfig,
    from_preset,
    load_config,
    save_config,
)
from wifisim.sim.engine import (
    CycleSummary,
    Engine,
    EngineState,
    LastFrame,
    SimulationRenderer,
    SimulationReport,
)
from wifisim.sim.map import Map, generation_of
from wifisim.sim.types import (
    KEY_CAPACITY,
    AccessPoint,
    Location,
    Signal,
    SignalSet,
    mean_location,
    signal_ids,
    sort_by_id,
    sort_by_strength,
)

__all__ = [
    # Primitives
    "Location",
    "AccessPoint",
    "Signal",
    "SignalSet",
    "KEY_CAPACITY",
    "sort_by_id",
    "sort_by_strength",
    "signal_ids",
    "mean_location",
    # Map
    "Map",
    "generation_of",
    # Configuration
    "SimulationConfig",
    "ReplacementStrategy",
    "PRESETS",
    "from_preset",
    "load_config",
    "save_config",
    # Engine
    "Engine",
    "EngineState",
    "CycleSummary",
    "LastFrame",
    "SimulationReport",
    "SimulationRenderer",
]
