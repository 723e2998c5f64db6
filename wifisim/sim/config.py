"""Simulation configuration.

This module defines the validated configuration dataclass consumed by the
simulation Engine, the access-point replacement strategies, a set of
preset configurations, and JSON load/save helpers.

Validation happens once, when the configuration is constructed. Invalid
values raise ValueError before any simulation work begins.
"""

import json
import math
import warnings
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from wifisim.rf.propagation import expected_signal_count
from wifisim.sim.types import KEY_CAPACITY

# Smallest supported map dimension (m). Test locations keep an 85 m margin
# from the border, so smaller maps leave no room to test.
MIN_MAP_DIMENSION = 160.0


class ReplacementStrategy(Enum):
    """How access points are chosen for removal during churn.

    Attributes:
        FIFO: Remove the oldest access points (smallest ids) first.
        RANDOM: Remove uniformly chosen access points.
    """

    FIFO = "fifo"
    RANDOM = "random"

    @classmethod
    def parse(
        cls, value: Union["ReplacementStrategy", str]
    ) -> "ReplacementStrategy":
        """
        Convert a strategy name to a ReplacementStrategy.

        Args:
            value: Strategy instance or name ('fifo' or 'random',
                   case-insensitive).

        Returns:
            ReplacementStrategy member.

        Raises:
            ValueError: If the name is unknown.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown replacement strategy: '{value}'. Use 'fifo' or 'random'."
            ) from None


@dataclass
class SimulationConfig:
    """
    Configuration of one simulation run.

    Attributes:
        map_width: Width of the map in meters (>= 160).
        map_height: Height of the map in meters (>= 160).
        access_point_density: Access points per km^2 (> 0).
        seed_distance: Spacing of the seeding grid in meters (> 0).
        test_distance: Spacing of the test grid in meters (> 0).
        test_cycles: Number of churn cycles after the initial cycle 0.
        replacement_rate: Fraction of access points replaced before every
                          cycle after the first, in [0, 1].
        replacement_strategy: 'fifo' or 'random'. Required whenever
                              replacement_rate is non-zero.
        random_seed: Seed for the simulation's random generator. None
                     draws a fresh seed, making the run non-reproducible.
        output_dir: Directory where external renderers write reports.

    Examples:
        >>> config = SimulationConfig(
        ...     map_width=1000, map_height=1000, access_point_density=1500,
        ...     seed_distance=5, test_distance=10, test_cycles=50,
        ...     replacement_rate=0.1, replacement_strategy="fifo",
        ... )
        >>> config.access_point_count
        1500
    """

    map_width: float
    map_height: float
    access_point_density: float
    seed_distance: float
    test_distance: float
    test_cycles: int = 0
    replacement_rate: float = 0.0
    replacement_strategy: Optional[ReplacementStrategy] = None
    random_seed: Optional[int] = None
    output_dir: str = "graphs"

    def __post_init__(self) -> None:
        """Normalize the strategy and validate all fields."""
        if self.replacement_strategy is not None:
            self.replacement_strategy = ReplacementStrategy.parse(
                self.replacement_strategy
            )
        self.validate()
        self.check_warnings()

    def validate(self) -> None:
        """
        Check the configuration for consistency.

        Raises:
            ValueError: On any invalid or missing value.
        """
        if self.replacement_rate != 0 and self.replacement_strategy is None:
            raise ValueError("Replacement rate set without a replacement strategy")
        if not 0.0 <= self.replacement_rate <= 1.0:
            raise ValueError(
                f"Replacement rate must be in [0, 1], got {self.replacement_rate}"
            )
        if self.access_point_density is None or self.access_point_density <= 0:
            raise ValueError(
                f"Access point density must be positive, got {self.access_point_density}"
            )
        if self.map_width < MIN_MAP_DIMENSION:
            raise ValueError(
                f"Map width cannot be less than {MIN_MAP_DIMENSION:g} meters, "
                f"got {self.map_width}"
            )
        if self.map_height < MIN_MAP_DIMENSION:
            raise ValueError(
                f"Map height cannot be less than {MIN_MAP_DIMENSION:g} meters, "
                f"got {self.map_height}"
            )
        if self.seed_distance <= 0:
            raise ValueError(f"Seed distance must be positive, got {self.seed_distance}")
        if self.test_distance <= 0:
            raise ValueError(f"Test distance must be positive, got {self.test_distance}")
        if self.test_cycles < 0:
            raise ValueError(f"Test cycles cannot be negative, got {self.test_cycles}")

    def check_warnings(self) -> None:
        """Warn about settings that are valid but unlikely to be intended."""
        if self.replacement_rate > 0 and self.test_cycles == 0:
            warnings.warn(
                "Replacement rate is set but test_cycles is 0; "
                "no access points will be replaced.",
                UserWarning,
            )
        expected = expected_signal_count(self.access_point_density)
        if expected > KEY_CAPACITY / 2:
            warnings.warn(
                f"Access point density {self.access_point_density:g}/km^2 gives "
                f"~{expected:.0f} signals per read; reads above {KEY_CAPACITY} "
                f"signals cannot be fingerprinted.",
                UserWarning,
            )

    @property
    def access_point_count(self) -> int:
        """Initial number of access points: floor(w * h * density / 1e6)."""
        return int(
            math.floor(self.map_width * self.map_height * self.access_point_density / 1e6)
        )

    @property
    def center(self) -> Tuple[float, float]:
        """Center of the map (x, y)."""
        return self.map_width / 2.0, self.map_height / 2.0

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict representation (strategy stored by name)."""
        data = asdict(self)
        if self.replacement_strategy is not None:
            data["replacement_strategy"] = self.replacement_strategy.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        """
        Build a configuration from a dictionary.

        Raises:
            ValueError: If the dictionary contains unknown keys or invalid
                        values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)


PRESETS: Dict[str, Dict[str, Any]] = {
    "baseline": {
        "description": "1 km^2, 1500 APs/km^2, no churn",
        "map_width": 1000.0,
        "map_height": 1000.0,
        "access_point_density": 1500,
        "seed_distance": 5.0,
        "test_distance": 10.0,
        "test_cycles": 0,
        "replacement_rate": 0.0,
        "replacement_strategy": None,
    },
    "fifo_churn": {
        "description": "50 cycles, 10% of APs replaced oldest-first",
        "map_width": 1000.0,
        "map_height": 1000.0,
        "access_point_density": 1500,
        "seed_distance": 5.0,
        "test_distance": 10.0,
        "test_cycles": 50,
        "replacement_rate": 0.1,
        "replacement_strategy": "fifo",
    },
    "random_churn": {
        "description": "50 cycles, 10% of APs replaced at random",
        "map_width": 1000.0,
        "map_height": 1000.0,
        "access_point_density": 1500,
        "seed_distance": 5.0,
        "test_distance": 10.0,
        "test_cycles": 50,
        "replacement_rate": 0.1,
        "replacement_strategy": "random",
    },
    "quick": {
        "description": "Small map for smoke runs",
        "map_width": 400.0,
        "map_height": 400.0,
        "access_point_density": 1000,
        "seed_distance": 20.0,
        "test_distance": 40.0,
        "test_cycles": 3,
        "replacement_rate": 0.2,
        "replacement_strategy": "fifo",
    },
}


def from_preset(name: str, **overrides: Any) -> SimulationConfig:
    """
    Build a configuration from a named preset.

    Args:
        name: One of PRESETS.
        **overrides: Field values replacing the preset's.

    Returns:
        Validated SimulationConfig.

    Raises:
        ValueError: If the preset name is unknown.
    """
    if name not in PRESETS:
        raise ValueError(
            f"Unknown preset: '{name}'. Available presets: {sorted(PRESETS)}"
        )
    params = {k: v for k, v in PRESETS[name].items() if k != "description"}
    params.update(overrides)
    return SimulationConfig.from_dict(params)


def save_config(config: SimulationConfig, path: Union[str, Path]) -> None:
    """Write a configuration to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)


def load_config(path: Union[str, Path]) -> SimulationConfig:
    """
    Load a configuration from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the content is not a valid configuration.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, "r") as f:
        data = json.load(f)
    return SimulationConfig.from_dict(data)
