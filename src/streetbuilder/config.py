"""
Configuration dataclass for streetbuilder.

All mission, world and streaming settings live in a single BuilderConfig
dataclass, validated on construction.

Key Features:
    - Type-safe configuration using Python dataclasses
    - Automatic validation of parameters in __post_init__
    - from_dict() ignoring unknown keys, from_file() for YAML/JSON files

Architecture Role:
    BuilderConfig is used by:
    - agent/mission.py: Resource, search radius, build mode and pattern
    - env.py: World generation and robot energy/backpack settings
    - run.py: Tick limit per episode
    - ui.py: Streaming settings for visualization

Example Usage:
    >>> config = BuilderConfig(world_size=16, street_length=3)
    >>> config.resource
    'rock'
    >>> config = BuilderConfig.from_dict({"seed": 7, "unknown_key": 1})

Dependencies:
    - dataclasses: For the dataclass decorator
    - pyyaml: For YAML config files (imported lazily by from_file)
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

# Accepted values for the string-valued settings
VARIANTS = ("staged", "compact")
BUILD_MODES = ("simple", "patterned")
BUILD_PATTERNS = ("loop", "spiral", "enclosure")
DIRECTIONS = ("north", "south", "east", "west")
RESOURCES = ("rock", "tree", "garbage", "coin", "fire", "bush")


@dataclass
class BuilderConfig:
    """
    Configuration for the street-building mission and its world.

    Attributes:
        world_size (int): Side length of the square world. Also caps the
            Discover search radius.
        seed (int | None): Seed for world generation. None = random world.
        rock_density (float): Fraction of walkable tiles holding a rock.

        initial_search_radius (int): Discover radius on the first scan.
        resource (str): Content the mission collects ("rock").
        goal_quantity (int): Items to collect before building.
        exclude_streets (bool): Ignore resources lying on street tiles.
        variant (str): "staged" (Locate + Goto) or "compact" (Find).
        orient_direction (str): Default orienting move when a target is
            already within reach.
        collect_retries (int): Extra Collect attempts after an empty
            collection before going back to navigation.

        build_mode (str): "simple" (one straight street) or "patterned".
        build_direction (str): Heading of the simple street.
        street_length (int): Tiles in the simple street.
        build_pattern (str): "loop", "spiral" or "enclosure".
        pattern_size (int): Side (loop/enclosure) or legs (spiral).
        dance (bool): Perform the dance before terminating.

        max_ticks (int): Tick limit per episode (truncation).
        energy_max (int): Robot energy capacity.
        energy_recharge (int): Energy regained per tick.
        backpack_size (int): Backpack capacity.

        enable_streaming (bool): Broadcast robot position over WebSocket.
        stream_username (str): Display name on the shared map.
        stream_color (str): Hex color code for the map marker.
        stream_interval (int): Ticks between position uploads.
        stream_address (str): WebSocket server URL.
    """

    # =============================================================================
    # WORLD SETTINGS
    # =============================================================================

    # Side of the square grid. 32x32 keeps full-map scans cheap.
    world_size: int = 32

    # Seed for numpy's default_rng. Same seed = same world.
    seed: int | None = 42

    # Share of walkable tiles that start with a rock on them
    rock_density: float = 0.04

    # =============================================================================
    # MISSION SETTINGS
    # =============================================================================

    # Radius of the first Discover scan, grows by 1 on every retry
    initial_search_radius: int = 2

    # Content the robot gathers and builds with
    resource: str = "rock"

    # Items to gather before the Build phase starts
    goal_quantity: int = 5

    # Skip resources already lying on street tiles
    exclude_streets: bool = True

    # Phase graph variant: "staged" (Locate → Goto) or "compact" (Find)
    variant: str = "staged"

    # Move taken when a target is already next to the robot
    orient_direction: str = "north"

    # Extra Collect attempts after an empty collection (0 = go straight back
    # to navigation)
    collect_retries: int = 0

    # =============================================================================
    # BUILD SETTINGS
    # =============================================================================

    # "simple": one straight street; "patterned": scripted choreography
    build_mode: str = "simple"

    # Simple mode: heading and length of the street
    build_direction: str = "east"
    street_length: int = 5

    # Patterned mode: which pattern and how big
    build_pattern: str = "loop"
    pattern_size: int = 2

    # Closing dance before Terminate
    dance: bool = True

    # =============================================================================
    # ROBOT / EPISODE SETTINGS
    # =============================================================================

    # Ticks before the environment truncates the episode
    max_ticks: int = 2000

    # Energy capacity and per-tick recharge
    energy_max: int = 1000
    energy_recharge: int = 10

    # Backpack capacity (items)
    backpack_size: int = 20

    # =============================================================================
    # STREAMING SETTINGS
    # Settings for broadcasting robot positions to a shared visualization server
    # =============================================================================

    # Master switch for streaming functionality
    enable_streaming: bool = False

    # Display name for this robot on the shared map
    stream_username: str = "streetbuilder"

    # Hex color code for this robot's marker
    stream_color: str = "#cc6600"

    # Ticks between position uploads
    stream_interval: int = 50

    # WebSocket server receiving the uploads
    stream_address: str = "ws://localhost:8765/broadcast"

    def __post_init__(self) -> None:
        """
        Validate configuration after initialization.

        Raises:
            ValueError: If any value is out of range or not one of the
                accepted choices.
        """
        if self.world_size < 3:
            raise ValueError(f"world_size must be >= 3, got {self.world_size}")

        if not (0 <= self.rock_density <= 1):
            raise ValueError(f"rock_density must be in [0, 1], got {self.rock_density}")

        if not (0 <= self.initial_search_radius <= self.world_size):
            raise ValueError(
                f"initial_search_radius must be in [0, world_size], got {self.initial_search_radius}"
            )

        if self.goal_quantity < 1:
            raise ValueError(f"goal_quantity must be >= 1, got {self.goal_quantity}")

        if self.street_length < 1:
            raise ValueError(f"street_length must be >= 1, got {self.street_length}")

        if self.pattern_size < 1:
            raise ValueError(f"pattern_size must be >= 1, got {self.pattern_size}")

        if self.collect_retries < 0:
            raise ValueError(f"collect_retries must be >= 0, got {self.collect_retries}")

        if self.max_ticks < 1:
            raise ValueError(f"max_ticks must be >= 1, got {self.max_ticks}")

        if self.energy_max < 1 or self.energy_recharge < 0:
            raise ValueError(
                f"energy_max must be >= 1 and energy_recharge >= 0, "
                f"got {self.energy_max} and {self.energy_recharge}"
            )

        if self.backpack_size < 1:
            raise ValueError(f"backpack_size must be >= 1, got {self.backpack_size}")

        if self.stream_interval < 1:
            raise ValueError(f"stream_interval must be >= 1, got {self.stream_interval}")

        choices = {
            "variant": VARIANTS,
            "build_mode": BUILD_MODES,
            "build_pattern": BUILD_PATTERNS,
            "build_direction": DIRECTIONS,
            "orient_direction": DIRECTIONS,
            "resource": RESOURCES,
        }
        for name, allowed in choices.items():
            value = getattr(self, name)
            if value not in allowed:
                raise ValueError(f"{name} must be one of {allowed}, got {value!r}")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BuilderConfig:
        """
        Create a BuilderConfig from a dictionary, ignoring unknown keys.

        Args:
            d: Dictionary containing configuration values. Unknown keys are ignored.

        Returns:
            A new BuilderConfig. Missing keys use their default values.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)

    @classmethod
    def from_file(cls, path: str | Path) -> BuilderConfig:
        """
        Load a configuration from a YAML (.yaml/.yml) or JSON (.json) file.

        Raises:
            ImportError: If a YAML file is given and PyYAML is not installed.
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the suffix is not recognised or the file does not
                hold a mapping.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = path.suffix.lower()
        if suffix in (".yaml", ".yml"):
            try:
                import yaml
            except ImportError:
                raise ImportError(
                    "PyYAML is required for YAML config files. "
                    "Install it with: pip install pyyaml"
                )
            with open(path) as f:
                data = yaml.safe_load(f)
        elif suffix == ".json":
            with open(path) as f:
                data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format '{suffix}', use .yaml, .yml or .json")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
