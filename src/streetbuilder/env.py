"""
Gymnasium environment hosting the street-building mission.

StreetWorldEnv plays the host scheduler: it owns the world and the robot,
recharges the robot and calls the mission controller once per step. The
controller forwards the world events of its tick to the UI before the UI
samples the tick. The mission is scripted, so the action space is a single
no-op action that is ignored.

Architecture Role:
    run.py / CLI → StreetWorldEnv.step() → World.recharge()
                                         → BuilderAi.process_tick(world)
                                             → BuilderAi.handle_event(event)*

Observation Space:
    - known_types: (n, n) int8 tile types as discovered, -1 = unknown
    - known_contents: (n, n) int8 tile contents as discovered, -1 = unknown
    - position: (2,) robot (row, col)
    - energy: (1,) robot energy level
    - backpack: (len(Content),) item counts per Content value

Reward:
    Number of street tiles added during the step. The mission does not learn
    from it; it is reported so that runs can be compared with standard
    Gymnasium tooling.

Episode End:
    terminated once the controller has signalled TERMINATE, truncated at
    config.max_ticks.

Usage:
    >>> from streetbuilder.env import StreetWorldEnv
    >>> env = StreetWorldEnv()
    >>> obs, info = env.reset(seed=3)
    >>> obs, reward, terminated, truncated, info = env.step(0)
    >>> env.close()

Dependencies:
    - gymnasium: For the Gym environment interface
    - numpy: For observation arrays
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from streetbuilder.agent.interfaces import RunnableUi
from streetbuilder.agent.mission import BuilderAi
from streetbuilder.config import BuilderConfig
from streetbuilder.world import (
    BackPack,
    Content,
    Energy,
    Position,
    Robot,
    TileType,
    World,
    generate_world,
    robot_map,
    robot_view,
)

# Builds a fresh world for an episode from a seed
WorldFactory = Callable[[int | None], tuple[World, Position]]


class StreetWorldEnv(gym.Env):  # type: ignore[type-arg]
    """
    Tile world environment driving a BuilderAi one tick per step.

    Attributes:
        config: BuilderConfig used for the world, robot and mission.
        world: Current episode's world (None before reset()).
        robot: Current episode's robot.
        ai: Current episode's mission controller.
        step_count: Steps taken this episode.
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(
        self,
        config: BuilderConfig | None = None,
        render_mode: str | None = None,
        ui: RunnableUi | None = None,
        world_factory: WorldFactory | None = None,
    ) -> None:
        """
        Args:
            config: Configuration. Defaults to BuilderConfig().
            render_mode: None or "ansi".
            ui: Presentation layer handed to each episode's controller.
            world_factory: Custom world builder, mainly for tests. Defaults to
                generate_world() with the config's size and densities.
        """
        super().__init__()
        self.config = config or BuilderConfig()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode {render_mode!r}")
        self.render_mode = render_mode
        self.ui = ui
        self.world_factory = world_factory or self._generate

        self.world: World | None = None
        self.robot: Robot | None = None
        self.ai: BuilderAi | None = None
        self.step_count = 0
        self._streets = 0
        self._initial_streets = 0

        n = self.config.world_size
        self.observation_space = spaces.Dict(
            {
                "known_types": spaces.Box(low=-1, high=int(max(TileType)), shape=(n, n), dtype=np.int8),
                "known_contents": spaces.Box(low=-1, high=int(max(Content)), shape=(n, n), dtype=np.int8),
                "position": spaces.Box(low=0, high=n - 1, shape=(2,), dtype=np.int64),
                "energy": spaces.Box(low=0, high=self.config.energy_max, shape=(1,), dtype=np.int64),
                "backpack": spaces.Box(
                    low=0, high=self.config.backpack_size, shape=(len(Content),), dtype=np.int64
                ),
            }
        )
        # The mission is scripted: the only action is "advance one tick"
        self.action_space = spaces.Discrete(1)

    def _generate(self, seed: int | None) -> tuple[World, Position]:
        cfg = self.config
        return generate_world(
            cfg.world_size,
            seed=seed,
            rock_density=cfg.rock_density,
            energy_recharge=cfg.energy_recharge,
        )

    # =========================================================================
    # GYMNASIUM API
    # =========================================================================

    def reset(
        self,
        *,
        seed: int | None = None,
        options: dict | None = None,
    ) -> tuple[dict[str, np.ndarray], dict[str, Any]]:
        """
        Start a new episode with a fresh world, robot and controller.

        Args:
            seed: World seed. Falls back to config.seed when None.
            options: Unused, accepted for API compliance.
        """
        super().reset(seed=seed)
        world, spawn = self.world_factory(seed if seed is not None else self.config.seed)
        if world.size != self.config.world_size:
            raise ValueError(
                f"World size {world.size} does not match config.world_size {self.config.world_size}"
            )

        cfg = self.config
        robot = Robot(
            coordinate=spawn,
            energy=Energy(cfg.energy_max, cfg.energy_max),
            backpack=BackPack(cfg.backpack_size),
        )
        robot_view(robot, world)

        self.world = world
        self.robot = robot
        self.ai = BuilderAi.with_reference_tools(robot, world, cfg, ui=self.ui)
        self.step_count = 0
        self._initial_streets = world.count_tiles(TileType.STREET)
        self._streets = self._initial_streets
        world.drain_events()

        return self._get_observation(), self._get_info()

    def step(self, action: int = 0) -> tuple[dict[str, np.ndarray], float, bool, bool, dict[str, Any]]:
        """
        Advance the mission by one tick. action is ignored.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        if self.ai is None or self.world is None:
            raise RuntimeError("Call reset() before step()")

        self.world.recharge(self.ai.robot)
        self.ai.process_tick(self.world)
        self.step_count += 1

        streets = self.world.count_tiles(TileType.STREET)
        reward = float(streets - self._streets)
        self._streets = streets

        terminated = self.ai.finished
        truncated = not terminated and self.step_count >= self.config.max_ticks
        return self._get_observation(), reward, terminated, truncated, self._get_info()

    def _get_observation(self) -> dict[str, np.ndarray]:
        assert self.world is not None and self.robot is not None
        snapshot = robot_map(self.world)
        backpack = np.zeros(len(Content), dtype=np.int64)
        for content, count in self.robot.backpack.contents.items():
            backpack[int(content)] = count
        return {
            "known_types": snapshot.types,
            "known_contents": snapshot.contents,
            "position": np.array(self.robot.coordinate, dtype=np.int64),
            "energy": np.array([self.robot.energy.level], dtype=np.int64),
            "backpack": backpack,
        }

    def _get_info(self) -> dict[str, Any]:
        """Mission status plus world statistics."""
        assert self.ai is not None and self.world is not None
        return {
            **self.ai.status(),
            "step": self.step_count,
            "energy": self.ai.robot.energy.level,
            "street_tiles": self._streets,
            "streets_built": self._streets - self._initial_streets,
            "explored": int(np.count_nonzero(self.world.discovered)),
        }

    def render(self) -> str | None:
        """ASCII map with a status line when render_mode='ansi'."""
        if self.render_mode != "ansi" or self.world is None or self.ai is None:
            return None
        status = self.ai.status()
        header = (
            f"tick {status['tick']}  phase {status['phase']}  "
            f"energy {self.ai.robot.energy.level}  "
            f"rocks {self.ai.robot.backpack.count(Content.ROCK)}"
        )
        return header + "\n" + self.world.render(self.ai.robot, known_only=True)

    def close(self) -> None:
        """Stop the UI's background work, if any."""
        close = getattr(self.ui, "close", None)
        if close is not None:
            close()
