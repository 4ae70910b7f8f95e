"""
Collection and construction tools.

ContentCollector picks up content next to the robot; StreetConstructor
turns collected rocks into street tiles. Both wrap the world primitives and
translate primitive exceptions into the result objects the mission reacts
to, so the mission never has to catch a WorldError from these calls.

Architecture Role:
    BuilderAi._collect() → ContentCollector.collect(resource) → world.destroy()
    BuilderAi._build()   → StreetConstructor.build()/lay()/clear()
                         → world.put()/go()/destroy()

Design Decisions:
    - build() checks held material before touching the world. A shortage
      is reported without any mutation, so the mission can go back to
      discovery with its queues and the map exactly as they were.
    - Primitive failures can still leave partial effects (energy spent on
      earlier segments). Results carry the number of segments built so
      callers can re-read world state instead of assuming.

Dependencies:
    - streetbuilder.world: destroy, put, go primitives
    - streetbuilder.agent.interfaces: CollectResult, BuildResult, BuildError
"""

from __future__ import annotations

import logging

from streetbuilder.agent.interfaces import BuildError, BuildResult, CollectResult
from streetbuilder.errors import (
    NotEnoughContentInBackPack,
    NotEnoughEnergy,
    NotEnoughSpace,
    WorldError,
)
from streetbuilder.world import (
    Content,
    Direction,
    Robot,
    TileType,
    World,
    destroy,
    go,
    put,
)

logger = logging.getLogger(__name__)


# =============================================================================
# COLLECTOR
# =============================================================================


class ContentCollector:
    """Collects matching content on and around the robot's tile."""

    __slots__ = ("robot", "world")

    def __init__(self, robot: Robot, world: World) -> None:
        self.robot = robot
        self.world = world

    def collect(self, content: Content) -> CollectResult:
        """
        Destroy every tile holding content among the robot's own tile and its
        four neighbours.

        Running out of backpack space or energy stops collection early. The
        partial count is still reported.
        """
        count = 0
        for direction in (None, *Direction):
            position = direction.step(self.robot.coordinate) if direction else self.robot.coordinate
            if not self.world.in_bounds(position):
                continue
            if self.world.tile(position).content != content:
                continue
            try:
                count += destroy(self.robot, self.world, direction, expected=content)
            except (NotEnoughSpace, NotEnoughEnergy) as e:
                return CollectResult(count, str(e))
        return CollectResult(count)


# =============================================================================
# CONSTRUCTOR
# =============================================================================


class StreetConstructor:
    """
    Lays street tiles using material from the backpack.

    Attributes:
        robot: Robot carrying the material.
        world: World being built on.
        material: Content consumed per street tile (rock by default).
    """

    __slots__ = ("robot", "world", "material")

    def __init__(self, robot: Robot, world: World, material: Content = Content.ROCK) -> None:
        self.robot = robot
        self.world = world
        self.material = material

    def build(self, direction: Direction, length: int) -> BuildResult:
        """
        Build a straight street of length tiles starting next to the robot,
        walking onto each new segment.

        Tiles that are already street are walked over without using material.
        Content blocking a segment is cleared first.

        Returns:
            BuildResult with the number of segments completed. MATERIAL_SHORTAGE
            is returned up front, before anything is changed.
        """
        held = self.robot.backpack.count(self.material)
        if held < length:
            return BuildResult(
                0,
                BuildError.MATERIAL_SHORTAGE,
                f"need {length} {self.material.name}, have {held}",
            )

        built = 0
        for _ in range(length):
            ahead = direction.step(self.robot.coordinate)
            if not self.world.in_bounds(ahead):
                return BuildResult(built, BuildError.BLOCKED, f"{ahead} is outside the world")

            if self.world.tile(ahead).tile_type != TileType.STREET:
                if not self.clear(direction):
                    return BuildResult(built, BuildError.BLOCKED, f"cannot clear {ahead}")
                result = self.lay(direction)
                if not result.ok:
                    return BuildResult(built, result.error, result.detail)

            try:
                go(self.robot, self.world, direction)
            except NotEnoughEnergy as e:
                return BuildResult(built, BuildError.NO_ENERGY, str(e))
            except WorldError as e:
                return BuildResult(built, BuildError.BLOCKED, str(e))
            built += 1

        logger.debug("Built %d street tiles heading %s", built, direction.name)
        return BuildResult(built)

    def lay(self, direction: Direction) -> BuildResult:
        """Pave the tile next to the robot with one unit of material."""
        try:
            put(self.robot, self.world, self.material, 1, direction)
        except NotEnoughContentInBackPack as e:
            return BuildResult(0, BuildError.MATERIAL_SHORTAGE, str(e))
        except NotEnoughEnergy as e:
            return BuildResult(0, BuildError.NO_ENERGY, str(e))
        except WorldError as e:
            return BuildResult(0, BuildError.BLOCKED, str(e))
        return BuildResult(1)

    def clear(self, direction: Direction) -> bool:
        """
        Remove whatever content sits on the tile next to the robot.

        Returns:
            True if the tile is empty afterwards.
        """
        ahead = direction.step(self.robot.coordinate)
        if not self.world.in_bounds(ahead):
            return False
        if self.world.tile(ahead).content == Content.NONE:
            return True
        try:
            destroy(self.robot, self.world, direction)
        except WorldError as e:
            logger.debug("Could not clear %s: %s", ahead, e)
            return False
        return self.world.tile(ahead).content == Content.NONE
