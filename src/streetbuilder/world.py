"""
Tile world model and robot primitives for streetbuilder.

This module is the world the mission controller acts on but does not own. It
holds the tile grid (terrain type, content, content amount), what the robot
has discovered so far, and the primitive actions the robot can take: moving,
teleporting, destroying content into the backpack, putting content back onto
the map, and scanning tiles.

Architecture Role:
    The world sits underneath every agent collaborator. The scanner calls
    discover_tiles(), the planner reads robot_map() snapshots, the collector
    calls destroy(), the constructor calls put() and go(), and the mission
    controller itself calls go()/teleport() while draining its action queue.

    StreetWorldEnv (host) → BuilderAi (tick) → collaborators → world primitives

Grid Conventions:
    - Coordinates are (row, col) tuples, row increasing southward.
    - NORTH is (-1, 0), SOUTH (1, 0), EAST (0, 1), WEST (0, -1).
    - Undiscovered cells read as UNKNOWN (-1) in a MapSnapshot.

Design Decisions:
    - numpy arrays for the grid: snapshots are cheap copies and the planner
      can vectorise its cost grid.
    - Primitives raise WorldError subclasses instead of returning status
      codes. Callers decide whether a failure is fatal, retried or swallowed.
    - Energy is charged before any mutation, so a refused primitive never
      leaves the world half-changed.
    - Putting a rock on a walkable tile turns it into STREET: construction
      consumes exactly one rock per street tile.

Dependencies:
    - numpy: grid storage and world generation RNG
    - streetbuilder.errors: WorldError hierarchy
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

import numpy as np

from streetbuilder.errors import (
    CannotPut,
    CannotWalk,
    NoContent,
    NotEnoughContentInBackPack,
    NotEnoughEnergy,
    NotEnoughSpace,
    NotOnTeleport,
    OutOfBounds,
    WrongContent,
)

Position = tuple[int, int]

# Marker used in snapshots for cells the robot has not discovered
UNKNOWN = -1


# =============================================================================
# TILE TYPES AND CONTENT
# =============================================================================


class TileType(IntEnum):
    """Terrain classification of a tile."""

    DEEP_WATER = 0
    SHALLOW_WATER = 1
    SAND = 2
    GRASS = 3
    STREET = 4
    HILL = 5
    MOUNTAIN = 6
    SNOW = 7
    LAVA = 8
    TELEPORT = 9
    WALL = 10

    @property
    def walkable(self) -> bool:
        return TILE_COSTS[self] is not None

    @property
    def cost(self) -> int:
        """Extra energy needed to step onto this tile (0 if not walkable)."""
        return TILE_COSTS[self] or 0


# Extra energy charged when stepping onto a tile. None = not walkable.
TILE_COSTS: dict[TileType, int | None] = {
    TileType.DEEP_WATER: None,
    TileType.SHALLOW_WATER: 3,
    TileType.SAND: 2,
    TileType.GRASS: 1,
    TileType.STREET: 0,
    TileType.HILL: 3,
    TileType.MOUNTAIN: 6,
    TileType.SNOW: 3,
    TileType.LAVA: None,
    TileType.TELEPORT: 0,
    TileType.WALL: None,
}


class Content(IntEnum):
    """Item lying on a tile."""

    NONE = 0
    ROCK = 1
    TREE = 2
    GARBAGE = 3
    COIN = 4
    FIRE = 5
    BUSH = 6

    @classmethod
    def from_name(cls, name: str) -> Content:
        """Look up a content by case-insensitive name ("rock" → ROCK)."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown content '{name}'") from None


# Contents that occupy the tile and stop the robot from walking onto it
BLOCKING_CONTENT = frozenset({Content.ROCK, Content.TREE, Content.FIRE, Content.BUSH})


class Direction(Enum):
    """Cardinal direction with its (d_row, d_col) delta."""

    NORTH = (-1, 0)
    SOUTH = (1, 0)
    EAST = (0, 1)
    WEST = (0, -1)

    @property
    def delta(self) -> Position:
        return self.value

    @property
    def opposite(self) -> Direction:
        d_row, d_col = self.value
        return Direction((-d_row, -d_col))

    def step(self, position: Position) -> Position:
        """Return the coordinate one tile away from position in this direction."""
        return position[0] + self.value[0], position[1] + self.value[1]

    @classmethod
    def from_name(cls, name: str) -> Direction:
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown direction '{name}'") from None

    @classmethod
    def between(cls, start: Position, end: Position) -> Direction | None:
        """Direction leading from start to an orthogonally adjacent end, else None."""
        delta = (end[0] - start[0], end[1] - start[1])
        for direction in cls:
            if direction.value == delta:
                return direction
        return None


@dataclass(frozen=True)
class Tile:
    """A single grid cell as seen by the robot."""

    tile_type: TileType
    content: Content = Content.NONE
    amount: int = 0

    @property
    def walkable(self) -> bool:
        return self.tile_type.walkable and self.content not in BLOCKING_CONTENT


# =============================================================================
# ROBOT STATE
# =============================================================================


@dataclass
class Energy:
    """Robot energy budget. Primitives consume it, the host recharges it."""

    level: int = 1000
    maximum: int = 1000

    def has_enough(self, cost: int) -> bool:
        return self.level >= cost

    def consume(self, cost: int) -> None:
        if cost > self.level:
            raise NotEnoughEnergy(f"need {cost} energy, have {self.level}")
        self.level -= cost

    def recharge(self, amount: int) -> int:
        """Add energy up to the maximum. Returns the amount actually gained."""
        gained = min(amount, self.maximum - self.level)
        self.level += gained
        return gained


@dataclass
class BackPack:
    """Bounded inventory of contents collected by the robot."""

    size: int = 20
    contents: Counter[Content] = field(default_factory=Counter)

    @property
    def total(self) -> int:
        return sum(self.contents.values())

    @property
    def free_space(self) -> int:
        return self.size - self.total

    def count(self, content: Content) -> int:
        return self.contents[content]

    def add(self, content: Content, quantity: int) -> int:
        """Store up to quantity items. Returns how many fit."""
        stored = min(quantity, self.free_space)
        if stored <= 0:
            raise NotEnoughSpace(f"backpack full ({self.total}/{self.size})")
        self.contents[content] += stored
        return stored

    def remove(self, content: Content, quantity: int) -> None:
        if self.contents[content] < quantity:
            raise NotEnoughContentInBackPack(
                f"need {quantity} {content.name}, have {self.contents[content]}"
            )
        self.contents[content] -= quantity
        if self.contents[content] == 0:
            del self.contents[content]


@dataclass
class Robot:
    """Authoritative agent state owned by the host."""

    coordinate: Position = (0, 0)
    energy: Energy = field(default_factory=Energy)
    backpack: BackPack = field(default_factory=BackPack)


# =============================================================================
# EVENTS
# =============================================================================


class EventKind(Enum):
    READY = "ready"
    MOVED = "moved"
    TELEPORTED = "teleported"
    ENERGY_CONSUMED = "energy_consumed"
    ENERGY_RECHARGED = "energy_recharged"
    ADDED_TO_BACKPACK = "added_to_backpack"
    REMOVED_FROM_BACKPACK = "removed_from_backpack"
    TILE_CONTENT_UPDATED = "tile_content_updated"
    TILE_TYPE_UPDATED = "tile_type_updated"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Event:
    """Notification produced by the world or the controller for the UI layer."""

    kind: EventKind
    data: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# ENERGY COSTS
# =============================================================================

BASE_MOVE_COST = 1
DISCOVER_COST = 3
DESTROY_COST = 3
PUT_COST = 2
TELEPORT_COST = 30


# =============================================================================
# ASCII MAP CHARACTERS
# =============================================================================
# Used by World.from_rows() to build small worlds in tests and by render().

TYPE_CHARS: dict[str, TileType] = {
    "W": TileType.DEEP_WATER,
    "~": TileType.SHALLOW_WATER,
    ",": TileType.SAND,
    ".": TileType.GRASS,
    "=": TileType.STREET,
    "^": TileType.HILL,
    "M": TileType.MOUNTAIN,
    "*": TileType.SNOW,
    "L": TileType.LAVA,
    "T": TileType.TELEPORT,
    "#": TileType.WALL,
}

# Content characters always sit on grass
CONTENT_CHARS: dict[str, Content] = {
    "r": Content.ROCK,
    "t": Content.TREE,
    "g": Content.GARBAGE,
    "c": Content.COIN,
    "f": Content.FIRE,
    "b": Content.BUSH,
}

_TYPE_TO_CHAR = {v: k for k, v in TYPE_CHARS.items()}
_CONTENT_TO_CHAR = {v: k for k, v in CONTENT_CHARS.items()}


# =============================================================================
# MAP SNAPSHOT
# =============================================================================


@dataclass
class MapSnapshot:
    """
    Everything the robot has discovered so far.

    Undiscovered cells hold UNKNOWN in both arrays. Snapshots are copies:
    later world mutations do not leak into a snapshot already handed out.

    Attributes:
        types: int8 array of TileType values (or UNKNOWN).
        contents: int8 array of Content values (or UNKNOWN).
        amounts: int16 array of content amounts (0 where unknown).
    """

    types: np.ndarray
    contents: np.ndarray
    amounts: np.ndarray

    @property
    def size(self) -> int:
        return int(self.types.shape[0])

    def in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.size and 0 <= col < self.size

    def known(self, position: Position) -> bool:
        return self.in_bounds(position) and self.types[position] != UNKNOWN

    def tile(self, position: Position) -> Tile | None:
        if not self.known(position):
            return None
        return Tile(
            TileType(int(self.types[position])),
            Content(int(self.contents[position])),
            int(self.amounts[position]),
        )

    def positions_with(self, content: Content) -> list[Position]:
        """Known cells holding content, in row-major order."""
        cells = np.argwhere(self.contents == int(content))
        return [(int(r), int(c)) for r, c in cells]


# =============================================================================
# WORLD
# =============================================================================


class World:
    """
    Square tile grid plus the robot's discovery mask and an event log.

    Attributes:
        types: int8 array of TileType values, shape (size, size).
        contents: int8 array of Content values.
        amounts: int16 array of content amounts.
        discovered: bool array, True where the robot has seen the tile.
        energy_recharge: Energy granted to the robot by recharge().
        events: Pending events not yet drained by the host.
    """

    def __init__(
        self,
        types: np.ndarray,
        contents: np.ndarray | None = None,
        amounts: np.ndarray | None = None,
        energy_recharge: int = 10,
    ) -> None:
        self.types = np.array(types, dtype=np.int8)
        if self.types.ndim != 2 or self.types.shape[0] != self.types.shape[1]:
            raise ValueError(f"World grid must be square, got shape {self.types.shape}")

        if contents is None:
            contents = np.zeros_like(self.types)
        self.contents = np.array(contents, dtype=np.int8)

        if amounts is None:
            amounts = (self.contents != Content.NONE).astype(np.int16)
        self.amounts = np.array(amounts, dtype=np.int16)

        self.discovered = np.zeros(self.types.shape, dtype=bool)
        self.energy_recharge = energy_recharge
        self.events: list[Event] = []

    @classmethod
    def from_rows(cls, rows: list[str], energy_recharge: int = 10) -> World:
        """
        Build a world from ASCII rows (see TYPE_CHARS / CONTENT_CHARS).

        Example:
            >>> world = World.from_rows([
            ...     "....",
            ...     ".r..",
            ...     "..#.",
            ...     "....",
            ... ])
        """
        size = len(rows)
        types = np.full((size, size), TileType.GRASS, dtype=np.int8)
        contents = np.zeros((size, size), dtype=np.int8)
        for row, line in enumerate(rows):
            if len(line) != size:
                raise ValueError(f"Row {row} has length {len(line)}, expected {size}")
            for col, char in enumerate(line):
                if char in CONTENT_CHARS:
                    contents[row, col] = CONTENT_CHARS[char]
                elif char in TYPE_CHARS:
                    types[row, col] = TYPE_CHARS[char]
                else:
                    raise ValueError(f"Unknown map character {char!r} at ({row}, {col})")
        return cls(types, contents, energy_recharge=energy_recharge)

    @property
    def size(self) -> int:
        return int(self.types.shape[0])

    def in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.size and 0 <= col < self.size

    def tile(self, position: Position) -> Tile:
        if not self.in_bounds(position):
            raise OutOfBounds(f"{position} outside {self.size}x{self.size} world")
        return Tile(
            TileType(int(self.types[position])),
            Content(int(self.contents[position])),
            int(self.amounts[position]),
        )

    def count_tiles(self, tile_type: TileType) -> int:
        return int(np.count_nonzero(self.types == tile_type))

    def emit(self, kind: EventKind, **data: Any) -> None:
        self.events.append(Event(kind, data))

    def drain_events(self) -> list[Event]:
        """Return and clear the pending events."""
        events, self.events = self.events, []
        return events

    def recharge(self, robot: Robot) -> int:
        """Per-tick energy recharge applied by the host."""
        gained = robot.energy.recharge(self.energy_recharge)
        if gained:
            self.emit(EventKind.ENERGY_RECHARGED, amount=gained)
        return gained

    def reveal(self, center: Position, radius: int = 1) -> None:
        """Mark the square around center as discovered, free of charge."""
        row, col = center
        r0, r1 = max(row - radius, 0), min(row + radius + 1, self.size)
        c0, c1 = max(col - radius, 0), min(col + radius + 1, self.size)
        self.discovered[r0:r1, c0:c1] = True

    def render(self, robot: Robot | None = None, known_only: bool = False) -> str:
        """ASCII rendering. '@' marks the robot, '?' undiscovered cells."""
        lines = []
        for row in range(self.size):
            chars = []
            for col in range(self.size):
                if robot is not None and robot.coordinate == (row, col):
                    chars.append("@")
                elif known_only and not self.discovered[row, col]:
                    chars.append("?")
                else:
                    content = Content(int(self.contents[row, col]))
                    if content != Content.NONE:
                        chars.append(_CONTENT_TO_CHAR[content])
                    else:
                        chars.append(_TYPE_TO_CHAR[TileType(int(self.types[row, col]))])
            lines.append("".join(chars))
        return "\n".join(lines)


# =============================================================================
# PRIMITIVES
# =============================================================================


def robot_map(world: World) -> MapSnapshot:
    """Snapshot of every tile the robot has discovered."""
    hidden = ~world.discovered
    types = world.types.copy()
    contents = world.contents.copy()
    amounts = world.amounts.copy()
    types[hidden] = UNKNOWN
    contents[hidden] = UNKNOWN
    amounts[hidden] = 0
    return MapSnapshot(types, contents, amounts)


def robot_view(robot: Robot, world: World) -> list[list[Tile | None]]:
    """Reveal and return the 3x3 neighbourhood around the robot (free)."""
    world.reveal(robot.coordinate)
    row, col = robot.coordinate
    view: list[list[Tile | None]] = []
    for d_row in (-1, 0, 1):
        line: list[Tile | None] = []
        for d_col in (-1, 0, 1):
            position = (row + d_row, col + d_col)
            line.append(world.tile(position) if world.in_bounds(position) else None)
        view.append(line)
    return view


def discover_tiles(robot: Robot, world: World, positions: list[Position]) -> dict[Position, Tile]:
    """
    Scan arbitrary tiles, paying DISCOVER_COST per tile not yet discovered.

    Out-of-bounds positions are skipped. The whole batch is paid up front:
    if the robot cannot afford it, nothing is revealed.

    Raises:
        NotEnoughEnergy: If the batch costs more than the robot has.
    """
    in_bounds = [p for p in positions if world.in_bounds(p)]
    fresh = [p for p in in_bounds if not world.discovered[p]]
    robot.energy.consume(DISCOVER_COST * len(fresh))
    if fresh:
        world.emit(EventKind.ENERGY_CONSUMED, amount=DISCOVER_COST * len(fresh))
    for position in fresh:
        world.discovered[position] = True
    return {p: world.tile(p) for p in in_bounds}


def go(robot: Robot, world: World, direction: Direction) -> Position:
    """
    Move the robot one tile. Returns the new coordinate.

    Raises:
        OutOfBounds: Destination outside the grid.
        CannotWalk: Destination terrain not walkable or blocked by content.
        NotEnoughEnergy: Robot cannot pay BASE_MOVE_COST + tile cost.
    """
    target = direction.step(robot.coordinate)
    tile = world.tile(target)
    if not tile.walkable:
        raise CannotWalk(f"cannot walk onto {tile.tile_type.name}/{tile.content.name} at {target}")

    cost = BASE_MOVE_COST + tile.tile_type.cost
    robot.energy.consume(cost)
    world.emit(EventKind.ENERGY_CONSUMED, amount=cost)

    previous = robot.coordinate
    robot.coordinate = target
    world.reveal(target)
    world.emit(EventKind.MOVED, origin=previous, target=target)
    return target


def teleport(robot: Robot, world: World, target: Position) -> Position:
    """
    Jump between two discovered teleport tiles.

    Raises:
        NotOnTeleport: The robot is not standing on a teleport tile.
        CannotWalk: Target is not a discovered teleport tile.
        NotEnoughEnergy: Robot cannot pay TELEPORT_COST.
    """
    if world.tile(robot.coordinate).tile_type != TileType.TELEPORT:
        raise NotOnTeleport(f"{robot.coordinate} is not a teleport tile")
    if world.tile(target).tile_type != TileType.TELEPORT or not world.discovered[target]:
        raise CannotWalk(f"{target} is not a known teleport tile")

    robot.energy.consume(TELEPORT_COST)
    world.emit(EventKind.ENERGY_CONSUMED, amount=TELEPORT_COST)

    previous = robot.coordinate
    robot.coordinate = target
    world.reveal(target)
    world.emit(EventKind.TELEPORTED, origin=previous, target=target)
    return target


def destroy(
    robot: Robot,
    world: World,
    direction: Direction | None,
    expected: Content | None = None,
) -> int:
    """
    Collect the content of an adjacent tile (or the robot's own tile when
    direction is None) into the backpack. Returns the number of items stored.

    When expected is given, a tile holding any other content is refused.

    Raises:
        OutOfBounds, NoContent, WrongContent, NotEnoughSpace, NotEnoughEnergy
    """
    position = direction.step(robot.coordinate) if direction else robot.coordinate
    tile = world.tile(position)
    if tile.content == Content.NONE:
        raise NoContent(f"nothing to destroy at {position}")
    if expected is not None and tile.content != expected:
        raise WrongContent(f"{position} holds {tile.content.name}, not {expected.name}")
    if robot.backpack.free_space <= 0:
        raise NotEnoughSpace(f"backpack full ({robot.backpack.total}/{robot.backpack.size})")

    robot.energy.consume(DESTROY_COST)
    world.emit(EventKind.ENERGY_CONSUMED, amount=DESTROY_COST)

    stored = robot.backpack.add(tile.content, max(tile.amount, 1))
    world.emit(EventKind.ADDED_TO_BACKPACK, content=tile.content.name, amount=stored)

    remaining = max(tile.amount, 1) - stored
    world.amounts[position] = remaining
    if remaining == 0:
        world.contents[position] = Content.NONE
    world.emit(
        EventKind.TILE_CONTENT_UPDATED,
        position=position,
        content=Content(int(world.contents[position])).name,
    )
    return stored


def put(
    robot: Robot,
    world: World,
    content: Content,
    quantity: int,
    direction: Direction,
) -> int:
    """
    Place content from the backpack onto an adjacent tile. Returns the
    number of items used.

    A ROCK put on a walkable, empty, non-street tile paves it: the tile
    becomes STREET and exactly one rock is used. Any other content is laid
    on an empty tile as-is.

    Raises:
        NotEnoughContentInBackPack, OutOfBounds, CannotPut, NotEnoughEnergy
    """
    if quantity < 1:
        raise CannotPut(f"quantity must be positive, got {quantity}")
    if robot.backpack.count(content) < quantity:
        raise NotEnoughContentInBackPack(
            f"need {quantity} {content.name}, have {robot.backpack.count(content)}"
        )

    position = direction.step(robot.coordinate)
    tile = world.tile(position)
    if tile.content != Content.NONE:
        raise CannotPut(f"{position} already holds {tile.content.name}")

    paving = content == Content.ROCK
    if paving and (
        not tile.tile_type.walkable
        or tile.tile_type in (TileType.STREET, TileType.TELEPORT)
    ):
        raise CannotPut(f"cannot pave {tile.tile_type.name} at {position}")

    robot.energy.consume(PUT_COST)
    world.emit(EventKind.ENERGY_CONSUMED, amount=PUT_COST)

    used = 1 if paving else quantity
    robot.backpack.remove(content, used)
    world.emit(EventKind.REMOVED_FROM_BACKPACK, content=content.name, amount=used)

    if paving:
        world.types[position] = TileType.STREET
        world.emit(EventKind.TILE_TYPE_UPDATED, position=position, tile_type="STREET")
    else:
        world.contents[position] = content
        world.amounts[position] = quantity
        world.emit(EventKind.TILE_CONTENT_UPDATED, position=position, content=content.name)
    world.discovered[position] = True
    return used


# =============================================================================
# WORLD GENERATION
# =============================================================================

# Terrain mix for generated worlds (probabilities sum to 1)
_TERRAIN_WEIGHTS: dict[TileType, float] = {
    TileType.GRASS: 0.62,
    TileType.SAND: 0.10,
    TileType.HILL: 0.08,
    TileType.SHALLOW_WATER: 0.06,
    TileType.SNOW: 0.04,
    TileType.MOUNTAIN: 0.04,
    TileType.DEEP_WATER: 0.03,
    TileType.WALL: 0.02,
    TileType.LAVA: 0.01,
}


def generate_world(
    size: int,
    seed: int | None = None,
    rock_density: float = 0.04,
    tree_density: float = 0.05,
    teleports: int = 2,
    energy_recharge: int = 10,
) -> tuple[World, Position]:
    """
    Generate a random world and a spawn coordinate.

    Terrain is drawn independently per tile from _TERRAIN_WEIGHTS, then rocks
    and trees are scattered over walkable empty tiles. The spawn tile is
    forced to empty grass near the centre of the map.

    Args:
        size: Side length of the square grid.
        seed: RNG seed (numpy default_rng). None for nondeterministic worlds.
        rock_density: Fraction of walkable tiles that receive a rock.
        tree_density: Fraction of walkable tiles that receive a tree.
        teleports: Number of teleport tiles to place.
        energy_recharge: Per-tick recharge granted by the world.

    Returns:
        Tuple of (world, spawn_position).
    """
    rng = np.random.default_rng(seed)

    kinds = np.array([int(t) for t in _TERRAIN_WEIGHTS], dtype=np.int8)
    weights = np.array(list(_TERRAIN_WEIGHTS.values()), dtype=np.float64)
    types = rng.choice(kinds, size=(size, size), p=weights / weights.sum()).astype(np.int8)

    walkable = np.isin(types, [int(t) for t in TileType if t.walkable])

    contents = np.zeros((size, size), dtype=np.int8)
    draws = rng.random((size, size))
    contents[walkable & (draws < rock_density)] = Content.ROCK
    contents[walkable & (draws >= rock_density) & (draws < rock_density + tree_density)] = Content.TREE

    for _ in range(teleports):
        row, col = (int(v) for v in rng.integers(0, size, size=2))
        types[row, col] = TileType.TELEPORT
        contents[row, col] = Content.NONE

    spawn = (size // 2, size // 2)
    types[spawn] = TileType.GRASS
    contents[spawn] = Content.NONE

    world = World(types, contents, energy_recharge=energy_recharge)
    return world, spawn
