"""
Collaborator contracts consumed by the mission controller.

The controller never scans, plans, collects or builds by itself. It drives
collaborators through the protocols below and only reacts to what they
report. Any object with the right methods can be injected, which is how the
tests substitute MagicMock scanners and planners for the reference ones.

Protocols:
    Scanner         - incremental area reveal, verdict per call
    Planner         - cost graph + content index + route to a target
    Collector       - pick up matching content near the robot
    Constructor     - lay street tiles from held material
    ProgressTracker - accumulate collection counts against goals
    RunnableUi      - presentation layer notified per tick and per event

Result Types:
    ScanResult, CollectResult and BuildResult are plain dataclasses. Failures
    the mission recovers from are reported through them, not raised.

Dependencies:
    - streetbuilder.world: Content, Direction, MapSnapshot, Tile, World, Event
    - streetbuilder.agent.actions: Action
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from streetbuilder.agent.actions import Action
from streetbuilder.world import Content, Direction, Event, MapSnapshot, Position, Tile, World

# Predicate selecting the tiles a scan is looking for
TilePredicate = Callable[[Tile], bool]


# =============================================================================
# RESULT TYPES
# =============================================================================


class ScanStatus(Enum):
    SCANNING = "scanning"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class ScanResult:
    """Verdict of one scanner call. reason is only set for FAILED."""

    status: ScanStatus
    reason: str = ""


@dataclass(frozen=True)
class CollectResult:
    """
    Outcome of one collection attempt.

    Attributes:
        count: Items added to the backpack (possibly partial).
        error: Description of the failure that stopped collection early,
            empty when the attempt ran to completion.
    """

    count: int
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.count > 0


class BuildError(Enum):
    MATERIAL_SHORTAGE = "material_shortage"
    BLOCKED = "blocked"
    NO_ENERGY = "no_energy"


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a construction call. error is None on success."""

    built: int = 0
    error: BuildError | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# GOAL TYPES
# =============================================================================


class GoalType(Enum):
    GET_ITEMS = "get_items"


# =============================================================================
# PROTOCOLS
# =============================================================================


class Scanner(Protocol):
    def scan(self, center: Position, radius: int, predicate: TilePredicate) -> ScanResult:
        ...


class Planner(Protocol):
    def update_graph(self, snapshot: MapSnapshot) -> None:
        ...

    def update_costs(self, position: Position) -> None:
        ...

    def content_index(self, content: Content) -> list[Position]:
        ...

    def reachable(self, target: Position) -> bool:
        ...

    def route_to(self, target: Position) -> list[Action]:
        ...


class Collector(Protocol):
    def collect(self, content: Content) -> CollectResult:
        ...


class Constructor(Protocol):
    def build(self, direction: Direction, length: int) -> BuildResult:
        ...

    def lay(self, direction: Direction) -> BuildResult:
        ...

    def clear(self, direction: Direction) -> bool:
        ...


class ProgressTracker(Protocol):
    def add_goal(self, goal_type: GoalType, content: Content, required: int) -> None:
        ...

    def update(self, goal_type: GoalType, content: Content, quantity: int) -> None:
        ...

    def completed_number(self) -> int:
        ...


class RunnableUi(Protocol):
    def process_tick(self, world: World) -> None:
        ...

    def handle_event(self, event: Event) -> None:
        ...
