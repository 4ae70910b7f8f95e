"""
Navigation directives and the two mission queues.

The planner describes a route as a list of atomic directives: a one-tile
Move in a cardinal direction, or a Teleport to an explicit coordinate. The
mission controller keeps those directives in an ActionQueue for the target
it is currently pursuing, and the targets themselves in a TargetQueue.

Architecture Role:
    PathPlanner.route_to() → [Move, Move, Teleport, ...] → ActionQueue.load()
    BuilderAi._goto() → ActionQueue.peek()/pop() → world.go()/teleport()

Design Decisions:
    - Bulk load only: an ActionQueue is refilled exclusively while empty.
      Loading a non-empty queue is a programming error (QueueError), so a
      route can never be spliced into the middle of another one.
    - Full rebuild only: a TargetQueue is replaced wholesale, never merged,
      so stale coordinates from an older map snapshot cannot survive.
    - Both queues are deques consumed from the front, with __slots__ and
      reset() like the other agent components.

Dependencies:
    - streetbuilder.world: Direction, Position
    - streetbuilder.errors: QueueError
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from streetbuilder.errors import QueueError
from streetbuilder.world import Direction, Position

# =============================================================================
# DIRECTIVES
# =============================================================================


@dataclass(frozen=True)
class Move:
    """Step one tile in a cardinal direction."""

    direction: Direction

    def __str__(self) -> str:
        return f"Move({self.direction.name})"


@dataclass(frozen=True)
class Teleport:
    """Jump from the current teleport tile to the teleport tile at (row, col)."""

    row: int
    col: int

    @property
    def target(self) -> Position:
        return self.row, self.col

    def __str__(self) -> str:
        return f"Teleport({self.row}, {self.col})"


Action = Move | Teleport


# =============================================================================
# ACTION QUEUE
# =============================================================================


class ActionQueue:
    """
    Pending directives for the target currently being pursued.

    Example:
        >>> queue = ActionQueue()
        >>> queue.load([Move(Direction.EAST), Move(Direction.SOUTH)])
        >>> queue.peek()
        Move(direction=<Direction.EAST: (0, 1)>)
        >>> queue.load([Move(Direction.NORTH)])
        Traceback (most recent call last):
        ...
        streetbuilder.errors.QueueError: ...
    """

    __slots__ = ("_actions",)

    def __init__(self, actions: Iterable[Action] = ()) -> None:
        self._actions: deque[Action] = deque(actions)

    def reset(self) -> None:
        self._actions.clear()

    def load(self, actions: Iterable[Action]) -> None:
        """
        Fill the queue with a freshly planned route.

        Raises:
            QueueError: If the queue still holds actions.
        """
        if self._actions:
            raise QueueError(
                f"cannot load a route into a non-empty action queue ({len(self)} pending)"
            )
        self._actions.extend(actions)

    def peek(self) -> Action:
        if not self._actions:
            raise QueueError("action queue is empty")
        return self._actions[0]

    def pop(self) -> Action:
        if not self._actions:
            raise QueueError("action queue is empty")
        return self._actions.popleft()

    def clear(self) -> None:
        """Abandon the current route."""
        self._actions.clear()

    def is_empty(self) -> bool:
        return not self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __repr__(self) -> str:
        return f"ActionQueue([{', '.join(str(a) for a in self._actions)}])"


# =============================================================================
# TARGET QUEUE
# =============================================================================


class TargetQueue:
    """Pending resource coordinates, in the order the planner reported them."""

    __slots__ = ("_targets",)

    def __init__(self, targets: Iterable[Position] = ()) -> None:
        self._targets: deque[Position] = deque(targets)

    def reset(self) -> None:
        self._targets.clear()

    def replace(self, targets: Iterable[Position]) -> None:
        """Discard every pending target and queue targets instead."""
        self._targets = deque(targets)

    def pop(self) -> Position:
        if not self._targets:
            raise QueueError("target queue is empty")
        return self._targets.popleft()

    def peek(self) -> Position | None:
        return self._targets[0] if self._targets else None

    def is_empty(self) -> bool:
        return not self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[Position]:
        return iter(self._targets)

    def __repr__(self) -> str:
        return f"TargetQueue({list(self._targets)})"
