"""
Scripted construction patterns.

A pattern is a fixed choreography: an ordered tuple of BuildStep triples,
each saying which neighbour to clear, which neighbour to pave and where to
step next. The mission runs a whole pattern in a single tick without
checking the outcome of individual steps.

Patterns:
    loop      - closed square of side n, paving ahead and walking onto it
    spiral    - outward square spiral with legs 1, 1, 2, 2, 3, 3, ...
    enclosure - walks a square of side n and paves its outer edge

Example:
    >>> [step.move.name for step in loop_pattern(1)]
    ['EAST', 'SOUTH', 'WEST', 'NORTH']

Dependencies:
    - streetbuilder.world: Direction
"""

from __future__ import annotations

from dataclasses import dataclass

from streetbuilder.world import Direction

# Clockwise order used by every pattern below
CLOCKWISE = (Direction.EAST, Direction.SOUTH, Direction.WEST, Direction.NORTH)

# Neighbour outside a clockwise square, for each heading
_OUTSIDE = {
    Direction.EAST: Direction.NORTH,
    Direction.SOUTH: Direction.EAST,
    Direction.WEST: Direction.SOUTH,
    Direction.NORTH: Direction.WEST,
}

# Cosmetic moves performed before terminating. Ends where it started.
DANCE_MOVES: tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.SOUTH,
    Direction.EAST,
    Direction.WEST,
    Direction.SOUTH,
    Direction.NORTH,
    Direction.WEST,
    Direction.EAST,
)


@dataclass(frozen=True)
class BuildStep:
    """One (clear, build, move) triple of a pattern."""

    clear: Direction
    build: Direction
    move: Direction


def loop_pattern(side: int) -> tuple[BuildStep, ...]:
    """Closed square loop of side tiles per edge, clockwise from heading east."""
    if side < 1:
        raise ValueError(f"side must be positive, got {side}")
    return tuple(BuildStep(d, d, d) for d in CLOCKWISE for _ in range(side))


def spiral_pattern(turns: int) -> tuple[BuildStep, ...]:
    """Outward clockwise spiral with turns legs of lengths 1, 1, 2, 2, 3, 3, ..."""
    if turns < 1:
        raise ValueError(f"turns must be positive, got {turns}")
    steps = []
    for leg in range(turns):
        direction = CLOCKWISE[leg % 4]
        steps.extend(BuildStep(direction, direction, direction) for _ in range(leg // 2 + 1))
    return tuple(steps)


def enclosure_pattern(side: int) -> tuple[BuildStep, ...]:
    """Walk a clockwise square, clearing ahead and paving the outside edge."""
    if side < 1:
        raise ValueError(f"side must be positive, got {side}")
    return tuple(BuildStep(d, _OUTSIDE[d], d) for d in CLOCKWISE for _ in range(side))


PATTERNS = {
    "loop": loop_pattern,
    "spiral": spiral_pattern,
    "enclosure": enclosure_pattern,
}


def get_pattern(name: str, size: int) -> tuple[BuildStep, ...]:
    """
    Look up a pattern by name.

    Raises:
        ValueError: If name is not a known pattern.
    """
    try:
        factory = PATTERNS[name]
    except KeyError:
        raise ValueError(f"Unknown build pattern '{name}'. Choose from {sorted(PATTERNS)}") from None
    return factory(size)
