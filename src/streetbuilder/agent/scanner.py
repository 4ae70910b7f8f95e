"""
Incremental area scanner.

AreaScanner reveals the map around a center one square ring per call, so a
scan of radius r takes r + 1 ticks. After the outermost ring it reports
whether any tile inside the scanned square matches the predicate.

Architecture Role:
    BuilderAi._discover() → AreaScanner.scan(center, radius, predicate)
                          → world.discover_tiles() → ScanResult

Design Decisions:
    - One ring per call keeps every tick short and lets the robot recharge
      between rings. A ring the robot cannot afford is simply retried on the
      next call (the verdict stays SCANNING).
    - The sweep is keyed by (center, radius): asking about a different
      area restarts from ring 0. Rings that were already discovered cost
      nothing to re-scan.

Dependencies:
    - streetbuilder.world: discover_tiles, robot_map
"""

from __future__ import annotations

import logging

from streetbuilder.agent.interfaces import ScanResult, ScanStatus, TilePredicate
from streetbuilder.errors import NotEnoughEnergy
from streetbuilder.world import Position, Robot, World, discover_tiles, robot_map

logger = logging.getLogger(__name__)


def ring(center: Position, distance: int) -> list[Position]:
    """Cells at exactly Chebyshev distance from center, row-major."""
    row, col = center
    if distance == 0:
        return [center]
    cells = []
    for d_row in range(-distance, distance + 1):
        if abs(d_row) == distance:
            cells.extend((row + d_row, col + d_col) for d_col in range(-distance, distance + 1))
        else:
            cells.append((row + d_row, col - distance))
            cells.append((row + d_row, col + distance))
    return cells


class AreaScanner:
    """
    Scanner revealing square rings around a center.

    Attributes:
        robot: Robot paying for the scan.
        world: World being revealed.
    """

    __slots__ = ("robot", "world", "_sweep", "_next_ring")

    def __init__(self, robot: Robot, world: World) -> None:
        self.robot = robot
        self.world = world
        self._sweep: tuple[Position, int] | None = None
        self._next_ring = 0

    def reset(self) -> None:
        self._sweep = None
        self._next_ring = 0

    def scan(self, center: Position, radius: int, predicate: TilePredicate) -> ScanResult:
        if self._sweep != (center, radius):
            self._sweep = (center, radius)
            self._next_ring = 0

        if self._next_ring <= radius:
            try:
                discover_tiles(self.robot, self.world, ring(center, self._next_ring))
            except NotEnoughEnergy:
                logger.debug("Not enough energy for ring %d, waiting", self._next_ring)
                return ScanResult(ScanStatus.SCANNING)
            self._next_ring += 1
            if self._next_ring <= radius:
                return ScanResult(ScanStatus.SCANNING)

        # Sweep finished: next call starts over
        self.reset()
        snapshot = robot_map(self.world)
        row, col = center
        for r in range(row - radius, row + radius + 1):
            for c in range(col - radius, col + radius + 1):
                tile = snapshot.tile((r, c))
                if tile is not None and predicate(tile):
                    return ScanResult(ScanStatus.COMPLETE)
        return ScanResult(ScanStatus.FAILED, f"no matching tile within radius {radius}")
