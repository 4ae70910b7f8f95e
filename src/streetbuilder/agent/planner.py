"""
Grid path planner over the discovered map.

This module turns a MapSnapshot into a weighted grid graph, computes travel
costs from the robot's position and answers the two questions the mission
asks: "where is content X, nearest first?" and "how do I get next to it?".

Architecture Role:
    BuilderAi (Locate/Find) → update_graph(robot_map()) → update_costs(pos)
                            → content_index(resource) → TargetQueue
    BuilderAi (Goto/Find)   → update_costs(pos) → route_to(target)
                            → ActionQueue

Graph Model:
    - Nodes are discovered cells. Unknown cells, non-walkable terrain and
      cells with blocking content are impassable.
    - Stepping onto a cell costs BASE_MOVE_COST + the tile's walk cost, the
      same energy world.go() charges.
    - Every discovered teleport tile links to every other one at
      TELEPORT_COST.

Design Decisions:
    - Dijkstra with heapq from the robot's position instead of per-target A*:
      content_index() needs costs to every candidate at once, and route_to()
      then reads paths off the same search tree.
    - Resources are blocking content, so a route ends on the cheapest
      reachable neighbour of the target followed by one Move onto the target
      itself. The mission discards that last Move and collects instead.
    - Costs are numpy float arrays with inf for "unreachable", which keeps
      the ordering in content_index() a plain sort.

Dependencies:
    - heapq: Dijkstra priority queue
    - numpy: Cost and distance grids
    - streetbuilder.world: MapSnapshot, TileType, BLOCKING_CONTENT
"""

from __future__ import annotations

import heapq
import logging

import numpy as np

from streetbuilder.agent.actions import Action, Move, Teleport
from streetbuilder.errors import RouteNotFound
from streetbuilder.world import (
    BASE_MOVE_COST,
    BLOCKING_CONTENT,
    TELEPORT_COST,
    UNKNOWN,
    Content,
    Direction,
    MapSnapshot,
    Position,
    TileType,
)

logger = logging.getLogger(__name__)


def build_cost_grid(snapshot: MapSnapshot) -> np.ndarray:
    """
    Energy cost of stepping onto each cell, inf where impassable.

    Args:
        snapshot: Discovered map.

    Returns:
        Float64 array with the same shape as the snapshot.
    """
    costs = np.full(snapshot.types.shape, np.inf, dtype=np.float64)
    for tile_type in TileType:
        if tile_type.walkable:
            costs[snapshot.types == int(tile_type)] = BASE_MOVE_COST + tile_type.cost

    blocked = np.isin(snapshot.contents, [int(c) for c in BLOCKING_CONTENT])
    costs[blocked] = np.inf
    costs[snapshot.types == UNKNOWN] = np.inf
    return costs


class PathPlanner:
    """
    Dijkstra planner on the robot's discovered map.

    Call update_graph() whenever the map changed, update_costs() whenever the
    robot moved, then query content_index() / route_to().

    Attributes:
        snapshot: Map the current graph was built from.
        origin: Position the current distances are measured from.
    """

    __slots__ = ("snapshot", "origin", "_costs", "_teleports", "_dist", "_came_from")

    def __init__(self) -> None:
        self.snapshot: MapSnapshot | None = None
        self.origin: Position | None = None
        self._costs: np.ndarray | None = None
        self._teleports: list[Position] = []
        self._dist: np.ndarray | None = None
        self._came_from: dict[Position, tuple[Position, Action]] = {}

    def reset(self) -> None:
        self.snapshot = None
        self.origin = None
        self._costs = None
        self._teleports = []
        self._dist = None
        self._came_from = {}

    # =========================================================================
    # GRAPH CONSTRUCTION
    # =========================================================================

    def update_graph(self, snapshot: MapSnapshot) -> None:
        """Rebuild the cost grid from a new snapshot. Invalidates distances."""
        self.snapshot = snapshot
        self._costs = build_cost_grid(snapshot)
        teleports = np.argwhere(snapshot.types == int(TileType.TELEPORT))
        self._teleports = [(int(r), int(c)) for r, c in teleports]
        self._dist = None
        self._came_from = {}

    def update_costs(self, position: Position) -> None:
        """
        Run Dijkstra from position over the current graph.

        The start cell is always reachable at cost 0, even when the graph
        would consider it impassable.

        Raises:
            RouteNotFound: If update_graph() has never been called.
        """
        if self._costs is None:
            raise RouteNotFound("planner has no graph, call update_graph() first")

        size = self._costs.shape[0]
        dist = np.full(self._costs.shape, np.inf, dtype=np.float64)
        came_from: dict[Position, tuple[Position, Action]] = {}
        dist[position] = 0.0

        # (cost, row, col) so ties resolve deterministically
        frontier: list[tuple[float, int, int]] = [(0.0, position[0], position[1])]
        while frontier:
            cost, row, col = heapq.heappop(frontier)
            current = (row, col)
            if cost > dist[current]:
                continue

            for direction in Direction:
                nxt = direction.step(current)
                if not (0 <= nxt[0] < size and 0 <= nxt[1] < size):
                    continue
                new_cost = cost + self._costs[nxt]
                if new_cost < dist[nxt]:
                    dist[nxt] = new_cost
                    came_from[nxt] = (current, Move(direction))
                    heapq.heappush(frontier, (new_cost, nxt[0], nxt[1]))

            if current in self._teleports:
                for other in self._teleports:
                    if other == current:
                        continue
                    new_cost = cost + TELEPORT_COST
                    if new_cost < dist[other]:
                        dist[other] = new_cost
                        came_from[other] = (current, Teleport(*other))
                        heapq.heappush(frontier, (new_cost, other[0], other[1]))

        self.origin = position
        self._dist = dist
        self._came_from = came_from

    def cost_to(self, position: Position) -> float:
        """Travel cost from origin to position (inf if unreachable)."""
        if self._dist is None:
            return float("inf")
        return float(self._dist[position])

    # =========================================================================
    # QUERIES
    # =========================================================================

    def _approach_cost(self, target: Position) -> tuple[float, Position | None]:
        """Cheapest reachable cell next to target, with its cost."""
        assert self._dist is not None
        if target == self.origin:
            return 0.0, target

        size = self._dist.shape[0]
        best: tuple[float, Position | None] = (float("inf"), None)
        for direction in Direction:
            neighbour = direction.step(target)
            if not (0 <= neighbour[0] < size and 0 <= neighbour[1] < size):
                continue
            cost = float(self._dist[neighbour])
            if cost < best[0]:
                best = (cost, neighbour)
        return best

    def content_index(self, content: Content) -> list[Position]:
        """
        Known cells holding content, cheapest to approach first.

        Ordered by (cost to reach a neighbouring cell, row, col); cells no
        neighbour of which is reachable come last, in row-major order.
        """
        if self.snapshot is None:
            return []
        cells = self.snapshot.positions_with(content)
        if self._dist is None:
            return cells
        return sorted(cells, key=lambda cell: (self._approach_cost(cell)[0], cell[0], cell[1]))

    def reachable(self, target: Position) -> bool:
        """Whether route_to(target) would find a route from the current origin."""
        if self._dist is None or self.origin is None:
            return False
        if target == self.origin or Direction.between(self.origin, target) is not None:
            return True
        return self._approach_cost(target)[0] != float("inf")

    def route_to(self, target: Position) -> list[Action]:
        """
        Actions leading from origin onto target.

        The route ends with one Move from the cheapest reachable neighbour onto
        the target. Returns [] when the robot already stands on or next to the
        target.

        Raises:
            RouteNotFound: If no neighbour of target is reachable.
        """
        if self._dist is None or self.origin is None:
            raise RouteNotFound("planner has no costs, call update_costs() first")

        if target == self.origin or Direction.between(self.origin, target) is not None:
            return []

        cost, neighbour = self._approach_cost(target)
        if neighbour is None or cost == float("inf"):
            raise RouteNotFound(f"no route from {self.origin} to {target}")

        actions: list[Action] = []
        cell = neighbour
        while cell != self.origin:
            previous, action = self._came_from[cell]
            actions.append(action)
            cell = previous
        actions.reverse()

        final = Direction.between(neighbour, target)
        assert final is not None
        actions.append(Move(final))
        logger.debug("Route %s → %s: %d actions, cost %.0f", self.origin, target, len(actions), cost)
        return actions
