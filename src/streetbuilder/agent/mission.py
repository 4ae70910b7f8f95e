"""
Mission controller for the street-building robot.

BuilderAi is the robot's brain. Once per tick the host calls process_tick();
the controller refreshes its position cache, runs exactly one phase handler
and lets that handler hand over to at most one successor phase. Everything
else (scanning, planning, collecting, building) is delegated to injected
collaborators whose verdicts drive the phase transitions.

Architecture Role:
    StreetWorldEnv.step() → BuilderAi.process_tick(world)
                              ├─ run(world): position → handler → next phase
                              ├─ handle_event(event) for each drained world event
                              └─ ui.process_tick(world)

Mission Flow (staged variant):
    READY → DISCOVER → LOCATE → GOTO → COLLECT → BUILD → DANCE → TERMINATE

    - DISCOVER scans a growing square around the robot for the resource.
    - LOCATE rebuilds the target queue from the planner's content index.
    - GOTO drains one route action per tick toward the front target.
    - COLLECT picks up the resource and reports it to the goal tracker.
    - BUILD turns collected material into street (simple or patterned).
    - DANCE and TERMINATE are the closing ritual.

    The compact variant swaps LOCATE + GOTO for a single FIND phase.

Design Decisions:
    - Every failure the mission can recover from (failed scan, unreachable
      target, empty collection, material shortage) is a phase transition or
      a same-phase retry. process_tick() does not raise for them.
    - Successors are checked against PHASE_TRANSITIONS. An illegal one is a
      programming error and raises InvalidTransitionError.
    - The action queue is only loaded while empty and only shrinks
      otherwise. When exactly one action is left it is discarded rather than
      executed: the planner's last step is the move onto the (blocking)
      resource tile, and the robot collects from the neighbouring cell.
    - The patterned build is a best-effort macro. Failed clears, lays and
      moves are logged at DEBUG and the pattern carries on.

Dependencies:
    - streetbuilder.agent.*: phases, queues, collaborator protocols and the
      reference collaborators used by with_reference_tools()
    - streetbuilder.world: primitives go/teleport/robot_map
    - streetbuilder.config: BuilderConfig
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from streetbuilder.agent.actions import ActionQueue, Move, TargetQueue
from streetbuilder.agent.interfaces import (
    BuildError,
    Collector,
    Constructor,
    GoalType,
    Planner,
    ProgressTracker,
    RunnableUi,
    Scanner,
    ScanStatus,
)
from streetbuilder.agent.patterns import DANCE_MOVES, BuildStep, get_pattern
from streetbuilder.agent.phases import PHASE_TRANSITIONS, Phase, is_valid_transition
from streetbuilder.agent.planner import PathPlanner
from streetbuilder.agent.scanner import AreaScanner
from streetbuilder.agent.tools import ContentCollector, StreetConstructor
from streetbuilder.agent.tracker import GoalTracker
from streetbuilder.config import BuilderConfig
from streetbuilder.errors import (
    InvalidTransitionError,
    NotEnoughEnergy,
    RouteNotFound,
    StreetBuilderError,
    WorldError,
)
from streetbuilder.ui import NullUi
from streetbuilder.world import (
    BackPack,
    Content,
    Direction,
    Energy,
    Event,
    EventKind,
    Position,
    Robot,
    Tile,
    TileType,
    World,
    go,
    robot_map,
    teleport,
)

logger = logging.getLogger(__name__)

Handler = Callable[[World], Phase]


class BuilderAi:
    """
    Phase-driven mission controller.

    Attributes:
        robot: Authoritative robot state (owned by the host).
        config: Mission configuration.
        phase: Current phase.
        targets: Pending resource coordinates.
        actions: Pending directives for the current target.
        tracker: Goal tracker owned by this controller.
        position: Position cache, refreshed at the start of every tick.
        search_radius: Current Discover radius.
        current_target: Target the action queue leads to, if any.
        spawn: Position recorded by the READY phase.
        ticks: Number of ticks run so far.
    """

    def __init__(
        self,
        robot: Robot,
        config: BuilderConfig | None = None,
        *,
        scanner: Scanner,
        planner: Planner,
        collector: Collector,
        constructor: Constructor,
        tracker: ProgressTracker | None = None,
        ui: RunnableUi | None = None,
    ) -> None:
        self.robot = robot
        self.config = config or BuilderConfig()
        self.scanner = scanner
        self.planner = planner
        self.collector = collector
        self.constructor = constructor
        self.tracker = tracker if tracker is not None else GoalTracker()
        self.ui = ui if ui is not None else NullUi()

        cfg = self.config
        self.resource = Content.from_name(cfg.resource)
        self.build_direction = Direction.from_name(cfg.build_direction)
        self.orient_direction = Direction.from_name(cfg.orient_direction)
        self.pattern: tuple[BuildStep, ...] = get_pattern(cfg.build_pattern, cfg.pattern_size)

        if cfg.variant == "compact":
            self._after_discover = Phase.FIND
            self._navigation_phase = Phase.FIND
        else:
            self._after_discover = Phase.LOCATE
            self._navigation_phase = Phase.GOTO
        self._after_build = Phase.DANCE if cfg.dance else Phase.TERMINATE

        self.phase = Phase.READY
        self.targets = TargetQueue()
        self.actions = ActionQueue()
        self.position: Position = robot.coordinate
        self.search_radius = min(cfg.initial_search_radius, cfg.world_size)
        self.current_target: Position | None = None
        self.spawn: Position | None = None
        self.ticks = 0

        self._discover_entries = 0
        self._collect_attempts = 0
        self._terminated = False

        self.tracker.add_goal(GoalType.GET_ITEMS, self.resource, cfg.goal_quantity)

        self._handlers: dict[Phase, Handler] = {
            Phase.READY: self._ready,
            Phase.DISCOVER: self._discover,
            Phase.LOCATE: self._locate,
            Phase.FIND: self._find,
            Phase.GOTO: self._goto,
            Phase.COLLECT: self._collect,
            Phase.BUILD: self._build,
            Phase.DANCE: self._dance,
            Phase.TERMINATE: self._terminate,
        }
        missing = set(Phase) - set(self._handlers)
        if missing:
            raise TypeError(f"No handler for phases: {sorted(p.name for p in missing)}")

    @classmethod
    def with_reference_tools(
        cls,
        robot: Robot,
        world: World,
        config: BuilderConfig | None = None,
        ui: RunnableUi | None = None,
    ) -> BuilderAi:
        """Controller wired to the scanner, planner and tools shipped with the package."""
        config = config or BuilderConfig()
        return cls(
            robot,
            config,
            scanner=AreaScanner(robot, world),
            planner=PathPlanner(),
            collector=ContentCollector(robot, world),
            constructor=StreetConstructor(robot, world, Content.from_name(config.resource)),
            ui=ui,
        )

    # =========================================================================
    # HOST INTERFACE
    # =========================================================================

    def process_tick(self, world: World) -> None:
        """Run one decision tick, pass on the world events it raised, then let the UI observe the world."""
        self.run(world)
        for event in world.drain_events():
            self.handle_event(event)
        self.ui.process_tick(world)

    def handle_event(self, event: Event) -> None:
        self.ui.handle_event(event)

    @property
    def energy(self) -> Energy:
        return self.robot.energy

    @energy.setter
    def energy(self, value: Energy) -> None:
        self.robot.energy = value

    @property
    def coordinate(self) -> Position:
        return self.robot.coordinate

    @coordinate.setter
    def coordinate(self, value: Position) -> None:
        self.robot.coordinate = value

    @property
    def backpack(self) -> BackPack:
        return self.robot.backpack

    @backpack.setter
    def backpack(self, value: BackPack) -> None:
        self.robot.backpack = value

    @property
    def finished(self) -> bool:
        return self.phase == Phase.TERMINATE and self._terminated

    def status(self) -> dict[str, Any]:
        """Snapshot of the mission state for hosts and UIs."""
        return {
            "phase": self.phase.value,
            "tick": self.ticks,
            "position": self.position,
            "search_radius": self.search_radius,
            "targets": len(self.targets),
            "actions": len(self.actions),
            "completed_goals": self.tracker.completed_number(),
        }

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def run(self, world: World) -> None:
        """Dispatch the current phase's handler once and apply its successor."""
        self.ticks += 1
        self.position = self.robot.coordinate
        successor = self._handlers[self.phase](world)
        self._set_phase(successor)

    def _set_phase(self, successor: Phase) -> None:
        if successor == self.phase:
            return
        if not is_valid_transition(self.phase, successor):
            allowed = sorted(p.name for p in PHASE_TRANSITIONS[self.phase])
            raise InvalidTransitionError(
                f"{self.phase.name} cannot hand over to {successor.name} (allowed: {allowed})"
            )

        logger.info("Phase %s -> %s (tick %d)", self.phase.name, successor.name, self.ticks)
        if successor == Phase.DISCOVER:
            if self._discover_entries > 0:
                self._grow_radius()
            self._discover_entries += 1
        if successor == Phase.COLLECT:
            self._collect_attempts = 0
        self.phase = successor

    def _grow_radius(self) -> None:
        self.search_radius = min(self.search_radius + 1, self.config.world_size)

    # =========================================================================
    # PHASE HANDLERS
    # =========================================================================

    def _ready(self, world: World) -> Phase:
        self.spawn = self.position
        self.handle_event(Event(EventKind.READY, {"position": self.position}))
        return Phase.DISCOVER

    def _wanted(self, tile: Tile) -> bool:
        if tile.content != self.resource:
            return False
        return not (self.config.exclude_streets and tile.tile_type == TileType.STREET)

    def _discover(self, world: World) -> Phase:
        result = self.scanner.scan(self.position, self.search_radius, self._wanted)
        if result.status == ScanStatus.SCANNING:
            return Phase.DISCOVER
        if result.status == ScanStatus.COMPLETE:
            return self._after_discover

        logger.warning("Scan failed at radius %d: %s", self.search_radius, result.reason)
        self._grow_radius()
        return Phase.DISCOVER

    def _populate_targets(self, world: World) -> bool:
        """
        Rebuild the target queue from the current map. Returns True if non-empty.

        Cells on streets and cells the planner cannot reach are left out, so
        a map whose only candidates are walled in sends the mission back to
        DISCOVER with a wider radius.
        """
        snapshot = robot_map(world)
        self.planner.update_graph(snapshot)
        self.planner.update_costs(self.position)

        targets = []
        for cell in self.planner.content_index(self.resource):
            tile = snapshot.tile(cell)
            if tile is not None and tile.tile_type == TileType.STREET:
                continue
            if not self.planner.reachable(cell):
                logger.debug("Skipping unreachable target %s", cell)
                continue
            targets.append(cell)
        self.targets.replace(targets)

        if targets:
            logger.info("Located %d %s target(s), nearest %s", len(targets), self.resource.name, targets[0])
        else:
            logger.warning("No reachable %s found on the known map", self.resource.name)
        return bool(targets)

    def _locate(self, world: World) -> Phase:
        return Phase.GOTO if self._populate_targets(world) else Phase.DISCOVER

    def _goto(self, world: World) -> Phase:
        if self.actions.is_empty() and self.targets.is_empty():
            return Phase.LOCATE
        return self._navigate(world)

    def _find(self, world: World) -> Phase:
        if self.actions.is_empty() and self.targets.is_empty():
            return Phase.FIND if self._populate_targets(world) else Phase.DISCOVER
        return self._navigate(world)

    def _navigate(self, world: World) -> Phase:
        """One navigation step toward the front target (shared by GOTO and FIND)."""
        if self.actions.is_empty():
            target = self.targets.pop()
            try:
                self.planner.update_costs(self.position)
                route = self.planner.route_to(target)
            except RouteNotFound as e:
                logger.warning("Dropping target %s: %s", target, e)
                self.current_target = None
                return self.phase

            self.current_target = target
            if not route:
                self._orient(world, target)
                return Phase.COLLECT
            self.actions.load(route)

        if len(self.actions) > 1:
            self._execute_front(world)

        if len(self.actions) == 1:
            last = self.actions.pop()
            logger.debug("Skipping final %s, collecting from here", last)
            return Phase.COLLECT
        return self.phase

    def _orient(self, world: World, target: Position) -> None:
        """Default move taken when the target is already within reach."""
        direction = Direction.between(self.robot.coordinate, target) or self.orient_direction
        try:
            go(self.robot, world, direction)
        except WorldError as e:
            logger.debug("Orienting move %s not taken: %s", direction.name, e)
        self._refresh_map(world)

    def _execute_front(self, world: World) -> None:
        action = self.actions.peek()
        try:
            if isinstance(action, Move):
                go(self.robot, world, action.direction)
            else:
                teleport(self.robot, world, action.target)
        except NotEnoughEnergy:
            logger.debug("Not enough energy for %s, retrying next tick", action)
            return
        except WorldError as e:
            logger.warning("Abandoning route to %s after %s failed: %s", self.current_target, action, e)
            self.actions.clear()
            self.current_target = None
            return
        self.actions.pop()
        self._refresh_map(world)

    def _refresh_map(self, world: World) -> None:
        self.planner.update_graph(robot_map(world))

    def _collect(self, world: World) -> Phase:
        result = self.collector.collect(self.resource)
        if result.count > 0:
            self.tracker.update(GoalType.GET_ITEMS, self.resource, result.count)
            logger.info(
                "Collected %d %s (backpack holds %d)",
                result.count,
                self.resource.name,
                self.robot.backpack.count(self.resource),
            )
            self.current_target = None
            # The collected cell is walkable now
            self._refresh_map(world)
            if self.tracker.completed_number() > 0:
                return Phase.BUILD
            return self._navigation_phase

        logger.warning(
            "Collected no %s near %s (%s)",
            self.resource.name,
            self.robot.coordinate,
            result.error or "nothing in reach",
        )
        if self.targets.is_empty():
            return Phase.DISCOVER
        self._collect_attempts += 1
        if self._collect_attempts > self.config.collect_retries:
            return self._navigation_phase
        return Phase.COLLECT

    def _build(self, world: World) -> Phase:
        if self.config.build_mode == "patterned":
            return self._build_pattern(world)

        result = self.constructor.build(self.build_direction, self.config.street_length)
        if result.ok:
            logger.info("Built %d street tile(s) heading %s", result.built, self.build_direction.name)
            return self._after_build
        if result.error == BuildError.MATERIAL_SHORTAGE:
            logger.warning("Material shortage, looking for more %s: %s", self.resource.name, result.detail)
            return Phase.DISCOVER

        logger.warning("Build failed (%s), retrying: %s", result.error.value, result.detail)
        return Phase.BUILD

    def _build_pattern(self, world: World) -> Phase:
        for step in self.pattern:
            if not self._attempt("clear", self.constructor.clear, step.clear):
                logger.debug("Could not clear %s", step.clear.name)
            laid = self._attempt("lay", self.constructor.lay, step.build)
            if laid is None or not laid.ok:
                logger.debug("Could not lay street %s", step.build.name)
            self._attempt("move", go, self.robot, world, step.move)
        logger.info("Finished %d-step %s pattern", len(self.pattern), self.config.build_pattern)
        return self._after_build

    def _dance(self, world: World) -> Phase:
        for direction in DANCE_MOVES:
            self._attempt("dance", go, self.robot, world, direction)
        return Phase.TERMINATE

    def _terminate(self, world: World) -> Phase:
        if not self._terminated:
            self._terminated = True
            logger.info("Mission complete after %d ticks", self.ticks)
            self.handle_event(Event(EventKind.TERMINATED, {"ticks": self.ticks, "position": self.position}))
        return Phase.TERMINATE

    @staticmethod
    def _attempt(label: str, func: Callable[..., Any], *args: Any) -> Any:
        """Call func, logging and swallowing library errors. Returns None on error."""
        try:
            return func(*args)
        except StreetBuilderError as e:
            logger.debug("%s step failed: %s", label, e)
            return None
