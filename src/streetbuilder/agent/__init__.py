"""
Mission agent for streetbuilder.

The agent separates the mission logic (a phase state machine) from the
capabilities it drives. The controller only consumes verdicts; scanners,
planners and tools are injected and can be swapped out.

Architecture:
    ┌──────────────────────────────────────────────┐
    │        MISSION CONTROLLER (BuilderAi)         │
    │  READY → DISCOVER → LOCATE/FIND → GOTO →      │
    │  COLLECT → BUILD → DANCE → TERMINATE          │
    │  Target queue, action queue, position cache   │
    ├───────────┬───────────┬───────────┬──────────┤
    │ SCANNER   │ PLANNER   │ TOOLS     │ TRACKER  │
    │ ring-by-  │ Dijkstra  │ collector │ goals by │
    │ ring area │ + content │ + street  │ (type,   │
    │ reveal    │   index   │ builder   │ content) │
    ├───────────┴───────────┴───────────┴──────────┤
    │       WORLD PRIMITIVES (streetbuilder.world)  │
    │  go, teleport, destroy, put, discover_tiles   │
    └──────────────────────────────────────────────┘

Modules:
    - mission: BuilderAi, the phase dispatcher and handlers
    - phases: Phase enum and allowed transitions
    - actions: Move/Teleport directives, ActionQueue, TargetQueue
    - interfaces: Collaborator protocols and result types
    - scanner: AreaScanner
    - planner: PathPlanner
    - tools: ContentCollector, StreetConstructor
    - tracker: GoalTracker
    - patterns: Scripted build patterns and the closing dance

Usage:
    from streetbuilder.agent import BuilderAi
    ai = BuilderAi.with_reference_tools(robot, world, config)
    while not ai.finished:
        ai.process_tick(world)
"""

from streetbuilder.agent.mission import BuilderAi
from streetbuilder.agent.phases import Phase

__all__ = ["BuilderAi", "Phase"]
