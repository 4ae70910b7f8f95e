"""
Shared pytest fixtures for the streetbuilder test suite.

This module provides hand-built worlds, robots, default configurations and
MagicMock collaborators so that the mission controller can be tested one
phase at a time without the reference scanner/planner/tools.

Fixtures:
    open_world: 8x8 all-grass world, fully discovered
    robot: Robot at (4, 4) with a full battery and an empty backpack
    mission_world: 10x10 world with two rocks, used for end-to-end runs
    mission_spawn: Robot start coordinate in mission_world
    mission_factory: world_factory for StreetWorldEnv building mission_world
    mission_config: BuilderConfig sized for mission_world
    collaborators: MagicMock scanner/planner/collector/constructor/ui
    make_ai: Factory building a BuilderAi wired to the mocks
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from streetbuilder.agent.interfaces import BuildResult, CollectResult, ScanResult, ScanStatus
from streetbuilder.agent.mission import BuilderAi
from streetbuilder.config import BuilderConfig
from streetbuilder.world import BackPack, Energy, Robot, World


# =============================================================================
# WORLD FIXTURES
# =============================================================================

# Two rocks: one inside the first scan around the spawn (5, 2), one outside
MISSION_ROWS = [
    "..........",
    "..........",
    "..........",
    "...r......",
    "..........",
    "..........",
    ".....r....",
    "..........",
    "..........",
    "..........",
]
MISSION_SPAWN = (5, 2)


@pytest.fixture
def open_world() -> World:
    """
    Create an 8x8 grass world with every tile already discovered.

    Returns:
        World where any tile can be walked on and robot_map() shows everything.
    """
    world = World.from_rows(["........"] * 8)
    world.discovered[:] = True
    return world


@pytest.fixture
def robot() -> Robot:
    """Robot in the middle of an 8x8 world with 1000 energy."""
    return Robot(coordinate=(4, 4), energy=Energy(1000, 1000), backpack=BackPack(20))


@pytest.fixture
def mission_world() -> World:
    """
    Create the 10x10 end-to-end mission world.

    Notes:
        - Rock at (3, 3) is found by the first radius-2 scan around (5, 2)
        - Rock at (6, 5) needs the radius to grow to 3 after the first pickup
    """
    return World.from_rows(MISSION_ROWS)


@pytest.fixture
def mission_spawn() -> tuple[int, int]:
    return MISSION_SPAWN


@pytest.fixture
def mission_factory():
    """World factory for StreetWorldEnv that always builds the mission world."""

    def _factory(seed):
        return World.from_rows(MISSION_ROWS), MISSION_SPAWN

    return _factory


@pytest.fixture
def mission_config() -> BuilderConfig:
    """Two rocks, a two-tile street heading east."""
    return BuilderConfig(
        world_size=10,
        initial_search_radius=2,
        goal_quantity=2,
        street_length=2,
        build_direction="east",
    )


# =============================================================================
# COLLABORATOR MOCKS
# =============================================================================


@pytest.fixture
def collaborators() -> SimpleNamespace:
    """
    Create MagicMock collaborators with neutral default verdicts.

    Returns:
        Namespace with:
        - scanner: scan() -> SCANNING
        - planner: content_index() -> [], route_to() -> []
        - collector: collect() -> CollectResult(0)
        - constructor: build() -> BuildResult(5), lay() -> BuildResult(1),
          clear() -> True
        - ui: records process_tick() and handle_event() calls
    """
    scanner = MagicMock()
    scanner.scan.return_value = ScanResult(ScanStatus.SCANNING)

    planner = MagicMock()
    planner.content_index.return_value = []
    planner.route_to.return_value = []

    collector = MagicMock()
    collector.collect.return_value = CollectResult(0)

    constructor = MagicMock()
    constructor.build.return_value = BuildResult(5)
    constructor.lay.return_value = BuildResult(1)
    constructor.clear.return_value = True

    ui = MagicMock()

    return SimpleNamespace(
        scanner=scanner,
        planner=planner,
        collector=collector,
        constructor=constructor,
        ui=ui,
    )


@pytest.fixture
def make_ai(robot: Robot, collaborators: SimpleNamespace):
    """
    Factory building a BuilderAi around the robot fixture and the mocks.

    Example:
        >>> def test_something(make_ai):
        ...     ai = make_ai(variant="compact")
    """

    def _make(**overrides) -> BuilderAi:
        config = BuilderConfig(world_size=8, **overrides)
        return BuilderAi(
            robot,
            config,
            scanner=collaborators.scanner,
            planner=collaborators.planner,
            collector=collaborators.collector,
            constructor=collaborators.constructor,
            ui=collaborators.ui,
        )

    return _make
