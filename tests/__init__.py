"""
streetbuilder Test Suite.

This package contains pytest tests for the streetbuilder mission controller
and its world. Tests are organized by module:

    test_mission.py     - BuilderAi phase handlers and full missions
    test_world.py       - World model, primitives and generation
    test_planner.py     - PathPlanner costs, content index and routes
    test_scanner.py     - AreaScanner ring-by-ring reveal
    test_tools.py       - ContentCollector and StreetConstructor
    test_tracker.py     - GoalTracker
    test_patterns.py    - Build patterns and the dance
    test_actions.py     - Directives, queues and the phase table
    test_config.py      - BuilderConfig validation and loading
    test_ui.py          - NullUi, LogUi, StreamUi and PathSender
    test_env.py         - StreetWorldEnv and the episode runner
    test_cli.py         - Command-line interface

Fixtures are defined in conftest.py and shared across all test modules.
"""
