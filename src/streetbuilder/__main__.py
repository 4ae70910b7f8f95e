"""
CLI entry point for streetbuilder.

Invoked via:
- `streetbuilder <command>` (installed script)
- `python -m streetbuilder <command>` (module execution)

Architecture Role:
    User Input → __main__.py → run.py / env.py / world.py → agent modules

Available Commands:
    run: Run the mission on one or more generated worlds
    info: Display version, configuration defaults and spaces
    show: Render a generated world as ASCII

Examples:
    streetbuilder run
    streetbuilder run --episodes 10 --size 24 --seed 1
    streetbuilder run --mode patterned --pattern spiral --pattern-size 5
    streetbuilder run --config mission.yaml --render -v
    streetbuilder run --stream --stream-user "builder1"
    streetbuilder info
    streetbuilder show --size 16 --seed 3

Design Decisions:
    - argparse subparsers for clean command separation
    - Lazy imports inside command handlers
    - CLI flags override values from --config; unset flags keep them
    - Returns exit codes (0=success, 1=error) for shell scripting

Dependencies:
    - argparse: Command-line argument parsing
    - logging: Verbosity handling (-v / -vv)
    - streetbuilder.run / env / config / world (lazy imports)
"""

import argparse
import dataclasses
import logging
import sys

# Maps CLI argument names onto BuilderConfig fields
_CONFIG_OVERRIDES = {
    "seed": "seed",
    "size": "world_size",
    "radius": "initial_search_radius",
    "goal": "goal_quantity",
    "variant": "variant",
    "mode": "build_mode",
    "direction": "build_direction",
    "length": "street_length",
    "pattern": "build_pattern",
    "pattern_size": "pattern_size",
    "max_ticks": "max_ticks",
    "stream_user": "stream_username",
    "stream_color": "stream_color",
    "stream_address": "stream_address",
}


def _build_config(args: argparse.Namespace):
    """Load --config (if any) and apply command-line overrides."""
    from streetbuilder.config import BuilderConfig

    config = BuilderConfig.from_file(args.config) if args.config else BuilderConfig()

    overrides = {
        field: getattr(args, arg)
        for arg, field in _CONFIG_OVERRIDES.items()
        if getattr(args, arg, None) is not None
    }
    if getattr(args, "no_dance", False):
        overrides["dance"] = False
    if getattr(args, "stream", False):
        overrides["enable_streaming"] = True

    # replace() re-runs __post_init__ validation
    return dataclasses.replace(config, **overrides)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main() -> int:
    """
    Main CLI entry point for streetbuilder.

    Returns:
        Exit code: 0 for success, 1 for errors or unknown commands.
    """
    parser = argparse.ArgumentParser(
        prog="streetbuilder",
        description="streetbuilder - a tile-world robot that gathers rocks and builds streets",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v: mission phases, -vv: every step)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # -------------------------------------------------------------------------
    # Run Command
    # -------------------------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Run the mission")
    run_parser.add_argument(
        "--episodes", "-n",
        type=int,
        default=1,
        help="Number of episodes (default: 1)",
    )
    run_parser.add_argument("--config", "-c", default=None, help="YAML or JSON config file")
    run_parser.add_argument("--seed", type=int, default=None, help="World seed of the first episode")
    run_parser.add_argument("--size", type=int, default=None, help="World side length")
    run_parser.add_argument("--radius", type=int, default=None, help="Initial search radius")
    run_parser.add_argument("--goal", type=int, default=None, help="Rocks to collect before building")
    run_parser.add_argument(
        "--variant",
        choices=["staged", "compact"],
        default=None,
        help="Phase graph: staged (locate + goto) or compact (find)",
    )
    run_parser.add_argument(
        "--mode",
        choices=["simple", "patterned"],
        default=None,
        help="Build mode",
    )
    run_parser.add_argument(
        "--direction",
        choices=["north", "south", "east", "west"],
        default=None,
        help="Street heading in simple mode",
    )
    run_parser.add_argument("--length", type=int, default=None, help="Street length in simple mode")
    run_parser.add_argument(
        "--pattern",
        choices=["loop", "spiral", "enclosure"],
        default=None,
        help="Pattern in patterned mode",
    )
    run_parser.add_argument("--pattern-size", type=int, default=None, help="Pattern size")
    run_parser.add_argument("--max-ticks", type=int, default=None, help="Tick limit per episode")
    run_parser.add_argument("--no-dance", action="store_true", help="Skip the closing dance")
    run_parser.add_argument("--render", action="store_true", help="Print the map after every tick")
    run_parser.add_argument("--log-events", action="store_true", help="Log world events")

    # Streaming arguments
    run_parser.add_argument("--stream", action="store_true", help="Stream positions over WebSocket")
    run_parser.add_argument("--stream-user", default=None, help="Display name on the shared map")
    run_parser.add_argument("--stream-color", default=None, help="Hex marker color")
    run_parser.add_argument("--stream-address", default=None, help="WebSocket server URL")

    # -------------------------------------------------------------------------
    # Info Command
    # -------------------------------------------------------------------------
    subparsers.add_parser("info", help="Show version, defaults and spaces")

    # -------------------------------------------------------------------------
    # Show Command
    # -------------------------------------------------------------------------
    show_parser = subparsers.add_parser("show", help="Render a generated world")
    show_parser.add_argument("--size", type=int, default=None, help="World side length")
    show_parser.add_argument("--seed", type=int, default=None, help="World seed")
    show_parser.add_argument("--config", "-c", default=None, help="YAML or JSON config file")

    args = parser.parse_args()
    _configure_logging(args.verbose)

    if args.command == "run":
        from streetbuilder.run import run_missions
        from streetbuilder.ui import LogUi, StreamUi

        try:
            config = _build_config(args)
        except (ValueError, FileNotFoundError, ImportError) as e:
            print(f"Error: {e}")
            return 1

        ui = None
        if config.enable_streaming:
            ui = StreamUi.from_config(config)
        elif args.log_events:
            ui = LogUi()

        try:
            run_missions(config, n_episodes=args.episodes, render=args.render, ui=ui)
        finally:
            if ui is not None:
                ui.close()
        return 0

    elif args.command == "info":
        from streetbuilder import __version__
        from streetbuilder.config import BuilderConfig
        from streetbuilder.env import StreetWorldEnv

        print(f"streetbuilder v{__version__}")
        print()

        print("Default Configuration:")
        config = BuilderConfig()
        for field in dataclasses.fields(config):
            if not field.name.startswith("stream"):
                print(f"  {field.name}: {getattr(config, field.name)}")
        print()

        env = StreetWorldEnv(config=config)
        print("Observation Space:")
        for key, space in env.observation_space.spaces.items():
            print(f"  {key}: {space}")
        print()
        print(f"Action Space: {env.action_space}")
        env.close()
        return 0

    elif args.command == "show":
        from streetbuilder.world import Robot, generate_world

        try:
            config = _build_config(args)
        except (ValueError, FileNotFoundError, ImportError) as e:
            print(f"Error: {e}")
            return 1

        world, spawn = generate_world(
            config.world_size,
            seed=config.seed,
            rock_density=config.rock_density,
        )
        print(world.render(Robot(coordinate=spawn)))
        return 0

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
