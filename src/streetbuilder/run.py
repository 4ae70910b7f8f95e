"""
Mission runner for streetbuilder.

Runs the mission for several episodes (one generated world per episode) and
aggregates how the robot did: whether it finished, how long it took, how many
street tiles it laid and how much of the map it had to explore.

Architecture Role:
    __main__ (run command) → run_missions() → StreetWorldEnv.reset()/step()

Metrics Collected:
    - completed: Episodes that reached TERMINATE before max_ticks
    - episode_lengths: Ticks per episode
    - streets_built: Street tiles added per episode
    - explored: Discovered tiles at episode end
    - final_phases: Phase each episode ended in

Usage:
    from streetbuilder.run import run_missions
    results = run_missions(BuilderConfig(world_size=24), n_episodes=5)
    print(f"Completion rate: {results['completion_rate']:.0%}")

Dependencies:
    - numpy: For metric aggregation
    - streetbuilder.env: Environment hosting the mission
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

import numpy as np

from streetbuilder.agent.interfaces import RunnableUi
from streetbuilder.config import BuilderConfig
from streetbuilder.env import StreetWorldEnv

logger = logging.getLogger(__name__)


def run_episode(env: StreetWorldEnv, seed: int | None = None, render: bool = False) -> dict[str, Any]:
    """
    Run one episode to termination or truncation.

    Returns:
        The final info dict plus "reward", "completed" and "length".
    """
    obs, info = env.reset(seed=seed)
    done = False
    total_reward = 0.0
    terminated = False

    while not done:
        obs, reward, terminated, truncated, info = env.step(0)
        total_reward += reward
        done = terminated or truncated
        if render:
            print(env.render())

    return {**info, "reward": total_reward, "completed": terminated, "length": env.step_count}


def run_missions(
    config: BuilderConfig | None = None,
    n_episodes: int = 1,
    render: bool = False,
    ui: RunnableUi | None = None,
    verbose: bool = True,
) -> dict[str, Any]:
    """
    Run the mission over several worlds and summarize the outcome.

    Episode i uses seed config.seed + i (or a random world when config.seed
    is None).

    Args:
        config: Configuration. Defaults to BuilderConfig().
        n_episodes: Number of episodes to run.
        render: Print the ASCII map after every tick.
        ui: Presentation layer for every episode's controller.
        verbose: Print a line per episode and a summary report.

    Returns:
        Dictionary with:
        - episodes: Number of episodes run
        - completion_rate: Fraction of episodes that reached TERMINATE
        - mean_length / std_length: Ticks per episode
        - mean_streets / max_streets: Street tiles built per episode
        - mean_explored: Discovered tiles at episode end
        - final_phases: Counter of the phase each episode ended in
    """
    config = config or BuilderConfig()
    env = StreetWorldEnv(config=config, render_mode="ansi" if render else None, ui=ui)

    lengths = []
    streets = []
    explored = []
    completed = []
    final_phases: Counter[str] = Counter()

    if verbose:
        print(f"Running {n_episodes} mission(s) on {config.world_size}x{config.world_size} worlds...")

    try:
        for ep in range(n_episodes):
            seed = config.seed + ep if config.seed is not None else None
            result = run_episode(env, seed=seed, render=render)

            lengths.append(result["length"])
            streets.append(result["streets_built"])
            explored.append(result["explored"])
            completed.append(result["completed"])
            final_phases[result["phase"]] += 1
            logger.debug("Episode %d finished: %s", ep + 1, result)

            if verbose:
                status = "done" if result["completed"] else f"stopped in {result['phase']}"
                print(
                    f"Episode {ep + 1}: {status}, Ticks={result['length']}, "
                    f"Streets={result['streets_built']}, Explored={result['explored']}"
                )
    finally:
        env.close()

    results = {
        "episodes": n_episodes,
        "completion_rate": float(np.mean(completed)) if completed else 0.0,
        "mean_length": float(np.mean(lengths)) if lengths else 0.0,
        "std_length": float(np.std(lengths)) if lengths else 0.0,
        "mean_streets": float(np.mean(streets)) if streets else 0.0,
        "max_streets": int(max(streets, default=0)),
        "mean_explored": float(np.mean(explored)) if explored else 0.0,
        "final_phases": dict(final_phases),
    }

    if verbose:
        print("\n=== Mission Results ===")
        print(f"Completed:    {results['completion_rate']:.0%}")
        print(f"Mean Length:  {results['mean_length']:.0f} ± {results['std_length']:.0f} ticks")
        print(f"Mean Streets: {results['mean_streets']:.1f} (max {results['max_streets']})")
        print(f"Mean Explored: {results['mean_explored']:.0f} tiles")

    return results
