"""Batch runner that compares scoring strategies across many seeds.

Example usage (50 plans per strategy, base seed 7):

    uv run python -m examples.planner.batch --runs 50 --base-seed 7

Each run plans an empty board with ``plan_turn``. The script prints, per
strategy, how many lanes survive, how often the planner explored the top-K
instead of taking the best tie, and how often a session ended early.
"""

from __future__ import annotations

import argparse
import statistics
from typing import Dict, List

from bulwark import STRATEGIES, PathAnalyzer, PlannerConfig, plan_turn


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Strategy comparison batch runner")
    parser.add_argument("--runs", type=int, default=30, help="Plans per strategy")
    parser.add_argument(
        "--base-seed",
        type=int,
        default=0,
        help="Base seed (each run adds its index); 0 disables deterministic seeding",
    )
    parser.add_argument(
        "--strategies",
        nargs="+",
        choices=sorted(STRATEGIES),
        default=sorted(STRATEGIES),
        help="Strategies to compare",
    )
    return parser.parse_args()


def _seed_for_index(base_seed: int, index: int) -> int | None:
    if base_seed <= 0:
        return None
    return base_seed + index


def run_strategy(strategy: str, runs: int, base_seed: int) -> Dict[str, float]:
    lanes: List[int] = []
    explored = 0
    steps = 0
    short_sessions = 0
    for idx in range(runs):
        config = PlannerConfig.from_env(
            scoring_strategy=strategy,
            seed=_seed_for_index(base_seed, idx),
            verbose=False,
        )
        board, placements, diagnostics = plan_turn(None, config)
        lanes.append(PathAnalyzer.from_config(config).count_viable_lanes(board))
        explored += sum(1 for diagnostic in diagnostics if diagnostic.explored)
        steps += len(diagnostics)
        if not board.budgets.exhausted:
            short_sessions += 1

    return {
        "mean_lanes": statistics.fmean(lanes),
        "min_lanes": min(lanes),
        "max_lanes": max(lanes),
        "explore_rate": explored / steps if steps else 0.0,
        "short_rate": short_sessions / runs,
    }


def main() -> None:
    args = parse_args()
    print(f"Planning {args.runs} boards per strategy.")
    for strategy in args.strategies:
        summary = run_strategy(strategy, args.runs, args.base_seed)
        print(f"  {strategy}:")
        print(
            f"    Lanes left: mean {summary['mean_lanes']:.2f} "
            f"(min {summary['min_lanes']}, max {summary['max_lanes']})"
        )
        print(f"    Exploration picks: {summary['explore_rate']:.2%}")
        print(f"    Sessions ending before budgets ran out: {summary['short_rate']:.2%}")


if __name__ == "__main__":
    main()
