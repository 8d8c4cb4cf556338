"""Plan one preparation phase and print the resulting board.

By default the example plans an empty 9x9 board with the path_overlap
strategy and a fresh seed:

    uv run python examples/planner/run.py

Pin the seed, switch strategy or walkability, and save the full report:

    uv run python examples/planner/run.py --seed 42 --strategy lane_reduction \
        --walkability walls_block --output plan.json --verbose

Board defaults come from ``BULWARK_*`` environment variables (or ``.env``);
``--config`` loads a JSON ``PlannerConfig`` instead.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict

from bulwark import (
    STRATEGIES,
    Config,
    ConfigurationError,
    PlannerConfig,
    TurnPlanner,
    WalkabilityPolicy,
    load_config,
    render_ascii_board,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Adversarial tower/wall placement planner")
    parser.add_argument("--config", type=Path, default=None, help="JSON PlannerConfig to load")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible plan")
    parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default=None,
        help=f"Scoring strategy (default: {Config.STRATEGY})",
    )
    parser.add_argument(
        "--walkability",
        choices=[policy.value for policy in WalkabilityPolicy],
        default=None,
        help=f"Which cells movers may cross (default: {Config.WALKABILITY})",
    )
    parser.add_argument("--towers", type=int, default=None, help="Tower budget")
    parser.add_argument("--walls", type=int, default=None, help="Wall budget")
    parser.add_argument("--output", type=Path, default=None, help="Write the PlanReport JSON here")
    parser.add_argument("--verbose", action="store_true", help="Print per-step planner logging")
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> PlannerConfig:
    overrides: Dict[str, object] = {}
    for field, value in (
        ("seed", args.seed),
        ("scoring_strategy", args.strategy),
        ("walkability", args.walkability),
        ("max_towers", args.towers),
        ("max_walls", args.walls),
    ):
        if value is not None:
            overrides[field] = value
    if args.verbose:
        overrides["verbose"] = True

    if args.config is not None:
        return load_config(args.config, **overrides)
    return PlannerConfig.from_env(**overrides)


def main(args: argparse.Namespace) -> None:
    try:
        config = build_config(args)
        planner = TurnPlanner(config)
    except ConfigurationError as exc:
        raise SystemExit(f"[error] {exc}")

    board, placements, diagnostics = planner.run()

    print(render_ascii_board(board))
    print()
    print(f"Strategy: {planner.engine.strategy.name}, seed: {planner.seed}")
    print(f"Reference route: {planner.reference_spawn} -> {planner.reference_goal}")
    for record, diagnostic in zip(placements, diagnostics):
        pick = "explore" if diagnostic.explored else "best"
        print(
            f"  {record.order}: {record.kind.value} at ({record.row}, {record.col}) "
            f"score={diagnostic.score:.1f} lanes {diagnostic.lanes_before}->{diagnostic.lanes_after} [{pick}]"
        )
    print(f"Done: {planner.done_reason} ({board.budgets.describe()})")

    if args.output is not None:
        args.output.write_text(planner.report().model_dump_json(indent=2))
        print(f"Report written to {args.output}")


if __name__ == "__main__":
    main(parse_args())
