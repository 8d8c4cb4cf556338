"""
Turn planner: one preparation phase of automatic placement.

The planner owns the authoritative board for a session and loops:
1. Enumerate legal candidates for the remaining budgets
2. Score them on trial boards and pick one (ScoringEngine)
3. Commit the winner atomically and spend its budget
4. Record a diagnostic entry

It stops when both budgets are spent, when no candidate survives scoring,
or when a step/time cap is hit. ``plan_turn`` is the one-call entry point
for hosts; ``TurnPlanner`` exposes the individual steps for tests and tools.
"""

from __future__ import annotations

import random
import time
from dataclasses import replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .board import (
    Board,
    Cell,
    DiagnosticRecord,
    Placement,
    PlacementRecord,
    PlanReport,
    apply_placement,
    can_place,
)
from .config import ConfigurationError, PlannerConfig
from .logging_utils import log_deterministic, log_error, log_info, log_random, log_success
from .pathing import PathAnalyzer
from .scoring import ScoringEngine, ScoringStrategy, Selection, build_strategy

PlanResult = Tuple[Board, List[PlacementRecord], List[DiagnosticRecord]]


class PlannerState(str, Enum):
    PLANNING = "planning"
    DONE = "done"


# Reasons recorded in TurnPlanner.done_reason
DONE_BUDGETS_EXHAUSTED = "budgets_exhausted"
DONE_NO_VIABLE_MOVE = "no_viable_move"
DONE_STEP_LIMIT = "step_limit"
DONE_TIME_LIMIT = "time_limit"


class TurnPlanner:
    """Runs one planning session against a single authoritative board.

    The board is replaced, never mutated, and only once per committed step.
    Trial boards built while scoring never reach ``self.board``.

    Args:
        config: Session configuration; validated here, before any placement
        board: Starting board. Defaults to an empty board built from config.
        rng: Random source for reference route draws, shuffles, jitter and
            selection. Defaults to ``random.Random(seed)``; when config.seed
            is None a fresh seed is drawn and kept in ``self.seed``.
        strategy: Scoring strategy; defaults to ``config.scoring_strategy``
        clock: Monotonic clock used for ``time_limit_seconds``

    Raises:
        ConfigurationError: If config or board cannot describe a playable session
    """

    def __init__(
        self,
        config: PlannerConfig,
        board: Optional[Board] = None,
        rng: Optional[random.Random] = None,
        strategy: Optional[ScoringStrategy] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config.ensure_valid()
        self.board = self._prepare_board(board)

        if rng is None:
            self.seed = config.seed if config.seed is not None else random.SystemRandom().randrange(2**32)
            rng = random.Random(self.seed)
        else:
            self.seed = config.seed
        self.rng = rng
        self.clock = clock

        self.analyzer = PathAnalyzer.from_config(config)
        self.engine = ScoringEngine.from_config(
            config, self.analyzer, strategy or build_strategy(config), rng, clock=clock
        )

        # Each session redraws the reference route unless config pins it.
        spawn_cells = self.board.edge_cells(config.spawn_edge)
        goal_cells = self.board.edge_cells(config.goal_edge)
        spawn_index = config.reference_spawn
        if spawn_index is None:
            spawn_index = rng.randrange(len(spawn_cells))
        goal_index = config.reference_goal
        if goal_index is None:
            goal_index = rng.randrange(len(goal_cells))
        self.reference_spawn: Cell = spawn_cells[spawn_index]
        self.reference_goal: Cell = goal_cells[goal_index]

        self.state = PlannerState.PLANNING
        self.done_reason: Optional[str] = None
        self.placements: List[PlacementRecord] = []
        self.diagnostics: List[DiagnosticRecord] = []
        self._deadline: Optional[float] = None

        if config.verbose:
            log_info(
                f"Planning {self.board.rows}x{self.board.cols} board with "
                f"'{self.engine.strategy.name}' strategy (seed={self.seed})"
            )
            log_random(f"Reference route: spawn {self.reference_spawn} -> goal {self.reference_goal}")

    def _prepare_board(self, board: Optional[Board]) -> Board:
        config = self.config
        if board is None:
            return Board.from_config(config)
        if (board.rows, board.cols) != (config.rows, config.cols):
            raise ConfigurationError(
                f"Board is {board.rows}x{board.cols} but config expects {config.rows}x{config.cols}"
            )
        if (board.tower_size, board.wall_length) != (config.tower_size, config.wall_length):
            raise ConfigurationError("Board footprint sizes do not match the config")
        budgets = replace(board.budgets, max_towers=config.max_towers, max_walls=config.max_walls)
        if budgets.towers_placed > budgets.max_towers or budgets.walls_placed > budgets.max_walls:
            raise ConfigurationError(f"Board already exceeds its budgets ({budgets.describe()})")
        return replace(board, budgets=budgets)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def done(self) -> bool:
        return self.state is PlannerState.DONE

    def _finish(self, reason: str) -> None:
        self.state = PlannerState.DONE
        self.done_reason = reason
        if self.config.verbose:
            log_info(f"Planning done: {reason} ({len(self.placements)} placements)")

    def _check_limits(self) -> bool:
        """Finish the session if a terminal condition holds before stepping."""
        if self.board.budgets.exhausted:
            self._finish(DONE_BUDGETS_EXHAUSTED)
        elif len(self.placements) >= self.config.step_limit:
            self._finish(DONE_STEP_LIMIT)
        elif self._deadline is not None and self.clock() >= self._deadline:
            self._finish(DONE_TIME_LIMIT)
        return self.done

    def step(self) -> Optional[DiagnosticRecord]:
        """Plan and commit one placement; returns its diagnostics or None when done."""

        if self.done:
            return None
        if self._deadline is None and self.config.time_limit_seconds is not None:
            self._deadline = self.clock() + self.config.time_limit_seconds
        if self._check_limits():
            return None

        step_index = len(self.placements)
        context = self.engine.build_context(self.board, self.reference_spawn, self.reference_goal)
        evaluation = self.engine.evaluate(self.board, context, deadline=self._deadline)

        if self.config.verbose:
            log_deterministic(
                f"[Step {step_index}] {evaluation.considered} candidates, "
                f"{evaluation.rejected} rejected, {context.base_lane_count} lanes open"
            )
            if evaluation.rejections:
                reasons = ", ".join(f"{reason}={count}" for reason, count in sorted(evaluation.rejections.items()))
                log_error(f"[Step {step_index}] Rejected: {reasons}")

        selection = self.engine.select(evaluation.scored)
        if selection is None:
            self._finish(DONE_TIME_LIMIT if evaluation.timed_out else DONE_NO_VIABLE_MOVE)
            return None

        record = self._commit(step_index, selection, context.base_lane_count, evaluation)
        if self.board.budgets.exhausted:
            self._finish(DONE_BUDGETS_EXHAUSTED)
        return record

    def _commit(self, step_index: int, selection: Selection, lanes_before: int, evaluation) -> DiagnosticRecord:
        chosen = selection.candidate
        placement: Placement = chosen.placement
        if not can_place(self.board, placement):
            raise RuntimeError(f"Selected placement {placement} is no longer legal")
        committed = apply_placement(self.board, placement)
        self.board = committed.with_placement_spent(placement.kind)

        placement_record = PlacementRecord(
            order=step_index,
            kind=placement.kind,
            row=placement.row,
            col=placement.col,
            cells=placement.footprint(self.board),
        )
        diagnostic = DiagnosticRecord(
            step=step_index,
            placement=placement_record,
            score=chosen.score,
            ranked_score=chosen.ranked_score,
            constraint_cost=chosen.constraint_cost,
            benefit=dict(chosen.benefit),
            lanes_before=lanes_before,
            lanes_after=chosen.lanes_after,
            explored=selection.explored,
            candidates_considered=evaluation.considered,
            candidates_rejected=evaluation.rejected,
            towers_placed=self.board.budgets.towers_placed,
            walls_placed=self.board.budgets.walls_placed,
        )
        self.placements.append(placement_record)
        self.diagnostics.append(diagnostic)

        if self.config.verbose:
            how = f"top-{selection.pool_size} exploration" if selection.explored else f"best of {selection.pool_size} tie(s)"
            log_random(f"[Step {step_index}] Picked via {how}")
            log_success(
                f"[Step {step_index}] Placed {placement} | {self.board.budgets.describe()} | "
                f"lanes {lanes_before} -> {chosen.lanes_after} | score {chosen.score:g}"
            )
        return diagnostic

    def run(self) -> PlanResult:
        """Step until done; returns the final board, placements and diagnostics."""
        while not self.done:
            self.step()
        return self.board, list(self.placements), list(self.diagnostics)

    def report(self) -> PlanReport:
        return PlanReport(
            board=self.board.snapshot(),
            placements=list(self.placements),
            diagnostics=list(self.diagnostics),
            done_reason=self.done_reason,
            strategy=self.engine.strategy.name,
            seed=self.seed,
            reference_spawn=self.reference_spawn,
            reference_goal=self.reference_goal,
        )


def plan_turn(
    board: Optional[Board],
    config: PlannerConfig,
    rng: Optional[random.Random] = None,
) -> PlanResult:
    """Plan one preparation phase and return ``(board, placements, diagnostics)``.

    Pure with respect to its inputs: ``board`` is never mutated, and a seeded
    ``config`` (or an injected ``rng``) makes the outcome reproducible.
    """

    return TurnPlanner(config, board=board, rng=rng).run()
