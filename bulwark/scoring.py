"""
Candidate scoring and selection.

For each planning step the engine measures the current board once
(``StepContext``), stamps every candidate on a disposable trial board,
drops candidates that would seal the board, and asks a ``ScoringStrategy``
how useful the rest are. Selection is epsilon-greedy: usually a random pick
among the best-scoring ties, sometimes a random pick from the top K.

Strategies:
- ``LeastConstrainingStrategy`` ("lcv"): pure least-constraining-value.
- ``LaneReductionStrategy`` ("lane_reduction"): walls that close lanes first.
- ``PathOverlapStrategy`` ("path_overlap"): towers covering the enemy route,
  walls on that route or guarding towers.

All randomness flows through the ``random.Random`` instance handed to the
engine, so a seeded run always picks the same placements.
"""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable, Dict, List, Optional, Tuple, Type

from .board import (
    Board,
    Cell,
    CellState,
    Placement,
    PlacementKind,
    apply_placement,
    generate_candidates,
)
from .config import WeightTable
from .pathing import PathAnalyzer


# ============================================================================
# Step data
# ============================================================================

Route = Tuple[Optional[List[Cell]], bool]


def reference_route(analyzer: PathAnalyzer, board: Board, spawn: Cell, goal: Cell) -> Route:
    """Return ``(path, strict)`` for the reference mover on ``board``.

    ``strict`` is True when the path ends on the reference goal cell. When
    that cell is unreachable the mover settles for the nearest goal-edge cell.
    """

    path = analyzer.shortest_path(board, spawn, goal)
    if path is not None:
        return path, True
    return analyzer.shortest_path_to_edge(board, spawn), False


@dataclass
class StepContext:
    """Baseline measurements of the board before any candidate is tried."""

    board: Board
    spawn: Cell
    goal: Cell
    base_future_options: int
    base_lane_count: int
    base_exposed_towers: int
    reference_path: Optional[List[Cell]]
    reference_strict: bool

    @property
    def reference_length(self) -> Optional[int]:
        return len(self.reference_path) if self.reference_path is not None else None


@dataclass
class Trial:
    """One candidate applied to a copy of the board.

    Route and exposure metrics are computed on first use only, since not
    every strategy needs them.
    """

    candidate: Placement
    board: Board
    lane_count: int
    future_options: int
    analyzer: PathAnalyzer
    context: StepContext

    @cached_property
    def route(self) -> Route:
        return reference_route(self.analyzer, self.board, self.context.spawn, self.context.goal)

    @cached_property
    def exposed_towers(self) -> int:
        return self.analyzer.count_exposed_towers(self.board)


@dataclass
class ScoredCandidate:
    placement: Placement
    score: float
    ranked_score: float
    constraint_cost: int
    benefit: Dict[str, float]
    lanes_after: int
    trial_board: Board


@dataclass
class Evaluation:
    """Outcome of scoring every candidate for one step."""

    scored: List[ScoredCandidate] = field(default_factory=list)
    considered: int = 0
    rejections: Dict[str, int] = field(default_factory=dict)
    timed_out: bool = False

    @property
    def rejected(self) -> int:
        return sum(self.rejections.values())

    def reject(self, reason: str) -> None:
        self.rejections[reason] = self.rejections.get(reason, 0) + 1


@dataclass
class Selection:
    candidate: ScoredCandidate
    explored: bool
    pool_size: int


# ============================================================================
# Benefit components
# ============================================================================

def chebyshev(a: Cell, b: Cell) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def tower_coverage(path: Optional[List[Cell]], footprint: List[Cell], tower_range: int) -> int:
    """Count path tiles within ``tower_range`` (Chebyshev) of any footprint cell."""
    if not path:
        return 0
    covered = 0
    for tile in path:
        if min(chebyshev(tile, cell) for cell in footprint) <= tower_range:
            covered += 1
    return covered


def goal_proximity(origin: Cell, goal: Cell, radius: int) -> int:
    """Closeness of a tower to the goal: ``radius`` minus the nearer axis gap, floored at 0."""
    distance = min(abs(origin[0] - goal[0]), abs(origin[1] - goal[1]))
    return max(0, radius - distance)


def tower_adjacency(board: Board, placement: Placement) -> int:
    """Tower cells bordering the long sides of a wall footprint."""
    if placement.kind.is_tower:
        return 0
    horizontal = placement.kind is PlacementKind.WALL_HORIZONTAL
    offsets = ((-1, 0), (1, 0)) if horizontal else ((0, -1), (0, 1))
    count = 0
    for r, c in placement.footprint(board):
        for dr, dc in offsets:
            nr, nc = r + dr, c + dc
            if board.in_bounds(nr, nc) and board.get(nr, nc) is CellState.TOWER:
                count += 1
    return count


def path_overlap(path: Optional[List[Cell]], footprint: List[Cell]) -> int:
    """Footprint cells that sit on ``path``."""
    if not path:
        return 0
    on_path = set(path)
    return sum(1 for cell in footprint if cell in on_path)


def path_detour(context: StepContext, trial: Trial) -> int:
    """How many cells longer the reference route became; 0 if not comparable."""
    path, strict = trial.route
    if path is None or context.reference_path is None or strict != context.reference_strict:
        return 0
    return max(0, len(path) - len(context.reference_path))


# ============================================================================
# Strategies
# ============================================================================

class ScoringStrategy(ABC):
    """Turns a trial board into weighted benefit components.

    Subclasses decide which components matter for towers and for walls. The
    engine subtracts ``weights.constraint_cost * constraint_cost`` from the
    summed benefit, so strategies only describe what a placement gains.
    Returning None from ``benefit`` rejects the candidate.
    """

    name: str = ""
    DEFAULT_WEIGHTS: WeightTable = WeightTable()

    def __init__(self, weights: Optional[WeightTable] = None, *, tower_range: int = 3):
        self.weights = weights or self.DEFAULT_WEIGHTS.model_copy()
        self.tower_range = tower_range

    @classmethod
    def from_config(cls, config) -> "ScoringStrategy":
        weights = WeightTable.model_validate({**cls.DEFAULT_WEIGHTS.model_dump(), **config.weights})
        return cls(weights, tower_range=config.tower_range)

    @abstractmethod
    def benefit(self, context: StepContext, trial: Trial) -> Optional[Dict[str, float]]:
        """Return weighted benefit components for ``trial``, or None to reject it."""


class LeastConstrainingStrategy(ScoringStrategy):
    """Raw LCV: keep as many future placements open as possible.

    There is no benefit term; jitter alone separates equally constraining
    placements.
    """

    name = "lcv"
    DEFAULT_WEIGHTS = WeightTable(constraint_cost=1.0)

    def benefit(self, context: StepContext, trial: Trial) -> Optional[Dict[str, float]]:
        return {}


class LaneReductionStrategy(ScoringStrategy):
    """Corridor-first: walls are worth the lanes they close."""

    name = "lane_reduction"
    DEFAULT_WEIGHTS = WeightTable(
        tower_coverage=10.0,
        lane_reduction=40.0,
        path_detour=12.0,
        tower_reach_reduction=6.0,
        constraint_cost=2.0,
    )

    def benefit(self, context: StepContext, trial: Trial) -> Optional[Dict[str, float]]:
        w = self.weights
        footprint = trial.candidate.footprint(trial.board)
        if trial.candidate.kind.is_tower:
            path, _ = trial.route
            return {"tower_coverage": w.tower_coverage * tower_coverage(path, footprint, self.tower_range)}
        return {
            "lane_reduction": w.lane_reduction * (context.base_lane_count - trial.lane_count),
            "path_detour": w.path_detour * path_detour(context, trial),
            "tower_reach_reduction": w.tower_reach_reduction
            * max(0, context.base_exposed_towers - trial.exposed_towers),
        }


class PathOverlapStrategy(ScoringStrategy):
    """Cover the enemy route with towers; sit walls on it or next to towers.

    Candidates that cut the reference route to its goal cell are rejected,
    so the mover is always redirected rather than stopped.
    """

    name = "path_overlap"
    DEFAULT_WEIGHTS = WeightTable(
        tower_coverage=15.0,
        goal_proximity=5.0,
        goal_proximity_radius=5,
        path_overlap=30.0,
        path_detour=12.0,
        tower_adjacency=18.0,
        future_options=2.0,
        constraint_cost=3.0,
    )

    def benefit(self, context: StepContext, trial: Trial) -> Optional[Dict[str, float]]:
        path, strict = trial.route
        if context.reference_strict and not strict:
            return None
        w = self.weights
        candidate = trial.candidate
        footprint = candidate.footprint(trial.board)
        if candidate.kind.is_tower:
            return {
                "tower_coverage": w.tower_coverage * tower_coverage(path, footprint, self.tower_range),
                "goal_proximity": w.goal_proximity
                * goal_proximity(candidate.origin, context.goal, w.goal_proximity_radius),
            }
        return {
            "tower_adjacency": w.tower_adjacency * tower_adjacency(trial.board, candidate),
            # Overlap with the route as it was before the wall went up.
            "path_overlap": w.path_overlap * path_overlap(context.reference_path, footprint),
            "path_detour": w.path_detour * path_detour(context, trial),
            "future_options": w.future_options * trial.future_options,
        }


STRATEGIES: Dict[str, Type[ScoringStrategy]] = {
    LeastConstrainingStrategy.name: LeastConstrainingStrategy,
    LaneReductionStrategy.name: LaneReductionStrategy,
    PathOverlapStrategy.name: PathOverlapStrategy,
}


def build_strategy(config) -> ScoringStrategy:
    return STRATEGIES[config.scoring_strategy].from_config(config)


# ============================================================================
# Engine
# ============================================================================

class ScoringEngine:
    """Scores candidates on trial boards and picks one epsilon-greedily."""

    def __init__(
        self,
        analyzer: PathAnalyzer,
        strategy: ScoringStrategy,
        rng: random.Random,
        *,
        epsilon: float = 0.25,
        top_k: int = 5,
        jitter_range: int = 3,
        jitter_scale: int = 10,
        max_candidates: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.analyzer = analyzer
        self.strategy = strategy
        self.rng = rng
        self.epsilon = epsilon
        self.top_k = top_k
        self.jitter_range = jitter_range
        self.jitter_scale = jitter_scale
        self.max_candidates = max_candidates
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        config,
        analyzer: PathAnalyzer,
        strategy: ScoringStrategy,
        rng: random.Random,
        clock: Callable[[], float] = time.monotonic,
    ) -> "ScoringEngine":
        return cls(
            analyzer,
            strategy,
            rng,
            epsilon=config.epsilon,
            top_k=config.top_k,
            jitter_range=config.jitter_range,
            jitter_scale=config.jitter_scale,
            max_candidates=config.max_candidates_per_step,
            clock=clock,
        )

    def build_context(self, board: Board, spawn: Cell, goal: Cell) -> StepContext:
        path, strict = reference_route(self.analyzer, board, spawn, goal)
        return StepContext(
            board=board,
            spawn=spawn,
            goal=goal,
            base_future_options=self.analyzer.count_future_options(board),
            base_lane_count=self.analyzer.count_viable_lanes(board),
            base_exposed_towers=self.analyzer.count_exposed_towers(board),
            reference_path=path,
            reference_strict=strict,
        )

    def evaluate(
        self, board: Board, context: StepContext, deadline: Optional[float] = None
    ) -> Evaluation:
        """Score every legal candidate on ``board``.

        Candidates that would leave no viable lane, or that the strategy
        rejects, are counted in ``rejections`` and never scored.
        """

        candidates = generate_candidates(board)
        # Shuffle so scan order never biases ties or the candidate cap.
        self.rng.shuffle(candidates)
        if self.max_candidates is not None:
            candidates = candidates[: self.max_candidates]

        evaluation = Evaluation()
        for candidate in candidates:
            if deadline is not None and self.clock() >= deadline:
                evaluation.timed_out = True
                break
            evaluation.considered += 1

            trial_board = apply_placement(board, candidate)
            if trial_board is None:
                evaluation.reject("illegal")
                continue

            lanes = self.analyzer.count_viable_lanes(trial_board)
            if lanes == 0:
                evaluation.reject("seals_board")
                continue

            trial = Trial(
                candidate=candidate,
                board=trial_board,
                lane_count=lanes,
                future_options=self.analyzer.count_future_options(trial_board),
                analyzer=self.analyzer,
                context=context,
            )
            benefit = self.strategy.benefit(context, trial)
            if benefit is None:
                evaluation.reject("strategy")
                continue

            constraint_cost = context.base_future_options - trial.future_options
            score = sum(benefit.values()) - self.strategy.weights.constraint_cost * constraint_cost
            evaluation.scored.append(
                ScoredCandidate(
                    placement=candidate,
                    score=score,
                    ranked_score=self._jitter(score),
                    constraint_cost=constraint_cost,
                    benefit=benefit,
                    lanes_after=lanes,
                    trial_board=trial_board,
                )
            )
        return evaluation

    def _jitter(self, score: float) -> float:
        jitter = self.rng.randint(-self.jitter_range, self.jitter_range) if self.jitter_range else 0
        return score * self.jitter_scale + jitter

    def select(self, scored: List[ScoredCandidate]) -> Optional[Selection]:
        """Epsilon-greedy pick; None when nothing survived scoring."""

        if not scored:
            return None
        ranked = sorted(scored, key=lambda s: s.ranked_score, reverse=True)

        if self.rng.random() < self.epsilon:
            pool = ranked[: min(self.top_k, len(ranked))]
            return Selection(candidate=self.rng.choice(pool), explored=True, pool_size=len(pool))

        best = ranked[0].ranked_score
        ties = [s for s in ranked if s.ranked_score == best]
        return Selection(candidate=self.rng.choice(ties), explored=False, pool_size=len(ties))
