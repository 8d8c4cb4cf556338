"""
Bulwark - adversarial placement planner for grid battlefields.

Decides where to put walls and archer towers so an opposing mover's routes
are bent, lengthened and covered, within per-type budgets and without ever
sealing the board.

No file I/O required. No global random state.
All dependencies (config, board, random source) injected by the caller.
"""

__version__ = "0.1.0"

# Main entry points
from .planner import TurnPlanner, PlannerState, plan_turn

# Configuration
from .config import Config, ConfigurationError, PlannerConfig, WeightTable, load_config

# Board model and validation
from .board import (
    Board,
    Budgets,
    CellState,
    Edge,
    Placement,
    PlacementKind,
    apply_placement,
    can_place,
    count_future_options,
    generate_candidates,
    render_ascii_board,
)

# Host-facing schemas
from .board import BoardSnapshot, DiagnosticRecord, PlacementRecord, PlanReport

# Analysis and scoring
from .pathing import PathAnalyzer, WalkabilityPolicy
from .scoring import (
    STRATEGIES,
    LaneReductionStrategy,
    LeastConstrainingStrategy,
    PathOverlapStrategy,
    ScoringEngine,
    ScoringStrategy,
    build_strategy,
)

__all__ = [
    # Entry points
    "TurnPlanner",
    "PlannerState",
    "plan_turn",
    # Configuration
    "Config",
    "ConfigurationError",
    "PlannerConfig",
    "WeightTable",
    "load_config",
    # Board
    "Board",
    "Budgets",
    "CellState",
    "Edge",
    "Placement",
    "PlacementKind",
    "apply_placement",
    "can_place",
    "count_future_options",
    "generate_candidates",
    "render_ascii_board",
    # Schemas
    "BoardSnapshot",
    "DiagnosticRecord",
    "PlacementRecord",
    "PlanReport",
    # Analysis and scoring
    "PathAnalyzer",
    "WalkabilityPolicy",
    "STRATEGIES",
    "LaneReductionStrategy",
    "LeastConstrainingStrategy",
    "PathOverlapStrategy",
    "ScoringEngine",
    "ScoringStrategy",
    "build_strategy",
]
