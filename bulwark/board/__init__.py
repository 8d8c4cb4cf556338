"""Board model, placement value types and placement validation."""

from .grid import Board, Budgets, Cell, CellState, Edge, CELL_SYMBOLS
from .placements import Placement, PlacementKind
from .schemas import BoardSnapshot, DiagnosticRecord, PlacementRecord, PlanReport
from .helpers import (
    apply_placement,
    can_place,
    count_future_options,
    footprint_clear,
    generate_candidates,
    render_ascii_board,
)

__all__ = [
    "Board",
    "Budgets",
    "Cell",
    "CellState",
    "Edge",
    "CELL_SYMBOLS",
    "Placement",
    "PlacementKind",
    "BoardSnapshot",
    "DiagnosticRecord",
    "PlacementRecord",
    "PlanReport",
    "apply_placement",
    "can_place",
    "count_future_options",
    "footprint_clear",
    "generate_candidates",
    "render_ascii_board",
]
