"""Placement legality, application and candidate enumeration."""

from __future__ import annotations

from typing import List, Optional

from .grid import Board, CellState, CELL_SYMBOLS
from .placements import Placement, PlacementKind


def footprint_clear(board: Board, placement: Placement) -> bool:
    """True if every footprint cell is inside the board and EMPTY."""

    for row, col in placement.footprint(board):
        if not board.in_bounds(row, col):
            return False
        if board.get(row, col) is not CellState.EMPTY:
            return False
    return True


def can_place(board: Board, placement: Placement) -> bool:
    """Check footprint legality and remaining budget for ``placement``.

    Never raises: out-of-bounds origins, overlaps and exhausted budgets all
    simply return False.
    """

    if not board.budgets.has_capacity(placement.kind):
        return False
    return footprint_clear(board, placement)


def apply_placement(board: Board, placement: Placement) -> Optional[Board]:
    """Return a new board with ``placement`` stamped on it, or None if illegal.

    The whole footprint transitions together; the input board is untouched.
    Budget counters are copied as-is, the planner spends budget on commit.
    """

    if not footprint_clear(board, placement):
        return None
    state = placement.kind.cell_state
    return board.with_cells({cell: state for cell in placement.footprint(board)})


def _iter_footprint_legal(board: Board, kinds) -> List[Placement]:
    found: List[Placement] = []
    if PlacementKind.ARCHER_TOWER in kinds:
        size = board.tower_size
        for r in range(board.rows - size + 1):
            for c in range(board.cols - size + 1):
                candidate = Placement.tower(r, c)
                if footprint_clear(board, candidate):
                    found.append(candidate)
    walls = [k for k in (PlacementKind.WALL_HORIZONTAL, PlacementKind.WALL_VERTICAL) if k in kinds]
    if walls:
        for r in range(board.rows):
            for c in range(board.cols):
                for kind in walls:
                    candidate = Placement(kind, r, c)
                    if footprint_clear(board, candidate):
                        found.append(candidate)
    return found


def generate_candidates(board: Board) -> List[Placement]:
    """Enumerate every legal placement the remaining budgets allow.

    Towers come first, then walls (horizontal before vertical per origin), in
    row-major scan order. Kinds whose budget is spent are skipped entirely.
    """

    kinds = [kind for kind in PlacementKind if board.budgets.has_capacity(kind)]
    return _iter_footprint_legal(board, kinds)


def count_future_options(board: Board) -> int:
    """Number of footprint-legal placements of every kind, budgets ignored."""

    return len(_iter_footprint_legal(board, list(PlacementKind)))


def render_ascii_board(board: Board) -> str:
    """Render ``board`` with column and row headers.

    ``.`` is empty, ``A`` an archer tower cell and ``W`` a wall cell. Useful
    for debug output; the host does its own rendering.
    """

    width = len(str(board.rows - 1))
    header = " " * (width + 1) + " ".join(str(c % 10) for c in range(board.cols))
    lines = [header]
    for r in range(board.rows):
        symbols = " ".join(CELL_SYMBOLS[board.get(r, c)] for c in range(board.cols))
        lines.append(f"{r:>{width}} {symbols}")
    return "\n".join(lines)
