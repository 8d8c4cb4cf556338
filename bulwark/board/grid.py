"""Battlefield grid model.

The board is a fixed-size arena of cell states indexed by ``(row, col)``
plus the per-type placement budget counters. Boards are immutable values:
every operation that "changes" a board returns a new one, so trial boards
used during scoring can never leak into the authoritative board.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .placements import PlacementKind
    from .schemas import BoardSnapshot

Cell = Tuple[int, int]


class CellState(str, Enum):
    """Occupant of a single grid cell."""

    EMPTY = "empty"
    TOWER = "tower"
    WALL = "wall"


class Edge(str, Enum):
    """Board edge used to define where movers spawn and where they head."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"

    @property
    def opposite(self) -> "Edge":
        return _OPPOSITE_EDGES[self]


_OPPOSITE_EDGES = {
    Edge.LEFT: Edge.RIGHT,
    Edge.RIGHT: Edge.LEFT,
    Edge.TOP: Edge.BOTTOM,
    Edge.BOTTOM: Edge.TOP,
}


# Symbols shared by render_ascii_board and Board.from_ascii.
CELL_SYMBOLS = {
    CellState.EMPTY: ".",
    CellState.TOWER: "A",
    CellState.WALL: "W",
}
_SYMBOL_TO_STATE = {symbol: state for state, symbol in CELL_SYMBOLS.items()}


@dataclass(frozen=True)
class Budgets:
    """Placement counters and their configured maximums."""

    max_towers: int = 3
    max_walls: int = 3
    towers_placed: int = 0
    walls_placed: int = 0

    def remaining(self, kind: "PlacementKind") -> int:
        if kind.is_tower:
            return self.max_towers - self.towers_placed
        return self.max_walls - self.walls_placed

    def has_capacity(self, kind: "PlacementKind") -> bool:
        return self.remaining(kind) > 0

    @property
    def exhausted(self) -> bool:
        return self.towers_placed >= self.max_towers and self.walls_placed >= self.max_walls

    def spend(self, kind: "PlacementKind") -> "Budgets":
        """Return counters with one more placement of ``kind`` recorded."""
        if not self.has_capacity(kind):
            raise ValueError(f"No {kind.value} budget left ({self.describe()})")
        if kind.is_tower:
            return replace(self, towers_placed=self.towers_placed + 1)
        return replace(self, walls_placed=self.walls_placed + 1)

    def describe(self) -> str:
        return (
            f"Towers: {self.towers_placed}/{self.max_towers}, "
            f"Walls: {self.walls_placed}/{self.max_walls}"
        )


@dataclass(frozen=True)
class Board:
    """Immutable N×M grid of cell states with footprint geometry and budgets.

    ``cells`` is a flat tuple in row-major order. Footprint sizes are carried
    on the board so validators and analyzers never hardcode them.
    """

    rows: int
    cols: int
    cells: Tuple[CellState, ...]
    tower_size: int = 2
    wall_length: int = 4
    budgets: Budgets = field(default_factory=Budgets)

    def __post_init__(self) -> None:
        if len(self.cells) != self.rows * self.cols:
            raise ValueError(
                f"Board expects {self.rows * self.cols} cells, got {len(self.cells)}"
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(
        cls,
        rows: int = 9,
        cols: int = 9,
        *,
        tower_size: int = 2,
        wall_length: int = 4,
        max_towers: int = 3,
        max_walls: int = 3,
    ) -> "Board":
        return cls(
            rows=rows,
            cols=cols,
            cells=(CellState.EMPTY,) * (rows * cols),
            tower_size=tower_size,
            wall_length=wall_length,
            budgets=Budgets(max_towers=max_towers, max_walls=max_walls),
        )

    @classmethod
    def from_config(cls, config) -> "Board":
        """Create an empty board sized and budgeted from a ``PlannerConfig``."""
        return cls.empty(
            config.rows,
            config.cols,
            tower_size=config.tower_size,
            wall_length=config.wall_length,
            max_towers=config.max_towers,
            max_walls=config.max_walls,
        )

    @classmethod
    def from_ascii(
        cls,
        lines: Sequence[str] | str,
        *,
        tower_size: int = 2,
        wall_length: int = 4,
        budgets: Budgets | None = None,
    ) -> "Board":
        """Parse rows of ``.``/``A``/``W`` symbols (whitespace ignored)."""
        if isinstance(lines, str):
            lines = [line for line in lines.splitlines() if line.strip()]
        parsed: List[List[CellState]] = []
        for line in lines:
            row = []
            for symbol in line.replace(" ", ""):
                if symbol not in _SYMBOL_TO_STATE:
                    raise ValueError(f"Unknown cell symbol {symbol!r}")
                row.append(_SYMBOL_TO_STATE[symbol])
            parsed.append(row)
        if not parsed or any(len(row) != len(parsed[0]) for row in parsed):
            raise ValueError("ASCII board rows must be non-empty and equally long")
        return cls(
            rows=len(parsed),
            cols=len(parsed[0]),
            cells=tuple(state for row in parsed for state in row),
            tower_size=tower_size,
            wall_length=wall_length,
            budgets=budgets or Budgets(),
        )

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> CellState:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) outside {self.rows}x{self.cols} board")
        return self.cells[row * self.cols + col]

    def iter_cells(self) -> Iterator[Tuple[Cell, CellState]]:
        for index, state in enumerate(self.cells):
            yield divmod(index, self.cols), state

    def count(self, state: CellState) -> int:
        return self.cells.count(state)

    def edge_cells(self, edge: Edge) -> List[Cell]:
        """Cells along ``edge``, ordered by row (left/right) or column (top/bottom)."""
        if edge is Edge.LEFT:
            return [(r, 0) for r in range(self.rows)]
        if edge is Edge.RIGHT:
            return [(r, self.cols - 1) for r in range(self.rows)]
        if edge is Edge.TOP:
            return [(0, c) for c in range(self.cols)]
        return [(self.rows - 1, c) for c in range(self.cols)]

    # ------------------------------------------------------------------
    # Derived boards
    # ------------------------------------------------------------------

    def with_cells(self, updates: dict) -> "Board":
        """Return a copy with ``{(row, col): CellState}`` updates applied."""
        cells = list(self.cells)
        for (row, col), state in updates.items():
            cells[row * self.cols + col] = state
        return replace(self, cells=tuple(cells))

    def with_placement_spent(self, kind: "PlacementKind") -> "Board":
        return replace(self, budgets=self.budgets.spend(kind))

    def snapshot(self) -> "BoardSnapshot":
        from .schemas import BoardSnapshot

        return BoardSnapshot(
            rows=self.rows,
            cols=self.cols,
            grid=[
                list(self.cells[r * self.cols:(r + 1) * self.cols])
                for r in range(self.rows)
            ],
            towers_placed=self.budgets.towers_placed,
            walls_placed=self.budgets.walls_placed,
        )
