"""Placement value types.

A placement is a tagged value ``(kind, row, col)``; the origin is the
top-left cell of the footprint. Footprint extents come from the board.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from .grid import Board, Cell, CellState


class PlacementKind(str, Enum):
    ARCHER_TOWER = "archer_tower"
    WALL_HORIZONTAL = "wall_horizontal"
    WALL_VERTICAL = "wall_vertical"

    @property
    def is_tower(self) -> bool:
        return self is PlacementKind.ARCHER_TOWER

    @property
    def is_wall(self) -> bool:
        return not self.is_tower

    @property
    def cell_state(self) -> CellState:
        return CellState.TOWER if self.is_tower else CellState.WALL


@dataclass(frozen=True, order=True)
class Placement:
    """A structure of ``kind`` anchored at ``(row, col)``."""

    kind: PlacementKind
    row: int
    col: int

    @classmethod
    def tower(cls, row: int, col: int) -> "Placement":
        return cls(PlacementKind.ARCHER_TOWER, row, col)

    @classmethod
    def wall(cls, row: int, col: int, *, horizontal: bool = True) -> "Placement":
        kind = PlacementKind.WALL_HORIZONTAL if horizontal else PlacementKind.WALL_VERTICAL
        return cls(kind, row, col)

    @property
    def origin(self) -> Cell:
        return (self.row, self.col)

    def footprint(self, board: Board) -> List[Cell]:
        """Cells covered on ``board``; may include out-of-bounds coordinates."""
        if self.kind is PlacementKind.ARCHER_TOWER:
            size = board.tower_size
            return [
                (r, c)
                for r in range(self.row, self.row + size)
                for c in range(self.col, self.col + size)
            ]
        if self.kind is PlacementKind.WALL_HORIZONTAL:
            return [(self.row, c) for c in range(self.col, self.col + board.wall_length)]
        return [(r, self.col) for r in range(self.row, self.row + board.wall_length)]

    def __str__(self) -> str:
        return f"{self.kind.value} at ({self.row},{self.col})"
