"""Pydantic schemas handed to the host once planning is finished.

These models mirror the lightweight dataclasses in ``grid.py`` and
``placements.py`` but stay JSON-serializable so a host (or a log sink) can
store or ship them without knowing about planner internals.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .grid import CellState
from .placements import PlacementKind


class BoardSnapshot(BaseModel):
    """Read-only view of a finished board."""

    model_config = ConfigDict(frozen=True)

    rows: int
    cols: int
    grid: List[List[CellState]] = Field(
        ..., description="Row-major cell states; grid[row][col]",
    )
    towers_placed: int = 0
    walls_placed: int = 0

    def occupant(self, row: int, col: int) -> CellState:
        return self.grid[row][col]

    def occupants(self) -> Dict[Tuple[int, int], CellState]:
        """Map every ``(row, col)`` to its occupant."""
        return {
            (r, c): state
            for r, row in enumerate(self.grid)
            for c, state in enumerate(row)
        }


class PlacementRecord(BaseModel):
    """A committed placement, in commit order, for the host to instantiate."""

    model_config = ConfigDict(frozen=True)

    order: int = Field(..., description="0-based commit index")
    kind: PlacementKind
    row: int
    col: int
    cells: List[Tuple[int, int]] = Field(
        default_factory=list, description="Footprint cells claimed by the placement",
    )


class DiagnosticRecord(BaseModel):
    """Why a placement was chosen; one record per committed step."""

    step: int
    placement: PlacementRecord
    score: float = Field(..., description="benefit - weighted constraint cost")
    ranked_score: float = Field(..., description="Scaled score plus tie-break jitter")
    constraint_cost: int = Field(..., description="Future options removed (LCV)")
    benefit: Dict[str, float] = Field(
        default_factory=dict, description="Weighted benefit components",
    )
    lanes_before: int
    lanes_after: int
    explored: bool = Field(False, description="Picked from the top-K instead of the best tie")
    candidates_considered: int = 0
    candidates_rejected: int = 0
    towers_placed: int = 0
    walls_placed: int = 0


class PlanReport(BaseModel):
    """Everything a planning session produced."""

    board: BoardSnapshot
    placements: List[PlacementRecord] = Field(default_factory=list)
    diagnostics: List[DiagnosticRecord] = Field(default_factory=list)
    done_reason: Optional[str] = None
    strategy: str
    seed: Optional[int] = None
    reference_spawn: Tuple[int, int]
    reference_goal: Tuple[int, int]
