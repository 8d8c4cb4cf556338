"""Connectivity and shortest-path oracle over board snapshots.

Every function here is pure over a ``Board`` value and runs in O(rows·cols),
because the scoring engine re-runs them for each candidate trial board.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .board import Board, Cell, CellState, Edge, count_future_options


class WalkabilityPolicy(str, Enum):
    """Which occupied cells a mover cannot enter."""

    # Only walls stop movement; movers walk past (and under) towers.
    WALLS_BLOCK = "walls_block"
    # Any structure stops movement; only empty cells are walkable.
    EMPTY_ONLY = "empty_only"


# North, South, East, West. The order decides which of several equal-length
# paths BFS returns.
DIRECTIONS = ((-1, 0), (1, 0), (0, 1), (0, -1))


class PathAnalyzer:
    """Walkability, shortest paths and lane metrics for one policy and edge pair."""

    def __init__(
        self,
        policy: WalkabilityPolicy = WalkabilityPolicy.EMPTY_ONLY,
        spawn_edge: Edge = Edge.RIGHT,
        goal_edge: Edge = Edge.LEFT,
    ):
        self.policy = WalkabilityPolicy(policy)
        self.spawn_edge = Edge(spawn_edge)
        self.goal_edge = Edge(goal_edge)

    @classmethod
    def from_config(cls, config) -> "PathAnalyzer":
        return cls(config.walkability, config.spawn_edge, config.goal_edge)

    # ------------------------------------------------------------------
    # Walkability
    # ------------------------------------------------------------------

    def walkable(self, board: Board, cell: Cell) -> bool:
        row, col = cell
        if not board.in_bounds(row, col):
            return False
        state = board.get(row, col)
        if self.policy is WalkabilityPolicy.WALLS_BLOCK:
            return state is not CellState.WALL
        return state is CellState.EMPTY

    def neighbors(self, board: Board, cell: Cell) -> Iterator[Cell]:
        """Walkable 4-directional neighbours of ``cell`` in N, S, E, W order."""
        r, c = cell
        for dr, dc in DIRECTIONS:
            nb = (r + dr, c + dc)
            if self.walkable(board, nb):
                yield nb

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def shortest_path(self, board: Board, start: Cell, goal: Cell) -> Optional[List[Cell]]:
        """Return the BFS path from ``start`` to ``goal`` (both included) or None."""

        if not self.walkable(board, start) or not self.walkable(board, goal):
            return None
        return self._bfs_path(board, start, {goal})

    def shortest_path_to_edge(
        self, board: Board, start: Cell, edge: Optional[Edge] = None
    ) -> Optional[List[Cell]]:
        """Return the shortest path from ``start`` to the nearest cell on ``edge``.

        Defaults to the goal edge. This is the route a mover spawning at
        ``start`` would take when any goal cell will do.
        """

        if not self.walkable(board, start):
            return None
        targets = {
            cell for cell in board.edge_cells(edge or self.goal_edge)
            if self.walkable(board, cell)
        }
        if not targets:
            return None
        return self._bfs_path(board, start, targets)

    def _bfs_path(self, board: Board, start: Cell, targets: Set[Cell]) -> Optional[List[Cell]]:
        if start in targets:
            return [start]
        # prev doubles as the visited set; the start maps to itself.
        prev: Dict[Cell, Cell] = {start: start}
        queue: deque[Cell] = deque([start])
        while queue:
            current = queue.popleft()
            for nb in self.neighbors(board, current):
                if nb in prev:
                    continue
                prev[nb] = current
                if nb in targets:
                    return self._unwind(prev, nb)
                queue.append(nb)
        return None

    @staticmethod
    def _unwind(prev: Dict[Cell, Cell], end: Cell) -> List[Cell]:
        path = [end]
        while prev[path[-1]] != path[-1]:
            path.append(prev[path[-1]])
        path.reverse()
        return path

    def reachable_from(self, board: Board, sources: Iterable[Cell]) -> Set[Cell]:
        """Flood fill from every walkable cell in ``sources``."""

        seen = {cell for cell in sources if self.walkable(board, cell)}
        queue = deque(seen)
        while queue:
            current = queue.popleft()
            for nb in self.neighbors(board, current):
                if nb not in seen:
                    seen.add(nb)
                    queue.append(nb)
        return seen

    # ------------------------------------------------------------------
    # Lane metrics
    # ------------------------------------------------------------------

    def viable_lanes(self, board: Board) -> List[Cell]:
        """Spawn-edge cells from which some goal-edge cell is reachable.

        Movement is symmetric, so one flood fill from the goal edge answers
        the question for every spawn cell at once.
        """

        goal_cells = board.edge_cells(self.goal_edge)
        reached = self.reachable_from(board, goal_cells)
        # A spawn cell that is already on the goal edge is not a lane.
        return [
            cell for cell in board.edge_cells(self.spawn_edge)
            if cell in reached and cell not in goal_cells
        ]

    def count_viable_lanes(self, board: Board) -> int:
        return len(self.viable_lanes(board))

    def count_exposed_towers(self, board: Board) -> int:
        """Tower cells a mover from the spawn edge can stand on or beside."""

        reached = self.reachable_from(board, board.edge_cells(self.spawn_edge))
        exposed = 0
        for (r, c), state in board.iter_cells():
            if state is not CellState.TOWER:
                continue
            if (r, c) in reached or any((r + dr, c + dc) in reached for dr, dc in DIRECTIONS):
                exposed += 1
        return exposed

    def count_future_options(self, board: Board) -> int:
        return count_future_options(board)
