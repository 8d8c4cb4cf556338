"""Tests for board model and placement validation helpers."""

import pytest

from bulwark.board import (
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


def test_empty_board_has_only_empty_cells():
    board = Board.empty()
    assert (board.rows, board.cols) == (9, 9)
    assert board.count(CellState.EMPTY) == 81
    assert board.budgets == Budgets(max_towers=3, max_walls=3)


def test_footprints_follow_board_geometry():
    board = Board.empty(6, 6, tower_size=3, wall_length=2)

    assert Placement.tower(1, 1).footprint(board) == [
        (1, 1), (1, 2), (1, 3),
        (2, 1), (2, 2), (2, 3),
        (3, 1), (3, 2), (3, 3),
    ]
    assert Placement.wall(0, 4).footprint(board) == [(0, 4), (0, 5)]
    assert Placement.wall(4, 0, horizontal=False).footprint(board) == [(4, 0), (5, 0)]


def test_can_place_rejects_out_of_bounds_and_overlap():
    board = Board.empty()

    assert can_place(board, Placement.tower(7, 7)) is True
    # 2x2 footprint would spill off the bottom-right corner
    assert can_place(board, Placement.tower(8, 7)) is False
    assert can_place(board, Placement.wall(0, 6)) is False  # cols 6..9
    assert can_place(board, Placement.wall(6, 0, horizontal=False)) is False  # rows 6..9
    assert can_place(board, Placement.tower(-1, 0)) is False

    walled = apply_placement(board, Placement.wall(4, 2))
    assert can_place(walled, Placement.tower(3, 3)) is False  # covers (4,3)
    assert can_place(walled, Placement.wall(1, 5, horizontal=False)) is False  # crosses (4,5)
    assert can_place(walled, Placement.tower(2, 3)) is True


def test_can_place_respects_budgets():
    board = Board.empty(9, 9, max_towers=1, max_walls=0)

    assert can_place(board, Placement.tower(0, 0)) is True
    assert can_place(board, Placement.wall(0, 0)) is False

    spent = board.with_placement_spent(PlacementKind.ARCHER_TOWER)
    assert can_place(spent, Placement.tower(5, 5)) is False


def test_apply_changes_exactly_the_footprint():
    board = Board.empty()
    placement = Placement.wall(2, 3, horizontal=False)

    updated = apply_placement(board, placement)

    assert updated is not None
    footprint = set(placement.footprint(board))
    for (r, c), state in updated.iter_cells():
        if (r, c) in footprint:
            assert state is CellState.WALL
        else:
            assert state is board.get(r, c)
    # Input board untouched and budgets not spent by apply
    assert board.count(CellState.EMPTY) == 81
    assert updated.budgets == board.budgets


def test_apply_rejects_illegal_placement_without_partial_changes():
    board = apply_placement(Board.empty(), Placement.tower(0, 0))

    # Horizontal wall starting at (1,0) overlaps the tower at (1,0)/(1,1)
    assert apply_placement(board, Placement.wall(1, 0)) is None
    assert apply_placement(board, Placement.wall(1, 7)) is None  # off the board
    assert board.count(CellState.TOWER) == 4
    assert board.count(CellState.WALL) == 0


def test_generate_candidates_on_empty_board():
    board = Board.empty()
    candidates = generate_candidates(board)

    towers = [p for p in candidates if p.kind is PlacementKind.ARCHER_TOWER]
    horizontal = [p for p in candidates if p.kind is PlacementKind.WALL_HORIZONTAL]
    vertical = [p for p in candidates if p.kind is PlacementKind.WALL_VERTICAL]

    assert len(towers) == 8 * 8
    assert len(horizontal) == 9 * 6
    assert len(vertical) == 6 * 9
    # Towers first, in row-major order
    assert candidates[0] == Placement.tower(0, 0)
    assert count_future_options(board) == len(candidates)


def test_no_wall_candidates_after_wall_budget_spent():
    board = Board.empty()
    for placement in (Placement.wall(0, 0), Placement.wall(8, 0), Placement.wall(2, 8, horizontal=False)):
        board = apply_placement(board, placement).with_placement_spent(placement.kind)

    assert board.budgets.walls_placed == 3
    candidates = generate_candidates(board)
    assert candidates
    assert all(p.kind is PlacementKind.ARCHER_TOWER for p in candidates)
    # Future options still count walls; only candidate generation honours budgets
    assert count_future_options(board) > len(candidates)


def test_budget_spend_raises_when_exhausted():
    budgets = Budgets(max_towers=1, max_walls=0)
    spent = budgets.spend(PlacementKind.ARCHER_TOWER)
    assert spent.towers_placed == 1
    assert spent.exhausted is True
    with pytest.raises(ValueError):
        spent.spend(PlacementKind.ARCHER_TOWER)
    with pytest.raises(ValueError):
        budgets.spend(PlacementKind.WALL_VERTICAL)


def test_ascii_round_trip_and_edges():
    board = Board.from_ascii(
        """
        A A . .
        A A . W
        . . . W
        """
    )

    assert (board.rows, board.cols) == (3, 4)
    assert board.get(0, 1) is CellState.TOWER
    assert board.get(2, 3) is CellState.WALL
    assert board.edge_cells(Edge.RIGHT) == [(0, 3), (1, 3), (2, 3)]
    assert board.edge_cells(Edge.TOP) == [(0, 0), (0, 1), (0, 2), (0, 3)]

    rendered = render_ascii_board(board)
    assert rendered.splitlines()[0].strip() == "0 1 2 3"
    assert rendered.splitlines()[2] == "1 A A . W"

    with pytest.raises(ValueError):
        Board.from_ascii(["..X"])
