import logging

import numpy as np
import pytest

from blockslide.board import Board, CellState


def test_get_cell_returns_sentinel_outside_bounds():
    board = Board(8, 10)
    assert board.get_cell(0, 0) is CellState.EMPTY
    assert board.get_cell(-1, 0) is CellState.INVALID
    assert board.get_cell(0, 10) is CellState.INVALID
    assert board.get_cell(8, 3) is CellState.INVALID


def test_set_cell_ignores_out_of_bounds_writes(caplog):
    board = Board(8, 10, strict=False)
    with caplog.at_level(logging.WARNING, logger="blockslide.board"):
        assert board.set_cell(9, 0, 1) is False
    assert "outside the board" in caplog.text
    assert board.set_cell(1, 1, 1) is True
    assert board.get_cell(1, 1) is CellState.OCCUPIED


def test_batch_set_applies_writes_in_order():
    board = Board(8, 10, strict=False)
    applied = board.batch_set([(0, 0, 1), (0, 1, 1), (0, 0, 0), (20, 0, 1)])
    assert applied == 3
    assert board.get_cell(0, 0) is CellState.EMPTY
    assert board.get_cell(0, 1) is CellState.OCCUPIED


def test_area_is_free_checks_bounds_and_occupancy():
    board = Board(8, 10)
    board.place_piece(0, 4, 2)
    assert board.area_is_free(0, 0, 4)
    assert not board.area_is_free(0, 2, 3)
    assert not board.area_is_free(0, 8, 3)
    assert not board.area_is_free(-1, 0, 1)
    assert not board.area_is_free(0, 0, 0)
    assert board.area_is_free(1, 6, 4)


def test_place_piece_rejects_overlap_and_bad_width():
    board = Board(8, 10)
    first = board.place_piece(0, 0, 4)
    assert first is not None
    assert board.place_piece(0, 3, 2) is None
    assert board.place_piece(1, 0, 5) is None
    assert board.place_piece(1, 0, 0) is None
    assert len(board) == 1
    assert first in board


def test_find_piece_scans_column_span():
    board = Board(8, 10)
    piece = board.place_piece(3, 2, 3)
    assert board.find_piece(3, 2) is piece
    assert board.find_piece(3, 4) is piece
    assert board.find_piece(3, 5) is None
    assert board.find_piece(2, 3) is None
    assert board.get_piece(piece.id) is piece


def test_movable_range_stops_at_obstructions():
    board = Board(8, 10)
    board.place_piece(0, 1, 1)
    piece = board.place_piece(0, 4, 2)
    board.place_piece(0, 8, 2)
    assert board.movable_range(piece) == (2, 7)
    assert board.column_bounds(piece) == (2, 6)


def test_movable_range_reaches_board_edges():
    board = Board(8, 10)
    piece = board.place_piece(5, 3, 3)
    assert board.movable_range(piece) == (0, 9)


def test_move_piece_clamps_to_reachable_range():
    board = Board(8, 10)
    board.place_piece(0, 8, 1)
    piece = board.place_piece(0, 2, 3)

    assert board.move_piece(piece, 9) == 5
    assert piece.col == 5
    assert board.get_cell(0, 2) is CellState.EMPTY
    assert [board.get_cell(0, c) for c in range(5, 8)] == [CellState.OCCUPIED] * 3

    assert board.move_piece(piece, -3) == 0
    assert piece.footprint() == [(0, 0), (0, 1), (0, 2)]
    lo, hi = board.movable_range(piece)
    assert lo <= piece.col and piece.right <= hi
    board.check_consistency()


def test_move_piece_to_same_column_is_noop():
    board = Board(8, 10)
    piece = board.place_piece(2, 4, 2)
    before = board.grid.copy()
    assert board.move_piece(piece, 4) == 4
    assert np.array_equal(before, board.grid)


def test_pieces_in_row_and_all_pieces():
    board = Board(8, 10)
    a = board.place_piece(0, 0, 2)
    b = board.place_piece(0, 5, 1)
    c = board.place_piece(1, 0, 3)
    assert set(board.pieces_in_row(0)) == {a, b}
    assert board.pieces_in_row(1) == [c]
    assert set(board.all_pieces()) == {a, b, c}


def test_remove_piece_frees_cells():
    board = Board(8, 10)
    piece = board.place_piece(1, 1, 4)
    assert board.remove_piece(piece)
    assert not board.remove_piece(piece)
    assert not board.grid.any()
    board.check_consistency()


def test_check_consistency_detects_desync():
    board = Board(8, 10)
    board.place_piece(0, 0, 2)
    board.set_cell(3, 3, 1)
    with pytest.raises(AssertionError):
        board.check_consistency()
    board.rebuild_grid()
    board.check_consistency()
    assert board.get_cell(3, 3) is CellState.EMPTY


def test_occupancy_is_read_only_copy():
    board = Board(8, 10)
    board.place_piece(0, 0, 1)
    grid = board.occupancy()
    with pytest.raises(ValueError):
        grid[0, 1] = 1
    assert grid[0, 0] == 1


def test_board_dimensions_validated():
    with pytest.raises(ValueError):
        Board(0, 10)
    with pytest.raises(ValueError):
        Board(8, 0)


def test_load_rows_builds_layout():
    board = Board(8, 10)
    placed = board.load_rows([[(0, 4), (6, 2)], [(1, 3)]])
    assert len(placed) == 3
    assert board.get_cell(1, 3) is CellState.OCCUPIED
    with pytest.raises(ValueError):
        board.load_rows([[(0, 4), (2, 2)]])
