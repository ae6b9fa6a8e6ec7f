"""Unit tests for the Connect Four board."""

import numpy as np
import pytest

from connect4_engine.game.board import Board
from connect4_engine.utils import COLS, ROWS, Player


def drop(board, column, side):
    row = board.drop_height(column)
    board.place(row, column, side)
    return row


def test_empty_board_drops_to_bottom_row():
    board = Board()
    assert all(board.drop_height(col) == ROWS - 1 for col in range(COLS))
    assert board.available_columns() == list(range(COLS))
    assert not board.is_full()


def test_discs_stack_upward():
    board = Board()
    assert drop(board, 2, Player.ONE) == 5
    assert drop(board, 2, Player.TWO) == 4
    assert board.cell(5, 2) == Player.ONE
    assert board.cell(4, 2) == Player.TWO
    assert board.drop_height(2) == 3


def test_full_column_reports_none():
    board = Board()
    for i in range(ROWS):
        drop(board, 0, Player.ONE if i % 2 == 0 else Player.TWO)
    assert board.drop_height(0) is None
    assert 0 not in board.available_columns()


def test_place_requires_drop_height():
    board = Board()
    with pytest.raises(ValueError):
        board.place(3, 1, Player.ONE)
    with pytest.raises(ValueError):
        board.place(5, 1, Player.EMPTY)
    assert board.disc_count == 0


def test_remove_only_takes_top_disc():
    board = Board()
    drop(board, 4, Player.ONE)
    drop(board, 4, Player.TWO)
    with pytest.raises(ValueError):
        board.remove(5, 4)
    board.remove(4, 4)
    assert board.drop_height(4) == 4
    assert board.cell(5, 4) == Player.ONE


def test_copy_is_independent():
    board = Board()
    drop(board, 3, Player.ONE)
    clone = board.copy()
    drop(clone, 3, Player.TWO)
    assert board.drop_height(3) == 4
    assert clone.drop_height(3) == 3
    assert board.disc_count == 1


def test_is_full_matches_every_column_full():
    rng = np.random.default_rng(42)
    for _ in range(5):
        board = Board()
        side = Player.ONE
        while board.available_columns():
            assert board.is_full() == all(board.drop_height(c) is None for c in range(COLS))
            drop(board, int(rng.choice(board.available_columns())), side)
            side = side.other()
        assert board.is_full()
        assert all(board.drop_height(c) is None for c in range(COLS))
        assert board.disc_count == ROWS * COLS


def test_from_grid_derives_heights():
    grid = np.zeros((ROWS, COLS), dtype=int)
    grid[5, 0] = Player.ONE.value
    grid[4, 0] = Player.TWO.value
    grid[5, 6] = Player.TWO.value
    board = Board.from_grid(grid)
    assert board.drop_height(0) == 3
    assert board.drop_height(6) == 4
    assert board.drop_height(3) == 5


def test_from_grid_rejects_floating_disc():
    grid = np.zeros((ROWS, COLS), dtype=int)
    grid[3, 2] = Player.ONE.value
    with pytest.raises(ValueError):
        Board.from_grid(grid)


def test_from_grid_rejects_bad_values_and_shape():
    with pytest.raises(ValueError):
        Board.from_grid(np.full((ROWS, COLS), 3))
    with pytest.raises(ValueError):
        Board.from_grid(np.zeros((5, 7)))


def test_render_marks_discs():
    board = Board()
    drop(board, 0, Player.ONE)
    drop(board, 1, Player.TWO)
    lines = board.render().splitlines()
    assert lines[ROWS] == "|" + " ".join(["X", "O"] + [" "] * (COLS - 2)) + "|"
    assert lines[-1] == "|0 1 2 3 4 5 6|"


@pytest.mark.parametrize("column", [-1, COLS])
def test_drop_height_rejects_out_of_range_column(column):
    with pytest.raises(ValueError):
        Board().drop_height(column)
