"""
board.py - Board representation for the Connect Four engine

This module implements the Board class, which owns the grid and the per-column
fill bookkeeping. The board knows nothing about turns, wins or draws; those live
in the rules engine. Its only mutation primitives are ``place`` and ``remove``,
and both preserve the gravity invariant: the occupied cells of a column are
always contiguous from the bottom row upward.
"""

from typing import Iterable, List, Optional

import numpy as np

from connect4_engine.debug import debug
from connect4_engine.utils import COLS, ROWS, Player, is_valid_column, render_board_ascii


class Board:
    """
    A 6 x 7 Connect Four grid.

    Rows are indexed top to bottom and columns left to right, so the lowest
    free cell of a column is the largest empty row index.
    """

    def __init__(self):
        """Initialize an empty board."""
        self.grid = np.zeros((ROWS, COLS), dtype=np.int8)
        # Row index of the next free cell per column, -1 when the column is full
        self._next_row = np.full(COLS, ROWS - 1, dtype=np.int8)

    @classmethod
    def from_grid(cls, grid: Iterable) -> 'Board':
        """
        Build a board from an existing grid.

        Args:
            grid: Anything numpy can shape into ROWS x COLS, holding Player values

        Returns:
            A new Board with the fill counters derived from the grid

        Raises:
            ValueError: If the grid has the wrong shape, unknown cell values, or
                floating discs
        """
        array = np.asarray(grid, dtype=np.int8)
        if array.size == ROWS * COLS and array.shape != (ROWS, COLS):
            array = array.reshape(ROWS, COLS)
        if array.shape != (ROWS, COLS):
            raise ValueError(f"Grid must be {ROWS}x{COLS}, got {array.shape}")

        valid_values = [p.value for p in Player]
        if not np.isin(array, valid_values).all():
            raise ValueError(f"Grid values must be one of {valid_values}")

        board = cls()
        for col in range(COLS):
            column = array[:, col]
            occupied = np.flatnonzero(column != Player.EMPTY.value)
            height = len(occupied)
            # Occupied cells must be exactly the bottom `height` rows
            if height and occupied[0] != ROWS - height:
                raise ValueError(f"Column {col} has a floating disc")
            board._next_row[col] = ROWS - height - 1

        board.grid = array.copy()
        return board

    def copy(self) -> 'Board':
        """Return an independent copy of this board."""
        new_board = Board()
        new_board.grid = self.grid.copy()
        new_board._next_row = self._next_row.copy()
        return new_board

    def drop_height(self, column: int) -> Optional[int]:
        """
        Get the row a disc dropped into ``column`` would land in.

        Args:
            column: Column index (0-indexed)

        Returns:
            The lowest empty row index, or None if the column is full

        Raises:
            ValueError: If the column is out of range
        """
        if not is_valid_column(column):
            raise ValueError(f"Column {column} out of range")
        row = int(self._next_row[column])
        return row if row >= 0 else None

    def place(self, row: int, column: int, side: Player) -> None:
        """
        Write a disc into the board.

        ``row`` must be the value ``drop_height(column)`` returned for this
        same board state.
        """
        if side == Player.EMPTY:
            raise ValueError("Cannot place an empty disc")
        if not is_valid_column(column):
            raise ValueError(f"Column {column} out of range")
        if self.drop_height(column) != row:
            raise ValueError(f"Row {row} is not the drop height of column {column}")

        self.grid[row, column] = side.value
        self._next_row[column] -= 1
        debug.trace(f"Placed {side.name} at ({row}, {column})", "board")

    def remove(self, row: int, column: int) -> None:
        """Remove the top disc of ``column``, which must sit at ``row``."""
        if not is_valid_column(column):
            raise ValueError(f"Column {column} out of range")
        if int(self._next_row[column]) + 1 != row or row >= ROWS:
            raise ValueError(f"({row}, {column}) is not the top disc of its column")

        self.grid[row, column] = Player.EMPTY.value
        self._next_row[column] += 1
        debug.trace(f"Removed disc at ({row}, {column})", "board")

    def cell(self, row: int, column: int) -> Player:
        return Player(int(self.grid[row, column]))

    def is_full(self) -> bool:
        """True iff the top row has no empty cell, which under gravity means every cell is taken."""
        return bool(np.all(self.grid[0] != Player.EMPTY.value))

    def available_columns(self) -> List[int]:
        """Columns that can still take a disc, in ascending order."""
        return [col for col in range(COLS) if self._next_row[col] >= 0]

    @property
    def disc_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def get_state(self) -> np.ndarray:
        """Return a copy of the grid."""
        return self.grid.copy()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __str__(self) -> str:
        return self.render()


if __name__ == "__main__":
    board = Board()
    for col, side in [(3, Player.ONE), (3, Player.TWO), (4, Player.ONE)]:
        board.place(board.drop_height(col), col, side)
    print(board)
    print(f"Available columns: {board.available_columns()}")
