"""
utils.py - Constants, enumerations and helper functions for the Connect Four engine

This module provides the fixed board dimensions, the cell/side enumeration,
game result and direction enumerations, and small helpers shared by the
board, the win detector, the rules engine and the opponent policy.
"""

from enum import Enum, auto
from typing import Tuple

import numpy as np

# Game constants
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of discs in a row to win
CENTER_COLUMN = COLS // 2

# Seconds the automated opponent "thinks" before moving, as a (low, high) range
DEFAULT_THINK_DELAY = (0.5, 0.5)

Coord = Tuple[int, int]  # (row, column)


class Player(Enum):
    """Enumeration representing sides and cell states."""
    EMPTY = 0
    ONE = 1    # First player, always a human
    TWO = 2    # Second player, human or automated opponent

    def other(self) -> 'Player':
        """Get the opposing side."""
        if self == Player.ONE:
            return Player.TWO
        elif self == Player.TWO:
            return Player.ONE
        return Player.EMPTY

    def __str__(self):
        if self == Player.EMPTY:
            return " "
        elif self == Player.ONE:
            return "X"
        else:
            return "O"


class GameResult(Enum):
    """Enumeration representing the game outcome."""
    IN_PROGRESS = auto()
    WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self != GameResult.IN_PROGRESS


class Direction(Enum):
    """The four axes a winning run can lie on, as (row, col) step vectors."""
    HORIZONTAL = (0, 1)
    VERTICAL = (1, 0)
    DIAGONAL_DOWN_RIGHT = (1, 1)
    DIAGONAL_DOWN_LEFT = (1, -1)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value


def is_valid_position(row: int, col: int) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        row: Row index
        col: Column index

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= row < ROWS and 0 <= col < COLS


def is_valid_column(col: int) -> bool:
    """Check if a column index is on the board."""
    return 0 <= col < COLS


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render a grid as ASCII art.

    Args:
        grid: ROWS x COLS array of Player values

    Returns:
        ASCII representation of the board
    """
    symbols = {Player.EMPTY.value: " ", Player.ONE.value: "X", Player.TWO.value: "O"}
    border = "|" + "-" * (COLS * 2 - 1) + "|"

    result = [border]
    for row in range(ROWS):
        cells = [symbols[int(grid[row, col])] for col in range(COLS)]
        result.append("|" + " ".join(cells) + "|")
    result.append(border)
    result.append("|" + " ".join(str(i) for i in range(COLS)) + "|")

    return "\n".join(result)
