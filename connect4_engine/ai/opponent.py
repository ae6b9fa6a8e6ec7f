"""
opponent.py - Heuristic move selection for the automated opponent

The policy looks exactly one ply ahead, in a fixed priority order:

1. Take an immediate win if one exists (lowest column first)
2. Otherwise block the opponent's immediate win (lowest column first)
3. Otherwise draw a column at random, weighted towards the center

It is not optimal play. The order is fixed so the first two steps are fully
deterministic; only the fallback draw depends on the random generator.
"""

from typing import Iterable, List, Optional

import numpy as np

from connect4_engine.debug import debug
from connect4_engine.game.board import Board
from connect4_engine.game.win_detector import is_winning_drop
from connect4_engine.utils import CENTER_COLUMN, COLS, Player, is_valid_column


def column_weight(column: int) -> int:
    """Selection weight of a column: COLS at the center, falling by one per step outward."""
    return COLS - abs(column - CENTER_COLUMN)


def weighted_pool(columns: Iterable[int]) -> List[int]:
    """
    Build the selection pool for the center-biased draw.

    Args:
        columns: Available columns

    Returns:
        Each column repeated ``column_weight(column)`` times, in column order
    """
    pool = []
    for column in columns:
        pool.extend([column] * column_weight(column))
    return pool


def find_winning_column(board: Board, side: Player, columns: Iterable[int]) -> Optional[int]:
    """
    Find the first column where a ``side`` disc would complete four in a row.

    Args:
        board: A board the caller owns; it is restored before returning
        side: Side whose drop is simulated
        columns: Candidate columns, searched in ascending order

    Returns:
        The winning column, or None
    """
    for column in sorted(columns):
        if is_winning_drop(board, column, side):
            return column
    return None


class OpponentPolicy:
    """
    One-ply win/block/center-biased opponent.

    The policy keeps no board state between calls. Every decision searches a
    private copy of the board it is handed, so the live game board is never
    touched even when the policy runs on another thread.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the policy.

        Args:
            seed: Seed for a fresh numpy Generator, ignored when ``rng`` is given
            rng: Random generator used for the center-biased fallback
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.last_reason: Optional[str] = None

    def choose_column(self, board: Board, side: Player, opponent_side: Optional[Player] = None,
                      available_columns: Optional[Iterable[int]] = None) -> int:
        """
        Pick the column ``side`` should play.

        Args:
            board: Current board, left unmodified
            side: Side the policy plays for
            opponent_side: Side to block (defaults to ``side.other()``)
            available_columns: Columns to consider, skipping full or out-of-range ones
                (defaults to every non-full column)

        Returns:
            The chosen column index

        Raises:
            ValueError: If no column is available
        """
        if opponent_side is None:
            opponent_side = side.other()

        scratch = board.copy()
        if available_columns is None:
            columns = scratch.available_columns()
        else:
            columns = [c for c in available_columns
                       if is_valid_column(c) and scratch.drop_height(c) is not None]
        if not columns:
            raise ValueError("No available columns to choose from")

        with debug.timer("opponent_decision", "ai"):
            winning = find_winning_column(scratch, side, columns)
            if winning is not None:
                return self._decided(winning, "win", side)

            blocking = find_winning_column(scratch, opponent_side, columns)
            if blocking is not None:
                return self._decided(blocking, "block", side)

            pool = weighted_pool(sorted(columns))
            choice = int(pool[self.rng.integers(len(pool))])
            return self._decided(choice, "center-weighted", side)

    def _decided(self, column: int, reason: str, side: Player) -> int:
        self.last_reason = reason
        debug.debug(f"{side.name} picks column {column} ({reason})", "ai")
        return column
