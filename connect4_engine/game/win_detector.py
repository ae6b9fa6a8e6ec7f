"""
win_detector.py - Four-in-a-row detection around the last placed disc

Any win must pass through the most recent placement, so detection only walks
outward from that single cell along the four board axes instead of scanning
the whole grid.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from connect4_engine.game.board import Board
from connect4_engine.utils import CONNECT_N, Coord, Direction, Player, is_valid_position


@dataclass(frozen=True)
class WinningRun:
    """Exactly CONNECT_N contiguous same-side coordinates along one direction."""

    side: Player
    direction: Direction
    cells: Tuple[Coord, ...]

    def __post_init__(self):
        if len(self.cells) != CONNECT_N:
            raise ValueError(f"A winning run has exactly {CONNECT_N} cells")

    def __iter__(self) -> Iterator[Coord]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, coord) -> bool:
        return coord in self.cells


def _walk(board: Board, row: int, column: int, dr: int, dc: int, side: Player) -> List[Coord]:
    """Collect up to CONNECT_N - 1 consecutive ``side`` cells stepping by (dr, dc)."""
    cells = []
    for step in range(1, CONNECT_N):
        r, c = row + dr * step, column + dc * step
        if not is_valid_position(r, c) or board.grid[r, c] != side.value:
            break
        cells.append((r, c))
    return cells


def connected_cells(board: Board, row: int, column: int,
                    direction: Direction, side: Player) -> List[Coord]:
    """
    Get the run of ``side`` cells through (row, column) along ``direction``.

    Args:
        board: The board to inspect
        row: Row of the origin cell
        column: Column of the origin cell
        direction: Axis to walk
        side: Side whose discs extend the run

    Returns:
        Coordinates ordered from the negative end to the positive end, origin
        included, at most CONNECT_N - 1 cells on either side of the origin
    """
    dr, dc = direction.vector
    positive = _walk(board, row, column, dr, dc, side)
    negative = _walk(board, row, column, -dr, -dc, side)
    return list(reversed(negative)) + [(row, column)] + positive


def check_win(board: Board, row: int, column: int, side: Player) -> Optional[WinningRun]:
    """
    Check whether the disc just placed at (row, column) completes a run.

    Args:
        board: Board holding the disc
        row: Row of the last placed disc
        column: Column of the last placed disc
        side: Side that placed it

    Returns:
        The winning run, or None
    """
    for direction in Direction:
        cells = connected_cells(board, row, column, direction, side)
        if len(cells) >= CONNECT_N:
            # The negative walk holds at most CONNECT_N - 1 cells, so the first
            # CONNECT_N cells always include the origin.
            return WinningRun(side, direction, tuple(cells[:CONNECT_N]))
    return None


def is_winning_drop(board: Board, column: int, side: Player) -> bool:
    """
    Check whether dropping ``side`` into ``column`` would win, leaving ``board`` unchanged.

    The caller must own ``board``: the disc is placed and removed in place.
    """
    row = board.drop_height(column)
    if row is None:
        return False

    board.place(row, column, side)
    try:
        return check_win(board, row, column, side) is not None
    finally:
        board.remove(row, column)
