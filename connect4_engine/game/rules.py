"""
rules.py - Turn state machine for Connect Four

This module provides the RuleEngine, which validates and applies column drops,
runs win and draw detection after every placement, and advances the state
machine:

    AWAITING_MOVE(side) -> EVALUATING -> AWAITING_MOVE(other side)
                                      -> WON(side, run)
                                      -> DRAW

WON and DRAW are terminal. Rejected moves are reported as a falsy MoveOutcome,
never as exceptions, and leave the board and the listeners untouched.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from connect4_engine.debug import debug
from connect4_engine.game.board import Board
from connect4_engine.game.events import GameEvent, Listener
from connect4_engine.game.win_detector import WinningRun, check_win
from connect4_engine.utils import Coord, GameResult, Player, is_valid_column


class EngineState(Enum):
    AWAITING_MOVE = auto()
    EVALUATING = auto()
    WON = auto()
    DRAW = auto()

    def is_terminal(self) -> bool:
        return self in (EngineState.WON, EngineState.DRAW)


class MoveRejection(Enum):
    """Reasons a move request is ignored."""
    COLUMN_FULL = auto()
    INVALID_COLUMN = auto()
    INVALID_STATE = auto()
    SESSION_STALE = auto()


@dataclass(frozen=True)
class MoveOutcome:
    """Result of a move request; truthy only when a disc was placed."""

    accepted: bool
    rejection: Optional[MoveRejection] = None
    row: Optional[int] = None
    column: Optional[int] = None
    side: Optional[Player] = None
    result: GameResult = GameResult.IN_PROGRESS

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def rejected(cls, reason: MoveRejection, column: Optional[int] = None) -> 'MoveOutcome':
        return cls(accepted=False, rejection=reason, column=column)


class RuleEngine:
    """
    Applies moves to a board it exclusively owns.

    Listeners are called synchronously, once with DISC_PLACED and once with the
    resulting transition, for every accepted move.
    """

    def __init__(self, board: Optional[Board] = None, first_side: Player = Player.ONE,
                 listeners: Optional[List[Listener]] = None, generation: int = 0):
        """
        Initialize the engine.

        Args:
            board: Starting board (an empty board if omitted); must hold no win
            first_side: Side to move on the starting board
            listeners: Callables receiving GameEvent notifications
            generation: Session generation stamped on emitted events
        """
        if first_side == Player.EMPTY:
            raise ValueError("The side to move must be ONE or TWO")

        self.board = board if board is not None else Board()
        self.side_to_move = first_side
        self.state = EngineState.AWAITING_MOVE
        self.winner: Optional[Player] = None
        self.winning_run: Optional[WinningRun] = None
        self.last_move: Optional[Coord] = None
        self.moves_made: List[int] = []
        self.listeners: List[Listener] = list(listeners or [])
        self.generation = generation

        if self.board.is_full():
            self.state = EngineState.DRAW
        debug.debug(f"RuleEngine ready, {first_side.name} to move", "rules")

    @property
    def result(self) -> GameResult:
        if self.state == EngineState.WON:
            return GameResult.WIN
        if self.state == EngineState.DRAW:
            return GameResult.DRAW
        return GameResult.IN_PROGRESS

    def is_game_over(self) -> bool:
        return self.state.is_terminal()

    def get_valid_moves(self) -> List[int]:
        """Columns that would be accepted right now."""
        if self.is_game_over():
            return []
        return self.board.available_columns()

    def apply_move(self, column: int) -> MoveOutcome:
        """
        Drop a disc for the side to move into ``column``.

        Args:
            column: Column index (0-indexed)

        Returns:
            An accepted MoveOutcome with the landing cell and the new result,
            or a rejected one naming the reason
        """
        if self.state != EngineState.AWAITING_MOVE:
            debug.debug(f"Rejected column {column}: engine is {self.state.name}", "rules")
            return MoveOutcome.rejected(MoveRejection.INVALID_STATE, column)

        if not is_valid_column(column):
            debug.debug(f"Rejected column {column}: out of range", "rules")
            return MoveOutcome.rejected(MoveRejection.INVALID_COLUMN, column)

        row = self.board.drop_height(column)
        if row is None:
            debug.debug(f"Rejected column {column}: column is full", "rules")
            return MoveOutcome.rejected(MoveRejection.COLUMN_FULL, column)

        side = self.side_to_move
        self.state = EngineState.EVALUATING
        self.board.place(row, column, side)
        self.last_move = (row, column)
        self.moves_made.append(column)

        with debug.timer("win_check", "rules"):
            run = check_win(self.board, row, column, side)

        if run is not None:
            # A win on the last cell is never reported as a draw
            self.state = EngineState.WON
            self.winner = side
            self.winning_run = run
            debug.info(f"{side.name} wins with {list(run)}", "rules")
            transition = GameEvent.game_won(side, run, self.generation)
        elif self.board.is_full():
            self.state = EngineState.DRAW
            debug.info("Game ends in a draw", "rules")
            transition = GameEvent.game_draw(self.generation)
        else:
            self.state = EngineState.AWAITING_MOVE
            self.side_to_move = side.other()
            debug.debug(f"Switching to {self.side_to_move.name}", "rules")
            transition = GameEvent.turn_changed(self.side_to_move, self.generation)

        self._emit(GameEvent.disc_placed(row, column, side, self.generation))
        self._emit(transition)

        return MoveOutcome(accepted=True, row=row, column=column, side=side, result=self.result)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self.listeners):
            listener(event)

    def render(self) -> str:
        return self.board.render()
