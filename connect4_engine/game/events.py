"""
events.py - Notifications emitted to the presentation layer

Each event carries enough data for a UI to update without re-deriving engine
state: where a disc landed, whose turn it is, who won and along which run.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from connect4_engine.game.win_detector import WinningRun
from connect4_engine.utils import Player


class EventType(Enum):
    DISC_PLACED = auto()
    TURN_CHANGED = auto()
    GAME_WON = auto()
    GAME_DRAW = auto()
    OPPONENT_THINKING_STARTED = auto()
    OPPONENT_THINKING_ENDED = auto()


@dataclass(frozen=True)
class GameEvent:
    kind: EventType
    side: Optional[Player] = None
    row: Optional[int] = None
    column: Optional[int] = None
    winning_run: Optional[WinningRun] = None
    generation: int = 0

    @classmethod
    def disc_placed(cls, row: int, column: int, side: Player, generation: int = 0) -> 'GameEvent':
        return cls(EventType.DISC_PLACED, side=side, row=row, column=column, generation=generation)

    @classmethod
    def turn_changed(cls, side: Player, generation: int = 0) -> 'GameEvent':
        return cls(EventType.TURN_CHANGED, side=side, generation=generation)

    @classmethod
    def game_won(cls, side: Player, winning_run: WinningRun, generation: int = 0) -> 'GameEvent':
        return cls(EventType.GAME_WON, side=side, winning_run=winning_run, generation=generation)

    @classmethod
    def game_draw(cls, generation: int = 0) -> 'GameEvent':
        return cls(EventType.GAME_DRAW, generation=generation)


Listener = Callable[[GameEvent], None]
