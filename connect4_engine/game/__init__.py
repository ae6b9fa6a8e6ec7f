"""
connect4_engine.game - Core game mechanics for Connect Four

This package contains the board representation, win detection, the turn
state machine and the notifications it emits.
"""

from connect4_engine.game.board import Board
from connect4_engine.game.events import EventType, GameEvent
from connect4_engine.game.rules import EngineState, MoveOutcome, MoveRejection, RuleEngine
from connect4_engine.game.win_detector import WinningRun, check_win

__all__ = ['Board', 'EventType', 'GameEvent', 'EngineState', 'MoveOutcome',
           'MoveRejection', 'RuleEngine', 'WinningRun', 'check_win']
