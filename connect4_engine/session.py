"""
session.py - Game session orchestration for Connect Four

The GameSession is the object a presentation layer talks to. It owns the
current RuleEngine, the game mode and a generation counter, relays engine
notifications to subscribed listeners, and hands the turn to the automated
opponent in human-versus-opponent games.

The opponent's move is delayed to simulate thinking. While it is pending the
session rejects human moves instead of queueing them, so at most one mutation
of the board is ever outstanding. Each scheduled opponent turn is stamped with
the generation it was issued for; a reset or mode switch bumps the generation
and cancels the pending call, and a call that fires anyway is discarded.
"""

import random
import threading
from enum import Enum
from typing import List, Optional, Tuple

from connect4_engine.ai.opponent import OpponentPolicy
from connect4_engine.debug import debug
from connect4_engine.game.board import Board
from connect4_engine.game.events import EventType, GameEvent, Listener
from connect4_engine.game.rules import MoveOutcome, MoveRejection, RuleEngine
from connect4_engine.scheduling import ScheduledHandle, Scheduler, ThreadingScheduler
from connect4_engine.utils import DEFAULT_THINK_DELAY, GameResult, Player


class GameMode(Enum):
    HUMAN_VS_HUMAN = "hvh"
    HUMAN_VS_OPPONENT = "hvo"


HUMAN_SIDE = Player.ONE
OPPONENT_SIDE = Player.TWO


class GameSession:
    """Container for the active game, its mode and its automated opponent."""

    def __init__(self, mode: GameMode = GameMode.HUMAN_VS_OPPONENT,
                 policy: Optional[OpponentPolicy] = None,
                 scheduler: Optional[Scheduler] = None,
                 think_delay: Tuple[float, float] = DEFAULT_THINK_DELAY):
        """
        Initialize the session and start the first game.

        Args:
            mode: Two humans, or a human (ONE) against the opponent (TWO)
            policy: Opponent move selection, a fresh OpponentPolicy by default
            scheduler: Clock for the delayed opponent turn, threading timers by default
            think_delay: (low, high) seconds the opponent waits before moving
        """
        low, high = think_delay
        if low < 0 or high < low:
            raise ValueError(f"Invalid think delay range {think_delay}")

        self.policy = policy or OpponentPolicy()
        self.scheduler = scheduler or ThreadingScheduler()
        self.think_delay = (float(low), float(high))
        self.listeners: List[Listener] = []
        self.lock = threading.RLock()

        self.mode = mode
        self.generation = 0
        self.engine = RuleEngine(listeners=[self._emit], generation=self.generation)
        self.opponent_thinking = False
        self._pending: Optional[ScheduledHandle] = None

    # ---- listeners ----

    def subscribe(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self.listeners):
            listener(event)

    # ---- read-only views ----

    @property
    def board(self) -> Board:
        return self.engine.board

    @property
    def side_to_move(self) -> Player:
        return self.engine.side_to_move

    @property
    def result(self) -> GameResult:
        return self.engine.result

    def is_opponent_side(self, side: Player) -> bool:
        return self.mode == GameMode.HUMAN_VS_OPPONENT and side == OPPONENT_SIDE

    def player_name(self, side: Player) -> str:
        """Display name used by status lines."""
        if self.is_opponent_side(side):
            return "AI"
        return f"Player {side.value}"

    # ---- lifecycle ----

    def new_game(self, mode: Optional[GameMode] = None) -> None:
        """Discard the current game, and any pending opponent turn, and start over."""
        with self.lock:
            self._cancel_pending()
            if mode is not None:
                self.mode = mode
            self.generation += 1
            self.engine = RuleEngine(listeners=[self._emit], generation=self.generation)
            debug.info(f"New game #{self.generation} ({self.mode.name})", "session")
            self._emit(GameEvent.turn_changed(self.engine.side_to_move, self.generation))

    def set_mode(self, mode: GameMode) -> bool:
        """Switch modes, which always starts a new game. Returns False if already in ``mode``."""
        with self.lock:
            if mode == self.mode:
                return False
            self.new_game(mode)
            return True

    def close(self) -> None:
        """Cancel any pending opponent turn."""
        with self.lock:
            self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
            debug.debug(f"Cancelled opponent turn for game #{self.generation}", "session")
        if self.opponent_thinking:
            self.opponent_thinking = False
            self._emit(GameEvent(EventType.OPPONENT_THINKING_ENDED, side=OPPONENT_SIDE,
                                 generation=self.generation))

    # ---- moves ----

    def request_move(self, column: int, side: Optional[Player] = None) -> MoveOutcome:
        """
        Drop a disc on behalf of a human.

        Args:
            column: Column index (0-indexed)
            side: Requesting side; defaults to the human side in
                HUMAN_VS_OPPONENT mode and to the side to move otherwise

        Returns:
            The engine's MoveOutcome, or a rejected one with INVALID_STATE if the
            request came from the wrong side, while the opponent was thinking,
            or after the game ended

        Raises:
            Whatever the scheduler raises when the opponent's turn cannot be
            scheduled. The human disc stays on the board and the session is
            not left thinking; a later request retries the scheduling.
        """
        with self.lock:
            if side is None:
                side = HUMAN_SIDE if self.mode == GameMode.HUMAN_VS_OPPONENT else self.side_to_move

            if self.opponent_thinking:
                debug.debug(f"Ignored column {column}: opponent is thinking", "session")
                return MoveOutcome.rejected(MoveRejection.INVALID_STATE, column)
            if self.engine.is_game_over():
                debug.debug(f"Ignored column {column}: game is over", "session")
                return MoveOutcome.rejected(MoveRejection.INVALID_STATE, column)
            if side != self.side_to_move or self.is_opponent_side(side):
                debug.debug(f"Ignored column {column}: not {side.name}'s turn", "session")
                if self._opponent_to_move() and self._pending is None:
                    # An earlier schedule() failed; try again
                    self._schedule_opponent_turn()
                return MoveOutcome.rejected(MoveRejection.INVALID_STATE, column)

            outcome = self.engine.apply_move(column)
            if outcome and self._opponent_to_move():
                self._schedule_opponent_turn()
            return outcome

    def _opponent_to_move(self) -> bool:
        return not self.engine.is_game_over() and self.is_opponent_side(self.side_to_move)

    def _schedule_opponent_turn(self) -> None:
        delay = random.uniform(*self.think_delay)
        generation = self.generation
        try:
            self._pending = self.scheduler.schedule(
                delay, lambda: self._run_opponent_turn(generation))
        except Exception as e:
            debug.error(f"Could not schedule opponent turn for game #{generation}: {e}", "session")
            raise
        # Timer callbacks wait on self.lock, so the flag is set before any can run
        self.opponent_thinking = True
        self._emit(GameEvent(EventType.OPPONENT_THINKING_STARTED, side=OPPONENT_SIDE,
                             generation=generation))
        debug.debug(f"Opponent moves in {delay:.3f}s (game #{generation})", "session")

    def _run_opponent_turn(self, generation: int) -> MoveOutcome:
        with self.lock:
            if generation != self.generation or not self.opponent_thinking:
                debug.debug(f"Discarded stale opponent turn for game #{generation}", "session")
                return MoveOutcome.rejected(MoveRejection.SESSION_STALE)

            self._pending = None
            self.opponent_thinking = False
            self._emit(GameEvent(EventType.OPPONENT_THINKING_ENDED, side=OPPONENT_SIDE,
                                 generation=generation))

            if not self._opponent_to_move():
                return MoveOutcome.rejected(MoveRejection.INVALID_STATE)

            column = self.policy.choose_column(self.board, OPPONENT_SIDE, HUMAN_SIDE)
            return self.engine.apply_move(column)
