"""Tests for GameSession orchestration and the delayed opponent turn."""

import asyncio
import threading

import numpy as np
import pytest

from connect4_engine.ai.opponent import OpponentPolicy
from connect4_engine.game.events import EventType
from connect4_engine.game.rules import MoveRejection
from connect4_engine.scheduling import AsyncioScheduler, ManualScheduler, ThreadingScheduler
from connect4_engine.session import GameMode, GameSession
from connect4_engine.utils import GameResult, Player


class ScriptedPolicy:
    """Stand-in opponent that plays a fixed list of columns."""

    def __init__(self, columns):
        self.columns = list(columns)

    def choose_column(self, board, side, opponent_side=None, available_columns=None):
        return self.columns.pop(0)


def make_session(mode=GameMode.HUMAN_VS_OPPONENT, policy=None):
    scheduler = ManualScheduler()
    session = GameSession(mode=mode, policy=policy or OpponentPolicy(seed=0),
                          scheduler=scheduler, think_delay=(0.0, 0.0))
    events = []
    session.subscribe(events.append)
    return session, scheduler, events


def kinds(events):
    return [e.kind for e in events]


def test_human_move_schedules_one_opponent_turn():
    session, scheduler, events = make_session()

    assert session.request_move(3)

    assert kinds(events) == [EventType.DISC_PLACED, EventType.TURN_CHANGED,
                             EventType.OPPONENT_THINKING_STARTED]
    assert session.opponent_thinking
    assert len(scheduler.pending) == 1

    events.clear()
    assert scheduler.run_pending() == 1

    assert kinds(events) == [EventType.OPPONENT_THINKING_ENDED, EventType.DISC_PLACED,
                             EventType.TURN_CHANGED]
    assert events[1].side == Player.TWO
    assert events[2].side == Player.ONE
    assert not session.opponent_thinking
    assert session.board.disc_count == 2
    assert scheduler.pending == []


def test_moves_rejected_while_opponent_thinks():
    session, scheduler, events = make_session()
    session.request_move(3)
    events.clear()
    before = session.board.get_state()

    outcome = session.request_move(4)

    assert not outcome
    assert outcome.rejection == MoveRejection.INVALID_STATE
    assert events == []
    assert np.array_equal(session.board.get_state(), before)
    assert len(scheduler.pending) == 1


def test_wrong_side_request_is_ignored():
    session, scheduler, events = make_session(mode=GameMode.HUMAN_VS_HUMAN)

    outcome = session.request_move(0, Player.TWO)

    assert not outcome
    assert events == []
    assert session.board.disc_count == 0
    assert session.side_to_move == Player.ONE


def test_human_cannot_move_for_the_opponent():
    session, scheduler, events = make_session()
    session.request_move(2)
    scheduler.run_pending()
    events.clear()

    assert not session.request_move(1, Player.TWO)
    assert events == []


def test_human_vs_human_alternates_without_opponent():
    session, scheduler, events = make_session(mode=GameMode.HUMAN_VS_HUMAN)
    assert session.request_move(3)
    assert session.request_move(3)
    assert session.side_to_move == Player.ONE
    assert scheduler.calls == []
    assert EventType.OPPONENT_THINKING_STARTED not in kinds(events)


def test_finished_game_rejects_requests():
    session, scheduler, events = make_session(mode=GameMode.HUMAN_VS_HUMAN)
    for column in (0, 1, 0, 1, 0, 1, 0):
        session.request_move(column)
    assert session.result == GameResult.WIN
    events.clear()

    assert not session.request_move(5)
    assert events == []


def test_human_win_does_not_schedule_opponent():
    session, scheduler, events = make_session(policy=ScriptedPolicy([1, 1, 1]))
    for column in (0, 0, 0):
        session.request_move(column)
        scheduler.run_pending()
    session.request_move(0)

    assert session.result == GameResult.WIN
    assert scheduler.pending == []
    assert not session.opponent_thinking
    assert events[-1].kind == EventType.GAME_WON
    assert events[-1].side == Player.ONE


def test_opponent_blocks_through_session():
    session, scheduler, events = make_session(policy=ScriptedPolicy([0, 1]))
    for column in (3, 4):
        session.request_move(column)
        scheduler.run_pending()
    # ONE holds (5,3) and (5,4); after (5,5) the policy blocks the lowest threat column
    session.policy = OpponentPolicy(seed=0)
    session.request_move(5)
    scheduler.run_pending()
    assert session.board.cell(5, 2) == Player.TWO


def test_reset_cancels_pending_opponent_turn():
    session, scheduler, events = make_session()
    session.request_move(3)
    call = scheduler.pending[0]

    session.new_game()

    assert call.cancelled
    assert not session.opponent_thinking
    assert session.board.disc_count == 0
    assert session.generation == 1
    assert kinds(events)[-2:] == [EventType.OPPONENT_THINKING_ENDED, EventType.TURN_CHANGED]


def test_stale_opponent_turn_is_discarded():
    session, scheduler, events = make_session()
    session.request_move(3)
    stale = scheduler.pending[0]
    session.new_game()
    session.request_move(2)
    assert session.opponent_thinking

    # Fire the old call even though it was cancelled
    outcome = stale.callback()

    assert outcome.rejection == MoveRejection.SESSION_STALE
    assert session.board.disc_count == 1
    assert session.opponent_thinking

    scheduler.run_pending()
    assert session.board.disc_count == 2


def test_set_mode_starts_new_game_only_on_change():
    session, scheduler, events = make_session(mode=GameMode.HUMAN_VS_HUMAN)
    session.request_move(0)
    engine = session.engine

    assert not session.set_mode(GameMode.HUMAN_VS_HUMAN)
    assert session.engine is engine

    assert session.set_mode(GameMode.HUMAN_VS_OPPONENT)
    assert session.engine is not engine
    assert session.mode == GameMode.HUMAN_VS_OPPONENT
    assert session.board.disc_count == 0


def test_player_names():
    session, _, _ = make_session()
    assert session.player_name(Player.ONE) == "Player 1"
    assert session.player_name(Player.TWO) == "AI"
    session.set_mode(GameMode.HUMAN_VS_HUMAN)
    assert session.player_name(Player.TWO) == "Player 2"


def test_invalid_think_delay_rejected():
    with pytest.raises(ValueError):
        GameSession(scheduler=ManualScheduler(), think_delay=(1.0, 0.5))
    with pytest.raises(ValueError):
        GameSession(scheduler=ManualScheduler(), think_delay=(-0.1, 0.5))


def test_threading_scheduler_runs_opponent_turn():
    session = GameSession(policy=OpponentPolicy(seed=0), scheduler=ThreadingScheduler(),
                          think_delay=(0.0, 0.01))
    opponent_moved = threading.Event()
    session.subscribe(lambda e: e.kind == EventType.DISC_PLACED and e.side == Player.TWO
                      and opponent_moved.set())

    session.request_move(3)

    assert opponent_moved.wait(timeout=5)
    assert session.board.disc_count == 2
    assert not session.opponent_thinking
    session.close()


def test_asyncio_scheduler_runs_opponent_turn():
    async def play():
        session = GameSession(policy=OpponentPolicy(seed=0), scheduler=AsyncioScheduler(),
                              think_delay=(0.0, 0.0))
        session.request_move(3)
        assert session.opponent_thinking
        await asyncio.sleep(0.05)
        return session

    session = asyncio.run(play())
    assert session.board.disc_count == 2
    assert session.side_to_move == Player.ONE


class BrokenScheduler:
    """Scheduler whose clock is unavailable."""

    def schedule(self, delay, callback):
        raise RuntimeError("no clock available")


def test_failed_scheduling_does_not_leave_session_thinking():
    session = GameSession(policy=OpponentPolicy(seed=0), scheduler=BrokenScheduler(),
                          think_delay=(0.0, 0.0))
    events = []
    session.subscribe(events.append)

    with pytest.raises(RuntimeError):
        session.request_move(3)

    assert session.board.disc_count == 1
    assert session.side_to_move == Player.TWO
    assert not session.opponent_thinking
    assert EventType.OPPONENT_THINKING_STARTED not in kinds(events)

    # Once a working clock is in place the next request hands the turn over again
    scheduler = ManualScheduler()
    session.scheduler = scheduler
    outcome = session.request_move(4)
    assert outcome.rejection == MoveRejection.INVALID_STATE
    assert session.opponent_thinking
    assert scheduler.run_pending() == 1
    assert session.board.disc_count == 2
    assert session.side_to_move == Player.ONE
    assert session.request_move(4)


def test_asyncio_scheduler_outside_a_loop_raises_cleanly():
    session = GameSession(policy=OpponentPolicy(seed=0), scheduler=AsyncioScheduler(),
                          think_delay=(0.0, 0.0))

    with pytest.raises(RuntimeError):
        session.request_move(3)

    assert not session.opponent_thinking
    session.new_game()
    assert session.board.disc_count == 0
    assert session.side_to_move == Player.ONE


def test_set_mode_cancels_pending_opponent_turn():
    session, scheduler, events = make_session()
    session.request_move(3)
    call = scheduler.pending[0]

    assert session.set_mode(GameMode.HUMAN_VS_HUMAN)

    assert call.cancelled
    assert scheduler.pending == []
    assert not session.opponent_thinking
    assert session.board.disc_count == 0
    assert kinds(events)[-2:] == [EventType.OPPONENT_THINKING_ENDED, EventType.TURN_CHANGED]

    # The cancelled turn never reaches the new game
    assert call.fire() is False
    assert session.board.disc_count == 0
