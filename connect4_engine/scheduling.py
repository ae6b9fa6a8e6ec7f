"""
scheduling.py - Cancellable delayed calls for the opponent's "thinking" pause

A scheduler runs a callback once after a delay and hands back a handle with a
``cancel()`` method. The session does not care which clock drives it: a
threading timer, an asyncio loop, or a host that pumps pending calls itself.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from connect4_engine.debug import debug


class ScheduledHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        ...


def _check_delay(delay: float) -> None:
    if delay < 0:
        raise ValueError(f"Delay must be non-negative, got {delay}")


@dataclass(eq=False)
class ScheduledCall:
    """A pending call recorded by ManualScheduler."""

    delay: float
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False
    owner: Optional["ManualScheduler"] = field(default=None, repr=False)

    def cancel(self) -> None:
        self.cancelled = True
        self._release()

    def fire(self) -> bool:
        """Run the callback unless it was cancelled or already ran."""
        if self.cancelled or self.fired:
            return False
        self.fired = True
        self._release()
        self.callback()
        return True

    def _release(self) -> None:
        if self.owner is not None:
            self.owner.discard(self)
            self.owner = None


class ManualScheduler:
    """
    Records delayed calls and runs them only when the host asks.

    Used by the terminal interface, which sleeps for the thinking delay itself,
    and by tests that need full control over when the opponent moves. Calls
    leave ``calls`` as soon as they fire or are cancelled.
    """

    def __init__(self):
        self.calls: List[ScheduledCall] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        _check_delay(delay)
        call = ScheduledCall(delay, callback, owner=self)
        self.calls.append(call)
        return call

    def discard(self, call: ScheduledCall) -> None:
        if call in self.calls:
            self.calls.remove(call)

    @property
    def pending(self) -> List[ScheduledCall]:
        return list(self.calls)

    def next_delay(self) -> Optional[float]:
        """Longest delay among pending calls, or None when nothing is pending."""
        pending = self.pending
        return max(c.delay for c in pending) if pending else None

    def run_pending(self) -> int:
        """Fire every pending call in scheduling order, including ones scheduled meanwhile."""
        fired = 0
        while True:
            pending = self.pending
            if not pending:
                return fired
            for call in pending:
                if call.fire():
                    fired += 1


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        _check_delay(delay)
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        debug.trace(f"Started timer for {delay:.3f}s", "session")
        return timer


class AsyncioScheduler:
    """Runs callbacks on an asyncio event loop with ``call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        _check_delay(delay)
        loop = self.loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
