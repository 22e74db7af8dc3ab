"""Logical timers for playback and debounced history.

Everything in graphtrace runs on one thread. Timers are callbacks owned by a
Scheduler; a cancelled timer never fires.
"""

import abc
import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class TimerHandle(abc.ABC):
    @abc.abstractmethod
    def cancel(self) -> None:
        ...


class Scheduler(abc.ABC):
    """Base class for timer sources."""

    @abc.abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        ...


@dataclass(eq=False)
class _VirtualTimer(TimerHandle):
    due_ms: float
    callback: Callable[[], None]
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock(Scheduler):
    """Deterministic scheduler whose time only moves when ``advance`` is called."""

    def __init__(self) -> None:
        self.now_ms: float = 0.0
        self._queue: list[tuple[float, int, _VirtualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _VirtualTimer(due_ms=self.now_ms + max(delay_ms, 0.0), callback=callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, ms: float) -> int:
        """Move time forward, firing due timers in order. Returns the number fired.

        Timers scheduled by a callback are fired in the same call if they fall
        inside the window.
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = due
            fired += 1
            timer.callback()
        self.now_ms = target
        return fired

    def run_until_idle(self, limit: int = 10_000) -> int:
        """Fire every pending timer, including ones scheduled along the way."""
        fired = 0
        while fired < limit:
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                break
            fired += self.advance(min(entry[0] for entry in live) - self.now_ms)
        return fired


class AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return AsyncioTimer(self.loop.call_later(delay_ms / 1000.0, callback))
