"""Snapshot-based undo/redo history.

``HistoryStore`` is generic over the snapshot type. Two wrappers connect it to a
mutable model:

- ``with_auto_history`` records one entry per mutation call.
- ``BatchedHistory`` coalesces a burst of rapid calls (e.g. dragging a node
  pixel by pixel) into a single entry, pushed once the calls stop for
  ``debounce_ms``.
"""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from graphtrace.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_DEBOUNCE_MS = 300.0


class HistoryStore(Generic[T]):
    """Two stacks of snapshots.

    ``past[-1]`` is the most recent pre-mutation state and ``future[0]`` the
    next state to redo. Pushing after an undo discards ``future``.
    """

    def __init__(
        self,
        name: str = "HistoryStore",
        are_equal: Callable[[T, T], bool] | None = None,
    ) -> None:
        self.name = name
        self.are_equal = are_equal or (lambda a, b: a == b)
        self.past: list[T] = []
        self.future: list[T] = []

    def push(self, snapshot: T) -> None:
        self.future = []
        if self.past and self.are_equal(snapshot, self.past[-1]):
            logger.debug("%s: skipped duplicate snapshot", self.name)
            return
        self.past = [*self.past, snapshot]
        logger.debug("%s: push (%d past)", self.name, len(self.past))

    def undo(self, current: T, apply: Callable[[T], None]) -> bool:
        if not self.past:
            return False
        previous = self.past[-1]
        self.past = self.past[:-1]
        self.future = [current, *self.future]
        apply(previous)
        logger.debug("%s: undo (%d past, %d future)", self.name, len(self.past), len(self.future))
        return True

    def redo(self, current: T, apply: Callable[[T], None]) -> bool:
        if not self.future:
            return False
        following = self.future[0]
        self.future = self.future[1:]
        self.past = [*self.past, current]
        apply(following)
        logger.debug("%s: redo (%d past, %d future)", self.name, len(self.past), len(self.future))
        return True

    def clear(self) -> None:
        self.past = []
        self.future = []

    def can_undo(self) -> bool:
        return len(self.past) > 0

    def can_redo(self) -> bool:
        return len(self.future) > 0

    def __repr__(self) -> str:
        return f"HistoryStore({self.name}: {len(self.past)} past, {len(self.future)} future)"


def with_auto_history(
    history: HistoryStore[T],
    capture: Callable[[], T],
    mutation: Callable[..., R],
) -> Callable[..., R]:
    """Wrap ``mutation`` so each call that changes state records one entry.

    The pre-mutation snapshot is only pushed when the post-mutation state
    differs, so rejected edits (self loops, unknown ids) leave no entry behind.
    """

    def wrapped(*args, **kwargs) -> R:
        before = capture()
        result = mutation(*args, **kwargs)
        if not history.are_equal(before, capture()):
            history.push(before)
        return result

    wrapped.__name__ = getattr(mutation, "__name__", "wrapped")
    wrapped.__doc__ = getattr(mutation, "__doc__", None)
    return wrapped


class BatchedHistory(Generic[T]):
    """Debounced history wrapper for high-frequency mutations.

    The first call of a burst captures the pre-mutation snapshot. Every call
    restarts the debounce timer; when it fires the snapshot is pushed. If the
    owner is disposed mid-burst the pending snapshot is dropped.
    """

    def __init__(
        self,
        history: HistoryStore[T],
        capture: Callable[[], T],
        scheduler: Scheduler,
        debounce_ms: float = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self.history = history
        self.capture = capture
        self.scheduler = scheduler
        self.debounce_ms = debounce_ms
        self._pending: T | None = None
        self._timer: TimerHandle | None = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def wrap(self, mutation: Callable[..., R]) -> Callable[..., R]:
        def wrapped(*args, **kwargs) -> R:
            if self._pending is None:
                self._pending = self.capture()
            result = mutation(*args, **kwargs)
            self._restart_timer()
            return result

        wrapped.__name__ = getattr(mutation, "__name__", "wrapped")
        wrapped.__doc__ = getattr(mutation, "__doc__", None)
        return wrapped

    def flush(self) -> None:
        """Push the pending snapshot now instead of waiting for the timer."""
        self._cancel_timer()
        pending, self._pending = self._pending, None
        if pending is None:
            return
        if self.history.are_equal(pending, self.capture()):
            logger.debug("%s: batch left state unchanged", self.history.name)
            return
        self.history.push(pending)

    def dispose(self) -> None:
        self._cancel_timer()
        if self._pending is not None:
            logger.debug("%s: dropped pending batch on dispose", self.history.name)
        self._pending = None

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = self.scheduler.call_later(self.debounce_ms, self.flush)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
