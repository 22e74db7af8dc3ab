"""Trace playback: turns an algorithm trace into seekable highlight steps.

State machine::

    idle --start--> running --last fire--> done --reset--> idle
                       \\---stop/reset--> idle

In auto mode a timer fires every ``speed_ms``; each fire applies one event and
one extra fire after the last event moves to ``done``. In manual mode the
caller moves the cursor with ``step_forward`` / ``step_backward`` /
``jump_to_step`` (or ``play`` to auto-advance).

Highlights only ever get set, never unset, so forward steps apply a single
event while backward steps and jumps replay the trace from the start up to the
new cursor.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from graphtrace.models import EdgeFlags, NodeFlags, TraceEvent, TracePhase
from graphtrace.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_SPEED_MS = 400.0


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class PlaybackMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


@dataclass
class AutoPlayback:
    mode: ClassVar[PlaybackMode] = PlaybackMode.AUTO

    trace: tuple[TraceEvent, ...]
    cursor: int = -1

    @property
    def last_index(self) -> int:
        return len(self.trace) - 1


@dataclass
class ManualPlayback:
    """Manual runs carry their own step state; auto runs never have it."""
    mode: ClassVar[PlaybackMode] = PlaybackMode.MANUAL

    trace: tuple[TraceEvent, ...]
    cursor: int = -1
    auto_playing: bool = False

    @property
    def last_index(self) -> int:
        return len(self.trace) - 1

    @property
    def is_complete(self) -> bool:
        return self.cursor == self.last_index


Playback = AutoPlayback | ManualPlayback


@dataclass(frozen=True)
class Markers:
    """Transient start/end selection shown while a run is in progress."""
    start_id: int | None = None
    end_id: int | None = None


@dataclass
class TraceHighlights:
    nodes: dict[int, NodeFlags] = field(default_factory=dict)
    edges: dict[tuple[int, int], EdgeFlags] = field(default_factory=dict)

    def apply(
        self,
        event: TraceEvent,
        is_undirected: Callable[[int, int], bool] | None = None,
    ) -> None:
        """Set the flags for one event. Root events only mark their node."""
        ref = event.edge
        node = self.nodes.setdefault(ref.to_id, NodeFlags())
        if event.phase == TracePhase.VISIT:
            node.visited = True
        else:
            node.in_shortest_path = True

        if ref.is_root:
            return

        keys = [(ref.from_id, ref.to_id)]
        if is_undirected is not None and is_undirected(ref.from_id, ref.to_id):
            keys.append((ref.to_id, ref.from_id))
        for key in keys:
            flags = self.edges.setdefault(key, EdgeFlags())
            if event.phase == TracePhase.VISIT:
                flags.used_in_traversal = True
            else:
                flags.used_in_shortest_path = True

    def clear(self) -> None:
        self.nodes = {}
        self.edges = {}

    def node(self, node_id: int) -> NodeFlags:
        return self.nodes.get(node_id, NodeFlags())

    def edge(self, from_id: int, to_id: int) -> EdgeFlags:
        return self.edges.get((from_id, to_id), EdgeFlags())

    def visited_nodes(self) -> list[int]:
        return [nid for nid, flags in self.nodes.items() if flags.visited]

    def path_nodes(self) -> list[int]:
        return [nid for nid, flags in self.nodes.items() if flags.in_shortest_path]


class StepPlayer:
    """Plays a trace onto ``highlights`` under auto or manual control."""

    def __init__(
        self,
        scheduler: Scheduler,
        speed_ms: float = DEFAULT_SPEED_MS,
        is_undirected: Callable[[int, int], bool] | None = None,
        on_step: Callable[[TraceEvent, int], None] | None = None,
        on_done: Callable[[], None] | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.speed_ms = speed_ms
        self.is_undirected = is_undirected
        self.on_step = on_step
        self.on_done = on_done

        self.status = PlaybackStatus.IDLE
        self.playback: Playback | None = None
        self.highlights = TraceHighlights()
        self.markers = Markers()
        self._timer: TimerHandle | None = None

    # --- Read-only views ---

    @property
    def mode(self) -> PlaybackMode | None:
        return self.playback.mode if self.playback else None

    @property
    def cursor(self) -> int:
        return self.playback.cursor if self.playback else -1

    @property
    def trace(self) -> tuple[TraceEvent, ...]:
        return self.playback.trace if self.playback else ()

    @property
    def is_running(self) -> bool:
        return self.status == PlaybackStatus.RUNNING

    @property
    def is_complete(self) -> bool:
        return isinstance(self.playback, ManualPlayback) and self.playback.is_complete

    @property
    def is_auto_playing(self) -> bool:
        if not self.is_running:
            return False
        if isinstance(self.playback, ManualPlayback):
            return self.playback.auto_playing
        return True

    # --- Control surface ---

    def start(
        self,
        trace: Iterable[TraceEvent],
        speed_ms: float | None = None,
        mode: PlaybackMode = PlaybackMode.AUTO,
        markers: Markers | None = None,
    ) -> None:
        self._cancel_timer()
        if speed_ms is not None:
            self.set_speed(speed_ms)
        events = tuple(trace)
        mode = PlaybackMode(mode)

        self.highlights.clear()
        self.markers = markers or Markers()
        self.status = PlaybackStatus.RUNNING
        if mode == PlaybackMode.AUTO:
            self.playback = AutoPlayback(trace=events)
            self._schedule()
        else:
            self.playback = ManualPlayback(trace=events)
        logger.debug("Playback started: %s, %d events, %.0f ms", mode.value, len(events), self.speed_ms)

    def stop(self) -> None:
        """Cancel the run. Highlights already applied stay in place."""
        self._cancel_timer()
        if self.status == PlaybackStatus.RUNNING:
            logger.debug("Playback stopped at cursor %d", self.cursor)
        self.status = PlaybackStatus.IDLE
        self.playback = None
        self.markers = Markers()

    def reset(self) -> None:
        self._cancel_timer()
        self.status = PlaybackStatus.IDLE
        self.playback = None
        self.highlights.clear()
        self.markers = Markers()

    def set_speed(self, speed_ms: float) -> None:
        if speed_ms <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed_ms}")
        self.speed_ms = speed_ms

    def step_forward(self) -> TraceEvent | None:
        run = self._manual_run()
        if run is None or run.cursor >= run.last_index:
            return None
        run.cursor += 1
        event = run.trace[run.cursor]
        self._apply(event, run.cursor)
        return event

    def step_backward(self) -> TraceEvent | None:
        run = self._manual_run()
        if run is None or run.cursor < 0:
            return None
        self._seek(run, run.cursor - 1)
        return run.trace[run.cursor] if run.cursor >= 0 else None

    def jump_to_step(self, index: int) -> None:
        run = self._manual_run()
        if run is None:
            return
        self._seek(run, max(-1, min(index, run.last_index)))

    def play(self) -> None:
        """Auto-advance a manual run until it completes."""
        run = self._manual_run()
        if run is None or run.is_complete or run.auto_playing:
            return
        run.auto_playing = True
        self._schedule()

    def pause(self) -> None:
        run = self._manual_run()
        if run is None:
            return
        run.auto_playing = False
        self._cancel_timer()

    # --- Internals ---

    def _manual_run(self) -> ManualPlayback | None:
        if self.status != PlaybackStatus.RUNNING or not isinstance(self.playback, ManualPlayback):
            return None
        return self.playback

    def _seek(self, run: ManualPlayback, index: int) -> None:
        self.highlights.clear()
        run.cursor = index
        for event in run.trace[: index + 1]:
            self.highlights.apply(event, self.is_undirected)

    def _apply(self, event: TraceEvent, index: int) -> None:
        self.highlights.apply(event, self.is_undirected)
        if self.on_step is not None:
            self.on_step(event, index)

    def _schedule(self) -> None:
        self._timer = self.scheduler.call_later(self.speed_ms, self._tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _tick(self) -> None:
        self._timer = None
        run = self.playback
        if self.status != PlaybackStatus.RUNNING or run is None:
            return

        if isinstance(run, ManualPlayback):
            if not run.auto_playing:
                return
            if self.step_forward() is None or run.is_complete:
                run.auto_playing = False
            else:
                self._schedule()
            return

        if run.cursor < run.last_index:
            run.cursor += 1
            self._apply(run.trace[run.cursor], run.cursor)
            self._schedule()
        else:
            self._finish()

    def _finish(self) -> None:
        self.status = PlaybackStatus.DONE
        self.markers = Markers()
        logger.debug("Playback done after %d events", len(self.trace))
        if self.on_done is not None:
            self.on_done()
