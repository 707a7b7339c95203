"""
Trace events for the phase loop.

The scheduler can narrate what it is doing (tick and phase boundaries,
priority flushes, each invocation) to any number of registered hooks.
Hooks are a side channel: they observe the run, they never steer it.

Example:
    >>> from phaseloop import PhaseLoopScheduler, TraceRecorder
    >>> recorder = TraceRecorder()
    >>> scheduler = PhaseLoopScheduler(hooks=[recorder])
    >>> scheduler.queue_timer(lambda: None)
    >>> scheduler.tick()
    >>> [e.kind for e in recorder.events_of_kind("invoke")]
    ['invoke']
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Protocol, runtime_checkable

from .queue_ids import queue_name

# Event kinds
EVENT_TICK_STARTED = "tick_started"
EVENT_TICK_COMPLETED = "tick_completed"
EVENT_PHASE_STARTED = "phase_started"
EVENT_PHASE_COMPLETED = "phase_completed"
EVENT_FLUSH_STARTED = "flush_started"
EVENT_FLUSH_COMPLETED = "flush_completed"
EVENT_DRAIN_STARTED = "drain_started"  # One priority queue inside a flush
EVENT_DRAIN_COMPLETED = "drain_completed"
EVENT_INVOKE = "invoke"

EVENT_KINDS = (
    EVENT_TICK_STARTED,
    EVENT_TICK_COMPLETED,
    EVENT_PHASE_STARTED,
    EVENT_PHASE_COMPLETED,
    EVENT_FLUSH_STARTED,
    EVENT_FLUSH_COMPLETED,
    EVENT_DRAIN_STARTED,
    EVENT_DRAIN_COMPLETED,
    EVENT_INVOKE,
)


@dataclass(frozen=True)
class TraceEvent:
    """
    One scheduler trace event.

    Attributes:
        kind: One of the EVENT_* constants
        tick: Number of the tick in progress (1-based), 0 outside any tick
        queue_id: Queue the event concerns, None for tick-level events
        sequence: Enqueue sequence number of the invoked item (invoke only)
        message: Human-readable narration
    """

    kind: str
    tick: int
    queue_id: Optional[int] = None
    sequence: Optional[int] = None
    message: str = ""

    @property
    def queue(self) -> Optional[str]:
        """Display name of the queue, if any."""
        if self.queue_id is None:
            return None
        return queue_name(self.queue_id)

    def format(self) -> str:
        """Render as ``[<queue>] <message>``, using "event loop" for tick events."""
        label = self.queue if self.queue is not None else "event loop"
        return f"[{label}] {self.message}"


@runtime_checkable
class TraceHook(Protocol):
    """
    Protocol for trace consumers.

    Example:
        >>> class PrintHook:
        ...     def on_event(self, event):
        ...         print(event.format())
    """

    def on_event(self, event: TraceEvent) -> None:
        """Receive one trace event."""
        ...


class TraceRecorder:
    """
    In-memory trace hook.

    Keeps the most recent ``max_events`` events in arrival order. Useful for
    tests and for order analysis after a run.
    """

    def __init__(self, max_events: int = 10_000):
        if isinstance(max_events, bool) or not isinstance(max_events, int):
            raise ValueError(f"max_events must be an integer, got {max_events!r}")
        if max_events <= 0:
            raise ValueError(f"max_events must be positive, got {max_events}")
        self.max_events = max_events
        self.events: Deque[TraceEvent] = deque(maxlen=max_events)

    def on_event(self, event: TraceEvent) -> None:
        self.events.append(event)

    def events_of_kind(self, kind: str) -> List[TraceEvent]:
        """Get recorded events of one kind, in order."""
        return [e for e in self.events if e.kind == kind]

    def lines(self) -> List[str]:
        """Get the formatted narration of every recorded event."""
        return [e.format() for e in self.events]

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"TraceRecorder(events={len(self.events)}, max_events={self.max_events})"


class LoggingTraceHook:
    """
    Trace hook that narrates events through ``logging``.

    Each event becomes one record such as ``[timers] >> timers phase started``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.level = level

    def on_event(self, event: TraceEvent) -> None:
        if self.logger.isEnabledFor(self.level):
            self.logger.log(self.level, event.format())

    def __repr__(self) -> str:
        return f"LoggingTraceHook(logger={self.logger.name!r}, level={logging.getLevelName(self.level)})"
