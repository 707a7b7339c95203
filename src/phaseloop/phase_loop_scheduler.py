"""
Phase loop scheduler.

Cooperative, single-threaded scheduler that drains six phase queues in a
fixed order and interleaves two priority queues before every phase and after
every single phase callback.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from .loop_config import LoopConfig
from .queue_ids import (
    ALL_QUEUES,
    PHASE_ORDER,
    QUEUE_CHECK,
    QUEUE_CLOSING,
    QUEUE_IDLE_PREPARE,
    QUEUE_PENDING,
    QUEUE_POLL,
    QUEUE_PRIORITY_DEFERRED,
    QUEUE_PRIORITY_IMMEDIATE,
    QUEUE_TIMERS,
    queue_name,
    resolve_queue,
)
from .trace import (
    EVENT_DRAIN_COMPLETED,
    EVENT_DRAIN_STARTED,
    EVENT_FLUSH_COMPLETED,
    EVENT_FLUSH_STARTED,
    EVENT_INVOKE,
    EVENT_PHASE_COMPLETED,
    EVENT_PHASE_STARTED,
    EVENT_TICK_COMPLETED,
    EVENT_TICK_STARTED,
    LoggingTraceHook,
    TraceEvent,
    TraceHook,
    TraceRecorder,
)
from .work_queue import WorkItem, WorkQueue

logger = logging.getLogger(__name__)


class PhaseLoopScheduler:
    """
    Phase loop scheduler.

    Owns eight FIFO queues and advances them one tick at a time.

    Architecture:
        - priority-immediate: drained to empty first in every priority flush
        - priority-deferred: drained to empty once priority-immediate is empty
        - timers, pending, idle-prepare, poll, check, closing: the six phases

    Tick protocol (for each phase, in the order above):
        1. Priority flush
        2. While the phase queue is non-empty: invoke its head, then flush
        3. Move on to the next phase

    A priority flush drains priority-immediate to empty (including items it
    adds to itself), then priority-deferred to empty. Items that
    priority-deferred callbacks add to priority-immediate wait for the next
    flush.

    Work items that raise are not caught: the exception leaves ``tick()``
    and the rest of that tick is abandoned.

    Example:
        >>> scheduler = PhaseLoopScheduler()
        >>> order = []
        >>> def a():
        ...     order.append("A")
        ...     scheduler.queue_priority_deferred(lambda: order.append("C"))
        >>> scheduler.queue_timer(a)
        >>> scheduler.queue_timer(lambda: order.append("B"))
        >>> scheduler.tick()
        >>> order
        ['A', 'C', 'B']
    """

    def __init__(
        self,
        config: Optional[LoopConfig] = None,
        hooks: Optional[Iterable[TraceHook]] = None,
    ):
        """
        Initialize scheduler with eight empty queues.

        Args:
            config: Scheduler configuration (defaults when None)
            hooks: Trace hooks to register up front
        """
        self.cfg = config if config is not None else LoopConfig()
        self.queues: Dict[int, WorkQueue] = {
            queue_id: WorkQueue(queue_name(queue_id)) for queue_id in ALL_QUEUES
        }

        self.tick_count = 0
        self.invocation_count = 0
        self._next_sequence = 0
        self._in_tick = False
        self._active_queue: Optional[int] = None

        self.hooks: List[TraceHook] = []
        self.recorder: Optional[TraceRecorder] = None
        if self.cfg.trace_enabled:
            self.recorder = TraceRecorder(max_events=self.cfg.max_trace_events)
            self.add_hook(self.recorder)
        if self.cfg.log_trace:
            self.add_hook(LoggingTraceHook(level=self.cfg.log_level))
        for hook in hooks or ():
            self.add_hook(hook)

    # === Enqueue ===

    def enqueue(self, queue: Union[int, str], item: WorkItem) -> None:
        """
        Append a work item to the end of a queue.

        Args:
            queue: Queue id (QUEUE_* constant) or queue name
            item: Zero-argument callable

        Raises:
            ValueError: If the queue is unknown
            TypeError: If item is not callable
        """
        queue_id = resolve_queue(queue)
        self.queues[queue_id].enqueue(item, self._next_sequence)
        self._next_sequence += 1

    def queue_priority_immediate(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_PRIORITY_IMMEDIATE, item)

    def queue_priority_deferred(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_PRIORITY_DEFERRED, item)

    def queue_timer(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_TIMERS, item)

    def queue_pending(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_PENDING, item)

    def queue_idle_prepare(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_IDLE_PREPARE, item)

    def queue_poll(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_POLL, item)

    def queue_check(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_CHECK, item)

    def queue_closing(self, item: WorkItem) -> None:
        self.enqueue(QUEUE_CLOSING, item)

    # === Tick ===

    def tick(self) -> None:
        """
        Advance the loop by one round.

        Runs every phase exactly once, in order: timers, pending,
        idle-prepare, poll, check, closing. Each phase starts with a priority
        flush, so priority items queued between ticks run first.

        Raises:
            RuntimeError: If called from inside a work item or hook
            Exception: Whatever a work item raised, unchanged
        """
        if self._in_tick:
            raise RuntimeError("tick() cannot be called while a tick is in progress")

        tick_number = self.tick_count + 1
        logger.debug("tick %d started", tick_number)
        self._in_tick = True

        try:
            self._emit(EVENT_TICK_STARTED, message="Starting tick")
            for phase_id in PHASE_ORDER:
                self._run_phase(phase_id)
        except Exception:
            logger.debug(
                "tick %d aborted by work item raised from %s queue",
                tick_number,
                queue_name(self._active_queue) if self._active_queue is not None else "unknown",
            )
            raise
        finally:
            self._active_queue = None
            self._in_tick = False

        self.tick_count = tick_number
        self._emit(EVENT_TICK_COMPLETED, tick=tick_number, message="Tick finished")
        logger.debug("tick %d completed (%d invocations so far)", tick_number, self.invocation_count)

    def run(self, ticks: int) -> None:
        """
        Run several ticks back to back.

        Args:
            ticks: Number of ticks to run (positive)

        Raises:
            ValueError: If ticks is not a positive integer
        """
        if isinstance(ticks, bool) or not isinstance(ticks, int) or ticks <= 0:
            raise ValueError(f"ticks must be a positive integer, got {ticks!r}")

        for _ in range(ticks):
            self.tick()

    def _run_phase(self, phase_id: int) -> None:
        """
        Run one phase: flush, then invoke each phase item followed by a flush.

        The phase_started event is emitted before the initial flush, so every
        flush belonging to this phase falls between its started and completed
        events.

        The phase queue length is re-checked on every iteration, so items a
        phase callback adds to its own phase run in this same call.
        """
        phase = self.queues[phase_id]
        name = phase.name

        self._emit(EVENT_PHASE_STARTED, queue_id=phase_id, message=f">> {name} phase started")
        self._flush_priority()
        while not phase.is_empty():
            self._invoke_head(phase_id)
            self._flush_priority()
        self._emit(EVENT_PHASE_COMPLETED, queue_id=phase_id, message=f">> {name} phase completed")

    def _flush_priority(self) -> None:
        """
        Drain priority-immediate to empty, then priority-deferred to empty.

        priority-immediate is not looked at again once priority-deferred
        starts draining.
        """
        self._emit(EVENT_FLUSH_STARTED, message="priority flush started")
        self._drain(QUEUE_PRIORITY_IMMEDIATE)
        self._drain(QUEUE_PRIORITY_DEFERRED)
        self._emit(EVENT_FLUSH_COMPLETED, message="priority flush completed")

    def _drain(self, queue_id: int) -> None:
        """Invoke head items of one queue until it stays empty."""
        queue = self.queues[queue_id]
        self._emit(EVENT_DRAIN_STARTED, queue_id=queue_id, message=f"{queue.name} drain started")
        while not queue.is_empty():
            self._invoke_head(queue_id)
        self._emit(EVENT_DRAIN_COMPLETED, queue_id=queue_id, message=f"{queue.name} drain completed")

    def _invoke_head(self, queue_id: int) -> None:
        """
        Remove the head item of a queue and run it to completion.

        The invoke event is emitted while the item is still queued, so a
        raising hook leaves it at the head of its queue.
        """
        queue = self.queues[queue_id]
        sequence, _ = queue.peek()
        self._active_queue = queue_id
        self._emit(
            EVENT_INVOKE,
            queue_id=queue_id,
            sequence=sequence,
            message=f"invoking item #{sequence}",
        )
        _, item = queue.dequeue()
        self.invocation_count += 1
        item()

    # === Observability ===

    def add_hook(self, hook: TraceHook) -> None:
        """
        Register a trace hook.

        Raises:
            TypeError: If hook has no on_event method
        """
        if not isinstance(hook, TraceHook):
            raise TypeError(f"trace hook must define on_event(event), got {type(hook).__name__}")
        self.hooks.append(hook)

    def remove_hook(self, hook: TraceHook) -> None:
        """
        Unregister a trace hook.

        Raises:
            ValueError: If hook is not registered
        """
        self.hooks.remove(hook)

    def _emit(
        self,
        kind: str,
        queue_id: Optional[int] = None,
        sequence: Optional[int] = None,
        message: str = "",
        tick: Optional[int] = None,
    ) -> None:
        """Build one trace event and hand it to every hook."""
        if not self.hooks:
            return

        if tick is None:
            tick = self.tick_count + 1 if self._in_tick else 0
        event = TraceEvent(
            kind=kind,
            tick=tick,
            queue_id=queue_id,
            sequence=sequence,
            message=message,
        )
        for hook in list(self.hooks):
            hook.on_event(event)

    # === Introspection ===

    def queue_length(self, queue: Union[int, str]) -> int:
        """Get the number of items currently held by one queue."""
        return len(self.queues[resolve_queue(queue)])

    def get_queue_lengths(self) -> Dict[str, int]:
        """
        Get per-queue lengths.

        Returns:
            Dictionary mapping queue name to length, in tick order
        """
        return {queue.name: len(queue) for queue in self.queues.values()}

    def is_idle(self) -> bool:
        """Check if all eight queues are empty."""
        return all(queue.is_empty() for queue in self.queues.values())

    def __repr__(self) -> str:
        pending = sum(len(queue) for queue in self.queues.values())
        return (
            f"PhaseLoopScheduler("
            f"ticks={self.tick_count}, "
            f"invocations={self.invocation_count}, "
            f"pending={pending})"
        )
