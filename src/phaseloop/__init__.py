"""
Deterministic phase loop scheduler (PHASELOOP).

Models the callback ordering of a cooperative, phase-based event loop: six
phase queues drained in a fixed order, with two priority queues flushed
before every phase and after every single phase callback.

Main components:
    - PhaseLoopScheduler: Owns the queues and runs ticks
    - LoopConfig: Configuration dataclass for the trace side channel
    - WorkQueue: FIFO queue with callable validation
    - TraceRecorder / LoggingTraceHook: Trace consumers

Queue order within a tick:
    0. priority-immediate  (flushed before each phase and after each callback)
    1. priority-deferred   (flushed right after priority-immediate)
    2. timers
    3. pending
    4. idle-prepare
    5. poll
    6. check
    7. closing

Example:
    >>> from phaseloop import PhaseLoopScheduler
    >>> scheduler = PhaseLoopScheduler()
    >>> order = []
    >>> scheduler.queue_check(lambda: order.append("check"))
    >>> scheduler.queue_timer(lambda: order.append("timer"))
    >>> scheduler.queue_priority_immediate(lambda: order.append("immediate"))
    >>> scheduler.tick()
    >>> order
    ['immediate', 'timer', 'check']
"""

from .queue_ids import (
    ALL_QUEUES,
    PHASE_ORDER,
    PRIORITY_QUEUES,
    QUEUE_CHECK,
    QUEUE_CLOSING,
    QUEUE_IDLE_PREPARE,
    QUEUE_NAMES,
    QUEUE_PENDING,
    QUEUE_POLL,
    QUEUE_PRIORITY_DEFERRED,
    QUEUE_PRIORITY_IMMEDIATE,
    QUEUE_TIMERS,
    is_priority_queue,
    queue_name,
    resolve_queue,
)
from .loop_config import LoopConfig, create_loop_default, create_loop_traced
from .phase_loop_scheduler import PhaseLoopScheduler
from .trace import LoggingTraceHook, TraceEvent, TraceHook, TraceRecorder
from .work_queue import WorkItem, WorkQueue

__all__ = [
    # Main scheduler
    "PhaseLoopScheduler",
    # Configuration
    "LoopConfig",
    "create_loop_default",
    "create_loop_traced",
    # Components
    "WorkQueue",
    "WorkItem",
    # Tracing
    "TraceEvent",
    "TraceHook",
    "TraceRecorder",
    "LoggingTraceHook",
    # Queue constants
    "QUEUE_PRIORITY_IMMEDIATE",
    "QUEUE_PRIORITY_DEFERRED",
    "QUEUE_TIMERS",
    "QUEUE_PENDING",
    "QUEUE_IDLE_PREPARE",
    "QUEUE_POLL",
    "QUEUE_CHECK",
    "QUEUE_CLOSING",
    "QUEUE_NAMES",
    "PRIORITY_QUEUES",
    "PHASE_ORDER",
    "ALL_QUEUES",
    "queue_name",
    "resolve_queue",
    "is_priority_queue",
]

__version__ = "1.0.0"
