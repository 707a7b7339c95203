"""
Queue identifiers for the phase loop.

Maps the eight scheduler queues to small integer ids, ordered the way a tick
visits them: the two priority queues first, then the six phases.
"""

from typing import Dict, Tuple, Union

# Queue constants
QUEUE_PRIORITY_IMMEDIATE = 0  # Drained first in every priority flush
QUEUE_PRIORITY_DEFERRED = 1  # Drained after priority-immediate empties
QUEUE_TIMERS = 2
QUEUE_PENDING = 3
QUEUE_IDLE_PREPARE = 4
QUEUE_POLL = 5
QUEUE_CHECK = 6
QUEUE_CLOSING = 7

PRIORITY_QUEUES: Tuple[int, ...] = (QUEUE_PRIORITY_IMMEDIATE, QUEUE_PRIORITY_DEFERRED)

PHASE_ORDER: Tuple[int, ...] = (
    QUEUE_TIMERS,
    QUEUE_PENDING,
    QUEUE_IDLE_PREPARE,
    QUEUE_POLL,
    QUEUE_CHECK,
    QUEUE_CLOSING,
)

ALL_QUEUES: Tuple[int, ...] = PRIORITY_QUEUES + PHASE_ORDER

QUEUE_NAMES: Dict[int, str] = {
    QUEUE_PRIORITY_IMMEDIATE: "priority-immediate",
    QUEUE_PRIORITY_DEFERRED: "priority-deferred",
    QUEUE_TIMERS: "timers",
    QUEUE_PENDING: "pending",
    QUEUE_IDLE_PREPARE: "idle-prepare",
    QUEUE_POLL: "poll",
    QUEUE_CHECK: "check",
    QUEUE_CLOSING: "closing",
}

# Names used by the classic Node-style narration
_ALIASES: Dict[str, int] = {
    "nextTick": QUEUE_PRIORITY_IMMEDIATE,
    "microtasks": QUEUE_PRIORITY_DEFERRED,
    "pendingCallbacks": QUEUE_PENDING,
    "idlePrepare": QUEUE_IDLE_PREPARE,
    "closeCallbacks": QUEUE_CLOSING,
}

_BY_NAME: Dict[str, int] = {name: qid for qid, name in QUEUE_NAMES.items()}
_BY_NAME.update(_ALIASES)


def queue_name(queue_id: int) -> str:
    """
    Get the display name of a queue.

    Args:
        queue_id: Queue identifier (0-7)

    Returns:
        Hyphenated queue name, e.g. "idle-prepare"

    Raises:
        ValueError: If queue_id is not one of the eight known queues
    """
    try:
        return QUEUE_NAMES[queue_id]
    except (KeyError, TypeError):
        raise ValueError(f"unknown queue id: {queue_id!r}") from None


def resolve_queue(queue: Union[int, str]) -> int:
    """
    Resolve a queue id or name to its id.

    Accepts the integer constants, the hyphenated display names and the
    camelCase aliases ("nextTick", "microtasks", "closeCallbacks", ...).

    Example:
        >>> resolve_queue("poll")
        5
        >>> resolve_queue("nextTick") == QUEUE_PRIORITY_IMMEDIATE
        True

    Raises:
        ValueError: If the queue is unknown
    """
    if isinstance(queue, str):
        if queue not in _BY_NAME:
            raise ValueError(f"unknown queue name: {queue!r}")
        return _BY_NAME[queue]

    # bool is an int subclass but never a meaningful queue id
    if isinstance(queue, bool) or not isinstance(queue, int):
        raise ValueError(f"unknown queue id: {queue!r}")
    if queue not in QUEUE_NAMES:
        raise ValueError(f"unknown queue id: {queue!r}")
    return queue


def is_priority_queue(queue_id: int) -> bool:
    """Check if a queue is one of the two priority queues."""
    return queue_id in PRIORITY_QUEUES
