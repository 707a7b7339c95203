"""
FIFO work queue for one scheduler queue.

Holds zero-argument callables in arrival order, each stamped with the
scheduler-wide enqueue sequence number it was given.
"""

from collections import deque
from typing import Callable, Deque, Optional, Tuple

WorkItem = Callable[[], None]


class WorkQueue:
    """
    Unbounded FIFO queue of work items.

    Key properties:
        - Strict FIFO: items leave in the order they were appended
        - Fail-fast validation: non-callables are rejected at enqueue time
        - Re-entrant safe: appending while the queue is being drained is
          allowed, and the new item is seen by the same drain loop

    Example:
        >>> queue = WorkQueue("timers")
        >>> queue.enqueue(lambda: None, sequence=0)
        >>> len(queue)
        1
        >>> seq, item = queue.dequeue()
        >>> seq
        0
    """

    def __init__(self, name: str):
        """
        Initialize empty work queue.

        Args:
            name: Display name of the queue, used in error messages and repr
        """
        self.name = name
        self.entries: Deque[Tuple[int, WorkItem]] = deque()

    def enqueue(self, item: WorkItem, sequence: int) -> None:
        """
        Append a work item to the end of the queue.

        Args:
            item: Zero-argument callable
            sequence: Enqueue sequence number assigned by the scheduler

        Raises:
            TypeError: If item is not callable
        """
        if not callable(item):
            raise TypeError(
                f"work item for {self.name} queue must be callable, "
                f"got {type(item).__name__}"
            )
        self.entries.append((sequence, item))

    def dequeue(self) -> Optional[Tuple[int, WorkItem]]:
        """
        Remove and return the head entry.

        Returns:
            (sequence, item) tuple, or None if the queue is empty
        """
        if not self.entries:
            return None
        return self.entries.popleft()

    def peek(self) -> Optional[Tuple[int, WorkItem]]:
        """View the head entry without removing it."""
        if not self.entries:
            return None
        return self.entries[0]

    def is_empty(self) -> bool:
        return len(self.entries) == 0

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        head = self.entries[0][0] if self.entries else None
        return f"WorkQueue(name={self.name!r}, length={len(self.entries)}, head_sequence={head})"
