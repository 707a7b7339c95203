"""
Order-based analysis for phase loop traces.

Compares enqueue order with execution order and summarises how the phase
protocol interleaved the queues. Works purely on recorded TraceEvents.
"""

import csv
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from phaseloop import queue_name
from phaseloop.trace import (
    EVENT_FLUSH_STARTED,
    EVENT_INVOKE,
    EVENT_PHASE_COMPLETED,
    EVENT_PHASE_STARTED,
    EVENT_TICK_COMPLETED,
    TraceEvent,
)


def compute_execution_order(events: Iterable[TraceEvent]) -> List[int]:
    """
    Reconstruct execution order from a trace.

    Args:
        events: Recorded trace events

    Returns:
        Enqueue sequence numbers in the order the items were invoked
        - execution_order[0] = sequence number of the first item invoked
        - etc.
    """
    return [e.sequence for e in events if e.kind == EVENT_INVOKE]


def compute_phase_sequence(events: Iterable[TraceEvent]) -> List[Tuple[int, str]]:
    """
    List the phases that started, in order.

    Returns:
        (tick, phase name) pairs, one per phase_started event

    Example:
        >>> # One tick: [(1, "timers"), (1, "pending"), ..., (1, "closing")]
    """
    return [(e.tick, e.queue) for e in events if e.kind == EVENT_PHASE_STARTED]


def compute_position_jumps(execution_order: List[int]) -> List[int]:
    """
    How far each invoked item moved between enqueue order and execution.

    Sequence numbers are ranked among the invoked items, so gaps left by
    items that never ran do not count as movement.

    Returns:
        position_jumps[k] for the k-th executed item: execution_rank - enqueue_rank
        - Negative = ran earlier than its enqueue position
        - Positive = ran later than its enqueue position

    Example:
        >>> compute_position_jumps([2, 0, 1])
        [-2, 1, 1]
    """
    enqueue_rank = {seq: rank for rank, seq in enumerate(sorted(execution_order))}
    return [rank - enqueue_rank[seq] for rank, seq in enumerate(execution_order)]


def compute_consecutive_runs(events: Iterable[TraceEvent]) -> List[int]:
    """
    Count consecutive invocations from the same queue.

    Returns:
        Run lengths in execution order
        - [1, 1, 1, ...] = every invocation from a different queue than the last
        - [3, 1, 2] = three from one queue, one from another, two from a third

    Example:
        >>> # Queues invoked: [timers, timers, priority-deferred, timers]
        >>> # Returns: [2, 1, 1]
    """
    queues = [e.queue_id for e in events if e.kind == EVENT_INVOKE]
    if not queues:
        return []

    runs = []
    current = queues[0]
    count = 1
    for queue_id in queues[1:]:
        if queue_id == current:
            count += 1
        else:
            runs.append(count)
            current = queue_id
            count = 1

    # Last run
    runs.append(count)

    return runs


def count_invocations_per_queue(events: Iterable[TraceEvent]) -> Dict[str, int]:
    """
    Count invocations per queue.

    Returns:
        Dict mapping queue name to number of items invoked from it
        (queues never invoked are omitted)
    """
    counts = Counter(e.queue_id for e in events if e.kind == EVENT_INVOKE)
    return {queue_name(q): counts[q] for q in sorted(counts)}


def count_flushes_per_phase(events: Iterable[TraceEvent]) -> Dict[Tuple[int, str], int]:
    """
    Count priority flushes that happened inside each phase run.

    Returns:
        Dict mapping (tick, phase name) to flush count. For a completed phase
        this is 1 + number of phase items invoked.
    """
    counts: Dict[Tuple[int, str], int] = {}
    current: Optional[Tuple[int, str]] = None

    for e in events:
        if e.kind == EVENT_PHASE_STARTED:
            current = (e.tick, e.queue)
            counts[current] = 0
        elif e.kind == EVENT_PHASE_COMPLETED:
            current = None
        elif e.kind == EVENT_FLUSH_STARTED and current is not None:
            counts[current] += 1

    return counts


def compute_order_metrics(events: Iterable[TraceEvent]) -> Dict[str, float]:
    """
    Compute order-based metrics from a trace.

    Metrics:
    - Position jumps: how far items moved from enqueue to execution order
    - Queue interleaving: consecutive invocations from the same queue
    - Volume: invocations, flushes, completed ticks

    Args:
        events: Recorded trace events

    Returns:
        Dictionary of order-based metrics (all zero for an empty trace)
    """
    events = list(events)
    execution_order = compute_execution_order(events)
    position_jumps = compute_position_jumps(execution_order)
    runs = compute_consecutive_runs(events)

    metrics = {
        # Position jump statistics
        "position_jump_mean": float(np.mean(position_jumps)) if position_jumps else 0.0,
        "position_jump_std": float(np.std(position_jumps)) if position_jumps else 0.0,
        "position_jump_min": float(np.min(position_jumps)) if position_jumps else 0.0,  # Most forward jump
        "position_jump_max": float(np.max(position_jumps)) if position_jumps else 0.0,  # Most backward push
        "reordered_fraction": (
            float(np.mean(np.array(position_jumps) != 0)) if position_jumps else 0.0
        ),

        # Queue interleaving
        "max_consecutive_invocations": max(runs) if runs else 0,
        "avg_consecutive_invocations": float(np.mean(runs)) if runs else 0.0,

        # Volume
        "invocation_count": len(execution_order),
        "flush_count": sum(1 for e in events if e.kind == EVENT_FLUSH_STARTED),
        "tick_count": sum(1 for e in events if e.kind == EVENT_TICK_COMPLETED),
    }

    return metrics


def export_execution_order(
    events: Iterable[TraceEvent],
    scenario_name: str,
    labels: Optional[List[str]] = None,
    output_dir: str = "results",
) -> str:
    """
    Export execution order to CSV.

    Creates: {output_dir}/{scenario_name}/execution.csv

    CSV format:
        execution_rank,tick,queue,sequence,enqueue_rank,position_jump,label
        0,1,priority-immediate,0,0,0,[nextTick] callback 1
        ...

    Args:
        events: Recorded trace events
        scenario_name: Scenario name for directory
        labels: Optional label per enqueue sequence number
        output_dir: Base output directory

    Returns:
        Path to created CSV file
    """
    invocations = [e for e in events if e.kind == EVENT_INVOKE]
    execution_order = [e.sequence for e in invocations]
    position_jumps = compute_position_jumps(execution_order)
    enqueue_rank = {seq: rank for rank, seq in enumerate(sorted(execution_order))}

    rows = []
    for rank, event in enumerate(invocations):
        label = ""
        if labels is not None and event.sequence < len(labels):
            label = labels[event.sequence]
        rows.append({
            "execution_rank": rank,
            "tick": event.tick,
            "queue": event.queue,
            "sequence": event.sequence,
            "enqueue_rank": enqueue_rank[event.sequence],
            "position_jump": position_jumps[rank],
            "label": label,
        })

    scenario_dir = Path(output_dir) / scenario_name
    scenario_dir.mkdir(parents=True, exist_ok=True)

    csv_path = scenario_dir / "execution.csv"
    with open(csv_path, "w", newline="") as f:
        fieldnames = [
            "execution_rank", "tick", "queue", "sequence",
            "enqueue_rank", "position_jump", "label",
        ]
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

    return str(csv_path)
