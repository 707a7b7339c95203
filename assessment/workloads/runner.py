"""
Run a Workload on a fresh PhaseLoopScheduler and record what happened.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from phaseloop import LoopConfig, PhaseLoopScheduler, TraceRecorder

from .scenarios import Task, Workload


@dataclass
class WorkloadRun:
    """
    Outcome of running one workload.

    Attributes:
        order: Task labels in execution order
        enqueued_labels: Task labels in enqueue order; index = sequence number
        recorder: Trace of the run
        scheduler: Scheduler the workload ran on
    """

    order: List[str]
    enqueued_labels: List[str]
    recorder: TraceRecorder
    scheduler: PhaseLoopScheduler


def install_workload(
    scheduler: PhaseLoopScheduler,
    workload: Workload,
    order: List[str],
    enqueued_labels: List[str],
) -> None:
    """
    Enqueue the workload's initial tasks.

    Each task, when invoked, appends its label to ``order`` and then enqueues
    its spawns. Every enqueue appends the task label to ``enqueued_labels``.
    """

    def make_item(task: Task) -> Callable[[], None]:
        def item() -> None:
            order.append(task.label)
            for child in task.spawns:
                enqueue(child)

        return item

    def enqueue(task: Task) -> None:
        scheduler.enqueue(task.queue, make_item(task))
        enqueued_labels.append(task.label)

    for task in workload.tasks:
        enqueue(task)


def run_workload(workload: Workload, config: Optional[LoopConfig] = None) -> WorkloadRun:
    """
    Run a workload for its configured number of ticks.

    Args:
        workload: Workload to run
        config: Scheduler configuration; tracing is always recorded through
                a dedicated TraceRecorder sized to the workload

    Returns:
        WorkloadRun with execution order and trace
    """
    # Per tick: 2 tick events + 6 phases * (2 phase events + 6 flush events).
    # Per task: 1 invoke, plus one 6-event flush for phase tasks.
    capacity = workload.ticks * 6 * 8 + workload.ticks * 2 + workload.n_tasks * 8
    recorder = TraceRecorder(max_events=capacity)
    scheduler = PhaseLoopScheduler(config=config, hooks=[recorder])

    order: List[str] = []
    enqueued_labels: List[str] = []
    install_workload(scheduler, workload, order, enqueued_labels)
    scheduler.run(workload.ticks)

    return WorkloadRun(
        order=order,
        enqueued_labels=enqueued_labels,
        recorder=recorder,
        scheduler=scheduler,
    )
