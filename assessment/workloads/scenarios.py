"""
Evaluation scenarios for the phase loop scheduler.

Each scenario is a declarative Workload: the tasks enqueued before the first
tick, the tasks each of them enqueues when it runs, how many ticks to run,
and the execution order the phase protocol must produce.

Scenarios:
1. Classic Demo - The Node-style walkthrough, three ticks
2. Deferred After Callback - Flush between two phase callbacks
3. Immediate Before First Tick - Priority work queued outside any tick
4. Re-entrant Priority - Self-enqueue vs cross-enqueue inside a flush
5. Cross-Phase Leakage - Enqueue into later, same and earlier phases
6. Phase Fan-out - Parametric load across all six phases
"""

from dataclasses import dataclass, field
from typing import List, Optional

from phaseloop import PHASE_ORDER, queue_name, resolve_queue


@dataclass
class Task:
    """
    One work item in a workload.

    Attributes:
        label: Text recorded when the task runs (unique within a workload)
        queue: Queue name the task is enqueued into
        spawns: Tasks this one enqueues, in order, when it runs
    """

    label: str
    queue: str
    spawns: List["Task"] = field(default_factory=list)

    def walk(self):
        """Yield this task and all tasks it transitively spawns."""
        yield self
        for child in self.spawns:
            yield from child.walk()


@dataclass
class Workload:
    """
    Workload specification for the phase loop scheduler.

    Attributes:
        tasks: Tasks enqueued before the first tick, in enqueue order
        ticks: Number of ticks to run
        expected_order: Labels in the order they must execute (optional)
        description: Human-readable scenario description
    """

    tasks: List[Task]
    ticks: int = 1
    expected_order: Optional[List[str]] = None
    description: str = ""

    def __post_init__(self):
        """Validate workload consistency."""
        if self.ticks <= 0:
            raise ValueError(f"ticks must be positive, got {self.ticks}")

        labels = self.labels
        if len(set(labels)) != len(labels):
            raise ValueError("task labels must be unique")

        for task in self.all_tasks():
            resolve_queue(task.queue)

        if self.expected_order is not None:
            unknown = set(self.expected_order) - set(labels)
            if unknown:
                raise ValueError(f"expected_order has unknown labels: {sorted(unknown)}")

    def all_tasks(self) -> List[Task]:
        """Every task, including spawned ones, depth-first."""
        return [t for root in self.tasks for t in root.walk()]

    @property
    def labels(self) -> List[str]:
        return [t.label for t in self.all_tasks()]

    @property
    def n_tasks(self) -> int:
        """Total number of tasks, including spawned ones."""
        return len(self.all_tasks())

    @property
    def n_spawned(self) -> int:
        """Number of tasks enqueued from inside other tasks."""
        return self.n_tasks - len(self.tasks)

    @property
    def queues_used(self) -> List[str]:
        """Display names of the queues the workload touches, in tick order."""
        used = {resolve_queue(t.queue) for t in self.all_tasks()}
        return [queue_name(q) for q in sorted(used)]


def generate_classic_demo() -> Workload:
    """
    Scenario 1: Classic Demo.

    The Node-style walkthrough: two nextTick callbacks (one re-enqueuing
    nextTick and microtask work), two microtasks (one nesting another), and
    callbacks in every phase, including a timer that queues a check callback
    and a poll callback that queues nextTick work.

    Three ticks are run; everything executes in the first one.

    Returns:
        Workload with 15 initial tasks and 6 spawned ones

    Example:
        >>> workload = generate_classic_demo()
        >>> workload.n_tasks
        21
    """
    tasks = [
        Task(
            "[nextTick] callback 1",
            "priority-immediate",
            spawns=[
                Task("[microtask] from inside nextTick", "priority-deferred"),
                Task("[nextTick] added from inside nextTick", "priority-immediate"),
            ],
        ),
        Task("[nextTick] callback 2", "priority-immediate"),
        Task(
            "[microtask] callback 1",
            "priority-deferred",
            spawns=[Task("[microtask] nested callback", "priority-deferred")],
        ),
        Task("[microtask] callback 2", "priority-deferred"),
        Task(
            "[timer] callback 1",
            "timers",
            spawns=[Task("[check] from timer 1", "check")],
        ),
        Task("[timer] callback 2", "timers"),
        Task("[pending] callback 1", "pending"),
        Task("[pending] callback 2", "pending"),
        Task("[idle/prepare] callback", "idle-prepare"),
        Task(
            "[poll] callback 1",
            "poll",
            spawns=[Task("[nextTick] from poll", "priority-immediate")],
        ),
        Task("[poll] callback 2", "poll"),
        Task(
            "[check] callback 1",
            "check",
            spawns=[Task("[microtask] from check", "priority-deferred")],
        ),
        Task("[check] callback 2", "check"),
        Task("[close] callback 1", "closing"),
        Task("[close] callback 2", "closing"),
    ]

    expected = [
        "[nextTick] callback 1",
        "[nextTick] callback 2",
        "[nextTick] added from inside nextTick",
        "[microtask] callback 1",
        "[microtask] callback 2",
        "[microtask] from inside nextTick",
        "[microtask] nested callback",
        "[timer] callback 1",
        "[timer] callback 2",
        "[pending] callback 1",
        "[pending] callback 2",
        "[idle/prepare] callback",
        "[poll] callback 1",
        "[nextTick] from poll",
        "[poll] callback 2",
        "[check] callback 1",
        "[microtask] from check",
        "[check] callback 2",
        "[check] from timer 1",
        "[close] callback 1",
        "[close] callback 2",
    ]

    return Workload(
        tasks=tasks,
        ticks=3,
        expected_order=expected,
        description="Classic demo: callbacks in every queue, three ticks",
    )


def generate_deferred_after_callback() -> Workload:
    """
    Scenario 2: Deferred After Callback.

    Timers A and B; A queues C into priority-deferred. The flush after A
    runs C before B is dequeued.

    Returns:
        Workload with expected order A, C, B
    """
    return Workload(
        tasks=[
            Task("A", "timers", spawns=[Task("C", "priority-deferred")]),
            Task("B", "timers"),
        ],
        ticks=1,
        expected_order=["A", "C", "B"],
        description="Priority flush between two timer callbacks",
    )


def generate_immediate_before_first_tick() -> Workload:
    """
    Scenario 3: Immediate Before First Tick.

    A single priority-immediate task queued before any tick, no phase work.
    It runs in the initial flush of the timers phase.

    Returns:
        Workload with expected order X
    """
    return Workload(
        tasks=[Task("X", "priority-immediate")],
        ticks=1,
        expected_order=["X"],
        description="Priority work queued between ticks",
    )


def generate_reentrant_priority() -> Workload:
    """
    Scenario 4: Re-entrant Priority.

    I1 (priority-immediate) queues I2 (priority-immediate) and
    D1 (priority-deferred); D1 queues I3 (priority-immediate).

    I2 runs inside the same immediate drain, D1 inside the same flush, but
    I3 waits for the next flush, which follows timer T.

    Returns:
        Workload with expected order I1, I2, D1, T, I3
    """
    return Workload(
        tasks=[
            Task(
                "I1",
                "priority-immediate",
                spawns=[
                    Task("I2", "priority-immediate"),
                    Task(
                        "D1",
                        "priority-deferred",
                        spawns=[Task("I3", "priority-immediate")],
                    ),
                ],
            ),
            Task("T", "timers"),
        ],
        ticks=1,
        expected_order=["I1", "I2", "D1", "T", "I3"],
        description="Self-enqueue inside a drain vs deferred-to-immediate",
    )


def generate_cross_phase_leakage() -> Workload:
    """
    Scenario 5: Cross-Phase Leakage.

    Timer T1 queues check C1 (later phase, same tick) and timer T2 (own
    phase, same call). Poll P1 queues timer T3, whose phase already ran, so
    T3 waits for tick 2.

    Returns:
        Workload over two ticks with expected order T1, T2, P1, C1, T3
    """
    return Workload(
        tasks=[
            Task(
                "T1",
                "timers",
                spawns=[Task("C1", "check"), Task("T2", "timers")],
            ),
            Task("P1", "poll", spawns=[Task("T3", "timers")]),
        ],
        ticks=2,
        expected_order=["T1", "T2", "P1", "C1", "T3"],
        description="Enqueue into later, same and already-completed phases",
    )


def generate_phase_fanout(
    items_per_phase: int = 10,
    deferred_per_item: int = 1,
    immediate_per_item: int = 0,
) -> Workload:
    """
    Scenario 6: Phase Fan-out.

    Every phase receives ``items_per_phase`` tasks; each task queues
    ``immediate_per_item`` priority-immediate tasks followed by
    ``deferred_per_item`` priority-deferred tasks.

    Expected order: per phase, per item, the item, its immediate children,
    then its deferred children.

    Args:
        items_per_phase: Phase tasks per phase
        deferred_per_item: priority-deferred children per phase task
        immediate_per_item: priority-immediate children per phase task

    Returns:
        Workload with 6 * items_per_phase * (1 + children) tasks

    Example:
        >>> workload = generate_phase_fanout(items_per_phase=2)
        >>> workload.n_tasks
        24
    """
    if items_per_phase <= 0:
        raise ValueError(f"items_per_phase must be positive, got {items_per_phase}")
    if deferred_per_item < 0 or immediate_per_item < 0:
        raise ValueError("children per item must be non-negative")

    tasks = []
    expected = []
    for phase_id in PHASE_ORDER:
        phase = queue_name(phase_id)
        for i in range(items_per_phase):
            label = f"{phase}-{i}"
            immediate = [
                Task(f"{label}-immediate-{j}", "priority-immediate")
                for j in range(immediate_per_item)
            ]
            deferred = [
                Task(f"{label}-deferred-{j}", "priority-deferred")
                for j in range(deferred_per_item)
            ]
            tasks.append(Task(label, phase, spawns=immediate + deferred))
            expected.append(label)
            expected.extend(t.label for t in immediate)
            expected.extend(t.label for t in deferred)

    return Workload(
        tasks=tasks,
        ticks=1,
        expected_order=expected,
        description=(
            f"Fan-out: {items_per_phase} items per phase, "
            f"{immediate_per_item} immediate + {deferred_per_item} deferred children each"
        ),
    )
