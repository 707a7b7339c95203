"""
Tests for the trace side channel and scheduler configuration.
"""

import logging

import pytest

from phaseloop import (
    QUEUE_TIMERS,
    LoggingTraceHook,
    LoopConfig,
    PhaseLoopScheduler,
    TraceEvent,
    TraceHook,
    TraceRecorder,
    create_loop_default,
    create_loop_traced,
)


def build_two_phase_workload(scheduler, order):
    def timer():
        order.append("timer")
        scheduler.queue_priority_deferred(lambda: order.append("deferred"))

    scheduler.queue_timer(timer)
    scheduler.queue_check(lambda: order.append("check"))


# === LoopConfig ===


def test_loop_config_defaults():
    """Default config leaves the side channel off."""
    config = create_loop_default()
    assert config == LoopConfig()
    assert not config.trace_enabled
    assert not config.log_trace

    scheduler = PhaseLoopScheduler(config)
    assert scheduler.recorder is None
    assert scheduler.hooks == []


def test_loop_config_traced():
    """Traced config attaches a recorder sized from the config."""
    scheduler = PhaseLoopScheduler(create_loop_traced(max_trace_events=50))

    assert isinstance(scheduler.recorder, TraceRecorder)
    assert scheduler.recorder.max_events == 50
    assert scheduler.hooks == [scheduler.recorder]


def test_loop_config_validation():
    """Config validates parameters."""
    with pytest.raises(ValueError, match="max_trace_events must be positive"):
        LoopConfig(max_trace_events=0)

    with pytest.raises(ValueError, match="max_trace_events must be an integer"):
        LoopConfig(max_trace_events=1.5)

    with pytest.raises(ValueError, match="log_level must be a standard logging level"):
        LoopConfig(log_level=5)

    with pytest.raises(ValueError, match="log_level must be a standard logging level"):
        LoopConfig(log_level="DEBUG")


# === TraceEvent / TraceRecorder ===


def test_trace_event_format():
    """Events render as [queue] message, tick events under 'event loop'."""
    phase = TraceEvent(kind="phase_started", tick=1, queue_id=QUEUE_TIMERS, message=">> timers phase started")
    tick = TraceEvent(kind="tick_started", tick=1, message="Starting tick")

    assert phase.queue == "timers"
    assert phase.format() == "[timers] >> timers phase started"
    assert tick.queue is None
    assert tick.format() == "[event loop] Starting tick"


def test_recorder_is_bounded():
    """Recorder keeps only the most recent events."""
    recorder = TraceRecorder(max_events=3)
    scheduler = PhaseLoopScheduler(hooks=[recorder])
    scheduler.tick()

    assert len(recorder) == 3
    assert recorder.events[-1].kind == "tick_completed"

    recorder.clear()
    assert len(recorder) == 0

    with pytest.raises(ValueError, match="max_events must be positive"):
        TraceRecorder(max_events=0)

    with pytest.raises(ValueError, match="max_events must be an integer"):
        TraceRecorder(max_events=True)

    with pytest.raises(ValueError, match="max_events must be an integer"):
        TraceRecorder(max_events=2.5)


def test_trace_tick_structure():
    """A tick is bracketed by tick events around six phases in order."""
    scheduler = PhaseLoopScheduler(create_loop_traced())
    order = []
    build_two_phase_workload(scheduler, order)
    scheduler.tick()

    events = list(scheduler.recorder.events)
    assert events[0].kind == "tick_started"
    assert events[-1].kind == "tick_completed"
    assert all(e.tick == 1 for e in events)

    phases = [e.queue for e in events if e.kind == "phase_started"]
    assert phases == ["timers", "pending", "idle-prepare", "poll", "check", "closing"]


def test_trace_flush_structure():
    """Each flush drains priority-immediate, then priority-deferred."""
    scheduler = PhaseLoopScheduler(create_loop_traced())
    scheduler.tick()

    events = list(scheduler.recorder.events)
    first_flush = events.index(next(e for e in events if e.kind == "flush_started"))
    window = [(e.kind, e.queue) for e in events[first_flush:first_flush + 6]]

    assert window == [
        ("flush_started", None),
        ("drain_started", "priority-immediate"),
        ("drain_completed", "priority-immediate"),
        ("drain_started", "priority-deferred"),
        ("drain_completed", "priority-deferred"),
        ("flush_completed", None),
    ]


def test_trace_invoke_sequences():
    """Invoke events carry the enqueue sequence number of each item."""
    scheduler = PhaseLoopScheduler(create_loop_traced())
    order = []
    build_two_phase_workload(scheduler, order)
    scheduler.tick()

    invokes = scheduler.recorder.events_of_kind("invoke")
    # timer=0, check=1, deferred (queued while the timer ran)=2
    assert [(e.queue, e.sequence) for e in invokes] == [
        ("timers", 0),
        ("priority-deferred", 2),
        ("check", 1),
    ]
    assert invokes[0].message == "invoking item #0"


def test_trace_tick_numbers():
    """Events carry the number of the tick in progress."""
    scheduler = PhaseLoopScheduler(create_loop_traced())
    scheduler.run(2)

    completed = scheduler.recorder.events_of_kind("tick_completed")
    assert [e.tick for e in completed] == [1, 2]


def test_hooks_do_not_change_order():
    """Running with or without hooks yields the same order."""
    plain_order, traced_order = [], []

    plain = PhaseLoopScheduler()
    build_two_phase_workload(plain, plain_order)
    plain.tick()

    traced = PhaseLoopScheduler(create_loop_traced(log_trace=True))
    build_two_phase_workload(traced, traced_order)
    traced.tick()

    assert plain_order == traced_order == ["timer", "deferred", "check"]


# === Hook Registration ===


def test_add_and_remove_hook():
    """Hooks can be added and removed; non-hooks are rejected."""
    scheduler = PhaseLoopScheduler()
    recorder = TraceRecorder()

    scheduler.add_hook(recorder)
    assert isinstance(recorder, TraceHook)
    scheduler.tick()
    seen = len(recorder)
    assert seen > 0

    scheduler.remove_hook(recorder)
    scheduler.tick()
    assert len(recorder) == seen

    with pytest.raises(ValueError):
        scheduler.remove_hook(recorder)

    with pytest.raises(TypeError, match="trace hook must define on_event"):
        scheduler.add_hook(object())


def test_hook_fault_propagates():
    """A raising hook aborts the tick like a raising work item."""

    class BrokenHook:
        def on_event(self, event):
            raise RuntimeError("hook failed")

    scheduler = PhaseLoopScheduler(hooks=[BrokenHook()])

    with pytest.raises(RuntimeError, match="hook failed"):
        scheduler.tick()


def test_hook_fault_on_invoke_keeps_item_queued():
    """An item whose invoke event raised stays queued and runs next tick."""

    class FailOnceOnInvoke:
        def __init__(self):
            self.failed = False

        def on_event(self, event):
            if event.kind == "invoke" and not self.failed:
                self.failed = True
                raise RuntimeError("hook failed")

    scheduler = PhaseLoopScheduler(hooks=[FailOnceOnInvoke()])
    order = []
    scheduler.queue_timer(lambda: order.append("A"))
    scheduler.queue_timer(lambda: order.append("B"))

    with pytest.raises(RuntimeError, match="hook failed"):
        scheduler.tick()

    assert order == []
    assert scheduler.queue_length("timers") == 2
    assert scheduler.invocation_count == 0

    scheduler.tick()
    assert order == ["A", "B"]


# === Logging ===


def test_logging_trace_hook_narration(caplog):
    """LoggingTraceHook narrates events in [queue] message form."""
    caplog.set_level(logging.DEBUG, logger="phaseloop.trace")
    scheduler = PhaseLoopScheduler(LoopConfig(log_trace=True))
    scheduler.queue_timer(lambda: None)
    scheduler.tick()

    messages = [r.getMessage() for r in caplog.records if r.name == "phaseloop.trace"]
    assert messages[0] == "[event loop] Starting tick"
    assert "[timers] >> timers phase started" in messages
    assert "[timers] invoking item #0" in messages
    assert "[closing] >> closing phase completed" in messages
    assert messages[-1] == "[event loop] Tick finished"


def test_logging_trace_hook_respects_level(caplog):
    """Narration below the logger's level is skipped."""
    log = logging.getLogger("phaseloop.tests.quiet")
    caplog.set_level(logging.WARNING, logger="phaseloop.tests.quiet")
    hook = LoggingTraceHook(logger=log, level=logging.INFO)

    scheduler = PhaseLoopScheduler(hooks=[hook])
    scheduler.tick()

    assert [r for r in caplog.records if r.name == "phaseloop.tests.quiet"] == []


def test_scheduler_debug_logging(caplog):
    """Scheduler logs tick boundaries and aborted ticks at DEBUG."""
    caplog.set_level(logging.DEBUG, logger="phaseloop.phase_loop_scheduler")
    scheduler = PhaseLoopScheduler()
    scheduler.tick()

    def failing():
        raise RuntimeError("boom")

    scheduler.queue_poll(failing)
    with pytest.raises(RuntimeError):
        scheduler.tick()

    messages = [r.getMessage() for r in caplog.records if r.name == "phaseloop.phase_loop_scheduler"]
    assert "tick 1 started" in messages
    assert "tick 1 completed (0 invocations so far)" in messages
    assert "tick 2 aborted by work item raised from poll queue" in messages
