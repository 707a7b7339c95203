"""
Configuration for the phase loop scheduler.

Controls the optional observability side channel. None of these settings
change the order in which work items run.
"""

import logging
from dataclasses import dataclass


@dataclass
class LoopConfig:
    """
    Configuration for PhaseLoopScheduler.

    Tracing:
        - trace_enabled: attach an in-memory TraceRecorder at construction,
          reachable as ``scheduler.recorder``
        - max_trace_events: recorder capacity, oldest events dropped first

    Logging:
        - log_trace: attach a LoggingTraceHook that narrates every trace
          event to the ``phaseloop.trace`` logger
        - log_level: level used for that narration
    """

    # === Trace Recording ===
    trace_enabled: bool = False  # Attach a TraceRecorder
    max_trace_events: int = 10_000  # Recorder capacity

    # === Trace Logging ===
    log_trace: bool = False  # Attach a LoggingTraceHook
    log_level: int = logging.DEBUG  # Narration level

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.max_trace_events, bool) or not isinstance(self.max_trace_events, int):
            raise ValueError(
                f"max_trace_events must be an integer, got {self.max_trace_events!r}"
            )
        if self.max_trace_events <= 0:
            raise ValueError(
                f"max_trace_events must be positive, got {self.max_trace_events}"
            )

        if (
            isinstance(self.log_level, bool)
            or not isinstance(self.log_level, int)
            or logging.getLevelName(self.log_level) == f"Level {self.log_level}"
        ):
            raise ValueError(f"log_level must be a standard logging level, got {self.log_level!r}")


# Convenience factory functions


def create_loop_default() -> LoopConfig:
    """
    Create a configuration with the observability side channel switched off.

    Returns:
        LoopConfig with default parameters
    """
    return LoopConfig()


def create_loop_traced(
    max_trace_events: int = 10_000,
    log_trace: bool = False,
    log_level: int = logging.DEBUG,
) -> LoopConfig:
    """
    Create a configuration that records trace events in memory.

    Args:
        max_trace_events: Recorder capacity
        log_trace: Also narrate events through logging
        log_level: Narration level when log_trace is set

    Returns:
        LoopConfig with tracing enabled
    """
    return LoopConfig(
        trace_enabled=True,
        max_trace_events=max_trace_events,
        log_trace=log_trace,
        log_level=log_level,
    )
