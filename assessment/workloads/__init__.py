"""
Workload generators for phase loop evaluation.

Provides scenarios exercising the phase protocol:
- Classic Demo: Callbacks in every queue over three ticks
- Deferred After Callback / Immediate Before First Tick: documented examples
- Re-entrant Priority / Cross-Phase Leakage: enqueue-during-drain rules
- Phase Fan-out: Parametric load for analysis
"""

from .runner import WorkloadRun, install_workload, run_workload
from .scenarios import (
    Task,
    Workload,
    generate_classic_demo,
    generate_cross_phase_leakage,
    generate_deferred_after_callback,
    generate_immediate_before_first_tick,
    generate_phase_fanout,
    generate_reentrant_priority,
)

__all__ = [
    "Task",
    "Workload",
    # Documented scenarios
    "generate_classic_demo",
    "generate_deferred_after_callback",
    "generate_immediate_before_first_tick",
    # Enqueue-during-drain scenarios
    "generate_reentrant_priority",
    "generate_cross_phase_leakage",
    # Parametric
    "generate_phase_fanout",
    # Running
    "WorkloadRun",
    "install_workload",
    "run_workload",
]
