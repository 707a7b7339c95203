"""
Metrics and evaluation tools for phase loop traces.
"""

from .order_analysis import (
    compute_consecutive_runs,
    compute_execution_order,
    compute_order_metrics,
    compute_phase_sequence,
    compute_position_jumps,
    count_flushes_per_phase,
    count_invocations_per_queue,
    export_execution_order,
)

__all__ = [
    # Order reconstruction
    "compute_execution_order",
    "compute_phase_sequence",
    "compute_position_jumps",
    # Interleaving and volume
    "compute_consecutive_runs",
    "count_invocations_per_queue",
    "count_flushes_per_phase",
    "compute_order_metrics",
    # Export
    "export_execution_order",
]
