"""
Per-process CPU attribution for the throttlewatch package.
"""

from .tracker import (
    AttributionResult,
    ProcessDeltaTracker,
    ProcessObservation,
    normalize_process_name,
    top_memory_process,
)

__all__ = [
    "AttributionResult",
    "ProcessDeltaTracker",
    "ProcessObservation",
    "normalize_process_name",
    "top_memory_process",
]
