"""
End-of-session diagnosis for the throttlewatch package.
"""

from .engine import (
    compute_metrics,
    diagnose,
    matches_edr_agent,
    most_frequent_top_process,
    render_diagnosis,
)
from .rules import (
    EDR_HINT_RULE,
    EXCLUSIVE_RULES,
    INDEPENDENT_RULES,
    DiagnosisMetrics,
    DiagnosisRule,
)

__all__ = [
    "compute_metrics",
    "diagnose",
    "matches_edr_agent",
    "most_frequent_top_process",
    "render_diagnosis",
    "EDR_HINT_RULE",
    "EXCLUSIVE_RULES",
    "INDEPENDENT_RULES",
    "DiagnosisMetrics",
    "DiagnosisRule",
]
