"""
End-of-session diagnosis.

`diagnose` is a pure function of a finalized `SessionState`: it derives a few
ratios from the session counters, runs them through the rule cascade in
`rules` and returns the de-duplicated conclusions and actions.
"""

import logging
import math
from typing import Iterable, List, Optional

from ..models.config import DiagnosisConfig
from ..models.results import Conclusion, DiagnosisResult, SessionState
from .rules import (
    EDR_HINT_RULE,
    EXCLUSIVE_RULES,
    INDEPENDENT_RULES,
    DiagnosisMetrics,
)

logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> float:
    return part / whole * 100.0 if whole else 0.0


def compute_metrics(state: SessionState) -> DiagnosisMetrics:
    """
    Derive the rule inputs from a session state.

    Raises:
        ValueError: If the session holds no samples.
    """
    if state.sample_count == 0:
        raise ValueError("Cannot diagnose a session without samples")

    clock = state.clock_stats
    load = state.load_stats
    base_is_flat = clock.min_value == clock.max_value and math.isclose(
        clock.average, clock.max_value, rel_tol=1e-9, abs_tol=1e-9
    )

    return DiagnosisMetrics(
        sample_count=state.sample_count,
        low_clock_pct=_percent(state.low_clock_sample_count, state.sample_count),
        high_load_sample_count=state.high_load_sample_count,
        high_load_low_clock_pct=_percent(
            state.high_load_low_clock_sample_count, state.high_load_sample_count
        ),
        thermal_events_total=state.thermal_events_total,
        base_is_flat=base_is_flat,
        average_clock_mhz=clock.average,
        min_clock_mhz=clock.min_value,
        max_clock_mhz=clock.max_value,
        average_load_pct=load.average,
        max_load_pct=load.max_value,
    )


def most_frequent_top_process(state: SessionState) -> Optional[str]:
    """Name with the most top-CPU hits; ties go to the name seen first."""
    best_name = None
    best_count = 0
    for name, count in state.cpu_hit_counts.items():
        if count > best_count:
            best_name, best_count = name, count
    return best_name


def matches_edr_agent(name: str, keywords: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword)


def _dedupe(items: Iterable) -> tuple:
    return tuple(dict.fromkeys(items))


def diagnose(state: SessionState, config: Optional[DiagnosisConfig] = None) -> DiagnosisResult:
    """
    Classify a finished session.

    Args:
        state: The finalized session state. It is not modified.
        config: Rule thresholds and EDR keywords, defaults when None.

    Returns:
        Conclusions and actions in priority order, without duplicates.

    Raises:
        ValueError: If the session holds no samples.
    """
    config = config or DiagnosisConfig()
    metrics = compute_metrics(state)

    conclusions: List[Conclusion] = []
    actions: List[str] = []

    for rule in INDEPENDENT_RULES:
        if rule.applies(metrics, config):
            logger.debug(f"Diagnosis rule '{rule.name}' applies")
            conclusions.extend(rule.conclusions)
            actions.extend(rule.actions)

    for rule in EXCLUSIVE_RULES:
        if rule.applies(metrics, config):
            logger.debug(f"Diagnosis rule '{rule.name}' applies")
            conclusions.extend(rule.conclusions)
            actions.extend(rule.actions)
            break

    top_name = most_frequent_top_process(state)
    if top_name and matches_edr_agent(top_name, config.edr_keywords):
        logger.debug(f"Most frequent top CPU process '{top_name}' looks like a security agent")
        conclusions.extend(EDR_HINT_RULE.conclusions)
        actions.extend(EDR_HINT_RULE.actions)

    return DiagnosisResult(conclusions=_dedupe(conclusions), actions=_dedupe(actions))


def render_diagnosis(result: DiagnosisResult) -> str:
    """Render a diagnosis as human-readable text."""
    lines = ["Diagnosis:"]
    for conclusion in result.conclusions:
        lines.append(f"  - {conclusion.value}")
    if result.actions:
        lines.append("Suggested actions:")
        for index, action in enumerate(result.actions, 1):
            lines.append(f"  {index}. {action}")
    else:
        lines.append("No action needed.")
    return "\n".join(lines)
