"""
Diagnosis rules.

Each rule is a guard over the session's derived metrics plus the conclusions
and actions it contributes when the guard holds. The cascade is kept as plain
ordered data so the priority order can be read top to bottom.
"""

import math
from dataclasses import dataclass
from typing import Callable, Tuple

from ..models.config import DiagnosisConfig
from ..models.results import Conclusion

ACTION_INSPECT_THERMAL_EVENTS = (
    "Inspect the OS thermal/power events logged during the session and check "
    "airflow around the machine."
)
ACTION_CLEAR_VENTS = (
    "Clear the vents and fans, then check the BIOS/UEFI boost settings."
)
ACTION_SWITCH_POWER_PLAN = (
    "Switch to a high-performance power plan and check the processor boost "
    "mode in the OS power settings (registry-level on Windows)."
)
ACTION_CHECK_BIOS_TURBO = (
    "Check that Turbo Boost / Precision Boost is enabled in the BIOS/UEFI or "
    "the vendor's control utility."
)
ACTION_CHECK_COOLING = (
    "Check airflow, fan operation and thermal paste, and verify the active "
    "power plan."
)
ACTION_REVIEW_EDR = (
    "Review the security agent's scan schedule and exclusions; it was the "
    "top CPU consumer for most of the session."
)


@dataclass(frozen=True)
class DiagnosisMetrics:
    """
    Ratios and statistics the rules are evaluated against.

    Percentages are in 0-100.
    """

    sample_count: int
    low_clock_pct: float
    high_load_sample_count: int
    high_load_low_clock_pct: float
    thermal_events_total: int
    base_is_flat: bool
    average_clock_mhz: float
    min_clock_mhz: float
    max_clock_mhz: float
    average_load_pct: float
    max_load_pct: float


Guard = Callable[[DiagnosisMetrics, DiagnosisConfig], bool]


@dataclass(frozen=True)
class DiagnosisRule:
    """A guard and what it contributes when it holds."""

    name: str
    guard: Guard
    conclusions: Tuple[Conclusion, ...]
    actions: Tuple[str, ...] = ()

    def applies(self, metrics: DiagnosisMetrics, config: DiagnosisConfig) -> bool:
        return self.guard(metrics, config)


def _has_thermal_events(m: DiagnosisMetrics, c: DiagnosisConfig) -> bool:
    return m.thermal_events_total > 0


def _throttled_under_load(m: DiagnosisMetrics, c: DiagnosisConfig) -> bool:
    required = math.ceil(m.sample_count * c.high_load_share)
    return (
        m.high_load_sample_count >= required
        and m.high_load_low_clock_pct >= c.joint_low_clock_pct
    )


def _flat_clock_under_load(m: DiagnosisMetrics, c: DiagnosisConfig) -> bool:
    return m.base_is_flat and m.max_load_pct >= c.flat_max_load_pct


def _light_workload(m: DiagnosisMetrics, c: DiagnosisConfig) -> bool:
    return m.average_load_pct < c.light_avg_load_pct and m.low_clock_pct <= c.light_low_clock_pct


def _frequent_low_clock(m: DiagnosisMetrics, c: DiagnosisConfig) -> bool:
    return m.low_clock_pct > c.fallback_low_clock_pct


def _always(m: DiagnosisMetrics, c: DiagnosisConfig) -> bool:
    return True


# Evaluated on its own, in addition to the chain below.
INDEPENDENT_RULES: Tuple[DiagnosisRule, ...] = (
    DiagnosisRule(
        name="event-log heat",
        guard=_has_thermal_events,
        conclusions=(Conclusion.EVENT_LOG_HEAT,),
        actions=(ACTION_INSPECT_THERMAL_EVENTS,),
    ),
)

# Else-if chain: the first rule whose guard holds is the only one applied.
EXCLUSIVE_RULES: Tuple[DiagnosisRule, ...] = (
    DiagnosisRule(
        name="throttled under load",
        guard=_throttled_under_load,
        conclusions=(Conclusion.THERMAL_THROTTLING,),
        actions=(ACTION_CLEAR_VENTS,),
    ),
    DiagnosisRule(
        name="flat clock under load",
        guard=_flat_clock_under_load,
        conclusions=(Conclusion.BOOST_DISABLED, Conclusion.POWER_POLICY_SUSPECT),
        actions=(ACTION_SWITCH_POWER_PLAN, ACTION_CHECK_BIOS_TURBO),
    ),
    DiagnosisRule(
        name="light workload",
        guard=_light_workload,
        conclusions=(Conclusion.HEALTHY, Conclusion.WORKLOAD_LIGHT),
    ),
    DiagnosisRule(
        name="frequent low clock",
        guard=_frequent_low_clock,
        conclusions=(Conclusion.THERMAL_THROTTLING,),
        actions=(ACTION_CHECK_COOLING,),
    ),
    DiagnosisRule(
        name="healthy",
        guard=_always,
        conclusions=(Conclusion.HEALTHY,),
    ),
)

EDR_HINT_RULE = DiagnosisRule(
    name="EDR hint",
    guard=_always,
    conclusions=(Conclusion.EDR_HINT,),
    actions=(ACTION_REVIEW_EDR,),
)
