"""
Session results data models.

This module defines the running aggregation of a sampling session
(`SessionState`), the end-of-session classification (`DiagnosisResult`) and
the container handed back to callers once the loop has terminated
(`SessionReport`).
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .samples import Sample


@dataclass
class RunningStats:
    """
    Incremental min / max / average of a stream of values.

    An empty instance reports 0.0 for every statistic.
    """

    count: int = 0
    total: float = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        if self.minimum is None or value < self.minimum:
            self.minimum = value
        if self.maximum is None or value > self.maximum:
            self.maximum = value

    @property
    def average(self) -> float:
        return self.total / self.count if self.count else 0.0

    @property
    def min_value(self) -> float:
        return self.minimum if self.minimum is not None else 0.0

    @property
    def max_value(self) -> float:
        return self.maximum if self.maximum is not None else 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "min": self.min_value,
            "max": self.max_value,
            "avg": round(self.average, 2),
        }


@dataclass
class SessionState:
    """
    Running aggregation of a sampling session.

    The aggregator mutates this object once per tick; once the session has
    ended it is read-only input to the diagnosis engine.

    Invariants:
        ``sample_count`` equals the number of samples added, and every
        ``*_sample_count`` field is <= ``sample_count``.
    """

    start_time: float
    end_time: Optional[float] = None
    sample_count: int = 0
    low_clock_sample_count: int = 0
    high_load_sample_count: int = 0
    high_load_low_clock_sample_count: int = 0
    # Latest cumulative count since session start, never summed.
    thermal_events_total: int = 0
    # Process name -> number of ticks it was the top consumer. Insertion
    # ordered, so ties resolve to the name seen first.
    cpu_hit_counts: Counter = field(default_factory=Counter)
    mem_hit_counts: Counter = field(default_factory=Counter)
    clock_stats: RunningStats = field(default_factory=RunningStats)
    load_stats: RunningStats = field(default_factory=RunningStats)
    samples: List[Sample] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return max(0.0, self.end_time - self.start_time)

    def to_dict(self) -> Dict[str, Any]:
        """Summarize the session for serialization (sample history excluded)."""
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_seconds": round(self.duration_seconds, 3),
            "sample_count": self.sample_count,
            "low_clock_sample_count": self.low_clock_sample_count,
            "high_load_sample_count": self.high_load_sample_count,
            "high_load_low_clock_sample_count": self.high_load_low_clock_sample_count,
            "thermal_events_total": self.thermal_events_total,
            "clock_mhz": self.clock_stats.to_dict(),
            "cpu_load_pct": self.load_stats.to_dict(),
            "top_cpu_processes": dict(self.cpu_hit_counts.most_common()),
            "top_mem_processes": dict(self.mem_hit_counts.most_common()),
        }


class Conclusion(str, Enum):
    """Diagnosis conclusion labels."""

    EVENT_LOG_HEAT = "event-log heat"
    THERMAL_THROTTLING = "thermal throttling"
    BOOST_DISABLED = "boost disabled"
    POWER_POLICY_SUSPECT = "power-policy suspect"
    HEALTHY = "healthy"
    WORKLOAD_LIGHT = "workload light"
    EDR_HINT = "EDR hint"


@dataclass(frozen=True)
class DiagnosisResult:
    """
    Output of the diagnosis engine.

    Both sequences are de-duplicated; their order is the order in which the
    rule cascade produced them, i.e. priority order.
    """

    conclusions: tuple
    actions: tuple

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "conclusions": [c.value for c in self.conclusions],
            "actions": list(self.actions),
        }


@dataclass
class SessionReport:
    """
    Everything a finished session hands back to its caller.

    Attributes:
        state: The final session aggregation.
        diagnosis: The classification, or None when no tick completed.
        ended_by: "duration", "cancelled" or "error".
    """

    state: SessionState
    diagnosis: Optional[DiagnosisResult]
    ended_by: str = "duration"
