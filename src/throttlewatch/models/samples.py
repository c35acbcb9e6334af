"""
Per-tick data models.

A `MetricSnapshot` is what the metric source returns for one tick. The
scheduler turns it into a `Sample`: the snapshot's raw values plus the values
derived from it (top processes, low-clock flags, streak length).
"""

from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional


@dataclass(frozen=True)
class ProcessReading:
    """
    One running process as seen in one snapshot.

    Attributes:
        identity: Opaque process identity, stable only while the process lives.
            The psutil source uses ``(pid, create_time)`` so a recycled PID is
            seen as a new process.
        name: Executable name (e.g. "chrome.exe", "python3").
        cpu_seconds: Cumulative user + system CPU time since process start.
        resident_bytes: Resident set size in bytes.
    """

    identity: Hashable
    name: str
    cpu_seconds: float
    resident_bytes: int


@dataclass(frozen=True)
class MetricSnapshot:
    """
    One read of every metric the host exposes, attributed to a single timestamp.

    A metric that could not be read is carried over from the previous snapshot
    or set to its unavailable value: 0 for numbers, None for the process list.
    """

    timestamp: float
    cpu_load_pct: float
    clock_mhz: float
    max_clock_mhz: float
    ram_used_mb: float
    ram_avail_mb: float
    processes: Optional[List[ProcessReading]]
    thermal_event_count: int = 0


@dataclass(frozen=True)
class ProcessCpuShare:
    """CPU percentage attributed to a process over one interval."""

    name: str
    pct: float


@dataclass(frozen=True)
class ProcessMemoryUse:
    """Resident memory of a process, in MB."""

    name: str
    mb: float


@dataclass(frozen=True)
class Sample:
    """
    One interval's collected and derived measurement.

    Samples are created once per tick by the scheduler and never modified.

    Attributes:
        low_clock: The tick's clock is below the configured ratio of max clock.
        alert: The low-clock streak has reached the configured minimum length.
        high_load: Aggregate CPU load reached the high-load threshold.
    """

    timestamp: float
    cpu_load_pct: float
    clock_mhz: float
    max_clock_mhz: float
    ram_used_mb: float
    ram_avail_mb: float
    top_cpu_process: Optional[ProcessCpuShare]
    top_mem_process: Optional[ProcessMemoryUse]
    thermal_events_since_start: int
    alert: bool
    low_clock_streak: int
    low_clock: bool = False
    high_load: bool = False

    def to_row(self) -> Dict[str, Any]:
        """Flatten the sample into a single table row."""
        return {
            "timestamp": self.timestamp,
            "cpu_load_pct": self.cpu_load_pct,
            "clock_mhz": self.clock_mhz,
            "max_clock_mhz": self.max_clock_mhz,
            "ram_used_mb": self.ram_used_mb,
            "ram_avail_mb": self.ram_avail_mb,
            "top_cpu_name": self.top_cpu_process.name if self.top_cpu_process else "",
            "top_cpu_pct": self.top_cpu_process.pct if self.top_cpu_process else 0.0,
            "top_mem_name": self.top_mem_process.name if self.top_mem_process else "",
            "top_mem_mb": self.top_mem_process.mb if self.top_mem_process else 0.0,
            "thermal_events": self.thermal_events_since_start,
            "low_clock": self.low_clock,
            "low_clock_streak": self.low_clock_streak,
            "alert": self.alert,
            "high_load": self.high_load,
        }
