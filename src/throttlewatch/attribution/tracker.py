"""
Per-process CPU attribution.

Operating systems expose per-process CPU usage as a cumulative counter of CPU
seconds since the process started. This module turns two consecutive readings
of that counter into the share of the machine the process used during the
interval, and picks the top consumer of each tick.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Sequence

from ..models.config import DEFAULT_EXCLUDED_PROCESSES
from ..models.samples import ProcessCpuShare, ProcessMemoryUse, ProcessReading

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def normalize_process_name(name: str) -> str:
    """Lower-case a process name and drop a trailing ".exe"."""
    normalized = name.strip().lower()
    if normalized.endswith(".exe"):
        normalized = normalized[:-4]
    return normalized


@dataclass
class ProcessObservation:
    """Last known cumulative CPU time of one process."""

    name: str
    cpu_seconds: float


@dataclass
class AttributionResult:
    """
    Result of one tick of attribution.

    Attributes:
        shares: CPU share of every process that had a prior observation, in
            process-list order.
        top: The top CPU consumer, or None when nothing used CPU.
    """

    shares: List[ProcessCpuShare] = field(default_factory=list)
    top: Optional[ProcessCpuShare] = None


class ProcessDeltaTracker:
    """
    Converts cumulative per-process CPU seconds into per-interval percentages.

    The share of a process is ``delta / interval * (100 / logical_cores)``,
    so 100% means every core was busy with that process for the whole
    interval. A process seen for the first time only seeds the tracker: its
    cumulative counter covers its whole lifetime, not this interval.

    Processes whose name is in the exclusion list never become the top
    consumer. Matching is by name, so every process with an excluded name is
    skipped, related or not.
    """

    def __init__(
        self,
        logical_cores: int,
        excluded_names: Iterable[str] = DEFAULT_EXCLUDED_PROCESSES,
    ):
        if logical_cores < 1:
            raise ValueError(f"logical_cores must be >= 1, got {logical_cores}")
        self.logical_cores = logical_cores
        self.excluded_names = frozenset(normalize_process_name(n) for n in excluded_names)
        self._history: Dict[Hashable, ProcessObservation] = {}

    @property
    def tracked_count(self) -> int:
        """Number of processes with a stored observation."""
        return len(self._history)

    def is_excluded(self, name: str) -> bool:
        return normalize_process_name(name) in self.excluded_names

    def cpu_percent(self, previous_seconds: float, current_seconds: float, interval_seconds: float) -> float:
        """Share of the machine used between two cumulative readings, 1 decimal."""
        delta = max(0.0, current_seconds - previous_seconds)
        return round(delta / interval_seconds * (100.0 / self.logical_cores), 1)

    def observe(
        self,
        processes: Optional[Sequence[ProcessReading]],
        interval_seconds: float,
    ) -> AttributionResult:
        """
        Attribute CPU usage for one tick and update the stored observations.

        Args:
            processes: The tick's process list, or None when it could not be
                read. A None list drops the stored observations, so the next
                list re-seeds every process instead of spanning two intervals.
            interval_seconds: Length of the sampling interval (> 0).

        Returns:
            The per-process shares and the tick's top consumer.
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        if processes is None:
            logger.debug("No process list this tick, attribution baseline dropped")
            self._history.clear()
            return AttributionResult()

        result = AttributionResult()
        current: Dict[Hashable, ProcessObservation] = {}

        for reading in processes:
            previous = self._history.get(reading.identity)
            current[reading.identity] = ProcessObservation(reading.name, reading.cpu_seconds)
            if previous is None:
                continue

            share = ProcessCpuShare(
                name=reading.name,
                pct=self.cpu_percent(previous.cpu_seconds, reading.cpu_seconds, interval_seconds),
            )
            result.shares.append(share)

            if self.is_excluded(reading.name):
                continue
            # Strictly greater: ties keep the process listed first.
            if share.pct > 0 and (result.top is None or share.pct > result.top.pct):
                result.top = share

        # Identities missing from this tick have exited; drop them.
        self._history = current
        return result

    def reset(self) -> None:
        self._history.clear()


def top_memory_process(processes: Optional[Sequence[ProcessReading]]) -> Optional[ProcessMemoryUse]:
    """
    Return the process with the largest resident set, ties to the first listed.
    """
    if not processes:
        return None
    top: Optional[ProcessReading] = None
    for reading in processes:
        if top is None or reading.resident_bytes > top.resident_bytes:
            top = reading
    return ProcessMemoryUse(name=top.name, mb=round(top.resident_bytes / BYTES_PER_MB, 1))
