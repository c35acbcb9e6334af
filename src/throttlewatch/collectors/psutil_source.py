"""
Metric source implementation using the 'psutil' library.

This module provides the PsutilMetricSource class, which reads aggregate CPU
load, current and maximum CPU clock, physical memory, the full process list
(cumulative CPU time and resident memory per process) and the thermal event
count in one call per tick.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import psutil

from ..models.samples import MetricSnapshot, ProcessReading
from .base import AbstractMetricSource, ThermalEventCounter
from .thermal import create_thermal_counter

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class PsutilMetricSource(AbstractMetricSource):
    """
    Reads host metrics through psutil.

    Every metric is read independently. When a read fails the metric falls
    back to the last value that was read successfully, or to its unavailable
    value (0, or None for the process list) when there is none; the failure
    is logged once when it starts and once when the metric recovers.

    Attributes:
        PROCESS_ATTRS: Attributes pre-fetched by psutil.process_iter.
        thermal_counter: Source of the thermal event count.
    """

    PROCESS_ATTRS: List[str] = ["pid", "name", "create_time", "cpu_times", "memory_info"]

    def __init__(
        self,
        thermal_counter: Optional[ThermalEventCounter] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            thermal_counter: Counter to use, picked for the platform when None.
            clock: Wall-clock function used to timestamp snapshots.
        """
        self.thermal_counter = thermal_counter or create_thermal_counter()
        self.clock = clock
        self._previous: Dict[str, Any] = {}
        self._failing: Set[str] = set()
        self._core_count = psutil.cpu_count(logical=True) or 1

        # The first non-blocking cpu_percent() call always returns 0.0; make
        # it here so that the first tick reports a real figure.
        try:
            psutil.cpu_percent(interval=None)
        except Exception as e:
            logger.debug(f"Priming cpu_percent failed: {e}")

        logger.info(
            f"Initialized PsutilMetricSource ({self._core_count} logical cores, "
            f"thermal source: {self.thermal_counter.name})"
        )

    def logical_core_count(self) -> int:
        return self._core_count

    def _read_metric(
        self,
        name: str,
        reader: Callable[[], Any],
        unavailable: Any,
        keep_previous: bool = True,
    ) -> Any:
        """
        Run one metric reader, falling back when it fails.

        Args:
            name: Metric name used in log messages.
            reader: Zero-argument callable returning the metric value.
            unavailable: Value used when the read fails and there is no prior value.
            keep_previous: Whether a prior value may stand in for a failed read.
        """
        try:
            value = reader()
        except Exception as e:
            if name not in self._failing:
                logger.warning(f"Metric '{name}' unavailable: {type(e).__name__}: {e}")
                self._failing.add(name)
            else:
                logger.debug(f"Metric '{name}' still unavailable: {e}")
            if keep_previous:
                return self._previous.get(name, unavailable)
            return unavailable

        if name in self._failing:
            logger.info(f"Metric '{name}' is available again")
            self._failing.discard(name)
        self._previous[name] = value
        return value

    def _read_cpu_load(self) -> float:
        return float(psutil.cpu_percent(interval=None))

    def _read_clock(self) -> Tuple[float, float]:
        freq = psutil.cpu_freq()
        if freq is None:
            raise RuntimeError("CPU frequency is not exposed on this host")
        return float(freq.current or 0.0), float(freq.max or 0.0)

    def _read_memory(self) -> Tuple[float, float]:
        mem = psutil.virtual_memory()
        used_mb = (mem.total - mem.available) / BYTES_PER_MB
        avail_mb = mem.available / BYTES_PER_MB
        return round(used_mb, 1), round(avail_mb, 1)

    def _read_processes(self) -> List[ProcessReading]:
        readings: List[ProcessReading] = []
        for proc in psutil.process_iter(self.PROCESS_ATTRS):
            reading = self._get_reading_for_process(proc)
            if reading is not None:
                readings.append(reading)
        return readings

    def _get_reading_for_process(self, proc: psutil.Process) -> Optional[ProcessReading]:
        """
        Build the reading of a single process, or None when it cannot be read.

        Processes that exit between listing and reading, or whose CPU times
        are not accessible, are simply missing from this tick.
        """
        try:
            info = proc.info
            cpu_times = info.get("cpu_times")
            if cpu_times is None:
                return None
            memory_info = info.get("memory_info")
            return ProcessReading(
                identity=(info["pid"], info.get("create_time")),
                name=info.get("name") or f"pid-{info['pid']}",
                cpu_seconds=float(cpu_times.user + cpu_times.system),
                resident_bytes=int(memory_info.rss) if memory_info is not None else 0,
            )
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            return None

    def _read_thermal(self, since: float) -> int:
        count = int(self.thermal_counter.count_since(since))
        # The count is cumulative over the session and never goes down.
        return max(count, self._previous.get("thermal_events", 0))

    def read_snapshot(self, since: float) -> MetricSnapshot:
        timestamp = self.clock()
        cpu_load_pct = self._read_metric("cpu_load", self._read_cpu_load, 0.0)
        clock_mhz, max_clock_mhz = self._read_metric("clock", self._read_clock, (0.0, 0.0))
        ram_used_mb, ram_avail_mb = self._read_metric("memory", self._read_memory, (0.0, 0.0))
        processes = self._read_metric(
            "processes", self._read_processes, None, keep_previous=False
        )
        thermal_events = self._read_metric(
            "thermal_events", lambda: self._read_thermal(since), 0
        )

        return MetricSnapshot(
            timestamp=timestamp,
            cpu_load_pct=cpu_load_pct,
            clock_mhz=clock_mhz,
            max_clock_mhz=max_clock_mhz,
            ram_used_mb=ram_used_mb,
            ram_avail_mb=ram_avail_mb,
            processes=processes,
            thermal_event_count=thermal_events,
        )
