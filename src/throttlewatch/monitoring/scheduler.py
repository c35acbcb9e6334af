"""
The sampling loop.

This module provides the SamplingScheduler, which drives one monitoring
session: it reads a snapshot per tick in a worker thread, derives the tick's
Sample, aggregates it, hands it to the registered observers and waits for the
next tick. Finalization (aggregation close and diagnosis) runs exactly once,
whether the session reached its end time, was stopped, or failed.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Iterable, List, Optional

from ..attribution import ProcessDeltaTracker, top_memory_process
from ..collectors.base import AbstractMetricSource
from ..config import get_config
from ..detection import LowClockStreakDetector
from ..diagnosis import diagnose
from ..models.config import AppConfig
from ..models.results import SessionReport
from ..models.samples import MetricSnapshot, Sample
from ..validation import ErrorSeverity, handle_error, handle_observer_error
from .aggregator import SessionAggregator

logger = logging.getLogger(__name__)

SampleObserver = Callable[[Sample], None]


class SchedulerState(Enum):
    """Lifecycle of a sampling session."""

    IDLE = "idle"
    RUNNING = "running"
    FINALIZING = "finalizing"
    TERMINATED = "terminated"


class SamplingScheduler:
    """
    Runs one sampling session against a metric source.

    Ticks are strictly sequential. The only suspension point is the wait
    between ticks, which `request_stop` interrupts; a stop requested while a
    snapshot is being read takes effect once that tick has completed.
    """

    def __init__(
        self,
        source: AbstractMetricSource,
        config: Optional[AppConfig] = None,
        observers: Optional[Iterable[SampleObserver]] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            source: Metric source read once per tick.
            config: Application configuration, the loaded one when None.
            observers: Callables invoked with every completed Sample.
            clock: Wall-clock function used for the session start/end.
        """
        self.source = source
        self.config = config or get_config()
        self.observers: List[SampleObserver] = list(observers or [])
        self.clock = clock

        collection = self.config.monitor.collection
        detection = self.config.monitor.detection
        self.interval_seconds = collection.interval_seconds
        self.duration_seconds = collection.duration_seconds

        self.tracker = ProcessDeltaTracker(
            source.logical_core_count(), self.config.attribution.excluded_processes
        )
        self.detector = LowClockStreakDetector(
            detection.low_clock_ratio, detection.min_low_clock_streak
        )
        self.aggregator: Optional[SessionAggregator] = None
        self.report: Optional[SessionReport] = None
        self.state = SchedulerState.IDLE
        self.skipped_ticks = 0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._stop_requested = False

    def add_observer(self, observer: SampleObserver) -> None:
        self.observers.append(observer)

    def request_stop(self) -> None:
        """
        Ask the running session to stop.

        Safe to call from signal handlers and from other threads. A stop
        requested before `run` starts makes the session end without ticking.
        """
        self._stop_requested = True
        loop, event = self._loop, self._stop_event
        if loop is None or event is None:
            return
        try:
            loop.call_soon_threadsafe(event.set)
        except RuntimeError:
            # Loop already closed: the session is over.
            pass

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    async def run(self) -> SessionReport:
        """
        Run the session until its end time or a stop request.

        Returns:
            The session report. Its diagnosis is None when no tick completed.

        Raises:
            RuntimeError: If the scheduler has already been run.
        """
        if self.state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler cannot run from state {self.state.value}")

        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        start_time = self.clock()
        end_time = start_time + self.duration_seconds if self.duration_seconds else None
        self.aggregator = SessionAggregator(
            high_load_threshold=self.config.monitor.detection.high_load_threshold,
            history_limit=self.config.monitor.general.history_limit,
            start_time=start_time,
        )
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="MetricSource")

        self.state = SchedulerState.RUNNING
        ended_by = "duration"
        if end_time is None:
            logger.info(f"Sampling every {self.interval_seconds}s until stopped")
        else:
            logger.info(
                f"Sampling every {self.interval_seconds}s for {self.duration_seconds / 60:.1f} min"
            )

        try:
            while True:
                if self._stop_event.is_set():
                    ended_by = "cancelled"
                    break
                if end_time is not None and self.clock() >= end_time:
                    break

                await self._tick(executor, start_time)

                if await self._wait_interval():
                    ended_by = "cancelled"
                    break
        except asyncio.CancelledError:
            ended_by = "cancelled"
            raise
        except Exception as e:
            ended_by = "error"
            handle_error(
                error=e,
                context="sampling loop",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )
        finally:
            self.state = SchedulerState.FINALIZING
            executor.shutdown(wait=False, cancel_futures=True)
            self.report = self._finalize(ended_by)
            self.state = SchedulerState.TERMINATED

        return self.report

    def run_blocking(self) -> SessionReport:
        """Run the session on a fresh event loop."""
        return asyncio.run(self.run())

    async def _tick(self, executor: ThreadPoolExecutor, since: float) -> Optional[Sample]:
        """
        Read, derive, aggregate and emit one sample.

        A failed snapshot read skips the whole tick and drops the process
        CPU baseline.
        """
        loop = asyncio.get_running_loop()
        try:
            snapshot = await loop.run_in_executor(executor, self.source.read_snapshot, since)
        except Exception as e:
            self.skipped_ticks += 1
            self.tracker.reset()
            logger.warning(f"Snapshot read failed, tick skipped: {e}")
            return None

        sample = self.build_sample(snapshot)
        self.aggregator.add(sample)
        self._notify(sample)
        return sample

    def build_sample(self, snapshot: MetricSnapshot) -> Sample:
        """Derive a Sample from a snapshot, advancing the tracker and detector."""
        attribution = self.tracker.observe(snapshot.processes, self.interval_seconds)
        streak = self.detector.update(snapshot.clock_mhz, snapshot.max_clock_mhz)
        return Sample(
            timestamp=snapshot.timestamp,
            cpu_load_pct=snapshot.cpu_load_pct,
            clock_mhz=snapshot.clock_mhz,
            max_clock_mhz=snapshot.max_clock_mhz,
            ram_used_mb=snapshot.ram_used_mb,
            ram_avail_mb=snapshot.ram_avail_mb,
            top_cpu_process=attribution.top,
            top_mem_process=top_memory_process(snapshot.processes),
            thermal_events_since_start=snapshot.thermal_event_count,
            alert=streak.alert,
            low_clock_streak=streak.streak,
            low_clock=streak.low_clock,
            high_load=self.aggregator.is_high_load(snapshot.cpu_load_pct),
        )

    def _notify(self, sample: Sample) -> None:
        for observer in self.observers:
            try:
                observer(sample)
            except Exception as e:
                name = getattr(observer, "__qualname__", repr(observer))
                handle_observer_error(e, name, logger=logger)

    async def _wait_interval(self) -> bool:
        """Wait one interval; return True when a stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            return True
        except asyncio.TimeoutError:
            return False

    def _finalize(self, ended_by: str) -> SessionReport:
        state = self.aggregator.finalize(self.clock())
        if state.sample_count == 0:
            logger.info("Session ended before any sample was taken, no diagnosis")
            return SessionReport(state=state, diagnosis=None, ended_by=ended_by)

        diagnosis = diagnose(state, self.config.diagnosis)
        logger.info(
            f"Session ended ({ended_by}) after {state.sample_count} samples: "
            f"{', '.join(c.value for c in diagnosis.conclusions)}"
        )
        return SessionReport(state=state, diagnosis=diagnosis, ended_by=ended_by)
