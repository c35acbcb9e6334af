"""
Session-wide aggregation of samples.
"""

import logging
import time
from typing import Optional

from ..models.results import SessionState
from ..models.samples import Sample

logger = logging.getLogger(__name__)


class SessionAggregator:
    """
    Accumulates the counters, hit tables and summary statistics of a session.

    Statistics are kept incrementally, so they stay exact even when the
    retained sample history is bounded by ``history_limit``.
    """

    def __init__(
        self,
        high_load_threshold: float = 70.0,
        history_limit: int = 0,
        start_time: Optional[float] = None,
    ):
        """
        Args:
            high_load_threshold: CPU load (%) at or above which a sample is
                high-load.
            history_limit: Maximum number of samples kept in the state's
                history, 0 for no limit.
            start_time: Session start, now when None.
        """
        self.high_load_threshold = high_load_threshold
        self.history_limit = history_limit
        self.state = SessionState(start_time=start_time if start_time is not None else time.time())
        self._finalized = False

    def is_high_load(self, cpu_load_pct: float) -> bool:
        return cpu_load_pct >= self.high_load_threshold

    def add(self, sample: Sample) -> None:
        """Fold one sample into the session state."""
        if self._finalized:
            raise RuntimeError("Cannot add samples to a finalized session")

        state = self.state
        high_load = self.is_high_load(sample.cpu_load_pct)

        state.sample_count += 1
        if sample.low_clock:
            state.low_clock_sample_count += 1
        if high_load:
            state.high_load_sample_count += 1
            if sample.low_clock:
                state.high_load_low_clock_sample_count += 1

        # The source reports a cumulative count since session start.
        state.thermal_events_total = sample.thermal_events_since_start

        if sample.top_cpu_process is not None:
            state.cpu_hit_counts[sample.top_cpu_process.name] += 1
        if sample.top_mem_process is not None:
            state.mem_hit_counts[sample.top_mem_process.name] += 1

        state.clock_stats.add(sample.clock_mhz)
        state.load_stats.add(sample.cpu_load_pct)

        state.samples.append(sample)
        if self.history_limit and len(state.samples) > self.history_limit:
            del state.samples[: len(state.samples) - self.history_limit]

    def finalize(self, end_time: Optional[float] = None) -> SessionState:
        """
        Close the session and return its state.

        Calling it again returns the same state without changing the end time.
        """
        if not self._finalized:
            self.state.end_time = end_time if end_time is not None else time.time()
            self._finalized = True
            logger.debug(
                f"Session finalized: {self.state.sample_count} samples over "
                f"{self.state.duration_seconds:.1f}s"
            )
        return self.state

    @property
    def is_finalized(self) -> bool:
        return self._finalized
