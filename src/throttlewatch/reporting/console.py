"""
Per-sample display and alert observers.
"""

import logging
import sys
import time
from typing import Callable, Optional, TextIO

from ..models.samples import Sample

logger = logging.getLogger(__name__)


def format_sample_line(sample: Sample) -> str:
    """One-line, fixed-layout rendering of a sample."""
    if sample.top_cpu_process is not None:
        top_cpu = f"{sample.top_cpu_process.name} ({sample.top_cpu_process.pct:.1f}%)"
    else:
        top_cpu = "-"
    if sample.top_mem_process is not None:
        top_mem = f"{sample.top_mem_process.name} ({sample.top_mem_process.mb:.0f} MB)"
    else:
        top_mem = "-"

    line = (
        f"load {sample.cpu_load_pct:5.1f}% | "
        f"clock {sample.clock_mhz:.0f}/{sample.max_clock_mhz:.0f} MHz | "
        f"RAM used {sample.ram_used_mb:.0f} MB, free {sample.ram_avail_mb:.0f} MB | "
        f"top CPU {top_cpu} | top MEM {top_mem} | "
        f"thermal {sample.thermal_events_since_start}"
    )
    if sample.low_clock:
        line += f" | LOW CLOCK x{sample.low_clock_streak}"
    if sample.alert:
        line += " | ALERT"
    return line


class ConsoleReporter:
    """Logs one line per sample."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def __call__(self, sample: Sample) -> None:
        self.log.info(format_sample_line(sample))


class AlertNotifier:
    """
    Reacts to the sustained low-clock alert of a sample.

    Every notification logs a warning and, when ``bell`` is set, writes the
    terminal bell character. After a notification, alerts are ignored until
    ``cooldown_seconds`` have passed.
    """

    def __init__(
        self,
        cooldown_seconds: float = 60.0,
        bell: bool = True,
        stream: Optional[TextIO] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cooldown_seconds = cooldown_seconds
        self.bell = bell
        self.stream = stream
        self.clock = clock
        self.notification_count = 0
        self._last_notified: Optional[float] = None

    def __call__(self, sample: Sample) -> None:
        if not sample.alert:
            return
        now = self.clock()
        if self._last_notified is not None and now - self._last_notified < self.cooldown_seconds:
            return

        self._last_notified = now
        self.notification_count += 1
        logger.warning(
            f"ALERT: clock {sample.clock_mhz:.0f} MHz of {sample.max_clock_mhz:.0f} MHz max "
            f"for {sample.low_clock_streak} consecutive samples"
        )
        if self.bell:
            stream = self.stream or sys.stdout
            stream.write("\a")
            stream.flush()
