"""
Thermal event counters.

Hosts expose throttling events in very different ways. This module provides
one counter per supported source and a factory that picks the right one for
the running platform:

- Linux: the per-CPU ``thermal_throttle`` counters in sysfs, which count
  throttling events since boot.
- Windows: the Kernel-Processor-Power event 37 ("speed of processor is being
  limited by system firmware") in the System event log, queried with
  ``wevtutil``.
- Anything else: a counter that always reports 0.
"""

import glob
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional

from ..system.commands import is_command_available, run_command
from .base import ThermalEventCounter

logger = logging.getLogger(__name__)

SYSFS_THROTTLE_GLOB = "/sys/devices/system/cpu/cpu*/thermal_throttle/*_throttle_count"

WINDOWS_PROVIDER = "Microsoft-Windows-Kernel-Processor-Power"
WINDOWS_EVENT_ID = 37


class NullThermalCounter(ThermalEventCounter):
    """Counter for hosts without a thermal event source."""

    name = "none"

    def count_since(self, since: float) -> int:
        return 0


class SysfsThrottleCounter(ThermalEventCounter):
    """
    Sums the Linux per-CPU core and package throttle counters.

    The kernel counters are cumulative since boot, so the first read becomes
    the baseline and later reads report growth over it.
    """

    name = "sysfs"

    def __init__(self, pattern: str = SYSFS_THROTTLE_GLOB):
        self.pattern = pattern
        self._baseline: Optional[int] = None

    def _read_total(self) -> int:
        total = 0
        for path in glob.glob(self.pattern):
            with open(path, "r") as f:
                total += int(f.read().strip() or 0)
        return total

    def count_since(self, since: float) -> int:
        total = self._read_total()
        if self._baseline is None:
            self._baseline = total
            logger.debug(f"Thermal throttle baseline: {total} events since boot")
        return max(0, total - self._baseline)

    @classmethod
    def is_available(cls, pattern: str = SYSFS_THROTTLE_GLOB) -> bool:
        return bool(glob.glob(pattern))


class WindowsEventLogCounter(ThermalEventCounter):
    """
    Counts firmware/thermal frequency-limit events in the Windows System log.
    """

    name = "eventlog"

    def __init__(self, timeout: float = 10.0, max_events: int = 1000):
        self.timeout = timeout
        self.max_events = max_events
        self._cap_warned = False

    def _build_query(self, since: float) -> str:
        since_utc = datetime.fromtimestamp(since, tz=timezone.utc)
        stamp = since_utc.strftime("%Y-%m-%dT%H:%M:%S.000Z")
        return (
            f"*[System[Provider[@Name='{WINDOWS_PROVIDER}'] "
            f"and (EventID={WINDOWS_EVENT_ID}) "
            f"and TimeCreated[@SystemTime>='{stamp}']]]"
        )

    def count_since(self, since: float) -> int:
        args = [
            "wevtutil",
            "qe",
            "System",
            f"/q:{self._build_query(since)}",
            "/f:text",
            f"/c:{self.max_events}",
        ]
        returncode, stdout, stderr = run_command(args, timeout=self.timeout)
        if returncode != 0:
            raise OSError(f"wevtutil failed ({returncode}): {stderr.strip()}")
        # Text output starts every record with "Event[<n>]:".
        count = len(re.findall(r"^Event\[\d+\]", stdout, flags=re.MULTILINE))
        if count >= self.max_events and not self._cap_warned:
            self._cap_warned = True
            logger.warning(
                f"Thermal event query capped at {self.max_events} events, "
                f"the reported count is a lower bound from now on"
            )
        return count


def create_thermal_counter(platform: Optional[str] = None) -> ThermalEventCounter:
    """
    Pick the thermal event counter for the running platform.

    Args:
        platform: Override of ``sys.platform``, mainly for tests.
    """
    platform = platform or sys.platform
    if platform.startswith("linux") and SysfsThrottleCounter.is_available():
        logger.debug("Using sysfs thermal throttle counters")
        return SysfsThrottleCounter()
    if platform.startswith("win") and is_command_available("wevtutil"):
        logger.debug("Using Windows event log thermal counter")
        return WindowsEventLogCounter()
    logger.info("No thermal event source on this host, thermal events will read as 0")
    return NullThermalCounter()
