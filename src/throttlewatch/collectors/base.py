"""
Defines the abstract interfaces of metric sources.

This module provides:
- AbstractMetricSource: the per-tick snapshot interface consumed by the
  sampling loop.
- ThermalEventCounter: the interface of OS thermal-event counters, which
  report how many throttling events were logged since a reference time.
"""

import logging
from abc import ABC, abstractmethod

from ..models.samples import MetricSnapshot

logger = logging.getLogger(__name__)


class AbstractMetricSource(ABC):
    """
    Abstract base class for metric sources.

    A metric source hides every OS-specific query behind a single call that
    returns one `MetricSnapshot` per tick. Implementations must not let one
    unreadable metric abort the snapshot: the failed metric falls back to its
    prior value, or to its unavailable value when there is none.
    """

    @abstractmethod
    def read_snapshot(self, since: float) -> MetricSnapshot:
        """
        Read every metric once.

        Args:
            since: Epoch seconds of the session start. Thermal events logged
                at or after this time are counted.

        Returns:
            A snapshot whose values all belong to the same tick.
        """
        pass

    @abstractmethod
    def logical_core_count(self) -> int:
        """Return the number of logical CPU cores of the host (>= 1)."""
        pass

    def close(self) -> None:
        """Release any resources held by the source."""
        pass


class ThermalEventCounter(ABC):
    """
    Counts OS-logged thermal throttling events.
    """

    name: str = "thermal"

    @abstractmethod
    def count_since(self, since: float) -> int:
        """
        Return the number of thermal events logged at or after ``since``.

        Raises:
            OSError: If the underlying source cannot be read this time.
        """
        pass
