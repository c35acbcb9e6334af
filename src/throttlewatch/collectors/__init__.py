"""
Metric collectors package.

This package hides every OS-specific query behind a single snapshot call:

- Abstract interfaces defining the metric source and thermal counter contracts
- A psutil-based metric source (CPU load, clock, memory, process list)
- Thermal event counters for Linux (sysfs) and Windows (event log)
- Graceful per-metric fallback so one unreadable metric never blocks a tick
"""

from .base import AbstractMetricSource, ThermalEventCounter
from .psutil_source import PsutilMetricSource
from .thermal import (
    NullThermalCounter,
    SysfsThrottleCounter,
    WindowsEventLogCounter,
    create_thermal_counter,
)

__all__ = [
    "AbstractMetricSource",
    "ThermalEventCounter",
    "PsutilMetricSource",
    "NullThermalCounter",
    "SysfsThrottleCounter",
    "WindowsEventLogCounter",
    "create_thermal_counter",
]
