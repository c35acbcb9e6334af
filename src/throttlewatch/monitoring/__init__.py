"""
Sampling loop and session aggregation.
"""

from .aggregator import SessionAggregator
from .scheduler import SampleObserver, SamplingScheduler, SchedulerState

__all__ = ["SessionAggregator", "SampleObserver", "SamplingScheduler", "SchedulerState"]
