"""
Low-clock detection for the throttlewatch package.
"""

from .streak import LowClockStreakDetector, StreakReading

__all__ = ["LowClockStreakDetector", "StreakReading"]
