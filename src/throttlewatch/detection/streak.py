"""
Low-clock streak detection.

A single sample below the clock threshold is usually noise (a power state
transition, a sampling artefact). Only a run of consecutive low samples raises
the sustained alert.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakReading:
    """
    Detector output for one tick.

    Attributes:
        low_clock: This tick's clock is below the threshold.
        streak: Consecutive low-clock ticks, including this one.
        alert: The streak has reached the minimum length.
    """

    low_clock: bool
    streak: int
    alert: bool


class LowClockStreakDetector:
    """
    Counts consecutive ticks where the clock is below ``ratio`` of max clock.

    A tick with an unknown max clock (0) is never low. Any tick that is not
    low resets the streak to zero.
    """

    def __init__(self, ratio: float = 0.8, min_streak: int = 3):
        if not 0 < ratio <= 1:
            raise ValueError(f"ratio must be in (0, 1], got {ratio}")
        if min_streak < 1:
            raise ValueError(f"min_streak must be >= 1, got {min_streak}")
        self.ratio = ratio
        self.min_streak = min_streak
        self.streak = 0

    def is_low_clock(self, clock_mhz: float, max_clock_mhz: float) -> bool:
        return max_clock_mhz > 0 and clock_mhz < max_clock_mhz * self.ratio

    def update(self, clock_mhz: float, max_clock_mhz: float) -> StreakReading:
        low = self.is_low_clock(clock_mhz, max_clock_mhz)
        if low:
            self.streak += 1
        else:
            if self.streak >= self.min_streak:
                logger.info(f"Low-clock streak ended after {self.streak} samples")
            self.streak = 0

        alert = self.streak >= self.min_streak
        if alert and self.streak == self.min_streak:
            logger.warning(
                f"Sustained low clock: {clock_mhz:.0f} MHz < {self.ratio:.0%} of "
                f"{max_clock_mhz:.0f} MHz for {self.streak} consecutive samples"
            )
        return StreakReading(low_clock=low, streak=self.streak, alert=alert)

    def reset(self) -> None:
        self.streak = 0
