"""Idle window value object."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class IdleWindow:
    """Gap between the last observed user input and the clock.

    Only the most recently detected window is kept; it is recomputed on every
    idle check rather than accumulated.
    """

    signal_time: datetime  # Last user input reported by the feed
    now: datetime

    @property
    def duration(self) -> timedelta:
        return self.now - self.signal_time
