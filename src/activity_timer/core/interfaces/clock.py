"""Wall-clock abstraction."""

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Get the current timestamp."""
        pass


class SystemClock(Clock):
    """Clock backed by the local system time."""

    def now(self) -> datetime:
        return datetime.now()
