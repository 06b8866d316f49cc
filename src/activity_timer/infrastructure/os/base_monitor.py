"""Base class for platform-specific idle probes."""

from abc import ABC, abstractmethod
from typing import Optional


class BaseMonitor(ABC):
    """Base class for platform-specific monitoring."""

    @abstractmethod
    def get_idle_time(self) -> Optional[float]:
        """Get seconds since the last keyboard or mouse input.

        Returns:
            float: Idle time in seconds, or None if it could not be read
        """
        pass

    @abstractmethod
    def is_screen_locked(self) -> bool:
        """Check if screen is locked.

        Returns:
            bool: True if screen is locked, False otherwise
        """
        pass
