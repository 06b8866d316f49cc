"""Interface for the external user-activity feed."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

DEFAULT_CHANNEL = "last_user_activity"


class ActivityFeed(ABC):
    """Source of "last observed user input" timestamps."""

    channel: str = DEFAULT_CHANNEL

    @abstractmethod
    def latest_activity_signal(self) -> Optional[datetime]:
        """Pop the most recent activity reading.

        Older pending readings are discarded.

        Returns:
            The newest reading, or None when nothing is pending
        """
        pass
