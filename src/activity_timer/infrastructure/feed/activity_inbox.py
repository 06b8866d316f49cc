"""Single-slot inbox for last-user-activity readings."""

import logging
from datetime import datetime
from threading import Lock
from typing import Optional

from ...core.interfaces.activity_feed import DEFAULT_CHANNEL, ActivityFeed

logger = logging.getLogger(__name__)


class ActivityInbox(ActivityFeed):
    """Buffer between a pushing producer and the polling timer.

    Producers call ``receive`` from any thread. The inbox holds at most one
    reading: a new reading replaces the previous one, and
    ``latest_activity_signal`` takes it out.
    """

    def __init__(self, channel: str = DEFAULT_CHANNEL):
        """Initialize the inbox.

        Args:
            channel: Name of the topic this inbox listens on
        """
        self.channel = channel
        self._latest: Optional[datetime] = None
        self._lock = Lock()

    def receive(self, last_user_activity: datetime) -> None:
        """Store a reading, replacing any unread one.

        Args:
            last_user_activity: Time of the last observed user input
        """
        with self._lock:
            self._latest = last_user_activity
        logger.debug(f"[{self.channel}] received {last_user_activity}")

    def latest_activity_signal(self) -> Optional[datetime]:
        with self._lock:
            message, self._latest = self._latest, None
            return message

    @property
    def pending(self) -> int:
        """Number of unread readings, 0 or 1."""
        with self._lock:
            return 0 if self._latest is None else 1
