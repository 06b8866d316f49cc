"""Publishes last-user-input instants from an OS idle probe."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from ...core.interfaces.clock import Clock, SystemClock
from ..feed.activity_inbox import ActivityInbox
from .base_monitor import BaseMonitor

logger = logging.getLogger(__name__)


class IdleSignalPublisher:
    """Turns probe idle seconds into readings on an activity inbox."""

    def __init__(
        self,
        monitor: BaseMonitor,
        inbox: ActivityInbox,
        clock: Optional[Clock] = None,
    ):
        """Initialize publisher.

        Args:
            monitor: Platform probe reporting idle seconds
            inbox: Inbox the readings are pushed to
            clock: Source of the current time
        """
        self.monitor = monitor
        self.inbox = inbox
        self.clock = clock or SystemClock()

    def publish(self) -> Optional[datetime]:
        """Read the probe once and push the last-input instant.

        Returns:
            The published instant, or None if the probe gave no reading
        """
        try:
            idle_seconds = self.monitor.get_idle_time()
        except Exception as e:
            logger.error(f"Idle probe failed: {e}", exc_info=True)
            return None

        if idle_seconds is None:
            logger.debug("Idle probe returned no reading")
            return None

        last_input = self.clock.now() - timedelta(seconds=max(idle_seconds, 0.0))
        self.inbox.receive(last_input)
        return last_input
