"""Idle detection and include/exclude resolution."""

import logging
from datetime import timedelta
from typing import Optional

from ..entities.activity import TimeSegment
from ..entities.idle_window import IdleWindow
from ..errors import InvalidOperationError
from ..interfaces.activity_feed import ActivityFeed
from ..interfaces.clock import Clock
from .timing_state_machine import TimingStateMachine

logger = logging.getLogger(__name__)


class IdleReconciliationEngine:
    """Detects idle gaps in the started segment and applies the user's choice.

    The idle window is recomputed from the latest feed reading and clock
    reading on every check; it only exists while timing is running.
    """

    def __init__(
        self,
        timing: TimingStateMachine,
        feed: ActivityFeed,
        clock: Clock,
        idle_threshold: timedelta = timedelta(minutes=5),
    ):
        """Initialize the engine.

        Args:
            timing: Timing state machine owning the started segment
            feed: Source of last-user-activity readings
            clock: Source of the current time
            idle_threshold: Gap at or above which the user counts as idle
        """
        self.timing = timing
        self.feed = feed
        self.clock = clock
        self.idle_threshold = idle_threshold
        self.idle_window: Optional[IdleWindow] = None

    @property
    def is_include_exclude_enabled(self) -> bool:
        return self.idle_window is not None

    def clear(self) -> None:
        self.idle_window = None

    def check_idle_time(self) -> bool:
        """Compare the latest activity reading with the clock.

        Returns:
            bool: True if the user has been idle for at least the threshold
        """
        if not self.timing.is_running:
            self.idle_window = None
            return False

        signal_time = self.feed.latest_activity_signal()
        if signal_time is None:
            logger.debug("No activity reading pending")
            return False

        now = self.clock.now()
        gap = now - signal_time
        logger.debug(
            f"Idle gap: {gap.total_seconds():.1f}s "
            f"(threshold: {self.idle_threshold.total_seconds():.0f}s)"
        )

        if gap >= self.idle_threshold:
            self.idle_window = IdleWindow(signal_time=signal_time, now=now)
            return True

        self.idle_window = None
        return False

    def _require_window(self) -> IdleWindow:
        if self.idle_window is None or not self.timing.is_running:
            raise InvalidOperationError("There is no idle time to resolve")
        return self.idle_window

    def include_idle_time(self) -> TimeSegment:
        """Count the idle window as worked time and keep timing.

        Returns:
            TimeSegment: The still open segment

        Raises:
            InvalidOperationError: If no idle window is pending
        """
        window = self._require_window()
        segment = self.timing.started_segment
        segment.end_time = window.now
        self.idle_window = None
        return segment

    def exclude_idle_time(self) -> TimeSegment:
        """Cut the started segment where idling began and stop timing.

        Returns:
            TimeSegment: The closed segment

        Raises:
            InvalidOperationError: If no idle window is pending
        """
        window = self._require_window()
        segment = self.timing.stop(end_time=window.signal_time)
        self.idle_window = None
        return segment
