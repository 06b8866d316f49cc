"""State machine guarding the single open time segment."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..entities.activity import Activity, TimeSegment
from ..errors import InvalidOperationError
from ..interfaces.clock import Clock
from .activity_store import ActivityStore

logger = logging.getLogger(__name__)

START_TEXT = "Start"
STOP_TEXT = "Stop"


class TimingStateMachine:
    """Opens and closes time segments.

    At most one segment across the whole store is open; it is referenced by
    ``started_segment`` and owned by ``started_activity``. Every transition
    goes through this class.
    """

    def __init__(self, store: ActivityStore, clock: Clock):
        """Initialize the state machine.

        Args:
            store: Activity store holding the segments
            clock: Source of the current time
        """
        self.store = store
        self.clock = clock
        self.started_activity: Optional[Activity] = None
        self.started_segment: Optional[TimeSegment] = None

    @property
    def is_running(self) -> bool:
        return self.started_segment is not None

    @property
    def start_stop_text(self) -> str:
        return STOP_TEXT if self.is_running else START_TEXT

    def owns(
        self,
        activity: Optional[Activity] = None,
        segment: Optional[TimeSegment] = None,
    ) -> bool:
        """Check whether an activity or segment is the started one."""
        if not self.is_running:
            return False
        if activity is not None and activity is self.started_activity:
            return True
        return segment is not None and segment is self.started_segment

    def elapsed(self) -> timedelta:
        if self.started_segment is None:
            return timedelta()
        return self.started_segment.duration(self.clock.now())

    def start(self, activity: Optional[Activity]) -> TimeSegment:
        """Open a new segment on an activity.

        Args:
            activity: Activity to time

        Returns:
            TimeSegment: The opened segment

        Raises:
            InvalidOperationError: If already running or no activity is given
        """
        if self.is_running:
            raise InvalidOperationError("Timing is already started")
        if activity is None:
            raise InvalidOperationError("No activity selected to start timing")

        now = self.clock.now()
        segment = TimeSegment(start_time=now, end_time=now, is_open=True)
        self.store.add_time_segment(activity, segment)

        self.started_activity = activity
        self.started_segment = segment
        logger.debug(f"Opened segment on {activity.name!r} at {now}")
        return segment

    def resume(self, activity: Activity, segment: TimeSegment) -> None:
        """Adopt an already open segment, e.g. one reloaded from storage.

        Raises:
            InvalidOperationError: If another segment is started or the
                segment is closed
        """
        if self.is_running and segment is not self.started_segment:
            raise InvalidOperationError("Timing is already started")
        if not segment.is_open:
            raise InvalidOperationError("Only an open segment can be resumed")
        self.started_activity = activity
        self.started_segment = segment

    def stop(self, end_time: Optional[datetime] = None) -> TimeSegment:
        """Close the started segment.

        Args:
            end_time: Frozen end of the segment, the current time when omitted

        Returns:
            TimeSegment: The closed segment

        Raises:
            InvalidOperationError: If timing is not started
        """
        if self.started_segment is None:
            raise InvalidOperationError("Timing is not started")

        segment = self.started_segment
        segment.end_time = end_time if end_time is not None else self.clock.now()
        segment.is_open = False

        self.started_activity = None
        self.started_segment = None
        logger.debug(f"Closed segment at {segment.end_time}")
        return segment

    def abort(self) -> Optional[TimeSegment]:
        """Leave the running state without touching any timestamp.

        Used when the started activity or segment is deleted or the store is
        reloaded; only the started references are cleared.

        Returns:
            The segment that was started, or None if idle
        """
        segment = self.started_segment
        self.started_activity = None
        self.started_segment = None
        return segment
