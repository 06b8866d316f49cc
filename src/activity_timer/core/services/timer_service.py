"""Service driving activity timing for one user session."""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from ..config.timer_config import TimerConfig
from ..entities.activity import Activity, TimeSegment
from ..entities.idle_window import IdleWindow
from ..errors import InvalidOperationError
from ..events.event_dispatcher import Event, EventDispatcher
from ..events.event_types import (
    CollectionChangedEvent,
    IdleDetectedEvent,
    IdleResolvedEvent,
    PropertyChangedEvent,
    TimingEvent,
)
from ..interfaces.activity_feed import ActivityFeed
from ..interfaces.activity_repository import ActivityRepository
from ..interfaces.clock import Clock, SystemClock
from .activity_store import NO_SELECTION, ActivityStore
from .idle_reconciliation import IdleReconciliationEngine
from .time_text import TimeTextFormatter
from .timing_state_machine import TimingStateMachine
from .validation import END_TIME_FIELD, START_TIME_FIELD, ValidationMessages

logger = logging.getLogger(__name__)

# Observable properties in notification order. After every mutation the
# values are recomputed and a change event is dispatched, in this order, for
# each one that differs from the previous pass.
OBSERVABLE_PROPERTIES = (
    "selected_activity_index",
    "is_save_enabled",
    "is_time_segment_add_enabled",
    "selected_activity",
    "selected_time_segment_index",
    "selected_time_segment",
    "is_time_segment_delete_enabled",
    "selected_time_segment_start_time",
    "selected_time_segment_end_time",
    "start_stop_text",
    "is_start_stop_enabled",
    "started_activity",
    "idle_window",
    "is_include_exclude_enabled",
    "validation_messages",
)

# Compared by identity rather than equality
ENTITY_PROPERTIES = {"selected_activity", "selected_time_segment", "started_activity"}


class TimerService:
    """Facade over the activity store, timing and idle reconciliation.

    Every public operation runs to completion synchronously. Invalid use
    raises ``InvalidOperationError`` before any state changes; repository
    errors propagate to the caller unchanged.
    """

    def __init__(
        self,
        repository: ActivityRepository,
        feed: ActivityFeed,
        clock: Optional[Clock] = None,
        formatter: Optional[TimeTextFormatter] = None,
        config: Optional[TimerConfig] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
    ):
        """Initialize timer service and load stored activities.

        Args:
            repository: Activity repository
            feed: Source of last-user-activity readings
            clock: Source of the current time
            formatter: Date-time text formatter for edit fields
            config: Timer configuration
            event_dispatcher: Dispatcher receiving change notifications
        """
        self.config = config or TimerConfig()
        self.repository = repository
        self.feed = feed
        self.clock = clock or SystemClock()
        self.formatter = formatter or TimeTextFormatter(self.config.time_format)
        self.event_dispatcher = event_dispatcher or EventDispatcher()

        self.store = ActivityStore()
        self.timing = TimingStateMachine(self.store, self.clock)
        self.idle = IdleReconciliationEngine(
            self.timing, feed, self.clock, self.config.idle_threshold
        )
        self.validation = ValidationMessages()

        self._snapshot = self._take_snapshot()
        self.load_activities()

    # Read-only state

    @property
    def activities(self) -> List[Activity]:
        return self.store.activities

    @property
    def selected_activity(self) -> Optional[Activity]:
        return self.store.selected_activity

    @property
    def selected_time_segment(self) -> Optional[TimeSegment]:
        return self.store.selected_time_segment

    @property
    def started_activity(self) -> Optional[Activity]:
        return self.timing.started_activity

    @property
    def started_time_segment(self) -> Optional[TimeSegment]:
        return self.timing.started_segment

    @property
    def idle_window(self) -> Optional[IdleWindow]:
        return self.idle.idle_window

    @property
    def start_stop_text(self) -> str:
        return self.timing.start_stop_text

    @property
    def validation_messages(self) -> str:
        return self.validation.validation_messages

    # Derived flags

    @property
    def is_save_enabled(self) -> bool:
        return self.store.selected_activity is not None

    @property
    def is_time_segment_add_enabled(self) -> bool:
        return self.store.selected_activity is not None

    @property
    def is_time_segment_delete_enabled(self) -> bool:
        return self.store.selected_time_segment is not None

    @property
    def is_include_exclude_enabled(self) -> bool:
        return self.idle.is_include_exclude_enabled

    @property
    def is_start_stop_enabled(self) -> bool:
        return self.timing.is_running or self.store.selected_activity is not None

    # Selection

    @property
    def selected_activity_index(self) -> int:
        return self.store.selected_activity_index

    @selected_activity_index.setter
    def selected_activity_index(self, index: int) -> None:
        self.store.selected_activity_index = index
        self._notify_changes()

    @property
    def selected_time_segment_index(self) -> int:
        return self.store.selected_time_segment_index

    @selected_time_segment_index.setter
    def selected_time_segment_index(self, index: int) -> None:
        self.store.selected_time_segment_index = index
        self._notify_changes()

    # Time text fields

    @property
    def selected_time_segment_start_time(self) -> str:
        segment = self.store.selected_time_segment
        return self.formatter.format(segment.start_time) if segment else ""

    @selected_time_segment_start_time.setter
    def selected_time_segment_start_time(self, text: str) -> None:
        self._set_segment_time(START_TIME_FIELD, text)

    @property
    def selected_time_segment_end_time(self) -> str:
        segment = self.store.selected_time_segment
        return self.formatter.format(segment.end_time) if segment else ""

    @selected_time_segment_end_time.setter
    def selected_time_segment_end_time(self, text: str) -> None:
        self._set_segment_time(END_TIME_FIELD, text)

    def _set_segment_time(self, field: str, text: str) -> None:
        segment = self.store.selected_time_segment
        if segment is None:
            return

        result = self.formatter.parse(text)
        if result.ok:
            setattr(segment, field, result.value)
            self.validation.clear(field)
            activity = self.store.selected_activity
            self._collection_changed(
                "time_segments", "replace", activity.index_of(segment), segment
            )
        else:
            logger.debug(f"Rejected {field} text {text!r}: {result.error}")
            self.validation.set_error(field)

        self._notify_changes()

    # Activities

    def load_activities(self) -> None:
        """Replace the in-memory activities with the stored ones.

        A stored open segment becomes the started segment again.
        """
        activities = self.repository.load_activities()

        self.timing.abort()
        self.idle.clear()
        self.validation.clear_all()

        open_segments = [
            (activity, segment)
            for activity in activities
            for segment in activity.time_segments
            if segment.is_open
        ]
        if open_segments:
            activity, segment = max(open_segments, key=lambda pair: pair[1].start_time)
            for _, other in open_segments:
                if other is not segment:
                    logger.warning(
                        f"Closing extra open segment started at {other.start_time}"
                    )
                    other.is_open = False
            self.timing.resume(activity, segment)

        self.store.replace_activities(activities)
        logger.info(f"Loaded {len(activities)} activities")

        self._collection_changed("activities", "reset", NO_SELECTION)
        self._notify_changes()

    def add_activity(self) -> Activity:
        """Create an empty activity and select it.

        Returns:
            Activity: The new activity
        """
        activity = self.store.add_activity()
        self.store.selected_time_segment_index = NO_SELECTION

        self._collection_changed(
            "activities", "add", self.store.selected_activity_index, activity
        )
        self._notify_changes()
        return activity

    def rename_selected_activity(self, name: str) -> None:
        activity = self._require_selected_activity()
        activity.name = name
        self._collection_changed(
            "activities", "replace", self.store.selected_activity_index, activity
        )
        self._notify_changes()

    def save(self) -> None:
        """Persist the selected activity and its time segments.

        Raises:
            InvalidOperationError: If no activity is selected
        """
        activity = self._require_selected_activity()
        self.repository.save_activity(activity)
        self.repository.save_changes()
        logger.info(f"Saved activity {activity.id} ({activity.name!r})")
        self._notify_changes()

    def delete_activity(self) -> None:
        """Delete the selected activity.

        Deleting the started activity aborts timing.

        Raises:
            InvalidOperationError: If no activity is selected
        """
        activity = self._require_selected_activity()

        if activity.id is not None:
            self.repository.delete_activity(activity)
            self.repository.save_changes()

        started = self.timing.owns(activity=activity)
        index = self.store.remove_activity(activity)
        if started:
            self._abort_timing()

        logger.info(f"Deleted activity {activity.name!r}")
        self._collection_changed("activities", "remove", index, activity)
        self._notify_changes()

    # Time segments

    def add_time_segment(self) -> TimeSegment:
        """Add a closed, zero-length segment to the selected activity.

        Returns:
            TimeSegment: The new segment, which is also selected

        Raises:
            InvalidOperationError: If no activity is selected
        """
        activity = self._require_selected_activity()
        now = self.clock.now()
        segment = TimeSegment(start_time=now, end_time=now)
        index = self.store.add_time_segment(activity, segment)

        self._collection_changed("time_segments", "add", index, segment)
        self._notify_changes()
        return segment

    def delete_time_segment(self) -> None:
        """Delete the selected time segment.

        Deleting the started segment aborts timing.

        Raises:
            InvalidOperationError: If no time segment is selected
        """
        activity = self.store.selected_activity
        segment = self.store.selected_time_segment
        if activity is None or segment is None:
            raise InvalidOperationError("No time segment selected")

        started = self.timing.owns(segment=segment)
        index = self.store.remove_time_segment(activity, segment)
        if started:
            self._abort_timing()

        self._collection_changed("time_segments", "remove", index, segment)
        self._notify_changes()

    # Timing

    def start_stop(self) -> None:
        """Toggle timing.

        Starting opens a segment on the selected activity; stopping closes the
        started segment, wherever it is, and saves changes.

        Raises:
            InvalidOperationError: If starting with no activity selected
        """
        if self.timing.is_running:
            self._stop_timing()
            return

        activity = self.store.selected_activity
        segment = self.timing.start(activity)

        self._collection_changed(
            "time_segments", "add", activity.index_of(segment), segment
        )
        self._dispatch(
            TimingEvent(
                activity=activity,
                segment=segment,
                timestamp=segment.start_time,
                event_type="timing_start",
            )
        )
        self._notify_changes()

    def elapsed_time(self) -> timedelta:
        return self.timing.elapsed()

    def check_idle_time(self) -> bool:
        """Check the activity feed for an idle gap.

        Returns:
            bool: True if the user has been idle for at least the threshold
        """
        had_window = self.idle.idle_window is not None
        is_idle = self.idle.check_idle_time()

        if is_idle and not had_window:
            self._dispatch(
                IdleDetectedEvent(
                    idle_window=self.idle.idle_window,
                    timestamp=self.idle.idle_window.now,
                )
            )

        self._notify_changes()
        return is_idle

    def include_idle_time(self) -> None:
        """Count the pending idle window as worked time; timing continues.

        Raises:
            InvalidOperationError: If no idle window is pending
        """
        window = self.idle.idle_window
        activity = self.timing.started_activity
        segment = self.idle.include_idle_time()

        self._collection_changed(
            "time_segments", "replace", activity.index_of(segment), segment
        )
        self._dispatch(
            IdleResolvedEvent(
                resolution="include", idle_window=window, timestamp=window.now
            )
        )
        self._notify_changes()

    def exclude_idle_time(self) -> None:
        """Drop the pending idle window and stop timing where idling began.

        Raises:
            InvalidOperationError: If no idle window is pending
        """
        window = self.idle.idle_window
        activity = self.timing.started_activity
        segment = self.idle.exclude_idle_time()

        self._collection_changed(
            "time_segments", "replace", activity.index_of(segment), segment
        )
        self._dispatch(
            TimingEvent(
                activity=activity,
                segment=segment,
                timestamp=window.now,
                event_type="timing_stop",
            )
        )
        self._dispatch(
            IdleResolvedEvent(
                resolution="exclude", idle_window=window, timestamp=window.now
            )
        )
        self._notify_changes()
        self.repository.save_changes()

    def _stop_timing(self) -> None:
        activity = self.timing.started_activity
        segment = self.timing.stop()
        self.idle.clear()

        self._collection_changed(
            "time_segments", "replace", activity.index_of(segment), segment
        )
        self._dispatch(
            TimingEvent(
                activity=activity,
                segment=segment,
                timestamp=segment.end_time,
                event_type="timing_stop",
            )
        )
        self._notify_changes()
        self.repository.save_changes()

    def _abort_timing(self) -> None:
        activity = self.timing.started_activity
        segment = self.timing.abort()
        self.idle.clear()
        self._dispatch(
            TimingEvent(
                activity=activity,
                segment=segment,
                timestamp=self.clock.now(),
                event_type="timing_abort",
            )
        )

    # Notification helpers

    def _require_selected_activity(self) -> Activity:
        activity = self.store.selected_activity
        if activity is None:
            raise InvalidOperationError("No activity selected")
        return activity

    def _dispatch(self, event: Event) -> None:
        self.event_dispatcher.dispatch(event)

    def _collection_changed(
        self, collection: str, action: str, index: int, item: Any = None
    ) -> None:
        self._dispatch(
            CollectionChangedEvent(
                collection=collection,
                action=action,
                index=index,
                item=item,
                timestamp=self.clock.now(),
            )
        )

    def _take_snapshot(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in OBSERVABLE_PROPERTIES}

    def _notify_changes(self) -> None:
        """Dispatch a change event for every observable property that moved."""
        snapshot = self._take_snapshot()
        previous = self._snapshot
        self._snapshot = snapshot

        timestamp = self.clock.now()
        for name in OBSERVABLE_PROPERTIES:
            old, new = previous[name], snapshot[name]
            changed = old is not new if name in ENTITY_PROPERTIES else old != new
            if changed:
                self._dispatch(
                    PropertyChangedEvent(
                        property_name=name, value=new, timestamp=timestamp
                    )
                )
