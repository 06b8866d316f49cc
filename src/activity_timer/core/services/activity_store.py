"""In-memory activity collection and selection state."""

import logging
from typing import List, Optional

from ..entities.activity import Activity, TimeSegment

logger = logging.getLogger(__name__)

NO_SELECTION = -1


class ActivityStore:
    """Holds the activity list and the selected activity/time segment indices.

    Indices are plain integers. Any value outside ``[0, count)`` means
    nothing is selected; setting one never raises.
    """

    def __init__(self, activities: Optional[List[Activity]] = None):
        """Initialize the store.

        Args:
            activities: Initial activities
        """
        self.activities: List[Activity] = list(activities or [])
        self.selected_activity_index = NO_SELECTION
        self.selected_time_segment_index = NO_SELECTION

    @property
    def selected_activity(self) -> Optional[Activity]:
        if 0 <= self.selected_activity_index < len(self.activities):
            return self.activities[self.selected_activity_index]
        return None

    @property
    def selected_time_segment(self) -> Optional[TimeSegment]:
        activity = self.selected_activity
        if activity is None:
            return None
        return activity.get_time_segment(self.selected_time_segment_index)

    def index_of(self, activity: Activity) -> int:
        for index, candidate in enumerate(self.activities):
            if candidate is activity:
                return index
        return NO_SELECTION

    def replace_activities(self, activities: List[Activity]) -> None:
        """Swap in a freshly loaded activity list.

        Args:
            activities: Activities to hold
        """
        self.activities = list(activities)
        logger.debug(f"Store holds {len(self.activities)} activities")

    def add_activity(self, activity: Optional[Activity] = None) -> Activity:
        """Append an activity and select it.

        Args:
            activity: Activity to add, a new empty one when omitted

        Returns:
            Activity: The added activity
        """
        if activity is None:
            activity = Activity()
        self.activities.append(activity)
        self.selected_activity_index = len(self.activities) - 1
        return activity

    def remove_activity(self, activity: Activity) -> int:
        """Remove an activity by identity.

        The selection index is left as is; it reads as "no selection" once it
        is out of range.

        Args:
            activity: Activity to remove

        Returns:
            int: Index the activity had

        Raises:
            ValueError: If the activity is not in the store
        """
        index = self.index_of(activity)
        if index == NO_SELECTION:
            raise ValueError("Activity is not in the store")
        del self.activities[index]
        return index

    def add_time_segment(self, activity: Activity, segment: TimeSegment) -> int:
        """Append a segment to an activity.

        When the activity is the selected one the new segment becomes the
        selected segment.

        Args:
            activity: Owning activity
            segment: Segment to append

        Returns:
            int: Index of the new segment within the activity
        """
        index = activity.add_time_segment(segment)
        if activity is self.selected_activity:
            self.selected_time_segment_index = index
        return index

    def remove_time_segment(self, activity: Activity, segment: TimeSegment) -> int:
        return activity.remove_time_segment(segment)

    def open_segments(self) -> List[TimeSegment]:
        """Return every open segment across all activities."""
        return [
            segment
            for activity in self.activities
            for segment in activity.time_segments
            if segment.is_open
        ]
