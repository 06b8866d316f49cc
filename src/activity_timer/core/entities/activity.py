"""Activity and time segment entities."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional


@dataclass(eq=False)
class TimeSegment:
    """A span of time recorded against an activity.

    While ``is_open`` is set the segment is the one being timed and consumers
    treat its end as "now"; closing it freezes ``end_time``.
    """

    start_time: datetime
    end_time: datetime
    is_open: bool = False
    activity_id: Optional[str] = None
    id: Optional[str] = None

    def effective_end(self, now: datetime) -> datetime:
        """Return the end used for display and totals.

        Args:
            now: Current timestamp

        Returns:
            datetime: ``now`` while open, the frozen end time otherwise
        """
        return now if self.is_open else self.end_time

    def duration(self, now: datetime) -> timedelta:
        """Get the segment length.

        Args:
            now: Current timestamp

        Returns:
            timedelta: Elapsed time between start and effective end
        """
        return self.effective_end(now) - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert segment to dictionary.

        Returns:
            dict: Segment data with ISO formatted timestamps
        """
        return {
            "id": self.id,
            "activity_id": self.activity_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "is_open": self.is_open,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeSegment":
        """Create segment from dictionary.

        Args:
            data: Segment data

        Returns:
            TimeSegment: New segment instance
        """
        start_time = data["start_time"]
        end_time = data["end_time"]
        if isinstance(start_time, str):
            start_time = datetime.fromisoformat(start_time)
        if isinstance(end_time, str):
            end_time = datetime.fromisoformat(end_time)

        return cls(
            start_time=start_time,
            end_time=end_time,
            is_open=bool(data.get("is_open", False)),
            activity_id=data.get("activity_id"),
            id=data.get("id"),
        )


@dataclass(eq=False)
class Activity:
    """A named thing the user spends time on.

    Segments are kept in creation order, which is not necessarily
    chronological.
    """

    name: str = ""
    time_segments: List[TimeSegment] = field(default_factory=list)
    id: Optional[str] = None

    @property
    def num_time_segments(self) -> int:
        return len(self.time_segments)

    def add_time_segment(self, segment: TimeSegment) -> int:
        """Append a segment to this activity.

        Args:
            segment: Segment to append

        Returns:
            int: Index of the new segment
        """
        segment.activity_id = self.id
        self.time_segments.append(segment)
        return len(self.time_segments) - 1

    def remove_time_segment(self, segment: TimeSegment) -> int:
        """Remove a segment by identity.

        Args:
            segment: Segment to remove

        Returns:
            int: Index the segment had

        Raises:
            ValueError: If the segment does not belong to this activity
        """
        for index, candidate in enumerate(self.time_segments):
            if candidate is segment:
                del self.time_segments[index]
                return index
        raise ValueError("Time segment does not belong to this activity")

    def get_time_segment(self, index: int) -> Optional[TimeSegment]:
        if 0 <= index < len(self.time_segments):
            return self.time_segments[index]
        return None

    def index_of(self, segment: TimeSegment) -> int:
        """Return the position of a segment, or -1 if it is not here."""
        for index, candidate in enumerate(self.time_segments):
            if candidate is segment:
                return index
        return -1

    def total_duration(self, now: datetime) -> timedelta:
        """Sum the durations of all segments.

        Args:
            now: Current timestamp, used for an open segment

        Returns:
            timedelta: Total recorded time
        """
        return sum(
            (segment.duration(now) for segment in self.time_segments),
            timedelta(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert activity to dictionary.

        Returns:
            dict: Activity data including its segments
        """
        return {
            "id": self.id,
            "name": self.name,
            "time_segments": [segment.to_dict() for segment in self.time_segments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        """Create activity from dictionary.

        Args:
            data: Activity data

        Returns:
            Activity: New activity instance
        """
        activity = cls(name=data.get("name") or "", id=data.get("id"))
        for segment_data in data.get("time_segments", []):
            segment = TimeSegment.from_dict(segment_data)
            activity.time_segments.append(segment)
        return activity
