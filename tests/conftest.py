"""Test configuration and shared fixtures."""

import os
from datetime import datetime, timedelta
from typing import List, Optional
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

# Qt widgets need a platform plugin; tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from activity_timer.core.entities.activity import Activity, TimeSegment
from activity_timer.core.events.event_dispatcher import EventDispatcher
from activity_timer.core.interfaces.activity_feed import ActivityFeed
from activity_timer.core.interfaces.activity_repository import ActivityRepository
from activity_timer.core.interfaces.clock import Clock

BASE_TIME = datetime(2017, 3, 1, 10, 0, 0)


class FakeClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class InMemoryActivityRepository(ActivityRepository):
    """Repository keeping snapshots of saved activities in memory."""

    def __init__(self, activities: Optional[List[Activity]] = None):
        self._stored = {}
        self._tracked = {}
        self.save_changes_calls = 0
        for activity in activities or []:
            self.save_activity(activity)
        self.save_changes()
        self.save_changes_calls = 0

    def load_activities(self) -> List[Activity]:
        activities = [Activity.from_dict(data) for data in self._stored.values()]
        self._tracked = {activity.id: activity for activity in activities}
        return activities

    def save_activity(self, activity: Activity) -> None:
        if not activity.id:
            activity.id = str(uuid4())
        self._tracked[activity.id] = activity

    def delete_activity(self, activity: Activity) -> None:
        self._tracked.pop(activity.id, None)
        self._stored.pop(activity.id, None)

    def save_changes(self) -> None:
        self.save_changes_calls += 1
        for activity_id, activity in self._tracked.items():
            self._stored[activity_id] = activity.to_dict()


@pytest.fixture
def clock():
    """Create a controllable clock at 3/1/2017 10:00:00 AM."""
    return FakeClock()


@pytest.fixture
def feed():
    """Create an activity feed with no pending reading."""
    mock_feed = MagicMock(spec=ActivityFeed)
    mock_feed.latest_activity_signal.return_value = None
    return mock_feed


@pytest.fixture
def repository():
    """Create a mock repository with no stored activities."""
    mock_repository = MagicMock(spec=ActivityRepository)
    mock_repository.load_activities.return_value = []
    return mock_repository


@pytest.fixture
def memory_repository():
    """Create an in-memory repository."""
    return InMemoryActivityRepository()


@pytest.fixture
def dispatcher():
    """Create event dispatcher instance."""
    return EventDispatcher()


@pytest.fixture
def sample_activities():
    """Create three activities, the second one with four segments."""
    segments = [
        TimeSegment(
            start_time=BASE_TIME + timedelta(hours=i),
            end_time=BASE_TIME + timedelta(hours=i, minutes=30),
        )
        for i in range(4)
    ]
    return [
        Activity(name="Email"),
        Activity(name="Coding", time_segments=segments),
        Activity(name="Meetings"),
    ]
