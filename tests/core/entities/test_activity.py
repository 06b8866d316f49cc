"""Tests for the Activity and TimeSegment entities."""

from datetime import datetime, timedelta

import pytest

from activity_timer.core.entities.activity import Activity, TimeSegment
from activity_timer.core.entities.idle_window import IdleWindow

START = datetime(2017, 3, 1, 10, 0, 0)


@pytest.fixture
def segment():
    """Create a closed half-hour segment."""
    return TimeSegment(start_time=START, end_time=START + timedelta(minutes=30))


def test_closed_segment_duration(segment):
    """Test a closed segment ignores the current time."""
    now = START + timedelta(hours=5)
    assert segment.effective_end(now) == segment.end_time
    assert segment.duration(now) == timedelta(minutes=30)


def test_open_segment_tracks_now():
    """Test an open segment ends at the current time."""
    segment = TimeSegment(start_time=START, end_time=START, is_open=True)
    now = START + timedelta(minutes=7)

    assert segment.effective_end(now) == now
    assert segment.duration(now) == timedelta(minutes=7)


def test_segments_compare_by_identity():
    """Test equal-looking segments are still distinct."""
    first = TimeSegment(start_time=START, end_time=START)
    second = TimeSegment(start_time=START, end_time=START)

    assert first != second
    assert first == first


def test_segment_dict_round_trip(segment):
    """Test segment serialization keeps every field."""
    segment.id = "seg-1"
    segment.activity_id = "act-1"
    segment.is_open = True

    data = segment.to_dict()
    assert data["start_time"] == "2017-03-01T10:00:00"

    restored = TimeSegment.from_dict(data)
    assert restored.start_time == segment.start_time
    assert restored.end_time == segment.end_time
    assert restored.is_open is True
    assert restored.id == "seg-1"
    assert restored.activity_id == "act-1"


def test_add_time_segment_stamps_owner(segment):
    """Test adding a segment links it to the activity."""
    activity = Activity(name="Coding", id="act-1")

    index = activity.add_time_segment(segment)

    assert index == 0
    assert segment.activity_id == "act-1"
    assert activity.num_time_segments == 1
    assert activity.get_time_segment(0) is segment


def test_get_time_segment_out_of_range(segment):
    """Test out-of-range lookups return None."""
    activity = Activity(time_segments=[segment])

    assert activity.get_time_segment(-1) is None
    assert activity.get_time_segment(1) is None


def test_remove_time_segment_by_identity():
    """Test removal matches the exact segment object."""
    first = TimeSegment(start_time=START, end_time=START)
    twin = TimeSegment(start_time=START, end_time=START)
    activity = Activity(time_segments=[first, twin])

    assert activity.remove_time_segment(twin) == 1
    assert activity.time_segments == [first]
    assert activity.index_of(twin) == -1


def test_remove_foreign_segment_raises(segment):
    """Test removing a segment from the wrong activity fails."""
    with pytest.raises(ValueError):
        Activity().remove_time_segment(segment)


def test_total_duration_includes_open_segment(segment):
    """Test totals count an open segment up to now."""
    running = TimeSegment(
        start_time=START + timedelta(hours=1),
        end_time=START + timedelta(hours=1),
        is_open=True,
    )
    activity = Activity(time_segments=[segment, running])

    total = activity.total_duration(START + timedelta(hours=1, minutes=15))

    assert total == timedelta(minutes=45)


def test_activity_dict_round_trip(segment):
    """Test activity serialization includes its segments in order."""
    later = TimeSegment(start_time=START + timedelta(hours=2), end_time=START + timedelta(hours=3))
    activity = Activity(name="Coding", time_segments=[later, segment], id="act-1")

    restored = Activity.from_dict(activity.to_dict())

    assert restored.name == "Coding"
    assert restored.id == "act-1"
    assert [s.start_time for s in restored.time_segments] == [later.start_time, segment.start_time]


def test_activity_from_dict_defaults():
    """Test missing fields load as an empty unsaved activity."""
    restored = Activity.from_dict({})

    assert restored.name == ""
    assert restored.id is None
    assert restored.time_segments == []


def test_idle_window_duration():
    """Test idle window spans signal to now."""
    window = IdleWindow(signal_time=START, now=START + timedelta(minutes=15))

    assert window.duration == timedelta(minutes=15)
    assert window == IdleWindow(signal_time=START, now=START + timedelta(minutes=15))
