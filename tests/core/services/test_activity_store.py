"""Tests for the activity store."""

from datetime import datetime

import pytest

from activity_timer.core.entities.activity import Activity, TimeSegment
from activity_timer.core.services.activity_store import NO_SELECTION, ActivityStore

NOW = datetime(2017, 3, 1, 10, 0, 0)


@pytest.fixture
def store(sample_activities):
    """Create a store holding the sample activities."""
    return ActivityStore(sample_activities)


def test_nothing_selected_initially(store):
    """Test a new store has no selection."""
    assert store.selected_activity_index == NO_SELECTION
    assert store.selected_activity is None
    assert store.selected_time_segment is None


@pytest.mark.parametrize("index", [-5, -1, 3, 100])
def test_out_of_range_activity_index_is_absent(store, index):
    """Test out-of-range indices mean no selection without raising."""
    store.selected_activity_index = index

    assert store.selected_activity is None
    assert store.selected_time_segment is None


def test_segment_selection_resolves_against_selected_activity(store, sample_activities):
    """Test the segment index applies to the selected activity."""
    store.selected_activity_index = 1
    store.selected_time_segment_index = 3
    assert store.selected_time_segment is sample_activities[1].time_segments[3]

    store.selected_time_segment_index = 4
    assert store.selected_time_segment is None

    store.selected_activity_index = 0
    store.selected_time_segment_index = 0
    assert store.selected_time_segment is None


def test_add_activity_selects_it(store):
    """Test a new activity is appended and selected."""
    activity = store.add_activity()

    assert store.activities[-1] is activity
    assert store.selected_activity_index == 3
    assert store.selected_activity is activity
    assert activity.name == ""


def test_remove_activity(store, sample_activities):
    """Test removal returns the old index and keeps the raw selection index."""
    store.selected_activity_index = 2

    index = store.remove_activity(sample_activities[2])

    assert index == 2
    assert store.selected_activity_index == 2
    assert store.selected_activity is None


def test_remove_unknown_activity_raises(store):
    """Test removing an activity that is not stored fails."""
    with pytest.raises(ValueError):
        store.remove_activity(Activity(name="Email"))


def test_add_time_segment_selects_on_selected_activity(store, sample_activities):
    """Test adding a segment to the selected activity selects the segment."""
    store.selected_activity_index = 1
    segment = TimeSegment(start_time=NOW, end_time=NOW)

    index = store.add_time_segment(sample_activities[1], segment)

    assert index == 4
    assert store.selected_time_segment is segment


def test_add_time_segment_elsewhere_keeps_selection(store, sample_activities):
    """Test adding to an unselected activity leaves the selection alone."""
    store.selected_activity_index = 1
    store.selected_time_segment_index = 0

    store.add_time_segment(sample_activities[0], TimeSegment(start_time=NOW, end_time=NOW))

    assert store.selected_time_segment_index == 0


def test_replace_activities(store):
    """Test replacing the activity list."""
    fresh = [Activity(name="Reading")]
    store.replace_activities(fresh)

    assert store.activities == fresh
    assert store.activities is not fresh


def test_open_segments(store, sample_activities):
    """Test open segments are found across activities."""
    assert store.open_segments() == []

    open_segment = TimeSegment(start_time=NOW, end_time=NOW, is_open=True)
    store.add_time_segment(sample_activities[2], open_segment)

    assert store.open_segments() == [open_segment]
