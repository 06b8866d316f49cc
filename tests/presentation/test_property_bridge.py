"""Tests for the dispatcher to Qt signal bridge."""

from datetime import timedelta

import pytest

from activity_timer.core.services.timer_service import TimerService
from activity_timer.presentation.ui.utils.property_bridge import PropertyBridge


@pytest.fixture
def service(repository, feed, clock, dispatcher):
    """Create a timer service sharing the dispatcher."""
    return TimerService(repository, feed, clock=clock, event_dispatcher=dispatcher)


@pytest.fixture
def bridge(qtbot, dispatcher):
    """Create a bridge on the dispatcher."""
    bridge = PropertyBridge(dispatcher)
    yield bridge
    bridge.disconnect_dispatcher()


def test_property_changes_emitted_in_order(bridge, service):
    """Test property notifications arrive as Qt signals in order."""
    names = []
    bridge.property_changed.connect(names.append)

    service.add_activity()

    assert names[:4] == [
        "selected_activity_index",
        "is_save_enabled",
        "is_time_segment_add_enabled",
        "selected_activity",
    ]


def test_collection_change_emitted(qtbot, bridge, service):
    """Test collection notifications carry collection, action and index."""
    with qtbot.waitSignal(bridge.collection_changed) as blocker:
        service.add_activity()

    assert blocker.args == ["activities", "add", 0]


def test_idle_detected_emitted(qtbot, bridge, service, feed, clock):
    """Test idle detection forwards the idle window."""
    service.add_activity()
    service.start_stop()
    feed.latest_activity_signal.return_value = clock.now()
    clock.advance(minutes=10)

    with qtbot.waitSignal(bridge.idle_detected) as blocker:
        service.check_idle_time()

    assert blocker.args[0].duration == timedelta(minutes=10)


def test_disconnect_stops_forwarding(bridge, service):
    """Test no signals are emitted after disconnecting."""
    names = []
    bridge.property_changed.connect(names.append)
    bridge.disconnect_dispatcher()

    service.add_activity()

    assert names == []
