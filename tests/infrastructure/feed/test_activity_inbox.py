"""Tests for the activity inbox."""

from datetime import datetime, timedelta
from threading import Thread

from activity_timer.core.interfaces.activity_feed import ActivityFeed
from activity_timer.core.services.timer_service import TimerService
from activity_timer.infrastructure.feed.activity_inbox import ActivityInbox

START = datetime(2017, 3, 1, 10, 0, 0)


def test_empty_inbox():
    """Test an empty inbox yields no reading."""
    inbox = ActivityInbox()

    assert isinstance(inbox, ActivityFeed)
    assert inbox.channel == "last_user_activity"
    assert inbox.latest_activity_signal() is None


def test_latest_reading_drains_older():
    """Test only the newest reading is returned and the rest discarded."""
    inbox = ActivityInbox()
    inbox.receive(START)
    inbox.receive(START + timedelta(minutes=1))
    inbox.receive(START + timedelta(minutes=2))

    assert inbox.latest_activity_signal() == START + timedelta(minutes=2)
    assert inbox.pending == 0
    assert inbox.latest_activity_signal() is None


def test_custom_channel():
    """Test the inbox reports its channel."""
    assert ActivityInbox(channel="presence").channel == "presence"


def test_concurrent_producers():
    """Test readings pushed from several threads leave a single reading."""
    inbox = ActivityInbox()

    def produce(offset):
        for i in range(50):
            inbox.receive(START + timedelta(seconds=offset * 100 + i))

    threads = [Thread(target=produce, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert inbox.pending == 1
    assert inbox.latest_activity_signal() is not None
    assert inbox.pending == 0


def test_receive_overwrites_unread_reading():
    """Test repeated readings replace each other instead of queueing."""
    inbox = ActivityInbox()
    for i in range(1000):
        inbox.receive(START + timedelta(seconds=i))
        assert inbox.pending == 1

    assert inbox.latest_activity_signal() == START + timedelta(seconds=999)
    assert inbox.pending == 0


def test_inbox_bounded_while_timing_stopped(memory_repository, clock):
    """Test an undrained inbox holds one reading while nothing is timed."""
    inbox = ActivityInbox()
    service = TimerService(memory_repository, inbox, clock=clock)

    for _ in range(1000):
        inbox.receive(clock.now())
        assert not service.check_idle_time()
        clock.advance(seconds=10)

    assert inbox.pending == 1
