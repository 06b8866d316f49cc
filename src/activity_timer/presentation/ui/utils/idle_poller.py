"""Periodic idle checks driven by a Qt timer."""

import logging
from datetime import timedelta
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ....core.services.timer_service import TimerService
from ....infrastructure.os.idle_signal_publisher import IdleSignalPublisher

logger = logging.getLogger(__name__)


class IdlePoller(QObject):
    """Polls for idle time on every timer tick.

    Each tick first lets the publisher (when given) push a fresh reading into
    the inbox, then asks the service to check for idle time.
    """

    idle_checked = pyqtSignal(bool)

    def __init__(
        self,
        service: TimerService,
        interval: timedelta,
        publisher: Optional[IdleSignalPublisher] = None,
        parent: QObject = None,
    ):
        """Initialize the poller.

        Args:
            service: Timer service to check
            interval: Time between checks
            publisher: Optional producer of last-user-input readings
            parent: Parent object
        """
        super().__init__(parent)
        self.service = service
        self.publisher = publisher

        self._timer = QTimer(self)
        self._timer.setInterval(int(interval.total_seconds() * 1000))
        self._timer.timeout.connect(self.poll)

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        logger.info(f"Starting idle polling every {self._timer.interval()} ms")
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        logger.info("Idle polling stopped")

    def poll(self) -> None:
        """Run one idle check."""
        try:
            if self.publisher is not None:
                self.publisher.publish()
            is_idle = self.service.check_idle_time()
        except Exception as e:
            logger.error(f"Error checking idle time: {e}", exc_info=True)
            return

        self.idle_checked.emit(is_idle)
