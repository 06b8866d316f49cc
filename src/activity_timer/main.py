"""Main entry point for the Activity Timer application."""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication, QSystemTrayIcon

from activity_timer.core.config.timer_config import TimerConfig
from activity_timer.core.events.event_dispatcher import (
    EventDispatcher,
    SystemEventHandler,
    TimingEventHandler,
)
from activity_timer.core.events.event_types import SystemStatusEvent
from activity_timer.core.services.timer_service import TimerService
from activity_timer.infrastructure.feed.activity_inbox import ActivityInbox
from activity_timer.infrastructure.os.idle_signal_publisher import IdleSignalPublisher
from activity_timer.infrastructure.os.platform_monitor import create_platform_monitor
from activity_timer.infrastructure.storage.encrypted_json_storage import (
    EncryptedJsonActivityRepository,
)
from activity_timer.presentation.ui.system_tray import SystemTrayApp
from activity_timer.presentation.ui.utils.idle_poller import IdlePoller
from activity_timer.presentation.ui.utils.property_bridge import PropertyBridge

logger = logging.getLogger(__name__)


def setup_data_directories(config: TimerConfig) -> None:
    """Create necessary data directories if they don't exist."""
    directories = [
        config.data_dir,
        os.path.dirname(config.storage_path),
        os.path.dirname(config.key_path),
        "logs",
    ]
    for directory in directories:
        os.makedirs(directory, exist_ok=True)


def setup_logging() -> None:
    os.makedirs("logs", exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler("logs/app.log", encoding="utf-8"),
        ],
    )


def initialize_services(config: TimerConfig):
    """Initialize all application services.

    Returns:
        tuple: (event_dispatcher, timer_service, publisher)
    """
    try:
        logger.info("Initializing event system...")
        event_dispatcher = EventDispatcher()
        TimingEventHandler(event_dispatcher)
        SystemEventHandler(event_dispatcher)

        logger.info("Initializing data storage...")
        repository = EncryptedJsonActivityRepository(
            config.storage_path,
            encryption_key_file=config.key_path,
        )

        inbox = ActivityInbox(channel=config.feed_channel)

        try:
            publisher = IdleSignalPublisher(create_platform_monitor(), inbox)
        except NotImplementedError:
            logger.warning("No idle probe for this platform, idle detection disabled")
            publisher = None

        logger.info("Initializing timer service...")
        timer_service = TimerService(
            repository=repository,
            feed=inbox,
            config=config,
            event_dispatcher=event_dispatcher,
        )

        return event_dispatcher, timer_service, publisher

    except Exception as e:
        logger.error(f"Error initializing services: {e}", exc_info=True)
        raise


def main():
    """Main entry point."""
    setup_logging()
    try:
        logger.info("Starting Activity Timer...")

        config = TimerConfig.load()
        setup_data_directories(config)

        logger.info("Initializing Qt application...")
        app = QApplication(sys.argv)
        app.setQuitOnLastWindowClosed(False)

        if not QSystemTrayIcon.isSystemTrayAvailable():
            raise RuntimeError("System tray is not available")

        event_dispatcher, timer_service, publisher = initialize_services(config)

        bridge = PropertyBridge(event_dispatcher)
        poller = IdlePoller(
            timer_service, config.idle_check_interval, publisher=publisher
        )

        logger.info("Creating system tray application...")
        system_tray = SystemTrayApp(timer_service, bridge, poller)  # noqa: F841

        poller.start()
        event_dispatcher.dispatch(
            SystemStatusEvent(
                status="running",
                timestamp=timer_service.clock.now(),
                details={"idle_detection": publisher is not None},
            )
        )

        logger.info("Activity Timer started successfully")
        logger.info("Starting Qt event loop...")
        sys.exit(app.exec())

    except Exception as e:
        logger.error(f"Failed to start Activity Timer: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
