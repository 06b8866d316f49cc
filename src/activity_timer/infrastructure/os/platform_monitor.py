"""Platform-specific idle monitor selection."""

import logging
import sys

from .base_monitor import BaseMonitor
from .linux_monitor import LinuxMonitor
from .macos_monitor import MacOSMonitor
from .windows_monitor import WindowsMonitor

logger = logging.getLogger(__name__)


def create_platform_monitor() -> BaseMonitor:
    """Create the idle monitor for the running platform.

    Returns:
        BaseMonitor: Platform-specific monitor instance

    Raises:
        NotImplementedError: If platform is not supported
    """
    platform = sys.platform

    try:
        if platform == "win32":
            monitor = WindowsMonitor()
        elif platform.startswith("linux"):
            monitor = LinuxMonitor()
        elif platform == "darwin":
            monitor = MacOSMonitor()
        else:
            raise NotImplementedError(f"Platform '{platform}' is not supported")
    except Exception as e:
        logger.error(f"Failed to create platform monitor: {e}", exc_info=True)
        raise

    logger.info(f"Initialized platform monitor for {platform}")
    return monitor
