"""macOS-specific idle monitoring."""

import logging
import re
import subprocess
from typing import Optional

from .base_monitor import BaseMonitor

logger = logging.getLogger(__name__)

HID_IDLE_PATTERN = re.compile(r'"HIDIdleTime"\s*=\s*(\d+)')
SCREEN_LOCKED_PATTERN = re.compile(r'"CGSSessionScreenIsLocked"\s*=\s*Yes')


class MacOSMonitor(BaseMonitor):
    """macOS implementation reading the IOKit registry via ``ioreg``."""

    def get_idle_time(self) -> Optional[float]:
        """Get system idle time in seconds.

        Returns:
            float: Idle time in seconds, or None on failure
        """
        try:
            output = subprocess.check_output(
                ["ioreg", "-c", "IOHIDSystem", "-d", "4"]
            ).decode()
            match = HID_IDLE_PATTERN.search(output)
            if not match:
                logger.warning("HIDIdleTime not found in ioreg output")
                return None
            return int(match.group(1)) / 1_000_000_000  # nanoseconds
        except Exception as e:
            logger.error(f"Error getting idle time: {e}")
            return None

    def is_screen_locked(self) -> bool:
        try:
            output = subprocess.check_output(["ioreg", "-n", "Root", "-d", "1"]).decode()
            return bool(SCREEN_LOCKED_PATTERN.search(output))
        except Exception as e:
            logger.error(f"Error checking screen lock: {e}")
            return False
