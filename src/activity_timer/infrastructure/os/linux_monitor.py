"""Linux-specific idle monitoring."""

import logging
import os
import subprocess
from typing import Optional

from .base_monitor import BaseMonitor

logger = logging.getLogger(__name__)


class LinuxMonitor(BaseMonitor):
    """Linux implementation backed by ``xprintidle`` and ``loginctl``."""

    def __init__(self) -> None:
        """Initialize Linux monitor."""
        try:
            self._check_dependencies()
        except Exception as e:
            logger.error(f"Error initializing Linux monitor: {e}")

    def _check_dependencies(self) -> None:
        """Check if required tools are available."""
        try:
            subprocess.run(["xprintidle"], capture_output=True)
        except FileNotFoundError:
            logger.error("Required tool not found: xprintidle")
            raise RuntimeError("Missing required tool: xprintidle")

    def get_idle_time(self) -> Optional[float]:
        try:
            output = subprocess.check_output(["xprintidle"]).decode().strip()
            return float(output) / 1000.0  # milliseconds
        except Exception as e:
            logger.error(f"Error getting idle time: {e}")
            return None

    def is_screen_locked(self) -> bool:
        session_id = os.environ.get("XDG_SESSION_ID")
        if not session_id:
            return False
        try:
            output = subprocess.check_output(
                ["loginctl", "show-session", session_id, "-p", "LockedHint"]
            ).decode().strip()
            return output == "LockedHint=yes"
        except Exception as e:
            logger.error(f"Error checking screen lock: {e}")
            return False
