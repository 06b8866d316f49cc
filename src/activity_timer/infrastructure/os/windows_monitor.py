"""Windows-specific idle monitoring."""

import ctypes
import logging
from typing import Optional

from .base_monitor import BaseMonitor

logger = logging.getLogger(__name__)

DESKTOP_SWITCHDESKTOP = 0x0100


class LASTINPUTINFO(ctypes.Structure):
    _fields_ = [
        ("cbSize", ctypes.c_uint),
        ("dwTime", ctypes.c_uint),
    ]


class WindowsMonitor(BaseMonitor):
    """Windows implementation using ``GetLastInputInfo``."""

    def __init__(self) -> None:
        """Initialize Windows monitor."""
        self.user32 = ctypes.windll.user32
        self.kernel32 = ctypes.windll.kernel32

        self.user32.GetLastInputInfo.argtypes = [ctypes.POINTER(LASTINPUTINFO)]

        self._last_input_info = LASTINPUTINFO()
        self._last_input_info.cbSize = ctypes.sizeof(LASTINPUTINFO)

    def get_idle_time(self) -> Optional[float]:
        """Get system idle time in seconds.

        Returns:
            float: Idle time in seconds, or None on failure
        """
        try:
            if self.user32.GetLastInputInfo(ctypes.byref(self._last_input_info)):
                idle_time = (self.kernel32.GetTickCount() - self._last_input_info.dwTime) / 1000.0
                logger.debug(f"Current idle time: {idle_time:.1f}s")
                return idle_time
            error = ctypes.get_last_error()
            logger.warning(f"Failed to get last input info (error {error})")
            return None
        except Exception as e:
            logger.error(f"Error getting idle time: {e}")
            return None

    def is_screen_locked(self) -> bool:
        # The input desktop cannot be opened while the workstation is locked
        try:
            desktop = self.user32.OpenInputDesktop(0, False, DESKTOP_SWITCHDESKTOP)
            if not desktop:
                return True
            self.user32.CloseDesktop(desktop)
            return False
        except Exception as e:
            logger.error(f"Error checking screen lock: {e}")
            return False
