"""Tests for platform-specific idle monitoring."""

import sys
from unittest.mock import patch

import pytest

from activity_timer.infrastructure.os.linux_monitor import LinuxMonitor
from activity_timer.infrastructure.os.macos_monitor import MacOSMonitor
from activity_timer.infrastructure.os.platform_monitor import create_platform_monitor

MODULE = "activity_timer.infrastructure.os.platform_monitor"


def test_create_platform_monitor_windows():
    """Test creating Windows monitor."""
    with patch("sys.platform", "win32"):
        with patch(f"{MODULE}.WindowsMonitor") as mock_monitor:
            monitor = create_platform_monitor()
            mock_monitor.assert_called_once()
            assert monitor is mock_monitor.return_value


def test_create_platform_monitor_linux():
    """Test creating Linux monitor."""
    with patch("sys.platform", "linux"):
        with patch(f"{MODULE}.LinuxMonitor") as mock_monitor:
            create_platform_monitor()
            mock_monitor.assert_called_once()


def test_create_platform_monitor_macos():
    """Test creating macOS monitor."""
    with patch("sys.platform", "darwin"):
        with patch(f"{MODULE}.MacOSMonitor") as mock_monitor:
            create_platform_monitor()
            mock_monitor.assert_called_once()


def test_create_platform_monitor_unsupported():
    """Test creating monitor for unsupported platform."""
    with patch("sys.platform", "unsupported"):
        with pytest.raises(NotImplementedError, match="Platform 'unsupported' is not supported"):
            create_platform_monitor()


@pytest.fixture
def linux_monitor():
    """Create a Linux monitor without probing for tools."""
    with patch.object(LinuxMonitor, "_check_dependencies"):
        return LinuxMonitor()


def test_linux_idle_time(linux_monitor):
    """Test xprintidle milliseconds are converted to seconds."""
    with patch("subprocess.check_output", return_value=b"125000\n"):
        assert linux_monitor.get_idle_time() == 125.0


def test_linux_idle_time_failure(linux_monitor):
    """Test a failing probe reports no reading."""
    with patch("subprocess.check_output", side_effect=FileNotFoundError("xprintidle")):
        assert linux_monitor.get_idle_time() is None


def test_linux_missing_tool_logged(caplog):
    """Test a missing xprintidle is logged, not raised."""
    with patch("subprocess.run", side_effect=FileNotFoundError):
        LinuxMonitor()
    assert "xprintidle" in caplog.text


def test_linux_screen_locked(linux_monitor, monkeypatch):
    """Test the logind lock hint is read."""
    monkeypatch.setenv("XDG_SESSION_ID", "3")
    with patch("subprocess.check_output", return_value=b"LockedHint=yes\n") as mock_call:
        assert linux_monitor.is_screen_locked()
        assert mock_call.call_args[0][0][:3] == ["loginctl", "show-session", "3"]


def test_linux_screen_lock_without_session(linux_monitor, monkeypatch):
    """Test no session means not locked."""
    monkeypatch.delenv("XDG_SESSION_ID", raising=False)
    assert not linux_monitor.is_screen_locked()


def test_macos_idle_time():
    """Test ioreg nanoseconds are converted to seconds."""
    output = b'  |   "HIDIdleTime" = 42000000000\n'
    with patch("subprocess.check_output", return_value=output):
        assert MacOSMonitor().get_idle_time() == 42.0


def test_macos_idle_time_missing():
    """Test missing ioreg data reports no reading."""
    with patch("subprocess.check_output", return_value=b"nothing here"):
        assert MacOSMonitor().get_idle_time() is None


def test_macos_screen_locked():
    """Test the session lock flag is read."""
    output = b'"CGSSessionScreenIsLocked"=Yes'
    with patch("subprocess.check_output", return_value=output):
        assert MacOSMonitor().is_screen_locked()


@pytest.mark.skipif(sys.platform != "win32", reason="Windows-only test")
def test_windows_monitor_integration():
    """Integration test for Windows monitor."""
    monitor = create_platform_monitor()

    idle_time = monitor.get_idle_time()
    assert idle_time is not None
    assert idle_time >= 0.0
