"""System tray application."""

import logging
import os

from PyQt6.QtCore import QObject
from PyQt6.QtGui import QAction, QActionGroup, QColor, QIcon, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QApplication,
    QInputDialog,
    QMenu,
    QMessageBox,
    QSystemTrayIcon,
)

from ...core.entities.idle_window import IdleWindow
from ...core.errors import InvalidOperationError
from ...core.events.event_types import SystemStatusEvent
from ...core.services.report_service import TimeReportService
from ...core.services.timer_service import TimerService
from .utils.idle_poller import IdlePoller
from .utils.property_bridge import PropertyBridge

logger = logging.getLogger(__name__)

APP_NAME = "Activity Timer"
MESSAGE_TIMEOUT_MS = 5000


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:d}:{minutes:02d}:{secs:02d}"


def _totals_text(totals) -> str:
    if totals.empty:
        return "No time recorded today."
    return "\n".join(
        f"{name or '(unnamed)'}: {_format_duration(seconds)}"
        for name, seconds in totals.items()
    )


class SystemTrayApp(QObject):
    """Tray front end for the timer service."""

    def __init__(
        self,
        service: TimerService,
        bridge: PropertyBridge,
        poller: IdlePoller,
        reports: TimeReportService = None,
        parent: QObject = None,
    ):
        """Initialize system tray application.

        Args:
            service: Timer service driven by the menu
            bridge: Qt signal bridge for service notifications
            poller: Idle poller, stopped on quit
            reports: Report service for the totals dialog
            parent: Parent object
        """
        super().__init__(parent)
        logger.info("Initializing system tray application...")

        self.service = service
        self.bridge = bridge
        self.poller = poller
        self.reports = reports or TimeReportService(service.clock)

        self.setup_ui()

        self.bridge.property_changed.connect(self._on_property_changed)
        self.bridge.collection_changed.connect(self._on_collection_changed)
        self.bridge.idle_detected.connect(self._on_idle_detected)
        self.poller.idle_checked.connect(self._update_tooltip)

    def setup_ui(self) -> None:
        """Set up the system tray UI."""
        try:
            logger.info("Setting up system tray UI...")

            self.tray_icon = QSystemTrayIcon(self)
            self.tray_icon.setIcon(self._load_icon())

            self.menu = QMenu()

            self.activity_menu = self.menu.addMenu("Activity")
            self.activity_group = QActionGroup(self)
            self.activity_group.setExclusionPolicy(
                QActionGroup.ExclusionPolicy.ExclusiveOptional
            )

            self.new_activity_action = QAction("New Activity...", self)
            self.new_activity_action.triggered.connect(self._new_activity)
            self.menu.addAction(self.new_activity_action)

            self.menu.addSeparator()

            self.start_stop_action = QAction(self.service.start_stop_text, self)
            self.start_stop_action.triggered.connect(self._start_stop)
            self.menu.addAction(self.start_stop_action)

            self.include_action = QAction("Include Idle Time", self)
            self.include_action.triggered.connect(self._include_idle_time)
            self.menu.addAction(self.include_action)

            self.exclude_action = QAction("Exclude Idle Time", self)
            self.exclude_action.triggered.connect(self._exclude_idle_time)
            self.menu.addAction(self.exclude_action)

            self.totals_action = QAction("Today's Totals...", self)
            self.totals_action.triggered.connect(self._show_totals)
            self.menu.addAction(self.totals_action)

            self.menu.addSeparator()

            quit_action = QAction("Quit", self)
            quit_action.triggered.connect(self._quit_application)
            self.menu.addAction(quit_action)

            self.tray_icon.setContextMenu(self.menu)

            self._rebuild_activity_menu()
            self._refresh_actions()
            self._update_tooltip()

            self.tray_icon.show()
            logger.info("System tray UI setup complete")

        except Exception as e:
            logger.error(f"Error setting up system tray UI: {e}", exc_info=True)
            raise

    def _load_icon(self) -> QIcon:
        icon_path = os.path.join("assets", "icons", "tray_icon.png")
        if os.path.exists(icon_path):
            return QIcon(icon_path)

        theme_icon = QIcon.fromTheme("appointment-soon")
        if not theme_icon.isNull():
            return theme_icon

        pixmap = QPixmap(32, 32)
        pixmap.fill(QColor(0, 0, 0, 0))
        painter = QPainter(pixmap)
        painter.setPen(QColor(0, 120, 215))
        painter.setBrush(QColor(0, 120, 215))
        painter.drawEllipse(4, 4, 24, 24)
        painter.end()
        return QIcon(pixmap)

    # Service notifications

    def _on_property_changed(self, name: str) -> None:
        if name == "selected_activity_index":
            self._check_selected_activity()
        self._refresh_actions()

    def _on_collection_changed(self, collection: str, action: str, index: int) -> None:
        if collection == "activities":
            self._rebuild_activity_menu()

    def _on_idle_detected(self, window: IdleWindow) -> None:
        self.tray_icon.showMessage(
            APP_NAME,
            f"You have been idle since {window.signal_time:%H:%M}. "
            "Include or exclude the idle time from the tray menu.",
            QSystemTrayIcon.MessageIcon.Warning,
            MESSAGE_TIMEOUT_MS,
        )

    def _refresh_actions(self) -> None:
        self.start_stop_action.setText(self.service.start_stop_text)
        self.start_stop_action.setEnabled(self.service.is_start_stop_enabled)
        enabled = self.service.is_include_exclude_enabled
        self.include_action.setEnabled(enabled)
        self.exclude_action.setEnabled(enabled)

    def _rebuild_activity_menu(self) -> None:
        self.activity_menu.clear()
        for action in self.activity_group.actions():
            self.activity_group.removeAction(action)
            action.deleteLater()

        for index, activity in enumerate(self.service.activities):
            action = QAction(activity.name or "(unnamed)", self)
            action.setCheckable(True)
            action.setData(index)
            action.triggered.connect(
                lambda checked, i=index: self._select_activity(i)
            )
            self.activity_group.addAction(action)
            self.activity_menu.addAction(action)

        self.activity_menu.setEnabled(bool(self.service.activities))
        self._check_selected_activity()

    def _check_selected_activity(self) -> None:
        selected = self.service.selected_activity_index
        for action in self.activity_group.actions():
            action.setChecked(action.data() == selected)

    def _update_tooltip(self, *_) -> None:
        activity = self.service.started_activity
        if activity is None:
            self.tray_icon.setToolTip(f"{APP_NAME} - not timing")
            return
        elapsed = self.service.elapsed_time().total_seconds()
        name = activity.name or "(unnamed)"
        self.tray_icon.setToolTip(f"{APP_NAME} - {name} {_format_duration(elapsed)}")

    # Menu actions

    def _select_activity(self, index: int) -> None:
        self.service.selected_activity_index = index
        self._check_selected_activity()

    def _new_activity(self) -> None:
        name, ok = QInputDialog.getText(None, APP_NAME, "Activity name:")
        if not ok or not name.strip():
            return
        try:
            self.service.add_activity()
            self.service.rename_selected_activity(name.strip())
            self.service.save()
        except Exception as e:
            logger.error(f"Error creating activity: {e}", exc_info=True)
            self._show_error(f"Failed to create activity: {e}")

    def _start_stop(self) -> None:
        try:
            self.service.start_stop()
        except InvalidOperationError as e:
            logger.warning(f"Start/stop rejected: {e}")
        except Exception as e:
            logger.error(f"Error toggling timing: {e}", exc_info=True)
            self._show_error(f"Failed to save time: {e}")
        self._update_tooltip()

    def _include_idle_time(self) -> None:
        try:
            self.service.include_idle_time()
        except InvalidOperationError as e:
            logger.warning(f"Include idle time rejected: {e}")

    def _exclude_idle_time(self) -> None:
        try:
            self.service.exclude_idle_time()
        except InvalidOperationError as e:
            logger.warning(f"Exclude idle time rejected: {e}")
        except Exception as e:
            logger.error(f"Error excluding idle time: {e}", exc_info=True)
            self._show_error(f"Failed to save time: {e}")
        self._update_tooltip()

    def _show_totals(self) -> None:
        midnight = self.service.clock.now().replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        try:
            totals = self.reports.activity_totals(
                self.service.activities, start=midnight
            )
        except Exception as e:
            logger.error(f"Error building totals: {e}", exc_info=True)
            self._show_error(f"Failed to build totals: {e}")
            return
        QMessageBox.information(None, f"{APP_NAME} - Today", _totals_text(totals))

    def _show_error(self, message: str) -> None:
        self.tray_icon.showMessage(
            APP_NAME, message, QSystemTrayIcon.MessageIcon.Critical, MESSAGE_TIMEOUT_MS
        )

    def _quit_application(self) -> None:
        """Quit the application.

        A running segment is saved open and picked up again on next start.
        """
        logger.info("Quitting application")
        self.poller.stop()
        self.service.event_dispatcher.dispatch(
            SystemStatusEvent(status="stopping", timestamp=self.service.clock.now())
        )
        activity = self.service.started_activity
        if activity is not None:
            try:
                self.service.repository.save_activity(activity)
                self.service.repository.save_changes()
            except Exception as e:
                logger.error(f"Error saving running segment: {e}", exc_info=True)
                QMessageBox.critical(None, "Error", f"Failed to save running time: {e}")

        self.bridge.disconnect_dispatcher()
        self.tray_icon.hide()
        QApplication.quit()
