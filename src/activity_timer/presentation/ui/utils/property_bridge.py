"""Bridge from dispatcher events to Qt signals."""

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from ....core.events.event_dispatcher import EventDispatcher
from ....core.events.event_types import (
    CollectionChangedEvent,
    IdleDetectedEvent,
    PropertyChangedEvent,
)

logger = logging.getLogger(__name__)


class PropertyBridge(QObject):
    """Re-emits timer service notifications as Qt signals.

    Widgets connect to the signals instead of subscribing to the dispatcher,
    so updates are delivered through the Qt event loop.
    """

    property_changed = pyqtSignal(str)
    collection_changed = pyqtSignal(str, str, int)
    idle_detected = pyqtSignal(object)

    def __init__(self, dispatcher: EventDispatcher, parent: QObject = None):
        """Initialize the bridge.

        Args:
            dispatcher: Dispatcher the timer service publishes on
            parent: Parent object
        """
        super().__init__(parent)
        self.dispatcher = dispatcher
        self.dispatcher.subscribe(self._on_property_changed, "property_changed")
        self.dispatcher.subscribe(self._on_collection_changed, "collection_changed")
        self.dispatcher.subscribe(self._on_idle_detected, "idle_detected")

    def disconnect_dispatcher(self) -> None:
        self.dispatcher.unsubscribe(self._on_property_changed, "property_changed")
        self.dispatcher.unsubscribe(self._on_collection_changed, "collection_changed")
        self.dispatcher.unsubscribe(self._on_idle_detected, "idle_detected")

    def _on_property_changed(self, event: PropertyChangedEvent) -> None:
        self.property_changed.emit(event.property_name)

    def _on_collection_changed(self, event: CollectionChangedEvent) -> None:
        self.collection_changed.emit(event.collection, event.action, event.index)

    def _on_idle_detected(self, event: IdleDetectedEvent) -> None:
        logger.debug(f"Forwarding idle window {event.idle_window}")
        self.idle_detected.emit(event.idle_window)
