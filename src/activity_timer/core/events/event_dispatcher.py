"""Event dispatcher system for handling and distributing events."""

import logging
import time
from collections import defaultdict
from dataclasses import is_dataclass
from threading import Lock, RLock
from typing import Any, Callable, Dict, List, Optional, Set, Union

from .event_types import (
    CollectionChangedEvent,
    ErrorEvent,
    IdleDetectedEvent,
    IdleResolvedEvent,
    PropertyChangedEvent,
    SystemStatusEvent,
    TimingEvent,
)

logger = logging.getLogger(__name__)

# Type alias for events
Event = Union[
    PropertyChangedEvent,
    CollectionChangedEvent,
    TimingEvent,
    IdleDetectedEvent,
    IdleResolvedEvent,
    SystemStatusEvent,
    ErrorEvent,
]

MAX_HANDLER_ERRORS = 3


class HandlerError:
    """Tracks handler errors for retry logic."""

    def __init__(self, handler: Callable, event_type: Optional[str]):
        """Initialize handler error tracking.

        Args:
            handler: The event handler function
            event_type: The event type this handler is for
        """
        self.handler = handler
        self.event_type = event_type
        self.error_count = 0
        self.last_error_time = 0.0
        self.last_error: Optional[Exception] = None
        self.disabled = False

    def record_error(self, error: Exception) -> None:
        """Record a handler error.

        Args:
            error: The exception that occurred
        """
        self.error_count += 1
        self.last_error_time = time.time()
        self.last_error = error

        if self.error_count >= MAX_HANDLER_ERRORS:
            self.disabled = True

    def reset(self) -> None:
        """Reset error tracking after successful execution."""
        self.error_count = 0
        self.last_error_time = 0.0
        self.last_error = None
        self.disabled = False


class EventDispatcher:
    """Delivers events synchronously to subscribers.

    Handlers run in subscription order and every ``dispatch`` call completes
    before it returns, so the order of dispatch calls is the order observers
    see.
    """

    def __init__(self, max_history: int = 1000):
        """Initialize event dispatcher.

        Args:
            max_history: Number of recent events kept for inspection
        """
        self._handlers: Dict[str, List[Callable]] = defaultdict(list)
        self._global_handlers: List[Callable] = []
        self._event_history: List[Event] = []
        self._max_history = max_history

        # Locks for thread safety
        self._handlers_lock = RLock()  # Reentrant lock for handler operations
        self._history_lock = Lock()  # Lock for event history operations

        # Error tracking
        self._handler_errors: Dict[Callable, HandlerError] = {}
        self._errors_lock = Lock()

    def subscribe(
        self, handler: Callable[[Event], None], event_type: Optional[str] = None
    ) -> None:
        """Subscribe to events.

        Args:
            handler: Event handler function
            event_type: Specific event type to handle (None for all events)
        """
        with self._handlers_lock:
            handlers = (
                self._handlers[event_type] if event_type else self._global_handlers
            )
            if handler not in handlers:
                handlers.append(handler)

    def unsubscribe(
        self, handler: Callable[[Event], None], event_type: Optional[str] = None
    ) -> None:
        """Unsubscribe from events.

        Args:
            handler: Event handler function
            event_type: Specific event type to unsubscribe from
        """
        with self._handlers_lock:
            if event_type:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)
                if not handlers:
                    self._handlers.pop(event_type, None)
            elif handler in self._global_handlers:
                self._global_handlers.remove(handler)

        # Clean up error tracking
        with self._errors_lock:
            self._handler_errors.pop(handler, None)

    def _get_handler_error(
        self, handler: Callable, event_type: Optional[str]
    ) -> HandlerError:
        with self._errors_lock:
            if handler not in self._handler_errors:
                self._handler_errors[handler] = HandlerError(handler, event_type)
            return self._handler_errors[handler]

    def _record_history(self, event: Event) -> None:
        with self._history_lock:
            self._event_history.append(event)
            if len(self._event_history) > self._max_history:
                self._event_history.pop(0)

    def _call_handler(
        self,
        handler: Callable,
        event: Event,
        event_type: Optional[str] = None,
        is_error_handler: bool = False,
    ) -> bool:
        """Call a handler with error tracking.

        Args:
            handler: Event handler function
            event: Event to handle
            event_type: Event type being handled
            is_error_handler: Whether this is an error handler

        Returns:
            bool: True if handler succeeded, False if it failed or is disabled
        """
        error_tracker = self._get_handler_error(handler, event_type)
        if error_tracker.disabled:
            return False

        handler_name = getattr(handler, "__name__", repr(handler))
        try:
            handler(event)
            error_tracker.reset()
            return True

        except Exception as e:
            error_tracker.record_error(e)
            logger.error(
                f"Error in handler {handler_name} for "
                f"{event_type or 'global'}: {e}",
                exc_info=True,
            )

            if error_tracker.disabled:
                logger.error(
                    f"Handler {handler_name} for {event_type or 'global'} "
                    f"disabled after repeated errors"
                )

            # Only create error events for non-error handlers to avoid recursion
            if not is_error_handler:
                self._dispatch_error(
                    ErrorEvent(
                        error_type="handler_error",
                        error_message=str(e) or type(e).__name__,
                        timestamp=event.timestamp,
                        details={
                            "handler": handler_name,
                            "event_type": event_type,
                        },
                    )
                )

            return False

    def _dispatch_error(self, error_event: ErrorEvent) -> None:
        """Deliver an error event to error handlers without validation."""
        with self._handlers_lock:
            error_handlers = list(self._handlers.get("error", []))

        for handler in error_handlers:
            self._call_handler(handler, error_event, "error", is_error_handler=True)

        self._record_history(error_event)

    def dispatch(self, event: Event) -> None:
        """Dispatch an event to all relevant handlers.

        Args:
            event: Event to dispatch

        Raises:
            TypeError: If event is not a valid event dataclass
            ValueError: If event validation fails
        """
        if not is_dataclass(event):
            raise TypeError("Event must be a dataclass")

        try:
            event.validate()
        except ValueError as e:
            logger.error(f"Event validation error: {e}")
            raise

        self._record_history(event)

        with self._handlers_lock:
            # Copy so handlers may subscribe or unsubscribe while running
            specific_handlers = list(self._handlers.get(event.event_type, []))
            global_handlers = list(self._global_handlers)

        for handler in specific_handlers:
            self._call_handler(handler, event, event.event_type)

        for handler in global_handlers:
            self._call_handler(handler, event)

    def get_recent_events(
        self, event_type: Optional[str] = None, limit: int = 100
    ) -> List[Event]:
        """Get recent events from history.

        Args:
            event_type: Filter by event type
            limit: Maximum number of events to return

        Returns:
            list: Recent events
        """
        with self._history_lock:
            if event_type:
                events = [e for e in self._event_history if e.event_type == event_type]
            else:
                events = self._event_history.copy()

            return events[-limit:]

    def clear_history(self) -> None:
        """Clear event history."""
        with self._history_lock:
            self._event_history.clear()

    def get_handler_status(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get status of event handlers including error information.

        Returns:
            dict: Handler status keyed by event type ("global" for catch-all)
        """
        status: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

        with self._errors_lock:
            for handler, error_info in self._handler_errors.items():
                handler_status = {
                    "handler": getattr(handler, "__name__", repr(handler)),
                    "error_count": error_info.error_count,
                    "last_error_time": error_info.last_error_time,
                    "last_error": str(error_info.last_error)
                    if error_info.last_error
                    else None,
                    "disabled": error_info.disabled,
                }

                event_type = error_info.event_type or "global"
                status[event_type].append(handler_status)

        return dict(status)


class EventHandler:
    """Base class for event handlers."""

    def __init__(self, dispatcher: EventDispatcher):
        """Initialize event handler.

        Args:
            dispatcher: Event dispatcher to use
        """
        self.dispatcher = dispatcher
        self.subscribed_events: Set[str] = set()
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register event handlers.

        Override this method to register handlers for specific events.
        """
        pass

    def handle_event(self, event: Event) -> None:
        """Handle an event.

        Args:
            event: Event to handle
        """
        pass


class TimingEventHandler(EventHandler):
    """Logs timing transitions and idle decisions."""

    def _register_handlers(self) -> None:
        """Register timing event handlers."""
        for event_type in (
            "timing_start",
            "timing_stop",
            "timing_abort",
            "idle_detected",
            "idle_resolved",
        ):
            self.dispatcher.subscribe(self.handle_event, event_type)
            self.subscribed_events.add(event_type)

    def handle_event(self, event: Event) -> None:
        """Handle timing events.

        Args:
            event: Event to handle
        """
        if event.event_type in ("timing_start", "timing_stop", "timing_abort"):
            self._handle_timing(event)  # type: ignore
        elif event.event_type == "idle_detected":
            self._handle_idle_detected(event)  # type: ignore
        elif event.event_type == "idle_resolved":
            self._handle_idle_resolved(event)  # type: ignore

    def _handle_timing(self, event: TimingEvent) -> None:
        name = event.activity.name or "<unnamed>"
        if event.event_type == "timing_start":
            logger.info(f"Timing started: {name} at {event.segment.start_time}")
        elif event.event_type == "timing_stop":
            duration = event.segment.duration(event.timestamp).total_seconds()
            logger.info(f"Timing stopped: {name} (Duration: {duration:.0f}s)")
        else:
            logger.info(f"Timing aborted: {name}")

    def _handle_idle_detected(self, event: IdleDetectedEvent) -> None:
        logger.info(
            f"Idle since {event.idle_window.signal_time} "
            f"({event.idle_window.duration.total_seconds():.0f}s)"
        )

    def _handle_idle_resolved(self, event: IdleResolvedEvent) -> None:
        logger.info(
            f"Idle time {event.resolution}d: {event.idle_window.signal_time} - "
            f"{event.idle_window.now}"
        )


class SystemEventHandler(EventHandler):
    """Handles system-related events."""

    def _register_handlers(self) -> None:
        """Register system event handlers."""
        self.dispatcher.subscribe(self.handle_event, "system_status")
        self.dispatcher.subscribe(self.handle_event, "error")
        self.subscribed_events.update(["system_status", "error"])

    def handle_event(self, event: Event) -> None:
        """Handle system events.

        Args:
            event: Event to handle
        """
        if event.event_type == "system_status":
            self._handle_status_update(event)  # type: ignore
        elif event.event_type == "error":
            self._handle_error(event)  # type: ignore

    def _handle_status_update(self, event: SystemStatusEvent) -> None:
        logger.info(f"System status: {event.status}")
        if event.details:
            logger.debug(f"Status details: {event.details}")

    def _handle_error(self, event: ErrorEvent) -> None:
        logger.error(f"System error ({event.error_type}): {event.error_message}")
        if event.details:
            logger.error(f"Error details: {event.details}")
