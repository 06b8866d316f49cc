"""Event type definitions."""

from dataclasses import MISSING, dataclass, fields
from datetime import datetime
from typing import Any, Dict, Optional

from ..entities.activity import Activity, TimeSegment
from ..entities.idle_window import IdleWindow

COLLECTION_ACTIONS = {"add", "remove", "replace", "reset"}
COLLECTIONS = {"activities", "time_segments"}


class EventValidationMixin:
    """Mixin class for event validation."""

    def validate(self) -> None:
        """Validate event data.

        Raises:
            ValueError: If validation fails
        """
        # Check required fields
        for field in fields(self):
            required = field.default is MISSING and field.default_factory is MISSING
            if required and getattr(self, field.name) is None:
                raise ValueError(f"Required field '{field.name}' is None")

        # Validate timestamp
        if not isinstance(self.timestamp, datetime):
            raise ValueError("timestamp must be a datetime object")

        # Validate event_type
        if not isinstance(self.event_type, str):
            raise ValueError("event_type must be a string")

        # Event-specific validation
        self._validate_specific()

    def _validate_specific(self) -> None:
        """Validate event-specific fields.

        Override this method in specific event classes.
        """
        pass


@dataclass
class PropertyChangedEvent(EventValidationMixin):
    """Event emitted when an observable timer property changes value."""
    property_name: str
    timestamp: datetime
    value: Any = None
    event_type: str = "property_changed"

    def _validate_specific(self) -> None:
        """Validate property changed event fields."""
        if not self.property_name:
            raise ValueError("property_name is required")


@dataclass
class CollectionChangedEvent(EventValidationMixin):
    """Event emitted when the activity or time segment list changes."""
    collection: str  # "activities" or "time_segments"
    action: str  # "add", "remove", "replace", "reset"
    index: int
    timestamp: datetime
    item: Any = None
    event_type: str = "collection_changed"

    def _validate_specific(self) -> None:
        """Validate collection changed event fields."""
        if self.collection not in COLLECTIONS:
            raise ValueError(f"collection must be one of {COLLECTIONS}")
        if self.action not in COLLECTION_ACTIONS:
            raise ValueError(f"action must be one of {COLLECTION_ACTIONS}")


@dataclass
class TimingEvent(EventValidationMixin):
    """Event emitted when timing starts, stops or is aborted."""
    activity: Activity
    segment: TimeSegment
    timestamp: datetime
    event_type: str  # "timing_start", "timing_stop", "timing_abort"

    def _validate_specific(self) -> None:
        """Validate timing event fields."""
        valid_types = {"timing_start", "timing_stop", "timing_abort"}
        if self.event_type not in valid_types:
            raise ValueError(f"event_type must be one of {valid_types}")


@dataclass
class IdleDetectedEvent(EventValidationMixin):
    """Event emitted when an idle check finds a gap above the threshold."""
    idle_window: IdleWindow
    timestamp: datetime
    event_type: str = "idle_detected"

    def _validate_specific(self) -> None:
        """Validate idle detected event fields."""
        if self.idle_window.duration.total_seconds() < 0:
            raise ValueError("idle_window must not end before it starts")


@dataclass
class IdleResolvedEvent(EventValidationMixin):
    """Event emitted when the user includes or excludes idle time."""
    resolution: str  # "include" or "exclude"
    idle_window: IdleWindow
    timestamp: datetime
    event_type: str = "idle_resolved"

    def _validate_specific(self) -> None:
        """Validate idle resolved event fields."""
        if self.resolution not in {"include", "exclude"}:
            raise ValueError("resolution must be 'include' or 'exclude'")


@dataclass
class SystemStatusEvent(EventValidationMixin):
    """Event emitted for system status updates."""
    status: str
    timestamp: datetime
    event_type: str = "system_status"
    details: Optional[Dict] = None

    def _validate_specific(self) -> None:
        """Validate system status event fields."""
        if not self.status:
            raise ValueError("status is required")
        if self.details is not None and not isinstance(self.details, dict):
            raise ValueError("details must be a dictionary if provided")


@dataclass
class ErrorEvent(EventValidationMixin):
    """Event emitted when system errors occur."""
    error_type: str
    error_message: str
    timestamp: datetime
    event_type: str = "error"
    details: Optional[Dict] = None

    def _validate_specific(self) -> None:
        """Validate error event fields."""
        if not self.error_type:
            raise ValueError("error_type is required")
        if not self.error_message:
            raise ValueError("error_message is required")
        if self.details is not None and not isinstance(self.details, dict):
            raise ValueError("details must be a dictionary if provided")
