"""Domain entities."""

from .activity import Activity, TimeSegment
from .idle_window import IdleWindow

__all__ = [
    "Activity",
    "TimeSegment",
    "IdleWindow",
]
