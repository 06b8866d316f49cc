"""Interface for activity data storage."""

from abc import ABC, abstractmethod
from typing import List

from ..entities.activity import Activity


class ActivityRepository(ABC):
    """Abstract interface for activity storage operations.

    Implementations follow a unit-of-work model: activities handed out by
    ``load_activities`` or passed to ``save_activity`` are tracked, and
    ``save_changes`` writes the current state of every tracked activity.
    """

    @abstractmethod
    def load_activities(self) -> List[Activity]:
        """Load all stored activities with their time segments.

        Returns:
            List of activities
        """
        pass

    @abstractmethod
    def save_activity(self, activity: Activity) -> None:
        """Add or update an activity.

        New activities are assigned an ID.

        Args:
            activity: Activity to store
        """
        pass

    @abstractmethod
    def delete_activity(self, activity: Activity) -> None:
        """Delete an activity and its time segments.

        Args:
            activity: Activity to delete
        """
        pass

    @abstractmethod
    def save_changes(self) -> None:
        """Write all tracked changes to durable storage."""
        pass
