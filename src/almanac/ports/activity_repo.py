"""Activity repository interface."""

from datetime import datetime
from typing import Protocol

from almanac.core.activities import Activity


class ActivityRepository(Protocol):
    """Interface for reading and storing activities in any backend."""

    def list_activities(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        user_id: int | None = None,
    ) -> list[Activity]:
        """List activities, optionally limited to a time range and user.

        Recurring templates are always included; their own dates say
        nothing about where their occurrences fall.
        """
        ...

    def get_activity(self, activity_id: int) -> Activity | None:
        """Fetch one activity by id. Returns None if not found."""
        ...

    def create_activity(self, activity: Activity) -> Activity:
        """Store a new activity and return it with its assigned id."""
        ...
