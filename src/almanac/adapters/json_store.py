"""File-based activity storage adapter."""

import json
import logging
from datetime import datetime
from pathlib import Path

from almanac.core.activities import (
    Activity,
    align_timezones,
    filter_activities_by_range,
    filter_activities_by_user,
    sort_activities_by_start,
)

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """The activity file could not be read or written."""


class JsonActivityStore:
    """
    JSON file activity storage.

    Implements ActivityRepository protocol. The whole store is one JSON
    array of activity records.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> list[Activity]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt activity file {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Activity file {self.path} must hold a JSON array")

        try:
            return [Activity.from_dict(item) for item in data]
        except (ValueError, TypeError) as e:
            raise StorageError(f"Bad activity record in {self.path}: {e}") from e

    def _save(self, activities: list[Activity]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([a.to_dict() for a in activities], indent=2))

    def list_activities(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        user_id: int | None = None,
    ) -> list[Activity]:
        """List activities, optionally limited to a time range and user."""
        activities = filter_activities_by_user(self._load(), user_id)
        if start is None or end is None:
            return sort_activities_by_start(activities)

        activities = align_timezones(activities, start)
        templates = [a for a in activities if a.is_recurring]
        singles = filter_activities_by_range([a for a in activities if not a.is_recurring], start, end)
        return sort_activities_by_start(templates + singles)

    def get_activity(self, activity_id: int) -> Activity | None:
        """Fetch one activity by id. Returns None if not found."""
        for activity in self._load():
            if activity.id == activity_id:
                return activity
        return None

    def create_activity(self, activity: Activity) -> Activity:
        """Store a new activity, assigning the next free id."""
        if activity.is_virtual:
            raise ValueError("Generated recurrence instances cannot be stored")

        activities = self._load()
        activity.id = max((a.id for a in activities), default=0) + 1
        activities.append(activity)
        self._save(activities)
        logger.info(f"Created activity {activity.id} '{activity.title}' at {activity.start_date.isoformat()}")
        return activity
