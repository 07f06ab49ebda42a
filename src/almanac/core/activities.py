"""Pure activity domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone


@dataclass
class TimeSlot:
    """A time interval, [start, end)."""

    start: datetime
    end: datetime

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} ({self.duration_minutes()} min)"

    def contains(self, dt: datetime) -> bool:
        """Check if a datetime falls within this slot."""
        return self.start <= dt < self.end

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check if this slot overlaps with another. Touching slots don't."""
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Occurrence:
    """Marks an activity as one generated instance of a recurring template."""

    parent_id: int
    index: int


@dataclass
class Activity:
    """A calendar activity, either a single occurrence or a recurrence template."""

    id: int
    title: str
    start_date: datetime
    end_date: datetime
    type: str = "confirmed"
    status: str = ""
    description: str = ""
    category: str = ""
    location: str = ""
    recurrence_rule: str | None = None
    parent_activity_id: int | None = None
    user_id: int | None = None
    occurrence: Occurrence | None = None

    @property
    def is_recurring(self) -> bool:
        return bool(self.recurrence_rule)

    @property
    def is_virtual(self) -> bool:
        """True for generated instances, which are never persisted."""
        return self.occurrence is not None

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(start=self.start_date, end=self.end_date)

    def duration_minutes(self) -> int:
        return self.slot.duration_minutes()

    def format_time(self) -> str:
        """Format the activity time for display."""
        return f"{self.start_date.strftime('%H:%M')}-{self.end_date.strftime('%H:%M')}"

    @classmethod
    def from_dict(cls, data: dict) -> "Activity":
        """Create Activity from a stored JSON record (camelCase keys)."""
        try:
            start = parse_timestamp(data["startDate"])
            end = parse_timestamp(data["endDate"])
            activity_id = int(data["id"])
            title = data["title"]
        except KeyError as e:
            raise ValueError(f"Activity record missing field {e}") from e

        if start > end:
            raise ValueError(f"Activity {activity_id} ends before it starts")

        return cls(
            id=activity_id,
            title=title,
            start_date=start,
            end_date=end,
            type=data.get("type") or "confirmed",
            status=data.get("status") or "",
            description=data.get("description") or "",
            category=data.get("category") or "",
            location=data.get("location") or "",
            recurrence_rule=data.get("recurrenceRule") or None,
            parent_activity_id=data.get("parentActivityId"),
            user_id=data.get("userId"),
        )

    def to_dict(self) -> dict:
        """Serialize to a JSON record (camelCase keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "location": self.location,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "type": self.type,
            "status": self.status,
            "recurrenceRule": self.recurrence_rule,
            "parentActivityId": self.parent_activity_id,
            "userId": self.user_id,
        }


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp. A trailing 'Z' means UTC."""
    if isinstance(value, datetime):
        return value
    if value.endswith("Z"):
        return datetime.fromisoformat(value[:-1]).replace(tzinfo=timezone.utc)
    return datetime.fromisoformat(value)


def _as_kind(dt: datetime, reference: datetime) -> datetime:
    if reference.tzinfo is None and dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    if reference.tzinfo is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=reference.tzinfo)
    return dt


def align_timezones(activities: list[Activity], reference: datetime) -> list[Activity]:
    """
    Make activity times comparable with `reference`.

    Aware times become naive local time when `reference` is naive; naive
    times take `reference`'s zone when it is aware. Activities already of
    the same kind are returned as-is.
    """
    aligned = []
    for a in activities:
        start = _as_kind(a.start_date, reference)
        end = _as_kind(a.end_date, reference)
        if start is a.start_date and end is a.end_date:
            aligned.append(a)
        else:
            aligned.append(replace(a, start_date=start, end_date=end))
    return aligned


def filter_activities_by_range(
    activities: list[Activity],
    start: datetime,
    end: datetime,
) -> list[Activity]:
    """
    Keep activities whose interval touches [start, end].

    Pure function - no I/O.
    """
    return [a for a in activities if a.start_date <= end and a.end_date >= start]


def filter_activities_by_user(activities: list[Activity], user_id: int | None) -> list[Activity]:
    """Keep one user's activities. No user means everyone's."""
    if user_id is None:
        return list(activities)
    return [a for a in activities if a.user_id == user_id]


def sort_activities_by_start(activities: list[Activity]) -> list[Activity]:
    """Sort activities by start time."""
    return sorted(activities, key=lambda a: a.start_date)
