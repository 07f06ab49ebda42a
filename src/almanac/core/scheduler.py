"""Slot search over existing activities under a working-hours policy."""

import logging
from datetime import datetime, timedelta

from .activities import Activity, TimeSlot, sort_activities_by_start

logger = logging.getLogger(__name__)

SEARCH_HORIZON_DAYS = 14
SEARCH_STEP_MINUTES = 30


def is_weekend(dt: datetime) -> bool:
    return dt.weekday() >= 5


def start_of_hour(dt: datetime) -> datetime:
    return dt.replace(minute=0, second=0, microsecond=0)


def is_during_hours(
    dt: datetime,
    start_hour: int,
    end_hour: int,
) -> bool:
    """Check if a datetime is during specified hours."""
    return start_hour <= dt.hour < end_hour


def find_next_available_slot(
    activities: list[Activity],
    duration_minutes: int,
    search_start: datetime,
    work_start_hour: int = 9,
    work_end_hour: int = 17,
    horizon_days: int = SEARCH_HORIZON_DAYS,
    step_minutes: int = SEARCH_STEP_MINUTES,
) -> datetime | None:
    """
    Find the earliest weekday start time where a new activity fits.

    Pure function - no I/O.

    Args:
        activities: Concrete activities to avoid (expand recurrences first)
        duration_minutes: Length of the activity to place
        search_start: Point in time to search from
        work_start_hour: Start of work day (hour, 24h format)
        work_end_hour: End of work day (hour, 24h format)
        horizon_days: How far past search_start to look
        step_minutes: How far to move after a collision

    Returns:
        Start of the free slot, or None if nothing fits before the horizon
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    if not 0 <= work_start_hour < work_end_hour <= 24:
        raise ValueError(f"Invalid working hours: {work_start_hour}-{work_end_hour}")

    # Next whole hour at least an hour out; the fallback only covers
    # rounding that lands before search_start.
    current = start_of_hour(search_start + timedelta(minutes=60))
    if current < search_start:
        current = search_start + timedelta(minutes=30)

    horizon = search_start + timedelta(days=horizon_days)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes)

    while current < horizon:
        if is_weekend(current):
            current = (current + timedelta(days=1)).replace(hour=work_start_hour)
            continue

        if current.hour < work_start_hour:
            current = current.replace(hour=work_start_hour)
            continue
        if current.hour >= work_end_hour:
            current = (current + timedelta(days=1)).replace(hour=work_start_hour)
            continue

        candidate = TimeSlot(start=current, end=current + duration)
        if not any(candidate.overlaps(a.slot) for a in activities):
            return current

        current += step

    logger.debug(f"No {duration_minutes} min slot within {horizon_days} days of {search_start.isoformat()}")
    return None


def find_conflicts(activities: list[Activity]) -> list[tuple[Activity, Activity]]:
    """
    Find overlapping activities.

    Returns list of (activity1, activity2) tuples that conflict.
    Pure function - no I/O.
    """
    conflicts = []
    sorted_activities = sort_activities_by_start(activities)

    for i, a1 in enumerate(sorted_activities):
        for a2 in sorted_activities[i + 1 :]:
            # a2 starts after a1 ends - no more conflicts possible
            if a2.start_date >= a1.end_date:
                break
            if a1.slot.overlaps(a2.slot):
                conflicts.append((a1, a2))

    return conflicts
