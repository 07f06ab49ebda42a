"""Shared workflow layer behind the CLI.

Each function loads activities from the store, runs the pure core over
them and, for scheduling, writes the result back.
"""

import logging
from datetime import datetime, timedelta

from .adapters.json_store import JsonActivityStore
from .config import Config
from .core.activities import (
    Activity,
    align_timezones,
    filter_activities_by_range,
    sort_activities_by_start,
)
from .core.recurrence import expand_recurring_activities
from .core.scheduler import find_next_available_slot
from .ports import ActivityRepository

logger = logging.getLogger(__name__)


def get_store(config: Config) -> JsonActivityStore:
    """Resolve the activity store from config."""
    return JsonActivityStore(config.activity_file())


def longest_recurring_duration(activities: list[Activity]) -> timedelta:
    """Longest template; occurrences starting this far back may still be running."""
    return max(
        (a.end_date - a.start_date for a in activities if a.is_recurring),
        default=timedelta(0),
    )


def _busy_between(
    config: Config,
    store: ActivityRepository,
    start: datetime,
    end: datetime,
) -> list[Activity]:
    """Concrete activities overlapping [start, end], recurrences expanded."""
    activities = align_timezones(store.list_activities(start, end, user_id=config.user_id), start)
    lookback = longest_recurring_duration(activities)
    expanded = expand_recurring_activities(activities, start - lookback, end)
    return filter_activities_by_range(expanded, start, end)


def agenda(
    config: Config,
    start: datetime,
    end: datetime,
    store: ActivityRepository | None = None,
) -> list[Activity]:
    """Concrete activities between start and end, recurrences expanded."""
    store = store or get_store(config)
    return sort_activities_by_start(_busy_between(config, store, start, end))


def next_slot(
    config: Config,
    duration_minutes: int,
    search_start: datetime,
    store: ActivityRepository | None = None,
) -> datetime | None:
    """Earliest free start time, taking recurring activities into account."""
    store = store or get_store(config)
    horizon = search_start + timedelta(days=config.search_horizon_days)
    work_start, work_end = config.working_hours()

    busy = _busy_between(config, store, search_start, horizon)

    return find_next_available_slot(
        busy,
        duration_minutes,
        search_start,
        work_start_hour=work_start,
        work_end_hour=work_end,
        horizon_days=config.search_horizon_days,
        step_minutes=config.slot_step_minutes,
    )


def schedule_activity(
    config: Config,
    title: str,
    duration_minutes: int,
    search_start: datetime,
    store: ActivityRepository | None = None,
    **fields,
) -> Activity | None:
    """Book a new activity in the next free slot. None if nothing is free."""
    store = store or get_store(config)
    start = next_slot(config, duration_minutes, search_start, store=store)
    if start is None:
        logger.info(f"No free {duration_minutes} min slot for '{title}'")
        return None

    activity = Activity(
        id=0,
        title=title,
        start_date=start,
        end_date=start + timedelta(minutes=duration_minutes),
        user_id=config.user_id,
        **fields,
    )
    return store.create_activity(activity)
