"""Almanac CLI - activity scheduling."""

import json
import logging
import sys
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import click

from .adapters.json_store import StorageError
from .config import Config, load_config
from .core.activities import Activity
from .core.recurrence import expand_recurring_activities
from .core.scheduler import find_conflicts
from .workflows import agenda, next_slot, schedule_activity


@click.group()
@click.version_option(package_name="almanac")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Almanac - activity calendar scheduling."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _localize(config: Config, dt: datetime) -> datetime:
    """Attach the configured timezone to a naive datetime from the command line."""
    if config.timezone and dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(config.timezone))
    return dt


def _show_activities(activities: list[Activity], as_json: bool, empty_msg: str = "No activities.") -> None:
    """Shared activity display logic."""
    if as_json:
        click.echo(json.dumps([a.to_dict() for a in activities], indent=2))
        return

    if not activities:
        click.echo(empty_msg)
        return

    clashing = {id(a) for pair in find_conflicts(activities) for a in pair}
    current_date = None
    for activity in activities:
        activity_date = activity.start_date.date()
        if activity_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {activity_date.strftime('%A, %B %d')}")
            current_date = activity_date

        marker = "!" if id(activity) in clashing else " "
        repeat = " (repeats)" if activity.is_virtual else ""
        loc = f" @ {activity.location}" if activity.location else ""
        click.echo(f" {marker}{activity.format_time():12} {activity.title}{repeat}{loc}")


@main.command("agenda")
@click.option("--start", "start_date", type=click.DateTime(["%Y-%m-%d"]), help="First day (default today)")
@click.option("--days", default=7, show_default=True, help="Number of days to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def agenda_command(start_date: datetime | None, days: int, as_json: bool):
    """Show activities, with recurring ones expanded."""
    config = load_config()
    first = start_date.date() if start_date else date.today()
    start = _localize(config, datetime.combine(first, time.min))
    end = start + timedelta(days=days) - timedelta(microseconds=1)

    try:
        activities = agenda(config, start, end)
    except (StorageError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _show_activities(activities, as_json, f"No activities in the next {days} days.")


@main.command("next-slot")
@click.argument("duration", type=click.IntRange(min=1))
@click.option("--from", "search_from", type=click.DateTime(), help="Search start (default now)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def next_slot_command(duration: int, search_from: datetime | None, as_json: bool):
    """Find the next free slot of DURATION minutes."""
    config = load_config()
    search_start = _localize(config, search_from) if search_from else config.now()

    try:
        slot = next_slot(config, duration, search_start)
    except (StorageError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"slot": slot.isoformat() if slot else None}))
    elif slot is None:
        click.echo(f"No availability in the next {config.search_horizon_days} days.")
    else:
        click.echo(f"{slot.strftime('%A, %B %d %H:%M')} ({duration} min)")


@main.command("schedule")
@click.argument("title")
@click.argument("duration", type=click.IntRange(min=1))
@click.option("--type", "activity_type", default="confirmed", show_default=True, help="Activity type")
@click.option("--location", default="", help="Where it happens")
@click.option("--from", "search_from", type=click.DateTime(), help="Search start (default now)")
def schedule_command(title: str, duration: int, activity_type: str, location: str, search_from: datetime | None):
    """Book TITLE for DURATION minutes in the next free slot."""
    config = load_config()
    search_start = _localize(config, search_from) if search_from else config.now()

    try:
        activity = schedule_activity(
            config,
            title,
            duration,
            search_start,
            type=activity_type,
            location=location,
        )
    except (StorageError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if activity is None:
        click.echo(f"No availability in the next {config.search_horizon_days} days.")
        return
    click.echo(f"Scheduled '{activity.title}' on {activity.start_date.strftime('%A, %B %d %H:%M')}")


@main.command("expand")
@click.argument("source", type=click.File("r"))
@click.option("--start", required=True, type=click.DateTime(), help="Window start")
@click.option("--end", required=True, type=click.DateTime(), help="Window end")
def expand_command(source, start: datetime, end: datetime):
    """Expand recurring activities from a JSON file and print them as JSON."""
    if start > end:
        click.echo("Error: --start must not be after --end", err=True)
        sys.exit(1)

    try:
        activities = [Activity.from_dict(item) for item in json.load(source)]
    except (json.JSONDecodeError, ValueError, TypeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    expanded = expand_recurring_activities(activities, start, end)
    click.echo(json.dumps([a.to_dict() for a in expanded], indent=2))


if __name__ == "__main__":
    main()
