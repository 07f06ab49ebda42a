"""Recurrence expansion - turns recurring templates into concrete instances.

Pure logic. Rule grammar lives behind RuleEvaluator so the expander only
deals with synthesizing instances.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Protocol

from dateutil.rrule import rrulestr

from .activities import Activity, Occurrence

logger = logging.getLogger(__name__)

# Synthetic ids stay unique only while a template has fewer than this many
# occurrences in one expansion; index OCCURRENCE_ID_STRIDE of template n
# shares an id with index 0 of template n + 1. Occurrence tags stay exact.
OCCURRENCE_ID_STRIDE = 10000


class RecurrenceRuleError(ValueError):
    """A recurrence rule could not be parsed or enumerated."""


class RuleEvaluator(Protocol):
    """Interface for parsing a rule and enumerating its occurrences."""

    def occurrences(
        self,
        rule: str,
        dtstart: datetime,
        window_start: datetime,
        window_end: datetime,
    ) -> list[datetime]:
        """Occurrence starts in [window_start, window_end], chronological."""
        ...


class RRuleEvaluator:
    """
    iCalendar RRULE evaluator backed by python-dateutil.

    Implements RuleEvaluator protocol.
    """

    def occurrences(
        self,
        rule: str,
        dtstart: datetime,
        window_start: datetime,
        window_end: datetime,
    ) -> list[datetime]:
        try:
            parsed = rrulestr(strip_dtstart(rule), dtstart=dtstart)
            return list(parsed.between(window_start, window_end, inc=True))
        except (ValueError, TypeError, KeyError, OverflowError) as e:
            raise RecurrenceRuleError(f"Invalid recurrence rule {rule!r}: {e}") from e


def strip_dtstart(rule: str) -> str:
    """Drop any DTSTART line; the template's own start is the anchor."""
    lines = [line.strip() for line in rule.strip().splitlines()]
    return "\n".join(line for line in lines if line and not line.upper().startswith("DTSTART"))


def virtual_id(parent_id: int, index: int) -> int:
    """Synthetic id for an instance. Always negative, stored ids are not."""
    return -(parent_id * OCCURRENCE_ID_STRIDE + index + 1)


def make_occurrence(template: Activity, index: int, start: datetime, duration: timedelta) -> Activity:
    """Build the virtual instance of `template` starting at `start`."""
    return replace(
        template,
        id=virtual_id(template.id, index),
        start_date=start,
        end_date=start + duration,
        recurrence_rule=None,
        parent_activity_id=template.id,
        occurrence=Occurrence(parent_id=template.id, index=index),
    )


def expand_recurring_activities(
    activities: list[Activity],
    window_start: datetime,
    window_end: datetime,
    evaluator: RuleEvaluator | None = None,
) -> list[Activity]:
    """
    Expand recurring templates into instances within [window_start, window_end].

    Non-recurring activities pass through untouched and unfiltered.
    Each template is replaced, in place, by its instances in chronological
    order. A template whose rule fails is kept as-is and logged.

    Pure function - no I/O.
    """
    if window_start > window_end:
        raise ValueError("window_start must not be after window_end")

    evaluator = evaluator or RRuleEvaluator()
    result: list[Activity] = []

    for activity in activities:
        if not activity.is_recurring:
            result.append(activity)
            continue

        try:
            starts = evaluator.occurrences(
                activity.recurrence_rule,
                activity.start_date,
                window_start,
                window_end,
            )
            duration = timedelta(minutes=activity.duration_minutes())
            instances = [make_occurrence(activity, i, start, duration) for i, start in enumerate(starts)]
        except Exception as e:
            logger.warning(f"Error expanding recurrence for activity {activity.id}: {e}")
            result.append(activity)
            continue

        logger.debug(f"Expanded activity {activity.id} into {len(instances)} instances")
        result.extend(instances)

    return result
