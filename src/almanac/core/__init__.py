"""Functional core - pure scheduling logic with no I/O."""

from .activities import (
    Activity,
    Occurrence,
    TimeSlot,
    filter_activities_by_range,
    filter_activities_by_user,
    sort_activities_by_start,
)
from .recurrence import RecurrenceRuleError, RRuleEvaluator, RuleEvaluator, expand_recurring_activities
from .scheduler import find_conflicts, find_next_available_slot

__all__ = [
    # Activities
    "Activity",
    "Occurrence",
    "TimeSlot",
    "filter_activities_by_range",
    "filter_activities_by_user",
    "sort_activities_by_start",
    # Recurrence
    "RecurrenceRuleError",
    "RRuleEvaluator",
    "RuleEvaluator",
    "expand_recurring_activities",
    # Scheduling
    "find_conflicts",
    "find_next_available_slot",
]
