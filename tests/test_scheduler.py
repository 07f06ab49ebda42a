"""Tests for slot search."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from almanac.core.activities import Activity
from almanac.core.scheduler import (
    find_conflicts,
    find_next_available_slot,
    is_during_hours,
    is_weekend,
    start_of_hour,
)


# Fixtures
@pytest.fixture
def today():
    """A Wednesday."""
    return date(2025, 1, 15)


@pytest.fixture
def at(today):
    def _at(hour: int, minute: int = 0, days: int = 0) -> datetime:
        return datetime.combine(today + timedelta(days=days), time(hour, minute))
    return _at


@pytest.fixture
def make_activity():
    counter = iter(range(1, 10000))

    def _make(start: datetime, end: datetime) -> Activity:
        n = next(counter)
        return Activity(id=n, title=f"Busy {n}", start_date=start, end_date=end)
    return _make


class TestHelpers:
    def test_is_weekend(self, at):
        assert is_weekend(at(10)) is False
        assert is_weekend(at(10, days=3)) is True  # Saturday
        assert is_weekend(at(10, days=4)) is True  # Sunday
        assert is_weekend(at(10, days=5)) is False  # Monday

    def test_start_of_hour(self, at):
        assert start_of_hour(at(10, 47).replace(second=12, microsecond=5)) == at(10)

    def test_is_during_hours(self, at):
        assert is_during_hours(at(9), 9, 17) is True
        assert is_during_hours(at(16, 59), 9, 17) is True
        assert is_during_hours(at(17), 9, 17) is False


class TestSearchOrigin:
    def test_empty_calendar_next_whole_hour(self, at):
        assert find_next_available_slot([], 60, at(10)) == at(11)

    def test_rounds_down_after_lookahead(self, at):
        search_start = at(10, 20)
        result = find_next_available_slot([], 30, search_start)
        assert result == at(11)
        assert result >= search_start

    def test_result_within_working_hours(self, at):
        result = find_next_available_slot([], 45, at(13, 5))
        assert is_during_hours(result, 9, 17)
        assert result.weekday() < 5

    def test_before_work_clamps_to_start(self, at):
        assert find_next_available_slot([], 30, at(6, 30)) == at(9)

    def test_after_work_moves_to_next_morning(self, at):
        assert find_next_available_slot([], 30, at(16, 30)) == at(9, days=1)

    def test_custom_working_hours(self, at):
        result = find_next_available_slot([], 30, at(6), work_start_hour=10, work_end_hour=14)
        assert result == at(10)


class TestWeekends:
    def test_friday_evening_skips_to_monday(self, at):
        friday_evening = at(16, 10, days=2)
        assert find_next_available_slot([], 60, friday_evening) == at(9, days=5)

    def test_saturday_skips_to_monday(self, at):
        saturday = at(10, days=3)
        assert find_next_available_slot([], 60, saturday) == at(9, days=5)

    def test_sunday_skips_to_monday(self, at):
        sunday = at(20, days=4)
        assert find_next_available_slot([], 60, sunday) == at(9, days=5)


class TestCollisions:
    def test_touching_end_is_free(self, at, make_activity):
        busy = make_activity(at(11), at(12))
        assert find_next_available_slot([busy], 60, at(10)) == at(12)

    def test_touching_start_is_free(self, at, make_activity):
        busy = make_activity(at(12), at(13))
        assert find_next_available_slot([busy], 60, at(10)) == at(11)

    def test_one_minute_overlap_advances(self, at, make_activity):
        # Candidate 11:00 overlaps the last minute of [10:01, 11:01)
        busy = make_activity(at(10, 1), at(11, 1))
        assert find_next_available_slot([busy], 60, at(10)) == at(11, 30)

    def test_advances_in_half_hour_steps(self, at, make_activity):
        busy = make_activity(at(11), at(13, 15))
        assert find_next_available_slot([busy], 30, at(10)) == at(13, 30)

    def test_slot_may_run_past_end_of_day(self, at, make_activity):
        busy = make_activity(at(9), at(16, 30))
        result = find_next_available_slot([busy], 60, at(7))
        assert result == at(16, 30)

    def test_full_day_moves_to_next_day(self, at, make_activity):
        busy = make_activity(at(9), at(17))
        assert find_next_available_slot([busy], 30, at(7)) == at(9, days=1)

    def test_zero_length_activity_inside_candidate_collides(self, at, make_activity):
        marker = make_activity(at(11, 15), at(11, 15))
        assert find_next_available_slot([marker], 30, at(10)) == at(11, 30)

    def test_custom_step(self, at, make_activity):
        busy = make_activity(at(11), at(11, 10))
        assert find_next_available_slot([busy], 30, at(10), step_minutes=15) == at(11, 15)


class TestExhaustion:
    def test_fully_booked_fortnight_returns_none(self, at, make_activity):
        busy = [make_activity(at(9, days=d), at(17, days=d)) for d in range(-1, 21)]
        assert find_next_available_slot(busy, 30, at(8)) is None

    def test_single_long_block_returns_none(self, at, make_activity):
        busy = make_activity(at(0, days=-1), at(0, days=30))
        assert find_next_available_slot([busy], 30, at(10)) is None

    def test_short_horizon(self, at, make_activity):
        busy = make_activity(at(9), at(17))
        assert find_next_available_slot([busy], 30, at(7), horizon_days=1) is None

    def test_free_just_inside_horizon(self, at, make_activity):
        busy = [make_activity(at(9, days=d), at(17, days=d)) for d in range(0, 13)]
        # Day 13 is a Tuesday, still before the 14-day horizon
        assert find_next_available_slot(busy, 30, at(8)) == at(9, days=13)


class TestContract:
    def test_deterministic(self, at, make_activity):
        busy = [make_activity(at(11), at(12)), make_activity(at(13), at(15))]
        first = find_next_available_slot(busy, 90, at(10))
        second = find_next_available_slot(busy, 90, at(10))
        assert first == second == at(15)

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration_raises(self, at, duration):
        with pytest.raises(ValueError):
            find_next_available_slot([], duration, at(10))

    @pytest.mark.parametrize("hours", [(17, 9), (9, 9), (-1, 17), (9, 25)])
    def test_bad_working_hours_raise(self, at, hours):
        with pytest.raises(ValueError):
            find_next_available_slot([], 30, at(10), *hours)

    def test_timezone_aware_search(self):
        search_start = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
        result = find_next_available_slot([], 30, search_start)
        assert result == datetime(2025, 1, 15, 11, 0, tzinfo=timezone.utc)


class TestFindConflicts:
    def test_no_conflicts(self, at, make_activity):
        activities = [make_activity(at(9), at(10)), make_activity(at(10), at(11))]
        assert find_conflicts(activities) == []

    def test_overlapping_pair(self, at, make_activity):
        a = make_activity(at(9), at(11))
        b = make_activity(at(10), at(12))
        assert find_conflicts([b, a]) == [(a, b)]

    def test_one_long_activity_against_many(self, at, make_activity):
        long = make_activity(at(9), at(17))
        short1 = make_activity(at(10), at(11))
        short2 = make_activity(at(14), at(15))
        conflicts = find_conflicts([long, short1, short2])
        assert conflicts == [(long, short1), (long, short2)]
