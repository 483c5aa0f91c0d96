"""Tests for goal scheduling rules."""
from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from app.utils.schedule import (
    IntervalSchedule,
    WeekdaySchedule,
    baseline_date,
    describe_schedule,
    goal_is_due,
    is_counted,
    is_due,
    next_occurrence,
    schedule_for,
    sunday_based_weekday,
)


def make_goal(
    schedule_days=(0, 1, 2, 3, 4, 5, 6),
    interval_days=None,
    interval_start_date=None,
    created_at=datetime(2025, 1, 1, 9, 30),
):
    return SimpleNamespace(
        schedule_days=list(schedule_days),
        interval_days=interval_days,
        interval_start_date=interval_start_date,
        created_at=created_at,
    )


class TestSundayBasedWeekday:
    """Tests for weekday numbering."""

    def test_full_week(self):
        """Sunday is 0 and Saturday is 6."""
        # 2025-01-12 is a Sunday
        start = date(2025, 1, 12)
        assert [sunday_based_weekday(start + timedelta(days=i)) for i in range(7)] == [
            0, 1, 2, 3, 4, 5, 6,
        ]


class TestScheduleFor:
    """Tests for resolving a goal's scheduling mode."""

    def test_weekday_mode(self):
        """Goals without interval fields use their weekdays."""
        schedule = schedule_for(make_goal(schedule_days=[1, 3, 5]))

        assert schedule == WeekdaySchedule(days=frozenset({1, 3, 5}))

    def test_interval_mode(self):
        """Both interval fields select interval mode."""
        schedule = schedule_for(make_goal(interval_days=3, interval_start_date=date(2025, 1, 1)))

        assert schedule == IntervalSchedule(every_days=3, start=date(2025, 1, 1))

    def test_interval_wins_over_weekdays(self):
        """Weekdays are ignored once both interval fields are set."""
        goal = make_goal(
            schedule_days=[0, 1, 2, 3, 4, 5, 6],
            interval_days=2,
            interval_start_date=date(2025, 1, 13),
        )

        assert isinstance(schedule_for(goal), IntervalSchedule)
        # A weekday-mode goal would be due every day
        assert goal_is_due(goal, date(2025, 1, 14)) is False

    def test_half_configured_interval_falls_back_to_weekdays(self):
        """Only one interval field set means weekday mode."""
        goal = make_goal(schedule_days=[2], interval_days=5)

        assert schedule_for(goal) == WeekdaySchedule(days=frozenset({2}))


class TestIsDueWeekdays:
    """Tests for weekday-mode scheduling."""

    def test_matches_weekday_membership(self):
        """Due exactly on the listed weekdays."""
        schedule = WeekdaySchedule(days=frozenset({1, 3, 5}))
        start = date(2025, 1, 1)

        for offset in range(28):
            day = start + timedelta(days=offset)
            assert is_due(schedule, day) == (sunday_based_weekday(day) in {1, 3, 5})

    def test_empty_weekdays_never_due(self):
        """No weekdays selected means never due."""
        schedule = WeekdaySchedule(days=frozenset())

        assert not any(is_due(schedule, date(2025, 1, 1) + timedelta(days=i)) for i in range(7))


class TestIsDueInterval:
    """Tests for interval-mode scheduling."""

    def test_every_two_days_from_start(self):
        """Due on the start date and every second day after."""
        schedule = IntervalSchedule(every_days=2, start=date(2025, 1, 13))

        assert is_due(schedule, date(2025, 1, 13)) is True
        assert is_due(schedule, date(2025, 1, 14)) is False
        assert is_due(schedule, date(2025, 1, 15)) is True
        assert is_due(schedule, date(2025, 1, 16)) is False
        assert is_due(schedule, date(2025, 1, 17)) is True

    def test_never_due_before_start(self):
        """Dates before the start are never due, even on multiples."""
        schedule = IntervalSchedule(every_days=2, start=date(2025, 1, 13))

        assert is_due(schedule, date(2025, 1, 11)) is False
        assert is_due(schedule, date(2024, 12, 30)) is False

    @pytest.mark.parametrize("every_days", [1, 3, 7, 10])
    def test_due_exactly_on_multiples(self, every_days):
        """Due iff the day offset is a multiple of the interval."""
        start = date(2024, 2, 27)
        schedule = IntervalSchedule(every_days=every_days, start=start)

        for offset in range(60):
            day = start + timedelta(days=offset)
            assert is_due(schedule, day) == (offset % every_days == 0)

    def test_crosses_year_boundary(self):
        """Day arithmetic carries over month and year ends."""
        schedule = IntervalSchedule(every_days=3, start=date(2024, 12, 30))

        assert is_due(schedule, date(2025, 1, 2)) is True
        assert is_due(schedule, date(2025, 1, 1)) is False


class TestBaseline:
    """Tests for the creation-date baseline."""

    def test_baseline_is_creation_date(self):
        """Baseline drops the time of day."""
        goal = make_goal(created_at=datetime(2025, 1, 8, 23, 59))

        assert baseline_date(goal) == date(2025, 1, 8)

    def test_not_counted_before_creation(self):
        """A due day before creation does not count."""
        goal = make_goal(created_at=datetime(2025, 1, 8, 12, 0))

        assert goal_is_due(goal, date(2025, 1, 7)) is True
        assert is_counted(goal, date(2025, 1, 7)) is False

    def test_counted_on_creation_day(self):
        """The creation day itself counts."""
        goal = make_goal(created_at=datetime(2025, 1, 8, 23, 0))

        assert is_counted(goal, date(2025, 1, 8)) is True


class TestNextOccurrence:
    """Tests for the next due date helper."""

    def test_interval_start_in_future(self):
        """A future start date is the next occurrence."""
        schedule = IntervalSchedule(every_days=4, start=date(2025, 3, 1))

        assert next_occurrence(schedule, date(2025, 2, 20)) == date(2025, 3, 1)

    def test_interval_due_today(self):
        """Today is returned when due today."""
        schedule = IntervalSchedule(every_days=2, start=date(2025, 1, 13))

        assert next_occurrence(schedule, date(2025, 1, 17)) == date(2025, 1, 17)

    def test_interval_between_occurrences(self):
        """Rounds up to the next multiple of the interval."""
        schedule = IntervalSchedule(every_days=2, start=date(2025, 1, 13))

        assert next_occurrence(schedule, date(2025, 1, 16)) == date(2025, 1, 17)

    def test_weekday_next_match(self):
        """Finds the next listed weekday."""
        # 2025-01-14 is a Tuesday; next Friday is 2025-01-17
        schedule = WeekdaySchedule(days=frozenset({5}))

        assert next_occurrence(schedule, date(2025, 1, 14)) == date(2025, 1, 17)

    def test_weekday_empty(self):
        """No weekdays means no next occurrence."""
        assert next_occurrence(WeekdaySchedule(days=frozenset()), date(2025, 1, 14)) is None


class TestDescribeSchedule:
    """Tests for schedule labels."""

    @pytest.mark.parametrize(
        "days,label",
        [
            ({0, 1, 2, 3, 4, 5, 6}, "Every day"),
            ({1, 2, 3, 4, 5}, "Weekdays"),
            ({0, 6}, "Weekends"),
            ({5, 1, 3}, "Mon, Wed, Fri"),
            (set(), "Never"),
        ],
    )
    def test_weekday_labels(self, days, label):
        """Common weekday sets get friendly labels."""
        assert describe_schedule(WeekdaySchedule(days=frozenset(days))) == label

    def test_interval_label(self):
        """Intervals read as every N days."""
        assert describe_schedule(IntervalSchedule(every_days=3, start=date(2025, 1, 1))) == "Every 3 days"
        assert describe_schedule(IntervalSchedule(every_days=1, start=date(2025, 1, 1))) == "Every day"
