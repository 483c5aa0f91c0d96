"""Goal scheduling rules.

A goal recurs in exactly one of two modes:

- weekday mode: on a fixed set of weekdays (0=Sunday .. 6=Saturday)
- interval mode: every N days counting from a start date

Goals store the configuration as loose fields (``schedule_days``,
``interval_days``, ``interval_start_date``). ``schedule_for`` resolves them
into one of the two schedule types below, interval mode first, so the rest
of the code never has to decide which fields win.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Union

ALL_DAYS = (0, 1, 2, 3, 4, 5, 6)
WORK_DAYS = frozenset({1, 2, 3, 4, 5})
WEEKEND_DAYS = frozenset({0, 6})
DAY_NAMES_SHORT = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class WeekdaySchedule:
    """Recurs on the given weekday indices (0=Sunday)."""

    days: frozenset


@dataclass(frozen=True)
class IntervalSchedule:
    """Recurs every ``every_days`` days starting on ``start``."""

    every_days: int
    start: date


Schedule = Union[WeekdaySchedule, IntervalSchedule]


def sunday_based_weekday(day: date) -> int:
    """
    Weekday index with Sunday as 0.

    Examples:
        >>> sunday_based_weekday(date(2025, 1, 12))  # Sunday
        0
        >>> sunday_based_weekday(date(2025, 1, 13))  # Monday
        1
    """
    return day.isoweekday() % 7


def schedule_for(goal) -> Schedule:
    """
    Resolve a goal's stored scheduling fields into a schedule.

    Interval mode takes precedence whenever both interval fields are set,
    whatever ``schedule_days`` holds.
    """
    if goal.interval_days and goal.interval_start_date is not None:
        return IntervalSchedule(
            every_days=goal.interval_days,
            start=goal.interval_start_date,
        )
    return WeekdaySchedule(days=frozenset(goal.schedule_days or ()))


def is_due(schedule: Schedule, day: date) -> bool:
    """
    Decide whether a schedule has an occurrence on ``day``.

    Knows nothing about goal activity or creation date; callers apply
    those filters themselves.

    Examples:
        >>> every_other = IntervalSchedule(every_days=2, start=date(2025, 1, 13))
        >>> is_due(every_other, date(2025, 1, 15))
        True
        >>> is_due(every_other, date(2025, 1, 14))
        False
        >>> is_due(every_other, date(2025, 1, 11))
        False
    """
    if isinstance(schedule, IntervalSchedule):
        days_since_start = (day - schedule.start).days
        return days_since_start >= 0 and days_since_start % schedule.every_days == 0

    return sunday_based_weekday(day) in schedule.days


def goal_is_due(goal, day: date) -> bool:
    """Shortcut for ``is_due(schedule_for(goal), day)``."""
    return is_due(schedule_for(goal), day)


def baseline_date(goal) -> date:
    """First date on which a goal can count: the date it was created."""
    return goal.created_at.date()


def is_counted(goal, day: date) -> bool:
    """
    Whether a goal counts as scheduled on ``day`` for calendar purposes.

    A goal never counts before its baseline date, so creating a goal does
    not retroactively add misses to past days.
    """
    if day < baseline_date(goal):
        return False
    return goal_is_due(goal, day)


def next_occurrence(schedule: Schedule, today: date) -> Optional[date]:
    """
    First due date on or after ``today``.

    Returns None for a weekday schedule with no days selected.

    Examples:
        >>> next_occurrence(IntervalSchedule(3, date(2025, 1, 1)), date(2025, 1, 5))
        datetime.date(2025, 1, 7)
        >>> next_occurrence(IntervalSchedule(3, date(2025, 2, 1)), date(2025, 1, 5))
        datetime.date(2025, 2, 1)
    """
    if isinstance(schedule, IntervalSchedule):
        if schedule.start >= today:
            return schedule.start
        remainder = (today - schedule.start).days % schedule.every_days
        if remainder == 0:
            return today
        return today + timedelta(days=schedule.every_days - remainder)

    for offset in range(7):
        candidate = today + timedelta(days=offset)
        if sunday_based_weekday(candidate) in schedule.days:
            return candidate
    return None


def describe_schedule(schedule: Schedule) -> str:
    """
    Human readable label for a schedule.

    Examples:
        >>> describe_schedule(WeekdaySchedule(frozenset(ALL_DAYS)))
        'Every day'
        >>> describe_schedule(WeekdaySchedule(frozenset({1, 3, 5})))
        'Mon, Wed, Fri'
        >>> describe_schedule(IntervalSchedule(2, date(2025, 1, 13)))
        'Every 2 days'
    """
    if isinstance(schedule, IntervalSchedule):
        if schedule.every_days == 1:
            return "Every day"
        return f"Every {schedule.every_days} days"

    days = schedule.days
    if len(days) == 7:
        return "Every day"
    if days == WORK_DAYS:
        return "Weekdays"
    if days == WEEKEND_DAYS:
        return "Weekends"
    if not days:
        return "Never"
    return ", ".join(DAY_NAMES_SHORT[d] for d in sorted(days))
