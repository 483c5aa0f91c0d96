"""Calendar service - per-day completion stats for the calendar view."""
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional

from app.exceptions import ValidationError
from app.models.calendar import CalendarDay, CalendarDayDetails, CalendarGoalItem
from app.models.goal import Goal
from app.services.goal_service import GOAL_SORT, doc_to_goal
from app.utils.dates import from_mongo_date, to_mongo_date
from app.utils.schedule import is_counted

MAX_RANGE_DAYS = 366


def parse_query_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD query parameter.

    Returns None when the parameter was not supplied.

    Raises:
        ValidationError: If the value is not a valid calendar date

    Example:
        >>> parse_query_date("2025-01-14")
        datetime.date(2025, 1, 14)
    """
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Invalid date format, expected YYYY-MM-DD")


def validate_calendar_range(
    start_date: Optional[date],
    end_date: Optional[date],
    max_days: int = MAX_RANGE_DAYS,
) -> None:
    """
    Check a requested calendar range.

    Raises:
        ValidationError: If a date is missing, the range is inverted, or it
            spans more than ``max_days`` days
    """
    if start_date is None or end_date is None:
        raise ValidationError("Both startDate and endDate are required")
    if start_date > end_date:
        raise ValidationError("startDate must be before or equal to endDate")
    if (end_date - start_date).days > max_days:
        raise ValidationError(f"Date range must not exceed {max_days} days")


def _goal_item(goal: Goal) -> CalendarGoalItem:
    return CalendarGoalItem(
        id=goal.id,
        name=goal.name,
        is_measurable=goal.is_measurable,
        target_value=goal.target_value,
        unit=goal.unit,
    )


class CalendarService:
    """Service computing scheduled/completed goals per calendar day."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db["goals"]
        self.completions = db["completions"]

    async def _active_goals(self, user_id: str) -> list[Goal]:
        cursor = self.goals.find({"user_id": user_id, "is_active": True}).sort(GOAL_SORT)
        goal_docs = await cursor.to_list(length=None)
        return [doc_to_goal(doc) for doc in goal_docs]

    async def get_calendar_data(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> list[CalendarDay]:
        """
        Daily scheduled/completed counts for an inclusive date range.

        A goal counts on a day only if it is active, due that day, and the
        day is on or after the goal's creation date.

        Args:
            user_id: User ID
            start_date: First day of the range
            end_date: Last day of the range

        Returns:
            One entry per day, ascending
        """
        goals = await self._active_goals(user_id)

        cursor = self.completions.find(
            {
                "user_id": user_id,
                "completed_on": {
                    "$gte": to_mongo_date(start_date),
                    "$lte": to_mongo_date(end_date),
                },
            },
            projection={"goal_id": 1, "completed_on": 1},
        )
        completion_docs = await cursor.to_list(length=None)

        completed_by_day = defaultdict(set)
        for doc in completion_docs:
            completed_by_day[from_mongo_date(doc["completed_on"])].add(doc["goal_id"])

        results = []
        day = start_date
        while day <= end_date:
            done_ids = completed_by_day.get(day, set())
            total_scheduled = 0
            completed = 0

            for goal in goals:
                if not is_counted(goal, day):
                    continue
                total_scheduled += 1
                if goal.id in done_ids:
                    completed += 1

            results.append(CalendarDay(date=day, total_scheduled=total_scheduled, completed=completed))
            day += timedelta(days=1)

        return results

    async def get_day_details(
        self,
        user_id: str,
        day: date,
    ) -> CalendarDayDetails:
        """
        Split a day's scheduled goals into done and not done.

        Both lists keep the user's goal ordering. Totals are taken from the
        lists themselves.
        """
        goals = await self._active_goals(user_id)

        completed_ids = set(await self.completions.distinct(
            "goal_id",
            {"user_id": user_id, "completed_on": to_mongo_date(day)},
        ))

        done = []
        not_done = []
        for goal in goals:
            if not is_counted(goal, day):
                continue
            if goal.id in completed_ids:
                done.append(_goal_item(goal))
            else:
                not_done.append(_goal_item(goal))

        return CalendarDayDetails(
            date=day,
            total_scheduled=len(done) + len(not_done),
            completed=len(done),
            done=done,
            not_done=not_done,
        )
