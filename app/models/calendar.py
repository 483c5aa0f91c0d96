"""Calendar view model definitions."""
from datetime import date

from pydantic import BaseModel


class CalendarDay(BaseModel):
    """Scheduled and completed goal counts for one day."""

    date: date
    total_scheduled: int
    completed: int


class CalendarGoalItem(BaseModel):
    """Goal summary shown in a day's done / not done lists."""

    id: str
    name: str
    is_measurable: bool
    target_value: int
    unit: str


class CalendarDayDetails(BaseModel):
    """Goal-level breakdown of a single calendar day."""

    date: date
    total_scheduled: int
    completed: int
    done: list[CalendarGoalItem]
    not_done: list[CalendarGoalItem]
