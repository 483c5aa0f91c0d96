"""Goal model definitions."""
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.schedule import Schedule, schedule_for

Weekday = Annotated[int, Field(ge=0, le=6)]


def _normalize_days(days: Optional[list[int]]) -> Optional[list[int]]:
    if days is None:
        return None
    return sorted(set(days))


class GoalBase(BaseModel):
    """Base goal fields."""

    name: str
    is_measurable: bool = False
    target_value: int = 0
    unit: str = "minutes"
    schedule_days: list[Weekday] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6])
    interval_days: Optional[int] = Field(default=None, ge=1)
    interval_start_date: Optional[date] = None
    description: Optional[str] = None

    @field_validator("schedule_days")
    @classmethod
    def normalize_schedule_days(cls, days):
        """Collapse duplicate weekdays and keep them sorted."""
        return _normalize_days(days)


class GoalCreate(GoalBase):
    """Goal creation model."""

    pass


class GoalUpdate(BaseModel):
    """
    Goal update model - all fields optional.

    Only fields present in the request are applied. Sending ``null`` for
    ``interval_days``, ``interval_start_date`` or ``description`` clears
    them; ``null`` on any other field is treated as omitted.
    """

    name: Optional[str] = None
    is_measurable: Optional[bool] = None
    target_value: Optional[int] = None
    unit: Optional[str] = None
    schedule_days: Optional[list[Weekday]] = None
    interval_days: Optional[int] = Field(default=None, ge=1)
    interval_start_date: Optional[date] = None
    description: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("schedule_days")
    @classmethod
    def normalize_schedule_days(cls, days):
        """Collapse duplicate weekdays and keep them sorted."""
        return _normalize_days(days)


class Goal(GoalBase):
    """Full goal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    sort_order: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @property
    def schedule(self) -> Schedule:
        """Resolved scheduling mode for this goal."""
        return schedule_for(self)


class GoalWithStatus(Goal):
    """Goal annotated with today's completion state."""

    is_completed_today: bool = False
    next_occurrence: Optional[date] = None
    schedule_label: str = ""


class ReorderRequest(BaseModel):
    """Goal IDs in their new display order."""

    goal_ids: list[str]


class ToggleResult(BaseModel):
    """Completion state after a toggle."""

    is_completed: bool
