"""Goal router - API endpoints for goals, completions and the calendar."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.config import settings
from app.database import get_database
from app.exceptions import NotFoundError, ValidationError
from app.models.calendar import CalendarDay, CalendarDayDetails
from app.models.goal import Goal, GoalCreate, GoalUpdate, GoalWithStatus, ReorderRequest, ToggleResult
from app.routers.auth import get_current_user_id
from app.services.calendar_service import CalendarService, parse_query_date, validate_calendar_range
from app.services.completion_service import CompletionService
from app.services.goal_service import GoalService
from app.utils.dates import Clock, utc_today


router = APIRouter(prefix="/goals", tags=["goals"])


def get_clock() -> Clock:
    """Dependency providing the source of "today"."""
    return utc_today


@router.get("", response_model=list[GoalWithStatus])
async def list_goals(
    today_only: bool = Query(True, alias="todayOnly", description="Only active goals due today"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    List goals for the authenticated user.

    - Requires authentication
    - todayOnly=true (default): active goals scheduled for today
    - todayOnly=false: every goal, including inactive ones
    - Each goal carries is_completed_today
    """
    service = GoalService(db, clock=clock)
    return await service.list_goals(user_id=user_id, today_only=today_only)


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new goal.

    - Requires authentication
    - Appended after the user's existing goals
    - Measurable goals need a target_value above 0
    """
    service = GoalService(db)
    try:
        return await service.create_goal(user_id=user_id, goal_create=goal)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.get("/calendar", response_model=list[CalendarDay])
async def get_calendar_data(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Daily scheduled/completed counts for the calendar view.

    - Requires authentication
    - startDate and endDate (YYYY-MM-DD) are both required
    - Range is inclusive and limited to 366 days
    - Returns 400 for missing or malformed dates
    """
    try:
        start = parse_query_date(start_date)
        end = parse_query_date(end_date)
        validate_calendar_range(start, end, max_days=settings.calendar_max_range_days)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    service = CalendarService(db)
    return await service.get_calendar_data(
        user_id=user_id,
        start_date=start,
        end_date=end,
    )


@router.get("/calendar/day", response_model=CalendarDayDetails)
async def get_calendar_day(
    day: Optional[str] = Query(None, alias="date"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Done and not done goals for one calendar day.

    - Requires authentication
    - date (YYYY-MM-DD) is required
    - Returns 400 for a missing or malformed date
    """
    if day is None:
        raise HTTPException(status_code=400, detail="date query parameter is required")
    try:
        parsed_day = parse_query_date(day)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    service = CalendarService(db)
    return await service.get_day_details(user_id=user_id, day=parsed_day)


@router.post("/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_goals(
    reorder: ReorderRequest,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Reorder goals by priority.

    - Requires authentication
    - Each goal's sort_order becomes its index in goal_ids
    - IDs not owned by the user are ignored
    """
    service = GoalService(db)
    try:
        await service.reorder_goals(user_id=user_id, goal_ids=reorder.goal_ids)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a single goal by ID.

    - Requires authentication
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.get_goal(user_id=user_id, goal_id=goal_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.patch("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    goal_update: GoalUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Partially update a goal.

    - Requires authentication
    - null clears interval_days, interval_start_date and description
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.update_goal(
            user_id=user_id,
            goal_id=goal_id,
            goal_update=goal_update,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Delete a goal and its completion history.

    - Requires authentication
    - Permanent; use is_active=false to pause a goal instead
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        await service.delete_goal(user_id=user_id, goal_id=goal_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{goal_id}/toggle", response_model=ToggleResult)
async def toggle_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    """
    Toggle goal completion for today.

    - Requires authentication
    - Completed goals become not completed and vice versa
    - Works whether or not the goal is scheduled today
    - Returns 404 if goal not found
    """
    service = CompletionService(db, clock=clock)
    try:
        return await service.toggle(user_id=user_id, goal_id=goal_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
