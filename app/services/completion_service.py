"""Completion service - toggles a goal's completion for today."""
import logging

from pymongo.errors import DuplicateKeyError

from app.exceptions import ConflictError, NotFoundError
from app.models.goal import ToggleResult
from app.services.goal_service import parse_object_id
from app.utils.dates import Clock, to_mongo_date, utc_now, utc_today

logger = logging.getLogger(__name__)


class CompletionService:
    """Service for marking goals done or not done."""

    def __init__(self, db, clock: Clock = utc_today):
        """Initialize service with database connection and a date source."""
        self.db = db
        self.goals = db["goals"]
        self.completions = db["completions"]
        self.clock = clock

    async def _insert_completion(self, user_id: str, goal_id: str, completed_on) -> None:
        """
        Insert a completion row.

        Raises:
            ConflictError: If a completion for (goal, day) already exists
        """
        try:
            await self.completions.insert_one({
                "goal_id": goal_id,
                "user_id": user_id,
                "completed_on": completed_on,
                "created_at": utc_now(),
            })
        except DuplicateKeyError:
            raise ConflictError("Goal already completed for this date")

    async def toggle(self, user_id: str, goal_id: str) -> ToggleResult:
        """
        Flip a goal's completion state for today.

        The goal's schedule is not checked: any goal the user owns can be
        marked done or not done for today.

        Args:
            user_id: User ID
            goal_id: Goal ID

        Returns:
            Completion state after the toggle

        Raises:
            NotFoundError: If goal not found for this user
        """
        object_id = parse_object_id(goal_id)
        goal = await self.goals.find_one({"_id": object_id, "user_id": user_id})
        if not goal:
            raise NotFoundError("Goal not found")

        goal_id = str(goal["_id"])
        completed_on = to_mongo_date(self.clock())

        result = await self.completions.delete_one({
            "goal_id": goal_id,
            "completed_on": completed_on,
        })
        if result.deleted_count:
            logger.debug("Goal %s marked not done for %s", goal_id, completed_on.date())
            return ToggleResult(is_completed=False)

        try:
            await self._insert_completion(user_id, goal_id, completed_on)
        except ConflictError:
            # A concurrent toggle inserted first; the goal is completed either way
            logger.warning(
                "Concurrent completion for goal %s on %s",
                goal_id,
                completed_on.date(),
            )
            return ToggleResult(is_completed=True)

        logger.debug("Goal %s marked done for %s", goal_id, completed_on.date())
        return ToggleResult(is_completed=True)
