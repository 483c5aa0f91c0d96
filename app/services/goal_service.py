"""Goal service - business logic for goal management."""
import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from app.exceptions import NotFoundError, ValidationError
from app.models.goal import Goal, GoalCreate, GoalUpdate, GoalWithStatus
from app.utils.dates import Clock, from_mongo_date, to_mongo_date, utc_now, utc_today
from app.utils.schedule import describe_schedule, is_due, next_occurrence

logger = logging.getLogger(__name__)

# Fields that accept an explicit null in updates to clear the stored value.
CLEARABLE_FIELDS = ("interval_days", "interval_start_date", "description")

GOAL_SORT = [("sort_order", 1), ("created_at", 1)]


def parse_object_id(value: str, label: str = "Goal") -> ObjectId:
    """
    Parse a client-supplied ID.

    Raises:
        NotFoundError: If the value is not a valid ObjectId
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{label} not found")


def doc_to_goal(doc: dict) -> Goal:
    """
    Convert database document to Goal model.

    Handles datetime to date conversion for the interval start date.
    """
    return Goal(
        _id=str(doc["_id"]),
        user_id=doc["user_id"],
        name=doc["name"],
        is_measurable=doc.get("is_measurable", False),
        target_value=doc.get("target_value", 0),
        unit=doc.get("unit", "minutes"),
        schedule_days=doc.get("schedule_days", []),
        interval_days=doc.get("interval_days"),
        interval_start_date=from_mongo_date(doc.get("interval_start_date")),
        description=doc.get("description"),
        sort_order=doc.get("sort_order", 0),
        is_active=doc.get("is_active", True),
        created_at=doc["created_at"],
        updated_at=doc.get("updated_at", doc["created_at"]),
    )


def validate_goal_fields(name: Optional[str], is_measurable: bool, target_value: int) -> None:
    """
    Business rules shared by create and update.

    Raises:
        ValidationError: If the name is blank or a measurable goal has no target
    """
    if name is not None and not name.strip():
        raise ValidationError("Name is required")
    if is_measurable and target_value <= 0:
        raise ValidationError("Target value must be greater than 0 for measurable goals")


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db, clock: Clock = utc_today):
        """Initialize service with database connection and a date source."""
        self.db = db
        self.goals = db["goals"]
        self.completions = db["completions"]
        self.clock = clock

    async def _find_owned(self, user_id: str, goal_id: str) -> dict:
        object_id = parse_object_id(goal_id)
        goal_doc = await self.goals.find_one({"_id": object_id, "user_id": user_id})
        if not goal_doc:
            raise NotFoundError("Goal not found")
        return goal_doc

    async def create_goal(
        self,
        user_id: str,
        goal_create: GoalCreate,
    ) -> Goal:
        """
        Create a new goal at the end of the user's ordering.

        Args:
            user_id: User ID who owns the goal
            goal_create: Goal creation data

        Returns:
            Created goal object

        Raises:
            ValidationError: If name is blank or measurable target is not positive
        """
        validate_goal_fields(
            goal_create.name,
            goal_create.is_measurable,
            goal_create.target_value,
        )

        # Next sort order is max + 1, or 0 for the first goal
        last = await self.goals.find_one(
            {"user_id": user_id},
            sort=[("sort_order", -1)],
            projection={"sort_order": 1},
        )
        sort_order = last["sort_order"] + 1 if last else 0

        now = utc_now()
        goal_doc = {
            "user_id": user_id,
            "name": goal_create.name.strip(),
            "is_measurable": goal_create.is_measurable,
            "target_value": goal_create.target_value,
            "unit": goal_create.unit,
            "schedule_days": goal_create.schedule_days,
            "interval_days": goal_create.interval_days,
            "interval_start_date": to_mongo_date(goal_create.interval_start_date),
            "description": goal_create.description,
            "sort_order": sort_order,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.goals.insert_one(goal_doc)
        goal_doc["_id"] = result.inserted_id

        logger.info("Created goal %s for user %s", result.inserted_id, user_id)
        return doc_to_goal(goal_doc)

    async def list_goals(
        self,
        user_id: str,
        today_only: bool = True,
    ) -> list[GoalWithStatus]:
        """
        List goals annotated with today's completion state.

        Args:
            user_id: User ID
            today_only: Only return active goals that are due today. The
                creation date is not considered here.

        Returns:
            Goals ordered by sort order, then creation time
        """
        today = self.clock()

        cursor = self.goals.find({"user_id": user_id}).sort(GOAL_SORT)
        goal_docs = await cursor.to_list(length=None)
        goals = [doc_to_goal(doc) for doc in goal_docs]

        # Interval goals can't be filtered in the query, do it here
        if today_only:
            goals = [g for g in goals if g.is_active and is_due(g.schedule, today)]

        completed_ids = set()
        if goals:
            completed_ids = set(await self.completions.distinct(
                "goal_id",
                {
                    "goal_id": {"$in": [g.id for g in goals]},
                    "completed_on": to_mongo_date(today),
                },
            ))

        return [
            GoalWithStatus(
                **goal.model_dump(),
                is_completed_today=goal.id in completed_ids,
                next_occurrence=next_occurrence(goal.schedule, today),
                schedule_label=describe_schedule(goal.schedule),
            )
            for goal in goals
        ]

    async def get_goal(
        self,
        user_id: str,
        goal_id: str,
    ) -> Goal:
        """
        Get a single goal by ID.

        Raises:
            NotFoundError: If goal not found for this user
        """
        return doc_to_goal(await self._find_owned(user_id, goal_id))

    async def update_goal(
        self,
        user_id: str,
        goal_id: str,
        goal_update: GoalUpdate,
    ) -> Goal:
        """
        Apply a partial update to a goal.

        Args:
            user_id: User ID
            goal_id: Goal ID
            goal_update: Fields to change; see GoalUpdate for null handling

        Returns:
            Updated goal

        Raises:
            NotFoundError: If goal not found
            ValidationError: If the resulting goal breaks a business rule
        """
        existing = await self._find_owned(user_id, goal_id)

        changes = {
            field: value
            for field, value in goal_update.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_FIELDS
        }

        validate_goal_fields(
            changes.get("name"),
            changes.get("is_measurable", existing.get("is_measurable", False)),
            changes.get("target_value", existing.get("target_value", 0)),
        )

        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if "interval_start_date" in changes:
            changes["interval_start_date"] = to_mongo_date(changes["interval_start_date"])

        changes["updated_at"] = utc_now()

        updated_doc = await self.goals.find_one_and_update(
            {"_id": existing["_id"], "user_id": user_id},
            {"$set": changes},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Goal not found")

        return doc_to_goal(updated_doc)

    async def delete_goal(
        self,
        user_id: str,
        goal_id: str,
    ) -> dict:
        """
        Hard delete a goal together with its completions.

        Returns:
            Dictionary with deleted_count and deleted_completions

        Raises:
            NotFoundError: If goal not found
        """
        existing = await self._find_owned(user_id, goal_id)

        result = await self.goals.delete_one({"_id": existing["_id"], "user_id": user_id})
        completions = await self.completions.delete_many({"goal_id": str(existing["_id"])})

        logger.info(
            "Deleted goal %s for user %s (%d completions)",
            existing["_id"],
            user_id,
            completions.deleted_count,
        )
        return {
            "deleted_count": result.deleted_count,
            "deleted_completions": completions.deleted_count,
        }

    async def reorder_goals(
        self,
        user_id: str,
        goal_ids: list[str],
    ) -> int:
        """
        Set each goal's sort order to its position in ``goal_ids``.

        IDs that are malformed or belong to another user are skipped.

        Returns:
            Number of goals updated
        """
        if not goal_ids:
            raise ValidationError("Goal IDs are required")

        positions = {}
        for index, goal_id in enumerate(goal_ids):
            try:
                positions[ObjectId(goal_id)] = index
            except (InvalidId, TypeError):
                continue

        cursor = self.goals.find(
            {"user_id": user_id, "_id": {"$in": list(positions)}},
            projection={"_id": 1},
        )
        owned = await cursor.to_list(length=None)

        now = utc_now()
        for doc in owned:
            await self.goals.update_one(
                {"_id": doc["_id"], "user_id": user_id},
                {"$set": {"sort_order": positions[doc["_id"]], "updated_at": now}},
            )

        return len(owned)
