import logging
import math
from typing import Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from catalog import USER_FIRST, CatalogService
from database import to_object_id, utcnow
from deps import RequestContext
from errors import AuthorizationError, NotFoundError, ValidationError


logger = logging.getLogger(__name__)

# Fields of the referenced workout shown in place of ``workout_id``.
WORKOUT_SUMMARY = ("name", "category", "difficulty", "exercises", "description")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_stats(logs: Iterable[dict]) -> dict:
    """Summary of the completed sessions in ``logs``; nothing is persisted."""
    completed = [log for log in logs if log.get("completed") is True]
    total_workouts = len(completed)
    total_minutes = sum(log.get("duration") or 0 for log in completed)
    total_calories = sum(log.get("calories_burned") or 0 for log in completed)
    average = round_half_up(total_calories / total_workouts) if total_workouts else 0
    return {
        "totalWorkouts": total_workouts,
        "totalMinutes": total_minutes,
        "totalCalories": total_calories,
        "averageCaloriesPerWorkout": average,
    }


def _workout_ref(value: Optional[str]):
    if value is None:
        return None
    oid = to_object_id(value)
    if oid is None:
        raise ValidationError("Invalid workoutId")
    return oid


class ProgressService:
    """Per-user session log. A log is only ever visible to its owner."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.progress_logs
        self.workouts = CatalogService(db).workouts

    async def _with_workouts(self, ctx: RequestContext, logs: list) -> list:
        """Swap each ``workout_id`` for a summary of the workout it names.

        The caller's own workouts are probed before the defaults. A reference
        that resolves nowhere is left as the bare id.
        """
        refs = [log["workout_id"] for log in logs if log.get("workout_id") is not None]
        if not refs:
            return logs
        found = await self.workouts.chain(USER_FIRST).resolve_many(refs, ctx.user_id)
        populated = []
        for log in logs:
            entry = found.get(str(log.get("workout_id")))
            if entry is not None:
                summary = {"_id": entry.data["_id"]}
                summary.update((field, entry.data.get(field)) for field in WORKOUT_SUMMARY)
                log = {**log, "workout_id": summary}
            populated.append(log)
        return populated

    async def _owned(self, ctx: RequestContext, log_id: str, action: str) -> dict:
        oid = to_object_id(log_id)
        log = await self.collection.find_one({"_id": oid}) if oid else None
        if not log:
            raise NotFoundError("Progress log not found")
        # "exists but not yours" is a 403, distinct from a 404
        if str(log["user_id"]) != ctx.user_id:
            raise AuthorizationError(f"Not authorized to {action} this progress log")
        return log

    async def list_logs(self, ctx: RequestContext) -> list:
        cursor = self.collection.find({"user_id": to_object_id(ctx.user_id)}).sort([("date", -1), ("_id", -1)])
        return await self._with_workouts(ctx, await cursor.to_list(length=None))

    async def get_log(self, ctx: RequestContext, log_id: str) -> dict:
        log = await self._owned(ctx, log_id, "view")
        return (await self._with_workouts(ctx, [log]))[0]

    async def create_log(self, ctx: RequestContext, fields: dict) -> dict:
        now = utcnow()
        doc = {
            **fields,
            "user_id": to_object_id(ctx.user_id),
            "workout_id": _workout_ref(fields.get("workout_id")),
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        logger.info("Logged session %s for user %s", result.inserted_id, ctx.user_id)
        created = await self.collection.find_one({"_id": result.inserted_id})
        return (await self._with_workouts(ctx, [created]))[0]

    async def update_log(self, ctx: RequestContext, log_id: str, changes: dict) -> dict:
        log = await self._owned(ctx, log_id, "update")
        changes = dict(changes)
        if "workout_id" in changes:
            changes["workout_id"] = _workout_ref(changes["workout_id"])
        changes["updated_at"] = utcnow()
        await self.collection.update_one({"_id": log["_id"]}, {"$set": changes})
        updated = await self.collection.find_one({"_id": log["_id"]})
        return (await self._with_workouts(ctx, [updated]))[0]

    async def delete_log(self, ctx: RequestContext, log_id: str) -> None:
        log = await self._owned(ctx, log_id, "delete")
        await self.collection.delete_one({"_id": log["_id"]})

    async def stats(self, ctx: RequestContext) -> dict:
        logs = await self.collection.find(
            {"user_id": to_object_id(ctx.user_id), "completed": True}
        ).to_list(length=None)
        return compute_stats(logs)
