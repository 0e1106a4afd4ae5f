import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from config import settings


logger = logging.getLogger(__name__)

# Defaults work for local MongoDB.
client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
db = client[settings.db_name]


def get_db() -> AsyncIOMotorDatabase:
    """FastAPI dependency; tests override it with an in-memory database."""
    return db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value) -> Optional[ObjectId]:
    """Parse an id coming from a client; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


# Newest first; _id breaks ties between documents created in the same millisecond.
NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


async def check_db() -> None:
    """Fail-fast check so you instantly know Mongo is reachable."""
    await client.admin.command("ping")
    logger.info("MongoDB connection successful (%s)", settings.db_name)


async def create_indexes(database: AsyncIOMotorDatabase = db) -> None:
    await database.users.create_index("email", unique=True)
    await database.exercises.create_index([("created_by", 1), ("created_at", -1)])
    await database.workouts.create_index([("created_by", 1), ("created_at", -1)])
    await database.default_workouts.create_index("exercises")
    await database.progress_logs.create_index([("user_id", 1), ("date", -1)])
    logger.info("Indexes created.")
