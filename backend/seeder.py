import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from auth import hash_password
from database import utcnow
from models import Role


logger = logging.getLogger(__name__)


async def ensure_admin_account(
    db: AsyncIOMotorDatabase,
    email: Optional[str],
    password: Optional[str],
    name: Optional[str],
    force_reset: bool = False,
) -> str:
    """Make sure the configured admin exists and has the admin role.

    Returns "skipped", "created", "updated" or "unchanged".
    """
    if not email or not password or not name:
        logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD/ADMIN_NAME missing. Skipping admin creation.")
        return "skipped"

    email = email.strip().lower()
    user = await db.users.find_one({"email": email})

    if not user:
        now = utcnow()
        await db.users.insert_one(
            {
                "name": name,
                "email": email,
                "password_hash": hash_password(password),
                "goals": "System administrator account",
                "role": Role.ADMIN.value,
                "join_date": now,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info("Admin account created for %s", email)
        return "created"

    changes = {}
    if user.get("role") != Role.ADMIN.value:
        changes["role"] = Role.ADMIN.value
    if force_reset:
        changes["password_hash"] = hash_password(password)

    if not changes:
        return "unchanged"

    changes["updated_at"] = utcnow()
    await db.users.update_one({"_id": user["_id"]}, {"$set": changes})
    logger.info("Admin account updated/promoted for %s", email)
    return "updated"
