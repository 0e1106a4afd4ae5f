import logging

from bson import ObjectId
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from auth import create_access_token, hash_password, verify_password
from database import get_db, utcnow
from deps import RequestContext, get_current_context
from errors import AuthenticationError, ValidationError
from models import ProfileUpdate, Role, UserLogin, UserRegister
from responses import ok, serialize


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def public_user(user: dict) -> dict:
    user = dict(user)
    if "id" in user:
        user["_id"] = ObjectId(user.pop("id"))
    return serialize(user)


@router.post("/register", status_code=201)
async def register(user: UserRegister, db: AsyncIOMotorDatabase = Depends(get_db)):
    if await db.users.find_one({"email": user.email}):
        raise ValidationError("User already exists with this email")

    now = utcnow()
    user_dict = user.model_dump()
    user_dict["password_hash"] = hash_password(user_dict.pop("password"))
    user_dict.update(role=Role.USER.value, join_date=now, created_at=now, updated_at=now)

    try:
        result = await db.users.insert_one(user_dict)
    except DuplicateKeyError:
        raise ValidationError("User already exists with this email")

    user_dict["_id"] = result.inserted_id
    logger.info("Registered user %s", result.inserted_id)
    return ok(
        {"token": create_access_token(str(result.inserted_id)), "user": public_user(user_dict)},
        message="User registered successfully",
    )


@router.post("/login")
async def login(user: UserLogin, db: AsyncIOMotorDatabase = Depends(get_db)):
    db_user = await db.users.find_one({"email": user.email})
    if not db_user or not verify_password(user.password, db_user.get("password_hash", "")):
        raise AuthenticationError("Invalid email or password")

    token = create_access_token(str(db_user["_id"]))
    return ok({"token": token, "user": public_user(db_user)}, message="Login successful")


@router.get("/me")
async def me(ctx: RequestContext = Depends(get_current_context)):
    return ok({"user": public_user(ctx.identity)})


@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    ctx: RequestContext = Depends(get_current_context),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    changes = profile.model_dump(exclude_unset=True)
    user_id = ObjectId(ctx.user_id)

    if "email" in changes:
        taken = await db.users.find_one({"email": changes["email"], "_id": {"$ne": user_id}})
        if taken:
            raise ValidationError("Email is already in use")

    password_changed = "password" in changes
    if password_changed:
        changes["password_hash"] = hash_password(changes.pop("password"))

    changes["updated_at"] = utcnow()
    try:
        await db.users.update_one({"_id": user_id}, {"$set": changes})
    except DuplicateKeyError:
        raise ValidationError("Email is already in use")

    updated = await db.users.find_one({"_id": user_id})
    return ok(
        {"user": public_user(updated), "passwordChanged": password_changed},
        message="Profile updated successfully",
    )
