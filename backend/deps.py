from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from auth import decode_access_token
from database import get_db, to_object_id
from errors import AuthenticationError, AuthorizationError
from models import Role


# auto_error=False: a missing or non-Bearer header yields None instead of a 403.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """Who is making the request, resolved once per request.

    ``identity`` is the user document without its password hash, or None for
    anonymous requests.
    """

    identity: Optional[dict] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.identity["id"] if self.identity else None

    @property
    def role(self) -> Optional[str]:
        return self.identity.get("role", Role.USER.value) if self.identity else None

    def has_role(self, *roles: str) -> bool:
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN.value)


async def load_identity(db: AsyncIOMotorDatabase, token: Optional[str]) -> dict:
    """Bearer token -> user document, or AuthenticationError."""
    if not token:
        raise AuthenticationError("No token provided. Authorization denied.")

    user_id = to_object_id(decode_access_token(token))
    if user_id is None:
        raise AuthenticationError("Invalid token.")

    user = await db.users.find_one({"_id": user_id}, {"password_hash": 0})
    if not user:
        raise AuthenticationError("Token is not valid. User not found.")

    user["id"] = str(user.pop("_id"))
    return user


async def get_current_context(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> RequestContext:
    """Required auth: anything but a valid token for an existing user is a 401."""
    token = creds.credentials if creds else None
    return RequestContext(identity=await load_identity(db, token))


async def get_request_context(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> RequestContext:
    """Optional auth: every failure falls through to an anonymous context."""
    if creds is None or not creds.credentials:
        return RequestContext()
    try:
        return RequestContext(identity=await load_identity(db, creds.credentials))
    except AuthenticationError:
        return RequestContext()


def require_role(*roles: str):
    """Dependency factory composed after required auth."""

    async def checker(ctx: RequestContext = Depends(get_current_context)) -> RequestContext:
        if not ctx.has_role(*roles):
            raise AuthorizationError("Insufficient permissions for this action.")
        return ctx

    return checker
