"""Dual exercise/workout catalogs.

Every concept lives in two collections with the same document shape: a
user-owned one (``exercises``/``workouts``, owner in ``created_by``) and an
admin-curated default one (``default_exercises``/``default_workouts``). This
module resolves ids across both, merges them into one tagged view and
enforces who may change what.

The collections share no id-space guarantee, so an id is never assumed to
belong to one of them without probing. Probing follows an explicit order:
user-owned before default for single reads and updates through the user
routes, default only behind the admin routes.

Nothing here is transactional. Checking references and then writing is not
atomic against concurrent writers, and deleting a user-owned exercise does
not look for workouts that still reference it; those workouts keep the
dangling id and expansion silently skips it.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from database import NEWEST_FIRST, to_object_id, utcnow
from deps import RequestContext
from errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from responses import serialize


logger = logging.getLogger(__name__)


class Kind(str, Enum):
    USER = "user"
    DEFAULT = "default"


USER_FIRST: Tuple[Kind, ...] = (Kind.USER, Kind.DEFAULT)
DEFAULT_ONLY: Tuple[Kind, ...] = (Kind.DEFAULT,)


@dataclass(frozen=True)
class CatalogEntry:
    """A document tagged with the collection it came from.

    ``exercises`` holds the expanded exercise references of a workout and is
    empty for exercises. ``owner`` is the creator's public ``{id, name,
    email}`` once a user workout has been expanded.
    """

    kind: Kind
    data: dict
    exercises: Tuple["CatalogEntry", ...] = ()
    owner: Optional[dict] = None

    @property
    def id(self) -> str:
        return str(self.data["_id"])

    @property
    def owner_id(self) -> Optional[str]:
        owner = self.data.get("created_by")
        return str(owner) if owner is not None else None

    def is_default(self) -> bool:
        return self.kind is Kind.DEFAULT

    @property
    def exercise_ids(self) -> list:
        return list(self.data.get("exercises") or [])

    def to_public(self) -> dict:
        body = serialize(self.data)
        if "exercises" in self.data:
            body["exercises"] = [exercise.to_public() for exercise in self.exercises]
        if self.owner is not None:
            body["createdBy"] = self.owner
        body["isDefault"] = self.is_default()
        return body


class Repository:
    """One Motor collection of catalog documents."""

    def __init__(self, collection: AsyncIOMotorCollection, kind: Kind):
        self.collection = collection
        self.kind = kind

    def _wrap(self, doc: Optional[dict]) -> Optional[CatalogEntry]:
        return CatalogEntry(self.kind, doc) if doc else None

    def _owner_filter(self, owner_id: Optional[str]) -> Optional[dict]:
        # User-owned collections are only ever read for a concrete owner.
        if self.kind is Kind.DEFAULT:
            return {}
        owner = to_object_id(owner_id) if owner_id else None
        if owner is None:
            return None
        return {"created_by": owner}

    async def get(self, oid: ObjectId) -> Optional[CatalogEntry]:
        return self._wrap(await self.collection.find_one({"_id": oid}))

    async def fetch_all(self, owner_id: Optional[str] = None) -> list:
        query = self._owner_filter(owner_id)
        if query is None:
            return []
        docs = await self.collection.find(query).sort(NEWEST_FIRST).to_list(length=None)
        return [self._wrap(doc) for doc in docs]

    async def find_many(self, oids: Sequence[ObjectId], owner_id: Optional[str] = None) -> list:
        query = self._owner_filter(owner_id)
        if query is None or not oids:
            return []
        query = {**query, "_id": {"$in": list(oids)}}
        docs = await self.collection.find(query).to_list(length=None)
        return [self._wrap(doc) for doc in docs]

    async def insert(self, fields: dict, owner_id: Optional[str]) -> CatalogEntry:
        now = utcnow()
        doc = {
            **fields,
            "created_by": to_object_id(owner_id) if owner_id else None,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        return await self.get(result.inserted_id)

    async def update(self, oid: ObjectId, changes: dict) -> Optional[CatalogEntry]:
        await self.collection.update_one({"_id": oid}, {"$set": {**changes, "updated_at": utcnow()}})
        return await self.get(oid)

    async def delete(self, oid: ObjectId) -> None:
        await self.collection.delete_one({"_id": oid})

    async def count(self, query: dict) -> int:
        return await self.collection.count_documents(query)


class LookupChain:
    """Probe an ordered list of repositories for ids, first hit wins."""

    def __init__(self, repositories: Sequence[Repository]):
        self.repositories = tuple(repositories)

    async def resolve(self, entity_id) -> Optional[CatalogEntry]:
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        for repo in self.repositories:
            entry = await repo.get(oid)
            if entry is not None:
                return entry
        return None

    async def resolve_many(self, ids: Iterable, owner_id: Optional[str] = None) -> dict:
        """Map id string -> entry for every id found somewhere along the chain."""
        pending = []
        for value in ids:
            oid = to_object_id(value)
            if oid is not None and oid not in pending:
                pending.append(oid)

        found: dict = {}
        for repo in self.repositories:
            if not pending:
                break
            for entry in await repo.find_many(pending, owner_id):
                found.setdefault(entry.id, entry)
            pending = [oid for oid in pending if str(oid) not in found]
        return found

    async def missing(self, ids: Iterable, owner_id: Optional[str] = None) -> list:
        ids = list(ids)
        found = await self.resolve_many(ids, owner_id)
        return [value for value in ids if _key(value) not in found]

    async def expand(self, ids: Iterable, owner_id: Optional[str] = None) -> Tuple[CatalogEntry, ...]:
        """Entries in the order of ``ids``; ids found nowhere are dropped."""
        ids = list(ids)
        found = await self.resolve_many(ids, owner_id)
        return tuple(found[_key(value)] for value in ids if _key(value) in found)


def _key(value) -> Optional[str]:
    oid = to_object_id(value)
    return str(oid) if oid is not None else None


class Catalog:
    """The user-owned and default collection of one concept."""

    def __init__(self, noun: str, user: Repository, default: Repository):
        self.noun = noun
        self.repositories = {Kind.USER: user, Kind.DEFAULT: default}

    @property
    def user(self) -> Repository:
        return self.repositories[Kind.USER]

    @property
    def default(self) -> Repository:
        return self.repositories[Kind.DEFAULT]

    def chain(self, order: Sequence[Kind]) -> LookupChain:
        return LookupChain([self.repositories[kind] for kind in order])

    def label(self, kind: Kind) -> str:
        return f"default {self.noun.lower()}" if kind is Kind.DEFAULT else self.noun.lower()

    def not_found(self, order: Sequence[Kind]) -> NotFoundError:
        if tuple(order) == DEFAULT_ONLY:
            return NotFoundError(f"Default {self.noun.lower()} not found")
        return NotFoundError(f"{self.noun} not found")

    async def merged(self, ctx: RequestContext) -> list:
        """Default entries first, then the requester's own; newest first within each."""
        defaults = await self.default.fetch_all()
        own = await self.user.fetch_all(ctx.user_id) if ctx.is_authenticated else []
        return defaults + own


class CatalogService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.exercises = Catalog(
            "Exercise",
            Repository(db.exercises, Kind.USER),
            Repository(db.default_exercises, Kind.DEFAULT),
        )
        self.workouts = Catalog(
            "Workout",
            Repository(db.workouts, Kind.USER),
            Repository(db.default_workouts, Kind.DEFAULT),
        )
        self.users = db.users

    # ------------------------- shared rules -------------------------

    @staticmethod
    def _require_identity(ctx: RequestContext) -> None:
        if not ctx.is_authenticated:
            raise AuthenticationError("No token provided. Authorization denied.")

    @staticmethod
    def _authorize(ctx: RequestContext, catalog: Catalog, entry: CatalogEntry, action: str) -> None:
        """Owners change their own entries; only admins change default entries."""
        CatalogService._require_identity(ctx)
        if entry.is_default():
            if not ctx.is_admin:
                raise AuthorizationError(f"Not authorized to {action} this {catalog.label(entry.kind)}")
        elif entry.owner_id != ctx.user_id:
            raise AuthorizationError(f"Not authorized to {action} this {catalog.label(entry.kind)}")

    async def _load(self, catalog: Catalog, entity_id, order: Sequence[Kind]) -> CatalogEntry:
        entry = await catalog.chain(order).resolve(entity_id)
        if entry is None:
            raise catalog.not_found(order)
        return entry

    # ------------------------- exercise references -------------------------

    def _reference_chain(self, workout_kind: Kind) -> LookupChain:
        # Default workouts may only point at default exercises.
        order = DEFAULT_ONLY if workout_kind is Kind.DEFAULT else USER_FIRST
        return self.exercises.chain(order)

    async def _validated_references(self, workout_kind: Kind, ids: list, owner_id: Optional[str]) -> list:
        missing = await self._reference_chain(workout_kind).missing(ids, owner_id)
        if missing:
            logger.info("Rejected workout write, unresolved exercise ids: %s", missing)
            if workout_kind is Kind.DEFAULT:
                raise ValidationError("One or more default exercises were not found")
            raise ValidationError("One or more exercises not found")
        return [to_object_id(value) for value in ids]

    async def _owner(self, entry: CatalogEntry) -> Optional[dict]:
        if entry.is_default() or entry.owner_id is None:
            return None
        user = await self.users.find_one({"_id": to_object_id(entry.owner_id)}, {"name": 1, "email": 1})
        return serialize(user) if user else None

    async def _expand(self, entry: CatalogEntry) -> CatalogEntry:
        exercises = await self._reference_chain(entry.kind).expand(entry.exercise_ids, entry.owner_id)
        return replace(entry, exercises=exercises, owner=await self._owner(entry))

    # ------------------------- exercises -------------------------

    async def list_exercises(self, ctx: RequestContext) -> list:
        return await self.exercises.merged(ctx)

    async def list_default_exercises(self) -> list:
        return await self.exercises.default.fetch_all()

    async def get_exercise(self, exercise_id, order: Sequence[Kind] = USER_FIRST) -> CatalogEntry:
        return await self._load(self.exercises, exercise_id, order)

    async def create_exercise(self, ctx: RequestContext, fields: dict, kind: Kind = Kind.USER) -> CatalogEntry:
        self._require_identity(ctx)
        entry = await self.exercises.repositories[kind].insert(fields, ctx.user_id)
        logger.info("Created %s %s for user %s", self.exercises.label(kind), entry.id, ctx.user_id)
        return entry

    async def update_exercise(
        self, ctx: RequestContext, exercise_id, changes: dict, order: Sequence[Kind] = USER_FIRST
    ) -> CatalogEntry:
        entry = await self._load(self.exercises, exercise_id, order)
        self._authorize(ctx, self.exercises, entry, "update")
        return await self.exercises.repositories[entry.kind].update(entry.data["_id"], changes)

    async def delete_exercise(self, ctx: RequestContext, exercise_id, order: Sequence[Kind] = USER_FIRST) -> None:
        entry = await self._load(self.exercises, exercise_id, order)
        self._authorize(ctx, self.exercises, entry, "delete")
        if entry.is_default():
            in_use = await self.workouts.default.count({"exercises": entry.data["_id"]})
            if in_use:
                raise ConflictError(
                    "Exercise is still used inside a default workout. Update those workouts first."
                )
        await self.exercises.repositories[entry.kind].delete(entry.data["_id"])
        logger.info("Deleted %s %s", self.exercises.label(entry.kind), entry.id)

    # ------------------------- workouts -------------------------

    async def list_workouts(self, ctx: RequestContext) -> list:
        return [await self._expand(entry) for entry in await self.workouts.merged(ctx)]

    async def list_default_workouts(self) -> list:
        return [await self._expand(entry) for entry in await self.workouts.default.fetch_all()]

    async def get_workout(self, workout_id, order: Sequence[Kind] = USER_FIRST) -> CatalogEntry:
        return await self._expand(await self._load(self.workouts, workout_id, order))

    async def create_workout(self, ctx: RequestContext, fields: dict, kind: Kind = Kind.USER) -> CatalogEntry:
        self._require_identity(ctx)
        fields = dict(fields)
        fields["exercises"] = await self._validated_references(kind, fields.get("exercises") or [], ctx.user_id)
        entry = await self.workouts.repositories[kind].insert(fields, ctx.user_id)
        logger.info("Created %s %s for user %s", self.workouts.label(kind), entry.id, ctx.user_id)
        return await self._expand(entry)

    async def update_workout(
        self, ctx: RequestContext, workout_id, changes: dict, order: Sequence[Kind] = USER_FIRST
    ) -> CatalogEntry:
        entry = await self._load(self.workouts, workout_id, order)
        self._authorize(ctx, self.workouts, entry, "update")
        changes = dict(changes)
        if "exercises" in changes:
            changes["exercises"] = await self._validated_references(
                entry.kind, changes["exercises"], entry.owner_id
            )
        updated = await self.workouts.repositories[entry.kind].update(entry.data["_id"], changes)
        return await self._expand(updated)

    async def delete_workout(self, ctx: RequestContext, workout_id, order: Sequence[Kind] = USER_FIRST) -> None:
        entry = await self._load(self.workouts, workout_id, order)
        self._authorize(ctx, self.workouts, entry, "delete")
        await self.workouts.repositories[entry.kind].delete(entry.data["_id"])
        logger.info("Deleted %s %s", self.workouts.label(entry.kind), entry.id)
