from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from catalog import CatalogService, Kind
from database import get_db
from deps import RequestContext, get_current_context, get_request_context
from models import ExerciseCreate, ExerciseUpdate
from responses import ok


router = APIRouter(prefix="/exercises", tags=["exercises"])


def get_catalog(db: AsyncIOMotorDatabase = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


@router.get("")
async def list_exercises(
    ctx: RequestContext = Depends(get_request_context),
    catalog: CatalogService = Depends(get_catalog),
):
    """Default exercises first, then the caller's own (none when anonymous)."""
    entries = await catalog.list_exercises(ctx)
    return ok([entry.to_public() for entry in entries], count=len(entries))


@router.get("/{exercise_id}")
async def get_exercise(
    exercise_id: str,
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.get_exercise(exercise_id)
    return ok(entry.to_public())


@router.post("", status_code=201)
async def create_exercise(
    exercise: ExerciseCreate,
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.create_exercise(ctx, exercise.model_dump(), Kind.USER)
    return ok(entry.to_public(), message="Exercise created successfully")


@router.put("/{exercise_id}")
async def update_exercise(
    exercise_id: str,
    exercise: ExerciseUpdate,
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.update_exercise(ctx, exercise_id, exercise.model_dump(exclude_unset=True))
    return ok(entry.to_public(), message="Exercise updated successfully")


@router.delete("/{exercise_id}")
async def delete_exercise(
    exercise_id: str,
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    await catalog.delete_exercise(ctx, exercise_id)
    return ok({}, message="Exercise deleted successfully")
