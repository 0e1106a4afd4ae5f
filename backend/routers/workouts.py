from fastapi import APIRouter, Depends

from catalog import CatalogService, Kind
from deps import RequestContext, get_current_context, get_request_context
from models import WorkoutCreate, WorkoutUpdate
from responses import ok
from routers.exercises import get_catalog


router = APIRouter(prefix="/workouts", tags=["workouts"])


@router.get("")
async def list_workouts(
    ctx: RequestContext = Depends(get_request_context),
    catalog: CatalogService = Depends(get_catalog),
):
    """Default workouts first, then the caller's own, exercises expanded."""
    entries = await catalog.list_workouts(ctx)
    return ok([entry.to_public() for entry in entries], count=len(entries))


@router.get("/{workout_id}")
async def get_workout(
    workout_id: str,
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.get_workout(workout_id)
    return ok(entry.to_public())


@router.post("", status_code=201)
async def create_workout(
    workout: WorkoutCreate,
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.create_workout(ctx, workout.model_dump(), Kind.USER)
    return ok(entry.to_public(), message="Workout created successfully")


@router.put("/{workout_id}")
async def update_workout(
    workout_id: str,
    workout: WorkoutUpdate,
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.update_workout(ctx, workout_id, workout.model_dump(exclude_unset=True))
    return ok(entry.to_public(), message="Workout updated successfully")


@router.delete("/{workout_id}")
async def delete_workout(
    workout_id: str,
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    await catalog.delete_workout(ctx, workout_id)
    return ok({}, message="Workout deleted successfully")
