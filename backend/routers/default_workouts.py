from fastapi import APIRouter, Depends

from catalog import DEFAULT_ONLY, CatalogService, Kind
from deps import RequestContext, get_current_context, require_role
from models import DefaultWorkoutCreate, Role, WorkoutUpdate
from responses import ok
from routers.exercises import get_catalog


router = APIRouter(prefix="/default-workouts", tags=["default-workouts"])

admin_only = require_role(Role.ADMIN.value)


@router.get("")
async def list_default_workouts(
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    entries = await catalog.list_default_workouts()
    return ok([entry.to_public() for entry in entries], count=len(entries))


@router.post("", status_code=201)
async def create_default_workout(
    workout: DefaultWorkoutCreate,
    ctx: RequestContext = Depends(admin_only),
    catalog: CatalogService = Depends(get_catalog),
):
    # exercises may only reference default exercises
    entry = await catalog.create_workout(ctx, workout.model_dump(), Kind.DEFAULT)
    return ok(entry.to_public(), message="Default workout created successfully")


@router.put("/{workout_id}")
async def update_default_workout(
    workout_id: str,
    workout: WorkoutUpdate,
    ctx: RequestContext = Depends(admin_only),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.update_workout(
        ctx, workout_id, workout.model_dump(exclude_unset=True), order=DEFAULT_ONLY
    )
    return ok(entry.to_public(), message="Default workout updated successfully")


@router.delete("/{workout_id}")
async def delete_default_workout(
    workout_id: str,
    ctx: RequestContext = Depends(admin_only),
    catalog: CatalogService = Depends(get_catalog),
):
    await catalog.delete_workout(ctx, workout_id, order=DEFAULT_ONLY)
    return ok({}, message="Default workout deleted successfully")
