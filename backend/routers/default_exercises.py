from fastapi import APIRouter, Depends

from catalog import DEFAULT_ONLY, CatalogService, Kind
from deps import RequestContext, get_current_context, require_role
from models import ExerciseCreate, ExerciseUpdate, Role
from responses import ok
from routers.exercises import get_catalog


router = APIRouter(prefix="/default-exercises", tags=["default-exercises"])

admin_only = require_role(Role.ADMIN.value)


@router.get("")
async def list_default_exercises(
    ctx: RequestContext = Depends(get_current_context),
    catalog: CatalogService = Depends(get_catalog),
):
    entries = await catalog.list_default_exercises()
    return ok([entry.to_public() for entry in entries], count=len(entries))


@router.post("", status_code=201)
async def create_default_exercise(
    exercise: ExerciseCreate,
    ctx: RequestContext = Depends(admin_only),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.create_exercise(ctx, exercise.model_dump(), Kind.DEFAULT)
    return ok(entry.to_public(), message="Default exercise created successfully")


@router.put("/{exercise_id}")
async def update_default_exercise(
    exercise_id: str,
    exercise: ExerciseUpdate,
    ctx: RequestContext = Depends(admin_only),
    catalog: CatalogService = Depends(get_catalog),
):
    entry = await catalog.update_exercise(
        ctx, exercise_id, exercise.model_dump(exclude_unset=True), order=DEFAULT_ONLY
    )
    return ok(entry.to_public(), message="Default exercise updated successfully")


@router.delete("/{exercise_id}")
async def delete_default_exercise(
    exercise_id: str,
    ctx: RequestContext = Depends(admin_only),
    catalog: CatalogService = Depends(get_catalog),
):
    await catalog.delete_exercise(ctx, exercise_id, order=DEFAULT_ONLY)
    return ok({}, message="Default exercise deleted successfully")
