from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from database import get_db
from deps import RequestContext, get_current_context
from models import ProgressLogCreate, ProgressLogUpdate
from progress import ProgressService
from responses import ok, serialize


router = APIRouter(prefix="/progress", tags=["progress"])


def get_progress(db: AsyncIOMotorDatabase = Depends(get_db)) -> ProgressService:
    return ProgressService(db)


@router.get("")
async def list_progress_logs(
    ctx: RequestContext = Depends(get_current_context),
    service: ProgressService = Depends(get_progress),
):
    logs = await service.list_logs(ctx)
    return ok(serialize(logs), count=len(logs))


# Declared before "/{log_id}" so "stats" is not taken for an id.
@router.get("/stats")
async def get_stats(
    ctx: RequestContext = Depends(get_current_context),
    service: ProgressService = Depends(get_progress),
):
    return ok(await service.stats(ctx))


@router.get("/{log_id}")
async def get_progress_log(
    log_id: str,
    ctx: RequestContext = Depends(get_current_context),
    service: ProgressService = Depends(get_progress),
):
    return ok(serialize(await service.get_log(ctx, log_id)))


@router.post("", status_code=201)
async def create_progress_log(
    log: ProgressLogCreate,
    ctx: RequestContext = Depends(get_current_context),
    service: ProgressService = Depends(get_progress),
):
    created = await service.create_log(ctx, log.model_dump())
    return ok(serialize(created), message="Progress log created successfully")


@router.put("/{log_id}")
async def update_progress_log(
    log_id: str,
    log: ProgressLogUpdate,
    ctx: RequestContext = Depends(get_current_context),
    service: ProgressService = Depends(get_progress),
):
    updated = await service.update_log(ctx, log_id, log.model_dump(exclude_unset=True))
    return ok(serialize(updated), message="Progress log updated successfully")


@router.delete("/{log_id}")
async def delete_progress_log(
    log_id: str,
    ctx: RequestContext = Depends(get_current_context),
    service: ProgressService = Depends(get_progress),
):
    await service.delete_log(ctx, log_id)
    return ok({}, message="Progress log deleted successfully")
