from fastapi import APIRouter

from responses import ok

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return ok(message="Server is running")
