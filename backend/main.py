from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import check_db, create_indexes, db
from errors import install_exception_handlers
from routers import accounts, default_exercises, default_workouts, exercises, health, progress, workouts
from seeder import ensure_admin_account


logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Workout Buddy API")


# --- CORS: any origin outside production, the allow-list in production
if settings.is_production:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


install_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


@app.on_event("startup")
async def startup_db_client():
    await check_db()
    await create_indexes(db)
    await ensure_admin_account(
        db,
        settings.admin_email,
        settings.admin_password,
        settings.admin_name,
        force_reset=settings.admin_force_password_reset,
    )


@app.get("/")
async def root():
    return {"message": "Workout Buddy API is running"}


app.include_router(health.router, prefix="/api")
app.include_router(accounts.router, prefix="/api")
app.include_router(exercises.router, prefix="/api")
app.include_router(default_exercises.router, prefix="/api")
app.include_router(workouts.router, prefix="/api")
app.include_router(default_workouts.router, prefix="/api")
app.include_router(progress.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
