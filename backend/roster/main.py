from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from roster.api.v1.router import api_router
from roster.core.config import Settings, settings
from roster.services.photo_service import PhotoService, run_photo_cleanup
from roster.services.roster_service import RosterService
from roster.storage.factory import open_workbook

logger = logging.getLogger(__name__)


async def photo_cleanup_loop(application: FastAPI, config: Settings) -> None:
    interval = config.PHOTO_CLEANUP_INTERVAL_HOURS * 3600
    while True:
        await asyncio.sleep(interval)
        roster = application.state.roster_service
        photos = application.state.photo_service
        if roster is None:
            continue
        try:
            await asyncio.to_thread(run_photo_cleanup, roster, photos, config.PHOTO_MAX_AGE_DAYS)
        except Exception:
            logger.exception("Stale photo cleanup failed; retrying next interval")


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    logging.getLogger("roster").setLevel(settings.LOG_LEVEL)

    application.state.roster_service = None
    try:
        workbook = open_workbook(settings)
        application.state.roster_service = RosterService.from_settings(workbook, settings)
        logger.info("Roster store ready (backend=%s)", settings.STORE_BACKEND)
    except Exception:
        logger.exception("Failed to open roster store; continuing without it")
    application.state.photo_service = PhotoService.from_settings(settings)

    cleanup_task: asyncio.Task | None = None
    if settings.PHOTO_CLEANUP_ENABLED and application.state.roster_service is not None:
        cleanup_task = asyncio.create_task(photo_cleanup_loop(application, settings))

    yield

    if cleanup_task is not None:
        cleanup_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup_task
    if application.state.roster_service is not None:
        application.state.roster_service.close()
        application.state.roster_service = None


app = FastAPI(
    title="Bar Roster API",
    description="Spreadsheet-backed employee roster",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
app.mount(
    settings.PHOTO_URL_PREFIX,
    StaticFiles(directory=settings.PHOTO_DIR, check_dir=False),
    name="photos",
)


@app.get("/")
async def root():
    return {"message": "Bar Roster API"}
