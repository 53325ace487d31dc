"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cineprog.api.routes import conflicts, health, imports, mappings
from cineprog.config import settings
from cineprog.tasks.enrich_job import run_enrich_drafts

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_scheduler() -> AsyncIOScheduler:
    """Scheduler carrying the weekly draft enrichment, when enabled."""
    scheduler = AsyncIOScheduler()
    if not settings.enrich_enabled:
        logger.info("Draft enrichment disabled, scheduler has no jobs")
        return scheduler

    # Monday night, ahead of the Wednesday programme change
    scheduler.add_job(
        run_enrich_drafts,
        trigger=CronTrigger(day_of_week="mon", hour=4, minute=0),
        id="weekly_enrich",
        name="Weekly TMDb enrichment of imported draft movies",
        replace_existing=True,
    )
    logger.info("Draft enrichment registered for Mondays at 04:00")
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = build_scheduler()
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


app = FastAPI(
    title="Cineprog API",
    description="Weekly cinema programme import and review",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
for module in (imports, conflicts, mappings):
    app.include_router(module.router)
