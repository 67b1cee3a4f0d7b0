# calfeed/workers/jobs.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from calfeed.core.config import Settings
from calfeed.services.feed.refresh import FeedRefresher

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh_ics"


def build_scheduler(refresher: FeedRefresher, settings: Settings) -> BackgroundScheduler:
    """
    Scheduler con un solo job de refresco.

    - primera ejecución inmediata (al arrancar el proceso)
    - luego cada REFRESH_INTERVAL_HOURS
    - max_instances=1: si un ciclo sigue corriendo, APScheduler salta el tick
    """
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        refresher.refresh,
        trigger=IntervalTrigger(hours=settings.refresh_interval_hours),
        id=REFRESH_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(timezone.utc),
    )
    return scheduler


def start_scheduler(refresher: FeedRefresher, settings: Settings) -> BackgroundScheduler | None:
    """Starts the refresh scheduler unless DISABLE_SCHEDULER=true."""
    if settings.disable_scheduler:
        logger.info("Scheduler disabled by DISABLE_SCHEDULER=true")
        return None

    scheduler = build_scheduler(refresher, settings)
    scheduler.start()
    logger.info("Scheduler started, refreshing every %s hours", settings.refresh_interval_hours)
    return scheduler


def stop_scheduler(scheduler: BackgroundScheduler | None) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
