"""APScheduler job definitions and scheduler management.

Registers the stored-post refresh on an interval when
``REFRESH_INTERVAL_HOURS`` is positive, and provides start/shutdown/status
helpers for the FastAPI lifespan.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from explorer.core.config import settings
from explorer.services.refresh import run_stored_posts_refresh

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "stored_posts_refresh"

scheduler = BackgroundScheduler()


def _refresh_job() -> None:
    """Wrapper that APScheduler calls on each interval tick."""
    run_stored_posts_refresh(trigger="scheduler")


def start_scheduler() -> None:
    """Add the refresh job and start the scheduler, unless disabled."""
    interval_hours = settings.REFRESH_INTERVAL_HOURS
    if interval_hours <= 0:
        logger.info("scheduler_disabled")
        return

    scheduler.add_job(
        _refresh_job,
        IntervalTrigger(hours=interval_hours),
        id=REFRESH_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("scheduler_started", extra={"interval_hours": interval_hours})


def shutdown_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


def is_scheduler_running() -> bool:
    return scheduler.running
