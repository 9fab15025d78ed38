"""Scheduled refresh of stored post documents.

Re-runs the persistence relay for every post already in the store so the
stored comment history tracks Graph between manual saves.  Runs on the
APScheduler background thread; the refresh lock keeps two runs from
overlapping.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any
from uuid import uuid4

from explorer.models.post import PostSubmission
from explorer.scheduler.lock import acquire_refresh_lock, release_refresh_lock
from explorer.services.graph import GraphGateway
from explorer.services.persistence import list_stored_posts, persist_posts

logger = logging.getLogger(__name__)


def _stored_submissions() -> list[PostSubmission]:
    """Rebuild relay submissions from the stored documents."""
    return [
        PostSubmission(
            id=post.post_id,
            message=post.message,
            created_time=post.created_time,
            attachments=post.attachments,
        )
        for post in list_stored_posts()
    ]


def run_stored_posts_refresh(trigger: str = "scheduler") -> dict[str, Any]:
    """Refresh every stored post; skipped if a refresh is already running.

    Parameters
    ----------
    trigger:
        Either "scheduler" or "manual" -- logged for observability.
    """
    run_id = uuid4()

    if not acquire_refresh_lock(run_id):
        logger.warning(
            "refresh_skipped_already_running",
            extra={"run_id": str(run_id), "trigger": trigger},
        )
        return {"status": "skipped", "reason": "refresh_already_running"}

    start_time = time.time()
    logger.info("refresh_start", extra={"run_id": str(run_id), "trigger": trigger})

    try:
        submissions = _stored_submissions()
        response = asyncio.run(persist_posts(GraphGateway.from_settings(), submissions))
        failed = sum(1 for r in response.results if not r.success)
        status = "success" if response.success else "partial"
        duration = time.time() - start_time

        logger.info(
            "refresh_complete",
            extra={
                "run_id": str(run_id),
                "posts_refreshed": len(submissions) - failed,
                "posts_failed": failed,
                "duration_seconds": round(duration, 2),
                "status": status,
            },
        )
        return {
            "run_id": str(run_id),
            "status": status,
            "posts_refreshed": len(submissions) - failed,
            "posts_failed": failed,
            "duration_seconds": round(duration, 2),
        }

    except Exception as exc:
        duration = time.time() - start_time
        logger.error(
            "refresh_error",
            extra={"run_id": str(run_id), "error": str(exc)},
        )
        return {
            "run_id": str(run_id),
            "status": "failed",
            "error": str(exc),
            "duration_seconds": round(duration, 2),
        }

    finally:
        release_refresh_lock()
