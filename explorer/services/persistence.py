"""Post persistence relay.

For every submitted post the relay walks the post's complete comment history
straight from the Graph API (ignoring whatever pages the dashboard had
cached) and upserts one denormalized document keyed by ``post_id``.  The
upsert is a full refresh: stored comments are replaced, not merged.

``comment_count`` on the document is the number of comments actually walked,
which can differ from the Graph summary count the dashboard shows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from explorer.core.config import settings
from explorer.db.supabase import get_supabase
from explorer.models.enums import UpsertOperation
from explorer.models.post import (
    PersistPostsResponse,
    PostDocumentUpsert,
    PostPersistResult,
    PostSubmission,
    StoredPost,
)
from explorer.services.graph import GatewayError, GraphGateway

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _post_exists(post_id: str) -> bool:
    client = get_supabase()
    result = (
        client.table(settings.SUPABASE_POSTS_TABLE)
        .select("post_id")
        .eq("post_id", post_id)
        .limit(1)
        .execute()
    )
    return bool(result.data)


def get_stored_post(post_id: str) -> StoredPost | None:
    """Return the stored document for *post_id*, or ``None``."""
    client = get_supabase()
    result = (
        client.table(settings.SUPABASE_POSTS_TABLE)
        .select("*")
        .eq("post_id", post_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return StoredPost(**result.data[0])


def list_stored_posts() -> list[StoredPost]:
    """Return every stored document, newest ``created_time`` first."""
    client = get_supabase()
    result = (
        client.table(settings.SUPABASE_POSTS_TABLE)
        .select("*")
        .order("created_time", desc=True)
        .execute()
    )
    return [StoredPost(**row) for row in result.data or []]


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


async def persist_post(gateway: GraphGateway, submission: PostSubmission) -> PostPersistResult:
    """Refresh one post's comments from Graph and upsert its document.

    A Graph failure mid-walk or a store failure is reported in the result;
    nothing is written for that post.
    """
    post_id = submission.id
    logger.info("persist_post_started", extra={"post_id": post_id})

    try:
        comments = await gateway.fetch_all_comments(post_id)
    except GatewayError as exc:
        logger.error(
            "persist_post_comments_failed",
            extra={"post_id": post_id, "error_message": exc.message},
        )
        return PostPersistResult(post_id=post_id, success=False, error=exc.message)

    document = PostDocumentUpsert(
        post_id=post_id,
        message=submission.message or "",
        created_time=submission.created_time,
        comment_count=len(comments),
        comments=comments,
        attachments=submission.attachments,
        last_updated=datetime.now(timezone.utc),
    )

    try:
        existed = _post_exists(post_id)
        client = get_supabase()
        (
            client.table(settings.SUPABASE_POSTS_TABLE)
            .upsert(document.model_dump(mode="json"), on_conflict="post_id")
            .execute()
        )
    except Exception as exc:
        logger.error(
            "persist_post_upsert_failed",
            extra={"post_id": post_id, "error_message": str(exc)},
        )
        return PostPersistResult(post_id=post_id, success=False, error=str(exc))

    operation = UpsertOperation.updated if existed else UpsertOperation.created
    logger.info(
        "persist_post_completed",
        extra={
            "post_id": post_id,
            "comments_count": len(comments),
            "operation": operation.value,
        },
    )
    return PostPersistResult(post_id=post_id, success=True, operation=operation)


async def persist_posts(
    gateway: GraphGateway,
    submissions: Sequence[PostSubmission],
) -> PersistPostsResponse:
    """Persist each submission in order; one failure never stops the batch."""
    results: list[PostPersistResult] = []
    for submission in submissions:
        results.append(await persist_post(gateway, submission))

    success_count = sum(1 for r in results if r.success)
    error_count = len(results) - success_count

    logger.info(
        "persist_posts_completed",
        extra={"posts_count": len(results), "failed_count": error_count},
    )

    return PersistPostsResponse(
        success=error_count == 0,
        message=(
            f"Processed {len(results)} posts. "
            f"{success_count} successful, {error_count} failed."
        ),
        results=results,
    )
