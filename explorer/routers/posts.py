"""Post persistence endpoints.

POST /api/posts         -- refresh comments from Graph and upsert each post.
GET  /api/posts         -- list stored documents, newest first.
POST /api/posts/refresh -- re-run the relay for every stored post
                           (202, 409 if a refresh is already running).
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from starlette.responses import JSONResponse

from explorer.models.post import PostSubmission
from explorer.scheduler.lock import get_current_run_id, is_refresh_running
from explorer.services.graph import GraphGateway, get_graph_gateway
from explorer.services.persistence import list_stored_posts, persist_posts
from explorer.services.refresh import run_stored_posts_refresh

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/posts")
async def save_posts(
    request: Request,
    gateway: GraphGateway = Depends(get_graph_gateway),
) -> Any:
    """Persist a batch of posts with their full, freshly fetched comments."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    raw_posts = body.get("posts") if isinstance(body, dict) else None
    if not isinstance(raw_posts, list):
        return _error(400, "Posts array is required")

    try:
        submissions = [PostSubmission.model_validate(p) for p in raw_posts]
    except ValidationError as exc:
        return _error(400, f"Invalid post payload: {exc.error_count()} validation error(s)")

    try:
        response = await persist_posts(gateway, submissions)
    except Exception as exc:
        logger.error("save_posts_failed", extra={"error_message": str(exc)})
        return _error(500, f"Internal server error: {exc}")

    return response.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/posts")
async def get_posts() -> Any:
    """Return every stored post document, newest first."""
    try:
        posts = list_stored_posts()
    except Exception as exc:
        logger.error("get_posts_failed", extra={"error_message": str(exc)})
        return _error(500, f"Failed to fetch posts: {exc}")

    return {
        "success": True,
        "posts": [p.model_dump(mode="json", by_alias=True) for p in posts],
    }


@router.post("/posts/refresh", status_code=202)
async def trigger_refresh() -> dict[str, Any]:
    """Start a refresh of all stored posts on a background thread."""
    if is_refresh_running():
        current_run = get_current_run_id()
        raise HTTPException(
            status_code=409,
            detail="Refresh already in progress",
            headers={"X-Current-Run-Id": str(current_run) if current_run else "unknown"},
        )

    thread = threading.Thread(
        target=run_stored_posts_refresh,
        kwargs={"trigger": "manual"},
        daemon=True,
    )
    thread.start()

    return {"success": True, "status": "started", "message": "Stored post refresh initiated"}
