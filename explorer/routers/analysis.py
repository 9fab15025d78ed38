"""Comment analysis endpoint.

POST /api/analyze-comments -- summarize a stored post's comments with the
local Ollama model.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from explorer.services.summarization import (
    PostNotFoundError,
    SummarizationError,
    summarize_post_comments,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze-comments")
async def analyze_comments(request: Request) -> Any:
    """Return an HTML summary of the post's comments.

    400 without ``postId``, 404 for an unknown post, 500 when the model call
    fails.  A post without comment text is a success with a fixed summary.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None

    post_id = body.get("postId") if isinstance(body, dict) else None
    if not post_id:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Post ID is required"},
        )

    try:
        result = await summarize_post_comments(str(post_id))
    except PostNotFoundError:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "Post not found"},
        )
    except SummarizationError as exc:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc)},
        )
    except Exception as exc:
        logger.error(
            "analyze_comments_failed",
            extra={"post_id": str(post_id), "error_message": str(exc)},
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": f"Internal server error: {exc}"},
        )

    return result.to_payload()
