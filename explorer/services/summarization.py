"""Comment summarization relay backed by a local Ollama model.

Loads the stored post, joins its non-empty comment texts into one prompt and
makes a single non-streaming ``/api/generate`` call.  No retries; a failed
call surfaces as ``SummarizationError`` and no partial summary is returned.
"""

from __future__ import annotations

import logging
import re

import httpx

from explorer.core.config import settings
from explorer.core.constants import (
    NO_COMMENTS_SUMMARY,
    SUMMARY_FAILED_ERROR,
    SUMMARY_FALLBACK,
    SUMMARY_PROMPT_TEMPLATE,
)
from explorer.models.post import SummaryResult
from explorer.services.persistence import get_stored_post

logger = logging.getLogger(__name__)

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_RE = re.compile(r"\*(.*?)\*")


class PostNotFoundError(LookupError):
    """No stored document exists for the requested post."""


class SummarizationError(RuntimeError):
    """The inference endpoint was unreachable or rejected the request."""


def convert_markdown_to_html(text: str) -> str:
    """Convert ``**bold**``, ``*italic*`` and newlines; drop stray asterisks."""
    if not text:
        return text
    text = _BOLD_RE.sub(r"<strong>\1</strong>", text)
    text = _ITALIC_RE.sub(r"<em>\1</em>", text)
    text = text.replace("\n", "<br>")
    return text.replace("*", "")


def build_summary_prompt(comment_texts: list[str]) -> str:
    return SUMMARY_PROMPT_TEMPLATE.format(
        count=len(comment_texts),
        comments="\n\n".join(comment_texts),
    )


async def generate_summary(prompt: str) -> str:
    """Run *prompt* through the configured Ollama model, once."""
    try:
        async with httpx.AsyncClient(timeout=settings.OLLAMA_TIMEOUT_SECONDS) as client:
            response = await client.post(
                settings.OLLAMA_URL,
                headers={"Content-Type": "application/json"},
                json={
                    "model": settings.OLLAMA_MODEL,
                    "prompt": prompt,
                    "stream": False,
                },
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error(
            "ollama_generate_failed",
            extra={
                "model": settings.OLLAMA_MODEL,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        raise SummarizationError(SUMMARY_FAILED_ERROR) from exc

    raw = data.get("response") if isinstance(data, dict) else None
    return raw or SUMMARY_FALLBACK


async def summarize_post_comments(post_id: str) -> SummaryResult:
    """Summarize the stored comments of *post_id*.

    Returns the fixed "nothing to analyze" result without calling the model
    when no comment has any text.
    """
    post = get_stored_post(post_id)
    if post is None:
        raise PostNotFoundError(post_id)

    comment_texts = [c.message for c in post.comments if c.message and c.message.strip()]
    if not comment_texts:
        logger.info("summarize_post_comments_empty", extra={"post_id": post_id})
        return SummaryResult(summary=NO_COMMENTS_SUMMARY)

    raw_summary = await generate_summary(build_summary_prompt(comment_texts))

    logger.info(
        "summarize_post_comments_completed",
        extra={"post_id": post_id, "comment_count": len(comment_texts)},
    )
    return SummaryResult(
        summary=convert_markdown_to_html(raw_summary),
        comment_count=len(comment_texts),
    )
