"""Facebook Graph API gateway.

Thin async wrapper around the three read endpoints the app needs: the page's
post list, a post's attachment edge, and one cursor page of a post's
comments.  Every failure (non-2xx status, transport error, or a 2xx body of
the wrong shape) is raised as a ``GatewayError`` whose message comes from
the Graph error body when it can be parsed.

The access token and base URL are constructor parameters; ``from_settings``
builds a gateway from the process configuration.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from explorer.core.config import settings
from explorer.core.constants import (
    ATTACHMENT_FIELDS,
    COMMENT_FIELDS,
    COMMENTS_WALK_LIMIT,
    POST_LIST_FIELDS,
    UNKNOWN_AUTHOR,
)
from explorer.models.graph import Comment, CommentPage, Cursors, GraphPost

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE_ERROR = "Malformed Graph API response"

# Raised by the mappers (pydantic.ValidationError is a ValueError) when a 2xx
# body does not have the expected shape.
_MAPPING_ERRORS = (KeyError, TypeError, AttributeError, ValueError)


class GatewayError(Exception):
    """A Graph API call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Graph JSON -> Pydantic mappers
# ---------------------------------------------------------------------------


def _map_graph_post(item: dict[str, Any]) -> GraphPost:
    """Map one entry of ``/{page}/posts`` to a ``GraphPost``."""
    summary = (item.get("comments") or {}).get("summary") or {}
    return GraphPost(
        id=str(item["id"]),
        message=item.get("message") or "",
        created_time=item.get("created_time") or "",
        comment_count=int(summary.get("total_count") or 0),
    )


def _map_graph_comment(item: dict[str, Any]) -> Comment:
    """Map one comment; redacted or missing authors become ``Unknown``."""
    author = item.get("from") or {}
    return Comment(
        id=str(item["id"]),
        from_name=author.get("name") or UNKNOWN_AUTHOR,
        message=item.get("message") or "",
        created_time=item.get("created_time") or "",
    )


def _map_comment_page(payload: dict[str, Any]) -> CommentPage:
    cursors = (payload.get("paging") or {}).get("cursors") or {}
    return CommentPage(
        data=tuple(_map_graph_comment(c) for c in payload.get("data") or []),
        cursors=Cursors(before=cursors.get("before"), after=cursors.get("after")),
    )


def _error_message(response: httpx.Response) -> str:
    """Prefer the Graph ``error.message``; fall back to the status line."""
    text = f"{response.status_code} {response.reason_phrase}".strip()
    try:
        body = response.json()
    except ValueError:
        return text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return text


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class GraphGateway:
    """Read-only client for the Graph API endpoints used by the dashboard."""

    def __init__(
        self,
        access_token: str,
        page_id: str = "",
        base_url: str = "https://graph.facebook.com",
        api_version: str = "v23.0",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token
        self.page_id = page_id
        self.base_url = f"{base_url.rstrip('/')}/{api_version}"
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> GraphGateway:
        return cls(
            access_token=settings.GRAPH_ACCESS_TOKEN,
            page_id=settings.GRAPH_PAGE_ID,
            base_url=settings.GRAPH_API_BASE_URL,
            api_version=settings.GRAPH_API_VERSION,
            timeout=settings.GRAPH_TIMEOUT_SECONDS,
        )

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {**params, "access_token": self.access_token}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=query)
        except httpx.HTTPError as exc:
            logger.error(
                "graph_request_failed",
                extra={"path": path, "error_type": type(exc).__name__},
            )
            raise GatewayError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.warning(
                "graph_request_rejected",
                extra={
                    "path": path,
                    "status_code": response.status_code,
                    "error_message": message,
                },
            )
            raise GatewayError(message, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayError("Invalid JSON in Graph API response") from exc
        if not isinstance(payload, dict):
            raise GatewayError("Invalid JSON in Graph API response")
        return payload

    @staticmethod
    def _malformed(path: str, exc: Exception) -> GatewayError:
        logger.warning(
            "graph_response_malformed",
            extra={"path": path, "error_type": type(exc).__name__, "error_message": str(exc)},
        )
        return GatewayError(MALFORMED_RESPONSE_ERROR)

    async def list_posts(self) -> list[GraphPost]:
        """Return the page's posts with their comment summary counts."""
        path = f"/{self.page_id}/posts"
        payload = await self._get(path, {"fields": POST_LIST_FIELDS})
        try:
            return [_map_graph_post(item) for item in payload.get("data") or []]
        except _MAPPING_ERRORS as exc:
            raise self._malformed(path, exc) from exc

    async def get_attachments(self, post_id: str) -> list[dict[str, Any]]:
        """Return the raw attachment entries of a post (nested, unflattened)."""
        path = f"/{post_id}"
        payload = await self._get(path, {"fields": ATTACHMENT_FIELDS})
        try:
            entries = list((payload.get("attachments") or {}).get("data") or [])
            if not all(isinstance(entry, dict) for entry in entries):
                raise TypeError("attachment entry is not an object")
        except _MAPPING_ERRORS as exc:
            raise self._malformed(path, exc) from exc
        return entries

    async def get_comments_page(
        self,
        post_id: str,
        limit: int,
        after: str | None = None,
    ) -> CommentPage:
        """Fetch one page of comments, optionally after a cursor."""
        params: dict[str, Any] = {"fields": COMMENT_FIELDS, "limit": limit}
        if after:
            params["after"] = after
        path = f"/{post_id}/comments"
        payload = await self._get(path, params)
        try:
            return _map_comment_page(payload)
        except _MAPPING_ERRORS as exc:
            raise self._malformed(path, exc) from exc

    async def iter_comment_pages(
        self,
        post_id: str,
        limit: int = COMMENTS_WALK_LIMIT,
    ) -> AsyncIterator[CommentPage]:
        """Yield every comment page of a post until the cursor chain ends.

        An empty page also ends the walk: Graph sometimes returns an
        ``after`` cursor on a terminal page.
        """
        after: str | None = None
        while True:
            page = await self.get_comments_page(post_id, limit, after)
            yield page
            if not page.data or not page.has_next:
                return
            after = page.cursors.after

    async def fetch_all_comments(self, post_id: str) -> list[Comment]:
        """Return the complete comment history of a post."""
        comments: list[Comment] = []
        async for page in self.iter_comment_pages(post_id):
            comments.extend(page.data)
        logger.info(
            "fetch_all_comments_completed",
            extra={"post_id": post_id, "comments_count": len(comments)},
        )
        return comments


def get_graph_gateway() -> GraphGateway:
    """FastAPI dependency: a gateway configured from ``settings``."""
    return GraphGateway.from_settings()
