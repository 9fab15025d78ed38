"""Attachment flattening and client-side pagination.

The Graph attachment edge is two levels deep: an entry may carry a
``subattachments.data`` list (albums, carousels).  ``flatten_attachments``
collapses it into one ordered list; sub-attachments expand in place and
inherit the parent's type, title and description when they lack their own.
"""

from __future__ import annotations

import math
from typing import Any

from explorer.models.graph import Attachment


def _media_url(node: dict[str, Any]) -> str | None:
    """Resolve a previewable URL: media.image.src, media.src, then url."""
    media = node.get("media") or {}
    if media.get("image"):
        src = media["image"].get("src")
    else:
        src = media.get("src")
    return src or node.get("url") or None


def _first(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def flatten_attachments(post_id: str, entries: list[dict[str, Any]]) -> list[Attachment]:
    """Flatten raw attachment entries into display records, preserving order.

    Ids prefer ``target.id``; top-level entries then fall back to their own
    ``id``; anything else gets ``<parentId>-<index>`` where *index* is the
    position in the flat list, which keeps ids unique within the post.
    """
    flat: list[Attachment] = []

    for entry in entries:
        subs = (entry.get("subattachments") or {}).get("data") or []
        if subs:
            parent_id = entry.get("id") or post_id
            for sub in subs:
                target = sub.get("target") or {}
                flat.append(
                    Attachment(
                        id=str(target.get("id") or f"{parent_id}-{len(flat)}"),
                        url=_media_url(sub),
                        type=_first(
                            sub.get("type"),
                            sub.get("media_type"),
                            entry.get("type"),
                            entry.get("media_type"),
                        ),
                        title=_first(sub.get("title"), entry.get("title")),
                        description=_first(sub.get("description"), entry.get("description")),
                    )
                )
        else:
            target = entry.get("target") or {}
            flat.append(
                Attachment(
                    id=str(target.get("id") or entry.get("id") or f"{post_id}-{len(flat)}"),
                    url=_media_url(entry),
                    type=_first(entry.get("type"), entry.get("media_type")),
                    title=entry.get("title") or None,
                    description=entry.get("description") or None,
                )
            )

    return flat


def total_pages(item_count: int, page_size: int) -> int:
    """Number of client-side pages; never less than 1."""
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(item_count / page_size))


def clamp_page(page: int, item_count: int, page_size: int) -> int:
    """Clamp *page* into ``[1, total_pages]``."""
    return min(max(page, 1), total_pages(item_count, page_size))


def page_slice(
    items: tuple[Attachment, ...] | list[Attachment],
    page: int,
    page_size: int,
) -> list[Attachment]:
    """Return the attachments shown on *page* (clamped)."""
    page = clamp_page(page, len(items), page_size)
    start = (page - 1) * page_size
    return list(items[start:start + page_size])
