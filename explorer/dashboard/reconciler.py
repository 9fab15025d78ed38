"""Pagination reconciler for dashboard sub-resources.

Comments use server cursors: ``ensure_comments_page`` walks forward from the
last cached page, one request per page, until the target page is cached or
the cursor chain ends.  Cached pages are never re-fetched; each new page is
committed to the store as soon as it arrives so a later failure keeps the
earlier ones.

Attachments are fetched once per post and sliced client-side.

Both operations set their loading marker before the first await and clear it
in ``finally``.  A call made while the marker is set is ignored.  All writes
are tagged with the store generation captured at the start of the call.
"""

from __future__ import annotations

import logging
from typing import Any

from explorer.dashboard.attachments import clamp_page, flatten_attachments
from explorer.dashboard.store import PostCacheStore
from explorer.models.dashboard import AttachmentsState, PostRecord
from explorer.models.enums import FetchStatus
from explorer.models.graph import CommentPage
from explorer.services.graph import GatewayError, GraphGateway

logger = logging.getLogger(__name__)

COMMENTS_ERROR_FALLBACK = "Failed to load comments"
ATTACHMENTS_ERROR_FALLBACK = "Failed to load attachments"


class PaginationReconciler:
    """Commits comment and attachment fetches into a ``PostCacheStore``."""

    def __init__(
        self,
        store: PostCacheStore,
        gateway: GraphGateway,
        comments_initial_limit: int = 2,
        comments_page_limit: int = 5,
        attachments_page_size: int = 6,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.comments_initial_limit = comments_initial_limit
        self.comments_page_limit = comments_page_limit
        self.attachments_page_size = attachments_page_size

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _update_comments(
        self,
        post_id: str,
        generation: int | None,
        **changes: Any,
    ) -> PostRecord | None:
        record = self.store.get(post_id)
        if record is None:
            return None
        return self.store.update(
            post_id,
            generation,
            comments=record.comments.model_copy(update=changes),
        )

    async def ensure_comments_page(self, post_id: str, target_page: int) -> PostRecord | None:
        """Make *target_page* current, fetching forward only when needed.

        Afterwards either ``target_page`` pages are cached, or the cursor
        chain ended first and the current page is clamped to the last one.
        Returns the updated record, or ``None`` if the post is gone.
        """
        post = self.store.get(post_id)
        if post is None:
            logger.warning("ensure_comments_page_unknown_post", extra={"post_id": post_id})
            return None

        target_page = max(1, target_page)
        state = post.comments

        if state.loading:
            logger.info(
                "ensure_comments_page_ignored_while_loading",
                extra={"post_id": post_id, "target_page": target_page},
            )
            return post

        pages: tuple[CommentPage, ...] = state.pages

        # Already cached, or the chain already ended: no network call.
        if len(pages) >= target_page or (pages and not pages[-1].has_next):
            return self._update_comments(
                post_id,
                None,
                current_page=min(target_page, len(pages)),
                error=None,
            )

        generation = self.store.generation
        self._update_comments(post_id, generation, loading=True, error=None)

        error: str | None = None
        try:
            while len(pages) < target_page:
                if pages:
                    limit = self.comments_page_limit
                    after = pages[-1].cursors.after
                else:
                    limit = self.comments_initial_limit
                    after = None

                page = await self.gateway.get_comments_page(post_id, limit, after)
                pages = (*pages, page)
                if self._update_comments(post_id, generation, pages=pages) is None:
                    return None
                if not page.has_next:
                    break
        except GatewayError as exc:
            error = exc.message or COMMENTS_ERROR_FALLBACK
            logger.error(
                "ensure_comments_page_failed",
                extra={
                    "post_id": post_id,
                    "target_page": target_page,
                    "pages_cached": len(pages),
                    "error_message": error,
                },
            )
        finally:
            self._update_comments(
                post_id,
                generation,
                loading=False,
                current_page=max(1, min(target_page, len(pages))),
                error=error,
            )

        logger.info(
            "ensure_comments_page_completed",
            extra={
                "post_id": post_id,
                "target_page": target_page,
                "pages_cached": len(pages),
            },
        )
        if generation != self.store.generation:
            return None
        return self.store.get(post_id)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    async def load_attachments(self, post_id: str) -> PostRecord | None:
        """Fetch, flatten and store the full attachment list of a post.

        Only runs from the unfetched or failed state; a loaded or loading
        post is returned unchanged.
        """
        post = self.store.get(post_id)
        if post is None:
            logger.warning("load_attachments_unknown_post", extra={"post_id": post_id})
            return None
        if not post.attachments.can_fetch:
            return post

        generation = self.store.generation
        self.store.update(
            post_id,
            generation,
            attachments=AttachmentsState(status=FetchStatus.loading),
        )

        outcome = AttachmentsState(status=FetchStatus.failed, error=ATTACHMENTS_ERROR_FALLBACK)
        try:
            entries = await self.gateway.get_attachments(post_id)
            flat = flatten_attachments(post_id, entries)
            outcome = AttachmentsState(status=FetchStatus.loaded, items=tuple(flat))
            logger.info(
                "load_attachments_completed",
                extra={"post_id": post_id, "attachments_count": len(flat)},
            )
        except GatewayError as exc:
            outcome = AttachmentsState(
                status=FetchStatus.failed,
                error=exc.message or ATTACHMENTS_ERROR_FALLBACK,
            )
            logger.error(
                "load_attachments_failed",
                extra={"post_id": post_id, "error_message": outcome.error},
            )
        except (AttributeError, TypeError, ValueError) as exc:
            # Flattening a nested entry of the wrong shape
            logger.error(
                "load_attachments_malformed",
                extra={
                    "post_id": post_id,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                },
            )
        finally:
            self.store.update(post_id, generation, attachments=outcome)

        if generation != self.store.generation:
            return None
        return self.store.get(post_id)

    def set_attachments_page(self, post_id: str, page: int) -> PostRecord | None:
        """Move the attachment slice to *page*, clamped; no network effect."""
        post = self.store.get(post_id)
        if post is None:
            return None
        state = post.attachments
        if state.status != FetchStatus.loaded:
            return post
        clamped = clamp_page(page, len(state.items), self.attachments_page_size)
        return self.store.update(
            post_id,
            attachments=state.model_copy(update={"current_page": clamped}),
        )
