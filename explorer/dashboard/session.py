"""Dashboard session: user actions dispatched into the reconciler.

A ``DashboardSession`` owns one post cache store and exposes the actions a
dashboard front end performs: fetch the post list, clear it, toggle the
comment and attachment panels, page through either.  ``view()`` renders the
current state as a ``DashboardView``.

``get_dashboard_session()`` returns the process-wide session served by the
dashboard router.
"""

from __future__ import annotations

import asyncio
import logging

from explorer.core.config import settings
from explorer.dashboard.reconciler import PaginationReconciler
from explorer.dashboard.store import PostCacheStore
from explorer.dashboard.views import build_dashboard_view
from explorer.models.dashboard import DashboardView, PostRecord
from explorer.models.enums import FetchStatus
from explorer.models.post import PostSubmission
from explorer.services.graph import GatewayError, GraphGateway

logger = logging.getLogger(__name__)

POSTS_ERROR_FALLBACK = "Fetch error"


class DashboardSession:
    """State and actions of one dashboard."""

    def __init__(
        self,
        gateway: GraphGateway,
        comments_initial_limit: int = 2,
        comments_page_limit: int = 5,
        attachments_page_size: int = 6,
    ) -> None:
        self.gateway = gateway
        self.store = PostCacheStore()
        self.reconciler = PaginationReconciler(
            self.store,
            gateway,
            comments_initial_limit=comments_initial_limit,
            comments_page_limit=comments_page_limit,
            attachments_page_size=attachments_page_size,
        )
        self.loading_posts = False
        self.posts_error: str | None = None

    @classmethod
    def from_settings(cls) -> DashboardSession:
        return cls(
            GraphGateway.from_settings(),
            comments_initial_limit=settings.COMMENTS_INITIAL_LIMIT,
            comments_page_limit=settings.COMMENTS_PAGE_LIMIT,
            attachments_page_size=settings.ATTACHMENTS_PAGE_SIZE,
        )

    # ------------------------------------------------------------------
    # Post list
    # ------------------------------------------------------------------

    async def fetch_posts(self) -> None:
        """Fetch the post list and replace the whole collection.

        On failure the previous collection is left as it was.
        """
        if self.loading_posts:
            return
        self.loading_posts = True
        self.posts_error = None
        try:
            posts = await self.gateway.list_posts()
            self.store.replace_all(PostRecord.from_graph(p) for p in posts)
        except GatewayError as exc:
            self.posts_error = exc.message or POSTS_ERROR_FALLBACK
            logger.error("fetch_posts_failed", extra={"error_message": self.posts_error})
        finally:
            self.loading_posts = False

    def clear(self) -> None:
        self.store.clear()
        self.posts_error = None

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def toggle_comments(self, post_id: str) -> PostRecord | None:
        """Show or hide comments; showing them the first time loads page 1."""
        post = self.store.get(post_id)
        if post is None:
            return None
        showing = not post.show_comments
        self.store.update(post_id, show_comments=showing)
        if showing and not post.comments.pages:
            return await self.reconciler.ensure_comments_page(post_id, 1)
        return self.store.get(post_id)

    async def request_comments_page(self, post_id: str, page: int) -> PostRecord | None:
        return await self.reconciler.ensure_comments_page(post_id, page)

    async def load_more_comments(self, post_id: str) -> PostRecord | None:
        """Advance one page if the cursor chain has not ended."""
        post = self.store.get(post_id)
        if post is None:
            return None
        if not post.comments.can_load_more:
            return post
        return await self.reconciler.ensure_comments_page(
            post_id, post.comments.current_page + 1
        )

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    async def toggle_attachments(self, post_id: str) -> PostRecord | None:
        """Show or hide attachments; showing them the first time fetches them."""
        post = self.store.get(post_id)
        if post is None:
            return None
        showing = not post.show_attachments
        self.store.update(post_id, show_attachments=showing)
        if showing and post.attachments.status == FetchStatus.not_fetched:
            return await self.reconciler.load_attachments(post_id)
        return self.store.get(post_id)

    async def load_attachments(self, post_id: str) -> PostRecord | None:
        """Explicit (re)try of the attachment fetch."""
        return await self.reconciler.load_attachments(post_id)

    async def autoload_attachments(self) -> None:
        """Fetch attachments for every post that has never been fetched.

        ``load_attachments`` sets its loading marker before awaiting, so a
        second autoload pass started meanwhile skips posts already in flight.
        """
        pending = [
            post.id
            for post in self.store
            if post.attachments.status == FetchStatus.not_fetched
        ]
        await asyncio.gather(*(self.reconciler.load_attachments(pid) for pid in pending))

    def set_attachments_page(self, post_id: str, page: int) -> PostRecord | None:
        return self.reconciler.set_attachments_page(post_id, page)

    # ------------------------------------------------------------------
    # Rendering / export
    # ------------------------------------------------------------------

    def view(self) -> DashboardView:
        return build_dashboard_view(
            list(self.store),
            loading_posts=self.loading_posts,
            posts_error=self.posts_error,
            generation=self.store.generation,
            attachments_page_size=self.reconciler.attachments_page_size,
        )

    def export_submissions(self) -> list[PostSubmission]:
        """Posts in the shape ``POST /api/posts`` expects."""
        return [
            PostSubmission(
                id=post.id,
                message=post.message,
                created_time=post.created_time,
                attachments=list(post.attachments.items),
            )
            for post in self.store
        ]


_session: DashboardSession | None = None


def get_dashboard_session() -> DashboardSession:
    """Return the process-wide dashboard session, creating it on first call."""
    global _session
    if _session is None:
        _session = DashboardSession.from_settings()
    return _session
