"""View models for the dashboard.

Pure functions from session state to ``DashboardView``; nothing here touches
the network or mutates the store.
"""

from __future__ import annotations

from explorer.core.constants import LOAD_MORE_MIN_COMMENTS
from explorer.dashboard.attachments import clamp_page, page_slice, total_pages
from explorer.models.dashboard import (
    AttachmentsPanelView,
    CommentsPanelView,
    DashboardView,
    PostCardView,
    PostRecord,
)
from explorer.models.graph import Comment


def build_comments_panel(post: PostRecord) -> CommentsPanelView:
    """Comments of pages 1..current_page, in page order."""
    state = post.comments
    visible: list[Comment] = []
    for page in state.pages[: state.current_page]:
        visible.extend(page.data)

    return CommentsPanelView(
        comments=visible,
        current_page=state.current_page,
        pages_loaded=len(state.pages),
        loading=state.loading,
        error=state.error,
        can_load_more=state.can_load_more,
        show_load_more=post.comment_count >= LOAD_MORE_MIN_COMMENTS,
        empty=not visible and not state.loading and not state.can_load_more,
    )


def build_attachments_panel(post: PostRecord, page_size: int) -> AttachmentsPanelView:
    state = post.attachments
    count = len(state.items)
    page = clamp_page(state.current_page, count, page_size)
    return AttachmentsPanelView(
        status=state.status,
        items=page_slice(state.items, page, page_size),
        total=count,
        current_page=page,
        total_pages=total_pages(count, page_size),
        error=state.error,
    )


def build_post_card(post: PostRecord, attachments_page_size: int) -> PostCardView:
    return PostCardView(
        id=post.id,
        message=post.message,
        created_time=post.created_time,
        comment_count=post.comment_count,
        show_comments=post.show_comments,
        show_attachments=post.show_attachments,
        comments=build_comments_panel(post) if post.show_comments else None,
        attachments=(
            build_attachments_panel(post, attachments_page_size)
            if post.show_attachments
            else None
        ),
    )


def build_dashboard_view(
    posts: list[PostRecord],
    *,
    loading_posts: bool,
    posts_error: str | None,
    generation: int,
    attachments_page_size: int,
) -> DashboardView:
    return DashboardView(
        loading_posts=loading_posts,
        posts_error=posts_error,
        generation=generation,
        posts=[build_post_card(p, attachments_page_size) for p in posts],
    )
