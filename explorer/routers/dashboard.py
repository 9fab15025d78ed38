"""Dashboard endpoints.

Drive the process-wide dashboard session: every action returns the full
``DashboardView`` so a front end can re-render from one response.  Actions on
an unknown post id return 404.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from explorer.dashboard.session import DashboardSession, get_dashboard_session
from explorer.models.dashboard import DashboardView
from explorer.services.persistence import persist_posts

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _unknown_post(session: DashboardSession, post_id: str) -> JSONResponse | None:
    if post_id not in session.store:
        return _error(404, f"Post not in session: {post_id}")
    return None


@router.get("", response_model=DashboardView)
async def dashboard_view(
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    return session.view()


@router.post("/posts", response_model=DashboardView)
async def fetch_posts(
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    """Fetch the post list, replacing the session's posts."""
    await session.fetch_posts()
    return session.view()


@router.delete("/posts", response_model=DashboardView)
async def clear_posts(
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    session.clear()
    return session.view()


@router.post("/attachments/autoload", response_model=DashboardView)
async def autoload_attachments(
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    """Fetch attachments of every post that has not been fetched yet.

    A front end calls this once after rendering a new post list.
    """
    await session.autoload_attachments()
    return session.view()


@router.post("/posts/{post_id}/comments/toggle", response_model=DashboardView)
async def toggle_comments(
    post_id: str,
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    missing = _unknown_post(session, post_id)
    if missing is not None:
        return missing
    await session.toggle_comments(post_id)
    return session.view()


@router.post("/posts/{post_id}/comments/more", response_model=DashboardView)
async def load_more_comments(
    post_id: str,
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    missing = _unknown_post(session, post_id)
    if missing is not None:
        return missing
    await session.load_more_comments(post_id)
    return session.view()


@router.post("/posts/{post_id}/comments/pages/{page}", response_model=DashboardView)
async def request_comments_page(
    post_id: str,
    page: int,
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    missing = _unknown_post(session, post_id)
    if missing is not None:
        return missing
    await session.request_comments_page(post_id, page)
    return session.view()


@router.post("/posts/{post_id}/attachments/toggle", response_model=DashboardView)
async def toggle_attachments(
    post_id: str,
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    missing = _unknown_post(session, post_id)
    if missing is not None:
        return missing
    await session.toggle_attachments(post_id)
    return session.view()


@router.post("/posts/{post_id}/attachments/load", response_model=DashboardView)
async def load_attachments(
    post_id: str,
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    """Explicit retry after a failed attachment fetch."""
    missing = _unknown_post(session, post_id)
    if missing is not None:
        return missing
    await session.load_attachments(post_id)
    return session.view()


@router.post("/posts/{post_id}/attachments/pages/{page}", response_model=DashboardView)
async def set_attachments_page(
    post_id: str,
    page: int,
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    missing = _unknown_post(session, post_id)
    if missing is not None:
        return missing
    session.set_attachments_page(post_id, page)
    return session.view()


@router.post("/save")
async def save_session_posts(
    session: DashboardSession = Depends(get_dashboard_session),
) -> Any:
    """Persist every post of the session through the persistence relay."""
    submissions = session.export_submissions()
    if not submissions:
        return _error(400, "No posts in session to save")

    response = await persist_posts(session.gateway, submissions)
    logger.info(
        "dashboard_save_completed",
        extra={"posts_count": len(submissions), "success": response.success},
    )
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)
