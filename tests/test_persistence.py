"""Unit tests for the persistence relay and the /api/posts endpoints.

The relay is tested with a mock Graph transport and a patched Supabase
client; nothing touches the network.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from explorer.models.enums import UpsertOperation
from explorer.models.post import PostSubmission
from explorer.services.graph import get_graph_gateway
from explorer.services.persistence import (
    get_stored_post,
    list_stored_posts,
    persist_post,
    persist_posts,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _comments_handler(failing: set[str] | None = None) -> Any:
    """Two-page comment history per post; posts in *failing* error on page 2."""
    failing = failing or set()

    def handler(request: httpx.Request) -> httpx.Response:
        post_id = request.url.path.split("/")[-2]
        after = request.url.params.get("after")
        if after is None:
            return httpx.Response(200, json={
                "data": [{"id": f"{post_id}-c1", "from": {"name": "Ann"}, "message": "hi", "created_time": "t"}],
                "paging": {"cursors": {"after": "X"}},
            })
        if post_id in failing:
            return httpx.Response(500, json={"error": {"message": "Service temporarily unavailable"}})
        return httpx.Response(200, json={
            "data": [{"id": f"{post_id}-c2", "message": "yo", "created_time": "t"}],
            "paging": {"cursors": {}},
        })

    return handler


def _submission(post_id: str, **extra: Any) -> PostSubmission:
    return PostSubmission(id=post_id, message="Hello", created_time="2025-09-01T09:00:00+0000", **extra)


@pytest.fixture()
def posts_table() -> Generator[MagicMock, None, None]:
    """Patch the persistence module's Supabase client; yield the table mock."""
    table = MagicMock()
    for method in ("select", "upsert", "eq", "limit", "order"):
        getattr(table, method).return_value = table
    table.execute.return_value = MagicMock(data=[])
    client = MagicMock()
    client.table.return_value = table

    with patch("explorer.services.persistence.get_supabase", return_value=client):
        yield table


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


class TestPersistPost:
    """One post: full comment walk, then upsert keyed by post_id."""

    @pytest.mark.asyncio
    async def test_new_post_is_created(self, make_gateway: Any, posts_table: MagicMock) -> None:
        result = await persist_post(make_gateway(_comments_handler()), _submission("p1"))

        assert result.success is True
        assert result.operation == UpsertOperation.created
        posts_table.upsert.assert_called_once()
        payload = posts_table.upsert.call_args.args[0]
        assert posts_table.upsert.call_args.kwargs == {"on_conflict": "post_id"}
        assert payload["post_id"] == "p1"
        assert payload["comment_count"] == 2
        assert len(payload["comments"]) == 2
        assert payload["message"] == "Hello"
        assert payload["last_updated"]

    @pytest.mark.asyncio
    async def test_existing_post_is_updated(self, make_gateway: Any, posts_table: MagicMock) -> None:
        posts_table.execute.return_value = MagicMock(data=[{"post_id": "p1"}])

        result = await persist_post(make_gateway(_comments_handler()), _submission("p1"))

        assert result.success is True
        assert result.operation == UpsertOperation.updated

    @pytest.mark.asyncio
    async def test_attachments_are_carried_through(self, make_gateway: Any, posts_table: MagicMock) -> None:
        submission = _submission("p1", attachments=[{"id": "a1", "url": "https://img", "type": "photo"}])

        await persist_post(make_gateway(_comments_handler()), submission)

        payload = posts_table.upsert.call_args.args[0]
        assert payload["attachments"][0]["id"] == "a1"
        assert payload["attachments"][0]["url"] == "https://img"

    @pytest.mark.asyncio
    async def test_mid_walk_failure_writes_nothing(self, make_gateway: Any, posts_table: MagicMock) -> None:
        result = await persist_post(make_gateway(_comments_handler({"p1"})), _submission("p1"))

        assert result.success is False
        assert result.error == "Service temporarily unavailable"
        posts_table.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_is_reported(self, make_gateway: Any, posts_table: MagicMock) -> None:
        posts_table.upsert.side_effect = Exception("duplicate key")

        result = await persist_post(make_gateway(_comments_handler()), _submission("p1"))

        assert result.success is False
        assert result.error == "duplicate key"


class TestPersistPosts:
    """Batch relay: per-post isolation and the summary message."""

    @pytest.mark.asyncio
    async def test_all_succeed(self, make_gateway: Any, posts_table: MagicMock) -> None:
        response = await persist_posts(
            make_gateway(_comments_handler()), [_submission("p1"), _submission("p2")]
        )

        assert response.success is True
        assert response.message == "Processed 2 posts. 2 successful, 0 failed."
        assert [r.post_id for r in response.results] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_batch(self, make_gateway: Any, posts_table: MagicMock) -> None:
        response = await persist_posts(
            make_gateway(_comments_handler({"p2"})),
            [_submission("p1"), _submission("p2"), _submission("p3")],
        )

        assert response.success is False
        assert response.message == "Processed 3 posts. 2 successful, 1 failed."
        assert [r.success for r in response.results] == [True, False, True]
        assert posts_table.upsert.call_count == 2

    @pytest.mark.asyncio
    async def test_empty_batch(self, make_gateway: Any, posts_table: MagicMock) -> None:
        response = await persist_posts(make_gateway(_comments_handler()), [])

        assert response.success is True
        assert response.message == "Processed 0 posts. 0 successful, 0 failed."


class TestStoredPosts:
    """Reads of stored documents."""

    def test_get_stored_post(self, posts_table: MagicMock) -> None:
        posts_table.execute.return_value = MagicMock(data=[{
            "post_id": "p1",
            "message": "Hello",
            "created_time": "2025-09-01T09:00:00+0000",
            "comment_count": 1,
            "comments": [{"id": "c1", "message": "hi", "created_time": "t"}],
            "attachments": [],
            "last_updated": "2025-09-02T10:00:00+00:00",
        }])

        post = get_stored_post("p1")

        assert post is not None
        assert post.post_id == "p1"
        assert post.comments[0].message == "hi"
        posts_table.eq.assert_called_with("post_id", "p1")

    def test_get_missing_post(self, posts_table: MagicMock) -> None:
        assert get_stored_post("nope") is None

    def test_list_is_ordered_newest_first(self, posts_table: MagicMock) -> None:
        posts_table.execute.return_value = MagicMock(data=[
            {"post_id": "p2", "created_time": "2025-09-02T09:00:00+0000"},
            {"post_id": "p1", "created_time": "2025-09-01T09:00:00+0000"},
        ])

        posts = list_stored_posts()

        assert [p.post_id for p in posts] == ["p2", "p1"]
        posts_table.order.assert_called_once_with("created_time", desc=True)


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class TestPostsRouter:
    """POST and GET /api/posts."""

    def _override_gateway(self, make_gateway: Any, handler: Any) -> None:
        from explorer.main import app

        gateway = make_gateway(handler)
        app.dependency_overrides[get_graph_gateway] = lambda: gateway

    def test_missing_posts_array(self, test_client: TestClient, make_gateway: Any) -> None:
        self._override_gateway(make_gateway, _comments_handler())

        response = test_client.post("/api/posts", json={"items": []})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Posts array is required"}

    def test_posts_must_be_a_list(self, test_client: TestClient, make_gateway: Any) -> None:
        self._override_gateway(make_gateway, _comments_handler())

        response = test_client.post("/api/posts", json={"posts": "p1"})

        assert response.status_code == 400

    def test_invalid_post_payload(self, test_client: TestClient, make_gateway: Any) -> None:
        self._override_gateway(make_gateway, _comments_handler())

        response = test_client.post("/api/posts", json={"posts": [{"message": "no id"}]})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid post payload")

    def test_save_posts_camel_case(
        self,
        test_client: TestClient,
        make_gateway: Any,
        posts_table: MagicMock,
    ) -> None:
        self._override_gateway(make_gateway, _comments_handler({"p2"}))

        response = test_client.post("/api/posts", json={"posts": [
            {"id": "p1", "message": "one", "createdTime": "2025-09-01T09:00:00+0000"},
            {"id": "p2", "message": "two", "created_time": "2025-09-02T09:00:00+0000"},
        ]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Processed 2 posts. 1 successful, 1 failed."
        assert body["results"][0] == {"postId": "p1", "success": True, "operation": "created"}
        assert body["results"][1] == {
            "postId": "p2",
            "success": False,
            "error": "Service temporarily unavailable",
        }

    def test_get_posts(self, test_client: TestClient, posts_table: MagicMock) -> None:
        posts_table.execute.return_value = MagicMock(data=[{
            "post_id": "p1",
            "message": "Hello",
            "created_time": "2025-09-01T09:00:00+0000",
            "comment_count": 3,
        }])

        response = test_client.get("/api/posts")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["posts"][0]["postId"] == "p1"
        assert body["posts"][0]["commentCount"] == 3

    def test_get_posts_store_failure(self, test_client: TestClient, posts_table: MagicMock) -> None:
        posts_table.execute.side_effect = Exception("Connection refused")

        response = test_client.get("/api/posts")

        assert response.status_code == 500
        assert response.json()["success"] is False
