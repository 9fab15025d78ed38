"""Unit tests for the in-memory post cache store."""

from __future__ import annotations

from explorer.dashboard.store import PostCacheStore
from explorer.models.dashboard import PostRecord


def _post(post_id: str, message: str = "") -> PostRecord:
    return PostRecord(id=post_id, message=message, created_time="2025-09-01T09:00:00+0000")


class TestPostCacheStore:
    """Replace-all, keyed updates and generation tagging."""

    def test_replace_all_keeps_order_and_bumps_generation(self) -> None:
        store = PostCacheStore()
        generation = store.replace_all([_post("b"), _post("a"), _post("c")])

        assert generation == 1
        assert [p.id for p in store] == ["b", "a", "c"]
        assert len(store) == 3
        assert "a" in store

    def test_replace_all_discards_previous_state(self) -> None:
        store = PostCacheStore()
        store.replace_all([_post("a")])
        store.update("a", show_comments=True)

        store.replace_all([_post("a")])

        assert store.get("a").show_comments is False
        assert store.generation == 2

    def test_update_replaces_only_target(self) -> None:
        store = PostCacheStore()
        store.replace_all([_post("a"), _post("b")])
        untouched = store.get("b")
        original = store.get("a")

        updated = store.update("a", show_attachments=True)

        assert updated is not None
        assert updated.show_attachments is True
        assert original.show_attachments is False
        assert store.get("b") is untouched
        assert [p.id for p in store] == ["a", "b"]

    def test_update_missing_post_is_noop(self) -> None:
        store = PostCacheStore()
        store.replace_all([_post("a")])

        assert store.update("zzz", show_comments=True) is None
        assert len(store) == 1

    def test_stale_generation_is_dropped(self) -> None:
        """Given a write tagged with an old generation, nothing changes."""
        store = PostCacheStore()
        old = store.replace_all([_post("a")])
        store.replace_all([_post("a", message="fresh")])

        assert store.update("a", old, message="stale") is None
        assert store.get("a").message == "fresh"

    def test_clear_empties_and_bumps_generation(self) -> None:
        store = PostCacheStore()
        store.replace_all([_post("a")])

        assert store.clear() == 2
        assert len(store) == 0
        assert store.get("a") is None

    def test_duplicate_ids_collapse(self) -> None:
        store = PostCacheStore()
        store.replace_all([_post("a", "one"), _post("b"), _post("a", "two")])

        assert [p.id for p in store] == ["a", "b"]
        assert store.get("a").message == "two"
