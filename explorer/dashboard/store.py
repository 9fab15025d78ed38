"""In-memory post cache store for a dashboard session.

Holds the ordered post records of the current session.  Updates are keyed by
post id and copy-on-write: the record is replaced with ``model_copy`` in its
existing slot, so iteration order and sibling records are never touched.

Every ``replace_all``/``clear`` bumps ``generation``.  Callers that start an
async fetch capture the generation first and pass it back to ``update``; a
write from a fetch that outlived its collection is dropped instead of
resurrecting stale data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from explorer.models.dashboard import PostRecord

logger = logging.getLogger(__name__)


class PostCacheStore:
    """Insertion-ordered, id-keyed collection of ``PostRecord``s."""

    def __init__(self) -> None:
        self._posts: dict[str, PostRecord] = {}
        self.generation = 0

    def __len__(self) -> int:
        return len(self._posts)

    def __iter__(self) -> Iterator[PostRecord]:
        return iter(list(self._posts.values()))

    def __contains__(self, post_id: object) -> bool:
        return post_id in self._posts

    def get(self, post_id: str) -> PostRecord | None:
        return self._posts.get(post_id)

    def replace_all(self, posts: Iterable[PostRecord]) -> int:
        """Replace the whole collection, discarding all sub-resource state.

        Duplicate ids keep the first occurrence's position and the last
        occurrence's data.  Returns the new generation.
        """
        self._posts = {}
        for post in posts:
            self._posts[post.id] = post
        self.generation += 1
        logger.info(
            "post_cache_replaced",
            extra={"posts_count": len(self._posts), "generation": self.generation},
        )
        return self.generation

    def clear(self) -> int:
        self._posts = {}
        self.generation += 1
        return self.generation

    def update(
        self,
        post_id: str,
        generation: int | None = None,
        **changes: Any,
    ) -> PostRecord | None:
        """Apply *changes* to one post and return the new record.

        Returns ``None`` (and writes nothing) when the post is gone or when
        *generation* no longer matches the current collection.
        """
        if generation is not None and generation != self.generation:
            logger.debug(
                "post_cache_stale_write_dropped",
                extra={"post_id": post_id, "generation": generation},
            )
            return None
        current = self._posts.get(post_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self._posts[post_id] = updated
        return updated
