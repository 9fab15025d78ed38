"""Pydantic models for persisted post documents and relay payloads.

Rows are stored with snake_case columns; the HTTP surface speaks camelCase
(``postId``, ``createdTime``, ``commentCount``, ``lastUpdated``).
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from explorer.models.enums import UpsertOperation
from explorer.models.graph import Attachment, Comment


class PostSubmission(BaseModel):
    """A post as sent by the dashboard to ``POST /api/posts``."""
    id: str
    message: str | None = ""
    created_time: str = Field(
        validation_alias=AliasChoices("created_time", "createdTime"),
    )
    attachments: list[Attachment] = Field(default_factory=list)


class PostDocumentUpsert(BaseModel):
    """Row payload for upserting a post document (conflict on post_id)."""
    post_id: str
    message: str = ""
    created_time: str
    comment_count: int = 0
    comments: list[Comment] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    last_updated: datetime


class StoredPost(BaseModel):
    """Full post document returned from the database."""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    post_id: str
    message: str = ""
    created_time: str
    comment_count: int = 0
    comments: list[Comment] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    last_updated: datetime | None = None


class PostPersistResult(BaseModel):
    """Outcome of persisting one submitted post."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    post_id: str
    success: bool
    operation: UpsertOperation | None = None
    error: str | None = None


class PersistPostsResponse(BaseModel):
    """Response body of ``POST /api/posts``."""
    success: bool
    message: str
    results: list[PostPersistResult]


class SummaryResult(BaseModel):
    """Response body of a successful ``POST /api/analyze-comments``."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    summary: str
    comment_count: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
