"""Pydantic models for Graph API resources after normalization.

The gateway maps raw Graph JSON into these shapes; nothing downstream reads
raw Graph payloads except the attachment flattener.
"""

from pydantic import BaseModel, ConfigDict, Field

from explorer.core.constants import UNKNOWN_AUTHOR


class GraphPost(BaseModel):
    """One entry of the page's post list."""
    id: str
    message: str = ""
    created_time: str
    comment_count: int = 0


class Comment(BaseModel):
    """A single comment, as stored on a page and in persisted documents."""
    model_config = ConfigDict(frozen=True)

    id: str
    from_name: str = UNKNOWN_AUTHOR
    message: str = ""
    created_time: str


class Cursors(BaseModel):
    """Opaque paging cursors; a missing ``after`` marks the end of stream."""
    model_config = ConfigDict(frozen=True)

    before: str | None = None
    after: str | None = None


class CommentPage(BaseModel):
    """One server-side page of comments and the cursors that located it."""
    model_config = ConfigDict(frozen=True)

    data: tuple[Comment, ...] = ()
    cursors: Cursors = Field(default_factory=Cursors)

    @property
    def has_next(self) -> bool:
        return bool(self.cursors.after)


class Attachment(BaseModel):
    """A flattened attachment or sub-attachment."""
    model_config = ConfigDict(frozen=True)

    id: str
    url: str | None = None
    type: str | None = None
    title: str | None = None
    description: str | None = None
