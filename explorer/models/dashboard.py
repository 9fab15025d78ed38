"""Pydantic models for the dashboard session state and its views.

``PostRecord`` is the per-post record held by the post cache store.  Its
sub-resources are explicit state objects rather than nullable fields:
``AttachmentsState.status`` distinguishes "never fetched" from "fetched and
empty".  Records are frozen; the store replaces them with ``model_copy``.
"""

from pydantic import BaseModel, ConfigDict, Field

from explorer.models.enums import FetchStatus
from explorer.models.graph import Attachment, Comment, CommentPage, GraphPost


class AttachmentsState(BaseModel):
    """Lazy attachment list plus its client-side page pointer."""
    model_config = ConfigDict(frozen=True)

    status: FetchStatus = FetchStatus.not_fetched
    items: tuple[Attachment, ...] = ()
    error: str | None = None
    current_page: int = 1

    @property
    def loading(self) -> bool:
        return self.status == FetchStatus.loading

    @property
    def can_fetch(self) -> bool:
        return self.status in (FetchStatus.not_fetched, FetchStatus.failed)


class CommentsState(BaseModel):
    """Append-only cache of server cursor pages."""
    model_config = ConfigDict(frozen=True)

    pages: tuple[CommentPage, ...] = ()
    current_page: int = 1
    loading: bool = False
    error: str | None = None

    @property
    def can_load_more(self) -> bool:
        """True until the last cached page reports no ``after`` cursor."""
        return not self.pages or self.pages[-1].has_next


class PostRecord(BaseModel):
    """One post card in the dashboard session."""
    model_config = ConfigDict(frozen=True)

    id: str
    message: str = ""
    created_time: str
    comment_count: int = 0
    attachments: AttachmentsState = Field(default_factory=AttachmentsState)
    comments: CommentsState = Field(default_factory=CommentsState)
    show_comments: bool = False
    show_attachments: bool = False

    @classmethod
    def from_graph(cls, post: GraphPost) -> "PostRecord":
        return cls(
            id=post.id,
            message=post.message,
            created_time=post.created_time,
            comment_count=post.comment_count,
        )


# ---------------------------------------------------------------------------
# View models
# ---------------------------------------------------------------------------


class CommentsPanelView(BaseModel):
    """What the comments panel of a post card shows."""
    comments: list[Comment]
    current_page: int
    pages_loaded: int
    loading: bool
    error: str | None = None
    can_load_more: bool
    show_load_more: bool
    empty: bool


class AttachmentsPanelView(BaseModel):
    """What the attachments panel of a post card shows."""
    status: FetchStatus
    items: list[Attachment]
    total: int
    current_page: int
    total_pages: int
    error: str | None = None


class PostCardView(BaseModel):
    """A rendered post card."""
    id: str
    message: str
    created_time: str
    comment_count: int
    show_comments: bool
    show_attachments: bool
    comments: CommentsPanelView | None = None
    attachments: AttachmentsPanelView | None = None


class DashboardView(BaseModel):
    """The whole dashboard: the post list state plus every card."""
    loading_posts: bool
    posts_error: str | None = None
    generation: int
    posts: list[PostCardView]
