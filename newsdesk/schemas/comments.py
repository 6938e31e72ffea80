"""Request/response schemas for comment endpoints."""

from datetime import datetime

from pydantic import Field

from newsdesk.core.permissions import Role
from newsdesk.schemas.common import CamelModel


class CreateCommentRequest(CamelModel):
    # Length bounds are enforced by the moderation engine so errors carry CONTENT_* codes.
    content: str = Field(default="", max_length=10_000)
    article_id: str = Field(..., min_length=1, max_length=64)


class UpdateCommentRequest(CamelModel):
    content: str = Field(default="", max_length=10_000)


class CommentAuthor(CamelModel):
    id: str
    name: str
    profile_image: str | None = None
    role: Role


class CommentArticle(CamelModel):
    id: str
    title: str
    slug: str


class CommentOut(CamelModel):
    id: str
    content: str
    article_id: str
    is_approved: bool
    is_spam: bool
    created_at: datetime
    updated_at: datetime
    author: CommentAuthor | None = None


class UserCommentOut(CamelModel):
    """Entry in a user's comment history."""

    id: str
    content: str
    is_approved: bool
    created_at: datetime
    updated_at: datetime
    article: CommentArticle | None = None


class CommentStats(CamelModel):
    article_id: str
    total: int
