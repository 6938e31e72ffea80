"""Comment queries: filtered, paginated listing plus single-row CRUD."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from sqlalchemy import func
from sqlalchemy.orm import Query, joinedload

from newsdesk.models import Comment
from newsdesk.repositories.base import BaseRepository


@dataclass(frozen=True)
class CommentFilter:
    """
    Row filter for listing and counting.

    include_spam / include_unapproved widen the default (approved and not spam) view;
    only_pending narrows to the moderation queue.
    """

    article_id: str | None = None
    author_id: str | None = None
    include_spam: bool = False
    include_unapproved: bool = False
    only_pending: bool = False


class CommentRepository(BaseRepository):
    def _filtered(self, flt: CommentFilter) -> Query:
        q = self._db.query(Comment)
        if flt.article_id is not None:
            q = q.filter(Comment.article_id == flt.article_id)
        if flt.author_id is not None:
            q = q.filter(Comment.author_id == flt.author_id)
        if flt.only_pending:
            return q.filter(Comment.is_approved.is_(False), Comment.is_spam.is_(False))
        if not flt.include_spam:
            q = q.filter(Comment.is_spam.is_(False))
        if not flt.include_unapproved:
            q = q.filter(Comment.is_approved.is_(True))
        return q

    def list_comments(
        self,
        flt: CommentFilter,
        skip: int,
        take: int,
        order: Literal["asc", "desc"] = "asc",
    ) -> list[Comment]:
        created = Comment.created_at.asc() if order == "asc" else Comment.created_at.desc()
        return (
            self._filtered(flt)
            .options(joinedload(Comment.author), joinedload(Comment.article))
            .order_by(created, Comment.id)
            .offset(skip)
            .limit(take)
            .all()
        )

    def count_comments(self, flt: CommentFilter) -> int:
        return (
            self._filtered(flt)
            .with_entities(func.count(Comment.id))
            .order_by(None)
            .scalar()
            or 0
        )

    def find_by_id(self, comment_id: str) -> Comment | None:
        return self._db.get(Comment, comment_id)

    def create(self, **fields: Any) -> Comment:
        comment = Comment(**fields)
        self._db.add(comment)
        self._db.flush()
        return comment

    def update(self, comment: Comment, touch: bool = False, **fields: Any) -> Comment:
        for key, value in fields.items():
            setattr(comment, key, value)
        if touch:
            comment.updated_at = datetime.now(UTC)
        self._db.flush()
        return comment

    def delete(self, comment: Comment) -> None:
        self._db.delete(comment)
        self._db.flush()
