"""ORM model for moderated comments attached to an article."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from newsdesk.models.base import Base
from newsdesk.models.user import new_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Comment(Base):
    """
    A comment owned by its author.

    is_approved / is_spam are the stored form of CommentState; write them only through
    services.moderation.CommentState so both are never true together.
    """

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_article_created", "article_id", "created_at"),
        CheckConstraint("NOT (is_approved AND is_spam)", name="single_state"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    content = Column(Text, nullable=False)
    author_id = Column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    article_id = Column(
        String(32), ForeignKey("articles.id", ondelete="CASCADE"), nullable=False
    )
    is_approved = Column(Boolean, nullable=False, default=False)
    is_spam = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    author = relationship("User", lazy="joined")
    article = relationship("Article")
