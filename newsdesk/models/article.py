"""ORM model for articles, reduced to what comment moderation needs (visibility and premium flag)."""

from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, func

from newsdesk.models.base import Base
from newsdesk.models.user import new_id


class ArticleStatus(str, PyEnum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Article(Base):
    __tablename__ = "articles"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(500), nullable=False)
    slug = Column(String(500), nullable=False, unique=True, index=True)
    status = Column(
        Enum(ArticleStatus, name="article_status"),
        nullable=False,
        default=ArticleStatus.DRAFT,
    )
    is_premium = Column(Boolean, nullable=False, default=False)
    author_id = Column(String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
