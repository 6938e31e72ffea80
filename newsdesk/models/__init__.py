"""SQLAlchemy ORM models."""

from newsdesk.models.article import Article, ArticleStatus
from newsdesk.models.base import Base
from newsdesk.models.comment import Comment
from newsdesk.models.subscription import Subscription, SubscriptionStatus
from newsdesk.models.user import User

__all__ = [
    "Article",
    "ArticleStatus",
    "Base",
    "Comment",
    "Subscription",
    "SubscriptionStatus",
    "User",
]
