"""Storage collaborators: thin SQLAlchemy query wrappers returning None/empty on not-found."""

from newsdesk.repositories.articles import ArticleRepository
from newsdesk.repositories.comments import CommentFilter, CommentRepository
from newsdesk.repositories.users import UserRepository

__all__ = ["ArticleRepository", "CommentFilter", "CommentRepository", "UserRepository"]
