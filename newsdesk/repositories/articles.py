"""Article lookups needed by comment moderation."""

from newsdesk.models import Article, ArticleStatus
from newsdesk.repositories.base import BaseRepository


class ArticleRepository(BaseRepository):
    def find_published(self, article_id: str) -> Article | None:
        return (
            self._db.query(Article)
            .filter(Article.id == article_id, Article.status == ArticleStatus.PUBLISHED)
            .first()
        )
