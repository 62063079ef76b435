"""
Redis-backed storage.

Each entity type lives in one hash of JSON documents:

    <prefix>:articles       article id        -> Article
    <prefix>:article_urls   "<category>|<url>" -> article id
    <prefix>:summaries      article id        -> Summary
    <prefix>:bookmarks      article id        -> Bookmark

Keying summaries and bookmarks by article id lets HSETNX enforce the
one-per-article rule atomically on the server.
"""

from typing import List, Optional

from shared.app_logging.logger import get_logger
from shared.schemas.news import (
    Article,
    ArticleCreate,
    Bookmark,
    BookmarkCreate,
    Summary,
    SummaryCreate,
)
from shared.storage.base import (
    StorageBackend,
    build_article,
    filter_and_page,
    new_id,
    utcnow,
)
from shared.utils.redis_client import RedisClient

logger = get_logger(__name__)


class RedisStorage(StorageBackend):
    name = "redis"

    def __init__(self, client: RedisClient, prefix: str = "devbytes"):
        self._redis = client
        self._articles_key = f"{prefix}:articles"
        self._urls_key = f"{prefix}:article_urls"
        self._summaries_key = f"{prefix}:summaries"
        self._bookmarks_key = f"{prefix}:bookmarks"

    @staticmethod
    def _url_field(url: str, category: str) -> str:
        return f"{category.lower()}|{url}"

    def list_articles(self, category=None, search=None, limit=20, offset=0) -> List[Article]:
        articles = (Article.model_validate_json(raw) for raw in self._redis.hvals(self._articles_key))
        return filter_and_page(articles, category, search, limit, offset)

    def get_article(self, article_id: str) -> Optional[Article]:
        raw = self._redis.hget(self._articles_key, article_id)
        return Article.model_validate_json(raw) if raw else None

    def get_article_by_url(self, url: str, category: str) -> Optional[Article]:
        article_id = self._redis.hget(self._urls_key, self._url_field(url, category))
        return self.get_article(article_id) if article_id else None

    def create_article(self, data: ArticleCreate) -> Article:
        article = build_article(data)
        self._redis.hset(self._articles_key, article.id, article.model_dump_json())
        self._redis.hset(self._urls_key, self._url_field(article.url, article.category), article.id)
        return article

    def get_summary_for_article(self, article_id: str) -> Optional[Summary]:
        raw = self._redis.hget(self._summaries_key, article_id)
        return Summary.model_validate_json(raw) if raw else None

    def create_summary(self, data: SummaryCreate) -> Summary:
        summary = Summary(
            id=new_id(),
            article_id=data.article_id,
            summary=data.summary,
            created_at=utcnow(),
        )
        if self._redis.hsetnx(self._summaries_key, data.article_id, summary.model_dump_json()):
            return summary
        logger.debug(f"Summary for article {data.article_id} already stored; keeping it")
        return self.get_summary_for_article(data.article_id)

    def list_bookmarks(self) -> List[Bookmark]:
        bookmarks = [Bookmark.model_validate_json(raw) for raw in self._redis.hvals(self._bookmarks_key)]
        return sorted(bookmarks, key=lambda b: b.created_at, reverse=True)

    def create_bookmark(self, data: BookmarkCreate) -> Bookmark:
        bookmark = Bookmark(id=new_id(), article_id=data.article_id, created_at=utcnow())
        if self._redis.hsetnx(self._bookmarks_key, data.article_id, bookmark.model_dump_json()):
            return bookmark
        raw = self._redis.hget(self._bookmarks_key, data.article_id)
        return Bookmark.model_validate_json(raw)

    def delete_bookmark(self, article_id: str) -> bool:
        return self._redis.hdel(self._bookmarks_key, article_id) > 0

    def is_bookmarked(self, article_id: str) -> bool:
        return self._redis.hexists(self._bookmarks_key, article_id)

    def ping(self) -> bool:
        return self._redis.ping()

    def close(self) -> None:
        self._redis.close()
