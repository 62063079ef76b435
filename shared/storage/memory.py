from typing import Dict, List, Optional, Tuple

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

logger = get_logger(__name__)


class MemoryStorage(StorageBackend):
    """Process-local store. Contents are lost on restart."""

    name = "memory"
    blocking = False

    def __init__(self):
        self._articles: Dict[str, Article] = {}
        self._article_urls: Dict[Tuple[str, str], str] = {}
        self._summaries: Dict[str, Summary] = {}
        self._bookmarks: Dict[str, Bookmark] = {}

    def list_articles(self, category=None, search=None, limit=20, offset=0) -> List[Article]:
        return filter_and_page(self._articles.values(), category, search, limit, offset)

    def get_article(self, article_id: str) -> Optional[Article]:
        return self._articles.get(article_id)

    def get_article_by_url(self, url: str, category: str) -> Optional[Article]:
        article_id = self._article_urls.get((category.lower(), url))
        return self._articles.get(article_id) if article_id else None

    def create_article(self, data: ArticleCreate) -> Article:
        article = build_article(data)
        self._articles[article.id] = article
        self._article_urls[(article.category.lower(), article.url)] = article.id
        return article

    def get_summary_for_article(self, article_id: str) -> Optional[Summary]:
        return self._summaries.get(article_id)

    def create_summary(self, data: SummaryCreate) -> Summary:
        existing = self._summaries.get(data.article_id)
        if existing:
            logger.debug(f"Summary for article {data.article_id} already stored; keeping it")
            return existing
        summary = Summary(
            id=new_id(),
            article_id=data.article_id,
            summary=data.summary,
            created_at=utcnow(),
        )
        self._summaries[data.article_id] = summary
        return summary

    def list_bookmarks(self) -> List[Bookmark]:
        return sorted(self._bookmarks.values(), key=lambda b: b.created_at, reverse=True)

    def create_bookmark(self, data: BookmarkCreate) -> Bookmark:
        existing = self._bookmarks.get(data.article_id)
        if existing:
            return existing
        bookmark = Bookmark(id=new_id(), article_id=data.article_id, created_at=utcnow())
        self._bookmarks[data.article_id] = bookmark
        return bookmark

    def delete_bookmark(self, article_id: str) -> bool:
        return self._bookmarks.pop(article_id, None) is not None

    def is_bookmarked(self, article_id: str) -> bool:
        return article_id in self._bookmarks
