"""
Storage interface for articles, summaries and bookmarks.

Route handlers only talk to `StorageBackend`; the concrete backend is chosen
from settings at startup (see `shared.storage.factory`). Every operation is
synchronous. Async callers go through `run_storage`, which keeps the
in-process backend on the event loop and pushes blocking backends (Redis,
SQL) onto the threadpool.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from starlette.concurrency import run_in_threadpool

from shared.schemas.news import (
    Article,
    ArticleCreate,
    Bookmark,
    BookmarkCreate,
    NewsCategory,
    Summary,
    SummaryCreate,
)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_article(data: ArticleCreate) -> Article:
    """Assign an id when absent and normalize empty optionals to None."""
    return Article(
        id=data.id or new_id(),
        title=data.title,
        description=data.description or None,
        url=data.url,
        url_to_image=data.url_to_image or None,
        published_at=as_utc(data.published_at),
        source=data.source,
        category=data.category,
        content=data.content or None,
    )


def matches_filters(article: Article, category: Optional[str], search: Optional[str]) -> bool:
    if category and category.lower() != NewsCategory.ALL.value:
        if article.category.lower() != category.lower():
            return False
    if search:
        needle = search.lower()
        haystacks = (article.title, article.description or "", article.source)
        if not any(needle in text.lower() for text in haystacks):
            return False
    return True


def filter_and_page(
    articles: Iterable[Article],
    category: Optional[str],
    search: Optional[str],
    limit: int,
    offset: int,
) -> List[Article]:
    """Shared list semantics for backends that filter in Python."""
    selected = [a for a in articles if matches_filters(a, category, search)]
    selected.sort(key=lambda a: as_utc(a.published_at), reverse=True)
    return selected[offset:offset + limit]


class StorageBackend(ABC):
    """Article, summary and bookmark persistence."""

    name = "abstract"
    # In-process backends clear this; async callers run the rest on the threadpool.
    blocking = True

    # Articles
    @abstractmethod
    def list_articles(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Article]:
        """Filter by category/search, newest first, then apply offset and limit."""

    @abstractmethod
    def get_article(self, article_id: str) -> Optional[Article]:
        ...

    @abstractmethod
    def get_article_by_url(self, url: str, category: str) -> Optional[Article]:
        """Find an article previously stored for this URL under this category."""

    @abstractmethod
    def create_article(self, data: ArticleCreate) -> Article:
        ...

    def create_articles(self, items: Iterable[ArticleCreate]) -> List[Article]:
        return [self.create_article(item) for item in items]

    # Summaries
    @abstractmethod
    def get_summary_for_article(self, article_id: str) -> Optional[Summary]:
        ...

    @abstractmethod
    def create_summary(self, data: SummaryCreate) -> Summary:
        """Store a summary; if one already exists for the article it is returned instead."""

    # Bookmarks
    @abstractmethod
    def list_bookmarks(self) -> List[Bookmark]:
        """All bookmarks, most recent first."""

    @abstractmethod
    def create_bookmark(self, data: BookmarkCreate) -> Bookmark:
        """Bookmark an article; bookmarking it again returns the existing bookmark."""

    @abstractmethod
    def delete_bookmark(self, article_id: str) -> bool:
        ...

    @abstractmethod
    def is_bookmarked(self, article_id: str) -> bool:
        ...

    # Operations
    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


async def run_storage(storage: StorageBackend, func: Callable[..., Any], *args, **kwargs) -> Any:
    """Call a storage method from async code without blocking the event loop."""
    if storage.blocking:
        return await run_in_threadpool(func, *args, **kwargs)
    return func(*args, **kwargs)
