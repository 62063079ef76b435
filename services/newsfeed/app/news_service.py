"""
Cache-or-fetch policy for the news listing.

Per normalized (category, search) key:

1. cached results younger than the freshness window are served as-is;
2. within the cooldown after the last upstream call, serve cached results
   or refuse with `NewsRateLimited`;
3. otherwise call the search API, store what comes back and return it;
4. when that call fails, serve cached results or raise `NewsFetchFailed`.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from services.newsfeed.app.metrics import NEWS_REQUESTS, NEWS_UPSTREAM_CALLS
from services.newsfeed.app.news_client import GNewsClient, NewsAPIError
from services.newsfeed.app.throttle import FetchThrottle, cache_key
from shared.app_logging.logger import get_logger
from shared.schemas.news import Article, ArticleCreate, NewsCategory
from shared.storage.base import StorageBackend, run_storage

logger = get_logger("newsfeed.news")

# Upstream statuses that mean "quota exhausted or request refused" rather than an outage.
QUOTA_STATUSES = {400, 403, 429}

RATE_LIMIT_MESSAGE = "Rate limit protection active. Please try again in a moment."
QUOTA_MESSAGE = (
    "GNews API rate limit reached. The free tier allows limited requests per day. "
    "Try other categories or wait for the limit to reset."
)
FETCH_FAILED_MESSAGE = "Failed to fetch news articles"


class NewsRateLimited(Exception):
    """Cooldown active and nothing cached to serve."""

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)
        self.message = message


class NewsFetchFailed(Exception):
    """Upstream call failed and nothing cached to serve."""

    def __init__(self, message: str, error: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.error = error
        self.status_code = status_code


@dataclass
class NewsQuery:
    category: NewsCategory = NewsCategory.ALL
    search: Optional[str] = None
    limit: int = 20
    offset: int = 0

    @property
    def search_term(self) -> Optional[str]:
        if self.search and self.search.strip():
            return self.search.strip()
        return None

    @property
    def key(self) -> str:
        return cache_key(self.category.value, self.search_term)


class NewsService:
    def __init__(
        self,
        storage: StorageBackend,
        throttle: FetchThrottle,
        client: GNewsClient,
        cache_ttl_seconds: float = 300,
        cooldown_seconds: float = 10,
    ):
        self.storage = storage
        self.throttle = throttle
        self.client = client
        self.cache_ttl_seconds = cache_ttl_seconds
        self.cooldown_seconds = cooldown_seconds

    async def cached(self, query: NewsQuery) -> List[Article]:
        return await run_storage(
            self.storage,
            self.storage.list_articles,
            query.category.value,
            query.search_term,
            query.limit,
            query.offset,
        )

    async def get_news(self, query: NewsQuery) -> List[Article]:
        key = query.key
        cached = await self.cached(query)
        now = self.throttle.now()
        elapsed = self.throttle.elapsed(key, now)

        if cached and elapsed is not None and elapsed < self.cache_ttl_seconds:
            logger.debug(f"Cache hit for {key!r} ({len(cached)} articles, {elapsed:.1f}s old)")
            NEWS_REQUESTS.labels(outcome="cache_hit").inc()
            return cached

        if elapsed is not None and elapsed < self.cooldown_seconds:
            if cached:
                NEWS_REQUESTS.labels(outcome="cooldown_cached").inc()
                return cached
            logger.info(f"Cooldown active for {key!r} and nothing cached")
            NEWS_REQUESTS.labels(outcome="rate_limited").inc()
            raise NewsRateLimited()

        self.throttle.record(key, now)
        try:
            fetched = await self.client.fetch_articles(query.category, query.search_term, query.limit)
        except NewsAPIError as e:
            NEWS_UPSTREAM_CALLS.labels(status=str(e.status_code or "error")).inc()
            return await self._fall_back(query, e.message, e.status_code)
        except Exception as e:
            logger.exception(f"Unexpected error fetching news for {key!r}")
            NEWS_UPSTREAM_CALLS.labels(status="error").inc()
            return await self._fall_back(query, str(e), None)

        NEWS_UPSTREAM_CALLS.labels(status="200").inc()
        articles = await run_storage(self.storage, self._persist, fetched)
        NEWS_REQUESTS.labels(outcome="fetched").inc()
        logger.info(f"Fetched {len(articles)} articles for {key!r}")
        return articles

    def _persist(self, fetched: List[ArticleCreate]) -> List[Article]:
        """Store new results; results whose URL is already stored under the category reuse that article."""
        resolved: Dict[int, Article] = {}
        pending: List[ArticleCreate] = []
        pending_index: List[int] = []
        seen_urls: Dict[str, int] = {}

        for i, item in enumerate(fetched):
            existing = self.storage.get_article_by_url(item.url, item.category)
            if existing:
                resolved[i] = existing
            elif item.url in seen_urls:
                continue
            else:
                seen_urls[item.url] = i
                pending.append(item)
                pending_index.append(i)

        if pending:
            for i, article in zip(pending_index, self.storage.create_articles(pending)):
                resolved[i] = article

        return [resolved[i] for i in sorted(resolved)]

    async def _fall_back(self, query: NewsQuery, error: str, status_code: Optional[int]) -> List[Article]:
        cached = await self.cached(query)
        if cached:
            logger.warning(f"News fetch failed ({error}); serving {len(cached)} cached articles")
            NEWS_REQUESTS.labels(outcome="failed_cached").inc()
            return cached

        NEWS_REQUESTS.labels(outcome="failed").inc()
        if status_code in QUOTA_STATUSES:
            raise NewsFetchFailed(QUOTA_MESSAGE, error, 429)
        raise NewsFetchFailed(FETCH_FAILED_MESSAGE, error, 500)
