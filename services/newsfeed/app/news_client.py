import time
import uuid
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from shared.app_logging.logger import get_logger
from shared.config.settings import NewsApiSettings
from shared.schemas.news import ArticleCreate, NewsCategory

logger = get_logger("newsfeed.news_client")

CATEGORY_SEARCH_TERMS = {
    NewsCategory.ALL: "technology OR programming OR AI OR startups OR cloud OR cybersecurity OR devops",
    NewsCategory.AI: "artificial intelligence OR machine learning OR AI OR neural networks",
    NewsCategory.PROGRAMMING: "programming OR software development OR coding OR javascript OR python OR react",
    NewsCategory.STARTUPS: "startups OR venture capital OR tech funding OR unicorn companies",
    NewsCategory.CLOUD: "cloud computing OR AWS OR Azure OR Google Cloud OR serverless",
    NewsCategory.CYBERSECURITY: "cybersecurity OR security breach OR hacking OR data protection",
    NewsCategory.DEVOPS: "devops OR kubernetes OR docker OR CI/CD OR infrastructure",
}


class NewsAPIError(Exception):
    """Upstream search failed. `status_code` is None when no HTTP response was received."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def search_query_for(category: NewsCategory, search: Optional[str] = None) -> str:
    """The user's search term wins; otherwise the category's canned query."""
    if search and search.strip():
        return search.strip()
    return CATEGORY_SEARCH_TERMS.get(category, CATEGORY_SEARCH_TERMS[NewsCategory.ALL])


def parse_timestamp(ts_raw: Any) -> Optional[datetime]:
    """
    Try ISO8601 first, then fall back to RFC-style dates.
    Returns an aware UTC datetime, or None if parsing fails.
    """
    if not isinstance(ts_raw, str) or not ts_raw.strip():
        return None

    # ISO: e.g. "2025-07-16T20:54:01Z"
    try:
        dt = datetime.fromisoformat(ts_raw.strip().replace("Z", "+00:00"))
    except ValueError:
        # RFC: e.g. "Wed, 16 Jul 2025 20:54:01 +0000"
        try:
            dt = parsedate_to_datetime(ts_raw)
        except (TypeError, ValueError):
            return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip markup the provider occasionally leaves in descriptions."""
    if not value:
        return None
    if "<" in value and ">" in value:
        value = BeautifulSoup(value, "html.parser").get_text(separator=" ", strip=True)
    return value.strip() or None


def synthesize_id() -> str:
    return f"gnews_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def to_article(item: Dict[str, Any], category: NewsCategory) -> ArticleCreate:
    """Map one GNews search result into the article shape."""
    source = item.get("source") or {}
    published_at = parse_timestamp(item.get("publishedAt"))
    if published_at is None:
        logger.debug(f"Unparseable publishedAt {item.get('publishedAt')!r}; using current time")
        published_at = datetime.now(timezone.utc)

    return ArticleCreate(
        id=synthesize_id(),
        title=(item.get("title") or "").strip(),
        description=clean_text(item.get("description")),
        url=item.get("url") or "",
        url_to_image=item.get("image") or None,
        published_at=published_at,
        source=source.get("name") or "Unknown",
        category=category.value,
        content=clean_text(item.get("content")),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if isinstance(errors, dict) and errors:
            return "; ".join(str(e) for e in errors.values())
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase


class GNewsClient:
    """Thin async client for the GNews `/search` endpoint."""

    def __init__(
        self,
        settings: NewsApiSettings,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self.settings.configured

    async def search(self, query: str, max_results: int) -> List[Dict[str, Any]]:
        """Return raw GNews result dicts, newest first."""
        if not self.configured:
            raise NewsAPIError("GNews API key is not configured")

        params = {
            "q": query,
            "token": self.settings.api_key,
            "lang": self.settings.language,
            "country": self.settings.country,
            "max": max_results,
            "sortby": "publishedAt",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get("/search", params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.warning(f"GNews search failed with HTTP {e.response.status_code}: {message}")
            raise NewsAPIError(message, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning(f"GNews search request failed: {e}")
            raise NewsAPIError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise NewsAPIError(f"Malformed GNews response: {e}") from e

        if not isinstance(payload, dict):
            raise NewsAPIError("Malformed GNews response: expected a JSON object")
        articles = payload.get("articles") or []
        logger.info(f"GNews returned {len(articles)} articles for query {query[:60]!r}")
        return articles

    async def fetch_articles(
        self,
        category: NewsCategory,
        search: Optional[str],
        limit: int,
    ) -> List[ArticleCreate]:
        results = await self.search(search_query_for(category, search), limit)
        return [to_article(item, category) for item in results]
