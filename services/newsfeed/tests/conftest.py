from datetime import datetime, timedelta, timezone

import pytest

from services.newsfeed.app.llm_client import LLMClient
from services.newsfeed.app.news_client import NewsAPIError
from services.newsfeed.app.throttle import FetchThrottle
from shared.config.settings import LLMSettings, NewsApiSettings, Settings
from shared.schemas.news import ArticleCreate, NewsCategory
from shared.storage.memory import MemoryStorage

ENV_VARS = (
    "GNEWS_API_KEY",
    "VITE_GNEWS_API_KEY",
    "MISTRAL_API_KEY",
    "VITE_MISTRAL_API_KEY",
    "STORAGE_BACKEND",
)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeNewsClient:
    """Stands in for GNewsClient; records calls and replays canned results."""

    configured = True

    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.calls = []

    async def fetch_articles(self, category, search, limit):
        self.calls.append((category, search, limit))
        if self.error is not None:
            raise self.error
        return [item.model_copy() for item in self.results]


class DummyResponse:
    def __init__(self, content):
        # the real .choices[0].message.content
        msg = type("M", (), {"content": content})
        self.choices = [type("C", (), {"message": msg})]


class DummyCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kw):
        self.calls.append(kw)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return DummyResponse(outcome)


class DummyOpenAI:
    def __init__(self, *outcomes):
        # client.chat.completions.create() -> DummyResponse
        self.completions = DummyCompletions(outcomes or ("TEST COMPLETION",))
        self.chat = type("Chat", (), {"completions": self.completions})
        self.closed = False

    async def close(self):
        self.closed = True


def make_article(
    title="Rust 2.0 released: what changes for systems programmers",
    url="https://example.com/rust-2",
    category="programming",
    published_at=None,
    description="The new edition tightens the borrow checker. It also ships a faster compiler backend.",
    source="Example News",
    **extra,
) -> ArticleCreate:
    return ArticleCreate(
        title=title,
        url=url,
        category=category,
        published_at=published_at or datetime(2025, 7, 16, 20, 54, 1, tzinfo=timezone.utc),
        description=description,
        source=source,
        **extra,
    )


def fetched_batch(n: int, category: NewsCategory = NewsCategory.PROGRAMMING, prefix="story"):
    base = datetime(2025, 7, 16, 12, 0, tzinfo=timezone.utc)
    return [
        make_article(
            title=f"{prefix} {i}",
            url=f"https://example.com/{category.value}/{prefix}-{i}",
            category=category.value,
            published_at=base - timedelta(minutes=i),
            id=f"gnews_{prefix}_{i}",
        )
        for i in range(n)
    ]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return Settings(
        news=NewsApiSettings(GNEWS_API_KEY="test-gnews-key"),
        llm=LLMSettings(MISTRAL_API_KEY=""),
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def throttle(clock):
    return FetchThrottle(capacity=16, clock=clock)


@pytest.fixture
def offline_llm():
    return LLMClient(LLMSettings(MISTRAL_API_KEY=""))


@pytest.fixture
def quota_error():
    return NewsAPIError("You have reached your request limit for today", status_code=403)
