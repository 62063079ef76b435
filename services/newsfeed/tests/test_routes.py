import pytest
from fastapi.testclient import TestClient

from services.newsfeed.app.fallbacks import REACT_RESPONSE
from services.newsfeed.app.main import create_app
from services.newsfeed.app.news_client import NewsAPIError
from services.newsfeed.app.news_service import QUOTA_MESSAGE, RATE_LIMIT_MESSAGE
from services.newsfeed.tests.conftest import FakeNewsClient, fetched_batch, make_article
from shared.database.session import build_engine, init_db, make_session_factory
from shared.storage.memory import MemoryStorage
from shared.storage.sql import SqlStorage


@pytest.fixture
def news_client():
    return FakeNewsClient(fetched_batch(3))


@pytest.fixture
def client(settings, storage, news_client, offline_llm, throttle):
    app = create_app(
        settings=settings,
        storage=storage,
        news_client=news_client,
        llm_client=offline_llm,
        throttle=throttle,
    )
    return TestClient(app)


def test_news_returns_camel_case_articles(client, news_client):
    response = client.get("/api/news", params={"category": "programming"})

    assert response.status_code == 200
    body = response.json()
    assert [a["title"] for a in body] == ["story 0", "story 1", "story 2"]
    assert {"id", "title", "url", "urlToImage", "publishedAt", "source", "category"} <= set(body[0])
    assert len(news_client.calls) == 1


def test_news_pagination_and_cache(client, news_client):
    client.get("/api/news", params={"category": "programming"})
    response = client.get("/api/news", params={"category": "programming", "limit": 2, "offset": 1})

    assert [a["title"] for a in response.json()] == ["story 1", "story 2"]
    assert len(news_client.calls) == 1


@pytest.mark.parametrize(
    "params",
    [
        {"category": "gardening"},
        {"limit": 0},
        {"limit": "many"},
        {"offset": -1},
    ],
)
def test_news_rejects_bad_query(client, params):
    response = client.get("/api/news", params=params)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"


def test_news_rate_limited_during_cooldown(client, news_client, clock):
    news_client.results = []
    assert client.get("/api/news").json() == []
    clock.advance(3)

    response = client.get("/api/news")

    assert response.status_code == 429
    assert response.json() == {"message": RATE_LIMIT_MESSAGE, "cached": False}


def test_news_quota_exhausted(client, news_client):
    news_client.error = NewsAPIError("You have reached your request limit for today", status_code=403)

    response = client.get("/api/news", params={"category": "ai"})

    assert response.status_code == 429
    body = response.json()
    assert body["message"] == QUOTA_MESSAGE
    assert body["cached"] is False
    assert "request limit" in body["error"]


def test_get_article(client, storage):
    article = storage.create_article(make_article())

    assert client.get(f"/api/articles/{article.id}").json()["title"] == article.title
    missing = client.get("/api/articles/nope")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Article not found"}


def test_summary_is_generated_once(client, storage, monkeypatch):
    article = storage.create_article(make_article())
    calls = []

    import services.newsfeed.app.summarize as summarize

    original = summarize.generate_summary_text

    async def counting(article, llm):
        calls.append(article.id)
        return await original(article, llm)

    monkeypatch.setattr(summarize, "generate_summary_text", counting)

    first = client.post(f"/api/articles/{article.id}/summary")
    second = client.post(f"/api/articles/{article.id}/summary")

    assert first.status_code == 200
    body = first.json()
    assert body["articleId"] == article.id
    assert body["summary"].startswith("• Rust 2.0 released")
    assert second.json()["id"] == body["id"]
    assert calls == [article.id]


def test_summary_for_unknown_article(client):
    response = client.post("/api/articles/nope/summary")
    assert response.status_code == 404
    assert response.json()["message"] == "Article not found"


def test_chat(client):
    response = client.post("/api/chat", json={"message": "How do React hooks work?"})
    assert response.status_code == 200
    assert response.json() == {"response": REACT_RESPONSE}


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": 42}])
def test_chat_rejects_bad_payload(client, payload):
    response = client.post("/api/chat", json=payload)
    assert response.status_code == 400
    assert response.json()["errors"]


def test_bookmark_round_trip(client, storage):
    article = storage.create_article(make_article())

    created = client.post("/api/bookmarks", json={"articleId": article.id})
    assert created.status_code == 200
    assert created.json()["articleId"] == article.id
    again = client.post("/api/bookmarks", json={"articleId": article.id})
    assert again.json()["id"] == created.json()["id"]

    assert client.get(f"/api/bookmarks/{article.id}/status").json() == {"isBookmarked": True}
    listed = client.get("/api/bookmarks").json()
    assert [b["id"] for b in listed] == [article.id]
    assert "bookmarkedAt" in listed[0]

    assert client.delete(f"/api/bookmarks/{article.id}").json() == {"success": True}
    assert client.get(f"/api/bookmarks/{article.id}/status").json() == {"isBookmarked": False}

    missing = client.delete(f"/api/bookmarks/{article.id}")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Bookmark not found"}


def test_bookmark_list_skips_missing_articles(client, storage):
    client.post("/api/bookmarks", json={"articleId": "ghost"})
    assert client.get("/api/bookmarks").json() == []


def test_bookmark_requires_article_id(client):
    response = client.post("/api/bookmarks", json={"articleId": ""})
    assert response.status_code == 400


def test_correlation_id_is_echoed(client):
    response = client.get("/api/health/live", headers={"X-Correlation-ID": "req-123"})
    assert response.headers["X-Correlation-ID"] == "req-123"
    assert client.get("/api/health/live").headers["X-Correlation-ID"]


def test_health_reports_checks(client):
    body = client.get("/api/health").json()

    assert body["service"] == "newsfeed"
    checks = {c["name"]: c["status"] for c in body["checks"]}
    assert checks == {"storage": "healthy", "news_api": "healthy", "llm": "degraded"}
    assert body["status"] == "degraded"

    ready = client.get("/api/health/ready").json()
    assert ready["status"] == "ready"
    assert ready["critical_dependencies"] == {"storage": "healthy"}


def test_metrics_exposed(client):
    client.get("/api/news")
    response = client.get("/api/metrics")
    assert response.status_code == 200
    assert "newsfeed_news_requests_total" in response.text


def test_index_page_renders_shell(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "<title>DevBytes" in response.text
    for label in ("All", "AI", "Programming", "Startups", "Cloud", "Cybersecurity", "DevOps"):
        assert f">{label}</button>" in response.text
    assert '"pageSize": 20' in response.text


def test_static_assets_served(client):
    assert client.get("/static/app.js").status_code == 200
    assert client.get("/static/styles.css").status_code == 200


class BrokenStorage(MemoryStorage):
    def list_bookmarks(self):
        raise RuntimeError("disk on fire")


def test_unexpected_error_surfaces_message_and_correlation_id(settings, news_client, offline_llm, throttle):
    app = create_app(
        settings=settings,
        storage=BrokenStorage(),
        news_client=news_client,
        llm_client=offline_llm,
        throttle=throttle,
    )
    response = TestClient(app).get("/api/bookmarks", headers={"X-Correlation-ID": "abc"})

    assert response.status_code == 500
    assert response.json() == {"message": "disk on fire"}
    assert response.headers["X-Correlation-ID"] == "abc"


@pytest.fixture
def sql_client(settings, news_client, offline_llm, throttle):
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    storage = SqlStorage(make_session_factory(engine))
    app = create_app(
        settings=settings,
        storage=storage,
        news_client=news_client,
        llm_client=offline_llm,
        throttle=throttle,
    )
    yield TestClient(app)
    storage.close()


def test_sql_backend_serves_every_route(sql_client):
    articles = sql_client.get("/api/news", params={"category": "programming"}).json()
    assert [a["title"] for a in articles] == ["story 0", "story 1", "story 2"]
    article_id = articles[0]["id"]

    assert sql_client.get(f"/api/articles/{article_id}").json()["id"] == article_id
    summary = sql_client.post(f"/api/articles/{article_id}/summary").json()
    assert summary["summary"].splitlines()[0] == "• story 0"
    assert sql_client.post(f"/api/articles/{article_id}/summary").json()["id"] == summary["id"]

    assert sql_client.post("/api/bookmarks", json={"articleId": article_id}).status_code == 200
    assert [b["id"] for b in sql_client.get("/api/bookmarks").json()] == [article_id]
    assert sql_client.get(f"/api/bookmarks/{article_id}/status").json() == {"isBookmarked": True}
    assert sql_client.delete(f"/api/bookmarks/{article_id}").json() == {"success": True}
