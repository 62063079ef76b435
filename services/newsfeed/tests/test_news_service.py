import pytest

from services.newsfeed.app.news_client import NewsAPIError
from services.newsfeed.app.news_service import (
    FETCH_FAILED_MESSAGE,
    QUOTA_MESSAGE,
    NewsFetchFailed,
    NewsQuery,
    NewsRateLimited,
    NewsService,
)
from services.newsfeed.tests.conftest import FakeNewsClient, fetched_batch
from shared.schemas.news import NewsCategory

PROGRAMMING = NewsQuery(category=NewsCategory.PROGRAMMING)


def make_service(storage, throttle, client):
    return NewsService(storage, throttle, client, cache_ttl_seconds=300, cooldown_seconds=10)


@pytest.mark.asyncio
async def test_first_request_fetches_and_stores(storage, throttle):
    client = FakeNewsClient(fetched_batch(3))
    service = make_service(storage, throttle, client)

    articles = await service.get_news(PROGRAMMING)

    assert [a.title for a in articles] == ["story 0", "story 1", "story 2"]
    assert len(client.calls) == 1
    assert client.calls[0] == (NewsCategory.PROGRAMMING, None, 20)
    assert len(storage.list_articles("programming")) == 3


@pytest.mark.asyncio
async def test_fresh_cache_is_served_without_upstream_call(storage, throttle, clock):
    client = FakeNewsClient(fetched_batch(2))
    service = make_service(storage, throttle, client)

    await service.get_news(PROGRAMMING)
    clock.advance(4 * 60)
    articles = await service.get_news(PROGRAMMING)

    assert len(articles) == 2
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_stale_cache_triggers_refetch(storage, throttle, clock):
    client = FakeNewsClient(fetched_batch(2))
    service = make_service(storage, throttle, client)

    await service.get_news(PROGRAMMING)
    clock.advance(6 * 60)
    await service.get_news(PROGRAMMING)

    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_cooldown_without_cache_raises_rate_limited(storage, throttle, clock):
    client = FakeNewsClient([])
    service = make_service(storage, throttle, client)

    assert await service.get_news(PROGRAMMING) == []
    clock.advance(5)
    with pytest.raises(NewsRateLimited):
        await service.get_news(PROGRAMMING)
    assert len(client.calls) == 1

    clock.advance(6)
    assert await service.get_news(PROGRAMMING) == []
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_search_terms_are_throttled_independently(storage, throttle):
    client = FakeNewsClient([])
    service = make_service(storage, throttle, client)

    await service.get_news(NewsQuery(category=NewsCategory.AI, search="gpt"))
    await service.get_news(NewsQuery(category=NewsCategory.AI, search="llama"))

    assert [call[1] for call in client.calls] == ["gpt", "llama"]


@pytest.mark.asyncio
async def test_quota_error_without_cache_maps_to_429(storage, throttle, quota_error):
    service = make_service(storage, throttle, FakeNewsClient(error=quota_error))

    with pytest.raises(NewsFetchFailed) as excinfo:
        await service.get_news(PROGRAMMING)

    assert excinfo.value.status_code == 429
    assert excinfo.value.message == QUOTA_MESSAGE
    assert "request limit" in excinfo.value.error


@pytest.mark.asyncio
async def test_network_error_without_cache_maps_to_500(storage, throttle):
    service = make_service(storage, throttle, FakeNewsClient(error=NewsAPIError("connection refused")))

    with pytest.raises(NewsFetchFailed) as excinfo:
        await service.get_news(PROGRAMMING)

    assert excinfo.value.status_code == 500
    assert excinfo.value.message == FETCH_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_failed_refetch_serves_stale_cache(storage, throttle, clock, quota_error):
    client = FakeNewsClient(fetched_batch(2))
    service = make_service(storage, throttle, client)
    await service.get_news(PROGRAMMING)

    clock.advance(6 * 60)
    client.error = quota_error
    articles = await service.get_news(PROGRAMMING)

    assert [a.title for a in articles] == ["story 0", "story 1"]
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_unexpected_client_error_falls_back(storage, throttle):
    service = make_service(storage, throttle, FakeNewsClient(error=RuntimeError("boom")))

    with pytest.raises(NewsFetchFailed) as excinfo:
        await service.get_news(PROGRAMMING)

    assert excinfo.value.status_code == 500
    assert excinfo.value.error == "boom"


@pytest.mark.asyncio
async def test_refetch_reuses_articles_with_known_urls(storage, throttle, clock):
    client = FakeNewsClient(fetched_batch(2))
    service = make_service(storage, throttle, client)
    first = await service.get_news(PROGRAMMING)

    clock.advance(6 * 60)
    # same URLs, new provider ids
    client.results = [item.model_copy(update={"id": item.id + "_again"}) for item in client.results]
    second = await service.get_news(PROGRAMMING)

    assert [a.id for a in second] == [a.id for a in first]
    assert len(storage.list_articles("programming", limit=100)) == 2


@pytest.mark.asyncio
async def test_duplicate_urls_within_one_batch_are_stored_once(storage, throttle):
    batch = fetched_batch(2)
    batch.append(batch[0].model_copy(update={"id": "gnews_dupe"}))
    service = make_service(storage, throttle, FakeNewsClient(batch))

    articles = await service.get_news(PROGRAMMING)

    assert len(articles) == 2
    assert len(storage.list_articles("programming", limit=100)) == 2


@pytest.mark.asyncio
async def test_all_category_lists_every_stored_article(storage, throttle):
    service = make_service(storage, throttle, FakeNewsClient(fetched_batch(1, NewsCategory.AI, prefix="ai")))
    await service.get_news(NewsQuery(category=NewsCategory.AI))

    assert [a.title for a in await service.cached(NewsQuery())] == ["ai 0"]
