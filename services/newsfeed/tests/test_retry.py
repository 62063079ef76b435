import threading

import pytest

from shared.storage.base import run_storage
from shared.storage.memory import MemoryStorage
from shared.utils.retry import RetryConfig, retry, retry_async


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    async def instant(_delay):
        return None

    monkeypatch.setattr("shared.utils.retry.time.sleep", lambda _delay: None)
    monkeypatch.setattr("shared.utils.retry.asyncio.sleep", instant)


def test_sync_retry_reraises_original_error():
    calls = []

    @retry(max_retries=2, retryable_exceptions=(ConnectionError,))
    def flaky():
        calls.append(1)
        raise ConnectionError("db gone")

    with pytest.raises(ConnectionError, match="db gone"):
        flaky()
    assert len(calls) == 3


def test_sync_retry_recovers():
    outcomes = [ConnectionError("blip"), "ok"]

    @retry(max_retries=1, retryable_exceptions=(ConnectionError,))
    def flaky():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert flaky() == "ok"


def test_sync_retry_does_not_retry_other_errors():
    calls = []

    @retry(max_retries=3, retryable_exceptions=(ConnectionError,))
    def broken():
        calls.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        broken()
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_async_retry_reraises_original_error():
    calls = []

    async def flaky():
        calls.append(1)
        raise ConnectionError("upstream gone")

    config = RetryConfig(max_retries=2, retryable_exceptions=(ConnectionError,))
    with pytest.raises(ConnectionError, match="upstream gone"):
        await retry_async(flaky, config=config)
    assert len(calls) == 3


class ThreadRecordingStorage(MemoryStorage):
    name = "recording"

    def __init__(self, blocking):
        super().__init__()
        self.blocking = blocking
        self.threads = []

    def list_bookmarks(self):
        self.threads.append(threading.get_ident())
        return super().list_bookmarks()


@pytest.mark.asyncio
async def test_blocking_backends_run_off_the_event_loop():
    storage = ThreadRecordingStorage(blocking=True)

    assert await run_storage(storage, storage.list_bookmarks) == []
    assert storage.threads[0] != threading.get_ident()


@pytest.mark.asyncio
async def test_in_process_backend_stays_on_the_event_loop():
    storage = ThreadRecordingStorage(blocking=False)

    await run_storage(storage, storage.list_bookmarks)
    assert storage.threads[0] == threading.get_ident()
