import time
from collections import OrderedDict
from typing import Callable, Optional

from shared.app_logging.logger import get_logger

logger = get_logger("newsfeed.throttle")


def cache_key(category: Optional[str], search: Optional[str]) -> str:
    """Normalized (category, search) key; blank search and "all" collapse together."""
    category = (category or "all").strip().lower()
    search = (search or "").strip().lower()
    return f"{category}_{search}"


class FetchThrottle:
    """
    Last upstream-fetch time per cache key, bounded by LRU eviction.

    Timestamps come from `clock` (monotonic seconds by default) so freshness
    and cooldown windows are immune to wall-clock jumps and easy to drive
    from tests.
    """

    def __init__(self, capacity: int = 1024, clock: Callable[[], float] = time.monotonic):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.clock = clock
        self._last_fetch: "OrderedDict[str, float]" = OrderedDict()

    def now(self) -> float:
        return self.clock()

    def last_fetch(self, key: str) -> Optional[float]:
        at = self._last_fetch.get(key)
        if at is not None:
            self._last_fetch.move_to_end(key)
        return at

    def elapsed(self, key: str, now: Optional[float] = None) -> Optional[float]:
        """Seconds since the last fetch for `key`, or None if never fetched."""
        at = self.last_fetch(key)
        if at is None:
            return None
        return (self.now() if now is None else now) - at

    def record(self, key: str, at: Optional[float] = None) -> float:
        at = self.now() if at is None else at
        self._last_fetch[key] = at
        self._last_fetch.move_to_end(key)
        while len(self._last_fetch) > self.capacity:
            evicted, _ = self._last_fetch.popitem(last=False)
            logger.debug(f"Evicted fetch timestamp for {evicted!r}")
        return at

    def __len__(self) -> int:
        return len(self._last_fetch)

    def __contains__(self, key: str) -> bool:
        return key in self._last_fetch
