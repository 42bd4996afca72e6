"""
Query cache for relationship fetches.

Caches results by key for a bounded staleness window and deduplicates
concurrent requests: while a fetch for a key is in flight, every caller
for that key awaits the same task.

Each key carries a generation number, drawn from a cache-wide counter
when the key is first fetched or set. ``invalidate`` forgets the key's
generation, so a fetch started before it still completes for its callers
but its result is not stored, and a late response can never overwrite
newer state.

Entries left unused for ``gc_time`` seconds past their staleness window
are evicted on the next fetch, or by calling ``collect``.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STALE_TIME_SECONDS = 300.0
DEFAULT_GC_TIME_SECONDS = 300.0


@dataclass
class CacheEntry(Generic[T]):
    """
    A cached result.

    Attributes:
        value: The fetched value.
        fetched_at: Clock reading when the value was stored.
        generation: Key generation the value was fetched under.
    """

    value: T
    fetched_at: float
    generation: int

    def age(self, now: float) -> float:
        return now - self.fetched_at


class QueryCache:
    """
    Keyed async cache with staleness, eviction and in-flight deduplication.

    Example:
        ```python
        cache = QueryCache(stale_time=300, gc_time=300)
        data = await cache.get_or_fetch(("derivatives", "0xabc"), fetch)
        ```
    """

    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_TIME_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        gc_time: float = DEFAULT_GC_TIME_SECONDS,
    ):
        self.stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[Any]] = {}
        self._in_flight: Dict[Hashable, asyncio.Task] = {}
        self._generations: Dict[Hashable, int] = {}
        self._counter = itertools.count(1)

    def generation(self, key: Hashable) -> int:
        """Current generation of ``key``; 0 when the key is unknown."""
        return self._generations.get(key, 0)

    def _claim_generation(self, key: Hashable) -> int:
        if key not in self._generations:
            self._generations[key] = next(self._counter)
        return self._generations[key]

    def peek(self, key: Hashable) -> Optional[CacheEntry[Any]]:
        """The stored entry for ``key``, fresh or stale."""
        return self._entries.get(key)

    def get(self, key: Hashable) -> Optional[Any]:
        """The cached value if it is still fresh, else None."""
        entry = self._entries.get(key)
        if entry is None or entry.age(self._clock()) > self.stale_time:
            return None
        return entry.value

    def is_fetching(self, key: Hashable) -> bool:
        return key in self._in_flight

    def keys(self) -> List[Hashable]:
        """Keys with a stored entry or an in-flight fetch."""
        return list(dict.fromkeys([*self._entries, *self._in_flight]))

    async def get_or_fetch(self, key: Hashable, fetch: Callable[[], Awaitable[T]]) -> T:
        """
        Return a fresh cached value or fetch one.

        Concurrent calls for the same key share a single fetch. Exceptions
        from ``fetch`` propagate to every waiting caller and nothing is
        cached.
        """
        self.collect()

        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        task = self._in_flight.get(key)
        if task is None:
            logger.debug(f"Cache miss for {key}; fetching")
            task = asyncio.ensure_future(self._run(key, fetch, self._claim_generation(key)))
            self._in_flight[key] = task
        else:
            logger.debug(f"Joining in-flight fetch for {key}")

        # Cancelling one waiter leaves the shared fetch running
        return await asyncio.shield(task)

    async def _run(self, key: Hashable, fetch: Callable[[], Awaitable[T]], generation: int) -> T:
        try:
            value = await fetch()
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

        if generation == self.generation(key):
            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock(), generation=generation)
        else:
            logger.warning(f"Discarding result for {key} from superseded generation {generation}")
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = CacheEntry(
            value=value, fetched_at=self._clock(), generation=self._claim_generation(key)
        )

    def collect(self) -> List[Hashable]:
        """Evict entries older than ``stale_time + gc_time``. Returns the evicted keys."""
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.age(now) > self.stale_time + self.gc_time
        ]
        for key in expired:
            del self._entries[key]
            if key not in self._in_flight:
                self._generations.pop(key, None)
        if expired:
            logger.debug(f"Evicted {len(expired)} unused cache entries")
        return expired

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key (or everything) and supersede any in-flight fetch."""
        keys = [key] if key is not None else self.keys()
        for k in keys:
            self._entries.pop(k, None)
            self._in_flight.pop(k, None)
            self._generations.pop(k, None)

    def clear(self) -> None:
        self.invalidate()
        self._generations.clear()
