# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Time-bounded cache for raw threat-intel feed bodies.

The :class:`IntelCache` is the primary public interface for the caching
layer.  It wraps a :class:`CacheBackend`, stamps every stored feed with
the time it was written according to an injectable clock, and only hands
a feed back while it is younger than the configured TTL.  Hit/miss
statistics are tracked for reporting.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable

from sandworm.cache.base import CacheBackend
from sandworm.cache.disk import FileCacheBackend
from sandworm.cache.memory import MemoryCacheBackend
from sandworm.core.config import Settings
from sandworm.core.constants import CACHE_TTL_SECONDS

logger = logging.getLogger("sandworm.cache.manager")

_KEY_PREFIX = "feed:"


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("hits", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
        }


class IntelCache:
    """Feed cache with a fixed freshness window.

    Args:
        backend: The cache backend to use.
        ttl: Freshness window in seconds (``1800`` = 30 minutes).
        clock: Time source in seconds.  Must be comparable across the
            lifetime of the backend, so wall-clock time for a file backend.
    """

    def __init__(
        self,
        backend: CacheBackend | None = None,
        ttl: int = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend or MemoryCacheBackend()
        self._ttl = ttl
        self._clock = clock
        self._stats = CacheStats()

    @staticmethod
    def make_cache_key(feed: str, url: str) -> str:
        return f"{_KEY_PREFIX}{feed}:{url}"

    async def get_feed(self, feed: str, url: str) -> str | None:
        """Return the cached body for *feed* if it is still fresh.

        Returns:
            The raw feed text, or ``None`` on a miss or a stale entry.
        """
        key = self.make_cache_key(feed, url)
        raw = await self._backend.get(key)
        if raw is None:
            self._stats.misses += 1
            logger.debug("Cache MISS for %s", feed)
            return None

        try:
            record = json.loads(raw)
            stored_at = float(record["stored_at"])
            body = record["body"]
        except (ValueError, KeyError, TypeError):
            logger.debug("Discarding malformed cache record for %s", feed)
            await self._backend.delete(key)
            self._stats.misses += 1
            return None

        age = self._clock() - stored_at
        if age < 0 or age >= self._ttl or not isinstance(body, str):
            logger.debug("Cache STALE for %s (age=%.0fs)", feed, age)
            await self._backend.delete(key)
            self._stats.misses += 1
            return None

        self._stats.hits += 1
        logger.debug("Cache HIT for %s (age=%.0fs)", feed, age)
        return body

    async def store_feed(self, feed: str, url: str, body: str) -> None:
        """Store a feed body stamped with the current clock reading."""
        key = self.make_cache_key(feed, url)
        record = json.dumps({"stored_at": self._clock(), "body": body})
        await self._backend.set(key, record, ttl=self._ttl)
        logger.debug("Cached %s (%d bytes, ttl=%ss)", feed, len(body), self._ttl)

    async def invalidate(self, feed: str, url: str) -> bool:
        """Remove one cached feed.

        Returns:
            ``True`` if the entry existed and was removed.
        """
        return await self._backend.delete(self.make_cache_key(feed, url))

    async def clear(self) -> int:
        """Flush every cached feed.

        Returns:
            Number of entries removed.
        """
        count = await self._backend.clear()
        logger.info("Cache cleared: %d entries removed", count)
        return count

    async def size(self) -> int:
        return await self._backend.size()

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    async def close(self) -> None:
        await self._backend.close()


def create_intel_cache(settings: Settings) -> IntelCache:
    """Instantiate the cache described by *settings*."""
    if settings.cache_backend == "disk":
        backend: CacheBackend = FileCacheBackend(settings.cache_dir)
    else:
        if settings.cache_backend != "memory":
            logger.warning(
                "Unknown cache backend %r, falling back to in-memory cache",
                settings.cache_backend,
            )
        backend = MemoryCacheBackend()
    return IntelCache(backend=backend, ttl=settings.cache_ttl)
