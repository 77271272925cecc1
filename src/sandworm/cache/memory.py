# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory cache backend with TTL expiry.

Lives for the duration of the process and holds a handful of feed
bodies.  Expiry is measured with an injectable clock so tests can move
time forward without sleeping.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from sandworm.cache.base import CacheBackend


class MemoryCacheBackend(CacheBackend):
    """Process-local key/value store; each value carries its own deadline.

    Args:
        clock: Time source in seconds; defaults to ``time.monotonic``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[str, float | None]] = {}
        self._clock = clock

    def _live(self, key: str, now: float) -> bool:
        _, expires_at = self._store[key]
        if expires_at is not None and now > expires_at:
            del self._store[key]
            return False
        return True

    async def get(self, key: str) -> str | None:
        if key not in self._store or not self._live(key, self._clock()):
            return None
        return self._store[key][0]

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        expires_at = (self._clock() + ttl) if ttl is not None else None
        self._store[key] = (value, expires_at)

    async def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    async def clear(self) -> int:
        count = len(self._store)
        self._store.clear()
        return count

    async def size(self) -> int:
        now = self._clock()
        return sum(1 for key in list(self._store) if self._live(key, now))

    async def close(self) -> None:
        self._store.clear()
