# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage interface behind :class:`~sandworm.cache.manager.IntelCache`."""

from __future__ import annotations

import abc


class CacheBackend(abc.ABC):
    """Async string store keyed by feed, with optional per-key TTL in seconds."""

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` when missing or expired."""

    @abc.abstractmethod
    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        """Store *value*; ``ttl=None`` keeps it until deleted."""

    @abc.abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove *key*; ``True`` if it was present."""

    @abc.abstractmethod
    async def clear(self) -> int:
        """Remove every key and return how many there were."""

    @abc.abstractmethod
    async def size(self) -> int:
        """Number of unexpired entries."""

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by the backend."""
