# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""File-backed cache backend.

Each key is stored as one small JSON document under the cache directory,
so cached feeds survive between command-line runs.  Expiry uses wall-clock
time because entries outlive the process that wrote them.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Callable
from pathlib import Path

from sandworm.cache.base import CacheBackend

logger = logging.getLogger("sandworm.cache.disk")

_SUFFIX = ".json"


class FileCacheBackend(CacheBackend):
    """Cache backend persisting entries as JSON files.

    Args:
        directory: Directory holding the cache files.  Created lazily on
            the first write.
        clock: Wall-clock time source in seconds; defaults to ``time.time``.
    """

    def __init__(
        self,
        directory: str | Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._dir = Path(directory)
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._dir

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
        return self._dir / f"{digest}{_SUFFIX}"

    def _read(self, path: Path) -> dict[str, object] | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.debug("Discarding unreadable cache file %s", path, exc_info=True)
            path.unlink(missing_ok=True)
            return None
        return data if isinstance(data, dict) else None

    def _expired(self, record: dict[str, object]) -> bool:
        expires_at = record.get("expires_at")
        return isinstance(expires_at, (int, float)) and self._clock() > expires_at

    # ------------------------------------------------------------------
    # CacheBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        path = self._path_for(key)
        record = self._read(path)
        if record is None or record.get("key") != key:
            return None
        if self._expired(record):
            path.unlink(missing_ok=True)
            return None
        value = record.get("value")
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        expires_at = (self._clock() + ttl) if ttl is not None else None
        record = {"key": key, "value": value, "expires_at": expires_at}
        path = self._path_for(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(record), encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            logger.warning("Could not write cache file %s: %s", path, exc)

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    async def clear(self) -> int:
        count = 0
        if not self._dir.is_dir():
            return 0
        for path in self._dir.glob(f"*{_SUFFIX}"):
            try:
                path.unlink()
                count += 1
            except OSError:
                logger.debug("Could not remove cache file %s", path, exc_info=True)
        return count

    async def size(self) -> int:
        if not self._dir.is_dir():
            return 0
        count = 0
        for path in self._dir.glob(f"*{_SUFFIX}"):
            record = self._read(path)
            if record is not None and not self._expired(record):
                count += 1
        return count
