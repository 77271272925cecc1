# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Resolve each feed from cache, network or the offline snapshot.

Resolution order per feed:

1. the :class:`~sandworm.cache.manager.IntelCache`, while fresh;
2. a network fetch bounded by the configured timeout;
3. the bundled (or configured) offline snapshot.

A network problem never aborts a scan.  It is logged and the feed drops
through to the snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from sandworm.cache.manager import IntelCache
from sandworm.core.config import Settings, get_settings
from sandworm.core.constants import IntelOrigin
from sandworm.core.exceptions import FeedParseError, FetchError
from sandworm.intel.index import IOCIndex
from sandworm.intel.sources import (
    Feed,
    FileFeedSource,
    HttpFeedSource,
    bundled_fallback_dir,
    default_feeds,
)
from sandworm.models.ioc import IOCEntry
from sandworm.models.scan import FeedStatus

logger = logging.getLogger("sandworm.intel.loader")


@dataclass(slots=True)
class LoadedFeed:
    """The parsed entries of one feed and where they came from."""

    feed: str
    origin: IntelOrigin
    entries: dict[str, IOCEntry] = field(default_factory=dict)
    error: str | None = None

    def status(self) -> FeedStatus:
        return FeedStatus(
            feed=self.feed,
            origin=self.origin,
            entry_count=len(self.entries),
            error=self.error,
        )


class IntelLoader:
    """Load both threat-intel feeds and build the :class:`IOCIndex`."""

    def __init__(
        self,
        cache: IntelCache | None = None,
        settings: Settings | None = None,
        feeds: list[Feed] | None = None,
        fallback_dir: str | Path | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._cache = cache or IntelCache(ttl=self._settings.cache_ttl)
        self._feeds = feeds or default_feeds(
            self._settings.csv_feed_url, self._settings.json_feed_url
        )
        configured = fallback_dir or self._settings.fallback_dir
        self._fallback_dir = Path(configured) if configured else bundled_fallback_dir()

    @property
    def feeds(self) -> list[Feed]:
        return list(self._feeds)

    @property
    def cache(self) -> IntelCache:
        return self._cache

    @property
    def fallback_dir(self) -> Path:
        return self._fallback_dir

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(
        self,
        feed: Feed,
        *,
        no_cache: bool = False,
        client: httpx.AsyncClient | None = None,
    ) -> LoadedFeed:
        """Resolve one feed: fresh cache, then network, then snapshot."""
        if not no_cache:
            body = await self._cache.get_feed(feed.name, feed.url)
            if body is not None:
                try:
                    entries = feed.parse(body, feed.name)
                except FeedParseError:
                    logger.warning("Cached %s feed is unreadable, refetching", feed.name)
                    await self._cache.invalidate(feed.name, feed.url)
                else:
                    logger.info("Using cached %s feed (%d entries)", feed.name, len(entries))
                    return LoadedFeed(feed.name, IntelOrigin.CACHE, entries)

        source = HttpFeedSource(feed.url, timeout=self._settings.fetch_timeout, client=client)
        try:
            body = await source.fetch()
            entries = feed.parse(body, feed.name)
        except (FetchError, FeedParseError) as exc:
            logger.warning("Could not load %s feed from network: %s", feed.name, exc)
            return await self._load_offline(feed, network_error=str(exc))

        await self._cache.store_feed(feed.name, feed.url, body)
        logger.info("Fetched %s feed (%d entries)", feed.name, len(entries))
        return LoadedFeed(feed.name, IntelOrigin.NETWORK, entries)

    async def _load_offline(self, feed: Feed, network_error: str) -> LoadedFeed:
        source = FileFeedSource(self._fallback_dir / feed.fallback_file)
        try:
            body = await source.fetch()
            entries = feed.parse(body, feed.name)
        except (OSError, FeedParseError) as exc:
            logger.error("Offline snapshot for %s feed unusable: %s", feed.name, exc)
            return LoadedFeed(
                feed.name,
                IntelOrigin.OFFLINE,
                error=f"{network_error}; offline snapshot unusable: {exc}",
            )
        logger.info(
            "Using offline snapshot %s for %s feed (%d entries)",
            source.path,
            feed.name,
            len(entries),
        )
        return LoadedFeed(feed.name, IntelOrigin.OFFLINE, entries, error=network_error)

    async def load_all(self, *, no_cache: bool = False) -> list[LoadedFeed]:
        """Load every feed concurrently and wait for all of them."""
        async with httpx.AsyncClient(
            timeout=self._settings.fetch_timeout, follow_redirects=True
        ) as client:
            return list(
                await asyncio.gather(
                    *(self.load(feed, no_cache=no_cache, client=client) for feed in self._feeds)
                )
            )

    async def build_index(self, *, no_cache: bool = False) -> tuple[IOCIndex, list[FeedStatus]]:
        """Load every feed and merge them into one :class:`IOCIndex`."""
        loaded = await self.load_all(no_cache=no_cache)
        index = IOCIndex.build(*(feed.entries for feed in loaded))
        logger.info(
            "IOC index built: %d names (%d wildcard) from %s",
            len(index),
            index.wildcard_count,
            ", ".join(f"{f.feed}={f.origin}" for f in loaded),
        )
        return index, [feed.status() for feed in loaded]

    # ------------------------------------------------------------------
    # Offline snapshot maintenance
    # ------------------------------------------------------------------

    async def update_fallbacks(self) -> dict[str, str | None]:
        """Download every feed and overwrite its offline snapshot.

        A feed is only written when it downloads and parses; a failure
        leaves the previous snapshot in place.  The cache is cleared when
        at least one snapshot was refreshed.

        Returns:
            Mapping of feed name to ``None`` on success or an error message.
        """
        results: dict[str, str | None] = {}
        async with httpx.AsyncClient(
            timeout=self._settings.fetch_timeout, follow_redirects=True
        ) as client:
            for feed in self._feeds:
                source = HttpFeedSource(
                    feed.url, timeout=self._settings.fetch_timeout, client=client
                )
                try:
                    body = await source.fetch()
                    entries = feed.parse(body, feed.name)
                    self._fallback_dir.mkdir(parents=True, exist_ok=True)
                    (self._fallback_dir / feed.fallback_file).write_text(body, encoding="utf-8")
                except (FetchError, FeedParseError, OSError) as exc:
                    logger.warning("Could not update %s snapshot: %s", feed.name, exc)
                    results[feed.name] = str(exc)
                    continue
                logger.info("Updated %s snapshot (%d entries)", feed.name, len(entries))
                results[feed.name] = None

        if any(err is None for err in results.values()):
            await self._cache.clear()
        return results
