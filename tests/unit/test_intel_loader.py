# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the intel loader: cache -> network -> offline resolution."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from sandworm.cache.manager import IntelCache
from sandworm.cache.memory import MemoryCacheBackend
from sandworm.core.config import Settings
from sandworm.core.constants import IntelOrigin
from sandworm.intel.loader import IntelLoader

NETWORK_CSV = "Package,Version\nfresh-wildcard,= 1.0.0\nposthog-node,= 4.18.1\n"
NETWORK_JSON = json.dumps({"chalk": ["5.6.1"], "posthog-node": ["5.11.3"]})


class FakeClock:
    def __init__(self) -> None:
        self.now = 5_000.0

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> IntelCache:
    return IntelCache(MemoryCacheBackend(clock=clock), ttl=1800, clock=clock)


@pytest.fixture
def loader(cache: IntelCache, settings: Settings) -> IntelLoader:
    return IntelLoader(cache=cache, settings=settings)


def _fresh(template: httpx.Response):
    """Build a new response per request so a route can be hit repeatedly."""
    return lambda request: httpx.Response(template.status_code, text=template.text)


def _mock_feeds(settings: Settings, csv_response: httpx.Response | Exception, json_response=None):
    csv_route = respx.get(settings.csv_feed_url)
    json_route = respx.get(settings.json_feed_url)
    if isinstance(csv_response, Exception):
        csv_route.mock(side_effect=csv_response)
    else:
        csv_route.mock(side_effect=_fresh(csv_response))
    if json_response is None:
        json_response = httpx.Response(200, text=NETWORK_JSON)
    json_route.mock(side_effect=_fresh(json_response))
    return csv_route, json_route


# ---------------------------------------------------------------------------
# Resolution order
# ---------------------------------------------------------------------------


class TestLoadFromNetwork:
    @respx.mock
    async def test_fresh_fetch(self, loader: IntelLoader, settings: Settings) -> None:
        _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        loaded = await loader.load_all()
        assert [f.origin for f in loaded] == [IntelOrigin.NETWORK, IntelOrigin.NETWORK]
        assert set(loaded[0].entries) == {"fresh-wildcard", "posthog-node"}
        assert await loader.cache.size() == 2

    @respx.mock
    async def test_cache_reused_within_ttl(
        self, loader: IntelLoader, settings: Settings, clock: FakeClock
    ) -> None:
        csv_route, json_route = _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        await loader.load_all()
        clock.now += 29 * 60

        loaded = await loader.load_all()
        assert [f.origin for f in loaded] == [IntelOrigin.CACHE, IntelOrigin.CACHE]
        assert csv_route.call_count == 1
        assert json_route.call_count == 1
        assert "fresh-wildcard" in loaded[0].entries

    @respx.mock
    async def test_refetch_after_ttl(
        self, loader: IntelLoader, settings: Settings, clock: FakeClock
    ) -> None:
        csv_route, _ = _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        await loader.load_all()
        clock.now += 31 * 60

        loaded = await loader.load_all()
        assert loaded[0].origin == IntelOrigin.NETWORK
        assert csv_route.call_count == 2

    @respx.mock
    async def test_no_cache_forces_fetch_and_rewrites_cache(
        self, loader: IntelLoader, settings: Settings, cache: IntelCache
    ) -> None:
        csv_route, _ = _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        await cache.store_feed("wiz-iocs", settings.csv_feed_url, "Package\nstale-entry\n")

        loaded = await loader.load_all(no_cache=True)
        assert loaded[0].origin == IntelOrigin.NETWORK
        assert "stale-entry" not in loaded[0].entries
        assert csv_route.call_count == 1
        assert await cache.get_feed("wiz-iocs", settings.csv_feed_url) == NETWORK_CSV


class TestOfflineFallback:
    @respx.mock
    async def test_http_error_uses_snapshot(self, loader: IntelLoader, settings: Settings) -> None:
        _mock_feeds(settings, httpx.Response(500))
        loaded = await loader.load_all()
        csv_feed, json_feed = loaded
        assert csv_feed.origin == IntelOrigin.OFFLINE
        assert "syntax-class-properties" in csv_feed.entries
        assert "HTTP 500" in csv_feed.error
        assert json_feed.origin == IntelOrigin.NETWORK

    @respx.mock
    async def test_timeout_uses_snapshot(self, loader: IntelLoader, settings: Settings) -> None:
        _mock_feeds(settings, httpx.ConnectTimeout("timed out"))
        loaded = await loader.load_all()
        assert loaded[0].origin == IntelOrigin.OFFLINE
        assert loaded[0].entries

    @respx.mock
    async def test_malformed_body_is_not_cached(
        self, loader: IntelLoader, settings: Settings, cache: IntelCache
    ) -> None:
        _mock_feeds(
            settings,
            httpx.Response(200, text=NETWORK_CSV),
            httpx.Response(200, text="<html>maintenance</html>"),
        )
        loaded = await loader.load_all()
        assert loaded[1].origin == IntelOrigin.OFFLINE
        assert "chalk" in loaded[1].entries
        assert await cache.get_feed("malicious-packages", settings.json_feed_url) is None

    @respx.mock
    async def test_deeply_nested_body_uses_snapshot(
        self, loader: IntelLoader, settings: Settings, cache: IntelCache
    ) -> None:
        _mock_feeds(
            settings,
            httpx.Response(200, text=NETWORK_CSV),
            httpx.Response(200, text="[" * 200_000 + "]" * 200_000),
        )
        loaded = await loader.load_all()
        assert loaded[1].origin == IntelOrigin.OFFLINE
        assert "nested too deeply" in loaded[1].error
        assert "chalk" in loaded[1].entries
        assert await cache.get_feed("malicious-packages", settings.json_feed_url) is None

    @respx.mock
    async def test_missing_snapshot_contributes_nothing(
        self, cache: IntelCache, settings: Settings, tmp_path
    ) -> None:
        loader = IntelLoader(cache=cache, settings=settings, fallback_dir=tmp_path / "empty")
        _mock_feeds(settings, httpx.Response(404), httpx.Response(404))
        loaded = await loader.load_all()
        for feed in loaded:
            assert feed.origin == IntelOrigin.OFFLINE
            assert feed.entries == {}
            assert "offline snapshot unusable" in feed.error

    @respx.mock
    async def test_unparsable_cache_entry_is_refetched(
        self, loader: IntelLoader, settings: Settings, cache: IntelCache
    ) -> None:
        _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        await cache.store_feed("malicious-packages", settings.json_feed_url, "[]")
        loaded = await loader.load_all()
        assert loaded[1].origin == IntelOrigin.NETWORK


# ---------------------------------------------------------------------------
# Index construction
# ---------------------------------------------------------------------------


class TestBuildIndex:
    @respx.mock
    async def test_wildcard_wins_across_feeds(self, loader: IntelLoader, settings: Settings) -> None:
        _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        index, statuses = await loader.build_index()
        assert index.get("posthog-node").is_wildcard
        assert index.get("posthog-node").sources == frozenset({"wiz-iocs", "malicious-packages"})
        assert not index.get("chalk").is_wildcard
        assert [(s.feed, s.origin, s.entry_count) for s in statuses] == [
            ("wiz-iocs", IntelOrigin.NETWORK, 2),
            ("malicious-packages", IntelOrigin.NETWORK, 2),
        ]

    def test_defaults_to_bundled_snapshot(self, settings: Settings) -> None:
        loader = IntelLoader(settings=settings.model_copy(update={"fallback_dir": None}))
        assert (loader.fallback_dir / "wiz-iocs.csv").is_file()


# ---------------------------------------------------------------------------
# Snapshot updater
# ---------------------------------------------------------------------------


class TestUpdateFallbacks:
    @respx.mock
    async def test_writes_snapshots_and_clears_cache(
        self, loader: IntelLoader, settings: Settings, cache: IntelCache
    ) -> None:
        _mock_feeds(settings, httpx.Response(200, text=NETWORK_CSV))
        await cache.store_feed("wiz-iocs", settings.csv_feed_url, "Package\nold\n")

        results = await loader.update_fallbacks()
        assert results == {"wiz-iocs": None, "malicious-packages": None}
        assert (settings.fallback_dir / "wiz-iocs.csv").read_text(encoding="utf-8") == NETWORK_CSV
        assert await cache.size() == 0

    @respx.mock
    async def test_failed_download_keeps_old_snapshot(
        self, loader: IntelLoader, settings: Settings
    ) -> None:
        before = (settings.fallback_dir / "wiz-iocs.csv").read_text(encoding="utf-8")
        _mock_feeds(
            settings,
            httpx.Response(502),
            httpx.Response(200, text="not json at all"),
        )
        results = await loader.update_fallbacks()
        assert results["wiz-iocs"] is not None
        assert results["malicious-packages"] is not None
        assert (settings.fallback_dir / "wiz-iocs.csv").read_text(encoding="utf-8") == before
