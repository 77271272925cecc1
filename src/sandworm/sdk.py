# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Public SDK interface for embedding sandworm in other tools.

Usage::

    from sandworm import scan, scan_sync

    # Synchronous (blocking)
    result = scan_sync("path/to/project")
    print(result.highest_severity, len(result.findings))

    # Async, including the package-manager caches and nvm installs
    result = await scan("path/to/project", full_scan=True)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from sandworm.cache.manager import IntelCache
from sandworm.core.config import Settings, get_settings
from sandworm.models.scan import ScanResult
from sandworm.scanner.pipeline import ScanPipeline

logger = logging.getLogger("sandworm.sdk")


def _build_pipeline(
    *,
    settings: Settings | None = None,
    cache: IntelCache | None = None,
) -> ScanPipeline:
    """Construct a scan pipeline.

    Parameters
    ----------
    settings:
        Optional ``Settings`` override; falls back to ``get_settings()``.
    cache:
        Intel cache to share between calls.  Defaults to a fresh in-memory
        cache, so SDK callers never touch the on-disk cache implicitly.
    """
    settings = settings or get_settings()
    return ScanPipeline(settings=settings, cache=cache or IntelCache(ttl=settings.cache_ttl))


# ---------------------------------------------------------------------------
# Public async API
# ---------------------------------------------------------------------------


async def scan(
    target: str | Path = ".",
    *,
    full_scan: bool = False,
    no_cache: bool = False,
    settings: Settings | None = None,
    cache: IntelCache | None = None,
) -> ScanResult:
    """Scan a project directory and return a :class:`ScanResult`.

    Parameters
    ----------
    target:
        Project directory to scan.
    full_scan:
        Also scan the npm, yarn and pnpm caches and every nvm-installed
        Node version.
    no_cache:
        Skip cached threat intel and fetch both feeds again.
    settings:
        Optional ``Settings`` override.
    cache:
        Optional intel cache, e.g. one shared across repeated scans.

    Raises
    ------
    ConfigurationError
        If no scan root can be resolved.
    """
    pipeline = _build_pipeline(settings=settings, cache=cache)
    logger.debug("SDK scan of %s (full_scan=%s)", target, full_scan)
    return await pipeline.run(target, full_scan=full_scan, no_cache=no_cache)


# ---------------------------------------------------------------------------
# Synchronous wrappers
# ---------------------------------------------------------------------------


def scan_sync(
    target: str | Path = ".",
    *,
    full_scan: bool = False,
    no_cache: bool = False,
    settings: Settings | None = None,
    cache: IntelCache | None = None,
) -> ScanResult:
    """Blocking wrapper around :func:`scan`."""
    return asyncio.run(
        scan(target, full_scan=full_scan, no_cache=no_cache, settings=settings, cache=cache)
    )
