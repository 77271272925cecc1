# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan pipeline orchestrator: intel -> roots -> traversal -> classification."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import UTC, datetime
from pathlib import Path

from sandworm.cache.manager import IntelCache, create_intel_cache
from sandworm.core.config import Settings, get_settings
from sandworm.core.constants import FORENSIC_FILENAMES, LOCKFILE_NAMES
from sandworm.detection.classifier import Classifier, FindingCollector
from sandworm.discovery.locator import FileSystemLocator
from sandworm.discovery.walker import PackageWalker
from sandworm.intel.index import IOCIndex
from sandworm.intel.loader import IntelLoader
from sandworm.lockfiles.parser import parse_lockfile
from sandworm.models.package import ObservedFile
from sandworm.models.root import ScanRoot
from sandworm.models.scan import ScanResult

logger = logging.getLogger("sandworm.scanner.pipeline")


class ScanPipeline:
    """Runs one complete scan.

    The IOC index is built once per run (both feeds fetched concurrently),
    then every root is walked in turn.  Installed packages, ghosts,
    forensic filenames and lockfile entries found outside install trees
    all go through the same :class:`Classifier` into one
    :class:`FindingCollector`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        cache: IntelCache | None = None,
        loader: IntelLoader | None = None,
        locator: FileSystemLocator | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        if loader is None:
            loader = IntelLoader(
                cache=cache or create_intel_cache(self._settings),
                settings=self._settings,
            )
        self._loader = loader
        self._locator = locator or FileSystemLocator(self._settings)
        self._forensic_names = FORENSIC_FILENAMES | frozenset(self._settings.forensic_filenames)

    @property
    def loader(self) -> IntelLoader:
        return self._loader

    @property
    def locator(self) -> FileSystemLocator:
        return self._locator

    async def run(
        self,
        target: str | Path = ".",
        *,
        full_scan: bool = False,
        no_cache: bool | None = None,
    ) -> ScanResult:
        """Scan *target* (and, with *full_scan*, the machine-wide roots).

        Raises:
            ConfigurationError: If no scan root can be resolved.
        """
        if no_cache is None:
            no_cache = self._settings.no_cache

        scan_id = uuid.uuid4().hex[:12]
        result = ScanResult(scan_id=scan_id, target=str(target), full_scan=full_scan)
        start_time = time.monotonic()

        roots = self._locator.locate(target, full_scan=full_scan)
        result.roots = roots

        index, statuses = await self._loader.build_index(no_cache=no_cache)
        result.intel = statuses
        result.ioc_count = len(index)
        for status in statuses:
            # A snapshot fallback stays on the feed status; an empty feed is a scan error
            if status.error and not status.entry_count:
                result.errors.append(f"{status.feed}: {status.error}")

        collector, errors = await asyncio.to_thread(self.scan_roots, roots, index)
        result.errors.extend(errors)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        result.findings = collector.ordered()
        result.completed_at = datetime.now(UTC)
        result.duration_ms = elapsed_ms

        logger.info(
            "Scan %s complete: roots=%d iocs=%d findings=%d duration=%dms",
            scan_id,
            len(roots),
            len(index),
            len(result.findings),
            elapsed_ms,
        )
        return result

    def scan_roots(
        self, roots: list[ScanRoot], index: IOCIndex
    ) -> tuple[FindingCollector, list[str]]:
        """Walk every root against *index*; returns the findings and non-fatal errors."""
        classifier = Classifier(index, self._forensic_names)
        collector = FindingCollector()
        errors: list[str] = []

        for root in roots:
            walker = PackageWalker()
            logger.info("Walking %s (%s)", root.path, root.label)
            for event in walker.walk(
                root,
                is_tracked=index.is_tracked,
                want_file=self._want_file,
            ):
                if isinstance(event, ObservedFile) and event.name in LOCKFILE_NAMES:
                    if not event.in_install_tree:
                        for package in parse_lockfile(event.path, event.root_label):
                            collector.add(classifier.classify_package(package))
                    continue
                collector.add(classifier.classify(event))

            logger.debug(
                "Root %s: %d directories visited, %d skipped",
                root.label,
                walker.visited,
                walker.skipped,
            )
            if walker.skipped:
                errors.append(f"{root.label}: {walker.skipped} unreadable directories skipped")

        return collector, errors

    def _want_file(self, filename: str) -> bool:
        return filename in self._forensic_names or filename in LOCKFILE_NAMES
