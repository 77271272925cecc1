# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Match discovered packages, ghosts and filenames against the IOC index."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from sandworm.core.constants import (
    FORENSIC_FILENAMES,
    SEVERITY_WEIGHTS,
    FindingType,
    OriginKind,
)
from sandworm.intel.index import IOCIndex
from sandworm.models.finding import Finding
from sandworm.models.package import DiscoveredPackage, GhostCandidate, ObservedFile

logger = logging.getLogger("sandworm.detection.classifier")

_PACKAGE_TYPES = frozenset(
    {
        FindingType.WILDCARD_MATCH,
        FindingType.WILDCARD_LOCK_HIT,
        FindingType.VERSION_MATCH,
        FindingType.LOCKFILE_HIT,
        FindingType.SAFE_MATCH,
    }
)


class Classifier:
    """Turn discovered entities into findings.

    Names are compared by exact, case-sensitive equality with the scope
    included, so ``@babel/plugin-syntax-class-properties`` never matches
    an entry for ``syntax-class-properties``.
    """

    def __init__(
        self,
        index: IOCIndex,
        forensic_names: Iterable[str] = FORENSIC_FILENAMES,
    ) -> None:
        self._index = index
        self._forensic_names = frozenset(forensic_names)

    @property
    def forensic_names(self) -> frozenset[str]:
        return self._forensic_names

    def is_forensic_name(self, filename: str) -> bool:
        return filename in self._forensic_names

    def classify_package(self, package: DiscoveredPackage) -> Finding | None:
        entry = self._index.get(package.name)
        if entry is None:
            return None

        installed = package.origin_kind == OriginKind.INSTALLED_DIR
        if entry.is_wildcard:
            finding_type = FindingType.WILDCARD_MATCH if installed else FindingType.WILDCARD_LOCK_HIT
        elif entry.matches(package.version):
            finding_type = FindingType.VERSION_MATCH if installed else FindingType.LOCKFILE_HIT
        else:
            finding_type = FindingType.SAFE_MATCH

        return Finding(
            finding_type=finding_type,
            package_name=package.name,
            version=package.version,
            path=package.path,
            root_label=package.root_label,
        )

    def classify_ghost(self, ghost: GhostCandidate) -> Finding | None:
        if ghost.name not in self._index:
            return None
        return Finding(
            finding_type=FindingType.GHOST_PACKAGE,
            package_name=ghost.name,
            path=ghost.path,
            root_label=ghost.root_label,
        )

    def classify_file(self, observed: ObservedFile) -> Finding | None:
        if observed.name not in self._forensic_names:
            return None
        return Finding(
            finding_type=FindingType.FORENSIC_MATCH,
            package_name=observed.name,
            path=observed.path,
            root_label=observed.root_label,
        )

    def classify(self, entity: DiscoveredPackage | GhostCandidate | ObservedFile) -> Finding | None:
        if isinstance(entity, DiscoveredPackage):
            return self.classify_package(entity)
        if isinstance(entity, GhostCandidate):
            return self.classify_ghost(entity)
        return self.classify_file(entity)


class FindingCollector:
    """Append-only, deduplicated sequence of findings for one run.

    Findings are keyed by (package name, version, path, type).  A ghost
    finding is dropped when the same path already carries a package
    finding, and any ghost already recorded for a path is superseded by a
    later package finding there.
    """

    def __init__(self) -> None:
        self._findings: list[Finding] = []
        self._keys: set[tuple[object, ...]] = set()
        self._package_paths: set[str] = set()
        self._ghost_paths: set[str] = set()

    def add(self, finding: Finding | None) -> bool:
        """Record *finding*; returns ``True`` if it was new."""
        if finding is None:
            return False
        key = finding.dedup_key
        if key in self._keys:
            return False

        if finding.finding_type == FindingType.GHOST_PACKAGE:
            if finding.path in self._package_paths:
                return False
            self._ghost_paths.add(finding.path)
        elif finding.finding_type in _PACKAGE_TYPES:
            self._package_paths.add(finding.path)
            if finding.path in self._ghost_paths:
                self._findings = [
                    f
                    for f in self._findings
                    if not (f.finding_type == FindingType.GHOST_PACKAGE and f.path == finding.path)
                ]
                self._ghost_paths.discard(finding.path)

        self._keys.add(key)
        self._findings.append(finding)
        logger.debug(
            "Finding %s %s@%s at %s", finding.finding_type, finding.package_name, finding.version, finding.path
        )
        return True

    def extend(self, findings: Iterable[Finding | None]) -> int:
        return sum(1 for f in findings if self.add(f))

    def ordered(self) -> list[Finding]:
        """Findings by descending severity, then discovery order."""
        return sorted(self._findings, key=lambda f: -SEVERITY_WEIGHTS[f.severity])

    def __len__(self) -> int:
        return len(self._findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(list(self._findings))
