# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for finding classification, deduplication and ordering."""

from __future__ import annotations

import pytest

from sandworm.core.constants import FindingType, OriginKind, Severity
from sandworm.detection.classifier import Classifier, FindingCollector
from sandworm.intel.index import IOCIndex
from sandworm.models.finding import Finding
from sandworm.models.ioc import IOCEntry
from sandworm.models.package import DiscoveredPackage, GhostCandidate, ObservedFile

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _index() -> IOCIndex:
    return IOCIndex.build(
        {
            "syntax-class-properties": IOCEntry.wildcard("syntax-class-properties"),
            "@ctrl/tinycolor": IOCEntry.wildcard("@ctrl/tinycolor"),
        },
        {"chalk": IOCEntry.for_versions("chalk", {"5.6.1"})},
    )


def _pkg(name: str, version: str | None, origin: OriginKind, path: str = "/p") -> DiscoveredPackage:
    return DiscoveredPackage(
        name=name, version=version, origin_kind=origin, path=path, root_label="project"
    )


def _finding(finding_type: FindingType, name: str = "x", path: str = "/p", version: str | None = None) -> Finding:
    return Finding(
        finding_type=finding_type,
        package_name=name,
        version=version,
        path=path,
        root_label="project",
    )


@pytest.fixture
def classifier() -> Classifier:
    return Classifier(_index())


# ---------------------------------------------------------------------------
# Classification table
# ---------------------------------------------------------------------------


class TestClassifyPackage:
    @pytest.mark.parametrize(
        ("name", "version", "origin", "expected", "severity"),
        [
            ("@ctrl/tinycolor", "4.1.1", OriginKind.INSTALLED_DIR, FindingType.WILDCARD_MATCH, Severity.CRITICAL),
            ("@ctrl/tinycolor", "0.0.1", OriginKind.LOCKFILE_ENTRY, FindingType.WILDCARD_LOCK_HIT, Severity.HIGH),
            ("chalk", "5.6.1", OriginKind.INSTALLED_DIR, FindingType.VERSION_MATCH, Severity.HIGH),
            ("chalk", "5.6.1", OriginKind.LOCKFILE_ENTRY, FindingType.LOCKFILE_HIT, Severity.HIGH),
            ("chalk", "5.6.0", OriginKind.INSTALLED_DIR, FindingType.SAFE_MATCH, Severity.INFO),
            ("chalk", "5.6.0", OriginKind.LOCKFILE_ENTRY, FindingType.SAFE_MATCH, Severity.INFO),
        ],
    )
    def test_table(self, classifier, name, version, origin, expected, severity) -> None:
        finding = classifier.classify_package(_pkg(name, version, origin))
        assert finding is not None
        assert finding.finding_type == expected
        assert finding.severity == severity
        assert finding.package_name == name
        assert finding.version == version

    @pytest.mark.parametrize(
        "name",
        [
            "@babel/plugin-syntax-class-properties",
            "@babel/core",
            "Chalk",
            "tinycolor",
            "syntax-class",
        ],
    )
    def test_no_partial_matches(self, classifier: Classifier, name: str) -> None:
        assert classifier.classify_package(_pkg(name, "1.0.0", OriginKind.INSTALLED_DIR)) is None


class TestClassifyGhostAndFile:
    def test_tracked_ghost(self, classifier: Classifier) -> None:
        ghost = GhostCandidate(name="@ctrl/tinycolor", path="/nm/@ctrl/tinycolor", root_label="project")
        finding = classifier.classify_ghost(ghost)
        assert finding.finding_type == FindingType.GHOST_PACKAGE
        assert finding.severity == Severity.WARNING
        assert finding.version is None

    def test_untracked_ghost(self, classifier: Classifier) -> None:
        ghost = GhostCandidate(name="left-pad", path="/nm/left-pad", root_label="project")
        assert classifier.classify_ghost(ghost) is None

    @pytest.mark.parametrize(
        "filename",
        [
            "setup_bun.js",
            "bun_environment.js",
            "truffleSecrets.json",
            "cloud.json",
            "contents.json",
            "environment.json",
            "actionsSecrets.json",
        ],
    )
    def test_forensic_names(self, classifier: Classifier, filename: str) -> None:
        observed = ObservedFile(name=filename, path=f"/p/{filename}", root_label="project")
        finding = classifier.classify_file(observed)
        assert finding.finding_type == FindingType.FORENSIC_MATCH
        assert finding.severity == Severity.CRITICAL
        assert finding.package_name == filename

    @pytest.mark.parametrize("filename", ["Setup_Bun.js", "setup_bun.js.bak", "cloud.yaml"])
    def test_forensic_names_are_exact(self, classifier: Classifier, filename: str) -> None:
        observed = ObservedFile(name=filename, path=f"/p/{filename}", root_label="project")
        assert classifier.classify_file(observed) is None

    def test_extra_forensic_names(self) -> None:
        classifier = Classifier(_index(), {"payload.sh"})
        assert classifier.is_forensic_name("payload.sh")
        assert not classifier.is_forensic_name("setup_bun.js")

    def test_classify_dispatches(self, classifier: Classifier) -> None:
        assert classifier.classify(_pkg("chalk", "5.6.1", OriginKind.INSTALLED_DIR)).finding_type == (
            FindingType.VERSION_MATCH
        )
        observed = ObservedFile(name="cloud.json", path="/p/cloud.json", root_label="project")
        assert classifier.classify(observed).finding_type == FindingType.FORENSIC_MATCH


# ---------------------------------------------------------------------------
# FindingCollector
# ---------------------------------------------------------------------------


class TestFindingCollector:
    def test_dedup_by_key(self) -> None:
        collector = FindingCollector()
        assert collector.add(_finding(FindingType.LOCKFILE_HIT, "chalk", "/yarn.lock", "5.6.1")) is True
        assert collector.add(_finding(FindingType.LOCKFILE_HIT, "chalk", "/yarn.lock", "5.6.1")) is False
        assert collector.add(_finding(FindingType.LOCKFILE_HIT, "chalk", "/other/yarn.lock", "5.6.1")) is True
        assert len(collector) == 2

    def test_none_ignored(self) -> None:
        collector = FindingCollector()
        assert collector.add(None) is False
        assert len(collector) == 0

    def test_ghost_suppressed_after_package_finding(self) -> None:
        collector = FindingCollector()
        collector.add(_finding(FindingType.WILDCARD_MATCH, "evil", "/nm/evil", "1.0.0"))
        assert collector.add(_finding(FindingType.GHOST_PACKAGE, "evil", "/nm/evil")) is False
        assert [f.finding_type for f in collector] == [FindingType.WILDCARD_MATCH]

    def test_ghost_replaced_by_later_package_finding(self) -> None:
        collector = FindingCollector()
        collector.add(_finding(FindingType.GHOST_PACKAGE, "evil", "/nm/evil"))
        collector.add(_finding(FindingType.WILDCARD_MATCH, "evil", "/nm/evil", "1.0.0"))
        assert [f.finding_type for f in collector] == [FindingType.WILDCARD_MATCH]

    def test_ghost_kept_at_other_path(self) -> None:
        collector = FindingCollector()
        collector.add(_finding(FindingType.WILDCARD_MATCH, "evil", "/a/evil", "1.0.0"))
        assert collector.add(_finding(FindingType.GHOST_PACKAGE, "evil", "/b/evil")) is True

    def test_ordered_by_severity_then_discovery(self) -> None:
        collector = FindingCollector()
        collector.extend(
            [
                _finding(FindingType.SAFE_MATCH, "a"),
                _finding(FindingType.LOCKFILE_HIT, "b"),
                _finding(FindingType.GHOST_PACKAGE, "c", "/ghost"),
                _finding(FindingType.FORENSIC_MATCH, "d"),
                _finding(FindingType.VERSION_MATCH, "e"),
                _finding(FindingType.WILDCARD_MATCH, "f"),
            ]
        )
        assert [f.package_name for f in collector.ordered()] == ["d", "f", "b", "e", "c", "a"]

    def test_extend_counts_new(self) -> None:
        collector = FindingCollector()
        f = _finding(FindingType.FORENSIC_MATCH, "cloud.json")
        assert collector.extend([f, f, None]) == 1

    def test_iterates_in_discovery_order(self) -> None:
        collector = FindingCollector()
        collector.add(_finding(FindingType.SAFE_MATCH, "a"))
        collector.add(_finding(FindingType.FORENSIC_MATCH, "b"))
        assert [f.package_name for f in collector] == ["a", "b"]
