# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Indicator-of-compromise records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from sandworm.core.constants import MatchKind


class IOCEntry(BaseModel):
    """One package name flagged by a threat-intel feed."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Package name, scope included, e.g. @scope/pkg")
    match_kind: MatchKind
    versions: frozenset[str] = frozenset()
    sources: frozenset[str] = frozenset()

    @property
    def is_wildcard(self) -> bool:
        return self.match_kind == MatchKind.WILDCARD

    def matches(self, version: str | None) -> bool:
        """Return ``True`` if *version* is flagged by this entry.

        Wildcard entries flag every version, including an unknown one.
        Version-keyed entries only flag versions literally in the set.
        """
        if self.is_wildcard:
            return True
        return version is not None and version in self.versions

    def merge(self, other: IOCEntry) -> IOCEntry:
        """Combine two entries for the same name; wildcard wins."""
        sources = self.sources | other.sources
        if self.is_wildcard or other.is_wildcard:
            return IOCEntry(name=self.name, match_kind=MatchKind.WILDCARD, sources=sources)
        return IOCEntry(
            name=self.name,
            match_kind=MatchKind.VERSION_SET,
            versions=self.versions | other.versions,
            sources=sources,
        )

    @classmethod
    def wildcard(cls, name: str, source: str = "") -> IOCEntry:
        return cls(
            name=name,
            match_kind=MatchKind.WILDCARD,
            sources=frozenset({source}) if source else frozenset(),
        )

    @classmethod
    def for_versions(cls, name: str, versions: set[str] | frozenset[str], source: str = "") -> IOCEntry:
        return cls(
            name=name,
            match_kind=MatchKind.VERSION_SET,
            versions=frozenset(versions),
            sources=frozenset({source}) if source else frozenset(),
        )
