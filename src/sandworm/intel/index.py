# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unified, read-only lookup over every loaded threat-intel feed."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from sandworm.models.ioc import IOCEntry


class IOCIndex:
    """Name-keyed IOC lookup built by merging feed entry maps.

    Lookups are exact, case-sensitive and scope-inclusive: ``@babel/foo``
    and ``foo`` are unrelated names.  Built once per run, never mutated.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, IOCEntry] | None = None) -> None:
        self._entries: dict[str, IOCEntry] = dict(entries or {})

    @classmethod
    def build(cls, *entry_maps: Mapping[str, IOCEntry]) -> IOCIndex:
        """Merge feeds into one index; a wildcard in any feed wins."""
        merged: dict[str, IOCEntry] = {}
        for entries in entry_maps:
            for name, entry in entries.items():
                existing = merged.get(name)
                merged[name] = entry if existing is None else existing.merge(entry)
        return cls(merged)

    def get(self, name: str) -> IOCEntry | None:
        return self._entries.get(name)

    def is_tracked(self, name: str) -> bool:
        return name in self._entries

    def names(self) -> list[str]:
        return sorted(self._entries)

    @property
    def wildcard_count(self) -> int:
        return sum(1 for e in self._entries.values() if e.is_wildcard)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IOCEntry]:
        return iter(self._entries.values())
