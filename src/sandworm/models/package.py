# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Transient entities produced by discovery and lockfile parsing."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from sandworm.core.constants import OriginKind


class DiscoveredPackage(BaseModel):
    """A package seen on disk or pinned in a lockfile."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str | None = None
    origin_kind: OriginKind
    path: str
    root_label: str


class GhostCandidate(BaseModel):
    """A directory named like a tracked package but without readable metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    root_label: str


class ObservedFile(BaseModel):
    """A file seen during traversal, offered to the forensic-artifact check."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    root_label: str
    in_install_tree: bool = False
