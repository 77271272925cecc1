# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain models for sandworm."""

from sandworm.models.finding import Finding
from sandworm.models.ioc import IOCEntry
from sandworm.models.package import DiscoveredPackage, GhostCandidate, ObservedFile
from sandworm.models.root import ScanRoot
from sandworm.models.scan import FeedStatus, ScanResult

__all__ = [
    "DiscoveredPackage",
    "FeedStatus",
    "Finding",
    "GhostCandidate",
    "IOCEntry",
    "ObservedFile",
    "ScanResult",
    "ScanRoot",
]
