# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat-intel ingestion: feed sources, parsers, loader and index."""

from sandworm.intel.index import IOCIndex
from sandworm.intel.loader import IntelLoader, LoadedFeed

__all__ = ["IOCIndex", "IntelLoader", "LoadedFeed"]
