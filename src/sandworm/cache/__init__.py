# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat-intel feed caching layer."""

from sandworm.cache.manager import IntelCache, create_intel_cache

__all__ = ["IntelCache", "create_intel_cache"]
