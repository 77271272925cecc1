# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan-root discovery and package-tree traversal."""

from sandworm.discovery.locator import FileSystemLocator
from sandworm.discovery.walker import PackageWalker

__all__ = ["FileSystemLocator", "PackageWalker"]
