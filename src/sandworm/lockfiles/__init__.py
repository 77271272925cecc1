# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Lockfile parsing."""

from sandworm.lockfiles.parser import (
    header_package_name,
    iter_npm_lock,
    iter_pnpm_lock,
    iter_yarn_lock,
    parse_lockfile,
)

__all__ = [
    "header_package_name",
    "iter_npm_lock",
    "iter_pnpm_lock",
    "iter_yarn_lock",
    "parse_lockfile",
]
