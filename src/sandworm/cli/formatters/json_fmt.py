# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""JSON output formatter."""

from __future__ import annotations

from sandworm.models.scan import ScanResult


def format_json(result: ScanResult) -> str:
    """Return scan result as formatted JSON string, findings keyed by ``type``."""
    return result.model_dump_json(indent=2, by_alias=True)
