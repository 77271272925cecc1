# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan result models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field, computed_field

from sandworm.core.constants import SEVERITY_WEIGHTS, IntelOrigin, Severity
from sandworm.models.finding import Finding
from sandworm.models.root import ScanRoot


class FeedStatus(BaseModel):
    """Where one feed's data came from during this run."""

    feed: str
    origin: IntelOrigin
    entry_count: int = 0
    error: str | None = None


class ScanResult(BaseModel):
    """Complete result of one scan run."""

    scan_id: str
    target: str
    full_scan: bool = False
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    duration_ms: int | None = None
    roots: list[ScanRoot] = Field(default_factory=list)
    intel: list[FeedStatus] = Field(default_factory=list)
    ioc_count: int = 0
    findings: list[Finding] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def highest_severity(self) -> Severity | None:
        if not self.findings:
            return None
        return max(self.findings, key=lambda f: SEVERITY_WEIGHTS[f.severity]).severity

    @computed_field  # type: ignore[prop-decorator]
    @property
    def finding_count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for f in self.findings:
            counts[f.severity] = counts.get(f.severity, 0) + 1
        return counts
