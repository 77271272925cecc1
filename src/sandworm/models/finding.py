# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat finding models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from sandworm.core.constants import FINDING_SEVERITY, FindingType, Severity


class Finding(BaseModel):
    """A single detected indicator, immutable once created."""

    model_config = ConfigDict(frozen=True)

    finding_type: FindingType = Field(serialization_alias="type")
    package_name: str
    version: str | None = None
    path: str
    root_label: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def severity(self) -> Severity:
        return FINDING_SEVERITY[self.finding_type]

    @property
    def dedup_key(self) -> tuple[str, str | None, str, FindingType]:
        return (self.package_name, self.version, self.path, self.finding_type)
