# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan root model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from sandworm.core.constants import RootKind


class ScanRoot(BaseModel):
    """One labeled directory tree to walk."""

    model_config = ConfigDict(frozen=True)

    path: Path
    kind: RootKind
    label: str
