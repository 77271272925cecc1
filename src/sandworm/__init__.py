# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""sandworm - Forensic detector for npm supply-chain compromise."""

__version__ = "0.1.0"

from sandworm.core.exceptions import ConfigurationError, SandwormError
from sandworm.models.finding import Finding
from sandworm.models.scan import ScanResult
from sandworm.sdk import scan, scan_sync

__all__ = [
    "ConfigurationError",
    "Finding",
    "SandwormError",
    "ScanResult",
    "__version__",
    "scan",
    "scan_sync",
]
