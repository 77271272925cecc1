# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Process exit codes for the ``sandworm`` command.

Exit codes:
    0   - scan completed (with or without findings)
    1   - generic failure of a maintenance command
    2   - no scan root could be resolved
    130 - interrupted (Ctrl-C)
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes used by the sandworm CLI."""

    OK = 0
    FAILURE = 1
    CONFIGURATION_ERROR = 2
    INTERRUPTED = 130
