# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for sandworm."""


class SandwormError(Exception):
    """Base exception for all sandworm errors."""


class ConfigurationError(SandwormError):
    """Invalid configuration, or no scan root could be resolved."""


class FetchError(SandwormError):
    """Failed to fetch a threat-intel feed."""


class FeedParseError(SandwormError):
    """A threat-intel feed body does not have the expected shape."""


class UploadError(SandwormError):
    """Failed to deliver a findings report."""
