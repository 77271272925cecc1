# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, severity weights, feed locations and fixed IOC names."""

from enum import StrEnum


class Severity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    WARNING = "warning"
    INFO = "info"


class FindingType(StrEnum):
    FORENSIC_MATCH = "FORENSIC_MATCH"
    WILDCARD_MATCH = "WILDCARD_MATCH"
    WILDCARD_LOCK_HIT = "WILDCARD_LOCK_HIT"
    VERSION_MATCH = "VERSION_MATCH"
    LOCKFILE_HIT = "LOCKFILE_HIT"
    SAFE_MATCH = "SAFE_MATCH"
    GHOST_PACKAGE = "GHOST_PACKAGE"


class MatchKind(StrEnum):
    WILDCARD = "wildcard"
    VERSION_SET = "version_set"


class OriginKind(StrEnum):
    INSTALLED_DIR = "installed_dir"
    LOCKFILE_ENTRY = "lockfile_entry"


class RootKind(StrEnum):
    PROJECT = "project"
    NPM_CACHE = "npm_cache"
    YARN_CACHE = "yarn_cache"
    PNPM_CACHE = "pnpm_cache"
    NVM_VERSION = "nvm_version"


class IntelOrigin(StrEnum):
    CACHE = "cache"
    NETWORK = "network"
    OFFLINE = "offline"


FINDING_SEVERITY: dict[FindingType, Severity] = {
    FindingType.FORENSIC_MATCH: Severity.CRITICAL,
    FindingType.WILDCARD_MATCH: Severity.CRITICAL,
    FindingType.WILDCARD_LOCK_HIT: Severity.HIGH,
    FindingType.VERSION_MATCH: Severity.HIGH,
    FindingType.LOCKFILE_HIT: Severity.HIGH,
    FindingType.SAFE_MATCH: Severity.INFO,
    FindingType.GHOST_PACKAGE: Severity.WARNING,
}

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 100,
    Severity.HIGH: 75,
    Severity.WARNING: 40,
    Severity.INFO: 0,
}

# Physical filenames dropped by the Shai-Hulud payloads.
FORENSIC_FILENAMES: frozenset[str] = frozenset(
    {
        "setup_bun.js",
        "bun_environment.js",
        "truffleSecrets.json",
        "cloud.json",
        "contents.json",
        "environment.json",
        "actionsSecrets.json",
    }
)

YARN_LOCK = "yarn.lock"
NPM_LOCK = "package-lock.json"
NPM_SHRINKWRAP = "npm-shrinkwrap.json"
PNPM_LOCK = "pnpm-lock.yaml"

LOCKFILE_NAMES: frozenset[str] = frozenset({YARN_LOCK, NPM_LOCK, NPM_SHRINKWRAP, PNPM_LOCK})

MANIFEST_NAME = "package.json"
INSTALL_DIR_NAME = "node_modules"

CSV_FEED_NAME = "wiz-iocs"
JSON_FEED_NAME = "malicious-packages"

DEFAULT_CSV_FEED_URL = (
    "https://raw.githubusercontent.com/wiz-sec-public/wiz-research-iocs/"
    "main/reports/shai-hulud-2-packages.csv"
)
DEFAULT_JSON_FEED_URL = (
    "https://raw.githubusercontent.com/hemachandsai/shai-hulud-malicious-packages/"
    "main/malicious_npm_packages.json"
)

FALLBACK_CSV_FILE = "wiz-iocs.csv"
FALLBACK_JSON_FILE = "malicious-packages.json"

CACHE_TTL_SECONDS = 30 * 60
FETCH_TIMEOUT_SECONDS = 30.0
