# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Extract ``(name, version)`` pairs from dependency lockfiles.

``yarn.lock`` is read line by line with a two-state machine; the npm and
pnpm formats are structured documents and are read from their package
maps.  Malformed input is skipped, never raised.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from sandworm.core.constants import NPM_LOCK, NPM_SHRINKWRAP, PNPM_LOCK, YARN_LOCK, OriginKind
from sandworm.models.package import DiscoveredPackage

logger = logging.getLogger("sandworm.lockfiles.parser")

_VERSION_LINE_RE = re.compile(r'^version:?\s+"?([^"\s]+)"?\s*$')
_NODE_MODULES_SEGMENT = "node_modules/"
# pnpm v5 keys: name/1.2.3 or @scope/name/1.2.3_peer@1.0.0
_PNPM_V5_KEY_RE = re.compile(r"^(@[^/]+/[^/@]+|[^@/][^/@]*)/(\d[^/_(]*)(?:[_(].*)?$")


# ---------------------------------------------------------------------------
# yarn.lock
# ---------------------------------------------------------------------------


class _YarnState(Enum):
    AWAITING_HEADER = "awaiting_header"
    AWAITING_VERSION = "awaiting_version"


def split_spec(spec: str) -> tuple[str, str] | None:
    """Split ``name@range`` into its parts, keeping a leading ``@scope``.

    ``@scope/name@^1.0.0`` -> ``("@scope/name", "^1.0.0")``;
    ``name@npm:other@^1`` -> ``("name", "npm:other@^1")``.
    """
    start = 1 if spec.startswith("@") else 0
    at = spec.find("@", start)
    if at <= start:
        return None
    return spec[:at], spec[at + 1 :]


def header_package_name(line: str) -> str | None:
    """Return the package name declared by a yarn.lock stanza header.

    A header is unindented, contains ``@`` and ends with ``:``.  Only the
    first of several comma-separated specifiers is considered.
    """
    stripped = line.rstrip()
    if not stripped or stripped[0].isspace() or stripped.startswith("#"):
        return None
    if "@" not in stripped or not stripped.endswith(":"):
        return None

    first = stripped[:-1].split(",", 1)[0].strip().strip('"').strip("'")
    parts = split_spec(first)
    return parts[0] if parts else None


def iter_yarn_lock(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(name, version)`` for every stanza in yarn.lock text.

    The first ``version`` line after a header binds that header; further
    version lines before the next header are ignored.
    """
    state = _YarnState.AWAITING_HEADER
    current: str | None = None

    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        if not line[0].isspace():
            name = header_package_name(line)
            if name is not None:
                current = name
                state = _YarnState.AWAITING_VERSION
            else:
                current = None
                state = _YarnState.AWAITING_HEADER
            continue

        if state is _YarnState.AWAITING_VERSION and current is not None:
            match = _VERSION_LINE_RE.match(line.strip())
            if match:
                yield current, match.group(1)
                current = None
                state = _YarnState.AWAITING_HEADER


# ---------------------------------------------------------------------------
# package-lock.json / npm-shrinkwrap.json
# ---------------------------------------------------------------------------


def _npm_alias(name: str, version: str) -> tuple[str, str]:
    """Resolve ``npm:real@1.2.3`` alias versions to the real package."""
    if version.startswith("npm:"):
        parts = split_spec(version[len("npm:") :])
        if parts:
            return parts
    return name, version


def iter_npm_lock(data: Mapping[str, Any]) -> Iterator[tuple[str, str]]:
    """Yield ``(name, version)`` pairs from a parsed npm lockfile.

    Uses the ``packages`` map (lockfileVersion 2/3) when present, else the
    nested ``dependencies`` tree of lockfileVersion 1.
    """
    packages = data.get("packages")
    if isinstance(packages, Mapping):
        for key, entry in packages.items():
            if not key or not isinstance(entry, Mapping):
                continue
            version = entry.get("version")
            if not isinstance(version, str) or not version:
                continue
            declared = entry.get("name")
            if isinstance(declared, str) and declared:
                name = declared
            elif _NODE_MODULES_SEGMENT in key:
                name = key.rsplit(_NODE_MODULES_SEGMENT, 1)[1]
            else:
                continue
            if name:
                yield _npm_alias(name, version)
        return

    dependencies = data.get("dependencies")
    stack: list[Mapping[str, Any]] = [dependencies] if isinstance(dependencies, Mapping) else []
    while stack:
        deps = stack.pop()
        for name, entry in deps.items():
            if not isinstance(name, str) or not isinstance(entry, Mapping):
                continue
            version = entry.get("version")
            if isinstance(version, str) and version:
                yield _npm_alias(name, version)
            nested = entry.get("dependencies")
            if isinstance(nested, Mapping):
                stack.append(nested)


# ---------------------------------------------------------------------------
# pnpm-lock.yaml
# ---------------------------------------------------------------------------


def _pnpm_key(key: str) -> tuple[str, str] | None:
    """Decode a pnpm ``packages`` key in the v5, v6 or v9 form."""
    spec = key[1:] if key.startswith("/") else key
    legacy = _PNPM_V5_KEY_RE.match(spec)
    if legacy:
        return legacy.group(1), legacy.group(2)
    return split_spec(spec.split("(", 1)[0])


def iter_pnpm_lock(data: Mapping[str, Any]) -> Iterator[tuple[str, str]]:
    """Yield ``(name, version)`` pairs from a parsed pnpm lockfile."""
    packages = data.get("packages")
    if not isinstance(packages, Mapping):
        return
    for key, entry in packages.items():
        if isinstance(entry, Mapping):
            name, version = entry.get("name"), entry.get("version")
            if isinstance(name, str) and isinstance(version, str) and name and version:
                yield name, version
                continue
        if not isinstance(key, str):
            continue
        parsed = _pnpm_key(key)
        if parsed is not None:
            yield parsed


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _pairs_for(path: Path, text: str) -> Iterator[tuple[str, str]]:
    name = path.name
    if name == YARN_LOCK:
        yield from iter_yarn_lock(text.splitlines())
    elif name in (NPM_LOCK, NPM_SHRINKWRAP):
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as exc:
            logger.debug("Skipping malformed %s: %s", path, exc)
            return
        if isinstance(data, Mapping):
            yield from iter_npm_lock(data)
    elif name == PNPM_LOCK:
        try:
            data = yaml.safe_load(text)
        except (yaml.YAMLError, RecursionError) as exc:
            logger.debug("Skipping malformed %s: %s", path, exc)
            return
        if isinstance(data, Mapping):
            yield from iter_pnpm_lock(data)


def parse_lockfile(path: str | Path, root_label: str) -> Iterator[DiscoveredPackage]:
    """Yield one :class:`DiscoveredPackage` per distinct pinned package.

    Unknown filenames, unreadable files and malformed content produce
    nothing.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.debug("Skipping unreadable lockfile %s: %s", path, exc)
        return

    seen: set[tuple[str, str]] = set()
    for name, version in _pairs_for(path, text):
        if (name, version) in seen:
            continue
        seen.add((name, version))
        yield DiscoveredPackage(
            name=name,
            version=version,
            origin_kind=OriginKind.LOCKFILE_ENTRY,
            path=str(path),
            root_label=root_label,
        )
