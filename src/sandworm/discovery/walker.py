# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Traverse one scan root and report installed packages.

The walk uses an explicit stack and a set of visited real paths, so deep
trees cannot exhaust the interpreter stack and symlink cycles (common in
pnpm layouts) are entered only once.  Manifest checks are tracked
separately, so a package linked into `node_modules` from elsewhere in the
root is still reported.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Iterator
from enum import Enum
from pathlib import Path

from sandworm.core.constants import INSTALL_DIR_NAME, MANIFEST_NAME, OriginKind, RootKind
from sandworm.models.package import DiscoveredPackage, GhostCandidate, ObservedFile
from sandworm.models.root import ScanRoot

logger = logging.getLogger("sandworm.discovery.walker")

WalkEvent = DiscoveredPackage | GhostCandidate | ObservedFile

_VCS_DIRS = frozenset({".git", ".hg", ".svn"})
_SKIPPED_INSTALL_ENTRIES = frozenset({".bin"})


class _Mode(Enum):
    DIRECTORY = "directory"
    INSTALL = "install"
    PACKAGE = "package"


def _never(_: str) -> bool:
    return False


def read_manifest(package_dir: Path) -> tuple[str, str] | None:
    """Return ``(name, version)`` from ``package.json``, or ``None`` if unusable."""
    try:
        text = (package_dir / MANIFEST_NAME).read_text(encoding="utf-8")
        data = json.loads(text)
    except (OSError, ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    name = data.get("name")
    version = data.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        return None
    name, version = name.strip(), version.strip()
    if not name or not version:
        return None
    return name, version


class PackageWalker:
    """Walk a :class:`ScanRoot`, yielding packages, ghosts and observed files.

    ``skipped`` counts directories that could not be listed during the
    most recent walk.
    """

    def __init__(self) -> None:
        self.skipped = 0
        self.visited = 0

    def walk(
        self,
        root: ScanRoot,
        is_tracked: Callable[[str], bool] = _never,
        want_file: Callable[[str], bool] = _never,
    ) -> Iterator[WalkEvent]:
        """Yield every event found under *root*.

        Args:
            root: The tree to traverse.
            is_tracked: Returns ``True`` for package names present in the
                IOC index; decides whether a directory without a usable
                manifest is reported as a ghost.
            want_file: Returns ``True`` for filenames that should be
                reported as :class:`ObservedFile` events.
        """
        self.skipped = 0
        self.visited = 0
        label = root.label
        visited: set[str] = set()
        checked: set[str] = set()

        start_mode = _Mode.DIRECTORY
        if root.kind == RootKind.NVM_VERSION and root.path.name == INSTALL_DIR_NAME:
            start_mode = _Mode.INSTALL
        stack: list[tuple[Path, _Mode, str, bool]] = [
            (root.path, start_mode, "", start_mode is _Mode.INSTALL)
        ]

        while stack:
            path, mode, package_name, in_install = stack.pop()

            try:
                real = os.path.realpath(path)
            except OSError:
                self.skipped += 1
                continue
            # A package reached through a link may already have been walked
            # as a plain directory; it still needs its manifest check.
            if mode is _Mode.PACKAGE and real not in checked:
                checked.add(real)
                manifest = read_manifest(path)
                if manifest is not None:
                    name, version = manifest
                    yield DiscoveredPackage(
                        name=name,
                        version=version,
                        origin_kind=OriginKind.INSTALLED_DIR,
                        path=str(path),
                        root_label=label,
                    )
                elif is_tracked(package_name):
                    yield GhostCandidate(name=package_name, path=str(path), root_label=label)

            if real in visited:
                continue
            visited.add(real)

            try:
                dirs, files = _list_dir(path)
            except OSError as exc:
                logger.debug("Skipping unreadable directory %s: %s", path, exc)
                self.skipped += 1
                continue
            self.visited += 1

            for filename in files:
                if want_file(filename):
                    yield ObservedFile(
                        name=filename,
                        path=str(path / filename),
                        root_label=label,
                        in_install_tree=in_install,
                    )

            children: list[tuple[Path, _Mode, str, bool]] = []
            if mode is _Mode.INSTALL:
                for dirname in dirs:
                    child = path / dirname
                    if dirname in _SKIPPED_INSTALL_ENTRIES:
                        continue
                    if dirname.startswith("@"):
                        children.extend(self._scope_children(child, dirname))
                    elif dirname.startswith("."):
                        # Virtual stores such as .pnpm hold name@version/node_modules trees
                        children.append((child, _Mode.DIRECTORY, "", True))
                    else:
                        children.append((child, _Mode.PACKAGE, dirname, True))
            else:
                for dirname in dirs:
                    if dirname in _VCS_DIRS:
                        continue
                    child = path / dirname
                    if dirname == INSTALL_DIR_NAME:
                        children.append((child, _Mode.INSTALL, "", True))
                    else:
                        children.append((child, _Mode.DIRECTORY, "", in_install))

            stack.extend(reversed(children))

    def _scope_children(
        self, scope_dir: Path, scope: str
    ) -> list[tuple[Path, _Mode, str, bool]]:
        try:
            dirs, _ = _list_dir(scope_dir)
        except OSError as exc:
            logger.debug("Skipping unreadable scope directory %s: %s", scope_dir, exc)
            self.skipped += 1
            return []
        return [(scope_dir / d, _Mode.PACKAGE, f"{scope}/{d}", True) for d in dirs]


def _list_dir(path: Path) -> tuple[list[str], list[str]]:
    """Split a directory's entries into sorted subdirectory and file names.

    Symlinked directories count as directories; broken links are dropped.
    """
    dirs: list[str] = []
    files: list[str] = []
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                if entry.is_dir():
                    dirs.append(entry.name)
                elif entry.is_file():
                    files.append(entry.name)
            except OSError:
                continue
    dirs.sort()
    files.sort()
    return dirs, files
