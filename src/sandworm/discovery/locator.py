# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerate the directory trees a scan should walk.

The project directory is always a root.  A full scan adds the package
manager caches and one root per Node version installed through nvm, each
with its own label so findings can be traced to a specific Node install.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from sandworm.core.config import Settings, get_settings
from sandworm.core.constants import INSTALL_DIR_NAME, RootKind
from sandworm.core.exceptions import ConfigurationError
from sandworm.models.root import ScanRoot

logger = logging.getLogger("sandworm.discovery.locator")


class FileSystemLocator:
    """Resolve :class:`ScanRoot` objects for a project and, optionally, the machine.

    Args:
        settings: Source of per-root path overrides.
        env: Environment mapping; defaults to ``os.environ``.
        home: Home directory; defaults to ``Path.home()``.
        platform: ``sys.platform`` style identifier.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        env: Mapping[str, str] | None = None,
        home: Path | None = None,
        platform: str | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._env = env if env is not None else os.environ
        self._home = home or Path.home()
        self._platform = platform or sys.platform

    @property
    def _is_windows(self) -> bool:
        return self._platform.startswith("win")

    @property
    def _is_macos(self) -> bool:
        return self._platform == "darwin"

    def _local_app_data(self) -> Path:
        value = self._env.get("LOCALAPPDATA")
        return Path(value) if value else self._home / "AppData" / "Local"

    # ------------------------------------------------------------------
    # Platform defaults
    # ------------------------------------------------------------------

    def npm_cache_dir(self) -> Path:
        if self._settings.npm_cache_dir:
            return self._settings.npm_cache_dir
        configured = self._env.get("npm_config_cache") or self._env.get("NPM_CONFIG_CACHE")
        if configured:
            return Path(configured)
        if self._is_windows:
            return self._local_app_data() / "npm-cache"
        return self._home / ".npm"

    def yarn_cache_dir(self) -> Path:
        if self._settings.yarn_cache_dir:
            return self._settings.yarn_cache_dir
        configured = self._env.get("YARN_CACHE_FOLDER")
        if configured:
            return Path(configured)
        if self._is_windows:
            return self._local_app_data() / "Yarn" / "Cache"
        if self._is_macos:
            return self._home / "Library" / "Caches" / "Yarn"
        xdg = self._env.get("XDG_CACHE_HOME")
        return (Path(xdg) if xdg else self._home / ".cache") / "yarn"

    def pnpm_store_dir(self) -> Path:
        if self._settings.pnpm_store_dir:
            return self._settings.pnpm_store_dir
        if self._is_windows:
            return self._local_app_data() / "pnpm" / "store"
        if self._is_macos:
            return self._home / "Library" / "pnpm" / "store"
        xdg = self._env.get("XDG_DATA_HOME")
        return (Path(xdg) if xdg else self._home / ".local" / "share") / "pnpm" / "store"

    def nvm_versions_dir(self) -> Path:
        if self._settings.nvm_dir:
            base = self._settings.nvm_dir
        elif self._is_windows and self._env.get("NVM_HOME"):
            # nvm-windows keeps versions directly under NVM_HOME
            return Path(self._env["NVM_HOME"])
        elif self._env.get("NVM_DIR"):
            base = Path(self._env["NVM_DIR"])
        else:
            base = self._home / ".nvm"
        return base / "versions" / "node"

    # ------------------------------------------------------------------
    # Root resolution
    # ------------------------------------------------------------------

    def locate(self, project: str | Path, *, full_scan: bool = False) -> list[ScanRoot]:
        """Return every readable scan root, project first.

        Raises:
            ConfigurationError: If not a single root could be resolved.
        """
        candidates: list[ScanRoot] = [
            ScanRoot(path=Path(project), kind=RootKind.PROJECT, label="project")
        ]
        if full_scan:
            candidates.extend(
                [
                    ScanRoot(path=self.npm_cache_dir(), kind=RootKind.NPM_CACHE, label="npm-cache"),
                    ScanRoot(path=self.yarn_cache_dir(), kind=RootKind.YARN_CACHE, label="yarn-cache"),
                    ScanRoot(path=self.pnpm_store_dir(), kind=RootKind.PNPM_CACHE, label="pnpm-store"),
                ]
            )
            candidates.extend(self._nvm_roots())

        roots: list[ScanRoot] = []
        seen: set[str] = set()
        for candidate in candidates:
            resolved = _readable_dir(candidate.path)
            if resolved is None:
                logger.debug("Skipping %s root %s: not a readable directory", candidate.label, candidate.path)
                continue
            key = os.path.normcase(str(resolved))
            if key in seen:
                continue
            seen.add(key)
            roots.append(candidate.model_copy(update={"path": resolved}))

        if not roots:
            raise ConfigurationError(f"No scan root could be resolved (project path: {project})")

        logger.info("Resolved %d scan root(s): %s", len(roots), ", ".join(r.label for r in roots))
        return roots

    def _nvm_roots(self) -> list[ScanRoot]:
        versions_dir = self.nvm_versions_dir()
        try:
            entries = sorted(p for p in versions_dir.iterdir() if p.is_dir())
        except OSError:
            logger.debug("No nvm versions directory at %s", versions_dir)
            return []

        roots: list[ScanRoot] = []
        for version_dir in entries:
            if self._is_windows:
                install_dir = version_dir / INSTALL_DIR_NAME
            else:
                install_dir = version_dir / "lib" / INSTALL_DIR_NAME
            path = install_dir if install_dir.is_dir() else version_dir
            roots.append(
                ScanRoot(path=path, kind=RootKind.NVM_VERSION, label=f"nvm:{version_dir.name}")
            )
        return roots


def _readable_dir(path: Path) -> Path | None:
    try:
        resolved = path.expanduser().resolve()
        if not resolved.is_dir():
            return None
        with os.scandir(resolved):
            pass
    except OSError:
        return None
    return resolved
