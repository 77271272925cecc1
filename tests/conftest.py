# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from sandworm.core.config import Settings

CSV_FEED_URL = "https://feeds.test/shai-hulud-2-packages.csv"
JSON_FEED_URL = "https://feeds.test/malicious_npm_packages.json"

CSV_FEED_BODY = """Package,Version
syntax-class-properties,= 1.0.0
@ctrl/tinycolor,= 4.1.1
posthog-node,= 4.18.1
"""

JSON_FEED_BODY = json.dumps(
    {
        "chalk": ["5.6.1"],
        "debug": ["4.4.2"],
        "posthog-node": ["5.11.3"],
        "duckdb": "*",
    }
)


def install_package(parent: Path, name: str, version: str | None = None) -> Path:
    """Create ``parent/node_modules/<name>`` with a manifest (omitted when *version* is None)."""
    package_dir = parent / "node_modules" / name
    package_dir.mkdir(parents=True, exist_ok=True)
    if version is not None:
        (package_dir / "package.json").write_text(
            json.dumps({"name": name, "version": version}), encoding="utf-8"
        )
    return package_dir


def write_fallbacks(directory: Path, csv_body: str = CSV_FEED_BODY, json_body: str = JSON_FEED_BODY) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "wiz-iocs.csv").write_text(csv_body, encoding="utf-8")
    (directory / "malicious-packages.json").write_text(json_body, encoding="utf-8")
    return directory


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's SANDWORM_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("SANDWORM_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def fallback_dir(tmp_path: Path) -> Path:
    return write_fallbacks(tmp_path / "fallback")


@pytest.fixture
def settings(tmp_path: Path, fallback_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        csv_feed_url=CSV_FEED_URL,
        json_feed_url=JSON_FEED_URL,
        fallback_dir=fallback_dir,
        cache_backend="memory",
        cache_dir=tmp_path / "cache",
        nvm_dir=tmp_path / "no-nvm",
        npm_cache_dir=tmp_path / "no-npm",
        yarn_cache_dir=tmp_path / "no-yarn",
        pnpm_store_dir=tmp_path / "no-pnpm",
    )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    (path / "package.json").write_text(
        json.dumps({"name": "victim-app", "version": "1.0.0"}), encoding="utf-8"
    )
    return path


@pytest.fixture
def install():
    """Return the :func:`install_package` helper."""
    return install_package
