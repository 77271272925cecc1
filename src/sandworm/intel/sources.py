# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat-intel feed sources and parsers.

Provides a base ``FeedSource`` class with HTTP and file implementations,
the two feed descriptors (Wiz CSV and the version-keyed JSON list), and
the parsers that turn a raw feed body into ``IOCEntry`` records.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

import httpx

from sandworm.core.constants import (
    CSV_FEED_NAME,
    FALLBACK_CSV_FILE,
    FALLBACK_JSON_FILE,
    FETCH_TIMEOUT_SECONDS,
    JSON_FEED_NAME,
)
from sandworm.core.exceptions import FeedParseError, FetchError
from sandworm.models.ioc import IOCEntry

logger = logging.getLogger("sandworm.intel.sources")

WILDCARD_SENTINEL = "*"

_CSV_NAME_COLUMNS = ("package", "name", "package_name")


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_csv_feed(text: str, source: str = CSV_FEED_NAME) -> dict[str, IOCEntry]:
    """Parse the CSV feed; every named row is a wildcard entry.

    The package column is ``Package`` (any case), falling back to the first
    column when no such header exists.
    """
    reader = csv.reader(io.StringIO(text))
    try:
        header = next(reader)
    except StopIteration:
        return {}
    except csv.Error as exc:
        raise FeedParseError(f"{source}: malformed CSV: {exc}") from exc

    lowered = [h.strip().lower() for h in header]
    column = 0
    has_header = False
    for candidate in _CSV_NAME_COLUMNS:
        if candidate in lowered:
            column = lowered.index(candidate)
            has_header = True
            break

    rows = reader if has_header else _chain_first(header, reader)

    entries: dict[str, IOCEntry] = {}
    try:
        for row in rows:
            if len(row) <= column:
                continue
            name = row[column].strip().strip('"')
            if not name or name.startswith("#"):
                continue
            entries[name] = IOCEntry.wildcard(name, source=source)
    except csv.Error as exc:
        raise FeedParseError(f"{source}: malformed CSV: {exc}") from exc
    return entries


def _chain_first(first: list[str], rest: Iterator[list[str]]) -> Iterator[list[str]]:
    yield first
    yield from rest


def parse_json_feed(text: str, source: str = JSON_FEED_NAME) -> dict[str, IOCEntry]:
    """Parse the JSON feed: ``{name: [versions...] | "*"}``.

    Raises:
        FeedParseError: If the body is not JSON or not an object.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise FeedParseError(f"{source}: body is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise FeedParseError(f"{source}: body is nested too deeply") from exc
    if not isinstance(data, dict):
        raise FeedParseError(f"{source}: expected a JSON object, got {type(data).__name__}")

    entries: dict[str, IOCEntry] = {}
    for raw_name, value in data.items():
        name = raw_name.strip() if isinstance(raw_name, str) else ""
        if not name:
            continue

        if value == WILDCARD_SENTINEL:
            entries[name] = IOCEntry.wildcard(name, source=source)
            continue

        if not isinstance(value, list):
            logger.debug("Skipping %s entry %r: unexpected value %r", source, name, value)
            continue

        if not all(isinstance(v, str) for v in value):
            logger.debug("Dropping non-string versions for %s entry %r", source, name)
        versions = {v.strip() for v in value if isinstance(v, str) and v.strip()}
        if WILDCARD_SENTINEL in versions:
            entries[name] = IOCEntry.wildcard(name, source=source)
        elif versions:
            entries[name] = IOCEntry.for_versions(name, versions, source=source)
        else:
            logger.debug("Skipping %s entry %r: no usable versions", source, name)
    return entries


# ---------------------------------------------------------------------------
# Feed descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Feed:
    """A named feed: where it lives online, its offline copy and its parser."""

    name: str
    url: str
    fallback_file: str
    parse: Callable[[str, str], dict[str, IOCEntry]]


def default_feeds(csv_url: str, json_url: str) -> list[Feed]:
    return [
        Feed(CSV_FEED_NAME, csv_url, FALLBACK_CSV_FILE, parse_csv_feed),
        Feed(JSON_FEED_NAME, json_url, FALLBACK_JSON_FILE, parse_json_feed),
    ]


def bundled_fallback_dir() -> Path:
    """Directory of the offline snapshot shipped inside the package."""
    return Path(str(resources.files("sandworm.intel").joinpath("fallback")))


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class FeedSource(ABC):
    """Base class for places a raw feed body can be read from."""

    name: str

    @abstractmethod
    async def fetch(self) -> str:
        """Return the raw feed body."""


class HttpFeedSource(FeedSource):
    """Fetch a feed over HTTP(S) with a hard timeout and no retry.

    Any transport problem, timeout or non-2xx status surfaces as
    :class:`FetchError`.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client
        self.name = f"http:{url}"

    async def fetch(self) -> str:
        try:
            if self._client is not None:
                response = await self._client.get(self._url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout, follow_redirects=True
                ) as client:
                    response = await client.get(self._url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchError(f"timed out after {self._timeout:.0f}s fetching {self._url}") from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"HTTP {exc.response.status_code} fetching {self._url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"{type(exc).__name__} fetching {self._url}: {exc}") from exc
        return response.text


class FileFeedSource(FeedSource):
    """Read a feed from a local file (the offline snapshot)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self.name = f"file:{self._path.name}"

    @property
    def path(self) -> Path:
        return self._path

    async def fetch(self) -> str:
        return self._path.read_text(encoding="utf-8")
