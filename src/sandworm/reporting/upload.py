# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Upload of the findings report to a collection endpoint."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
import socket
from datetime import UTC, datetime

import httpx

from sandworm.core.config import Settings
from sandworm.core.exceptions import UploadError
from sandworm.models.scan import ScanResult

logger = logging.getLogger("sandworm.reporting.upload")

SIGNATURE_HEADER = "X-Sandworm-Signature"

_TIMEOUT_SECONDS = 10.0
_MAX_RETRIES = 3
_BACKOFF_BASE = 1.0  # seconds: 1, 2, 4


def compute_signature(payload_bytes: bytes, secret: str) -> str:
    """Compute HMAC-SHA256 signature for a payload."""
    return hmac.new(
        secret.encode("utf-8"),
        payload_bytes,
        hashlib.sha256,
    ).hexdigest()


def build_payload(result: ScanResult, hostname: str | None = None) -> dict[str, object]:
    return {
        "event": "scan.completed",
        "scan_id": result.scan_id,
        "target": result.target,
        "hostname": hostname or socket.gethostname(),
        "timestamp": datetime.now(UTC).isoformat(),
        "finding_count": len(result.findings),
        "findings": [f.model_dump(mode="json", by_alias=True) for f in result.findings],
    }


class ReportUploader:
    """POST a scan report to one URL.

    Delivery failures are logged and swallowed; an upload never changes
    the outcome of a scan.
    """

    def __init__(
        self,
        url: str,
        *,
        secret: str = "",
        timeout: float = _TIMEOUT_SECONDS,
        max_retries: int = _MAX_RETRIES,
        backoff_base: float = _BACKOFF_BASE,
    ) -> None:
        self._url = url
        self._secret = secret
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_base = backoff_base

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportUploader | None:
        """Return an uploader when ``upload_url`` is configured, else ``None``."""
        if not settings.upload_url:
            return None
        return cls(
            settings.upload_url,
            secret=settings.upload_secret,
            timeout=settings.upload_timeout,
        )

    @property
    def url(self) -> str:
        return self._url

    async def upload(self, result: ScanResult) -> bool:
        """Send *result*; returns ``True`` once the endpoint accepted it.

        Retries up to 3 times with exponential backoff (1s, 2s, 4s).
        """
        payload = build_payload(result)
        payload_bytes = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")

        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._secret:
            headers[SIGNATURE_HEADER] = compute_signature(payload_bytes, self._secret)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._deliver_with_retry(client, payload_bytes, headers)

    async def _deliver_with_retry(
        self,
        client: httpx.AsyncClient,
        payload_bytes: bytes,
        headers: dict[str, str],
    ) -> bool:
        for attempt in range(self._max_retries):
            try:
                status = await self._post(client, payload_bytes, headers)
            except UploadError as exc:
                if attempt < self._max_retries - 1:
                    backoff = self._backoff_base * (2**attempt)
                    logger.warning(
                        "Report upload attempt %d/%d to %s failed (%s), retrying in %.0fs",
                        attempt + 1,
                        self._max_retries,
                        self._url,
                        exc,
                        backoff,
                    )
                    await asyncio.sleep(backoff)
                else:
                    logger.error(
                        "Report upload to %s failed after %d attempts: %s",
                        self._url,
                        self._max_retries,
                        exc,
                    )
                continue
            logger.info("Report uploaded to %s (status %s)", self._url, status)
            return True
        return False

    async def _post(
        self,
        client: httpx.AsyncClient,
        payload_bytes: bytes,
        headers: dict[str, str],
    ) -> int:
        try:
            response = await client.post(self._url, content=payload_bytes, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UploadError(f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise UploadError(f"{type(exc).__name__}: {exc}") from exc
        return response.status_code
