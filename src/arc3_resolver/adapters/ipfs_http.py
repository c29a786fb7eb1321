from __future__ import annotations

import json
from typing import Any

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from arc3_resolver.domain.errors import MetadataFetchError, MetadataParseError, StorageProbeError

logger = structlog.get_logger(__name__)


class IpfsHttpStorage:
    """Reads content through an HTTP gateway (IPFS or plain https)."""

    def __init__(self, timeout_sec: float, retry_max_attempts: int) -> None:
        self._client = httpx.AsyncClient(timeout=timeout_sec, follow_redirects=True)
        self._retry_max_attempts = max(1, retry_max_attempts)

    async def probe_content_type(self, url: str) -> str:
        try:
            resp = await self._request("HEAD", url)
        except httpx.HTTPError as exc:
            raise StorageProbeError(f"HEAD {url} failed: {exc}") from exc
        content_type = self.normalize_content_type(resp.headers.get("content-type"))
        logger.debug("storage_probe", url=url, content_type=content_type)
        return content_type

    async def fetch_json(self, url: str) -> Any:
        try:
            resp = await self._request("GET", url)
        except httpx.HTTPError as exc:
            raise MetadataFetchError(f"GET {url} failed: {exc}") from exc
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MetadataParseError(f"{url} is not valid JSON: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str) -> httpx.Response:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_max_attempts),
            wait=wait_exponential_jitter(initial=0.5, max=5),
            retry=retry_if_exception(self._is_retryable_http_error),
            reraise=True,
        ):
            with attempt:
                resp = await self._client.request(method, url)
                resp.raise_for_status()
                return resp

        raise RuntimeError("unreachable")

    @staticmethod
    def normalize_content_type(value: str | None) -> str:
        if not value:
            return ""
        return value.split(";", 1)[0].strip().lower()

    @staticmethod
    def _is_retryable_http_error(exc: BaseException) -> bool:
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            return status == 429 or 500 <= status < 600
        return isinstance(exc, httpx.TransportError)
