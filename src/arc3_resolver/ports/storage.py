from __future__ import annotations

from typing import Any, Protocol


class StoragePort(Protocol):
    """Content-addressed storage reachable over a gateway.

    Failures must be raised, never returned as empty results.
    """

    async def probe_content_type(self, url: str) -> str: ...

    async def fetch_json(self, url: str) -> Any: ...
