from __future__ import annotations

import asyncio
import base64
import hashlib
import inspect
from pathlib import Path
from typing import Any

INTEGRITY_PREFIX = "sha256-"


async def _read_all(source: Any) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return await asyncio.to_thread(Path(source).read_bytes)
    read = getattr(source, "read", None)
    if read is None:
        raise TypeError(f"Cannot read bytes from {type(source).__name__}")
    data = read()
    if inspect.isawaitable(data):
        data = await data
    if isinstance(data, str):
        raise TypeError("Integrity source must be opened in binary mode")
    return bytes(data)


def integrity_of(data: bytes) -> str:
    digest = hashlib.sha256(data).digest()
    return INTEGRITY_PREFIX + base64.b64encode(digest).decode("ascii")


async def compute_integrity(source: Any) -> str:
    """Subresource-integrity string (``sha256-<base64>``) for a binary source.

    ``source`` may be raw bytes, a filesystem path, or any object with a
    ``read()`` method, sync or async, returning bytes. The source is read
    fully before hashing.
    """
    return integrity_of(await _read_all(source))


async def verify_integrity(source: Any, expected: str) -> bool:
    return await compute_integrity(source) == expected
