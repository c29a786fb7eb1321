from __future__ import annotations

import base64
import hashlib
from collections.abc import Callable, Iterable
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from arc3_resolver.domain.errors import MetadataParseError
from arc3_resolver.domain.urls import METADATA_FILE, UrlResolver

PLACEHOLDER_IMAGE = "https://dummyimage.com/640x360/fff/aaa"


class Token(BaseModel):
    """On-chain asset parameters as seen at query time."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    name: str = ""
    unit_name: str = ""
    url: str = ""
    metadata_hash: str = ""
    total: int = 0
    decimals: int = 0
    creator: str = ""
    manager: str = ""
    reserve: str = ""
    clawback: str = ""
    freeze: str = ""
    default_frozen: bool = False

    @classmethod
    def from_chain_record(cls, raw: dict[str, Any]) -> Token:
        params = raw.get("params") or {}
        return cls(
            id=raw.get("index") or 0,
            name=params.get("name") or "",
            unit_name=params.get("unit-name") or "",
            url=params.get("url") or "",
            metadata_hash=params.get("metadata-hash") or "",
            total=params.get("total") or 0,
            decimals=params.get("decimals") or 0,
            creator=params.get("creator") or "",
            manager=params.get("manager") or "",
            reserve=params.get("reserve") or "",
            clawback=params.get("clawback") or "",
            freeze=params.get("freeze") or "",
            default_frozen=params.get("default-frozen") or False,
        )

    def valid(self) -> bool:
        return self.id > 0 and self.total > 0 and self.url != ""


class Metadata(BaseModel):
    """ARC-3 JSON metadata document.

    Keys outside the ARC-3 field set are kept as extras so the document
    round-trips unchanged.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    image: str = ""
    # passed through as found in the document
    description: Any = None
    image_integrity: Any = None
    image_mimetype: Any = None
    background_color: Any = None
    external_url: Any = None
    external_url_integrity: Any = None
    external_url_mimetype: Any = None
    animation_url: Any = None
    animation_url_integrity: Any = None
    animation_url_mimetype: Any = None
    decimals: Any = None
    unit_name: Any = None
    properties: Any = None
    localization: Any = None
    extra_metadata: Any = None

    @field_validator("name", "image", mode="before")
    @classmethod
    def _scalar_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def from_document(cls, document: Any) -> Metadata:
        if not isinstance(document, dict):
            raise MetadataParseError(
                f"Metadata document must be a JSON object, got {type(document).__name__}"
            )
        try:
            return cls.model_validate(document)
        except ValidationError as exc:
            raise MetadataParseError(str(exc)) from exc

    @classmethod
    def from_token(cls, token: Token) -> Metadata:
        return cls(name=token.name)

    def valid(self) -> bool:
        return self.name != ""

    def to_json_bytes(self) -> bytes:
        return orjson.dumps(self.model_dump(exclude_none=True))

    def metadata_hash(self) -> str:
        """Base64 SHA-256 of the JSON document, as stored in the asset params."""
        return base64.b64encode(hashlib.sha256(self.to_json_bytes()).digest()).decode("ascii")


class NFT(BaseModel):
    """A token paired with its metadata. Rebuilt, never updated in place."""

    model_config = ConfigDict(frozen=True)

    token: Token
    metadata: Metadata
    url_mime_type: str = ""
    degraded_reason: str | None = None

    def valid(self) -> bool:
        return self.token.valid() and self.metadata.valid()

    def id(self) -> int:
        return self.token.id if self.token.valid() else 0

    def display_name(self) -> str:
        return _first_hit(source(self) for source in NAME_SOURCES) or ""

    def image_url(
        self,
        urls: UrlResolver,
        network: str,
        placeholder: str = PLACEHOLDER_IMAGE,
    ) -> str:
        if not self.valid():
            return placeholder
        found = _first_hit(source(self, urls, network) for source in IMAGE_SOURCES)
        return found if found is not None else self.metadata.image


def _first_hit(candidates: Iterable[str | None]) -> str | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def _metadata_name(nft: NFT) -> str | None:
    return nft.metadata.name if nft.metadata.valid() else None


def _token_name(nft: NFT) -> str | None:
    return nft.token.name if nft.token.valid() else None


def _protocol_image(nft: NFT, urls: UrlResolver, network: str) -> str | None:
    image = nft.metadata.image
    resolved = urls.resolve(network, image)
    return resolved if resolved != image else None


def _relative_image(nft: NFT, urls: UrlResolver, network: str) -> str | None:
    # image path relative to the directory holding metadata.json
    token_url = nft.token.url
    if not token_url.endswith(METADATA_FILE):
        return None
    directory = token_url[: -len(METADATA_FILE)]
    return urls.resolve(network, directory) + nft.metadata.image


NAME_SOURCES: list[Callable[[NFT], str | None]] = [_metadata_name, _token_name]
IMAGE_SOURCES: list[Callable[[NFT, UrlResolver, str], str | None]] = [
    _protocol_image,
    _relative_image,
]
