from __future__ import annotations

from arc3_resolver.domain.integrity import INTEGRITY_PREFIX
from arc3_resolver.domain.models import NFT
from arc3_resolver.domain.urls import ARC3_NAME_SUFFIX, ARC3_URL_SUFFIX


def _declares_arc3(nft: NFT) -> bool:
    token = nft.token
    return (
        token.url.endswith(ARC3_URL_SUFFIX)
        or token.name == "arc3"
        or token.name.endswith(ARC3_NAME_SUFFIX)
    )


def arc3_issues(nft: NFT) -> list[str]:
    """Human readable reasons an NFT falls short of ARC-3. Empty means compliant."""
    token = nft.token
    metadata = nft.metadata
    issues: list[str] = []

    if not _declares_arc3(nft):
        issues.append("asset neither has an #arc3 url nor an @arc3 name")
    if not token.valid():
        issues.append("token is not valid")
    if not metadata.valid():
        issues.append("metadata has no name")
    if metadata.image and metadata.image_integrity is not None:
        integrity = metadata.image_integrity
        if not (isinstance(integrity, str) and integrity.startswith(INTEGRITY_PREFIX)):
            issues.append("image_integrity is not a sha256 integrity string")
    if metadata.decimals is not None and metadata.decimals != token.decimals:
        issues.append(
            f"metadata decimals {metadata.decimals} differ from asset decimals {token.decimals}"
        )
    if token.url.endswith(ARC3_URL_SUFFIX) and not token.metadata_hash:
        issues.append("asset has no metadata hash")
    return issues


def is_arc3(nft: NFT) -> bool:
    return not arc3_issues(nft)
