from __future__ import annotations

from arc3_resolver.domain.arc3 import arc3_issues, is_arc3
from arc3_resolver.domain.models import NFT, Metadata, Token


def _nft(token: dict | None = None, metadata: dict | None = None) -> NFT:
    token_values = {
        "id": 5,
        "name": "Foo",
        "url": "ipfs://abc#arc3",
        "total": 1,
        "metadata_hash": "aGFzaA==",
    }
    token_values.update(token or {})
    metadata_values = {"name": "Foo NFT", "image": "ipfs://img", "image_integrity": "sha256-xyz"}
    metadata_values.update(metadata or {})
    return NFT(token=Token(**token_values), metadata=Metadata(**metadata_values))


def test_compliant_nft() -> None:
    assert is_arc3(_nft())
    assert arc3_issues(_nft()) == []


def test_name_suffix_declares_arc3() -> None:
    nft = _nft(token={"name": "Foo@arc3", "url": "https://host/meta.json"})
    assert is_arc3(nft)


def test_missing_declaration() -> None:
    nft = _nft(token={"url": "https://host/meta.json"})
    assert not is_arc3(nft)
    assert any("@arc3" in issue for issue in arc3_issues(nft))


def test_bad_integrity_and_decimals() -> None:
    nft = _nft(metadata={"image_integrity": "md5-abc", "decimals": 2})
    issues = arc3_issues(nft)
    assert len(issues) == 2


def test_missing_metadata_hash_and_name() -> None:
    nft = _nft(token={"metadata_hash": ""}, metadata={"name": ""})
    issues = arc3_issues(nft)
    assert "asset has no metadata hash" in issues
    assert "metadata has no name" in issues


def test_non_string_integrity_is_an_issue() -> None:
    nft = _nft(metadata={"image_integrity": 42})
    assert arc3_issues(nft) == ["image_integrity is not a sha256 integrity string"]
