from __future__ import annotations

from typing import Any

import pytest

from arc3_resolver.config import NetworkSettings
from arc3_resolver.domain.errors import ChainFetchError, MetadataFetchError, StorageProbeError
from arc3_resolver.domain.urls import UrlResolver

GATEWAY = "https://gw.test/ipfs/"


class FakeChain:
    def __init__(
        self,
        records: dict[int, dict[str, Any]] | None = None,
        holdings: dict[str, list[int]] | None = None,
        minted_id: int = 0,
    ) -> None:
        self.records = records or {}
        self.holdings = holdings or {}
        self.minted_id = minted_id
        self.mint_calls: list[tuple[Any, str, Any, Any]] = []

    async def get_raw_asset_record(self, network: str, asset_id: int) -> dict[str, Any]:
        if asset_id not in self.records:
            raise ChainFetchError(f"no asset {asset_id}")
        return self.records[asset_id]

    async def submit_mint(self, wallet, network, token_draft, metadata) -> int:
        self.mint_calls.append((wallet, network, token_draft, metadata))
        self.records[self.minted_id] = {
            "index": self.minted_id,
            "params": {
                "name": token_draft.name,
                "url": token_draft.url,
                "total": token_draft.total,
                "decimals": token_draft.decimals,
            },
        }
        return self.minted_id

    async def list_account_asset_ids(self, network: str, address: str) -> list[int]:
        return list(self.holdings.get(address, []))


class FakeStorage:
    def __init__(
        self,
        content_types: dict[str, str] | None = None,
        documents: dict[str, Any] | None = None,
        fail_probe: bool = False,
        fail_fetch: bool = False,
    ) -> None:
        self.content_types = content_types or {}
        self.documents = documents or {}
        self.fail_probe = fail_probe
        self.fail_fetch = fail_fetch
        self.probed: list[str] = []
        self.fetched: list[str] = []

    async def probe_content_type(self, url: str) -> str:
        self.probed.append(url)
        if self.fail_probe or url not in self.content_types:
            raise StorageProbeError(f"unreachable: {url}")
        return self.content_types[url]

    async def fetch_json(self, url: str) -> Any:
        self.fetched.append(url)
        if self.fail_fetch or url not in self.documents:
            raise MetadataFetchError(f"fetch failed: {url}")
        return self.documents[url]


class FakeWallet:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []

    async def sign_and_send(self, network: str, txn: dict[str, Any]) -> str:
        self.sent.append((network, txn))
        return "TXID"


@pytest.fixture
def networks() -> dict[str, NetworkSettings]:
    return {
        "testnet": NetworkSettings(
            ipfs_gateway=GATEWAY,
            indexer_url="https://idx.test",
            algod_url="https://algod.test",
        ),
        "othernet": NetworkSettings(ipfs_gateway="https://other.test/ipfs/"),
    }


@pytest.fixture
def urls(networks) -> UrlResolver:
    return UrlResolver(networks)
