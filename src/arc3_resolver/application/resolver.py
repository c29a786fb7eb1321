from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog
from pydantic import ValidationError

from arc3_resolver.domain.errors import ChainFetchError
from arc3_resolver.domain.models import NFT, Metadata, Token
from arc3_resolver.domain.urls import JSON_TYPE, UrlResolver, asa_url
from arc3_resolver.ports.chain import ChainPort
from arc3_resolver.ports.storage import StoragePort
from arc3_resolver.ports.wallet import WalletPort

logger = structlog.get_logger(__name__)


class NftResolver:
    """Builds NFT aggregates from chain records and gateway-hosted metadata.

    A token that cannot be fetched is an error. Anything that goes wrong
    after that (probing the token url, fetching or parsing the document)
    yields an NFT with empty metadata and ``degraded_reason`` set.
    """

    def __init__(
        self,
        chain: ChainPort,
        storage: StoragePort,
        urls: UrlResolver,
        json_content_types: Iterable[str] = (JSON_TYPE,),
    ) -> None:
        self._chain = chain
        self._storage = storage
        self._urls = urls
        self._json_types = frozenset(t.lower() for t in json_content_types)

    @property
    def urls(self) -> UrlResolver:
        return self._urls

    async def create_and_mint(
        self,
        wallet: WalletPort,
        network: str,
        token_draft: Token,
        metadata: Metadata,
        cid: str,
    ) -> NFT:
        draft = token_draft.model_copy(update={"url": asa_url(cid)})
        asset_id = await self._chain.submit_mint(wallet, network, draft, metadata)
        return await self.from_asset_id(network, asset_id)

    async def from_asset_id(self, network: str, asset_id: int) -> NFT:
        raw = await self._chain.get_raw_asset_record(network, asset_id)
        return await self.from_token(network, raw)

    async def from_token(self, network: str, raw_record: dict[str, Any]) -> NFT:
        try:
            token = Token.from_chain_record(raw_record)
        except (AttributeError, ValidationError) as exc:
            raise ChainFetchError(f"Malformed asset record: {exc}") from exc

        # an unknown network is a configuration error and propagates
        url = self._urls.resolve(network, token.url)
        try:
            mime_type = await self._storage.probe_content_type(url)
            if mime_type.lower() in self._json_types:
                metadata = Metadata.from_document(await self._storage.fetch_json(url))
            else:
                # a non-JSON payload (e.g. the image itself) cannot be metadata
                metadata = Metadata.from_token(token)
        except Exception as exc:  # noqa: BLE001
            reason = f"{type(exc).__name__}: {exc}"
            logger.warning("metadata_degraded", asset_id=token.id, url=token.url, reason=reason)
            return NFT(token=token, metadata=Metadata(), degraded_reason=reason)

        logger.info("nft_resolved", asset_id=token.id, mime_type=mime_type)
        return NFT(token=token, metadata=metadata, url_mime_type=mime_type)
