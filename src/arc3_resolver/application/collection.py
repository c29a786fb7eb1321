from __future__ import annotations

import asyncio

import structlog

from arc3_resolver.application.resolver import NftResolver
from arc3_resolver.domain.models import NFT
from arc3_resolver.ports.chain import ChainPort

logger = structlog.get_logger(__name__)


async def _resolve_one(resolver: NftResolver, network: str, asset_id: int) -> NFT | None:
    try:
        return await resolver.from_asset_id(network, asset_id)
    except Exception as exc:  # noqa: BLE001
        logger.warning("collection_asset_failed", asset_id=asset_id, error=str(exc))
        return None


async def resolve_collection(
    resolver: NftResolver,
    chain: ChainPort,
    network: str,
    address: str,
) -> list[NFT]:
    """Resolve every asset held by ``address``, one task per asset.

    An asset that fails to resolve is dropped without affecting the others.
    Results keep the account's listing order.
    """
    asset_ids = await chain.list_account_asset_ids(network, address)
    async with asyncio.TaskGroup() as tg:
        tasks = [
            tg.create_task(_resolve_one(resolver, network, asset_id)) for asset_id in asset_ids
        ]

    nfts = [nft for nft in (task.result() for task in tasks) if nft is not None and nft.id() != 0]
    logger.info(
        "collection_resolved",
        network=network,
        address=address,
        requested=len(asset_ids),
        resolved=len(nfts),
    )
    return nfts
