from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

import orjson
import structlog
from dotenv import load_dotenv

from arc3_resolver.adapters.algorand_http import AlgorandHttpChain
from arc3_resolver.adapters.ipfs_http import IpfsHttpStorage
from arc3_resolver.application.collection import resolve_collection
from arc3_resolver.application.resolver import NftResolver
from arc3_resolver.config import Settings, load_settings
from arc3_resolver.domain.arc3 import arc3_issues
from arc3_resolver.domain.integrity import compute_integrity
from arc3_resolver.domain.models import NFT
from arc3_resolver.util.httpx_setup import silence_httpx_logs
from arc3_resolver.util.logging_setup import configure_logging

logger = structlog.get_logger(__name__)

NETWORK_HELP = "Network key from config (default: app.default_network)"


def _default_config_path() -> Path | None:
    candidate = Path("config/config.yaml")
    if candidate.exists():
        return candidate
    return None


def build_adapters(settings: Settings) -> tuple[AlgorandHttpChain, IpfsHttpStorage]:
    chain = AlgorandHttpChain(
        networks=settings.networks,
        timeout_sec=settings.http.timeout_sec,
        retry_max_attempts=settings.http.retry_max_attempts,
        request_interval_ms=settings.http.request_interval_ms,
        confirm_max_attempts=settings.http.confirm_max_attempts,
    )
    storage = IpfsHttpStorage(
        timeout_sec=settings.http.timeout_sec,
        retry_max_attempts=settings.http.retry_max_attempts,
    )
    return chain, storage


def nft_summary(nft: NFT, settings: Settings, network: str) -> dict[str, Any]:
    return {
        "id": nft.id(),
        "name": nft.display_name(),
        "image_url": nft.image_url(
            settings.url_resolver(), network, placeholder=settings.app.placeholder_image
        ),
        "valid": nft.valid(),
        "arc3_issues": arc3_issues(nft),
        "url_mime_type": nft.url_mime_type,
        "degraded_reason": nft.degraded_reason,
        "token": nft.token.model_dump(),
        "metadata": nft.metadata.model_dump(exclude_none=True),
    }


async def run_command(args: argparse.Namespace, settings: Settings) -> Any:
    if args.command == "integrity":
        return {"file": str(args.file), "integrity": await compute_integrity(args.file)}

    network = args.network or settings.app.default_network
    chain, storage = build_adapters(settings)
    resolver = NftResolver(
        chain=chain,
        storage=storage,
        urls=settings.url_resolver(),
        json_content_types=settings.storage.json_content_types,
    )
    try:
        if args.command == "resolve":
            nft = await resolver.from_asset_id(network, args.asset_id)
            return nft_summary(nft, settings, network)
        nfts = await resolve_collection(resolver, chain, network, args.address)
        return [nft_summary(nft, settings, network) for nft in nfts]
    finally:
        await chain.close()
        await storage.close()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ARC-3 NFT resolver")
    parser.add_argument(
        "--config",
        type=Path,
        default=_default_config_path(),
        help="Path to config YAML/JSON (default: config/config.yaml if present)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Resolve one asset id into an NFT")
    resolve.add_argument("asset_id", type=int)
    resolve.add_argument("--network", help=NETWORK_HELP)

    collection = sub.add_parser("collection", help="Resolve every NFT held by an account")
    collection.add_argument("address")
    collection.add_argument("--network", help=NETWORK_HELP)

    integrity = sub.add_parser("integrity", help="Print the sha256 integrity string of a file")
    integrity.add_argument("file", type=Path)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(
        settings.logging.level,
        settings.logging.style,
        settings.logging.console,
        settings.logging.file_path,
    )
    silence_httpx_logs()

    logger.info("command_start", command=args.command, config=str(args.config or ""))
    result = asyncio.run(run_command(args, settings))
    logger.info("command_done", command=args.command)
    print(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode("utf-8"))


if __name__ == "__main__":
    main()
