from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog
from aiolimiter import AsyncLimiter
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from arc3_resolver.config import NetworkSettings
from arc3_resolver.domain.errors import ChainFetchError, UnknownNetworkError
from arc3_resolver.domain.models import Metadata, Token
from arc3_resolver.ports.wallet import WalletPort

logger = structlog.get_logger(__name__)

ALGOD_TOKEN_HEADER = "X-Algo-API-Token"
# rounds an unconfirmed transaction stays valid for
VALIDITY_WINDOW = 1000


class _PendingConfirmation(Exception):
    pass


class AlgorandHttpChain:
    """Asset lookups over the indexer API, mint submission through algod."""

    def __init__(
        self,
        networks: Mapping[str, NetworkSettings],
        timeout_sec: float,
        retry_max_attempts: int,
        request_interval_ms: int = 0,
        confirm_max_attempts: int = 10,
        confirm_interval_sec: float = 1.0,
    ) -> None:
        self._networks = networks
        self._client = httpx.AsyncClient(timeout=timeout_sec)
        self._retry_max_attempts = max(1, retry_max_attempts)
        self._confirm_max_attempts = max(1, confirm_max_attempts)
        self._confirm_interval_sec = confirm_interval_sec
        self._rate_limiter: AsyncLimiter | None = None
        if request_interval_ms > 0:
            period = max(0.001, request_interval_ms / 1000.0)
            self._rate_limiter = AsyncLimiter(1, period)

    async def get_raw_asset_record(self, network: str, asset_id: int) -> dict[str, Any]:
        net = self._network(network)
        payload = await self._get_json(f"{net.indexer_url}/v2/assets/{asset_id}")
        asset = payload.get("asset") if isinstance(payload, dict) else None
        if not isinstance(asset, dict):
            raise ChainFetchError(f"Indexer returned no asset record for {asset_id}")
        return asset

    async def list_account_asset_ids(self, network: str, address: str) -> list[int]:
        net = self._network(network)
        url = f"{net.indexer_url}/v2/accounts/{address}/assets"
        asset_ids: list[int] = []
        params: dict[str, Any] = {}
        while True:
            payload = await self._get_json(url, params)
            holdings = (payload.get("assets") or []) if isinstance(payload, dict) else []
            for holding in holdings:
                if not isinstance(holding, dict) or not holding.get("amount"):
                    continue
                asset_id = holding.get("asset-id")
                if asset_id:
                    asset_ids.append(int(asset_id))
            next_token = payload.get("next-token") if isinstance(payload, dict) else None
            if not holdings or not next_token:
                break
            params = {"next": next_token}
        logger.info("account_assets", network=network, address=address, count=len(asset_ids))
        return asset_ids

    async def submit_mint(
        self,
        wallet: WalletPort,
        network: str,
        token_draft: Token,
        metadata: Metadata,
    ) -> int:
        net = self._network(network)
        suggested = await self._get_json(
            f"{net.algod_url}/v2/transactions/params", headers=self._algod_headers(net)
        )
        if not isinstance(suggested, dict):
            raise ChainFetchError("Unexpected suggested params response")
        txn = self.build_asset_create_txn(token_draft, metadata, suggested)
        txid = await wallet.sign_and_send(network, txn)
        logger.info("mint_submitted", network=network, txid=txid, name=token_draft.name)
        return await self._wait_for_asset_index(net, txid)

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def build_asset_create_txn(
        token: Token,
        metadata: Metadata,
        suggested: dict[str, Any],
    ) -> dict[str, Any]:
        """Unsigned asset-config transaction in algod's msgpack field naming."""
        first_round = int(suggested.get("last-round") or 0)
        params = {
            "t": token.total,
            "dc": token.decimals,
            "df": token.default_frozen,
            "un": token.unit_name,
            "an": token.name,
            "au": token.url,
            "am": token.metadata_hash or metadata.metadata_hash(),
            "m": token.manager,
            "r": token.reserve,
            "f": token.freeze,
            "c": token.clawback,
        }
        return {
            "type": "acfg",
            "snd": token.creator,
            "fee": int(suggested.get("min-fee") or suggested.get("fee") or 0),
            "fv": first_round,
            "lv": first_round + VALIDITY_WINDOW,
            "gen": suggested.get("genesis-id") or "",
            "gh": suggested.get("genesis-hash") or "",
            "apar": {key: value for key, value in params.items() if value not in ("", None)},
        }

    async def _wait_for_asset_index(self, net: NetworkSettings, txid: str) -> int:
        url = f"{net.algod_url}/v2/transactions/pending/{txid}"
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._confirm_max_attempts),
                wait=wait_exponential_jitter(initial=self._confirm_interval_sec, max=5),
                retry=retry_if_exception(lambda exc: isinstance(exc, _PendingConfirmation)),
                reraise=True,
            ):
                with attempt:
                    payload = await self._get_json(url, headers=self._algod_headers(net))
                    if not isinstance(payload, dict):
                        raise ChainFetchError(f"Unexpected pending response for {txid}")
                    if payload.get("pool-error"):
                        raise ChainFetchError(
                            f"Transaction {txid} rejected: {payload['pool-error']}"
                        )
                    asset_id = payload.get("asset-index")
                    if not asset_id:
                        raise _PendingConfirmation(txid)
                    logger.info("mint_confirmed", txid=txid, asset_id=asset_id)
                    return int(asset_id)
        except _PendingConfirmation as exc:
            raise ChainFetchError(f"Transaction {txid} was not confirmed in time") from exc
        raise ChainFetchError(f"Transaction {txid} was not confirmed in time")

    def _network(self, network: str) -> NetworkSettings:
        try:
            return self._networks[network]
        except KeyError:
            raise UnknownNetworkError(network) from None

    @staticmethod
    def _algod_headers(net: NetworkSettings) -> dict[str, str]:
        if net.algod_token:
            return {ALGOD_TOKEN_HEADER: net.algod_token}
        return {}

    async def _rate_limit_pause(self) -> None:
        if self._rate_limiter is None:
            return
        async with self._rate_limiter:
            return None

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_max_attempts),
                wait=wait_exponential_jitter(initial=0.5, max=5),
                retry=retry_if_exception(self._is_retryable_http_error),
                reraise=True,
            ):
                with attempt:
                    await self._rate_limit_pause()
                    resp = await self._client.get(url, params=params, headers=headers)
                    resp.raise_for_status()
                    return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ChainFetchError(f"GET {url} failed: {exc}") from exc
        return None

    @staticmethod
    def _is_retryable_http_error(exc: BaseException) -> bool:
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            return status == 429 or 500 <= status < 600
        return isinstance(exc, httpx.TransportError)
