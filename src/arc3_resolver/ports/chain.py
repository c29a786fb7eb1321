from __future__ import annotations

from typing import Any, Protocol

from arc3_resolver.domain.models import Metadata, Token
from arc3_resolver.ports.wallet import WalletPort


class ChainPort(Protocol):
    async def get_raw_asset_record(self, network: str, asset_id: int) -> dict[str, Any]: ...

    async def submit_mint(
        self,
        wallet: WalletPort,
        network: str,
        token_draft: Token,
        metadata: Metadata,
    ) -> int: ...

    async def list_account_asset_ids(self, network: str, address: str) -> list[int]: ...
