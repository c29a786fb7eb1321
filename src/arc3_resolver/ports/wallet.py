from __future__ import annotations

from typing import Any, Protocol


class WalletPort(Protocol):
    async def sign_and_send(self, network: str, txn: dict[str, Any]) -> str:
        ...
