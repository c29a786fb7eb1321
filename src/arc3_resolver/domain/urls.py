from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from arc3_resolver.domain.errors import UnknownNetworkError

ARC3_NAME_SUFFIX = "@arc3"
ARC3_URL_SUFFIX = "#arc3"
METADATA_FILE = "metadata.json"
JSON_TYPE = "application/json"

IPFS_SCHEME = "ipfs"
HTTPS_SCHEME = "https"
SCHEME_SEPARATOR = "://"


class GatewayConfig(Protocol):
    ipfs_gateway: str


def ipfs_url(cid: str) -> str:
    return f"{IPFS_SCHEME}{SCHEME_SEPARATOR}{cid}"


def asa_url(cid: str) -> str:
    """URL to store on an asset so wallets recognise it as ARC-3."""
    return ipfs_url(cid) + ARC3_URL_SUFFIX


class UrlResolver:
    """Turns protocol-tagged storage URLs into fetchable gateway URLs.

    The network table is passed in explicitly; each entry only needs an
    ``ipfs_gateway`` base URL.
    """

    def __init__(self, networks: Mapping[str, GatewayConfig]) -> None:
        self._networks = networks

    def gateway(self, network: str) -> str:
        try:
            return self._networks[network].ipfs_gateway
        except KeyError:
            raise UnknownNetworkError(network) from None

    def resolve(self, network: str, url: str) -> str:
        if url.endswith(ARC3_URL_SUFFIX):
            url = url[: -len(ARC3_URL_SUFFIX)]

        scheme, sep, rest = url.partition(SCHEME_SEPARATOR)
        # no protocol, nothing to resolve
        if not sep:
            return url

        if scheme == IPFS_SCHEME:
            return self.gateway(network) + rest
        if scheme == HTTPS_SCHEME:
            return url
        # TODO: arweave and algorand note-field URLs once a gateway exists for them
        return url

    def file_url(self, network: str, cid: str, name: str) -> str:
        return f"{self.gateway(network)}{cid}/{name}"
