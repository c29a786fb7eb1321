from __future__ import annotations


class Arc3Error(Exception):
    """Base class for resolver errors."""


class UnknownNetworkError(Arc3Error, KeyError):
    def __init__(self, network: str) -> None:
        super().__init__(network)
        self.network = network

    def __str__(self) -> str:
        return f"Unknown network: {self.network!r}"


class ChainFetchError(Arc3Error):
    """The chain service was unreachable or returned an unusable record.

    Fatal to resolution: without a token there is nothing to assemble.
    """


class StorageProbeError(Arc3Error):
    pass


class MetadataFetchError(Arc3Error):
    pass


class MetadataParseError(Arc3Error):
    pass
