"""Resolve Algorand ARC-3 NFTs into displayable objects."""

__version__ = "0.1.0"
