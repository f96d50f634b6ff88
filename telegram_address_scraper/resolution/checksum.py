"""EIP-55 address formatting."""

from __future__ import annotations

from eth_utils import to_checksum_address


def checksum_address(address: str) -> str:
    """Return the mixed-case EIP-55 form of *address*.

    Raises ``ValueError`` for anything that is not a 20-byte hex address.
    """
    try:
        return to_checksum_address(address)
    except TypeError as exc:
        raise ValueError(f"Not an address: {address!r}") from exc
