"""
Byte/hex conversion helpers shared by the codec, payload and ledger layers.

Values cross the ledger boundary as ``0x``-prefixed hex strings; internally
everything is fixed-width ``bytes``.
"""

from typing import Union

ADDRESS_SIZE = 20
ZERO_ADDRESS = bytes(ADDRESS_SIZE)

BytesLike = Union[bytes, bytearray, str]


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def to_bytes(value: BytesLike, size: int = None, label: str = "value") -> bytes:
    """
    Accept raw bytes or a hex string (with or without ``0x``).
    If ``size`` is given the result must be exactly that many bytes.
    """
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            raise ValueError(f"{label} is not valid hex.") from None
    elif isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    else:
        raise TypeError(f"{label} must be bytes or hex str, got {type(value).__name__}.")
    if size is not None and len(raw) != size:
        raise ValueError(f"{label} must be {size} bytes, got {len(raw)}.")
    return raw


def parse_address(value: BytesLike, label: str = "address") -> bytes:
    """20-byte account address from bytes or hex. Case is ignored."""
    return to_bytes(value, ADDRESS_SIZE, label)


def is_address(value) -> bool:
    try:
        parse_address(value)
    except (TypeError, ValueError):
        return False
    return True


def uint256(value: int) -> bytes:
    if value < 0 or value >= 1 << 256:
        raise ValueError("uint256 out of range.")
    return value.to_bytes(32, "big")
