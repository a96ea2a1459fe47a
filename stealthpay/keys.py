"""
Key Material — secp256k1 recipient key pairs
=============================================
Recipients publish a compressed public key (33 bytes) in a key directory and
keep the 32-byte private scalar to themselves. Senders never see anything
but the public half.

Private key:  32 bytes, big-endian scalar in [1, n-1]
Public key:   33 bytes, SEC1 compressed point (0x02 / 0x03 prefix)

Uncompressed points (0x04 || X || Y) are refused everywhere so that envelope
and AAD widths never vary.

Dependencies: cryptography >= 41.0
"""

import os
import logging
from dataclasses import dataclass
from typing import Callable

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .errors import InvalidPublicKey, KeyGenerationError
from .hexutil import BytesLike, to_bytes, to_hex

logger = logging.getLogger(__name__)

CURVE             = ec.SECP256K1()
CURVE_ORDER       = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
PRIVATE_KEY_SIZE  = 32
PUBLIC_KEY_SIZE   = 33
MAX_KEYGEN_ATTEMPTS = 64


@dataclass(frozen=True)
class KeyPair:
    """Recipient key pair. Never transmitted; persisting it is the caller's job."""

    private_key: bytes
    public_key:  bytes

    @classmethod
    def generate(cls, randbytes: Callable[[int], bytes] = os.urandom) -> "KeyPair":
        return generate_keypair(randbytes)

    @classmethod
    def from_private_key(cls, private_key: BytesLike) -> "KeyPair":
        raw  = to_bytes(private_key, PRIVATE_KEY_SIZE, "private key")
        priv = load_private_key(raw)
        return cls(private_key=raw, public_key=encode_public_key(priv.public_key()))

    @property
    def private_hex(self) -> str:
        return to_hex(self.private_key)

    @property
    def public_hex(self) -> str:
        return to_hex(self.public_key)

    def __repr__(self):
        return f"KeyPair(public_key={self.public_hex})"


def _valid_scalar(value: int) -> bool:
    return 0 < value < CURVE_ORDER


def generate_keypair(randbytes: Callable[[int], bytes] = os.urandom) -> KeyPair:
    """
    Draw 32 random bytes until they form a scalar in [1, n-1].
    Out-of-range draws (probability ~2^-128) are retried, not clamped.
    Raises KeyGenerationError if the entropy source fails or keeps
    producing invalid scalars.
    """
    for attempt in range(1, MAX_KEYGEN_ATTEMPTS + 1):
        try:
            raw = randbytes(PRIVATE_KEY_SIZE)
        except Exception as exc:
            raise KeyGenerationError("Entropy source failed.") from exc
        if raw is None or len(raw) != PRIVATE_KEY_SIZE:
            raise KeyGenerationError("Entropy source returned a short read.")
        if not _valid_scalar(int.from_bytes(raw, "big")):
            logger.debug(f"Rejected out-of-range scalar on attempt {attempt}")
            continue
        priv = ec.derive_private_key(int.from_bytes(raw, "big"), CURVE)
        return KeyPair(private_key=bytes(raw),
                       public_key=encode_public_key(priv.public_key()))
    raise KeyGenerationError(
        f"No valid scalar after {MAX_KEYGEN_ATTEMPTS} attempts -- entropy source is broken."
    )


def load_private_key(private_key: BytesLike) -> ec.EllipticCurvePrivateKey:
    raw   = to_bytes(private_key, PRIVATE_KEY_SIZE, "private key")
    value = int.from_bytes(raw, "big")
    if not _valid_scalar(value):
        raise ValueError("Private key scalar outside [1, n-1].")
    return ec.derive_private_key(value, CURVE)


def load_public_key(public_key: BytesLike) -> ec.EllipticCurvePublicKey:
    """Parse a compressed point. Anything else raises InvalidPublicKey."""
    try:
        raw = to_bytes(public_key, label="public key")
    except (TypeError, ValueError) as exc:
        raise InvalidPublicKey(str(exc)) from exc
    if len(raw) != PUBLIC_KEY_SIZE or raw[0] not in (0x02, 0x03):
        raise InvalidPublicKey(
            f"Public key must be a {PUBLIC_KEY_SIZE}-byte compressed point."
        )
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, raw)
    except ValueError as exc:
        raise InvalidPublicKey("Public key is not a point on secp256k1.") from exc


def encode_public_key(public_key: ec.EllipticCurvePublicKey) -> bytes:
    return public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.CompressedPoint,
    )


def shared_secret(private_key: ec.EllipticCurvePrivateKey,
                  public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Raw ECDH output (x-coordinate). Never use it directly as a cipher key."""
    return private_key.exchange(ec.ECDH(), public_key)
