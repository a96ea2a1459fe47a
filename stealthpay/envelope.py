"""
Envelope Codec
==============
Packs everything the recipient needs to open a deposit into one opaque blob.

Bundle format (no length prefixes, every field but the last is fixed-width):

    deposit_id(32) || ephemeral_public_key(33) || nonce(N) || sealed(...)

N is the nonce width of the configured cipher (12 for AES-GCM and
ChaCha20-Poly1305, 32 for the keystream cipher). ``sealed`` is the rest of
the buffer and includes the authentication tag where the cipher has one.
"""

from dataclasses import dataclass

from .errors import MalformedEnvelope
from .keys import PUBLIC_KEY_SIZE

DEPOSIT_ID_SIZE    = 32
EPHEMERAL_KEY_SIZE = PUBLIC_KEY_SIZE
DEFAULT_NONCE_SIZE = 12


def prefix_size(nonce_size: int = DEFAULT_NONCE_SIZE) -> int:
    return DEPOSIT_ID_SIZE + EPHEMERAL_KEY_SIZE + nonce_size


@dataclass(frozen=True)
class Envelope:
    deposit_id:           bytes
    ephemeral_public_key: bytes
    nonce:                bytes
    sealed:               bytes

    def to_bytes(self) -> bytes:
        return bundle(self.deposit_id, self.ephemeral_public_key,
                      self.nonce, self.sealed, nonce_size=len(self.nonce))


def _check_width(name: str, value: bytes, size: int):
    if len(value) != size:
        raise MalformedEnvelope(f"{name} must be {size} bytes, got {len(value)}.")


def bundle(deposit_id: bytes, ephemeral_public_key: bytes, nonce: bytes,
           sealed: bytes, nonce_size: int = DEFAULT_NONCE_SIZE) -> bytes:
    _check_width("deposit_id", deposit_id, DEPOSIT_ID_SIZE)
    _check_width("ephemeral_public_key", ephemeral_public_key, EPHEMERAL_KEY_SIZE)
    _check_width("nonce", nonce, nonce_size)
    return bytes(deposit_id) + bytes(ephemeral_public_key) + bytes(nonce) + bytes(sealed)


def unbundle(data: bytes, nonce_size: int = DEFAULT_NONCE_SIZE) -> Envelope:
    """
    Split a bundle back into its fields.
    Raises MalformedEnvelope if the buffer cannot hold the fixed prefix.
    """
    if data is None:
        raise MalformedEnvelope("Envelope is empty.")
    data = bytes(data)
    if len(data) < prefix_size(nonce_size):
        raise MalformedEnvelope(
            f"Envelope too short: {len(data)} bytes, "
            f"need at least {prefix_size(nonce_size)}."
        )
    eph_end   = DEPOSIT_ID_SIZE + EPHEMERAL_KEY_SIZE
    nonce_end = eph_end + nonce_size
    return Envelope(
        deposit_id           = data[:DEPOSIT_ID_SIZE],
        ephemeral_public_key = data[DEPOSIT_ID_SIZE:eph_end],
        nonce                = data[eph_end:nonce_end],
        sealed               = data[nonce_end:],
    )
