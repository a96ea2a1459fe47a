"""
Claim payload and commitment/reveal
===================================
The plaintext sealed into every deposit has one fixed layout:

    recipient_address(20) || secret(32)          = 52 bytes

The ledger stores only ``commitment = keccak256(secret)``. Whoever can decrypt
the envelope learns the secret and can reveal it to claim the funds.
"""

import os
import hmac
from dataclasses import dataclass

from Crypto.Hash import keccak

from .hexutil import ADDRESS_SIZE, ZERO_ADDRESS, BytesLike, parse_address, to_bytes, to_hex

SECRET_SIZE     = 32
COMMITMENT_SIZE = 32
PAYLOAD_SIZE    = ADDRESS_SIZE + SECRET_SIZE


def hash32(data: bytes) -> bytes:
    """Protocol hash: Keccak-256 (the EVM hash, not NIST SHA3-256)."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def new_secret() -> bytes:
    return os.urandom(SECRET_SIZE)


def commitment_of(secret: BytesLike) -> bytes:
    return hash32(to_bytes(secret, SECRET_SIZE, "secret"))


def commitment_matches(commitment: bytes, secret: bytes) -> bool:
    if len(secret) != SECRET_SIZE or len(commitment) != COMMITMENT_SIZE:
        return False
    return hmac.compare_digest(commitment, hash32(secret))


@dataclass(frozen=True)
class ClaimPayload:
    recipient: bytes
    secret:    bytes

    def __post_init__(self):
        if len(self.recipient) != ADDRESS_SIZE:
            raise ValueError(f"recipient must be {ADDRESS_SIZE} bytes.")
        if len(self.secret) != SECRET_SIZE:
            raise ValueError(f"secret must be {SECRET_SIZE} bytes.")

    @classmethod
    def create(cls, recipient: BytesLike) -> "ClaimPayload":
        """New payload for ``recipient`` with a fresh random secret."""
        address = parse_address(recipient, "recipient")
        if address == ZERO_ADDRESS:
            raise ValueError("recipient must not be the zero address.")
        return cls(recipient=address, secret=new_secret())

    @classmethod
    def from_bytes(cls, data: bytes) -> "ClaimPayload":
        """
        Strict parse. Truncated or padded plaintexts raise ValueError; under the
        keystream cipher a wrong key yields exactly such noise.
        """
        if data is None or len(data) != PAYLOAD_SIZE:
            got = 0 if data is None else len(data)
            raise ValueError(f"Claim payload must be {PAYLOAD_SIZE} bytes, got {got}.")
        return cls(recipient=bytes(data[:ADDRESS_SIZE]), secret=bytes(data[ADDRESS_SIZE:]))

    def to_bytes(self) -> bytes:
        return self.recipient + self.secret

    @property
    def commitment(self) -> bytes:
        return hash32(self.secret)

    def addressed_to(self, address: BytesLike) -> bool:
        if self.recipient == ZERO_ADDRESS:
            return False
        return hmac.compare_digest(self.recipient, parse_address(address))

    def __repr__(self):
        return f"ClaimPayload(recipient={to_hex(self.recipient)}, secret=<hidden>)"
