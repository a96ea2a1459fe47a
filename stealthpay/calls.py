"""
Call payloads handed to the submission collaborator.

Each call is a 4-byte selector followed by fixed-width fields; only the last
field of a deposit (the envelope) is variable.

Selectors are the Solidity ones, keccak256(signature)[:4]. The arguments that
follow are tightly packed rather than ABI-encoded (no 32-byte word padding, no
dynamic offsets), so a real contract call still needs an ABI encoder on top.

    deposit   selector || deposit_id(32) || commitment(32) || envelope(...)
    claim     selector || index(32, uint256) || secret(32) || claim_to(20)
    register  selector || public_key(33)
"""

from collections import namedtuple

from .envelope import DEPOSIT_ID_SIZE
from .hexutil import ADDRESS_SIZE, uint256
from .keys import PUBLIC_KEY_SIZE
from .payload import COMMITMENT_SIZE, SECRET_SIZE, hash32

SELECTOR_SIZE = 4


def _selector(signature: str) -> bytes:
    return hash32(signature.encode())[:SELECTOR_SIZE]


DEPOSIT_SELECTOR  = _selector("onL1Deposit(bytes32,bytes32,bytes)")
CLAIM_SELECTOR    = _selector("claim(uint256,bytes32,address)")
REGISTER_SELECTOR = _selector("register(bytes)")

DepositCall  = namedtuple("DepositCall", "deposit_id commitment envelope")
ClaimCall    = namedtuple("ClaimCall", "index secret claim_to")
RegisterCall = namedtuple("RegisterCall", "public_key")


def encode_deposit(deposit_id: bytes, commitment: bytes, envelope: bytes) -> bytes:
    if len(deposit_id) != DEPOSIT_ID_SIZE or len(commitment) != COMMITMENT_SIZE:
        raise ValueError("deposit_id and commitment must be 32 bytes each.")
    return DEPOSIT_SELECTOR + deposit_id + commitment + envelope


def encode_claim(index: int, secret: bytes, claim_to: bytes) -> bytes:
    if len(secret) != SECRET_SIZE or len(claim_to) != ADDRESS_SIZE:
        raise ValueError("secret must be 32 bytes and claim_to 20 bytes.")
    return CLAIM_SELECTOR + uint256(index) + secret + claim_to


def encode_register(public_key: bytes) -> bytes:
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise ValueError(f"public key must be {PUBLIC_KEY_SIZE} bytes.")
    return REGISTER_SELECTOR + public_key


def decode_call(payload: bytes):
    """Return a DepositCall, ClaimCall or RegisterCall. Raises ValueError."""
    selector, body = payload[:SELECTOR_SIZE], payload[SELECTOR_SIZE:]
    if selector == DEPOSIT_SELECTOR:
        if len(body) < DEPOSIT_ID_SIZE + COMMITMENT_SIZE:
            raise ValueError("deposit call truncated.")
        return DepositCall(body[:32], body[32:64], body[64:])
    if selector == CLAIM_SELECTOR:
        if len(body) != 32 + SECRET_SIZE + ADDRESS_SIZE:
            raise ValueError("claim call has the wrong length.")
        return ClaimCall(int.from_bytes(body[:32], "big"), body[32:64], body[64:])
    if selector == REGISTER_SELECTOR:
        if len(body) != PUBLIC_KEY_SIZE:
            raise ValueError("register call has the wrong length.")
        return RegisterCall(body)
    raise ValueError(f"Unknown selector 0x{selector.hex()}.")
