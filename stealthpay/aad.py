"""
Domain binding (AAD)
====================
Every ciphertext is bound to one chain, one contract, one protocol version
and one deposit. The packed AAD is fixed-width and positional:

    chain_id(32, uint256 BE) || contract(20) || context_tag(32) || deposit_id(32)

116 bytes in total. Replaying a ciphertext with any other field value fails
tag verification (AEAD strategies) or decodes to noise (keystream).
"""

from dataclasses import dataclass
from typing import Callable, Tuple

from .envelope import DEPOSIT_ID_SIZE
from .hexutil import ADDRESS_SIZE, BytesLike, parse_address, to_bytes, to_hex, uint256
from .payload import hash32

CHAIN_ID_SIZE    = 32
CONTEXT_TAG_SIZE = 32
AAD_SIZE         = CHAIN_ID_SIZE + ADDRESS_SIZE + CONTEXT_TAG_SIZE + DEPOSIT_ID_SIZE

DEFAULT_CONTEXT_LABEL = "private-pay:v1"

AadBuilder = Callable[[bytes], bytes]


def context_tag_for(label: str) -> bytes:
    """Protocol/version tag: hash of a human-readable label."""
    return hash32(label.encode("utf-8"))


def pack_aad(chain_id: int, contract_address: BytesLike, context_tag: BytesLike,
             deposit_id: BytesLike) -> bytes:
    return (uint256(chain_id)
            + parse_address(contract_address, "contract address")
            + to_bytes(context_tag, CONTEXT_TAG_SIZE, "context tag")
            + to_bytes(deposit_id, DEPOSIT_ID_SIZE, "deposit id"))


def unpack_aad(aad: bytes) -> Tuple[int, bytes, bytes, bytes]:
    """Inverse of pack_aad: (chain_id, contract, context_tag, deposit_id)."""
    if len(aad) != AAD_SIZE:
        raise ValueError(f"AAD must be {AAD_SIZE} bytes, got {len(aad)}.")
    a = CHAIN_ID_SIZE
    b = a + ADDRESS_SIZE
    c = b + CONTEXT_TAG_SIZE
    return int.from_bytes(aad[:a], "big"), aad[a:b], aad[b:c], aad[c:]


@dataclass(frozen=True)
class DepositContext:
    """Destination chain, contract and protocol tag shared by all deposits."""

    chain_id:         int
    contract_address: bytes
    context_tag:      bytes

    @classmethod
    def create(cls, chain_id: int, contract_address: BytesLike,
               context_label: str = DEFAULT_CONTEXT_LABEL) -> "DepositContext":
        return cls(chain_id=int(chain_id),
                   contract_address=parse_address(contract_address, "contract address"),
                   context_tag=context_tag_for(context_label))

    def pack(self, deposit_id: BytesLike) -> bytes:
        return pack_aad(self.chain_id, self.contract_address, self.context_tag, deposit_id)

    @property
    def aad_builder(self) -> AadBuilder:
        return self.pack

    def __repr__(self):
        return (f"DepositContext(chain_id={self.chain_id}, "
                f"contract={to_hex(self.contract_address)})")
