"""
Keystream strategy (lightweight, NOT authenticated)
===================================================
For execution environments without an AEAD primitive. The plaintext is
XORed with a Keccak-256 mask:

    block[0]   = keccak256(key || aad || nonce)
    block[i]   = keccak256(key || aad || nonce || uint32_be(i))     i >= 1
    ciphertext = plaintext XOR (block[0] || block[1] || ...)

The first 32 bytes of mask are exactly keccak256(key || aad || nonce);
later blocks only extend it for plaintexts longer than one digest.

Nonce: 256 bits (32 bytes) — random per seal
Tag:   none

Trade-off: there is no integrity check. A wrong key, a wrong AAD or a
corrupted ciphertext does not fail — it silently yields garbage of the same
length. The AAD still changes the mask, so a ciphertext replayed under
another chain, contract or deposit id decodes to noise. Consumers MUST
validate the decoded structure before acting on it; the scanner does this
by requiring the recovered address to equal the caller's own address.

Dependencies: pycryptodome (Keccak-256)
"""

import struct

from ..payload import hash32
from .base import SymmetricCipher


class KeystreamCipher(SymmetricCipher):
    """XOR keystream over Keccak-256. Confidentiality only."""

    name          = "keystream"
    KEY_SIZE      = 32
    NONCE_SIZE    = 32
    TAG_SIZE      = 0
    authenticated = False

    def _mask(self, key: bytes, nonce: bytes, aad: bytes, length: int) -> bytes:
        seed   = key + (aad or b"") + nonce
        blocks = [hash32(seed)]
        while len(blocks) * 32 < length:
            blocks.append(hash32(seed + struct.pack(">I", len(blocks))))
        return b"".join(blocks)[:length]

    def _xor(self, key: bytes, nonce: bytes, data: bytes, aad: bytes) -> bytes:
        self.check_key(key)
        self.check_nonce(nonce)
        mask = self._mask(key, nonce, aad, len(data))
        return bytes(b ^ m for b, m in zip(data, mask))

    def encrypt(self, key: bytes, nonce: bytes, plaintext: bytes, aad: bytes) -> bytes:
        return self._xor(key, nonce, plaintext, aad)

    def decrypt(self, key: bytes, nonce: bytes, ciphertext: bytes, aad: bytes) -> bytes:
        return self._xor(key, nonce, ciphertext, aad)
