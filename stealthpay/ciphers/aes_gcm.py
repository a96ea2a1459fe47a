"""
AES-256-GCM strategy (default)
==============================
AES-256 in Galois/Counter Mode. Confidentiality, integrity and AAD binding
in one primitive: a wrong key, a wrong AAD or a flipped bit all end in a
clean tag rejection.

Key:   256 bits (32 bytes) — derived per deposit, never reused
Nonce:  96 bits (12 bytes) — random per seal
Tag:   128 bits (16 bytes) — appended to the ciphertext

Dependencies: cryptography >= 41.0
"""

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import DecryptionError
from .base import SymmetricCipher


class AESGCMCipher(SymmetricCipher):
    """AES-256-GCM authenticated encryption."""

    name       = "aes-gcm"
    KEY_SIZE   = 32
    NONCE_SIZE = 12
    TAG_SIZE   = 16

    def encrypt(self, key: bytes, nonce: bytes, plaintext: bytes, aad: bytes) -> bytes:
        self.check_key(key)
        self.check_nonce(nonce)
        return AESGCM(key).encrypt(nonce, plaintext, aad)

    def decrypt(self, key: bytes, nonce: bytes, ciphertext: bytes, aad: bytes) -> bytes:
        """Raises DecryptionError on tag mismatch or truncated input."""
        self.check_key(key)
        self.check_nonce(nonce)
        if len(ciphertext) < self.TAG_SIZE:
            raise DecryptionError("Ciphertext shorter than the GCM tag.")
        try:
            return AESGCM(key).decrypt(nonce, ciphertext, aad)
        except InvalidTag:
            raise DecryptionError("AES-GCM authentication tag mismatch.") from None
