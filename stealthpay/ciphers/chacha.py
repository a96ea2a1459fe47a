"""
ChaCha20-Poly1305 strategy
==========================
ChaCha20 stream cipher + Poly1305 tag (RFC 8439, 96-bit nonce). Same
guarantees as the AES-GCM strategy; faster on hardware without AES-NI.

Dependencies: cryptography >= 41.0
"""

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from ..errors import DecryptionError
from .base import SymmetricCipher


class ChaChaCipher(SymmetricCipher):
    """ChaCha20-Poly1305 authenticated stream encryption."""

    name       = "chacha20-poly1305"
    KEY_SIZE   = 32
    NONCE_SIZE = 12
    TAG_SIZE   = 16

    def encrypt(self, key: bytes, nonce: bytes, plaintext: bytes, aad: bytes) -> bytes:
        self.check_key(key)
        self.check_nonce(nonce)
        return ChaCha20Poly1305(key).encrypt(nonce, plaintext, aad)

    def decrypt(self, key: bytes, nonce: bytes, ciphertext: bytes, aad: bytes) -> bytes:
        self.check_key(key)
        self.check_nonce(nonce)
        if len(ciphertext) < self.TAG_SIZE:
            raise DecryptionError("Ciphertext shorter than the Poly1305 tag.")
        try:
            return ChaCha20Poly1305(key).decrypt(nonce, ciphertext, aad)
        except InvalidTag:
            raise DecryptionError("Poly1305 authentication tag mismatch.") from None
