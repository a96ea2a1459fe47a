"""
Symmetric cipher strategy interface.

The encryption engine derives a fresh 32-byte key per deposit and hands it to
one of these strategies together with a random nonce and the deposit's AAD.
Strategies are stateless; one instance can serve any number of threads.
"""

from abc import ABC, abstractmethod


class SymmetricCipher(ABC):
    """Keyed encrypt/decrypt with caller-supplied nonce and AAD."""

    name          = ""
    KEY_SIZE      = 32
    NONCE_SIZE    = 12
    TAG_SIZE      = 16
    authenticated = True

    def check_key(self, key: bytes):
        if len(key) != self.KEY_SIZE:
            raise ValueError(f"{self.name} key must be {self.KEY_SIZE} bytes.")

    def check_nonce(self, nonce: bytes):
        if len(nonce) != self.NONCE_SIZE:
            raise ValueError(f"{self.name} nonce must be {self.NONCE_SIZE} bytes.")

    @abstractmethod
    def encrypt(self, key: bytes, nonce: bytes, plaintext: bytes, aad: bytes) -> bytes:
        """Return ciphertext (with tag appended where the cipher has one)."""

    @abstractmethod
    def decrypt(self, key: bytes, nonce: bytes, ciphertext: bytes, aad: bytes) -> bytes:
        """Return plaintext or raise DecryptionError."""

    def __repr__(self):
        return f"{type(self).__name__}({self.name})"
