"""
Cipher strategies, selected by name at configuration time.

    aes-gcm            AES-256-GCM (default)
    chacha20-poly1305  ChaCha20-Poly1305
    keystream          Keccak-256 XOR keystream, unauthenticated
"""

from .base      import SymmetricCipher
from .aes_gcm   import AESGCMCipher
from .chacha    import ChaChaCipher
from .keystream import KeystreamCipher

DEFAULT_CIPHER = AESGCMCipher.name

CIPHERS = {
    AESGCMCipher.name:    AESGCMCipher,
    ChaChaCipher.name:    ChaChaCipher,
    KeystreamCipher.name: KeystreamCipher,
}


def get_cipher(name: str = DEFAULT_CIPHER) -> SymmetricCipher:
    try:
        return CIPHERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown cipher {name!r}; choose one of {', '.join(sorted(CIPHERS))}."
        ) from None


__all__ = [
    "SymmetricCipher",
    "AESGCMCipher",
    "ChaChaCipher",
    "KeystreamCipher",
    "CIPHERS",
    "DEFAULT_CIPHER",
    "get_cipher",
]
