"""
Encryption Engine — ECDH + HKDF + symmetric strategy
=====================================================
Seals a short, fixed-layout plaintext to a recipient's secp256k1 public key
under a domain-bound AAD, and opens it again with the matching private key.

Protocol:
  1. Sender calls seal(recipient_pub, plaintext, aad):
       a. Fresh ephemeral key pair (never reused)
       b. shared = ECDH(ephemeral_priv, recipient_pub)
       c. key    = HKDF-SHA256(shared, info="stealthpay:v1:" + cipher name)
       d. nonce  = random; sealed = cipher.encrypt(key, nonce, plaintext, aad)
       e. Return (ephemeral_pub, nonce, sealed)
  2. Recipient calls open(priv, ephemeral_pub, nonce, sealed, aad):
       a. shared = ECDH(priv, ephemeral_pub)      — same value as 1b
       b. Derive the same key
       c. cipher.decrypt -> OpenResult

open() never raises for a wrong key, a wrong AAD or garbage input. The
scanner calls it speculatively against every deposit on the ledger and most
of those belong to somebody else; failure there is routine.

Dependencies: cryptography >= 41.0
"""

import os
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .ciphers import SymmetricCipher, get_cipher
from .envelope import Envelope, bundle, unbundle
from .errors import (
    DecryptionError,
    EncryptionError,
    InvalidPublicKey,
    MalformedEnvelope,
)
from .hexutil import to_bytes
from .keys import (
    KeyPair,
    generate_keypair,
    load_private_key,
    load_public_key,
    shared_secret,
)

logger = logging.getLogger(__name__)

MAX_PLAINTEXT_SIZE = 128
KDF_INFO_PREFIX    = b"stealthpay:v1:"


@dataclass(frozen=True)
class SealedPayload:
    ephemeral_public_key: bytes
    nonce:                bytes
    sealed:               bytes


@dataclass(frozen=True)
class OpenResult:
    """Outcome of open(): plaintext on success, a DecryptionError otherwise."""

    plaintext: Optional[bytes] = None
    error:     Optional[DecryptionError] = None
    deposit_id: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self):
        return self.ok

    @classmethod
    def success(cls, plaintext: bytes, deposit_id: bytes = None) -> "OpenResult":
        return cls(plaintext=plaintext, deposit_id=deposit_id)

    @classmethod
    def failure(cls, reason: str, deposit_id: bytes = None) -> "OpenResult":
        return cls(error=DecryptionError(reason), deposit_id=deposit_id)


class EncryptionEngine:
    """Stateless seal/open over a configurable symmetric strategy."""

    def __init__(self, cipher: SymmetricCipher = None,
                 max_plaintext: int = MAX_PLAINTEXT_SIZE,
                 randbytes: Callable[[int], bytes] = os.urandom):
        if cipher is None:
            cipher = get_cipher()
        elif isinstance(cipher, str):
            cipher = get_cipher(cipher)
        self.cipher        = cipher
        self.max_plaintext = max_plaintext
        self._randbytes    = randbytes

    @property
    def nonce_size(self) -> int:
        return self.cipher.NONCE_SIZE

    def derive_key(self, shared: bytes) -> bytes:
        """HKDF-SHA256 -- separate the raw ECDH output from the cipher key."""
        return HKDF(
            algorithm=hashes.SHA256(),
            length=self.cipher.KEY_SIZE,
            salt=None,
            info=KDF_INFO_PREFIX + self.cipher.name.encode(),
        ).derive(shared)

    # ── sender side ──────────────────────────────────────────────────────────
    def seal(self, recipient_public_key: bytes, plaintext: bytes,
             aad: bytes) -> SealedPayload:
        """
        Encrypt ``plaintext`` so only the holder of the matching private key
        can read it, and only under the same ``aad``.
        Raises EncryptionError for oversized plaintext or an unusable key.
        """
        if len(plaintext) > self.max_plaintext:
            raise EncryptionError(
                f"Plaintext is {len(plaintext)} bytes; limit is {self.max_plaintext}."
            )
        try:
            recipient = load_public_key(recipient_public_key)
        except InvalidPublicKey as exc:
            raise EncryptionError(f"Recipient public key rejected: {exc}") from exc
        try:
            aad = to_bytes(aad, label="aad")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"AAD rejected: {exc}") from exc

        ephemeral = generate_keypair(self._randbytes)
        key       = self.derive_key(
            shared_secret(load_private_key(ephemeral.private_key), recipient)
        )
        nonce     = self._randbytes(self.nonce_size)
        sealed    = self.cipher.encrypt(key, nonce, bytes(plaintext), aad)
        logger.debug(f"Sealed {len(plaintext)}B -> {len(sealed)}B with {self.cipher.name}")
        return SealedPayload(ephemeral.public_key, nonce, sealed)

    def seal_envelope(self, deposit_id: bytes, recipient_public_key: bytes,
                      plaintext: bytes, aad: bytes) -> bytes:
        """seal() + bundle() in one step."""
        sealed = self.seal(recipient_public_key, plaintext, aad)
        return bundle(deposit_id, sealed.ephemeral_public_key, sealed.nonce,
                      sealed.sealed, nonce_size=self.nonce_size)

    # ── recipient side ───────────────────────────────────────────────────────
    def open(self, private_key, ephemeral_public_key: bytes, nonce: bytes,
             sealed: bytes, aad: bytes) -> OpenResult:
        """
        Try to decrypt. Pure and total: returns an OpenResult, never raises
        for wrong keys, wrong AAD, tampered or malformed input.
        ``private_key`` may be raw bytes or a KeyPair.
        """
        if isinstance(private_key, KeyPair):
            private_key = private_key.private_key
        try:
            priv = load_private_key(private_key)
        except (TypeError, ValueError):
            return OpenResult.failure("Unusable private key.")
        try:
            eph = load_public_key(ephemeral_public_key)
        except InvalidPublicKey:
            return OpenResult.failure("Ephemeral key is not a valid point.")
        try:
            nonce  = to_bytes(nonce, self.nonce_size, "nonce")
            sealed = to_bytes(sealed, label="sealed ciphertext")
            aad    = to_bytes(aad, label="aad")
        except (TypeError, ValueError) as exc:
            return OpenResult.failure(f"Malformed input: {exc}")

        key = self.derive_key(shared_secret(priv, eph))
        try:
            plaintext = self.cipher.decrypt(key, nonce, sealed, aad)
        except DecryptionError as exc:
            return OpenResult(error=exc)
        except (TypeError, ValueError) as exc:
            return OpenResult.failure(f"Cipher rejected input: {exc}")
        return OpenResult.success(plaintext)

    def open_envelope(self, private_key, data: bytes,
                      aad_builder: Callable[[bytes], bytes]) -> OpenResult:
        """
        Unbundle, rebuild the AAD from the embedded deposit id, and open.
        A malformed envelope is reported as a failed result, not decrypted.
        """
        try:
            env: Envelope = unbundle(data, nonce_size=self.nonce_size)
        except MalformedEnvelope as exc:
            return OpenResult.failure(f"Malformed envelope: {exc}")
        result = self.open(private_key, env.ephemeral_public_key, env.nonce,
                           env.sealed, aad_builder(env.deposit_id))
        return OpenResult(plaintext=result.plaintext, error=result.error,
                          deposit_id=env.deposit_id)

    def __repr__(self):
        return f"EncryptionEngine({self.cipher.name}, max_plaintext={self.max_plaintext})"
