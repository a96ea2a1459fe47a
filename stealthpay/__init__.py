"""
stealthpay — confidential-recipient deposits across two ledgers
================================================================
A sender on L1 funds a recipient on L2 without naming them on L1. The L1
transaction carries only an opaque deposit: a random id, a commitment and an
envelope. The recipient finds their deposits by trial decryption and claims
them by revealing the secret behind the commitment.

Layers:
    keys      secp256k1 key pairs, compressed public keys, ECDH
    envelope  deposit_id || ephemeral_pub || nonce || sealed
    engine    ECDH + HKDF-SHA256 + cipher strategy, AAD-bound seal/open
    ciphers   AES-256-GCM (default) | ChaCha20-Poly1305 | Keccak-256 keystream
    scanner   trial-decrypt deposit records, validate claims
    sender    build and submit deposits
    ledger    collaborator contracts + InMemoryInbox reference ledger
"""

__version__ = "1.0.0"

from .aad      import DepositContext, pack_aad, unpack_aad
from .access   import AccessGrant
from .ciphers  import AESGCMCipher, ChaChaCipher, KeystreamCipher, get_cipher
from .config   import ProtocolConfig
from .engine   import EncryptionEngine, OpenResult, SealedPayload
from .envelope import Envelope, bundle, unbundle
from .errors   import (
    AuthorizationRequired,
    ClaimValidationError,
    ConfigError,
    DecryptionError,
    EncryptionError,
    InvalidPublicKey,
    KeyGenerationError,
    LedgerReadError,
    MalformedEnvelope,
    RecipientNotRegistered,
    StealthPayError,
    SubmissionError,
)
from .keys     import KeyPair, generate_keypair
from .ledger   import DepositRecord, InMemoryInbox, PublicKeyLookup, lookup_public_key
from .payload  import ClaimPayload, commitment_of
from .scanner  import (
    ClaimClient,
    DecryptedMatch,
    DepositScanner,
    ScanReport,
    require_claimable,
    scan,
    validate_claim,
)
from .sender   import DepositSender, PreparedDeposit, register_public_key

__all__ = [
    "AccessGrant",
    "AESGCMCipher",
    "AuthorizationRequired",
    "ChaChaCipher",
    "ClaimClient",
    "ClaimPayload",
    "ClaimValidationError",
    "ConfigError",
    "DecryptedMatch",
    "DecryptionError",
    "DepositContext",
    "DepositRecord",
    "DepositScanner",
    "DepositSender",
    "EncryptionEngine",
    "EncryptionError",
    "Envelope",
    "InMemoryInbox",
    "InvalidPublicKey",
    "KeyGenerationError",
    "KeyPair",
    "KeystreamCipher",
    "LedgerReadError",
    "MalformedEnvelope",
    "OpenResult",
    "PreparedDeposit",
    "ProtocolConfig",
    "PublicKeyLookup",
    "RecipientNotRegistered",
    "ScanReport",
    "SealedPayload",
    "StealthPayError",
    "SubmissionError",
    "bundle",
    "commitment_of",
    "generate_keypair",
    "get_cipher",
    "lookup_public_key",
    "pack_aad",
    "register_public_key",
    "require_claimable",
    "scan",
    "unbundle",
    "unpack_aad",
    "validate_claim",
]
