"""
Error taxonomy
==============
Every failure the package raises derives from StealthPayError.

Sender path  — KeyGenerationError, InvalidPublicKey, EncryptionError,
               RecipientNotRegistered, SubmissionError. Surfaced at once;
               nothing usable can be produced past them.
Recipient    — MalformedEnvelope, DecryptionError. Expected for every
               deposit not addressed to the caller; the scanner absorbs them.
Claim path   — ClaimValidationError, AuthorizationRequired, SubmissionError.
Collaborator — LedgerReadError, SubmissionError wrap the underlying error
               (always chained with ``raise ... from exc``).
"""


class StealthPayError(Exception):
    """Base class for all stealthpay errors."""


class ConfigError(StealthPayError, ValueError):
    """Configuration value missing or unparseable."""


class KeyGenerationError(StealthPayError):
    """Entropy source failed or never produced a valid scalar."""


class InvalidPublicKey(StealthPayError, ValueError):
    """Public key is not a compressed secp256k1 point."""


class EncryptionError(StealthPayError):
    """Plaintext rejected before sealing (oversized or unusable key)."""


class MalformedEnvelope(StealthPayError, ValueError):
    """Envelope bundle is structurally too short or mis-sized."""


class DecryptionError(StealthPayError):
    """Authenticated decryption failed: wrong key, wrong AAD, or tampered."""


class ClaimValidationError(StealthPayError):
    """Revealed secret does not open the stored commitment, or already claimed."""


class RecipientNotRegistered(StealthPayError):
    """Key directory holds no public key for the recipient."""


class AuthorizationRequired(StealthPayError):
    """Access grant missing, revoked, or lacking the needed scope."""


class SubmissionError(StealthPayError):
    """Transaction submission collaborator failed."""


class LedgerReadError(StealthPayError):
    """Reading records, ciphertexts or keys from the ledger failed."""
