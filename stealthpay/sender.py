"""
Sender flow
===========
Turns "pay this L2 address" into an opaque deposit the L1 can carry:

    1. Look up the recipient's public key (absent != malformed)
    2. Draw a random deposit id and a random secret
    3. commitment = keccak256(secret)
    4. Seal recipient_address || secret under AAD(chain, contract, tag, id)
    5. Bundle into the envelope and encode the deposit call

Only deposit_id, commitment and the envelope ever reach the ledger.
Submission happens once; re-submitting would create a second deposit with a
new id, so retrying is left to the caller.
"""

import os
import logging
from dataclasses import dataclass

from .aad import DepositContext
from .calls import encode_deposit, encode_register
from .engine import EncryptionEngine
from .envelope import DEPOSIT_ID_SIZE
from .errors import InvalidPublicKey, RecipientNotRegistered, SubmissionError
from .hexutil import BytesLike, parse_address, to_hex
from .keys import KeyPair
from .ledger import KeyDirectory, LookupState, Submitter, lookup_public_key
from .payload import ClaimPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedDeposit:
    deposit_id: bytes
    secret:     bytes
    commitment: bytes
    ciphertext: bytes
    aad:        bytes
    recipient:  bytes

    @property
    def call_payload(self) -> bytes:
        return encode_deposit(self.deposit_id, self.commitment, self.ciphertext)

    def __repr__(self):
        return (f"PreparedDeposit(deposit_id={to_hex(self.deposit_id)}, "
                f"commitment={to_hex(self.commitment)}, "
                f"ciphertext={len(self.ciphertext)}B)")


class DepositSender:
    """Builds and submits stealth deposits for one deployment context."""

    def __init__(self, context: DepositContext, engine: EncryptionEngine = None):
        self.context = context
        self.engine  = engine or EncryptionEngine()

    def prepare(self, recipient_address: BytesLike,
                recipient_public_key: bytes) -> PreparedDeposit:
        """Raises EncryptionError / ValueError before anything touches the network."""
        payload    = ClaimPayload.create(recipient_address)
        deposit_id = os.urandom(DEPOSIT_ID_SIZE)
        aad        = self.context.pack(deposit_id)
        ciphertext = self.engine.seal_envelope(
            deposit_id, recipient_public_key, payload.to_bytes(), aad
        )
        return PreparedDeposit(
            deposit_id=deposit_id,
            secret=payload.secret,
            commitment=payload.commitment,
            ciphertext=ciphertext,
            aad=aad,
            recipient=payload.recipient,
        )

    def prepare_for(self, recipient_address: BytesLike,
                    directory: KeyDirectory) -> PreparedDeposit:
        lookup = lookup_public_key(directory, recipient_address)
        if lookup.state is LookupState.ABSENT:
            raise RecipientNotRegistered(
                f"{to_hex(parse_address(recipient_address))} has no public key on file."
            )
        if lookup.state is LookupState.MALFORMED:
            raise InvalidPublicKey(f"Directory key unusable: {lookup.reason}")
        return self.prepare(recipient_address, lookup.public_key)

    def submit(self, prepared: PreparedDeposit, amount: int,
               submitter: Submitter) -> str:
        try:
            tx = submitter.submit(prepared.call_payload, amount)
        except Exception as exc:
            raise SubmissionError(
                f"Deposit {to_hex(prepared.deposit_id)} was not submitted."
            ) from exc
        logger.info(f"Deposit {to_hex(prepared.deposit_id)[:18]}... submitted: {tx}")
        return tx


def register_public_key(keypair: KeyPair, submitter: Submitter) -> str:
    """Publish the recipient's public key to the key directory."""
    try:
        tx = submitter.submit(encode_register(keypair.public_key), 0)
    except Exception as exc:
        raise SubmissionError("Public key registration was not submitted.") from exc
    logger.info(f"Registered public key {keypair.public_hex[:18]}...: {tx}")
    return tx
