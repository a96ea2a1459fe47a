"""
Deposit Scanner & Claim Validator
=================================
The recipient side. Walks the public deposit records, tries to open every
unclaimed envelope with the caller's private key and keeps the ones that
decode to a claim payload addressed to the caller.

Failures are the normal case here — almost every envelope on the ledger
belongs to somebody else — so they are counted and logged at debug level,
never raised. Only collaborator I/O failures surface (LedgerReadError).

Fetching ciphertexts is network-bound; with ``max_workers > 1`` the
fetch+open work runs on a bounded thread pool while results are still
consumed in record order. A ``threading.Event`` passed as ``cancel`` stops
the scan between records; matches found up to that point are returned.

validate_claim() is advisory: it only avoids submitting a claim the ledger
would reject. The ledger's own check is the one that releases funds.
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .aad import AadBuilder
from .access import READ_DEPOSITS, SUBMIT_CLAIMS, AccessGrant
from .calls import encode_claim
from .engine import EncryptionEngine, OpenResult
from .errors import (
    ClaimValidationError,
    LedgerReadError,
    StealthPayError,
    SubmissionError,
)
from .hexutil import ZERO_ADDRESS, BytesLike, parse_address, to_hex
from .keys import KeyPair, load_private_key
from .ledger import (
    DEFAULT_SCAN_WINDOW,
    DepositRecord,
    RecordSource,
    Submitter,
    load_recent_records,
)
from .payload import ClaimPayload, commitment_matches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecryptedMatch:
    index:      int
    deposit_id: bytes
    amount:     int
    created_at: int
    commitment: bytes
    recipient:  bytes
    secret:     bytes

    def __repr__(self):
        return (f"DecryptedMatch(index={self.index}, amount={self.amount}, "
                f"deposit_id={to_hex(self.deposit_id)[:18]}...)")


@dataclass
class ScanReport:
    matches:   List[DecryptedMatch] = field(default_factory=list)
    examined:  int = 0
    skipped:   int = 0
    cancelled: bool = False

    @property
    def indices(self) -> List[int]:
        return [m.index for m in self.matches]


class DepositScanner:
    """Finds the deposits addressed to ``owner_address``."""

    def __init__(self, engine: EncryptionEngine, aad_builder: AadBuilder,
                 owner_address: BytesLike, source: RecordSource,
                 max_workers: int = 1):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1.")
        self.engine        = engine
        self.aad_builder   = aad_builder
        self.owner_address = parse_address(owner_address, "owner address")
        self.source        = source
        self.max_workers   = max_workers

    def scan(self, records: Iterable[DepositRecord], private_key,
             access: AccessGrant,
             cancel: Optional[threading.Event] = None) -> ScanReport:
        access.require(READ_DEPOSITS)
        if isinstance(private_key, KeyPair):
            private_key = private_key.private_key
        load_private_key(private_key)

        report     = ScanReport()
        candidates = []
        for record in records:
            if record.claimed:
                report.skipped += 1
            else:
                candidates.append(record)

        if self.max_workers == 1:
            processed = self._scan_serial(candidates, private_key, access, cancel, report)
        else:
            processed = self._scan_pooled(candidates, private_key, access, cancel, report)
        report.cancelled = processed < len(candidates)

        logger.info(
            f"Scan: {report.examined} examined, {report.skipped} skipped, "
            f"{len(report.matches)} matched"
            + (" (cancelled)" if report.cancelled else "")
        )
        return report

    def scan_recent(self, private_key, access: AccessGrant,
                    limit: int = DEFAULT_SCAN_WINDOW,
                    cancel: Optional[threading.Event] = None) -> ScanReport:
        records = load_recent_records(self.source, access, limit)
        return self.scan(records, private_key, access, cancel)

    def _scan_serial(self, candidates, private_key, access, cancel, report) -> int:
        processed = 0
        for record in candidates:
            if cancel is not None and cancel.is_set():
                break
            self._collect(report, self._try_record(record, private_key, access))
            processed += 1
        return processed

    def _scan_pooled(self, candidates, private_key, access, cancel, report) -> int:
        remaining = iter(candidates)
        pending   = deque()
        processed = 0
        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix="stealthpay-scan") as pool:
            def fill():
                while len(pending) < self.max_workers:
                    if cancel is not None and cancel.is_set():
                        return
                    record = next(remaining, None)
                    if record is None:
                        return
                    pending.append(pool.submit(self._try_record, record,
                                               private_key, access))
            try:
                fill()
                while pending:
                    if cancel is not None and cancel.is_set():
                        break
                    self._collect(report, pending.popleft().result())
                    processed += 1
                    fill()
            finally:
                for future in pending:
                    future.cancel()
        return processed

    def _collect(self, report: ScanReport, outcome):
        if outcome is None:
            report.skipped += 1
            return
        report.examined += 1
        if isinstance(outcome, DecryptedMatch):
            report.matches.append(outcome)

    def _fetch(self, index: int, access: AccessGrant) -> bytes:
        try:
            return self.source.fetch_ciphertext(index, access)
        except StealthPayError:
            raise
        except Exception as exc:
            raise LedgerReadError(f"Fetching ciphertext #{index} failed.") from exc

    def _try_record(self, record: DepositRecord, private_key: bytes,
                    access: AccessGrant):
        """
        None         -> nothing to examine (empty ciphertext)
        False        -> examined, not ours
        DecryptedMatch
        """
        envelope = self._fetch(record.index, access)
        if not envelope:
            logger.debug(f"Record #{record.index}: empty ciphertext, skipped")
            return None
        result = self.engine.open_envelope(private_key, envelope, self.aad_builder)
        return self._match(record, result) or False

    def _match(self, record: DepositRecord,
               result: OpenResult) -> Optional[DecryptedMatch]:
        if not result.ok:
            logger.debug(f"Record #{record.index}: not ours ({result.error})")
            return None
        if result.deposit_id != record.deposit_id:
            logger.debug(f"Record #{record.index}: envelope carries a different deposit id")
            return None
        try:
            payload = ClaimPayload.from_bytes(result.plaintext)
        except ValueError as exc:
            logger.debug(f"Record #{record.index}: unreadable plaintext ({exc})")
            return None
        if not payload.addressed_to(self.owner_address):
            logger.debug(f"Record #{record.index}: decrypted but addressed elsewhere")
            return None
        return DecryptedMatch(
            index=record.index,
            deposit_id=record.deposit_id,
            amount=record.amount,
            created_at=record.created_at,
            commitment=record.commitment,
            recipient=payload.recipient,
            secret=payload.secret,
        )


def scan(records: Iterable[DepositRecord], own_private_key, aad_builder: AadBuilder,
         *, source: RecordSource, owner_address: BytesLike, access: AccessGrant,
         engine: EncryptionEngine = None, max_workers: int = 1,
         cancel: Optional[threading.Event] = None) -> ScanReport:
    """One-shot scan without keeping a DepositScanner around."""
    scanner = DepositScanner(engine or EncryptionEngine(), aad_builder,
                             owner_address, source, max_workers)
    return scanner.scan(records, own_private_key, access, cancel)


# ── claim validation ─────────────────────────────────────────────────────────
def validate_claim(record: DepositRecord, revealed_secret: bytes) -> bool:
    """True iff the secret opens the stored commitment and the deposit is unclaimed."""
    if record.claimed:
        return False
    return commitment_matches(record.commitment, bytes(revealed_secret))


def require_claimable(record: DepositRecord, revealed_secret: bytes):
    if record.claimed:
        raise ClaimValidationError(f"Deposit #{record.index} is already claimed.")
    if not commitment_matches(record.commitment, bytes(revealed_secret)):
        raise ClaimValidationError(
            f"Secret does not match the commitment of deposit #{record.index}."
        )


class ClaimClient:
    """Pre-checks a claim locally, then submits it exactly once."""

    def __init__(self, submitter: Submitter, access: AccessGrant):
        self.submitter = submitter
        self.access    = access

    def claim(self, record: DepositRecord, match: DecryptedMatch,
              claim_to: BytesLike) -> str:
        self.access.require(SUBMIT_CLAIMS)
        if match.index != record.index:
            raise ValueError("Match and record refer to different deposits.")
        require_claimable(record, match.secret)
        destination = parse_address(claim_to, "claim recipient")
        if destination == ZERO_ADDRESS:
            raise ValueError("claim recipient must not be the zero address.")
        try:
            tx = self.submitter.submit(encode_claim(record.index, match.secret, destination), 0)
        except Exception as exc:
            raise SubmissionError(f"Claim for deposit #{record.index} was not submitted.") from exc
        logger.info(f"Claim for deposit #{record.index} -> {to_hex(destination)}: {tx}")
        return tx
