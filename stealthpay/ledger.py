"""
Ledger boundary
===============
The core never talks to a chain directly. It needs three collaborators:

    Submitter     submit(payload, value) -> tx reference
    RecordSource  deposit_count / list_records / fetch_ciphertext
    KeyDirectory  read_public_key(address) -> bytes | None

This module defines those contracts, the public DepositRecord shape, the
directory lookup that keeps "absent" apart from "malformed", and
InMemoryInbox — a reference ledger used by the tests and the demo.
"""

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Protocol

from .access import READ_DEPOSITS, AccessGrant
from .calls import ClaimCall, DepositCall, RegisterCall, decode_call
from .errors import InvalidPublicKey, LedgerReadError, StealthPayError
from .hexutil import BytesLike, parse_address, to_hex
from .keys import load_public_key
from .payload import commitment_matches

logger = logging.getLogger(__name__)

DEFAULT_SCAN_WINDOW = 20


@dataclass(frozen=True)
class DepositRecord:
    """Public, ledger-visible deposit header."""

    index:           int
    deposit_id:      bytes
    commitment:      bytes
    amount:          int
    created_at:      int
    claimed:         bool = False
    ciphertext_size: int = 0


# ── collaborator contracts ───────────────────────────────────────────────────
class Submitter(Protocol):
    def submit(self, payload: bytes, value: int = 0) -> str: ...


class RecordSource(Protocol):
    def deposit_count(self, access: AccessGrant) -> int: ...

    def list_records(self, offset: int, limit: int,
                     access: AccessGrant) -> List[DepositRecord]: ...

    def fetch_ciphertext(self, index: int, access: AccessGrant) -> bytes: ...


class KeyDirectory(Protocol):
    def read_public_key(self, address: bytes) -> Optional[bytes]: ...


# ── key directory lookup ─────────────────────────────────────────────────────
class LookupState(Enum):
    FOUND     = "found"
    ABSENT    = "absent"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class PublicKeyLookup:
    state:      LookupState
    public_key: Optional[bytes] = None
    reason:     str = ""

    @property
    def found(self) -> bool:
        return self.state is LookupState.FOUND


def lookup_public_key(directory: KeyDirectory, address: BytesLike) -> PublicKeyLookup:
    """
    Read the recipient's key from the directory.
    ABSENT and MALFORMED are distinct results; only I/O failures raise
    (LedgerReadError, chained to the collaborator's error).
    """
    address = parse_address(address, "recipient")
    try:
        raw = directory.read_public_key(address)
    except Exception as exc:
        raise LedgerReadError(f"Key directory read failed for {to_hex(address)}.") from exc
    if not raw:
        return PublicKeyLookup(LookupState.ABSENT, reason="recipient not registered")
    try:
        load_public_key(raw)
    except InvalidPublicKey as exc:
        return PublicKeyLookup(LookupState.MALFORMED, reason=str(exc))
    return PublicKeyLookup(LookupState.FOUND, public_key=bytes(raw))


def load_recent_records(source: RecordSource, access: AccessGrant,
                        limit: int = DEFAULT_SCAN_WINDOW) -> List[DepositRecord]:
    """The newest ``limit`` records, oldest first."""
    try:
        total  = source.deposit_count(access)
        window = min(total, limit)
        return list(source.list_records(total - window, window, access))
    except StealthPayError:
        raise
    except Exception as exc:
        raise LedgerReadError("Listing deposit records failed.") from exc


# ── reference ledger ─────────────────────────────────────────────────────────
class Revert(Exception):
    """Raised by InMemoryInbox when a call would revert on chain."""


@dataclass
class _StoredDeposit:
    record:     DepositRecord
    envelope:   bytes
    claimed_to: Optional[bytes] = None


class InMemoryInbox:
    """
    Single-process stand-in for the L1 key directory and the L2 inbox contract.

    Holds the authoritative rules the client only pre-checks: unique deposit
    ids, one claim per deposit, keccak256(secret) == commitment.
    """

    def __init__(self, clock=time.time):
        self._lock      = threading.Lock()
        self._deposits: List[_StoredDeposit] = []
        self._ids:      Dict[bytes, int] = {}
        self._keys:     Dict[bytes, bytes] = {}
        self._balances: Dict[bytes, int] = {}
        self._tx_count  = 0
        self._clock     = clock

    def submitter(self, sender: BytesLike) -> "InboxSubmitter":
        return InboxSubmitter(self, parse_address(sender, "sender"))

    def execute(self, sender: bytes, payload: bytes, value: int = 0) -> str:
        try:
            call = decode_call(payload)
        except ValueError as exc:
            raise Revert(str(exc)) from exc
        logger.debug(f"Inbox call {type(call).__name__} from {to_hex(sender)}")
        with self._lock:
            if isinstance(call, DepositCall):
                self._deposit(call, value)
            elif isinstance(call, ClaimCall):
                self._claim(call)
            elif isinstance(call, RegisterCall):
                self._keys[sender] = bytes(call.public_key)
            self._tx_count += 1
            return "0x%064x" % self._tx_count

    def _deposit(self, call: DepositCall, value: int):
        if call.deposit_id in self._ids:
            raise Revert("duplicate deposit id")
        if not call.envelope:
            raise Revert("empty ciphertext")
        record = DepositRecord(
            index=len(self._deposits),
            deposit_id=bytes(call.deposit_id),
            commitment=bytes(call.commitment),
            amount=int(value),
            created_at=int(self._clock()),
            ciphertext_size=len(call.envelope),
        )
        self._ids[record.deposit_id] = record.index
        self._deposits.append(_StoredDeposit(record, bytes(call.envelope)))
        logger.debug(f"Inbox stored deposit #{record.index} ({record.ciphertext_size}B)")

    def _claim(self, call: ClaimCall):
        if call.index >= len(self._deposits):
            raise Revert("unknown deposit")
        stored = self._deposits[call.index]
        if stored.record.claimed:
            raise Revert("already claimed")
        if not commitment_matches(stored.record.commitment, call.secret):
            raise Revert("bad secret")
        stored.record     = replace(stored.record, claimed=True)
        stored.claimed_to = bytes(call.claim_to)
        self._balances[stored.claimed_to] = (
            self._balances.get(stored.claimed_to, 0) + stored.record.amount
        )

    # KeyDirectory
    def read_public_key(self, address: bytes) -> Optional[bytes]:
        return self._keys.get(bytes(address))

    def set_public_key(self, address: BytesLike, public_key: bytes):
        """Directory write that skips validation (tests store junk keys)."""
        self._keys[parse_address(address)] = bytes(public_key)

    # RecordSource
    def deposit_count(self, access: AccessGrant) -> int:
        access.require(READ_DEPOSITS)
        return len(self._deposits)

    def list_records(self, offset: int, limit: int,
                     access: AccessGrant) -> List[DepositRecord]:
        access.require(READ_DEPOSITS)
        with self._lock:
            return [d.record for d in self._deposits[offset:offset + limit]]

    def fetch_ciphertext(self, index: int, access: AccessGrant) -> bytes:
        access.require(READ_DEPOSITS)
        return self._deposits[index].envelope

    def record(self, index: int) -> DepositRecord:
        return self._deposits[index].record

    def balance_of(self, address: BytesLike) -> int:
        return self._balances.get(parse_address(address), 0)


@dataclass
class InboxSubmitter:
    """Submitter bound to one sending account of an InMemoryInbox."""

    inbox:  InMemoryInbox
    sender: bytes
    sent:   List[str] = field(default_factory=list)

    def submit(self, payload: bytes, value: int = 0) -> str:
        tx = self.inbox.execute(self.sender, payload, value)
        self.sent.append(tx)
        return tx
