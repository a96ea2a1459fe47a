"""
stealthpay — Live Demo: register, deposit, scan, claim
======================================================
Run:  python examples/demo_private_pay.py

Walks one private payment through the in-memory inbox, printing what the
public ledger sees versus what only the recipient learns.
Settings come from STEALTHPAY_* environment variables (see stealthpay.config).
"""

import sys, os, time
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stealthpay.access  import AccessGrant
from stealthpay.config  import ProtocolConfig
from stealthpay.hexutil import to_hex
from stealthpay.keys    import KeyPair
from stealthpay.ledger  import InMemoryInbox
from stealthpay.scanner import ClaimClient, DepositScanner
from stealthpay.sender  import DepositSender, register_public_key

LINE      = "═" * 70
ALICE     = bytes.fromhex("a11ce00000000000000000000000000000000001")
BOB       = bytes.fromhex("b0b0000000000000000000000000000000000002")
CAROL     = bytes.fromhex("ca201000000000000000000000000000000000c3")
SENDER    = bytes.fromhex("5e4de50000000000000000000000000000000005")


def header(step, name):
    print(f"\n{LINE}")
    print(f"  Step {step} — {name}")
    print(LINE)


def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")


def short(data: bytes, n: int = 18) -> str:
    h = to_hex(data)
    return h if len(h) <= n else h[:n] + "..."


def main():
    cfg = ProtocolConfig.from_env()
    cfg.configure_logging()

    context = cfg.deposit_context()
    engine  = cfg.engine()
    inbox   = InMemoryInbox()
    grant   = AccessGrant.full("demo")

    print(f"\n{LINE}")
    print("  stealthpay — private L1 → L2 payment demo")
    print(f"  chain={context.chain_id}  cipher={engine.cipher.name}")
    print(LINE)

    # ── STEP 1 ───────────────────────────────────────────────────────────────
    header(1, "Recipients publish public keys")
    alice, bob = KeyPair.generate(), KeyPair.generate()
    register_public_key(alice, inbox.submitter(ALICE))
    register_public_key(bob,   inbox.submitter(BOB))
    ok("Alice public key", short(alice.public_key, 24))
    ok("Bob public key",   short(bob.public_key, 24))

    # ── STEP 2 ───────────────────────────────────────────────────────────────
    header(2, "Sender deposits to Alice (twice) and Bob (once)")
    sender    = DepositSender(context, engine)
    submitter = inbox.submitter(SENDER)
    t0 = time.perf_counter()
    for who, amount in ((ALICE, 5_000), (BOB, 1_200), (ALICE, 750)):
        prepared = sender.prepare_for(who, inbox)
        sender.submit(prepared, amount, submitter)
        ok(f"deposit {short(prepared.deposit_id)}",
           f"commitment={short(prepared.commitment)} envelope={len(prepared.ciphertext)}B")
    ok("Sealed 3 deposits", f"{(time.perf_counter() - t0) * 1000:.2f} ms")
    print("  (the ledger never sees a recipient address or a secret)")

    # ── STEP 3 ───────────────────────────────────────────────────────────────
    header(3, "Alice scans the inbox")
    scanner = DepositScanner(engine, context.aad_builder, ALICE, inbox,
                             max_workers=cfg.scan_workers)
    report  = scanner.scan_recent(alice, grant, limit=cfg.scan_window)
    ok("Examined", str(report.examined))
    for match in report.matches:
        ok(f"Deposit #{match.index}", f"amount={match.amount}")

    # ── STEP 4 ───────────────────────────────────────────────────────────────
    header(4, "Alice claims to a fresh address")
    claims = ClaimClient(inbox.submitter(ALICE), grant)
    for match in report.matches:
        tx = claims.claim(inbox.record(match.index), match, CAROL)
        ok(f"Claimed #{match.index}", tx[:18] + "...")
    ok("Payout balance", str(inbox.balance_of(CAROL)))

    print(f"\n{LINE}")
    print("  Done.")
    print(LINE + "\n")


if __name__ == "__main__":
    main()
