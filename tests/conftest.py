import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from stealthpay.aad      import DepositContext
from stealthpay.access   import AccessGrant
from stealthpay.engine   import EncryptionEngine
from stealthpay.keys     import KeyPair
from stealthpay.ledger   import InMemoryInbox
from stealthpay.sender   import DepositSender

CONTRACT = "0xabc0000000000000000000000000000000000001"
SENDER   = "0x5e4de50000000000000000000000000000000001"


def address(n: int) -> bytes:
    return bytes(19) + bytes([n])


@pytest.fixture
def context():
    return DepositContext.create(270, CONTRACT)


@pytest.fixture
def inbox():
    return InMemoryInbox(clock=lambda: 1_700_000_000)


@pytest.fixture
def access():
    return AccessGrant.full("tests")


@pytest.fixture
def recipient():
    return KeyPair.generate()


def make_sender(context, cipher="aes-gcm"):
    return DepositSender(context, EncryptionEngine(cipher))
