"""Key material: generation, encoding, ECDH."""

import pytest
from cryptography.hazmat.primitives import serialization

from stealthpay.errors import InvalidPublicKey, KeyGenerationError
from stealthpay.keys   import (
    CURVE_ORDER,
    KeyPair,
    generate_keypair,
    load_private_key,
    load_public_key,
    shared_secret,
)

VALID = (12345).to_bytes(32, "big")


def scripted(*draws):
    it = iter(draws)
    return lambda n: next(it)


# ── generation ───────────────────────────────────────────────────────────────
def test_generate_sizes_and_prefix():
    kp = generate_keypair()
    assert len(kp.private_key) == 32
    assert len(kp.public_key) == 33
    assert kp.public_key[0] in (0x02, 0x03)


def test_generate_is_fresh():
    assert generate_keypair().private_key != generate_keypair().private_key


def test_out_of_range_scalars_are_retried():
    zero  = bytes(32)
    order = CURVE_ORDER.to_bytes(32, "big")
    kp = generate_keypair(scripted(zero, order, b"\xff" * 32, VALID))
    assert kp.private_key == VALID
    assert kp.public_key == KeyPair.from_private_key(VALID).public_key


def test_broken_entropy_source_gives_up():
    with pytest.raises(KeyGenerationError):
        generate_keypair(lambda n: bytes(n))


def test_entropy_failure_is_wrapped():
    def boom(n):
        raise OSError("no entropy")
    with pytest.raises(KeyGenerationError) as info:
        generate_keypair(boom)
    assert isinstance(info.value.__cause__, OSError)


def test_short_entropy_read():
    with pytest.raises(KeyGenerationError):
        generate_keypair(lambda n: b"\x01" * (n - 1))


# ── encoding ─────────────────────────────────────────────────────────────────
def test_from_private_key_accepts_hex():
    kp = generate_keypair()
    assert KeyPair.from_private_key(kp.private_hex) == kp


def test_repr_hides_private_key():
    kp = generate_keypair()
    assert kp.private_key.hex() not in repr(kp)


def test_uncompressed_public_key_rejected():
    kp   = generate_keypair()
    full = load_private_key(kp.private_key).public_key().public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    assert len(full) == 65
    with pytest.raises(InvalidPublicKey):
        load_public_key(full)


@pytest.mark.parametrize("bad", [b"", b"\x05" + bytes(32), b"\x02" + bytes(31), "0xzz"])
def test_malformed_public_keys_rejected(bad):
    with pytest.raises(InvalidPublicKey):
        load_public_key(bad)


def test_private_key_zero_rejected():
    with pytest.raises(ValueError):
        load_private_key(bytes(32))


# ── ECDH ─────────────────────────────────────────────────────────────────────
def test_ecdh_is_commutative():
    a, b = generate_keypair(), generate_keypair()
    ab = shared_secret(load_private_key(a.private_key), load_public_key(b.public_key))
    ba = shared_secret(load_private_key(b.private_key), load_public_key(a.public_key))
    assert ab == ba
    assert len(ab) == 32
