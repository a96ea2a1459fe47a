"""Encryption engine: seal/open under every cipher strategy."""

import os

import pytest

from stealthpay.aad     import DepositContext, context_tag_for, pack_aad
from stealthpay.ciphers import CIPHERS, KeystreamCipher, get_cipher
from stealthpay.engine  import MAX_PLAINTEXT_SIZE, EncryptionEngine
from stealthpay.envelope import unbundle
from stealthpay.errors  import DecryptionError, EncryptionError
from stealthpay.keys    import generate_keypair
from stealthpay.payload import ClaimPayload, commitment_of

from conftest import CONTRACT, address

AEAD_CIPHERS = ["aes-gcm", "chacha20-poly1305"]


def sample_aad():
    return DepositContext.create(270, CONTRACT).pack(os.urandom(32))


# ── round trip ───────────────────────────────────────────────────────────────
@pytest.mark.parametrize("cipher", sorted(CIPHERS))
def test_roundtrip(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    msg    = ClaimPayload.create(address(7)).to_bytes()
    s      = engine.seal(kp.public_key, msg, aad)
    result = engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, s.sealed, aad)
    assert result.ok
    assert result.plaintext == msg


@pytest.mark.parametrize("cipher", sorted(CIPHERS))
def test_roundtrip_empty_and_max_plaintext(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    for msg in (b"", os.urandom(MAX_PLAINTEXT_SIZE)):
        s = engine.seal(kp.public_key, msg, aad)
        assert engine.open(kp, s.ephemeral_public_key, s.nonce, s.sealed, aad).plaintext == msg


@pytest.mark.parametrize("cipher", sorted(CIPHERS))
def test_each_seal_uses_fresh_ephemeral_key_and_nonce(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    a = engine.seal(kp.public_key, b"same", aad)
    b = engine.seal(kp.public_key, b"same", aad)
    assert a.ephemeral_public_key != b.ephemeral_public_key
    assert a.nonce != b.nonce
    assert len(a.nonce) == get_cipher(cipher).NONCE_SIZE


@pytest.mark.parametrize("cipher", sorted(CIPHERS))
def test_open_is_deterministic(cipher):
    engine = EncryptionEngine(cipher)
    kp, other = generate_keypair(), generate_keypair()
    aad = sample_aad()
    s   = engine.seal(kp.public_key, b"payload", aad)
    for key in (kp.private_key, other.private_key):
        first  = engine.open(key, s.ephemeral_public_key, s.nonce, s.sealed, aad)
        second = engine.open(key, s.ephemeral_public_key, s.nonce, s.sealed, aad)
        assert (first.ok, first.plaintext) == (second.ok, second.plaintext)


# ── AAD binding ──────────────────────────────────────────────────────────────
@pytest.mark.parametrize("cipher", AEAD_CIPHERS)
def test_any_aad_byte_change_fails(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    s      = engine.seal(kp.public_key, b"bound to one deposit", aad)
    for i in range(len(aad)):
        bad = bytearray(aad)
        bad[i] ^= 0x01
        result = engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, s.sealed, bytes(bad))
        assert not result.ok
        assert isinstance(result.error, DecryptionError)
        assert result.plaintext is None


def test_keystream_aad_change_yields_noise():
    engine = EncryptionEngine("keystream")
    kp     = generate_keypair()
    aad    = sample_aad()
    msg    = ClaimPayload.create(address(7)).to_bytes()
    s      = engine.seal(kp.public_key, msg, aad)
    for i in (0, 40, 60, 115):
        bad = bytearray(aad)
        bad[i] ^= 0x01
        result = engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, s.sealed, bytes(bad))
        assert result.plaintext != msg
        assert not ClaimPayload.from_bytes(result.plaintext).addressed_to(address(7))


def test_keystream_mask_is_keccak_of_key_aad_nonce():
    from stealthpay.payload import hash32
    cipher = KeystreamCipher()
    key, nonce, aad = os.urandom(32), os.urandom(32), sample_aad()
    mask = cipher.encrypt(key, nonce, bytes(52), aad)
    assert mask[:32] == hash32(key + aad + nonce)
    assert mask[32:] == hash32(key + aad + nonce + b"\x00\x00\x00\x01")[:20]


# ── wrong key ────────────────────────────────────────────────────────────────
@pytest.mark.parametrize("cipher", AEAD_CIPHERS)
def test_wrong_key_fails_cleanly(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    s      = engine.seal(kp.public_key, b"not for you", aad)
    for _ in range(5):
        result = engine.open(generate_keypair().private_key,
                             s.ephemeral_public_key, s.nonce, s.sealed, aad)
        assert not result.ok
        assert not result


def test_keystream_wrong_key_decodes_to_foreign_address():
    engine  = EncryptionEngine(KeystreamCipher())
    kp      = generate_keypair()
    aad     = sample_aad()
    payload = ClaimPayload.create(address(9))
    s       = engine.seal(kp.public_key, payload.to_bytes(), aad)
    for _ in range(5):
        result = engine.open(generate_keypair().private_key,
                             s.ephemeral_public_key, s.nonce, s.sealed, aad)
        # no tag: "success", but the structure does not survive
        assert result.ok
        assert result.plaintext != payload.to_bytes()
        assert not ClaimPayload.from_bytes(result.plaintext).addressed_to(address(9))


@pytest.mark.parametrize("cipher", AEAD_CIPHERS)
def test_tampered_ciphertext_fails(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    s      = engine.seal(kp.public_key, b"integrity", aad)
    bad    = bytearray(s.sealed)
    bad[0] ^= 0xFF
    assert not engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, bytes(bad), aad).ok


# ── malformed input never raises ─────────────────────────────────────────────
@pytest.mark.parametrize("cipher", sorted(CIPHERS))
def test_garbage_inputs_return_failure(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    s      = engine.seal(kp.public_key, b"x" * 52, aad)
    cases = [
        (kp.private_key, b"\x04" + bytes(64), s.nonce, s.sealed),
        (kp.private_key, b"", s.nonce, s.sealed),
        (kp.private_key, s.ephemeral_public_key, s.nonce[:-1], s.sealed),
        (bytes(32), s.ephemeral_public_key, s.nonce, s.sealed),
        (b"short", s.ephemeral_public_key, s.nonce, s.sealed),
    ]
    for key, eph, nonce, sealed in cases:
        assert not engine.open(key, eph, nonce, sealed, aad).ok

    # wrong types and non-hex strings for the byte fields
    for sealed in (None, 42, "not hex"):
        assert not engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, sealed, aad).ok
    for bad_aad in (None, "abc", 3.5):
        assert not engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, s.sealed, bad_aad).ok
    assert not engine.open(kp.private_key, s.ephemeral_public_key, None, s.sealed, aad).ok


@pytest.mark.parametrize("cipher", AEAD_CIPHERS)
def test_hex_string_inputs_are_accepted(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    s      = engine.seal(kp.public_key, b"x" * 52, aad)
    result = engine.open(kp.private_key, s.ephemeral_public_key,
                         "0x" + s.nonce.hex(), s.sealed.hex(), aad.hex())
    assert result.ok and result.plaintext == b"x" * 52
    # well-formed hex that is not a valid ciphertext fails without raising
    assert not engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, "00" * 68, aad).ok


def test_seal_rejects_non_bytes_aad():
    engine = EncryptionEngine()
    for bad_aad in (None, "abc", 7):
        with pytest.raises(EncryptionError):
            engine.seal(generate_keypair().public_key, b"hi", bad_aad)


@pytest.mark.parametrize("cipher", AEAD_CIPHERS)
def test_truncated_ciphertext_fails(cipher):
    engine = EncryptionEngine(cipher)
    kp     = generate_keypair()
    aad    = sample_aad()
    s      = engine.seal(kp.public_key, b"x" * 52, aad)
    for cut in (0, 5, 16, len(s.sealed) - 1):
        assert not engine.open(kp.private_key, s.ephemeral_public_key, s.nonce, s.sealed[:cut], aad).ok


def test_open_envelope_reports_malformed_without_raising():
    engine = EncryptionEngine()
    result = engine.open_envelope(generate_keypair().private_key, b"\x00" * 10,
                                  lambda dep: pack_aad(1, CONTRACT, bytes(32), dep))
    assert not result.ok
    assert "Malformed" in str(result.error)


# ── sealing errors ───────────────────────────────────────────────────────────
def test_oversized_plaintext_rejected():
    engine = EncryptionEngine()
    with pytest.raises(EncryptionError):
        engine.seal(generate_keypair().public_key, bytes(MAX_PLAINTEXT_SIZE + 1), sample_aad())


def test_bad_recipient_key_rejected():
    engine = EncryptionEngine()
    with pytest.raises(EncryptionError):
        engine.seal(b"\x02" + b"\xff" * 31, b"hi", sample_aad())


def test_key_derivation_separates_ciphers():
    shared = os.urandom(32)
    keys = {EncryptionEngine(name).derive_key(shared) for name in CIPHERS}
    assert len(keys) == len(CIPHERS)
    assert shared not in keys


# ── concrete scenario ────────────────────────────────────────────────────────
def test_concrete_deposit_scenario():
    kp         = generate_keypair()
    recipient  = bytes.fromhex("1234567890abcdef1234567890abcdef12345678")
    secret     = os.urandom(32)
    commitment = commitment_of(secret)
    deposit_id = b"\x01" * 32
    aad = pack_aad(270, "0xabc0000000000000000000000000000000000000",
                   context_tag_for("v1"), deposit_id)

    engine = EncryptionEngine()
    raw    = engine.seal_envelope(deposit_id, kp.public_key, recipient + secret, aad)
    env    = unbundle(raw)
    assert env.deposit_id == deposit_id

    result = engine.open(kp.private_key, env.ephemeral_public_key, env.nonce, env.sealed, aad)
    assert result.ok
    assert result.plaintext[:20] == recipient
    assert commitment_of(result.plaintext[20:52]) == commitment
