"""
LAN Chat - Cryptography tests.

Created by orpheus497

Tests for passphrase key derivation and the AES-256-GCM envelope.
"""

import base64
import hashlib

import pytest
from lanchat import crypto
from lanchat.errors import (
    AuthenticationError,
    ConfigError,
    DecryptError,
    KeySizeError,
    MalformedEnvelope,
    RandomnessError,
)


def test_derive_key_length_and_determinism():
    """Test that derivation yields 32 bytes and is deterministic."""
    first = crypto.derive_key("s3cret")
    second = crypto.derive_key("s3cret")

    assert len(first) == 32
    assert first == second


def test_derive_key_is_plain_sha256():
    """Test that the key is the SHA-256 digest of the UTF-8 passphrase."""
    assert crypto.derive_key("s3cret") == hashlib.sha256(b"s3cret").digest()
    assert crypto.derive_key("pässwörd") == hashlib.sha256("pässwörd".encode("utf-8")).digest()
    assert crypto.derive_key(b"raw") == hashlib.sha256(b"raw").digest()


def test_derive_key_differs_per_passphrase():
    """Test that different passphrases give different keys."""
    assert crypto.derive_key("alpha") != crypto.derive_key("bravo")


def test_derive_key_rejects_empty_passphrase():
    """Test that an empty passphrase is a configuration error."""
    with pytest.raises(ConfigError):
        crypto.derive_key("")


def test_encrypt_decrypt_round_trip(key):
    """Test that decrypt recovers the exact plaintext."""
    plaintext = "alice:12:34:56:hi bob"
    envelope = crypto.encrypt(plaintext, key)

    assert crypto.decrypt(envelope, key) == plaintext


def test_round_trip_unicode_and_empty(key):
    """Test non-ASCII and empty plaintexts survive the envelope."""
    for plaintext in ["", "héllo wörld 👋", "a:b:c:d:e"]:
        assert crypto.decrypt(crypto.encrypt(plaintext, key), key) == plaintext


def test_envelope_layout(key):
    """Test envelope is padded base64 of nonce || ciphertext || tag."""
    plaintext = "bob:01:02:03:x"
    envelope = crypto.encrypt(plaintext, key)

    raw = base64.b64decode(envelope, validate=True)
    assert len(raw) == 12 + len(plaintext.encode("utf-8")) + 16
    assert base64.b64encode(raw).decode("ascii") == envelope


def test_nonce_freshness(key):
    """Test that encrypting the same plaintext twice differs."""
    first = crypto.encrypt("same", key)
    second = crypto.encrypt("same", key)

    assert first != second
    assert base64.b64decode(first)[:12] != base64.b64decode(second)[:12]


def test_wrong_key_fails_authentication():
    """Test that a different passphrase cannot open the envelope."""
    envelope = crypto.encrypt("carol:00:00:00:x", crypto.derive_key("alpha"))

    with pytest.raises(AuthenticationError):
        crypto.decrypt(envelope, crypto.derive_key("bravo"))


def test_tampered_ciphertext_fails_authentication(key):
    """Test that flipping a ciphertext bit is detected."""
    raw = bytearray(base64.b64decode(crypto.encrypt("dave:10:00:00:hello", key)))
    raw[14] ^= 0x01
    tampered = base64.b64encode(bytes(raw)).decode("ascii")

    with pytest.raises(AuthenticationError):
        crypto.decrypt(tampered, key)


def test_decrypt_rejects_invalid_base64(key):
    """Test that non-base64 text is a malformed envelope."""
    with pytest.raises(MalformedEnvelope):
        crypto.decrypt("not base64!!", key)


def test_decrypt_rejects_short_buffer(key):
    """Test that a buffer shorter than the nonce is malformed."""
    short = base64.b64encode(b"\x00" * 5).decode("ascii")

    with pytest.raises(MalformedEnvelope) as exc_info:
        crypto.decrypt(short, key)

    assert "too short" in exc_info.value.message


def test_decrypt_rejects_missing_tag(key):
    """Test that a nonce with fewer than 16 sealed bytes fails to authenticate."""
    envelope = base64.b64encode(b"\x00" * 12 + b"\x01" * 8).decode("ascii")

    with pytest.raises(AuthenticationError):
        crypto.decrypt(envelope, key)


def test_decrypt_errors_share_a_base(key):
    """Test that every decrypt failure is a DecryptError."""
    for bad in ["%%%", base64.b64encode(b"x").decode("ascii")]:
        with pytest.raises(DecryptError):
            crypto.decrypt(bad, key)


def test_wrong_key_size_rejected():
    """Test that keys other than 32 bytes are refused."""
    with pytest.raises(KeySizeError):
        crypto.encrypt("x", b"\x00" * 16)

    with pytest.raises(KeySizeError):
        crypto.decrypt("AAAA", b"\x00" * 31)


def test_randomness_failure_prevents_encryption(key, monkeypatch):
    """Test that a failing random source raises instead of reusing a nonce."""
    def broken_urandom(n):
        raise OSError("no entropy")

    monkeypatch.setattr(crypto.os, "urandom", broken_urandom)

    with pytest.raises(RandomnessError):
        crypto.encrypt("x", key)
