"""
LAN Chat - Cryptographic operations.

Created by orpheus497

This module implements the shared-passphrase encryption envelope:
- SHA-256 passphrase derivation producing the 256-bit session key
- AES-256-GCM authenticated encryption with a fresh 96-bit nonce per message
- Envelope layout: nonce (12 bytes) || ciphertext || tag (16 bytes)
- Standard padded base64 text encoding for the wire

Key derivation is deliberately unsalted: every peer that knows the
passphrase must arrive at the same key without any negotiation. See the
README for the security caveats this implies.

All cryptographic operations use the cryptography library (Apache 2.0/BSD).
"""

import base64
import binascii
import os
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .constants import KEY_SIZE, NONCE_SIZE, TAG_SIZE
from .errors import (
    AuthenticationError,
    ConfigError,
    EncodeError,
    ErrorCode,
    KeySizeError,
    MalformedEnvelope,
    RandomnessError,
)


def derive_key(passphrase: Union[str, bytes]) -> bytes:
    """
    Derive the 32-byte session key from a passphrase.

    A single SHA-256 pass over the passphrase bytes; the full digest is the
    key. Deterministic across peers and runs.

    Args:
        passphrase: Shared passphrase (str is encoded as UTF-8)

    Returns:
        32-byte AES-256 key

    Raises:
        ConfigError: If the passphrase is empty
    """
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")

    if not passphrase:
        raise ConfigError(ErrorCode.E703_INVALID_CONFIG, "Passphrase must not be empty")

    digest = hashes.Hash(hashes.SHA256())
    digest.update(passphrase)
    return digest.finalize()


def _check_key(key: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise KeySizeError(
            message=f"Key must be {KEY_SIZE} bytes, got {len(key)}",
            details={"expected": KEY_SIZE, "actual": len(key)},
        )


def generate_nonce() -> bytes:
    """
    Generate a fresh random GCM nonce.

    Raises:
        RandomnessError: If the operating system cannot supply randomness
    """
    try:
        return os.urandom(NONCE_SIZE)
    except (NotImplementedError, OSError) as e:
        raise RandomnessError(details={"error": str(e)}) from e


def encrypt(plaintext: str, key: bytes) -> str:
    """
    Encrypt a plaintext string into a base64 envelope.

    Args:
        plaintext: Message text to protect
        key: 32-byte session key

    Returns:
        base64(nonce || ciphertext || tag)

    Raises:
        KeySizeError: If the key has the wrong length
        EncodeError: If the plaintext cannot be encoded as UTF-8
        RandomnessError: If no nonce can be generated
    """
    _check_key(key)

    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodeError(message=f"Plaintext is not valid UTF-8: {e}") from e

    nonce = generate_nonce()
    sealed = AESGCM(key).encrypt(nonce, data, None)

    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt(text: str, key: bytes) -> str:
    """
    Open a base64 envelope produced by encrypt().

    Args:
        text: base64 envelope text
        key: 32-byte session key

    Returns:
        Recovered plaintext

    Raises:
        KeySizeError: If the key has the wrong length
        MalformedEnvelope: If the text is not base64, is shorter than a
            nonce, or the recovered bytes are not UTF-8
        AuthenticationError: If the tag does not verify
    """
    _check_key(key)

    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEnvelope(message=f"Envelope is not valid base64: {e}") from e

    if len(data) < NONCE_SIZE:
        raise MalformedEnvelope(
            message="Ciphertext too short",
            details={"length": len(data), "minimum": NONCE_SIZE},
        )

    nonce, sealed = data[:NONCE_SIZE], data[NONCE_SIZE:]

    if len(sealed) < TAG_SIZE:
        raise AuthenticationError(message="Ciphertext shorter than authentication tag")

    try:
        recovered = AESGCM(key).decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise AuthenticationError() from e

    try:
        return recovered.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedEnvelope(message=f"Plaintext is not valid UTF-8: {e}") from e
