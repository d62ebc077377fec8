"""
LAN Chat - Chat message model and wire codec.

Created by orpheus497

Inner plaintext layout (UTF-8):

    sender ":" HH:MM:SS ":" body

The sender never contains ':' and the timestamp always has the exact
HH:MM:SS shape, so only the colon after the sender and the colon after the
timestamp are framing. Any further colons belong to the body.

Wire layout:

    "CHAT:" base64(nonce || ciphertext || tag)

Datagrams without the prefix are other traffic on the shared multicast
group and are ignored.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from . import crypto
from .constants import (
    FIELD_SEPARATOR,
    FRAME_PREFIX,
    MAX_USERNAME_LENGTH,
    TIMESTAMP_FORMAT,
    TIMESTAMP_LENGTH,
)
from .errors import ErrorCode, MessageFormatError

_TIMESTAMP_RE = re.compile(r"^(?:[01][0-9]|2[0-3]):[0-5][0-9]:[0-5][0-9]$")
_FRAME_PREFIX_BYTES = FRAME_PREFIX.encode("ascii")


def current_timestamp(now: Optional[datetime] = None) -> str:
    """Return the local wall-clock time as HH:MM:SS (24-hour, zero-padded)."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def is_valid_timestamp(timestamp: str) -> bool:
    """Check that a string has exactly the HH:MM:SS shape we produce."""
    return bool(_TIMESTAMP_RE.match(timestamp)) and len(timestamp) == TIMESTAMP_LENGTH


def is_valid_sender(sender: str) -> bool:
    """
    Validate a sender name.

    Senders must be non-empty, printable, free of ':' and at most
    MAX_USERNAME_LENGTH characters.
    """
    if not sender or len(sender) > MAX_USERNAME_LENGTH:
        return False
    if FIELD_SEPARATOR in sender:
        return False
    return sender.isprintable()


@dataclass(frozen=True)
class ChatRecord:
    """A single chat line, either sent locally or parsed from the wire."""

    sender: str
    timestamp: str
    body: str

    def to_plaintext(self) -> str:
        """Frame the record as inner plaintext."""
        return encode_plaintext(self.sender, self.timestamp, self.body)

    @classmethod
    def from_plaintext(cls, text: str) -> "ChatRecord":
        """Parse inner plaintext into a record."""
        return parse_plaintext(text)

    def format_line(self) -> str:
        """Plain transcript line, e.g. '[12:34:56] alice: hi bob'."""
        return f"[{self.timestamp}] {self.sender}: {self.body}"


def encode_plaintext(sender: str, timestamp: str, body: str) -> str:
    """
    Join the three fields into inner plaintext.

    Raises:
        MessageFormatError: If the sender or timestamp would not round-trip
    """
    if not is_valid_sender(sender):
        raise MessageFormatError(
            ErrorCode.E301_INVALID_FORMAT,
            f"Invalid sender name: {sender!r}",
            {"sender": sender},
        )
    if not is_valid_timestamp(timestamp):
        raise MessageFormatError(
            ErrorCode.E301_INVALID_FORMAT,
            f"Invalid timestamp: {timestamp!r}",
            {"timestamp": timestamp},
        )

    return FIELD_SEPARATOR.join((sender, timestamp, body))


def parse_plaintext(text: str) -> ChatRecord:
    """
    Split inner plaintext into sender, timestamp and body.

    Raises:
        MessageFormatError: If the text does not have three well-formed fields
    """
    sender, sep, rest = text.partition(FIELD_SEPARATOR)
    if not sep:
        raise MessageFormatError(ErrorCode.E301_INVALID_FORMAT, "Missing sender separator")

    if not sender:
        raise MessageFormatError(ErrorCode.E301_INVALID_FORMAT, "Empty sender")

    timestamp = rest[:TIMESTAMP_LENGTH]
    separator = rest[TIMESTAMP_LENGTH:TIMESTAMP_LENGTH + 1]

    if not is_valid_timestamp(timestamp) or separator != FIELD_SEPARATOR:
        raise MessageFormatError(
            ErrorCode.E301_INVALID_FORMAT,
            "Malformed timestamp field",
            {"field": rest[: TIMESTAMP_LENGTH + 1]},
        )

    return ChatRecord(sender=sender, timestamp=timestamp, body=rest[TIMESTAMP_LENGTH + 1:])


def encode_frame(envelope: str) -> bytes:
    """Prefix an envelope for the wire."""
    return _FRAME_PREFIX_BYTES + envelope.encode("ascii")


def decode_frame(datagram: bytes) -> Optional[str]:
    """
    Extract the envelope text from a datagram.

    Returns:
        Envelope text, or None if the datagram is not a chat frame
    """
    try:
        text = datagram.decode("utf-8")
    except UnicodeDecodeError:
        return None

    if not text.startswith(FRAME_PREFIX):
        return None

    return text[len(FRAME_PREFIX):]


def seal(record: ChatRecord, key: bytes) -> bytes:
    """Encode, encrypt and frame a record into a datagram payload."""
    return encode_frame(crypto.encrypt(record.to_plaintext(), key))


def open_frame(envelope: str, key: bytes) -> ChatRecord:
    """
    Decrypt and parse an envelope.

    Raises:
        CryptoError: If the envelope cannot be opened
        MessageFormatError: If the plaintext is malformed
    """
    return parse_plaintext(crypto.decrypt(envelope, key))
