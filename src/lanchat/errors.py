"""
LAN Chat - Custom Exception Classes and Error Codes

This module defines all custom exceptions and error codes used throughout
the LAN Chat application. Each error has a unique code for logging and
debugging.

Author: orpheus497
Version: 1.0.0
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Enumeration of all LAN Chat error codes."""

    # General Errors (E001-E099)
    E001_UNKNOWN_ERROR = "E001"
    E002_INVALID_ARGUMENT = "E002"

    # Crypto Errors (E100-E199)
    E100_CRYPTO_ERROR = "E100"
    E101_ENCRYPTION_FAILED = "E101"
    E102_DECRYPTION_FAILED = "E102"
    E103_INVALID_KEY_SIZE = "E103"
    E104_RANDOMNESS_UNAVAILABLE = "E104"
    E105_ENCODE_FAILED = "E105"
    E106_MALFORMED_ENVELOPE = "E106"
    E107_AUTHENTICATION_FAILED = "E107"

    # Transport Errors (E200-E299)
    E200_TRANSPORT_ERROR = "E200"
    E201_BIND_FAILED = "E201"
    E202_SEND_FAILED = "E202"
    E203_RECEIVE_FAILED = "E203"
    E204_TRANSPORT_CLOSED = "E204"

    # Message Errors (E300-E399)
    E300_MESSAGE_ERROR = "E300"
    E301_INVALID_FORMAT = "E301"
    E302_MESSAGE_TOO_LARGE = "E302"
    E303_SEND_FAILED = "E303"

    # Transcript Errors (E600-E699)
    E600_TRANSCRIPT_ERROR = "E600"
    E601_SNAPSHOT_FAILED = "E601"
    E602_CLIPBOARD_UNAVAILABLE = "E602"

    # Config Errors (E700-E799)
    E700_CONFIG_ERROR = "E700"
    E701_CONFIG_LOAD_FAILED = "E701"
    E702_CONFIG_SAVE_FAILED = "E702"
    E703_INVALID_CONFIG = "E703"
    E704_CONFIG_PARSE_ERROR = "E704"


class LanChatError(Exception):
    """Base exception class for all LAN Chat errors.

    All custom exceptions in LAN Chat inherit from this class.
    Provides standardized error handling and logging.

    Attributes:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        details: Additional error details (optional)
    """

    default_code = ErrorCode.E001_UNKNOWN_ERROR
    default_message = "Operation failed"

    def __init__(
        self,
        code: Optional[ErrorCode] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize a LAN Chat error.

        Args:
            code: Error code from ErrorCode enum (defaults to the class code)
            message: Human-readable error message
            details: Additional error context (optional)
        """
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(f"[{self.code.value}] {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization.

        Returns:
            Dictionary containing error information
        """
        return {"code": self.code.value, "message": self.message, "details": self.details}


class ConfigError(LanChatError):
    """Exception raised for configuration failures.

    This includes missing username or passphrase at startup and loading,
    parsing, and validating configuration files.
    """

    default_code = ErrorCode.E700_CONFIG_ERROR
    default_message = "Configuration operation failed"


# Cryptographic errors


class CryptoError(LanChatError):
    """Exception raised for cryptographic operation failures."""

    default_code = ErrorCode.E100_CRYPTO_ERROR
    default_message = "Cryptographic operation failed"


class KeySizeError(CryptoError):
    """The session key does not have the cipher's required width."""

    default_code = ErrorCode.E103_INVALID_KEY_SIZE
    default_message = "Invalid key size"


class EncryptError(CryptoError):
    """Encryption failed; the message must not be sent."""

    default_code = ErrorCode.E101_ENCRYPTION_FAILED
    default_message = "Encryption failed"


class RandomnessError(EncryptError):
    """The system could not supply randomness for a nonce."""

    default_code = ErrorCode.E104_RANDOMNESS_UNAVAILABLE
    default_message = "Secure random source unavailable"


class EncodeError(EncryptError):
    """The plaintext could not be encoded for encryption."""

    default_code = ErrorCode.E105_ENCODE_FAILED
    default_message = "Plaintext encoding failed"


class DecryptError(CryptoError):
    """Decryption failed.

    Foreign traffic from peers using another passphrase ends up here, so
    these are dropped silently unless debug mode is on.
    """

    default_code = ErrorCode.E102_DECRYPTION_FAILED
    default_message = "Decryption failed"


class MalformedEnvelope(DecryptError):
    """The envelope text is not valid base64 or is too short."""

    default_code = ErrorCode.E106_MALFORMED_ENVELOPE
    default_message = "Malformed envelope"


class AuthenticationError(DecryptError):
    """The AEAD tag did not verify (wrong key or tampered data)."""

    default_code = ErrorCode.E107_AUTHENTICATION_FAILED
    default_message = "Message authentication failed"


# Message errors


class MessageError(LanChatError):
    """Exception raised for chat message framing failures."""

    default_code = ErrorCode.E300_MESSAGE_ERROR
    default_message = "Message operation failed"


class MessageFormatError(MessageError):
    """A plaintext frame could not be built or parsed."""

    default_code = ErrorCode.E301_INVALID_FORMAT
    default_message = "Malformed chat message"


class SendError(MessageError):
    """A submitted line could not be prepared for sending."""

    default_code = ErrorCode.E303_SEND_FAILED
    default_message = "Message could not be sent"


class MessageTooLargeError(SendError):
    """The assembled plaintext exceeds the size cap."""

    default_code = ErrorCode.E302_MESSAGE_TOO_LARGE
    default_message = "Message too large"


# Transport errors


class TransportError(LanChatError):
    """Exception raised for multicast socket failures."""

    default_code = ErrorCode.E200_TRANSPORT_ERROR
    default_message = "Transport operation failed"


class TransportBindError(TransportError):
    """Sockets could not be created, bound or joined to the group."""

    default_code = ErrorCode.E201_BIND_FAILED
    default_message = "Failed to open multicast endpoint"


class TransportSendError(TransportError):
    """A datagram could not be written."""

    default_code = ErrorCode.E202_SEND_FAILED
    default_message = "Failed to send datagram"


class TransportReadError(TransportError):
    """A datagram could not be read."""

    default_code = ErrorCode.E203_RECEIVE_FAILED
    default_message = "Failed to read datagram"


class TransportClosedError(TransportError):
    """The endpoint has been closed."""

    default_code = ErrorCode.E204_TRANSPORT_CLOSED
    default_message = "Transport closed"


class TranscriptError(LanChatError):
    """Exception raised when a transcript snapshot cannot be written."""

    default_code = ErrorCode.E601_SNAPSHOT_FAILED
    default_message = "Failed to save chat log"


class ClipboardError(LanChatError):
    """Exception raised when the system clipboard cannot be used."""

    default_code = ErrorCode.E602_CLIPBOARD_UNAVAILABLE
    default_message = "Clipboard unavailable"
