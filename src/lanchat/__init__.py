"""
LAN Chat - Encrypted Group Chat over Local Multicast

A zero-configuration terminal chat for a local network segment. Peers
find each other by joining a well-known multicast group, and everything
on the wire is sealed with AES-256-GCM under a shared passphrase.

Author: orpheus497
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "orpheus497"
__license__ = "MIT"

# Import core modules for easy access
from .config import Config
from .constants import APP_NAME, VERSION
from .crypto import decrypt, derive_key, encrypt
from .errors import (
    AuthenticationError,
    ConfigError,
    CryptoError,
    ErrorCode,
    LanChatError,
    MalformedEnvelope,
    MessageError,
    TransportError,
)
from .message import ChatRecord
from .presenter import NoticeKind, Presenter
from .session import ChatSession
from .transport import MulticastTransport

__all__ = [
    "APP_NAME",
    "VERSION",
    "AuthenticationError",
    "ChatRecord",
    "ChatSession",
    "Config",
    "ConfigError",
    "CryptoError",
    "ErrorCode",
    "LanChatError",
    "MalformedEnvelope",
    "MessageError",
    "MulticastTransport",
    "NoticeKind",
    "Presenter",
    "TransportError",
    "__author__",
    "__license__",
    "__version__",
    "decrypt",
    "derive_key",
    "encrypt",
]
