"""
LAN Chat - Global Constants and Configuration Values

This module defines all constants used throughout the LAN Chat application.
Wire-level values are fixed for interoperability with other peers on the
segment; everything else can be overridden from config.toml.

Author: orpheus497
Version: 1.0.0
"""

# Version Information
VERSION = "1.0.0"
APP_NAME = "LAN Chat"
AUTHOR = "orpheus497"

# Network Constants (wire protocol, do not change without coordinating peers)
MULTICAST_GROUP = "224.0.0.251"
MULTICAST_PORT = 5353
MULTICAST_TTL = 1  # Stay on the local segment
MULTICAST_LOOPBACK = True
DEFAULT_INTERFACE = "0.0.0.0"  # Let the system pick the interface
RECEIVE_BUFFER_SIZE = 2048  # bytes, one datagram per read; holds the largest capped frame
MIN_RECEIVE_BUFFER_SIZE = 1024

# Framing
FRAME_PREFIX = "CHAT:"
FIELD_SEPARATOR = ":"
TIMESTAMP_FORMAT = "%H:%M:%S"
TIMESTAMP_LENGTH = 8  # HH:MM:SS

# Message Limits
MAX_PLAINTEXT_SIZE = 768  # bytes, before encryption
MAX_USERNAME_LENGTH = 64

# Cryptography Constants
KEY_SIZE = 32  # 256 bits for AES-256-GCM
NONCE_SIZE = 12  # 96 bits for GCM
TAG_SIZE = 16  # 128-bit authentication tag

# UI Configuration
UI_MAX_MESSAGE_HISTORY = 1000
UI_COPY_LINES = 10  # Lines copied to the clipboard with Tab
TRANSCRIPT_FILENAME_FORMAT = "chat_log_%Y-%m-%d_%H-%M-%S.txt"

# File Paths
DEFAULT_DATA_DIR = "~/.lanchat"
CONFIG_FILENAME = "config.toml"
LOG_FILENAME = "lanchat.log"
LOGS_DIR = "logs"

# Logging Configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

# Environment variable prefix for config overrides
ENV_PREFIX = "LANCHAT"
