"""
LAN Chat - Chat session: send and receive pipelines.

This module ties the pieces together for one running client:
- Owns the session key (read-only after derivation, shared without locking)
- Runs the inbound receive loop on a dedicated daemon thread
- Filters, decrypts and parses inbound datagrams, suppressing self-echo
- Stamps, frames, encrypts and broadcasts submitted lines, echoing locally

Inbound failures never end the session. Authentication failures are normal
on a shared group (other passphrases) and only surface in debug mode.

Author: orpheus497
Version: 1.0.0
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from . import crypto
from .constants import KEY_SIZE, MAX_PLAINTEXT_SIZE
from .errors import (
    ConfigError,
    CryptoError,
    ErrorCode,
    KeySizeError,
    MessageFormatError,
    MessageTooLargeError,
    SendError,
    TransportClosedError,
    TransportReadError,
    TransportSendError,
)
from .message import (
    ChatRecord,
    current_timestamp,
    decode_frame,
    encode_frame,
    encode_plaintext,
    is_valid_sender,
    parse_plaintext,
)
from .presenter import NoticeKind, Presenter
from .transport import MulticastTransport

logger = logging.getLogger(__name__)

# Seconds to wait for the inbound thread after closing the sockets
RECEIVE_THREAD_JOIN_TIMEOUT = 2.0


class ChatSession:
    """One user's chat session on the multicast group.

    Attributes:
        username: Local sender name (also used for self-echo suppression)
        key: 32-byte session key
        transport: Multicast endpoint (exclusively owns the sockets)
        presenter: Sink for records and notices
        max_plaintext_size: Plaintext byte cap enforced before encryption
    """

    def __init__(
        self,
        username: str,
        key: bytes,
        transport: MulticastTransport,
        presenter: Presenter,
        max_plaintext_size: int = MAX_PLAINTEXT_SIZE,
    ):
        if not is_valid_sender(username):
            raise ConfigError(
                ErrorCode.E703_INVALID_CONFIG,
                "Username must be non-empty, printable and must not contain ':'",
                {"username": username},
            )
        if len(key) != KEY_SIZE:
            raise KeySizeError(
                message=f"Key must be {KEY_SIZE} bytes, got {len(key)}",
            )

        self.username = username
        self.key = key
        self.transport = transport
        self.presenter = presenter
        self.max_plaintext_size = max_plaintext_size

        self._stopping = threading.Event()
        self._receive_thread: Optional[threading.Thread] = None

        # Counters for diagnostics
        self.messages_sent = 0
        self.messages_delivered = 0
        self.datagrams_dropped = 0

    @classmethod
    def from_passphrase(
        cls,
        username: str,
        passphrase: str,
        transport: MulticastTransport,
        presenter: Presenter,
        **kwargs,
    ) -> "ChatSession":
        """Create a session, deriving the key from the shared passphrase."""
        return cls(username, crypto.derive_key(passphrase), transport, presenter, **kwargs)

    @property
    def running(self) -> bool:
        thread = self._receive_thread
        return thread is not None and thread.is_alive() and not self._stopping.is_set()

    # Lifecycle

    def start(self) -> None:
        """
        Open the transport if needed and start the inbound thread.

        Raises:
            TransportBindError: If the endpoint cannot be opened
        """
        if self.running:
            return

        if not self.transport.is_open:
            self.transport.open()

        self._stopping.clear()
        self._receive_thread = threading.Thread(
            target=self._receive_loop, name="lanchat-receive", daemon=True
        )
        self._receive_thread.start()
        logger.info(f"Chat session started for {self.username} on {self.transport.address}")

    def stop(self) -> None:
        """Close the sockets and wait briefly for the inbound thread to exit."""
        self._stopping.set()
        self.transport.close()

        thread = self._receive_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(RECEIVE_THREAD_JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning("Receive thread did not exit after transport close")
        self._receive_thread = None
        logger.info(f"Chat session stopped for {self.username}")

    def __enter__(self) -> "ChatSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # Receive pipeline

    def _receive_loop(self) -> None:
        """Read datagrams until the transport is closed."""
        logger.debug("Receive loop started")
        try:
            while not self._stopping.is_set():
                try:
                    datagram = self.transport.receive()
                except TransportClosedError:
                    break
                except TransportReadError as e:
                    if self._stopping.is_set():
                        break
                    logger.warning(f"Transient receive error, continuing: {e}")
                    continue

                try:
                    self.handle_datagram(datagram)
                except Exception as e:
                    # Presenter failures must not kill the listener
                    logger.error(f"Error handling inbound datagram: {e}", exc_info=True)
        finally:
            logger.debug("Receive loop ended")

    def handle_datagram(self, datagram: bytes) -> Optional[ChatRecord]:
        """
        Run one inbound datagram through the receive pipeline.

        Returns:
            The delivered record, or None if the datagram was dropped
        """
        envelope = decode_frame(datagram)
        if envelope is None:
            self.datagrams_dropped += 1
            return None

        try:
            plaintext = crypto.decrypt(envelope, self.key)
        except CryptoError as e:
            self.datagrams_dropped += 1
            logger.debug(f"Dropping undecryptable frame: {e}")
            if self.presenter.debug_enabled():
                self.presenter.notice(NoticeKind.WARN, f"Failed to decrypt message: {e.message}")
            return None

        try:
            record = parse_plaintext(plaintext)
        except MessageFormatError as e:
            self.datagrams_dropped += 1
            logger.debug(f"Dropping malformed chat frame: {e}")
            if self.presenter.debug_enabled():
                self.presenter.notice(NoticeKind.WARN, f"Malformed message: {e.message}")
            return None

        if record.sender == self.username:
            # Our own datagram looped back; already rendered at send time
            return None

        self.messages_delivered += 1
        self.presenter.deliver(record)
        return record

    # Send pipeline

    def prepare(self, line: str, now: Optional[datetime] = None) -> ChatRecord:
        """
        Build the record for a submitted line and enforce the size cap.

        Raises:
            MessageTooLargeError: If the plaintext exceeds the cap
            SendError: If the record cannot be framed
        """
        record = ChatRecord(self.username, current_timestamp(now), line)

        try:
            plaintext = encode_plaintext(record.sender, record.timestamp, record.body)
        except MessageFormatError as e:
            raise SendError(ErrorCode.E303_SEND_FAILED, e.message, e.details) from e

        size = len(plaintext.encode("utf-8", errors="surrogatepass"))
        if size > self.max_plaintext_size:
            raise MessageTooLargeError(
                ErrorCode.E302_MESSAGE_TOO_LARGE,
                f"Message too large ({size} bytes, limit {self.max_plaintext_size})",
                {"size": size, "max_size": self.max_plaintext_size},
            )

        return record

    def submit(self, line: str, now: Optional[datetime] = None) -> Optional[ChatRecord]:
        """
        Send a user-typed line and echo it locally.

        Args:
            line: Text typed by the user
            now: Clock override (tests)

        Returns:
            The locally delivered record, or None if nothing was sent
        """
        if not line or not line.strip():
            return None

        try:
            record = self.prepare(line, now)
            envelope = crypto.encrypt(record.to_plaintext(), self.key)
        except SendError as e:
            logger.warning(f"Rejected outgoing message: {e}")
            self.presenter.notice(NoticeKind.ERROR, e.message)
            return None
        except CryptoError as e:
            logger.error(f"Error encrypting message: {e}")
            self.presenter.notice(NoticeKind.ERROR, f"Error encrypting message: {e.message}")
            return None

        if self.presenter.debug_enabled():
            self.presenter.notice(NoticeKind.INFO, "Broadcasting encrypted message")

        try:
            self.transport.send(encode_frame(envelope))
            self.messages_sent += 1
        except TransportSendError as e:
            self.presenter.notice(NoticeKind.ERROR, e.message)

        # Loopback copies are suppressed, so render our own line here
        self.presenter.deliver(record)
        return record
