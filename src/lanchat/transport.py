"""
LAN Chat - Multicast UDP transport endpoint.

Created by orpheus497

This module implements:
- A send socket connected to the well-known multicast group
- A receive socket joined to the same group on a system-selected interface
- Blocking single-datagram reads for the inbound thread
- Teardown that wakes a reader blocked on the receive socket

There is no fragmentation, retransmission or ordering at this layer;
multicast UDP is fire-and-forget.
"""

import contextlib
import ipaddress
import logging
import socket
import struct
import sys
import threading
from typing import Optional

from .constants import (
    DEFAULT_INTERFACE,
    MIN_RECEIVE_BUFFER_SIZE,
    MULTICAST_GROUP,
    MULTICAST_LOOPBACK,
    MULTICAST_PORT,
    MULTICAST_TTL,
    RECEIVE_BUFFER_SIZE,
)
from .errors import (
    ErrorCode,
    TransportBindError,
    TransportClosedError,
    TransportReadError,
    TransportSendError,
)

logger = logging.getLogger(__name__)


class MulticastTransport:
    """Bound multicast sender and joined multicast listener on one group/port."""

    def __init__(
        self,
        group: str = MULTICAST_GROUP,
        port: int = MULTICAST_PORT,
        interface: str = DEFAULT_INTERFACE,
        ttl: int = MULTICAST_TTL,
        loopback: bool = MULTICAST_LOOPBACK,
        buffer_size: int = RECEIVE_BUFFER_SIZE,
    ):
        self.group = group
        self.port = port
        self.interface = interface
        self.ttl = ttl
        self.loopback = loopback
        self.buffer_size = max(buffer_size, MIN_RECEIVE_BUFFER_SIZE)

        self.send_sock: Optional[socket.socket] = None
        self.recv_sock: Optional[socket.socket] = None

        self._closed = False
        self._lock = threading.Lock()

        # Statistics for diagnostics
        self.datagrams_sent = 0
        self.datagrams_received = 0
        self.bytes_sent = 0
        self.bytes_received = 0

    @property
    def address(self) -> str:
        return f"{self.group}:{self.port}"

    @property
    def is_open(self) -> bool:
        return self.send_sock is not None and self.recv_sock is not None and not self._closed

    def open(self) -> "MulticastTransport":
        """
        Create both sockets and join the multicast group.

        Returns:
            self, for chaining

        Raises:
            TransportBindError: If the group is invalid or any socket
                operation fails
        """
        try:
            group_ip = ipaddress.IPv4Address(self.group)
        except ValueError as e:
            raise TransportBindError(
                ErrorCode.E201_BIND_FAILED,
                f"Invalid multicast group {self.group!r}",
                {"group": self.group},
            ) from e

        if not group_ip.is_multicast:
            raise TransportBindError(
                ErrorCode.E201_BIND_FAILED,
                f"{self.group} is not a multicast address",
                {"group": self.group},
            )

        try:
            self.send_sock = self._create_send_socket()
            self.recv_sock = self._create_receive_socket()
        except OSError as e:
            logger.error(f"Failed to open multicast endpoint {self.address}: {e}")
            self._close_sockets()
            raise TransportBindError(
                ErrorCode.E201_BIND_FAILED,
                f"Failed to open multicast endpoint {self.address}: {e}",
                {"group": self.group, "port": self.port, "error": str(e)},
            ) from e

        self._closed = False
        logger.info(f"Joined multicast group {self.address} on interface {self.interface}")
        return self

    def _create_send_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, struct.pack("b", self.ttl))
            sock.setsockopt(
                socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, struct.pack("b", int(self.loopback))
            )
            if self.interface != DEFAULT_INTERFACE:
                sock.setsockopt(
                    socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(self.interface)
                )
            sock.connect((self.group, self.port))
        except OSError:
            sock.close()
            raise
        return sock

    def _create_receive_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if hasattr(socket, "SO_REUSEPORT"):
                # Not supported on every kernel; SO_REUSEADDR is enough there
                with contextlib.suppress(OSError):
                    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)

            # Binding to the group filters unrelated traffic on POSIX;
            # Windows only accepts a local address here.
            bind_host = "" if sys.platform == "win32" else self.group
            sock.bind((bind_host, self.port))

            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, self._membership())
        except OSError:
            sock.close()
            raise
        return sock

    def _membership(self) -> bytes:
        return struct.pack("4s4s", socket.inet_aton(self.group), socket.inet_aton(self.interface))

    def send(self, payload: bytes) -> int:
        """
        Write a single datagram to the group.

        Returns:
            Number of bytes sent

        Raises:
            TransportSendError: If the endpoint is closed or the write fails
        """
        sock = self.send_sock
        if sock is None or self._closed:
            raise TransportSendError(
                ErrorCode.E202_SEND_FAILED, "Transport is not open", {"address": self.address}
            )

        try:
            sent = sock.send(payload)
        except OSError as e:
            logger.warning(f"Failed to send {len(payload)} bytes to {self.address}: {e}")
            raise TransportSendError(
                ErrorCode.E202_SEND_FAILED,
                f"Error broadcasting: {e}",
                {"address": self.address, "size": len(payload), "error": str(e)},
            ) from e

        self.datagrams_sent += 1
        self.bytes_sent += sent
        return sent

    def receive(self) -> bytes:
        """
        Block until one datagram arrives.

        Returns:
            The exact bytes received

        Raises:
            TransportClosedError: If the endpoint is (or becomes) closed
            TransportReadError: If the read fails for another reason
        """
        sock = self.recv_sock
        if sock is None or self._closed:
            raise TransportClosedError()

        try:
            data, _addr = sock.recvfrom(self.buffer_size)
        except OSError as e:
            if self._closed:
                raise TransportClosedError() from e
            raise TransportReadError(
                ErrorCode.E203_RECEIVE_FAILED,
                f"Error reading: {e}",
                {"address": self.address, "error": str(e)},
            ) from e

        # A shutdown on another thread wakes recvfrom with an empty read
        if self._closed:
            raise TransportClosedError()

        self.datagrams_received += 1
        self.bytes_received += len(data)
        return data

    def close(self) -> None:
        """Leave the group and close both sockets. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        if self.recv_sock is not None:
            with contextlib.suppress(OSError):
                self.recv_sock.setsockopt(
                    socket.IPPROTO_IP, socket.IP_DROP_MEMBERSHIP, self._membership()
                )
            # Unblocks a reader sitting in recvfrom()
            with contextlib.suppress(OSError):
                self.recv_sock.shutdown(socket.SHUT_RDWR)

        self._close_sockets()
        logger.info(f"Left multicast group {self.address}")

    def _close_sockets(self) -> None:
        for sock in (self.send_sock, self.recv_sock):
            if sock is not None:
                with contextlib.suppress(OSError):
                    sock.close()
        self.send_sock = None
        self.recv_sock = None

    def __enter__(self) -> "MulticastTransport":
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
