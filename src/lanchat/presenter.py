"""
LAN Chat - Presenter boundary.

Created by orpheus497

The chat session reports everything user-visible through this interface:
chat records (received or echoed on send), diagnostic notices and the debug
toggle. The terminal UI implements it; tests use a recording fake.

Implementations are called from both the inbound receive thread and the
thread that submits messages, and must cope with that (for Textual, by
marshalling through App.call_from_thread).
"""

from abc import ABC, abstractmethod
from enum import Enum

from .message import ChatRecord


class NoticeKind(str, Enum):
    """Severity of a diagnostic line."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class Presenter(ABC):
    """Abstract sink for chat records and notices."""

    @abstractmethod
    def deliver(self, record: ChatRecord) -> None:
        """Render a received or locally sent chat record."""

    @abstractmethod
    def notice(self, kind: NoticeKind, text: str) -> None:
        """Surface a diagnostic line."""

    @abstractmethod
    def debug_enabled(self) -> bool:
        """Whether verbose diagnostics should be surfaced."""
