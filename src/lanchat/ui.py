"""
LAN Chat - Textual-based terminal user interface.

Created by orpheus497

The app is the session's presenter. Records and notices can arrive from
the inbound receive thread, so every presenter call is marshalled onto the
UI thread with App.call_from_thread before touching widgets.
"""

import logging
import threading
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Optional

from rich.markup import escape
from textual.app import App, ComposeResult, ScreenStackError
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.css.query import NoMatches
from textual.widgets import Footer, Header, Input, Static

from .constants import APP_NAME, UI_COPY_LINES, UI_MAX_MESSAGE_HISTORY
from .errors import ClipboardError, TranscriptError
from .message import ChatRecord
from .presenter import NoticeKind, Presenter
from .sanitization import sanitize_for_display, split_urls
from .session import ChatSession
from .transcript import Transcript
from .utils import copy_to_clipboard, open_url

logger = logging.getLogger(__name__)

NOTICE_COLORS = {
    NoticeKind.INFO: "green",
    NoticeKind.WARN: "yellow",
    NoticeKind.ERROR: "red",
}

URL_STYLE = "#00FFFF underline"


class ChatView(ScrollableContainer):
    """Scrolling message view."""

    def __init__(self, max_lines: int = UI_MAX_MESSAGE_HISTORY):
        super().__init__(id="chat-view")
        self.max_lines = max_lines

    def add_line(self, markup: str) -> None:
        """Append a rendered line and keep the view pinned to the bottom."""
        self.mount(Static(markup, classes="chat-line"))

        lines = self.query(".chat-line")
        excess = len(lines) - self.max_lines
        if excess > 0:
            for widget in list(lines)[:excess]:
                widget.remove()

        self.scroll_end(animate=False)


class AppPresenter(Presenter):
    """Presenter that draws into a LanChatApp from any thread."""

    def __init__(self, app: "LanChatApp"):
        self.app = app

    def deliver(self, record: ChatRecord) -> None:
        self.app.call_on_ui(self.app.show_record, record)

    def notice(self, kind: NoticeKind, text: str) -> None:
        self.app.call_on_ui(self.app.show_notice, NoticeKind(kind), text)

    def debug_enabled(self) -> bool:
        return self.app.debug_mode


class LanChatApp(App):
    """Terminal chat window for one session."""

    TITLE = APP_NAME

    CSS = """
    Screen {
        background: #000000;
    }

    Header {
        background: #1a1a1a;
        color: #ff4444;
    }

    Footer {
        background: #1a1a1a;
        color: #cccccc;
    }

    ChatView {
        height: 1fr;
        border: solid #8b0000;
        border-title-color: #ff4444;
        background: #000000;
        padding: 0 1;
    }

    .chat-line {
        color: #cccccc;
    }

    #message-input {
        dock: bottom;
        background: #0a0a0a;
        border: solid #444444;
        color: #ffffff;
    }

    #message-input:focus {
        border: solid #8b0000;
    }
    """

    BINDINGS = [
        Binding("ctrl+s,alt+s", "save_log", "Save log"),
        Binding("tab", "copy_recent", "Copy last lines", priority=True),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        username: str,
        debug: bool = False,
        log_dir: str = ".",
        copy_lines: int = UI_COPY_LINES,
        endpoint: str = "",
        max_lines: int = UI_MAX_MESSAGE_HISTORY,
    ):
        super().__init__()
        self.username = username
        self.debug_mode = debug
        self.log_dir = Path(log_dir)
        self.copy_lines = copy_lines
        self.endpoint = endpoint
        self.max_lines = max_lines

        self.session: Optional[ChatSession] = None
        self.presenter = AppPresenter(self)
        self.transcript = Transcript(max_lines)

        # Links live only as long as the lines that show them
        self._links: Deque[str] = deque(maxlen=max_lines)
        self._link_base = 0
        self._ui_thread_id: Optional[int] = None

    def attach(self, session: ChatSession) -> None:
        """Bind the chat session this window presents."""
        self.session = session

    def compose(self) -> ComposeResult:
        """Compose the main application layout."""
        yield Header()
        yield ChatView(self.max_lines)
        yield Input(placeholder="> Type a message and press Enter", id="message-input")
        yield Footer()

    def on_mount(self) -> None:
        """Start receiving once the window exists."""
        self._ui_thread_id = threading.get_ident()
        self.sub_title = f"{self.username} @ {self.endpoint}" if self.endpoint else self.username

        chat_view = self.query_one(ChatView)
        chat_view.border_title = "Messages (Ctrl+S to save, Tab to copy, click URLs to open)"

        self.query_one("#message-input", Input).focus()

        if self.session is not None:
            self.session.start()
            if self.debug_mode:
                self.notice(NoticeKind.INFO, f"Debug mode on, listening on {self.endpoint}")

    def notice(self, kind: NoticeKind, text: str) -> None:
        """Show a diagnostic line from UI code."""
        self.presenter.notice(kind, text)

    def call_on_ui(self, callback: Callable, *args) -> None:
        if self._ui_thread_id is None or threading.get_ident() == self._ui_thread_id:
            callback(*args)
            return

        try:
            self.call_from_thread(callback, *args)
        except RuntimeError as e:
            # The app is shutting down; nothing left to draw on
            logger.debug(f"Dropped UI update after shutdown: {e}")

    # Rendering

    def show_record(self, record: ChatRecord) -> None:
        sender = sanitize_for_display(record.sender)
        body = sanitize_for_display(record.body)

        plain = ChatRecord(sender, record.timestamp, body).format_line()
        self._append(plain, self.format_record_markup(sender, record.timestamp, body))

    def show_notice(self, kind: NoticeKind, text: str) -> None:
        text = sanitize_for_display(text)
        color = NOTICE_COLORS.get(kind, "white")
        self._append(text, f"[{color}]{escape(text)}[/]")

    def _append(self, plain: str, markup: str) -> None:
        self.transcript.append(plain)
        try:
            self.query_one(ChatView).add_line(markup)
        except (NoMatches, ScreenStackError):
            logger.debug("Chat view not mounted yet; line kept in transcript only")

    def format_record_markup(self, sender: str, timestamp: str, body: str) -> str:
        """Build console markup for a chat line with clickable URLs."""
        parts = []
        for segment, is_url in split_urls(body):
            if is_url:
                index = self._register_link(segment)
                parts.append(f"[@click=app.follow_link({index})][{URL_STYLE}]{escape(segment)}[/][/]")
            else:
                parts.append(escape(segment))

        return f"[yellow]\\[{timestamp}][/] [white]{escape(sender)}[/]: {''.join(parts)}"

    def _register_link(self, url: str) -> int:
        if len(self._links) == self._links.maxlen:
            self._link_base += 1
        self._links.append(url)
        return self._link_base + len(self._links) - 1

    # Actions

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Send the typed line, then clear the input."""
        if event.input.id != "message-input" or self.session is None:
            return

        if not event.value.strip():
            return

        self.session.submit(event.value)
        event.input.value = ""

    def action_follow_link(self, index: int) -> None:
        """Open a URL that was clicked in the message view."""
        position = index - self._link_base
        if not 0 <= position < len(self._links):
            # Scrolled out of the history
            return
        url = self._links[position]

        try:
            open_url(url)
        except ValueError as e:
            self.notice(NoticeKind.ERROR, f"Error opening URL: {e}")
        else:
            self.notice(NoticeKind.INFO, f"Opening URL: {url}")

    def action_save_log(self) -> None:
        """Write the visible transcript to chat_log_<timestamp>.txt."""
        try:
            path = self.transcript.save(self.log_dir)
        except TranscriptError as e:
            self.notice(NoticeKind.ERROR, e.message)
        else:
            self.notice(NoticeKind.INFO, f"Chat log saved to {path}")

    def action_copy_recent(self) -> None:
        """Copy the last few transcript lines to the clipboard."""
        text = "\n".join(self.transcript.tail(self.copy_lines))
        try:
            copy_to_clipboard(text)
        except ClipboardError as e:
            self.notice(NoticeKind.ERROR, e.message)
        else:
            self.notice(NoticeKind.INFO, "Last messages copied to clipboard")

