"""
LAN Chat - Visible transcript and chat log snapshots.

Created by orpheus497

Keeps the plain-text lines shown in the message view so they can be copied
to the clipboard or written to a timestamped chat_log_*.txt file on request.
Nothing is written unless the user asks.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .constants import TRANSCRIPT_FILENAME_FORMAT, UI_COPY_LINES, UI_MAX_MESSAGE_HISTORY
from .errors import ErrorCode, TranscriptError

logger = logging.getLogger(__name__)


class Transcript:
    """Bounded list of rendered transcript lines."""

    def __init__(self, max_lines: int = UI_MAX_MESSAGE_HISTORY):
        self.max_lines = max_lines
        self._lines = deque(maxlen=max_lines)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._lines)

    def append(self, line: str) -> None:
        """Add one line (embedded newlines are kept as separate lines)."""
        with self._lock:
            for part in line.splitlines() or [""]:
                self._lines.append(part)

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def tail(self, count: int = UI_COPY_LINES) -> List[str]:
        """Return the last `count` lines."""
        if count <= 0:
            return []
        return self.lines()[-count:]

    def text(self) -> str:
        lines = self.lines()
        return "\n".join(lines) + "\n" if lines else ""

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    @staticmethod
    def snapshot_filename(now: Optional[datetime] = None) -> str:
        """Name for a snapshot taken at `now`, e.g. chat_log_2025-01-01_12-00-00.txt."""
        return (now or datetime.now()).strftime(TRANSCRIPT_FILENAME_FORMAT)

    def save(self, directory: Union[str, Path] = ".", now: Optional[datetime] = None) -> Path:
        """
        Write the transcript to a timestamped file.

        Args:
            directory: Target directory (created if missing)
            now: Clock override for the filename

        Returns:
            Path of the written file

        Raises:
            TranscriptError: If the file cannot be written
        """
        path = Path(directory).expanduser() / self.snapshot_filename(now)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.text())
        except OSError as e:
            logger.error(f"Failed to save chat log to {path}: {e}")
            raise TranscriptError(
                ErrorCode.E601_SNAPSHOT_FAILED,
                f"Error saving chat log: {e}",
                {"path": str(path), "error": str(e)},
            ) from e

        logger.info(f"Chat log saved to {path}")
        return path
