"""
Unit tests for lanchat.transcript module.

Created by orpheus497

Tests the bounded transcript, clipboard tail and chat log snapshots.
"""

from datetime import datetime

import pytest
from lanchat.errors import TranscriptError
from lanchat.transcript import Transcript


class TestTranscriptLines:
    """Test line storage."""

    def test_append_and_lines(self):
        transcript = Transcript()
        transcript.append("[12:00:00] alice: hi")
        transcript.append("[12:00:01] bob: hello")

        assert transcript.lines() == ["[12:00:00] alice: hi", "[12:00:01] bob: hello"]
        assert len(transcript) == 2

    def test_multiline_split(self):
        """Test embedded newlines become separate lines."""
        transcript = Transcript()
        transcript.append("one\ntwo")

        assert transcript.lines() == ["one", "two"]

    def test_bounded(self):
        """Test the oldest lines are dropped past the limit."""
        transcript = Transcript(max_lines=3)
        for i in range(5):
            transcript.append(str(i))

        assert transcript.lines() == ["2", "3", "4"]

    def test_tail(self):
        """Test tail returns the last lines in order."""
        transcript = Transcript()
        for i in range(15):
            transcript.append(f"line {i}")

        assert transcript.tail(10) == [f"line {i}" for i in range(5, 15)]
        assert transcript.tail(0) == []

    def test_tail_shorter_than_count(self):
        transcript = Transcript()
        transcript.append("only")

        assert transcript.tail(10) == ["only"]

    def test_clear(self):
        transcript = Transcript()
        transcript.append("x")
        transcript.clear()

        assert transcript.text() == ""


class TestSnapshot:
    """Test chat log snapshots."""

    def test_filename_format(self):
        """Test snapshot names use chat_log_YYYY-MM-DD_HH-MM-SS.txt."""
        name = Transcript.snapshot_filename(datetime(2025, 3, 4, 5, 6, 7))

        assert name == "chat_log_2025-03-04_05-06-07.txt"

    def test_save_writes_lines(self, temp_dir):
        transcript = Transcript()
        transcript.append("[12:00:00] alice: hi")
        transcript.append("[12:00:01] bob: hello")

        path = transcript.save(temp_dir, now=datetime(2025, 3, 4, 5, 6, 7))

        assert path == temp_dir / "chat_log_2025-03-04_05-06-07.txt"
        assert path.read_text(encoding="utf-8") == "[12:00:00] alice: hi\n[12:00:01] bob: hello\n"

    def test_save_creates_directory(self, temp_dir):
        path = Transcript().save(temp_dir / "logs")

        assert path.exists()
        assert path.read_text(encoding="utf-8") == ""

    def test_save_failure(self, temp_dir):
        """Test an unwritable target raises TranscriptError."""
        blocker = temp_dir / "file"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(TranscriptError) as exc_info:
            Transcript().save(blocker / "sub")

        assert exc_info.value.message.startswith("Error saving chat log")
