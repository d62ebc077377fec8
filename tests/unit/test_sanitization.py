"""
Unit tests for lanchat.sanitization module.

Created by orpheus497

Tests display sanitization of untrusted text and URL detection.
"""

from lanchat.sanitization import find_urls, sanitize_for_display, split_urls


class TestDisplaySanitization:
    """Test terminal-safe rendering of network text."""

    def test_plain_text_unchanged(self):
        assert sanitize_for_display("hello: world") == "hello: world"

    def test_ansi_sequences_removed(self):
        assert sanitize_for_display("\x1b[31mred\x1b[0m") == "red"

    def test_control_characters_removed(self):
        assert sanitize_for_display("a\x07b\x00c\x7fd") == "abcd"

    def test_tab_and_unicode_kept(self):
        assert sanitize_for_display("a\tb é 👋") == "a\tb é 👋"

    def test_newlines_removed(self):
        """Test a body cannot forge extra transcript lines."""
        assert sanitize_for_display("hi\r\n[12:00:00] bob: fake") == "hi[12:00:00] bob: fake"


class TestURLs:
    """Test URL detection."""

    def test_find_urls(self):
        text = "see https://example.com/a?b=1 and http://x.y:8080/z ok"

        assert find_urls(text) == ["https://example.com/a?b=1", "http://x.y:8080/z"]

    def test_no_urls(self):
        assert find_urls("ftp://nope and plain text") == []

    def test_split_preserves_text(self):
        """Test joining the segments gives back the input."""
        text = "a https://x/y:z b"
        segments = list(split_urls(text))

        assert segments == [("a ", False), ("https://x/y:z", True), (" b", False)]
        assert "".join(segment for segment, _ in segments) == text

    def test_split_url_only(self):
        assert list(split_urls("https://x")) == [("https://x", True)]

    def test_split_empty(self):
        assert list(split_urls("")) == []
