"""
LAN Chat - Input Sanitization and URL detection

Everything rendered in the message view arrives from the network, so it is
stripped of terminal control sequences before display. URLs are located
here so the UI can make them clickable.

Author: orpheus497
Version: 1.0.0
"""

import re
from typing import Iterator, List, Tuple

# http(s) links up to the next whitespace
URL_PATTERN = re.compile(r"https?://[^\s]+")

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class InputSanitizer:
    """Sanitize untrusted text for display."""

    @staticmethod
    def sanitize_for_display(text: str, max_length: int = 5000) -> str:
        """
        Sanitize text for terminal display.

        Removes ANSI escape sequences and control characters
        that could manipulate terminal.

        Args:
            text: Input text to sanitize
            max_length: Maximum allowed length

        Returns:
            Display-safe text
        """
        if not isinstance(text, str):
            text = str(text)

        # Truncate
        text = text[:max_length]

        # Remove ANSI escape sequences
        text = _ANSI_ESCAPE.sub("", text)

        # Remove other control characters except tab
        text = "".join(char for char in text if char == "\t" or (ord(char) >= 32 and ord(char) != 127))

        return text

    @staticmethod
    def find_urls(text: str) -> List[str]:
        """Return every http(s) URL in text, in order."""
        return URL_PATTERN.findall(text)

    @staticmethod
    def split_urls(text: str) -> Iterator[Tuple[str, bool]]:
        """
        Split text into (segment, is_url) pairs.

        Concatenating the segments gives back the original text.
        """
        position = 0
        for match in URL_PATTERN.finditer(text):
            if match.start() > position:
                yield text[position:match.start()], False
            yield match.group(0), True
            position = match.end()
        if position < len(text):
            yield text[position:], False


# Create global instance
_sanitizer = InputSanitizer()


def sanitize_for_display(text: str) -> str:
    """Convenience function for display sanitization."""
    return _sanitizer.sanitize_for_display(text)


def find_urls(text: str) -> List[str]:
    """Convenience function for URL detection."""
    return _sanitizer.find_urls(text)


def split_urls(text: str) -> Iterator[Tuple[str, bool]]:
    """Convenience function for splitting text around URLs."""
    return _sanitizer.split_urls(text)
