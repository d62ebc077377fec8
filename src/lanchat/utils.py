"""
LAN Chat - Utility functions.

Created by orpheus497
Version: 1.0.0

Platform glue used by the terminal UI: opening links and the clipboard.
"""

import logging
import platform
import webbrowser

import pyperclip

from .errors import ClipboardError, ErrorCode

logger = logging.getLogger(__name__)


def open_url(url: str) -> None:
    """
    Open a URL in the user's browser.

    Args:
        url: http(s) URL

    Raises:
        ValueError: If the URL is not http(s) or no browser could be launched
    """
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"Refusing to open non-http URL: {url}")

    try:
        opened = webbrowser.open(url, new=2)
    except webbrowser.Error as e:
        raise ValueError(f"Could not open browser: {e}") from e

    if not opened:
        raise ValueError("No browser available")

    logger.debug(f"Opened URL {url}")


def copy_to_clipboard(text: str) -> None:
    """
    Copy text to the system clipboard.

    Raises:
        ClipboardError: If no clipboard mechanism is available
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning(f"Clipboard unavailable: {e}")
        raise ClipboardError(
            ErrorCode.E602_CLIPBOARD_UNAVAILABLE, f"Error copying to clipboard: {e}"
        ) from e


def get_platform_info() -> str:
    """
    Get platform information string.

    Returns:
        Platform information
    """
    return f"{platform.system()} {platform.release()}"
