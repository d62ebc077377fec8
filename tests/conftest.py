"""
Pytest configuration and fixtures for LAN Chat tests.

Created by orpheus497

Provides common fixtures and hand-written fake collaborators for unit and
integration tests.
"""

import os
import queue
import tempfile
import shutil
from pathlib import Path
from typing import Generator, List, Tuple
import pytest

from lanchat import crypto
from lanchat.errors import TransportClosedError, TransportSendError
from lanchat.presenter import NoticeKind, Presenter


class RecordingPresenter(Presenter):
    """Presenter that records everything it is asked to show."""

    def __init__(self, debug=False):
        self.debug = debug
        self.records = []
        self.notices: List[Tuple[NoticeKind, str]] = []

    def deliver(self, record):
        self.records.append(record)

    def notice(self, kind, text):
        self.notices.append((kind, text))

    def debug_enabled(self):
        return self.debug

    def notices_of(self, kind):
        return [text for k, text in self.notices if k == kind]


class FakeTransport:
    """In-memory stand-in for MulticastTransport."""

    def __init__(self, fail_send=False):
        self.fail_send = fail_send
        self.sent = []
        self.opened = False
        self.closed = False
        self._inbound = queue.Queue()

    @property
    def address(self):
        return "224.0.0.251:5353"

    @property
    def is_open(self):
        return self.opened and not self.closed

    def open(self):
        self.opened = True
        return self

    def send(self, payload):
        if self.fail_send:
            raise TransportSendError(message="Error broadcasting: network is unreachable")
        self.sent.append(payload)
        return len(payload)

    def inject(self, datagram):
        """Queue a datagram for the next receive() call."""
        self._inbound.put(datagram)

    def receive(self):
        while True:
            if self.closed:
                raise TransportClosedError()
            try:
                return self._inbound.get(timeout=0.05)
            except queue.Empty:
                continue

    def close(self):
        self.closed = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test data.

    Yields:
        Path: Temporary directory path

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp(prefix="lanchat_test_"))
    try:
        yield tmp
    finally:
        shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def passphrase() -> str:
    """Shared passphrase used by the default test peers."""
    return "s3cret"


@pytest.fixture
def key(passphrase) -> bytes:
    """Session key derived from the test passphrase."""
    return crypto.derive_key(passphrase)


@pytest.fixture
def presenter() -> RecordingPresenter:
    """Recording presenter with debug mode off."""
    return RecordingPresenter()


@pytest.fixture
def debug_presenter() -> RecordingPresenter:
    """Recording presenter with debug mode on."""
    return RecordingPresenter(debug=True)


@pytest.fixture
def transport() -> FakeTransport:
    """Fake transport that records outgoing datagrams."""
    return FakeTransport()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep LANCHAT_* overrides from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("LANCHAT_"):
            monkeypatch.delenv(name, raising=False)


# Pytest marks
def pytest_configure(config):
    """
    Configure pytest markers.

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (needs multicast loopback)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# Test collection hooks
def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to add markers based on test location.

    Args:
        config: Pytest configuration
        items: List of collected test items
    """
    for item in items:
        # Add unit marker to tests in unit/ directory
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
