"""Pytest fixtures and fakes for testing.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket

import pytest

from http_call_orchestrator.config import CallOptions
from tests.fakes import FakeTransport, RecordingWarningSink
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> None:
    """Block all network access in tests.

    This fixture runs automatically for all tests and prevents any real
    network connections. Tests that need HTTP should use FakeTransport
    or an httpx.MockTransport.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Provide an empty fake transport; tests script its exchanges."""
    return FakeTransport()


@pytest.fixture
def warning_sink() -> RecordingWarningSink:
    """Provide a warning sink that records messages."""
    return RecordingWarningSink()


@pytest.fixture
def fast_options() -> CallOptions:
    """Short timers so timeout paths finish quickly."""
    return CallOptions(response_timeout_ms=200, deadline_ms=1_000, max_retries=0)
