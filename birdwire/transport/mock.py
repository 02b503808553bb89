"""
Mock transport for testing.

This module provides a transport that records every command frame so tests
can check the exact bytes a device produced without any hardware.

Example:
    >>> from birdwire import Finch
    >>> from birdwire.transport import MockTransport
    >>>
    >>> mock = MockTransport()
    >>> finch = Finch(mock)
    >>> finch.stop_all()
    >>> mock.assert_sent(b"\\xdf")
"""

from __future__ import annotations

import threading

from birdwire.exceptions import TransportError
from birdwire.transport.abc import AbstractTransport


class MockTransport(AbstractTransport):
    """
    Mock transport that records sent frames.

    Attributes:
        sent_data: List of all frames sent, oldest first.

    Example:
        >>> mock = MockTransport()
        >>> mock.send(b"\\xcb")
        >>> mock.last_sent
        b'\\xcb'
        >>> mock.assert_send_count(1)
    """

    def __init__(self, name: str = "mock://test") -> None:
        """
        Initialize the mock transport.

        Args:
            name: Identifier for the mock transport.
        """
        self._name = name
        self._sent_data: list[bytes] = []
        self._lock = threading.Lock()
        self._fail_with: TransportError | None = None

    @property
    def name(self) -> str:
        """Get the mock transport name."""
        return self._name

    @property
    def sent_data(self) -> list[bytes]:
        """Get all frames sent to the transport."""
        with self._lock:
            return self._sent_data.copy()

    @property
    def last_sent(self) -> bytes | None:
        """Get the most recently sent frame."""
        with self._lock:
            return self._sent_data[-1] if self._sent_data else None

    def fail_sends(self, error: TransportError | None = None) -> None:
        """
        Make every following send() raise.

        Args:
            error: Exception to raise; None restores normal sending.
        """
        self._fail_with = error

    def clear(self) -> None:
        """Clear the sent frame history."""
        with self._lock:
            self._sent_data.clear()

    def send(self, data: bytes) -> None:
        """
        Record a frame.

        Raises:
            TransportError: If fail_sends() was given an error.
        """
        if self._fail_with is not None:
            raise self._fail_with
        with self._lock:
            self._sent_data.append(bytes(data))

    def assert_sent(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that a specific frame was sent.

        Args:
            expected: Expected bytes.
            index: Index in sent_data (-1 for last).

        Raises:
            AssertionError: If the frame doesn't match.
        """
        sent = self.sent_data
        if not sent:
            raise AssertionError("No data sent to mock transport")

        actual = sent[index]
        if actual != expected:
            raise AssertionError(f"Sent data mismatch: expected {expected!r}, got {actual!r}")

    def assert_send_count(self, expected: int) -> None:
        """
        Assert number of send operations.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self.sent_data)
        if actual != expected:
            raise AssertionError(f"Send count mismatch: expected {expected}, got {actual}")

    def __repr__(self) -> str:
        return f"MockTransport(name={self._name!r}, sent={len(self._sent_data)})"
