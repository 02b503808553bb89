"""
Callable-backed transport.

Adapts any function that writes bytes (for example a BLE characteristic
write) to the AbstractTransport interface.
"""

from __future__ import annotations

from collections.abc import Callable

from birdwire.transport.abc import AbstractTransport


class CallbackTransport(AbstractTransport):
    """
    Transport that hands every frame to a callable.

    Example:
        >>> frames = []
        >>> transport = CallbackTransport(frames.append, name="finch-1")
        >>> transport.send(b"\\xdf")
        >>> frames
        [b'\\xdf']
    """

    def __init__(self, write: Callable[[bytes], object], name: str = "callback") -> None:
        """
        Args:
            write: Called once per frame with the frame bytes. Its return
                value is ignored; exceptions propagate to the caller.
            name: Identifier used in log messages.
        """
        self._write = write
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def send(self, data: bytes) -> None:
        self._write(bytes(data))

    def __repr__(self) -> str:
        return f"CallbackTransport(name={self._name!r})"
