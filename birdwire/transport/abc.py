"""
Abstract output boundary for command frames.

The library never talks to Bluetooth itself. Whatever owns the connection
(a BLE client, a serial bridge, a test double) implements this interface
and receives every command frame verbatim, in the order it was built.

Implementations:
- CallbackTransport: forwards frames to any callable
- MockTransport: records frames for tests
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractTransport(ABC):
    """
    Abstract base class for command frame sinks.

    A transport must accept one complete frame per send() call and must not
    split, merge or reorder frames. Devices call send() while holding their
    own lock, so implementations should return promptly.

    Attributes:
        name: Identifier for the transport (e.g. a peripheral address).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Get the transport identifier.

        Returns:
            Name or address string, used in log messages.
        """
        ...

    @abstractmethod
    def send(self, data: bytes) -> None:
        """
        Deliver one command frame to the peripheral.

        Args:
            data: Complete frame including the opcode.

        Raises:
            TransportError: If the frame cannot be delivered.
        """
        ...
