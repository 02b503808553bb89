"""
Output boundary for command frames.

Provides:
- AbstractTransport: Interface devices send frames through
- CallbackTransport: Adapter for any write function
- MockTransport: Recording transport for tests
"""

from birdwire.transport.abc import AbstractTransport
from birdwire.transport.callback import CallbackTransport
from birdwire.transport.mock import MockTransport

__all__ = [
    "AbstractTransport",
    "CallbackTransport",
    "MockTransport",
]
