"""
birdwire - Python library for the BirdBrain Finch and Hummingbird Bit
Bluetooth byte protocol.

This library decodes the fixed-size sensor frames both robots notify and
builds the command frames they accept. Connecting to the peripheral is left
to the caller: feed received notifications to ``on_frame`` and give the
device a transport that writes command frames out.

Example:
    >>> from birdwire import Finch
    >>> from birdwire.transport import CallbackTransport
    >>>
    >>> finch = Finch(CallbackTransport(ble_write, name="FN12345"))
    >>> finch.set_beak(0, 100, 0)
    >>> reading = finch.on_frame(notification_bytes)
    >>> print(reading.distance, reading.heading)
"""

from birdwire.devices import BaseDevice, Finch, Hummingbird, create_device
from birdwire.exceptions import (
    BirdwireError,
    EncodingError,
    FrameError,
    InvalidPortError,
    ProtocolError,
    TransportError,
    WrongLengthError,
)
from birdwire.models import (
    Color,
    FinchOutputMemory,
    FinchSensorReading,
    HummingbirdOutputMemory,
    HummingbirdSensorReading,
    PortSensorReading,
    SensorReading,
)
from birdwire.protocol import DeviceVariant
from birdwire.transport import AbstractTransport, CallbackTransport, MockTransport

__version__ = "0.1.0"
__all__ = [
    # Devices
    "BaseDevice",
    "Finch",
    "Hummingbird",
    "create_device",
    "DeviceVariant",
    # Models
    "SensorReading",
    "FinchSensorReading",
    "HummingbirdSensorReading",
    "PortSensorReading",
    "Color",
    "FinchOutputMemory",
    "HummingbirdOutputMemory",
    # Exceptions
    "BirdwireError",
    "ProtocolError",
    "FrameError",
    "WrongLengthError",
    "EncodingError",
    "InvalidPortError",
    "TransportError",
    # Transport
    "AbstractTransport",
    "CallbackTransport",
    "MockTransport",
    # Version
    "__version__",
]
