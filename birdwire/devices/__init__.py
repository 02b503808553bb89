"""
Device facades: Output Memory, command encoding and frame tracking per
variant.
"""

from __future__ import annotations

from typing import Any

from birdwire.devices.base import BaseDevice
from birdwire.devices.finch import Finch
from birdwire.devices.hummingbird import Hummingbird
from birdwire.protocol.constants import DeviceVariant
from birdwire.transport.abc import AbstractTransport

DEVICE_CLASSES: dict[DeviceVariant, type[BaseDevice]] = {
    DeviceVariant.FINCH: Finch,
    DeviceVariant.HUMMINGBIRD: Hummingbird,
}


def create_device(
    variant: DeviceVariant | str,
    transport: AbstractTransport,
    **kwargs: Any,
) -> BaseDevice:
    """
    Create a device for a variant.

    Args:
        variant: DeviceVariant or its value ("finch", "hummingbird").
        transport: Output boundary for command frames.
        **kwargs: Passed to the device constructor (clock, on_reading,
            on_error).

    Raises:
        ValueError: If the variant is unknown.
    """
    return DEVICE_CLASSES[DeviceVariant(variant)](transport, **kwargs)


__all__ = [
    "BaseDevice",
    "Finch",
    "Hummingbird",
    "DEVICE_CLASSES",
    "create_device",
]
