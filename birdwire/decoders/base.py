"""
Sensor decoder interface and registry.

This module implements the Strategy pattern for variant-specific decoding.
Each device variant (Finch, Hummingbird) has a decoder that knows its
frame layout and scaling constants; both share the numeric helpers in
birdwire.protocol.numeric.

Architecture:
    DecoderRegistry
        └── SensorDecoder (interface)
            ├── FinchDecoder
            └── HummingbirdDecoder
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from birdwire.protocol.constants import DeviceVariant, ProtocolConstants
from birdwire.protocol.numeric import byte_to_bits

if TYPE_CHECKING:
    from birdwire.models.readings import SensorReading
    from birdwire.protocol.frame import RawFrame


class SensorDecoder(ABC):
    """
    Abstract base class for sensor frame decoders.

    Implementations should:
    1. Define the variant and frame_length properties
    2. Implement decode() as a pure function of the frame
    3. Return an immutable reading model

    Decoding a validated frame never fails; malformed lengths are rejected
    upstream by the frame validator.
    """

    @property
    @abstractmethod
    def variant(self) -> DeviceVariant:
        """
        The device variant this decoder handles.
        """
        ...

    @property
    @abstractmethod
    def frame_length(self) -> int:
        """Number of bytes in this variant's sensor frame."""
        ...

    @abstractmethod
    def decode(self, frame: RawFrame) -> SensorReading:
        """
        Decode a frame into a reading.

        The reading inherits the frame's timestamp and staleness.

        Args:
            frame: Validated frame of frame_length bytes.

        Returns:
            Variant-specific reading.
        """
        ...

    @staticmethod
    def decode_buttons(byte: int) -> tuple[bool, bool, bool]:
        """
        Decode the buttons/shake byte.

        Buttons read 0 while pressed; shake reads 1 while shaking.

        Returns:
            Tuple of (button_a, button_b, shake).
        """
        bits = byte_to_bits(byte)
        button_a = bits[ProtocolConstants.BUTTON_A_BIT] == 0
        button_b = bits[ProtocolConstants.BUTTON_B_BIT] == 0
        shake = bits[ProtocolConstants.SHAKE_BIT] == 1
        return button_a, button_b, shake


class DecoderRegistry:
    """
    Registry mapping each DeviceVariant to its decoder.

    Example:
        >>> registry = create_default_registry()
        >>> decoder = registry.get(DeviceVariant.FINCH)
        >>> decoder.frame_length
        20
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._decoders: dict[DeviceVariant, SensorDecoder] = {}

    def register(self, decoder: SensorDecoder) -> None:
        """
        Register a decoder, replacing any existing one for its variant.
        """
        self._decoders[decoder.variant] = decoder

    def get(self, variant: DeviceVariant) -> SensorDecoder | None:
        """
        Get the decoder for a variant.

        Returns:
            Decoder if registered, None otherwise.
        """
        return self._decoders.get(variant)

    def __repr__(self) -> str:
        return f"DecoderRegistry(variants={len(self._decoders)})"


def create_default_registry() -> DecoderRegistry:
    """
    Create a new registry with the built-in Finch and Hummingbird decoders.
    """
    from birdwire.decoders.finch import FinchDecoder
    from birdwire.decoders.hummingbird import HummingbirdDecoder

    registry = DecoderRegistry()
    registry.register(FinchDecoder())
    registry.register(HummingbirdDecoder())
    return registry


def get_decoder(variant: DeviceVariant) -> SensorDecoder:
    """
    Get a fresh built-in decoder for a variant.

    Raises:
        KeyError: If the variant has no built-in decoder.
    """
    decoder = create_default_registry().get(variant)
    if decoder is None:
        raise KeyError(f"No decoder for {variant}")
    return decoder
