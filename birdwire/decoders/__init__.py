"""
Variant-specific sensor frame decoders.

Usage:
    from birdwire.decoders import get_decoder
    from birdwire.protocol import DeviceVariant

    decoder = get_decoder(DeviceVariant.FINCH)
    reading = decoder.decode(frame)
"""

from birdwire.decoders.base import (
    DecoderRegistry,
    SensorDecoder,
    create_default_registry,
    get_decoder,
)
from birdwire.decoders.finch import FinchDecoder
from birdwire.decoders.hummingbird import HummingbirdDecoder

__all__ = [
    "SensorDecoder",
    "DecoderRegistry",
    "create_default_registry",
    "get_decoder",
    "FinchDecoder",
    "HummingbirdDecoder",
]
