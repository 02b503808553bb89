"""
Protocol layer for the Finch and Hummingbird Bluetooth frames.

This module contains the low-level protocol handling:
- Opcodes, frame layouts and scaling constants
- Numeric helpers (clamping, signed integers, note periods, heading)
- Shared frame builders (buzzer, print string, display pattern)
- Inbound frame validation and staleness tracking
"""

from birdwire.protocol.constants import (
    FRAME_LENGTHS,
    DeviceVariant,
    FinchConstants,
    FinchOpcode,
    FinchSubcommand,
    HummingbirdConstants,
    HummingbirdOpcode,
    HummingbirdSubcommand,
    ProtocolConstants,
)
from birdwire.protocol.encoding import (
    bytes_to_hex,
    character_code,
    encode_buzzer,
    encode_print_payload,
    pack_display_pattern,
    validate_display_pattern,
)
from birdwire.protocol.frame import (
    FrameParseError,
    FrameParseResult,
    FrameTracker,
    FrameValidator,
    RawFrame,
)
from birdwire.protocol.numeric import (
    byte_to_bits,
    clamp,
    compass_bearing,
    frequency_to_period,
    heading,
    note_to_period,
    round_half_away,
    to_int24,
)

__all__ = [
    # Constants
    "DeviceVariant",
    "FinchOpcode",
    "FinchSubcommand",
    "HummingbirdOpcode",
    "HummingbirdSubcommand",
    "ProtocolConstants",
    "FinchConstants",
    "HummingbirdConstants",
    "FRAME_LENGTHS",
    # Numeric
    "clamp",
    "round_half_away",
    "byte_to_bits",
    "to_int24",
    "frequency_to_period",
    "note_to_period",
    "compass_bearing",
    "heading",
    # Encoding
    "bytes_to_hex",
    "character_code",
    "encode_buzzer",
    "encode_print_payload",
    "pack_display_pattern",
    "validate_display_pattern",
    # Frames
    "RawFrame",
    "FrameValidator",
    "FrameTracker",
    "FrameParseResult",
    "FrameParseError",
]
