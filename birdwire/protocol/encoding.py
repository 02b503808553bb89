"""
Frame-building helpers shared by both command encoders.

Both variants carry a micro:bit, so the buzzer field, the print-string
payload and the 25-LED display pattern are encoded the same way; only the
opcodes around them differ.

For example:
- Buzzer period 2273 us for 1000 ms is sent as "08 E1 03 E8"
- A print of "Hi" is sent as "CC 42 48 69"
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from birdwire.exceptions import EncodingError
from birdwire.protocol.constants import ProtocolConstants
from birdwire.protocol.numeric import bits_to_byte, split_uint16

BUZZER_FIELD_LENGTH: Final[int] = 4
"""Period high/low followed by duration high/low."""

SILENT_BUZZER: Final[bytes] = bytes(BUZZER_FIELD_LENGTH)
"""Buzzer field that plays nothing."""


def bytes_to_hex(data: bytes | bytearray | memoryview) -> str:
    """
    Convert bytes to an uppercase, space-separated hex string for logs.

    Example:
        >>> bytes_to_hex(b'\\xcc\\x42')
        'CC 42'
    """
    return bytes(data).hex(" ").upper()


def encode_buzzer(period_us: int, duration_ms: int) -> bytes:
    """
    Encode the 4-byte buzzer field.

    Args:
        period_us: Tone period in microseconds (0 for silence).
        duration_ms: Tone duration in milliseconds.

    Raises:
        ValueError: If either value does not fit in 16 bits.

    Example:
        >>> encode_buzzer(2273, 1000).hex()
        '08e103e8'
    """
    period_high, period_low = split_uint16(period_us)
    duration_high, duration_low = split_uint16(duration_ms)
    return bytes((period_high, period_low, duration_high, duration_low))


def decode_buzzer(field: bytes) -> tuple[int, int]:
    """Inverse of encode_buzzer: (period_us, duration_ms)."""
    if len(field) != BUZZER_FIELD_LENGTH:
        raise ValueError(f"Buzzer field must be {BUZZER_FIELD_LENGTH} bytes, got {len(field)}")
    return (field[0] << 8) | field[1], (field[2] << 8) | field[3]


def character_code(char: str) -> int:
    """
    Wire code for one character: its code point, or 254 above 255.

    Example:
        >>> character_code("A")
        65
        >>> character_code("\\u263a")
        254
    """
    code = ord(char)
    if code > 255:
        return ProtocolConstants.UNSUPPORTED_CHARACTER
    return code


def encode_print_payload(text: str) -> tuple[bytes, bool]:
    """
    Encode the length/flash byte and characters of a print-string frame.

    Args:
        text: String to scroll on the display.

    Returns:
        Tuple of (payload, truncated). Strings longer than 18 characters
        are cut to 18 and truncated is True.
    """
    limit = ProtocolConstants.MAX_PRINT_LENGTH
    truncated = len(text) > limit
    chars = text[:limit]
    payload = bytes([ProtocolConstants.PRINT_FLAG + len(chars)])
    payload += bytes(character_code(c) for c in chars)
    return payload, truncated


def validate_display_pattern(pattern: Sequence[int]) -> list[int]:
    """
    Check a display pattern and return it as a list.

    Raises:
        EncodingError: If the pattern does not have exactly 25 elements or
            any element is not exactly 0 or 1.
    """
    expected = ProtocolConstants.DISPLAY_PATTERN_LENGTH
    try:
        values = list(pattern)
    except TypeError:
        raise EncodingError("Display pattern must be a sequence", field="pattern", value=pattern) from None

    if len(values) != expected:
        raise EncodingError(
            f"Display pattern must contain {expected} values, got {len(values)}",
            field="pattern",
            value=values,
        )

    for index, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, int) or value not in (0, 1):
            raise EncodingError(
                f"Display pattern values must be 0 or 1, got {value!r} at index {index}",
                field="pattern",
                value=value,
            )
    return values


def pack_display_pattern(pattern: Sequence[int]) -> bytes:
    """
    Bit-pack a 25-element 0/1 pattern into 4 bytes.

    Elements 0-7, 8-15 and 16-23 each form one byte with element k of the
    group at bit k, i.e. each group is read in reverse so its last element
    is the most significant bit. Element 24 is sent on its own. Output
    order is: element 24, group 16-23, group 8-15, group 0-7.

    Example:
        >>> pack_display_pattern([1] + [0] * 24).hex()
        '00000001'
        >>> pack_display_pattern([0] * 24 + [1]).hex()
        '01000000'
    """
    values = validate_display_pattern(pattern)
    leds_1_to_8 = bits_to_byte(values[0:8])
    leds_9_to_16 = bits_to_byte(values[8:16])
    leds_17_to_24 = bits_to_byte(values[16:24])
    led_25 = values[24]
    return bytes((led_25, leds_17_to_24, leds_9_to_16, leds_1_to_8))
