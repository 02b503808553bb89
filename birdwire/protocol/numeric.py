"""
Numeric and bit-level helpers shared by both device variants.

These cover saturating clamps, bit/byte expansion, signed integer
reinterpretation (8, 16 and 24 bit), note-to-period conversion, the
micro:bit mount-frame rotation and the tilt-compensated heading.

Rounding follows the peripheral's reference behaviour: halves round away
from zero. Python's built-in round() uses banker's rounding and is not
used for wire or sensor values.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from typing import Final, TypeVar

from birdwire.exceptions import EncodingError
from birdwire.protocol.constants import ProtocolConstants

TNumber = TypeVar("TNumber", int, float)

_MOUNT_COS: Final[float] = math.cos(math.radians(ProtocolConstants.MOUNT_ANGLE_DEGREES))
_MOUNT_SIN: Final[float] = math.sin(math.radians(ProtocolConstants.MOUNT_ANGLE_DEGREES))


def clamp(value: TNumber, lower: TNumber, upper: TNumber) -> TNumber:
    """
    Pull a value into [lower, upper].

    Infinities saturate like any other out-of-range value. NaN has no place
    in the range and is rejected.

    Raises:
        EncodingError: If value is NaN.

    Example:
        >>> clamp(999, 0, 180)
        180
        >>> clamp(-10, 0, 180)
        0
    """
    if math.isnan(value):
        raise EncodingError("Value must be a number, got NaN", value=value)
    return min(max(value, lower), upper)


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Example:
        >>> round_half_away(2.5)
        3
        >>> round_half_away(-2.5)
        -3
    """
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def byte_to_bits(byte: int) -> list[int]:
    """
    Expand a byte into its 8 bits, least significant first.

    Example:
        >>> byte_to_bits(0b00010001)
        [1, 0, 0, 0, 1, 0, 0, 0]
    """
    if not 0 <= byte <= 255:
        raise ValueError(f"Byte value must be 0-255, got {byte}")
    return [(byte >> i) & 0x01 for i in range(8)]


def bits_to_byte(bits: Sequence[int]) -> int:
    """
    Pack up to 8 bits into a byte, element ``i`` at bit ``i``.

    Example:
        >>> bits_to_byte([1, 0, 0, 0, 1, 0, 0, 0])
        17
    """
    if len(bits) > 8:
        raise ValueError(f"At most 8 bits fit in a byte, got {len(bits)}")
    value = 0
    for i, bit in enumerate(bits):
        value |= (bit & 0x01) << i
    return value


def to_int8(byte: int) -> int:
    """Reinterpret an unsigned byte as two's-complement."""
    return byte - 256 if byte > 127 else byte


def to_int16(msb: int, lsb: int) -> int:
    """Combine two bytes big-endian into a signed 16-bit value."""
    return struct.unpack(">h", bytes((msb, lsb)))[0]


def to_uint16(msb: int, lsb: int) -> int:
    """Combine two bytes big-endian into an unsigned 16-bit value."""
    return (msb << 8) + lsb


def to_int24(msb: int, mid: int, lsb: int) -> int:
    """
    Decode a big-endian 24-bit two's-complement value.

    The three bytes are shifted into the top of a 32-bit word, the word is
    reinterpreted as signed, then divided by 256. The division is exact.

    Example:
        >>> to_int24(0xFF, 0xFF, 0xFF)
        -1
        >>> to_int24(0x00, 0x03, 0x18)
        792
    """
    word = (msb << 24) | (mid << 16) | (lsb << 8)
    signed = struct.unpack(">i", word.to_bytes(4, "big"))[0]
    return signed // 256


def split_uint24(value: int) -> tuple[int, int, int]:
    """Split a 24-bit unsigned value into (MSB, middle, LSB)."""
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"Value must fit in 24 bits, got {value}")
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def split_uint16(value: int) -> tuple[int, int]:
    """Split a 16-bit unsigned value into (high, low)."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"Value must fit in 16 bits, got {value}")
    return value >> 8, value & 0xFF


# ===== Buzzer =====


def frequency_to_period(frequency: float) -> int | None:
    """
    Convert a frequency in Hz to a buzzer period in microseconds.

    Returns:
        The rounded period, or None when it does not fit the unsigned
        16-bit wire field. Out-of-range periods are never saturated.
    """
    if frequency <= 0:
        return None
    period = round_half_away(1_000_000 / frequency)
    if 0 < period <= ProtocolConstants.MAX_PERIOD_US:
        return period
    return None


def note_to_frequency(note: int) -> float:
    """MIDI note number to frequency in Hz (A4 = note 69 = 440 Hz)."""
    return 440.0 * 2.0 ** ((note - 69) / 12)


def note_to_period(note: int) -> int | None:
    """
    MIDI note number to buzzer period in microseconds.

    The note is clamped to the playable range before conversion.

    Example:
        >>> note_to_period(69)
        2273
    """
    note = clamp(note, ProtocolConstants.MIN_NOTE, ProtocolConstants.MAX_NOTE)
    return frequency_to_period(note_to_frequency(note))


# ===== Orientation =====


def rotate_finch_acceleration(x: float, y: float, z: float) -> tuple[float, float, float]:
    """
    Rotate raw accelerometer axes from the micro:bit mount into the Finch body.
    """
    return (
        x,
        y * _MOUNT_COS - z * _MOUNT_SIN,
        y * _MOUNT_SIN + z * _MOUNT_COS,
    )


def rotate_finch_magnetometer(x: float, y: float, z: float) -> tuple[float, float, float]:
    """
    Rotate raw magnetometer axes from the micro:bit mount into the Finch body.

    The sign pattern differs from the accelerometer rotation and must not be
    unified with it.
    """
    return (
        x,
        y * _MOUNT_COS + z * _MOUNT_SIN,
        z * _MOUNT_COS - y * _MOUNT_SIN,
    )


def scale_acceleration(raw: float) -> float:
    """Accelerometer counts to m/s^2."""
    return raw * ProtocolConstants.ACCELERATION_SCALE


def compass_bearing(
    acceleration: Sequence[float],
    magnetometer: Sequence[float],
) -> int | None:
    """
    Tilt-compensated bearing in whole degrees, 0-360.

    Args:
        acceleration: (ax, ay, az) in the body frame.
        magnetometer: (mx, my, mz) in the body frame.

    Returns:
        180 + the bearing of the horizontal field, or None when the z-axis
        acceleration is exactly zero (pitch and roll are undefined).
    """
    ax, ay, az = acceleration
    mx, my, mz = magnetometer

    if az == 0:
        return None

    phi = math.atan(-ay / az)
    denominator = ay * math.sin(phi) + az * math.cos(phi)
    if denominator == 0:
        # atan(+-inf) is +-90 degrees; 0/0 leaves the bearing undefined
        if ax == 0:
            return None
        theta = math.copysign(math.pi / 2, ax)
    else:
        theta = math.atan(ax / denominator)

    x_p = mx
    y_p = my * math.cos(phi) - mz * math.sin(phi)
    z_p = my * math.sin(phi) + mz * math.cos(phi)

    x_pp = x_p * math.cos(theta) + z_p * math.sin(theta)
    y_pp = y_p

    angle = 180 + math.degrees(math.atan2(x_pp, y_pp))
    return round_half_away(angle)


def heading(
    acceleration: Sequence[float],
    magnetometer: Sequence[float],
) -> int | None:
    """
    Heading in [0, 360) with the device's forward axis at 0 for north.

    Example:
        >>> heading((0.0, 0.0, 9.8), (0.0, 30.0, -20.0))
        0
        >>> heading((0.0, 0.0, 0.0), (0.0, 30.0, -20.0)) is None
        True
    """
    bearing = compass_bearing(acceleration, magnetometer)
    if bearing is None:
        return None
    return (bearing + 180) % 360
