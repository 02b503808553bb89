"""
Finch sensor frame decoder.

Frame layout (20 bytes):

| Offset | Content |
|--------|---------|
| 0-1    | Distance, big-endian |
| 2, 3   | Left / right light |
| 4      | Left line (bits 0-6) + movement flag (bit 7) |
| 5      | Right line |
| 6      | Battery |
| 7-9    | Left encoder, 24-bit signed |
| 10-12  | Right encoder, 24-bit signed |
| 13-15  | Accelerometer x, y, z (signed bytes) |
| 16     | Buttons / shake |
| 17-19  | Magnetometer x, y, z (signed bytes) |
"""

from __future__ import annotations

from birdwire.decoders.base import SensorDecoder
from birdwire.models.readings import FinchSensorReading
from birdwire.protocol.constants import DeviceVariant, FinchConstants
from birdwire.protocol.frame import RawFrame
from birdwire.protocol.numeric import (
    heading,
    rotate_finch_acceleration,
    rotate_finch_magnetometer,
    round_half_away,
    scale_acceleration,
    to_int8,
    to_int24,
    to_uint16,
)

Index = FinchConstants.ByteIndex


class FinchDecoder(SensorDecoder):
    """
    Decoder for the 20-byte Finch sensor frame.

    Example:
        >>> decoder = FinchDecoder()
        >>> reading = decoder.decode(frame)
        >>> reading.distance, reading.movement_flag
        (12, False)
    """

    @property
    def variant(self) -> DeviceVariant:
        return DeviceVariant.FINCH

    @property
    def frame_length(self) -> int:
        return FinchConstants.FRAME_LENGTH

    def decode(self, frame: RawFrame) -> FinchSensorReading:
        acceleration = self.decode_acceleration(frame)
        magnetometer = self.decode_magnetometer(frame)
        button_a, button_b, shake = self.decode_buttons(frame[Index.BUTTON_SHAKE])

        line_byte = frame[Index.LEFT_LINE]

        return FinchSensorReading(
            timestamp=frame.timestamp,
            is_stale=frame.is_stale,
            battery_voltage=self.decode_battery(frame[Index.BATTERY]),
            acceleration=acceleration,
            magnetometer=magnetometer,
            heading=heading(acceleration, magnetometer),
            button_a=button_a,
            button_b=button_b,
            shake=shake,
            distance=self.decode_distance(frame[Index.DISTANCE_MSB], frame[Index.DISTANCE_LSB]),
            left_light=frame[Index.LEFT_LIGHT],
            right_light=frame[Index.RIGHT_LIGHT],
            left_line=self.line_value(self.strip_movement_flag(line_byte)),
            right_line=self.line_value(frame[Index.RIGHT_LINE]),
            left_encoder=self.decode_encoder(frame, Index.LEFT_ENCODER),
            right_encoder=self.decode_encoder(frame, Index.RIGHT_ENCODER),
            movement_flag=line_byte > FinchConstants.MOVEMENT_FLAG_THRESHOLD,
        )

    # ===== Field decoders =====

    @staticmethod
    def decode_battery(raw: int) -> float:
        """Offset, then scale to volts."""
        return (raw + FinchConstants.BATTERY_OFFSET) * FinchConstants.BATTERY_SCALE

    @staticmethod
    def decode_distance(msb: int, lsb: int) -> int:
        """Distance in whole centimetres."""
        return round_half_away(to_uint16(msb, lsb) * FinchConstants.CM_PER_DISTANCE_UNIT)

    @staticmethod
    def strip_movement_flag(raw: int) -> int:
        """Remove bit 7 from the shared left line byte."""
        if raw > FinchConstants.MOVEMENT_FLAG_THRESHOLD:
            return raw - 128
        return raw

    @staticmethod
    def line_value(raw: int) -> int:
        """
        Line sensor reflectivity, 100 for a dark surface.

        Example:
            >>> FinchDecoder.line_value(72)
            45
        """
        scaled = (raw - FinchConstants.LINE_OFFSET) * 100 / FinchConstants.LINE_SPAN
        return 100 - round_half_away(scaled)

    @staticmethod
    def decode_encoder(frame: RawFrame, offset: int) -> float:
        """Wheel rotations since the last encoder reset."""
        ticks = to_int24(frame[offset], frame[offset + 1], frame[offset + 2])
        return ticks / FinchConstants.TICKS_PER_ROTATION

    @staticmethod
    def decode_acceleration(frame: RawFrame) -> tuple[float, float, float]:
        offset = Index.ACCELEROMETER
        x, y, z = rotate_finch_acceleration(
            to_int8(frame[offset]),
            to_int8(frame[offset + 1]),
            to_int8(frame[offset + 2]),
        )
        return scale_acceleration(x), scale_acceleration(y), scale_acceleration(z)

    @staticmethod
    def decode_magnetometer(frame: RawFrame) -> tuple[float, float, float]:
        offset = Index.MAGNETOMETER
        return rotate_finch_magnetometer(
            to_int8(frame[offset]),
            to_int8(frame[offset + 1]),
            to_int8(frame[offset + 2]),
        )
