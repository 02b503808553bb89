"""
Hummingbird Bit sensor frame decoder.

Frame layout (14 bytes):

| Offset | Content |
|--------|---------|
| 0-2    | Sensor ports 1-3 |
| 3      | Battery |
| 4-6    | Accelerometer x, y, z (signed bytes) |
| 7      | Buttons / shake |
| 8-13   | Magnetometer x, y, z (big-endian signed 16-bit) |

The micro:bit sits flat in the Hummingbird, so no mount rotation applies.
"""

from __future__ import annotations

from birdwire.decoders.base import SensorDecoder
from birdwire.models.readings import HummingbirdSensorReading, PortSensorReading
from birdwire.protocol.constants import DeviceVariant, HummingbirdConstants
from birdwire.protocol.frame import RawFrame
from birdwire.protocol.numeric import heading, scale_acceleration, to_int8, to_int16

Index = HummingbirdConstants.ByteIndex


class HummingbirdDecoder(SensorDecoder):
    """Decoder for the 14-byte Hummingbird Bit sensor frame."""

    @property
    def variant(self) -> DeviceVariant:
        return DeviceVariant.HUMMINGBIRD

    @property
    def frame_length(self) -> int:
        return HummingbirdConstants.FRAME_LENGTH

    def decode(self, frame: RawFrame) -> HummingbirdSensorReading:
        offset = Index.ACCELEROMETER
        acceleration = (
            scale_acceleration(to_int8(frame[offset])),
            scale_acceleration(to_int8(frame[offset + 1])),
            scale_acceleration(to_int8(frame[offset + 2])),
        )

        offset = Index.MAGNETOMETER
        magnetometer = (
            float(to_int16(frame[offset], frame[offset + 1])),
            float(to_int16(frame[offset + 2], frame[offset + 3])),
            float(to_int16(frame[offset + 4], frame[offset + 5])),
        )

        button_a, button_b, shake = self.decode_buttons(frame[Index.BUTTON_SHAKE])

        return HummingbirdSensorReading(
            timestamp=frame.timestamp,
            is_stale=frame.is_stale,
            battery_voltage=frame[Index.BATTERY] / HummingbirdConstants.BATTERY_SCALE,
            acceleration=acceleration,
            magnetometer=magnetometer,
            heading=heading(acceleration, magnetometer),
            button_a=button_a,
            button_b=button_b,
            shake=shake,
            sensor1=PortSensorReading.from_raw(frame[Index.SENSOR1]),
            sensor2=PortSensorReading.from_raw(frame[Index.SENSOR2]),
            sensor3=PortSensorReading.from_raw(frame[Index.SENSOR3]),
        )
