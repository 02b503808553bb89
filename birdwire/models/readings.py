"""
Pydantic models for decoded sensor readings.

A reading is always "the decoding of the current Raw Frame at this
instant": it is computed on demand and inherits the frame's timestamp and
staleness. Readings are never stored independently of their frame.

Design principles:
- All models are frozen (immutable)
- Values are in physical units; raw bytes are only kept where a consumer
  may need to reinterpret them (Hummingbird ports)
- An undefined heading is None, not a default angle
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from birdwire.protocol.constants import DeviceVariant, HummingbirdConstants
from birdwire.protocol.numeric import round_half_away

Vector3 = tuple[float, float, float]


class SensorReading(BaseModel):
    """
    Fields common to every variant.

    Attributes:
        timestamp: Arrival time of the underlying frame.
        is_stale: True when the transport failed after this frame arrived.
        battery_voltage: Battery level in volts.
        acceleration: Body-frame acceleration in m/s^2 (x, y, z).
        magnetometer: Body-frame magnetic field (x, y, z), raw units.
        heading: Compass heading in degrees [0, 360); None when undefined.
        button_a: Whether micro:bit button A is pressed.
        button_b: Whether micro:bit button B is pressed.
        shake: Whether the micro:bit is being shaken.
    """

    model_config = ConfigDict(frozen=True)

    variant: DeviceVariant
    timestamp: float
    is_stale: bool = False
    battery_voltage: float
    acceleration: Vector3
    magnetometer: Vector3
    heading: int | None = Field(default=None, ge=0, lt=360)
    button_a: bool
    button_b: bool
    shake: bool


class FinchSensorReading(SensorReading):
    """
    Decoded Finch sensor frame.

    Example:
        >>> reading = finch.current_reading()
        >>> if reading is not None and not reading.movement_flag:
        ...     finch.set_move("F", 10, 50)
    """

    variant: DeviceVariant = DeviceVariant.FINCH
    distance: int = Field(ge=0, description="Distance to obstacle in cm")
    left_light: int = Field(ge=0, le=255)
    right_light: int = Field(ge=0, le=255)
    left_line: int
    right_line: int
    left_encoder: float = Field(description="Left wheel rotations since reset")
    right_encoder: float = Field(description="Right wheel rotations since reset")
    movement_flag: bool = Field(description="Position-control movement still running")


class PortSensorReading(BaseModel):
    """
    Every interpretation of one Hummingbird sensor port.

    The controller cannot tell which sensor is plugged into a port, so all
    scalings are computed from the raw byte.

    Example:
        >>> port = PortSensorReading.from_raw(255)
        >>> port.light, port.dial
        (100, 100)
    """

    model_config = ConfigDict(frozen=True)

    raw: int = Field(ge=0, le=255)
    distance: int = Field(ge=0, description="Distance in cm")
    light: int = Field(ge=0, le=100)
    dial: int = Field(ge=0, le=100)
    voltage: float = Field(ge=0.0, description="Port voltage, 0-3.3 V")

    @classmethod
    def from_raw(cls, raw: int) -> PortSensorReading:
        """Compute all interpretations of a raw port byte."""
        return cls(
            raw=raw,
            distance=round_half_away(raw * HummingbirdConstants.DISTANCE_SCALE),
            light=round_half_away(raw * HummingbirdConstants.LIGHT_SCALE),
            dial=min(round_half_away(raw * HummingbirdConstants.DIAL_SCALE), 100),
            voltage=raw * HummingbirdConstants.VOLTAGE_SCALE,
        )


class HummingbirdSensorReading(SensorReading):
    """Decoded Hummingbird Bit sensor frame."""

    variant: DeviceVariant = DeviceVariant.HUMMINGBIRD
    sensor1: PortSensorReading
    sensor2: PortSensorReading
    sensor3: PortSensorReading

    @property
    def sensors(self) -> tuple[PortSensorReading, PortSensorReading, PortSensorReading]:
        """The three port readings in port order."""
        return (self.sensor1, self.sensor2, self.sensor3)
