"""
Output Memory models.

The peripheral receives every persistent output channel in one combined
frame, so the last commanded value of each channel has to be remembered
between commands. These models hold those values in wire units.

Invariants:
- Every channel holds a clamped, valid wire value; pydantic validates each
  assignment so an out-of-range value can never be stored
- Defaults are "off" (lights 0, Hummingbird servos 255)
- Ports are 1-based, as printed on the hardware
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from birdwire.exceptions import InvalidPortError
from birdwire.protocol.constants import FinchConstants, HummingbirdConstants, ProtocolConstants
from birdwire.protocol.numeric import clamp

Intensity = Annotated[int, Field(ge=0, le=ProtocolConstants.MAX_INTENSITY)]
WireByte = Annotated[int, Field(ge=0, le=255)]


class Color(BaseModel):
    """
    RGB intensities of a tri-color LED, each 0-100.

    Example:
        >>> Color.clamped(150, -5, 40)
        Color(red=100, green=0, blue=40)
    """

    model_config = ConfigDict(frozen=True)

    red: Intensity = 0
    green: Intensity = 0
    blue: Intensity = 0

    @classmethod
    def clamped(cls, red: int, green: int, blue: int) -> Color:
        """Build a colour, saturating each channel into 0-100."""
        upper = ProtocolConstants.MAX_INTENSITY
        return cls(
            red=int(clamp(red, 0, upper)),
            green=int(clamp(green, 0, upper)),
            blue=int(clamp(blue, 0, upper)),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Color:
        """Read a colour back from three wire bytes."""
        return cls(red=data[0], green=data[1], blue=data[2])

    def to_bytes(self) -> bytes:
        """Three wire bytes in R, G, B order."""
        return bytes((self.red, self.green, self.blue))

    def __repr__(self) -> str:
        return f"Color(red={self.red}, green={self.green}, blue={self.blue})"


OFF = Color()
"""All channels off."""


def _port_index(port: int, valid_ports: tuple[int, ...]) -> int:
    if not isinstance(port, int) or isinstance(port, bool) or port not in valid_ports:
        raise InvalidPortError(port, valid_ports)
    return valid_ports.index(port)


class FinchOutputMemory(BaseModel):
    """
    Last commanded beak and tail colours of a Finch.

    The Finch motors are not part of this memory: motor commands are sent
    in their own frame and do not need to be repeated.
    """

    model_config = ConfigDict(validate_assignment=True)

    beak: Color = OFF
    tail: tuple[Color, Color, Color, Color] = (OFF, OFF, OFF, OFF)

    def set_tail(self, port: int, color: Color) -> None:
        """
        Store one tail light.

        Raises:
            InvalidPortError: If port is not 1-4.
        """
        index = _port_index(port, FinchConstants.TAIL_PORTS)
        tail = list(self.tail)
        tail[index] = color
        self.tail = tuple(tail)

    def set_all_tails(self, color: Color) -> None:
        """Store the same colour on every tail light."""
        self.tail = (color, color, color, color)


class HummingbirdOutputMemory(BaseModel):
    """
    Last commanded LEDs and servos of a Hummingbird Bit.

    Servo values are wire bytes: 0-254 for a position servo angle, a
    rotation speed byte, or 255 when the servo is off.
    """

    model_config = ConfigDict(validate_assignment=True)

    tri_leds: tuple[Color, Color] = (OFF, OFF)
    single_leds: tuple[Intensity, Intensity, Intensity] = (0, 0, 0)
    servos: tuple[WireByte, WireByte, WireByte, WireByte] = (
        HummingbirdConstants.SERVO_OFF,
        HummingbirdConstants.SERVO_OFF,
        HummingbirdConstants.SERVO_OFF,
        HummingbirdConstants.SERVO_OFF,
    )

    def set_tri_led(self, port: int, color: Color) -> None:
        """
        Store one tri-color LED.

        Raises:
            InvalidPortError: If port is not 1 or 2.
        """
        index = _port_index(port, HummingbirdConstants.TRI_LED_PORTS)
        leds = list(self.tri_leds)
        leds[index] = color
        self.tri_leds = tuple(leds)

    def set_led(self, port: int, intensity: int) -> None:
        """
        Store one single-color LED intensity.

        Raises:
            InvalidPortError: If port is not 1-3.
        """
        index = _port_index(port, HummingbirdConstants.LED_PORTS)
        leds = list(self.single_leds)
        leds[index] = intensity
        self.single_leds = tuple(leds)

    def set_servo(self, port: int, wire_value: int) -> None:
        """
        Store one servo wire value.

        Raises:
            InvalidPortError: If port is not 1-4.
        """
        index = _port_index(port, HummingbirdConstants.SERVO_PORTS)
        servos = list(self.servos)
        servos[index] = wire_value
        self.servos = tuple(servos)
