"""
Hummingbird Bit controller.

Adds the tri-color LEDs, single-color LEDs and servo ports on top of the
shared micro:bit operations. Every change resends the full set of outputs.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable

from birdwire.decoders.base import get_decoder
from birdwire.devices.base import BaseDevice, ErrorCallback, ReadingCallback, color, intensity
from birdwire.encoders.hummingbird import HummingbirdEncoder
from birdwire.models.outputs import HummingbirdOutputMemory
from birdwire.models.readings import HummingbirdSensorReading
from birdwire.protocol.constants import DeviceVariant, HummingbirdConstants
from birdwire.protocol.numeric import clamp, round_half_away
from birdwire.transport.abc import AbstractTransport


def position_servo_value(angle: float) -> int:
    """
    Wire value for a position servo angle in degrees.

    Example:
        >>> position_servo_value(90)
        127
        >>> position_servo_value(500)
        254
    """
    angle = clamp(angle, 0, HummingbirdConstants.MAX_SERVO_ANGLE)
    span = HummingbirdConstants.SERVO_ANGLE_SPAN
    return int(math.floor(angle * span / HummingbirdConstants.MAX_SERVO_ANGLE))


def rotation_servo_value(speed: float) -> int:
    """
    Wire value for a rotation servo speed percentage.

    Speeds inside the deadband switch the servo off.

    Example:
        >>> rotation_servo_value(5)
        255
        >>> rotation_servo_value(100)
        145
        >>> rotation_servo_value(-100)
        99
    """
    speed = clamp(speed, -100, 100)
    if abs(speed) <= HummingbirdConstants.ROTATION_DEADBAND:
        return HummingbirdConstants.SERVO_OFF
    scaled = speed * HummingbirdConstants.ROTATION_SCALE + HummingbirdConstants.ROTATION_CENTER
    return round_half_away(abs(scaled))


class Hummingbird(BaseDevice[HummingbirdSensorReading, HummingbirdOutputMemory]):
    """
    A Hummingbird Bit controller.

    Example:
        >>> bird = Hummingbird(transport)
        >>> bird.set_tri_led(1, 100, 0, 100)
        >>> bird.set_position_servo(2, 90)
        >>> reading = bird.current_reading()
        >>> reading.sensor1.light if reading else None
    """

    variant = DeviceVariant.HUMMINGBIRD

    def __init__(
        self,
        transport: AbstractTransport,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_reading: ReadingCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        super().__init__(
            transport,
            get_decoder(self.variant),
            HummingbirdEncoder(),
            clock=clock,
            on_reading=on_reading,
            on_error=on_error,
        )

    def _new_memory(self) -> HummingbirdOutputMemory:
        return HummingbirdOutputMemory()

    def set_tri_led(self, port: int, red: int, green: int, blue: int) -> None:
        """
        Set a tri-color LED on port 1 or 2.

        Raises:
            InvalidPortError: If port is not 1 or 2.
        """
        with self._lock:
            self._memory.set_tri_led(port, color(red, green, blue))
            self._send_outputs()

    def set_led(self, port: int, brightness: int) -> None:
        """
        Set a single-color LED on port 1-3; brightness is clamped to 0-100.

        Raises:
            InvalidPortError: If port is not 1-3.
        """
        with self._lock:
            self._memory.set_led(port, intensity(brightness))
            self._send_outputs()

    def set_position_servo(self, port: int, angle: float) -> None:
        """
        Move a position servo on port 1-4 to an angle, clamped to 0-180.

        Raises:
            InvalidPortError: If port is not 1-4.
        """
        with self._lock:
            self._memory.set_servo(port, position_servo_value(angle))
            self._send_outputs()

    def set_rotation_servo(self, port: int, speed: float) -> None:
        """
        Run a rotation servo on port 1-4 at a speed, clamped to -100..100.

        Raises:
            InvalidPortError: If port is not 1-4.
        """
        with self._lock:
            self._memory.set_servo(port, rotation_servo_value(speed))
            self._send_outputs()
