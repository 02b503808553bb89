"""
Finch robot.

Adds the beak and tail lights, the drive motors and encoder reset on top of
the shared micro:bit operations.

Example:
    >>> from birdwire import Finch
    >>> from birdwire.transport import MockTransport
    >>>
    >>> finch = Finch(MockTransport())
    >>> finch.set_beak(100, 0, 0)
    >>> finch.set_tail("all", 0, 0, 100)
    >>> finch.set_move("F", 20, 50)
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from birdwire.decoders.base import get_decoder
from birdwire.devices.base import BaseDevice, ErrorCallback, ReadingCallback, color
from birdwire.encoders.finch import FinchEncoder
from birdwire.exceptions import EncodingError, InvalidPortError
from birdwire.models.outputs import FinchOutputMemory
from birdwire.models.readings import FinchSensorReading
from birdwire.protocol.constants import DeviceVariant, FinchConstants
from birdwire.protocol.numeric import clamp, round_half_away
from birdwire.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)

# Beak bleed into the light sensors, fitted per sensor as
# c_r*R + c_g*G + c_b*B + c_rg*RG + c_rb*RB + c_gb*GB + c_rgb*RGB
LEFT_LIGHT_BLEED = (
    1.06871493e-02,
    1.94526614e-02,
    6.12409825e-02,
    4.01343475e-04,
    4.25761981e-04,
    6.46091068e-04,
    -4.41056971e-06,
)
RIGHT_LIGHT_BLEED = (
    6.40473070e-03,
    1.41015162e-02,
    5.05547817e-02,
    3.98301391e-04,
    4.41091223e-04,
    6.40756862e-04,
    -4.76971242e-06,
)


def _bleed(coefficients: tuple[float, ...], r: float, g: float, b: float) -> float:
    c_r, c_g, c_b, c_rg, c_rb, c_gb, c_rgb = coefficients
    return c_r * r + c_g * g + c_b * b + c_rg * r * g + c_rb * r * b + c_gb * g * b + c_rgb * r * g * b


class Finch(BaseDevice[FinchSensorReading, FinchOutputMemory]):
    """
    A Finch robot.

    Lights are persistent and resent with every lights/buzzer frame. Motor
    commands are one-shot and are not kept in Output Memory.
    """

    variant = DeviceVariant.FINCH

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
            FinchEncoder(),
            on_reading=on_reading,
            clock=clock,
            on_error=on_error,
        )

    def _new_memory(self) -> FinchOutputMemory:
        return FinchOutputMemory()

    @property
    def encoder(self) -> FinchEncoder:
        return self._encoder

    # ===== Lights =====

    def set_beak(self, red: int, green: int, blue: int) -> None:
        """Set the beak colour; each channel is clamped to 0-100."""
        with self._lock:
            self._memory.beak = color(red, green, blue)
            self._send_outputs()

    def set_tail(self, port: int | str, red: int, green: int, blue: int) -> None:
        """
        Set one tail light, or all four with port "all".

        Raises:
            InvalidPortError: If port is not 1-4 or "all".
        """
        if isinstance(port, str):
            if port != FinchConstants.ALL_TAIL_PORTS:
                raise InvalidPortError(port, (*FinchConstants.TAIL_PORTS, FinchConstants.ALL_TAIL_PORTS))
            with self._lock:
                self._memory.set_all_tails(color(red, green, blue))
                self._send_outputs()
            return

        with self._lock:
            self._memory.set_tail(port, color(red, green, blue))
            self._send_outputs()

    # ===== Motors =====

    def set_motors(self, left_speed: float, right_speed: float) -> None:
        """
        Run both wheels until the next motor command.

        Speeds are percentages, clamped to -100..100.
        """
        with self._lock:
            self._send(self.encoder.encode_motors(left_speed, right_speed))

    def stop(self) -> None:
        """Stop both wheels. Lights are unaffected."""
        self.set_motors(0, 0)

    def set_move(self, direction: str, distance: float, speed: float) -> None:
        """
        Drive straight for a distance, then stop.

        Args:
            direction: "F" for forward or "B" for backward.
            distance: Distance in centimetres.
            speed: Percentage, clamped to -100..100.

        Raises:
            EncodingError: If the direction is unknown, or the distance is not
                finite or too long to encode.
        """
        if direction not in ("F", "B"):
            raise EncodingError(f"Direction must be 'F' or 'B', got {direction!r}", field="direction", value=direction)
        if not math.isfinite(distance):
            raise EncodingError("Distance must be a finite number", field="distance", value=distance)

        speed = clamp(speed, -100, 100)
        if direction == "B":
            speed = -speed
        ticks = round_half_away(abs(distance * FinchConstants.TICKS_PER_CM))
        logger.debug("Move %s %.1f cm as %d ticks", direction, distance, ticks)

        with self._lock:
            self._send(self.encoder.encode_motors(speed, speed, ticks, ticks))

    def set_turn(self, direction: str, angle: float, speed: float) -> None:
        """
        Turn in place by an angle, then stop.

        Args:
            direction: "R" for right or "L" for left.
            angle: Angle in degrees.
            speed: Percentage, clamped to -100..100.

        Raises:
            EncodingError: If the direction is unknown, or the angle is not
                finite or too large to encode.
        """
        if direction not in ("R", "L"):
            raise EncodingError(f"Direction must be 'R' or 'L', got {direction!r}", field="direction", value=direction)
        if not math.isfinite(angle):
            raise EncodingError("Angle must be a finite number", field="angle", value=angle)

        left = clamp(speed, -100, 100)
        right = -left
        if direction == "L":
            left, right = right, left
        ticks = round_half_away(abs(angle * FinchConstants.TICKS_PER_DEGREE))
        logger.debug("Turn %s %.1f degrees as %d ticks", direction, angle, ticks)

        with self._lock:
            self._send(self.encoder.encode_motors(left, right, ticks, ticks))

    def reset_encoders(self) -> None:
        """Zero both wheel encoders."""
        with self._lock:
            self._send(self.encoder.encode_reset_encoders())

    # ===== Sensors =====

    def correct_light_sensor_values(self) -> tuple[int | None, int | None]:
        """
        Light sensor values with the beak's own light subtracted.

        The beak colour leaks into both light sensors. This removes a fitted
        estimate of that leak for the current beak colour.

        Returns:
            Tuple of (left, right) in 0-100, or (None, None) before the
            first frame.
        """
        reading = self.current_reading()
        if reading is None:
            return None, None

        with self._lock:
            beak = self._memory.beak
        r, g, b = float(beak.red), float(beak.green), float(beak.blue)

        left = reading.left_light - _bleed(LEFT_LIGHT_BLEED, r, g, b)
        right = reading.right_light - _bleed(RIGHT_LIGHT_BLEED, r, g, b)

        return round_half_away(clamp(left, 0.0, 100.0)), round_half_away(clamp(right, 0.0, 100.0))
