"""
Finch command frames.

Combined output frame (20 bytes):

    D0 | beak R G B | tail1 R G B | ... | tail4 R G B | period H L | duration H L

Movement frame (10 bytes):

    D2 40 | left speed | left ticks (3) | right speed | right ticks (3)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from birdwire.encoders.base import CommandEncoder
from birdwire.exceptions import EncodingError
from birdwire.models.outputs import Color, FinchOutputMemory
from birdwire.protocol.constants import DeviceVariant, FinchConstants, FinchOpcode, FinchSubcommand
from birdwire.protocol.encoding import decode_buzzer, encode_buzzer, pack_display_pattern
from birdwire.protocol.numeric import clamp, round_half_away, split_uint24

OUTPUT_FRAME_LENGTH: Final[int] = 20


class FinchEncoder(CommandEncoder[FinchOutputMemory]):
    """
    Encoder for Finch command frames.

    Example:
        >>> encoder = FinchEncoder()
        >>> encoder.encode_stop_all().hex()
        'df'
        >>> encoder.encode_motors(50, 50).hex()
        'd2409200000092000000'
    """

    print_opcode = FinchOpcode.PRINT_STRING
    calibrate_opcode = FinchOpcode.CALIBRATE_COMPASS

    @property
    def variant(self) -> DeviceVariant:
        return DeviceVariant.FINCH

    def encode_outputs(
        self,
        memory: FinchOutputMemory,
        period_us: int = 0,
        duration_ms: int = 0,
    ) -> bytes:
        frame = bytearray([FinchOpcode.SET_LIGHTS_AND_BUZZER])
        frame += memory.beak.to_bytes()
        for color in memory.tail:
            frame += color.to_bytes()
        frame += encode_buzzer(period_us, duration_ms)
        return bytes(frame)

    def decode_outputs(self, frame: bytes) -> tuple[FinchOutputMemory, int, int]:
        if len(frame) != OUTPUT_FRAME_LENGTH or frame[0] != FinchOpcode.SET_LIGHTS_AND_BUZZER:
            raise ValueError("Not a Finch combined output frame")
        beak = Color.from_bytes(frame[1:4])
        tail = tuple(Color.from_bytes(frame[i : i + 3]) for i in (4, 7, 10, 13))
        period_us, duration_ms = decode_buzzer(frame[16:20])
        return FinchOutputMemory(beak=beak, tail=tail), period_us, duration_ms

    def encode_stop_all(self) -> bytes:
        return bytes([FinchOpcode.STOP_ALL])

    def encode_display(self, pattern: Sequence[int]) -> bytes:
        header = bytes([FinchOpcode.MOTORS_AND_DISPLAY, FinchSubcommand.DISPLAY_PATTERN])
        return header + pack_display_pattern(pattern)

    # ===== Finch-only frames =====

    def encode_reset_encoders(self) -> bytes:
        """Frame that zeroes both wheel encoders."""
        return bytes([FinchOpcode.RESET_ENCODERS])

    def encode_motors(
        self,
        left_speed: float,
        right_speed: float,
        left_ticks: int = 0,
        right_ticks: int = 0,
    ) -> bytes:
        """
        Build a movement frame.

        With zero tick counts the wheels run at the given speeds until the
        next motor command (velocity control). Non-zero tick counts make the
        Finch stop on its own after that many encoder ticks (position
        control).

        Args:
            left_speed: Left wheel speed, -100 to 100 (clamped).
            right_speed: Right wheel speed, -100 to 100 (clamped).
            left_ticks: Left wheel distance in encoder ticks.
            right_ticks: Right wheel distance in encoder ticks.

        Raises:
            EncodingError: If a tick count does not fit in 24 bits.
        """
        frame = bytearray([FinchOpcode.MOTORS_AND_DISPLAY, FinchSubcommand.MOTORS])
        frame.append(self.speed_byte(left_speed))
        frame += self._ticks_bytes(left_ticks, "left_ticks")
        frame.append(self.speed_byte(right_speed))
        frame += self._ticks_bytes(right_ticks, "right_ticks")
        return bytes(frame)

    @staticmethod
    def speed_byte(speed: float) -> int:
        """
        Wire byte for a wheel speed percentage.

        Bit 7 is set for forward rotation; the low bits carry the magnitude
        scaled to 0-36.

        Example:
            >>> FinchEncoder.speed_byte(100)
            164
            >>> FinchEncoder.speed_byte(-100)
            36
        """
        speed = clamp(speed, -100, 100)
        value = round_half_away(FinchConstants.SPEED_SCALE * speed / 100)
        if value > 0:
            return abs(value) + FinchConstants.DIRECTION_FLAG
        return abs(value)

    @staticmethod
    def _ticks_bytes(ticks: int, field: str) -> bytes:
        if not 0 <= ticks <= FinchConstants.MAX_TICKS:
            raise EncodingError(
                f"Tick count must be 0-{FinchConstants.MAX_TICKS}, got {ticks}",
                field=field,
                value=ticks,
            )
        return bytes(split_uint24(ticks))
