"""
Hummingbird Bit command frames.

Combined output frame (19 bytes):

| Offset | Content |
|--------|---------|
| 0      | CA |
| 1      | LED 1 |
| 2      | Reserved (FF) |
| 3-5    | Tri-color LED 1 R G B |
| 6-8    | Tri-color LED 2 R G B |
| 9-12   | Servos 1-4 |
| 13, 14 | LED 2, LED 3 |
| 15-18  | Buzzer period H L, duration H L |
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from birdwire.encoders.base import CommandEncoder
from birdwire.models.outputs import Color, HummingbirdOutputMemory
from birdwire.protocol.constants import (
    DeviceVariant,
    HummingbirdConstants,
    HummingbirdOpcode,
    HummingbirdSubcommand,
)
from birdwire.protocol.encoding import decode_buzzer, encode_buzzer, pack_display_pattern

OUTPUT_FRAME_LENGTH: Final[int] = 19


class HummingbirdEncoder(CommandEncoder[HummingbirdOutputMemory]):
    """Encoder for Hummingbird Bit command frames."""

    print_opcode = HummingbirdOpcode.DISPLAY
    calibrate_opcode = HummingbirdOpcode.CALIBRATE_COMPASS

    @property
    def variant(self) -> DeviceVariant:
        return DeviceVariant.HUMMINGBIRD

    def encode_outputs(
        self,
        memory: HummingbirdOutputMemory,
        period_us: int = 0,
        duration_ms: int = 0,
    ) -> bytes:
        led1, led2, led3 = memory.single_leds
        frame = bytearray([HummingbirdOpcode.SET_ALL_OUTPUTS, led1, HummingbirdConstants.RESERVED_BYTE])
        for color in memory.tri_leds:
            frame += color.to_bytes()
        frame += bytes(memory.servos)
        frame += bytes((led2, led3))
        frame += encode_buzzer(period_us, duration_ms)
        return bytes(frame)

    def decode_outputs(self, frame: bytes) -> tuple[HummingbirdOutputMemory, int, int]:
        if len(frame) != OUTPUT_FRAME_LENGTH or frame[0] != HummingbirdOpcode.SET_ALL_OUTPUTS:
            raise ValueError("Not a Hummingbird combined output frame")
        memory = HummingbirdOutputMemory(
            tri_leds=(Color.from_bytes(frame[3:6]), Color.from_bytes(frame[6:9])),
            single_leds=(frame[1], frame[13], frame[14]),
            servos=tuple(frame[9:13]),
        )
        period_us, duration_ms = decode_buzzer(frame[15:19])
        return memory, period_us, duration_ms

    def encode_stop_all(self) -> bytes:
        return bytes([HummingbirdOpcode.STOP_ALL])

    def encode_display(self, pattern: Sequence[int]) -> bytes:
        header = bytes([HummingbirdOpcode.DISPLAY, HummingbirdSubcommand.DISPLAY_PATTERN])
        return header + pack_display_pattern(pattern)
