"""
Command encoder interface.

An encoder turns Output Memory plus transient parameters into one complete
command frame. Encoders are stateless; the device that owns the memory is
responsible for locking around read-encode-send.

Frames shared by both variants (print string, calibrate compass) are
implemented here; the combined-output, stop and display frames differ per
variant.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel

from birdwire.protocol.constants import DeviceVariant, ProtocolConstants
from birdwire.protocol.encoding import encode_print_payload

TMemory = TypeVar("TMemory", bound=BaseModel)


class CommandEncoder(ABC, Generic[TMemory]):
    """
    Abstract base class for command frame encoders.

    Implementations should:
    1. Define the variant property
    2. Encode the combined output frame from Output Memory
    3. Provide decode_outputs() as the inverse for persistent channels
    4. Set print_opcode and calibrate_opcode from the variant opcode enum
    """

    print_opcode: int
    calibrate_opcode: int

    @property
    @abstractmethod
    def variant(self) -> DeviceVariant:
        """The device variant this encoder builds frames for."""
        ...

    @abstractmethod
    def encode_outputs(
        self,
        memory: TMemory,
        period_us: int = 0,
        duration_ms: int = 0,
    ) -> bytes:
        """
        Build the combined output frame.

        Args:
            memory: Current Output Memory.
            period_us: Buzzer period in microseconds (0 for silence).
            duration_ms: Buzzer duration in milliseconds.

        Returns:
            The complete frame including the opcode.
        """
        ...

    @abstractmethod
    def decode_outputs(self, frame: bytes) -> tuple[TMemory, int, int]:
        """
        Read a combined output frame back.

        Returns:
            Tuple of (memory, period_us, duration_ms).

        Raises:
            ValueError: If the frame has the wrong opcode or length.
        """
        ...

    @abstractmethod
    def encode_stop_all(self) -> bytes:
        """Frame that turns every output off."""
        ...

    @abstractmethod
    def encode_display(self, pattern: Sequence[int]) -> bytes:
        """
        Frame that shows a 25-LED pattern on the micro:bit.

        Raises:
            EncodingError: If the pattern is not 25 values of 0 or 1.
        """
        ...

    def encode_print_string(self, text: str) -> tuple[bytes, bool]:
        """
        Frame that scrolls text on the micro:bit display.

        Returns:
            Tuple of (frame, truncated).
        """
        payload, truncated = encode_print_payload(text)
        return bytes([self.print_opcode]) + payload, truncated

    def encode_calibrate_compass(self) -> bytes:
        """Frame that starts the compass calibration routine."""
        return bytes([self.calibrate_opcode]) + ProtocolConstants.CALIBRATE_PAYLOAD
