"""
Inbound frame validation and staleness tracking.

The peripheral sends one fixed-length sensor frame per notification. There
is no delimiter, checksum or length prefix: a buffer is a valid frame if
and only if its length equals the variant's frame length.

1. **FrameValidator**: stateless length check that produces a RawFrame
   or a FrameParseError, reported as a (result, value) pair.
2. **FrameTracker**: holds the most recently accepted RawFrame. A rejected
   buffer leaves the previous frame untouched; a transport read error marks
   it stale in place.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, TypeVar, cast

from birdwire.exceptions import WrongLengthError
from birdwire.protocol.encoding import bytes_to_hex

if TYPE_CHECKING:
    from birdwire.decoders.base import SensorDecoder
    from birdwire.models.readings import SensorReading

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FrameParseResult(Enum):
    """
    Result codes for frame validation.
    """

    SUCCESS = auto()
    """Buffer has the expected length and became a RawFrame."""

    EMPTY_BUFFER = auto()
    """Buffer is empty."""

    WRONG_LENGTH = auto()
    """Buffer length does not match the expected frame length."""


@dataclass(frozen=True)
class FrameParseError:
    """
    Details about a rejected buffer.
    """

    result: FrameParseResult
    message: str
    expected_length: int
    received_length: int


class RawFrame:
    """
    One accepted sensor frame.

    The byte content and timestamp never change. The staleness flag is the
    only mutable field; it is set when the transport reports a read error
    after this frame arrived.

    Attributes:
        data: Frame bytes, exactly the variant's frame length.
        timestamp: Arrival time in seconds (monotonic clock by default).
        is_stale: Whether the transport has since failed to deliver data.
    """

    __slots__ = ("_data", "_timestamp", "_is_stale")

    def __init__(self, data: bytes, timestamp: float, *, is_stale: bool = False) -> None:
        self._data = bytes(data)
        self._timestamp = timestamp
        self._is_stale = is_stale

    @property
    def data(self) -> bytes:
        """Frame bytes."""
        return self._data

    @property
    def timestamp(self) -> float:
        """Arrival time in seconds."""
        return self._timestamp

    @property
    def is_stale(self) -> bool:
        """Whether this frame may no longer reflect the peripheral."""
        return self._is_stale

    def mark_stale(self) -> None:
        """Flag the frame as outdated. The bytes are unchanged."""
        self._is_stale = True

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> int:
        return self._data[index]

    def __repr__(self) -> str:
        stale = ", stale" if self._is_stale else ""
        return f"RawFrame({bytes_to_hex(self._data)}, t={self._timestamp:.3f}{stale})"


class FrameValidator:
    """
    Length validator for one device variant.

    The validator is stateless and can be reused.

    Example:
        >>> validator = FrameValidator(14)
        >>> result, frame = validator.parse(bytes(14), timestamp=1.0)
        >>> assert result == FrameParseResult.SUCCESS
        >>> result, error = validator.parse(bytes(13), timestamp=1.0)
        >>> assert result == FrameParseResult.WRONG_LENGTH
    """

    def __init__(self, expected_length: int) -> None:
        if expected_length <= 0:
            raise ValueError(f"Frame length must be positive, got {expected_length}")
        self._expected_length = expected_length

    @property
    def expected_length(self) -> int:
        """Number of bytes in a valid frame."""
        return self._expected_length

    def parse(
        self,
        buffer: bytes | bytearray | memoryview,
        timestamp: float,
    ) -> tuple[FrameParseResult, RawFrame | FrameParseError]:
        """
        Validate a buffer and wrap it as a RawFrame.

        Args:
            buffer: Bytes received from the transport.
            timestamp: Arrival time to stamp on the frame.

        Returns:
            Tuple of (result, frame_or_error):
            - On success: (SUCCESS, RawFrame)
            - On failure: (error_code, FrameParseError)
        """
        received = len(buffer)
        if received == 0:
            return FrameParseResult.EMPTY_BUFFER, FrameParseError(
                result=FrameParseResult.EMPTY_BUFFER,
                message="Buffer is empty",
                expected_length=self._expected_length,
                received_length=0,
            )

        if received != self._expected_length:
            return FrameParseResult.WRONG_LENGTH, FrameParseError(
                result=FrameParseResult.WRONG_LENGTH,
                message=f"Expected {self._expected_length} bytes, got {received}",
                expected_length=self._expected_length,
                received_length=received,
            )

        return FrameParseResult.SUCCESS, RawFrame(bytes(buffer), timestamp)


class FrameTracker:
    """
    Holds the latest accepted frame for one inbound stream.

    Replacing the frame, marking it stale and decoding it all happen under
    one lock, so a decoder never sees a frame and a staleness flag from two
    different moments.

    Example:
        >>> tracker = FrameTracker(14)
        >>> tracker.mark_stale()  # no frame yet: no-op
        >>> frame = tracker.ingest(bytes(14))
        >>> tracker.mark_stale()
        >>> tracker.latest.is_stale
        True
    """

    def __init__(
        self,
        expected_length: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            expected_length: Number of bytes in a valid frame.
            clock: Timestamp source used when ingest() gets no timestamp.
        """
        self._validator = FrameValidator(expected_length)
        self._clock = clock
        self._lock = threading.Lock()
        self._latest: RawFrame | None = None

    @property
    def expected_length(self) -> int:
        """Number of bytes in a valid frame."""
        return self._validator.expected_length

    @property
    def latest(self) -> RawFrame | None:
        """Most recently accepted frame, or None before the first one."""
        with self._lock:
            return self._latest

    def ingest(
        self,
        buffer: bytes | bytearray | memoryview,
        timestamp: float | None = None,
    ) -> RawFrame:
        """
        Accept a buffer as the new latest frame.

        Args:
            buffer: Bytes received from the transport.
            timestamp: Arrival time; the tracker's clock when omitted.

        Returns:
            The accepted frame (not stale).

        Raises:
            WrongLengthError: If the buffer length is wrong. The previous
                frame is kept and its staleness is unchanged.
        """
        if timestamp is None:
            timestamp = self._clock()

        result, parsed = self._validator.parse(buffer, timestamp)
        if result != FrameParseResult.SUCCESS:
            error = cast(FrameParseError, parsed)
            logger.warning("Dropping inbound frame: %s", error.message)
            raise WrongLengthError(
                "Inbound frame rejected",
                expected=error.expected_length,
                received=error.received_length,
            )

        frame = cast(RawFrame, parsed)
        with self._lock:
            self._latest = frame
        logger.debug("Accepted frame %s", bytes_to_hex(frame.data))
        return frame

    def mark_stale(self) -> None:
        """
        Flag the latest frame as stale.

        Safe to call before any frame has arrived.
        """
        with self._lock:
            if self._latest is not None:
                self._latest.mark_stale()

    def read(self, fn: Callable[[RawFrame], T]) -> T | None:
        """
        Apply fn to the latest frame while holding the tracker lock.

        Returns:
            fn's result, or None when there is no frame yet.
        """
        with self._lock:
            if self._latest is None:
                return None
            return fn(self._latest)

    def decode_latest(self, decoder: SensorDecoder) -> SensorReading | None:
        """Decode the latest frame atomically; None before the first frame."""
        return self.read(decoder.decode)

    def clear(self) -> None:
        """Forget the latest frame."""
        with self._lock:
            self._latest = None
