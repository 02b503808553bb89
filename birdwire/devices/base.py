"""
Device facade shared by the Finch and the Hummingbird Bit.

A device ties together the two directions of the protocol:

    inbound:   on_frame(bytes) -> FrameTracker -> SensorDecoder -> reading
    outbound:  setter -> Output Memory -> CommandEncoder -> transport.send()

Every outbound operation runs read-modify-encode-send under one re-entrant
lock, so concurrent setters never lose an update and every emitted frame is
built from one consistent snapshot of Output Memory. The inbound path is
guarded separately by the frame tracker's lock.

Example:
    >>> from birdwire import Hummingbird
    >>> from birdwire.transport import MockTransport
    >>>
    >>> mock = MockTransport()
    >>> bird = Hummingbird(mock)
    >>> bird.set_led(1, 100)
    >>> mock.last_sent.hex()
    'ca64ff000000000000ffffffff000000000000'
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel

from birdwire.decoders.base import SensorDecoder
from birdwire.encoders.base import CommandEncoder
from birdwire.exceptions import TransportError
from birdwire.models.outputs import Color
from birdwire.models.readings import SensorReading
from birdwire.protocol.constants import DeviceVariant, ProtocolConstants
from birdwire.protocol.encoding import bytes_to_hex
from birdwire.protocol.frame import FrameTracker
from birdwire.protocol.numeric import clamp, note_to_period
from birdwire.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)

TReading = TypeVar("TReading", bound=SensorReading)
TMemory = TypeVar("TMemory", bound=BaseModel)

ReadingCallback = Callable[[SensorReading], None]
ErrorCallback = Callable[[TransportError], None]


def intensity(value: float) -> int:
    """Saturate an LED channel value into 0-100."""
    return int(clamp(value, 0, ProtocolConstants.MAX_INTENSITY))


def color(red: float, green: float, blue: float) -> Color:
    """Build a clamped colour from raw channel values."""
    return Color(red=intensity(red), green=intensity(green), blue=intensity(blue))


class BaseDevice(ABC, Generic[TReading, TMemory]):
    """
    Base class for a connected BirdBrain device.

    Subclasses provide the decoder, encoder and a factory for fresh Output
    Memory, and add their variant-specific setters.

    Attributes:
        variant: Which device this is.
        transport: Output boundary receiving command frames.
    """

    variant: DeviceVariant

    def __init__(
        self,
        transport: AbstractTransport,
        decoder: SensorDecoder,
        encoder: CommandEncoder[TMemory],
        *,
        clock: Callable[[], float] = time.monotonic,
        on_reading: ReadingCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        """
        Initialize the device.

        Args:
            transport: Receives every command frame.
            decoder: Sensor decoder for this variant.
            encoder: Command encoder for this variant.
            clock: Timestamp source for frames that arrive without one.
            on_reading: Called with each freshly decoded reading.
            on_error: Called with a TransportError after a read failure.
        """
        self._transport = transport
        self._decoder = decoder
        self._encoder = encoder
        self._tracker = FrameTracker(decoder.frame_length, clock=clock)
        self._lock = threading.RLock()
        self._memory: TMemory = self._new_memory()
        self.on_reading = on_reading
        self.on_error = on_error

    @abstractmethod
    def _new_memory(self) -> TMemory:
        """Output Memory with every channel at its default."""
        ...

    @property
    def transport(self) -> AbstractTransport:
        """Get the output transport."""
        return self._transport

    @property
    def output_memory(self) -> TMemory:
        """Copy of the current Output Memory."""
        with self._lock:
            return self._memory.model_copy(deep=True)

    # ===== Inbound =====

    def on_frame(
        self,
        data: bytes | bytearray | memoryview,
        timestamp: float | None = None,
    ) -> TReading:
        """
        Accept one inbound sensor frame.

        Args:
            data: Bytes received from the peripheral.
            timestamp: Arrival time; the device clock when omitted.

        Returns:
            The decoded reading.

        Raises:
            WrongLengthError: If the buffer has the wrong length. The previous
                frame is kept and is not marked stale.
        """
        frame = self._tracker.ingest(data, timestamp)
        reading = self._decoder.decode(frame)
        if self.on_reading is not None:
            self.on_reading(reading)
        return reading

    def on_transport_error(self, error: BaseException | None = None) -> TransportError:
        """
        Report that the transport failed to read sensor data.

        Marks the last frame stale and notifies on_error. No recovery is
        attempted.

        Args:
            error: The underlying failure, if known.

        Returns:
            The TransportError passed to on_error, carrying the stale reading.
        """
        self._tracker.mark_stale()
        reading = self.current_reading()
        logger.warning("Transport read error on %s: %s", self._transport.name, error)

        transport_error = TransportError(reading=reading, cause=error)
        if self.on_error is not None:
            self.on_error(transport_error)
        return transport_error

    def current_reading(self) -> TReading | None:
        """
        Decode the latest frame.

        Returns:
            The reading, or None before the first frame.
        """
        return self._tracker.decode_latest(self._decoder)

    # ===== Outbound =====

    def _send(self, frame: bytes) -> None:
        logger.debug("Sending %s to %s", bytes_to_hex(frame), self._transport.name)
        self._transport.send(frame)

    def _send_outputs(self, period_us: int = 0, duration_ms: int = 0) -> None:
        with self._lock:
            self._send(self._encoder.encode_outputs(self._memory, period_us, duration_ms))

    def stop_all(self) -> None:
        """Turn every output off and reset Output Memory to its defaults."""
        with self._lock:
            self._memory = self._new_memory()
            self._send(self._encoder.encode_stop_all())
        logger.info("Stopped all outputs on %s", self._transport.name)

    def play_note(self, note: int, beats: float) -> None:
        """
        Play a note on the buzzer.

        The buzzer is not part of Output Memory; the current lights are
        resent alongside the note.

        Args:
            note: MIDI note number, clamped to 32-135.
            beats: Length in beats of one second, clamped to 0-16.
        """
        note = clamp(note, ProtocolConstants.MIN_NOTE, ProtocolConstants.MAX_NOTE)
        beats = clamp(beats, 0, ProtocolConstants.MAX_BEATS)
        duration_ms = int(ProtocolConstants.MS_PER_BEAT * beats)

        period_us = note_to_period(note)
        if period_us is None:
            logger.warning("Note %d has no playable period, sending silence", note)
            period_us = duration_ms = 0

        self._send_outputs(period_us, duration_ms)

    def print_string(self, text: str) -> bool:
        """
        Scroll text on the micro:bit display.

        Returns:
            True if the text was longer than 18 characters and was cut.
        """
        frame, truncated = self._encoder.encode_print_string(text)
        if truncated:
            logger.warning(
                "String of %d characters truncated to %d",
                len(text),
                ProtocolConstants.MAX_PRINT_LENGTH,
            )
        with self._lock:
            self._send(frame)
        return truncated

    def set_display(self, pattern: Sequence[int]) -> None:
        """
        Show a 25-LED pattern, row by row.

        Raises:
            EncodingError: If the pattern is not 25 values of 0 or 1.
        """
        frame = self._encoder.encode_display(pattern)
        with self._lock:
            self._send(frame)

    def calibrate_compass(self) -> None:
        """Start the compass calibration routine on the micro:bit."""
        with self._lock:
            self._send(self._encoder.encode_calibrate_compass())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(transport={self._transport.name!r})"
