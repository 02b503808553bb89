"""
Exception hierarchy for birdwire.

All exceptions inherit from BirdwireError, providing a clean hierarchy
for error handling. The design follows these principles:

1. Inbound frame errors are distinct from outbound encoding errors
2. Encoding errors are caller mistakes and are never coerced into a
   "closest valid" command
3. Transport errors come from the collaborator and carry the last known
   (stale) reading so consumers still have state to work with
4. All exceptions provide meaningful error messages
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from birdwire.models.readings import SensorReading


class BirdwireError(Exception):
    """
    Base exception for all birdwire errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all birdwire errors with a single except clause.
    """

    pass


class ProtocolError(BirdwireError):
    """
    Protocol-level error.

    Raised when inbound data violates the wire protocol.
    """

    pass


class FrameError(ProtocolError):
    """
    Inbound frame error.

    Raised when a received buffer cannot become a Raw Frame. The frame is
    dropped and the previously accepted frame is retained.
    """

    pass


class WrongLengthError(FrameError):
    """
    Inbound buffer length does not match the device's frame length.

    This alone does not mark the previous frame stale.
    """

    def __init__(
        self,
        message: str = "Wrong frame length",
        *,
        expected: int | None = None,
        received: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        base = super().__str__()
        if self.expected is not None and self.received is not None:
            return f"{base} (expected {self.expected} bytes, got {self.received})"
        return base


class EncodingError(BirdwireError):
    """
    Malformed command input.

    Raised for caller errors such as a display pattern of the wrong length,
    non-binary pattern elements, an unknown movement direction, a NaN
    setter value or a non-finite move distance. Values that are merely out
    of range (angles, intensities, speeds) are clamped instead and never
    raise.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.field:
            parts.append(f"field={self.field}")
        if self.value is not None:
            display_value = repr(self.value)
            if len(display_value) > 40:
                display_value = display_value[:40] + "..."
            parts.append(f"value={display_value}")
        return " ".join(parts) if len(parts) > 1 else parts[0]


class InvalidPortError(EncodingError):
    """
    Port or channel identifier not present on this device.
    """

    def __init__(self, port: Any, valid_ports: Iterable[Any]) -> None:
        self.port = port
        self.valid_ports = tuple(valid_ports)
        super().__init__(
            f"Invalid port {port!r}, expected one of {list(self.valid_ports)}",
            field="port",
        )


class TransportError(BirdwireError):
    """
    Transport-level error surfaced by the collaborator.

    The core's only reaction is to mark the last frame stale. The error
    passed to consumers carries that stale reading, if any.
    """

    def __init__(
        self,
        message: str = "Transport reported a read error",
        *,
        reading: SensorReading | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.reading = reading
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is not None:
            return f"{base}: {self.cause}"
        return base
