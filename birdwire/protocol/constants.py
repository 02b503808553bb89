"""
Opcodes, frame lengths, byte layouts and scaling constants.

Values come from the BirdBrain Finch and Hummingbird Bit Bluetooth
protocol. Changing any of them breaks interoperability with the physical
peripheral.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final


class DeviceVariant(Enum):
    """Supported peripheral variants."""

    FINCH = "finch"
    """Finch robot (20-byte sensor frame)."""

    HUMMINGBIRD = "hummingbird"
    """Hummingbird Bit controller (14-byte sensor frame)."""


class FinchOpcode(IntEnum):
    """
    Finch command opcodes.

    The Finch shares the print and calibrate opcodes with the Hummingbird
    but uses its own combined-output, motor and stop opcodes.
    """

    SET_LIGHTS_AND_BUZZER = 0xD0
    """Beak, four tail lights and buzzer in one frame."""

    MOTORS_AND_DISPLAY = 0xD2
    """Motor and display commands, selected by the second byte."""

    RESET_ENCODERS = 0xD5
    """Zero both wheel encoders."""

    STOP_ALL = 0xDF
    """Turn off motors, lights and buzzer."""

    PRINT_STRING = 0xCC
    """Scroll a string on the micro:bit display."""

    CALIBRATE_COMPASS = 0xCE
    """Start the compass calibration routine."""


class FinchSubcommand(IntEnum):
    """Second byte of a MOTORS_AND_DISPLAY frame."""

    DISPLAY_PATTERN = 0x20
    """Show a 25-LED pattern."""

    MOTORS = 0x40
    """Position or velocity control of both wheels."""


class HummingbirdOpcode(IntEnum):
    """Hummingbird Bit command opcodes."""

    SET_ALL_OUTPUTS = 0xCA
    """LEDs, servos and buzzer in one frame."""

    STOP_ALL = 0xCB
    """Turn off all outputs."""

    DISPLAY = 0xCC
    """Print string or display pattern, selected by the second byte."""

    CALIBRATE_COMPASS = 0xCE
    """Start the compass calibration routine."""


class HummingbirdSubcommand(IntEnum):
    """Second byte of a DISPLAY frame when showing a pattern."""

    DISPLAY_PATTERN = 0x80


class ProtocolConstants:
    """
    Constants shared by both variants.
    """

    # ===== Display =====

    PRINT_FLAG: Final[int] = 0x40
    """Added to the string length in a print-string frame."""

    MAX_PRINT_LENGTH: Final[int] = 18
    """Longest string a single print frame can carry."""

    UNSUPPORTED_CHARACTER: Final[int] = 254
    """Sent in place of characters with code points above 255."""

    DISPLAY_PATTERN_LENGTH: Final[int] = 25
    """Number of LEDs on the micro:bit display."""

    CALIBRATE_PAYLOAD: Final[bytes] = b"\xff\xff\xff"
    """Fixed payload of the compass calibration frame."""

    # ===== Buzzer =====

    MIN_NOTE: Final[int] = 32
    """Lowest playable MIDI note."""

    MAX_NOTE: Final[int] = 135
    """Highest playable MIDI note."""

    MAX_BEATS: Final[float] = 16.0
    """Longest note, in beats of one second."""

    MS_PER_BEAT: Final[int] = 1000
    """Beats are played at 60 bpm."""

    MAX_PERIOD_US: Final[int] = 0xFFFF
    """Buzzer period must fit in an unsigned 16-bit field."""

    # ===== Lights =====

    MAX_INTENSITY: Final[int] = 100
    """Upper bound of LED channel intensities."""

    # ===== Inertial sensors =====

    MOUNT_ANGLE_DEGREES: Final[float] = 40.0
    """Tilt of the micro:bit relative to the Finch body (Y-Z plane)."""

    ACCELERATION_SCALE: Final[float] = 196 / 1280
    """Accelerometer counts to m/s^2."""

    # ===== Buttons / shake bits =====

    SHAKE_BIT: Final[int] = 0
    """Set while the micro:bit is being shaken."""

    BUTTON_A_BIT: Final[int] = 4
    """Clear while button A is pressed."""

    BUTTON_B_BIT: Final[int] = 5
    """Clear while button B is pressed."""


class FinchConstants:
    """
    Finch frame layout and physical scaling.
    """

    FRAME_LENGTH: Final[int] = 20
    """Bytes in a Finch sensor frame."""

    BATTERY_OFFSET: Final[int] = 320
    """Added to the raw battery byte before scaling."""

    BATTERY_SCALE: Final[float] = 0.00937
    """Volts per battery unit after the offset."""

    CM_PER_DISTANCE_UNIT: Final[float] = 0.0919
    """Distance sensor units to centimetres."""

    TICKS_PER_CM: Final[float] = 49.7
    """Encoder ticks per centimetre of travel."""

    TICKS_PER_DEGREE: Final[float] = 4.335
    """Encoder ticks per degree of body rotation."""

    TICKS_PER_ROTATION: Final[float] = 792.0
    """Encoder ticks per wheel rotation."""

    MAX_TICKS: Final[int] = 0xFFFFFF
    """Tick counts are sent as 24-bit unsigned values."""

    SPEED_SCALE: Final[int] = 36
    """Percent speed is scaled by SPEED_SCALE / 100 before sending."""

    DIRECTION_FLAG: Final[int] = 0x80
    """Set in a wheel speed byte for forward rotation."""

    MOVEMENT_FLAG_THRESHOLD: Final[int] = 127
    """Line byte values above this mean a movement is in progress."""

    LINE_OFFSET: Final[float] = 6.0
    LINE_SPAN: Final[float] = 121.0

    TAIL_PORTS: Final[tuple[int, ...]] = (1, 2, 3, 4)
    ALL_TAIL_PORTS: Final[str] = "all"

    class ByteIndex:
        """Offsets into the 20-byte sensor frame."""

        DISTANCE_MSB: Final[int] = 0
        DISTANCE_LSB: Final[int] = 1
        LEFT_LIGHT: Final[int] = 2
        RIGHT_LIGHT: Final[int] = 3
        LEFT_LINE: Final[int] = 4
        MOVEMENT_FLAG: Final[int] = 4
        """Shares byte 4 with the left line sensor (bit 7)."""
        RIGHT_LINE: Final[int] = 5
        BATTERY: Final[int] = 6
        LEFT_ENCODER: Final[int] = 7
        RIGHT_ENCODER: Final[int] = 10
        ACCELEROMETER: Final[int] = 13
        BUTTON_SHAKE: Final[int] = 16
        MAGNETOMETER: Final[int] = 17


class HummingbirdConstants:
    """
    Hummingbird Bit frame layout and physical scaling.
    """

    FRAME_LENGTH: Final[int] = 14
    """Bytes in a Hummingbird sensor frame."""

    BATTERY_SCALE: Final[float] = 55.6
    """Raw battery units per volt."""

    RESERVED_BYTE: Final[int] = 0xFF
    """Placeholder sent in the reserved slot of the output frame."""

    SERVO_OFF: Final[int] = 255
    """Servo wire value that releases the servo."""

    MAX_SERVO_ANGLE: Final[int] = 180
    SERVO_ANGLE_SPAN: Final[int] = 254
    """Angles 0-180 map linearly onto 0-254."""

    ROTATION_DEADBAND: Final[int] = 10
    """Rotation speeds within +/- this value switch the servo off."""

    ROTATION_SCALE: Final[float] = 23.0 / 100.0
    ROTATION_CENTER: Final[float] = 122.0

    DISTANCE_SCALE: Final[float] = 117 / 100
    LIGHT_SCALE: Final[float] = 100 / 255
    DIAL_SCALE: Final[float] = 100 / 230
    VOLTAGE_SCALE: Final[float] = 3.3 / 255

    TRI_LED_PORTS: Final[tuple[int, ...]] = (1, 2)
    LED_PORTS: Final[tuple[int, ...]] = (1, 2, 3)
    SERVO_PORTS: Final[tuple[int, ...]] = (1, 2, 3, 4)

    class ByteIndex:
        """Offsets into the 14-byte sensor frame."""

        SENSOR1: Final[int] = 0
        SENSOR2: Final[int] = 1
        SENSOR3: Final[int] = 2
        BATTERY: Final[int] = 3
        ACCELEROMETER: Final[int] = 4
        BUTTON_SHAKE: Final[int] = 7
        MAGNETOMETER: Final[int] = 8
        """Three big-endian signed 16-bit values."""


FRAME_LENGTHS: Final[dict[DeviceVariant, int]] = {
    DeviceVariant.FINCH: FinchConstants.FRAME_LENGTH,
    DeviceVariant.HUMMINGBIRD: HummingbirdConstants.FRAME_LENGTH,
}
"""Expected inbound frame length per variant."""
