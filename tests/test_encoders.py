"""Tests for the Finch and Hummingbird command encoders."""

import pytest

from birdwire.encoders import FinchEncoder, HummingbirdEncoder
from birdwire.exceptions import EncodingError
from birdwire.models.outputs import Color, FinchOutputMemory, HummingbirdOutputMemory
from birdwire.protocol.constants import DeviceVariant


class TestFinchEncoder:
    """Tests for FinchEncoder."""

    @pytest.fixture
    def encoder(self):
        return FinchEncoder()

    def test_variant(self, encoder):
        assert encoder.variant == DeviceVariant.FINCH

    def test_default_outputs(self, encoder):
        """Test that fresh memory encodes as lights off and silence."""
        frame = encoder.encode_outputs(FinchOutputMemory())
        assert frame == bytes([0xD0]) + bytes(19)

    def test_outputs_layout(self, encoder):
        """Test beak, tails and buzzer positions."""
        memory = FinchOutputMemory()
        memory.beak = Color(red=100, green=0, blue=0)
        memory.set_tail(2, Color(red=0, green=50, blue=0))
        memory.set_tail(4, Color(red=1, green=2, blue=3))

        frame = encoder.encode_outputs(memory, period_us=2273, duration_ms=1000)
        assert frame.hex() == "d0640000" "000000" "003200" "000000" "010203" "08e103e8"
        assert len(frame) == 20

    def test_round_trip(self, encoder):
        """Test that decode_outputs recovers memory and buzzer fields."""
        memory = FinchOutputMemory()
        memory.beak = Color(red=10, green=20, blue=30)
        memory.set_all_tails(Color(red=100, green=100, blue=0))

        frame = encoder.encode_outputs(memory, 1000, 500)
        decoded, period, duration = encoder.decode_outputs(frame)
        assert decoded == memory
        assert (period, duration) == (1000, 500)

    def test_decode_outputs_rejects_other_frames(self, encoder):
        """Test that non-output frames cannot be decoded."""
        with pytest.raises(ValueError):
            encoder.decode_outputs(bytes([0xDF]))
        with pytest.raises(ValueError):
            encoder.decode_outputs(bytes([0xCA]) + bytes(19))

    def test_simple_frames(self, encoder):
        """Test the fixed single-purpose frames."""
        assert encoder.encode_stop_all() == b"\xdf"
        assert encoder.encode_reset_encoders() == b"\xd5"
        assert encoder.encode_calibrate_compass() == b"\xce\xff\xff\xff"

    def test_print_string(self, encoder):
        """Test the print frame."""
        frame, truncated = encoder.encode_print_string("Hi")
        assert frame == bytes([0xCC, 0x42, 0x48, 0x69])
        assert truncated is False

    def test_display(self, encoder):
        """Test the display frame header and packing."""
        assert encoder.encode_display([0] * 25) == bytes([0xD2, 0x20, 0, 0, 0, 0])
        assert encoder.encode_display([1] + [0] * 24) == bytes([0xD2, 0x20, 0, 0, 0, 1])

    def test_display_rejects_bad_pattern(self, encoder):
        """Test pattern validation."""
        with pytest.raises(EncodingError):
            encoder.encode_display([0] * 24)

    @pytest.mark.parametrize(
        "speed,expected",
        [
            (100, 164),
            (50, 146),
            (2, 129),
            (1, 0),
            (0, 0),
            (-1, 0),
            (-2, 1),
            (-50, 18),
            (-100, 36),
            (150, 164),
            (-150, 36),
        ],
    )
    def test_speed_byte(self, speed, expected):
        """Test direction flag and magnitude of wheel speeds."""
        assert FinchEncoder.speed_byte(speed) == expected

    def test_motors_velocity(self, encoder):
        """Test velocity control carries zero tick counts."""
        assert encoder.encode_motors(50, 50).hex() == "d2409200000092000000"

    def test_motors_position(self, encoder):
        """Test position control tick counts are 24-bit big-endian."""
        frame = encoder.encode_motors(100, -100, 0x123456, 1)
        assert frame == bytes([0xD2, 0x40, 0xA4, 0x12, 0x34, 0x56, 0x24, 0x00, 0x00, 0x01])

    @pytest.mark.parametrize("ticks", [-1, 0x1000000])
    def test_motors_tick_range(self, encoder, ticks):
        """Test that tick counts outside 24 bits raise."""
        with pytest.raises(EncodingError) as exc_info:
            encoder.encode_motors(50, 50, ticks, 0)
        assert exc_info.value.field == "left_ticks"


class TestHummingbirdEncoder:
    """Tests for HummingbirdEncoder."""

    @pytest.fixture
    def encoder(self):
        return HummingbirdEncoder()

    def test_variant(self, encoder):
        assert encoder.variant == DeviceVariant.HUMMINGBIRD

    def test_default_outputs(self, encoder):
        """Test that fresh memory encodes lights off and servos released."""
        frame = encoder.encode_outputs(HummingbirdOutputMemory())
        assert frame.hex() == "ca00ff" "000000" "000000" "ffffffff" "0000" "00000000"
        assert len(frame) == 19

    def test_outputs_layout(self, encoder):
        """Test the position of every channel."""
        memory = HummingbirdOutputMemory()
        memory.set_led(1, 10)
        memory.set_led(2, 20)
        memory.set_led(3, 30)
        memory.set_tri_led(1, Color(red=1, green=2, blue=3))
        memory.set_tri_led(2, Color(red=4, green=5, blue=6))
        memory.set_servo(1, 0)
        memory.set_servo(2, 127)
        memory.set_servo(3, 254)

        frame = encoder.encode_outputs(memory, period_us=0x1234, duration_ms=0x0056)
        assert frame == bytes(
            [0xCA, 10, 0xFF, 1, 2, 3, 4, 5, 6, 0, 127, 254, 255, 20, 30, 0x12, 0x34, 0x00, 0x56]
        )

    def test_round_trip(self, encoder):
        """Test that decode_outputs recovers memory and buzzer fields."""
        memory = HummingbirdOutputMemory()
        memory.set_led(3, 100)
        memory.set_tri_led(2, Color(red=100, green=0, blue=50))
        memory.set_servo(4, 145)

        decoded, period, duration = encoder.decode_outputs(encoder.encode_outputs(memory))
        assert decoded == memory
        assert (period, duration) == (0, 0)

    def test_decode_outputs_rejects_other_frames(self, encoder):
        """Test that non-output frames cannot be decoded."""
        with pytest.raises(ValueError):
            encoder.decode_outputs(bytes([0xCB]))

    def test_simple_frames(self, encoder):
        """Test the fixed single-purpose frames."""
        assert encoder.encode_stop_all() == b"\xcb"
        assert encoder.encode_calibrate_compass() == b"\xce\xff\xff\xff"

    def test_print_string_truncated(self, encoder):
        """Test that long strings are cut to 18 characters."""
        frame, truncated = encoder.encode_print_string("x" * 30)
        assert frame[:2] == bytes([0xCC, 0x52])
        assert len(frame) == 20
        assert truncated is True

    def test_display(self, encoder):
        """Test the display frame header and packing."""
        pattern = [0] * 24 + [1]
        assert encoder.encode_display(pattern) == bytes([0xCC, 0x80, 1, 0, 0, 0])
