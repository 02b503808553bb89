"""Tests for the Finch and Hummingbird device facades."""

import math
import threading

import pytest

from birdwire import Finch, Hummingbird, create_device
from birdwire.devices.hummingbird import position_servo_value, rotation_servo_value
from birdwire.encoders import FinchEncoder, HummingbirdEncoder
from birdwire.exceptions import EncodingError, InvalidPortError, TransportError, WrongLengthError
from birdwire.models.outputs import OFF, Color
from birdwire.protocol.constants import DeviceVariant
from birdwire.transport.mock import MockTransport

FINCH_FRAME = bytes(
    [0x01, 0x2C, 50, 60, 200, 72, 100, 0, 3, 0x18, 0, 0, 0, 0, 0, 64, 0xFF, 10, 20, 5]
)
HUMMINGBIRD_FRAME = bytes([255, 0, 100, 111, 0, 0, 64, 0x20, 0x00, 0x64, 0xFF, 0x9C, 0x00, 0x00])


@pytest.fixture
def transport():
    """Create a recording transport."""
    return MockTransport()


@pytest.fixture
def finch(transport):
    """Create a Finch with a fixed clock."""
    return Finch(transport, clock=lambda: 100.0)


@pytest.fixture
def bird(transport):
    """Create a Hummingbird with a fixed clock."""
    return Hummingbird(transport, clock=lambda: 100.0)


class TestCreateDevice:
    """Tests for the device factory."""

    def test_by_enum(self, transport):
        assert isinstance(create_device(DeviceVariant.FINCH, transport), Finch)

    def test_by_value(self, transport):
        device = create_device("hummingbird", transport)
        assert isinstance(device, Hummingbird)
        assert device.variant == DeviceVariant.HUMMINGBIRD

    def test_unknown(self, transport):
        with pytest.raises(ValueError):
            create_device("robot", transport)


class TestInbound:
    """Tests for frame ingestion and staleness."""

    def test_on_frame_returns_reading(self, finch):
        """Test decoding an inbound frame."""
        reading = finch.on_frame(FINCH_FRAME)
        assert reading.distance == 28
        assert reading.timestamp == 100.0
        assert reading.movement_flag is True
        assert finch.current_reading() == reading

    def test_current_reading_before_frames(self, finch):
        """Test that there is no reading before the first frame."""
        assert finch.current_reading() is None

    def test_on_reading_callback(self, transport):
        """Test that each accepted frame is passed to on_reading."""
        received = []
        finch = Finch(transport, on_reading=received.append)
        finch.on_frame(FINCH_FRAME, timestamp=1.0)
        finch.on_frame(FINCH_FRAME, timestamp=2.0)
        assert [r.timestamp for r in received] == [1.0, 2.0]

    def test_wrong_length_keeps_previous(self, finch):
        """Test that a rejected frame keeps the last reading fresh."""
        finch.on_frame(FINCH_FRAME, timestamp=1.0)
        with pytest.raises(WrongLengthError):
            finch.on_frame(HUMMINGBIRD_FRAME)
        reading = finch.current_reading()
        assert reading.timestamp == 1.0
        assert reading.is_stale is False

    def test_transport_error_marks_stale(self, transport):
        """Test that a read error marks the reading stale and notifies."""
        errors = []
        bird = Hummingbird(transport, on_error=errors.append)
        bird.on_frame(HUMMINGBIRD_FRAME, timestamp=5.0)

        cause = OSError("link lost")
        returned = bird.on_transport_error(cause)

        assert errors == [returned]
        assert isinstance(returned, TransportError)
        assert returned.cause is cause
        assert returned.reading.is_stale is True
        assert returned.reading.timestamp == 5.0
        assert bird.current_reading().is_stale is True

    def test_transport_error_before_frames(self, bird):
        """Test a read error with no frame yet."""
        error = bird.on_transport_error()
        assert error.reading is None

    def test_fresh_frame_after_error(self, bird):
        """Test that the next valid frame is not stale."""
        bird.on_frame(HUMMINGBIRD_FRAME)
        bird.on_transport_error()
        reading = bird.on_frame(HUMMINGBIRD_FRAME)
        assert reading.is_stale is False


class TestSharedCommands:
    """Tests for operations both variants support."""

    def test_print_string(self, finch, transport):
        """Test sending a print frame."""
        assert finch.print_string("Hi") is False
        transport.assert_sent(bytes([0xCC, 0x42, 0x48, 0x69]))

    def test_print_string_truncated(self, bird, transport, caplog):
        """Test that truncation is reported and logged."""
        assert bird.print_string("a" * 25) is True
        assert len(transport.last_sent) == 20
        assert "truncated" in caplog.text

    def test_set_display(self, bird, transport):
        """Test sending a display pattern."""
        bird.set_display([0] * 25)
        transport.assert_sent(bytes([0xCC, 0x80, 0, 0, 0, 0]))

    def test_set_display_invalid(self, finch, transport):
        """Test that an invalid pattern raises and sends nothing."""
        with pytest.raises(EncodingError):
            finch.set_display([0] * 26)
        transport.assert_send_count(0)

    def test_calibrate_compass(self, finch, transport):
        finch.calibrate_compass()
        transport.assert_sent(b"\xce\xff\xff\xff")

    def test_stop_all_resets_memory(self, bird, transport):
        """Test that stop_all clears Output Memory and sends the stop opcode."""
        bird.set_led(1, 50)
        bird.set_position_servo(1, 90)
        bird.stop_all()

        transport.assert_sent(b"\xcb")
        memory = bird.output_memory
        assert memory.single_leds == (0, 0, 0)
        assert memory.servos == (255, 255, 255, 255)

    def test_output_memory_is_a_copy(self, finch):
        """Test that the snapshot cannot change device state."""
        snapshot = finch.output_memory
        snapshot.beak = Color(red=100)
        assert finch.output_memory.beak == OFF


class TestPlayNote:
    """Tests for the buzzer."""

    def test_play_note(self, finch, transport):
        """Test that the note rides on the current lights."""
        finch.set_beak(100, 0, 0)
        finch.play_note(69, 1)
        assert transport.last_sent[:4] == bytes([0xD0, 100, 0, 0])
        assert transport.last_sent[-4:] == bytes.fromhex("08E103E8")

    def test_buzzer_not_persisted(self, finch, transport):
        """Test that later commands do not replay the note."""
        finch.play_note(69, 1)
        finch.set_beak(0, 0, 100)
        assert transport.last_sent[-4:] == bytes(4)

    def test_clamps_note_and_beats(self, bird, transport):
        """Test that note and beats are clamped."""
        bird.play_note(200, 20)
        _, period, duration = HummingbirdEncoder().decode_outputs(transport.last_sent)
        assert period == 50
        assert duration == 16000

    def test_fractional_beats(self, bird, transport):
        """Test that duration is truncated to whole milliseconds."""
        bird.play_note(69, 0.5)
        _, _, duration = HummingbirdEncoder().decode_outputs(transport.last_sent)
        assert duration == 500

    def test_negative_beats(self, bird, transport):
        """Test that negative beats play nothing."""
        bird.play_note(69, -3)
        _, period, duration = HummingbirdEncoder().decode_outputs(transport.last_sent)
        assert (period, duration) == (2273, 0)


class TestFinch:
    """Tests for Finch-specific operations."""

    def test_set_beak_clamps(self, finch, transport):
        """Test that channels are clamped before storing."""
        finch.set_beak(150, -5, 40)
        assert finch.output_memory.beak == Color(red=100, green=0, blue=40)
        assert transport.last_sent[:4] == bytes([0xD0, 100, 0, 40])

    def test_set_tail(self, finch, transport):
        """Test setting a single tail light."""
        finch.set_tail(3, 0, 100, 0)
        memory, _, _ = FinchEncoder().decode_outputs(transport.last_sent)
        assert memory.tail == (OFF, OFF, Color(green=100), OFF)

    def test_set_tail_all(self, finch):
        """Test setting every tail light at once."""
        finch.set_tail("all", 10, 20, 30)
        assert finch.output_memory.tail == (Color(red=10, green=20, blue=30),) * 4

    @pytest.mark.parametrize("port", [0, 5, "left", "ALL"])
    def test_set_tail_invalid_port(self, finch, transport, port):
        """Test that invalid ports raise without sending."""
        with pytest.raises(InvalidPortError):
            finch.set_tail(port, 100, 0, 0)
        transport.assert_send_count(0)
        assert finch.output_memory.tail == (OFF, OFF, OFF, OFF)

    def test_lights_accumulate(self, finch, transport):
        """Test that each frame carries every previously set light."""
        finch.set_beak(1, 2, 3)
        finch.set_tail(1, 4, 5, 6)
        memory, _, _ = FinchEncoder().decode_outputs(transport.last_sent)
        assert memory.beak == Color(red=1, green=2, blue=3)
        assert memory.tail[0] == Color(red=4, green=5, blue=6)

    def test_set_motors(self, finch, transport):
        """Test velocity control."""
        finch.set_motors(50, -50)
        transport.assert_sent(bytes([0xD2, 0x40, 0x92, 0, 0, 0, 0x12, 0, 0, 0]))

    def test_stop(self, finch, transport):
        """Test that stop sends zero speeds and keeps lights."""
        finch.set_beak(100, 100, 100)
        finch.stop()
        transport.assert_sent(bytes([0xD2, 0x40]) + bytes(8))
        assert finch.output_memory.beak == Color(red=100, green=100, blue=100)

    def test_set_move_forward(self, finch, transport):
        """Test that distance is converted to ticks."""
        finch.set_move("F", 10, 50)  # 497 ticks
        transport.assert_sent(bytes([0xD2, 0x40, 0x92, 0x00, 0x01, 0xF1, 0x92, 0x00, 0x01, 0xF1]))

    def test_set_move_backward(self, finch, transport):
        """Test that backward negates the speed."""
        finch.set_move("B", -10, 50)
        transport.assert_sent(bytes([0xD2, 0x40, 0x12, 0x00, 0x01, 0xF1, 0x12, 0x00, 0x01, 0xF1]))

    def test_set_turn(self, finch, transport):
        """Test that a right turn drives the wheels in opposite directions."""
        finch.set_turn("R", 90, 50)  # 390 ticks
        transport.assert_sent(bytes([0xD2, 0x40, 0x92, 0x00, 0x01, 0x86, 0x12, 0x00, 0x01, 0x86]))

        finch.set_turn("L", 90, 50)
        transport.assert_sent(bytes([0xD2, 0x40, 0x12, 0x00, 0x01, 0x86, 0x92, 0x00, 0x01, 0x86]))

    @pytest.mark.parametrize("method,direction", [("set_move", "R"), ("set_turn", "F"), ("set_move", "f")])
    def test_invalid_direction(self, finch, transport, method, direction):
        """Test that unknown directions raise without sending."""
        with pytest.raises(EncodingError) as exc_info:
            getattr(finch, method)(direction, 10, 50)
        assert exc_info.value.field == "direction"
        transport.assert_send_count(0)

    def test_move_too_far(self, finch, transport):
        """Test that distances beyond 24-bit ticks raise."""
        with pytest.raises(EncodingError):
            finch.set_move("F", 1_000_000, 50)
        transport.assert_send_count(0)

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    @pytest.mark.parametrize(
        ("method", "direction", "field"),
        [("set_move", "F", "distance"), ("set_turn", "R", "angle")],
    )
    def test_non_finite_movement(self, finch, transport, method, direction, field, value):
        """Test that infinite or NaN distances and angles raise EncodingError."""
        with pytest.raises(EncodingError) as exc_info:
            getattr(finch, method)(direction, value, 50)
        assert exc_info.value.field == field
        transport.assert_send_count(0)

    def test_nan_speed(self, finch, transport):
        with pytest.raises(EncodingError):
            finch.set_motors(math.nan, 0)
        transport.assert_send_count(0)

    def test_reset_encoders(self, finch, transport):
        finch.reset_encoders()
        transport.assert_sent(b"\xd5")

    def test_correct_light_sensors_without_frame(self, finch):
        """Test that correction needs a reading."""
        assert finch.correct_light_sensor_values() == (None, None)

    def test_correct_light_sensors_beak_off(self, finch):
        """Test that nothing is subtracted with the beak off."""
        finch.on_frame(FINCH_FRAME)
        assert finch.correct_light_sensor_values() == (50, 60)

    def test_correct_light_sensors_red_beak(self, finch):
        """Test the red-only correction term."""
        finch.on_frame(FINCH_FRAME)
        finch.set_beak(100, 0, 0)
        assert finch.correct_light_sensor_values() == (49, 59)

    def test_correct_light_sensors_white_beak(self, finch):
        """Test the full polynomial with every channel on."""
        finch.on_frame(FINCH_FRAME)
        finch.set_beak(100, 100, 100)
        assert finch.correct_light_sensor_values() == (31, 43)

    def test_correct_light_sensors_clamped(self, finch):
        """Test that corrected values do not go below zero."""
        dim = FINCH_FRAME[:2] + bytes([5, 5]) + FINCH_FRAME[4:]
        finch.on_frame(dim)
        finch.set_beak(100, 100, 100)
        assert finch.correct_light_sensor_values() == (0, 0)


class TestHummingbird:
    """Tests for Hummingbird-specific operations."""

    def test_set_tri_led(self, bird, transport):
        """Test a tri-color LED lands in its slot."""
        bird.set_tri_led(2, 100, 0, 50)
        assert transport.last_sent[6:9] == bytes([100, 0, 50])

    def test_set_led_clamps(self, bird, transport):
        """Test single LED clamping and slot positions."""
        bird.set_led(1, 150)
        bird.set_led(2, -10)
        bird.set_led(3, 30)
        frame = transport.last_sent
        assert (frame[1], frame[13], frame[14]) == (100, 0, 30)

    @pytest.mark.parametrize(
        "method,port",
        [("set_tri_led", 0), ("set_led", 4), ("set_position_servo", 5), ("set_rotation_servo", 0)],
    )
    def test_invalid_ports(self, bird, transport, method, port):
        """Test that invalid ports raise without sending."""
        args = (100, 0, 0) if method == "set_tri_led" else (50,)
        with pytest.raises(InvalidPortError):
            getattr(bird, method)(port, *args)
        transport.assert_send_count(0)

    @pytest.mark.parametrize("method", ["set_led", "set_position_servo", "set_rotation_servo"])
    def test_float_port_rejected(self, bird, transport, method):
        with pytest.raises(InvalidPortError):
            getattr(bird, method)(1.0, 50)
        transport.assert_send_count(0)

    @pytest.mark.parametrize(
        "method,args",
        [
            ("set_position_servo", (1, math.nan)),
            ("set_rotation_servo", (1, math.nan)),
            ("set_led", (1, math.nan)),
            ("set_tri_led", (1, 0, math.nan, 0)),
            ("play_note", (69, math.nan)),
        ],
    )
    def test_nan_values_raise(self, bird, transport, method, args):
        """Test that NaN setter values raise and leave Output Memory alone."""
        before = bird.output_memory
        with pytest.raises(EncodingError):
            getattr(bird, method)(*args)
        transport.assert_send_count(0)
        assert bird.output_memory == before

    def test_infinite_angle_saturates(self, bird, transport):
        bird.set_position_servo(1, math.inf)
        assert transport.last_sent[9] == 254

    @pytest.mark.parametrize(
        "angle,expected",
        [(0, 0), (90, 127), (180, 254), (-20, 0), (500, 254), (1, 1)],
    )
    def test_position_servo_value(self, angle, expected):
        assert position_servo_value(angle) == expected

    @pytest.mark.parametrize(
        "speed,expected",
        [(0, 255), (10, 255), (-10, 255), (11, 125), (-11, 119), (100, 145), (-100, 99), (300, 145)],
    )
    def test_rotation_servo_value(self, speed, expected):
        assert rotation_servo_value(speed) == expected

    def test_servo_slots(self, bird, transport):
        """Test that servos occupy bytes 9-12."""
        bird.set_position_servo(1, 90)
        bird.set_rotation_servo(4, 100)
        assert transport.last_sent[9:13] == bytes([127, 255, 255, 145])

    def test_round_trip(self, bird, transport):
        """Test that the last frame decodes back to Output Memory."""
        bird.set_tri_led(1, 10, 20, 30)
        bird.set_led(2, 40)
        bird.set_rotation_servo(3, -50)
        memory, _, _ = HummingbirdEncoder().decode_outputs(transport.last_sent)
        assert memory == bird.output_memory


class TestConcurrency:
    """Tests for concurrent setters on one device."""

    def test_no_lost_updates(self, bird, transport):
        """Test that concurrent setters on different channels all apply."""
        iterations = 25
        calls = [
            (bird.set_led, (1, 10)),
            (bird.set_led, (2, 20)),
            (bird.set_led, (3, 30)),
            (bird.set_tri_led, (1, 100, 0, 0)),
            (bird.set_tri_led, (2, 0, 0, 100)),
            (bird.set_position_servo, (1, 180)),
            (bird.set_position_servo, (2, 0)),
            (bird.set_rotation_servo, (3, 100)),
            (bird.set_rotation_servo, (4, -100)),
        ]
        barrier = threading.Barrier(len(calls))

        def worker(method, args):
            barrier.wait()
            for _ in range(iterations):
                method(*args)

        threads = [threading.Thread(target=worker, args=call) for call in calls]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        memory = bird.output_memory
        assert memory.single_leds == (10, 20, 30)
        assert memory.tri_leds == (Color(red=100), Color(blue=100))
        assert memory.servos == (254, 0, 145, 99)

        frames = transport.sent_data
        assert len(frames) == iterations * len(calls)

        encoder = HummingbirdEncoder()
        for frame in frames:
            decoded, _, _ = encoder.decode_outputs(frame)
            # Each channel only ever holds its default or its one written value
            assert decoded.single_leds[0] in (0, 10)
            assert decoded.servos[3] in (255, 99)
        assert encoder.decode_outputs(frames[-1])[0] == memory

    def test_frames_monotonic(self, finch, transport):
        """Test that no frame undoes a channel an earlier frame set."""
        def worker(port):
            for _ in range(20):
                finch.set_tail(port, port * 10, 0, 0)

        threads = [threading.Thread(target=worker, args=(port,)) for port in (1, 2, 3, 4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        encoder = FinchEncoder()
        seen = set()
        for frame in transport.sent_data:
            memory, _, _ = encoder.decode_outputs(frame)
            lit = {i for i, color in enumerate(memory.tail) if color != OFF}
            assert seen <= lit
            seen = lit
        assert seen == {0, 1, 2, 3}
